"""
Predictor configuration.

Loads search, propagation and display settings from config/predictor.yaml
(or a file named by PASS_PREDICTOR_CONFIG) and falls back to built-in
defaults when no file is available.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml  # type: ignore[import-untyped]

from .coordinates import SiteLocation
from .gravity import GravityModel
from .propagator import OperationMode

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PASS_PREDICTOR_CONFIG"

# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULT_SEARCH_ITERATIONS = 20
DEFAULT_TOLERANCE_DAYS = 0.000005  # +-0.432 s
DEFAULT_SEED_MAX_STEPS = 30
DEFAULT_SUN_ELEVATION_THRESHOLD_DEG = -6.0


@dataclass
class PredictorConfig:
    """Settings shared by the predictor and the CLI."""

    gravity_model: GravityModel = GravityModel.WGS84
    operation_mode: OperationMode = OperationMode.IMPROVED
    minimum_elevation_deg: float = 0.0
    search_iterations: int = DEFAULT_SEARCH_ITERATIONS
    tolerance_days: float = DEFAULT_TOLERANCE_DAYS
    seed_max_steps: int = DEFAULT_SEED_MAX_STEPS
    sun_elevation_threshold_deg: float = DEFAULT_SUN_ELEVATION_THRESHOLD_DEG
    polar_motion: bool = True
    validate_checksum: bool = True
    site: Optional[SiteLocation] = None
    timezone_hours: int = 0
    daylight_saving: bool = False
    source: Optional[str] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if isinstance(self.gravity_model, str):
            self.gravity_model = GravityModel.from_string(self.gravity_model)
        if isinstance(self.operation_mode, str):
            self.operation_mode = OperationMode.from_string(self.operation_mode)
        if not -90.0 <= self.minimum_elevation_deg < 90.0:
            raise ValueError(
                f"Minimum elevation {self.minimum_elevation_deg} must be in [-90, 90)"
            )
        if self.search_iterations < 1:
            raise ValueError("Search iterations must be at least 1")
        if self.seed_max_steps < 1:
            raise ValueError("Seed ladder must allow at least 1 step")
        if self.tolerance_days <= 0.0:
            raise ValueError("Optimizer tolerance must be positive")
        if not -90.0 <= self.sun_elevation_threshold_deg <= 90.0:
            raise ValueError(
                f"Sun elevation threshold {self.sun_elevation_threshold_deg} "
                "must be between -90 and 90"
            )
        if not -12 <= self.timezone_hours <= 14:
            raise ValueError(f"Timezone offset {self.timezone_hours} h is out of range")

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[str] = None) -> "PredictorConfig":
        """Build a config from the nested YAML layout."""
        data = data or {}
        propagator = data.get("propagator", {}) or {}
        search = data.get("search", {}) or {}
        visibility = data.get("visibility", {}) or {}
        tle = data.get("tle", {}) or {}
        display = data.get("display", {}) or {}
        site_data = data.get("site")

        site = None
        if site_data:
            site = SiteLocation(
                float(site_data["latitude_deg"]),
                float(site_data["longitude_deg"]),
                float(site_data.get("altitude_m", 0.0)),
            )

        return cls(
            gravity_model=propagator.get("gravity_model", GravityModel.WGS84.value),
            operation_mode=propagator.get("operation_mode", OperationMode.IMPROVED.value),
            minimum_elevation_deg=float(search.get("minimum_elevation_deg", 0.0)),
            search_iterations=int(search.get("iterations", DEFAULT_SEARCH_ITERATIONS)),
            tolerance_days=float(search.get("tolerance_days", DEFAULT_TOLERANCE_DAYS)),
            seed_max_steps=int(search.get("seed_max_steps", DEFAULT_SEED_MAX_STEPS)),
            sun_elevation_threshold_deg=float(visibility.get(
                "sun_elevation_threshold_deg", DEFAULT_SUN_ELEVATION_THRESHOLD_DEG)),
            polar_motion=bool(visibility.get("polar_motion", True)),
            validate_checksum=bool(tle.get("validate_checksum", True)),
            site=site,
            timezone_hours=int(display.get("timezone_hours", 0)),
            daylight_saving=bool(display.get("daylight_saving", False)),
            source=source,
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "propagator": {
                "gravity_model": self.gravity_model.value,
                "operation_mode": self.operation_mode.value,
            },
            "search": {
                "minimum_elevation_deg": self.minimum_elevation_deg,
                "iterations": self.search_iterations,
                "tolerance_days": self.tolerance_days,
                "seed_max_steps": self.seed_max_steps,
            },
            "visibility": {
                "sun_elevation_threshold_deg": self.sun_elevation_threshold_deg,
                "polar_motion": self.polar_motion,
            },
            "tle": {"validate_checksum": self.validate_checksum},
            "display": {
                "timezone_hours": self.timezone_hours,
                "daylight_saving": self.daylight_saving,
            },
        }
        if self.site is not None:
            result["site"] = self.site.to_dict()
        return result


def _candidate_paths() -> List[Path]:
    paths = []
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        paths.append(Path(env_path))
    paths.append(Path(__file__).parent.parent.parent / "config" / "predictor.yaml")
    paths.append(Path("config/predictor.yaml"))
    return paths


def load_config(config_path: Optional[Union[str, Path]] = None) -> PredictorConfig:
    """
    Load predictor configuration from YAML.

    Args:
        config_path: Explicit config file; when omitted the path in
            PASS_PREDICTOR_CONFIG and then config/predictor.yaml are tried

    Returns:
        PredictorConfig (built-in defaults when no file is found or the
        file cannot be parsed)

    Raises:
        FileNotFoundError: If an explicit config_path does not exist
    """
    if config_path is not None:
        config_file: Optional[Path] = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        config_file = None
        searched = _candidate_paths()
        for path in searched:
            if path.exists():
                config_file = path
                break
        if config_file is None:
            logger.warning(
                "Predictor config file not found, using built-in defaults. "
                f"Searched: {[str(p) for p in searched]}"
            )
            return PredictorConfig()

    try:
        with open(config_file, "r") as f:
            data = yaml.safe_load(f) or {}
        config = PredictorConfig.from_dict(data, source=str(config_file))
    except (yaml.YAMLError, KeyError, TypeError, ValueError) as e:
        logger.error(f"Error loading predictor config {config_file}: {e}")
        return PredictorConfig()

    logger.info(f"Loaded predictor configuration from {config_file}")
    return config
