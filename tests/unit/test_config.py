"""
Tests for predictor configuration loading.
"""

from pathlib import Path

import pytest

from pass_predictor.config import (
    CONFIG_ENV_VAR,
    DEFAULT_SEARCH_ITERATIONS,
    PredictorConfig,
    load_config,
)
from pass_predictor.coordinates import SiteLocation
from pass_predictor.gravity import GravityModel
from pass_predictor.propagator import OperationMode

SAMPLE_CONFIG = """
propagator:
  gravity_model: wgs72
  operation_mode: afspc
search:
  minimum_elevation_deg: 10.0
  iterations: 5
visibility:
  sun_elevation_threshold_deg: -12.0
  polar_motion: false
display:
  timezone_hours: 12
site:
  latitude_deg: -0.5276847
  longitude_deg: 166.9359231
  altitude_m: 34
"""


class TestPredictorConfig:

    def test_defaults(self) -> None:
        config = PredictorConfig()
        assert config.gravity_model is GravityModel.WGS84
        assert config.operation_mode is OperationMode.IMPROVED
        assert config.search_iterations == DEFAULT_SEARCH_ITERATIONS
        assert config.sun_elevation_threshold_deg == -6.0
        assert config.site is None

    def test_string_enums(self) -> None:
        config = PredictorConfig(gravity_model="WGS72", operation_mode="a")
        assert config.gravity_model is GravityModel.WGS72
        assert config.operation_mode is OperationMode.AFSPC

    @pytest.mark.parametrize("kwargs", [
        {"minimum_elevation_deg": 90.0},
        {"search_iterations": 0},
        {"seed_max_steps": 0},
        {"tolerance_days": 0.0},
        {"sun_elevation_threshold_deg": -100.0},
        {"timezone_hours": 15},
        {"gravity_model": "egm96"},
    ])
    def test_invalid_values(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            PredictorConfig(**kwargs)

    def test_from_dict(self) -> None:
        data = {
            "propagator": {"gravity_model": "wgs72old"},
            "search": {"iterations": 7, "seed_max_steps": 12},
            "site": {"latitude_deg": 10, "longitude_deg": 20},
        }
        config = PredictorConfig.from_dict(data, source="memory")
        assert config.gravity_model is GravityModel.WGS72OLD
        assert config.search_iterations == 7
        assert config.seed_max_steps == 12
        assert config.site == SiteLocation(10.0, 20.0, 0.0)
        assert config.source == "memory"

    def test_from_empty_dict(self) -> None:
        assert PredictorConfig.from_dict({}) == PredictorConfig()

    def test_dict_round_trip(self) -> None:
        config = PredictorConfig(minimum_elevation_deg=5.0,
                                 site=SiteLocation(1.0, 2.0, 3.0), timezone_hours=2)
        data = config.to_dict()
        assert data["site"] == {"latitude_deg": 1.0, "longitude_deg": 2.0, "altitude_m": 3.0}
        assert PredictorConfig.from_dict(data) == config

    def test_to_dict_without_site(self) -> None:
        assert "site" not in PredictorConfig().to_dict()


class TestLoadConfig:

    def test_explicit_path(self, tmp_path: Path) -> None:
        path = tmp_path / "predictor.yaml"
        path.write_text(SAMPLE_CONFIG)

        config = load_config(path)
        assert config.gravity_model is GravityModel.WGS72
        assert config.operation_mode is OperationMode.AFSPC
        assert config.minimum_elevation_deg == 10.0
        assert config.search_iterations == 5
        assert config.polar_motion is False
        assert config.timezone_hours == 12
        assert config.site.latitude_deg == pytest.approx(-0.5276847)
        assert config.source == str(path)

    def test_missing_explicit_path(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_env_var(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "env.yaml"
        path.write_text("search:\n  iterations: 3\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

        config = load_config()
        assert config.search_iterations == 3
        assert config.source == str(path)

    def test_unparseable_file_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("search: [unclosed\n")
        assert load_config(path) == PredictorConfig()

    def test_invalid_values_use_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "invalid.yaml"
        path.write_text("search:\n  iterations: 0\n")
        assert load_config(path) == PredictorConfig()

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == PredictorConfig()
