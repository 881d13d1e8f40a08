"""
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest and provides:
- Custom markers for test categorization
- Shared element sets, sites and predictors
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import List, Tuple

import pytest
from _pytest.config import Config
from _pytest.python import Function

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pass_predictor.config import PredictorConfig  # noqa: E402
from pass_predictor.coordinates import SiteLocation  # noqa: E402
from pass_predictor.gravity import GravityModel  # noqa: E402
from pass_predictor.predictor import PassPredictor  # noqa: E402
from pass_predictor.propagator import OrbitalElements, initialize  # noqa: E402
from pass_predictor.tle import parse_tle  # noqa: E402

ISS_TLE = (
    "1 25544U 98067A   16065.25775256 -.00164574  00000-0 -25195-2 0  9990",
    "2 25544  51.6436 216.3171 0002750 185.0333 238.0864 15.54246933988812",
)

VANGUARD_TLE = (
    "1 00005U 58002B   00179.78495062  .00000023  00000-0  28098-4 0  4753",
    "2 00005  34.2682 348.7242 1859667 331.7664  19.3264 10.82419157413667",
)


# =============================================================================
# COLLECTION HOOKS
# =============================================================================


def pytest_collection_modifyitems(config: Config, items: List[Function]) -> None:
    """Auto-mark tests under tests/integration."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


def pytest_configure(config: Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "integration: marks integration tests")


# =============================================================================
# FIXTURES - Element sets
# =============================================================================


@pytest.fixture
def iss_tle_lines() -> Tuple[str, str]:
    """ISS element set, epoch 2016-03-05."""
    return ISS_TLE


@pytest.fixture
def vanguard_tle_lines() -> Tuple[str, str]:
    """Vanguard 1 (00005), the standard SGP4 verification case."""
    return VANGUARD_TLE


@pytest.fixture
def iss_elements() -> OrbitalElements:
    return parse_tle(ISS_TLE[0], ISS_TLE[1], "ISS (ZARYA)")


@pytest.fixture
def iss_record(iss_elements: OrbitalElements):
    return initialize(iss_elements)


@pytest.fixture
def vanguard_record():
    """Vanguard 1 initialized with WGS-72, as in the published test vectors."""
    return initialize(parse_tle(*VANGUARD_TLE, name="VANGUARD 1"), GravityModel.WGS72)


@pytest.fixture
def geo_elements() -> OrbitalElements:
    """Near-geostationary orbit (24-hour resonance)."""
    return OrbitalElements(
        satnum=90001,
        epoch_jd=2457452.5,
        mean_motion=1.0027,
        eccentricity=0.0002,
        inclination=0.05,
        raan=95.0,
        arg_perigee=270.0,
        mean_anomaly=30.0,
        bstar=0.0,
        name="TEST GEO",
    )


@pytest.fixture
def molniya_elements() -> OrbitalElements:
    """Molniya-type orbit (12-hour resonance)."""
    return OrbitalElements(
        satnum=90002,
        epoch_jd=2457452.5,
        mean_motion=2.00612,
        eccentricity=0.74,
        inclination=63.4,
        raan=120.0,
        arg_perigee=270.0,
        mean_anomaly=10.0,
        bstar=0.0001,
        name="TEST MOLNIYA",
    )


# =============================================================================
# FIXTURES - Sites and predictors
# =============================================================================


@pytest.fixture
def tarawa_site() -> SiteLocation:
    """Ground site near Tarawa used in the ISS scenario."""
    return SiteLocation(-0.5276847, 166.9359231, 34.0)


@pytest.fixture
def iss_seed_time() -> datetime:
    """2016-03-26T00:00:00Z (Unix 1458950400)."""
    return datetime(2016, 3, 26, 0, 0, 0)


@pytest.fixture
def iss_predictor(iss_elements: OrbitalElements, tarawa_site: SiteLocation) -> PassPredictor:
    return PassPredictor(iss_elements, tarawa_site, PredictorConfig())


@pytest.fixture
def tle_file(tmp_path: Path) -> Path:
    """3-line TLE file with the ISS and Vanguard 1."""
    path = tmp_path / "sample.tle"
    path.write_text(
        f"ISS (ZARYA)\n{ISS_TLE[0]}\n{ISS_TLE[1]}\n"
        f"VANGUARD 1\n{VANGUARD_TLE[0]}\n{VANGUARD_TLE[1]}\n"
    )
    return path
