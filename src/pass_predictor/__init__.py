"""
Satellite Pass Predictor

An offline satellite pass prediction tool: SGP4/SDP4 orbit propagation from
two-line element sets, look angles from a ground site, sun and eclipse
modelling, and a Brent-method search for the next overpass.
"""

from .config import PredictorConfig, load_config
from .coordinates import SiteLocation
from .exceptions import (
    InitError,
    PassPredictorError,
    PredictorStateError,
    PropagationError,
    TLEFormatError,
)
from .gravity import GravityModel
from .predictor import (
    PassEvent,
    PassPoint,
    PassPredictor,
    PredictorStatus,
    SatelliteSnapshot,
    SearchDirection,
    ShadowTransit,
    Visibility,
)
from .propagator import OperationMode, OrbitalElements, initialize, propagate
from .tle import load_tle_file, parse_tle

__version__ = "0.1.0"
__author__ = "Pass Predictor Team"

__all__ = [
    "PassPredictor",
    "PassEvent",
    "PassPoint",
    "SatelliteSnapshot",
    "SearchDirection",
    "ShadowTransit",
    "Visibility",
    "PredictorStatus",
    "PredictorConfig",
    "load_config",
    "SiteLocation",
    "GravityModel",
    "OperationMode",
    "OrbitalElements",
    "initialize",
    "propagate",
    "parse_tle",
    "load_tle_file",
    "PassPredictorError",
    "TLEFormatError",
    "InitError",
    "PropagationError",
    "PredictorStateError",
]
