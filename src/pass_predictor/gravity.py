"""
Earth gravity model constants for SGP4.

Three constant sets are supported. WGS-72 is the model the published
element sets are generated with; WGS-84 is the modern default.
"""

import math
from enum import Enum
from typing import NamedTuple


class GravityConstants(NamedTuple):
    """Physical constants used by the propagator."""

    tumin: float  # minutes per time unit
    mu: float  # km^3/s^2
    radius_earth_km: float
    xke: float  # sqrt(mu / radius^3) in earth radii^1.5 per minute
    j2: float
    j3: float
    j4: float
    j3oj2: float


def _build(mu: float, radius_earth_km: float, j2: float, j3: float, j4: float,
           xke: float = 0.0) -> GravityConstants:
    if not xke:
        xke = 60.0 / math.sqrt(radius_earth_km ** 3 / mu)
    return GravityConstants(
        tumin=1.0 / xke,
        mu=mu,
        radius_earth_km=radius_earth_km,
        xke=xke,
        j2=j2,
        j3=j3,
        j4=j4,
        j3oj2=j3 / j2,
    )


class GravityModel(Enum):
    """Selectable gravity model."""

    WGS72OLD = "wgs72old"
    WGS72 = "wgs72"
    WGS84 = "wgs84"

    @classmethod
    def from_string(cls, value: str) -> "GravityModel":
        """Create GravityModel from string (case-insensitive)."""
        try:
            return cls(value.lower())
        except ValueError:
            raise ValueError(
                f"Invalid gravity model: {value}. "
                f"Valid models: {[m.value for m in cls]}"
            )

    @property
    def constants(self) -> GravityConstants:
        return _CONSTANTS[self]


_CONSTANTS = {
    GravityModel.WGS72OLD: _build(
        mu=398600.79964,
        radius_earth_km=6378.135,
        xke=0.0743669161,
        j2=0.001082616,
        j3=-0.00000253881,
        j4=-0.00000165597,
    ),
    GravityModel.WGS72: _build(
        mu=398600.8,
        radius_earth_km=6378.135,
        j2=0.001082616,
        j3=-0.00000253881,
        j4=-0.00000165597,
    ),
    GravityModel.WGS84: _build(
        mu=398600.5,
        radius_earth_km=6378.137,
        j2=0.00108262998905,
        j3=-0.00000253215306,
        j4=-0.00000161098761,
    ),
}


def get_gravity_constants(model: GravityModel) -> GravityConstants:
    """
    Look up the constants for a gravity model.

    Args:
        model: GravityModel member or its string name

    Returns:
        GravityConstants tuple
    """
    if isinstance(model, str):
        model = GravityModel.from_string(model)
    return _CONSTANTS[model]
