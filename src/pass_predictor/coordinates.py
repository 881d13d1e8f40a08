"""
Coordinate transforms for ground-relative satellite geometry.

Converts TEME positions to earth-fixed and geodetic coordinates and computes
topocentric look angles (range, azimuth, elevation) from a ground site.
All internal math is in radians; the public results are in degrees.

Polar motion uses fixed IERS Bulletin-A prediction coefficients. This is an
accepted approximation in place of live earth orientation data.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Tuple

import numpy as np

from .timeutils import DEG2RAD, RAD2DEG, TWO_PI, gstime, mag, rot2, rot3, sgn

# =============================================================================
# CONSTANTS - WGS-84 ellipsoid
# =============================================================================

EARTH_EQUATORIAL_RADIUS_KM = 6378.137
EARTH_ECCENTRICITY_SQ = 0.006694385000

GEODETIC_TOLERANCE = 0.00000001
GEODETIC_MAX_ITERATIONS = 10

ARCSEC2RAD = 4.84813681e-6

_SMALL = 0.00000001
_HALF_PI = 0.5 * math.pi


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass(frozen=True)
class SiteLocation:
    """
    An observer on the ground.

    Attributes:
        latitude_deg: Geodetic latitude in degrees (-90 to 90)
        longitude_deg: Longitude in degrees (-180 to 180, east positive)
        altitude_m: Height above the ellipsoid in metres
    """

    latitude_deg: float
    longitude_deg: float
    altitude_m: float = 0.0

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude_deg <= 90.0:
            raise ValueError(f"Latitude {self.latitude_deg} must be between -90 and 90")
        if not -180.0 <= self.longitude_deg <= 180.0:
            raise ValueError(f"Longitude {self.longitude_deg} must be between -180 and 180")

    @property
    def latitude_rad(self) -> float:
        return self.latitude_deg * DEG2RAD

    @property
    def longitude_rad(self) -> float:
        return self.longitude_deg * DEG2RAD

    @property
    def altitude_km(self) -> float:
        return self.altitude_m / 1000.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "latitude_deg": self.latitude_deg,
            "longitude_deg": self.longitude_deg,
            "altitude_m": self.altitude_m,
        }


@dataclass(frozen=True)
class GeodeticPosition:
    """Geodetic latitude/longitude (degrees) and altitude (km)."""

    latitude_deg: float
    longitude_deg: float
    altitude_km: float


@dataclass(frozen=True)
class LookAngles:
    """Range (km), azimuth (0-360 deg from north) and elevation (deg)."""

    range_km: float
    azimuth_deg: float
    elevation_deg: float

    @property
    def above_horizon(self) -> bool:
        return self.elevation_deg > 0.0


# =============================================================================
# FRAME ROTATIONS
# =============================================================================


def polar_motion_matrix(jd_ut1: float) -> np.ndarray:
    """
    Polar motion matrix (PEF -> ITRF transpose) for a date.

    The pole coordinates come from the IERS Bulletin-A prediction formula
    (Vol. XXVIII No. 030) evaluated with its fixed coefficients.

    Args:
        jd_ut1: Julian date (UT1)

    Returns:
        3x3 rotation matrix
    """
    mjd = jd_ut1 - 2400000.5
    a = TWO_PI * (mjd - 57226) / 365.25
    c = TWO_PI * (mjd - 57226) / 435

    xp = (0.1033 + 0.0494 * math.cos(a) + 0.0482 * math.sin(a)
          + 0.0297 * math.cos(c) + 0.0307 * math.sin(c)) * ARCSEC2RAD
    yp = (0.3498 + 0.0441 * math.cos(a) - 0.0393 * math.sin(a)
          + 0.0307 * math.cos(c) - 0.0297 * math.sin(c)) * ARCSEC2RAD

    cosxp, sinxp = math.cos(xp), math.sin(xp)
    cosyp, sinyp = math.cos(yp), math.sin(yp)
    return np.array([
        [cosxp, 0.0, -sinxp],
        [sinxp * sinyp, cosyp, cosxp * sinyp],
        [sinxp * cosyp, -sinyp, cosxp * cosyp],
    ])


def _sidereal_matrix(jd_ut1: float) -> np.ndarray:
    gmst = gstime(jd_ut1)
    cosg, sing = math.cos(gmst), math.sin(gmst)
    return np.array([
        [cosg, -sing, 0.0],
        [sing, cosg, 0.0],
        [0.0, 0.0, 1.0],
    ])


def inertial_to_earth_fixed(position: np.ndarray, jd_ut1: float,
                            polar_motion: bool = True) -> np.ndarray:
    """
    Rotate a TEME position into the earth-fixed frame.

    Args:
        position: TEME position vector (km)
        jd_ut1: Julian date (UT1)
        polar_motion: Apply the polar motion correction

    Returns:
        Earth-fixed position vector (km)
    """
    pef = _sidereal_matrix(jd_ut1).T @ np.asarray(position, dtype=float)
    if not polar_motion:
        return pef
    return polar_motion_matrix(jd_ut1).T @ pef


def earth_fixed_to_inertial(position: np.ndarray, jd_ut1: float,
                            polar_motion: bool = True) -> np.ndarray:
    """Inverse of inertial_to_earth_fixed."""
    pef = np.asarray(position, dtype=float)
    if polar_motion:
        pef = polar_motion_matrix(jd_ut1) @ pef
    return _sidereal_matrix(jd_ut1) @ pef


# =============================================================================
# GEODETIC
# =============================================================================


def _geodetic_rad(r: np.ndarray) -> Tuple[float, float, float]:
    magr = mag(r)
    temp = math.sqrt(r[0] * r[0] + r[1] * r[1])

    if abs(temp) < _SMALL:
        longitude = sgn(r[2]) * math.pi * 0.5
    else:
        longitude = math.atan2(r[1], r[0])
    if abs(longitude) >= math.pi:
        longitude += TWO_PI if longitude < 0.0 else -TWO_PI

    latitude = math.asin(r[2] / magr)
    olddelta = latitude + 10.0
    c = 0.0
    i = 1
    while abs(olddelta - latitude) >= GEODETIC_TOLERANCE and i < GEODETIC_MAX_ITERATIONS:
        olddelta = latitude
        sintemp = math.sin(latitude)
        c = EARTH_EQUATORIAL_RADIUS_KM / math.sqrt(1.0 - EARTH_ECCENTRICITY_SQ * sintemp * sintemp)
        latitude = math.atan2(r[2] + c * EARTH_ECCENTRICITY_SQ * sintemp, temp)
        i += 1

    if _HALF_PI - abs(latitude) > math.pi / 180.0:
        altitude = temp / math.cos(latitude) - c
    else:
        altitude = r[2] / math.sin(latitude) - c * (1.0 - EARTH_ECCENTRICITY_SQ)
    return latitude, longitude, altitude


def earth_fixed_to_geodetic(position: np.ndarray) -> GeodeticPosition:
    """
    Convert an earth-fixed position to geodetic coordinates.

    Iterates on the geodetic latitude over the WGS-84 ellipsoid.

    Args:
        position: Earth-fixed position vector (km)

    Returns:
        GeodeticPosition
    """
    lat, lon, alt = _geodetic_rad(np.asarray(position, dtype=float))
    return GeodeticPosition(lat * RAD2DEG, lon * RAD2DEG, alt)


def site_vector(site: SiteLocation) -> np.ndarray:
    """
    Earth-fixed position of a ground site on the WGS-84 ellipsoid.

    Args:
        site: Observer location

    Returns:
        Earth-fixed position vector (km)
    """
    sinlat = math.sin(site.latitude_rad)
    cearth = EARTH_EQUATORIAL_RADIUS_KM / math.sqrt(1.0 - EARTH_ECCENTRICITY_SQ * sinlat * sinlat)
    rdel = (cearth + site.altitude_km) * math.cos(site.latitude_rad)
    rk = ((1.0 - EARTH_ECCENTRICITY_SQ) * cearth + site.altitude_km) * sinlat
    return np.array([
        rdel * math.cos(site.longitude_rad),
        rdel * math.sin(site.longitude_rad),
        rk,
    ])


# =============================================================================
# LOOK ANGLES
# =============================================================================


def topocentric(position: np.ndarray, site: SiteLocation, jd_ut1: float,
                polar_motion: bool = True) -> Tuple[float, float, float]:
    """
    Range, azimuth and elevation of a TEME position from a site.

    Azimuth and elevation are returned in radians; azimuth is normalized to
    [0, 2pi).

    Returns:
        Tuple of (range_km, azimuth_rad, elevation_rad)
    """
    recef = inertial_to_earth_fixed(position, jd_ut1, polar_motion)
    rho_ecef = recef - site_vector(site)

    # south-east-zenith
    rho_sez = rot2(rot3(rho_ecef, site.longitude_rad), _HALF_PI - site.latitude_rad)

    range_km = mag(rho_sez)
    horizontal = math.sqrt(rho_sez[0] * rho_sez[0] + rho_sez[1] * rho_sez[1])
    if horizontal < _SMALL:
        elevation = sgn(rho_sez[2]) * _HALF_PI
        azimuth = 0.0
    else:
        elevation = math.asin(rho_sez[2] / range_km)
        azimuth = math.atan2(rho_sez[1] / horizontal, -rho_sez[0] / horizontal)
    azimuth = math.fmod(azimuth + TWO_PI, TWO_PI)
    return range_km, azimuth, elevation


def look_angles(position: np.ndarray, site: SiteLocation, jd_ut1: float,
                polar_motion: bool = True) -> LookAngles:
    """
    Look angles of a TEME position from a ground site.

    Args:
        position: TEME position vector (km)
        site: Observer location
        jd_ut1: Julian date (UT1)
        polar_motion: Apply the polar motion correction

    Returns:
        LookAngles with azimuth in [0, 360) and signed elevation
    """
    range_km, azimuth, elevation = topocentric(position, site, jd_ut1, polar_motion)
    azimuth_deg = azimuth * RAD2DEG
    if azimuth_deg >= 360.0:
        azimuth_deg -= 360.0
    return LookAngles(range_km, azimuth_deg, elevation * RAD2DEG)
