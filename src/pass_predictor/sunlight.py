"""
Sun position and satellite illumination.

This module provides a low-precision solar ephemeris and an eclipse model
that treats the earth and the sun as disks seen from the satellite. It is
used to decide whether a satellite is sunlit, in penumbra or in umbra, and
whether the observing site is dark enough to see it.
"""

import math
from dataclasses import dataclass

import numpy as np

from .coordinates import LookAngles, SiteLocation, look_angles
from .timeutils import DEG2RAD, JD_J2000, TWO_PI, dot, mag

# Constants
SUN_RADIUS_KM = 695500.0
EARTH_RADIUS_KM = 6378.137
AU_KM = 149597871.0

FULLY_LIT = 1000  # illumination scale, 0 = umbra

# Visibility codes that replace the illumination fraction
VISIBILITY_DAYLIGHT = -1
VISIBILITY_BELOW_HORIZON = -2

DEFAULT_SUN_ELEVATION_THRESHOLD_DEG = -6.0  # civil twilight


@dataclass(frozen=True)
class Illumination:
    """
    Illumination of a satellite by the sun.

    Attributes:
        fraction: Visible share of the solar disk, 0 (umbra) to 1000 (sunlit)
        in_earth_shadow: True in umbra or penumbra
        delta_phi: Angular separation of the sun and earth disks minus the
            sum of their radii (rad); changes sign at the penumbra boundary
    """

    fraction: int
    in_earth_shadow: bool
    delta_phi: float

    @property
    def sunlit(self) -> bool:
        return self.fraction >= FULLY_LIT


def sun_position(jd: float) -> np.ndarray:
    """
    Geocentric position of the sun in the mean equator of date frame.

    Accurate to about 0.01 degrees between 1950 and 2050.

    Args:
        jd: Julian date

    Returns:
        Position vector in kilometers
    """
    tut1 = (jd - JD_J2000) / 36525.0

    mean_longitude = math.fmod(280.460 + 36000.77 * tut1, 360.0)  # deg

    mean_anomaly = math.fmod((357.5277233 + 35999.05034 * tut1) * DEG2RAD, TWO_PI)
    if mean_anomaly < 0.0:
        mean_anomaly += TWO_PI

    ecliptic_longitude = math.fmod(
        mean_longitude
        + 1.914666471 * math.sin(mean_anomaly)
        + 0.019994643 * math.sin(2.0 * mean_anomaly),
        360.0,
    ) * DEG2RAD
    obliquity = (23.439291 - 0.0130042 * tut1) * DEG2RAD

    # distance in AU
    magr = (1.000140612
            - 0.016708617 * math.cos(mean_anomaly)
            - 0.000139589 * math.cos(2.0 * mean_anomaly))

    return np.array([
        magr * math.cos(ecliptic_longitude),
        magr * math.cos(obliquity) * math.sin(ecliptic_longitude),
        magr * math.sin(obliquity) * math.sin(ecliptic_longitude),
    ]) * AU_KM


def illumination(satellite_position: np.ndarray, sun_pos: np.ndarray) -> Illumination:
    """
    Compute how much of the solar disk a satellite sees past the earth.

    The overlap of the two disks is approximated as if both were squares,
    which is adequate for a visibility estimate.

    Args:
        satellite_position: Satellite position vector (km), same frame as sun_pos
        sun_pos: Sun position vector (km)

    Returns:
        Illumination
    """
    rearth = -np.asarray(satellite_position, dtype=float)
    rsunsat = np.asarray(sun_pos, dtype=float) + rearth

    magsunsat = mag(rsunsat)
    magearth = mag(rearth)

    phiearth = math.asin(min(1.0, EARTH_RADIUS_KM / magearth))
    phisun = math.asin(min(1.0, SUN_RADIUS_KM / magsunsat))
    cosphi = dot(rearth, rsunsat) / magsunsat / magearth
    phi = math.acos(max(-1.0, min(1.0, cosphi)))
    delta_phi = phi - phisun - phiearth

    if phiearth > phisun and phi < phiearth - phisun:
        # umbra
        return Illumination(0, True, delta_phi)

    if phiearth < phisun and phi < phisun - phiearth:
        # earth disk fully inside the sun disk
        fraction = int((1.0 - phiearth * phiearth / (phisun * phisun)) * FULLY_LIT)
        return Illumination(fraction, True, delta_phi)

    if abs(phiearth - phisun) < phi < phiearth + phisun:
        # penumbra
        if phiearth > phisun:
            fraction = int(((phisun + phi - phiearth) / (phisun * 2.0)) * FULLY_LIT)
        else:
            fraction = int((1.0 - phiearth * (phisun - phi + phiearth)
                            / (2.0 * phisun * phisun)) * FULLY_LIT)
        return Illumination(fraction, True, delta_phi)

    return Illumination(FULLY_LIT, False, delta_phi)


def shadow_margin(satellite_position: np.ndarray, jd: float) -> float:
    """delta_phi of a satellite at a date; negative once it enters penumbra."""
    return illumination(satellite_position, sun_position(jd)).delta_phi


def sun_look_angles(site: SiteLocation, jd: float, polar_motion: bool = True) -> LookAngles:
    """Azimuth and elevation of the sun from a ground site."""
    return look_angles(sun_position(jd), site, jd, polar_motion)


def is_site_dark(site: SiteLocation, jd: float,
                 sun_elevation_threshold_deg: float = DEFAULT_SUN_ELEVATION_THRESHOLD_DEG,
                 polar_motion: bool = True) -> bool:
    """Check whether the sun is at or below the threshold elevation at a site."""
    sun = sun_look_angles(site, jd, polar_motion)
    return sun.elevation_deg <= sun_elevation_threshold_deg


def visibility_code(site: SiteLocation, satellite_position: np.ndarray, jd: float,
                    sun_elevation_threshold_deg: float = DEFAULT_SUN_ELEVATION_THRESHOLD_DEG,
                    polar_motion: bool = True) -> int:
    """
    Classify how visible a satellite is from a site.

    Args:
        site: Observer location
        satellite_position: TEME position of the satellite (km)
        jd: Julian date
        sun_elevation_threshold_deg: Sun elevation above which the site is
            considered to be in daylight
        polar_motion: Apply the polar motion correction

    Returns:
        VISIBILITY_BELOW_HORIZON if the satellite is below the horizon,
        VISIBILITY_DAYLIGHT if the sky is too bright, otherwise the
        illumination fraction 0-1000
    """
    satellite = look_angles(satellite_position, site, jd, polar_motion)
    if satellite.elevation_deg < 0.0:
        return VISIBILITY_BELOW_HORIZON
    if not is_site_dark(site, jd, sun_elevation_threshold_deg, polar_motion):
        return VISIBILITY_DAYLIGHT
    return illumination(satellite_position, sun_position(jd)).fraction
