"""
Time and angle utilities.

Julian date conversions (calendar, Unix time and datetime), sidereal time,
and the small vector and rotation helpers shared by the propagator,
coordinate and sunlight modules.
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Tuple

import numpy as np

# =============================================================================
# CONSTANTS
# =============================================================================

TWO_PI = 2.0 * math.pi
DEG2RAD = math.pi / 180.0
RAD2DEG = 180.0 / math.pi

MINUTES_PER_DAY = 1440.0
SECONDS_PER_DAY = 86400.0

JD_UNIX_EPOCH = 2440587.5  # 1970-01-01T00:00:00Z
JD_J2000 = 2451545.0  # 2000-01-01T12:00:00 TT
JD_SGP4_EPOCH = 2433281.5  # 1949-12-31T00:00:00Z, origin of SGP4 epoch days

# Returned by angle() when either vector has zero length
UNDEFINED_ANGLE = 999999.1

_SMALL = 0.00000001

_MONTH_LENGTHS = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)

# calendar breakdown resolution, 0.1 ms
_TICKS_PER_SECOND = 10000
_TICKS_PER_DAY = 86400 * _TICKS_PER_SECOND


# =============================================================================
# JULIAN DATES
# =============================================================================


def summertime(year: int, month: int, day: int, hour: int, tz_hours: int) -> bool:
    """
    Check whether a local standard time falls inside European summer time.

    Summer time runs from 01:00 UTC on the last Sunday of March to 01:00 UTC
    on the last Sunday of October.

    Args:
        year: Calendar year
        month: Month (1-12)
        day: Day of month
        hour: Hour in local standard time
        tz_hours: Timezone offset from UTC in hours

    Returns:
        True during daylight saving time
    """
    if month < 3 or month > 10:
        return False
    if 3 < month < 10:
        return True
    hours_into_month = hour + 24 * day
    if month == 3:
        last_sunday = 31 - (5 * year // 4 + 4) % 7
        return hours_into_month >= 1 + tz_hours + 24 * last_sunday
    last_sunday = 31 - (5 * year // 4 + 1) % 7
    return hours_into_month < 1 + tz_hours + 24 * last_sunday


def jday(
    year: int,
    month: int,
    day: int,
    hour: int = 0,
    minute: int = 0,
    second: float = 0.0,
    tz_hours: int = 0,
    daylight_saving: bool = False,
) -> float:
    """
    Convert a calendar date and time to a Julian date.

    Valid for years 1900 to 2100. The given time is local time in the
    timezone ``tz_hours``; the result is in UT.

    Args:
        year: Calendar year
        month: Month (1-12)
        day: Day of month
        hour: Hour (0-23)
        minute: Minute (0-59)
        second: Seconds, may be fractional
        tz_hours: Timezone offset from UTC in hours
        daylight_saving: Apply European summer time when it is in effect

    Returns:
        Julian date
    """
    jd = (
        367.0 * year
        - math.floor((7 * (year + math.floor((month + 9) / 12.0))) * 0.25)
        + math.floor(275 * month / 9.0)
        + day
        + 1721013.5
        + ((second / 60.0 + minute) / 60.0 + hour) / 24.0
    )
    jd -= tz_hours / 24.0
    if daylight_saving and summertime(year, month, day, hour, tz_hours):
        jd -= 1.0 / 24.0
    return jd


def days2mdhms(year: int, days: float) -> Tuple[int, int, int, int, float]:
    """
    Split a fractional day of year into month, day, hour, minute, second.

    Args:
        year: Calendar year (used for the leap day)
        days: Day of year with fraction, 1.0 being January 1st 00:00

    Returns:
        Tuple of (month, day, hour, minute, second)
    """
    lengths = list(_MONTH_LENGTHS)
    if year % 4 == 0:
        lengths[1] = 29

    day_of_year = int(math.floor(days))

    month = 1
    elapsed = 0
    while day_of_year > elapsed + lengths[month - 1] and month < 12:
        elapsed += lengths[month - 1]
        month += 1
    day = day_of_year - elapsed

    temp = (days - day_of_year) * 24.0
    hour = int(math.floor(temp))
    temp = (temp - hour) * 60.0
    minute = int(math.floor(temp))
    second = (temp - minute) * 60.0
    return month, day, hour, minute, second


def _breakdown(jd: float) -> Tuple[int, int, int, int, int, float]:
    temp = jd - 2415019.5
    tu = temp / 365.25
    year = 1900 + int(math.floor(tu))
    leap_years = int(math.floor((year - 1901) * 0.25))

    days = temp - ((year - 1900) * 365.0 + leap_years)
    if days < 1.0:
        year -= 1
        leap_years = int(math.floor((year - 1901) * 0.25))
        days = temp - ((year - 1900) * 365.0 + leap_years)

    # split the time of day in whole ticks; a Julian date only carries ~40 us
    day_of_year = int(math.floor(days))
    ticks = int(round((days - day_of_year) * _TICKS_PER_DAY))
    if ticks >= _TICKS_PER_DAY:
        ticks -= _TICKS_PER_DAY
        day_of_year += 1
        if day_of_year > (366 if year % 4 == 0 else 365):
            year += 1
            day_of_year = 1

    month, day, _, _, _ = days2mdhms(year, float(day_of_year))
    hour, ticks = divmod(ticks, 3600 * _TICKS_PER_SECOND)
    minute, ticks = divmod(ticks, 60 * _TICKS_PER_SECOND)
    return year, month, day, hour, minute, ticks / _TICKS_PER_SECOND


def invjday(
    jd: float, tz_hours: int = 0, daylight_saving: bool = False
) -> Tuple[int, int, int, int, int, float]:
    """
    Convert a Julian date to a local calendar date and time.

    Args:
        jd: Julian date (UT)
        tz_hours: Timezone offset from UTC in hours
        daylight_saving: Apply European summer time when it is in effect

    Returns:
        Tuple of (year, month, day, hour, minute, second) in local time
    """
    local_jd = jd + tz_hours / 24.0
    parts = _breakdown(local_jd)
    if daylight_saving and summertime(parts[0], parts[1], parts[2], parts[3], tz_hours):
        parts = _breakdown(local_jd + 1.0 / 24.0)
    return parts


def julian_from_unix(unix_seconds: float) -> float:
    """Convert a Unix timestamp (seconds) to a Julian date."""
    return unix_seconds / SECONDS_PER_DAY + JD_UNIX_EPOCH


def unix_from_julian(jd: float) -> int:
    """Convert a Julian date to a Unix timestamp, rounded to the second."""
    return int(round((jd - JD_UNIX_EPOCH) * SECONDS_PER_DAY))


def datetime_to_julian(dt: datetime) -> float:
    """
    Convert a datetime to a Julian date.

    Naive datetimes are taken to be UTC.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return jday(
        dt.year, dt.month, dt.day, dt.hour, dt.minute,
        dt.second + dt.microsecond / 1e6,
    )


def julian_to_datetime(jd: float) -> datetime:
    """Convert a Julian date to a naive UTC datetime, rounded to the millisecond."""
    seconds = (jd - JD_UNIX_EPOCH) * SECONDS_PER_DAY
    return datetime(1970, 1, 1) + timedelta(milliseconds=round(seconds * 1e3))


def gstime(jd_ut1: float) -> float:
    """
    Greenwich mean sidereal time (IAU-82).

    Args:
        jd_ut1: Julian date (UT1)

    Returns:
        Sidereal angle in radians, 0 to 2pi
    """
    tut1 = (jd_ut1 - JD_J2000) / 36525.0
    temp = (
        -6.2e-6 * tut1 * tut1 * tut1
        + 0.093104 * tut1 * tut1
        + (876600.0 * 3600.0 + 8640184.812866) * tut1
        + 67310.54841
    )  # seconds
    temp = math.fmod(temp * DEG2RAD / 240.0, TWO_PI)
    if temp < 0.0:
        temp += TWO_PI
    return temp


# =============================================================================
# VECTORS AND ROTATIONS
# =============================================================================


def sgn(x: float) -> int:
    """Sign of x: -1, 0 or 1."""
    if x > 0.0:
        return 1
    if x < 0.0:
        return -1
    return 0


def mag(vec: np.ndarray) -> float:
    """Magnitude of a 3-vector."""
    return float(np.linalg.norm(vec))


def dot(a: np.ndarray, b: np.ndarray) -> float:
    """Dot product of two 3-vectors."""
    return float(np.dot(a, b))


def cross(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Cross product of two 3-vectors."""
    return np.cross(a, b)


def angle(a: np.ndarray, b: np.ndarray) -> float:
    """
    Angle between two vectors in radians.

    Returns UNDEFINED_ANGLE when either vector has (near) zero length.
    """
    magnitude = mag(a) * mag(b)
    if magnitude <= _SMALL * _SMALL:
        return UNDEFINED_ANGLE
    cosine = dot(a, b) / magnitude
    return math.acos(max(-1.0, min(1.0, cosine)))


def rot2(vec: np.ndarray, xval: float) -> np.ndarray:
    """Rotate a vector about the 2nd (y) axis by xval radians."""
    c = math.cos(xval)
    s = math.sin(xval)
    return np.array([
        c * vec[0] - s * vec[2],
        vec[1],
        c * vec[2] + s * vec[0],
    ])


def rot3(vec: np.ndarray, xval: float) -> np.ndarray:
    """Rotate a vector about the 3rd (z) axis by xval radians."""
    c = math.cos(xval)
    s = math.sin(xval)
    return np.array([
        c * vec[0] + s * vec[1],
        c * vec[1] - s * vec[0],
        vec[2],
    ])
