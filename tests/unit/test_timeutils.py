"""
Tests for the timeutils module.
"""

import math
from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from pass_predictor.timeutils import (
    JD_J2000,
    JD_UNIX_EPOCH,
    UNDEFINED_ANGLE,
    angle,
    cross,
    datetime_to_julian,
    days2mdhms,
    dot,
    gstime,
    invjday,
    jday,
    julian_from_unix,
    julian_to_datetime,
    mag,
    rot2,
    rot3,
    sgn,
    summertime,
    unix_from_julian,
)


class TestJulianDates:
    """Calendar <-> Julian date conversions."""

    def test_j2000_epoch(self) -> None:
        assert jday(2000, 1, 1, 12) == pytest.approx(JD_J2000, abs=1e-9)

    def test_unix_epoch(self) -> None:
        assert julian_from_unix(0) == JD_UNIX_EPOCH
        assert jday(1970, 1, 1) == pytest.approx(JD_UNIX_EPOCH, abs=1e-9)

    def test_unix_round_trip(self) -> None:
        jd = julian_from_unix(1458950400)
        assert jd == pytest.approx(jday(2016, 3, 26), abs=1e-9)
        assert unix_from_julian(jd) == 1458950400

    def test_timezone_offset_is_removed(self) -> None:
        local_noon = jday(2016, 3, 26, 12, tz_hours=12)
        assert local_noon == pytest.approx(jday(2016, 3, 26, 0), abs=1e-9)

    def test_daylight_saving_in_summer(self) -> None:
        jd = jday(2016, 7, 1, 12, tz_hours=1, daylight_saving=True)
        assert jd == pytest.approx(jday(2016, 7, 1, 10), abs=1e-9)

    def test_daylight_saving_ignored_in_winter(self) -> None:
        jd = jday(2016, 1, 15, 12, tz_hours=1, daylight_saving=True)
        assert jd == pytest.approx(jday(2016, 1, 15, 11), abs=1e-9)

    def test_invjday_j2000(self) -> None:
        year, month, day, hour, minute, second = invjday(JD_J2000)
        assert (year, month, day, hour, minute) == (2000, 1, 1, 12, 0)
        assert second == pytest.approx(0.0, abs=1e-4)

    def test_invjday_with_timezone(self) -> None:
        year, month, day, hour, minute, _ = invjday(jday(2016, 3, 26, 0), tz_hours=12)
        assert (year, month, day, hour, minute) == (2016, 3, 26, 12, 0)

    def test_invjday_round_trip(self) -> None:
        jd = jday(2023, 11, 8, 17, 45, 30.5)
        year, month, day, hour, minute, second = invjday(jd)
        assert (year, month, day, hour, minute) == (2023, 11, 8, 17, 45)
        assert second == pytest.approx(30.5, abs=1e-3)

    def test_invjday_exact_hours(self) -> None:
        for hour in range(24):
            parts = invjday(jday(2016, 3, 26, hour))
            assert parts[:5] == (2016, 3, 26, hour, 0)
            assert parts[5] == 0.0

    def test_invjday_carries_into_new_year(self) -> None:
        parts = invjday(jday(2016, 12, 31, 23, 59, 59.99999))
        assert parts == (2017, 1, 1, 0, 0, 0.0)

    def test_invjday_with_summer_time(self) -> None:
        _, _, _, hour, _, _ = invjday(jday(2016, 7, 1, 10), tz_hours=1, daylight_saving=True)
        assert hour == 12


class TestSummertime:
    """European summer time rule."""

    def test_winter_months(self) -> None:
        assert summertime(2016, 1, 15, 12, 1) is False
        assert summertime(2016, 12, 15, 12, 1) is False

    def test_summer_months(self) -> None:
        assert summertime(2016, 7, 15, 12, 1) is True

    def test_march_switch(self) -> None:
        # last Sunday of March 2016 is the 27th
        assert summertime(2016, 3, 27, 0, 1) is False
        assert summertime(2016, 3, 27, 2, 1) is True

    def test_october_switch(self) -> None:
        # last Sunday of October 2016 is the 30th
        assert summertime(2016, 10, 30, 0, 1) is True
        assert summertime(2016, 10, 30, 3, 1) is False


class TestDays2mdhms:

    def test_leap_year(self) -> None:
        month, day, hour, minute, _ = days2mdhms(2016, 65.25775256)
        assert (month, day, hour, minute) == (3, 5, 6, 11)

    def test_common_year(self) -> None:
        month, day, hour, minute, second = days2mdhms(2015, 60.5)
        assert (month, day, hour, minute) == (3, 1, 12, 0)
        assert second == pytest.approx(0.0, abs=1e-6)

    def test_first_day(self) -> None:
        assert days2mdhms(2016, 1.0)[:2] == (1, 1)


class TestDatetimeConversion:

    def test_naive_datetime_is_utc(self) -> None:
        assert datetime_to_julian(datetime(2000, 1, 1, 12)) == pytest.approx(JD_J2000, abs=1e-9)

    def test_aware_datetime(self) -> None:
        aware = datetime(2000, 1, 1, 14, tzinfo=timezone(timedelta(hours=2)))
        assert datetime_to_julian(aware) == pytest.approx(JD_J2000, abs=1e-9)

    def test_round_trip(self) -> None:
        dt = datetime(2016, 3, 26, 5, 31, 17, 250000)
        back = julian_to_datetime(datetime_to_julian(dt))
        assert abs((back - dt).total_seconds()) < 1e-3

    def test_exact_seconds_survive(self) -> None:
        dt = datetime(2016, 7, 1, 10, 0, 0)
        assert julian_to_datetime(datetime_to_julian(dt)) == dt
        assert julian_to_datetime(julian_from_unix(1458950400)) == datetime(2016, 3, 26)


class TestSiderealTime:

    def test_gmst_at_j2000(self) -> None:
        assert math.degrees(gstime(JD_J2000)) == pytest.approx(280.46061837, abs=1e-6)

    def test_gmst_range(self) -> None:
        for offset in (0.0, 0.3, 1234.56, -5000.25):
            value = gstime(JD_J2000 + offset)
            assert 0.0 <= value < 2.0 * math.pi


class TestVectors:

    def test_sgn(self) -> None:
        assert sgn(3.2) == 1
        assert sgn(-0.1) == -1
        assert sgn(0.0) == 0

    def test_mag_dot_cross(self) -> None:
        a = np.array([3.0, 4.0, 0.0])
        b = np.array([0.0, 0.0, 2.0])
        assert mag(a) == pytest.approx(5.0)
        assert dot(a, b) == 0.0
        np.testing.assert_allclose(cross(a, b), [8.0, -6.0, 0.0])

    def test_angle(self) -> None:
        x = np.array([1.0, 0.0, 0.0])
        y = np.array([0.0, 2.0, 0.0])
        assert angle(x, y) == pytest.approx(math.pi / 2)
        assert angle(x, -x) == pytest.approx(math.pi)

    def test_angle_of_zero_vector_is_undefined(self) -> None:
        assert angle(np.zeros(3), np.array([1.0, 0.0, 0.0])) == UNDEFINED_ANGLE

    def test_rotations(self) -> None:
        x = np.array([1.0, 0.0, 0.0])
        np.testing.assert_allclose(rot3(x, math.pi / 2), [0.0, -1.0, 0.0], atol=1e-15)
        np.testing.assert_allclose(rot2(x, math.pi / 2), [0.0, 0.0, 1.0], atol=1e-15)

    def test_rotation_preserves_length(self) -> None:
        v = np.array([1.0, -2.0, 3.0])
        assert mag(rot2(rot3(v, 0.7), -1.3)) == pytest.approx(mag(v))
