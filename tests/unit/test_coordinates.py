"""
Tests for the coordinates module.
"""

import math

import numpy as np
import pytest

from pass_predictor.coordinates import (
    EARTH_EQUATORIAL_RADIUS_KM,
    SiteLocation,
    earth_fixed_to_geodetic,
    earth_fixed_to_inertial,
    inertial_to_earth_fixed,
    look_angles,
    polar_motion_matrix,
    site_vector,
    topocentric,
)
from pass_predictor.timeutils import JD_J2000, gstime


class TestSiteLocation:

    def test_units(self) -> None:
        site = SiteLocation(45.0, -90.0, 1500.0)
        assert site.latitude_rad == pytest.approx(math.pi / 4)
        assert site.longitude_rad == pytest.approx(-math.pi / 2)
        assert site.altitude_km == 1.5

    def test_invalid_latitude(self) -> None:
        with pytest.raises(ValueError, match="Latitude"):
            SiteLocation(91.0, 0.0)

    def test_invalid_longitude(self) -> None:
        with pytest.raises(ValueError, match="Longitude"):
            SiteLocation(0.0, 181.0)

    def test_to_dict(self) -> None:
        assert SiteLocation(1.0, 2.0, 3.0).to_dict() == {
            "latitude_deg": 1.0, "longitude_deg": 2.0, "altitude_m": 3.0,
        }


class TestFrames:

    def test_polar_motion_is_small_rotation(self) -> None:
        matrix = polar_motion_matrix(JD_J2000 + 6000.0)
        np.testing.assert_allclose(matrix @ matrix.T, np.eye(3), atol=1e-12)
        np.testing.assert_allclose(matrix, np.eye(3), atol=1e-5)

    def test_sidereal_rotation_only(self) -> None:
        jd = JD_J2000 + 0.3
        gmst = gstime(jd)
        position = np.array([7000.0, 0.0, 0.0])
        ecef = inertial_to_earth_fixed(position, jd, polar_motion=False)
        np.testing.assert_allclose(
            ecef, [7000.0 * math.cos(gmst), -7000.0 * math.sin(gmst), 0.0], atol=1e-9
        )

    def test_round_trip(self) -> None:
        jd = 2457452.75775256
        position = np.array([-4000.0, 5100.0, 1200.0])
        back = earth_fixed_to_inertial(inertial_to_earth_fixed(position, jd), jd)
        np.testing.assert_allclose(back, position, atol=1e-9)


class TestGeodetic:

    @pytest.mark.parametrize("lat, lon, alt_m", [
        (0.0, 0.0, 0.0),
        (51.5, -0.1, 35.0),
        (-33.9, 151.2, 400000.0),
        (89.99, 45.0, 1000.0),
    ])
    def test_site_vector_inverts(self, lat: float, lon: float, alt_m: float) -> None:
        geodetic = earth_fixed_to_geodetic(site_vector(SiteLocation(lat, lon, alt_m)))
        assert geodetic.latitude_deg == pytest.approx(lat, abs=1e-6)
        assert geodetic.longitude_deg == pytest.approx(lon, abs=1e-6)
        assert geodetic.altitude_km == pytest.approx(alt_m / 1000.0, abs=1e-3)

    def test_equator(self) -> None:
        geodetic = earth_fixed_to_geodetic(np.array([EARTH_EQUATORIAL_RADIUS_KM + 500.0, 0.0, 0.0]))
        assert geodetic.latitude_deg == pytest.approx(0.0, abs=1e-9)
        assert geodetic.altitude_km == pytest.approx(500.0, abs=1e-6)

    def test_north_pole(self) -> None:
        geodetic = earth_fixed_to_geodetic(np.array([0.0, 0.0, 7000.0]))
        assert geodetic.latitude_deg == pytest.approx(90.0, abs=1e-6)
        assert geodetic.altitude_km == pytest.approx(7000.0 - 6356.752, abs=0.01)


class TestLookAngles:

    def test_zenith(self) -> None:
        jd = JD_J2000 + 100.25
        site = SiteLocation(40.0, -105.0, 1600.0)
        up = site_vector(site) * 1.1
        position = earth_fixed_to_inertial(up, jd)

        angles = look_angles(position, site, jd)
        assert angles.elevation_deg == pytest.approx(90.0, abs=0.5)
        assert angles.above_horizon

    def test_due_north_on_horizon(self) -> None:
        jd = JD_J2000
        site = SiteLocation(0.0, 0.0, 0.0)
        # point far to the north, in the local horizontal plane
        target = site_vector(site) + np.array([0.0, 0.0, 1000.0])
        angles = look_angles(earth_fixed_to_inertial(target, jd), site, jd)
        assert angles.range_km == pytest.approx(1000.0, abs=1e-6)
        assert angles.elevation_deg == pytest.approx(0.0, abs=1e-6)
        assert angles.azimuth_deg == pytest.approx(0.0, abs=1e-6) or \
            angles.azimuth_deg == pytest.approx(360.0, abs=1e-6)

    def test_due_east(self) -> None:
        jd = JD_J2000
        site = SiteLocation(0.0, 0.0, 0.0)
        target = site_vector(site) + np.array([0.0, 1000.0, 0.0])
        angles = look_angles(earth_fixed_to_inertial(target, jd), site, jd)
        assert angles.azimuth_deg == pytest.approx(90.0, abs=1e-6)

    def test_below_horizon(self) -> None:
        jd = JD_J2000
        site = SiteLocation(0.0, 0.0, 0.0)
        antipode = -site_vector(site) * 1.2
        angles = look_angles(earth_fixed_to_inertial(antipode, jd), site, jd)
        assert angles.elevation_deg < -80.0
        assert not angles.above_horizon

    def test_topocentric_radians(self) -> None:
        jd = JD_J2000
        site = SiteLocation(0.0, 0.0, 0.0)
        target = site_vector(site) + np.array([0.0, 1000.0, 0.0])
        range_km, azimuth, elevation = topocentric(earth_fixed_to_inertial(target, jd), site, jd)
        assert range_km == pytest.approx(1000.0)
        assert azimuth == pytest.approx(math.pi / 2, abs=1e-8)
        assert 0.0 <= azimuth < 2.0 * math.pi
        assert elevation == pytest.approx(0.0, abs=1e-8)
