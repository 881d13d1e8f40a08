"""
Tests for the predictor module.
"""

import math
from datetime import datetime
from pathlib import Path
from typing import Tuple

import pytest

from pass_predictor.config import PredictorConfig
from pass_predictor.coordinates import SiteLocation
from pass_predictor.exceptions import OptimizerExhausted, PredictorStateError
from pass_predictor.predictor import (
    PassEvent,
    PassPoint,
    PassPredictor,
    PredictorStatus,
    SearchDirection,
    ShadowTransit,
    Visibility,
)
from pass_predictor.propagator import OrbitalElements, initialize, propagate_to_julian
from pass_predictor.sunlight import shadow_margin, visibility_code
from pass_predictor.timeutils import datetime_to_julian, julian_from_unix


class TestEnums:

    def test_search_direction_from_string(self) -> None:
        assert SearchDirection.from_string("Forward") is SearchDirection.FORWARD
        assert SearchDirection.from_string("backward").sign == -1.0

    def test_search_direction_invalid(self) -> None:
        with pytest.raises(ValueError, match="Invalid search direction"):
            SearchDirection.from_string("sideways")


class TestPassPoint:

    def test_times(self) -> None:
        point = PassPoint(julian_from_unix(1458950400), 120.0, 35.0)
        assert point.datetime == datetime(2016, 3, 26, 0, 0, 0)
        assert point.local_datetime(12) == datetime(2016, 3, 26, 12, 0, 0)
        assert point.to_dict()["time"] == "2016-03-26T00:00:00"

    def test_summer_time(self) -> None:
        point = PassPoint(datetime_to_julian(datetime(2016, 7, 1, 10, 0, 0)), 0.0, 0.0)
        assert point.local_datetime(1, daylight_saving=True).hour == 12


class TestPredictorSetup:

    def test_from_elements(self, iss_elements: OrbitalElements,
                           tarawa_site: SiteLocation) -> None:
        predictor = PassPredictor(iss_elements, tarawa_site)
        assert predictor.status is PredictorStatus.UNINITIALIZED
        assert predictor.cursor is None
        assert predictor.record.satnum == 25544
        assert predictor.sun_elevation_threshold_deg == -6.0

    def test_from_record(self, iss_elements: OrbitalElements) -> None:
        record = initialize(iss_elements)
        assert PassPredictor(record).record is record

    def test_from_tle(self, iss_tle_lines: Tuple[str, str]) -> None:
        predictor = PassPredictor.from_tle(*iss_tle_lines, name="ISS")
        assert predictor.record.elements.name == "ISS"

    def test_from_tle_file(self, tle_file: Path, tarawa_site: SiteLocation) -> None:
        predictor = PassPredictor.from_tle_file(tle_file, "VANGUARD", tarawa_site)
        assert predictor.record.satnum == 5
        assert predictor.site == tarawa_site

    def test_site_from_config(self, iss_elements: OrbitalElements,
                              tarawa_site: SiteLocation) -> None:
        predictor = PassPredictor(iss_elements, config=PredictorConfig(site=tarawa_site))
        assert predictor.site == tarawa_site

    def test_set_site(self, iss_elements: OrbitalElements) -> None:
        predictor = PassPredictor(iss_elements)
        predictor.set_site(52.0, 4.4, 10.0)
        assert predictor.site == SiteLocation(52.0, 4.4, 10.0)

    def test_set_sun_elevation_threshold(self, iss_predictor: PassPredictor) -> None:
        iss_predictor.set_sun_elevation_threshold(-12.0)
        assert iss_predictor.sun_elevation_threshold_deg == -12.0
        with pytest.raises(ValueError):
            iss_predictor.set_sun_elevation_threshold(-91.0)

    def test_cursor_setter_seeds(self, iss_predictor: PassPredictor) -> None:
        iss_predictor.set_prediction_point(2457473.5)
        assert iss_predictor.get_prediction_point() == 2457473.5
        assert iss_predictor.status is PredictorStatus.SEEDED

    def test_search_requires_seed(self, iss_predictor: PassPredictor) -> None:
        with pytest.raises(PredictorStateError):
            iss_predictor.next_pass()

    def test_geometry_requires_site(self, iss_elements: OrbitalElements,
                                    iss_seed_time: datetime) -> None:
        predictor = PassPredictor(iss_elements)
        with pytest.raises(PredictorStateError, match="site"):
            predictor.find_satellite(iss_seed_time)


class TestFindSatellite:

    def test_snapshot(self, iss_predictor: PassPredictor, iss_seed_time: datetime) -> None:
        snapshot = iss_predictor.find_satellite(iss_seed_time)
        assert snapshot.datetime == iss_seed_time
        assert abs(snapshot.latitude_deg) <= 52.0
        assert -180.0 <= snapshot.longitude_deg <= 180.0
        assert 250.0 < snapshot.altitude_km < 500.0
        assert 0.0 <= snapshot.azimuth_deg < 360.0
        assert 0.0 <= snapshot.sun_azimuth_deg < 360.0
        assert snapshot.visibility_code >= -2
        if snapshot.elevation_deg < 0.0:
            assert snapshot.visibility_code == -2
            assert not snapshot.above_horizon

    def test_code_matches_visibility_code(self, iss_predictor: PassPredictor,
                                          tarawa_site: SiteLocation) -> None:
        start = datetime_to_julian(datetime(2016, 3, 26))
        for step in range(0, 1440, 7):
            jd = start + step / 1440.0
            position = propagate_to_julian(iss_predictor.record, jd).position
            expected = visibility_code(tarawa_site, position, jd,
                                       iss_predictor.sun_elevation_threshold_deg)
            assert iss_predictor.find_satellite(jd).visibility_code == expected

    def test_unix_matches_julian(self, iss_predictor: PassPredictor) -> None:
        by_unix = iss_predictor.find_satellite_unix(1458950400)
        by_jd = iss_predictor.find_satellite(julian_from_unix(1458950400))
        assert by_unix == by_jd

    def test_to_dict(self, iss_predictor: PassPredictor, iss_seed_time: datetime) -> None:
        data = iss_predictor.find_satellite(iss_seed_time).to_dict()
        assert data["time"] == "2016-03-26T00:00:00"
        assert set(data) >= {"latitude_deg", "longitude_deg", "altitude_km",
                             "azimuth_deg", "elevation_deg", "visibility_code"}


class TestSeedCursor:

    def test_seeds_on_preceding_maximum(self, iss_predictor: PassPredictor,
                                        iss_seed_time: datetime) -> None:
        start_jd = datetime_to_julian(iss_seed_time)
        cursor = iss_predictor.seed_cursor(iss_seed_time)

        assert cursor is not None
        assert iss_predictor.cursor == cursor
        assert iss_predictor.status is PredictorStatus.SEEDED
        # the ladder starts 0.166 orbit back and walks at most 30 rungs
        period = 1.0 / iss_predictor.revolutions_per_day
        assert start_jd - 6.0 * period < cursor < start_jd

    def test_cursor_is_local_maximum(self, iss_predictor: PassPredictor,
                                     iss_seed_time: datetime) -> None:
        cursor = iss_predictor.seed_cursor(iss_seed_time)
        one_minute = 1.0 / 1440.0
        peak = iss_predictor.find_satellite(cursor).elevation_deg
        assert peak >= iss_predictor.find_satellite(cursor - one_minute).elevation_deg
        assert peak >= iss_predictor.find_satellite(cursor + one_minute).elevation_deg

    def test_unix_seed(self, iss_predictor: PassPredictor) -> None:
        cursor = iss_predictor.seed_cursor_unix(1458950400)
        assert cursor == pytest.approx(iss_predictor.cursor)

    def test_exhausted_ladder(self, iss_predictor: PassPredictor, iss_seed_time: datetime,
                              monkeypatch: pytest.MonkeyPatch) -> None:
        def no_bracket(*args, **kwargs):
            raise OptimizerExhausted("no minimum bracketed")

        monkeypatch.setattr("pass_predictor.predictor.bracket_minimum", no_bracket)
        assert iss_predictor.seed_cursor(iss_seed_time) is None
        assert iss_predictor.status is PredictorStatus.EXHAUSTED
        assert iss_predictor.cursor is None

    def test_shallow_ladder_budget(self, iss_elements: OrbitalElements,
                                   tarawa_site: SiteLocation, iss_seed_time: datetime) -> None:
        predictor = PassPredictor(iss_elements, tarawa_site, PredictorConfig(seed_max_steps=1))
        cursor = predictor.seed_cursor(iss_seed_time)
        if cursor is None:
            assert predictor.status is PredictorStatus.EXHAUSTED
        else:
            assert predictor.status is PredictorStatus.SEEDED


class TestNextPass:

    @pytest.fixture
    def seeded(self, iss_predictor: PassPredictor, iss_seed_time: datetime) -> PassPredictor:
        assert iss_predictor.seed_cursor(iss_seed_time) is not None
        return iss_predictor

    def test_horizon_pass(self, seeded: PassPredictor) -> None:
        event = seeded.next_pass(minimum_elevation_deg=0.0)

        assert isinstance(event, PassEvent)
        assert seeded.status is PredictorStatus.FOUND
        assert event.start.julian_date < event.maximum.julian_date < event.stop.julian_date
        assert event.start.elevation_deg == pytest.approx(0.0, abs=0.1)
        assert event.stop.elevation_deg == pytest.approx(0.0, abs=0.1)
        assert event.maximum.elevation_deg >= event.start.elevation_deg
        assert event.maximum.elevation_deg >= event.stop.elevation_deg
        assert 0.0 < event.duration_minutes < 15.0
        assert seeded.cursor == event.maximum.julian_date

    def test_visibility_rules(self, seeded: PassPredictor) -> None:
        event = seeded.next_pass(minimum_elevation_deg=0.0)
        if event.visibility_start is Visibility.DAYLIGHT and \
                event.visibility_stop is Visibility.DAYLIGHT:
            assert event.visibility is Visibility.DAYLIGHT
        if event.transit is None:
            assert event.transit_direction is ShadowTransit.NONE
            assert event.visibility_transit is None
        else:
            assert event.transit_direction in (ShadowTransit.ENTER, ShadowTransit.LEAVE)
            assert event.start.julian_date <= event.transit.julian_date <= event.stop.julian_date

    def test_minimum_elevation_threshold(self, seeded: PassPredictor) -> None:
        event = seeded.next_pass(minimum_elevation_deg=10.0)
        assert event is not None
        assert event.minimum_elevation_deg == 10.0
        assert event.maximum.elevation_deg >= 10.0
        assert event.start.elevation_deg == pytest.approx(10.0, abs=0.1)
        assert event.stop.elevation_deg == pytest.approx(10.0, abs=0.1)

    def test_config_default_elevation(self, iss_elements: OrbitalElements,
                                      tarawa_site: SiteLocation,
                                      iss_seed_time: datetime) -> None:
        predictor = PassPredictor(iss_elements, tarawa_site,
                                  PredictorConfig(minimum_elevation_deg=5.0))
        predictor.seed_cursor(iss_seed_time)
        event = predictor.next_pass()
        assert event.minimum_elevation_deg == 5.0

    def test_not_found(self, seeded: PassPredictor) -> None:
        before = seeded.cursor
        assert seeded.next_pass(max_iterations=2, minimum_elevation_deg=89.99) is None
        assert seeded.status is PredictorStatus.EXHAUSTED
        assert seeded.cursor > before

    def test_backward_direction_string(self, seeded: PassPredictor) -> None:
        before = seeded.cursor
        event = seeded.next_pass(direction="backward")
        assert event is not None
        assert event.maximum.julian_date < before

    def test_iter_passes(self, seeded: PassPredictor) -> None:
        events = list(seeded.iter_passes(3))
        assert len(events) == 3
        starts = [e.start.julian_date for e in events]
        assert starts == sorted(starts)
        assert events[0].stop.julian_date < events[1].start.julian_date

    def test_str_and_dict(self, seeded: PassPredictor) -> None:
        event = seeded.next_pass()
        text = str(event)
        assert "start:" in text and "max:" in text and "stop:" in text
        data = event.to_dict()
        assert data["visibility"] in {"daylight", "eclipsed", "lighted"}
        assert data["start"]["julian_date"] == event.start.julian_date

    def test_shadow_transits(self, seeded: PassPredictor) -> None:
        transits = [e for e in seeded.iter_passes(60, minimum_elevation_deg=0.0)
                    if e.transit is not None]
        assert transits
        assert {e.transit_direction for e in transits} == {ShadowTransit.ENTER,
                                                           ShadowTransit.LEAVE}

        for event in transits:
            jd = event.transit.julian_date
            assert event.start.julian_date <= jd <= event.stop.julian_date
            position = propagate_to_julian(seeded.record, jd).position
            assert shadow_margin(position, jd) == pytest.approx(0.0, abs=1e-3)

            margin_start = shadow_margin(
                propagate_to_julian(seeded.record, event.start.julian_date).position,
                event.start.julian_date)
            if margin_start > 0.0:
                assert event.transit_direction is ShadowTransit.ENTER
            else:
                assert event.transit_direction is ShadowTransit.LEAVE
            assert event.visibility_transit in (Visibility.DAYLIGHT, Visibility.ECLIPSED)

    def test_azimuth_stays_below_full_turn(self, seeded: PassPredictor,
                                           monkeypatch: pytest.MonkeyPatch) -> None:
        almost_full_turn = math.nextafter(2.0 * math.pi, 0.0)
        monkeypatch.setattr("pass_predictor.coordinates.topocentric",
                            lambda *args, **kwargs: (1000.0, almost_full_turn, 0.1))
        event = seeded.next_pass(minimum_elevation_deg=0.0)
        for point in (event.start, event.maximum, event.stop):
            assert 0.0 <= point.azimuth_deg < 360.0
