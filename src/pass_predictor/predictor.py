"""
Satellite pass prediction.

This module finds the next overpass of a satellite above a minimum
elevation for a ground site. The search keeps a cursor on a local elevation
maximum and steps it one orbital period at a time, refining each step with
Brent's minimizer on the negated elevation. Once a maximum clears the
threshold, the rise and set crossings and the shadow transit are located
with Brent's root finder, and each point is classified as daylight,
eclipsed or lighted.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, Optional, Tuple, Union

import numpy as np

from .config import PredictorConfig
from .coordinates import (
    SiteLocation,
    earth_fixed_to_geodetic,
    inertial_to_earth_fixed,
    look_angles,
    topocentric,
)
from .exceptions import OptimizerExhausted, PredictorStateError
from .optimize import bracket_minimum, brent_minimize, brent_root
from .propagator import ElementRecord, OrbitalElements, initialize, propagate_to_julian
from .sunlight import (
    FULLY_LIT,
    VISIBILITY_BELOW_HORIZON,
    illumination,
    shadow_margin,
    sun_look_angles,
    sun_position,
    visibility_code,
)
from .timeutils import (
    DEG2RAD,
    datetime_to_julian,
    invjday,
    julian_from_unix,
    julian_to_datetime,
    sgn,
    summertime,
)
from .tle import load_tle_file, parse_tle

logger = logging.getLogger(__name__)

# =============================================================================
# CONSTANTS - search geometry, in fractions of an orbital period
# =============================================================================

MAXIMUM_WINDOW = 0.25  # half-width of the window refined around a stepped cursor
CROSSING_WINDOW = 0.5  # reach of the rise/set root search from the maximum
SEED_STEP = 0.166  # rung spacing of the seeding ladder
SEED_FIRST_STEP = 0.322  # offset of the first outer rung

JulianOrDatetime = Union[float, datetime]


# =============================================================================
# ENUMS
# =============================================================================


class Visibility(Enum):
    """How a satellite appears to the observer."""

    DAYLIGHT = "daylight"  # sky too bright at the site
    ECLIPSED = "eclipsed"  # satellite (partly) in earth shadow
    LIGHTED = "lighted"  # satellite sunlit against a dark sky


class ShadowTransit(Enum):
    """Shadow boundary crossing during a pass."""

    NONE = "none"
    ENTER = "enter"
    LEAVE = "leave"


class SearchDirection(Enum):
    """Direction in which next_pass moves the cursor."""

    FORWARD = "forward"
    BACKWARD = "backward"

    @classmethod
    def from_string(cls, value: str) -> "SearchDirection":
        """Create SearchDirection from string (case-insensitive)."""
        try:
            return cls(value.lower())
        except ValueError:
            raise ValueError(
                f"Invalid search direction: {value}. "
                f"Valid options: {[d.value for d in cls]}"
            )

    @property
    def sign(self) -> float:
        return 1.0 if self is SearchDirection.FORWARD else -1.0


class PredictorStatus(Enum):
    """Lifecycle of a PassPredictor."""

    UNINITIALIZED = "uninitialized"
    SEEDED = "seeded"
    SEARCHING = "searching"
    FOUND = "found"
    EXHAUSTED = "exhausted"


# =============================================================================
# RESULT TYPES
# =============================================================================


@dataclass(frozen=True)
class PassPoint:
    """Time and look direction of one point of a pass."""

    julian_date: float
    azimuth_deg: float
    elevation_deg: float

    @property
    def datetime(self) -> datetime:
        """UTC time as a naive datetime."""
        return julian_to_datetime(self.julian_date)

    def local_datetime(self, tz_hours: int = 0, daylight_saving: bool = False) -> datetime:
        """Local wall-clock time for a timezone offset and optional summer time."""
        offset = tz_hours
        if daylight_saving:
            year, month, day, hour, _, _ = invjday(self.julian_date, tz_hours)
            if summertime(year, month, day, hour, tz_hours):
                offset += 1
        return self.datetime + timedelta(hours=offset)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time": self.datetime.isoformat(timespec="seconds"),
            "julian_date": self.julian_date,
            "azimuth_deg": round(self.azimuth_deg, 2),
            "elevation_deg": round(self.elevation_deg, 2),
        }


@dataclass(frozen=True)
class PassEvent:
    """
    One overpass of a satellite.

    ``transit`` is None when the satellite does not cross the shadow
    boundary between start and stop.
    """

    start: PassPoint
    maximum: PassPoint
    stop: PassPoint
    minimum_elevation_deg: float
    visibility_start: Visibility
    visibility_max: Visibility
    visibility_stop: Visibility
    visibility: Visibility
    transit_direction: ShadowTransit = ShadowTransit.NONE
    transit: Optional[PassPoint] = None
    visibility_transit: Optional[Visibility] = None

    @property
    def duration_minutes(self) -> float:
        return (self.stop.julian_date - self.start.julian_date) * 1440.0

    @property
    def max_elevation_deg(self) -> float:
        return self.maximum.elevation_deg

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "start": self.start.to_dict(),
            "maximum": self.maximum.to_dict(),
            "stop": self.stop.to_dict(),
            "duration_minutes": round(self.duration_minutes, 2),
            "minimum_elevation_deg": self.minimum_elevation_deg,
            "visibility": self.visibility.value,
            "visibility_start": self.visibility_start.value,
            "visibility_max": self.visibility_max.value,
            "visibility_stop": self.visibility_stop.value,
            "transit_direction": self.transit_direction.value,
        }
        if self.transit is not None:
            result["transit"] = self.transit.to_dict()
            result["visibility_transit"] = self.visibility_transit.value
        return result

    def __str__(self) -> str:
        lines = [
            f"Pass ({self.visibility.value}), min elevation {self.minimum_elevation_deg:.1f} deg",
            f"  start: {self.start.datetime:%Y-%m-%d %H:%M:%S} UTC "
            f"az {self.start.azimuth_deg:.1f} el {self.start.elevation_deg:.1f} "
            f"[{self.visibility_start.value}]",
            f"  max:   {self.maximum.datetime:%Y-%m-%d %H:%M:%S} UTC "
            f"az {self.maximum.azimuth_deg:.1f} el {self.maximum.elevation_deg:.1f} "
            f"[{self.visibility_max.value}]",
            f"  stop:  {self.stop.datetime:%Y-%m-%d %H:%M:%S} UTC "
            f"az {self.stop.azimuth_deg:.1f} el {self.stop.elevation_deg:.1f} "
            f"[{self.visibility_stop.value}]",
        ]
        if self.transit is not None:
            lines.append(
                f"  {self.transit_direction.value} shadow: "
                f"{self.transit.datetime:%Y-%m-%d %H:%M:%S} UTC "
                f"az {self.transit.azimuth_deg:.1f} el {self.transit.elevation_deg:.1f}"
            )
        return "\n".join(lines)


@dataclass(frozen=True)
class SatelliteSnapshot:
    """Where a satellite is, and how it looks from the site, at one instant."""

    julian_date: float
    latitude_deg: float
    longitude_deg: float
    altitude_km: float
    azimuth_deg: float
    elevation_deg: float
    range_km: float
    visibility_code: int
    sun_azimuth_deg: float
    sun_elevation_deg: float

    @property
    def datetime(self) -> datetime:
        return julian_to_datetime(self.julian_date)

    @property
    def above_horizon(self) -> bool:
        return self.visibility_code != VISIBILITY_BELOW_HORIZON

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time": self.datetime.isoformat(timespec="seconds"),
            "julian_date": self.julian_date,
            "latitude_deg": round(self.latitude_deg, 4),
            "longitude_deg": round(self.longitude_deg, 4),
            "altitude_km": round(self.altitude_km, 3),
            "azimuth_deg": round(self.azimuth_deg, 2),
            "elevation_deg": round(self.elevation_deg, 2),
            "range_km": round(self.range_km, 3),
            "visibility_code": self.visibility_code,
            "sun_azimuth_deg": round(self.sun_azimuth_deg, 2),
            "sun_elevation_deg": round(self.sun_elevation_deg, 2),
        }


# =============================================================================
# PREDICTOR
# =============================================================================


def _to_julian(when: JulianOrDatetime) -> float:
    if isinstance(when, datetime):
        return datetime_to_julian(when)
    return float(when)


class PassPredictor:
    """
    Pass search state for one satellite over one site.

    Holds the element record, the site, the daylight threshold, the
    elevation offset of the current search, and the prediction cursor (the
    Julian date of the last local elevation maximum found or seeded). The
    record's deep-space integrator is advanced by every search, so a
    predictor must not be shared between threads.
    """

    def __init__(
        self,
        record: Union[ElementRecord, OrbitalElements],
        site: Optional[SiteLocation] = None,
        config: Optional[PredictorConfig] = None,
    ) -> None:
        """
        Initialize the predictor.

        Args:
            record: Initialized element record, or decoded elements to
                initialize with the configured gravity model and mode
            site: Observer location (may be set later with set_site)
            config: Search settings; built-in defaults when omitted

        Raises:
            InitError: If the elements cannot be initialized
        """
        self.config = config or PredictorConfig()
        if isinstance(record, OrbitalElements):
            record = initialize(record, self.config.gravity_model, self.config.operation_mode)
        self.record = record
        self.site = site if site is not None else self.config.site
        self.sun_elevation_threshold_deg = self.config.sun_elevation_threshold_deg
        self.elevation_offset_deg = self.config.minimum_elevation_deg
        self.status = PredictorStatus.UNINITIALIZED
        self._cursor: Optional[float] = None

    @classmethod
    def from_tle(cls, line1: str, line2: str, name: str = "",
                 site: Optional[SiteLocation] = None,
                 config: Optional[PredictorConfig] = None) -> "PassPredictor":
        """Create a predictor from two element lines."""
        config = config or PredictorConfig()
        elements = parse_tle(line1, line2, name, config.validate_checksum)
        return cls(elements, site, config)

    @classmethod
    def from_tle_file(cls, tle_file_path: Union[str, Path], satellite_name: Optional[str] = None,
                      site: Optional[SiteLocation] = None,
                      config: Optional[PredictorConfig] = None) -> "PassPredictor":
        """Create a predictor for a named satellite in a TLE file."""
        config = config or PredictorConfig()
        elements = load_tle_file(tle_file_path, satellite_name, config.validate_checksum)
        logger.info(f"Loaded orbit for satellite: {elements.name or elements.satnum}")
        return cls(elements, site, config)

    # -------------------------------------------------------------------------
    # Setters
    # -------------------------------------------------------------------------

    def set_site(self, latitude_deg: float, longitude_deg: float, altitude_m: float = 0.0) -> None:
        """Set the observer location (degrees, metres)."""
        self.site = SiteLocation(latitude_deg, longitude_deg, altitude_m)
        logger.debug(f"Site set to {self.site}")

    def set_sun_elevation_threshold(self, degrees: float) -> None:
        """Set the sun elevation above which the site counts as daylight."""
        if not -90.0 <= degrees <= 90.0:
            raise ValueError(f"Sun elevation threshold {degrees} must be between -90 and 90")
        self.sun_elevation_threshold_deg = degrees

    @property
    def cursor(self) -> Optional[float]:
        """Julian date of the current local elevation maximum, or None."""
        return self._cursor

    @cursor.setter
    def cursor(self, jd: float) -> None:
        self._cursor = float(jd)
        self.status = PredictorStatus.SEEDED

    def get_prediction_point(self) -> Optional[float]:
        return self._cursor

    def set_prediction_point(self, jd: float) -> None:
        """Place the cursor on a known elevation maximum."""
        self.cursor = jd

    @property
    def revolutions_per_day(self) -> float:
        return self.record.revolutions_per_day

    # -------------------------------------------------------------------------
    # Geometry
    # -------------------------------------------------------------------------

    def _require_site(self) -> SiteLocation:
        if self.site is None:
            raise PredictorStateError("No observer site set; call set_site() first")
        return self.site

    def _position(self, jd: float) -> np.ndarray:
        return propagate_to_julian(self.record, jd).position

    def _elevation_objective(self, offset_rad: float) -> Callable[[float], float]:
        """Negated elevation shifted by the offset; zero at the threshold."""
        site = self._require_site()
        polar_motion = self.config.polar_motion

        def objective(jd: float) -> float:
            _, _, elevation = topocentric(self._position(jd), site, jd, polar_motion)
            return -elevation + offset_rad

        return objective

    def _shadow_objective(self) -> Callable[[float], float]:
        def objective(jd: float) -> float:
            return shadow_margin(self._position(jd), jd)

        return objective

    def _pass_point(self, jd: float) -> Tuple[PassPoint, np.ndarray]:
        position = self._position(jd)
        angles = look_angles(position, self._require_site(), jd, self.config.polar_motion)
        return PassPoint(jd, angles.azimuth_deg, angles.elevation_deg), position

    def _is_daylight(self, jd: float) -> bool:
        sun = sun_look_angles(self._require_site(), jd, self.config.polar_motion)
        return sun.elevation_deg > self.sun_elevation_threshold_deg

    def _classify(self, position: np.ndarray, jd: float) -> Tuple[Visibility, int, float]:
        """Visibility, illumination fraction and delta_phi at one point."""
        lit = illumination(position, sun_position(jd))
        if self._is_daylight(jd):
            return Visibility.DAYLIGHT, lit.fraction, lit.delta_phi
        if lit.fraction < FULLY_LIT:
            return Visibility.ECLIPSED, lit.fraction, lit.delta_phi
        return Visibility.LIGHTED, lit.fraction, lit.delta_phi

    def find_satellite(self, when: JulianOrDatetime) -> SatelliteSnapshot:
        """
        Locate the satellite at one instant.

        Args:
            when: Julian date or datetime (naive = UTC)

        Returns:
            SatelliteSnapshot with geodetic position, look angles and
            visibility code (-2 below horizon, -1 daylight, else 0-1000)

        Raises:
            PropagationError: If the orbit cannot be propagated to that time
        """
        jd = _to_julian(when)
        site = self._require_site()
        polar_motion = self.config.polar_motion

        position = self._position(jd)
        geodetic = earth_fixed_to_geodetic(inertial_to_earth_fixed(position, jd, polar_motion))
        angles = look_angles(position, site, jd, polar_motion)
        sun = sun_look_angles(site, jd, polar_motion)
        code = visibility_code(site, position, jd, self.sun_elevation_threshold_deg, polar_motion)

        return SatelliteSnapshot(
            julian_date=jd,
            latitude_deg=geodetic.latitude_deg,
            longitude_deg=geodetic.longitude_deg,
            altitude_km=geodetic.altitude_km,
            azimuth_deg=angles.azimuth_deg,
            elevation_deg=angles.elevation_deg,
            range_km=angles.range_km,
            visibility_code=code,
            sun_azimuth_deg=sun.azimuth_deg,
            sun_elevation_deg=sun.elevation_deg,
        )

    def find_satellite_unix(self, unix_seconds: float) -> SatelliteSnapshot:
        """find_satellite for a Unix timestamp."""
        return self.find_satellite(julian_from_unix(unix_seconds))

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def seed_cursor(self, start: JulianOrDatetime,
                    start_elevation_deg: float = 0.0) -> Optional[float]:
        """
        Place the cursor on the local elevation maximum preceding a time.

        A ladder of points is walked back from ``start`` until the middle
        one is the highest, then the maximum is refined with Brent's method.

        Args:
            start: Julian date or datetime to seed from
            start_elevation_deg: Elevation offset used for the search

        Returns:
            The cursor Julian date, or None when no maximum could be
            bracketed within the configured number of rungs
        """
        start_jd = _to_julian(start)
        self.elevation_offset_deg = start_elevation_deg
        objective = self._elevation_objective(start_elevation_deg * DEG2RAD)
        period = 1.0 / self.revolutions_per_day

        try:
            low, mid, high = bracket_minimum(
                objective, start_jd, -SEED_STEP * period, -SEED_FIRST_STEP * period,
                self.config.seed_max_steps,
            )
        except OptimizerExhausted as e:
            logger.warning(f"Could not seed prediction cursor: {e}")
            self.status = PredictorStatus.EXHAUSTED
            return None

        result = brent_minimize(objective, (low, mid, high), self.config.tolerance_days)
        self.cursor = result.x
        logger.debug(f"Cursor seeded at JD {result.x:.6f}")
        return result.x

    def seed_cursor_unix(self, unix_seconds: float,
                         start_elevation_deg: float = 0.0) -> Optional[float]:
        """seed_cursor for a Unix timestamp."""
        return self.seed_cursor(julian_from_unix(unix_seconds), start_elevation_deg)

    def next_pass(
        self,
        max_iterations: Optional[int] = None,
        direction: SearchDirection = SearchDirection.FORWARD,
        minimum_elevation_deg: Optional[float] = None,
    ) -> Optional[PassEvent]:
        """
        Find the next pass above a minimum elevation.

        The cursor is stepped one orbital period at a time in ``direction``
        and re-centred on the local maximum within a quarter period. The
        first maximum at or above the minimum elevation becomes the pass;
        its rise and set times are where the elevation crosses the minimum.

        Args:
            max_iterations: Number of orbits to step before giving up
                (configured default when omitted)
            direction: Search forward or backward in time
            minimum_elevation_deg: Elevation threshold; the configured default
                when omitted

        Returns:
            PassEvent, or None when no qualifying pass was found. The cursor
            is left on the last maximum examined either way.

        Raises:
            PredictorStateError: If the cursor has not been seeded
            PropagationError: If the orbit cannot be propagated
        """
        if self._cursor is None:
            raise PredictorStateError("Prediction cursor not seeded; call seed_cursor() first")
        if isinstance(direction, str):
            direction = SearchDirection.from_string(direction)
        if max_iterations is None:
            max_iterations = self.config.search_iterations
        if minimum_elevation_deg is None:
            minimum_elevation_deg = self.config.minimum_elevation_deg
        self.elevation_offset_deg = minimum_elevation_deg

        tolerance = self.config.tolerance_days
        objective = self._elevation_objective(minimum_elevation_deg * DEG2RAD)
        period = 1.0 / self.revolutions_per_day
        window = MAXIMUM_WINDOW * period
        jump = direction.sign * period

        self.status = PredictorStatus.SEARCHING
        found = False
        for iteration in range(max_iterations):
            guess = self._cursor + jump
            result = brent_minimize(objective, (guess - window, guess, guess + window), tolerance)
            self._cursor = result.x
            # -fun is the maximum elevation above the threshold
            if -result.fun >= 0.0:
                found = True
                break

        if not found:
            logger.info(
                f"No pass above {minimum_elevation_deg:.1f} deg within {max_iterations} orbits"
            )
            self.status = PredictorStatus.EXHAUSTED
            return None

        logger.debug(f"Qualifying maximum after {iteration + 1} orbit(s) at JD {self._cursor:.6f}")
        try:
            event = self._build_pass(objective, minimum_elevation_deg, period, tolerance)
        except OptimizerExhausted as e:
            logger.info(f"Pass around JD {self._cursor:.6f} rejected: {e}")
            self.status = PredictorStatus.EXHAUSTED
            return None

        self.status = PredictorStatus.FOUND
        return event

    def _build_pass(self, objective: Callable[[float], float], minimum_elevation_deg: float,
                    period: float, tolerance: float) -> PassEvent:
        jd_max = self._cursor
        reach = CROSSING_WINDOW * period

        jd_start = brent_root(objective, jd_max, jd_max - reach, tolerance)
        if jd_start is None:
            raise OptimizerExhausted("no rising crossing before the maximum")
        jd_stop = brent_root(objective, jd_max, jd_max + reach, tolerance)
        if jd_stop is None:
            raise OptimizerExhausted("no setting crossing after the maximum")

        maximum, max_position = self._pass_point(jd_max)
        visibility_max, _, _ = self._classify(max_position, jd_max)

        start, start_position = self._pass_point(jd_start)
        visibility_start, start_fraction, start_phi = self._classify(start_position, jd_start)

        stop, stop_position = self._pass_point(jd_stop)
        visibility_stop, stop_fraction, stop_phi = self._classify(stop_position, jd_stop)

        if visibility_start is Visibility.DAYLIGHT and visibility_stop is Visibility.DAYLIGHT:
            visibility = Visibility.DAYLIGHT
        elif start_fraction + stop_fraction < FULLY_LIT:
            visibility = Visibility.ECLIPSED
        else:
            visibility = Visibility.LIGHTED

        transit = None
        visibility_transit = None
        transit_direction = ShadowTransit.NONE
        if sgn(start_phi) != sgn(stop_phi):
            if sgn(start_phi) > sgn(stop_phi):
                transit_direction = ShadowTransit.ENTER
            else:
                transit_direction = ShadowTransit.LEAVE
            jd_transit = brent_root(self._shadow_objective(), jd_start, jd_stop, tolerance)
            if jd_transit is None:
                raise OptimizerExhausted("shadow boundary not located")
            transit, _ = self._pass_point(jd_transit)
            # on the shadow boundary the satellite is never fully lit
            if self._is_daylight(jd_transit):
                visibility_transit = Visibility.DAYLIGHT
            else:
                visibility_transit = Visibility.ECLIPSED

        return PassEvent(
            start=start,
            maximum=maximum,
            stop=stop,
            minimum_elevation_deg=minimum_elevation_deg,
            visibility_start=visibility_start,
            visibility_max=visibility_max,
            visibility_stop=visibility_stop,
            visibility=visibility,
            transit_direction=transit_direction,
            transit=transit,
            visibility_transit=visibility_transit,
        )

    def iter_passes(
        self,
        count: int,
        direction: SearchDirection = SearchDirection.FORWARD,
        minimum_elevation_deg: Optional[float] = None,
        max_iterations: Optional[int] = None,
    ) -> Iterator[PassEvent]:
        """Yield up to ``count`` successive passes, stopping at the first miss."""
        for _ in range(count):
            event = self.next_pass(max_iterations, direction, minimum_elevation_deg)
            if event is None:
                return
            yield event
