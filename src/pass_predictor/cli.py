"""
Command-line interface for the pass predictor.

This module provides a CLI for predicting satellite passes, locating a
satellite at a given time and checking TLE files from the command line.
"""

from typing import Optional
import logging

import click
from tabulate import tabulate

from .config import PredictorConfig, load_config
from .coordinates import SiteLocation
from .predictor import PassEvent, PassPredictor, SearchDirection
from .tle import compute_checksum, read_tle_sets, verify_checksum
from .utils import (
    format_coordinates, format_duration, format_visibility_code,
    get_current_utc, parse_datetime, setup_logging
)

logger = logging.getLogger(__name__)


def _resolve_site(config: PredictorConfig, lat: Optional[float], lon: Optional[float],
                  alt: float) -> SiteLocation:
    if lat is not None and lon is not None:
        return SiteLocation(lat, lon, alt)
    if lat is not None or lon is not None:
        raise click.UsageError("--lat and --lon must be given together")
    if config.site is None:
        raise click.UsageError("No site given; use --lat/--lon or set 'site' in the config file")
    return config.site


def _pass_row(index: int, event: PassEvent, tz_hours: int, dst: bool) -> list:
    def local(point):
        return point.local_datetime(tz_hours, dst).strftime("%Y-%m-%d %H:%M:%S")

    transit = "-"
    if event.transit is not None:
        transit = f"{event.transit_direction.value} {local(event.transit)[11:]}"
    return [
        index,
        local(event.start),
        f"{event.start.azimuth_deg:.0f}°",
        local(event.maximum)[11:],
        f"{event.maximum.azimuth_deg:.0f}° / {event.maximum.elevation_deg:.1f}°",
        local(event.stop)[11:],
        f"{event.stop.azimuth_deg:.0f}°",
        format_duration(event.duration_minutes * 60.0),
        event.visibility.value,
        transit,
    ]


@click.group()
@click.option('--log-level', default='INFO',
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              help='Set logging level')
@click.option('--log-file', type=click.Path(), help='Log file path')
def main(log_level: str, log_file: Optional[str]) -> None:
    """Satellite Pass Predictor - Find when satellites rise over a ground site."""
    setup_logging(log_level, log_file)
    logger.info("Starting Pass Predictor CLI")


@main.command()
@click.option('--tle', required=True, type=click.Path(exists=True),
              help='Path to TLE file')
@click.option('--satellite', help='Satellite name or catalog number (default: first in file)')
@click.option('--lat', type=float, help='Site latitude in degrees')
@click.option('--lon', type=float, help='Site longitude in degrees (east positive)')
@click.option('--alt', default=0.0, type=float, help='Site altitude in metres (default: 0)')
@click.option('--start-time', type=str,
              help='Start time (YYYY-MM-DD HH:MM:SS UTC, default: now)')
@click.option('--count', default=5, type=int, help='Number of passes (default: 5)')
@click.option('--min-elevation', type=float,
              help='Minimum elevation in degrees (default: from config)')
@click.option('--iterations', type=int,
              help='Orbits to search per pass (default: from config)')
@click.option('--backward', is_flag=True, help='Search backward in time')
@click.option('--timezone', 'tz_hours', type=int,
              help='Timezone offset in hours for displayed times (default: from config)')
@click.option('--dst/--no-dst', default=None,
              help='Apply European summer time to displayed times')
@click.option('--config', 'config_path', type=click.Path(exists=True),
              help='Predictor config file')
def passes(
    tle: str,
    satellite: Optional[str],
    lat: Optional[float],
    lon: Optional[float],
    alt: float,
    start_time: Optional[str],
    count: int,
    min_elevation: Optional[float],
    iterations: Optional[int],
    backward: bool,
    tz_hours: Optional[int],
    dst: Optional[bool],
    config_path: Optional[str]
) -> None:
    """Predict upcoming passes of a satellite over a site.

    Example:
    passes --tle stations.tle --satellite ISS --lat 52.0 --lon 4.4 --min-elevation 10
    """

    try:
        config = load_config(config_path)
        site = _resolve_site(config, lat, lon, alt)
        start_dt = parse_datetime(start_time) if start_time else get_current_utc()
        if tz_hours is None:
            tz_hours = config.timezone_hours
        if dst is None:
            dst = config.daylight_saving
        if min_elevation is None:
            min_elevation = config.minimum_elevation_deg

        predictor = PassPredictor.from_tle_file(tle, satellite, site, config)
        click.echo(f"Satellite: {predictor.record.satnum} over "
                   f"{format_coordinates(site.latitude_deg, site.longitude_deg)}")

        if predictor.seed_cursor(start_dt) is None:
            click.echo("Could not find an elevation maximum before the start time", err=True)
            return

        direction = SearchDirection.BACKWARD if backward else SearchDirection.FORWARD
        events = list(predictor.iter_passes(count, direction, min_elevation, iterations))

        if not events:
            click.echo(f"No passes above {min_elevation:.1f}° found")
            return

        headers = ["#", "Start", "Az", "Max", "Az / El", "End", "Az",
                   "Duration", "Visibility", "Shadow"]
        table = [_pass_row(i + 1, event, tz_hours, dst) for i, event in enumerate(events)]
        click.echo(f"\nTimes in UTC{tz_hours:+d}{' (DST)' if dst else ''}")
        click.echo(tabulate(table, headers=headers, tablefmt="grid"))

        if len(events) < count:
            click.echo(f"Only {len(events)} of {count} passes found within the search limit")

    except click.UsageError:
        raise
    except Exception as e:
        logger.error(f"Pass prediction failed: {e}")
        click.echo(f"Error: {e}", err=True)


@main.command()
@click.option('--tle', required=True, type=click.Path(exists=True),
              help='Path to TLE file')
@click.option('--satellite', help='Satellite name or catalog number (default: first in file)')
@click.option('--lat', type=float, help='Site latitude in degrees')
@click.option('--lon', type=float, help='Site longitude in degrees (east positive)')
@click.option('--alt', default=0.0, type=float, help='Site altitude in metres (default: 0)')
@click.option('--time', 'time_str', type=str,
              help='Time (YYYY-MM-DD HH:MM:SS UTC, default: now)')
@click.option('--config', 'config_path', type=click.Path(exists=True),
              help='Predictor config file')
def position(
    tle: str,
    satellite: Optional[str],
    lat: Optional[float],
    lon: Optional[float],
    alt: float,
    time_str: Optional[str],
    config_path: Optional[str]
) -> None:
    """Show where a satellite is at one instant."""

    try:
        config = load_config(config_path)
        site = _resolve_site(config, lat, lon, alt)
        when = parse_datetime(time_str) if time_str else get_current_utc()

        predictor = PassPredictor.from_tle_file(tle, satellite, site, config)
        snapshot = predictor.find_satellite(when)

        table = [
            ["Time (UTC)", snapshot.datetime.strftime("%Y-%m-%d %H:%M:%S")],
            ["Sub-satellite point",
             format_coordinates(snapshot.latitude_deg, snapshot.longitude_deg)],
            ["Altitude", f"{snapshot.altitude_km:.1f} km"],
            ["Azimuth", f"{snapshot.azimuth_deg:.1f}°"],
            ["Elevation", f"{snapshot.elevation_deg:.1f}°"],
            ["Range", f"{snapshot.range_km:.1f} km"],
            ["Visibility", format_visibility_code(snapshot.visibility_code)],
            ["Sun az / el", f"{snapshot.sun_azimuth_deg:.1f}° / {snapshot.sun_elevation_deg:.1f}°"],
        ]
        click.echo(tabulate(table, tablefmt="grid"))

    except click.UsageError:
        raise
    except Exception as e:
        logger.error(f"Position calculation failed: {e}")
        click.echo(f"Error: {e}", err=True)


@main.command(name="check-tle")
@click.argument('tle_file', type=click.Path(exists=True))
def check_tle(tle_file: str) -> None:
    """Verify the checksum of every element line in a TLE file."""

    try:
        sets = read_tle_sets(tle_file)
        if not sets:
            click.echo(f"No element sets found in {tle_file}")
            return

        table = []
        failures = 0
        for name, line1, line2 in sets:
            for line in (line1, line2):
                ok = verify_checksum(line)
                if not ok:
                    failures += 1
                given = line[68] if len(line) >= 69 else "-"
                table.append([name or line1[2:7], line[0], given,
                              compute_checksum(line), "OK" if ok else "FAIL"])

        click.echo(tabulate(table, headers=["Satellite", "Line", "Given", "Computed", "Status"],
                            tablefmt="grid"))
        click.echo(f"\n{len(sets)} element sets, {failures} bad lines")

    except Exception as e:
        logger.error(f"TLE check failed: {e}")
        click.echo(f"Error: {e}", err=True)


if __name__ == '__main__':
    main()
