"""
Utility functions for the pass predictor.

This module provides logging setup and the parsing and formatting helpers
used by the command-line interface.
"""

from datetime import datetime, timezone
from typing import Optional, Tuple
import logging
import os

from .sunlight import FULLY_LIT, VISIBILITY_BELOW_HORIZON, VISIBILITY_DAYLIGHT

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV_VAR = "PASS_PREDICTOR_LOG_LEVEL"


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Set up logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path

    Environment Variables:
        PASS_PREDICTOR_LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_level = os.environ.get(LOG_LEVEL_ENV_VAR)
    if env_level:
        level = env_level
    log_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    logger.info(f"Logging configured at {level} level")


def parse_datetime(date_string: str) -> datetime:
    """
    Parse datetime string in various formats.

    Offsets are honoured; strings without one are taken as UTC.

    Args:
        date_string: Date string to parse

    Returns:
        Parsed datetime object (UTC, timezone-naive)

    Raises:
        ValueError: If date string cannot be parsed
    """
    formats = [
        "%Y-%m-%d %H:%M:%S",
        "%Y-%m-%d %H:%M",
        "%Y-%m-%dT%H:%M:%S",
        "%Y-%m-%dT%H:%M:%SZ",
        "%Y-%m-%dT%H:%M:%S.%fZ",
        "%Y-%m-%dT%H:%M:%S%z",
        "%Y-%m-%d",
    ]

    for fmt in formats:
        try:
            dt = datetime.strptime(date_string, fmt)
        except ValueError:
            continue
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc).replace(tzinfo=None)

    raise ValueError(f"Could not parse datetime string: {date_string}")


def get_current_utc() -> datetime:
    """Current UTC time (timezone-naive)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def degrees_to_dms(degrees: float) -> Tuple[int, int, float]:
    """
    Convert decimal degrees to degrees, minutes, seconds.

    Args:
        degrees: Decimal degrees

    Returns:
        Tuple of (degrees, minutes, seconds) of the absolute value
    """
    abs_degrees = abs(degrees)
    d = int(abs_degrees)
    m = int((abs_degrees - d) * 60)
    s = ((abs_degrees - d) * 60 - m) * 60

    return (d, m, s)


def format_coordinates(latitude: float, longitude: float, format: str = "decimal") -> str:
    """
    Format coordinates for display.

    Args:
        latitude: Latitude in degrees
        longitude: Longitude in degrees
        format: Format type ("decimal" or "dms")

    Returns:
        Formatted coordinate string
    """
    if format == "decimal":
        return f"{latitude:.6f}°, {longitude:.6f}°"
    elif format == "dms":
        lat_d, lat_m, lat_s = degrees_to_dms(latitude)
        lon_d, lon_m, lon_s = degrees_to_dms(longitude)

        lat_dir = "N" if latitude >= 0 else "S"
        lon_dir = "E" if longitude >= 0 else "W"

        return (f"{lat_d}°{lat_m}'{lat_s:.1f}\"{lat_dir}, "
                f"{lon_d}°{lon_m}'{lon_s:.1f}\"{lon_dir}")
    else:
        raise ValueError(f"Unknown format: {format}")


def format_duration(seconds: float) -> str:
    """
    Format duration in seconds to human-readable string.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string
    """
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        minutes = seconds / 60
        return f"{minutes:.1f}m"
    else:
        hours = seconds / 3600
        return f"{hours:.1f}h"


def format_visibility_code(code: int) -> str:
    """Describe a satellite visibility code (-2, -1 or 0-1000)."""
    if code == VISIBILITY_BELOW_HORIZON:
        return "below horizon"
    if code == VISIBILITY_DAYLIGHT:
        return "daylight"
    if code == 0:
        return "eclipsed"
    if code >= FULLY_LIT:
        return "sunlit"
    return f"penumbra ({100.0 * code / FULLY_LIT:.1f}% lit)"
