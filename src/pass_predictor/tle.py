"""
Two-line element set decoding.

Decodes the fixed-width TLE text format into OrbitalElements and validates
the per-line modulo-10 checksum.
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .exceptions import TLEFormatError
from .propagator import OrbitalElements
from .timeutils import jday

logger = logging.getLogger(__name__)

TLE_LINE_LENGTH = 69


def compute_checksum(line: str) -> int:
    """
    Compute the modulo-10 checksum of a TLE line.

    Digits count their value, a minus sign counts one, everything else
    counts zero. The checksum column itself is excluded.

    Args:
        line: TLE line (at least 68 characters are used)

    Returns:
        Checksum digit 0-9
    """
    total = 0
    for char in line[:TLE_LINE_LENGTH - 1]:
        if char.isdigit():
            total += int(char)
        elif char == "-":
            total += 1
    return total % 10


def verify_checksum(line: str) -> bool:
    """Check the last column of a TLE line against its computed checksum."""
    line = line.rstrip()
    if len(line) < TLE_LINE_LENGTH or not line[TLE_LINE_LENGTH - 1].isdigit():
        return False
    return compute_checksum(line) == int(line[TLE_LINE_LENGTH - 1])


def _implied_decimal(field: str) -> float:
    """Decode fields like ' 12345-3' meaning 0.12345e-3."""
    text = field.strip()
    if not text:
        return 0.0
    sign = 1.0
    if text[0] in "+-":
        if text[0] == "-":
            sign = -1.0
        text = text[1:]
    mantissa, exponent = text[:-2], text[-2:]
    return sign * float(f"0.{mantissa.strip()}") * 10.0 ** int(exponent)


def _number(field: str, label: str, line_number: int) -> float:
    try:
        return float(field)
    except ValueError:
        raise TLEFormatError(f"Line {line_number}: invalid {label} field {field!r}")


def parse_tle(line1: str, line2: str, name: str = "",
              validate_checksum: bool = True) -> OrbitalElements:
    """
    Decode a two-line element set.

    Args:
        line1: First element line
        line2: Second element line
        name: Optional satellite name (title line)
        validate_checksum: Reject lines whose checksum digit does not match

    Returns:
        OrbitalElements

    Raises:
        TLEFormatError: If either line is malformed
    """
    line1 = line1.rstrip()
    line2 = line2.rstrip()

    for number, line in ((1, line1), (2, line2)):
        if len(line) < TLE_LINE_LENGTH - 1:
            raise TLEFormatError(
                f"Line {number} is {len(line)} characters, expected {TLE_LINE_LENGTH}"
            )
        if line[0] != str(number):
            raise TLEFormatError(f"Line {number} does not start with '{number}'")
        if validate_checksum and not verify_checksum(line):
            raise TLEFormatError(
                f"Line {number} checksum mismatch: expected {compute_checksum(line)}, "
                f"found {line[TLE_LINE_LENGTH - 1:TLE_LINE_LENGTH] or 'nothing'}"
            )

    try:
        satnum = int(line1[2:7])
        satnum2 = int(line2[2:7])
    except ValueError:
        raise TLEFormatError(f"Invalid satellite number {line1[2:7]!r}")
    if satnum != satnum2:
        raise TLEFormatError(
            f"Satellite number mismatch between lines: {satnum} != {satnum2}"
        )

    two_digit_year = int(_number(line1[18:20], "epoch year", 1))
    year = 2000 + two_digit_year if two_digit_year < 57 else 1900 + two_digit_year
    epoch_days = _number(line1[20:32], "epoch day", 1)
    epoch_jd = jday(year, 1, 1) + epoch_days - 1.0

    try:
        ndot = _number(line1[33:43], "first derivative", 1)
        nddot = _implied_decimal(line1[44:52])
        bstar = _implied_decimal(line1[53:61])
    except ValueError as e:
        raise TLEFormatError(f"Line 1: invalid drag terms: {e}")

    element_field = line1[64:68].strip()
    revolution_field = line2[63:68].strip()

    elements = OrbitalElements(
        satnum=satnum,
        epoch_jd=epoch_jd,
        mean_motion=_number(line2[52:63], "mean motion", 2),
        eccentricity=_number("0." + line2[26:33].strip(), "eccentricity", 2),
        inclination=_number(line2[8:16], "inclination", 2),
        raan=_number(line2[17:25], "right ascension", 2),
        arg_perigee=_number(line2[34:42], "argument of perigee", 2),
        mean_anomaly=_number(line2[43:51], "mean anomaly", 2),
        bstar=bstar,
        ndot=ndot,
        nddot=nddot,
        name=name.strip(),
        classification=line1[7],
        intl_designator=line1[9:17].strip(),
        element_number=int(element_field) if element_field.isdigit() else 0,
        revolution_number=int(revolution_field) if revolution_field.isdigit() else 0,
    )
    logger.debug(f"Decoded TLE for satellite {satnum} ({elements.name or 'unnamed'})")
    return elements


def read_tle_sets(tle_file_path: Union[str, Path]) -> List[Tuple[str, str, str]]:
    """
    Read every element set from a TLE file.

    Accepts both 3-line (title + two lines) and bare 2-line sets.

    Returns:
        List of (name, line1, line2) tuples; name is empty for 2-line sets
    """
    tle_path = Path(tle_file_path)
    if not tle_path.exists():
        raise FileNotFoundError(f"TLE file not found: {tle_file_path}")

    with open(tle_path, "r") as f:
        lines = [line.rstrip() for line in f.readlines() if line.strip()]

    sets = []
    name = ""
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith("1 ") and i + 1 < len(lines) and lines[i + 1].startswith("2 "):
            sets.append((name, line, lines[i + 1]))
            name = ""
            i += 2
            continue
        name = line[2:] if line.startswith("0 ") else line
        i += 1
    return sets


def load_tle_file(tle_file_path: Union[str, Path], satellite_name: Optional[str] = None,
                  validate_checksum: bool = True) -> OrbitalElements:
    """
    Load one satellite from a TLE file.

    Args:
        tle_file_path: Path to the TLE file
        satellite_name: Name (case-insensitive substring) or catalog number;
            the first set in the file when omitted
        validate_checksum: Reject lines whose checksum digit does not match

    Returns:
        OrbitalElements of the matching set

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the satellite is not in the file
    """
    sets = read_tle_sets(tle_file_path)
    if satellite_name is None and sets:
        name, line1, line2 = sets[0]
        return parse_tle(line1, line2, name, validate_checksum)

    if satellite_name is not None:
        query = satellite_name.strip()
        # an exact catalog number wins over a name that merely contains it
        if query.isdigit():
            for name, line1, line2 in sets:
                catalog = line1[2:7].strip()
                if catalog.isdigit() and int(catalog) == int(query):
                    return parse_tle(line1, line2, name, validate_checksum)
        for name, line1, line2 in sets:
            if query.upper() in name.upper():
                return parse_tle(line1, line2, name, validate_checksum)

    logger.error(f"Satellite '{satellite_name}' not found in {tle_file_path}")
    raise ValueError(f"Satellite '{satellite_name}' not found in TLE file")
