"""Unit conversion and text escaping helpers for RTF output.

Measurements may be given as integers (already expressed in the target
unit) or as strings such as ``"1.5in"``, ``"3cm"`` or ``"12pt"``::

    value2twips("1.5in")   # 2160
    value2halfpt("11pt")   # 22
    value2hunpercent("50%")  # 5000
"""

from __future__ import annotations

import math
import re
from typing import Any, Optional

from rtfdoc.errors import FormatError

TWIPS_PER_POINT = 20
QUARTER_POINTS_PER_POINT = 4
HALF_POINTS_PER_POINT = 2
EMU_PER_POINT = 12700
GEOMETRY_FRACTION = 65536

# Point equivalents of the supported unit suffixes ("" means bare points).
POINTS_PER_UNIT = {
    "in": 72.0,
    "cm": 28.3464567,
    "mm": 2.83464567,
    "pt": 1.0,
    "twip": 1.0 / TWIPS_PER_POINT,
    "": 1.0,
}

_MEASUREMENT = re.compile(r"^\s*([+\-]?(?:\d*\.)?\d+)\s*([a-z%]*)\s*$", re.IGNORECASE)


def round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def parse_string_with_units(value: str) -> tuple[float, str]:
    """Split ``"<number><unit>"`` into its number and lower-cased unit.

    Raises:
        FormatError: if *value* is not a number with an optional suffix.
    """
    match = _MEASUREMENT.match(str(value))
    if match is None:
        raise FormatError(f"Invalid measurement {value!r}.")
    return float(match.group(1)), match.group(2).lower()


def value2points(value: str) -> float:
    """Convert a measurement string to typographic points."""
    number, unit = parse_string_with_units(value)
    try:
        factor = POINTS_PER_UNIT[unit]
    except KeyError:
        raise FormatError(f"Unsupported unit {unit!r} in measurement {value!r}.") from None
    return number * factor


def _scaled(value: Any, per_point: int) -> Optional[int]:
    if value is None:
        return None
    if _is_integer(value):
        return value
    if isinstance(value, float):
        return round_half_away(value)
    if isinstance(value, str):
        return round_half_away(value2points(value) * per_point)
    raise FormatError(f"Cannot convert {value!r} to a measurement.")


def value2twips(value: Any) -> Optional[int]:
    """Twentieths of a point."""
    return _scaled(value, TWIPS_PER_POINT)


def value2quarterpt(value: Any) -> Optional[int]:
    return _scaled(value, QUARTER_POINTS_PER_POINT)


def value2halfpt(value: Any) -> Optional[int]:
    return _scaled(value, HALF_POINTS_PER_POINT)


def value2emu(value: Any) -> Optional[int]:
    """English Metric Units (12700 per point)."""
    return _scaled(value, EMU_PER_POINT)


def value2hunpercent(value: Any) -> Optional[int]:
    """Hundredths of a percent.

    ``"50%"`` becomes 5000; bare numbers (and integers) are taken to be
    already scaled.
    """
    if value is None:
        return None
    if _is_integer(value):
        return value
    number, unit = parse_string_with_units(value)
    if unit == "%":
        return round_half_away(number * 100)
    if unit == "":
        return round_half_away(number)
    raise FormatError(f"Unsupported unit {unit!r} in percentage {value!r}.")


def value2geomfrac(value: Any) -> Optional[int]:
    """Fixed-point fraction used by shape properties (x 65536)."""
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise FormatError(f"Invalid fractional value {value!r}.") from None
    return round_half_away(number * GEOMETRY_FRACTION)


def value2geombool(value: Any) -> Optional[int]:
    if value is None:
        return None
    if _is_integer(value):
        return value
    return 1 if value else 0


# ---------------------------------------------------------------------------
# Text escaping
# ---------------------------------------------------------------------------

_RESERVED = frozenset("\\{}")


def rtf_escape(text: str) -> str:
    """Escape ``\\``, ``{`` and ``}`` and encode non-ASCII characters.

    Characters above 0x7F become ``\\uN\\'3f`` per UTF-16 code unit, with
    ``N`` a signed 16-bit value as RTF readers expect.
    """
    parts: list[str] = []
    for char in text:
        if char in _RESERVED:
            parts.append("\\" + char)
        elif ord(char) < 0x80:
            parts.append(char)
        else:
            encoded = char.encode("utf-16-le")
            for offset in range(0, len(encoded), 2):
                unit = int.from_bytes(encoded[offset:offset + 2], "little")
                if unit > 0x7FFF:
                    unit -= 0x10000
                parts.append(f"\\u{unit}\\'3f")
    return "".join(parts)
