"""Paper size and page margin values, both measured in twips."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from rtfdoc.errors import FormatError, SchemaError
from rtfdoc.utilities import value2twips


def _split_measurements(value: str) -> list[int]:
    return [value2twips(part.strip()) for part in value.split(",")]


@dataclass(frozen=True)
class Size:
    """Paper dimensions.

    Usage::

        Size.coerce("A4")
        Size.coerce("8.5in, 11in")
        Size.coerce({"width": "10cm"})
    """

    width: int = 12247
    height: int = 15819

    DICTIONARY = {
        "A0": (47685, 67416),
        "A1": (33680, 47685),
        "A2": (23814, 33680),
        "A3": (16840, 23814),
        "A4": (11907, 16840),
        "A5": (8392, 11907),
        "LETTER": (12247, 15819),
        "LEGAL": (12247, 20185),
        "EXECUTIVE": (10773, 14402),
        "LEDGER_TABLOID": (15819, 24494),
    }

    @classmethod
    def from_string(cls, value: str) -> Size:
        """Parse a named paper size or a ``"width, height"`` pair."""
        if value in cls.DICTIONARY:
            return cls(*cls.DICTIONARY[value])
        parts = _split_measurements(value)
        if len(parts) != 2:
            raise FormatError(f"Unable to parse size from {value!r}.")
        return cls(*parts)

    @classmethod
    def coerce(cls, value: Any) -> Size:
        if value is None:
            return cls()
        if isinstance(value, Size):
            return value
        if isinstance(value, str):
            return cls.from_string(value)
        if isinstance(value, Mapping):
            return replace(
                cls(),
                **{key: value2twips(value[key]) for key in ("width", "height") if key in value},
            )
        raise SchemaError(f"Invalid page size {value!r}.")


@dataclass(frozen=True)
class Margin:
    """Page (or text box) margins; defaults to one inch on every side."""

    left: int = 1440
    right: int = 1440
    top: int = 1440
    bottom: int = 1440

    @classmethod
    def from_string(cls, value: str) -> Margin:
        """Parse ``"all"``, ``"left-right, top-bottom"`` or ``"l, r, t, b"``."""
        values = _split_measurements(value)
        if len(values) == 1:
            return cls(*values * 4)
        if len(values) == 2:
            horizontal, vertical = values
            return cls(horizontal, horizontal, vertical, vertical)
        if len(values) == 4:
            return cls(*values)
        raise FormatError(f"Invalid margin {value!r}; expected 1, 2 or 4 values.")

    @classmethod
    def coerce(cls, value: Any) -> Margin:
        if value is None:
            return cls()
        if isinstance(value, Margin):
            return value
        if isinstance(value, str):
            return cls.from_string(value)
        if isinstance(value, Mapping):
            sides = ("left", "right", "top", "bottom")
            return replace(cls(), **{key: value2twips(value[key]) for key in sides if key in value})
        raise SchemaError(f"Cannot create a margin from {value!r}.")
