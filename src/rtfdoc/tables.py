"""Colour and font values and the deduplicating tables that index them.

Content nodes never embed a font or colour directly; they refer to an index
in the owning document's :class:`FontTable` or :class:`ColourTable`.
Inserting the same value twice returns the same index::

    colours = ColourTable()
    colours.insert(Colour.from_string("#ff0000"))  # 1
    colours.insert(Colour(255, 0, 0))              # 1 again
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Generic, Iterator, Optional, TypeVar

from rtfdoc.errors import FormatError, SchemaError
from rtfdoc.utilities import rtf_escape


# ---------------------------------------------------------------------------
# Values
# ---------------------------------------------------------------------------

_HEX_COLOUR = re.compile(r"^#([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})$", re.IGNORECASE)


@dataclass(frozen=True)
class Colour:
    """An RGB colour with 8-bit channels."""

    red: int
    green: int
    blue: int

    def __post_init__(self) -> None:
        for channel in (self.red, self.green, self.blue):
            if not isinstance(channel, int) or not 0 <= channel <= 255:
                raise SchemaError(f"Invalid colour channel {channel!r} in {self!r}.")

    @classmethod
    def from_string(cls, value: str) -> Colour:
        """Parse a ``#RRGGBB`` string."""
        match = _HEX_COLOUR.match(str(value).strip())
        if match is None:
            raise FormatError(f"Invalid colour {value!r}; expected '#RRGGBB'.")
        red, green, blue = (int(part, 16) for part in match.groups())
        return cls(red, green, blue)

    def to_decimal(self, reverse_bytes: bool = False) -> int:
        """Pack the channels into one integer (BGR order when *reverse_bytes*)."""
        if reverse_bytes:
            return (self.blue << 16) | (self.green << 8) | self.red
        return (self.red << 16) | (self.green << 8) | self.blue

    def to_rtf(self) -> str:
        return f"\\red{self.red}\\green{self.green}\\blue{self.blue};"


@dataclass(frozen=True)
class Font:
    """A font face identified by its family class and name."""

    FAMILIES = {
        "NIL": "fnil",
        "ROMAN": "froman",
        "SWISS": "fswiss",
        "MODERN": "fmodern",
        "SCRIPT": "fscript",
        "DECORATIVE": "fdecor",
        "TECHNICAL": "ftech",
        "BIDIRECTIONAL": "fbidi",
    }

    family: str
    name: str
    pitch: Optional[int] = None

    def __post_init__(self) -> None:
        if self.family not in self.FAMILIES:
            raise SchemaError(
                f"Unknown font family {self.family!r}. Choose from: {', '.join(self.FAMILIES)}"
            )

    @classmethod
    def from_string(cls, value: str) -> Font:
        """Parse a ``"FAMILY:Name"`` string such as ``"SWISS:Helvetica"``."""
        family, sep, name = str(value).partition(":")
        if not sep or not family.strip() or not name.strip():
            raise FormatError(f"Invalid font {value!r}; expected 'FAMILY:Name'.")
        return cls(family.strip().upper(), name.strip())

    def to_rtf(self) -> str:
        text = f"\\{self.FAMILIES[self.family]}"
        if self.pitch is not None:
            text += f"\\fprq{self.pitch}"
        return f"{text} {rtf_escape(self.name)};"


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

T = TypeVar("T", Colour, Font)


class _IndexedTable(Generic[T]):
    """Ordered, deduplicating registry; indices start at ``OFFSET``."""

    OFFSET = 0

    def __init__(self) -> None:
        self._entries: list[T] = []
        self._positions: dict[T, int] = {}

    def insert(self, value: T) -> int:
        """Add *value* if new and return its index."""
        position = self._positions.get(value)
        if position is None:
            position = len(self._entries)
            self._entries.append(value)
            self._positions[value] = position
        return position + self.OFFSET

    def index(self, value: T) -> Optional[int]:
        """Return the index of *value*, or ``None`` when it was never inserted."""
        position = self._positions.get(value)
        return None if position is None else position + self.OFFSET

    def __contains__(self, value: object) -> bool:
        return value in self._positions

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[T]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> T:
        return self._entries[index - self.OFFSET]


class ColourTable(_IndexedTable[Colour]):
    """Colour table; index 0 is reserved for the reader's automatic colour."""

    OFFSET = 1

    def to_rtf(self, indent: int = 0) -> str:
        prefix = " " * indent
        lines = [f"{prefix}{{\\colortbl", f"{prefix};"]
        lines.extend(f"{prefix}{colour.to_rtf()}" for colour in self._entries)
        lines.append(f"{prefix}}}")
        return "\n".join(lines)


class FontTable(_IndexedTable[Font]):
    """Font table; the default font always occupies index 0."""

    def __init__(self, default_font: Font) -> None:
        super().__init__()
        self.insert(default_font)

    @property
    def default(self) -> Font:
        return self._entries[0]

    def to_rtf(self, indent: int = 0) -> str:
        prefix = " " * indent
        lines = [f"{prefix}{{\\fonttbl"]
        lines.extend(
            f"{prefix}{{\\f{index}{font.to_rtf()}}}" for index, font in enumerate(self._entries)
        )
        lines.append(f"{prefix}}}")
        return "\n".join(lines)
