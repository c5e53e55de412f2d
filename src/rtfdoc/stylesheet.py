"""Stylesheet: named styles keyed by caller-chosen IDs.

Styles are declared first and committed later. ``next_style`` and
``base_style`` may name styles that are only added afterwards; the
references are resolved to handles by :meth:`Stylesheet.commit`, which
:meth:`Stylesheet.to_rtf` calls before rendering.

Usage::

    sheet = Stylesheet(document, base_style_handle=1)
    sheet.add_style({"id": "TITLE", "type": "paragraph", "bold": True,
                     "font_size": 36, "next_style": "BODY"})
    sheet.add_style({"id": "BODY", "type": "paragraph", "default": True})
    resolved = sheet.commit()
    resolved.handle_for("TITLE")  # 1
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional, Union

from rtfdoc.errors import FormatError, SchemaError
from rtfdoc.logger import get_logger
from rtfdoc.styles import STYLE_TYPES, Style

logger = get_logger(__name__)


@dataclass(frozen=True)
class ResolvedStyle:
    id: str
    handle: int
    priority: Optional[int]
    next_style_handle: Optional[int]
    based_on_style_handle: Optional[int]


@dataclass(frozen=True)
class ResolvedStylesheet:
    """Immutable snapshot of a committed stylesheet."""

    entries: tuple[ResolvedStyle, ...]

    def __getitem__(self, style_id: str) -> ResolvedStyle:
        for entry in self.entries:
            if entry.id == style_id:
                return entry
        raise KeyError(style_id)

    def __len__(self) -> int:
        return len(self.entries)

    def handle_for(self, style_id: str) -> int:
        return self[style_id].handle

    @property
    def handles(self) -> list[int]:
        return [entry.handle for entry in self.entries]


@dataclass
class _Entry:
    id: str
    style: Style
    default: bool = False
    next_style: Optional[str] = None
    base_style: Optional[str] = None


class Stylesheet:
    """Ordered collection of named styles belonging to one document."""

    def __init__(
        self,
        document: Any,
        styles: Iterable[Mapping[str, Any]] = (),
        base_style_handle: int = 1,
        base_style_priority: int = 100,
        assign_style_handles: bool = True,
        assign_style_priorities: bool = True,
    ) -> None:
        self.document = document
        self.assign_style_handles = assign_style_handles
        self.assign_style_priorities = assign_style_priorities
        self._next_handle = base_style_handle
        self._next_priority = base_style_priority
        self._entries: dict[str, _Entry] = {}
        for entry in styles:
            self.add_style(entry)

    @classmethod
    def from_json(cls, document: Any, path: Union[str, Path], **options: Any) -> Stylesheet:
        """Load an ordered list of style definitions from a JSON file."""
        path = Path(path)
        try:
            definitions = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise FormatError(f"Invalid stylesheet JSON in {path}: {exc}") from exc
        if not isinstance(definitions, list):
            raise SchemaError(f"Stylesheet file {path} must contain a list of style definitions.")
        logger.debug("Loaded %d style definitions from %s", len(definitions), path)
        return cls(document, definitions, **options)

    # -- public API ---------------------------------------------------------

    def add_style(self, entry: Mapping[str, Any]) -> Style:
        """Register a style and return it.

        *entry* either embeds a ready-made style under ``"style"`` or names
        a ``"type"`` (``paragraph``, ``character`` or ``section``) together
        with the style's attributes.

        Raises:
            SchemaError: for a missing, empty or duplicate ``id``, an object
                that is not a style, an unknown type, or neither a style nor
                a type.
        """
        if not isinstance(entry, Mapping):
            raise SchemaError(f"Stylesheet entries must be mappings, got {entry!r}.")
        options = dict(entry)
        style_id = options.pop("id", None)
        if not style_id:
            raise SchemaError(f"Style entry {entry!r} is missing an id.")
        if style_id in self._entries:
            raise SchemaError(f"Duplicate style id {style_id!r}.")

        default = bool(options.pop("default", False))
        next_style = options.pop("next_style", None)
        base_style = options.pop("base_style", None)
        assign_handle = options.pop("assign_handle", self.assign_style_handles)
        assign_priority = options.pop("assign_priority", self.assign_style_priorities)
        style = self._build_style(style_id, options)

        if style.name is None:
            style.name = style_id
        if default:
            style.handle = 0
        elif assign_handle and style.handle is None:
            style.handle = self._next_handle
            self._next_handle += 1
        if assign_priority and style.priority is None:
            style.priority = self._next_priority
            self._next_priority += 1

        style.push_colours(self.document.colours)
        style.push_fonts(self.document.fonts)
        self._entries[style_id] = _Entry(style_id, style, default, next_style, base_style)
        logger.debug("Added %s style %r with handle %s", style.KIND, style_id, style.handle)
        return style

    def commit(self) -> ResolvedStylesheet:
        """Resolve next/based-on references to handles.

        Safe to call repeatedly. The resolved handles are written back to
        the styles, and an immutable snapshot is returned.
        """
        resolved = []
        for entry in self._entries.values():
            style = entry.style
            if style.handle is None:
                raise SchemaError(f"Style {entry.id!r} has no handle and none was assigned.")
            if entry.next_style is not None:
                style.next_style_handle = self._handle_of(entry.next_style, entry.id)
            if entry.base_style is not None:
                style.based_on_style_handle = self._handle_of(entry.base_style, entry.id)
            resolved.append(ResolvedStyle(
                entry.id,
                style.handle,
                style.priority,
                style.next_style_handle,
                style.based_on_style_handle,
            ))
        logger.debug("Committed stylesheet with %d styles", len(resolved))
        return ResolvedStylesheet(tuple(resolved))

    def to_rtf(self, uglify: bool = False) -> str:
        self.commit()
        lines = ["{\\stylesheet"]
        lines.extend(
            entry.style.to_rtf(self.document, uglify=uglify, base_indent=2)
            for entry in self._entries.values()
        )
        return "\n".join(lines) + "\n}"

    @property
    def styles(self) -> dict[str, Style]:
        """ID to style mapping, in the order the styles were added."""
        return {style_id: entry.style for style_id, entry in self._entries.items()}

    @property
    def default_style(self) -> Optional[Style]:
        for entry in self._entries.values():
            if entry.default:
                return entry.style
        return None

    def __getitem__(self, style_id: str) -> Style:
        try:
            return self._entries[style_id].style
        except KeyError:
            raise SchemaError(f"Unknown style id {style_id!r}.") from None

    def __contains__(self, style_id: object) -> bool:
        return style_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Style]:
        return (entry.style for entry in self._entries.values())

    # -- helpers ------------------------------------------------------------

    def _build_style(self, style_id: str, options: dict[str, Any]) -> Style:
        style = options.pop("style", None)
        style_type = options.pop("type", None)
        if style is not None:
            if not isinstance(style, Style):
                raise SchemaError(f"Style {style_id!r} is not a style object: {style!r}.")
            return style
        if style_type is None:
            raise SchemaError(f"Style {style_id!r} needs either a style object or a type.")
        try:
            style_class = STYLE_TYPES[style_type]
        except (KeyError, TypeError):
            raise SchemaError(
                f"Unknown style type {style_type!r}. Choose from: {', '.join(STYLE_TYPES)}"
            ) from None
        return style_class(options)

    def _handle_of(self, style_id: str, referrer: str) -> int:
        target = self._entries.get(style_id)
        if target is None:
            raise SchemaError(f"Style {referrer!r} refers to unknown style {style_id!r}.")
        return target.style.handle
