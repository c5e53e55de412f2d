"""List table, templates, levels and markers.

Each top-level list in a document gets its own :class:`ListTemplate`, which
is emitted once in the document's ``\\listtable`` and referenced from the
list's paragraphs through ``\\ls<id>``.
"""

from __future__ import annotations

from typing import Optional

from rtfdoc.errors import SchemaError


class ListMarker:
    """The glyph (bullet) or number format used in front of list items."""

    def __init__(self, name: str, codepoint: Optional[int] = None) -> None:
        self.name = name
        self.codepoint = codepoint

    @property
    def is_bullet(self) -> bool:
        return self.codepoint is not None

    @property
    def number_type(self) -> int:
        # \levelnfc: 23 is a bullet, 0 arabic numbering
        return 23 if self.is_bullet else 0

    @property
    def level_marker(self) -> str:
        marker = f"\\{{{self.name}\\}}"
        return marker if self.is_bullet else marker + "."

    @property
    def template_format(self) -> str:
        if self.is_bullet:
            return f"\\'01\\u{self.codepoint} ?"
        return "\\'02\\'00. ?"

    def text_format(self, number: Optional[int] = None) -> str:
        """Return the ``\\listtext`` body for an item."""
        text = f"\\uc0\\u{self.codepoint}" if self.is_bullet else f"{number}."
        return f"\t{text}\t"


class ListLevel:
    """One indentation level (1-9) of a list template."""

    VALID_LEVELS = range(1, 10)
    LEVEL_TABS = (220, 720, 1133, 1700, 2267, 2834, 3401, 3968, 4535, 5102, 5669, 6236, 6803)
    RESET_TABS = tuple(range(560, 6721, 560))

    def __init__(self, template: ListTemplate, marker: ListMarker, level: int) -> None:
        if level not in self.VALID_LEVELS:
            raise SchemaError(f"Invalid list level {level!r}; expected 1 through 9.")
        self.template = template
        self.marker = marker
        self.level = level
        self._tabs: Optional[list[int]] = None

    @property
    def id(self) -> int:
        return self.template.id * 10 + self.level

    @property
    def indent(self) -> int:
        return self.level * 720

    @property
    def tabs(self) -> list[int]:
        """Tab stops for this level, shifted right once per nesting step."""
        if self._tabs is None:
            tabs = list(self.LEVEL_TABS)
            for _ in range(self.level - 1):
                first = tabs[0]
                del tabs[:3]
                start, end = first + 720, first + 1440
                tabs[0:0] = [start, end - 1, end]
            self._tabs = tabs
        return self._tabs

    def to_rtf(self, indent: int = 0) -> str:
        nfc = self.marker.number_type
        return (
            f"{' ' * indent}{{\\listlevel\\levelstartat1"
            f"\\levelnfc{nfc}\\levelnfcn{nfc}"
            "\\leveljc0\\leveljcn0\\levelfollow0\\levelindent0\\levelspace360"
            f"{{\\*\\levelmarker {self.marker.level_marker}}}"
            f"{{\\leveltext\\leveltemplateid{self.id}{self.marker.template_format};}}"
            "{\\levelnumbers;}"
            f"\\fi-360\\li{self.indent}\\lin{self.indent}}}\n"
        )


class ListTemplate:
    """A list definition; lazily gains one :class:`ListLevel` per depth used."""

    MARKERS = {
        "disc": ListMarker("disc", 0x2022),
        "hyphen": ListMarker("hyphen", 0x2043),
        "decimal": ListMarker("decimal"),
    }
    KINDS = {"bullets": "disc", "decimal": "decimal"}

    def __init__(self, template_id: int) -> None:
        self.id = template_id
        self._levels: dict[int, ListLevel] = {}

    def level_for(self, level: int, kind: str = "bullets") -> ListLevel:
        """Return the level object for *level*, creating it for *kind* if needed."""
        if level not in self._levels:
            try:
                marker = self.MARKERS[self.KINDS[kind]]
            except KeyError:
                raise SchemaError(
                    f"Unknown list kind {kind!r}. Choose from: {', '.join(self.KINDS)}"
                ) from None
            self._levels[level] = ListLevel(self, marker, level)
        return self._levels[level]

    def to_rtf(self, indent: int = 0) -> str:
        levels = "".join(self._levels[key].to_rtf() for key in sorted(self._levels))
        return (
            f"{' ' * indent}{{\\list\\listtemplate{self.id}\\listhybrid"
            f"{levels}{{\\listname;}}\\listid{self.id}}}\n"
        )


class ListTable:
    """Per-document registry of list templates."""

    def __init__(self) -> None:
        self.templates: list[ListTemplate] = []

    def new_template(self) -> ListTemplate:
        template = ListTemplate(len(self.templates) + 1)
        self.templates.append(template)
        return template

    def __len__(self) -> int:
        return len(self.templates)

    def to_rtf(self, indent: int = 0) -> str:
        if not self.templates:
            return ""
        prefix = " " * indent
        text = [f"{prefix}{{\\*\\listtable"]
        text.extend(template.to_rtf() for template in self.templates)
        text.append("}{\\*\\listoverridetable")
        text.extend(
            f"{{\\listoverride\\listid{t.id}\\listoverridecount0\\ls{t.id}}}"
            for t in self.templates
        )
        text.append("}\n")
        return "".join(text)
