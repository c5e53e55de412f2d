"""Style presets for the Markdown front end.

A preset (default, academic, business, minimal) maps semantic style names
(``heading_1``, ``body``, ``code_block``, ...) to font and paragraph specs.
:meth:`StyleManager.stylesheet_entries` turns them into the ordered list of
definitions a :class:`~rtfdoc.stylesheet.Stylesheet` is built from.
"""

from __future__ import annotations

import json
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from rtfdoc.errors import FormatError, SchemaError
from rtfdoc.utilities import round_half_away, TWIPS_PER_POINT


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass
class FontSpec:
    """Font specification for a run of text."""

    family: str = "ROMAN"
    name: str = "Times New Roman"
    size_pt: float = 10.0
    bold: bool = False
    italic: bool = False
    underline: bool = False
    color: str = "#000000"
    background: str = ""

    def derive(self, **overrides) -> FontSpec:
        """Return a copy with selected fields overridden."""
        clone = deepcopy(self)
        for k, v in overrides.items():
            if hasattr(clone, k):
                setattr(clone, k, v)
        return clone

    @property
    def font(self) -> str:
        return f"{self.family}:{self.name}"

    def to_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {
            "font": self.font,
            "font_size": f"{self.size_pt}pt",
            "foreground_color": self.color,
        }
        if self.bold:
            options["bold"] = True
        if self.italic:
            options["italic"] = True
        if self.underline:
            options["underline"] = True
        if self.background:
            options["background_color"] = self.background
        return options


_ALIGNMENTS = {"left": "LEFT", "center": "CENTER", "right": "RIGHT", "both": "FULL"}


@dataclass
class ParaSpec:
    """Paragraph layout specification (lengths in points)."""

    align: str = "both"  # left, center, right, both (justify)
    indent_pt: float = 0.0
    left_margin_pt: float = 0.0
    right_margin_pt: float = 0.0
    line_spacing_percent: int = 160
    space_before_pt: float = 0.0
    space_after_pt: float = 6.0

    def derive(self, **overrides) -> ParaSpec:
        clone = deepcopy(self)
        for k, v in overrides.items():
            if hasattr(clone, k):
                setattr(clone, k, v)
        return clone

    def line_spacing_twips(self, size_pt: float) -> int:
        """Line height for text of *size_pt* at this spacing percentage."""
        return round_half_away(size_pt * self.line_spacing_percent / 100 * TWIPS_PER_POINT)

    def to_options(self, size_pt: float) -> dict[str, Any]:
        options: dict[str, Any] = {
            "justification": _ALIGNMENTS.get(self.align, "LEFT"),
            "space_before": f"{self.space_before_pt}pt",
            "space_after": f"{self.space_after_pt}pt",
            "line_spacing": self.line_spacing_twips(size_pt),
        }
        if self.left_margin_pt:
            options["left_indent"] = f"{self.left_margin_pt}pt"
        if self.right_margin_pt:
            options["right_indent"] = f"{self.right_margin_pt}pt"
        if self.indent_pt:
            options["first_line_indent"] = f"{self.indent_pt}pt"
        return options


@dataclass
class StyleDef:
    """A named style: character formatting plus, for paragraphs, layout."""

    name: str
    font: FontSpec
    para: Optional[ParaSpec] = None
    extra: Optional[dict[str, Any]] = None

    @property
    def kind(self) -> str:
        return "character" if self.para is None else "paragraph"

    def to_entry(self) -> dict[str, Any]:
        """Stylesheet definition for this style."""
        entry: dict[str, Any] = {"id": self.name, "type": self.kind}
        entry.update(self.font.to_options())
        if self.para is not None:
            entry.update(self.para.to_options(self.font.size_pt))
        if self.extra:
            entry.update(deepcopy(self.extra))
        return entry


# ---------------------------------------------------------------------------
# Preset definitions
# ---------------------------------------------------------------------------

LINK_COLOR = "#0563C1"

# Entry order of the paragraph styles after the headings.
_BLOCK_STYLES = (
    "body",
    "code_block",
    "blockquote",
    "list_item",
    "table_header",
    "table_body",
    "footnote",
    "horizontal_rule",
)


@dataclass
class _Preset:
    body_font: FontSpec
    body_para: ParaSpec
    code_font: FontSpec
    code_line_spacing: int
    heading_sizes: tuple[float, ...]
    heading_space_before: tuple[float, ...]
    heading_space_after: tuple[float, ...]
    quote_margin_pt: float
    cell_spacing_pt: float
    footnote_line_spacing: int
    quote_color: str = "#000000"


def _build_styles(preset: _Preset) -> dict[str, StyleDef]:
    body_font, body_para = preset.body_font, preset.body_para
    styles: dict[str, StyleDef] = {}

    for level in range(1, 7):
        styles[f"heading_{level}"] = StyleDef(
            name=f"heading_{level}",
            font=body_font.derive(size_pt=preset.heading_sizes[level - 1], bold=True),
            para=body_para.derive(
                align="left",
                space_before_pt=preset.heading_space_before[level - 1],
                space_after_pt=preset.heading_space_after[level - 1],
            ),
            extra={
                "next_style": "body",
                "base_style": "body",
                "no_break_with_next": True,
                "primary": True,
            },
        )

    styles["body"] = StyleDef(
        name="body", font=body_font, para=body_para,
        extra={"default": True, "primary": True},
    )

    code_spacing = max(2.0, body_para.space_after_pt - 2.0)
    styles["code_block"] = StyleDef(
        name="code_block",
        font=preset.code_font.derive(background=""),
        para=ParaSpec(
            align="left",
            line_spacing_percent=preset.code_line_spacing,
            space_before_pt=code_spacing,
            space_after_pt=code_spacing,
        ),
        extra={"shading": {
            "foreground_color": preset.code_font.background,
            "background_color": preset.code_font.background,
        }},
    )

    styles["blockquote"] = StyleDef(
        name="blockquote",
        font=body_font.derive(italic=True, color=preset.quote_color),
        para=body_para.derive(
            left_margin_pt=preset.quote_margin_pt,
            space_before_pt=code_spacing,
            space_after_pt=code_spacing,
        ),
        extra={"base_style": "body"},
    )

    styles["list_item"] = StyleDef(
        name="list_item",
        font=body_font,
        para=body_para.derive(align="left"),
        extra={"base_style": "body"},
    )

    cell_font = body_font.derive(size_pt=body_font.size_pt - 1)
    cell_para = body_para.derive(
        space_before_pt=preset.cell_spacing_pt,
        space_after_pt=preset.cell_spacing_pt,
        line_spacing_percent=100,
    )
    styles["table_header"] = StyleDef(
        name="table_header",
        font=cell_font.derive(bold=True),
        para=cell_para.derive(align="center"),
    )
    styles["table_body"] = StyleDef(
        name="table_body",
        font=cell_font,
        para=cell_para.derive(align="left"),
    )

    styles["footnote"] = StyleDef(
        name="footnote",
        font=body_font.derive(size_pt=8.0),
        para=body_para.derive(
            line_spacing_percent=preset.footnote_line_spacing,
            space_after_pt=2.0,
        ),
    )

    styles["horizontal_rule"] = StyleDef(
        name="horizontal_rule",
        font=body_font.derive(size_pt=2.0),
        para=body_para.derive(space_before_pt=8.0, space_after_pt=8.0, line_spacing_percent=100),
        extra={"border": {"sides": "BOTTOM", "width": 10, "spacing": 20, "color": "#999999"}},
    )

    # character styles
    styles["inline_code"] = StyleDef(
        name="inline_code",
        font=preset.code_font.derive(color="#333333"),
    )
    styles["link"] = StyleDef(
        name="link",
        font=FontSpec(
            family=body_font.family,
            name=body_font.name,
            size_pt=body_font.size_pt,
            underline=True,
            color=LINK_COLOR,
        ),
    )
    return styles


def _build_default_styles() -> dict[str, StyleDef]:
    """Build the **default** preset styles."""
    return _build_styles(_Preset(
        body_font=FontSpec("ROMAN", "Times New Roman", 10.0),
        body_para=ParaSpec(align="both", line_spacing_percent=160, space_after_pt=6.0),
        code_font=FontSpec("MODERN", "Consolas", 9.0, background="#F5F5F5"),
        code_line_spacing=150,
        heading_sizes=(22.0, 18.0, 14.0, 12.0, 11.0, 10.0),
        heading_space_before=(16.0, 14.0, 12.0, 10.0, 8.0, 6.0),
        heading_space_after=(10.0, 8.0, 6.0, 6.0, 4.0, 4.0),
        quote_margin_pt=20.0,
        cell_spacing_pt=2.0,
        footnote_line_spacing=140,
    ))


def _build_academic_styles() -> dict[str, StyleDef]:
    """Build the **academic** preset -- serif, double spaced."""
    return _build_styles(_Preset(
        body_font=FontSpec("ROMAN", "Times New Roman", 11.0),
        body_para=ParaSpec(align="both", line_spacing_percent=200, space_after_pt=8.0),
        code_font=FontSpec("MODERN", "Courier New", 9.5, background="#F5F5F5"),
        code_line_spacing=160,
        heading_sizes=(24.0, 20.0, 16.0, 13.0, 12.0, 11.0),
        heading_space_before=(20.0, 16.0, 14.0, 12.0, 10.0, 8.0),
        heading_space_after=(12.0, 10.0, 8.0, 8.0, 6.0, 6.0),
        quote_margin_pt=24.0,
        cell_spacing_pt=3.0,
        footnote_line_spacing=150,
    ))


def _build_business_styles() -> dict[str, StyleDef]:
    """Build the **business** preset -- sans-serif, compact."""
    return _build_styles(_Preset(
        body_font=FontSpec("SWISS", "Arial", 10.0),
        body_para=ParaSpec(align="left", line_spacing_percent=150, space_after_pt=4.0),
        code_font=FontSpec("MODERN", "Consolas", 9.0, background="#F5F5F5"),
        code_line_spacing=140,
        heading_sizes=(20.0, 16.0, 13.0, 11.0, 10.5, 10.0),
        heading_space_before=(14.0, 12.0, 10.0, 8.0, 6.0, 6.0),
        heading_space_after=(8.0, 6.0, 4.0, 4.0, 4.0, 4.0),
        quote_margin_pt=16.0,
        cell_spacing_pt=2.0,
        footnote_line_spacing=130,
        quote_color="#555555",
    ))


def _build_minimal_styles() -> dict[str, StyleDef]:
    """Build the **minimal** preset -- clean, tight spacing."""
    return _build_styles(_Preset(
        body_font=FontSpec("SWISS", "Helvetica Neue", 10.0),
        body_para=ParaSpec(align="left", line_spacing_percent=145, space_after_pt=3.0),
        code_font=FontSpec("MODERN", "Menlo", 9.0, background="#FAFAFA"),
        code_line_spacing=140,
        heading_sizes=(18.0, 15.0, 12.5, 11.0, 10.5, 10.0),
        heading_space_before=(12.0, 10.0, 8.0, 6.0, 4.0, 4.0),
        heading_space_after=(6.0, 5.0, 4.0, 3.0, 3.0, 3.0),
        quote_margin_pt=14.0,
        cell_spacing_pt=1.0,
        footnote_line_spacing=130,
        quote_color="#666666",
    ))


# ---------------------------------------------------------------------------
# Preset registry
# ---------------------------------------------------------------------------

_PRESET_BUILDERS = {
    "default": _build_default_styles,
    "academic": _build_academic_styles,
    "business": _build_business_styles,
    "minimal": _build_minimal_styles,
}


def load_stylesheet_file(path: Union[str, Path]) -> list[dict[str, Any]]:
    """Read a JSON list of stylesheet definitions.

    Raises:
        FormatError: if the file is not valid JSON.
        SchemaError: if it does not hold a list of objects with ids.
    """
    path = Path(path)
    try:
        definitions = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise FormatError(f"Invalid stylesheet JSON in {path}: {exc}") from exc
    return check_definitions(definitions, str(path))


def check_definitions(definitions: Any, origin: str) -> list[dict[str, Any]]:
    """Return *definitions* if it is a list of style objects that all carry an id."""
    if not isinstance(definitions, list) or not all(
        isinstance(item, dict) and item.get("id") for item in definitions
    ):
        raise SchemaError(f"{origin} must contain a list of style objects, each with an id.")
    return definitions


# ---------------------------------------------------------------------------
# StyleManager
# ---------------------------------------------------------------------------

class StyleManager:
    """Holds one style preset and produces stylesheet definitions from it.

    Usage::

        sm = StyleManager("academic")
        sm.get_style("heading_1").font.size_pt   # 24.0
        doc = Document(stylesheet=sm.stylesheet_entries())
    """

    PRESETS = list(_PRESET_BUILDERS.keys())

    def __init__(self, preset: str = "default") -> None:
        if preset not in _PRESET_BUILDERS:
            raise ValueError(
                f"Unknown preset {preset!r}. Choose from: {', '.join(_PRESET_BUILDERS)}"
            )
        self.preset = preset
        self._styles: dict[str, StyleDef] = _PRESET_BUILDERS[preset]()
        self._overrides: dict[str, dict[str, Any]] = {}

    # -- public API ---------------------------------------------------------

    def get_style(self, name: str) -> StyleDef:
        """Get style by semantic name, falling back to ``body``."""
        return self._styles.get(name, self._styles["body"])

    def heading_style_id(self, level: int) -> str:
        return f"heading_{max(1, min(6, level))}"

    def get_font_for_heading(self, level: int) -> FontSpec:
        """Return the :class:`FontSpec` for heading level *1--6*."""
        return self.get_style(self.heading_style_id(level)).font

    def list_style_names(self) -> list[str]:
        return sorted(set(self._styles) | set(self._overrides))

    def override(self, definitions: list[dict[str, Any]]) -> None:
        """Merge user definitions into the preset, keyed by ``id``.

        A definition whose id matches a preset style updates that style's
        options; any other id adds a new style.
        """
        for definition in definitions:
            self._overrides.setdefault(definition["id"], {}).update(definition)

    def load_overrides(self, path: Union[str, Path]) -> None:
        self.override(load_stylesheet_file(path))

    def stylesheet_entries(self) -> list[dict[str, Any]]:
        """Ordered stylesheet definitions for this preset."""
        order = [self.heading_style_id(level) for level in range(1, 7)]
        order += list(_BLOCK_STYLES) + ["inline_code", "link"]
        entries = []
        for name in order:
            entry = self._styles[name].to_entry()
            entry.update(self._overrides.get(name, {}))
            entries.append(entry)
        entries.extend(
            deepcopy(definition) for name, definition in self._overrides.items()
            if name not in self._styles
        )
        return entries
