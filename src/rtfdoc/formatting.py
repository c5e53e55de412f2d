"""Declarative formatting attributes and the engine that drives them.

Each formatting domain (character, paragraph, border, ...) is a
:class:`FormattingDomain` holding an ordered tuple of :class:`Attribute`
descriptors. A descriptor knows its default, how to coerce caller input,
which caller keywords it accepts and how to render the resolved value as
RTF control words. Objects that carry formatting (styles, properties)
subclass :class:`FormattingBundle` and list the domains they include.

Rendering walks the attributes in declared order and concatenates the
non-empty fragments; some domains depend on that order (a border's sides
selector has to precede its line type).
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional

from rtfdoc.errors import SchemaError
from rtfdoc.page import Margin, Size
from rtfdoc.tables import Colour, Font
from rtfdoc.utilities import (
    value2halfpt,
    value2hunpercent,
    value2quarterpt,
    value2twips,
)

Renderer = Callable[[Any, Any], Optional[str]]

# Reference kinds reported through the colour/font capability interface.
COLOUR = "colour"
FONT = "font"
NESTED = "nested"


@dataclass(frozen=True)
class Attribute:
    """One formatting attribute of a domain."""

    name: str
    to_rtf: Renderer
    default: Any = None
    default_factory: Optional[Callable[[], Any]] = None
    from_user: Optional[Callable[[Any], Any]] = None
    dictionary: Optional[Mapping[str, Any]] = None
    refs: str = ""

    def initial(self) -> Any:
        if self.default_factory is not None:
            return self.default_factory()
        return self.default

    def coerce(self, value: Any) -> Any:
        """Turn a caller-supplied value into the internal representation."""
        if value is None:
            return None
        if self.from_user is not None:
            return self.from_user(value)
        if self.dictionary is not None and isinstance(value, str):
            return lookup(self.dictionary, value, self.name)
        return value


class FormattingDomain:
    """An ordered set of attributes applied to and rendered from a target."""

    def __init__(self, name: str, attributes: tuple[Attribute, ...]) -> None:
        self.name = name
        self.attributes = attributes
        self._by_name = {attribute.name: attribute for attribute in attributes}

    def names(self) -> tuple[str, ...]:
        return tuple(self._by_name)

    def initialize(self, target: Any, options: Mapping[str, Any]) -> None:
        """Apply every default to *target*, then overlay *options*."""
        for attribute in self.attributes:
            setattr(target, attribute.name, attribute.initial())
        self.update(target, options)

    def update(self, target: Any, options: Mapping[str, Any]) -> None:
        # Unknown keys belong to other domains or are caller typos; skip them.
        for key, value in options.items():
            attribute = self._by_name.get(key)
            if attribute is not None:
                setattr(target, key, attribute.coerce(value))

    def render(self, target: Any, context: Any = None) -> str:
        fragments: list[str] = []
        for attribute in self.attributes:
            fragment = attribute.to_rtf(getattr(target, attribute.name), context)
            if fragment:
                fragments.append(fragment)
        return "".join(fragments)

    def references(self, target: Any, kind: str) -> Iterator[Any]:
        """Yield the colours or fonts (*kind*) referenced by *target*."""
        for attribute in self.attributes:
            value = getattr(target, attribute.name)
            if value is None:
                continue
            if attribute.refs == kind:
                yield value
            elif attribute.refs == NESTED:
                nested = value if isinstance(value, list) else [value]
                for item in nested:
                    yield from item.references(kind)


class FormattingBundle:
    """Base for objects whose state is described by formatting domains."""

    DOMAINS: tuple[FormattingDomain, ...] = ()

    def _initialize_formatting(self, options: Mapping[str, Any]) -> None:
        for domain in self.DOMAINS:
            domain.initialize(self, options)

    def update(self, options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        """Overlay new attribute values, coercing them like the constructor does."""
        merged = merge_options(options, kwargs)
        for domain in self.DOMAINS:
            domain.update(self, merged)

    # -- colour / font capability -------------------------------------------

    def references(self, kind: str) -> list[Any]:
        found: list[Any] = []
        for domain in self.DOMAINS:
            found.extend(domain.references(self, kind))
        return found

    def colour_refs(self) -> list[Colour]:
        return self.references(COLOUR)

    def font_refs(self) -> list[Font]:
        return self.references(FONT)

    def push_colours(self, colours: Any) -> None:
        """Register every colour used by this bundle in *colours*."""
        for colour in self.colour_refs():
            colours.insert(colour)

    def push_fonts(self, fonts: Any) -> None:
        for font in self.font_refs():
            fonts.insert(font)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def merge_options(options: Optional[Mapping[str, Any]], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Combine a mapping of options with keyword overrides."""
    if options is not None and not isinstance(options, Mapping):
        raise SchemaError(f"Formatting options must be a mapping, got {options!r}.")
    merged = dict(options or {})
    merged.update(overrides)
    return merged


def lookup(dictionary: Mapping[str, Any], value: Any, name: str) -> Any:
    """Translate a caller keyword through *dictionary*."""
    try:
        return dictionary[value]
    except (KeyError, TypeError):
        raise SchemaError(
            f"Invalid {name} {value!r}. Choose from: {', '.join(dictionary)}"
        ) from None


def colour_index(document: Any, colour: Colour) -> int:
    if document is None:
        raise SchemaError(f"Rendering colour {colour!r} requires a document.")
    index = document.colours.index(colour)
    if index is None:
        raise SchemaError(f"Colour {colour!r} is not registered in the document colour table.")
    return index


def font_index(document: Any, font: Font) -> int:
    if document is None:
        raise SchemaError(f"Rendering font {font!r} requires a document.")
    index = document.fonts.index(font)
    if index is None:
        raise SchemaError(f"Font {font!r} is not registered in the document font table.")
    return index


def to_colour(value: Any) -> Colour:
    return value if isinstance(value, Colour) else Colour.from_string(value)


def to_font(value: Any) -> Font:
    return value if isinstance(value, Font) else Font.from_string(value)


def _nested(class_name: str, many: bool) -> Callable[[Any], Any]:
    """Coercion for attributes holding anonymous styles (borders, tabs, ...).

    Accepts a raw mapping or an already-built style object (or a list of
    either when *many*); anything else is rejected.
    """

    def coerce(value: Any) -> Any:
        from rtfdoc import styles

        style_class = getattr(styles, class_name)

        def one(item: Any) -> Any:
            if isinstance(item, style_class):
                return item
            if isinstance(item, Mapping):
                return style_class(item)
            raise SchemaError(f"Invalid {style_class.__name__} value {item!r}.")

        if many:
            if isinstance(value, (list, tuple)):
                return [one(item) for item in value]
            return [one(value)]
        return one(value)

    return coerce


# -- renderers --------------------------------------------------------------

def _toggle(on: str, off: str) -> Renderer:
    return lambda value, _ctx: None if value is None else (on if value else off)


def _flag(word: str) -> Renderer:
    return lambda value, _ctx: word if value else None


def _number(word: str) -> Renderer:
    return lambda value, _ctx: None if value is None else f"{word}{value}"


def _word(template: str) -> Renderer:
    return lambda value, _ctx: None if value is None else template.format(value)


def _colour(word: str) -> Renderer:
    return lambda value, document: None if value is None else f"{word}{colour_index(document, value)}"


def _joined(value: Any, context: Any) -> Optional[str]:
    if value is None:
        return None
    return " ".join(item.rtf_formatting(context) for item in value)


def _single(value: Any, context: Any) -> Optional[str]:
    return None if value is None else value.rtf_formatting(context)


# ---------------------------------------------------------------------------
# Character formatting
# ---------------------------------------------------------------------------

UNDERLINE_STYLES = {
    "SINGLE": "",
    "DOUBLE": "db",
    "THICK": "th",
    "DASH": "dash",
    "LONG_DASH": "ldash",
    "DOT": "d",
    "DASH_DOT": "dashd",
    "DASH_DOT_DOT": "dashdd",
    "WAVE": "wave",
    "THICK_DASH": "thdash",
    "THICK_LONG_DASH": "thldash",
    "THICK_DOT": "thd",
    "THICK_DASH_DOT": "thdashd",
    "THICK_DASH_DOT_DOT": "thdashdd",
    "THICK_WAVE": "hwave",
    "DOUBLE_WAVE": "uldbwave",
}


def _underline(value: Any, _ctx: Any) -> Optional[str]:
    if value is None:
        return None
    if value is True:
        return "\\ul"
    if value is False:
        return "\\ulnone"
    return f"\\ul{value}"


def _kerning(value: Any, _ctx: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return f"\\kerning{value}"
    return "\\kerning0"


CHARACTER = FormattingDomain("character", (
    Attribute("bold", _toggle("\\b", "\\b0")),
    Attribute("italic", _toggle("\\i", "\\i0")),
    Attribute("underline", _underline, dictionary=UNDERLINE_STYLES),
    Attribute("uppercase", _toggle("\\caps", "\\caps0")),
    Attribute("superscript", _toggle("\\super", "\\super0")),
    Attribute("subscript", _toggle("\\sub", "\\sub0")),
    Attribute("strike", _toggle("\\strike", "\\strike0")),
    Attribute("emboss", _toggle("\\embo", "\\embo0")),
    Attribute("imprint", _toggle("\\impr", "\\impr0")),
    Attribute("outline", _toggle("\\outl", "\\outl0")),
    Attribute("text_hidden", _toggle("\\v", "\\v0")),
    Attribute("kerning", _kerning),
    Attribute("character_spacing_offset", _number("\\expnd"), from_user=value2quarterpt),
    Attribute("foreground_color", _colour("\\cf"), from_user=to_colour, refs=COLOUR),
    Attribute("background_color", _colour("\\cb"), from_user=to_colour, refs=COLOUR),
    Attribute("underline_color", _colour("\\ulc"), from_user=to_colour, refs=COLOUR),
    Attribute("highlight_color", _colour("\\highlight"), from_user=to_colour, refs=COLOUR),
    Attribute(
        "font",
        lambda value, document: None if value is None else f"\\f{font_index(document, value)}",
        from_user=to_font,
        refs=FONT,
    ),
    Attribute("font_size", _number("\\fs"), from_user=value2halfpt),
))


# ---------------------------------------------------------------------------
# Paragraph formatting
# ---------------------------------------------------------------------------

JUSTIFICATION = {"LEFT": "l", "RIGHT": "r", "CENTER": "c", "CENTRE": "c", "FULL": "j"}
PARAGRAPH_FLOW = {"LEFT_TO_RIGHT": "ltr", "RIGHT_TO_LEFT": "rtl"}

PARAGRAPH = FormattingDomain("paragraph", (
    Attribute("justification", _word("\\q{}"), default="l", dictionary=JUSTIFICATION),
    Attribute("left_indent", _number("\\li"), from_user=value2twips),
    Attribute("right_indent", _number("\\ri"), from_user=value2twips),
    Attribute("first_line_indent", _number("\\fi"), from_user=value2twips),
    Attribute("space_before", _number("\\sb"), from_user=value2twips),
    Attribute("space_after", _number("\\sa"), from_user=value2twips),
    Attribute("line_spacing", _number("\\sl"), from_user=value2twips),
    Attribute("widow_orphan_ctl", _toggle("\\widctlpar", "\\nowidctlpar")),
    Attribute("no_break", _flag("\\keep"), default=False),
    Attribute("no_break_with_next", _flag("\\keepn"), default=False),
    Attribute("hyphenate", _toggle("\\hyphpar", "\\hyphpar0")),
    Attribute("paragraph_flow", _word("\\{}par"), default="ltr", dictionary=PARAGRAPH_FLOW),
    Attribute("border", _joined, from_user=_nested("BorderStyle", many=True), refs=NESTED),
    Attribute("position", _single, from_user=_nested("PositionStyle", many=False), refs=NESTED),
    Attribute("shading", _single, from_user=_nested("ShadingStyle", many=False), refs=NESTED),
    Attribute("tabs", _joined, from_user=_nested("TabStyle", many=True), refs=NESTED),
))


# ---------------------------------------------------------------------------
# Border formatting (order matters: sides, then line type)
# ---------------------------------------------------------------------------

BORDER_SIDES = {"ALL": "box", "LEFT": "brdrl", "RIGHT": "brdrr", "TOP": "brdrt", "BOTTOM": "brdrb"}
BORDER_LINE_TYPES = {
    "SINGLE": "brdrs",
    "THICK": "brdrth",
    "DOUBLE": "brdrdb",
    "DOT": "brdrdot",
    "DASH": "brdrdash",
    "HAIRLINE": "brdrhair",
}

BORDER = FormattingDomain("border", (
    Attribute("sides", _word("\\{}"), default="box", dictionary=BORDER_SIDES),
    Attribute("line_type", _word("\\{}"), default="brdrs", dictionary=BORDER_LINE_TYPES),
    Attribute("width", _number("\\brdrw"), from_user=value2twips),
    Attribute("spacing", _number("\\brsp"), from_user=value2twips),
    Attribute("color", _colour("\\brdrcf"), from_user=to_colour, refs=COLOUR),
))


# ---------------------------------------------------------------------------
# Absolute position (frame) formatting
# ---------------------------------------------------------------------------

_KEYWORD = re.compile(r"^[A-Z_]+$")


def _frame_position(keywords: Mapping[str, str], prefix: str, name: str) -> Callable[[Any], str]:
    def coerce(value: Any) -> str:
        if isinstance(value, str) and _KEYWORD.match(value):
            return lookup(keywords, value, name)
        return f"{prefix}{value2twips(value)}"

    return coerce


def _frame_size(value: Any, _ctx: Any) -> Optional[str]:
    return None if value is None else f"\\absw{value.width}\\absh{value.height}"


POSITION = FormattingDomain("position", (
    Attribute("size", _frame_size, from_user=Size.coerce),
    Attribute(
        "horizontal_reference",
        _word("\\{}"),
        dictionary={"PAGE": "phpg", "MARGIN": "phmrg", "COLUMN": "phcol"},
    ),
    Attribute(
        "vertical_reference",
        _word("\\{}"),
        dictionary={"PAGE": "pvpg", "MARGIN": "pvmrg", "PARAGRAPH": "pvpara"},
    ),
    Attribute(
        "horizontal_position",
        _word("\\{}"),
        from_user=_frame_position(
            {"CENTER": "posxc", "LEFT": "posxl", "RIGHT": "posxr"}, "posx", "horizontal_position"
        ),
    ),
    Attribute(
        "vertical_position",
        _word("\\{}"),
        from_user=_frame_position(
            {"CENTER": "posyc", "TOP": "posyt", "BOTTOM": "posyb"}, "posy", "vertical_position"
        ),
    ),
    Attribute(
        "text_wrap",
        _word("\\{}"),
        dictionary={
            "NONE": "nowrap",
            "DEFAULT": "wrapdefault",
            "AROUND": "wraparound",
            "TIGHT": "wraptight",
            "THROUGH": "wrapthrough",
        },
    ),
    Attribute("drop_cap_lines", _number("\\dropcapli")),
    Attribute("drop_cap_type", _number("\\dropcapt"), dictionary={"IN_TEXT": 1, "IN_MARGIN": 2}),
    Attribute("lock_anchor", _toggle("\\abslock1", "\\abslock0")),
))


# ---------------------------------------------------------------------------
# Shading formatting
# ---------------------------------------------------------------------------

SHADING = FormattingDomain("shading", (
    Attribute("opacity", _number("\\shading"), default=10000, from_user=value2hunpercent),
    Attribute("foreground_color", _colour("\\cfpat"), from_user=to_colour, refs=COLOUR),
    Attribute("background_color", _colour("\\cbpat"), from_user=to_colour, refs=COLOUR),
))


# ---------------------------------------------------------------------------
# Tab stops
# ---------------------------------------------------------------------------

TAB = FormattingDomain("tab", (
    Attribute(
        "type",
        _word("\\{}"),
        dictionary={"FLUSH_RIGHT": "tqr", "CENTERED": "tqc", "DECIMAL": "tqdec"},
    ),
    Attribute(
        "leader",
        _word("\\{}"),
        dictionary={
            "DOT": "tldot",
            "MIDDLE_DOT": "tlmdot",
            "HYPHEN": "tlhyph",
            "UNDERLINE": "tlul",
            "THICK_LINE": "tlth",
            "EQUAL": "tleq",
        },
    ),
    Attribute("position", _number("\\tx"), default=720, from_user=value2twips),
))


# ---------------------------------------------------------------------------
# Document, section and page formatting
# ---------------------------------------------------------------------------

DOCUMENT = FormattingDomain("document", (
    Attribute("facing_pages", _flag("\\facingp")),
    Attribute("mirror_margins", _flag("\\margmirror")),
    Attribute("widow_orphan_ctl", _flag("\\widowctl")),
    Attribute("tab_width", _number("\\deftab"), from_user=value2twips),
    Attribute("hyphenation_width", _number("\\hyphhotz"), from_user=value2twips),
    Attribute("max_consecutive_hyphenation", _number("\\hyphconsec")),
    Attribute("hyphenate", _toggle("\\hyphauto1", "\\hyphauto0"), default=True),
))

SECTION = FormattingDomain("section", (
    Attribute("columns", _number("\\cols")),
    Attribute("column_spacing", _number("\\colsx"), from_user=value2twips),
    Attribute("mirror_margins", _flag("\\margmirsxn")),
))

# Page attributes render against a target: the whole document or one section.
DOCUMENT_TARGET = "document"
SECTION_TARGET = "section"


def _orientation(value: Any, target: str) -> Optional[str]:
    if value != "landscape":
        return None
    return "\\landscape" if target == DOCUMENT_TARGET else "\\lndscpsxn"


def _paper(value: Any, target: str) -> Optional[str]:
    if value is None:
        return None
    if target == DOCUMENT_TARGET:
        return f"\\paperw{value.width}\\paperh{value.height}"
    return f"\\pgwsxn{value.width}\\pghsxn{value.height}"


def _margins(value: Any, target: str) -> Optional[str]:
    if value is None:
        return None
    suffix = "" if target == DOCUMENT_TARGET else "sxn"
    return (
        f"\\margl{suffix}{value.left}\\margr{suffix}{value.right}"
        f"\\margt{suffix}{value.top}\\margb{suffix}{value.bottom}"
    )


def _gutter(value: Any, target: str) -> Optional[str]:
    if value is None:
        return None
    return f"\\gutter{value}" if target == DOCUMENT_TARGET else f"\\guttersxn{value}"


PAGE = FormattingDomain("page", (
    Attribute(
        "orientation",
        _orientation,
        default="portrait",
        dictionary={"PORTRAIT": "portrait", "LANDSCAPE": "landscape"},
    ),
    Attribute("size", _paper, default_factory=Size, from_user=Size.coerce),
    Attribute("margin", _margins, default_factory=Margin, from_user=Margin.coerce),
    Attribute("gutter", _gutter, from_user=value2twips),
))
