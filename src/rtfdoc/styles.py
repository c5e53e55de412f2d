"""Named styles (character, paragraph, section) and anonymous formatting styles.

A named style renders in two forms:

* the stylesheet entry, ``{\\s3 \\ql\\ltrpar\\b \\sbasedon0 \\snext3 Heading;}``,
  produced by :meth:`Style.to_rtf`;
* the inline prefix, ``\\s3 \\ql\\ltrpar\\b``, produced by :meth:`Style.prefix`
  and placed in front of content the style is applied to.

Anonymous styles (borders, frames, shading, tab stops) are never registered;
their prefix is just their formatting.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from rtfdoc.errors import SchemaError
from rtfdoc.formatting import (
    BORDER,
    CHARACTER,
    PAGE,
    PARAGRAPH,
    POSITION,
    SECTION,
    SECTION_TARGET,
    SHADING,
    TAB,
    FormattingBundle,
    merge_options,
)

LEFT_TO_RIGHT = "LEFT_TO_RIGHT"
RIGHT_TO_LEFT = "RIGHT_TO_LEFT"


class Style(FormattingBundle):
    """Base class of the styles that can live in a stylesheet."""

    STYLEDEF = ""
    PREFIX = ""
    KIND = ""

    def __init__(self, options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        merged = merge_options(options, kwargs)
        self.name: Optional[str] = merged.get("name")
        self.handle: Optional[int] = merged.get("handle")
        self.priority: Optional[int] = merged.get("priority")
        self.flow: str = merged.get("flow") or LEFT_TO_RIGHT
        self.primary = bool(merged.get("primary", False))
        self.additive = bool(merged.get("additive", False))
        self.auto_update = bool(merged.get("auto_update", False))
        self.hidden = bool(merged.get("hidden", False))
        self.next_style_handle: Optional[int] = merged.get("next_style_handle")
        self.based_on_style_handle: Optional[int] = merged.get("based_on_style_handle")
        self._initialize_formatting(merged)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, handle={self.handle!r})"

    # -- rendering ----------------------------------------------------------

    def rtf_formatting(self, document: Any = None) -> str:
        raise NotImplementedError

    def prefix(self, document: Any = None) -> str:
        """Inline form used when the style is applied to content."""
        text = ""
        if self.handle is not None:
            text = f"{self.PREFIX}{self.handle} "
        return text + self.rtf_formatting(document)

    def to_rtf(self, document: Any = None, uglify: bool = False, base_indent: int = 0) -> str:
        """Render the stylesheet entry for this style."""
        if self.handle is None:
            raise SchemaError(f"{self!r} has no handle; add it to a stylesheet first.")
        suffix = "" if uglify else " "
        formatting = self.rtf_formatting(document)

        text = "" if uglify else " " * base_indent
        text += f"{{{self.STYLEDEF}{self.handle}{suffix}"
        if formatting:
            text += formatting + suffix
        if self.additive:
            text += "\\additive" + suffix
        if self.based_on_style_handle is not None:
            text += f"\\sbasedon{self.based_on_style_handle}{suffix}"
        if self.auto_update:
            text += "\\sautoupd" + suffix
        if self.next_style_handle is not None:
            text += f"\\snext{self.next_style_handle}{suffix}"
        if self.primary:
            text += "\\sqformat" + suffix
        if self.priority is not None:
            text += f"\\spriority{self.priority}{suffix}"
        if self.hidden:
            text += "\\shidden" + suffix
        name_prefix = " " if uglify else ""
        return f"{text}{name_prefix}{self.name or ''};}}"


class CharacterStyle(Style):
    """Run-level formatting (``\\cs``)."""

    STYLEDEF = "\\*\\cs"
    PREFIX = "\\cs"
    KIND = "character"
    DOMAINS = (CHARACTER,)

    def rtf_formatting(self, document: Any = None) -> str:
        return CHARACTER.render(self, document)


class ParagraphStyle(Style):
    """Paragraph formatting plus the character formatting of its runs."""

    STYLEDEF = "\\s"
    PREFIX = "\\s"
    KIND = "paragraph"
    DOMAINS = (PARAGRAPH, CHARACTER)

    def rtf_formatting(self, document: Any = None) -> str:
        return PARAGRAPH.render(self, document) + CHARACTER.render(self, document)


class SectionStyle(Style):
    """Section layout: columns plus the section's page geometry."""

    STYLEDEF = "\\*\\ds"
    PREFIX = "\\ds"
    KIND = "section"
    DOMAINS = (SECTION, PAGE)

    def rtf_formatting(self, document: Any = None) -> str:
        return f"{SECTION.render(self, document)} {PAGE.render(self, SECTION_TARGET)}"


# ---------------------------------------------------------------------------
# Anonymous styles
# ---------------------------------------------------------------------------

class AnonymousStyle(FormattingBundle):
    """An inline formatting bundle that never enters a stylesheet."""

    def __init__(self, options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        self._initialize_formatting(merge_options(options, kwargs))

    def rtf_formatting(self, document: Any = None) -> str:
        return "".join(domain.render(self, document) for domain in self.DOMAINS)

    def prefix(self, document: Any = None) -> str:
        return self.rtf_formatting(document)


class BorderStyle(AnonymousStyle):
    """Paragraph border: ``BorderStyle(sides="BOTTOM", width=12, color="#999999")``."""

    DOMAINS = (BORDER,)


class PositionStyle(AnonymousStyle):
    """Absolutely positioned frame for a paragraph."""

    DOMAINS = (POSITION,)


class ShadingStyle(AnonymousStyle):
    DOMAINS = (SHADING,)


class TabStyle(AnonymousStyle):
    DOMAINS = (TAB,)


STYLE_TYPES: dict[str, type[Style]] = {
    CharacterStyle.KIND: CharacterStyle,
    ParagraphStyle.KIND: ParagraphStyle,
    SectionStyle.KIND: SectionStyle,
}
