"""The document root.

A :class:`Document` owns the font, colour and list tables, the information
block, document properties, the optional stylesheet, page headers and
footers, and the body content::

    doc = Document(stylesheet=[
        {"id": "TITLE", "type": "paragraph", "bold": True, "font_size": 28},
    ])
    doc.paragraph(doc.stylesheet["TITLE"]) << "Hello"
    rtf = doc.to_rtf()
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from rtfdoc.errors import SchemaError, StructuralError
from rtfdoc.formatting import lookup
from rtfdoc.information import Information
from rtfdoc.lists import ListTable
from rtfdoc.logger import get_logger
from rtfdoc.nodes import CommandNode, FooterNode, HeaderNode
from rtfdoc.properties import DocumentProperties
from rtfdoc.stylesheet import Stylesheet
from rtfdoc.tables import ColourTable, Font, FontTable

logger = get_logger(__name__)

CHARACTER_SETS = {"ANSI": "ansi", "MAC": "mac", "PC": "pc", "PCA": "pca"}

LANGUAGES = {
    "AFRIKAANS": 1078,
    "ARABIC": 1025,
    "CATALAN": 1027,
    "CHINESE_TRADITIONAL": 1028,
    "CHINESE_SIMPLIFIED": 2052,
    "CZECH": 1029,
    "DANISH": 1030,
    "DUTCH": 1043,
    "DUTCH_BELGIAN": 2067,
    "ENGLISH_UK": 2057,
    "ENGLISH_US": 1033,
    "FINNISH": 1035,
    "FRENCH": 1036,
    "FRENCH_BELGIAN": 2060,
    "FRENCH_CANADIAN": 3084,
    "FRENCH_SWISS": 4108,
    "GERMAN": 1031,
    "GERMAN_SWISS": 2055,
    "GREEK": 1032,
    "HEBREW": 1037,
    "HUNGARIAN": 1038,
    "ICELANDIC": 1039,
    "INDONESIAN": 1057,
    "ITALIAN": 1040,
    "JAPANESE": 1041,
    "KOREAN": 1042,
    "NORWEGIAN_BOKMAL": 1044,
    "NORWEGIAN_NYNORSK": 2068,
    "POLISH": 1045,
    "PORTUGUESE": 2070,
    "PORTUGUESE_BRAZILIAN": 1046,
    "ROMANIAN": 1048,
    "RUSSIAN": 1049,
    "SERBO_CROATIAN_CYRILLIC": 2074,
    "SERBO_CROATIAN_LATIN": 1050,
    "SLOVAK": 1051,
    "SPANISH_CASTILLIAN": 1034,
    "SPANISH_MEXICAN": 2058,
    "SWAHILI": 1089,
    "SWEDISH": 1053,
    "THAI": 1054,
    "TURKISH": 1055,
    "UNKNOWN": 1024,
    "VIETNAMESE": 1066,
}

# Emission order of page variants; universal is written only when the
# left or right variant is missing.
_PAGE_VARIANTS = ("FIRST_PAGE", "RIGHT_PAGE", "LEFT_PAGE")


class Document(CommandNode):
    """Root node of an RTF document."""

    is_document = True

    def __init__(
        self,
        default_font: Any = "SWISS:Helvetica",
        character_set: str = "ANSI",
        language: str = "ENGLISH_US",
        suppress_system_styles: bool = False,
        document_properties: Any = None,
        stylesheet: Any = None,
    ) -> None:
        super().__init__(None, "\\rtf1")
        if isinstance(default_font, str):
            default_font = Font.from_string(default_font)
        elif not isinstance(default_font, Font):
            raise SchemaError(f"Invalid default font {default_font!r}.")

        if document_properties is None:
            document_properties = DocumentProperties()
        elif isinstance(document_properties, Mapping):
            document_properties = DocumentProperties(document_properties)
        elif not isinstance(document_properties, DocumentProperties):
            raise SchemaError(f"Invalid document properties {document_properties!r}.")

        self.character_set = lookup(CHARACTER_SETS, character_set, "character set")
        self.language = lookup(LANGUAGES, language, "language")
        self.suppress_system_styles = suppress_system_styles
        self.fonts = FontTable(default_font)
        self.colours = ColourTable()
        self.lists = ListTable()
        self.information = Information()
        self.properties = document_properties
        self._headers: dict[str, HeaderNode] = {}
        self._footers: dict[str, FooterNode] = {}
        self._last_id = 0
        # The tables exist before the stylesheet so styles can register in them.
        self.stylesheet = self._build_stylesheet(stylesheet)

    def _build_stylesheet(self, stylesheet: Any) -> Optional[Stylesheet]:
        if stylesheet is None:
            return None
        if isinstance(stylesheet, Stylesheet):
            stylesheet.document = self
            for style in stylesheet.styles.values():
                style.push_colours(self.colours)
                style.push_fonts(self.fonts)
            return stylesheet
        if isinstance(stylesheet, Mapping):
            return Stylesheet(self, **stylesheet)
        if isinstance(stylesheet, (list, tuple)):
            return Stylesheet(self, stylesheet)
        raise SchemaError(f"Invalid stylesheet {stylesheet!r}.")

    def load_stylesheet(self, styles: Any, **options: Any) -> Stylesheet:
        """Replace the stylesheet with one built from *styles*."""
        self.stylesheet = Stylesheet(self, styles, **options)
        return self.stylesheet

    # -- public API ---------------------------------------------------------

    @property
    def default_font(self) -> Font:
        return self.fonts.default

    def get_id(self) -> int:
        """Return the next identifier, unique within this document."""
        self._last_id += 1
        return self._last_id

    def header(self, kind: Optional[str] = None) -> HeaderNode:
        """Return the header for *kind*, creating it on first use."""
        kind = kind or HeaderNode.UNIVERSAL
        if kind not in self._headers:
            self._headers[kind] = HeaderNode(self, kind)
        return self._headers[kind]

    def footer(self, kind: Optional[str] = None) -> FooterNode:
        kind = kind or FooterNode.UNIVERSAL
        if kind not in self._footers:
            self._footers[kind] = FooterNode(self, kind)
        return self._footers[kind]

    def page_break(self) -> None:
        self.store(CommandNode(self, "\\page", None, False))

    def _set_parent(self, value: Any) -> None:
        raise StructuralError("A document cannot have a parent.")

    # -- rendering ----------------------------------------------------------

    def _page_blocks(self, blocks: Mapping[str, HeaderNode], node_class: type[HeaderNode]) -> list[str]:
        rendered = []
        for variant in _PAGE_VARIANTS:
            node = blocks.get(getattr(node_class, variant))
            if node is not None:
                rendered.append(node.to_rtf())
        universal = blocks.get(node_class.UNIVERSAL)
        sided = node_class.LEFT_PAGE in blocks and node_class.RIGHT_PAGE in blocks
        if universal is not None and not sided:
            rendered.append(universal.to_rtf())
        return rendered

    def to_rtf(self) -> str:
        parts = [
            f"{{{self.prefix}\\{self.character_set}\\deff0\\deflang{self.language}\\plain\\fs24\\fet1",
            self.fonts.to_rtf(),
        ]
        if len(self.colours):
            parts.append(self.colours.to_rtf())
        if self.suppress_system_styles:
            parts.append("\\noqfpromote")
        if self.stylesheet is not None:
            parts.append(self.stylesheet.to_rtf())
        parts.append(self.information.to_rtf())
        parts.append(self.lists.to_rtf())
        parts.extend(self._page_blocks(self._headers, HeaderNode))
        parts.extend(self._page_blocks(self._footers, FooterNode))
        if self.properties is not None:
            parts.append(self.properties.to_rtf())
        parts.extend(child.to_rtf() for child in self.children)
        logger.debug("Rendered document with %d top-level nodes", len(self.children))
        return "\n".join(parts) + "\n}"
