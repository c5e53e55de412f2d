"""rtfdoc - build RTF documents in Python and convert Markdown to RTF."""

__version__ = "0.1.0"

from rtfdoc.document import Document
from rtfdoc.errors import FormatError, RTFError, SchemaError, StructuralError
from rtfdoc.information import Information
from rtfdoc.properties import DocumentProperties, GeometryProperties
from rtfdoc.styles import (
    BorderStyle,
    CharacterStyle,
    ParagraphStyle,
    PositionStyle,
    SectionStyle,
    ShadingStyle,
    TabStyle,
)
from rtfdoc.stylesheet import ResolvedStylesheet, Stylesheet
from rtfdoc.tables import Colour, Font

__all__ = [
    "__version__",
    "BorderStyle",
    "CharacterStyle",
    "Colour",
    "Document",
    "DocumentProperties",
    "Font",
    "FormatError",
    "GeometryProperties",
    "Information",
    "ParagraphStyle",
    "PositionStyle",
    "RTFError",
    "ResolvedStylesheet",
    "SchemaError",
    "SectionStyle",
    "ShadingStyle",
    "StructuralError",
    "Stylesheet",
    "TabStyle",
]
