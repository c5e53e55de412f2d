"""High-level Markdown-to-RTF conversion.

Ties the parser, style presets and renderer together behind one object.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

from rtfdoc.document import Document
from rtfdoc.logger import get_logger
from rtfdoc.parser import MarkdownParser
from rtfdoc.renderer import RtfRenderer
from rtfdoc.style_manager import StyleManager, check_definitions

logger = get_logger(__name__)

# Generated RTF escapes everything outside 7-bit ASCII.
RTF_ENCODING = "ascii"

INFORMATION_FIELDS = ("title", "author", "company", "comments")


class Converter:
    """Convert Markdown content to RTF.

    Usage::

        converter = Converter(style_preset="business")
        converter.convert_file("input.md", "output.rtf")

        rtf = converter.convert_text("# Hello")

    *stylesheet_path* names a JSON file of stylesheet definitions that are
    merged over the preset by ``id``; *stylesheet* passes such definitions
    directly and is applied after the file. Turn *load_images* off to keep the
    converter from reading image files named in the Markdown.
    """

    STYLE_PRESETS = StyleManager.PRESETS

    def __init__(self, style_preset: str = "default",
                 stylesheet_path: Optional[str | Path] = None,
                 load_images: bool = True,
                 stylesheet: Optional[list[dict[str, Any]]] = None) -> None:
        self.style_manager = StyleManager(style_preset)
        self.load_images = load_images
        if stylesheet_path is not None:
            self.style_manager.load_overrides(stylesheet_path)
        if stylesheet:
            self.style_manager.override(check_definitions(stylesheet, "stylesheet"))
        self.parser = MarkdownParser()

    def build_document(self, markdown_text: str,
                       base_path: Optional[str | Path] = None,
                       information: Optional[Mapping[str, Optional[str]]] = None) -> Document:
        """Parse *markdown_text* and return the document built from it.

        Non-empty values in *information* (``title``, ``author``, ``company``,
        ``comments``) replace what the renderer derived from the text.
        """
        tree = self.parser.parse(markdown_text)
        document = RtfRenderer(self.style_manager, base_path, self.load_images).render(tree)
        for field, value in (information or {}).items():
            if field not in INFORMATION_FIELDS:
                raise ValueError(f"Unknown document information field {field!r}.")
            if value:
                setattr(document.information, field, value)
        return document

    def convert_text(self, markdown_text: str,
                     base_path: Optional[str | Path] = None) -> str:
        """Convert Markdown text to an RTF string.

        Relative image paths are resolved against *base_path* (the current
        directory when omitted).
        """
        return self.build_document(markdown_text, base_path).to_rtf()

    def convert_file(
        self,
        input_path: str | Path,
        output_path: str | Path,
        *,
        encoding: str = "utf-8",
    ) -> None:
        """Read a Markdown file and write the RTF output.

        Images are looked up relative to the input file.

        Args:
            input_path: Path to the input ``.md`` file.
            output_path: Path for the output ``.rtf`` file.
            encoding: Text encoding of the source file.
        """
        input_path = Path(input_path)
        output_path = Path(output_path)

        md_text = input_path.read_text(encoding=encoding)
        rtf = self.convert_text(md_text, base_path=input_path.parent)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(rtf, encoding=RTF_ENCODING)
        logger.debug("Wrote %d characters to %s", len(rtf), output_path)
