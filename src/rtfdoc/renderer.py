"""RTF renderer - builds a :class:`~rtfdoc.document.Document` from Markdown.

The renderer walks the :class:`~rtfdoc.parser.MarkdownNode` tree produced
by :mod:`rtfdoc.parser` and drives the document builders: every block
becomes a paragraph carrying one of the preset's stylesheet styles, and
inline markup becomes character-formatted groups inside it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Union
from urllib.parse import unquote, urlparse

from rtfdoc.document import Document
from rtfdoc.errors import RTFError
from rtfdoc.image import inspect_image, read_source
from rtfdoc.logger import get_logger
from rtfdoc.nodes import CommandNode, ListLevelNode
from rtfdoc.page import Margin, Size
from rtfdoc.parser import Kind, MarkdownNode
from rtfdoc.style_manager import StyleManager
from rtfdoc.styles import ParagraphStyle
from rtfdoc.tables import Colour

logger = get_logger(__name__)

# Usable line width of the default page (letter, 1in margins).
TEXT_WIDTH = Size().width - Margin().left - Margin().right
# One screen pixel at 96 dpi.
TWIPS_PER_PIXEL = 15

TABLE_BORDER_WIDTH = 10
HEADER_SHADING = Colour(0xE7, 0xE6, 0xE6)

_CELL_ALIGNMENTS = {"left": "LEFT", "center": "CENTER", "right": "RIGHT"}
_TASK_GLYPHS = {True: "☑ ", False: "☐ "}

# Options that describe a stylesheet entry rather than its formatting.
_ENTRY_KEYS = ("id", "type", "default", "next_style", "base_style", "primary")


class RtfRenderer:
    """Render a Markdown tree into a new :class:`Document`.

    *base_path* is the directory relative image paths are resolved from.
    With *load_images* off, every image is replaced by its alt text.
    """

    def __init__(self, style_manager: Optional[StyleManager] = None,
                 base_path: Optional[Union[str, Path]] = None,
                 load_images: bool = True) -> None:
        self.style: StyleManager = style_manager or StyleManager()
        self.load_images = load_images
        self.base_path = Path(base_path) if base_path is not None else Path.cwd()
        self._document: Optional[Document] = None
        self._footnotes: dict[str, MarkdownNode] = {}
        self._cell_styles: dict[tuple[str, str], ParagraphStyle] = {}

    # ======================================================================
    # Public API
    # ======================================================================

    def render(self, root: MarkdownNode) -> Document:
        """Return a new document holding the content of *root*."""
        if root.kind is not Kind.DOCUMENT:
            raise ValueError(f"Expected a document node, got {root.kind.value!r}")
        body = self.style.get_style("body")
        self._document = Document(
            default_font=body.font.font,
            stylesheet=self.style.stylesheet_entries(),
        )
        self._cell_styles = {}
        self._footnotes = {
            child.key: child for child in root.children if child.kind is Kind.FOOTNOTE
        }

        for child in root.children:
            if child.kind is Kind.HEADING and child.level == 1:
                self._document.information.title = child.plain_text().strip()
                break

        for child in root.children:
            self._render_block(child, self._document)
        logger.debug("Rendered %d blocks", len(self._document.children))
        return self._document

    # ======================================================================
    # Block dispatch
    # ======================================================================

    @property
    def _sheet(self) -> Any:
        return self._document.stylesheet

    def _render_block(self, node: MarkdownNode, parent: CommandNode) -> None:
        if node.is_inline:
            # stray inline content at block level
            self._inline([node], parent.paragraph(self._sheet["body"]))
            return
        handler = getattr(self, f"_render_{node.kind.value}", None)
        if handler is not None:
            handler(node, parent)

    def _render_heading(self, node: MarkdownNode, parent: CommandNode) -> None:
        style_id = self.style.heading_style_id(node.level)
        self._inline(node.children, parent.paragraph(self._sheet[style_id]))

    def _render_paragraph(self, node: MarkdownNode, parent: CommandNode,
                          style_id: str = "body") -> None:
        if not node.children:
            return
        self._inline(node.children, parent.paragraph(self._sheet[style_id]))

    def _render_code_block(self, node: MarkdownNode, parent: CommandNode) -> None:
        para = parent.paragraph(self._sheet["code_block"])
        lines = node.text.split("\n")
        if lines and lines[-1] == "":
            lines = lines[:-1]
        for index, line in enumerate(lines):
            if index:
                para.line_break()
            if line:
                para.write(line)

    def _render_block_quote(self, node: MarkdownNode, parent: CommandNode) -> None:
        for child in node.children:
            if child.kind is Kind.PARAGRAPH:
                self._render_paragraph(child, parent, "blockquote")
            else:
                self._render_block(child, parent)

    def _render_thematic_break(self, _node: MarkdownNode, parent: CommandNode) -> None:
        parent.paragraph(self._sheet["horizontal_rule"])

    def _render_footnote(self, _node: MarkdownNode, _parent: CommandNode) -> None:
        # definitions are placed at their reference
        return None

    # ======================================================================
    # Lists
    # ======================================================================

    def _render_list(self, node: MarkdownNode, parent: CommandNode) -> None:
        level = parent.list(self._list_kind(node))
        self._render_list_items(node, level)

    def _render_list_items(self, node: MarkdownNode, level: ListLevelNode) -> None:
        font = self.style.get_style("list_item").font.to_options()
        for item in node.children:
            target = level.item().apply(font)
            if item.checked is not None:
                target.write(_TASK_GLYPHS[item.checked])
            nested: list[MarkdownNode] = []
            first = True
            for child in item.children:
                if child.kind is Kind.LIST:
                    nested.append(child)
                    continue
                if not first:
                    target.line_break()
                first = False
                if child.kind is Kind.PARAGRAPH:
                    self._inline(child.children, target)
                elif child.is_inline:
                    self._inline([child], target)
                else:
                    # list items hold runs only; keep other blocks as text
                    target.write(child.plain_text().strip())
            for child in nested:
                self._render_list_items(child, level.list(self._list_kind(child)))

    @staticmethod
    def _list_kind(node: MarkdownNode) -> str:
        return "decimal" if node.ordered else "bullets"

    # ======================================================================
    # Tables
    # ======================================================================

    def _render_table(self, node: MarkdownNode, parent: CommandNode) -> None:
        rows = [row for row in node.children if row.children]
        if not rows:
            return
        columns = max(len(row.children) for row in rows)
        widths = [TEXT_WIDTH // columns] * columns
        table = parent.table(len(rows), columns, *widths)
        table.border_width = TABLE_BORDER_WIDTH

        for x, row in enumerate(rows):
            if all(cell.header for cell in row.children):
                table.row_shading_colour(x, HEADER_SHADING)
            for y, cell in enumerate(row.children):
                target = table[x][y]
                style_id = "table_header" if cell.header else "table_body"
                target.style = self._cell_style(style_id, cell.align)
                self._inline(cell.children, target)

    def _cell_style(self, style_id: str, align: str) -> ParagraphStyle:
        """The sheet style for a cell, or a copy of it with the column alignment."""
        if align not in _CELL_ALIGNMENTS:
            return self._sheet[style_id]
        key = (style_id, align)
        if key not in self._cell_styles:
            entry = self.style.get_style(style_id).to_entry()
            for name in _ENTRY_KEYS:
                entry.pop(name, None)
            entry["justification"] = _CELL_ALIGNMENTS[align]
            self._cell_styles[key] = ParagraphStyle(entry)
        return self._cell_styles[key]

    # ======================================================================
    # Inline content
    # ======================================================================

    def _inline(self, nodes: list[MarkdownNode], target: CommandNode) -> None:
        for node in nodes:
            kind = node.kind
            if kind is Kind.TEXT:
                if node.text:
                    target.write(node.text)
            elif kind is Kind.STRONG:
                self._inline(node.children, target.apply({"bold": True}))
            elif kind is Kind.EMPHASIS:
                self._inline(node.children, target.apply({"italic": True}))
            elif kind is Kind.STRIKETHROUGH:
                self._inline(node.children, target.apply({"strike": True}))
            elif kind is Kind.CODESPAN:
                target.apply(self._sheet["inline_code"]).write(node.text)
            elif kind is Kind.LINK:
                self._render_link(node, target)
            elif kind is Kind.IMAGE:
                self._render_image(node, target)
            elif kind is Kind.FOOTNOTE_REF:
                self._render_footnote_ref(node, target)
            elif kind is Kind.LINE_BREAK:
                target.line_break()
            elif kind is Kind.SOFT_BREAK:
                target.write(" ")
            else:
                text = node.plain_text()
                if text:
                    target.write(text)

    def _render_link(self, node: MarkdownNode, target: CommandNode) -> None:
        link = target.link(node.url)
        styled = link.apply(self._sheet["link"])
        if node.children:
            self._inline(node.children, styled)
        else:
            styled.write(node.url)

    def _render_footnote_ref(self, node: MarkdownNode, target: CommandNode) -> None:
        definition = self._footnotes.get(node.key)
        if definition is None:
            logger.warning("Footnote %r has no definition", node.key)
            target.write(f"[^{node.key}]")
            return
        text = " ".join(child.plain_text().strip() for child in definition.children)
        target.footnote(text.strip() or node.key)

    def _render_image(self, node: MarkdownNode, target: CommandNode) -> None:
        if not self.load_images:
            self._image_fallback(node, target)
            return
        source = self._image_path(node.url)
        if source is None:
            logger.warning("Skipping remote image %s", node.url)
            self._image_fallback(node, target)
            return
        try:
            data = read_source(source)
            _, width, _ = inspect_image(data)
            target.image(
                data,
                width=min(width * TWIPS_PER_PIXEL, TEXT_WIDTH),
                sizing_mode="FIX_ASPECT_RATIO",
            )
        except RTFError as exc:
            logger.warning("Skipping image %s: %s", node.url, exc)
            self._image_fallback(node, target)

    def _image_path(self, url: str) -> Optional[Path]:
        parsed = urlparse(url)
        if parsed.scheme in ("", "file"):
            path = Path(unquote(parsed.path))
            return path if path.is_absolute() else self.base_path / path
        return None

    @staticmethod
    def _image_fallback(node: MarkdownNode, target: CommandNode) -> None:
        alt = node.text or node.title or node.url or "image"
        target.apply({"italic": True}).write(f"[Image: {alt}]")
