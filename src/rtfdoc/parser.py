"""Markdown front end: mistune v3 tokens to a small typed tree.

:class:`MarkdownParser` runs mistune in AST mode and normalises its token
dictionaries into :class:`MarkdownNode` objects, which is what
:class:`~rtfdoc.renderer.RtfRenderer` consumes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

import mistune


class Kind(Enum):
    DOCUMENT = "document"
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    TEXT = "text"
    STRONG = "strong"
    EMPHASIS = "emphasis"
    STRIKETHROUGH = "strikethrough"
    CODESPAN = "codespan"
    CODE_BLOCK = "code_block"
    LIST = "list"
    LIST_ITEM = "list_item"
    TABLE = "table"
    TABLE_ROW = "table_row"
    TABLE_CELL = "table_cell"
    BLOCK_QUOTE = "block_quote"
    THEMATIC_BREAK = "thematic_break"
    LINK = "link"
    IMAGE = "image"
    FOOTNOTE_REF = "footnote_ref"
    FOOTNOTE = "footnote"
    LINE_BREAK = "line_break"
    SOFT_BREAK = "soft_break"


INLINE_KINDS = frozenset({
    Kind.TEXT,
    Kind.STRONG,
    Kind.EMPHASIS,
    Kind.STRIKETHROUGH,
    Kind.CODESPAN,
    Kind.LINK,
    Kind.IMAGE,
    Kind.FOOTNOTE_REF,
    Kind.LINE_BREAK,
    Kind.SOFT_BREAK,
})


@dataclass
class MarkdownNode:
    kind: Kind
    children: list[MarkdownNode] = field(default_factory=list)
    text: str = ""
    # heading level
    level: int = 0
    # code block info string
    info: str = ""
    # link / image
    url: str = ""
    title: str = ""
    # table cell
    align: str = ""
    header: bool = False
    # list
    ordered: bool = False
    start: int = 1
    # task list item; None for a plain item
    checked: Optional[bool] = None
    # footnote key
    key: str = ""

    @property
    def is_inline(self) -> bool:
        return self.kind in INLINE_KINDS

    def plain_text(self) -> str:
        """Concatenated text of this node and its descendants."""
        if self.kind is Kind.SOFT_BREAK:
            return " "
        if self.kind is Kind.LINE_BREAK:
            return "\n"
        return self.text + "".join(child.plain_text() for child in self.children)


class MarkdownParser:
    """Parse Markdown text into a :class:`MarkdownNode` tree.

    Usage::

        tree = MarkdownParser().parse("# Title\\n\\nSome *text*.")
        tree.children[0].kind   # Kind.HEADING
    """

    PLUGINS = ("table", "strikethrough", "footnotes", "task_lists")

    def __init__(self) -> None:
        self._markdown = mistune.create_markdown(renderer=None, plugins=list(self.PLUGINS))

    # -- public API ---------------------------------------------------------

    def parse(self, markdown_text: str) -> MarkdownNode:
        tokens: list[dict[str, Any]] = self._markdown(markdown_text)  # type: ignore[assignment]
        return MarkdownNode(Kind.DOCUMENT, children=self._nodes(tokens))

    # -- token conversion ---------------------------------------------------

    def _nodes(self, tokens: Any) -> list[MarkdownNode]:
        if tokens is None:
            return []
        if isinstance(tokens, str):
            return [MarkdownNode(Kind.TEXT, text=tokens)]
        nodes: list[MarkdownNode] = []
        for token in tokens:
            if token.get("type") == "footnotes":
                # Definitions arrive in one trailing container; lift them out.
                nodes.extend(self._footnote(item) for item in token.get("children", []))
                continue
            node = self._node(token)
            if node is not None:
                nodes.append(node)
        return nodes

    def _node(self, token: dict[str, Any]) -> Optional[MarkdownNode]:
        handler = getattr(self, f"_handle_{token.get('type', '')}", None)
        if handler is not None:
            return handler(token)
        raw = token.get("raw") or token.get("text")
        if raw:
            return MarkdownNode(Kind.TEXT, text=str(raw))
        return None

    def _wrap(self, kind: Kind, token: dict[str, Any]) -> MarkdownNode:
        return MarkdownNode(kind, children=self._nodes(token.get("children") or token.get("text", "")))

    # -- blocks -------------------------------------------------------------

    def _handle_heading(self, token: dict) -> MarkdownNode:
        node = self._wrap(Kind.HEADING, token)
        node.level = token.get("attrs", {}).get("level", 1)
        return node

    def _handle_paragraph(self, token: dict) -> MarkdownNode:
        return self._wrap(Kind.PARAGRAPH, token)

    # tight list items hold block_text instead of paragraphs
    _handle_block_text = _handle_paragraph

    def _handle_block_code(self, token: dict) -> MarkdownNode:
        info = token.get("attrs", {}).get("info") or ""
        return MarkdownNode(Kind.CODE_BLOCK, text=str(token.get("raw", "")), info=info)

    def _handle_block_quote(self, token: dict) -> MarkdownNode:
        return self._wrap(Kind.BLOCK_QUOTE, token)

    def _handle_thematic_break(self, _token: dict) -> MarkdownNode:
        return MarkdownNode(Kind.THEMATIC_BREAK)

    def _handle_blank_line(self, _token: dict) -> None:
        return None

    def _handle_list(self, token: dict) -> MarkdownNode:
        attrs = token.get("attrs", {})
        return MarkdownNode(
            Kind.LIST,
            children=self._nodes(token.get("children", [])),
            ordered=bool(attrs.get("ordered", False)),
            start=attrs.get("start") or 1,
        )

    def _handle_list_item(self, token: dict) -> MarkdownNode:
        return self._wrap(Kind.LIST_ITEM, token)

    def _handle_task_list_item(self, token: dict) -> MarkdownNode:
        node = self._wrap(Kind.LIST_ITEM, token)
        node.checked = bool(token.get("attrs", {}).get("checked", False))
        return node

    # -- tables -------------------------------------------------------------

    def _handle_table(self, token: dict) -> MarkdownNode:
        rows: list[MarkdownNode] = []
        for section in token.get("children", []):
            header = section.get("type") == "table_head"
            children = section.get("children", [])
            if header:
                # the head holds its cells directly, as one implicit row
                rows.append(self._row(children, header=True))
            else:
                rows.extend(self._row(row.get("children", []), header=False) for row in children)
        return MarkdownNode(Kind.TABLE, children=rows)

    def _row(self, cells: list[dict], *, header: bool) -> MarkdownNode:
        row = MarkdownNode(Kind.TABLE_ROW)
        for cell in cells:
            attrs = cell.get("attrs", {})
            row.children.append(MarkdownNode(
                Kind.TABLE_CELL,
                children=self._nodes(cell.get("children", [])),
                align=attrs.get("align") or "",
                header=bool(attrs.get("head", header)),
            ))
        return row

    # -- inline -------------------------------------------------------------

    def _handle_text(self, token: dict) -> MarkdownNode:
        return MarkdownNode(Kind.TEXT, text=str(token.get("raw", "")))

    def _handle_strong(self, token: dict) -> MarkdownNode:
        return self._wrap(Kind.STRONG, token)

    def _handle_emphasis(self, token: dict) -> MarkdownNode:
        return self._wrap(Kind.EMPHASIS, token)

    def _handle_strikethrough(self, token: dict) -> MarkdownNode:
        return self._wrap(Kind.STRIKETHROUGH, token)

    def _handle_codespan(self, token: dict) -> MarkdownNode:
        return MarkdownNode(Kind.CODESPAN, text=str(token.get("raw", "")))

    def _handle_link(self, token: dict) -> MarkdownNode:
        attrs = token.get("attrs", {})
        node = self._wrap(Kind.LINK, token)
        node.url = attrs.get("url", "")
        node.title = attrs.get("title") or ""
        return node

    def _handle_image(self, token: dict) -> MarkdownNode:
        attrs = token.get("attrs", {})
        alt = "".join(child.plain_text() for child in self._nodes(token.get("children", [])))
        return MarkdownNode(
            Kind.IMAGE,
            text=alt,
            url=attrs.get("url", ""),
            title=attrs.get("title") or "",
        )

    def _handle_linebreak(self, _token: dict) -> MarkdownNode:
        return MarkdownNode(Kind.LINE_BREAK)

    def _handle_softbreak(self, _token: dict) -> MarkdownNode:
        return MarkdownNode(Kind.SOFT_BREAK)

    def _handle_inline_html(self, token: dict) -> MarkdownNode:
        return MarkdownNode(Kind.TEXT, text=str(token.get("raw", "")))

    _handle_block_html = _handle_inline_html

    # -- footnotes ----------------------------------------------------------

    def _handle_footnote_ref(self, token: dict) -> MarkdownNode:
        return MarkdownNode(Kind.FOOTNOTE_REF, key=str(token.get("raw", "")))

    def _footnote(self, token: dict) -> MarkdownNode:
        node = self._wrap(Kind.FOOTNOTE, token)
        node.key = str(token.get("attrs", {}).get("key", ""))
        return node
