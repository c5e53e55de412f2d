"""The document tree.

Every piece of content is a :class:`Node`. Nodes that hold other nodes are
:class:`ContainerNode` instances; most of those are :class:`CommandNode`
instances, which wrap their children in a control-word prefix and suffix
and offer builder methods for adding content::

    doc = Document()
    para = doc.paragraph({"justification": "CENTER"})
    para << "Hello, "
    para.apply({"bold": True}) << "world"
    para.footnote("A note.")

Builders validate the style they are handed and register its fonts and
colours with the owning document before the child node is created.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterator, Optional

from rtfdoc.errors import SchemaError, StructuralError
from rtfdoc.lists import ListLevel, ListTemplate
from rtfdoc.properties import GeometryProperties
from rtfdoc.styles import CharacterStyle, ParagraphStyle, SectionStyle
from rtfdoc.utilities import rtf_escape


class Node:
    """Base class of all tree nodes."""

    is_document = False

    def __init__(self, parent: Optional[ContainerNode] = None) -> None:
        self._parent = parent

    @property
    def parent(self) -> Optional[ContainerNode]:
        return self._parent

    @parent.setter
    def parent(self, value: Optional[ContainerNode]) -> None:
        self._set_parent(value)

    def _set_parent(self, value: Optional[ContainerNode]) -> None:
        self._parent = value

    def _position(self) -> Optional[int]:
        if self._parent is None:
            return None
        for index, child in enumerate(self._parent.children):
            if child is self:
                return index
        return None

    @property
    def previous_node(self) -> Optional[Node]:
        index = self._position()
        if not index:
            return None
        return self._parent.children[index - 1]

    @property
    def next_node(self) -> Optional[Node]:
        index = self._position()
        if index is None or index + 1 >= len(self._parent.children):
            return None
        return self._parent.children[index + 1]

    def is_root(self) -> bool:
        return self._parent is None

    @property
    def root(self) -> Node:
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    @property
    def document(self) -> Any:
        """The owning :class:`~rtfdoc.document.Document`, or ``None``."""
        root = self.root
        return root if root.is_document else None

    def _require_document(self) -> Any:
        document = self.document
        if document is None:
            raise StructuralError(f"{type(self).__name__} is not attached to a document.")
        return document

    def to_rtf(self) -> str:
        raise NotImplementedError(f"{type(self).__name__}.to_rtf")


class TextNode(Node):
    """A run of plain text."""

    def __init__(self, parent: ContainerNode, text: Optional[str] = None) -> None:
        if parent is None:
            raise StructuralError("Text nodes require a parent.")
        super().__init__(parent)
        self.text = text

    def append(self, text: Any) -> None:
        self.text = str(text) if self.text is None else self.text + str(text)

    def insert(self, text: Any, offset: int) -> None:
        if self.text is None:
            self.text = str(text)
        else:
            self.text = self.text[:offset] + str(text) + self.text[offset:]

    def to_rtf(self) -> str:
        return "" if self.text is None else rtf_escape(self.text)


class ContainerNode(Node):
    """A node with an ordered list of children."""

    def __init__(self, parent: Optional[ContainerNode] = None) -> None:
        super().__init__(parent)
        self.children: list[Node] = []

    def store(self, node: Optional[Node]) -> Optional[Node]:
        """Adopt *node* as the last child (``None`` is ignored)."""
        if node is None:
            return None
        if node.parent is not self:
            node.parent = self
        if not any(child is node for child in self.children):
            self.children.append(node)
        return node

    @property
    def first(self) -> Optional[Node]:
        return self.children[0] if self.children else None

    @property
    def last(self) -> Optional[Node]:
        return self.children[-1] if self.children else None

    @property
    def size(self) -> int:
        return len(self.children)

    def __len__(self) -> int:
        return len(self.children)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.children)

    def __getitem__(self, index: int) -> Node:
        return self.children[index]


class CommandNode(ContainerNode):
    """Children wrapped in a prefix and suffix.

    *split* puts each child on its own line; *wrap* encloses the whole node
    in a group.
    """

    def __init__(
        self,
        parent: Optional[ContainerNode],
        prefix: Optional[str] = "",
        suffix: Optional[str] = None,
        split: bool = True,
        wrap: bool = True,
    ) -> None:
        super().__init__(parent)
        self.prefix = prefix
        self.suffix = suffix
        self.split = split
        self.wrap = wrap

    def to_rtf(self) -> str:
        parts = ["{" if self.wrap else "", self.prefix or ""]
        for child in self.children:
            if self.split:
                parts.append("\n")
            parts.append(child.to_rtf())
        if self.split:
            parts.append("\n")
        parts.append(self.suffix or "")
        if self.wrap:
            parts.append("}")
        return "".join(parts)

    # -- text ---------------------------------------------------------------

    def write(self, text: Any) -> CommandNode:
        """Append text, extending the trailing text node when there is one."""
        last = self.last
        if isinstance(last, TextNode):
            last.append(text)
        else:
            self.store(TextNode(self, str(text)))
        return self

    def __lshift__(self, text: Any) -> CommandNode:
        return self.write(text)

    # -- builders -----------------------------------------------------------

    def paragraph(self, style: Any = None) -> ParagraphNode:
        if isinstance(style, Mapping):
            style = ParagraphStyle(style)
        elif style is not None and not isinstance(style, ParagraphStyle):
            raise SchemaError(f"Invalid paragraph style {style!r}.")
        document = self._register(style)
        return self.store(ParagraphNode(self, style, document))

    def section(self, style: Any = None) -> SectionNode:
        if isinstance(style, Mapping):
            style = SectionStyle(style)
        elif style is not None and not isinstance(style, SectionStyle):
            raise SchemaError(f"Invalid section style {style!r}.")
        document = self._register(style)
        return self.store(SectionNode(self, style, document))

    def apply(self, style: Any) -> CommandNode:
        """Wrap subsequent content in a character style."""
        if isinstance(style, Mapping):
            style = CharacterStyle(style)
        elif not isinstance(style, CharacterStyle):
            raise SchemaError(f"Invalid character style {style!r}.")
        document = self._register(style)
        return self.store(CommandNode(self, style.prefix(document)))

    def list(self, kind: str = "bullets") -> ListLevelNode:
        """Start a new list and return its first level."""
        node = self.store(ListNode(self))
        return node.list(kind)

    def link(self, url: str, text: Optional[str] = None) -> LinkNode:
        node = self.store(LinkNode(self, url))
        if text:
            node.write(text)
        return node

    def table(self, rows: int, columns: int, *widths: Any) -> Any:
        from rtfdoc.table import TableNode

        return self.store(TableNode(self, rows, columns, *widths))

    def geometry(self, properties: Any = None) -> GeometryNode:
        return self.store(GeometryNode(self, properties))

    def image(self, source: Any, options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Any:
        from rtfdoc.image import ImageNode

        document = self._require_document()
        return self.store(ImageNode(self, source, document.get_id(), options, **kwargs))

    def footnote(self, text: Optional[str]) -> None:
        """Insert a footnote mark here with *text* as the note body."""
        if not text:
            return
        mark = CommandNode(self, "\\fs16\\up6\\chftn", None, False)
        note = CommandNode(self, "\\footnote {\\fs16\\up6\\chftn}", None, False)
        note.paragraph().write(text)
        self.store(mark)
        self.store(note)

    def line_break(self) -> None:
        self.store(CommandNode(self, "\\line", None, False))

    def column_break(self) -> None:
        self.store(CommandNode(self, "\\column", None, False))

    def tab(self) -> None:
        self.store(CommandNode(self, "\\tab", None, False))

    def _register(self, style: Any) -> Any:
        """Push *style*'s fonts and colours into the document tables."""
        document = self.document
        if style is not None:
            if document is None:
                raise StructuralError(
                    f"Cannot apply {type(style).__name__} outside of a document."
                )
            style.push_colours(document.colours)
            style.push_fonts(document.fonts)
        return document


# ---------------------------------------------------------------------------
# Specialised nodes
# ---------------------------------------------------------------------------

class ParagraphNode(CommandNode):
    def __init__(self, parent: ContainerNode, style: Optional[ParagraphStyle] = None,
                 document: Any = None) -> None:
        prefix = "\\pard"
        if style is not None:
            prefix += style.prefix(document)
        super().__init__(parent, prefix, "\\par")
        self.style = style


class SectionNode(CommandNode):
    """Marks a section break; never holds children."""

    def __init__(self, parent: ContainerNode, style: Optional[SectionStyle] = None,
                 document: Any = None) -> None:
        prefix = "\\sect\\sectd"
        if style is not None:
            prefix += style.prefix(document)
        super().__init__(parent, prefix, "", True, False)
        self.style = style

    def store(self, node: Optional[Node]) -> Optional[Node]:
        raise StructuralError(f"Section nodes cannot hold children (tried to add {node!r}).")


class LinkNode(CommandNode):
    def __init__(self, parent: ContainerNode, url: str) -> None:
        prefix = f'\\field{{\\*\\fldinst HYPERLINK "{rtf_escape(url)}"}}{{\\fldrslt '
        super().__init__(parent, prefix, "}", False)
        self.url = url


class HeaderNode(CommandNode):
    """Page header; one per page variant."""

    UNIVERSAL = "header"
    LEFT_PAGE = "headerl"
    RIGHT_PAGE = "headerr"
    FIRST_PAGE = "headerf"

    def __init__(self, document: Any, kind: Optional[str] = None) -> None:
        kind = kind or self.UNIVERSAL
        kinds = (self.UNIVERSAL, self.LEFT_PAGE, self.RIGHT_PAGE, self.FIRST_PAGE)
        if kind not in kinds:
            raise SchemaError(f"Invalid {type(self).__name__} kind {kind!r}. Choose from: {', '.join(kinds)}")
        super().__init__(document, f"\\{kind}", None, False)
        self.kind = kind

    def footnote(self, text: Optional[str]) -> None:
        raise StructuralError(f"Footnotes are not permitted in a {type(self).__name__}.")


class FooterNode(HeaderNode):
    UNIVERSAL = "footer"
    LEFT_PAGE = "footerl"
    RIGHT_PAGE = "footerr"
    FIRST_PAGE = "footerf"


class ListNode(CommandNode):
    """A top-level list; owns a fresh template in the document list table."""

    def __init__(self, parent: ContainerNode) -> None:
        tabs = "".join(f"\\tx{tab}" for tab in ListLevel.RESET_TABS)
        suffix = f"\\pard{tabs}\\ql\\qlnatural\\pardirnatural\\cf0 \\"
        super().__init__(parent, "\\", suffix, True, False)
        self.template: ListTemplate = self._require_document().lists.new_template()

    def list(self, kind: str = "bullets") -> ListLevelNode:
        return self.store(ListLevelNode(self, self.template, kind))


class ListLevelNode(CommandNode):
    """One nesting level of a list; holds items and deeper levels."""

    def __init__(self, parent: ContainerNode, template: ListTemplate, kind: str,
                 level: int = 1) -> None:
        self.template = template
        self.kind = kind
        self.level: ListLevel = template.level_for(level, kind)
        tabs = "".join(f"\\tx{tab}" for tab in self.level.tabs)
        prefix = (
            f"\\pard{tabs}\\li{self.level.indent}\\fi-{self.level.indent}"
            "\\ql\\qlnatural\\pardirnatural\n"
            f"\\ls{template.id}\\ilvl{self.level.level - 1}\\cf0"
        )
        super().__init__(parent, prefix, None, True, False)

    def item(self) -> ListTextNode:
        return self.store(ListTextNode(self, self.level))

    def list(self, kind: Optional[str] = None) -> ListLevelNode:
        """Nest a level one deeper, inheriting this level's kind by default."""
        return self.store(
            ListLevelNode(self, self.template, kind or self.kind, self.level.level + 1)
        )


class ListTextNode(CommandNode):
    """A single list item; numbered by its position among sibling items."""

    def __init__(self, parent: ListLevelNode, level: ListLevel) -> None:
        number = 1 + sum(isinstance(child, ListTextNode) for child in parent.children)
        prefix = f"{{\\listtext{level.marker.text_format(number)}}}"
        super().__init__(parent, prefix, "\\", False, False)
        self.number = number

    def list(self, kind: str = "bullets") -> ListLevelNode:
        raise StructuralError("Nest lists from the list level, not from an item.")

    def paragraph(self, style: Any = None) -> ParagraphNode:
        raise StructuralError("List items cannot contain paragraphs.")

    def table(self, rows: int, columns: int, *widths: Any) -> Any:
        raise StructuralError("List items cannot contain tables.")

    def geometry(self, properties: Any = None) -> GeometryNode:
        raise StructuralError("List items cannot contain geometry objects.")


class GeometryNode(CommandNode):
    """A drawing shape; any content is placed in the shape's text box."""

    def __init__(self, parent: ContainerNode, properties: Any = None) -> None:
        if properties is None:
            properties = GeometryProperties()
        elif isinstance(properties, Mapping):
            properties = GeometryProperties(properties)
        elif not isinstance(properties, GeometryProperties):
            raise SchemaError(f"Invalid geometry properties {properties!r}.")
        self.properties = properties
        super().__init__(parent, "{\\shp{\\*\\shpinst" + properties.to_rtf(), "}}", False, False)

    def to_rtf(self) -> str:
        parts = [self.prefix]
        if self.children:
            parts.append("{\\shptxt")
            for child in self.children:
                parts.append("\n")
                parts.append(child.to_rtf())
            parts.append("}")
        parts.append(self.suffix)
        return "".join(parts)

    def write(self, text: Any) -> GeometryNode:
        self.paragraph().write(text)
        return self

    def geometry(self, properties: Any = None) -> GeometryNode:
        raise StructuralError("Cannot place a geometry object inside another.")
