"""Fixed-shape tables.

A table is created with its row and column counts and column widths, and
cannot be reshaped afterwards. Content goes into the cells::

    table = doc.table(2, 3, "2in", "1in", "1in")
    table.border_width = 5
    table[0][0] << "Name"
    table.row_shading_colour(0, Colour(230, 230, 230))
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from rtfdoc.errors import SchemaError, StructuralError
from rtfdoc.logger import get_logger
from rtfdoc.nodes import CommandNode, ContainerNode, Node
from rtfdoc.styles import ParagraphStyle
from rtfdoc.tables import Colour
from rtfdoc.utilities import value2twips

logger = get_logger(__name__)


def _positive(width: Any) -> Optional[int]:
    if width is None or width <= 0:
        return None
    return int(width)


class TableNode(ContainerNode):
    """A grid of :class:`TableRowNode` rows."""

    def __init__(self, parent: ContainerNode, rows: int, columns: int, *widths: Any) -> None:
        if rows < 1 or columns < 1:
            raise SchemaError(f"A table needs at least one row and one column, got {rows}x{columns}.")
        super().__init__(parent)
        self.cell_margin = 100
        twips = [value2twips(width) for width in widths[:columns]]
        twips += [TableCellNode.DEFAULT_WIDTH] * (columns - len(twips))
        self.children = [TableRowNode(self, columns, *twips) for _ in range(rows)]
        logger.debug("Created %dx%d table with widths %s", rows, columns, twips)

    @property
    def rows(self) -> int:
        return len(self.children)

    @property
    def columns(self) -> int:
        return len(self.children[0])

    def store(self, node: Optional[Node]) -> Optional[Node]:
        raise StructuralError("Rows and cells of a table are fixed when it is created.")

    def _set_border_width(self, width: Optional[int]) -> None:
        for row in self.children:
            row.border_width = width

    border_width = property(fset=_set_border_width, doc="Set every cell border of the table.")

    def row_shading_colour(self, index: int, colour: Colour) -> None:
        if 0 <= index < len(self.children):
            self.children[index].shading_colour = colour

    def column_shading_colour(self, index: int, colour: Colour) -> None:
        for row in self.children:
            if 0 <= index < len(row.children):
                row.children[index].shading_colour = colour

    def shading_colour(self, colour: Colour,
                       predicate: Callable[[TableCellNode, int, int], bool]) -> None:
        """Shade every cell for which ``predicate(cell, row, column)`` is true."""
        for x, row in enumerate(self.children):
            for y, cell in enumerate(row.children):
                if predicate(cell, x, y):
                    cell.shading_colour = colour

    def to_rtf(self) -> str:
        text = "\n".join(row.to_rtf() for row in self.children)
        head, _, tail = text.rpartition("\\row")
        return f"{head}\\lastrow\n\\row{tail}"


class TableRowNode(ContainerNode):
    def __init__(self, table: TableNode, cells: int, *widths: int) -> None:
        super().__init__(table)
        self.children = [TableCellNode(self, widths[index]) for index in range(cells)]

    def _set_parent(self, value: Any) -> None:
        raise StructuralError("Table rows cannot be moved to another parent.")

    def store(self, node: Optional[Node]) -> Optional[Node]:
        raise StructuralError("A table row holds exactly the cells it was created with.")

    def _set_border_width(self, width: Optional[int]) -> None:
        for cell in self.children:
            cell.border_width = width

    def _set_shading_colour(self, colour: Colour) -> None:
        for cell in self.children:
            cell.shading_colour = colour

    border_width = property(fset=_set_border_width)
    shading_colour = property(fset=_set_shading_colour)

    def to_rtf(self) -> str:
        document = self._require_document()
        definition = [f"\\trowd\\tgraph{self.parent.cell_margin}"]
        cells = []
        offset = 0
        for cell in self.children:
            top, right, bottom, left = cell.border_widths
            line = ""
            for side, width in (("t", top), ("l", left), ("b", bottom), ("r", right)):
                if width:
                    line += f"\\clbrdr{side}\\brdrw{width}\\brdrs"
            if cell.shading_colour is not None:
                line += f"\\clcbpat{document.colours.index(cell.shading_colour)}"
            offset += cell.width
            line += f"\\cellx{offset}"
            definition.append(line)
            cells.append(cell.to_rtf())
        return "\n".join(definition + cells) + "\n\\row"


class TableCellNode(CommandNode):
    """One table cell; holds text and character runs, not paragraphs."""

    DEFAULT_WIDTH = 300
    TOP, RIGHT, BOTTOM, LEFT = range(4)

    def __init__(self, row: TableRowNode, width: Optional[int] = None,
                 style: Optional[ParagraphStyle] = None, top: Optional[int] = None,
                 right: Optional[int] = None, bottom: Optional[int] = None,
                 left: Optional[int] = None) -> None:
        super().__init__(row, None)
        self.width = width if width is not None and width > 0 else self.DEFAULT_WIDTH
        self._borders = [_positive(top), _positive(right), _positive(bottom), _positive(left)]
        self._shading_colour: Optional[Colour] = None
        self.style = style

    # -- style ----------------------------------------------------------------

    @property
    def style(self) -> Optional[ParagraphStyle]:
        return self._style

    @style.setter
    def style(self, style: Optional[ParagraphStyle]) -> None:
        if style is not None and not isinstance(style, ParagraphStyle):
            raise SchemaError(f"Table cells take paragraph styles, got {style!r}.")
        if style is not None and self.document is not None:
            style.push_colours(self.document.colours)
            style.push_fonts(self.document.fonts)
        self._style = style

    # -- borders ------------------------------------------------------------

    @property
    def border_widths(self) -> list[int]:
        """``[top, right, bottom, left]`` with 0 for no border."""
        return [width or 0 for width in self._borders]

    def _set_border_width(self, width: Optional[int]) -> None:
        self._borders = [_positive(width)] * 4

    border_width = property(fset=_set_border_width, doc="Set all four borders at once.")

    def _border(self, side: int) -> int:
        return self._borders[side] or 0

    @property
    def top_border_width(self) -> int:
        return self._border(self.TOP)

    @top_border_width.setter
    def top_border_width(self, width: Optional[int]) -> None:
        self._borders[self.TOP] = _positive(width)

    @property
    def right_border_width(self) -> int:
        return self._border(self.RIGHT)

    @right_border_width.setter
    def right_border_width(self, width: Optional[int]) -> None:
        self._borders[self.RIGHT] = _positive(width)

    @property
    def bottom_border_width(self) -> int:
        return self._border(self.BOTTOM)

    @bottom_border_width.setter
    def bottom_border_width(self, width: Optional[int]) -> None:
        self._borders[self.BOTTOM] = _positive(width)

    @property
    def left_border_width(self) -> int:
        return self._border(self.LEFT)

    @left_border_width.setter
    def left_border_width(self, width: Optional[int]) -> None:
        self._borders[self.LEFT] = _positive(width)

    # -- shading ------------------------------------------------------------

    @property
    def shading_colour(self) -> Optional[Colour]:
        return self._shading_colour

    @shading_colour.setter
    def shading_colour(self, colour: Optional[Colour]) -> None:
        if colour is not None:
            self._require_document().colours.insert(colour)
        self._shading_colour = colour

    # -- structure ----------------------------------------------------------

    def _set_parent(self, value: Any) -> None:
        raise StructuralError("Table cells cannot be moved to another parent.")

    def paragraph(self, style: Any = None) -> Any:
        raise StructuralError("Table cells cannot contain paragraphs; write to the cell directly.")

    def table(self, rows: int, columns: int, *widths: Any) -> Any:
        raise StructuralError("Nested tables are not supported.")

    def to_rtf(self) -> str:
        prefix = "\\pard\\intbl"
        if self._style is not None:
            prefix += self._style.prefix(self.document)
        body = "\n".join(child.to_rtf() for child in self.children)
        return f"{prefix}\n{body}\n\\cell" if body else f"{prefix}\n\\cell"
