"""Document-wide properties and drawing-shape geometry.

:class:`DocumentProperties` is a plain formatting bundle (document and page
domains). :class:`GeometryProperties` describes one ``\\shp`` drawing object:
its anchor rectangle, reference frames, wrapping, fill and line, and an
optional custom path compiled into the shape coordinate space::

    GeometryProperties(
        type="CUSTOM",
        width="2in",
        height="1in",
        line_color="#000000",
        path=[["START_AT", ["0in", "0in"]], ["LINE_TO", ["2in", "1in"]], ["END"]],
    )
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from rtfdoc.errors import FormatError, SchemaError
from rtfdoc.formatting import (
    DOCUMENT,
    DOCUMENT_TARGET,
    PAGE,
    FormattingBundle,
    lookup,
    merge_options,
)
from rtfdoc.logger import get_logger
from rtfdoc.page import Margin
from rtfdoc.tables import Colour
from rtfdoc.utilities import (
    parse_string_with_units,
    round_half_away,
    value2emu,
    value2geombool,
    value2geomfrac,
    value2twips,
)

logger = get_logger(__name__)


class DocumentProperties(FormattingBundle):
    """Document-level switches plus the document's page geometry."""

    DOMAINS = (DOCUMENT, PAGE)

    def __init__(self, options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        self._initialize_formatting(merge_options(options, kwargs))

    def to_rtf(self) -> str:
        return DOCUMENT.render(self) + PAGE.render(self, DOCUMENT_TARGET)


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

def _shape_property(name: str, value: Any) -> str:
    return f"{{\\sp{{\\sn {name}}}{{\\sv {value}}}}}\n"


def _packed(items: list[Any], bytes_per_element: int) -> str:
    return f"{bytes_per_element};{len(items)};{';'.join(str(item) for item in items)}"


def _shape_colour(value: Any) -> Optional[int]:
    """Shapes embed literal colours as BGR-packed integers, not table indices."""
    if value is None:
        return None
    if isinstance(value, str):
        value = Colour.from_string(value)
    if isinstance(value, Colour):
        return value.to_decimal(reverse_bytes=True)
    raise SchemaError(f"Unsupported shape colour {value!r}.")


class GeometryProperties:
    """Position, size, appearance and path of a drawing shape."""

    HORIZONTAL_REFERENCE = {
        "MARGIN": 0,
        "PAGE": 1,
        "COLUMN": 2,
        "CHARACTER": 3,
        "LEFT_MARGIN": 4,
        "RIGHT_MARGIN": 5,
        "INSIDE_MARGIN": 6,
        "OUTSIDE_MARGIN": 7,
    }
    VERTICAL_REFERENCE = {
        "MARGIN": 0,
        "PAGE": 1,
        "PARAGRAPH": 2,
        "LINE": 3,
        "TOP_MARGIN": 4,
        "BOTTOM_MARGIN": 5,
        "INSIDE_MARGIN": 6,
        "OUTSIDE_MARGIN": 7,
    }
    HORIZONTAL_ALIGNMENT = {"ABSOLUTE": 0, "LEFT": 1, "CENTER": 2, "RIGHT": 3, "INSIDE": 4, "OUTSIDE": 5}
    VERTICAL_ALIGNMENT = {"ABSOLUTE": 0, "TOP": 1, "CENTER": 2, "BOTTOM": 3, "INSIDE": 4, "OUTSIDE": 5}
    WIDTH_REFERENCE = {
        "MARGIN": 0,
        "PAGE": 1,
        "LEFT_MARGIN": 2,
        "RIGHT_MARGIN": 3,
        "INSIDE_MARGIN": 4,
        "OUTSIDE_MARGIN": 5,
    }
    HEIGHT_REFERENCE = {
        "MARGIN": 0,
        "PAGE": 1,
        "TOP_MARGIN": 2,
        "BOTTOM_MARGIN": 3,
        "INSIDE_MARGIN": 4,
        "OUTSIDE_MARGIN": 5,
    }
    # (wrap mode, wrap side)
    TEXT_WRAP = {
        "INLINE": (1, None),
        "AROUND_BOTH": (2, 0),
        "AROUND_LEFT": (2, 1),
        "AROUND_RIGHT": (2, 2),
        "AROUND_LARGEST": (2, 3),
        "NONE": (3, None),
        "TIGHT_AROUND_BOTH": (4, 0),
        "TIGHT_AROUND_LEFT": (4, 1),
        "TIGHT_AROUND_RIGHT": (4, 2),
        "TIGHT_AROUND_LARGEST": (4, 3),
    }
    TYPE = {
        "CUSTOM": 0,
        "RECTANGLE": 1,
        "ROUND_RECTANGLE": 2,
        "ELLIPSE": 3,
        "DIAMOND": 4,
        "ISOSCELES_TRIANGLE": 5,
        "RIGHT_TRIANGLE": 6,
        "PARALLELOGRAM": 7,
        "TRAPEZOID": 8,
        "HEXAGON": 9,
        "OCTAGON": 10,
        "PENTAGON": 56,
        "LINE": 20,
        "TEXT_BOX": 202,
    }
    TEXT_ANCHOR = {
        "TOP": 0,
        "MIDDLE": 1,
        "BOTTOM": 2,
        "TOP_CENTERED": 3,
        "MIDDLE_CENTERED": 4,
        "BOTTOM_CENTERED": 5,
        "TOP_BASELINE": 6,
        "BOTTOM_BASELINE": 7,
        "TOP_CENTERED_BASELINE": 8,
        "BOTTOM_CENTERED_BASELINE": 9,
    }
    PATH_SEGMENT = {
        "LINE_TO": 0x0001,
        "CUBIC_BEZIER_TO": 0x2001,
        "CLOSE_PATH": 0x6001,
        "START_AT": 0x4000,
        "END": 0x8000,
    }

    OPTIONS = frozenset({
        "type", "rotate", "left", "right", "top", "bottom", "z_index",
        "horizontal_reference", "vertical_reference", "text_wrap", "below_text",
        "lock_anchor", "horizontal_alignment", "vertical_alignment", "allow_overlap",
        "width_reference", "height_reference", "width", "height", "fill_color",
        "has_fill", "line_color", "line_width", "has_line", "text_margin",
        "text_anchor", "fit_to_text", "fit_text_to_shape", "flip_horizontal",
        "flip_vertical", "path", "path_coordinate_origin", "path_coordinate_limits",
    })

    def __init__(self, options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        merged = merge_options(options, kwargs)
        for key in sorted(set(merged) - self.OPTIONS):
            logger.warning("Ignoring unrecognised geometry option %r", key)
        get = merged.get

        self.type = self._keyword(self.TYPE, get("type"), "shape type")
        self.rotation = value2geomfrac(get("rotate"))
        self.left = value2twips(get("left"))
        self.right = value2twips(get("right"))
        self.top = value2twips(get("top"))
        self.bottom = value2twips(get("bottom"))
        self.z_index = get("z_index")
        self.horizontal_reference = self._keyword(
            self.HORIZONTAL_REFERENCE, get("horizontal_reference") or "MARGIN", "horizontal reference"
        )
        self.vertical_reference = self._keyword(
            self.VERTICAL_REFERENCE, get("vertical_reference") or "MARGIN", "vertical reference"
        )
        self.text_wrap = self._keyword(self.TEXT_WRAP, get("text_wrap"), "text wrap")
        self.below_text = value2geombool(get("below_text"))
        self.lock_anchor = bool(get("lock_anchor"))
        self.horizontal_alignment = self._keyword(
            self.HORIZONTAL_ALIGNMENT, get("horizontal_alignment") or "ABSOLUTE", "horizontal alignment"
        )
        self.vertical_alignment = self._keyword(
            self.VERTICAL_ALIGNMENT, get("vertical_alignment") or "ABSOLUTE", "vertical alignment"
        )
        self.allow_overlap = value2geombool(get("allow_overlap"))
        self.width_reference = self._keyword(
            self.WIDTH_REFERENCE, get("width_reference") or "MARGIN", "width reference"
        )
        self.height_reference = self._keyword(
            self.HEIGHT_REFERENCE, get("height_reference") or "MARGIN", "height reference"
        )
        self.width, self.width_percent = self._dimension(get("width"))
        self.height, self.height_percent = self._dimension(get("height"))

        self.fill_color = _shape_colour(get("fill_color"))
        self.has_fill = value2geombool(get("has_fill") or self.fill_color is not None)
        self.line_color = _shape_colour(get("line_color"))
        self.line_width = value2emu(get("line_width"))
        self.has_line = value2geombool(
            get("has_line") or self.line_color is not None or self.line_width is not None
        )
        self.text_margin = None if get("text_margin") is None else Margin.coerce(get("text_margin"))
        self.text_anchor = self._keyword(self.TEXT_ANCHOR, get("text_anchor"), "text anchor")
        self.fit_to_text = value2geombool(get("fit_to_text"))
        self.fit_text_to_shape = value2geombool(get("fit_text_to_shape"))
        self.flip_horizontal = value2geombool(get("flip_horizontal"))
        self.flip_vertical = value2geombool(get("flip_vertical"))
        self.path = get("path")
        self.path_coordinate_origin = list(get("path_coordinate_origin") or (0, 0))
        self.path_coordinate_limits = list(get("path_coordinate_limits") or (21600, 21600))

        self.path_vertices: Optional[str] = None
        self.path_connection_sites: Optional[str] = None
        self.path_segment_info: Optional[str] = None

        self._derive_edges()
        self._compile_path()

    # -- rendering ----------------------------------------------------------

    def to_rtf(self) -> str:
        words = []
        for word, value in (
            ("shpleft", self.left),
            ("shpright", self.right),
            ("shptop", self.top),
            ("shpbottom", self.bottom),
            ("shpz", self.z_index),
        ):
            if value is not None:
                words.append(f"\\{word}{value}")

        horizontal = {0: "\\shpbxmargin", 1: "\\shpbxpage", 2: "\\shpbxcolumn"}
        words.append(horizontal.get(self.horizontal_reference, ""))
        words.append("\\shpbxignore")
        vertical = {0: "\\shpbymargin", 1: "\\shpbypage", 2: "\\shpbypara"}
        words.append(vertical.get(self.vertical_reference, ""))
        words.append("\\shpbyignore")

        if self.text_wrap is not None:
            wrap, side = self.text_wrap
            words.append(f"\\shpwr{wrap}")
            if side is not None:
                words.append(f"\\shpwrk{side}")
        if self.below_text is not None:
            words.append(f"\\shpfblwtxt{self.below_text}")
        if self.lock_anchor:
            words.append("\\shplockanchor")

        properties = [
            ("shapeType", self.type),
            ("rotation", self.rotation),
            ("posh", self.horizontal_alignment),
            ("posrelh", self.horizontal_reference),
            ("posv", self.vertical_alignment),
            ("posrelv", self.vertical_reference),
            ("fAllowOverlap", self.allow_overlap),
            ("pctHoriz", self._per_mille(self.width_percent)),
            ("pctVert", self._per_mille(self.height_percent)),
            ("sizerelh", self.width_reference),
            ("sizerelv", self.height_reference),
            ("fFilled", self.has_fill),
            ("fillColor", self.fill_color),
            ("fLine", self.has_line),
            ("lineColor", self.line_color),
            ("lineWidth", self.line_width),
        ]
        if self.text_margin is not None:
            properties += [
                ("dxTextLeft", value2emu(f"{self.text_margin.left}twip")),
                ("dxTextRight", value2emu(f"{self.text_margin.right}twip")),
                ("dyTextTop", value2emu(f"{self.text_margin.top}twip")),
                ("dyTextBottom", value2emu(f"{self.text_margin.bottom}twip")),
            ]
        properties += [
            ("anchorText", self.text_anchor),
            ("fBehindDocument", self.below_text),
            ("fFitShapeToText", self.fit_to_text),
            ("fFitTextToShape", self.fit_text_to_shape),
            ("fFlipH", self.flip_horizontal),
            ("fFlipV", self.flip_vertical),
        ]
        if self.path is not None:
            properties += [
                ("geoLeft", self.path_coordinate_origin[0]),
                ("geoTop", self.path_coordinate_origin[1]),
                ("geoRight", self.path_coordinate_limits[0]),
                ("geoBottom", self.path_coordinate_limits[1]),
                ("pVerticies", self.path_vertices),
                ("pSegmentInfo", self.path_segment_info),
                ("pConnectionSites", self.path_connection_sites),
            ]
        properties += [("fLineOK", 1), ("fFillOK", 1), ("f3DOK", 1)]

        body = "".join(_shape_property(name, value) for name, value in properties if value is not None)
        return "".join(words) + "\n" + body

    # -- helpers ------------------------------------------------------------

    @staticmethod
    def _keyword(dictionary: Mapping[str, Any], value: Any, name: str) -> Any:
        return None if value is None else lookup(dictionary, value, name)

    @staticmethod
    def _dimension(value: Any) -> tuple[Optional[int], Optional[float]]:
        """Return ``(twips, None)`` for lengths or ``(None, percent)`` for ``"50%"``."""
        if value is None:
            return None, None
        if isinstance(value, str):
            number, unit = parse_string_with_units(value)
            if unit == "%":
                return None, number
        return value2twips(value), None

    @staticmethod
    def _per_mille(percent: Optional[float]) -> Optional[int]:
        # pctHoriz / pctVert are expressed in tenths of a percent
        return None if percent is None else round_half_away(percent * 10)

    def _derive_edges(self) -> None:
        if self.width is not None:
            if self.left is None and self.right is None:
                self.left, self.right = 0, self.width
            elif self.left is None:
                self.left = self.right - self.width
            elif self.right is None:
                self.right = self.left + self.width
        if self.height is not None:
            if self.top is None and self.bottom is None:
                self.top, self.bottom = 0, self.height
            elif self.top is None:
                self.top = self.bottom - self.height
            elif self.bottom is None:
                self.bottom = self.top + self.height

    def _compile_path(self) -> None:
        """Scale the path into the shape coordinate space and pack it."""
        if self.path is None:
            return
        if not isinstance(self.path, (list, tuple)) or not all(
            isinstance(segment, (list, tuple)) and 1 <= len(segment) <= 5 for segment in self.path
        ):
            raise SchemaError("Path segments must be sequences of length 1 through 5.")
        if self.width is None or self.height is None:
            raise SchemaError("A shape path requires an absolute width and height.")

        scale_x = (self.path_coordinate_limits[0] - self.path_coordinate_origin[0]) / value2emu(
            f"{self.width}twip"
        )
        scale_y = (self.path_coordinate_limits[1] - self.path_coordinate_origin[1]) / value2emu(
            f"{self.height}twip"
        )

        vertices: list[tuple[int, int]] = []
        connection_sites: list[tuple[int, int]] = []
        segment_info: list[int] = []
        for segment in self.path:
            kind, *points = segment
            code = lookup(self.PATH_SEGMENT, kind, "path segment")
            scaled = [self._scale_point(point, scale_x, scale_y) for point in points]
            if scaled:
                vertices.extend(scaled)
                connection_sites.append(scaled[-1])
            segment_info.append(code)

        self.path_vertices = _packed([f"({x},{y})" for x, y in vertices], 8)
        self.path_connection_sites = _packed([f"({x},{y})" for x, y in connection_sites], 8)
        self.path_segment_info = _packed(segment_info, 2)

    @staticmethod
    def _scale_point(point: Any, scale_x: float, scale_y: float) -> tuple[int, int]:
        try:
            x, y = point
        except (TypeError, ValueError):
            raise FormatError(f"Invalid path point {point!r}; expected an (x, y) pair.") from None
        return round_half_away(value2emu(x) * scale_x), round_half_away(value2emu(y) * scale_y)
