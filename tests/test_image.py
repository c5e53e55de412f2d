"""Tests for embedded pictures."""

from __future__ import annotations

import io

import pytest
from PIL import Image

from rtfdoc import Document
from rtfdoc.errors import FormatError, SchemaError, StructuralError
from rtfdoc.image import ImageNode, inspect_image, read_source
from rtfdoc.nodes import CommandNode
from rtfdoc.tables import Colour


def make_image(image_format: str, size=(200, 100)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, (255, 0, 0)).save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture
def png():
    return make_image("PNG")


@pytest.fixture
def doc():
    return Document()


class TestInspect:

    def test_png(self, png):
        assert inspect_image(png) == ("pngblip", 200, 100)

    def test_jpeg(self):
        assert inspect_image(make_image("JPEG", (30, 40))) == ("jpegblip", 30, 40)

    def test_bmp(self):
        assert inspect_image(make_image("BMP")) == ("dibitmap0", 200, 100)

    def test_unsupported_format(self):
        with pytest.raises(FormatError, match="Unsupported image type"):
            inspect_image(make_image("GIF"))

    def test_garbage(self):
        with pytest.raises(FormatError):
            inspect_image(b"not an image")


class TestReadSource:

    def test_bytes(self, png):
        assert read_source(png) == png
        assert read_source(bytearray(png)) == png

    def test_path(self, png, tmp_path):
        path = tmp_path / "picture.png"
        path.write_bytes(png)
        assert read_source(path) == png
        assert read_source(str(path)) == png

    def test_file_object(self, png):
        assert read_source(io.BytesIO(png)) == png

    def test_missing_file(self, tmp_path):
        with pytest.raises(FormatError, match="Could not open"):
            read_source(tmp_path / "missing.png")

    def test_unreadable_source(self):
        with pytest.raises(SchemaError):
            read_source(42)


class TestImageNode:

    def test_builder(self, doc, png):
        node = doc.paragraph().image(png)
        assert isinstance(node, ImageNode)
        assert (node.width, node.height) == (200, 100)
        assert node.displayed_width is None

    def test_absolute_size(self, doc, png):
        node = doc.paragraph().image(png, width=3000, height=3000)
        assert (node.displayed_width, node.displayed_height) == (3000, 3000)

    def test_fixed_aspect_ratio(self, doc, png):
        node = doc.paragraph().image(png, width=3000, height=3000, sizing_mode="FIX_ASPECT_RATIO")
        assert (node.displayed_width, node.displayed_height) == (3000, 1500)

    def test_aspect_ratio_from_width_only(self, doc, png):
        node = doc.paragraph().image(png, {"width": "1in", "sizing_mode": "FIX_ASPECT_RATIO"})
        assert (node.displayed_width, node.displayed_height) == (1440, 720)

    def test_invalid_sizing_mode(self, doc, png):
        with pytest.raises(SchemaError, match="Choose from"):
            doc.paragraph().image(png, sizing_mode="STRETCH")

    def test_needs_document(self, png):
        with pytest.raises(StructuralError):
            CommandNode(None).image(png)

    def test_ids_increase(self, doc, png):
        para = doc.paragraph()
        assert para.image(png).id + 1 == para.image(png).id

    def test_to_rtf(self, doc, png):
        node = doc.paragraph().image(png, width=3000, height=1500)
        rtf = node.to_rtf()
        assert rtf.startswith(
            f"{{\\pict\\picwgoal3000\\pichgoal1500\\picw200\\pich100\\bliptag{node.id}\\pngblip\n"
        )
        assert rtf.endswith("\n}")
        lines = rtf.split("\n")[1:-1]
        assert all(len(line) <= 80 for line in lines)
        assert "".join(lines) == png.hex()

    def test_border(self, doc, png):
        node = doc.paragraph().image(png, border={"sides": "ALL", "width": 10, "color": "#FF0000"})
        assert doc.colours.index(Colour(255, 0, 0)) == 1
        assert node.to_rtf().startswith("{\\pict \\box\\brdrs\\brdrw10\\brdrcf1\\picw200")

    def test_invalid_border(self, doc, png):
        with pytest.raises(SchemaError):
            doc.paragraph().image(png, border="thick")

    def test_smaller_ratio_wins(self, doc, png):
        node = doc.paragraph().image(png, width=100, height=80, sizing_mode="FIX_ASPECT_RATIO")
        assert (node.displayed_width, node.displayed_height) == (100, 50)
