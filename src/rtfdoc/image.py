"""Embedded pictures (``{\\pict ...}``).

The picture type and pixel size are probed from the bytes with Pillow;
only PNG, JPEG and BMP can be embedded. Display size is given in twips
(or any measurement string) and can keep the natural aspect ratio::

    para.image("logo.png", width="2in", sizing_mode="FIX_ASPECT_RATIO")
"""

from __future__ import annotations

import io
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Optional

from PIL import Image, UnidentifiedImageError

from rtfdoc.errors import FormatError, SchemaError
from rtfdoc.formatting import merge_options
from rtfdoc.logger import get_logger
from rtfdoc.nodes import ContainerNode, Node
from rtfdoc.styles import BorderStyle
from rtfdoc.utilities import value2twips

logger = get_logger(__name__)

# Pillow format name -> RTF picture type
TYPES = {
    "PNG": "pngblip",
    "JPEG": "jpegblip",
    "BMP": "dibitmap0",
}
SIZING_MODES = ("ABSOLUTE", "FIX_ASPECT_RATIO")
BYTES_PER_LINE = 40


def inspect_image(data: bytes) -> tuple[str, int, int]:
    """Return ``(rtf_type, width, height)`` for raw image bytes.

    Raises:
        FormatError: if the bytes are not a PNG, JPEG or BMP image or its
            dimensions cannot be determined.
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            image_format, (width, height) = image.format, image.size
    except (UnidentifiedImageError, OSError) as exc:
        raise FormatError(f"Unknown or unsupported image data: {exc}") from exc
    image_type = TYPES.get(image_format or "")
    if image_type is None:
        raise FormatError(
            f"Unsupported image type {image_format!r}. Choose from: {', '.join(TYPES)}"
        )
    if not width or not height:
        raise FormatError("Could not determine the image dimensions.")
    logger.debug("Probed %s image of %dx%d pixels", image_format, width, height)
    return image_type, width, height


def read_source(source: Any) -> bytes:
    """Read image bytes from a path, a binary file object or an iterable of bytes."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    if isinstance(source, (str, Path)):
        try:
            return Path(source).read_bytes()
        except OSError as exc:
            raise FormatError(f"Could not open {str(source)!r}: {exc}") from exc
    if hasattr(source, "read"):
        return bytes(source.read())
    if isinstance(source, Iterable):
        return bytes(source)
    raise SchemaError(f"Cannot read image data from {source!r}.")


def _borders(value: Any) -> list[BorderStyle]:
    if value is None:
        return []
    if isinstance(value, BorderStyle):
        return [value]
    if isinstance(value, Mapping):
        return [BorderStyle(value)]
    if isinstance(value, (list, tuple)):
        return [border for item in value for border in _borders(item)]
    raise SchemaError(f"Invalid image border {value!r}.")


class ImageNode(Node):
    """A picture embedded as hexadecimal data."""

    def __init__(self, parent: ContainerNode, source: Any, image_id: int,
                 options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        super().__init__(parent)
        merged = merge_options(options, kwargs)
        self.id = image_id
        self.displayed_width = value2twips(merged.get("width"))
        self.displayed_height = value2twips(merged.get("height"))
        self.sizing_mode = merged.get("sizing_mode") or "ABSOLUTE"
        if self.sizing_mode not in SIZING_MODES:
            raise SchemaError(
                f"Invalid sizing mode {self.sizing_mode!r}. Choose from: {', '.join(SIZING_MODES)}"
            )
        self.border = _borders(merged.get("border"))
        document = self._require_document()
        for border in self.border:
            border.push_colours(document.colours)

        self.data = read_source(source)
        self.type, self.width, self.height = inspect_image(self.data)
        self.displayed_width, self.displayed_height = self._size_image()

    def _size_image(self) -> tuple[Optional[int], Optional[int]]:
        if self.sizing_mode == "ABSOLUTE":
            return self.displayed_width, self.displayed_height
        ratios = []
        if self.displayed_width is not None:
            ratios.append(self.displayed_width / self.width)
        if self.displayed_height is not None:
            ratios.append(self.displayed_height / self.height)
        if not ratios:
            return self.displayed_width, self.displayed_height
        scale = min(ratios)
        return int(self.width * scale), int(self.height * scale)

    def to_rtf(self) -> str:
        document = self.document
        parts = ["{\\pict"]
        parts.extend(f" {border.prefix(document)}" for border in self.border)
        if self.displayed_width is not None:
            parts.append(f"\\picwgoal{self.displayed_width}")
        if self.displayed_height is not None:
            parts.append(f"\\pichgoal{self.displayed_height}")
        parts.append(f"\\picw{self.width}\\pich{self.height}\\bliptag{self.id}")
        parts.append(f"\\{self.type}\n")
        hexdata = self.data.hex()
        step = BYTES_PER_LINE * 2
        parts.append("\n".join(hexdata[i:i + step] for i in range(0, len(hexdata), step)))
        parts.append("\n}")
        return "".join(parts)
