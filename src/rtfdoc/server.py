"""HTTP service around the Markdown-to-RTF converter.

Endpoints::

    GET  /health               Liveness and package version.
    GET  /styles               Preset names.
    GET  /styles/{preset}      Stylesheet definitions of one preset.
    POST /stylesheets/check    Commit a JSON stylesheet and report its handles.
    POST /convert              Multipart upload of a Markdown file.
    POST /convert/text         JSON body carrying Markdown text.

Both conversion endpoints accept a preset, stylesheet definitions merged
over it, and document information. Images named in the Markdown are never
read from the server's disk; their alt text is written instead.

Run::

    uvicorn rtfdoc.server:app --port 8000
"""

from __future__ import annotations

import json
from typing import Any, Optional
from urllib.parse import quote

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from rtfdoc import __version__
from rtfdoc.converter import RTF_ENCODING, Converter
from rtfdoc.document import Document
from rtfdoc.errors import RTFError
from rtfdoc.logger import get_logger
from rtfdoc.style_manager import StyleManager, check_definitions
from rtfdoc.stylesheet import Stylesheet

logger = get_logger(__name__)

RTF_MEDIA_TYPE = "application/rtf"

app = FastAPI(title="rtfdoc", description="Rich Text Format from Markdown", version=__version__)


class DocumentInformation(BaseModel):
    title: Optional[str] = None
    author: Optional[str] = None
    company: Optional[str] = None
    comments: Optional[str] = None


class TextConversion(DocumentInformation):
    """Body of ``POST /convert/text``."""

    markdown: str
    style: str = "default"
    stylesheet: list[dict[str, Any]] = Field(default_factory=list)


class CommittedStyle(BaseModel):
    id: str
    handle: int
    priority: Optional[int] = None
    next_style_handle: Optional[int] = None
    based_on_style_handle: Optional[int] = None


@app.exception_handler(RTFError)
async def rtf_error(request: Request, exc: RTFError) -> JSONResponse:
    logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


def _preset(style: str) -> str:
    if style not in StyleManager.PRESETS:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown preset {style!r}. Choose from: {', '.join(StyleManager.PRESETS)}",
        )
    return style


def _attachment(stem: str) -> str:
    """Content-Disposition for ``<stem>.rtf``; RFC 5987 form when not ASCII."""
    filename = f"{stem}.rtf"
    if filename.isascii():
        return f'attachment; filename="{filename}"'
    return f"attachment; filename*=UTF-8''{quote(filename)}"


def _rtf(markdown: str, style: str, stylesheet: list[dict[str, Any]],
         information: DocumentInformation, stem: str) -> Response:
    converter = Converter(style_preset=_preset(style), load_images=False, stylesheet=stylesheet)
    fields = information.model_dump(include=set(DocumentInformation.model_fields))
    document = converter.build_document(markdown, information=fields)
    return Response(
        content=document.to_rtf().encode(RTF_ENCODING),
        media_type=RTF_MEDIA_TYPE,
        headers={"Content-Disposition": _attachment(stem)},
    )


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": __version__}


@app.get("/styles")
async def list_presets() -> dict[str, list[str]]:
    return {"presets": StyleManager.PRESETS}


@app.get("/styles/{preset}")
async def preset_definitions(preset: str) -> list[dict[str, Any]]:
    """Stylesheet definitions of *preset*, editable and usable as ``stylesheet``."""
    if preset not in StyleManager.PRESETS:
        raise HTTPException(status_code=404, detail=f"No preset named {preset!r}.")
    return StyleManager(preset).stylesheet_entries()


@app.post("/stylesheets/check")
async def check_stylesheet(definitions: list[dict[str, Any]]) -> list[CommittedStyle]:
    """Build and commit a stylesheet; invalid definitions answer 422."""
    sheet = Stylesheet(Document(), check_definitions(definitions, "stylesheet"))
    return [CommittedStyle(**vars(entry)) for entry in sheet.commit().entries]


@app.post("/convert")
async def convert_upload(
    file: UploadFile = File(...),
    style: str = Form("default"),
    encoding: str = Form("utf-8"),
    stylesheet: Optional[str] = Form(None),
    title: Optional[str] = Form(None),
    author: Optional[str] = Form(None),
) -> Response:
    """Convert an uploaded Markdown file.

    *stylesheet* is a JSON array of style definitions sent as a form field.
    The download keeps the upload's name with an ``.rtf`` suffix.
    """
    raw = await file.read()
    try:
        markdown = raw.decode(encoding)
    except (UnicodeDecodeError, LookupError) as exc:
        raise HTTPException(status_code=400, detail=f"Cannot decode upload: {exc}") from exc
    try:
        definitions = json.loads(stylesheet) if stylesheet else []
    except json.JSONDecodeError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid stylesheet JSON: {exc}") from exc

    stem = (file.filename or "document.md").rsplit(".", 1)[0]
    information = DocumentInformation(title=title, author=author)
    return _rtf(markdown, style, definitions, information, stem)


@app.post("/convert/text")
async def convert_text(body: TextConversion) -> Response:
    return _rtf(body.markdown, body.style, body.stylesheet, body, "document")
