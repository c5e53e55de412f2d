"""Tests for the HTTP service."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from rtfdoc import __version__
from rtfdoc.server import app

FIXTURE_DIR = Path(__file__).parent / "fixtures"
SAMPLE_MD = FIXTURE_DIR / "sample.md"
STYLES_JSON = FIXTURE_DIR / "styles.json"


@pytest_asyncio.fixture
async def api():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://rtfdoc") as client:
        yield client


def upload(name: str, content: bytes):
    return {"file": (name, content, "text/markdown")}


@pytest.mark.asyncio
class TestMetadata:

    async def test_health_reports_version(self, api):
        resp = await api.get("/health")
        assert resp.json() == {"status": "ok", "version": __version__}

    async def test_presets(self, api):
        resp = await api.get("/styles")
        assert resp.json() == {"presets": ["default", "academic", "business", "minimal"]}

    async def test_preset_definitions(self, api):
        resp = await api.get("/styles/business")
        assert resp.status_code == 200
        entries = resp.json()
        assert [entry["id"] for entry in entries][:2] == ["heading_1", "heading_2"]
        body = next(entry for entry in entries if entry["id"] == "body")
        assert body["default"] is True

    async def test_unknown_preset_definitions(self, api):
        assert (await api.get("/styles/fancy")).status_code == 404


@pytest.mark.asyncio
class TestStylesheetCheck:

    async def test_committed_handles(self, api):
        definitions = json.loads(STYLES_JSON.read_text(encoding="utf-8"))
        resp = await api.post("/stylesheets/check", json=definitions)
        assert resp.status_code == 200
        committed = {entry["id"]: entry for entry in resp.json()}
        assert committed["BODY"]["handle"] == 0
        assert committed["TITLE"]["handle"] == 1
        assert committed["TITLE"]["next_style_handle"] == 0
        assert committed["QUOTE"]["based_on_style_handle"] == 0
        assert committed["EMPHASIS"]["priority"] == 104

    async def test_unresolved_reference_is_unprocessable(self, api):
        resp = await api.post("/stylesheets/check", json=[
            {"id": "A", "type": "paragraph", "base_style": "NOPE"},
        ])
        assert resp.status_code == 422
        assert "NOPE" in resp.json()["detail"]

    async def test_definition_without_id(self, api):
        resp = await api.post("/stylesheets/check", json=[{"type": "paragraph"}])
        assert resp.status_code == 422


@pytest.mark.asyncio
class TestUpload:

    async def test_rtf_download(self, api):
        resp = await api.post("/convert", files=upload("report.md", SAMPLE_MD.read_bytes()),
                              data={"style": "academic"})
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/rtf"
        assert resp.headers["content-disposition"] == 'attachment; filename="report.rtf"'
        assert resp.content.startswith(b"{\\rtf1")
        assert b"\\trowd" in resp.content

    async def test_non_ascii_filename(self, api):
        resp = await api.post("/convert", files=upload("résumé.md", b"# CV"))
        assert resp.headers["content-disposition"] == (
            "attachment; filename*=UTF-8''r%C3%A9sum%C3%A9.rtf"
        )

    async def test_declared_encoding(self, api):
        resp = await api.post("/convert", files=upload("menu.md", "Café".encode("latin-1")),
                              data={"encoding": "latin-1"})
        assert b"Caf\\u233\\'3f" in resp.content

    @pytest.mark.parametrize("content, encoding", [
        (b"\xff\xfe\xfa", "utf-8"),
        (b"# Hello", "klingon-8"),
    ])
    async def test_undecodable(self, api, content, encoding):
        resp = await api.post("/convert", files=upload("bad.md", content),
                              data={"encoding": encoding})
        assert resp.status_code == 400

    async def test_stylesheet_field(self, api):
        resp = await api.post(
            "/convert", files=upload("big.md", b"Body"),
            data={"stylesheet": json.dumps([{"id": "body", "font_size": "14pt"}])},
        )
        assert resp.status_code == 200
        assert b"\\fs28" in resp.content

    async def test_malformed_stylesheet_field(self, api):
        resp = await api.post("/convert", files=upload("x.md", b"x"), data={"stylesheet": "[{"})
        assert resp.status_code == 400

    async def test_information_fields(self, api):
        resp = await api.post("/convert", files=upload("x.md", b"# Heading"),
                              data={"title": "Override", "author": "Ops"})
        assert b"{\\title Override}" in resp.content
        assert b"{\\author Ops}" in resp.content


@pytest.mark.asyncio
class TestTextConversion:

    async def test_markdown_body(self, api):
        resp = await api.post("/convert/text", json={"markdown": "# Hi\n\nParagraph.",
                                                     "company": "ACME"})
        assert resp.status_code == 200
        assert resp.headers["content-disposition"] == 'attachment; filename="document.rtf"'
        assert b"Paragraph." in resp.content
        assert b"{\\title Hi}" in resp.content
        assert b"{\\company ACME}" in resp.content

    async def test_unknown_preset(self, api):
        resp = await api.post("/convert/text", json={"markdown": "x", "style": "fancy"})
        assert resp.status_code == 400
        assert "Choose from" in resp.json()["detail"]

    async def test_markdown_required(self, api):
        resp = await api.post("/convert/text", json={"style": "business"})
        assert resp.status_code == 422

    async def test_bad_stylesheet_reference(self, api):
        resp = await api.post("/convert/text", json={
            "markdown": "x",
            "stylesheet": [{"id": "extra", "type": "paragraph", "next_style": "ghost"}],
        })
        assert resp.status_code == 422
        assert "ghost" in resp.json()["detail"]

    async def test_local_images_stay_unread(self, api):
        resp = await api.post("/convert/text", json={"markdown": f"![secret]({SAMPLE_MD})"})
        assert resp.status_code == 200
        assert b"\\pict" not in resp.content
        assert b"[Image: secret]" in resp.content
