"""Integration tests for the Converter orchestrator."""

from __future__ import annotations

import io
import json
import logging
from pathlib import Path

import pytest
from PIL import Image
from striprtf.striprtf import rtf_to_text

from rtfdoc.converter import Converter
from rtfdoc.errors import FormatError, SchemaError
from rtfdoc.parser import Kind, MarkdownNode
from rtfdoc.renderer import TEXT_WIDTH, RtfRenderer
from rtfdoc.style_manager import StyleManager, load_stylesheet_file

FIXTURE_DIR = Path(__file__).parent / "fixtures"
SAMPLE_MD = FIXTURE_DIR / "sample.md"


def write_png(path: Path, size=(200, 100)) -> Path:
    buffer = io.BytesIO()
    Image.new("RGB", size, (0, 128, 255)).save(buffer, format="PNG")
    path.write_bytes(buffer.getvalue())
    return path


class TestStyleManager:
    """Test preset lookup and stylesheet definitions."""

    def test_presets(self):
        assert StyleManager.PRESETS == ["default", "academic", "business", "minimal"]

    def test_invalid_preset_raises(self):
        with pytest.raises(ValueError, match="Choose from"):
            StyleManager("nonexistent")

    def test_unknown_style_falls_back_to_body(self):
        sm = StyleManager()
        assert sm.get_style("sidebar") is sm.get_style("body")

    def test_heading_levels_are_clamped(self):
        sm = StyleManager()
        assert sm.heading_style_id(0) == "heading_1"
        assert sm.heading_style_id(9) == "heading_6"
        assert sm.get_font_for_heading(1).size_pt == 22.0
        assert StyleManager("academic").get_font_for_heading(1).size_pt == 24.0

    def test_font_options(self):
        font = StyleManager("business").get_style("link").font
        assert font.to_options() == {
            "font": "SWISS:Arial",
            "font_size": "10.0pt",
            "foreground_color": "#0563C1",
            "underline": True,
        }

    def test_paragraph_options(self):
        body = StyleManager().get_style("body")
        assert body.para.line_spacing_twips(10.0) == 320
        entry = body.to_entry()
        assert entry["id"] == "body"
        assert entry["type"] == "paragraph"
        assert entry["justification"] == "FULL"
        assert entry["default"] is True

    def test_entry_order(self):
        entries = StyleManager().stylesheet_entries()
        ids = [entry["id"] for entry in entries]
        assert ids[:7] == [f"heading_{level}" for level in range(1, 7)] + ["body"]
        assert ids[-2:] == ["inline_code", "link"]
        assert entries[-1]["type"] == "character"

    def test_override_merges_by_id(self):
        sm = StyleManager()
        sm.override([{"id": "body", "font_size": "14pt"}, {"id": "callout", "type": "paragraph"}])
        entries = {entry["id"]: entry for entry in sm.stylesheet_entries()}
        assert entries["body"]["font_size"] == "14pt"
        assert entries["body"]["default"] is True
        assert entries["callout"] == {"id": "callout", "type": "paragraph"}
        assert "callout" in sm.list_style_names()

    def test_load_stylesheet_file_errors(self, tmp_path):
        broken = tmp_path / "broken.json"
        broken.write_text("{", encoding="utf-8")
        with pytest.raises(FormatError):
            load_stylesheet_file(broken)
        no_ids = tmp_path / "no_ids.json"
        no_ids.write_text('[{"type": "paragraph"}]', encoding="utf-8")
        with pytest.raises(SchemaError):
            load_stylesheet_file(no_ids)


class TestConverterInit:
    """Test Converter construction."""

    def test_default_preset(self):
        assert Converter().style_manager.preset == "default"

    def test_all_presets_valid(self):
        for preset in Converter.STYLE_PRESETS:
            assert Converter(style_preset=preset).style_manager.preset == preset

    def test_invalid_preset_raises(self):
        with pytest.raises(ValueError):
            Converter(style_preset="nonexistent")

    def test_stylesheet_overrides(self, tmp_path):
        path = tmp_path / "styles.json"
        path.write_text(json.dumps([{"id": "body", "font_size": "14pt"}]), encoding="utf-8")
        rtf = Converter(stylesheet_path=path).convert_text("Hello")
        assert "\\fs28" in rtf


class TestConvertText:
    """Test convert_text produces RTF."""

    @pytest.fixture
    def converter(self) -> Converter:
        return Converter()

    def test_document_frame(self, converter):
        rtf = converter.convert_text("Some text")
        assert rtf.startswith("{\\rtf1\\ansi\\deff0\\deflang1033")
        assert "{\\f0\\froman Times New Roman;}" in rtf
        assert "{\\stylesheet" in rtf
        assert rtf.endswith("\n}")

    def test_output_is_ascii(self, converter):
        rtf = converter.convert_text("Café prices rose in Zürich.")
        assert rtf.isascii()
        assert "Caf\\u233\\'3f" in rtf

    def test_heading_uses_style_and_sets_title(self, converter):
        rtf = converter.convert_text("# Hello World\n\nBody")
        assert "{\\pard\\s1 " in rtf
        assert "{\\title Hello World}" in rtf

    def test_body_uses_default_style(self, converter):
        assert "{\\pard\\s0 " in converter.convert_text("Body text")

    def test_inline_formatting(self, converter):
        rtf = converter.convert_text("**bold** *italic* ~~gone~~ `x = 1`")
        assert "{\\b\nbold\n}" in rtf
        assert "{\\i\nitalic\n}" in rtf
        assert "{\\strike\ngone\n}" in rtf
        assert "{\\cs14 " in rtf

    def test_link(self, converter):
        rtf = converter.convert_text("[site](https://example.com)")
        assert '{\\field{\\*\\fldinst HYPERLINK "https://example.com"}{\\fldrslt {\\cs15 ' in rtf

    def test_footnote(self, converter):
        rtf = converter.convert_text("Claim[^1].\n\n[^1]: Source document.\n")
        assert "{\\footnote {\\fs16\\up6\\chftn}{\\pard\nSource document.\n\\par}}" in rtf

    def test_code_block_lines(self, converter):
        rtf = converter.convert_text("```\nif x {\n    y()\n```")
        assert "{\\pard\\s7 " in rtf
        assert "if x \\{\n{\\line}\n    y()\n\\par}" in rtf

    def test_blockquote(self, converter):
        assert "{\\pard\\s8 " in converter.convert_text("> Quoted")

    def test_thematic_break(self, converter):
        rtf = converter.convert_text("Above\n\n---\n\nBelow")
        assert "{\\pard\\s13 " in rtf

    def test_lists(self, converter):
        rtf = converter.convert_text("1. One\n2. Two\n   - Inner\n")
        assert "{\\listtext\t1.\t}" in rtf
        assert "{\\listtext\t2.\t}" in rtf
        assert "\\ilvl1" in rtf
        assert "{\\listtext\t\\uc0\\u8226\t}" in rtf

    def test_task_list(self, converter):
        rtf = converter.convert_text("- [x] Done\n- [ ] Open\n")
        assert "\\u9745\\'3f Done" in rtf
        assert "\\u9744\\'3f Open" in rtf

    def test_table(self, converter):
        rtf = converter.convert_text("| A | B |\n|:-:|--:|\n| 1 | 2 |\n")
        width = TEXT_WIDTH // 2
        assert f"\\cellx{width}" in rtf
        assert f"\\cellx{width * 2}" in rtf
        assert "\\red231\\green230\\blue230;" in rtf
        assert "\\clcbpat" in rtf
        assert "\\lastrow" in rtf
        assert "\\pard\\intbl\\qc" in rtf
        assert "\\pard\\intbl\\qr" in rtf

    def test_text_extracts(self, converter):
        text = rtf_to_text(converter.convert_text(SAMPLE_MD.read_text(encoding="utf-8")))
        assert "Quarterly Report" in text
        assert "Numbers are unaudited." in text
        assert "return sum(values)" in text


class TestImages:
    """Test image embedding and fallbacks."""

    def test_local_image_embedded(self, tmp_path):
        write_png(tmp_path / "chart.png")
        rtf = Converter().convert_text("![chart](chart.png)", base_path=tmp_path)
        assert "\\picwgoal3000\\pichgoal1500\\picw200\\pich100" in rtf
        assert "\\pngblip" in rtf

    def test_wide_image_fits_text_width(self, tmp_path):
        write_png(tmp_path / "wide.png", size=(TEXT_WIDTH, 10))
        rtf = Converter().convert_text("![wide](wide.png)", base_path=tmp_path)
        assert f"\\picwgoal{TEXT_WIDTH}" in rtf

    def test_remote_image_falls_back(self, caplog):
        with caplog.at_level(logging.WARNING):
            rtf = Converter().convert_text("![logo](https://example.com/logo.png)")
        assert "[Image: logo]" in rtf
        assert "remote image" in caplog.text

    def test_missing_image_falls_back(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            rtf = Converter().convert_text("![gone](missing.png)", base_path=tmp_path)
        assert "[Image: gone]" in rtf
        assert "Skipping image" in caplog.text

    def test_loading_disabled(self, tmp_path):
        write_png(tmp_path / "chart.png")
        rtf = Converter(load_images=False).convert_text("![chart](chart.png)", base_path=tmp_path)
        assert "\\pict" not in rtf
        assert "[Image: chart]" in rtf


class TestRenderer:
    """Test the renderer on hand-built trees."""

    def test_requires_document_root(self):
        with pytest.raises(ValueError):
            RtfRenderer().render(MarkdownNode(Kind.PARAGRAPH))

    def test_undefined_footnote(self, caplog):
        tree = MarkdownNode(Kind.DOCUMENT, children=[
            MarkdownNode(Kind.PARAGRAPH, children=[
                MarkdownNode(Kind.TEXT, text="See"),
                MarkdownNode(Kind.FOOTNOTE_REF, key="x"),
            ]),
        ])
        with caplog.at_level(logging.WARNING):
            rtf = RtfRenderer().render(tree).to_rtf()
        assert "See[^x]" in rtf
        assert "no definition" in caplog.text

    def test_block_level_inline_wrapped(self):
        tree = MarkdownNode(Kind.DOCUMENT, children=[MarkdownNode(Kind.TEXT, text="loose")])
        document = RtfRenderer().render(tree)
        assert document.first.to_rtf().startswith("{\\pard\\s0 ")


class TestConvertFile:
    """Test file-to-file conversion."""

    def test_convert_sample(self, tmp_path):
        out = tmp_path / "nested" / "sample.rtf"
        Converter().convert_file(SAMPLE_MD, out)
        data = out.read_bytes()
        assert data.startswith(b"{\\rtf1")
        assert data.isascii()

    def test_images_relative_to_input(self, tmp_path):
        write_png(tmp_path / "pic.png")
        source = tmp_path / "doc.md"
        source.write_text("![pic](pic.png)\n", encoding="utf-8")
        out = tmp_path / "doc.rtf"
        Converter().convert_file(source, out)
        assert "\\pngblip" in out.read_text(encoding="ascii")

    def test_input_encoding(self, tmp_path):
        source = tmp_path / "latin.md"
        source.write_bytes("Café".encode("latin-1"))
        out = tmp_path / "latin.rtf"
        Converter().convert_file(source, out, encoding="latin-1")
        assert "Caf\\u233\\'3f" in out.read_text(encoding="ascii")


class TestDocumentOptions:
    """Test information fields and inline stylesheet definitions."""

    def test_information_overrides_heading_title(self):
        document = Converter().build_document(
            "# From heading", information={"title": "Given", "author": None, "comments": "draft"},
        )
        assert document.information.title == "Given"
        assert document.information.author is None
        rtf = document.to_rtf()
        assert "{\\title Given}" in rtf
        assert "{\\doccomm draft}" in rtf

    def test_unknown_information_field(self):
        with pytest.raises(ValueError, match="keywords"):
            Converter().build_document("x", information={"keywords": "a, b"})

    def test_inline_stylesheet(self):
        converter = Converter(stylesheet=[{"id": "body", "font_size": "14pt"}])
        assert "\\fs28" in converter.convert_text("Hello")

    def test_inline_stylesheet_needs_ids(self):
        with pytest.raises(SchemaError):
            Converter(stylesheet=[{"font_size": "14pt"}])
