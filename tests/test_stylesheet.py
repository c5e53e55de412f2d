"""Tests for named styles and the stylesheet."""

from __future__ import annotations

from pathlib import Path

import pytest

from rtfdoc import Document
from rtfdoc.errors import FormatError, SchemaError
from rtfdoc.styles import CharacterStyle, ParagraphStyle, SectionStyle
from rtfdoc.stylesheet import ResolvedStylesheet, Stylesheet
from rtfdoc.tables import Colour, Font

FIXTURE_DIR = Path(__file__).parent / "fixtures"
STYLES_JSON = FIXTURE_DIR / "styles.json"


@pytest.fixture
def document():
    return Document()


@pytest.fixture
def sheet(document):
    return Stylesheet.from_json(document, STYLES_JSON, base_style_handle=5, base_style_priority=3)


class TestStyleDefinitions:

    def test_character_style_entry(self):
        style = CharacterStyle(name="Emphasis", handle=3, italic=True)
        assert style.to_rtf() == "{\\*\\cs3 \\i Emphasis;}"

    def test_uglified_entry(self):
        style = CharacterStyle(name="Emphasis", handle=3, italic=True)
        assert style.to_rtf(uglify=True) == "{\\*\\cs3\\i Emphasis;}"

    def test_indented_entry(self):
        style = CharacterStyle(name="Plain", handle=1)
        assert style.to_rtf(base_indent=2) == "  {\\*\\cs1 Plain;}"

    def test_paragraph_style_flags(self):
        style = ParagraphStyle(
            name="Heading", handle=1, bold=True, priority=5,
            next_style_handle=2, based_on_style_handle=0, primary=True,
        )
        assert style.to_rtf() == (
            "{\\s1 \\ql\\ltrpar\\b \\sbasedon0 \\snext2 \\sqformat \\spriority5 Heading;}"
        )

    def test_additive_hidden_auto_update(self):
        style = CharacterStyle(name="X", handle=2, additive=True, hidden=True, auto_update=True)
        assert style.to_rtf() == "{\\*\\cs2 \\additive \\sautoupd \\shidden X;}"

    def test_section_style_entry(self):
        style = SectionStyle(name="Wide", handle=4, columns=2)
        assert style.to_rtf().startswith("{\\*\\ds4 \\cols2 \\pgwsxn")

    def test_entry_requires_handle(self):
        with pytest.raises(SchemaError):
            CharacterStyle(name="Loose").to_rtf()

    def test_prefix(self):
        assert ParagraphStyle(handle=4, bold=True).prefix() == "\\s4 \\ql\\ltrpar\\b"
        assert CharacterStyle(handle=2, bold=True).prefix() == "\\cs2 \\b"
        assert CharacterStyle(bold=True).prefix() == "\\b"


class TestStylesheetLoading:

    def test_handles_follow_base_with_default_at_zero(self, sheet):
        resolved = sheet.commit()
        assert resolved.handles == [5, 6, 7, 0, 8]

    def test_priorities_follow_base(self, sheet):
        assert [style.priority for style in sheet] == [3, 4, 5, 6, 7]

    def test_names_default_to_id(self, sheet):
        assert sheet["TITLE"].name == "Title"
        assert sheet["HEADING"].name == "HEADING"

    def test_style_types(self, sheet):
        assert isinstance(sheet["BODY"], ParagraphStyle)
        assert isinstance(sheet["EMPHASIS"], CharacterStyle)

    def test_default_style(self, sheet):
        assert sheet.default_style is sheet["BODY"]

    def test_colours_and_fonts_registered(self, document, sheet):
        assert Colour.from_string("#1F3864") in document.colours
        assert Colour.from_string("#C00000") in document.colours
        assert Font("ROMAN", "Times New Roman") in document.fonts

    def test_container_protocol(self, sheet):
        assert len(sheet) == 5
        assert "QUOTE" in sheet
        assert "MISSING" not in sheet
        assert list(sheet.styles) == ["TITLE", "HEADING", "QUOTE", "BODY", "EMPHASIS"]

    def test_unknown_id(self, sheet):
        with pytest.raises(SchemaError):
            sheet["MISSING"]

    def test_invalid_json(self, document, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("[{", encoding="utf-8")
        with pytest.raises(FormatError):
            Stylesheet.from_json(document, path)

    def test_json_must_be_a_list(self, document, tmp_path):
        path = tmp_path / "object.json"
        path.write_text('{"id": "A"}', encoding="utf-8")
        with pytest.raises(SchemaError):
            Stylesheet.from_json(document, path)


class TestStylesheetCommit:

    def test_references_resolve_to_handles(self, sheet):
        resolved = sheet.commit()
        assert isinstance(resolved, ResolvedStylesheet)
        assert resolved["TITLE"].next_style_handle == 0
        assert resolved["HEADING"].based_on_style_handle == 0
        assert resolved.handle_for("EMPHASIS") == 8
        assert sheet["QUOTE"].based_on_style_handle == 0

    def test_snapshot_is_immutable(self, sheet):
        resolved = sheet.commit()
        with pytest.raises(AttributeError):
            resolved["TITLE"].handle = 99

    def test_commit_is_repeatable(self, sheet):
        assert sheet.commit() == sheet.commit()

    def test_forward_reference(self, document):
        sheet = Stylesheet(document, [
            {"id": "A", "type": "paragraph", "next_style": "B"},
            {"id": "B", "type": "paragraph"},
        ])
        assert sheet.commit()["A"].next_style_handle == 2

    def test_unknown_reference(self, document):
        sheet = Stylesheet(document, [{"id": "A", "type": "paragraph", "base_style": "Z"}])
        with pytest.raises(SchemaError, match="unknown style"):
            sheet.commit()

    def test_unassigned_handle(self, document):
        sheet = Stylesheet(document, [{"id": "A", "type": "character"}], assign_style_handles=False)
        with pytest.raises(SchemaError, match="no handle"):
            sheet.commit()

    def test_explicit_handle_kept(self, document):
        sheet = Stylesheet(document, [{"id": "A", "type": "character", "handle": 42}])
        assert sheet.commit().handle_for("A") == 42

    def test_to_rtf(self, sheet):
        rtf = sheet.to_rtf()
        assert rtf.startswith("{\\stylesheet\n  {\\s5 ")
        assert "\\snext0 " in rtf
        assert rtf.endswith("EMPHASIS;}\n}")


class TestStylesheetValidation:

    def test_entry_must_be_mapping(self, document):
        with pytest.raises(SchemaError):
            Stylesheet(document, ["TITLE"])

    def test_missing_id(self, document):
        with pytest.raises(SchemaError, match="missing an id"):
            Stylesheet(document, [{"type": "paragraph"}])

    def test_duplicate_id(self, document):
        with pytest.raises(SchemaError, match="Duplicate"):
            Stylesheet(document, [
                {"id": "A", "type": "paragraph"},
                {"id": "A", "type": "character"},
            ])

    def test_unknown_type(self, document):
        with pytest.raises(SchemaError, match="Unknown style type"):
            Stylesheet(document, [{"id": "A", "type": "table"}])

    def test_needs_style_or_type(self, document):
        with pytest.raises(SchemaError):
            Stylesheet(document, [{"id": "A", "bold": True}])

    def test_style_object(self, document):
        style = CharacterStyle(bold=True)
        sheet = Stylesheet(document, [{"id": "STRONG", "style": style}])
        assert sheet["STRONG"] is style
        assert style.handle == 1
        assert style.name == "STRONG"

    def test_style_object_must_be_a_style(self, document):
        with pytest.raises(SchemaError):
            Stylesheet(document, [{"id": "A", "style": {"bold": True}}])

    def test_document_accepts_stylesheet_forms(self):
        entries = [{"id": "BODY", "type": "paragraph", "default": True}]
        assert len(Document(stylesheet=entries).stylesheet) == 1
        doc = Document(stylesheet={"styles": entries, "base_style_priority": 1})
        assert doc.stylesheet["BODY"].priority == 1
        with pytest.raises(SchemaError):
            Document(stylesheet="styles.json")

    def test_stylesheet_object_moves_to_new_document(self):
        sheet = Stylesheet(Document(), [
            {"id": "TITLE", "type": "paragraph", "font": "ROMAN:Times", "foreground_color": "#112233"},
        ])
        doc = Document(stylesheet=sheet)
        doc.paragraph() << "x"
        assert sheet.document is doc
        assert doc.fonts.index(Font("ROMAN", "Times")) == 1
        assert doc.colours.index(Colour(0x11, 0x22, 0x33)) == 1
        rtf = doc.to_rtf()
        assert "{\\f1\\froman Times;}" in rtf
        assert "\\f1" in rtf.split("{\\stylesheet", 1)[1]
