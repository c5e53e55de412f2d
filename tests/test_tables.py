"""Tests for colour, font and list tables."""

from __future__ import annotations

import pytest

from rtfdoc.errors import FormatError, SchemaError
from rtfdoc.lists import ListLevel, ListTable
from rtfdoc.tables import Colour, ColourTable, Font, FontTable


class TestColour:

    def test_from_string(self):
        assert Colour.from_string("#FF8000") == Colour(255, 128, 0)
        assert Colour.from_string("#ff8000") == Colour(255, 128, 0)

    def test_invalid_string(self):
        with pytest.raises(FormatError):
            Colour.from_string("red")

    def test_channel_range(self):
        with pytest.raises(SchemaError):
            Colour(256, 0, 0)

    def test_to_decimal(self):
        colour = Colour(0x12, 0x34, 0x56)
        assert colour.to_decimal() == 0x123456
        assert colour.to_decimal(reverse_bytes=True) == 0x563412

    def test_to_rtf(self):
        assert Colour(1, 2, 3).to_rtf() == "\\red1\\green2\\blue3;"


class TestColourTable:

    def test_indices_start_at_one(self):
        table = ColourTable()
        assert table.insert(Colour(255, 0, 0)) == 1
        assert table.insert(Colour(0, 255, 0)) == 2

    def test_deduplicates(self):
        table = ColourTable()
        table.insert(Colour.from_string("#FF0000"))
        assert table.insert(Colour(255, 0, 0)) == 1
        assert len(table) == 1

    def test_index_of_missing(self):
        assert ColourTable().index(Colour(1, 1, 1)) is None

    def test_getitem_uses_rtf_index(self):
        table = ColourTable()
        table.insert(Colour(9, 9, 9))
        assert table[1] == Colour(9, 9, 9)

    def test_to_rtf(self):
        table = ColourTable()
        table.insert(Colour(255, 0, 0))
        assert table.to_rtf() == "{\\colortbl\n;\n\\red255\\green0\\blue0;\n}"


class TestFont:

    def test_from_string(self):
        font = Font.from_string("roman:Times New Roman")
        assert font == Font("ROMAN", "Times New Roman")

    def test_missing_family(self):
        with pytest.raises(FormatError):
            Font.from_string("Helvetica")

    def test_unknown_family(self):
        with pytest.raises(SchemaError):
            Font("SERIF", "Georgia")

    def test_to_rtf(self):
        assert Font("SWISS", "Arial").to_rtf() == "\\fswiss Arial;"
        assert Font("MODERN", "Courier", 1).to_rtf() == "\\fmodern\\fprq1 Courier;"


class TestFontTable:

    def test_default_font_is_index_zero(self):
        table = FontTable(Font("SWISS", "Helvetica"))
        assert table.default == Font("SWISS", "Helvetica")
        assert table.index(Font("SWISS", "Helvetica")) == 0
        assert table.insert(Font("ROMAN", "Times")) == 1

    def test_deduplicates(self):
        table = FontTable(Font("SWISS", "Helvetica"))
        assert table.insert(Font("SWISS", "Helvetica")) == 0
        assert len(table) == 1

    def test_to_rtf(self):
        table = FontTable(Font("SWISS", "Helvetica"))
        table.insert(Font("ROMAN", "Times"))
        assert table.to_rtf() == (
            "{\\fonttbl\n{\\f0\\fswiss Helvetica;}\n{\\f1\\froman Times;}\n}"
        )


class TestLists:

    def test_empty_list_table_renders_nothing(self):
        assert ListTable().to_rtf() == ""

    def test_templates_are_numbered(self):
        table = ListTable()
        assert table.new_template().id == 1
        assert table.new_template().id == 2
        assert len(table) == 2

    def test_levels_are_created_once(self):
        template = ListTable().new_template()
        level = template.level_for(1, "decimal")
        assert template.level_for(1, "bullets") is level
        assert not level.marker.is_bullet

    def test_level_geometry(self):
        template = ListTable().new_template()
        level = template.level_for(2, "bullets")
        assert level.indent == 1440
        assert level.id == 12
        assert level.tabs[:3] == [940, 1659, 1660]

    def test_invalid_level(self):
        template = ListTable().new_template()
        with pytest.raises(SchemaError):
            template.level_for(10)

    def test_unknown_kind(self):
        template = ListTable().new_template()
        with pytest.raises(SchemaError):
            template.level_for(1, "roman")

    def test_marker_text(self):
        template = ListTable().new_template()
        assert template.level_for(1, "decimal").marker.text_format(3) == "\t3.\t"
        bullet = ListTable().new_template().level_for(1, "bullets")
        assert bullet.marker.text_format() == "\t\\uc0\\u8226\t"

    def test_list_table_rtf(self):
        table = ListTable()
        table.new_template().level_for(1, "bullets")
        rtf = table.to_rtf()
        assert rtf.startswith("{\\*\\listtable{\\list\\listtemplate1\\listhybrid")
        assert "\\levelnfc23" in rtf
        assert "{\\listoverride\\listid1\\listoverridecount0\\ls1}" in rtf

    def test_reset_tabs(self):
        assert ListLevel.RESET_TABS[0] == 560
        assert ListLevel.RESET_TABS[-1] == 6720
