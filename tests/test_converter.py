# tests/test_converter.py
"""Tests for md2pptx.converter and md2pptx.render"""

import base64
import struct
import zlib

import pytest
from pptx.dml.color import RGBColor
from pptx.util import Inches

from md2pptx.converter import ConverterOptions, MarkdownToPptxConverter
from md2pptx.exceptions import ConfigurationError
from md2pptx.nodes import CodeBlock, Document, Table
from md2pptx.paginate import TablePolicy
from md2pptx.render import SlideRenderer, budget_for, hex_to_rgb
from md2pptx.styles import Template

# 1x1 transparent PNG
_PNG_1X1 = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


def _png(width: int, height: int) -> bytes:
    """Black 8-bit grayscale PNG of the given size."""

    def chunk(kind: bytes, data: bytes) -> bytes:
        body = kind + data
        crc = struct.pack(">I", zlib.crc32(body))
        return struct.pack(">I", len(data)) + body + crc

    header = struct.pack(">IIBBBBB", width, height, 8, 0, 0, 0, 0)
    pixels = b"".join(b"\x00" + b"\x00" * width for _ in range(height))
    return (
        b"\x89PNG\r\n\x1a\n"
        + chunk(b"IHDR", header)
        + chunk(b"IDAT", zlib.compress(pixels))
        + chunk(b"IEND", b"")
    )


def _slide_texts(slide) -> list[str]:
    return [shape.text_frame.text for shape in slide.shapes if shape.has_text_frame]


def _tables(slide) -> list:
    return [shape.table for shape in slide.shapes if shape.has_table]


def _template_with_body_size(size: float) -> Template:
    return Template.from_dict(
        {
            "id": "big",
            "name": "Big",
            "layouts": [{"name": "main", "styles": {"body": {"fontSize": size}}}],
            "defaultLayout": "main",
        }
    )


@pytest.fixture
def converter(default_template):
    return MarkdownToPptxConverter(default_template)


class TestHexToRgb:
    def test_six_digits(self):
        assert hex_to_rgb("#0078D4") == RGBColor(0x00, 0x78, 0xD4)

    def test_three_digits(self):
        assert hex_to_rgb("fff") == RGBColor(0xFF, 0xFF, 0xFF)

    def test_invalid(self):
        assert hex_to_rgb("zzzzzz") is None
        assert hex_to_rgb(None) is None


class TestOptions:
    @pytest.mark.parametrize("level", [0, 7])
    def test_break_level_out_of_range(self, level):
        with pytest.raises(ConfigurationError, match="break_level"):
            ConverterOptions(break_level=level)

    def test_unknown_layout_fails_before_converting(self, default_template):
        with pytest.raises(ConfigurationError, match="nope"):
            MarkdownToPptxConverter(default_template, ConverterOptions(layout="nope"))

    def test_budget_follows_slide_height(self, default_template):
        budget = budget_for(default_template)
        assert budget.margin_top == 0.5
        assert budget.max_y == pytest.approx(5.125)


class TestConvert:
    def test_sections_become_slides(self, converter):
        prs = converter.convert("# Deck\n\nIntro\n\n## One\n\nA\n\n## Two\n\nB\n")
        assert len(prs.slides) == 3
        assert _slide_texts(prs.slides[1]) == ["One", "A"]

    def test_long_list_spills_onto_new_slides(self, converter):
        items = "\n".join(f"- Item {i}" for i in range(1, 31))
        prs = converter.convert(f"## Heading\n\n{items}\n")
        assert len(prs.slides) == 4
        assert len(converter.pages) == 2
        list_slides = [
            prs.slides[i].shapes[0].text_frame.paragraphs for i in range(1, 4)
        ]
        assert [len(paragraphs) for paragraphs in list_slides] == [13, 13, 4]

    def test_ordered_list_numbering_continues(self, converter):
        items = "\n".join(f"{i}. Item {i}" for i in range(1, 31))
        prs = converter.convert(items + "\n")
        first = prs.slides[1].shapes[0].text_frame.paragraphs[0]
        assert first.text.startswith("14.")

    def test_nested_list_levels(self, converter):
        prs = converter.convert("- top\n  - nested\n")
        paragraphs = prs.slides[0].shapes[0].text_frame.paragraphs
        assert [p.level for p in paragraphs] == [0, 1]
        # Paragraph level is the only indentation
        assert [p.text for p in paragraphs] == ["• top", "– nested"]

    def test_bold_runs(self, converter):
        prs = converter.convert("Some **bold** text\n")
        runs = prs.slides[0].shapes[0].text_frame.paragraphs[0].runs
        assert [r.text for r in runs] == ["Some ", "bold", " text"]
        assert [r.font.bold for r in runs] == [False, True, False]

    def test_template_fonts_applied(self, converter):
        prs = converter.convert("# Title\n")
        run = prs.slides[0].shapes[0].text_frame.paragraphs[0].runs[0]
        assert run.font.size.pt == 32
        assert run.font.name == "Arial"
        assert run.font.color.rgb == RGBColor(0x1A, 0x1A, 0x1A)

    def test_table_gets_own_slide(self, converter):
        md = "Before\n\n| a | b |\n| --- | --- |\n| 1 | 2 |\n\nAfter\n"
        prs = converter.convert(md)
        assert len(prs.slides) == 3
        (table,) = _tables(prs.slides[1])
        assert table.cell(0, 0).text == "a"
        assert table.cell(0, 0).text_frame.paragraphs[0].runs[0].font.bold is True
        assert table.cell(1, 1).text == "2"

    def test_inline_tables(self, default_template):
        converter = MarkdownToPptxConverter(
            default_template, ConverterOptions(table_policy=TablePolicy.INLINE)
        )
        md = "Before\n\n| a | b |\n| --- | --- |\n| 1 | 2 |\n\nAfter\n"
        assert len(converter.convert(md).slides) == 1

    def test_ragged_table_is_padded(self, converter):
        document = Document([Table((("a", "b", "c"), ("1",)))])
        prs = converter.convert_document(document)
        (table,) = _tables(prs.slides[0])
        assert len(table.columns) == 3
        assert table.cell(1, 0).text == "1"
        assert table.cell(1, 2).text == ""

    def test_code_block_lines(self, converter):
        prs = converter.convert("```\nx = **1**\ny = 2\n```\n")
        texts = _slide_texts(prs.slides[0])
        assert "x = **1**\ny = 2" in texts

    def test_background_color(self, template_cache):
        template = template_cache.get_or_load("corporate-blue")
        prs = MarkdownToPptxConverter(template).convert("# Hi\n")
        fill = prs.slides[0].background.fill
        assert fill.fore_color.rgb == RGBColor(0xF4, 0xF7, 0xFB)

    def test_missing_image_shows_alt_text(self, default_template, tmp_path):
        converter = MarkdownToPptxConverter(default_template, base_dir=tmp_path)
        prs = converter.convert("![Quarterly chart](missing.png)\n")
        assert converter.warnings == [
            "Image not found, showing alt text: missing.png"
        ]
        assert _slide_texts(prs.slides[0]) == ["Quarterly chart"]

    def test_image_is_placed(self, default_template, tmp_path):
        (tmp_path / "dot.png").write_bytes(_PNG_1X1)
        converter = MarkdownToPptxConverter(default_template, base_dir=tmp_path)
        prs = converter.convert("![dot](dot.png)\n")
        assert converter.warnings == []
        assert len(prs.slides[0].shapes) == 1

    def test_wide_image_fits_content_width(self, default_template, tmp_path):
        (tmp_path / "banner.png").write_bytes(_png(400, 10))
        converter = MarkdownToPptxConverter(default_template, base_dir=tmp_path)
        prs = converter.convert("![banner](banner.png)\n")
        (picture,) = prs.slides[0].shapes
        assert picture.width == Inches(9)
        assert picture.height == pytest.approx(Inches(9) / 40, rel=1e-3)
        assert picture.left + picture.width <= prs.slide_width

    def test_square_image_uses_page_height(self, default_template, tmp_path):
        (tmp_path / "dot.png").write_bytes(_PNG_1X1)
        converter = MarkdownToPptxConverter(default_template, base_dir=tmp_path)
        prs = converter.convert("![dot](dot.png)\n")
        (picture,) = prs.slides[0].shapes
        assert picture.height == Inches(4.625)
        assert picture.width < Inches(9)

    def test_oversized_block_warns(self, converter):
        code = "\n".join(f"line {i}" for i in range(40))
        converter.convert_document(Document([CodeBlock(code)]))
        assert len(converter.warnings) == 1
        assert converter.warnings[0].startswith("Page 1: code is taller")

    def test_empty_document(self, converter):
        prs = converter.convert("")
        assert len(prs.slides) == 0

    def test_each_convert_starts_fresh(self, converter):
        converter.convert("![x](gone.png)\n")
        converter.convert("Plain\n")
        assert converter.warnings == []


class TestFontCoupling:
    def test_pagination_uses_template_font_size(self):
        converter = MarkdownToPptxConverter(_template_with_body_size(60))
        md = "\n\n".join(f"Paragraph {i}" for i in range(6))
        prs = converter.convert(md)
        assert [len(p.nodes) for p in converter.pages] == [3, 3]
        assert len(prs.slides) == 2

    def test_renderer_reports_template_size(self):
        renderer = SlideRenderer(_template_with_body_size(60))
        assert renderer.font_size_for(Table()) == 60


class TestFiles:
    def test_save_before_convert(self, converter, tmp_path):
        with pytest.raises(RuntimeError):
            converter.save(tmp_path / "out.pptx")

    def test_convert_file_default_output(self, converter, tmp_path):
        source = tmp_path / "talk.md"
        source.write_text("# Talk\n\n## Part\n\nText\n", encoding="utf-8")
        output = converter.convert_file(source)
        assert output == tmp_path / "talk.pptx"
        assert output.is_file()

    def test_convert_file_resolves_images_next_to_source(
        self, default_template, tmp_path
    ):
        (tmp_path / "dot.png").write_bytes(_PNG_1X1)
        source = tmp_path / "deck.md"
        source.write_text("![dot](dot.png)\n", encoding="utf-8")
        converter = MarkdownToPptxConverter(default_template)
        converter.convert_file(source, tmp_path / "out.pptx")
        assert converter.warnings == []

    def test_convert_file_does_not_keep_previous_directory(
        self, default_template, tmp_path
    ):
        first_dir = tmp_path / "a"
        second_dir = tmp_path / "b"
        first_dir.mkdir()
        second_dir.mkdir()
        (first_dir / "one.md").write_text("# One\n", encoding="utf-8")
        (second_dir / "dot.png").write_bytes(_PNG_1X1)
        (second_dir / "two.md").write_text("![dot](dot.png)\n", encoding="utf-8")

        converter = MarkdownToPptxConverter(default_template)
        converter.convert_file(first_dir / "one.md")
        converter.convert_file(second_dir / "two.md")
        assert converter.warnings == []
        assert converter.base_dir is None
