"""Unit tests for the analysis PDF export."""

import pytest
from fpdf import FPDF

from bizniz.delivery.pdf_export import (
    BLOCK_GAP,
    PAGE_BREAK_Y,
    PAGE_TOP,
    WRAP_WIDTH,
    build_analysis_pdf,
    layout_analysis,
    pdf_filename,
    to_latin1,
    wrap_text,
)


@pytest.fixture
def pdf() -> FPDF:
    doc = FPDF(unit="mm", format="A4")
    doc.add_page()
    doc.set_font("helvetica", "", 10)
    return doc


class TestWrapText:
    """Test greedy word wrapping."""

    def test_short_text_is_one_line(self, pdf):
        assert wrap_text(pdf, "Hello world") == ["Hello world"]

    def test_empty_text_is_one_empty_line(self, pdf):
        assert wrap_text(pdf, "") == [""]

    def test_no_line_exceeds_width(self, pdf):
        text = " ".join(["turnaround"] * 200)

        lines = wrap_text(pdf, text, 50)

        assert len(lines) > 1
        assert all(pdf.get_string_width(line) <= 50 for line in lines)
        assert " ".join(lines) == text

    def test_long_word_is_split(self, pdf):
        word = "x" * 400

        lines = wrap_text(pdf, word, 40)

        assert "".join(lines) == word
        assert all(pdf.get_string_width(line) <= 40 for line in lines)

    def test_newlines_start_new_lines(self, pdf):
        assert wrap_text(pdf, "first\nsecond") == ["first", "second"]


class TestLayout:
    """Test block placement and pagination."""

    def test_block_order_and_offsets(self):
        builder = layout_analysis("Sakura Sushi House", "Springfield", "Short summary.", compress=False)

        texts = [line.text for line in builder.lines]
        assert texts == [
            "The Biz-Niz Pro: Sakura Sushi House",
            "Analysis for Springfield",
            "Summary",
            "Short summary.",
        ]

        title, location, heading, summary = builder.lines
        assert (title.y, title.size, title.bold) == (PAGE_TOP, 18, True)
        assert location.y == PAGE_TOP + 18 / 2 + BLOCK_GAP
        assert heading.y == location.y + 10 / 2 + BLOCK_GAP
        assert (heading.size, heading.bold) == (14, True)
        assert summary.y == heading.y + 14 / 2 + BLOCK_GAP

    def test_long_summary_paginates(self):
        summary = " ".join(["The kitchen needs a cold-chain audit."] * 400)

        builder = layout_analysis("Sakura", "Springfield", summary)

        assert builder.page_count > 1
        assert all(line.y <= PAGE_BREAK_Y + 10 / 2 for line in builder.lines)
        assert all(line.width <= WRAP_WIDTH for line in builder.lines)
        later_pages = [line for line in builder.lines if line.page > 1]
        assert later_pages[0].y == PAGE_TOP

    def test_pdf_embeds_name_and_location(self):
        content = build_analysis_pdf("Sakura Sushi House", "Springfield", "Summary text", compress=False)

        assert content.startswith(b"%PDF")
        assert b"Sakura Sushi House" in content
        assert b"Springfield" in content

    def test_non_latin1_text_does_not_fail(self):
        content = build_analysis_pdf("Café “Ōsaka” – 寿司", "Zürich", "Great … but slow ★")

        assert content.startswith(b"%PDF")


class TestHelpers:
    """Test filename and text coercion helpers."""

    def test_filename_replaces_whitespace(self):
        assert pdf_filename("Sakura Sushi  House") == "Analysis_Sakura_Sushi_House.pdf"

    def test_filename_drops_unsafe_characters(self):
        assert pdf_filename('Moe\'s "Tavern"/Bar') == "Analysis_Moes_TavernBar.pdf"

    def test_filename_fallback(self):
        assert pdf_filename("寿司") == "Analysis_report.pdf"

    def test_to_latin1_maps_typography(self):
        assert to_latin1("“Hi” – it’s…") == '"Hi" - it\'s...'
        assert to_latin1("寿") == "?"
