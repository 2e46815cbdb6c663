"""
PDF export of an analysis.

Layout (A4 portrait, millimetres, helvetica core font):

    y starts at 20, text is drawn at x = 20 and wrapped to 170 wide.
    Each wrapped line advances y by size / 2; each block adds 5 more.
    Whenever y passes 270 the next line goes to a fresh page at y = 20.

Blocks: title (18 bold), location line (10), "Summary" heading (14 bold),
summary text (10).
"""

import re
from dataclasses import dataclass

from fpdf import FPDF

PAGE_TOP = 20.0
LEFT_MARGIN = 20.0
WRAP_WIDTH = 170.0
PAGE_BREAK_Y = 270.0
BLOCK_GAP = 5.0
FONT_FAMILY = "helvetica"

TITLE_PREFIX = "The Biz-Niz Pro"

# Core fonts are latin-1 only; map the usual typographic characters first.
_TYPOGRAPHIC = str.maketrans({
    "‘": "'",
    "’": "'",
    "“": '"',
    "”": '"',
    "–": "-",
    "—": "-",
    "…": "...",
    "★": "*",
})


@dataclass(frozen=True)
class PlacedLine:
    """One line of text as drawn on the page."""
    page: int
    y: float
    size: float
    bold: bool
    text: str
    width: float


def to_latin1(text: str) -> str:
    return (text or "").translate(_TYPOGRAPHIC).encode("latin-1", "replace").decode("latin-1")


def _split_long_word(pdf: FPDF, word: str, width: float) -> list[str]:
    if pdf.get_string_width(word) <= width:
        return [word]
    pieces, current = [], ""
    for char in word:
        if current and pdf.get_string_width(current + char) > width:
            pieces.append(current)
            current = char
        else:
            current += char
    if current:
        pieces.append(current)
    return pieces


def wrap_text(pdf: FPDF, text: str, width: float = WRAP_WIDTH) -> list[str]:
    """Greedy word wrap using the current font. No line exceeds ``width``.

    Empty text yields a single empty line, so it still takes vertical space.
    """
    lines: list[str] = []
    for paragraph in (text or "").split("\n"):
        current = ""
        for word in paragraph.split():
            for piece in _split_long_word(pdf, word, width):
                candidate = f"{current} {piece}" if current else piece
                if pdf.get_string_width(candidate) <= width:
                    current = candidate
                    continue
                if current:
                    lines.append(current)
                current = piece
        lines.append(current)
    return lines


class AnalysisPdfBuilder:
    """Places wrapped text blocks and paginates by vertical offset."""

    def __init__(self, wrap_width: float = WRAP_WIDTH, compress: bool = True):
        self.wrap_width = wrap_width
        self.pdf = FPDF(orientation="P", unit="mm", format="A4")
        self.pdf.set_auto_page_break(auto=False)
        self.pdf.set_compression(compress)
        self.pdf.add_page()
        self.y = PAGE_TOP
        self.lines: list[PlacedLine] = []

    @property
    def page_count(self) -> int:
        return self.pdf.page_no()

    def add_text(self, text: str, size: float = 10, bold: bool = False) -> None:
        self.pdf.set_font(FONT_FAMILY, "B" if bold else "", size)
        for line in wrap_text(self.pdf, to_latin1(text), self.wrap_width):
            if self.y > PAGE_BREAK_Y:
                self.pdf.add_page()
                self.y = PAGE_TOP
            if line:
                self.pdf.text(LEFT_MARGIN, self.y, line)
            self.lines.append(
                PlacedLine(
                    page=self.pdf.page_no(),
                    y=self.y,
                    size=size,
                    bold=bold,
                    text=line,
                    width=self.pdf.get_string_width(line),
                )
            )
            self.y += size / 2
        self.y += BLOCK_GAP

    def output(self) -> bytes:
        return bytes(self.pdf.output())


def layout_analysis(name: str, location: str, summary: str, compress: bool = True) -> AnalysisPdfBuilder:
    builder = AnalysisPdfBuilder(compress=compress)
    builder.add_text(f"{TITLE_PREFIX}: {name}", 18, True)
    builder.add_text(f"Analysis for {location}", 10)
    builder.add_text("Summary", 14, True)
    builder.add_text(summary)
    return builder


def build_analysis_pdf(name: str, location: str, summary: str, compress: bool = True) -> bytes:
    """Render the analysis export and return the PDF bytes."""
    return layout_analysis(name, location, summary, compress=compress).output()


def pdf_filename(name: str) -> str:
    """``Analysis_<name>.pdf`` with whitespace runs as ``_`` and unsafe characters dropped."""
    safe = re.sub(r"\s+", "_", (name or "").strip())
    safe = re.sub(r"[^A-Za-z0-9_.-]", "", safe).strip(".") or "report"
    return f"Analysis_{safe}.pdf"
