"""Render document trees to PDF with reportlab.

Pleadings are drawn on California pleading paper: 28 numbered lines per page,
a double rule left of the text and a footer with the page number and the
document title.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path

from reportlab.lib.pagesizes import letter
from reportlab.lib.units import inch
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfbase.ttfonts import TTFError, TTFont
from reportlab.pdfgen import canvas

from core.exceptions import DocumentGenerationError
from rendering.document import (
    Alignment,
    Caption,
    Heading,
    LegalDocument,
    NumberedItem,
    PageBreak,
    Paragraph,
    PartyLines,
    SignatureBlock,
    Spacer,
)

logger = logging.getLogger("discovery.rendering.pdf")

PAGE_WIDTH, PAGE_HEIGHT = letter
TOP_MARGIN = 1.0 * inch
BOTTOM_MARGIN = 1.0 * inch
LEFT_TEXT = 1.5 * inch
RIGHT_TEXT = PAGE_WIDTH - 0.75 * inch
TEXT_WIDTH = RIGHT_TEXT - LEFT_TEXT
PARAGRAPH_INDENT = 0.5 * inch
CAPTION_DIVIDER = LEFT_TEXT + TEXT_WIDTH * 0.5
PARTY_VALUE_OFFSET = 2.2 * inch

LINES_PER_PLEADING_PAGE = 28
PLEADING_LINE_HEIGHT = (PAGE_HEIGHT - TOP_MARGIN - BOTTOM_MARGIN) / LINES_PER_PLEADING_PAGE
LETTER_LINE_HEIGHT = 14

BODY_FONT = "Times-Roman"
BOLD_FONT = "Times-Bold"
FONT_SIZE = 12
FOOTER_FONT_SIZE = 9


@dataclass(frozen=True, slots=True)
class PdfFonts:
    """Font names used for body and bold text.

    The base-14 Times fonts only cover WinAnsi characters; anything else is
    drawn as a placeholder glyph. Register a TrueType family with
    ``register_ttf_fonts`` to render other scripts.
    """

    body: str = BODY_FONT
    bold: str = BOLD_FONT


DEFAULT_FONTS = PdfFonts()


def register_ttf_fonts(regular_path: str | Path, bold_path: str | Path | None = None) -> PdfFonts:
    """Register TrueType fonts with reportlab and return their names.

    Without ``bold_path`` the regular face is also used for bold text.

    Raises:
        DocumentGenerationError: If a font file is missing or unreadable.
    """
    names = []
    for path in (regular_path, bold_path or regular_path):
        name = f"Discovery-{Path(path).stem}"
        if name not in pdfmetrics.getRegisteredFontNames():
            try:
                pdfmetrics.registerFont(TTFont(name, str(path)))
            except (OSError, TTFError) as e:
                raise DocumentGenerationError("PDF fonts", f"Cannot load font {path}: {e}") from e
            logger.info(f"Registered PDF font {name} from {path}")
        names.append(name)
    return PdfFonts(body=names[0], bold=names[1])


@dataclass(slots=True)
class _Segment:
    x: float
    text: str
    font: str = BODY_FONT
    underline: bool = False


@dataclass(slots=True)
class _Line:
    segments: list[_Segment] = field(default_factory=list)
    page_break: bool = False


def wrap_text_to_lines(text: str, font_name: str, font_size: float, max_width: float, first_indent: float = 0) -> list[str]:
    """Greedy word wrap measured with the font's real glyph widths."""
    lines: list[str] = []
    for paragraph in text.split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue
        current = ""
        width = max_width - (first_indent if not lines else 0)
        for word in words:
            candidate = word if not current else f"{current} {word}"
            if stringWidth(candidate, font_name, font_size) <= width or not current:
                current = candidate
            else:
                lines.append(current)
                current = word
                width = max_width
        lines.append(current)
    return lines


class PdfRenderer:
    """Draw a ``LegalDocument`` onto letter-size pages."""

    def __init__(self, font_size: float = FONT_SIZE, fonts: PdfFonts = DEFAULT_FONTS):
        self.font_size = font_size
        self.fonts = fonts

    def render(self, document: LegalDocument) -> bytes:
        """Render the document and return PDF bytes.

        Raises:
            DocumentGenerationError: If reportlab fails to build the file.
        """
        line_height = PLEADING_LINE_HEIGHT if document.pleading_paper else LETTER_LINE_HEIGHT
        per_page = (
            LINES_PER_PLEADING_PAGE
            if document.pleading_paper
            else int((PAGE_HEIGHT - TOP_MARGIN - BOTTOM_MARGIN) // LETTER_LINE_HEIGHT)
        )
        pages = self._paginate(self._layout(document), per_page)

        buffer = io.BytesIO()
        try:
            pdf_canvas = canvas.Canvas(buffer, pagesize=letter)
            pdf_canvas.setTitle(document.title)
            for page_number, page_lines in enumerate(pages, start=1):
                if document.pleading_paper:
                    self._draw_pleading_paper(pdf_canvas, line_height)
                for index, line in enumerate(page_lines):
                    y = PAGE_HEIGHT - TOP_MARGIN - index * line_height
                    self._draw_line(pdf_canvas, line, y)
                self._draw_footer(pdf_canvas, page_number, document.footer_title)
                pdf_canvas.showPage()
            pdf_canvas.save()
        except (ValueError, TypeError, KeyError) as e:
            raise DocumentGenerationError(document.title, f"PDF rendering failed: {e}") from e

        logger.debug(f"Rendered '{document.title}' as PDF ({len(pages)} pages)")
        return buffer.getvalue()

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _wrapped(
        self,
        text: str,
        font: str,
        align: Alignment = Alignment.LEFT,
        first_line_indent: bool = False,
        underline: bool = False,
        left: float = LEFT_TEXT,
        width: float = TEXT_WIDTH,
    ) -> list[_Line]:
        indent = PARAGRAPH_INDENT if first_line_indent else 0
        lines = []
        for number, text_line in enumerate(wrap_text_to_lines(text, font, self.font_size, width, indent)):
            text_width = stringWidth(text_line, font, self.font_size)
            if align is Alignment.CENTER:
                x = left + (width - text_width) / 2
            elif align is Alignment.RIGHT:
                x = left + width - text_width
            else:
                x = left + (indent if number == 0 else 0)
            lines.append(_Line([_Segment(x, text_line, font, underline)]))
        return lines

    def _layout(self, document: LegalDocument) -> list[_Line]:
        lines: list[_Line] = []
        for block in document.blocks:
            if isinstance(block, Paragraph):
                font = self.fonts.bold if block.runs and all(run.bold for run in block.runs) else self.fonts.body
                lines.extend(
                    self._wrapped(block.text, font, block.align, block.first_line_indent)
                )
            elif isinstance(block, Heading):
                lines.extend(self._wrapped(block.text, self.fonts.bold, block.align, underline=block.underline))
            elif isinstance(block, NumberedItem):
                lines.extend(self._wrapped(block.label, self.fonts.bold))
                lines.extend(self._wrapped(block.text, self.fonts.body, first_line_indent=True))
            elif isinstance(block, Caption):
                rows = max(len(block.left_lines), len(block.right_lines))
                for index in range(rows):
                    left = block.left_lines[index] if index < len(block.left_lines) else ""
                    right = block.right_lines[index] if index < len(block.right_lines) else ""
                    lines.append(
                        _Line(
                            [
                                _Segment(LEFT_TEXT, left, self.fonts.body),
                                _Segment(CAPTION_DIVIDER, ")", self.fonts.body),
                                _Segment(CAPTION_DIVIDER + 12, right, self.fonts.bold),
                            ]
                        )
                    )
            elif isinstance(block, PartyLines):
                for label, value in block.entries:
                    lines.append(
                        _Line(
                            [
                                _Segment(LEFT_TEXT, f"{label}:", self.fonts.bold),
                                _Segment(LEFT_TEXT + PARTY_VALUE_OFFSET, value, self.fonts.body),
                            ]
                        )
                    )
            elif isinstance(block, SignatureBlock):
                left = CAPTION_DIVIDER if block.align is Alignment.RIGHT else LEFT_TEXT
                for text in block.lines:
                    lines.extend(self._wrapped(text, self.fonts.body, left=left, width=RIGHT_TEXT - left))
            elif isinstance(block, Spacer):
                lines.extend(_Line() for _ in range(block.lines))
            elif isinstance(block, PageBreak):
                lines.append(_Line(page_break=True))
        return lines

    @staticmethod
    def _paginate(lines: list[_Line], per_page: int) -> list[list[_Line]]:
        pages: list[list[_Line]] = [[]]
        for line in lines:
            if line.page_break:
                if pages[-1]:
                    pages.append([])
                continue
            if len(pages[-1]) >= per_page:
                pages.append([])
            if not pages[-1] and not line.segments:
                continue
            pages[-1].append(line)
        if len(pages) > 1 and not pages[-1]:
            pages.pop()
        return pages

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def _draw_line(self, pdf_canvas: canvas.Canvas, line: _Line, y: float) -> None:
        for segment in line.segments:
            if not segment.text:
                continue
            pdf_canvas.setFont(segment.font, self.font_size)
            pdf_canvas.drawString(segment.x, y, segment.text)
            if segment.underline:
                width = stringWidth(segment.text, segment.font, self.font_size)
                pdf_canvas.setLineWidth(0.5)
                pdf_canvas.line(segment.x, y - 2, segment.x + width, y - 2)

    def _draw_pleading_paper(self, pdf_canvas: canvas.Canvas, line_height: float) -> None:
        pdf_canvas.setLineWidth(0.75)
        rule_x = LEFT_TEXT - 0.2 * inch
        pdf_canvas.line(rule_x, 0.5 * inch, rule_x, PAGE_HEIGHT)
        pdf_canvas.line(rule_x - 3, 0.5 * inch, rule_x - 3, PAGE_HEIGHT)
        pdf_canvas.line(RIGHT_TEXT + 0.1 * inch, 0.5 * inch, RIGHT_TEXT + 0.1 * inch, PAGE_HEIGHT)

        pdf_canvas.setFont(self.fonts.body, FONT_SIZE)
        for number in range(1, LINES_PER_PLEADING_PAGE + 1):
            y = PAGE_HEIGHT - TOP_MARGIN - (number - 1) * line_height
            pdf_canvas.drawRightString(rule_x - 0.15 * inch, y, str(number))

    def _draw_footer(self, pdf_canvas: canvas.Canvas, page_number: int, footer_title: str) -> None:
        center = PAGE_WIDTH / 2
        pdf_canvas.setLineWidth(0.5)
        pdf_canvas.line(LEFT_TEXT, 0.75 * inch, RIGHT_TEXT, 0.75 * inch)
        pdf_canvas.setFont(self.fonts.body, FOOTER_FONT_SIZE)
        pdf_canvas.drawCentredString(center, 0.6 * inch, str(page_number))
        if footer_title:
            pdf_canvas.drawCentredString(center, 0.45 * inch, footer_title)


def render_pdf(document: LegalDocument, fonts: PdfFonts = DEFAULT_FONTS) -> bytes:
    return PdfRenderer(fonts=fonts).render(document)
