"""Render document trees to Word files with python-docx."""

from __future__ import annotations

import io
import logging

from docx import Document
from docx.enum.table import WD_TABLE_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_BREAK
from docx.shared import Inches, Pt

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

logger = logging.getLogger("discovery.rendering.docx")

_ALIGNMENTS = {
    Alignment.LEFT: WD_ALIGN_PARAGRAPH.LEFT,
    Alignment.CENTER: WD_ALIGN_PARAGRAPH.CENTER,
    Alignment.RIGHT: WD_ALIGN_PARAGRAPH.RIGHT,
    Alignment.JUSTIFY: WD_ALIGN_PARAGRAPH.JUSTIFY,
}


class DocxRenderer:
    """Write a ``LegalDocument`` as paragraphs, with the caption as a table."""

    def __init__(self, font_name: str = "Times New Roman", font_size: int = 12):
        self.font_name = font_name
        self.font_size = font_size

    def render(self, document: LegalDocument) -> bytes:
        doc = Document()
        style = doc.styles["Normal"]
        style.font.name = self.font_name
        style.font.size = Pt(self.font_size)
        doc.core_properties.title = document.title

        section = doc.sections[0]
        section.left_margin = Inches(1.25)
        section.right_margin = Inches(1)

        if document.footer_title:
            footer = section.footer.paragraphs[0]
            footer.alignment = WD_ALIGN_PARAGRAPH.CENTER
            run = footer.add_run(document.footer_title)
            run.font.size = Pt(9)

        for block in document.blocks:
            self._add_block(doc, block)

        buffer = io.BytesIO()
        doc.save(buffer)
        logger.debug(f"Rendered '{document.title}' as DOCX ({len(document.blocks)} blocks)")
        return buffer.getvalue()

    def _add_block(self, doc: Document, block: object) -> None:
        if isinstance(block, Paragraph):
            p = doc.add_paragraph()
            p.alignment = _ALIGNMENTS[block.align]
            if block.first_line_indent:
                p.paragraph_format.first_line_indent = Inches(0.5)
            for text_run in block.runs:
                run = p.add_run(text_run.text)
                run.bold = text_run.bold
                run.underline = text_run.underline
        elif isinstance(block, Heading):
            p = doc.add_paragraph()
            p.alignment = _ALIGNMENTS[block.align]
            run = p.add_run(block.text)
            run.bold = True
            run.underline = block.underline
        elif isinstance(block, NumberedItem):
            label = doc.add_paragraph()
            label.add_run(block.label).bold = True
            body = doc.add_paragraph(block.text)
            body.paragraph_format.first_line_indent = Inches(0.5)
        elif isinstance(block, Caption):
            self._add_caption(doc, block)
        elif isinstance(block, PartyLines):
            for label, value in block.entries:
                p = doc.add_paragraph()
                p.paragraph_format.space_after = Pt(0)
                p.add_run(f"{label}: ").bold = True
                p.add_run(value)
        elif isinstance(block, SignatureBlock):
            for line in block.lines:
                p = doc.add_paragraph(line)
                p.paragraph_format.space_after = Pt(0)
                if block.align is Alignment.RIGHT:
                    p.paragraph_format.left_indent = Inches(3.25)
        elif isinstance(block, Spacer):
            for _ in range(block.lines):
                doc.add_paragraph()
        elif isinstance(block, PageBreak):
            doc.add_paragraph().add_run().add_break(WD_BREAK.PAGE)

    @staticmethod
    def _add_caption(doc: Document, caption: Caption) -> None:
        table = doc.add_table(rows=1, cols=3)
        table.alignment = WD_TABLE_ALIGNMENT.CENTER
        left, divider, right = table.rows[0].cells

        left.text = "\n".join(caption.left_lines)
        rows = max(len(caption.left_lines), len(caption.right_lines))
        divider.text = "\n".join(")" for _ in range(rows))
        right.text = ""
        first = True
        for line in caption.right_lines:
            p = right.paragraphs[0] if first else right.add_paragraph()
            first = False
            p.add_run(line).bold = True

        left.width = Inches(3.0)
        divider.width = Inches(0.3)
        right.width = Inches(3.0)


def render_docx(document: LegalDocument) -> bytes:
    return DocxRenderer().render(document)
