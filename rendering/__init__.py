"""Document output: pleading and letter trees, PDF/DOCX backends, AcroForm filling.

Usage:
    from rendering import build_discovery_document, render_pdf, render_docx

    document = build_discovery_document(content, complaint)
    pdf_bytes = render_pdf(document)
    docx_bytes = render_docx(document)
"""

from rendering.acroform import FillResult, FormInterrogatoriesFiller, TemplateSource
from rendering.document import LegalDocument, render_text
from rendering.docx_backend import render_docx
from rendering.pdf_backend import PdfFonts, register_ttf_fonts, render_pdf
from rendering.pleading import (
    build_demand_letter_document,
    build_discovery_document,
    compose_demand_letter_body,
)

__all__ = [
    "FillResult",
    "FormInterrogatoriesFiller",
    "LegalDocument",
    "PdfFonts",
    "TemplateSource",
    "build_demand_letter_document",
    "build_discovery_document",
    "compose_demand_letter_body",
    "register_ttf_fonts",
    "render_docx",
    "render_pdf",
    "render_text",
]
