"""Tests for the pleading and letter builders and the PDF/DOCX backends."""

from __future__ import annotations

import io
from datetime import date
from pathlib import Path

import pytest
import reportlab
from docx import Document
from pypdf import PdfReader

from core.exceptions import DocumentGenerationError
from core.models import ComplaintInformation, DemandLetterSections, DiscoveryContent, DocumentType
from rendering import (
    build_demand_letter_document,
    build_discovery_document,
    compose_demand_letter_body,
    render_docx,
    register_ttf_fonts,
    render_pdf,
    render_text,
)
from rendering.pleading import attorney_header_lines, format_long_date


def _admissions() -> DiscoveryContent:
    return DiscoveryContent(
        document_type=DocumentType.RFA,
        definitions=['The term "YOU" refers to Acme Corporation.'],
        items=[f"Admit that fact {number} is true." for number in range(1, 41)],
    )


def test_discovery_document_text(complaint) -> None:
    text = render_text(build_discovery_document(_admissions(), complaint, today=date(2024, 3, 5)))

    assert "SUPERIOR COURT OF THE STATE OF CALIFORNIA" in text
    assert "FOR THE COUNTY OF LOS ANGELES" in text
    assert "Case No.: 24STCV00001" in text
    assert '1. The term "YOU" refers to Acme Corporation.' in text
    assert "REQUEST FOR ADMISSION NO. 1:" in text
    assert "REQUEST FOR ADMISSION NO. 40:" in text
    assert "Dated: March 5, 2024" in text
    assert text.index("REQUEST FOR ADMISSION NO. 2:") < text.index("REQUEST FOR ADMISSION NO. 10:")


def test_headings_follow_document_type(complaint) -> None:
    content = DiscoveryContent(document_type=DocumentType.SI, definitions=["D"], items=["State your name."])

    text = render_text(build_discovery_document(content, complaint))

    assert "SPECIAL INTERROGATORY NO. 1:" in text
    assert "SPECIAL INTERROGATORIES TO" in text


def test_blank_complaint_uses_placeholders() -> None:
    lines = attorney_header_lines(ComplaintInformation())

    assert lines[0] == "Attorney Name Not Specified (State Bar No. Not Specified)"
    assert lines[-1] == "Attorney for Plaintiff"


def test_pdf_output_spans_pages(complaint) -> None:
    data = render_pdf(build_discovery_document(_admissions(), complaint))

    assert data.startswith(b"%PDF")
    reader = PdfReader(io.BytesIO(data))
    assert len(reader.pages) > 2
    text = "\n".join(page.extract_text() for page in reader.pages)
    assert "REQUEST FOR ADMISSION NO. 1:" in text
    assert "REQUEST FOR ADMISSION NO. 1:" not in reader.pages[0].extract_text()


def _base_fonts(data: bytes) -> set[str]:
    names = set()
    for page in PdfReader(io.BytesIO(data)).pages:
        for font in page["/Resources"]["/Font"].values():
            names.add(str(font.get_object()["/BaseFont"]))
    return names


def test_pdf_defaults_to_times(complaint) -> None:
    names = _base_fonts(render_pdf(build_discovery_document(_admissions(), complaint)))

    assert names == {"/Times-Roman", "/Times-Bold"}


def test_pdf_uses_registered_truetype_fonts(complaint) -> None:
    font_dir = Path(reportlab.__file__).parent / "fonts"
    fonts = register_ttf_fonts(font_dir / "Vera.ttf", font_dir / "VeraBd.ttf")

    data = render_pdf(build_discovery_document(_admissions(), complaint), fonts)

    assert fonts.body == "Discovery-Vera"
    assert fonts.bold == "Discovery-VeraBd"
    names = _base_fonts(data)
    assert names
    assert all("Vera" in name for name in names)


def test_missing_font_file_is_reported(tmp_path) -> None:
    with pytest.raises(DocumentGenerationError) as excinfo:
        register_ttf_fonts(tmp_path / "missing.ttf")

    assert "missing.ttf" in excinfo.value.message


def test_docx_output(complaint) -> None:
    data = render_docx(build_discovery_document(_admissions(), complaint))

    assert data.startswith(b"PK")
    text = "\n".join(paragraph.text for paragraph in Document(io.BytesIO(data)).paragraphs)
    assert "REQUEST FOR ADMISSION NO. 40:" in text


def test_demand_letter_layout(complaint) -> None:
    sections = DemandLetterSections(
        header="Counsel & Partners LLP\nMarch 5, 2024",
        re_line="RE: Smith v. Acme Corporation",
        salutation="Dear Acme Corporation:",
        opening_paragraph="This office represents Jane Smith.",
        damages_summary="Unpaid invoices totalling $50,000.",
        settlement_demand="Our client demands $50,000.",
        closing="Please respond within thirty days.",
    )
    document = build_demand_letter_document(sections, complaint)

    text = render_text(document)
    assert "SETTLEMENT DEMAND" in text
    assert "DAMAGES" in text
    assert "MEDICAL PROVIDERS" not in text
    assert not document.pleading_paper
    assert render_pdf(document).startswith(b"%PDF")
    assert render_docx(document).startswith(b"PK")


def test_compose_body_keeps_section_order() -> None:
    sections = DemandLetterSections(
        re_line="RE: Smith v. Acme",
        salutation="Dear Counsel:",
        settlement_demand="$50,000",
        closing="Sincerely,",
    )

    body = compose_demand_letter_body(sections)

    assert body.index("RE: Smith v. Acme") < body.index("Dear Counsel:")
    assert "SETTLEMENT DEMAND\n$50,000" in body
    assert body.rstrip().endswith("Sincerely,")


def test_format_long_date() -> None:
    assert format_long_date(date(2024, 12, 1)) == "December 1, 2024"
