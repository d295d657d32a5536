"""Builders that lay out discovery pleadings and demand letters as document trees."""

from __future__ import annotations

from datetime import date as date_type

from core.models import ComplaintInformation, DemandLetterSections, DiscoveryContent
from generators.registry import INTRO_SALUTATION, DiscoveryDocumentProfile, get_document_profile
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

COURT_TITLE = "SUPERIOR COURT OF THE STATE OF CALIFORNIA"
DEFAULT_COUNTY = "Los Angeles"


def format_long_date(value: date_type) -> str:
    """``March 5, 2024`` style date."""
    return f"{value.strftime('%B')} {value.day}, {value.year}"


def attorney_header_lines(complaint: ComplaintInformation) -> list[str]:
    """Top-left attorney block of a California pleading."""
    attorney = complaint.attorney
    address = attorney.address if attorney else None

    name = (attorney.name if attorney else None) or "Attorney Name Not Specified"
    bar_number = (attorney.bar_number if attorney else None) or "Not Specified"
    firm = (attorney.firm if attorney else None) or "Firm Not Specified"
    street = (address.street if address else None) or "Address Not Specified"
    if address:
        city_line = f"{address.city or ''}, {address.state or ''} {address.zip or ''}".strip(" ,")
    else:
        city_line = "City, State ZIP"
    represents = (attorney.attorney_for if attorney else None) or complaint.plaintiff or "Plaintiff"

    return [
        f"{name} (State Bar No. {bar_number})",
        firm,
        street,
        city_line,
        f"Telephone: {(attorney.phone if attorney else None) or 'Not Specified'}",
        f"Facsimile: {(attorney.fax if attorney else None) or 'Not Specified'}",
        f"Email: {(attorney.email if attorney else None) or 'Not Specified'}",
        "",
        f"Attorney for {represents}",
    ]


def signature_lines(complaint: ComplaintInformation, signed_on: date_type) -> list[str]:
    attorney = complaint.attorney
    return [
        f"Dated: {format_long_date(signed_on)}",
        "",
        (attorney.firm if attorney else None) or "",
        "",
        "By: ______________________________",
        (attorney.name if attorney else None) or "Attorney Name",
        "Attorney for Plaintiff",
    ]


def build_discovery_document(
    content: DiscoveryContent,
    complaint: ComplaintInformation,
    today: date_type | None = None,
    profile: DiscoveryDocumentProfile | None = None,
) -> LegalDocument:
    """Lay out an RFA, RFP or SI pleading."""
    profile = profile or get_document_profile(content.document_type)
    today = today or date_type.today()
    county = complaint.county or DEFAULT_COUNTY
    plaintiff = complaint.plaintiff or "Plaintiff"
    defendant = complaint.defendant or "Defendant"

    document = LegalDocument(title=profile.name, footer_title=profile.footer_title)
    document.add(
        *[Paragraph.plain(line) for line in attorney_header_lines(complaint)],
        Spacer(2),
        Heading(COURT_TITLE, align=Alignment.CENTER),
        Heading(f"FOR THE COUNTY OF {county.upper()}", align=Alignment.CENTER),
        Spacer(),
        Caption(
            left_lines=[
                f"{plaintiff},",
                "",
                "Plaintiff,",
                "",
                "vs.",
                "",
                f"{defendant},",
                "",
                "Defendant.",
            ],
            right_lines=[
                f"Case No.: {complaint.resolved_case_number or 'Not Specified'}",
                "",
                *profile.caption_title,
            ],
        ),
        Spacer(),
        PartyLines(
            [
                ("PROPOUNDING PARTY", f"Plaintiff, {complaint.asking_party or plaintiff}"),
                ("RESPONDING PARTY", f"Defendant, {complaint.answering_party or defendant}"),
                ("SET NUMBER", "ONE"),
            ]
        ),
        Spacer(),
        Paragraph.plain(INTRO_SALUTATION),
        Spacer(),
        Paragraph.plain(profile.intro, first_line_indent=True, align=Alignment.JUSTIFY),
        PageBreak(),
    )

    if content.definitions:
        document.add(Heading("DEFINITIONS", underline=True), Spacer())
        document.add(
            *[
                Paragraph.plain(f"{number}. {definition}", first_line_indent=True)
                for number, definition in enumerate(content.definitions, start=1)
            ]
        )
        document.add(Spacer())

    document.add(Heading(profile.items_section_title, align=Alignment.CENTER, underline=True), Spacer())
    for number, item in enumerate(content.items, start=1):
        document.add(NumberedItem(f"{profile.item_heading} {number}:", item))

    document.add(Spacer(2), SignatureBlock(signature_lines(complaint, today), align=Alignment.RIGHT))
    return document


def compose_demand_letter_body(sections: DemandLetterSections) -> str:
    """Plain-text body stored alongside the sections."""
    return "\n".join(
        [
            sections.header,
            "\n\n" + sections.re_line,
            "\n\n" + sections.salutation,
            "\n\n" + sections.opening_paragraph,
            "\n\nMEDICAL PROVIDERS\n" + sections.medical_providers,
            "\n\nINJURIES SUSTAINED\n" + sections.injuries,
            "\n\nDAMAGES\n" + sections.damages_summary,
            "\n\nSETTLEMENT DEMAND\n" + sections.settlement_demand,
            "\n\n" + sections.closing,
        ]
    )


def _split_paragraphs(text: str) -> list[Paragraph]:
    return [Paragraph.plain(part.strip()) for part in text.split("\n") if part.strip()]


def build_demand_letter_document(
    sections: DemandLetterSections,
    complaint: ComplaintInformation | None = None,
) -> LegalDocument:
    """Lay out a demand letter.

    The optional headings appear only when their section has text; the
    settlement demand heading is always present.
    """
    attorney = complaint.attorney if complaint else None
    document = LegalDocument(title="Demand Letter", pleading_paper=False)

    if sections.header.strip():
        document.add(
            *[Paragraph.plain(line, align=Alignment.RIGHT) for line in sections.header.split("\n")]
        )
        document.add(Spacer())
    document.add(Paragraph.plain(sections.re_line, bold=True), Spacer())
    document.add(Paragraph.plain(sections.salutation), Spacer())
    document.add(*_split_paragraphs(sections.opening_paragraph), Spacer())

    for title, body in (
        ("MEDICAL PROVIDERS", sections.medical_providers),
        ("INJURIES SUSTAINED", sections.injuries),
        ("DAMAGES", sections.damages_summary),
    ):
        if body.strip():
            document.add(Heading(title), *_split_paragraphs(body), Spacer())

    document.add(Heading("SETTLEMENT DEMAND"), *_split_paragraphs(sections.settlement_demand), Spacer())
    document.add(*_split_paragraphs(sections.closing), Spacer(2))
    document.add(
        SignatureBlock(
            [
                "Sincerely,",
                "",
                "",
                "______________________________",
                (attorney.name if attorney else None) or "Attorney Name",
                "Attorney for Plaintiff",
            ]
        )
    )
    return document
