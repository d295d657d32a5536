"""Tests for the Supabase-backed repositories."""

from __future__ import annotations

from datetime import date

import pytest

from core.exceptions import MissingPreconditionError, NotFoundError, ValidationError
from core.models import ComplaintInformation, DemandLetterSections, DiscoveryContent, DocumentType
from persistence.repositories import (
    DOCX_MIME,
    CaseComplaintRepository,
    CaseDocumentStore,
    DemandLetterRepository,
    DiscoveryRepository,
    export_filename,
    mime_type_for,
)


@pytest.mark.asyncio
async def test_rfa_save_sets_generated_flag_and_cleans_definitions(supabase_client, fake_supabase) -> None:
    repo = DiscoveryRepository(supabase_client, DocumentType.RFA)
    content = DiscoveryContent(
        document_type=DocumentType.RFA,
        definitions=['1. The term "YOU" means Acme.', "2.PLAINTIFF means Jane."],
        items=["Admit that you signed the contract."],
    )

    saved = await repo.save("case-1", content, user_id="user-9")

    row = fake_supabase.tables["request_for_admissions"][0]
    assert row["is_generated"] is True
    assert row["definitions"] == ['The term "YOU" means Acme.', "PLAINTIFF means Jane."]
    assert row["admissions"] == ["Admit that you signed the contract."]
    assert row["created_by"] == "user-9"
    assert saved.definitions == row["definitions"]
    assert content.definitions[0].startswith("1. ")


@pytest.mark.asyncio
async def test_rfp_rows_have_no_generated_flag(supabase_client, fake_supabase) -> None:
    repo = DiscoveryRepository(supabase_client, "rfp")

    await repo.save("case-1", DiscoveryContent(document_type=DocumentType.RFP, items=["All contracts."]))

    row = fake_supabase.tables["request_for_productions"][0]
    assert "is_generated" not in row
    assert row["productions"] == ["All contracts."]


@pytest.mark.asyncio
async def test_save_then_load_and_overwrite(supabase_client, fake_supabase) -> None:
    repo = DiscoveryRepository(supabase_client, DocumentType.SI)
    await repo.save("case-1", DiscoveryContent(document_type=DocumentType.SI, definitions=["D"], items=["Q1"]))
    await repo.save("case-1", DiscoveryContent(document_type=DocumentType.SI, definitions=["D"], items=["Q2"]))

    loaded = await repo.load("case-1")

    assert loaded.items == ["Q2"]
    assert len(fake_supabase.tables["special_interrogatories"]) == 1
    assert await repo.load("case-2") is None

    await repo.delete("case-1")
    assert await repo.load("case-1") is None


@pytest.mark.asyncio
async def test_blank_case_id_is_rejected(supabase_client) -> None:
    repo = DiscoveryRepository(supabase_client, DocumentType.RFA)

    with pytest.raises(MissingPreconditionError):
        await repo.load("   ")


def test_demand_letter_is_not_a_discovery_table(supabase_client) -> None:
    with pytest.raises(ValidationError):
        DiscoveryRepository(supabase_client, DocumentType.DEMAND_LETTER)


@pytest.mark.asyncio
async def test_demand_letter_round_trip(supabase_client, fake_supabase) -> None:
    repo = DemandLetterRepository(supabase_client)
    sections = DemandLetterSections(salutation="Dear Acme:", settlement_demand="$50,000")

    await repo.save("case-1", sections, "Dear Acme:\n\n$50,000")
    await repo.set_export_url("case-1", "pdf", "https://cdn.test/letter.pdf")
    letter = await repo.load("case-1")

    assert letter.sections.salutation == "Dear Acme:"
    assert letter.body_text == "Dear Acme:\n\n$50,000"
    assert letter.pdf_url == "https://cdn.test/letter.pdf"
    assert letter.docx_url is None
    assert letter.is_generated
    assert letter.to_dict()["sections"]["settlement_demand"] == "$50,000"


@pytest.mark.asyncio
async def test_fetch_latest_complaint(supabase_client, fake_supabase) -> None:
    fake_supabase.tables["documents"] = [
        {"case_id": "case-1", "type": "complaint", "path": "complaints/case-1/old.pdf", "created_at": "2024-01-01"},
        {
            "case_id": "case-1",
            "type": "complaint",
            "name": "Complaint.pdf",
            "path": "complaints/case-1/new.pdf",
            "created_at": "2024-02-01",
            "extracted_text": "Plaintiff: Jane Smith",
        },
    ]
    fake_supabase.objects["documents/complaints/case-1/new.pdf"] = b"%PDF-new"

    complaint_file = await CaseDocumentStore(supabase_client).fetch_complaint("case-1")

    assert complaint_file.data == b"%PDF-new"
    assert complaint_file.mime_type == "application/pdf"
    assert complaint_file.extracted_text == "Plaintiff: Jane Smith"


@pytest.mark.asyncio
async def test_missing_complaint_raises_not_found(supabase_client) -> None:
    with pytest.raises(NotFoundError):
        await CaseDocumentStore(supabase_client).fetch_complaint("case-1")


@pytest.mark.asyncio
async def test_upload_export_returns_public_url(supabase_client, fake_supabase) -> None:
    url = await CaseDocumentStore(supabase_client).upload_export(
        "special_interrogatories", "case-1", "SI_case-1.docx", b"PK\x03\x04", "docx"
    )

    assert url.endswith("/storage/v1/object/public/documents/special_interrogatories/case-1/SI_case-1.docx")
    assert fake_supabase.objects["documents/special_interrogatories/case-1/SI_case-1.docx"] == b"PK\x03\x04"
    assert fake_supabase.requests[-1].headers["Content-Type"] == DOCX_MIME


@pytest.mark.asyncio
async def test_upload_support_document_keeps_basename(supabase_client, fake_supabase) -> None:
    path = await CaseDocumentStore(supabase_client).upload_support_document(
        "case-1", "../scans/invoice-118.pdf", b"%PDF-support", "application/pdf"
    )

    assert path.startswith("demand-letter-support/case-1/")
    assert path.endswith("_invoice-118.pdf")
    assert fake_supabase.objects[f"documents/{path}"] == b"%PDF-support"


@pytest.mark.asyncio
async def test_case_complaint_round_trip(supabase_client, fake_supabase, complaint) -> None:
    repo = CaseComplaintRepository(supabase_client)

    await repo.save("case-1", complaint)
    await repo.save("case-1", complaint.model_copy(update={"case_number": "24STCV00002"}))

    rows = fake_supabase.tables["case_complaints"]
    assert len(rows) == 1
    assert rows[0]["complaint"]["caseNumber"] == "24STCV00002"
    loaded = await repo.load("case-1")
    assert isinstance(loaded, ComplaintInformation)
    assert loaded.case_number == "24STCV00002"
    assert loaded.plaintiff == complaint.plaintiff


@pytest.mark.asyncio
async def test_case_complaint_missing_row(supabase_client) -> None:
    assert await CaseComplaintRepository(supabase_client).load("case-1") is None


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("complaint.PDF", "application/pdf"),
        ("scan.jpg", "image/jpeg"),
        ("scan.png", "image/png"),
        ("complaint.docx", "application/msword"),
        ("notes", "application/octet-stream"),
    ],
)
def test_mime_type_for(filename, expected) -> None:
    assert mime_type_for(filename) == expected


def test_export_filename() -> None:
    assert export_filename("Demand_Letter", "case-1", "pdf", date(2024, 3, 5)) == "Demand_Letter_case-1_2024-03-05.pdf"
