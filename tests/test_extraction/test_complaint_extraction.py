"""Tests for the complaint extraction adapter."""

from __future__ import annotations

import json
import random

import pytest

from core.exceptions import ExtractionError, LLMError
from core.models import ExtractionSource
from extraction.complaint import ComplaintExtractor, mock_complaint_information


@pytest.mark.asyncio
async def test_direct_file_extraction(scripted_llm, complaint_payload) -> None:
    scripted_llm.queue(json.dumps(complaint_payload))
    extractor = ComplaintExtractor(scripted_llm)

    outcome = await extractor.extract_from_file(b"%PDF-1.4 complaint", "application/pdf")

    assert outcome.source is ExtractionSource.FILE
    assert outcome.complaint.plaintiff == "Jane Smith"
    assert outcome.complaint.attorney.name == "Jane Counsel"
    assert len(scripted_llm.calls) == 1
    assert scripted_llm.calls[0]["attachments"][0].mime_type == "application/pdf"


@pytest.mark.asyncio
async def test_file_failure_falls_back_to_transcribed_text(scripted_llm, complaint_payload) -> None:
    scripted_llm.queue(
        "I am unable to read this document.",
        "SUPERIOR COURT OF CALIFORNIA\nPlaintiff: Jane Smith\nDefendant: Acme Corporation",
        f"```json\n{json.dumps(complaint_payload)}\n```",
    )
    extractor = ComplaintExtractor(scripted_llm, allow_fixture=False)

    outcome = await extractor.extract_from_file(b"\x89PNG", "image/png")

    assert outcome.source is ExtractionSource.OCR_TEXT
    assert outcome.complaint.defendant == "Acme Corporation"
    assert len(outcome.errors) == 1
    assert "Plaintiff: Jane Smith" in scripted_llm.calls[2]["user_prompt"]
    assert scripted_llm.calls[2]["attachments"] == []


@pytest.mark.asyncio
async def test_every_path_failing_returns_tagged_fixture(scripted_llm) -> None:
    scripted_llm.queue(LLMError("generation", "overloaded"), LLMError("generation", "overloaded"))
    extractor = ComplaintExtractor(scripted_llm, rng=random.Random(7))

    outcome = await extractor.extract_from_file(b"%PDF-1.4", "application/pdf")

    assert outcome.source is ExtractionSource.FIXTURE
    assert outcome.is_fixture
    assert len(outcome.errors) == 2
    payload = outcome.to_dict()["complaint"]
    for key in (
        "defendant",
        "plaintiff",
        "caseNumber",
        "filingDate",
        "chargeDescription",
        "courtName",
        "court",
        "case",
        "attorney",
        "formParties",
        "date",
        "caseType",
    ):
        assert key in payload


@pytest.mark.asyncio
async def test_fixture_disallowed_raises(scripted_llm) -> None:
    scripted_llm.queue(LLMError("generation", "down"), LLMError("generation", "down"))
    extractor = ComplaintExtractor(scripted_llm, allow_fixture=False)

    with pytest.raises(ExtractionError) as excinfo:
        await extractor.extract_from_file(b"%PDF-1.4", "application/pdf")

    assert len(excinfo.value.errors) == 2


@pytest.mark.asyncio
async def test_empty_transcription_is_a_failure(scripted_llm) -> None:
    scripted_llm.queue("   ")
    extractor = ComplaintExtractor(scripted_llm)

    with pytest.raises(ExtractionError):
        await extractor.extract_text_from_file(b"%PDF-1.4", "application/pdf")


@pytest.mark.asyncio
async def test_schema_mismatch_falls_back(scripted_llm) -> None:
    scripted_llm.queue('{"plaintiff": {"unexpected": "object"}}')
    extractor = ComplaintExtractor(scripted_llm)

    outcome = await extractor.extract_from_text("Complaint text")

    assert outcome.is_fixture
    assert "schema" in outcome.errors[0]


def test_mock_record_shape() -> None:
    from datetime import date

    info = mock_complaint_information(today=date(2024, 3, 5), rng=random.Random(1))

    assert info.defendant == "John Doe"
    assert info.filing_date == "3/5/2024"
    assert info.case_number.startswith("CR-2024-")
    assert info.case.case_number.startswith("CR-2024-")
    assert info.case_type == "Criminal"
    assert info.date == "2024-03-05"
