"""Complaint extraction adapter.

Turns an uploaded complaint (PDF, image or text) into a
``ComplaintInformation`` record. The direct file call is tried first; when the
model fails or answers with something that is not the expected JSON, the
document is transcribed to plain text and extraction is retried on the text.
When both paths fail the adapter either raises ``ExtractionError`` or returns
a clearly tagged fixture record, depending on ``allow_fixture``.
"""

from __future__ import annotations

import logging
import random
from datetime import date as date_type

from pydantic import ValidationError as PydanticValidationError

from core.exceptions import ExtractionError, LLMError, LLMResponseError
from core.models import (
    Address,
    Attorney,
    CaseCaption,
    ComplaintInformation,
    Court,
    ExtractionOutcome,
    ExtractionSource,
    FormParties,
)
from extraction.prompts import (
    EXTRACTION_SYSTEM_PROMPT,
    OCR_PROMPT,
    OCR_SYSTEM_PROMPT,
    build_file_extraction_prompt,
    build_text_extraction_prompt,
)
from tools.json_parsing import parse_llm_json
from tools.llm_client import FilePart, LLMClient

logger = logging.getLogger("discovery.extraction.complaint")


def mock_complaint_information(
    today: date_type | None = None,
    rng: random.Random | None = None,
) -> ComplaintInformation:
    """Build the placeholder record used when extraction is impossible.

    The two case numbers are drawn independently.
    """
    today = today or date_type.today()
    rng = rng or random.Random()

    return ComplaintInformation(
        defendant="John Doe",
        plaintiff="State of California",
        case_number=f"CR-{today.year}-{rng.randrange(10000)}",
        filing_date=f"{today.month}/{today.day}/{today.year}",
        charge_description="Violation of Penal Code § 459 (Burglary)",
        court_name="Superior Court of California, County of Los Angeles",
        court=Court(county="Los Angeles"),
        case=CaseCaption(
            short_title="State of California v. John Doe",
            case_number=f"CR-{today.year}-{rng.randrange(10000)}",
        ),
        attorney=Attorney(
            bar_number="123456",
            name="Attorney for Plaintiff",
            firm="Legal Firm LLP",
            address=Address(
                street="123 Legal Street",
                city="Legal City",
                state="CA",
                zip="90210",
            ),
            phone="(555) 123-4567",
            fax="(555) 765-4321",
            email="attorney@legalfirm.com",
            attorney_for="Plaintiff",
        ),
        form_parties=FormParties(
            asking_party="State of California",
            answering_party="John Doe",
            set_number="First",
        ),
        date=today.isoformat(),
        case_type="Criminal",
    )


def parse_complaint_response(text: str) -> ComplaintInformation:
    """Parse an LLM answer into a validated complaint record.

    Raises:
        LLMResponseError: If no JSON object is found or it fails the schema.
    """
    payload = parse_llm_json(text, expect=dict, operation="complaint extraction")
    try:
        return ComplaintInformation.model_validate(payload)
    except PydanticValidationError as e:
        raise LLMResponseError(
            "complaint extraction",
            f"response did not match the complaint schema ({e.error_count()} errors)",
            text,
        ) from e


class ComplaintExtractor:
    """Extracts case facts from complaint documents through the LLM."""

    def __init__(
        self,
        llm: LLMClient,
        allow_fixture: bool = True,
        rng: random.Random | None = None,
    ):
        self.llm = llm
        self.allow_fixture = allow_fixture
        self._rng = rng

    async def extract_from_file(self, data: bytes, mime_type: str) -> ExtractionOutcome:
        """Extract case facts from an uploaded file.

        Raises:
            ExtractionError: If every path fails and fixtures are disallowed.
        """
        errors: list[str] = []
        try:
            text = await self.llm.generate_text(
                EXTRACTION_SYSTEM_PROMPT,
                build_file_extraction_prompt(),
                attachments=[FilePart(data, mime_type)],
            )
            complaint = parse_complaint_response(text)
            logger.info(f"Extracted complaint directly from {mime_type} file")
            return ExtractionOutcome(complaint=complaint, source=ExtractionSource.FILE)
        except LLMError as e:
            logger.warning(f"Direct file extraction failed, trying text transcription: {e}")
            errors.append(str(e))

        try:
            document_text = await self.extract_text_from_file(data, mime_type)
        except ExtractionError as e:
            errors.extend(e.errors or [e.message])
            return self._fallback(errors)

        return await self._extract_from_text(document_text, ExtractionSource.OCR_TEXT, errors)

    async def extract_text_from_file(self, data: bytes, mime_type: str) -> str:
        """Transcribe a file to plain text.

        Raises:
            ExtractionError: If the LLM call fails or returns no text.
        """
        try:
            text = await self.llm.generate_text(
                OCR_SYSTEM_PROMPT,
                OCR_PROMPT,
                attachments=[FilePart(data, mime_type)],
            )
        except LLMError as e:
            raise ExtractionError("Failed to extract text from the document", [str(e)]) from e

        if not text.strip():
            raise ExtractionError(
                "Failed to extract text from the document",
                ["transcription returned no text"],
            )

        logger.info(f"Text extraction successful, length: {len(text)}")
        return text

    async def extract_from_text(self, document_text: str) -> ExtractionOutcome:
        """Extract case facts from complaint text.

        Raises:
            ExtractionError: If extraction fails and fixtures are disallowed.
        """
        return await self._extract_from_text(document_text, ExtractionSource.TEXT, [])

    async def _extract_from_text(
        self,
        document_text: str,
        source: ExtractionSource,
        errors: list[str],
    ) -> ExtractionOutcome:
        try:
            text = await self.llm.generate_text(
                EXTRACTION_SYSTEM_PROMPT,
                build_text_extraction_prompt(document_text),
            )
            complaint = parse_complaint_response(text)
        except LLMError as e:
            logger.warning(f"Text extraction failed: {e}")
            errors.append(str(e))
            return self._fallback(errors)

        return ExtractionOutcome(complaint=complaint, source=source, errors=errors)

    def _fallback(self, errors: list[str]) -> ExtractionOutcome:
        if not self.allow_fixture:
            raise ExtractionError("Could not extract complaint information", errors)

        logger.warning(
            f"All extraction paths failed ({len(errors)} errors); returning placeholder data"
        )
        return ExtractionOutcome(
            complaint=mock_complaint_information(rng=self._rng),
            source=ExtractionSource.FIXTURE,
            errors=errors,
        )
