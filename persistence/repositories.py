"""Row-level persistence of discovery documents, demand letters and case files.

Every table is keyed by ``case_id`` and written with an upsert, so the most
recent save for a case replaces the previous one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date as date_type
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Any

from core.exceptions import NotFoundError
from core.models import ComplaintInformation, DemandLetterSections, DiscoveryContent, DocumentType
from core.validation import clean_definitions, validate_case_id
from generators.registry import DEFINITIONS_COLUMN, DiscoveryDocumentProfile, get_document_profile
from tools.supabase_client import SupabaseClient

logger = logging.getLogger("discovery.persistence")

DEMAND_LETTERS_TABLE = "demand_letters"
CASE_COMPLAINTS_TABLE = "case_complaints"
DOCUMENTS_TABLE = "documents"
COMPLAINT_DOCUMENT_TYPE = "complaint"
SUPPORT_DOCUMENTS_PREFIX = "demand-letter-support"

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
EXPORT_MIME_TYPES = {"pdf": PDF_MIME, "docx": DOCX_MIME}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _string_list(value: Any) -> list[str]:
    return [str(item) for item in value] if isinstance(value, list) else []


def mime_type_for(filename: str) -> str:
    """Guess a complaint file's MIME type from its extension."""
    extension = PurePosixPath(filename).suffix.lower().lstrip(".")
    if extension == "pdf":
        return PDF_MIME
    if extension in {"jpg", "jpeg", "png", "gif"}:
        return f"image/{'jpeg' if extension == 'jpg' else extension}"
    if extension in {"doc", "docx"}:
        return "application/msword"
    return "application/octet-stream"


class DiscoveryRepository:
    """Load and save one discovery document type (RFA, RFP or SI)."""

    def __init__(self, supabase: SupabaseClient, document_type: DocumentType | str):
        self.supabase = supabase
        self.profile: DiscoveryDocumentProfile = get_document_profile(document_type)

    async def load(self, case_id: str) -> DiscoveryContent | None:
        case_id = validate_case_id(case_id)
        row = await self.supabase.select_one(self.profile.table, {"case_id": case_id})
        if row is None:
            logger.debug(f"No saved {self.profile.name} for case {case_id}")
            return None
        return DiscoveryContent(
            document_type=self.profile.document_type,
            definitions=_string_list(row.get(DEFINITIONS_COLUMN)),
            items=_string_list(row.get(self.profile.items_column)),
        )

    async def save(self, case_id: str, content: DiscoveryContent, user_id: str | None = None) -> DiscoveryContent:
        """Upsert the document, stripping numbering typed into definitions."""
        case_id = validate_case_id(case_id)
        definitions = clean_definitions(content.definitions)
        row: dict[str, Any] = {
            "case_id": case_id,
            self.profile.items_column: list(content.items),
            DEFINITIONS_COLUMN: definitions,
            "updated_at": _now(),
        }
        if self.profile.has_generated_flag:
            row["is_generated"] = content.is_generated
        if user_id:
            row["created_by"] = user_id

        await self.supabase.upsert(self.profile.table, row)
        logger.info(f"Saved {self.profile.name} for case {case_id} ({len(content.items)} items)")
        return content.model_copy(update={"definitions": definitions})

    async def delete(self, case_id: str) -> None:
        case_id = validate_case_id(case_id)
        await self.supabase.delete(self.profile.table, {"case_id": case_id})
        logger.info(f"Deleted {self.profile.name} for case {case_id}")


@dataclass(slots=True)
class StoredDemandLetter:
    sections: DemandLetterSections
    body_text: str = ""
    pdf_url: str | None = None
    docx_url: str | None = None
    is_generated: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "sections": self.sections.model_dump(exclude_none=True),
            "body_text": self.body_text,
            "pdf_url": self.pdf_url,
            "docx_url": self.docx_url,
            "is_generated": self.is_generated,
        }


class DemandLetterRepository:
    def __init__(self, supabase: SupabaseClient):
        self.supabase = supabase

    async def load(self, case_id: str) -> StoredDemandLetter | None:
        case_id = validate_case_id(case_id)
        row = await self.supabase.select_one(DEMAND_LETTERS_TABLE, {"case_id": case_id})
        if row is None:
            return None
        return StoredDemandLetter(
            sections=DemandLetterSections.model_validate(row.get("sections") or {}),
            body_text=row.get("body_text") or "",
            pdf_url=row.get("pdf_url"),
            docx_url=row.get("docx_url"),
            is_generated=bool(row.get("is_generated")),
        )

    async def save(
        self,
        case_id: str,
        sections: DemandLetterSections,
        body_text: str,
        user_id: str | None = None,
    ) -> None:
        case_id = validate_case_id(case_id)
        row: dict[str, Any] = {
            "case_id": case_id,
            "sections": sections.model_dump(exclude_none=True),
            "body_text": body_text,
            "is_generated": True,
            "updated_at": _now(),
        }
        if user_id:
            row["created_by"] = user_id
        await self.supabase.upsert(DEMAND_LETTERS_TABLE, row)
        logger.info(f"Saved demand letter for case {case_id}")

    async def set_export_url(self, case_id: str, export_format: str, url: str) -> None:
        await self.supabase.update(
            DEMAND_LETTERS_TABLE,
            {f"{export_format}_url": url},
            {"case_id": validate_case_id(case_id)},
        )


class CaseComplaintRepository:
    """The extracted (and possibly analyzed) complaint record of each case."""

    def __init__(self, supabase: SupabaseClient):
        self.supabase = supabase

    async def load(self, case_id: str) -> ComplaintInformation | None:
        case_id = validate_case_id(case_id)
        row = await self.supabase.select_one(CASE_COMPLAINTS_TABLE, {"case_id": case_id})
        if row is None or not isinstance(row.get("complaint"), dict):
            return None
        return ComplaintInformation.model_validate(row["complaint"])

    async def save(self, case_id: str, complaint: ComplaintInformation) -> None:
        case_id = validate_case_id(case_id)
        await self.supabase.upsert(
            CASE_COMPLAINTS_TABLE,
            {"case_id": case_id, "complaint": complaint.to_payload(), "updated_at": _now()},
        )
        logger.debug(f"Saved complaint information for case {case_id}")


@dataclass(slots=True)
class ComplaintFile:
    name: str
    path: str
    mime_type: str
    data: bytes
    extracted_text: str | None = None


class CaseDocumentStore:
    """Access to files uploaded against a case and to exported documents."""

    def __init__(self, supabase: SupabaseClient):
        self.supabase = supabase

    async def latest_complaint_row(self, case_id: str) -> dict[str, Any]:
        """Most recent complaint row for the case.

        Raises:
            NotFoundError: If no complaint has been uploaded.
        """
        case_id = validate_case_id(case_id)
        row = await self.supabase.select_latest(
            DOCUMENTS_TABLE,
            {"case_id": case_id, "type": COMPLAINT_DOCUMENT_TYPE},
        )
        if row is None:
            raise NotFoundError("complaint document", case_id)
        return row

    async def fetch_complaint(self, case_id: str) -> ComplaintFile:
        row = await self.latest_complaint_row(case_id)
        path = row.get("path") or ""
        name = row.get("name") or PurePosixPath(path).name
        data = await self.supabase.download(path)
        logger.info(f"Downloaded complaint {name} for case {case_id} ({len(data)} bytes)")
        return ComplaintFile(
            name=name,
            path=path,
            mime_type=mime_type_for(name),
            data=data,
            extracted_text=row.get("extracted_text"),
        )

    async def upload_support_document(
        self,
        case_id: str,
        filename: str,
        data: bytes,
        content_type: str,
    ) -> str:
        """Store a demand-letter supporting document and return its object path."""
        case_id = validate_case_id(case_id)
        stamp = int(datetime.now(timezone.utc).timestamp() * 1000)
        path = f"{SUPPORT_DOCUMENTS_PREFIX}/{case_id}/{stamp}_{PurePosixPath(filename).name}"
        return await self.supabase.upload(path, data, content_type or "application/octet-stream")

    async def upload_export(
        self,
        kind: str,
        case_id: str,
        filename: str,
        data: bytes,
        export_format: str,
    ) -> str:
        """Upload an exported file under ``<kind>/<case_id>/`` and return its public URL."""
        case_id = validate_case_id(case_id)
        path = f"{kind}/{case_id}/{filename}"
        content_type = EXPORT_MIME_TYPES.get(export_format, "application/octet-stream")
        await self.supabase.upload(path, data, content_type)
        return self.supabase.public_url(path)


def export_filename(prefix: str, case_id: str, export_format: str, today: date_type | None = None) -> str:
    """``Demand_Letter_<case>_<yyyy-mm-dd>.pdf`` style file name."""
    stamp = (today or date_type.today()).isoformat()
    return f"{prefix}_{case_id}_{stamp}.{export_format}"
