"""HTTP routes for complaint extraction, discovery drafting and export."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, File, Form, Query, Request, Response, UploadFile, status
from pydantic import BaseModel, Field
from slowapi import Limiter
from slowapi.util import get_remote_address

from core.models import DiscoveryContent
from core.service import DiscoveryService, ExportedFile
from generators.content import GenerationResult
from persistence.repositories import StoredDemandLetter

logger = logging.getLogger("discovery.api.router")

limiter = Limiter(key_func=get_remote_address)

# Every LLM-backed route shares this budget per client
LLM_RATE_LIMIT = "30/minute"

router = APIRouter(prefix="/cases/{case_id}")


def get_service(request: Request) -> DiscoveryService:
    return request.app.state.discovery_service


# ----------------------------------------------------------------------
# Request bodies
# ----------------------------------------------------------------------


class ComplaintBody(BaseModel):
    complaint: dict[str, Any] | None = None


class AnalyzeBody(ComplaintBody):
    document_text: str | None = None


class DocumentUpdateBody(BaseModel):
    definitions: list[str] | None = None
    items: list[str] | None = None


class EditItemBody(BaseModel):
    index: int
    instruction: str
    target: str = "items"


class EditAllBody(BaseModel):
    instruction: str
    target: str = "items"


class DemandLetterBody(ComplaintBody):
    instructions: str | None = None
    context_documents: list[str] | None = None


class DemandLetterUpdateBody(BaseModel):
    sections: dict[str, Any]


class EditSectionBody(BaseModel):
    section: str
    instruction: str


class LetterEditBody(BaseModel):
    instruction: str


class FormInterrogatoriesBody(ComplaintBody):
    preview: bool = False
    analyze: bool = Field(default=True, description="Run checkbox analysis when none is present")


# ----------------------------------------------------------------------
# Response helpers
# ----------------------------------------------------------------------


def _content_response(content: DiscoveryContent) -> dict[str, Any]:
    return {
        "document_type": content.document_type.value,
        "definitions": content.definitions,
        "items": content.items,
        "is_generated": content.is_generated,
    }


def _generation_response(result: GenerationResult) -> dict[str, Any]:
    return {
        **_content_response(result.content),
        "used_fallback": result.used_fallback,
        "errors": result.errors,
    }


def _letter_response(letter: StoredDemandLetter) -> dict[str, Any]:
    return letter.to_dict()


def _file_response(exported: ExportedFile) -> Response:
    headers = {"Content-Disposition": f'attachment; filename="{exported.filename}"'}
    if exported.url:
        headers["X-Document-URL"] = exported.url
    return Response(content=exported.data, media_type=exported.media_type, headers=headers)


# ----------------------------------------------------------------------
# Complaint
# ----------------------------------------------------------------------


@router.post("/complaint/extract", tags=["complaint"])
@limiter.limit(LLM_RATE_LIMIT)
async def extract_complaint(
    request: Request,
    case_id: str,
    file: UploadFile | None = File(default=None),
    service: DiscoveryService = Depends(get_service),
) -> dict[str, Any]:
    """Extract case facts from an uploaded complaint, or from the stored one."""
    data = await file.read() if file is not None else None
    mime_type = file.content_type if file is not None else None
    outcome = await service.extract_complaint(case_id, data, mime_type)
    return outcome.to_dict()


@router.post("/complaint/analyze", tags=["complaint"])
@limiter.limit(LLM_RATE_LIMIT)
async def analyze_complaint(
    request: Request,
    case_id: str,
    body: AnalyzeBody,
    service: DiscoveryService = Depends(get_service),
) -> dict[str, Any]:
    info = await service.analyze_complaint(case_id, body.complaint, body.document_text)
    return {"complaint": info.to_payload()}


# ----------------------------------------------------------------------
# RFA / RFP / SI
# ----------------------------------------------------------------------


@router.post("/documents/{document_type}/generate", tags=["documents"])
@limiter.limit(LLM_RATE_LIMIT)
async def generate_document(
    request: Request,
    case_id: str,
    document_type: str,
    body: ComplaintBody,
    service: DiscoveryService = Depends(get_service),
) -> dict[str, Any]:
    result = await service.generate_document(case_id, document_type, body.complaint)
    return _generation_response(result)


@router.get("/documents/{document_type}", tags=["documents"])
async def get_document(
    case_id: str,
    document_type: str,
    service: DiscoveryService = Depends(get_service),
) -> dict[str, Any]:
    return _content_response(await service.get_document(case_id, document_type))


@router.put("/documents/{document_type}", tags=["documents"])
async def update_document(
    case_id: str,
    document_type: str,
    body: DocumentUpdateBody,
    service: DiscoveryService = Depends(get_service),
) -> dict[str, Any]:
    content = await service.update_document(case_id, document_type, body.definitions, body.items)
    return _content_response(content)


@router.delete("/documents/{document_type}", status_code=status.HTTP_204_NO_CONTENT, tags=["documents"])
async def delete_document(
    case_id: str,
    document_type: str,
    service: DiscoveryService = Depends(get_service),
) -> Response:
    await service.delete_document(case_id, document_type)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/documents/{document_type}/edit-item", tags=["documents"])
@limiter.limit(LLM_RATE_LIMIT)
async def edit_document_item(
    request: Request,
    case_id: str,
    document_type: str,
    body: EditItemBody,
    service: DiscoveryService = Depends(get_service),
) -> dict[str, Any]:
    content = await service.edit_document_item(
        case_id, document_type, body.index, body.instruction, body.target
    )
    return _content_response(content)


@router.post("/documents/{document_type}/edit-all", tags=["documents"])
@limiter.limit(LLM_RATE_LIMIT)
async def edit_document_all(
    request: Request,
    case_id: str,
    document_type: str,
    body: EditAllBody,
    service: DiscoveryService = Depends(get_service),
) -> dict[str, Any]:
    content = await service.edit_document_all(case_id, document_type, body.instruction, body.target)
    return _content_response(content)


@router.get("/documents/{document_type}/export", tags=["documents"])
async def export_document(
    case_id: str,
    document_type: str,
    export_format: str = Query(default="pdf", alias="format"),
    service: DiscoveryService = Depends(get_service),
) -> Response:
    return _file_response(await service.export_document(case_id, document_type, export_format))


# ----------------------------------------------------------------------
# Demand letter
# ----------------------------------------------------------------------


@router.post("/demand-letter/generate", tags=["demand-letter"])
@limiter.limit(LLM_RATE_LIMIT)
async def generate_demand_letter(
    request: Request,
    case_id: str,
    body: DemandLetterBody,
    service: DiscoveryService = Depends(get_service),
) -> dict[str, Any]:
    letter = await service.generate_demand_letter(
        case_id, body.complaint, body.instructions, body.context_documents
    )
    return _letter_response(letter)


@router.get("/demand-letter", tags=["demand-letter"])
async def get_demand_letter(
    case_id: str,
    service: DiscoveryService = Depends(get_service),
) -> dict[str, Any]:
    return _letter_response(await service.get_demand_letter(case_id))


@router.put("/demand-letter", tags=["demand-letter"])
async def update_demand_letter(
    case_id: str,
    body: DemandLetterUpdateBody,
    service: DiscoveryService = Depends(get_service),
) -> dict[str, Any]:
    return _letter_response(await service.update_demand_letter(case_id, body.sections))


@router.post("/demand-letter/edit-section", tags=["demand-letter"])
@limiter.limit(LLM_RATE_LIMIT)
async def edit_demand_letter_section(
    request: Request,
    case_id: str,
    body: EditSectionBody,
    service: DiscoveryService = Depends(get_service),
) -> dict[str, Any]:
    letter = await service.edit_demand_letter_section(case_id, body.section, body.instruction)
    return _letter_response(letter)


@router.post("/demand-letter/edit-all", tags=["demand-letter"])
@limiter.limit(LLM_RATE_LIMIT)
async def edit_demand_letter(
    request: Request,
    case_id: str,
    body: LetterEditBody,
    service: DiscoveryService = Depends(get_service),
) -> dict[str, Any]:
    return _letter_response(await service.edit_demand_letter(case_id, body.instruction))


@router.get("/demand-letter/export", tags=["demand-letter"])
async def export_demand_letter(
    case_id: str,
    export_format: str = Query(default="pdf", alias="format"),
    service: DiscoveryService = Depends(get_service),
) -> Response:
    return _file_response(await service.export_demand_letter(case_id, export_format))


@router.post("/demand-letter/support-documents", status_code=status.HTTP_201_CREATED, tags=["demand-letter"])
@limiter.limit(LLM_RATE_LIMIT)
async def add_support_documents(
    request: Request,
    case_id: str,
    files: list[UploadFile] = File(...),
    user_id: str | None = Form(default=None),
    service: DiscoveryService = Depends(get_service),
) -> dict[str, Any]:
    """Upload supporting documents and add them to the case's context index."""
    uploads = [
        (file.filename or "document", await file.read(), file.content_type or "application/octet-stream")
        for file in files
    ]
    documents = await service.add_support_documents(case_id, uploads, user_id)
    return {"documents": [document.to_dict() for document in documents]}


@router.delete(
    "/demand-letter/support-documents/{document_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["demand-letter"],
)
async def remove_support_document(
    case_id: str,
    document_id: str,
    service: DiscoveryService = Depends(get_service),
) -> Response:
    await service.remove_support_document(case_id, document_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ----------------------------------------------------------------------
# Form Interrogatories
# ----------------------------------------------------------------------


@router.post("/form-interrogatories", tags=["form-interrogatories"])
@limiter.limit(LLM_RATE_LIMIT)
async def fill_form_interrogatories(
    request: Request,
    case_id: str,
    body: FormInterrogatoriesBody,
    service: DiscoveryService = Depends(get_service),
) -> Response:
    """Return the filled DISC-001 PDF.

    ``X-Form-Unmodified`` and ``X-Form-Fallback`` report when the blank
    template was returned instead of a filled form.
    """
    result = await service.fill_form_interrogatories(
        case_id, body.complaint, preview=body.preview, analyze=body.analyze
    )
    logger.info(
        f"Form Interrogatories for case {case_id}: {len(result.filled_fields)} fields, "
        f"{len(result.checked_boxes)} checkboxes"
    )
    return Response(
        content=result.pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'inline; filename="Form_Interrogatories_{case_id}.pdf"',
            "X-Form-Unmodified": str(result.unmodified).lower(),
            "X-Form-Fallback": str(result.fell_back).lower(),
        },
    )
