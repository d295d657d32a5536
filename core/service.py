"""Application service coordinating extraction, drafting, editing and export."""

from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date as date_type
from typing import Any

from core.config import Settings
from core.drafts import DocumentDraft
from core.exceptions import MissingPreconditionError, NotFoundError, ValidationError
from core.models import (
    ComplaintInformation,
    DemandLetterSections,
    DiscoveryContent,
    DocumentType,
    ExtractionOutcome,
)
from core.validation import (
    validate_case_id,
    validate_complaint,
    validate_document_type,
    validate_index,
)
from extraction.checkboxes import analyze_checkboxes_for_form_interrogatories
from extraction.complaint import ComplaintExtractor
from extraction.support import support_document_text
from generators.content import ContentGenerator, GenerationResult
from generators.editing import (
    edit_all_with_ai,
    edit_item_with_ai,
    edit_letter_with_ai,
    edit_section_with_ai,
)
from generators.registry import get_document_profile, list_discovery_types
from persistence.repositories import (
    EXPORT_MIME_TYPES,
    CaseComplaintRepository,
    CaseDocumentStore,
    DemandLetterRepository,
    DiscoveryRepository,
    StoredDemandLetter,
    export_filename,
)
from rendering.acroform import FillResult, FormInterrogatoriesFiller, TemplateSource
from rendering.docx_backend import render_docx
from rendering.document import LegalDocument
from rendering.pdf_backend import DEFAULT_FONTS, PdfFonts, register_ttf_fonts, render_pdf
from rendering.pleading import (
    build_demand_letter_document,
    build_discovery_document,
    compose_demand_letter_body,
)
from tools.llm_client import LLMClient
from tools.supabase_client import SupabaseClient
from tools.vector_store import IndexedDocument, VectorStoreClient

logger = logging.getLogger("discovery.service")

DISCOVERY_TYPES = tuple(list_discovery_types())
EDIT_TARGETS = ("items", "definitions")
DEMAND_LETTER_EXPORT_KIND = "demand_letters"
MAX_CACHED_COMPLAINTS = 256


@dataclass(slots=True)
class ExportedFile:
    """A rendered document ready to send to the caller."""

    filename: str
    media_type: str
    data: bytes
    url: str | None = None


@dataclass(slots=True)
class SupportDocument:
    """A demand-letter supporting document stored and indexed for a case."""

    id: str
    name: str
    path: str
    characters: int

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "path": self.path, "characters": self.characters}


def validate_export_format(export_format: str | None) -> str:
    normalized = (export_format or "pdf").strip().lower()
    if normalized not in EXPORT_MIME_TYPES:
        raise ValidationError(
            f"Unsupported export format '{export_format}'. Use pdf or docx",
            field="format",
            value=export_format,
        )
    return normalized


def _validate_target(target: str) -> str:
    if target not in EDIT_TARGETS:
        raise ValidationError(
            f"Edit target must be one of {', '.join(EDIT_TARGETS)}",
            field="target",
            value=target,
        )
    return target


class DiscoveryService:
    """Runs the complaint-to-discovery workflow for a case.

    Every operation checks its preconditions (a case ID, extracted complaint
    data, a stored document) before doing any work. Persistence is optional:
    without Supabase, generation still works but stored documents cannot be
    loaded, edited or exported.
    """

    def __init__(
        self,
        llm: LLMClient,
        supabase: SupabaseClient | None = None,
        template_source: TemplateSource | None = None,
        allow_fixture: bool = True,
        pdf_fonts: PdfFonts = DEFAULT_FONTS,
    ) -> None:
        self.llm = llm
        self.pdf_fonts = pdf_fonts
        self.supabase = supabase
        self.vector_store = VectorStoreClient(supabase) if supabase else None
        self.extractor = ComplaintExtractor(llm, allow_fixture=allow_fixture)
        self.generator = ContentGenerator(llm, self.vector_store)
        self.filler = FormInterrogatoriesFiller(template_source)

        self.case_documents = CaseDocumentStore(supabase) if supabase else None
        self.case_complaints = CaseComplaintRepository(supabase) if supabase else None
        self.demand_letters = DemandLetterRepository(supabase) if supabase else None
        self._repositories = (
            {document_type: DiscoveryRepository(supabase, document_type) for document_type in DISCOVERY_TYPES}
            if supabase
            else {}
        )

        # Recently used complaints. Only consulted when storage has no row.
        self._complaints: OrderedDict[str, ComplaintInformation] = OrderedDict()

    @classmethod
    def from_settings(cls, settings: Settings) -> DiscoveryService:
        supabase = SupabaseClient.from_settings(settings) if settings.storage_configured else None
        return cls(
            llm=LLMClient.from_settings(settings),
            supabase=supabase,
            template_source=TemplateSource(
                settings.form_interrogatories_template,
                timeout=settings.http_timeout_seconds,
            ),
            pdf_fonts=(
                register_ttf_fonts(settings.pdf_font_path, settings.pdf_bold_font_path)
                if settings.pdf_font_path
                else DEFAULT_FONTS
            ),
        )

    async def close(self) -> None:
        if self.supabase is not None:
            await self.supabase.close()

    @property
    def storage_enabled(self) -> bool:
        return self.supabase is not None

    # ------------------------------------------------------------------
    # Preconditions
    # ------------------------------------------------------------------

    def _require_storage(self) -> None:
        if self.supabase is None:
            raise MissingPreconditionError(
                "storage", "Document storage is not configured for this deployment"
            )

    def _repository(self, document_type: DocumentType) -> DiscoveryRepository:
        self._require_storage()
        return self._repositories[document_type]

    async def resolve_complaint(
        self,
        case_id: str,
        complaint: ComplaintInformation | dict[str, Any] | None = None,
    ) -> ComplaintInformation:
        """Use the supplied complaint, else the one last saved for the case.

        A supplied complaint replaces the saved one.

        Raises:
            MissingPreconditionError: If neither is available.
        """
        if complaint is not None:
            resolved = validate_complaint(complaint)
            await self.remember_complaint(case_id, resolved)
            return resolved

        if self.case_complaints is not None:
            stored = await self.case_complaints.load(case_id)
            if stored is not None:
                self._cache_complaint(case_id, stored)
                return stored
        return validate_complaint(self._complaints.get(case_id))

    async def remember_complaint(self, case_id: str, complaint: ComplaintInformation) -> None:
        self._cache_complaint(case_id, complaint)
        if self.case_complaints is not None:
            await self.case_complaints.save(case_id, complaint)

    def _cache_complaint(self, case_id: str, complaint: ComplaintInformation) -> None:
        self._complaints[case_id] = complaint
        self._complaints.move_to_end(case_id)
        while len(self._complaints) > MAX_CACHED_COMPLAINTS:
            self._complaints.popitem(last=False)

    # ------------------------------------------------------------------
    # Complaint
    # ------------------------------------------------------------------

    async def extract_complaint(
        self,
        case_id: str,
        data: bytes | None = None,
        mime_type: str | None = None,
    ) -> ExtractionOutcome:
        """Extract case facts from an upload, or from the case's stored complaint."""
        case_id = validate_case_id(case_id)

        if data is not None:
            outcome = await self.extractor.extract_from_file(data, mime_type or "application/pdf")
        else:
            if self.case_documents is None:
                raise MissingPreconditionError(
                    "complaint", "Upload a complaint file; no document storage is configured"
                )
            stored = await self.case_documents.fetch_complaint(case_id)
            if stored.extracted_text:
                outcome = await self.extractor.extract_from_text(stored.extracted_text)
            else:
                outcome = await self.extractor.extract_from_file(stored.data, stored.mime_type)

        logger.info(f"Complaint extraction for case {case_id} finished (source={outcome.source.value})")
        await self.remember_complaint(case_id, outcome.complaint)
        return outcome

    async def analyze_complaint(
        self,
        case_id: str,
        complaint: ComplaintInformation | dict[str, Any] | None = None,
        document_text: str | None = None,
    ) -> ComplaintInformation:
        """Select the Form Interrogatories sections relevant to the case."""
        case_id = validate_case_id(case_id)
        info = await self.resolve_complaint(case_id, complaint)
        analyzed = await analyze_checkboxes_for_form_interrogatories(self.llm, info, document_text)
        await self.remember_complaint(case_id, analyzed)
        return analyzed

    # ------------------------------------------------------------------
    # RFA / RFP / SI
    # ------------------------------------------------------------------

    async def generate_document(
        self,
        case_id: str,
        document_type: DocumentType | str,
        complaint: ComplaintInformation | dict[str, Any] | None = None,
        user_id: str | None = None,
    ) -> GenerationResult:
        case_id = validate_case_id(case_id)
        document_type = validate_document_type(document_type, DISCOVERY_TYPES)
        info = await self.resolve_complaint(case_id, complaint)

        if document_type is DocumentType.RFA and self.vector_store is not None:
            result = await self.generator.generate_admissions_with_context(info, case_id)
        else:
            result = await self.generator.generate(document_type, info)

        if self.storage_enabled:
            result.content = await self._repository(document_type).save(case_id, result.content, user_id)
        return result

    async def get_document(self, case_id: str, document_type: DocumentType | str) -> DiscoveryContent:
        case_id = validate_case_id(case_id)
        document_type = validate_document_type(document_type, DISCOVERY_TYPES)
        content = await self._repository(document_type).load(case_id)
        if content is None:
            raise NotFoundError(get_document_profile(document_type).name, case_id)
        return content

    async def update_document(
        self,
        case_id: str,
        document_type: DocumentType | str,
        definitions: list[str] | None = None,
        items: list[str] | None = None,
        user_id: str | None = None,
    ) -> DiscoveryContent:
        """Replace definitions and/or items of a stored document.

        Nothing is written when the submitted lists equal what is stored.
        """
        case_id = validate_case_id(case_id)
        document_type = validate_document_type(document_type, DISCOVERY_TYPES)
        repository = self._repository(document_type)
        stored = await repository.load(case_id) or DiscoveryContent(document_type=document_type)

        draft = DocumentDraft.from_content(stored)
        if definitions is not None:
            draft.definitions.replace(definitions)
        if items is not None:
            draft.items.replace(items)

        if not draft.dirty:
            logger.debug(f"No changes to {repository.profile.name} for case {case_id}")
            return stored
        return await repository.save(case_id, draft.commit(), user_id)

    async def delete_document(self, case_id: str, document_type: DocumentType | str) -> None:
        case_id = validate_case_id(case_id)
        document_type = validate_document_type(document_type, DISCOVERY_TYPES)
        await self._repository(document_type).delete(case_id)

    async def edit_document_item(
        self,
        case_id: str,
        document_type: DocumentType | str,
        index: int,
        instruction: str,
        target: str = "items",
    ) -> DiscoveryContent:
        """Revise one definition or request with the LLM and save the result."""
        case_id = validate_case_id(case_id)
        target = _validate_target(target)
        content = await self.get_document(case_id, document_type)
        profile = get_document_profile(content.document_type)
        draft = DocumentDraft.from_content(content)
        list_draft = getattr(draft, target)

        validate_index(index, list_draft.items)
        label = "definition" if target == "definitions" else profile.item_label
        revised = await edit_item_with_ai(self.llm, list_draft.items, index, instruction, label)
        list_draft.set_item(index, revised[index])

        return await self._repository(content.document_type).save(case_id, draft.commit())

    async def edit_document_all(
        self,
        case_id: str,
        document_type: DocumentType | str,
        instruction: str,
        target: str = "items",
    ) -> DiscoveryContent:
        """Revise every definition or every request in one LLM call."""
        case_id = validate_case_id(case_id)
        target = _validate_target(target)
        content = await self.get_document(case_id, document_type)
        profile = get_document_profile(content.document_type)
        draft = DocumentDraft.from_content(content)
        list_draft = getattr(draft, target)

        is_definitions = target == "definitions"
        revised = await edit_all_with_ai(
            self.llm,
            list_draft.items,
            instruction,
            label="definition" if is_definitions else profile.item_label,
            is_definitions=is_definitions,
        )
        list_draft.replace(revised)
        return await self._repository(content.document_type).save(case_id, draft.commit())

    async def export_document(
        self,
        case_id: str,
        document_type: DocumentType | str,
        export_format: str = "pdf",
        complaint: ComplaintInformation | dict[str, Any] | None = None,
        today: date_type | None = None,
    ) -> ExportedFile:
        case_id = validate_case_id(case_id)
        export_format = validate_export_format(export_format)
        content = await self.get_document(case_id, document_type)
        profile = get_document_profile(content.document_type)
        info = await self.resolve_complaint(case_id, complaint)

        document = build_discovery_document(content, info, today=today, profile=profile)
        filename = export_filename(profile.name.replace(" ", "_"), case_id, export_format, today)
        exported = self._render(document, export_format, filename)
        exported.url = await self.case_documents.upload_export(
            profile.table, case_id, filename, exported.data, export_format
        )
        return exported

    # ------------------------------------------------------------------
    # Demand letter
    # ------------------------------------------------------------------

    async def generate_demand_letter(
        self,
        case_id: str,
        complaint: ComplaintInformation | dict[str, Any] | None = None,
        instructions: str | None = None,
        context_documents: list[str] | None = None,
        user_id: str | None = None,
    ) -> StoredDemandLetter:
        case_id = validate_case_id(case_id)
        info = await self.resolve_complaint(case_id, complaint)

        if context_documents is None and self.vector_store is not None:
            context_documents = await self.generator.gather_context(
                case_id, ("injuries damages and medical treatment", "medical providers and bills"), top_k=5
            )

        result = await self.generator.generate_demand_letter(info, context_documents, instructions)
        letter = StoredDemandLetter(
            sections=result.sections,
            body_text=compose_demand_letter_body(result.sections),
            is_generated=True,
        )
        if self.demand_letters is not None:
            await self.demand_letters.save(case_id, letter.sections, letter.body_text, user_id)
        return letter

    async def get_demand_letter(self, case_id: str) -> StoredDemandLetter:
        case_id = validate_case_id(case_id)
        self._require_storage()
        letter = await self.demand_letters.load(case_id)
        if letter is None:
            raise NotFoundError("demand letter", case_id)
        return letter

    async def update_demand_letter(
        self,
        case_id: str,
        sections: DemandLetterSections | dict[str, Any],
        user_id: str | None = None,
    ) -> StoredDemandLetter:
        case_id = validate_case_id(case_id)
        self._require_storage()
        if not isinstance(sections, DemandLetterSections):
            sections = DemandLetterSections.model_validate(sections)
        return await self._save_letter(case_id, sections, user_id)

    async def edit_demand_letter_section(
        self,
        case_id: str,
        section: str,
        instruction: str,
    ) -> StoredDemandLetter:
        case_id = validate_case_id(case_id)
        letter = await self.get_demand_letter(case_id)
        sections = await edit_section_with_ai(self.llm, letter.sections, section, instruction)
        return await self._save_letter(case_id, sections)

    async def edit_demand_letter(self, case_id: str, instruction: str) -> StoredDemandLetter:
        case_id = validate_case_id(case_id)
        letter = await self.get_demand_letter(case_id)
        sections = await edit_letter_with_ai(self.llm, letter.sections, instruction)
        return await self._save_letter(case_id, sections)

    async def export_demand_letter(
        self,
        case_id: str,
        export_format: str = "pdf",
        complaint: ComplaintInformation | dict[str, Any] | None = None,
        today: date_type | None = None,
    ) -> ExportedFile:
        case_id = validate_case_id(case_id)
        export_format = validate_export_format(export_format)
        letter = await self.get_demand_letter(case_id)
        info = await self.resolve_complaint(case_id, complaint)

        document = build_demand_letter_document(letter.sections, info)
        filename = export_filename("Demand_Letter", case_id, export_format, today)
        exported = self._render(document, export_format, filename)
        exported.url = await self.case_documents.upload_export(
            DEMAND_LETTER_EXPORT_KIND, case_id, filename, exported.data, export_format
        )
        await self.demand_letters.set_export_url(case_id, export_format, exported.url)
        return exported

    async def add_support_documents(
        self,
        case_id: str,
        files: list[tuple[str, bytes, str]],
        user_id: str | None = None,
    ) -> list[SupportDocument]:
        """Store supporting documents and index their text for context search.

        Args:
            files: ``(filename, data, content_type)`` for each upload.

        Raises:
            MissingPreconditionError: Without storage, or when no file is given.
            ExtractionError: If a scanned document cannot be transcribed.
        """
        case_id = validate_case_id(case_id)
        self._require_storage()
        if not files:
            raise MissingPreconditionError("files", "Attach at least one supporting document")

        stored: list[SupportDocument] = []
        indexed: list[IndexedDocument] = []
        for filename, data, content_type in files:
            text = await support_document_text(self.extractor, data, content_type)
            path = await self.case_documents.upload_support_document(case_id, filename, data, content_type)
            document_id = str(uuid.uuid4())
            stored.append(SupportDocument(id=document_id, name=filename, path=path, characters=len(text)))
            indexed.append(IndexedDocument(id=document_id, name=filename, content=text))

        await self.vector_store.add_documents(indexed, case_id, user_id)
        logger.info(f"Indexed {len(stored)} supporting documents for case {case_id}")
        return stored

    async def remove_support_document(self, case_id: str, document_id: str) -> None:
        """Drop a supporting document's vectors so it no longer feeds context."""
        validate_case_id(case_id)
        self._require_storage()
        if not document_id or not document_id.strip():
            raise ValidationError("Document ID is required", field="document_id", value=document_id)
        await self.vector_store.delete_document(document_id.strip())

    async def _save_letter(
        self,
        case_id: str,
        sections: DemandLetterSections,
        user_id: str | None = None,
    ) -> StoredDemandLetter:
        body = compose_demand_letter_body(sections)
        await self.demand_letters.save(case_id, sections, body, user_id)
        return StoredDemandLetter(sections=sections, body_text=body, is_generated=True)

    # ------------------------------------------------------------------
    # Form Interrogatories
    # ------------------------------------------------------------------

    async def fill_form_interrogatories(
        self,
        case_id: str,
        complaint: ComplaintInformation | dict[str, Any] | None = None,
        preview: bool = False,
        analyze: bool = True,
        today: date_type | None = None,
    ) -> FillResult:
        """Fill DISC-001, running checkbox analysis first when none is present."""
        case_id = validate_case_id(case_id)
        info = await self.resolve_complaint(case_id, complaint)
        if analyze and not info.relevant_checkboxes:
            info = await self.analyze_complaint(case_id, info)
        return await self.filler.fill(info, preview=preview, today=today)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _render(self, document: LegalDocument, export_format: str, filename: str) -> ExportedFile:
        data = render_pdf(document, self.pdf_fonts) if export_format == "pdf" else render_docx(document)
        return ExportedFile(filename=filename, media_type=EXPORT_MIME_TYPES[export_format], data=data)
