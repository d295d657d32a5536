"""LLM-backed content generation for discovery documents and demand letters."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pydantic import ValidationError as PydanticValidationError

from core.exceptions import DiscoveryError, LLMError
from core.models import (
    DEMAND_LETTER_SECTION_KEYS,
    ComplaintInformation,
    DemandLetterSections,
    DiscoveryContent,
    DocumentType,
)
from generators.defaults import default_content, default_demand_letter
from generators.prompts import (
    DEMAND_LETTER_SYSTEM_PROMPT,
    DISCOVERY_SYSTEM_PROMPT,
    build_demand_letter_prompt,
    build_discovery_prompt,
)
from generators.registry import content_from_response, get_document_profile
from tools.json_parsing import parse_llm_json
from tools.llm_client import LLMClient
from tools.vector_store import VectorStoreClient

logger = logging.getLogger("discovery.generators.content")

ADMISSION_CONTEXT_QUERIES: tuple[str, ...] = (
    "contract agreement terms and obligations",
    "payment invoices amounts owed",
    "breach failure to perform",
    "dates of key events and incident",
    "injuries damages and medical treatment",
    "communications demand letters and notices",
    "parties relationship and roles",
    "admissions statements and acknowledgments",
)


@dataclass(slots=True)
class GenerationResult:
    """Generated discovery content and whether the static fallback was used."""

    content: DiscoveryContent
    used_fallback: bool = False
    errors: list[str] = field(default_factory=list)


@dataclass(slots=True)
class DemandLetterResult:
    sections: DemandLetterSections
    used_fallback: bool = False
    errors: list[str] = field(default_factory=list)


class ContentGenerator:
    """Drafts definitions, numbered requests and demand letters.

    Malformed model output never raises: the deterministic defaults are
    returned instead and the result is flagged with ``used_fallback``.
    """

    def __init__(self, llm: LLMClient, vector_store: VectorStoreClient | None = None):
        self.llm = llm
        self.vector_store = vector_store

    async def generate(
        self,
        document_type: DocumentType,
        complaint: ComplaintInformation,
        context_chunks: list[str] | None = None,
    ) -> GenerationResult:
        """Generate RFA, RFP or SI content for a complaint."""
        profile = get_document_profile(document_type)
        prompt = build_discovery_prompt(profile, complaint, context_chunks)

        try:
            text = await self.llm.generate_text(DISCOVERY_SYSTEM_PROMPT, prompt)
            payload = parse_llm_json(
                text, expect=dict, operation=f"{profile.document_type.value} generation"
            )
        except LLMError as e:
            logger.warning(f"{profile.name} generation failed, using defaults: {e}")
            return GenerationResult(
                content=default_content(profile.document_type, complaint),
                used_fallback=True,
                errors=[str(e)],
            )

        content = content_from_response(profile, payload)
        if not content.is_generated:
            logger.warning(
                f"{profile.name} response missing definitions or {profile.response_key}, using defaults"
            )
            return GenerationResult(
                content=default_content(profile.document_type, complaint),
                used_fallback=True,
                errors=["response did not include both definitions and items"],
            )

        logger.info(
            f"Generated {profile.name}: {len(content.definitions)} definitions, "
            f"{len(content.items)} {profile.response_key}"
        )
        return GenerationResult(content=content)

    async def gather_context(
        self,
        case_id: str,
        queries: tuple[str, ...] = ADMISSION_CONTEXT_QUERIES,
        top_k: int = 3,
    ) -> list[str]:
        """Run the queries one after another and collect distinct chunks.

        Failed searches are logged and skipped.
        """
        if self.vector_store is None:
            return []

        chunks: list[str] = []
        seen: set[str] = set()
        for query in queries:
            try:
                results = await self.vector_store.search_contents(query, case_id, top_k)
            except DiscoveryError as e:
                logger.warning(f"Vector search '{query}' failed for case {case_id}: {e}")
                continue
            for chunk in results:
                key = chunk.strip()
                if key and key not in seen:
                    seen.add(key)
                    chunks.append(chunk)
        return chunks

    async def generate_admissions_with_context(
        self,
        complaint: ComplaintInformation,
        case_id: str,
    ) -> GenerationResult:
        """Generate admissions grounded in retrieved case-file excerpts."""
        context = await self.gather_context(case_id)
        logger.info(f"Collected {len(context)} context chunks for case {case_id}")
        return await self.generate(DocumentType.RFA, complaint, context_chunks=context or None)

    async def generate_demand_letter(
        self,
        complaint: ComplaintInformation,
        context_documents: list[str] | None = None,
        instructions: str | None = None,
    ) -> DemandLetterResult:
        """Draft a sectioned demand letter."""
        prompt = build_demand_letter_prompt(complaint, context_documents or [], instructions)

        try:
            text = await self.llm.generate_text(DEMAND_LETTER_SYSTEM_PROMPT, prompt)
            payload = parse_llm_json(text, expect=dict, operation="demand letter generation")
            sections = DemandLetterSections.model_validate(payload)
        except (LLMError, PydanticValidationError) as e:
            logger.warning(f"Demand letter generation failed, using defaults: {e}")
            return DemandLetterResult(
                sections=default_demand_letter(complaint),
                used_fallback=True,
                errors=[str(e)],
            )

        if not any(getattr(sections, key).strip() for key in DEMAND_LETTER_SECTION_KEYS):
            logger.warning("Demand letter response had no section text, using defaults")
            return DemandLetterResult(
                sections=default_demand_letter(complaint),
                used_fallback=True,
                errors=["response contained no section text"],
            )

        return DemandLetterResult(sections=sections)
