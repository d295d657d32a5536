"""Form Interrogatories section relevance analysis."""

from __future__ import annotations

import logging
from typing import Any

from core.exceptions import LLMError
from core.models import CheckboxId, CheckboxSelection, ComplaintInformation
from extraction.prompts import CHECKBOX_SYSTEM_PROMPT, build_checkbox_prompt
from tools.llm_client import LLMClient

logger = logging.getLogger("discovery.extraction.checkboxes")

FALLBACK_EXPLANATION = "No valid analysis found"


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "yes", "1", "checked"}
    return bool(value)


def merge_checkbox_analysis(
    info: ComplaintInformation,
    analysis: dict[str, Any],
) -> ComplaintInformation:
    """Merge an analysis answer into an existing record.

    Scalar fields take the new value only when it is non-empty. The checkbox
    map is merged key by key, so keys already present are never dropped.
    """
    checkboxes = dict(info.relevant_checkboxes)
    new_checkboxes = analysis.get("relevantCheckboxes")
    if isinstance(new_checkboxes, dict):
        checkboxes.update({str(key): _as_bool(value) for key, value in new_checkboxes.items()})

    selection = CheckboxSelection.from_mapping(checkboxes)
    if selection.unknown:
        logger.info(f"Analysis includes unrecognised checkbox ids: {sorted(selection.unknown)}")

    return info.model_copy(
        update={
            "case_type": analysis.get("caseType") or info.case_type,
            "incident_definition": analysis.get("incidentDefinition") or info.incident_definition,
            "relevant_checkboxes": checkboxes,
            "explanation": analysis.get("explanation") or info.explanation,
        }
    )


def fallback_checkbox_analysis(info: ComplaintInformation) -> ComplaintInformation:
    """Keep existing selections and make sure the general section is checked."""
    checkboxes = {**info.relevant_checkboxes, CheckboxId.SECTION_301.value: True}
    return info.model_copy(
        update={
            "relevant_checkboxes": checkboxes,
            "explanation": FALLBACK_EXPLANATION,
        }
    )


async def analyze_checkboxes_for_form_interrogatories(
    llm: LLMClient,
    info: ComplaintInformation,
    document_text: str | None = None,
) -> ComplaintInformation:
    """Ask the LLM which DISC-001 checkboxes apply and merge the answer.

    Never raises for LLM or parse failures; those produce the fallback record.
    """
    try:
        analysis = await llm.generate_structured(
            CHECKBOX_SYSTEM_PROMPT,
            build_checkbox_prompt(info, document_text),
            expect=dict,
        )
    except LLMError as e:
        logger.warning(f"Checkbox analysis failed, using general section only: {e}")
        return fallback_checkbox_analysis(info)

    merged = merge_checkbox_analysis(info, analysis)
    logger.info(
        f"Checkbox analysis selected {len(CheckboxSelection.from_mapping(merged.relevant_checkboxes).selected())} "
        f"known checkboxes (case type: {merged.case_type})"
    )
    return merged
