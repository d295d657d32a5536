"""Tests for Form Interrogatories checkbox analysis."""

from __future__ import annotations

import json

import pytest

from core.exceptions import LLMError
from core.models import CheckboxId
from extraction.checkboxes import (
    FALLBACK_EXPLANATION,
    analyze_checkboxes_for_form_interrogatories,
    fallback_checkbox_analysis,
    merge_checkbox_analysis,
)


def test_merge_never_drops_existing_true_keys(complaint) -> None:
    info = complaint.model_copy(update={"relevant_checkboxes": {"section301": True, "Contract": True}})

    merged = merge_checkbox_analysis(
        info,
        {"relevantCheckboxes": {"section320": True, "PropDam": "false"}, "caseType": ""},
    )

    assert merged.relevant_checkboxes == {
        "section301": True,
        "Contract": True,
        "section320": True,
        "PropDam": False,
    }
    # Empty scalar answers keep the previous value
    assert merged.case_type == "Contract"


def test_merge_takes_new_scalars(complaint) -> None:
    merged = merge_checkbox_analysis(
        complaint,
        {
            "caseType": "Personal Injury",
            "incidentDefinition": "the collision on March 1, 2024",
            "explanation": "Vehicle accident with injuries",
        },
    )

    assert merged.case_type == "Personal Injury"
    assert merged.incident_definition == "the collision on March 1, 2024"
    assert merged.explanation == "Vehicle accident with injuries"
    assert complaint.case_type == "Contract"


def test_fallback_checks_general_section(complaint) -> None:
    info = complaint.model_copy(update={"relevant_checkboxes": {"section350": True}})

    result = fallback_checkbox_analysis(info)

    assert result.relevant_checkboxes[CheckboxId.SECTION_301.value] is True
    assert result.relevant_checkboxes["section350"] is True
    assert result.explanation == FALLBACK_EXPLANATION


@pytest.mark.asyncio
async def test_analysis_merges_llm_answer(scripted_llm, complaint) -> None:
    scripted_llm.queue(
        "Here is my analysis:\n"
        + json.dumps(
            {
                "caseType": "Contract",
                "relevantCheckboxes": {"section301": True, "section350": True, "Contract": True},
                "explanation": "Breach of a written agreement",
            }
        )
    )

    result = await analyze_checkboxes_for_form_interrogatories(scripted_llm, complaint, "Complaint text")

    assert result.relevant_checkboxes == {"section301": True, "section350": True, "Contract": True}
    assert result.explanation == "Breach of a written agreement"
    assert "Complaint text" in scripted_llm.calls[0]["user_prompt"]


@pytest.mark.asyncio
async def test_llm_failure_yields_fallback(scripted_llm, complaint) -> None:
    scripted_llm.queue(LLMError("generation", "rate limited"))

    result = await analyze_checkboxes_for_form_interrogatories(scripted_llm, complaint)

    assert result.relevant_checkboxes == {"section301": True}
    assert result.explanation == FALLBACK_EXPLANATION


@pytest.mark.asyncio
async def test_unparseable_answer_yields_fallback(scripted_llm, complaint) -> None:
    scripted_llm.queue("Sections 301 and 350 apply.")

    result = await analyze_checkboxes_for_form_interrogatories(scripted_llm, complaint)

    assert result.relevant_checkboxes == {"section301": True}
