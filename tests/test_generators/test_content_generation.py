"""Tests for LLM-backed discovery and demand letter generation."""

from __future__ import annotations

import json

import pytest

from core.exceptions import LLMError, ValidationError
from core.models import DocumentType
from generators.content import ContentGenerator
from generators.defaults import default_content, default_demand_letter
from generators.registry import content_from_response, get_document_profile
from tools.vector_store import VectorStoreClient


@pytest.mark.asyncio
async def test_generate_parses_response_keys(scripted_llm, complaint) -> None:
    scripted_llm.queue(
        json.dumps(
            {
                "definitions": ['The term "YOU" refers to Acme Corporation.'],
                "productions": ["All contracts between the parties.", "All invoices."],
            }
        )
    )
    generator = ContentGenerator(scripted_llm)

    result = await generator.generate(DocumentType.RFP, complaint)

    assert not result.used_fallback
    assert result.content.items == ["All contracts between the parties.", "All invoices."]
    assert result.content.document_type is DocumentType.RFP


@pytest.mark.asyncio
async def test_garbage_response_uses_defaults(scripted_llm, complaint) -> None:
    scripted_llm.queue("I'm sorry, I can't help with that.")
    generator = ContentGenerator(scripted_llm)

    result = await generator.generate(DocumentType.SI, complaint)

    assert result.used_fallback
    assert result.content == default_content(DocumentType.SI, complaint)
    assert result.errors


@pytest.mark.asyncio
async def test_missing_definitions_uses_defaults(scripted_llm, complaint) -> None:
    scripted_llm.queue(json.dumps({"admissions": ["Admit that you signed the contract."]}))
    generator = ContentGenerator(scripted_llm)

    result = await generator.generate(DocumentType.RFA, complaint)

    assert result.used_fallback
    assert len(result.content.items) == 11


@pytest.mark.asyncio
async def test_llm_failure_uses_defaults(scripted_llm, complaint) -> None:
    scripted_llm.queue(LLMError("generation", "timeout"))
    result = await ContentGenerator(scripted_llm).generate(DocumentType.RFA, complaint)

    assert result.used_fallback


@pytest.mark.asyncio
async def test_non_request_type_is_rejected(scripted_llm, complaint) -> None:
    with pytest.raises(ValidationError):
        await ContentGenerator(scripted_llm).generate(DocumentType.DEMAND_LETTER, complaint)


def test_content_from_response_accepts_wire_keys() -> None:
    profile = get_document_profile("rfa")

    wire = content_from_response(
        profile, {"vectorBasedDefinitions": ["D1"], "vectorBasedAdmissions": ["A1", " ", "A2"]}
    )

    assert wire.definitions == ["D1"]
    assert wire.items == ["A1", "A2"]


@pytest.mark.asyncio
async def test_bare_list_response_uses_defaults(scripted_llm, complaint) -> None:
    scripted_llm.queue(json.dumps(["All contracts.", "All invoices."]))

    result = await ContentGenerator(scripted_llm).generate(DocumentType.RFP, complaint)

    assert result.used_fallback
    assert result.content.items == default_content(DocumentType.RFP, complaint).items
    assert result.errors


@pytest.mark.asyncio
async def test_gather_context_deduplicates_and_skips_failures(
    scripted_llm, supabase_client, fake_supabase
) -> None:
    fake_supabase.search_results = [
        {"id": "1", "content": "The agreement was signed on May 2."},
        {"id": "2", "content": "The agreement was signed on May 2.  "},
        {"id": "3", "content": "Invoice 118 remains unpaid."},
    ]
    generator = ContentGenerator(scripted_llm, VectorStoreClient(supabase_client))

    chunks = await generator.gather_context("case-1", queries=("contract terms", "payments"))

    assert chunks == ["The agreement was signed on May 2.", "Invoice 118 remains unpaid."]
    assert len(fake_supabase.function_calls) == 2

    fake_supabase.fail_with = 500
    assert await generator.gather_context("case-1", queries=("contract terms",)) == []


@pytest.mark.asyncio
async def test_admissions_with_context_include_excerpts(
    scripted_llm, supabase_client, fake_supabase, complaint
) -> None:
    fake_supabase.search_results = [{"id": "1", "content": "Invoice 118 remains unpaid."}]
    scripted_llm.queue(
        json.dumps({"definitions": ["D"], "admissions": ["Admit that invoice 118 is unpaid."]})
    )
    generator = ContentGenerator(scripted_llm, VectorStoreClient(supabase_client))

    result = await generator.generate_admissions_with_context(complaint, "case-1")

    assert result.content.items == ["Admit that invoice 118 is unpaid."]
    assert "Invoice 118 remains unpaid." in scripted_llm.calls[0]["user_prompt"]


@pytest.mark.asyncio
async def test_demand_letter_generation(scripted_llm, complaint) -> None:
    scripted_llm.queue(
        json.dumps(
            {
                "salutation": "Dear Acme Corporation:",
                "injuries": ["Lost revenue", "Interest"],
                "settlement_demand": "Our client demands $50,000.",
            }
        )
    )

    result = await ContentGenerator(scripted_llm).generate_demand_letter(
        complaint, ["Invoice 118 remains unpaid."], "firm tone"
    )

    assert not result.used_fallback
    assert result.sections.injuries == "Lost revenue\nInterest"
    assert "firm tone" in scripted_llm.calls[0]["user_prompt"]


@pytest.mark.asyncio
async def test_empty_demand_letter_uses_defaults(scripted_llm, complaint) -> None:
    scripted_llm.queue("{}")

    result = await ContentGenerator(scripted_llm).generate_demand_letter(complaint)

    assert result.used_fallback
    assert result.sections == default_demand_letter(complaint)


@pytest.mark.asyncio
async def test_demand_letter_context_is_capped(scripted_llm, complaint) -> None:
    scripted_llm.queue(json.dumps({"salutation": "Dear Acme Corporation:"}))
    markers = "QXZJKVW"
    documents = [marker * 2500 for marker in markers]

    await ContentGenerator(scripted_llm).generate_demand_letter(complaint, documents)

    prompt = scripted_llm.calls[0]["user_prompt"]
    assert prompt.count("<document ") == 5
    for marker in markers[:5]:
        assert marker * 1800 in prompt
        assert marker * 1801 not in prompt
    for marker in markers[5:]:
        assert marker * 10 not in prompt


@pytest.mark.asyncio
async def test_fenced_demand_letter_response(scripted_llm, complaint) -> None:
    payload = {
        "salutation": "Dear Acme Corporation:",
        "re_line": "Smith v. Acme Corporation",
        "settlement_demand": "Our client demands $50,000.",
    }
    scripted_llm.queue(f"```json\n{json.dumps(payload, indent=2)}\n```")

    result = await ContentGenerator(scripted_llm).generate_demand_letter(complaint)

    assert not result.used_fallback
    assert result.sections.salutation == "Dear Acme Corporation:"
    assert result.sections.re_line == "Smith v. Acme Corporation"
    assert result.sections.settlement_demand == "Our client demands $50,000."
