"""Tests for AI editing of generated content."""

from __future__ import annotations

import json

import pytest

from core.exceptions import LLMError, LLMResponseError, ValidationError
from core.models import DemandLetterSections
from generators.editing import (
    edit_all_with_ai,
    edit_item_with_ai,
    edit_letter_with_ai,
    edit_section_with_ai,
)

ITEMS = [
    "Admit that you signed the contract.",
    "Admit that you received the invoice.",
    "Admit that you did not pay the invoice.",
    "Admit that you received the demand letter.",
    "Admit that you owe damages.",
]


@pytest.mark.asyncio
async def test_edit_item_changes_only_that_index(scripted_llm) -> None:
    scripted_llm.queue("Admit that you did not pay the invoice dated March 1, 2024.")
    original = list(ITEMS)

    updated = await edit_item_with_ai(scripted_llm, ITEMS, 2, "add the invoice date", label="admission")

    assert updated[2] == "Admit that you did not pay the invoice dated March 1, 2024."
    assert [updated[i] for i in (0, 1, 3, 4)] == [ITEMS[i] for i in (0, 1, 3, 4)]
    assert ITEMS == original
    assert "Admit that you did not pay the invoice." in scripted_llm.calls[0]["user_prompt"]


@pytest.mark.asyncio
async def test_edit_item_strips_code_fences(scripted_llm) -> None:
    scripted_llm.queue("```\nAdmit that you signed the contract on May 2.\n```")

    updated = await edit_item_with_ai(scripted_llm, ITEMS, 0, "add the date")

    assert updated[0] == "Admit that you signed the contract on May 2."


@pytest.mark.asyncio
@pytest.mark.parametrize("index", [-1, 5, "2", True])
async def test_edit_item_rejects_bad_index(scripted_llm, index) -> None:
    with pytest.raises(ValidationError):
        await edit_item_with_ai(scripted_llm, ITEMS, index, "shorter")
    assert scripted_llm.calls == []


@pytest.mark.asyncio
async def test_edit_item_rejects_blank_instruction(scripted_llm) -> None:
    with pytest.raises(ValidationError):
        await edit_item_with_ai(scripted_llm, ITEMS, 0, "   ")


@pytest.mark.asyncio
async def test_edit_item_empty_answer_is_an_error(scripted_llm) -> None:
    scripted_llm.queue("")

    with pytest.raises(LLMError):
        await edit_item_with_ai(scripted_llm, ITEMS, 0, "shorter")


@pytest.mark.asyncio
async def test_edit_all_cleans_definition_numbering(scripted_llm) -> None:
    scripted_llm.queue(json.dumps(['1. The term "YOU" means Acme.', '2. The term "PLAINTIFF" means Jane.']))

    revised = await edit_all_with_ai(
        scripted_llm, ["YOU", "PLAINTIFF"], "be concise", label="definition", is_definitions=True
    )

    assert revised == ['The term "YOU" means Acme.', 'The term "PLAINTIFF" means Jane.']


@pytest.mark.asyncio
async def test_edit_all_requires_an_array(scripted_llm) -> None:
    scripted_llm.queue('{"items": "not a list"}')

    with pytest.raises(LLMResponseError):
        await edit_all_with_ai(scripted_llm, ITEMS, "be concise")


@pytest.mark.asyncio
async def test_edit_section_replaces_one_section(scripted_llm) -> None:
    sections = DemandLetterSections(salutation="Dear Sir:", closing="Sincerely,")
    scripted_llm.queue("Dear Acme Corporation:")

    updated = await edit_section_with_ai(scripted_llm, sections, "salutation", "use the company name")

    assert updated.salutation == "Dear Acme Corporation:"
    assert updated.closing == "Sincerely,"
    assert sections.salutation == "Dear Sir:"


@pytest.mark.asyncio
async def test_edit_section_rejects_unknown_section(scripted_llm) -> None:
    with pytest.raises(ValidationError):
        await edit_section_with_ai(scripted_llm, DemandLetterSections(), "postscript", "add one")


@pytest.mark.asyncio
async def test_edit_letter_keeps_missing_keys(scripted_llm) -> None:
    sections = DemandLetterSections(opening_paragraph="We represent Jane.", closing="Regards,")
    scripted_llm.queue(json.dumps({"opening_paragraph": "This firm represents Jane Smith.", "closing": None}))

    updated = await edit_letter_with_ai(scripted_llm, sections, "more formal")

    assert updated.opening_paragraph == "This firm represents Jane Smith."
    assert updated.closing == "Regards,"
