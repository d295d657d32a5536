"""AI-assisted editing of generated discovery text.

All edits are functional: they return new lists or section objects and never
mutate their inputs.
"""

from __future__ import annotations

import logging

from core.exceptions import LLMError, ValidationError
from core.models import DEMAND_LETTER_SECTION_KEYS, DemandLetterSections
from core.validation import clean_definitions, validate_index, validate_instruction
from generators.prompts import (
    EDIT_SYSTEM_PROMPT,
    build_edit_all_prompt,
    build_edit_item_prompt,
    build_edit_letter_prompt,
    build_edit_section_prompt,
)
from tools.json_parsing import parse_llm_json, strip_code_fences
from tools.llm_client import LLMClient

logger = logging.getLogger("discovery.generators.editing")


async def _revise_text(llm: LLMClient, prompt: str, operation: str) -> str:
    text = strip_code_fences(await llm.generate_text(EDIT_SYSTEM_PROMPT, prompt))
    if not text:
        raise LLMError(operation, "model returned an empty response")
    return text


async def edit_item_with_ai(
    llm: LLMClient,
    items: list[str],
    index: int,
    instruction: str,
    label: str = "item",
) -> list[str]:
    """Revise one item and return a new list where only ``index`` differs.

    Raises:
        ValidationError: If the index or instruction is invalid.
        LLMError: If the call fails or the model returns nothing.
    """
    validate_index(index, items)
    instruction = validate_instruction(instruction)

    revised = await _revise_text(
        llm, build_edit_item_prompt(label, items[index], instruction), f"edit {label}"
    )
    logger.info(f"Revised {label} {index + 1} of {len(items)}")

    updated = list(items)
    updated[index] = revised
    return updated


async def edit_all_with_ai(
    llm: LLMClient,
    items: list[str],
    instruction: str,
    label: str = "item",
    is_definitions: bool = False,
) -> list[str]:
    """Revise every item in one call.

    Raises:
        LLMResponseError: If the answer is not a JSON array.
        LLMError: If the call fails.
    """
    instruction = validate_instruction(instruction)
    text = await llm.generate_text(
        EDIT_SYSTEM_PROMPT,
        build_edit_all_prompt(label, items, instruction, is_definitions),
    )
    revised = [str(item) for item in parse_llm_json(text, expect=list, operation=f"edit all {label}s")]

    if is_definitions:
        revised = clean_definitions(revised)

    logger.info(f"Revised all {label}s ({len(items)} -> {len(revised)})")
    return revised


async def edit_section_with_ai(
    llm: LLMClient,
    sections: DemandLetterSections,
    section: str,
    instruction: str,
) -> DemandLetterSections:
    """Revise one demand letter section."""
    if section not in DEMAND_LETTER_SECTION_KEYS:
        raise ValidationError(
            f"Unknown demand letter section '{section}'",
            field="section",
            value=section,
        )
    instruction = validate_instruction(instruction)

    revised = await _revise_text(
        llm,
        build_edit_section_prompt(section, getattr(sections, section), instruction),
        f"edit {section}",
    )
    return sections.model_copy(update={section: revised})


async def edit_letter_with_ai(
    llm: LLMClient,
    sections: DemandLetterSections,
    instruction: str,
) -> DemandLetterSections:
    """Revise the whole letter; keys missing from the answer keep their text."""
    instruction = validate_instruction(instruction)
    text = await llm.generate_text(EDIT_SYSTEM_PROMPT, build_edit_letter_prompt(sections, instruction))
    payload = parse_llm_json(text, expect=dict, operation="edit demand letter")

    updates = {
        key: str(payload[key])
        for key in DEMAND_LETTER_SECTION_KEYS
        if isinstance(payload.get(key), str)
    }
    return sections.model_copy(update=updates)
