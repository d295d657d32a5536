"""Defensive parsing of JSON embedded in LLM responses."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from core.exceptions import LLMResponseError

logger = logging.getLogger("discovery.llm_client.parsing")

_FENCE_OPEN = re.compile(r"^```[a-zA-Z]*\s*")
_FENCE_CLOSE = re.compile(r"\s*```$")
_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")


def strip_code_fences(text: str) -> str:
    """Remove a surrounding Markdown code fence, if any."""
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = _FENCE_OPEN.sub("", stripped)
        stripped = _FENCE_CLOSE.sub("", stripped)
    return stripped.strip()


def parse_llm_json(
    text: str,
    expect: type | tuple[type, ...] = (dict, list),
    operation: str = "parse",
) -> Any:
    """Parse JSON out of a free-text LLM response.

    Tries, in order: the whole text (code fences stripped), then the first
    ``{...}`` block, then the first ``[...]`` block. The parsed value must be
    an instance of ``expect``.

    Raises:
        LLMResponseError: If no strategy yields a value of the expected type.
    """
    candidates = [strip_code_fences(text)]

    object_match = _OBJECT_PATTERN.search(text)
    array_match = _ARRAY_PATTERN.search(text)
    wants_list_first = expect is list or expect == (list,)
    matches = [array_match, object_match] if wants_list_first else [object_match, array_match]
    candidates.extend(match.group(0) for match in matches if match)

    for candidate in candidates:
        try:
            value = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(value, expect):
            return value

    logger.debug(f"No JSON of type {expect} found in {len(text)} chars of response")
    raise LLMResponseError(operation, "response did not contain valid JSON", text)
