"""Prompt templates for discovery drafting and AI-assisted editing.

Variable parts are wrapped in XML-style tags so the model can tell
instructions from case data.
"""

from __future__ import annotations

import json

from core.models import DEMAND_LETTER_SECTION_KEYS, ComplaintInformation, DemandLetterSections
from generators.registry import DiscoveryDocumentProfile

DISCOVERY_SYSTEM_PROMPT = """You are an experienced California civil litigation attorney drafting written discovery.

Requirements:
- Each request is a single, self-contained sentence or short paragraph
- Requests are specific to the facts of the case, never generic boilerplate only
- Defined terms appear in capitals exactly as defined
- Do not number the requests or definitions; numbering is added later
- Respond with a single JSON object and no other text"""

DEMAND_LETTER_SYSTEM_PROMPT = """You are a personal injury attorney writing a pre-litigation demand letter.

Write in a professional, firm tone. Base every factual statement on the case
information and supporting documents provided. Respond with a single JSON
object and no other text."""

EDIT_SYSTEM_PROMPT = "You are a legal assistant revising discovery documents at an attorney's request."

MAX_CONTEXT_DOCUMENTS = 5
MAX_CONTEXT_CHARS = 1800


def _case_block(complaint: ComplaintInformation) -> str:
    return f"<case>\n{json.dumps(complaint.to_payload(), indent=2, ensure_ascii=False)}\n</case>"


def build_discovery_prompt(
    profile: DiscoveryDocumentProfile,
    complaint: ComplaintInformation,
    context_chunks: list[str] | None = None,
) -> str:
    """Prompt for definitions plus numbered requests of one document type."""
    response_shape = {
        "definitions": ['The term "INCIDENT" means ...'],
        profile.response_key: [f"First {profile.item_label} ...", f"Second {profile.item_label} ..."],
    }

    parts = [
        f"Draft Plaintiff's {profile.name}, Set One, directed to the Defendant.",
        "",
        "Case information:",
        _case_block(complaint),
    ]

    if context_chunks:
        parts.extend(
            [
                "",
                "Relevant excerpts from the case file:",
                "<context>",
                "\n---\n".join(context_chunks),
                "</context>",
            ]
        )

    parts.extend(
        [
            "",
            "Format your response as a JSON object with this structure:",
            json.dumps(response_shape, indent=2),
            "",
            f"Provide 3-6 definitions and 10-25 {profile.item_label}s.",
        ]
    )
    return "\n".join(parts)


def build_demand_letter_prompt(
    complaint: ComplaintInformation,
    context_documents: list[str],
    instructions: str | None = None,
) -> str:
    """Prompt for a sectioned demand letter.

    At most five context documents are included, each cut to 1800 characters.
    """
    response_shape = {key: "..." for key in DEMAND_LETTER_SECTION_KEYS}

    parts = [
        "Write a demand letter on behalf of the plaintiff to the defendant.",
        "",
        "Case information:",
        _case_block(complaint),
    ]

    documents = [doc[:MAX_CONTEXT_CHARS] for doc in context_documents[:MAX_CONTEXT_DOCUMENTS]]
    if documents:
        parts.extend(["", "Supporting documents:"])
        for number, document in enumerate(documents, start=1):
            parts.append(f'<document index="{number}">\n{document}\n</document>')

    if instructions:
        parts.extend(["", "Additional instructions from the attorney:", f"<instructions>{instructions}</instructions>"])

    parts.extend(
        [
            "",
            "Format your response as a JSON object with exactly these keys:",
            json.dumps(response_shape, indent=2),
            "",
            "medical_providers, injuries and damages_summary may be empty strings when the "
            "case file has nothing relevant. Do not use Markdown.",
        ]
    )
    return "\n".join(parts)


def build_edit_item_prompt(label: str, current: str, instruction: str) -> str:
    """Prompt revising exactly one item."""
    return (
        f"The user wants to edit a single {label}.\n\n"
        f"<current>{current}</current>\n\n"
        f"<instruction>{instruction}</instruction>\n\n"
        f"Return ONLY the revised {label} as plain text, with no numbering, quotes or commentary."
    )


def build_edit_all_prompt(
    label: str,
    items: list[str],
    instruction: str,
    is_definitions: bool = False,
) -> str:
    """Prompt revising a whole list of items at once."""
    numbered = "\n".join(f"{number}. {item}" for number, item in enumerate(items, start=1))
    parts = [
        f"The user wants to edit all of the following {label}s.",
        "",
        f"<items>\n{numbered}\n</items>",
        "",
        f"<instruction>{instruction}</instruction>",
        "",
        "Return ONLY a valid JSON array of strings, one string per item, in order.",
    ]
    if is_definitions:
        parts.append('Do not number the definitions. Each definition must start with "The term".')
    return "\n".join(parts)


def build_edit_section_prompt(section: str, current: str, instruction: str) -> str:
    """Prompt revising one demand letter section."""
    return (
        f"The user wants to edit a single demand letter section: {section}.\n\n"
        f"<current>{current}</current>\n\n"
        f"<instruction>{instruction}</instruction>\n\n"
        "Return ONLY the revised section text, with no commentary."
    )


def build_edit_letter_prompt(sections: DemandLetterSections, instruction: str) -> str:
    """Prompt revising every demand letter section at once."""
    current = {key: getattr(sections, key) for key in DEMAND_LETTER_SECTION_KEYS}
    return (
        "The user wants to revise an entire demand letter.\n\n"
        f"<letter>\n{json.dumps(current, indent=2, ensure_ascii=False)}\n</letter>\n\n"
        f"<instruction>{instruction}</instruction>\n\n"
        "Return ONLY a valid JSON object with exactly the same keys as the letter above."
    )
