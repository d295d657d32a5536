"""Drafting and editing of discovery requests and demand letters."""

from generators.content import ContentGenerator, DemandLetterResult, GenerationResult
from generators.defaults import default_content, default_demand_letter
from generators.editing import (
    edit_all_with_ai,
    edit_item_with_ai,
    edit_letter_with_ai,
    edit_section_with_ai,
)
from generators.registry import DISCOVERY_DOCUMENTS, get_document_profile, list_discovery_types

__all__ = [
    "ContentGenerator",
    "DemandLetterResult",
    "GenerationResult",
    "DISCOVERY_DOCUMENTS",
    "default_content",
    "default_demand_letter",
    "edit_all_with_ai",
    "edit_item_with_ai",
    "edit_letter_with_ai",
    "edit_section_with_ai",
    "get_document_profile",
    "list_discovery_types",
]
