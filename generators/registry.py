"""Discovery document registry - per-type titles, labels and storage layout."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from core.exceptions import ValidationError
from core.models import DiscoveryContent, DocumentType

INTRO_SALUTATION = "TO ALL PARTIES HEREIN AND TO THEIR RESPECTIVE ATTORNEYS OF RECORD:"


@dataclass(frozen=True, slots=True)
class DiscoveryDocumentProfile:
    """Everything that differs between RFA, RFP and SI documents."""

    document_type: DocumentType
    name: str
    caption_title: tuple[str, ...]
    footer_title: str
    item_label: str
    item_heading: str
    items_section_title: str
    response_key: str
    wire_key: str
    table: str
    items_column: str
    code_section: str
    intro: str
    has_generated_flag: bool = False


DEFINITIONS_WIRE_KEY = "vectorBasedDefinitions"
DEFINITIONS_COLUMN = "definitions"


DISCOVERY_DOCUMENTS: dict[DocumentType, DiscoveryDocumentProfile] = {
    DocumentType.RFA: DiscoveryDocumentProfile(
        document_type=DocumentType.RFA,
        name="Request for Admissions",
        caption_title=("PLAINTIFF'S REQUEST FOR", "ADMISSIONS TO DEFENDANT,", "SET ONE"),
        footer_title="PLAINTIFF'S REQUEST FOR ADMISSIONS TO DEFENDANT, SET ONE",
        item_label="admission",
        item_heading="REQUEST FOR ADMISSION NO.",
        items_section_title="REQUESTS FOR ADMISSION",
        response_key="admissions",
        wire_key="vectorBasedAdmissions",
        table="request_for_admissions",
        items_column="admissions",
        code_section="2033.010",
        intro=(
            "Pursuant to California Code of Civil Procedure Section 2033.010, you are hereby "
            "requested to admit the truth of the following facts or assertions. Your response "
            "is due within thirty days from the date of service of this request for admissions."
        ),
        has_generated_flag=True,
    ),
    DocumentType.RFP: DiscoveryDocumentProfile(
        document_type=DocumentType.RFP,
        name="Request for Production of Documents",
        caption_title=("REQUEST FOR PRODUCTION OF", "DOCUMENTS, SET ONE"),
        footer_title="REQUEST FOR PRODUCTION OF DOCUMENTS, SET ONE",
        item_label="production request",
        item_heading="REQUEST FOR PRODUCTION NO.",
        items_section_title="DOCUMENTS TO BE PRODUCED",
        response_key="productions",
        wire_key="vectorBasedProductions",
        table="request_for_productions",
        items_column="productions",
        code_section="2031.010",
        intro=(
            "Pursuant to California Code of Civil Procedure Section 2031.010, Plaintiff hereby "
            "requests that Defendant produce and permit Plaintiff to inspect and copy the "
            "documents and things described in this request within thirty days from the date "
            "of service of this request."
        ),
    ),
    DocumentType.SI: DiscoveryDocumentProfile(
        document_type=DocumentType.SI,
        name="Special Interrogatories",
        caption_title=("SPECIAL INTERROGATORIES TO", "DEFENDANT, SET ONE"),
        footer_title="SPECIAL INTERROGATORIES TO DEFENDANT, SET ONE",
        item_label="interrogatory",
        item_heading="SPECIAL INTERROGATORY NO.",
        items_section_title="SPECIAL INTERROGATORIES",
        response_key="interrogatories",
        wire_key="vectorBasedInterrogatories",
        table="special_interrogatories",
        items_column="interrogatories",
        code_section="2030.010",
        intro=(
            "Pursuant to California Code of Civil Procedure Section 2030.010, you are required "
            "to answer the following interrogatories under oath within thirty days. In answering "
            "these interrogatories, furnish all information that is available to you, including "
            "information in the possession of your attorneys, investigators, employees, agents, "
            "representatives, or any other person acting on your behalf, and not merely "
            "information known of your own personal knowledge."
        ),
    ),
}


def get_document_profile(document_type: DocumentType | str) -> DiscoveryDocumentProfile:
    """Get the profile for a discovery document type.

    Raises:
        ValidationError: If the type has no numbered-request layout.
    """
    try:
        return DISCOVERY_DOCUMENTS[DocumentType(document_type)]
    except (KeyError, ValueError) as e:
        raise ValidationError(
            f"'{document_type}' is not a discovery request document. "
            f"Available: {', '.join(t.value for t in DISCOVERY_DOCUMENTS)}",
            field="document_type",
            value=document_type,
        ) from e


def list_discovery_types() -> list[DocumentType]:
    return list(DISCOVERY_DOCUMENTS)


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if str(item).strip()]


def content_from_response(
    profile: DiscoveryDocumentProfile,
    payload: dict[str, Any],
) -> DiscoveryContent:
    """Build content from a parsed LLM answer keyed by response or wire keys."""
    definitions = payload.get("definitions", payload.get(DEFINITIONS_WIRE_KEY))
    items = payload.get(profile.response_key, payload.get(profile.wire_key, payload.get("items")))
    return DiscoveryContent(
        document_type=profile.document_type,
        definitions=_string_list(definitions),
        items=_string_list(items),
    )
