"""Prompt templates for complaint extraction and checkbox analysis."""

from __future__ import annotations

import json

from core.models import CheckboxId, ComplaintInformation

EXTRACTION_SYSTEM_PROMPT = (
    "You are a legal assistant extracting information from a complaint document. "
    "You answer with a single JSON object and no other text."
)

OCR_SYSTEM_PROMPT = "You are a careful transcriptionist for legal documents."

OCR_PROMPT = """Please extract all the text content from this document as accurately as possible.
Return only the extracted text with no additional comments.
For table content, preserve the structure as much as possible using plain text formatting."""

CHECKBOX_SYSTEM_PROMPT = (
    "You are a legal assistant analyzing a complaint document to determine which "
    "Form Interrogatory checkboxes should be selected."
)

COMPLAINT_SCHEMA: dict = {
    "defendant": "Defendant name",
    "plaintiff": "Plaintiff name",
    "caseNumber": "Case number",
    "filingDate": "Filing date",
    "chargeDescription": "Charge/claim description",
    "courtName": "Court name, e.g. Superior Court of California, County of Los Angeles",
    "court": {"county": "Name of the California county where the case is filed"},
    "case": {
        "shortTitle": "Short title, e.g. 'Smith v. Johnson'",
        "caseNumber": "Court-assigned case number",
    },
    "attorney": {
        "barNumber": "State Bar number",
        "name": "Attorney name",
        "firm": "Law firm name (null if self-represented)",
        "address": {
            "street": "Street address",
            "city": "City",
            "state": "Two-letter state code",
            "zip": "ZIP code",
        },
        "phone": "Phone number",
        "fax": "Fax number (null if none)",
        "email": "Email address",
        "attorneyFor": "Who the attorney represents",
    },
    "formParties": {
        "askingParty": "Party asking interrogatories (typically plaintiff)",
        "answeringParty": "Party answering interrogatories (typically defendant)",
        "setNumber": "Set number, e.g. 'First'",
    },
    "date": "Current date in YYYY-MM-DD format",
    "caseType": "Type of case, e.g. personal injury, contract dispute",
}

FORM_SECTIONS: dict[CheckboxId, tuple[str, str]] = {
    CheckboxId.SECTION_301: ("General", "301-309"),
    CheckboxId.SECTION_310: ("Personal Injury", "310-318"),
    CheckboxId.SECTION_320: ("Motor Vehicles", "320-323"),
    CheckboxId.SECTION_330: ("Pedestrian and Bicycle", "330-332"),
    CheckboxId.SECTION_340: ("Premises Liability", "340-340.7"),
    CheckboxId.SECTION_350: ("Business/Contract", "350-355"),
    CheckboxId.SECTION_360: ("Employment - Discrimination", "360-360.7"),
    CheckboxId.SECTION_370: ("Employment - Wage/Hour", "370-376"),
}

CHECKBOX_DESCRIPTIONS: dict[CheckboxId, str] = {
    CheckboxId.DEFINITIONS: (
        'Interrogatory "(2) INCIDENT means (insert your definition here or on a separate, '
        'attached sheet labeled "Section 4(a)(2)")". Check if relevant to the case.'
    ),
    CheckboxId.GENERAL_BACKGROUND: 'Interrogatory "2.1 State:". Check if relevant to the case.',
    CheckboxId.PME_INJURIES: (
        'Interrogatory "6.1 Do you attribute any physical, mental, or emotional injuries '
        'to the INCIDENT?". Check if relevant to the case.'
    ),
    CheckboxId.PROPERTY_DAMAGE: (
        'Interrogatory "7.1 Do you attribute any loss of or damage to a vehicle or other '
        'property to the INCIDENT?". Check if relevant to the case.'
    ),
    CheckboxId.LOST_INCOME: (
        'Interrogatory "8.1 Do you attribute any loss of income or earning capacity to '
        'the INCIDENT?". Check if relevant to the case.'
    ),
    CheckboxId.OTHER_DAMAGES: (
        'Interrogatory "9.1 Are there any other damages that you attribute to the '
        'INCIDENT?". Check if relevant to the case.'
    ),
    CheckboxId.MEDICAL_HISTORY: (
        'Interrogatory "10.1 At any time before the INCIDENT did you have complaints or '
        'injuries that involved the same part of your body?". Check if relevant to the case.'
    ),
    CheckboxId.INCIDENT_MOTOR_VEHICLE: (
        'Interrogatory "20.1 State the date, time, and place of the INCIDENT". '
        "Check for motor vehicle incidents."
    ),
    CheckboxId.INCIDENT_MOTOR_VEHICLE_2: (
        'Interrogatory "20.2 For each vehicle involved in the INCIDENT, state:". '
        "Check for motor vehicle incidents."
    ),
    CheckboxId.CONTRACT: (
        'Interrogatory "50.1 For each agreement alleged in the pleadings:". '
        "Check for contract disputes."
    ),
}

MAX_ANALYSIS_TEXT = 5000
TRUNCATION_MARKER = "... [text truncated due to length]"


def build_file_extraction_prompt() -> str:
    """Prompt sent alongside an inline complaint file."""
    return (
        "Please analyze the attached complaint and extract the basic case information, "
        "court information, attorney information and the parties to the form "
        "interrogatories.\n\n"
        "Format your response as a JSON object with this structure:\n"
        f"{json.dumps(COMPLAINT_SCHEMA, indent=2)}\n\n"
        "For any field where information isn't available in the document, use a "
        "reasonable default or null.\n"
        "Return only the JSON object with no other text."
    )


def build_text_extraction_prompt(document_text: str) -> str:
    """Prompt carrying complaint text recovered by OCR."""
    return (
        "Please carefully analyze the following text from a complaint and extract the "
        "defendant, plaintiff, case number, filing date, court name and a brief "
        "description of the claims, plus the details needed for a Form "
        "Interrogatories document.\n\n"
        "Format your response as a JSON object with this structure:\n"
        f"{json.dumps(COMPLAINT_SCHEMA, indent=2)}\n\n"
        "If you can't find a clear value, provide your best guess or a reasonable default.\n"
        "Return only the JSON object with no other text.\n\n"
        f"Document text:\n{document_text}"
    )


def truncate_document_text(document_text: str) -> str:
    if len(document_text) <= MAX_ANALYSIS_TEXT:
        return document_text
    return document_text[:MAX_ANALYSIS_TEXT] + TRUNCATION_MARKER


def build_checkbox_prompt(info: ComplaintInformation, document_text: str | None = None) -> str:
    """Prompt asking which DISC-001 sections and fields apply."""
    section_lines = "\n".join(
        f"{number}. {title} ({interrogatories})"
        for number, (title, interrogatories) in enumerate(FORM_SECTIONS.values(), start=1)
    )
    field_lines = "\n".join(
        f"- {checkbox.value}: {description}"
        for checkbox, description in CHECKBOX_DESCRIPTIONS.items()
    )
    example_checkboxes = {checkbox.value: checkbox in (
        CheckboxId.SECTION_301,
        CheckboxId.DEFINITIONS,
        CheckboxId.GENERAL_BACKGROUND,
    ) for checkbox in CheckboxId}
    response_shape = {
        "caseType": "Primary type of case",
        "incidentDefinition": "Definition of INCIDENT for the form, e.g. 'the automobile accident of January 1, 2023'",
        "relevantCheckboxes": example_checkboxes,
        "explanation": "Brief explanation of why these sections were selected",
    }

    if document_text:
        document_block = "Full document text to analyze:\n" + truncate_document_text(document_text)
    else:
        document_block = "No full document text provided, analyze based on the metadata above."

    return (
        "Form Interrogatories (DISC-001) are organized into sections by case type:\n"
        f"{section_lines}\n\n"
        "Basic case information already extracted:\n"
        f"- Defendant: {info.defendant}\n"
        f"- Plaintiff: {info.plaintiff}\n"
        f"- Case Number: {info.case_number}\n"
        f"- Filing Date: {info.filing_date}\n"
        f"- Charge/Claim: {info.charge_description or 'Not specified'}\n"
        f"- Court: {info.court_name or 'Not specified'}\n\n"
        f"{document_block}\n\n"
        "For the following form fields, determine whether they should be checked:\n"
        f"{field_lines}\n\n"
        "Format your response as a JSON object with this structure:\n"
        f"{json.dumps(response_shape, indent=2)}\n\n"
        "Always set section301 to true; the general interrogatories apply to all cases.\n"
        "Set other sections to true only if they clearly apply to this case."
    )
