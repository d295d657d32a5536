"""Stub LLM handler for running without an API key.

This module provides deterministic stand-ins that recognise each prompt the
pipeline sends (complaint extraction, transcription, checkbox analysis,
drafting and editing) and answer in the shape the caller expects. The stub
never performs network operations; attached PDFs are read locally with pypdf.
"""

from __future__ import annotations

import io
import json
import logging
import re
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any

from pypdf import PdfReader
from pypdf.errors import PdfReadError

if TYPE_CHECKING:
    from tools.llm_client import FilePart

logger = logging.getLogger("discovery.llm_client.stub")

SAMPLE_COMPLAINT_TEXT = """SUPERIOR COURT OF THE STATE OF CALIFORNIA
COUNTY OF LOS ANGELES

Plaintiff: Jane Smith
Defendant: Acme Corporation
Case No. 24STCV00001

COMPLAINT FOR BREACH OF CONTRACT
Filed: January 15, 2024

Plaintiff alleges that Defendant failed to pay for services rendered under a
written agreement dated March 1, 2023."""

_CASE_NUMBER = re.compile(r"Case\s+(?:No\.?|Number)\s*:?\s*([A-Za-z0-9][A-Za-z0-9-]+)", re.IGNORECASE)
_COUNTY = re.compile(r"COUNTY OF\s+([A-Za-z][A-Za-z ]+?)\s*$", re.IGNORECASE | re.MULTILINE)
_VERSUS = re.compile(r"^\s*(.+?)\s+v(?:s)?\.\s+(.+?)\s*$", re.MULTILINE)
_LONG_DATE = re.compile(
    r"\b(?:January|February|March|April|May|June|July|August|September|October|November|December)"
    r"\s+\d{1,2},\s+\d{4}\b"
)
_TAGGED = re.compile(r"<(?P<tag>\w+)>\s*(?P<body>.*?)\s*</(?P=tag)>", re.DOTALL)
_RESPONSE_KEY = re.compile(r'"(admissions|productions|interrogatories)"\s*:\s*\[')


class StubLLMHandler:
    """Handles LLM operations when no API key is available.

    Provides deterministic implementations that analyze prompts and
    generate plausible responses for testing and local development.
    """

    def generate_text(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        attachments: Sequence[FilePart] = (),
    ) -> str:
        """Generate a response from prompt analysis."""
        attached_text = self._attachment_text(attachments)

        if "extract all the text content" in user_prompt:
            return attached_text or SAMPLE_COMPLAINT_TEXT
        if "extracting information from a complaint" in system_prompt:
            source = attached_text or self._extract_section(user_prompt, "Document text:")
            return json.dumps(self._stub_complaint(source or SAMPLE_COMPLAINT_TEXT))
        if "Form Interrogatories (DISC-001)" in user_prompt:
            return json.dumps(self._stub_checkbox_analysis(user_prompt))
        if "wants to edit a single" in user_prompt:
            return self._stub_edit_item(user_prompt)
        if "wants to edit all of the following" in user_prompt:
            return json.dumps(self._stub_edit_all(user_prompt))
        if "revise an entire demand letter" in user_prompt:
            return self._tagged(user_prompt, "letter") or "{}"
        if "Write a demand letter" in user_prompt:
            return json.dumps(self._stub_demand_letter(user_prompt))

        response_key = _RESPONSE_KEY.search(user_prompt)
        if response_key:
            return json.dumps(self._stub_discovery(user_prompt, response_key.group(1)))

        logger.debug("Stub received an unrecognised prompt; returning a generic answer")
        return "The case materials were reviewed. Further factual development is required."

    # ------------------------------------------------------------------
    # Prompt handlers
    # ------------------------------------------------------------------

    def _stub_complaint(self, text: str) -> dict[str, Any]:
        plaintiff = self._extract_line(text, "Plaintiff")
        defendant = self._extract_line(text, "Defendant")
        if not (plaintiff and defendant):
            match = _VERSUS.search(text)
            if match:
                plaintiff = plaintiff or match.group(1).strip(" ,")
                defendant = defendant or match.group(2).strip(" ,")

        case_match = _CASE_NUMBER.search(text)
        case_number = case_match.group(1) if case_match else ""
        county_match = _COUNTY.search(text)
        county = county_match.group(1).strip().title() if county_match else ""
        filed = self._extract_line(text, "Filed")
        if not filed:
            date_match = _LONG_DATE.search(text)
            filed = date_match.group(0) if date_match else ""

        charge = ""
        for line in text.splitlines():
            if line.strip().upper().startswith("COMPLAINT FOR"):
                charge = line.strip()[len("COMPLAINT FOR"):].strip().capitalize()
                break

        return {
            "defendant": defendant,
            "plaintiff": plaintiff,
            "caseNumber": case_number,
            "filingDate": filed,
            "chargeDescription": charge,
            "courtName": f"Superior Court of California, County of {county}" if county else "",
            "court": {"county": county},
            "case": {
                "shortTitle": f"{plaintiff} v. {defendant}" if plaintiff and defendant else "",
                "caseNumber": case_number,
            },
            "formParties": {
                "askingParty": plaintiff,
                "answeringParty": defendant,
                "setNumber": "First",
            },
            "caseType": self._classify(text),
        }

    def _stub_checkbox_analysis(self, user_prompt: str) -> dict[str, Any]:
        case_facts = self._extract_section(user_prompt, "Basic case information")
        case_type = self._classify(case_facts.split("For the following form fields")[0])
        injury = case_type in {"Personal Injury", "Motor Vehicle"}
        vehicle = case_type == "Motor Vehicle"
        contract = case_type == "Contract"

        checkboxes = {
            "section301": True,
            "section310": injury,
            "section320": vehicle,
            "section330": False,
            "section340": False,
            "section350": contract,
            "section360": False,
            "section370": False,
            "Definitions": True,
            "GenBkgrd": True,
            "PMEInjuries": injury,
            "PropDam": vehicle,
            "LostincomeEarn": injury,
            "OtherDam": injury,
            "MedHist": injury,
            "IncOccrdMV": vehicle,
            "IncOccrdMV2": vehicle,
            "Contract": contract,
        }
        return {
            "caseType": case_type,
            "incidentDefinition": "the events described in the complaint",
            "relevantCheckboxes": checkboxes,
            "explanation": f"Selected the general section plus sections matching a {case_type.lower()} case.",
        }

    def _stub_discovery(self, user_prompt: str, response_key: str) -> dict[str, Any]:
        case = self._case_data(user_prompt)
        plaintiff = case.get("plaintiff") or "Plaintiff"
        defendant = case.get("defendant") or "Defendant"
        charge = case.get("chargeDescription") or "the claims alleged in the complaint"

        definitions = [
            f'The term "YOU" and "YOUR" refer to {defendant}.',
            f'The term "PLAINTIFF" refers to {plaintiff}.',
            'The term "INCIDENT" means the events described in the complaint.',
        ]
        items = {
            "admissions": [
                f"Admit that you are the defendant named in the complaint filed by {plaintiff}.",
                f"Admit that the complaint concerns {charge}.",
                "Admit that YOU were involved in the INCIDENT.",
                f"Admit that YOU owe damages to {plaintiff} arising from the INCIDENT.",
            ],
            "productions": [
                "All DOCUMENTS that refer or relate to the INCIDENT.",
                f"All communications between YOU and {plaintiff} concerning the INCIDENT.",
                "All DOCUMENTS YOU intend to introduce at trial.",
            ],
            "interrogatories": [
                "State all facts supporting YOUR denial of any allegation in the complaint.",
                "Identify every person with knowledge of the INCIDENT.",
                f"Describe every communication between YOU and {plaintiff} concerning the INCIDENT.",
            ],
        }[response_key]
        return {"definitions": definitions, response_key: items}

    def _stub_demand_letter(self, user_prompt: str) -> dict[str, str]:
        case = self._case_data(user_prompt)
        plaintiff = case.get("plaintiff") or "our client"
        defendant = case.get("defendant") or "your client"
        documents = re.findall(r"<document index=\"\d+\">\s*(.*?)\s*</document>", user_prompt, re.DOTALL)
        facts = self._split_sentences(" ".join(documents))[:3]

        return {
            "header": case.get("date") or "",
            "re_line": f"RE: {plaintiff} v. {defendant}",
            "salutation": f"Dear {defendant}:",
            "opening_paragraph": f"This office represents {plaintiff} regarding the matters described in the complaint.",
            "medical_providers": "",
            "injuries": "",
            "damages_summary": " ".join(facts),
            "settlement_demand": f"{plaintiff} demands full compensation for all damages within thirty (30) days.",
            "closing": "We look forward to your prompt response.",
        }

    def _stub_edit_item(self, user_prompt: str) -> str:
        current = self._tagged(user_prompt, "current")
        instruction = self._tagged(user_prompt, "instruction")
        if "uppercase" in instruction.lower():
            return current.upper()
        return f"{current.rstrip()} ({instruction})" if instruction else current

    def _stub_edit_all(self, user_prompt: str) -> list[str]:
        numbered = self._tagged(user_prompt, "items")
        return [
            re.sub(r"^\d+\.\s*", "", line.strip())
            for line in numbered.splitlines()
            if line.strip()
        ]

    # ------------------------------------------------------------------
    # Utility helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _attachment_text(attachments: Sequence[FilePart]) -> str:
        """Recover plain text from attached files where that is possible locally."""
        texts: list[str] = []
        for part in attachments:
            if part.mime_type.startswith("text/"):
                texts.append(part.data.decode("utf-8", errors="replace"))
            elif part.mime_type == "application/pdf":
                try:
                    reader = PdfReader(io.BytesIO(part.data))
                    texts.extend(page.extract_text() or "" for page in reader.pages)
                except PdfReadError as e:
                    logger.debug(f"Stub could not read attached PDF: {e}")
        return "\n".join(text for text in texts if text.strip())

    @staticmethod
    def _case_data(user_prompt: str) -> dict[str, Any]:
        block = StubLLMHandler._tagged(user_prompt, "case")
        try:
            data = json.loads(block) if block else {}
        except json.JSONDecodeError:
            data = {}
        return data if isinstance(data, dict) else {}

    @staticmethod
    def _classify(text: str) -> str:
        lowered = text.lower()
        if any(word in lowered for word in ("vehicle", "automobile", "collision", "car accident")):
            return "Motor Vehicle"
        if "contract" in lowered or "agreement" in lowered:
            return "Contract"
        if any(word in lowered for word in ("injury", "negligence", "accident")):
            return "Personal Injury"
        if "employ" in lowered or "wage" in lowered:
            return "Employment"
        return "Civil"

    @staticmethod
    def _tagged(text: str, tag: str) -> str:
        for match in _TAGGED.finditer(text):
            if match.group("tag") == tag:
                return match.group("body")
        return ""

    @staticmethod
    def _extract_line(text: str, header: str) -> str:
        """Extract the content after a header line."""
        prefix = header.strip()
        for raw_line in text.splitlines():
            stripped = raw_line.strip()
            if stripped.startswith(prefix):
                remainder = stripped[len(prefix):].lstrip()
                if remainder.startswith(":"):
                    return remainder[1:].strip()
        return ""

    @staticmethod
    def _extract_section(text: str, header: str) -> str:
        """Extract everything after a header line."""
        lines = text.splitlines()
        for index, raw_line in enumerate(lines):
            if raw_line.strip().startswith(header):
                return "\n".join(lines[index + 1:]).strip()
        return ""

    @staticmethod
    def _split_sentences(text: str) -> list[str]:
        """Split text into sentences."""
        fragments = re.split(r"(?<=[.!?])\s+", text.strip()) if text else []
        return StubLLMHandler._dedupe(fragment.strip() for fragment in fragments if fragment.strip())

    @staticmethod
    def _dedupe(items: Iterable[Any]) -> list[Any]:
        """Remove duplicate items while preserving order."""
        seen: set[Any] = set()
        result: list[Any] = []
        for item in items:
            if item in seen:
                continue
            seen.add(item)
            result.append(item)
        return result
