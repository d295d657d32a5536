"""Pydantic models for case facts and generated discovery content."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Base model that reads and writes camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Address(_CamelModel):
    street: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None


class Court(_CamelModel):
    county: str | None = None


class CaseCaption(_CamelModel):
    short_title: str | None = None
    case_number: str | None = None


class Attorney(_CamelModel):
    bar_number: str | None = None
    name: str | None = None
    firm: str | None = None
    address: Address | None = None
    phone: str | None = None
    fax: str | None = None
    email: str | None = None
    attorney_for: str | None = None


class FormParties(_CamelModel):
    asking_party: str | None = None
    answering_party: str | None = None
    set_number: str | None = None


class ComplaintInformation(_CamelModel):
    """Case facts extracted from a complaint.

    The six flat fields are always strings; an LLM that answers ``null``
    for one of them yields an empty string. Everything else is optional.
    """

    defendant: str = ""
    plaintiff: str = ""
    case_number: str = ""
    filing_date: str = ""
    charge_description: str = ""
    court_name: str = ""

    court: Court | None = None
    case: CaseCaption | None = None
    attorney: Attorney | None = None
    form_parties: FormParties | None = None
    date: str | None = None

    case_type: str | None = None
    incident_definition: str | None = None
    relevant_checkboxes: dict[str, bool] = Field(default_factory=dict)
    explanation: str | None = None

    @field_validator(
        "defendant",
        "plaintiff",
        "case_number",
        "filing_date",
        "charge_description",
        "court_name",
        mode="before",
    )
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("relevant_checkboxes", mode="before")
    @classmethod
    def _none_to_empty_map(cls, value: Any) -> Any:
        return {} if value is None else value

    def to_payload(self) -> dict[str, Any]:
        """Serialize with camelCase keys, dropping unset optional groups."""
        return self.model_dump(by_alias=True, exclude_none=True)

    @property
    def county(self) -> str:
        if self.court and self.court.county:
            return self.court.county
        if "County of " in self.court_name:
            return self.court_name.split("County of ", 1)[1]
        return ""

    @property
    def resolved_case_number(self) -> str:
        if self.case and self.case.case_number:
            return self.case.case_number
        return self.case_number

    @property
    def short_title(self) -> str:
        if self.case and self.case.short_title:
            return self.case.short_title
        return f"{self.plaintiff} v. {self.defendant}"

    @property
    def asking_party(self) -> str:
        if self.form_parties and self.form_parties.asking_party:
            return self.form_parties.asking_party
        return self.plaintiff

    @property
    def answering_party(self) -> str:
        if self.form_parties and self.form_parties.answering_party:
            return self.form_parties.answering_party
        return self.defendant

    @property
    def set_number(self) -> str:
        if self.form_parties and self.form_parties.set_number:
            return self.form_parties.set_number
        return ""


class CheckboxId(str, Enum):
    """Known Form Interrogatories (DISC-001) checkbox identifiers."""

    SECTION_301 = "section301"
    SECTION_310 = "section310"
    SECTION_320 = "section320"
    SECTION_330 = "section330"
    SECTION_340 = "section340"
    SECTION_350 = "section350"
    SECTION_360 = "section360"
    SECTION_370 = "section370"

    DEFINITIONS = "Definitions"
    GENERAL_BACKGROUND = "GenBkgrd"
    PME_INJURIES = "PMEInjuries"
    PROPERTY_DAMAGE = "PropDam"
    LOST_INCOME = "LostincomeEarn"
    OTHER_DAMAGES = "OtherDam"
    MEDICAL_HISTORY = "MedHist"
    INCIDENT_MOTOR_VEHICLE = "IncOccrdMV"
    INCIDENT_MOTOR_VEHICLE_2 = "IncOccrdMV2"
    CONTRACT = "Contract"


@dataclass(slots=True)
class CheckboxSelection:
    """A checkbox map split into known identifiers and everything else."""

    known: dict[CheckboxId, bool] = field(default_factory=dict)
    unknown: dict[str, bool] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, mapping: dict[str, bool] | None) -> CheckboxSelection:
        selection = cls()
        for key, value in (mapping or {}).items():
            try:
                selection.known[CheckboxId(key)] = bool(value)
            except ValueError:
                selection.unknown[key] = bool(value)
        return selection

    def is_selected(self, checkbox: CheckboxId) -> bool:
        return self.known.get(checkbox, False)

    def selected(self) -> list[CheckboxId]:
        return [checkbox for checkbox, value in self.known.items() if value]


class DocumentType(str, Enum):
    """Discovery documents the pipeline can produce."""

    RFA = "rfa"
    RFP = "rfp"
    SI = "si"
    DEMAND_LETTER = "demand_letter"
    FORM_INTERROGATORIES = "form_interrogatories"


class DiscoveryContent(BaseModel):
    """Generated definitions and numbered requests for one document.

    List order is significant: index ``i`` renders as paragraph ``i + 1``.
    """

    document_type: DocumentType
    definitions: list[str] = Field(default_factory=list)
    items: list[str] = Field(default_factory=list)

    @property
    def is_generated(self) -> bool:
        return bool(self.definitions) and bool(self.items)


DEMAND_LETTER_SECTION_KEYS: tuple[str, ...] = (
    "header",
    "re_line",
    "salutation",
    "opening_paragraph",
    "medical_providers",
    "injuries",
    "damages_summary",
    "settlement_demand",
    "closing",
)


class DemandLetterSections(BaseModel):
    """The nine editable sections of a demand letter."""

    model_config = ConfigDict(extra="ignore")

    header: str = ""
    re_line: str = ""
    salutation: str = ""
    opening_paragraph: str = ""
    medical_providers: str = ""
    injuries: str = ""
    damages_summary: str = ""
    settlement_demand: str = ""
    closing: str = ""
    tone: str | None = None

    @field_validator(*DEMAND_LETTER_SECTION_KEYS, mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, list):
            return "\n".join(str(item) for item in value)
        return value


class ExtractionSource(str, Enum):
    """Where an extracted complaint record came from."""

    FILE = "file"
    OCR_TEXT = "ocr_text"
    TEXT = "text"
    FIXTURE = "fixture"


@dataclass(slots=True)
class ExtractionOutcome:
    """Result of complaint extraction, tagged with its source."""

    complaint: ComplaintInformation
    source: ExtractionSource
    errors: list[str] = field(default_factory=list)

    @property
    def is_fixture(self) -> bool:
        return self.source is ExtractionSource.FIXTURE

    def to_dict(self) -> dict[str, Any]:
        return {
            "complaint": self.complaint.to_payload(),
            "source": self.source.value,
            "is_fixture": self.is_fixture,
            "errors": list(self.errors),
        }
