"""Fill the Judicial Council Form Interrogatories (DISC-001) AcroForm with pypdf.

Field names differ between published revisions of the form, so values are
placed by matching name fragments rather than exact names. Text fields are
tried against a fixed key map first and then against an ordered table of
name heuristics; checkboxes are resolved from the analyzed checkbox map.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date as date_type
from enum import Enum
from pathlib import Path

import httpx
from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError
from pypdf.generic import NameObject, RectangleObject

from core.config import DEFAULT_TEMPLATE
from core.exceptions import TemplateError
from core.models import CheckboxId, CheckboxSelection, ComplaintInformation

logger = logging.getLogger("discovery.rendering.acroform")

# Share of the last page hidden by the crop box (the form's disclaimer footer).
FOOTER_CROP_RATIO = 0.04

_PUSHBUTTON_FLAG = 1 << 16
_RADIO_FLAG = 1 << 15

PREVIEW_CLEARED_FRAGMENTS = ("Button", "Submit", "Reset", "Print", "Disclaimer", "Footer")
CHECKBOX_NAME_FRAGMENTS = ("check", "Check", ".0")

CHECKBOX_PATTERNS: dict[CheckboxId, tuple[str, ...]] = {
    CheckboxId.SECTION_301: ("CheckBox301", "301.0", "Check301"),
    CheckboxId.SECTION_310: ("CheckBox310", "310.0", "Check310"),
    CheckboxId.SECTION_320: ("CheckBox320", "320.0", "Check320"),
    CheckboxId.SECTION_330: ("CheckBox330", "330.0", "Check330"),
    CheckboxId.SECTION_340: ("CheckBox340", "340.0", "Check340"),
    CheckboxId.SECTION_350: ("CheckBox350", "350.0", "Check350"),
    CheckboxId.SECTION_360: ("CheckBox360", "360.0", "Check360"),
    CheckboxId.SECTION_370: ("CheckBox370", "370.0", "Check370"),
    CheckboxId.DEFINITIONS: ("Definitions", "Definition", "Section4", "Text36"),
    CheckboxId.GENERAL_BACKGROUND: ("GenBkgrd", "GenBkgrd1", "GenBkgrd[0]"),
    CheckboxId.PME_INJURIES: ("PMEInjuries", "PMEInjuries1", "PMEInjuries[0]"),
    CheckboxId.PROPERTY_DAMAGE: ("PropDam", "PropDam1", "PropDam[0]"),
    CheckboxId.LOST_INCOME: ("LostincomeEarn", "LostincomeEarn1", "LostincomeEarn[0]"),
    CheckboxId.OTHER_DAMAGES: ("OtherDam", "OtherDam1", "OtherDam[0]"),
    CheckboxId.MEDICAL_HISTORY: ("MedHist", "MedHist1", "MedHist[0]"),
    CheckboxId.INCIDENT_MOTOR_VEHICLE: ("IncOccrdMV", "IncOccrdMV1", "IncOccrdMV[0]"),
    CheckboxId.INCIDENT_MOTOR_VEHICLE_2: ("IncOccrdMV2", "IncOccrdMV2[0]"),
    CheckboxId.CONTRACT: ("Contract", "Contract1", "Contract[0]"),
}

# Interrogatory numbers that belong to each section of the form.
SECTION_NUMBERS: dict[CheckboxId, range] = {
    CheckboxId.SECTION_301: range(301, 310),
    CheckboxId.SECTION_310: range(310, 319),
    CheckboxId.SECTION_320: range(320, 324),
    CheckboxId.SECTION_330: range(330, 333),
    CheckboxId.SECTION_340: range(340, 341),
    CheckboxId.SECTION_350: range(350, 356),
    CheckboxId.SECTION_360: range(360, 361),
    CheckboxId.SECTION_370: range(370, 377),
}


class FieldKind(str, Enum):
    TEXT = "text"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    PUSHBUTTON = "pushbutton"
    CHOICE = "choice"
    SIGNATURE = "signature"
    UNKNOWN = "unknown"


@dataclass(slots=True)
class FormField:
    """A template field as reported by pypdf."""

    name: str
    kind: FieldKind
    on_states: tuple[str, ...] = ()

    @property
    def on_value(self) -> str:
        """Appearance state that marks a checkbox as checked."""
        for state in self.on_states:
            if state != "/Off":
                return state
        return "/Yes"


@dataclass(slots=True)
class FillResult:
    """Output of a fill run.

    ``unmodified`` means nothing matched and ``pdf_bytes`` is the template
    exactly as loaded. ``fell_back`` means filling failed and the pristine
    template was returned instead.
    """

    pdf_bytes: bytes
    filled_fields: list[str] = field(default_factory=list)
    checked_boxes: list[str] = field(default_factory=list)
    unmodified: bool = False
    fell_back: bool = False
    errors: list[str] = field(default_factory=list)


class TemplateSource:
    """Where the blank DISC-001 template comes from: bytes, a file or a URL."""

    def __init__(
        self,
        location: str | Path | None = None,
        data: bytes | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if location is None and data is None:
            location = DEFAULT_TEMPLATE
        self.location = location
        self.data = data
        self.timeout = timeout
        self.transport = transport

    def describe(self) -> str:
        return str(self.location) if self.location is not None else "<in-memory template>"

    @property
    def is_remote(self) -> bool:
        return isinstance(self.location, str) and self.location.startswith(("http://", "https://"))

    async def load(self) -> bytes:
        """Return the template bytes.

        Raises:
            TemplateError: If the file cannot be read or the download fails.
        """
        if self.data is not None:
            return self.data

        if self.is_remote:
            try:
                async with httpx.AsyncClient(
                    timeout=self.timeout, transport=self.transport, follow_redirects=True
                ) as client:
                    response = await client.get(str(self.location))
                    response.raise_for_status()
            except httpx.HTTPError as e:
                raise TemplateError(self.describe(), f"Download failed: {e}") from e
            logger.info(f"Downloaded template {self.location} ({len(response.content)} bytes)")
            # The published form does not change between fills
            self.data = response.content
            return self.data

        try:
            return Path(self.location).read_bytes()
        except OSError as e:
            raise TemplateError(self.describe(), f"Could not read template: {e}") from e


def _read_fields(reader: PdfReader) -> list[FormField]:
    fields = []
    for name, raw in (reader.get_fields() or {}).items():
        field_type = raw.get("/FT")
        flags = int(raw.get("/Ff", 0) or 0)
        if field_type == "/Tx":
            kind = FieldKind.TEXT
        elif field_type == "/Btn":
            if flags & _PUSHBUTTON_FLAG:
                kind = FieldKind.PUSHBUTTON
            elif flags & _RADIO_FLAG:
                kind = FieldKind.RADIO
            else:
                kind = FieldKind.CHECKBOX
        elif field_type == "/Ch":
            kind = FieldKind.CHOICE
        elif field_type == "/Sig":
            kind = FieldKind.SIGNATURE
        else:
            kind = FieldKind.UNKNOWN
        states = tuple(str(state) for state in raw.get("/_States_", []) or [])
        fields.append(FormField(name=name, kind=kind, on_states=states))
    return fields


def _open(template: bytes) -> PdfReader:
    reader = PdfReader(io.BytesIO(template))
    if reader.is_encrypted:
        reader.decrypt("")
    return reader


def _short_date(value: date_type) -> str:
    return f"{value.month}/{value.day}/{value.year}"


def _keyed_values(info: ComplaintInformation, today: date_type) -> dict[str, str]:
    """Dotted keys matched case-insensitively anywhere in a field name."""
    attorney = info.attorney
    address = attorney.address if attorney else None

    def attorney_value(attr: str) -> str:
        return (getattr(attorney, attr) if attorney else None) or ""

    def address_value(attr: str) -> str:
        return (getattr(address, attr) if address else None) or ""

    return {
        "attorney.name": attorney_value("name"),
        "attorney.firm": attorney_value("firm"),
        "attorney.address.street": address_value("street"),
        "attorney.address.city": address_value("city"),
        "attorney.address.state": address_value("state"),
        "attorney.address.zip": address_value("zip"),
        "attorney.phone": attorney_value("phone"),
        "attorney.fax": attorney_value("fax"),
        "attorney.email": attorney_value("email"),
        "attorney.for": attorney_value("attorney_for"),
        "court.county": info.county,
        "court.address": "",
        "court.city": "",
        "court.zip": "",
        "court.branch": "",
        "case.number": info.resolved_case_number,
        "case.title": info.short_title,
        "case.plaintiff": info.plaintiff,
        "case.defendant": info.defendant,
        "form.requestingParty": info.asking_party,
        "form.respondingParty": info.answering_party,
        "form.setNumber": info.set_number,
        "form.date": info.date or _short_date(today),
    }


def _heuristics(info: ComplaintInformation, today: date_type) -> list[tuple[tuple[str, ...], Callable[[], str]]]:
    """Ordered ``(name fragments, value)`` pairs; the first hit wins."""
    attorney = info.attorney
    address = attorney.address if attorney else None

    def attorney_value(attr: str) -> Callable[[], str]:
        return lambda: (getattr(attorney, attr) if attorney else None) or ""

    def address_value(attr: str) -> Callable[[], str]:
        return lambda: (getattr(address, attr) if address else None) or ""

    return [
        (("Name", "AttyName"), attorney_value("name")),
        (("Firm", "AttyFirm"), attorney_value("firm")),
        (("Street",), address_value("street")),
        (("City",), address_value("city")),
        (("State",), address_value("state")),
        (("Zip",), address_value("zip")),
        (("Phone",), attorney_value("phone")),
        (("Fax",), attorney_value("fax")),
        (("Email",), attorney_value("email")),
        (("AttyFor",), attorney_value("attorney_for")),
        (("County", "CrtCounty"), lambda: info.county),
        (("CaseNumber",), lambda: info.resolved_case_number),
        (("Plaintiff", "PlaintiffCaption"), lambda: info.plaintiff),
        (("Defendant", "DefendantCaption"), lambda: info.defendant),
        (("ReqParty",), lambda: info.asking_party),
        (("ResParty",), lambda: info.answering_party),
        (("Date",), lambda: info.date or _short_date(today)),
        (("TextField8",), lambda: info.short_title),
        (("TextField5",), lambda: info.asking_party),
        (("TextField6",), lambda: info.answering_party),
        (("TextField7",), lambda: info.set_number),
        (("TextField4",), lambda: info.county),
        (("Text36",), lambda: info.incident_definition or ""),
    ]


def text_value_for(
    name: str,
    info: ComplaintInformation,
    today: date_type,
    preview: bool = False,
) -> str | None:
    """Value for a text field, or ``None`` when the name matches nothing.

    A matched field counts as filled even when the value is empty. In
    preview, button and disclaimer fields are blanked even when another rule
    matches their name.
    """
    if preview and any(fragment in name for fragment in PREVIEW_CLEARED_FRAGMENTS):
        return ""

    lowered = name.lower()
    for key, value in _keyed_values(info, today).items():
        if key.lower() in lowered:
            return value

    for fragments, value_of in _heuristics(info, today):
        if any(fragment in name for fragment in fragments):
            return value_of()
    return None


def should_check(name: str, info: ComplaintInformation) -> bool:
    """Decide whether a checkbox-like field should be ticked."""
    if info.relevant_checkboxes.get(name) is True:
        return True

    selection = CheckboxSelection.from_mapping(info.relevant_checkboxes)
    for checkbox, patterns in CHECKBOX_PATTERNS.items():
        if selection.is_selected(checkbox) and any(pattern in name for pattern in patterns):
            return True

    for section, numbers in SECTION_NUMBERS.items():
        if selection.is_selected(section) and any(str(number) in name for number in numbers):
            return True

    if name.endswith(".0"):
        head = name.split(".")[0]
        for section in SECTION_NUMBERS:
            if head == section.value.removeprefix("section") and selection.is_selected(section):
                return True
    return False


def _is_checkbox_candidate(form_field: FormField) -> bool:
    if form_field.kind is FieldKind.CHECKBOX:
        return True
    return any(fragment in form_field.name for fragment in CHECKBOX_NAME_FRAGMENTS)


class FormInterrogatoriesFiller:
    """Fill DISC-001 from extracted complaint information."""

    def __init__(self, template_source: TemplateSource | None = None):
        self.template_source = template_source or TemplateSource()

    async def inspect_fields(self) -> list[FormField]:
        """List every field in the template with its kind."""
        template = await self.template_source.load()
        try:
            return _read_fields(_open(template))
        except PyPdfError as e:
            raise TemplateError(self.template_source.describe(), f"Unreadable template: {e}") from e

    async def fill(
        self,
        info: ComplaintInformation,
        preview: bool = False,
        today: date_type | None = None,
    ) -> FillResult:
        """Fill the template.

        Args:
            info: Complaint information, ideally after checkbox analysis.
            preview: Clear button and disclaimer text fields for on-screen display.
            today: Date used when the complaint carries none.

        Returns:
            FillResult with the PDF bytes and what was filled.

        Raises:
            TemplateError: If filling fails and the template cannot be
                reloaded for the fallback either.
        """
        today = today or date_type.today()
        try:
            template = await self.template_source.load()
            return self._fill_template(template, info, preview, today)
        except (TemplateError, PyPdfError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Error filling form interrogatories PDF: {e}")
            try:
                pristine = await self.template_source.load()
            except TemplateError as fallback_error:
                logger.error(f"Failed to reload template for fallback: {fallback_error}")
                raise TemplateError(
                    self.template_source.describe(),
                    f"Failed to fill out form interrogatories PDF: {e}",
                ) from fallback_error
            logger.info("Returning the unfilled template as fallback")
            return FillResult(pdf_bytes=pristine, fell_back=True, errors=[str(e)])

    def _fill_template(
        self,
        template: bytes,
        info: ComplaintInformation,
        preview: bool,
        today: date_type,
    ) -> FillResult:
        reader = _open(template)
        fields = _read_fields(reader)
        logger.info(f"Found {len(fields)} form fields")

        if not fields:
            logger.warning("No form fields found; returning the template unchanged")
            return FillResult(pdf_bytes=template, unmodified=True)

        writer = PdfWriter(clone_from=reader)
        result = FillResult(pdf_bytes=template)

        for form_field in fields:
            if form_field.kind is not FieldKind.TEXT:
                continue
            value = text_value_for(form_field.name, info, today, preview)
            if value is None:
                continue
            if self._set_value(writer, form_field.name, value, result):
                result.filled_fields.append(form_field.name)
        logger.info(f"Filled {len(result.filled_fields)} text fields")

        for form_field in fields:
            if not _is_checkbox_candidate(form_field) or not should_check(form_field.name, info):
                continue
            if form_field.kind is not FieldKind.CHECKBOX:
                message = f"Field {form_field.name} is not a checkbox"
                logger.warning(f"Error checking checkbox: {message}")
                result.errors.append(message)
                continue
            if self._set_value(writer, form_field.name, NameObject(form_field.on_value), result):
                result.checked_boxes.append(form_field.name)
        logger.info(f"Checked {len(result.checked_boxes)} checkboxes")

        if not result.filled_fields and not result.checked_boxes:
            logger.warning("Could not fill any fields or check any checkboxes; returning the template unchanged")
            result.unmodified = True
            return result

        writer.set_need_appearances_writer(True)
        self._crop_footer(writer)

        buffer = io.BytesIO()
        writer.write(buffer)
        result.pdf_bytes = buffer.getvalue()
        logger.debug(f"Filled PDF saved: {len(result.pdf_bytes)} bytes")
        return result

    @staticmethod
    def _set_value(writer: PdfWriter, name: str, value: str, result: FillResult) -> bool:
        try:
            for page in writer.pages:
                if "/Annots" in page:
                    writer.update_page_form_field_values(page, {name: value}, auto_regenerate=False)
        except (PyPdfError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Error filling field {name}: {e}")
            result.errors.append(f"{name}: {e}")
            return False
        return True

    @staticmethod
    def _crop_footer(writer: PdfWriter) -> None:
        last_page = writer.pages[-1]
        box = last_page.mediabox
        height = float(box.top) - float(box.bottom)
        last_page.cropbox = RectangleObject(
            [
                float(box.left),
                float(box.bottom) + height * FOOTER_CROP_RATIO,
                float(box.right),
                float(box.top),
            ]
        )
