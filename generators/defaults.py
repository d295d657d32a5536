"""Deterministic default content used when the LLM cannot produce any.

Every function here is pure: the same complaint always yields the same
ordered list.
"""

from __future__ import annotations

from enum import Enum

from core.models import ComplaintInformation, DemandLetterSections, DiscoveryContent, DocumentType


class CaseCategory(Enum):
    """Coarse case classification driving the default request sets."""

    CONTRACT = "contract"
    PERSONAL_INJURY = "personal_injury"
    EMPLOYMENT = "employment"
    GENERAL = "general"


def _lower(value: str | None) -> str:
    return (value or "").lower()


def classify_for_admissions(info: ComplaintInformation) -> CaseCategory:
    """Contract unless the case clearly involves an injury or accident."""
    case_type = _lower(info.case_type or "civil")
    charge = _lower(info.charge_description)

    if "contract" in case_type or "contract" in charge:
        return CaseCategory.CONTRACT
    if "injury" in case_type or "injury" in charge or "accident" in charge:
        return CaseCategory.PERSONAL_INJURY
    return CaseCategory.CONTRACT


def classify_for_requests(info: ComplaintInformation) -> CaseCategory:
    """Classification used by the production and interrogatory defaults."""
    case_type = _lower(info.case_type)
    charge = _lower(info.charge_description)

    if "contract" in case_type:
        return CaseCategory.CONTRACT
    if "personal injury" in case_type or "accident" in charge or "injury" in charge:
        return CaseCategory.PERSONAL_INJURY
    if "employment" in case_type:
        return CaseCategory.EMPLOYMENT
    return CaseCategory.GENERAL


def generate_admissions_from_case(info: ComplaintInformation) -> list[str]:
    """Four common admissions followed by seven case-specific ones."""
    filing_date = info.filing_date or "the date specified in the complaint"
    plaintiff = info.plaintiff or "the plaintiff"

    common = [
        f"Admit that the venue is proper in {info.court_name or 'this court'}.",
        "Admit that the court has jurisdiction over this matter.",
        "Admit that you were properly served with the summons and complaint in this action.",
        f"Admit that you received the complaint filed in this action on or about {filing_date}.",
    ]

    if classify_for_admissions(info) is CaseCategory.PERSONAL_INJURY:
        specific = [
            f"Admit that you were involved in an incident with {plaintiff} on or about {filing_date}.",
            "Admit that the incident was caused by your negligence.",
            f"Admit that {plaintiff} was injured as a result of the incident.",
            f"Admit that {plaintiff} incurred medical expenses as a result of injuries sustained in the incident.",
            f"Admit that {plaintiff} suffered pain and suffering as a result of injuries sustained in the incident.",
            f"Admit that you had a duty of care toward {plaintiff}.",
            "Admit that you breached that duty of care.",
        ]
    else:
        specific = [
            f"Admit that you entered into a contract with {plaintiff} on or about {filing_date}.",
            f"Admit that the terms of the contract required you to pay {plaintiff} for services rendered.",
            f"Admit that you failed to pay {plaintiff} pursuant to the terms of the contract.",
            "Admit that you breached the contract by failing to perform your obligations.",
            f"Admit that {plaintiff} performed all obligations required under the contract.",
            f"Admit that you received a demand letter from {plaintiff} prior to this lawsuit.",
            f"Admit that you owe {plaintiff} damages as a result of your breach of contract.",
        ]

    return common + specific


def generate_productions_from_case(info: ComplaintInformation) -> list[str]:
    requests = [
        "All documents that refer or relate to the incident(s) described in the complaint.",
        "All documents that you intend to introduce as evidence at trial.",
        "All statements, written or recorded, made by any party to this action concerning the subject matter of this lawsuit.",
    ]

    category = classify_for_requests(info)
    if category is CaseCategory.CONTRACT:
        requests += [
            "All contracts or agreements between plaintiff and defendant, including all amendments, modifications, or supplements thereto.",
            "All correspondence, emails, text messages, or other communications between plaintiff and defendant relating to the contract(s) at issue.",
            "All documents evidencing payment or non-payment under the contract(s) at issue.",
            "All documents that you contend show performance or non-performance of obligations under the contract(s) at issue.",
            "All documents relating to damages claimed in this action, including all calculations, estimates, invoices, receipts, and proof of payment.",
        ]
    elif category is CaseCategory.PERSONAL_INJURY:
        requests += [
            "All photographs, videos, or other depictions of the scene of the incident, any vehicles involved, or any injuries claimed.",
            "All medical records relating to the injuries claimed in this lawsuit, including hospital records, physician records, physical therapy records, and diagnostic test results.",
            "All medical bills, invoices, statements, or other documents showing expenses incurred for treatment of injuries claimed in this lawsuit.",
            "All documents relating to any health insurance claims made for the treatment of injuries claimed in this lawsuit.",
            "All documents relating to prior injuries, medical conditions, or treatments involving the same body parts allegedly injured in the incident.",
        ]
    elif category is CaseCategory.EMPLOYMENT:
        requests += [
            "All documents relating to plaintiff's employment with defendant, including employment applications, employment contracts, personnel files, and performance evaluations.",
            "All documents relating to plaintiff's compensation, including payroll records, time records, wage statements, and commission statements.",
            "All documents relating to any complaints of discrimination, harassment, retaliation, or other unlawful conduct made by plaintiff during employment with defendant.",
            "All communications between plaintiff and any supervisor, manager, or human resources personnel regarding the conduct described in the complaint.",
            "All policies, procedures, employee handbooks, or guidelines in effect during plaintiff's employment relating to the issues in this lawsuit.",
        ]
    else:
        requests += [
            "All documents that support or relate to each claim or cause of action alleged in the complaint.",
            "All documents that support or relate to the damages claimed in this action.",
            "All documents that identify persons having knowledge of any facts relating to this case.",
            "All insurance policies that may provide coverage for the claims made in this action.",
            "All expert reports or other documents prepared by expert witnesses whom you expect to call at trial.",
        ]

    requests += [
        "All witness statements concerning the facts and circumstances of the incident giving rise to this lawsuit.",
        "All correspondence between the parties to this action relating to the subject matter of this lawsuit.",
    ]
    return requests


def generate_interrogatories_from_case(info: ComplaintInformation) -> list[str]:
    interrogatories = [
        "State your full legal name, date of birth, and all addresses at which you have resided for the past five (5) years.",
        "State your current employment information, including the name and address of your employer, your position or title, your job duties, and your current income.",
        "Identify all persons who have knowledge of any facts relating to this case and describe the knowledge of each.",
    ]

    category = classify_for_requests(info)
    if category is CaseCategory.CONTRACT:
        interrogatories += [
            f"Describe in detail the terms of the contract(s) at issue in this case between {info.plaintiff} and {info.defendant}.",
            "State the date(s) on which the contract(s) was/were allegedly breached and describe in detail each alleged breach.",
            "Identify all documents that evidence the contract(s) at issue in this case, including all written agreements, amendments, and related communications.",
            "State all facts supporting your contention that you performed all obligations required of you under the contract(s).",
            "State all facts supporting any contention that you are excused from performing under the contract(s).",
        ]
    elif category is CaseCategory.PERSONAL_INJURY:
        interrogatories += [
            "Describe in detail how the incident that is the subject of this lawsuit occurred, including the date, time, location, and circumstances.",
            "State each act or omission on your part that you contend did not contribute to the incident.",
            "Identify every person who witnessed the incident or arrived at the scene immediately afterwards.",
            "State whether you consumed any alcoholic beverage or medication in the 24 hours before the incident and, if so, describe each.",
            "Identify every policy of insurance that may provide coverage for the damages claimed in this lawsuit.",
        ]
    elif category is CaseCategory.EMPLOYMENT:
        interrogatories += [
            f"State the dates of plaintiff's employment with {info.defendant} and describe all positions held, including job titles, duties, and reporting relationships.",
            "Identify all supervisors and managers to whom plaintiff reported during employment, including their names, job titles, and dates of supervision.",
            "State all facts supporting each reason for any adverse employment action taken against plaintiff.",
            "Identify all persons who witnessed or have knowledge of the conduct described in the complaint.",
            "Identify all complaints plaintiff made regarding the conduct described in the complaint and describe any response to each.",
        ]
    else:
        interrogatories += [
            "State all facts that support each affirmative defense you have asserted in this action.",
            "Identify all documents that support each affirmative defense you have asserted in this action.",
            "Identify all witnesses who have knowledge of facts supporting each affirmative defense you have asserted.",
            "State all facts supporting any contention that plaintiff is not entitled to the damages claimed.",
            "Identify all statements, whether written or oral, made by any party to this action or any witness concerning the subject matter of this lawsuit.",
        ]

    interrogatories += [
        "Identify all documents you intend to use as exhibits at trial.",
        "Identify all expert witnesses you intend to call at trial, including their names, addresses, qualifications, and the subject matter on which each expert is expected to testify.",
    ]
    return interrogatories


def generate_definitions_from_case(
    info: ComplaintInformation,
    document_type: DocumentType,
) -> list[str]:
    """Default definitions for one discovery document type."""
    defendant = info.defendant or "the defendant"
    plaintiff = info.plaintiff or "the plaintiff"
    incident = info.incident_definition or "the events and transactions described in the complaint"

    definitions = [
        f'The term "YOU" and "YOUR" refer to {defendant}, including all agents, employees, '
        "representatives, attorneys, and any other person acting on your behalf.",
        f'The term "PLAINTIFF" refers to {plaintiff}.',
        f'The term "INCIDENT" means {incident}.',
    ]

    if document_type is DocumentType.RFP:
        definitions.append(
            'The term "DOCUMENT" means any writing as defined in Evidence Code Section 250, '
            "including the original or a copy of handwriting, typewriting, printing, "
            "photostating, photographing, and every other means of recording upon any "
            "tangible thing."
        )
    elif document_type is DocumentType.SI:
        definitions.append(
            'The term "IDENTIFY" with respect to a person means to state the full name, '
            "last known address, and telephone number of that person."
        )
    elif classify_for_admissions(info) is CaseCategory.CONTRACT:
        definitions.append(
            f'The term "AGREEMENT" means the contract between {plaintiff} and {defendant} '
            "alleged in the complaint."
        )

    return definitions


_ITEM_DEFAULTS = {
    DocumentType.RFA: generate_admissions_from_case,
    DocumentType.RFP: generate_productions_from_case,
    DocumentType.SI: generate_interrogatories_from_case,
}


def default_content(document_type: DocumentType, info: ComplaintInformation) -> DiscoveryContent:
    """Complete fallback content for an RFA, RFP or SI document."""
    return DiscoveryContent(
        document_type=document_type,
        definitions=generate_definitions_from_case(info, document_type),
        items=_ITEM_DEFAULTS[document_type](info),
    )


def default_demand_letter(info: ComplaintInformation) -> DemandLetterSections:
    """A plain demand letter assembled from the complaint alone."""
    plaintiff = info.plaintiff or "our client"
    defendant = info.defendant or "your client"
    attorney = info.attorney
    firm = attorney.firm if attorney and attorney.firm else ""
    header_lines = [line for line in (firm, info.date or "") if line]

    return DemandLetterSections(
        header="\n".join(header_lines),
        re_line=f"RE: {info.short_title}" + (
            f", Case No. {info.resolved_case_number}" if info.resolved_case_number else ""
        ),
        salutation=f"Dear {defendant}:",
        opening_paragraph=(
            f"This office represents {plaintiff} in connection with the claims described in "
            f"the complaint filed on {info.filing_date or 'the date stated therein'}"
            + (f" ({info.charge_description})" if info.charge_description else "")
            + ". We write to demand resolution of this matter before further litigation."
        ),
        settlement_demand=(
            f"{plaintiff} demands full compensation for all damages arising from the matters "
            "alleged in the complaint. Please respond within thirty (30) days of the date of "
            "this letter."
        ),
        closing=(
            "If we do not receive a response within that time, we will proceed with the "
            "litigation without further notice."
        ),
    )
