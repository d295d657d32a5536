"""Input validation utilities for the discovery pipeline.

Provides validation functions that use Pydantic models and raise
custom exceptions on failure.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from core.exceptions import MissingPreconditionError, ValidationError
from core.models import ComplaintInformation, DocumentType

logger = logging.getLogger("discovery.validation")

_LEADING_NUMBER = re.compile(r"^\d+\.\s*")


def validate_case_id(case_id: str | None) -> str:
    """Validate a case ID.

    Args:
        case_id: The case ID to validate.

    Returns:
        The stripped case ID.

    Raises:
        MissingPreconditionError: If the case ID is missing or blank.
        ValidationError: If the case ID is not a string.
    """
    if case_id is None:
        raise MissingPreconditionError("case_id", "Case ID is required")

    if not isinstance(case_id, str):
        raise ValidationError(
            f"Case ID must be a string, got {type(case_id).__name__}",
            field="case_id",
            value=type(case_id).__name__,
        )

    case_id = case_id.strip()
    if not case_id:
        raise MissingPreconditionError("case_id", "Case ID cannot be empty")

    return case_id


def validate_complaint(
    complaint: ComplaintInformation | dict[str, Any] | None,
) -> ComplaintInformation:
    """Validate a complaint payload using the Pydantic model.

    Args:
        complaint: A model instance or a camelCase dictionary.

    Returns:
        The validated complaint.

    Raises:
        MissingPreconditionError: If no complaint data is supplied.
        ValidationError: If the payload does not match the schema.
    """
    if complaint is None:
        raise MissingPreconditionError(
            "complaint", "Extracted complaint data is required"
        )

    if isinstance(complaint, ComplaintInformation):
        return complaint

    if not isinstance(complaint, dict):
        raise ValidationError(
            f"Complaint must be a dictionary, got {type(complaint).__name__}",
            field="complaint",
            value=type(complaint).__name__,
        )

    try:
        return ComplaintInformation.model_validate(complaint)
    except PydanticValidationError as e:
        errors = e.errors()
        if errors:
            first_error = errors[0]
            field_path = ".".join(str(loc) for loc in first_error.get("loc", []))
            message = first_error.get("msg", "Validation failed")
            raise ValidationError(
                f"Invalid complaint: {message}",
                field=field_path,
                details={"pydantic_errors": [str(err.get("msg")) for err in errors[:5]]},
            ) from e
        raise ValidationError("Invalid complaint payload") from e


def validate_document_type(
    document_type: DocumentType | str | None,
    allowed: tuple[DocumentType, ...] | None = None,
) -> DocumentType:
    """Validate and normalize a document type.

    Args:
        document_type: Enum member or its string value (case and separators
            are normalized, so ``"Demand Letter"`` is accepted).
        allowed: Optional subset the caller supports.

    Returns:
        The document type enum member.

    Raises:
        ValidationError: If the type is unknown or not allowed.
    """
    if document_type is None:
        raise ValidationError("Document type is required", field="document_type")

    if isinstance(document_type, DocumentType):
        resolved = document_type
    else:
        normalized = str(document_type).strip().lower().replace(" ", "_").replace("-", "_")
        try:
            resolved = DocumentType(normalized)
        except ValueError as e:
            raise ValidationError(
                f"Unknown document type '{document_type}'. "
                f"Known types: {', '.join(t.value for t in DocumentType)}",
                field="document_type",
                value=document_type,
            ) from e

    if allowed is not None and resolved not in allowed:
        raise ValidationError(
            f"Document type '{resolved.value}' is not supported here",
            field="document_type",
            value=resolved.value,
        )

    return resolved


def validate_index(index: Any, items: list[Any], field: str = "index") -> int:
    """Validate an index into an ordered content list.

    Raises:
        ValidationError: If the index is not an integer inside the list.
    """
    if isinstance(index, bool) or not isinstance(index, int):
        raise ValidationError(
            f"Index must be an integer, got {type(index).__name__}",
            field=field,
            value=index,
        )

    if index < 0 or index >= len(items):
        raise ValidationError(
            f"Index {index} is out of range for {len(items)} item(s)",
            field=field,
            value=index,
        )

    return index


def validate_instruction(instruction: str | None) -> str:
    """Validate a free-text editing instruction."""
    if instruction is None or not str(instruction).strip():
        raise ValidationError("Edit instruction cannot be empty", field="instruction")
    return str(instruction).strip()


def clean_definitions(definitions: list[str]) -> list[str]:
    """Strip leading ``"1. "`` style numbering from each definition."""
    return [_LEADING_NUMBER.sub("", definition) for definition in definitions]
