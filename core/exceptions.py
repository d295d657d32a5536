"""Custom exceptions for the discovery drafting pipeline.

Provides a hierarchy of exceptions for better error handling and reporting.
"""

from __future__ import annotations

from typing import Any


class DiscoveryError(Exception):
    """Base exception for all discovery pipeline errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for JSON responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DiscoveryError):
    """Raised when input validation fails.

    Used for complaint payloads, edit indices, document types, etc.
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field
        self.value = value
        if field:
            self.details["field"] = field
        if value is not None:
            self.details["value"] = str(value)[:100]  # Truncate for safety


class MissingPreconditionError(DiscoveryError):
    """Raised when an operation is started without the data it needs."""

    def __init__(self, requirement: str, message: str | None = None) -> None:
        super().__init__(
            message or f"Missing required {requirement}",
            {"requirement": requirement},
        )
        self.requirement = requirement


class NotFoundError(DiscoveryError):
    """Raised when a persisted record does not exist."""

    def __init__(self, resource: str, case_id: str) -> None:
        super().__init__(
            f"No {resource} found for case '{case_id}'",
            {"resource": resource, "case_id": case_id},
        )
        self.resource = resource
        self.case_id = case_id


class LLMError(DiscoveryError):
    """Raised when LLM operations fail."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            f"LLM {operation} failed: {message}",
            {"operation": operation, **(details or {})},
        )
        self.operation = operation


class LLMResponseError(LLMError):
    """Raised when an LLM response cannot be parsed into the expected shape."""

    def __init__(self, operation: str, message: str, raw_text: str = "") -> None:
        super().__init__(operation, message, {"raw_excerpt": raw_text[:200]})
        self.raw_text = raw_text


class ExtractionError(DiscoveryError):
    """Raised when case facts cannot be extracted from a complaint."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message, {"errors": list(errors or [])})
        self.errors = list(errors or [])


class DocumentGenerationError(DiscoveryError):
    """Raised when document generation fails."""

    def __init__(
        self,
        document_type: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            f"Failed to generate {document_type}: {message}",
            {"document_type": document_type, **(details or {})},
        )
        self.document_type = document_type


class StorageError(DiscoveryError):
    """Raised when the hosted database or object storage call fails."""

    def __init__(
        self,
        operation: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        details: dict[str, Any] = {"operation": operation}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(f"Storage {operation} failed: {message}", details)
        self.operation = operation
        self.status_code = status_code


class TemplateError(DiscoveryError):
    """Raised when a form template cannot be loaded or filled."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(
            f"Template '{source}' error: {message}",
            {"source": source},
        )
        self.source = source
