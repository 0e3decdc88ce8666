"""Exception hierarchy shared by the adapters, the journey service and the API.

Adapters and services raise these; only ``huntassist.api.app`` turns them into
HTTP responses.
"""

from __future__ import annotations

from typing import Any


class HuntAssistError(Exception):
    """Base class for every domain error raised by the application."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InputValidationError(HuntAssistError):
    """
    Raised when required input is missing or malformed.

    Attributes:
        message: Error description
        field: Name of the offending field, if a single field is to blame
        details: Optional structured details (e.g. pydantic error list)
    """

    def __init__(self, message: str, field: str | None = None, details: list[dict[str, Any]] | None = None):
        self.field = field
        self.details = details or []
        super().__init__(message)


class UnsupportedFormatError(HuntAssistError):
    """Raised when a résumé file is neither PDF nor DOCX."""

    def __init__(self, mime_type: str):
        self.mime_type = mime_type
        super().__init__(
            f"Unsupported file type '{mime_type}'. Please upload a PDF or DOCX file."
        )


class ExtractionError(HuntAssistError):
    """Raised when a document claims a supported type but cannot be parsed."""

    def __init__(self, message: str, mime_type: str = ""):
        self.mime_type = mime_type
        super().__init__(message)


class GenerationError(HuntAssistError):
    """
    Raised when the AI backend call does not complete.

    Attributes:
        operation: Which generation failed ("insights" or "cover_letter")
        provider: Name of the backend that was called
    """

    def __init__(self, operation: str, provider: str = "", message: str | None = None):
        self.operation = operation
        self.provider = provider
        label = operation.replace("_", " ")
        super().__init__(message or f"Failed to generate {label}")


class NotFoundError(HuntAssistError):
    """Raised when a referenced record does not exist."""


class AccessDeniedError(HuntAssistError):
    """Raised when the requester does not own the record."""

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class PersistenceError(HuntAssistError):
    """Raised when the record store fails to read or write."""


class AuthenticationError(HuntAssistError):
    """Raised for missing, expired or invalid credentials."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class ConfigurationError(HuntAssistError):
    """Raised when the selected AI backend is not configured."""


class UploadTooLargeError(HuntAssistError):
    """Raised when an uploaded résumé exceeds the configured size limit."""

    def __init__(self, limit_bytes: int):
        self.limit_bytes = limit_bytes
        super().__init__(f"Resume file must be at most {limit_bytes // (1024 * 1024)}MB")
