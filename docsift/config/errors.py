"""
Error Taxonomy - Consistent error codes across the application.

Usage:
    from docsift.config.errors import ErrorCode, DocsiftError

    raise DocsiftError(ErrorCode.SERVICE_FAILED, "Upload failed")

Failures fall into three groups:
- fatal to a document (submit, generated-text fetch)
- recoverable and optional (table extraction, a single table fetch)
- recoverable per operation (unknown table id, transform failure)
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standardized error codes for machine-readable error responses."""

    # Remote service errors
    SERVICE_FAILED = "SERVICE_FAILED"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    SERVICE_INVALID_RESPONSE = "SERVICE_INVALID_RESPONSE"

    # Document lifecycle errors
    DOCUMENT_INVALID_TRANSITION = "DOCUMENT_INVALID_TRANSITION"

    # Editing errors
    TABLE_NOT_FOUND = "TABLE_NOT_FOUND"
    TRANSFORM_FAILED = "TRANSFORM_FAILED"

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"


class DocsiftError(Exception):
    """Base exception with error code support."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to a display-friendly dictionary."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class ServiceError(DocsiftError):
    """Remote extraction service returned an error or unusable response."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: ErrorCode = ErrorCode.SERVICE_FAILED,
    ) -> None:
        super().__init__(code, message, details)


class ServiceUnavailableError(ServiceError):
    """Transport-level failure reaching the extraction service."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, details, code=ErrorCode.SERVICE_UNAVAILABLE)


class UnknownTableError(DocsiftError):
    """Table id does not exist on the document."""

    def __init__(self, table_id: str) -> None:
        super().__init__(
            ErrorCode.TABLE_NOT_FOUND,
            f"Unknown table: {table_id}",
            {"table_id": table_id},
        )


class InvalidTransitionError(DocsiftError):
    """Document status change that the lifecycle does not allow."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.DOCUMENT_INVALID_TRANSITION, message, details)
