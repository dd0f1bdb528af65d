"""
Error types for BlogDB.

This module defines all exception types raised by the store:
- BlogDbError: Base exception
- ValidationError: Missing, empty or malformed fields
- UnknownFieldError: Unknown field in a create/update payload
- ConflictError: Uniqueness constraint violated
- ReferenceError: Referenced parent record does not exist
- NotFoundError: Targeted record does not exist

Invariants:
    - All errors inherit from BlogDbError
    - Errors are raised before any mutation of store state
    - Errors include context for debugging
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class BlogDbError(Exception):
    """Base exception for all BlogDB errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "BLOGDB_ERROR"
        self.details = details or {}


class ValidationError(BlogDbError):
    """Payload validation failed.

    Raised when:
    - Required field is missing or empty
    - Reference field is not an integer id
    - Update tries to change an immutable field
    """

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        errors: Optional[List[str]] = None,
        code: str = "VALIDATION_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        merged = {"field": field_name, "errors": errors or []}
        merged.update(details or {})
        super().__init__(message, code=code, details=merged)
        self.field_name = field_name
        self.errors = errors or []


class UnknownFieldError(ValidationError):
    """Unknown field in payload.

    Includes suggestions for similar field names.

    Attributes:
        field_name: The unknown field
        kind_name: The entity kind being written
        suggestions: Similar field names
    """

    def __init__(
        self,
        field_name: str,
        kind_name: str,
        suggestions: Optional[List[str]] = None,
    ) -> None:
        suggestions = suggestions or []
        msg = f"Unknown field '{field_name}' for {kind_name}"
        if suggestions:
            msg += f". Did you mean: {', '.join(suggestions)}?"

        super().__init__(
            msg,
            field_name=field_name,
            code="UNKNOWN_FIELD",
            details={"kind": kind_name, "suggestions": suggestions},
        )
        self.kind_name = kind_name
        self.suggestions = suggestions


class ConflictError(BlogDbError):
    """Uniqueness constraint violated.

    Raised when an account handle or email already belongs to a live account.
    """

    def __init__(self, message: str, field_name: str, value: Any) -> None:
        super().__init__(
            message,
            code="CONFLICT",
            details={"field": field_name, "value": value},
        )
        self.field_name = field_name
        self.value = value


class ReferenceError(BlogDbError):
    """Referenced parent record does not exist.

    Raised when a post names a missing owner, or a comment names a
    missing author or post. Parents are never created implicitly.
    """

    def __init__(self, message: str, resource_type: str, resource_id: Any) -> None:
        super().__init__(
            message,
            code="REFERENCE_ERROR",
            details={
                "resource_type": resource_type,
                "resource_id": resource_id,
            },
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class NotFoundError(BlogDbError):
    """Resource not found.

    Raised by update and delete operations. Lookups return None instead.
    """

    def __init__(self, message: str, resource_type: str, resource_id: Any) -> None:
        super().__init__(
            message,
            code="NOT_FOUND",
            details={
                "resource_type": resource_type,
                "resource_id": resource_id,
            },
        )
        self.resource_type = resource_type
        self.resource_id = resource_id
