"""
Error taxonomy and HTTP classification for the storefront handlers.

Services raise ``InvalidInputError`` / ``ResourceNotFoundError``, the data
access layer raises ``ConstraintViolationError`` tagged with the kind of rule
that was broken. ``classify_error`` turns any exception into a status code and
a ``{error, details?}`` body; it never raises.
"""

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

GENERIC_ERROR_MESSAGE = "Internal server error"


class ErrorCategory(str, Enum):
    """Error categories used for metrics and log fields."""
    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    CONSTRAINT = "CONSTRAINT"
    INFRASTRUCTURE = "INFRASTRUCTURE"


class ConstraintKind(str, Enum):
    """Kind of persistence rule that rejected a write."""
    UNIQUE = "unique"
    FOREIGN_KEY = "foreign_key"
    NOT_FOUND = "not_found"


class BaseServiceError(Exception):
    """Base exception class for errors that map to a known HTTP status."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: str,
        category: ErrorCategory,
        status_code: Optional[int] = None,
        details: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.category = category
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "category": self.category.value,
            "status_code": self.status_code,
            "details": self.details,
        }


class InvalidInputError(BaseServiceError):
    """Raised when an identifier, query parameter or request body is malformed."""

    status_code = 400

    def __init__(
        self,
        message: str,
        field_errors: Optional[List[Dict[str, str]]] = None,
    ):
        self.field_errors = field_errors or []
        details = None
        if self.field_errors:
            details = "; ".join(f"{error['field']}: {error['message']}" for error in self.field_errors)
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            category=ErrorCategory.VALIDATION,
            details=details,
        )


class ResourceNotFoundError(BaseServiceError):
    """Raised when a requested or referenced resource does not exist."""

    status_code = 404

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code="RESOURCE_NOT_FOUND",
            category=ErrorCategory.NOT_FOUND,
        )


class ConstraintViolationError(BaseServiceError):
    """Raised by the data access layer when the database rejects a write."""

    def __init__(
        self,
        kind: ConstraintKind,
        fields: Optional[List[str]] = None,
        relation: Optional[str] = None,
        detail: Optional[str] = None,
    ):
        self.kind = kind
        self.fields = fields or []
        self.relation = relation
        super().__init__(
            message=_default_constraint_message(kind, self.fields, relation),
            error_code=f"CONSTRAINT_{kind.name}",
            category=ErrorCategory.CONSTRAINT,
            status_code=404 if kind == ConstraintKind.NOT_FOUND else 400,
            details=detail,
        )


def _default_constraint_message(kind: ConstraintKind, fields: List[str], relation: Optional[str]) -> str:
    if kind == ConstraintKind.UNIQUE:
        if fields:
            return f"Duplicate entry ({', '.join(fields)})"
        return "Duplicate entry"
    if kind == ConstraintKind.FOREIGN_KEY:
        if relation:
            return f"Referenced record not found ({relation})"
        return "Referenced record not found"
    return "Record not found"


def classify_error(
    error: BaseException,
    include_details: bool = False,
    constraint_messages: Optional[Mapping[ConstraintKind, str]] = None,
) -> Tuple[int, Dict[str, Any]]:
    """
    Map any exception to an HTTP status code and an error body.

    Args:
        error: The exception raised while handling the request
        include_details: Whether unclassified errors expose their message
        constraint_messages: Resource specific messages per constraint kind

    Returns:
        Tuple of status code and ``{"error": ..., "details"?: ...}`` body
    """
    if isinstance(error, ConstraintViolationError):
        message = (constraint_messages or {}).get(error.kind, error.message)
        body: Dict[str, Any] = {"error": message}
        if include_details and error.details:
            body["details"] = error.details
        return error.status_code, body

    if isinstance(error, BaseServiceError):
        body = {"error": error.message}
        if error.details:
            body["details"] = error.details
        return error.status_code, body

    body = {"error": GENERIC_ERROR_MESSAGE}
    if include_details:
        body["details"] = str(error) or error.__class__.__name__
    return 500, body
