"""Error kinds raised by the ledger services and their boundary translation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .logging_config import get_logger

logger = get_logger(__name__)


class LedgerError(Exception):
    """Base class for every expected failure the services raise."""

    kind = "error"
    status = 500
    title = "Internal Server Error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(LedgerError):
    """Missing row, or a row owned by someone else. Both read the same."""

    kind = "not_found"
    status = 404
    title = "Not Found"

    @classmethod
    def for_entity(cls, entity: str) -> NotFound:
        return cls(f"{entity} not found")


class BadRequest(LedgerError):
    """Malformed reference cardinality or a system-only transaction type."""

    kind = "bad_request"
    status = 400
    title = "Bad Request"


class BusinessRuleViolation(LedgerError):
    """Archived reference, type mismatch, insufficient balance, protected row."""

    kind = "business_rule_violation"
    status = 422
    title = "Business Rule Violation"


class DuplicateResource(LedgerError):
    kind = "duplicate"
    status = 409
    title = "Conflict"


class AuthenticationFailed(LedgerError):
    kind = "authentication_failed"
    status = 401
    title = "Unauthorized"


class AccessDenied(LedgerError):
    kind = "access_denied"
    status = 403
    title = "Forbidden"


class ValidationFailed(LedgerError):
    """Field-level input validation failure carrying per-field messages."""

    kind = "validation_failed"
    status = 400
    title = "Validation Failed"

    def __init__(self, field_errors: dict[str, list[str]]) -> None:
        super().__init__("One or more fields have validation errors")
        self.field_errors = {name: list(messages) for name, messages in field_errors.items()}


@dataclass(slots=True)
class ErrorPayload:
    """Structured error handed to the presentation layer."""

    status: int
    error: str
    kind: str
    message: str
    field_errors: dict[str, list[str]] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "status": self.status,
            "error": self.error,
            "kind": self.kind,
            "message": self.message,
        }
        if self.field_errors:
            payload["field_errors"] = self.field_errors
        return payload


def to_error_payload(exc: BaseException) -> ErrorPayload:
    """Translate any exception into a single structured error.

    Expected ledger errors keep their message; anything else is logged with
    its traceback and reported with a generic message.
    """

    if isinstance(exc, LedgerError):
        logger.warning("%s: %s", exc.title, exc.message, extra={"kind": exc.kind})
        return ErrorPayload(
            status=exc.status,
            error=exc.title,
            kind=exc.kind,
            message=exc.message,
            field_errors=getattr(exc, "field_errors", {}),
        )

    logger.error("Unexpected error occurred", exc_info=(type(exc), exc, exc.__traceback__))
    return ErrorPayload(
        status=LedgerError.status,
        error=LedgerError.title,
        kind=LedgerError.kind,
        message="An unexpected error occurred. Please try again later.",
    )
