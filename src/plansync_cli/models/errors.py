"""Error taxonomy and operation results.

Every failure that crosses a service boundary is one of the kinds in
``ErrorKind``. Adapters raise the matching ``PlanSyncError`` subclass; the
sync engine and identity service catch them and hand callers a ``Result``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Closed set of failure kinds."""

    NOT_AUTHENTICATED = "not_authenticated"
    ACCESS_DENIED = "access_denied"
    NOT_FOUND = "not_found"
    VALIDATION_ERROR = "validation_error"
    STORE_UNAVAILABLE = "store_unavailable"


class PlanSyncError(Exception):
    """Base error carrying an ``ErrorKind`` and a human-readable message."""

    kind: ErrorKind = ErrorKind.STORE_UNAVAILABLE
    default_message = "Operation failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotAuthenticatedError(PlanSyncError):
    """Raised when an operation requires a signed-in identity."""

    kind = ErrorKind.NOT_AUTHENTICATED
    default_message = "Sign-in required"


class AccessDeniedError(PlanSyncError):
    """Raised when an update or delete matched no rows the identity owns."""

    kind = ErrorKind.ACCESS_DENIED
    default_message = "Access denied"


class NotFoundError(PlanSyncError):
    """Raised when a single-record read matched nothing."""

    kind = ErrorKind.NOT_FOUND
    default_message = "Project not found"


class ValidationError(PlanSyncError):
    """Raised for malformed input: empty required fields, bad import files."""

    kind = ErrorKind.VALIDATION_ERROR
    default_message = "Invalid input"


class StoreUnavailableError(PlanSyncError):
    """Raised for network or service failures."""

    kind = ErrorKind.STORE_UNAVAILABLE
    default_message = "Project store is unavailable"


_ERRORS_BY_KIND: dict[ErrorKind, type[PlanSyncError]] = {
    ErrorKind.NOT_AUTHENTICATED: NotAuthenticatedError,
    ErrorKind.ACCESS_DENIED: AccessDeniedError,
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.VALIDATION_ERROR: ValidationError,
    ErrorKind.STORE_UNAVAILABLE: StoreUnavailableError,
}


def error_for(kind: ErrorKind, message: str | None = None) -> PlanSyncError:
    """Build the error instance for ``kind``."""
    return _ERRORS_BY_KIND[kind](message)


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a service operation.

    Attributes:
        ok: True when the operation succeeded
        value: Operation value on success
        error: The failure on error
    """

    ok: bool
    value: T | None = None
    error: PlanSyncError | None = None

    @classmethod
    def success(cls, value: T | None = None) -> Result[T]:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: PlanSyncError) -> Result[T]:
        return cls(ok=False, error=error)

    @property
    def kind(self) -> ErrorKind | None:
        return self.error.kind if self.error is not None else None

    @property
    def message(self) -> str | None:
        return self.error.message if self.error is not None else None

    def unwrap(self) -> T:
        """Return the value, or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
