"""
Crossiam exception hierarchy.

Every failure that leaves the library is a :class:`CrossIAMError` tagged
with one :class:`ErrorKind`.  Provider-native exceptions never cross the
public surface; they are kept as ``__cause__`` of the canonical error.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Provider-independent failure categories."""

    INVALID_ARGUMENT = "InvalidArgument"
    DEADLINE_EXCEEDED = "DeadlineExceeded"
    RESOURCE_NOT_FOUND = "ResourceNotFound"
    RESOURCE_ALREADY_EXISTS = "ResourceAlreadyExists"
    UNAUTHORIZED = "Unauthorized"
    RESOURCE_EXHAUSTED = "ResourceExhausted"
    FAILED_PRECONDITION = "FailedPrecondition"
    UNSUPPORTED_OPERATION = "UnsupportedOperation"
    UNKNOWN = "Unknown"

    @property
    def retryable(self) -> bool:
        """Whether re-running the operation may succeed without changes."""
        return self in (ErrorKind.DEADLINE_EXCEEDED, ErrorKind.RESOURCE_EXHAUSTED)


# ── Base ──────────────────────────────────────────────────────────────
class CrossIAMError(Exception):
    """Root exception for all crossiam errors."""

    error_kind: ErrorKind = ErrorKind.UNKNOWN


# ── Canonical kinds ──────────────────────────────────────────────────
class InvalidArgumentError(CrossIAMError):
    """Request is missing a required field or carries a malformed payload."""

    error_kind = ErrorKind.INVALID_ARGUMENT


class DeadlineExceededError(CrossIAMError):
    """Call timed out or was aborted (e.g. a concurrent policy write)."""

    error_kind = ErrorKind.DEADLINE_EXCEEDED


class ResourceNotFoundError(CrossIAMError):
    """Identity or policy not found."""

    error_kind = ErrorKind.RESOURCE_NOT_FOUND


class ResourceAlreadyExistsError(CrossIAMError):
    """Identity or policy already exists."""

    error_kind = ErrorKind.RESOURCE_ALREADY_EXISTS


class UnauthorizedError(CrossIAMError):
    """Caller is unauthenticated or lacks permission."""

    error_kind = ErrorKind.UNAUTHORIZED


class ResourceExhaustedError(CrossIAMError):
    """Quota or rate limit exceeded."""

    error_kind = ErrorKind.RESOURCE_EXHAUSTED


class FailedPreconditionError(CrossIAMError):
    """Resource is not in a state that allows the operation."""

    error_kind = ErrorKind.FAILED_PRECONDITION


class UnsupportedOperationError(CrossIAMError):
    """Provider does not implement the operation."""

    error_kind = ErrorKind.UNSUPPORTED_OPERATION


class UnknownError(CrossIAMError):
    """Unclassified provider failure."""

    error_kind = ErrorKind.UNKNOWN


ERROR_CLASSES: dict[ErrorKind, type[CrossIAMError]] = {
    cls.error_kind: cls
    for cls in (
        InvalidArgumentError,
        DeadlineExceededError,
        ResourceNotFoundError,
        ResourceAlreadyExistsError,
        UnauthorizedError,
        ResourceExhaustedError,
        FailedPreconditionError,
        UnsupportedOperationError,
        UnknownError,
    )
}


def error_for(kind: ErrorKind, message: str) -> CrossIAMError:
    """Instantiate the canonical exception for *kind*."""
    return ERROR_CLASSES[kind](message)
