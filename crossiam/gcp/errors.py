"""GCP exception → canonical kind mapping."""

from __future__ import annotations

from google.api_core import exceptions as gcp_exceptions
from google.auth import exceptions as auth_exceptions

from crossiam.base.errors import canonical_kind
from crossiam.base.exceptions import ErrorKind

# Checked in order: subclasses before the HTTP-level classes they extend
# (FailedPrecondition is a BadRequest, AlreadyExists and Aborted are Conflicts).
_EXCEPTION_MAP: tuple[tuple[type[BaseException], ErrorKind], ...] = (
    (gcp_exceptions.FailedPrecondition, ErrorKind.FAILED_PRECONDITION),
    (gcp_exceptions.PreconditionFailed, ErrorKind.FAILED_PRECONDITION),
    (gcp_exceptions.AlreadyExists, ErrorKind.RESOURCE_ALREADY_EXISTS),
    (gcp_exceptions.Aborted, ErrorKind.DEADLINE_EXCEEDED),
    (gcp_exceptions.Conflict, ErrorKind.RESOURCE_ALREADY_EXISTS),
    (gcp_exceptions.BadRequest, ErrorKind.INVALID_ARGUMENT),
    (gcp_exceptions.Unauthorized, ErrorKind.UNAUTHORIZED),
    (gcp_exceptions.Forbidden, ErrorKind.UNAUTHORIZED),
    (gcp_exceptions.NotFound, ErrorKind.RESOURCE_NOT_FOUND),
    (gcp_exceptions.TooManyRequests, ErrorKind.RESOURCE_EXHAUSTED),
    (gcp_exceptions.MethodNotImplemented, ErrorKind.UNSUPPORTED_OPERATION),
    (gcp_exceptions.GatewayTimeout, ErrorKind.DEADLINE_EXCEEDED),
    (gcp_exceptions.RetryError, ErrorKind.DEADLINE_EXCEEDED),
    (auth_exceptions.DefaultCredentialsError, ErrorKind.UNAUTHORIZED),
    (auth_exceptions.RefreshError, ErrorKind.UNAUTHORIZED),
)


def classify_error(exc: BaseException) -> ErrorKind:
    """Classify a Google API failure by its status class.

    ``Cancelled``, ``InternalServerError``, ``ServiceUnavailable``,
    ``DataLoss``, ``Unknown`` and any non-API exception are ``Unknown``.
    """
    kind = canonical_kind(exc)
    if kind is not None:
        return kind
    for exc_type, mapped in _EXCEPTION_MAP:
        if isinstance(exc, exc_type):
            return mapped
    return ErrorKind.UNKNOWN
