"""AWS error-code → canonical kind mapping."""

from __future__ import annotations

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    NoCredentialsError,
    PartialCredentialsError,
    ReadTimeoutError,
)

from crossiam.base.errors import canonical_kind
from crossiam.base.exceptions import ErrorKind

_ERROR_CODE_MAP: dict[str, ErrorKind] = {
    # Bad input
    "ValidationError": ErrorKind.INVALID_ARGUMENT,
    "InvalidInput": ErrorKind.INVALID_ARGUMENT,
    "MalformedPolicyDocument": ErrorKind.INVALID_ARGUMENT,
    "InvalidParameterValue": ErrorKind.INVALID_ARGUMENT,
    "InvalidParameterCombination": ErrorKind.INVALID_ARGUMENT,
    "MissingParameter": ErrorKind.INVALID_ARGUMENT,
    "PolicyNotAttachable": ErrorKind.INVALID_ARGUMENT,
    # Timeouts
    "RequestTimeout": ErrorKind.DEADLINE_EXCEEDED,
    "RequestTimeoutException": ErrorKind.DEADLINE_EXCEEDED,
    "RequestExpired": ErrorKind.DEADLINE_EXCEEDED,
    # Existence
    "NoSuchEntity": ErrorKind.RESOURCE_NOT_FOUND,
    "NotFound": ErrorKind.RESOURCE_NOT_FOUND,
    "ResourceNotFoundException": ErrorKind.RESOURCE_NOT_FOUND,
    "EntityAlreadyExists": ErrorKind.RESOURCE_ALREADY_EXISTS,
    # Auth
    "AccessDenied": ErrorKind.UNAUTHORIZED,
    "AccessDeniedException": ErrorKind.UNAUTHORIZED,
    "UnauthorizedOperation": ErrorKind.UNAUTHORIZED,
    "InvalidClientTokenId": ErrorKind.UNAUTHORIZED,
    "SignatureDoesNotMatch": ErrorKind.UNAUTHORIZED,
    "ExpiredToken": ErrorKind.UNAUTHORIZED,
    "MissingAuthenticationToken": ErrorKind.UNAUTHORIZED,
    "UnrecognizedClientException": ErrorKind.UNAUTHORIZED,
    # Quotas
    "LimitExceeded": ErrorKind.RESOURCE_EXHAUSTED,
    "Throttling": ErrorKind.RESOURCE_EXHAUSTED,
    "ThrottlingException": ErrorKind.RESOURCE_EXHAUSTED,
    "RequestLimitExceeded": ErrorKind.RESOURCE_EXHAUSTED,
    "TooManyRequestsException": ErrorKind.RESOURCE_EXHAUSTED,
    "ServiceQuotaExceededException": ErrorKind.RESOURCE_EXHAUSTED,
    # State
    "DeleteConflict": ErrorKind.FAILED_PRECONDITION,
    "ConcurrentModification": ErrorKind.FAILED_PRECONDITION,
    "UnmodifiableEntity": ErrorKind.FAILED_PRECONDITION,
    "PreconditionFailed": ErrorKind.FAILED_PRECONDITION,
    # Not implemented
    "NotImplemented": ErrorKind.UNSUPPORTED_OPERATION,
    "UnsupportedOperation": ErrorKind.UNSUPPORTED_OPERATION,
    "OperationNotSupportedException": ErrorKind.UNSUPPORTED_OPERATION,
}


def error_code(e: ClientError) -> str:
    return e.response.get("Error", {}).get("Code", "")


def classify_error(exc: BaseException) -> ErrorKind:
    """Classify an AWS SDK failure.

    Service errors are keyed by their error code; unknown codes (including
    ``ServiceFailure``) are ``Unknown``.  Failures raised locally by botocore
    before a response arrived are client-side: timeouts map to
    ``DeadlineExceeded``, missing credentials to ``Unauthorized`` and the
    rest to ``InvalidArgument``.
    """
    kind = canonical_kind(exc)
    if kind is not None:
        return kind
    if isinstance(exc, ClientError):
        return _ERROR_CODE_MAP.get(error_code(exc), ErrorKind.UNKNOWN)
    if isinstance(exc, (ConnectTimeoutError, ReadTimeoutError)):
        return ErrorKind.DEADLINE_EXCEEDED
    if isinstance(exc, (NoCredentialsError, PartialCredentialsError)):
        return ErrorKind.UNAUTHORIZED
    if isinstance(exc, (BotoCoreError, ValueError)):
        return ErrorKind.INVALID_ARGUMENT
    return ErrorKind.UNKNOWN
