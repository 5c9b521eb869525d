"""
Structured logging for crossiam.

Provides a pre-configured logger that emits JSON-structured log records
with operation context (provider, operation, identity, tenant) for easy
filtering in log aggregation tools.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any

_CONTEXT_KEYS = ("request_id", "provider", "operation", "identity", "tenant", "error_kind")


class StructuredFormatter(logging.Formatter):
    """Emit log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # Attach any extras injected via IAMLogger.log_operation
        for key in _CONTEXT_KEYS:
            val = getattr(record, key, None)
            if val is not None:
                log_entry[key] = val
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = str(record.exc_info[1])
        return json.dumps(log_entry)


class IAMLogger:
    """Convenience wrapper around :mod:`logging` for IAM operations."""

    def __init__(self, name: str = "crossiam") -> None:
        self.logger = logging.getLogger(name)
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(StructuredFormatter())
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.INFO)

    def log_operation(
        self,
        level: int,
        message: str,
        *,
        provider: str | None = None,
        operation: str | None = None,
        identity: str | None = None,
        tenant: str | None = None,
        error_kind: str | None = None,
        request_id: str | None = None,
        exc_info: bool = False,
    ) -> None:
        """Emit a structured log record with IAM operation context.

        Args:
            level: Logging level (e.g. logging.INFO).
            message: Human-readable message.
            provider: Cloud provider name.
            operation: Operation name (e.g. 'create_identity').
            identity: Identity (role / service account) the call targets.
            tenant: Account or project the call targets.
            error_kind: Canonical error kind, for failures.
            request_id: Optional correlation ID; auto-generated if omitted.
            exc_info: Whether to include exception info.
        """
        extra = {
            "provider": provider,
            "operation": operation,
            "identity": identity,
            "tenant": tenant,
            "error_kind": error_kind,
            "request_id": request_id or uuid.uuid4().hex[:12],
        }
        self.logger.log(level, message, extra=extra, exc_info=exc_info)

    def info(self, message: str, **kwargs: Any) -> None:
        self.log_operation(logging.INFO, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self.log_operation(logging.ERROR, message, **kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        self.log_operation(logging.DEBUG, message, **kwargs)


# Module-level singleton
iam_logger = IAMLogger()
