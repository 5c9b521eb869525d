"""Stateless JSON helpers for policy documents."""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import unquote

from crossiam.base.exceptions import InvalidArgumentError


def dumps(document: dict[str, Any], what: str = "policy document") -> str:
    """Serialize *document* to compact JSON.

    Raises:
        InvalidArgumentError: If the document holds values JSON cannot encode.
    """
    try:
        return json.dumps(document, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"Failed to serialize {what}") from e


def decode(document: str | dict[str, Any] | None) -> str | None:
    """Return a provider-returned policy document as a plain JSON string.

    IAM returns documents URL-encoded; boto3 usually hands them back already
    parsed into a dict.
    """
    if document is None:
        return None
    if isinstance(document, dict):
        return dumps(document)
    return unquote(document)


def differs(existing: str | dict[str, Any] | None, new: str | None) -> bool:
    """Compare two policy documents structurally.

    Key order and whitespace are not differences.  If either side fails to
    parse, the raw strings are compared instead.
    """
    if existing is None and new is None:
        return False
    if existing is None or new is None:
        return True
    if isinstance(existing, dict):
        try:
            return existing != json.loads(new)
        except ValueError:
            return True
    try:
        return json.loads(unquote(existing)) != json.loads(new)
    except ValueError:
        return existing != new
