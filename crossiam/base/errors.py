"""Translation of provider failures into canonical errors.

Each provider module exposes a ``classify_error(exc) -> ErrorKind``
function; :func:`translate_error` wraps it with the pass-through rule for
failures that are already canonical.
"""

from __future__ import annotations

from typing import Callable

from crossiam.base.exceptions import CrossIAMError, ErrorKind, error_for

Classifier = Callable[[BaseException], ErrorKind]


def canonical_kind(exc: BaseException) -> ErrorKind | None:
    """Return the canonical kind *exc* is tagged with, if any."""
    kind = getattr(exc, "error_kind", None)
    return kind if isinstance(kind, ErrorKind) else None


def translate_error(exc: BaseException, classify: Classifier, message: str) -> CrossIAMError:
    """Map *exc* to a canonical error.

    Tagged failures are returned unchanged, so a canonical error raised
    deeper in an adapter is never re-classified as ``Unknown``.

    Args:
        exc: The failure to translate.
        classify: Provider-specific classifier.
        message: Context prefix for the canonical error message.

    Returns:
        The canonical exception; its ``__cause__`` is *exc* when newly built.
    """
    if canonical_kind(exc) is not None and isinstance(exc, CrossIAMError):
        return exc
    err = error_for(classify(exc), f"{message}: {exc}")
    err.__cause__ = exc
    return err
