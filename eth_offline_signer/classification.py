"""Classify node rejections into nonce conflicts, duplicates and everything else.

Nodes and client libraries report the same condition through very
different shapes: a plain message, a ``details`` attribute, a chained
cause, or the raw JSON-RPC error object carried in ``args``. The helpers
here flatten all of them into a list of strings before matching against
small, ordered pattern tables.
"""
from __future__ import annotations

import re
from enum import Enum
from typing import Any, List, Mapping, Pattern, Sequence, Tuple

NONCE_CONFLICT_PATTERNS: Tuple[str, ...] = (
    "nonce too low",
    "nonce too high",
    "invalid nonce",
    r"nonce.*expected",
    "replacement transaction underpriced",
)

DUPLICATE_SUBMISSION_PATTERNS: Tuple[str, ...] = (
    "already known",
    r"\bknown transaction",
    "already imported",
)


def _compile(patterns: Sequence[str]) -> Tuple[Pattern[str], ...]:
    return tuple(re.compile(pattern, re.IGNORECASE) for pattern in patterns)


_NONCE_CONFLICT_REGEXES = _compile(NONCE_CONFLICT_PATTERNS)
_DUPLICATE_REGEXES = _compile(DUPLICATE_SUBMISSION_PATTERNS)


class ErrorKind(Enum):
    NONCE_CONFLICT = "nonce_conflict"
    OTHER = "other"


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        message = value.get("message")
        return message if isinstance(message, str) else ""
    return ""


def error_messages(error: Any) -> List[str]:
    """Return every human readable message attached to ``error``."""

    if error is None:
        return []
    if isinstance(error, str):
        return [error]

    messages: List[str] = [str(error)]
    for attribute in ("message", "details"):
        text = _as_text(getattr(error, attribute, None))
        if text:
            messages.append(text)
    for arg in getattr(error, "args", ()) or ():
        text = _as_text(arg)
        if text:
            messages.append(text)
    cause = getattr(error, "__cause__", None)
    if cause is not None and cause is not error:
        messages.append(str(cause))
        text = _as_text(getattr(cause, "message", None))
        if text:
            messages.append(text)
    return [message for message in messages if message]


def _matches(error: Any, regexes: Sequence[Pattern[str]]) -> bool:
    messages = error_messages(error)
    return any(regex.search(message) for regex in regexes for message in messages)


def classify_error(error: Any) -> ErrorKind:
    """Return :attr:`ErrorKind.NONCE_CONFLICT` when ``error`` is a nonce rejection."""

    if _matches(error, _NONCE_CONFLICT_REGEXES):
        return ErrorKind.NONCE_CONFLICT
    return ErrorKind.OTHER


def is_nonce_conflict(error: Any) -> bool:
    return classify_error(error) is ErrorKind.NONCE_CONFLICT


def is_duplicate_submission(error: Any) -> bool:
    """Return ``True`` when the node already holds the submitted transaction."""

    return _matches(error, _DUPLICATE_REGEXES)


__all__ = [
    "DUPLICATE_SUBMISSION_PATTERNS",
    "ErrorKind",
    "NONCE_CONFLICT_PATTERNS",
    "classify_error",
    "error_messages",
    "is_duplicate_submission",
    "is_nonce_conflict",
]
