"""Metadata accessors over arbitrary errors.

Each accessor searches the chain for the first ``AnnotatedError`` and reads one
field from it. All of them accept ``None`` and foreign errors and return the
field's zero value in that case. Mappings and sequences are returned as fresh
copies.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from .chain import as_error
from .error import AnnotatedError
from .types import ErrorDetails


def _find(error: BaseException | None) -> AnnotatedError | None:
    """Return the first annotated error in the chain, if any."""
    return as_error(error, AnnotatedError)


def _details(error: BaseException | None) -> ErrorDetails:
    """Return the metadata of the first annotated error, or empty metadata."""
    found = _find(error)
    return found.details if found is not None else ErrorDetails()


def get_code(error: BaseException | None) -> str:
    """Return the machine-readable error code, or ``""``."""
    return _details(error).code


def get_category(error: BaseException | None) -> str:
    """Return the category value, e.g. ``"not_found"``, or ``""``."""
    return _details(error).category


def get_context(error: BaseException | None) -> dict[str, Any]:
    """Return a copy of the structured context."""
    return dict(_details(error).context)


def is_retryable(error: BaseException | None) -> bool:
    """Return whether the error is marked retryable."""
    return _details(error).retryable


def get_retry_after(error: BaseException | None) -> timedelta:
    """Return the suggested retry delay, or zero."""
    return _details(error).retry_after


def get_max_retries(error: BaseException | None) -> int:
    """Return the retry budget, or ``0``."""
    return _details(error).max_retries


def get_http_status(error: BaseException | None) -> int:
    """Return the HTTP status, or ``0`` when unset."""
    return _details(error).http_status


def get_mcp_code(error: BaseException | None) -> int:
    """Return the JSON-RPC 2.0 error code, or ``0`` when unset."""
    return _details(error).mcp_code


def get_correlation_id(error: BaseException | None) -> str:
    """Return the correlation ID, or ``""``."""
    return _details(error).correlation_id


def get_request_id(error: BaseException | None) -> str:
    """Return the request ID, or ``""``."""
    return _details(error).request_id


def get_user_id(error: BaseException | None) -> str:
    """Return the user ID, or ``""``."""
    return _details(error).user_id


def get_session_id(error: BaseException | None) -> str:
    """Return the session ID, or ``""``."""
    return _details(error).session_id


def get_help(error: BaseException | None) -> str:
    """Return the recovery guidance, or ``""``."""
    return _details(error).help


def get_suggestion(error: BaseException | None) -> str:
    """Return the suggested next action, or ``""``."""
    return _details(error).suggestion


def get_docs(error: BaseException | None) -> str:
    """Return the documentation URL, or ``""``."""
    return _details(error).docs_url


def get_tags(error: BaseException | None) -> list[str]:
    """Return a copy of the tags in insertion order."""
    return list(_details(error).tags)


def get_labels(error: BaseException | None) -> dict[str, str]:
    """Return a copy of the labels."""
    return dict(_details(error).labels)


def get_label(error: BaseException | None, key: str) -> str:
    """Return one label value, or ``""`` when the label is absent."""
    return _details(error).labels.get(key, "")


def get_timestamp(error: BaseException | None) -> datetime | None:
    """Return when the error occurred, or ``None``."""
    return _details(error).timestamp


def get_duration(error: BaseException | None) -> timedelta:
    """Return how long the failed operation ran, or zero."""
    return _details(error).duration


def get_caller(error: BaseException | None) -> str:
    """Return the ``file:line.function`` captured at construction, or ``""``."""
    found = _find(error)
    return found.caller if found is not None else ""


def get_stack(error: BaseException | None) -> list[str]:
    """Return the captured stack frames, outermost last."""
    found = _find(error)
    return list(found.stack) if found is not None else []
