"""OpenTelemetry span helpers for annotated errors.

Works with any error; annotated errors contribute their metadata as span
attributes. Span arguments only need the ``set_status`` / ``add_event`` /
``set_attributes`` subset of the OTel ``Span`` API.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol

from opentelemetry.trace import Status, StatusCode

from . import accessors
from .render import format_duration


class _SpanLike(Protocol):
    def set_status(self, status: Status) -> None: ...

    def add_event(self, name: str, attributes: Mapping[str, Any] | None = None) -> None: ...

    def set_attributes(self, attributes: Mapping[str, Any]) -> None: ...


def error_attributes(error: BaseException) -> dict[str, Any]:
    """Return span attributes describing ``error``."""
    attributes: dict[str, Any] = {}
    if code := accessors.get_code(error):
        attributes["error.code"] = code
    if category := accessors.get_category(error):
        attributes["error.category"] = category
    for key, value in (
        ("correlation.id", accessors.get_correlation_id(error)),
        ("request.id", accessors.get_request_id(error)),
        ("user.id", accessors.get_user_id(error)),
        ("session.id", accessors.get_session_id(error)),
    ):
        if value:
            attributes[key] = value

    if accessors.is_retryable(error):
        attributes["error.retryable"] = True
        retry_after = accessors.get_retry_after(error)
        if retry_after:
            attributes["error.retry_after"] = format_duration(retry_after)
        if max_retries := accessors.get_max_retries(error):
            attributes["error.max_retries"] = max_retries

    if status := accessors.get_http_status(error):
        attributes["http.status_code"] = status
    if mcp_code := accessors.get_mcp_code(error):
        attributes["mcp.error_code"] = mcp_code
    if tags := accessors.get_tags(error):
        attributes["error.tags"] = tags
    for key, value in accessors.get_labels(error).items():
        attributes[f"label.{key}"] = value
    # OTel attribute values must be primitives.
    for key, value in accessors.get_context(error).items():
        attributes[f"context.{key}"] = str(value)
    return attributes


def record_error(span: _SpanLike | None, error: BaseException | None) -> None:
    """Mark ``span`` as failed and attach ``error`` metadata."""
    if span is None or error is None:
        return

    message = str(error)
    span.set_status(Status(StatusCode.ERROR, message))
    span.add_event(
        "exception",
        {"exception.type": type(error).__name__, "exception.message": message},
    )
    attributes = error_attributes(error)
    if attributes:
        span.set_attributes(attributes)


def record_error_with_event(
    span: _SpanLike | None,
    error: BaseException | None,
    event_name: str,
    event_attributes: Mapping[str, str] | None = None,
) -> None:
    """Record ``error`` and add one custom event to ``span``."""
    record_error(span, error)
    if span is None or not event_name:
        return
    span.add_event(event_name, dict(event_attributes or {}))


def add_error_context(span: _SpanLike | None, error: BaseException | None) -> None:
    """Attach metadata of a handled error without changing span status."""
    if span is None or error is None:
        return

    attributes: dict[str, Any] = {}
    if code := accessors.get_code(error):
        attributes["error.attempted.code"] = code
    if category := accessors.get_category(error):
        attributes["error.attempted.category"] = category
    if correlation_id := accessors.get_correlation_id(error):
        attributes["correlation.id"] = correlation_id
    attributes["error.attempted.message"] = str(error)
    span.set_attributes(attributes)
