"""Unit tests for OpenTelemetry span helpers."""

from __future__ import annotations

from typing import Any, Mapping

from opentelemetry.trace import StatusCode

from packages.brain_errors import CallerPosition, Category, Sentinel, configure
from packages.brain_errors.otel import (
    add_error_context,
    error_attributes,
    record_error,
    record_error_with_event,
)

ErrUpstream = Sentinel("upstream unavailable")


class _FakeSpan:
    """In-memory fake span capturing status, events and attributes."""

    def __init__(self) -> None:
        self.attributes: dict[str, Any] = {}
        self.events: list[tuple[str, dict[str, Any]]] = []
        self.statuses: list[Any] = []

    def set_status(self, status: Any) -> None:
        self.statuses.append(status)

    def add_event(self, name: str, attributes: Mapping[str, Any] | None = None) -> None:
        self.events.append((name, dict(attributes or {})))

    def set_attributes(self, attributes: Mapping[str, Any]) -> None:
        self.attributes.update(attributes)


def _annotated():
    return (
        ErrUpstream.new()
        .with_code("UP_503")
        .with_category(Category.NETWORK)
        .with_retryable(True)
        .with_retry_after(10)
        .with_max_retries(4)
        .with_http_status(503)
        .with_correlation_id("corr-1")
        .with_tags("upstream")
        .with_label("dependency", "billing")
        .with_context({"attempt": 2})
    )


def test_record_error_sets_status_event_and_attributes() -> None:
    """A failed span should carry the error status and its metadata."""
    configure(CallerPosition.DISABLED)
    span = _FakeSpan()

    record_error(span, _annotated())

    status = span.statuses[-1]
    assert status.status_code is StatusCode.ERROR
    assert status.description.startswith("upstream unavailable")
    assert span.events[0][0] == "exception"
    assert span.events[0][1]["exception.type"] == "AnnotatedError"
    assert span.attributes["error.code"] == "UP_503"
    assert span.attributes["error.category"] == "network"
    assert span.attributes["error.retryable"] is True
    assert span.attributes["error.retry_after"] == "10s"
    assert span.attributes["error.max_retries"] == 4
    assert span.attributes["http.status_code"] == 503
    assert span.attributes["correlation.id"] == "corr-1"
    assert span.attributes["error.tags"] == ["upstream"]
    assert span.attributes["label.dependency"] == "billing"
    assert span.attributes["context.attempt"] == "2"


def test_record_error_with_foreign_error_sets_only_status_and_event() -> None:
    span = _FakeSpan()

    record_error(span, ValueError("bad"))

    assert span.statuses[-1].status_code is StatusCode.ERROR
    assert span.events == [
        ("exception", {"exception.type": "ValueError", "exception.message": "bad"})
    ]
    assert span.attributes == {}


def test_none_span_or_error_is_a_no_op() -> None:
    span = _FakeSpan()

    record_error(None, ValueError("ignored"))
    record_error(span, None)
    add_error_context(span, None)
    record_error_with_event(None, ValueError("ignored"), "retry")

    assert span.statuses == []
    assert span.events == []
    assert span.attributes == {}


def test_record_error_with_event_adds_custom_event() -> None:
    span = _FakeSpan()

    record_error_with_event(span, _annotated(), "retry_scheduled", {"delay": "10s"})

    assert [name for name, _ in span.events] == ["exception", "retry_scheduled"]
    assert span.events[-1][1] == {"delay": "10s"}


def test_add_error_context_keeps_span_status_untouched() -> None:
    """Handled errors are annotated without marking the span as failed."""
    configure(CallerPosition.DISABLED)
    span = _FakeSpan()

    add_error_context(span, _annotated())

    assert span.statuses == []
    assert span.attributes["error.attempted.code"] == "UP_503"
    assert span.attributes["error.attempted.category"] == "network"
    assert span.attributes["correlation.id"] == "corr-1"
    assert span.attributes["error.attempted.message"].startswith("upstream unavailable")


def test_error_attributes_skip_retry_fields_when_not_retryable() -> None:
    attributes = error_attributes(ErrUpstream.new().with_retry_after(10))

    assert "error.retry_after" not in attributes
    assert "error.retryable" not in attributes
