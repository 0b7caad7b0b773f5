"""String and JSON rendering for annotated errors.

``render`` reads caller position, layout, output format and field visibility
from the settings active at call time. Caller and stack text were fixed when
the error was built and are only placed here. The pretty format shows the
headline, auxiliary errors and stack; metadata appears only in the JSON and
compact formats.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any, Final

from .codes import INLINE_GLYPH
from .settings import (
    CallerPosition,
    ErrorSettings,
    Layout,
    OutputFormat,
    VisibilityField,
    current_settings,
)

if TYPE_CHECKING:
    from .error import AnnotatedError

# JSON key -> visibility group; keys not listed are always shown.
_FIELD_GROUPS: Final[dict[str, VisibilityField]] = {
    "code": VisibilityField.CODE,
    "category": VisibilityField.CATEGORY,
    "context": VisibilityField.CONTEXT,
    "retryable": VisibilityField.RETRY_METADATA,
    "retry_after": VisibilityField.RETRY_METADATA,
    "max_retries": VisibilityField.RETRY_METADATA,
    "http_status": VisibilityField.HTTP_STATUS,
    "mcp_code": VisibilityField.MCP_DATA,
    "correlation_id": VisibilityField.MCP_DATA,
    "request_id": VisibilityField.MCP_DATA,
    "user_id": VisibilityField.MCP_DATA,
    "session_id": VisibilityField.MCP_DATA,
    "help": VisibilityField.MCP_DATA,
    "suggestion": VisibilityField.MCP_DATA,
    "docs": VisibilityField.MCP_DATA,
    "tags": VisibilityField.TAGS,
    "labels": VisibilityField.LABELS,
    "timestamp": VisibilityField.TIMESTAMPS,
    "duration": VisibilityField.TIMESTAMPS,
}
_STRUCTURAL_KEYS: Final[frozenset[str]] = frozenset({"error", "caller", "stack", "wrapped"})

_NANOS_PER_SECOND: Final[int] = 1_000_000_000
_SUBSECOND_UNITS: Final[tuple[tuple[str, int], ...]] = (
    ("ms", 1_000_000),
    ("µs", 1_000),
    ("ns", 1),
)


def format_duration(value: timedelta) -> str:
    """Format a duration the way Go's ``time.Duration`` prints, e.g. ``1m30s``."""
    nanos = (
        (value.days * 86_400 + value.seconds) * 1_000_000 + value.microseconds
    ) * 1_000
    if nanos == 0:
        return "0s"
    sign = "-" if nanos < 0 else ""
    nanos = abs(nanos)

    if nanos < _NANOS_PER_SECOND:
        for unit, size in _SUBSECOND_UNITS:
            if nanos >= size:
                return f"{sign}{_decimal(nanos, size)}{unit}"

    hours, remainder = divmod(nanos, 3600 * _NANOS_PER_SECOND)
    minutes, remainder = divmod(remainder, 60 * _NANOS_PER_SECOND)
    text = f"{_decimal(remainder, _NANOS_PER_SECOND)}s"
    if hours or minutes:
        text = f"{minutes}m{text}"
    if hours:
        text = f"{hours}h{text}"
    return sign + text


def _decimal(value: int, unit: int) -> str:
    """Return ``value / unit`` as a decimal string without trailing zeros."""
    whole, fraction = divmod(value, unit)
    if not fraction:
        return str(whole)
    digits = len(str(unit)) - 1
    return f"{whole}.{str(fraction).rjust(digits, '0').rstrip('0')}"


def format_timestamp(value: datetime) -> str:
    """Format as RFC3339 with second precision; naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    text = value.replace(microsecond=0).isoformat()
    if text.endswith("+00:00"):
        return text[: -len("+00:00")] + "Z"
    return text


def to_dict(error: AnnotatedError, settings: ErrorSettings | None = None) -> dict[str, Any]:
    """Return the JSON-ready representation of ``error``.

    Empty and zero fields are omitted. With ``settings``, metadata hidden by
    the visibility flags is dropped and ``caller`` follows the caller position.
    """
    details = error.details
    payload: dict[str, Any] = {"error": error.message}
    if details.code:
        payload["code"] = details.code
    if details.category:
        payload["category"] = details.category
    if error.caller:
        payload["caller"] = error.caller
    if details.context:
        payload["context"] = {str(key): value for key, value in details.context.items()}
    if details.retryable:
        payload["retryable"] = True
    if details.retry_after > timedelta(0):
        payload["retry_after"] = format_duration(details.retry_after)
    if details.max_retries:
        payload["max_retries"] = details.max_retries
    if details.http_status:
        payload["http_status"] = details.http_status
    if details.mcp_code:
        payload["mcp_code"] = details.mcp_code
    if error.stack:
        payload["stack"] = list(error.stack)
    if error.errors:
        payload["wrapped"] = [str(item) for item in error.errors]
    for key, value in (
        ("correlation_id", details.correlation_id),
        ("request_id", details.request_id),
        ("user_id", details.user_id),
        ("session_id", details.session_id),
        ("help", details.help),
        ("suggestion", details.suggestion),
        ("docs", details.docs_url),
    ):
        if value:
            payload[key] = value
    if details.tags:
        payload["tags"] = list(details.tags)
    if details.labels:
        payload["labels"] = {str(key): value for key, value in details.labels.items()}
    if details.timestamp is not None:
        payload["timestamp"] = format_timestamp(details.timestamp)
    if details.duration > timedelta(0):
        payload["duration"] = format_duration(details.duration)

    if settings is None:
        return payload
    if settings.caller is CallerPosition.DISABLED:
        payload.pop("caller", None)
    return {
        key: value
        for key, value in payload.items()
        if key not in _FIELD_GROUPS or settings.shows(_FIELD_GROUPS[key])
    }


def to_json(error: AnnotatedError, *, indent: int | None = None) -> str:
    """Serialize every populated field of ``error`` as JSON."""
    return _dumps(to_dict(error), indent=indent)


def render(error: AnnotatedError, settings: ErrorSettings | None = None) -> str:
    """Render ``error`` as text using the active (or given) settings."""
    resolved = settings or current_settings()
    fmt = resolved.output_format
    if fmt is OutputFormat.JSON:
        return _dumps(to_dict(error, resolved))
    if fmt is OutputFormat.JSON_PRETTY:
        return _dumps(to_dict(error, resolved), indent=2)
    if fmt is OutputFormat.COMPACT:
        return _render_compact(error, resolved)
    return _render_pretty(error, resolved)


def _dumps(payload: dict[str, Any], indent: int | None = None) -> str:
    """Serialize ``payload``, stringifying values JSON cannot encode."""
    if indent is None:
        return json.dumps(payload, default=str, ensure_ascii=False, separators=(",", ":"))
    return json.dumps(payload, default=str, ensure_ascii=False, indent=indent)


def _headline(error: AnnotatedError, settings: ErrorSettings) -> str:
    """Primary message with caller placed per the caller position."""
    if not error.caller or settings.caller is CallerPosition.DISABLED:
        return error.message
    if settings.caller is CallerPosition.PREFIX:
        return f"[{error.caller}] {error.message}"
    return f"{error.message} [{error.caller}]"


def _metadata(error: AnnotatedError, settings: ErrorSettings) -> dict[str, Any]:
    """Return visible metadata keys, without message, caller, stack and wrapped."""
    visible = to_dict(error, settings)
    return {key: value for key, value in visible.items() if key not in _STRUCTURAL_KEYS}


def _render_pretty(error: AnnotatedError, settings: ErrorSettings) -> str:
    """Render headline, auxiliary errors and stack."""
    text = _headline(error, settings)
    separator = f" {INLINE_GLYPH} " if settings.layout is Layout.INLINE else "\n"
    for item in error.errors:
        text = f"{text}{separator}{item}"

    if error.stack:
        stack_text = "".join(f"\n  {frame}" for frame in error.stack)
        text = text.replace(stack_text, "") + stack_text
    return text


def _render_compact(error: AnnotatedError, settings: ErrorSettings) -> str:
    """Render one line of headline, auxiliaries and ``key=value`` pairs."""
    parts = [_headline(error, settings)]
    for item in error.errors:
        parts.append(f"{INLINE_GLYPH} {' '.join(str(item).split())}")

    for key, value in _metadata(error, settings).items():
        if key == "context":
            parts.extend(
                f"{name}={_compact_value(value[name])}" for name in sorted(value)
            )
        elif key == "labels":
            parts.extend(
                f"label.{name}={_compact_value(value[name])}" for name in sorted(value)
            )
        elif key == "tags":
            parts.append(f"tags={_compact_value(','.join(value))}")
        else:
            parts.append(f"{key}={_compact_value(value)}")
    return " ".join(parts)


def _compact_value(value: Any) -> str:
    """Format one compact value, JSON-quoting text that needs it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    text = str(value)
    if not text or any(char.isspace() or char in '="' for char in text):
        return json.dumps(text, ensure_ascii=False)
    return text
