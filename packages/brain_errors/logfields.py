"""Structured-log projection of annotated errors.

Field names follow the dotted attribute conventions used by log/trace
backends, so an error logged here and an error recorded on a span carry the
same keys.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any, Final

from . import accessors
from .render import format_duration

TIMESTAMP: Final = "timestamp"
LEVEL: Final = "level"
LOGGER: Final = "logger"
MESSAGE: Final = "message"

ERROR_MESSAGE: Final = "error.message"
ERROR_KIND: Final = "error.kind"
ERROR_CODE: Final = "error.code"
ERROR_CATEGORY: Final = "error.category"
ERROR_STACK: Final = "error.stack"
ERROR_RETRYABLE: Final = "error.retryable"
ERROR_RETRY_AFTER: Final = "error.retry_after"
ERROR_MAX_RETRIES: Final = "error.max_retries"
ERROR_TAGS: Final = "error.tags"

CORRELATION_ID: Final = "correlation.id"
REQUEST_ID: Final = "request.id"
USER_ID: Final = "user.id"
SESSION_ID: Final = "session.id"
HTTP_STATUS_CODE: Final = "http.status_code"

LABELS: Final = "labels"
CONTEXT: Final = "context"
CALLER: Final = "caller"

# LogRecord attribute carrying the projected fields.
RECORD_ATTRIBUTE: Final = "error_fields"


def to_log_fields(error: BaseException | None) -> dict[str, Any]:
    """Return populated log fields for ``error``; ``{}`` for ``None``.

    Retry delay and budget are only included for retryable errors.
    """
    if error is None:
        return {}

    fields: dict[str, Any] = {ERROR_MESSAGE: str(error)}
    if code := accessors.get_code(error):
        fields[ERROR_CODE] = code
        fields[ERROR_KIND] = code
    else:
        fields[ERROR_KIND] = type(error).__name__
    if category := accessors.get_category(error):
        fields[ERROR_CATEGORY] = category
    if stack := accessors.get_stack(error):
        fields[ERROR_STACK] = "\n".join(stack)

    for key, value in (
        (CORRELATION_ID, accessors.get_correlation_id(error)),
        (REQUEST_ID, accessors.get_request_id(error)),
        (USER_ID, accessors.get_user_id(error)),
        (SESSION_ID, accessors.get_session_id(error)),
    ):
        if value:
            fields[key] = value

    if status := accessors.get_http_status(error):
        fields[HTTP_STATUS_CODE] = status

    if accessors.is_retryable(error):
        fields[ERROR_RETRYABLE] = True
        retry_after = accessors.get_retry_after(error)
        if retry_after:
            fields[ERROR_RETRY_AFTER] = format_duration(retry_after)
        if max_retries := accessors.get_max_retries(error):
            fields[ERROR_MAX_RETRIES] = max_retries

    if tags := accessors.get_tags(error):
        fields[ERROR_TAGS] = tags
    if labels := accessors.get_labels(error):
        fields[LABELS] = labels
    if context := accessors.get_context(error):
        fields[CONTEXT] = {str(key): value for key, value in context.items()}
    if caller := accessors.get_caller(error):
        fields[CALLER] = caller
    return fields


class ErrorJsonFormatter(logging.Formatter):
    """Emit newline-delimited JSON logs including annotated error fields.

    Fields come from ``record.error_fields`` when set by ``log_error``,
    otherwise from the exception in ``record.exc_info``.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format ``record`` as one JSON line."""
        payload: dict[str, Any] = {
            TIMESTAMP: datetime.now(UTC).isoformat(),
            LEVEL: record.levelname,
            LOGGER: record.name,
            MESSAGE: record.getMessage(),
        }

        error_fields = getattr(record, RECORD_ATTRIBUTE, None)
        if not isinstance(error_fields, dict) and record.exc_info:
            error_fields = to_log_fields(record.exc_info[1])
        if isinstance(error_fields, dict):
            payload.update(error_fields)

        return json.dumps(payload, default=str, separators=(",", ":"))


def log_error(
    logger: logging.Logger,
    error: BaseException,
    message: str | None = None,
    *,
    level: int = logging.ERROR,
) -> None:
    """Log ``error`` with its structured fields attached to the record."""
    fields = to_log_fields(error)
    text = message or (str(error).splitlines() or [type(error).__name__])[0]
    logger.log(level, text, extra={RECORD_ATTRIBUTE: fields})
