"""Public API for annotated Brain errors.

Integrations live in submodules: ``packages.brain_errors.logfields`` for
structured logging and ``packages.brain_errors.otel`` for OpenTelemetry spans.
"""

from . import codes
from .accessors import (
    get_caller,
    get_category,
    get_code,
    get_context,
    get_correlation_id,
    get_docs,
    get_duration,
    get_help,
    get_http_status,
    get_label,
    get_labels,
    get_max_retries,
    get_mcp_code,
    get_request_id,
    get_retry_after,
    get_session_id,
    get_stack,
    get_suggestion,
    get_tags,
    get_timestamp,
    get_user_id,
    is_retryable,
)
from .callers import CallFrame, capture, use_frame_resolver
from .chain import as_error, is_error, unwrap, walk
from .error import AnnotatedError
from .formatted import FormattedError
from .render import format_duration, format_timestamp, render, to_dict, to_json
from .sentinel import Sentinel
from .settings import (
    HIDE_CATEGORY,
    HIDE_CODE,
    HIDE_CONTEXT,
    HIDE_HTTP_STATUS,
    HIDE_LABELS,
    HIDE_MCP_DATA,
    HIDE_RETRY_METADATA,
    HIDE_TAGS,
    HIDE_TIMESTAMPS,
    SHOW_CATEGORY,
    SHOW_CODE,
    SHOW_CONTEXT,
    SHOW_HTTP_STATUS,
    SHOW_LABELS,
    SHOW_MCP_DATA,
    SHOW_RETRY_METADATA,
    SHOW_TAGS,
    SHOW_TIMESTAMPS,
    TRIM_CWD,
    WITH_STACK,
    CallerPosition,
    ErrorSettings,
    FieldVisibility,
    Layout,
    OutputFormat,
    Verbosity,
    VisibilityField,
    configure,
    configured,
    current_settings,
    trim_prefixes,
)
from .types import Category, ErrorDetails, InvalidErrorMetadata
from .wire import WireError, to_wire_error

__all__ = [
    "AnnotatedError",
    "CallFrame",
    "CallerPosition",
    "Category",
    "ErrorDetails",
    "ErrorSettings",
    "FieldVisibility",
    "FormattedError",
    "HIDE_CATEGORY",
    "HIDE_CODE",
    "HIDE_CONTEXT",
    "HIDE_HTTP_STATUS",
    "HIDE_LABELS",
    "HIDE_MCP_DATA",
    "HIDE_RETRY_METADATA",
    "HIDE_TAGS",
    "HIDE_TIMESTAMPS",
    "InvalidErrorMetadata",
    "Layout",
    "OutputFormat",
    "SHOW_CATEGORY",
    "SHOW_CODE",
    "SHOW_CONTEXT",
    "SHOW_HTTP_STATUS",
    "SHOW_LABELS",
    "SHOW_MCP_DATA",
    "SHOW_RETRY_METADATA",
    "SHOW_TAGS",
    "SHOW_TIMESTAMPS",
    "Sentinel",
    "TRIM_CWD",
    "Verbosity",
    "VisibilityField",
    "WITH_STACK",
    "WireError",
    "as_error",
    "capture",
    "codes",
    "configure",
    "configured",
    "current_settings",
    "format_duration",
    "format_timestamp",
    "get_caller",
    "get_category",
    "get_code",
    "get_context",
    "get_correlation_id",
    "get_docs",
    "get_duration",
    "get_help",
    "get_http_status",
    "get_label",
    "get_labels",
    "get_max_retries",
    "get_mcp_code",
    "get_request_id",
    "get_retry_after",
    "get_session_id",
    "get_stack",
    "get_suggestion",
    "get_tags",
    "get_timestamp",
    "get_user_id",
    "is_error",
    "is_retryable",
    "render",
    "to_dict",
    "to_json",
    "to_wire_error",
    "trim_prefixes",
    "unwrap",
    "use_frame_resolver",
    "walk",
]
