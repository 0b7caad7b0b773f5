"""Canonical value types shared by the annotated error model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class Category(str, Enum):
    """High-level error categories used for automated handling."""

    CLIENT = "client"
    SERVER = "server"
    NETWORK = "network"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    TIMEOUT = "timeout"


class InvalidErrorMetadata(ValueError):
    """Raised when a metadata setter receives an out-of-range value.

    This signals a coding mistake at the call site, not a runtime condition,
    so callers are not expected to catch it.
    """


def frozen_mapping(values: Mapping[str, Any] | None = None) -> Mapping[str, Any]:
    """Return a read-only view over a private copy of ``values``."""
    return MappingProxyType(dict(values or {}))


@dataclass(frozen=True, slots=True)
class ErrorDetails:
    """Metadata carried by an annotated error.

    Zero values mean "unset" and are omitted from every rendering.
    """

    code: str = ""
    category: str = ""
    context: Mapping[str, Any] = field(default_factory=frozen_mapping)
    retryable: bool = False
    retry_after: timedelta = timedelta(0)
    max_retries: int = 0
    http_status: int = 0
    mcp_code: int = 0
    correlation_id: str = ""
    request_id: str = ""
    user_id: str = ""
    session_id: str = ""
    help: str = ""
    suggestion: str = ""
    docs_url: str = ""
    tags: tuple[str, ...] = ()
    labels: Mapping[str, str] = field(default_factory=frozen_mapping)
    timestamp: datetime | None = None
    duration: timedelta = timedelta(0)
