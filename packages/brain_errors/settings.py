"""Process-wide rendering configuration for annotated errors.

There is exactly one active ``ErrorSettings`` snapshot per process. Every call
to ``configure`` rebuilds it from the built-in defaults, so callers wanting a
partial change must pass every option they still want. Snapshots are immutable;
readers copy the reference under the lock and never hold it while formatting.

Caller position and layout are read whenever an error is rendered. Stack
capture and path trimming are read when an error is constructed.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from threading import Lock
from typing import Any, Final, Iterator

from pydantic import BaseModel, ConfigDict

_LOGGER = logging.getLogger(__name__)


class CallerPosition(str, Enum):
    """Where caller information is placed relative to the message."""

    SUFFIX = "suffix"
    PREFIX = "prefix"
    DISABLED = "disabled"


class Layout(str, Enum):
    """How auxiliary errors are joined to the primary message."""

    NEWLINE = "newline"
    INLINE = "inline"


class OutputFormat(str, Enum):
    """String output produced by ``str(error)``."""

    PRETTY = "pretty"
    JSON = "json"
    JSON_PRETTY = "json_pretty"
    COMPACT = "compact"


class Verbosity(str, Enum):
    """Preset field-visibility levels."""

    MINIMAL = "minimal"
    STANDARD = "standard"
    FULL = "full"
    CUSTOM = "custom"


class VisibilityField(str, Enum):
    """Metadata groups whose visibility can be toggled one by one."""

    CODE = "code"
    CATEGORY = "category"
    CONTEXT = "context"
    HTTP_STATUS = "http_status"
    RETRY_METADATA = "retry_metadata"
    MCP_DATA = "mcp_data"
    TAGS = "tags"
    LABELS = "labels"
    TIMESTAMPS = "timestamps"


@dataclass(frozen=True, slots=True)
class StackTraces:
    """Option enabling stack capture for errors built afterwards."""

    enabled: bool = True


@dataclass(frozen=True, slots=True)
class TrimPrefixes:
    """Option listing path prefixes removed from captured file names."""

    prefixes: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class TrimCwd:
    """Option trimming the current working directory from file names."""

    enabled: bool = True


@dataclass(frozen=True, slots=True)
class FieldVisibility:
    """Option showing or hiding one metadata group."""

    field: VisibilityField
    show: bool


WITH_STACK: Final[StackTraces] = StackTraces()
TRIM_CWD: Final[TrimCwd] = TrimCwd()

SHOW_CODE: Final = FieldVisibility(VisibilityField.CODE, True)
HIDE_CODE: Final = FieldVisibility(VisibilityField.CODE, False)
SHOW_CATEGORY: Final = FieldVisibility(VisibilityField.CATEGORY, True)
HIDE_CATEGORY: Final = FieldVisibility(VisibilityField.CATEGORY, False)
SHOW_CONTEXT: Final = FieldVisibility(VisibilityField.CONTEXT, True)
HIDE_CONTEXT: Final = FieldVisibility(VisibilityField.CONTEXT, False)
SHOW_HTTP_STATUS: Final = FieldVisibility(VisibilityField.HTTP_STATUS, True)
HIDE_HTTP_STATUS: Final = FieldVisibility(VisibilityField.HTTP_STATUS, False)
SHOW_RETRY_METADATA: Final = FieldVisibility(VisibilityField.RETRY_METADATA, True)
HIDE_RETRY_METADATA: Final = FieldVisibility(VisibilityField.RETRY_METADATA, False)
SHOW_MCP_DATA: Final = FieldVisibility(VisibilityField.MCP_DATA, True)
HIDE_MCP_DATA: Final = FieldVisibility(VisibilityField.MCP_DATA, False)
SHOW_TAGS: Final = FieldVisibility(VisibilityField.TAGS, True)
HIDE_TAGS: Final = FieldVisibility(VisibilityField.TAGS, False)
SHOW_LABELS: Final = FieldVisibility(VisibilityField.LABELS, True)
HIDE_LABELS: Final = FieldVisibility(VisibilityField.LABELS, False)
SHOW_TIMESTAMPS: Final = FieldVisibility(VisibilityField.TIMESTAMPS, True)
HIDE_TIMESTAMPS: Final = FieldVisibility(VisibilityField.TIMESTAMPS, False)


def trim_prefixes(*prefixes: str) -> TrimPrefixes:
    """Build a ``TrimPrefixes`` option from positional prefixes."""
    return TrimPrefixes(prefixes=tuple(prefixes))


class ErrorSettings(BaseModel):
    """Immutable snapshot of the active rendering configuration."""

    model_config = ConfigDict(frozen=True)

    caller: CallerPosition = CallerPosition.SUFFIX
    layout: Layout = Layout.NEWLINE
    with_stack: bool = False
    trim_prefixes: tuple[str, ...] = ()
    trim_cwd: bool = False
    output_format: OutputFormat = OutputFormat.PRETTY
    verbosity: Verbosity = Verbosity.FULL

    show_code: bool = True
    show_category: bool = True
    show_context: bool = True
    show_http_status: bool = True
    show_retry_metadata: bool = True
    show_mcp_data: bool = True
    show_tags: bool = True
    show_labels: bool = True
    show_timestamps: bool = True

    def shows(self, group: VisibilityField) -> bool:
        """Return whether the metadata group is visible in rendered output."""
        return bool(getattr(self, f"show_{group.value}"))


_VERBOSITY_PRESETS: Final[dict[Verbosity, frozenset[VisibilityField]]] = {
    Verbosity.MINIMAL: frozenset(),
    Verbosity.STANDARD: frozenset(
        {VisibilityField.CODE, VisibilityField.CATEGORY, VisibilityField.CONTEXT}
    ),
    Verbosity.FULL: frozenset(VisibilityField),
}

_LOCK = Lock()
_SETTINGS = ErrorSettings()


def current_settings() -> ErrorSettings:
    """Return the active configuration snapshot."""
    with _LOCK:
        return _SETTINGS


def configure(*options: object) -> ErrorSettings:
    """Replace the process configuration with defaults plus ``options``.

    Options are applied in order, so a later verbosity preset overrides
    earlier visibility toggles and vice versa. Returns the new snapshot.
    """
    global _SETTINGS

    values = _build_values(options)
    settings = ErrorSettings(**values)
    with _LOCK:
        _SETTINGS = settings
    _LOGGER.debug(
        "error rendering configured",
        extra={
            "context": {
                "caller": settings.caller.value,
                "layout": settings.layout.value,
                "output_format": settings.output_format.value,
                "verbosity": settings.verbosity.value,
                "with_stack": settings.with_stack,
            }
        },
    )
    return settings


@contextmanager
def configured(*options: object) -> Iterator[ErrorSettings]:
    """Temporarily apply a configuration, restoring the previous one on exit."""
    global _SETTINGS

    with _LOCK:
        previous = _SETTINGS
    try:
        yield configure(*options)
    finally:
        with _LOCK:
            _SETTINGS = previous


def _build_values(options: tuple[object, ...]) -> dict[str, Any]:
    """Fold options over the default field values."""
    values = ErrorSettings().model_dump()
    for option in options:
        if isinstance(option, CallerPosition):
            values["caller"] = option
        elif isinstance(option, Layout):
            values["layout"] = option
        elif isinstance(option, OutputFormat):
            values["output_format"] = option
        elif isinstance(option, Verbosity):
            values["verbosity"] = option
            preset = _VERBOSITY_PRESETS.get(option)
            if preset is not None:
                for group in VisibilityField:
                    values[f"show_{group.value}"] = group in preset
        elif isinstance(option, FieldVisibility):
            values["verbosity"] = Verbosity.CUSTOM
            values[f"show_{option.field.value}"] = option.show
        elif isinstance(option, StackTraces):
            values["with_stack"] = option.enabled
        elif isinstance(option, TrimPrefixes):
            values["trim_prefixes"] = tuple(option.prefixes)
        elif isinstance(option, TrimCwd):
            values["trim_cwd"] = option.enabled
        else:
            _LOGGER.warning(
                "ignoring unknown error configuration option",
                extra={"context": {"option_type": type(option).__name__}},
            )

    if values["trim_cwd"]:
        try:
            cwd = os.getcwd()
        except OSError as exc:
            _LOGGER.warning(
                "working directory unavailable; cwd trimming disabled",
                extra={"context": {"errors": [f"{type(exc).__name__}: {exc}"]}},
            )
            values["trim_cwd"] = False
        else:
            values["trim_prefixes"] = (
                cwd.rstrip(os.sep) + os.sep,
                *values["trim_prefixes"],
            )
    return values
