"""Immutable annotated error values.

``AnnotatedError`` instances are never modified after construction: every
``with_*`` call, ``withf``, ``wrapf`` and ``join`` returns a new instance that
shares no mutable state with the receiver, so one value can be read from any
number of threads.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Mapping, Sequence

from . import codes
from .formatted import FormattedError
from .render import render, to_dict, to_json
from .types import Category, ErrorDetails, InvalidErrorMetadata, frozen_mapping

if TYPE_CHECKING:
    from .wire import WireError


def as_timedelta(value: timedelta | float | int) -> timedelta:
    """Accept a ``timedelta`` or a number of seconds."""
    if isinstance(value, timedelta):
        return value
    return timedelta(seconds=value)


def validate_http_status(status: int) -> int:
    """Return ``status`` or raise for values outside 0 and 100-599."""
    if status != 0 and not codes.HTTP_STATUS_MIN <= status <= codes.HTTP_STATUS_MAX:
        raise InvalidErrorMetadata(
            f"invalid HTTP status code {status}: must be 0 (unset) or in range "
            f"{codes.HTTP_STATUS_MIN}-{codes.HTTP_STATUS_MAX}"
        )
    return status


def validate_mcp_code(code: int) -> int:
    """Return ``code`` or raise for values outside the JSON-RPC 2.0 ranges."""
    if (
        code == 0
        or code in codes.MCP_STANDARD_CODES
        or codes.MCP_RESERVED_MIN <= code <= codes.MCP_RESERVED_MAX
    ):
        return code
    raise InvalidErrorMetadata(
        f"invalid MCP code {code}: must be 0 (unset), a standard JSON-RPC 2.0 "
        f"code ({', '.join(str(c) for c in sorted(codes.MCP_STANDARD_CODES))}) "
        f"or in the reserved range {codes.MCP_RESERVED_MIN} to {codes.MCP_RESERVED_MAX}"
    )


class AnnotatedError(Exception):
    """An error annotated with caller information and structured metadata.

    ``primary`` renders first, followed by each auxiliary error in ``errors``.
    Errors in ``silent`` take part in matching but are never rendered.
    """

    def __init__(
        self,
        primary: BaseException | str,
        *,
        errors: Sequence[BaseException] = (),
        silent: Sequence[BaseException] = (),
        caller: str = "",
        stack: Sequence[str] = (),
        details: ErrorDetails | None = None,
    ) -> None:
        if not isinstance(primary, BaseException):
            primary = FormattedError(str(primary))
        super().__init__(str(primary))
        self._primary = primary
        self._errors = tuple(errors)
        self._silent = tuple(silent)
        self._caller = caller
        self._stack = tuple(stack)
        self._details = details or ErrorDetails()

    @property
    def primary(self) -> BaseException:
        """Return the error rendered first."""
        return self._primary

    @property
    def message(self) -> str:
        """Text of the primary error without caller or metadata."""
        return str(self._primary)

    @property
    def errors(self) -> tuple[BaseException, ...]:
        """Return the auxiliary errors rendered after the primary."""
        return self._errors

    @property
    def silent(self) -> tuple[BaseException, ...]:
        """Return errors that match but are never rendered."""
        return self._silent

    @property
    def caller(self) -> str:
        """Return the ``file:line.function`` captured at construction."""
        return self._caller

    @property
    def stack(self) -> tuple[str, ...]:
        """Return the frames captured at construction."""
        return self._stack

    @property
    def details(self) -> ErrorDetails:
        """Return the structured metadata."""
        return self._details

    def unwrap(self) -> list[BaseException]:
        """Return primary, auxiliary and silent errors, in that order."""
        return [self._primary, *self._errors, *self._silent]

    def __str__(self) -> str:
        """Render using the active settings."""
        return render(self)

    def __repr__(self) -> str:
        """Return a debugging representation."""
        return f"{type(self).__name__}({self.message!r}, caller={self._caller!r})"

    def _evolve(self, **changes: Any) -> AnnotatedError:
        """Return a copy with structural fields or metadata replaced."""
        detail_changes = {
            key: changes.pop(key)
            for key in list(changes)
            if key not in {"primary", "errors", "silent", "caller", "stack"}
        }
        return type(self)(
            changes.get("primary", self._primary),
            errors=changes.get("errors", self._errors),
            silent=changes.get("silent", self._silent),
            caller=changes.get("caller", self._caller),
            stack=changes.get("stack", self._stack),
            details=replace(self._details, **detail_changes),
        )

    # Message composition

    def withf(self, template: str, *args: Any) -> AnnotatedError:
        """Append ``": <template % args>"`` to the primary message.

        The previous primary keeps matching through the silent list.
        """
        detail = FormattedError.from_format(template, args)
        primary = FormattedError(f"{self.message}: {detail}", wrapped=detail.unwrap())
        return self._evolve(primary=primary, silent=(*self._silent, self._primary))

    def wrapf(self, template: str, *args: Any) -> AnnotatedError:
        """Add one formatted auxiliary error."""
        formatted = FormattedError.from_format(template, args)
        return self._evolve(errors=(*self._errors, formatted))

    def join(self, *errors: BaseException | None) -> AnnotatedError:
        """Add ``errors`` to the rendered auxiliary list."""
        extra = tuple(err for err in errors if err is not None)
        return self._evolve(errors=(*self._errors, *extra))

    # Metadata

    def with_context(self, context: Mapping[str, Any] | None) -> AnnotatedError:
        """Merge ``context`` into the structured context."""
        merged = {**self._details.context, **(context or {})}
        return self._evolve(context=frozen_mapping(merged))

    def with_code(self, code: str) -> AnnotatedError:
        """Set the machine-readable error code; empty strings are ignored."""
        if not code:
            return self._evolve()
        return self._evolve(code=code)

    def with_category(self, category: Category | str) -> AnnotatedError:
        """Set the error category; empty values are ignored."""
        value = category.value if isinstance(category, Category) else str(category or "")
        if not value:
            return self._evolve()
        return self._evolve(category=value)

    def with_retryable(self, retryable: bool) -> AnnotatedError:
        """Mark whether retrying the operation may succeed."""
        return self._evolve(retryable=bool(retryable))

    def with_retry_after(self, delay: timedelta | float | int) -> AnnotatedError:
        """Set the suggested retry delay; negative delays become zero."""
        value = as_timedelta(delay)
        return self._evolve(retry_after=max(value, timedelta(0)))

    def with_max_retries(self, max_retries: int) -> AnnotatedError:
        """Set the retry budget; negative counts become zero."""
        return self._evolve(max_retries=max(int(max_retries), 0))

    def with_http_status(self, status: int) -> AnnotatedError:
        """Set the HTTP status.

        Raises:
            InvalidErrorMetadata: status is neither 0 nor within 100-599.
        """
        return self._evolve(http_status=validate_http_status(status))

    def with_mcp_code(self, code: int) -> AnnotatedError:
        """Set the JSON-RPC 2.0 error code used by ``to_wire_error``.

        Raises:
            InvalidErrorMetadata: code is outside the JSON-RPC 2.0 ranges.
        """
        return self._evolve(mcp_code=validate_mcp_code(code))

    def with_correlation_id(self, correlation_id: str) -> AnnotatedError:
        """Set the correlation ID; empty strings are ignored."""
        return self._set_text("correlation_id", correlation_id)

    def with_request_id(self, request_id: str) -> AnnotatedError:
        """Set the request ID; empty strings are ignored."""
        return self._set_text("request_id", request_id)

    def with_user_id(self, user_id: str) -> AnnotatedError:
        """Set the user ID; empty strings are ignored."""
        return self._set_text("user_id", user_id)

    def with_session_id(self, session_id: str) -> AnnotatedError:
        """Set the session ID; empty strings are ignored."""
        return self._set_text("session_id", session_id)

    def with_help(self, text: str) -> AnnotatedError:
        """Attach recovery guidance for the reader of the error."""
        return self._set_text("help", text)

    def with_suggestion(self, text: str) -> AnnotatedError:
        """Attach a suggested next action."""
        return self._set_text("suggestion", text)

    def with_docs(self, url: str) -> AnnotatedError:
        """Attach a documentation URL."""
        return self._set_text("docs_url", url)

    def with_tags(self, *tags: str) -> AnnotatedError:
        """Append semantic tags; duplicates are kept."""
        return self._evolve(tags=(*self._details.tags, *tags))

    def with_labels(self, labels: Mapping[str, str] | None) -> AnnotatedError:
        """Merge ``labels`` into the existing labels, last write wins."""
        merged = {**self._details.labels, **(labels or {})}
        return self._evolve(labels=frozen_mapping(merged))

    def with_label(self, key: str, value: str) -> AnnotatedError:
        """Set one label, replacing any previous value."""
        return self.with_labels({key: value})

    def with_timestamp(self, timestamp: datetime | None) -> AnnotatedError:
        """Record when the error occurred; ``None`` leaves it unset."""
        if timestamp is None:
            return self._evolve()
        return self._evolve(timestamp=timestamp)

    def with_duration(self, duration: timedelta | float | int) -> AnnotatedError:
        """Record how long the operation ran; negative values are kept."""
        return self._evolve(duration=as_timedelta(duration))

    def _set_text(self, name: str, value: str) -> AnnotatedError:
        """Set one string metadata field unless ``value`` is empty."""
        if not value:
            return self._evolve()
        return self._evolve(**{name: value})

    # Serialization

    def to_dict(self) -> dict[str, Any]:
        """Return the unfiltered JSON-ready representation."""
        return to_dict(self)

    def to_json(self) -> str:
        """Return the unfiltered compact JSON representation."""
        return to_json(self)

    def to_wire_error(self) -> WireError:
        """Project onto the JSON-RPC 2.0 ``{code, message, data}`` shape."""
        from .wire import to_wire_error

        return to_wire_error(self)

