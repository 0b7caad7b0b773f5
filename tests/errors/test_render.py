"""Unit tests for text, compact and JSON rendering."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta, timezone
from typing import Iterator

import pytest

from packages.brain_errors import (
    HIDE_CODE,
    HIDE_RETRY_METADATA,
    SHOW_HTTP_STATUS,
    WITH_STACK,
    AnnotatedError,
    CallerPosition,
    CallFrame,
    Category,
    Layout,
    OutputFormat,
    Sentinel,
    Verbosity,
    configure,
    format_duration,
    format_timestamp,
    render,
    to_dict,
    trim_prefixes,
    use_frame_resolver,
)

ErrTest = Sentinel("test")
ErrRoot = Sentinel("root error")
ErrTop = Sentinel("top error")

_CALLER = "handlers/user.py:42.get_user"
_FRAMES = [
    CallFrame("/srv/app/handlers/user.py", 42, "get_user"),
    CallFrame("/srv/app/service.py", 17, "dispatch"),
    CallFrame("/srv/app/main.py", 10, "main"),
]


def _fixed_frames(depth: int) -> list[CallFrame]:
    del depth
    return list(_FRAMES)


def _no_frames(depth: int) -> list[CallFrame]:
    del depth
    return []


@pytest.fixture
def app_frames() -> Iterator[None]:
    """Build errors against fixed frames with the app root trimmed."""
    configure(trim_prefixes("/srv/app/"))
    with use_frame_resolver(_fixed_frames):
        yield


@pytest.fixture
def no_caller() -> Iterator[None]:
    with use_frame_resolver(_no_frames):
        yield


def _populated() -> AnnotatedError:
    return (
        ErrTest.new()
        .with_code("C")
        .with_category(Category.TIMEOUT)
        .with_retryable(True)
        .with_retry_after(30)
        .with_max_retries(3)
        .with_http_status(503)
        .with_mcp_code(-32000)
        .with_correlation_id("corr")
        .with_tags("db", "slow")
        .with_labels({"env": "prod"})
        .with_timestamp(datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC))
        .with_duration(1.5)
    )


def test_caller_suffix_is_the_default(app_frames: None) -> None:
    assert str(ErrTest.new()) == f"test [{_CALLER}]"


def test_caller_position_is_read_at_render_time(app_frames: None) -> None:
    """Errors built before reconfiguring follow the new caller position."""
    err = ErrTest.new()

    configure(CallerPosition.PREFIX)
    assert str(err) == f"[{_CALLER}] test"

    configure(CallerPosition.DISABLED)
    assert str(err) == "test"


def test_empty_caller_renders_without_brackets(no_caller: None) -> None:
    assert str(ErrTest.new()) == "test"
    configure(CallerPosition.PREFIX)
    assert str(ErrTest.new()) == "test"


def test_auxiliary_errors_follow_layout(no_caller: None) -> None:
    err = ErrTest.new(ValueError("first"), ValueError("second"))

    assert str(err) == "test\nfirst\nsecond"
    configure(Layout.INLINE)
    assert str(err) == "test ↩ first ↩ second"


def test_nested_errors_render_their_own_callers(app_frames: None) -> None:
    root = ErrRoot.new()
    top = ErrTop.new(root)

    assert str(top) == f"top error [{_CALLER}]\nroot error [{_CALLER}]"


def test_pretty_output_leaves_metadata_out(no_caller: None) -> None:
    """Metadata belongs to the JSON and compact formats only."""
    err = (
        ErrTest.new()
        .with_code("USER_404")
        .with_category(Category.NOT_FOUND)
        .with_context({"user_id": "u-1"})
        .with_http_status(404)
    )

    assert str(err) == "test"
    assert str(_populated()) == "test"


def test_compact_output_lists_fields_in_order(no_caller: None) -> None:
    configure(OutputFormat.COMPACT)

    assert str(_populated()) == (
        "test code=C category=timeout retryable=true retry_after=30s "
        "max_retries=3 http_status=503 mcp_code=-32000 correlation_id=corr "
        "tags=db,slow label.env=prod timestamp=2024-01-02T03:04:05Z duration=1.5s"
    )


def test_minimal_verbosity_shows_only_the_message(no_caller: None) -> None:
    configure(OutputFormat.COMPACT, Verbosity.MINIMAL)
    assert str(_populated()) == "test"

    configure(OutputFormat.JSON, Verbosity.MINIMAL)
    assert json.loads(str(_populated())) == {"error": "test"}


def test_standard_verbosity_keeps_code_category_and_context(no_caller: None) -> None:
    configure(OutputFormat.COMPACT, Verbosity.STANDARD)
    err = _populated().with_context({"k": "v"})

    assert str(err) == "test code=C category=timeout k=v"


def test_individual_toggles_change_visible_groups(no_caller: None) -> None:
    configure(OutputFormat.COMPACT, Verbosity.MINIMAL, SHOW_HTTP_STATUS)
    assert str(_populated()) == "test http_status=503"

    configure(OutputFormat.COMPACT, HIDE_CODE, HIDE_RETRY_METADATA)
    rendered = str(_populated())
    assert "code=C" not in rendered
    assert "retryable" not in rendered
    assert "max_retries" not in rendered
    assert "category=timeout" in rendered


def test_json_output_contains_visible_fields(app_frames: None) -> None:
    err = ErrTest.new(ValueError("inner")).with_code("C").with_http_status(404)
    configure(OutputFormat.JSON)

    payload = json.loads(str(err))

    assert payload == {
        "error": "test",
        "code": "C",
        "caller": _CALLER,
        "http_status": 404,
        "wrapped": ["inner"],
    }
    assert list(payload) == ["error", "code", "caller", "http_status", "wrapped"]


def test_json_output_respects_caller_position_and_visibility(app_frames: None) -> None:
    err = ErrTest.new().with_code("C").with_request_id("req-1")
    configure(OutputFormat.JSON, CallerPosition.DISABLED, Verbosity.STANDARD)

    assert json.loads(str(err)) == {"error": "test", "code": "C"}


def test_json_pretty_output_is_indented(no_caller: None) -> None:
    configure(OutputFormat.JSON_PRETTY)

    assert str(ErrTest.new().with_code("C")) == '{\n  "error": "test",\n  "code": "C"\n}'


def test_compact_output_is_single_line_key_values(no_caller: None) -> None:
    configure(OutputFormat.COMPACT)
    err = (
        ErrTest.new()
        .with_code("USER_404")
        .with_user_id("user-123")
        .with_help("Check if user exists")
    )

    assert str(err) == 'test code=USER_404 user_id=user-123 help="Check if user exists"'


def test_compact_output_flattens_context_labels_and_tags(no_caller: None) -> None:
    configure(OutputFormat.COMPACT)
    err = (
        ErrTest.new(ValueError("line one\nline two"))
        .with_context({"b": 2, "a": "x y"})
        .with_labels({"env": "prod"})
        .with_tags("db", "slow")
        .with_retryable(True)
    )

    assert str(err) == (
        'test ↩ line one line two a="x y" b=2 retryable=true '
        "tags=db,slow label.env=prod"
    )


def test_stack_appears_once_at_the_end(app_frames: None) -> None:
    """A reused stack is deduplicated into a single trailing block."""
    configure(WITH_STACK, trim_prefixes("/srv/app/"))
    top = ErrTop.new(ErrRoot.new())

    assert str(top) == (
        f"top error [{_CALLER}]\n"
        f"root error [{_CALLER}]\n"
        "  service.py:17.dispatch\n"
        "  main.py:10.main"
    )


def test_stack_is_fixed_when_the_error_is_built(app_frames: None) -> None:
    """Stack capture follows construction-time settings only."""
    without_stack = ErrTest.new()
    configure(WITH_STACK)
    assert "main.py" not in str(without_stack)

    configure(WITH_STACK, trim_prefixes("/srv/app/"))
    with_stack = ErrTest.new()
    configure()
    assert str(with_stack).endswith("\n  service.py:17.dispatch\n  main.py:10.main")


@pytest.mark.parametrize("output_format", list(OutputFormat))
@pytest.mark.parametrize("verbosity", [Verbosity.MINIMAL, Verbosity.FULL])
def test_rendering_never_raises(
    app_frames: None, output_format: OutputFormat, verbosity: Verbosity
) -> None:
    empty = AnnotatedError("")
    full = (
        _populated()
        .with_context({"obj": object(), 1: "a", "b": 2, (3, 4): None})
        .join(ValueError("x"))
    )
    configure(output_format, verbosity, CallerPosition.PREFIX, Layout.INLINE)

    assert isinstance(str(empty), str)
    assert str(full)


def test_to_dict_omits_unset_fields(no_caller: None) -> None:
    assert ErrTest.new().to_dict() == {"error": "test"}


def test_to_dict_ignores_settings_unless_given(app_frames: None) -> None:
    err = ErrTest.new().with_code("C")
    configure(Verbosity.MINIMAL, CallerPosition.DISABLED)

    assert err.to_dict() == {"error": "test", "code": "C", "caller": _CALLER}
    assert to_dict(err, configure(Verbosity.MINIMAL, CallerPosition.DISABLED)) == {
        "error": "test"
    }


def test_to_dict_omits_zero_retry_delay_and_negative_duration(no_caller: None) -> None:
    """Only positive durations are serialized; the accessor keeps the sign."""
    err = ErrTest.new().with_retry_after(-1).with_duration(timedelta(seconds=-5))

    assert err.to_dict() == {"error": "test"}
    assert err.details.duration == timedelta(seconds=-5)


def test_mixed_context_keys_render_as_text(no_caller: None) -> None:
    err = ErrTest.new().with_context({1: "a", "b": 2})

    assert err.to_dict()["context"] == {"1": "a", "b": 2}
    configure(OutputFormat.COMPACT)
    assert str(err) == "test 1=a b=2"


def test_render_accepts_explicit_settings(app_frames: None) -> None:
    err = ErrTest.new()
    settings = configure(CallerPosition.PREFIX)
    configure()

    assert render(err, settings) == f"[{_CALLER}] test"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (timedelta(0), "0s"),
        (timedelta(seconds=1.5), "1.5s"),
        (timedelta(seconds=90), "1m30s"),
        (timedelta(hours=1), "1h0m0s"),
        (timedelta(microseconds=1500), "1.5ms"),
        (timedelta(microseconds=7), "7µs"),
        (timedelta(seconds=-5), "-5s"),
        (timedelta(days=1), "24h0m0s"),
    ],
)
def test_format_duration(value: timedelta, expected: str) -> None:
    assert format_duration(value) == expected


def test_format_timestamp_uses_rfc3339_seconds() -> None:
    assert format_timestamp(datetime(2024, 1, 2, 3, 4, 5, 999, tzinfo=UTC)) == "2024-01-02T03:04:05Z"
    assert format_timestamp(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05Z"
    offset = timezone(timedelta(hours=2))
    assert format_timestamp(datetime(2024, 1, 2, 3, 4, 5, tzinfo=offset)) == "2024-01-02T03:04:05+02:00"


def test_reconfiguring_moves_caller_but_never_adds_a_stack(app_frames: None) -> None:
    """Caller position resolves at render time, stack capture at build time."""
    err = ErrTest.new()

    configure(WITH_STACK, CallerPosition.PREFIX)

    assert str(err) == f"[{_CALLER}] test"
    assert err.stack == ()


def test_json_round_trip_keeps_set_fields_and_omits_unset_ones(no_caller: None) -> None:
    decoded = json.loads(_populated().to_json())

    assert list(decoded) == [
        "error",
        "code",
        "category",
        "retryable",
        "retry_after",
        "max_retries",
        "http_status",
        "mcp_code",
        "correlation_id",
        "tags",
        "labels",
        "timestamp",
        "duration",
    ]
    assert None not in decoded.values()
    assert "" not in decoded.values()
    assert json.loads(AnnotatedError("").to_json()) == {"error": ""}
