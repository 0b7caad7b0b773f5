"""Call-site and stack capture for annotated errors.

Frames are resolved through a swappable ``FrameResolver`` so tests can feed
fixed frames instead of depending on real interpreter stack depth.
"""

from __future__ import annotations

import sys
import sysconfig
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Final, Iterable, Iterator, Sequence

from .chain import walk
from .error import AnnotatedError
from .settings import ErrorSettings, current_settings


@dataclass(frozen=True, slots=True)
class CallFrame:
    """One resolved call-stack entry."""

    filename: str
    lineno: int
    function: str


FrameResolver = Callable[[int], Sequence[CallFrame]]


def _runtime_roots() -> tuple[str, ...]:
    """Return install roots whose frames belong to the interpreter itself."""
    paths = sysconfig.get_paths()
    roots = {
        paths[key]
        for key in ("stdlib", "platstdlib", "purelib", "platlib", "scripts")
        if paths.get(key)
    }
    return tuple(sorted(_with_sep(root) for root in roots))


def _with_sep(path: str) -> str:
    """Return ``path`` with exactly one trailing separator."""
    return path.rstrip("/\\") + "/"


_STDLIB_ROOT: Final[str] = _with_sep(sysconfig.get_paths()["stdlib"])
_RUNTIME_ROOTS: Final[tuple[str, ...]] = _runtime_roots()
# packages/brain_errors/callers.py -> repository root
_LIBRARY_ROOT: Final[str] = _with_sep(str(Path(__file__).resolve().parents[2]))


def python_frames(depth: int) -> list[CallFrame]:
    """Resolve frames starting ``depth`` levels above the resolver's caller."""
    try:
        frame = sys._getframe(depth + 1)
    except ValueError:
        return []
    frames: list[CallFrame] = []
    while frame is not None:
        code = frame.f_code
        frames.append(CallFrame(code.co_filename, frame.f_lineno, code.co_name))
        frame = frame.f_back
    return frames


_resolver: FrameResolver = python_frames


@contextmanager
def use_frame_resolver(resolver: FrameResolver) -> Iterator[None]:
    """Temporarily replace the frame resolver used by ``capture``."""
    global _resolver

    previous = _resolver
    _resolver = resolver
    try:
        yield
    finally:
        _resolver = previous


def trim_path(filename: str, settings: ErrorSettings) -> str:
    """Apply configured prefixes, then the stdlib root, then the library root."""
    for prefix in settings.trim_prefixes:
        filename = filename.removeprefix(prefix)
    filename = filename.removeprefix(_STDLIB_ROOT)
    return filename.removeprefix(_LIBRARY_ROOT)


def format_frame(frame: CallFrame, settings: ErrorSettings) -> str:
    """Format a frame as ``file:line.function``."""
    return f"{trim_path(frame.filename, settings)}:{frame.lineno}.{frame.function}"


def is_runtime_frame(frame: CallFrame) -> bool:
    """Return True for interpreter, installed-package and harness frames."""
    if frame.filename.startswith("<frozen"):
        return True
    return frame.filename.startswith(_RUNTIME_ROOTS)


def inherited_stack(wrapped: Iterable[object]) -> tuple[str, ...]:
    """Return the first non-empty stack already captured in ``wrapped`` chains."""
    for candidate in wrapped:
        if not isinstance(candidate, BaseException):
            continue
        for node in walk(candidate):
            if isinstance(node, AnnotatedError) and node.stack:
                return node.stack
    return ()


def capture(
    skip: int,
    wrapped: Iterable[object] = (),
    settings: ErrorSettings | None = None,
) -> tuple[str, tuple[str, ...]]:
    """Capture ``(caller, stack)`` for the frame ``skip`` levels above the caller.

    ``skip=0`` names the function calling ``capture``; library entry points
    pass ``1`` so the reported caller is the application code.
    """
    resolved = settings or current_settings()
    frames = list(_resolver(skip + 1))
    if not frames:
        return "", ()

    caller = format_frame(frames[0], resolved)
    if not resolved.with_stack:
        return caller, ()

    reused = inherited_stack(wrapped)
    if reused:
        return caller, reused

    stack = tuple(
        format_frame(frame, resolved)
        for frame in frames[1:]
        if not is_runtime_frame(frame)
    )
    return caller, stack
