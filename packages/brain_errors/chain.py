"""Error-chain traversal and matching.

A node's direct links are, in order: whatever its own ``unwrap()`` returns,
the members of an ``ExceptionGroup``, then ``__cause__`` (or ``__context__``
when implicit chaining is not suppressed). ``is_error`` and ``as_error`` walk
those links depth-first, visiting each node once.
"""

from __future__ import annotations

from typing import Iterator, TypeVar

E = TypeVar("E", bound=BaseException)


def unwrap(error: BaseException | None) -> list[BaseException]:
    """Return the direct links of ``error`` in matching order."""
    if error is None:
        return []

    links = _own_links(error)
    if isinstance(error, BaseExceptionGroup):
        links.extend(error.exceptions)
    if error.__cause__ is not None:
        links.append(error.__cause__)
    elif error.__context__ is not None and not error.__suppress_context__:
        links.append(error.__context__)
    return links


def _own_links(error: BaseException) -> list[BaseException]:
    """Normalize a foreign ``unwrap()`` result to a list of errors.

    Accepts a single error, a list or tuple of errors, or ``None``; anything
    else, including an ``unwrap`` that cannot be called without arguments,
    contributes no links.
    """
    own_unwrap = getattr(error, "unwrap", None)
    if not callable(own_unwrap):
        return []
    try:
        result = own_unwrap()
    except TypeError:
        return []
    if isinstance(result, BaseException):
        return [result]
    if isinstance(result, (list, tuple)):
        return [item for item in result if isinstance(item, BaseException)]
    return []


def walk(error: BaseException | None) -> Iterator[BaseException]:
    """Yield ``error`` and every reachable linked error, pre-order."""
    if error is None:
        return
    seen: set[int] = set()
    pending = [error]
    while pending:
        node = pending.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        yield node
        pending.extend(reversed(unwrap(node)))


def is_error(error: BaseException | None, target: object) -> bool:
    """Return True when ``target`` is reachable from ``error``.

    ``target`` may be an error value (matched by identity or equality) or an
    exception class (matched with ``isinstance``).
    """
    if error is None or target is None:
        return False
    if isinstance(target, type):
        return as_error(error, target) is not None
    return any(node is target or node == target for node in walk(error))


def as_error(error: BaseException | None, cls: type[E]) -> E | None:
    """Return the first error in the chain that is an instance of ``cls``."""
    for node in walk(error):
        if isinstance(node, cls):
            return node
    return None
