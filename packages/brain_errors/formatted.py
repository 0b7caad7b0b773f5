"""Errors produced by ``%``-formatting a message."""

from __future__ import annotations

from typing import Any, Sequence


def format_message(template: str, args: Sequence[Any]) -> str:
    """Apply ``%`` formatting, leaving the template untouched without args."""
    if not args:
        return template
    return template % tuple(args)


class FormattedError(Exception):
    """An error whose text was produced by formatting.

    Exceptions used as format arguments stay reachable through ``unwrap``.
    """

    def __init__(self, message: str, wrapped: Sequence[BaseException] = ()) -> None:
        super().__init__(message)
        self._message = message
        self._wrapped = tuple(wrapped)

    @classmethod
    def from_format(cls, template: str, args: Sequence[Any]) -> FormattedError:
        """Format ``template`` with ``args`` and keep exception arguments."""
        return cls(
            format_message(template, args),
            wrapped=[arg for arg in args if isinstance(arg, BaseException)],
        )

    def unwrap(self) -> list[BaseException]:
        """Return exceptions that were used as format arguments."""
        return list(self._wrapped)

    def __str__(self) -> str:
        """Return the formatted message."""
        return self._message
