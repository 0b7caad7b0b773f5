"""Sentinel errors: named, comparable identities that annotated errors come from.

Declare sentinels once at module level and build annotated errors from them::

    ErrQueryFailed = Sentinel("database query failed")

    def load(user_id: str) -> User:
        try:
            return repo.get(user_id)
        except RepositoryError as exc:
            raise ErrQueryFailed.new(exc).with_context({"user_id": user_id})

Every error built from a sentinel matches it with ``is_error``.
"""

from __future__ import annotations

from typing import Any

from .callers import capture
from .error import AnnotatedError
from .formatted import FormattedError


class Sentinel(Exception):
    """Immutable error identity declared by application code."""

    def __init__(self, text: str) -> None:
        super().__init__(text)
        self._text = text

    @property
    def text(self) -> str:
        """Return the sentinel's message text."""
        return self._text

    def __str__(self) -> str:
        """Return the sentinel's message text."""
        return self._text

    def __repr__(self) -> str:
        """Return a debugging representation."""
        return f"{type(self).__name__}({self._text!r})"

    def __eq__(self, other: object) -> bool:
        """Compare sentinels by type and text."""
        if not isinstance(other, Sentinel):
            return NotImplemented
        return type(self) is type(other) and self._text == other._text

    def __hash__(self) -> int:
        """Hash consistently with ``__eq__``."""
        return hash((type(self).__name__, self._text))

    def new(self, *errors: BaseException | None) -> AnnotatedError:
        """Build an error from this sentinel with ``errors`` rendered after it."""
        aux = tuple(err for err in errors if err is not None)
        caller, stack = capture(1, aux)
        return AnnotatedError(self, errors=aux, caller=caller, stack=stack)

    def errorf(self, *args: Any) -> AnnotatedError:
        """Build an error whose message is this sentinel's text formatted with ``args``.

        The sentinel still matches but is not rendered separately.
        """
        caller, stack = capture(1, args)
        return AnnotatedError(
            FormattedError.from_format(self._text, args),
            silent=(self,),
            caller=caller,
            stack=stack,
        )

    def withf(self, template: str, *args: Any) -> AnnotatedError:
        """Build an error reading ``"<sentinel>: <template % args>"``."""
        caller, stack = capture(1, args)
        detail = FormattedError.from_format(template, args)
        primary = FormattedError(f"{self._text}: {detail}", wrapped=detail.unwrap())
        return AnnotatedError(primary, silent=(self,), caller=caller, stack=stack)

    def wrapf(self, template: str, *args: Any) -> AnnotatedError:
        """Build an error from this sentinel with one formatted auxiliary error."""
        caller, stack = capture(1, args)
        return AnnotatedError(
            self,
            errors=(FormattedError.from_format(template, args),),
            caller=caller,
            stack=stack,
        )
