from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .runtime import ObjectHolder


class MythonError(Exception):
    """Base class for every error raised while lexing, parsing or running Mython code."""


class LexerError(MythonError, SyntaxError):
    pass


class ParseError(LexerError):
    pass


class UnknownVariableError(MythonError, NameError):
    pass


class NotAnObjectError(MythonError, AttributeError):
    pass


class NotComparableError(MythonError, TypeError):
    pass


class NotExecutableError(MythonError, TypeError):
    """Arithmetic applied to operands that do not support it."""


class DivisorUndefinedError(NotExecutableError):
    pass


class DivisionByZeroError(MythonError, ZeroDivisionError):
    pass


class MethodNotImplementedError(MythonError, NotImplementedError):
    pass


class Returning:
    """
    Result of a `return` statement.

    Statements hand this back instead of a plain holder; compound statements
    forward it untouched and only `MethodBody` turns it into a normal value.
    It is deliberately not an exception.
    """

    __slots__ = ("value",)

    def __init__(self, value: ObjectHolder):
        self.value = value

    def __repr__(self) -> str:
        return f"<Returning {self.value!r}>"
