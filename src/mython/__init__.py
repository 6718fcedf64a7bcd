"""Mython: an interpreter for a small, indentation-structured, class-based scripting language."""

from .common import (
    DivisionByZeroError,
    DivisorUndefinedError,
    LexerError,
    MethodNotImplementedError,
    MythonError,
    NotAnObjectError,
    NotComparableError,
    NotExecutableError,
    ParseError,
    UnknownVariableError,
)
from .core import Interpreter, RunResult
from .lexer import Lexer
from .parser import Parser, parse
from .tokens import Token, TokenType

__all__ = [
    "DivisionByZeroError",
    "DivisorUndefinedError",
    "Interpreter",
    "Lexer",
    "LexerError",
    "MethodNotImplementedError",
    "MythonError",
    "NotAnObjectError",
    "NotComparableError",
    "NotExecutableError",
    "ParseError",
    "Parser",
    "RunResult",
    "Token",
    "TokenType",
    "UnknownVariableError",
    "parse",
]
