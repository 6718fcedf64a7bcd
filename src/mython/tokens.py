from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any


class TokenType(enum.Enum):
    # payload-bearing kinds
    NUMBER = "Number"
    ID = "Id"
    CHAR = "Char"
    STRING = "String"

    # keywords
    CLASS = "Class"
    RETURN = "Return"
    IF = "If"
    ELSE = "Else"
    DEF = "Def"
    PRINT = "Print"
    AND = "And"
    OR = "Or"
    NOT = "Not"
    NONE = "None"
    TRUE = "True"
    FALSE = "False"

    # two-character operators
    EQ = "Eq"
    NOT_EQ = "NotEq"
    LESS_OR_EQ = "LessOrEq"
    GREATER_OR_EQ = "GreaterOrEq"

    # layout
    NEWLINE = "Newline"
    INDENT = "Indent"
    DEDENT = "Dedent"
    EOF = "Eof"

    @property
    def has_value(self) -> bool:
        return self in _VALUED_TYPES

    def __repr__(self) -> str:
        return f"TokenType.{self.name}"


_VALUED_TYPES = frozenset({TokenType.NUMBER, TokenType.ID, TokenType.CHAR, TokenType.STRING})

KEYWORDS = {
    "class": TokenType.CLASS,
    "return": TokenType.RETURN,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "def": TokenType.DEF,
    "print": TokenType.PRINT,
    "and": TokenType.AND,
    "or": TokenType.OR,
    "not": TokenType.NOT,
    "None": TokenType.NONE,
    "True": TokenType.TRUE,
    "False": TokenType.FALSE,
}

COMPARISON_OPERATORS = {
    "==": TokenType.EQ,
    "!=": TokenType.NOT_EQ,
    "<=": TokenType.LESS_OR_EQ,
    ">=": TokenType.GREATER_OR_EQ,
}


@dataclass(frozen=True)
class Token:
    """
    One lexeme.

    Unit kinds carry `value=None`, so two tokens are equal exactly when their
    kinds match and their payloads compare equal.
    """

    type: TokenType
    value: Any = None

    def __post_init__(self) -> None:
        if self.type.has_value and self.value is None:
            raise ValueError(f"{self.type.value} token requires a value")
        if not self.type.has_value and self.value is not None:
            raise ValueError(f"{self.type.value} token takes no value")

    def is_type(self, token_type: TokenType) -> bool:
        return self.type is token_type

    def __str__(self) -> str:
        if self.type.has_value:
            return f"{self.type.value}{{{self.value}}}"
        return self.type.value


def number(value: int) -> Token:
    return Token(TokenType.NUMBER, value)


def id_(name: str) -> Token:
    return Token(TokenType.ID, name)


def char(symbol: str) -> Token:
    return Token(TokenType.CHAR, symbol)


def string(text: str) -> Token:
    return Token(TokenType.STRING, text)


NEWLINE = Token(TokenType.NEWLINE)
INDENT = Token(TokenType.INDENT)
DEDENT = Token(TokenType.DEDENT)
EOF = Token(TokenType.EOF)
