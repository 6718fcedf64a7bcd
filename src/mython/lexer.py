from __future__ import annotations

import io
import logging
from typing import Any, List, TextIO, Union

from .common import LexerError
from .tokens import COMPARISON_OPERATORS, KEYWORDS, Token, TokenType

logger = logging.getLogger(__name__)

INDENT_WIDTH = 2

_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    '"': '"',
    "\\": "\\",
    "'": "'",
}
_SINGLE_CHARS = frozenset(".,:()+-*/")
_COMPARISON_STARTS = frozenset("=!<>")
_NO_VALUE = object()


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def _is_word_start(c: str) -> bool:
    return c == "_" or "a" <= c <= "z" or "A" <= c <= "Z"


def _is_word_char(c: str) -> bool:
    return _is_word_start(c) or _is_digit(c)


class _CharStream:
    """One-character lookahead over a text stream; '' means end of input."""

    __slots__ = ("_input", "_current", "line")

    def __init__(self, input_stream: TextIO):
        self._input = input_stream
        self._current = input_stream.read(1)
        self.line = 1

    def peek(self) -> str:
        return self._current

    def at_end(self) -> bool:
        return self._current == ""

    def advance(self) -> str:
        c = self._current
        if c == "\n":
            self.line += 1
        self._current = self._input.read(1)
        return c


class Lexer:
    """
    Lazy, indentation-aware tokenizer.

    Each refill scans just enough input to produce one token (or one batch of
    INDENT/DEDENT tokens), so there is always a current token to look at.
    """

    def __init__(self, source: Union[str, TextIO]):
        if isinstance(source, str):
            source = io.StringIO(source)
        self._chars = _CharStream(source)
        self._indent = 0
        self._index = 0
        self._tokens: List[Token] = []
        # source line of each token in _tokens
        self._lines: List[int] = []
        self._token_line = 1
        self._load_tokens()

    # ----- public -----

    def current_token(self) -> Token:
        return self._tokens[self._index]

    def next_token(self) -> Token:
        if self._index + 1 >= len(self._tokens) and not self._tokens[-1].is_type(TokenType.EOF):
            self._load_tokens()
        if self._index + 1 < len(self._tokens):
            self._index += 1
        return self._tokens[self._index]

    def expect(self, token_type: TokenType, value: Any = _NO_VALUE) -> Any:
        """
        Check the current token's kind (and optionally its payload).

        Returns the payload for valued kinds and the token itself otherwise;
        raises LexerError on mismatch.
        """
        return self._check(self.current_token(), token_type, value)

    def expect_next(self, token_type: TokenType, value: Any = _NO_VALUE) -> Any:
        return self._check(self.next_token(), token_type, value)

    @property
    def line(self) -> int:
        """Source line of the current token."""
        return self._lines[self._index]

    # ----- private -----

    def _check(self, token: Token, token_type: TokenType, value: Any) -> Any:
        if not token.is_type(token_type):
            raise LexerError(f"expected {token_type.value}, got {token} (line {self.line})")
        if value is not _NO_VALUE and token.value != value:
            expected = Token(token_type, value)
            raise LexerError(f"expected {expected}, got {token} (line {self.line})")
        return token.value if token_type.has_value else token

    def _emit(self, token: Token) -> None:
        self._tokens.append(token)
        self._lines.append(self._token_line)

    def _last_is_newline(self) -> bool:
        return bool(self._tokens) and self._tokens[-1].is_type(TokenType.NEWLINE)

    def _load_tokens(self) -> None:
        chars = self._chars
        while True:
            if chars.at_end():
                self._emit_eof()
                return

            spaces = 0
            while chars.peek() == " ":
                spaces += 1
                chars.advance()

            self._token_line = chars.line
            c = chars.peek()
            at_line_start = not self._tokens or self._last_is_newline()
            if at_line_start and c not in ("\n", "\r", "#", ""):
                if self._emit_indentation(spaces):
                    return

            if c == "":
                continue

            if _is_digit(c):
                self._read_number()
                return
            if c in ("'", '"'):
                self._read_string()
                return
            if c in _COMPARISON_STARTS:
                self._read_comparison()
                return
            if c in _SINGLE_CHARS:
                self._emit(Token(TokenType.CHAR, chars.advance()))
                return
            if _is_word_start(c):
                self._read_word()
                return

            if c == "#":
                while not chars.at_end() and chars.peek() != "\n":
                    chars.advance()
            elif c == "\n":
                chars.advance()
                if self._tokens and not self._last_is_newline():
                    self._emit(Token(TokenType.NEWLINE))
                    return
            elif c == "\r":
                chars.advance()
            else:
                raise LexerError(f"unexpected character {c!r} (line {chars.line})")

    def _emit_indentation(self, spaces: int) -> bool:
        indent = spaces // INDENT_WIDTH
        if indent == self._indent:
            return False
        while indent > self._indent:
            self._indent += 1
            self._emit(Token(TokenType.INDENT))
        while indent < self._indent:
            self._indent -= 1
            self._emit(Token(TokenType.DEDENT))
        return True

    def _emit_eof(self) -> None:
        self._token_line = self._chars.line
        if self._tokens and not self._last_is_newline():
            self._emit(Token(TokenType.NEWLINE))
        while self._indent > 0:
            self._indent -= 1
            self._emit(Token(TokenType.DEDENT))
        self._emit(Token(TokenType.EOF))
        logger.debug("end of input after %d tokens", len(self._tokens))

    def _read_number(self) -> None:
        chars = self._chars
        digits = []
        while _is_digit(chars.peek()):
            digits.append(chars.advance())
        try:
            value = int("".join(digits))
        except ValueError:
            # longer than the interpreter allows for str -> int conversion
            raise LexerError(f"number literal too long (line {chars.line})") from None
        self._emit(Token(TokenType.NUMBER, value))

    def _read_string(self) -> None:
        chars = self._chars
        quote = chars.advance()
        parts = []
        while not chars.at_end() and chars.peek() != quote:
            c = chars.advance()
            if c == "\\":
                if chars.at_end():
                    break
                escaped = chars.advance()
                parts.append(_ESCAPES.get(escaped, escaped))
            else:
                parts.append(c)

        if chars.at_end():
            # unterminated literal: the rest of the input is discarded
            self._emit_eof()
            return
        chars.advance()
        self._emit(Token(TokenType.STRING, "".join(parts)))

    def _read_comparison(self) -> None:
        chars = self._chars
        c = chars.advance()
        if chars.peek() == "=":
            chars.advance()
            self._emit(Token(COMPARISON_OPERATORS[c + "="]))
            return
        self._emit(Token(TokenType.CHAR, c))

    def _read_word(self) -> None:
        chars = self._chars
        letters = []
        while _is_word_char(chars.peek()):
            letters.append(chars.advance())
        word = "".join(letters)
        keyword = KEYWORDS.get(word)
        if keyword is not None:
            self._emit(Token(keyword))
        else:
            self._emit(Token(TokenType.ID, word))
