from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional

from .common import ParseError
from .expressions import (
    Add,
    And,
    BoolConst,
    Comparison,
    Div,
    MethodCall,
    Mult,
    NewInstance,
    NoneConst,
    Not,
    NumericConst,
    Or,
    Statement,
    StringConst,
    Stringify,
    Sub,
    VariableValue,
)
from .lexer import Lexer
from .runtime import (
    Class,
    Comparator,
    Method,
    ObjectHolder,
    equal,
    greater,
    greater_or_equal,
    less,
    less_or_equal,
    not_equal,
)
from .statements import (
    Assignment,
    ClassDefinition,
    Compound,
    FieldAssignment,
    IfElse,
    MethodBody,
    Print,
    Return,
)
from .tokens import Token, TokenType, char

logger = logging.getLogger(__name__)

_COMPARATORS: Dict[Token, Comparator] = {
    Token(TokenType.EQ): equal,
    Token(TokenType.NOT_EQ): not_equal,
    Token(TokenType.LESS_OR_EQ): less_or_equal,
    Token(TokenType.GREATER_OR_EQ): greater_or_equal,
    char("<"): less,
    char(">"): greater,
}

STR_FUNCTION = "str"


class Parser:
    """
    Recursive-descent parser over a `Lexer`.

    Every `_parse_*` method starts at the first token of its construct and
    leaves the lexer on the first token after it.
    """

    def __init__(self, lexer: Lexer, known_classes: Optional[Mapping[str, Class]] = None):
        self._lexer = lexer
        self._classes: Dict[str, Class] = dict(known_classes or {})
        self._method_depth = 0

    @property
    def classes(self) -> Dict[str, Class]:
        return dict(self._classes)

    def parse_program(self) -> Compound:
        program = Compound()
        while not self._current().is_type(TokenType.EOF):
            program.add_statement(self._parse_statement())
        return program

    # ----- helpers -----

    def _current(self) -> Token:
        return self._lexer.current_token()

    def _advance(self) -> Token:
        return self._lexer.next_token()

    def _at_char(self, symbol: str) -> bool:
        return self._current() == char(symbol)

    def _error(self, message: str) -> ParseError:
        return ParseError(f"{message} (line {self._lexer.line})")

    # ----- statements -----

    def _parse_statement(self) -> Statement:
        token = self._current()
        if token.is_type(TokenType.CLASS):
            return self._parse_class_definition()
        if token.is_type(TokenType.IF):
            return self._parse_condition()

        stmt = self._parse_simple_statement()
        self._lexer.expect(TokenType.NEWLINE)
        self._advance()
        return stmt

    def _parse_suite(self) -> Compound:
        self._lexer.expect(TokenType.NEWLINE)
        self._lexer.expect_next(TokenType.INDENT)
        self._advance()

        block = Compound()
        while not self._current().is_type(TokenType.DEDENT):
            if self._current().is_type(TokenType.EOF):
                raise self._error("unexpected end of input inside a block")
            block.add_statement(self._parse_statement())
        self._advance()
        return block

    def _parse_class_definition(self) -> ClassDefinition:
        self._lexer.expect(TokenType.CLASS)
        name = self._lexer.expect_next(TokenType.ID)

        parent = None
        if self._advance() == char("("):
            parent_name = self._lexer.expect_next(TokenType.ID)
            parent = self._classes.get(parent_name)
            if parent is None:
                raise self._error(f"base class '{parent_name}' is not defined")
            self._lexer.expect_next(TokenType.CHAR, ")")
            self._advance()

        self._lexer.expect(TokenType.CHAR, ":")
        self._lexer.expect_next(TokenType.NEWLINE)
        self._lexer.expect_next(TokenType.INDENT)
        self._advance()

        # registered up front so methods can construct instances of their own class
        cls = Class(name, [], parent)
        self._classes[name] = cls
        while not self._current().is_type(TokenType.DEDENT):
            cls.define_method(self._parse_method())
        self._advance()

        logger.debug("declared class %s (parent: %s)", name, parent.name if parent else None)
        return ClassDefinition(ObjectHolder.own(cls))

    def _parse_method(self) -> Method:
        self._lexer.expect(TokenType.DEF)
        name = self._lexer.expect_next(TokenType.ID)
        self._lexer.expect_next(TokenType.CHAR, "(")

        params: List[str] = []
        if self._advance().is_type(TokenType.ID):
            params.append(self._lexer.expect(TokenType.ID))
            while self._advance() == char(","):
                params.append(self._lexer.expect_next(TokenType.ID))
        self._lexer.expect(TokenType.CHAR, ")")
        self._lexer.expect_next(TokenType.CHAR, ":")
        self._advance()

        # the instance is always bound as `self`, so an explicit one is optional
        if params and params[0] == "self":
            params = params[1:]

        self._method_depth += 1
        try:
            body = self._parse_suite()
        finally:
            self._method_depth -= 1
        return Method(name, params, MethodBody(body))

    def _parse_condition(self) -> IfElse:
        self._lexer.expect(TokenType.IF)
        self._advance()
        condition = self._parse_test()
        self._lexer.expect(TokenType.CHAR, ":")
        self._advance()
        if_body = self._parse_suite()

        else_body = None
        if self._current().is_type(TokenType.ELSE):
            self._lexer.expect_next(TokenType.CHAR, ":")
            self._advance()
            else_body = self._parse_suite()
        return IfElse(condition, if_body, else_body)

    def _parse_simple_statement(self) -> Statement:
        token = self._current()
        if token.is_type(TokenType.RETURN):
            if not self._method_depth:
                raise self._error("'return' outside method")
            self._advance()
            return Return(self._parse_test())

        if token.is_type(TokenType.PRINT):
            self._advance()
            args: List[Statement] = []
            if not self._current().is_type(TokenType.NEWLINE):
                args.append(self._parse_test())
                while self._at_char(","):
                    self._advance()
                    args.append(self._parse_test())
            return Print(args)

        if token.is_type(TokenType.ID):
            ids = self._parse_dotted_ids()
            if self._at_char("="):
                self._advance()
                rv = self._parse_test()
                if len(ids) == 1:
                    return Assignment(ids[0], rv)
                return FieldAssignment(VariableValue(ids[:-1]), ids[-1], rv)
            return self._parse_test(ids)

        return self._parse_test()

    # ----- expressions -----
    # `dotted` carries identifiers already consumed by the statement parser;
    # it belongs to the leftmost operand.

    def _parse_test(self, dotted: Optional[List[str]] = None) -> Statement:
        result = self._parse_and_test(dotted)
        while self._current().is_type(TokenType.OR):
            self._advance()
            result = Or(result, self._parse_and_test())
        return result

    def _parse_and_test(self, dotted: Optional[List[str]] = None) -> Statement:
        result = self._parse_not_test(dotted)
        while self._current().is_type(TokenType.AND):
            self._advance()
            result = And(result, self._parse_not_test())
        return result

    def _parse_not_test(self, dotted: Optional[List[str]] = None) -> Statement:
        if dotted is None and self._current().is_type(TokenType.NOT):
            self._advance()
            return Not(self._parse_not_test())
        return self._parse_comparison(dotted)

    def _parse_comparison(self, dotted: Optional[List[str]] = None) -> Statement:
        result = self._parse_expr(dotted)
        comparator = _COMPARATORS.get(self._current())
        if comparator is not None:
            self._advance()
            result = Comparison(comparator, result, self._parse_expr())
        return result

    def _parse_expr(self, dotted: Optional[List[str]] = None) -> Statement:
        result = self._parse_term(dotted)
        while self._at_char("+") or self._at_char("-"):
            op = self._current().value
            self._advance()
            rhs = self._parse_term()
            result = Add(result, rhs) if op == "+" else Sub(result, rhs)
        return result

    def _parse_term(self, dotted: Optional[List[str]] = None) -> Statement:
        result = self._parse_unary(dotted)
        while self._at_char("*") or self._at_char("/"):
            op = self._current().value
            self._advance()
            rhs = self._parse_unary()
            result = Mult(result, rhs) if op == "*" else Div(result, rhs)
        return result

    def _parse_unary(self, dotted: Optional[List[str]] = None) -> Statement:
        if dotted is None and self._at_char("-"):
            self._advance()
            return Sub(NumericConst(0), self._parse_unary())
        return self._parse_primary(dotted)

    def _parse_primary(self, dotted: Optional[List[str]] = None) -> Statement:
        if dotted is not None:
            return self._parse_trailers(dotted)

        token = self._current()
        if token.is_type(TokenType.NUMBER):
            self._advance()
            return NumericConst(token.value)
        if token.is_type(TokenType.STRING):
            self._advance()
            return StringConst(token.value)
        if token.is_type(TokenType.TRUE) or token.is_type(TokenType.FALSE):
            self._advance()
            return BoolConst(token.is_type(TokenType.TRUE))
        if token.is_type(TokenType.NONE):
            self._advance()
            return NoneConst()
        if token == char("("):
            self._advance()
            result = self._parse_test()
            self._lexer.expect(TokenType.CHAR, ")")
            self._advance()
            return result
        if token.is_type(TokenType.ID):
            return self._parse_trailers(self._parse_dotted_ids())
        raise self._error(f"unexpected token {token}")

    def _parse_dotted_ids(self) -> List[str]:
        ids = [self._lexer.expect(TokenType.ID)]
        while self._advance() == char("."):
            ids.append(self._lexer.expect_next(TokenType.ID))
        return ids

    def _parse_trailers(self, ids: List[str]) -> Statement:
        if not self._at_char("("):
            return VariableValue(ids)

        args = self._parse_call_args()
        if len(ids) > 1:
            result: Statement = MethodCall(VariableValue(ids[:-1]), ids[-1], args)
        elif ids[0] == STR_FUNCTION:
            if len(args) != 1:
                raise self._error("str() takes exactly one argument")
            result = Stringify(args[0])
        elif ids[0] in self._classes:
            result = NewInstance(self._classes[ids[0]], args)
        else:
            raise self._error(f"'{ids[0]}' is not a class")

        while self._at_char("."):
            method = self._lexer.expect_next(TokenType.ID)
            self._lexer.expect_next(TokenType.CHAR, "(")
            result = MethodCall(result, method, self._parse_call_args())
        return result

    def _parse_call_args(self) -> List[Statement]:
        self._lexer.expect(TokenType.CHAR, "(")
        self._advance()
        args: List[Statement] = []
        if not self._at_char(")"):
            args.append(self._parse_test())
            while self._at_char(","):
                self._advance()
                args.append(self._parse_test())
        self._lexer.expect(TokenType.CHAR, ")")
        self._advance()
        return args


def parse(lexer: Lexer, known_classes: Optional[Mapping[str, Class]] = None) -> Compound:
    return Parser(lexer, known_classes).parse_program()
