from __future__ import annotations

import io
import logging
from typing import Optional, TextIO, Union

from .common import MythonError, Returning
from .expressions import Statement
from .lexer import Lexer
from .parser import Parser
from .runtime import Class, Closure, ObjectHolder, SimpleContext
from .statements import Compound

logger = logging.getLogger(__name__)


class RunResult:
    __slots__ = ("closure", "output", "exception")

    def __init__(
        self,
        closure: Closure,
        output: Optional[str] = None,
        exception: Optional[MythonError] = None,
    ):
        self.closure = closure
        self.output = output
        self.exception = exception

    @property
    def ok(self) -> bool:
        return self.exception is None

    def raise_for_exception(self) -> None:
        if self.exception is not None:
            raise self.exception

    def __repr__(self) -> str:
        state = "ok" if self.ok else f"error={self.exception!r}"
        return f"<RunResult {state}>"


class Interpreter:
    def __init__(self, output: Optional[TextIO] = None):
        """
        output:
          - None   -> program output is captured and returned in RunResult.output
          - stream -> program output is written there (e.g. sys.stdout)
        """
        self.output = output

    def parse(self, source: Union[str, TextIO], closure: Optional[Closure] = None) -> Compound:
        known_classes = {}
        for name, value in (closure or {}).items():
            cls = value.try_as(Class)
            if cls is not None:
                known_classes[name] = cls
        return Parser(Lexer(source), known_classes).parse_program()

    def execute(self, program: Statement, closure: Closure, output: TextIO) -> ObjectHolder:
        """Run an already-built tree against `closure`."""
        result = program.execute(closure, SimpleContext(output))
        if isinstance(result, Returning):
            raise MythonError("'return' outside method")
        return result

    def run(
        self,
        source: Union[str, TextIO],
        closure: Optional[Closure] = None,
        *,
        filename: str = "<mython>",
    ) -> RunResult:
        """
        Lex, parse and execute `source` against `closure` (a fresh global
        scope when omitted). Mython errors are reported through the result;
        anything else propagates.
        """
        if closure is None:
            closure = {}
        elif not isinstance(closure, dict):
            raise TypeError("closure must be dict or None")

        buffer = io.StringIO() if self.output is None else None
        output = self.output if buffer is None else buffer

        logger.debug("running %s", filename)
        exception = None
        try:
            program = self.parse(source, closure)
            self.execute(program, closure, output)
        except MythonError as exc:
            logger.debug("%s failed: %s", filename, exc)
            exception = exc
        else:
            logger.debug("%s finished", filename)

        return RunResult(
            closure,
            output=buffer.getvalue() if buffer is not None else None,
            exception=exception,
        )
