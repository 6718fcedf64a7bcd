from __future__ import annotations

from typing import Optional, Sequence, Union

from .common import NotAnObjectError, Returning
from .expressions import Statement, VariableValue
from .runtime import Class, ClassInstance, Closure, Context, ObjectHolder, is_true

Result = Union[ObjectHolder, Returning]


class Assignment(Statement):
    def __init__(self, var: str, rv: Statement):
        self._var = var
        self._rv = rv

    def execute(self, closure: Closure, context: Context) -> ObjectHolder:
        value = self._rv.execute(closure, context)
        closure[self._var] = value
        return value


class FieldAssignment(Statement):
    """`object.field_name = rv`; the object expression is evaluated once."""

    def __init__(self, obj: VariableValue, field_name: str, rv: Statement):
        self._object = obj
        self._field_name = field_name
        self._rv = rv

    def execute(self, closure: Closure, context: Context) -> ObjectHolder:
        instance = self._object.execute(closure, context).try_as(ClassInstance)
        if instance is None:
            raise NotAnObjectError(f"cannot assign field '{self._field_name}': value is not an object")
        value = self._rv.execute(closure, context)
        instance.fields[self._field_name] = value
        return value


class Print(Statement):
    def __init__(self, args: Sequence[Statement] = ()):
        self._args = list(args)

    @classmethod
    def variable(cls, name: str) -> "Print":
        return cls([VariableValue(name)])

    def execute(self, closure: Closure, context: Context) -> ObjectHolder:
        output = context.output
        for index, arg in enumerate(self._args):
            if index:
                output.write(" ")
            value = arg.execute(closure, context)
            if value:
                value.get().print(output, context)
            else:
                output.write("None")
        output.write("\n")
        return ObjectHolder.none()


class Compound(Statement):
    """A block: runs its statements in order and stops at the first `return`."""

    def __init__(self, statements: Sequence[Statement] = ()):
        self._statements = list(statements)

    def add_statement(self, stmt: Statement) -> None:
        self._statements.append(stmt)

    def execute(self, closure: Closure, context: Context) -> Result:
        for stmt in self._statements:
            result = stmt.execute(closure, context)
            if isinstance(result, Returning):
                return result
        return ObjectHolder.none()


class Return(Statement):
    def __init__(self, statement: Statement):
        self._statement = statement

    def execute(self, closure: Closure, context: Context) -> Returning:
        return Returning(self._statement.execute(closure, context))


class MethodBody(Statement):
    def __init__(self, body: Statement):
        self._body = body

    def execute(self, closure: Closure, context: Context) -> ObjectHolder:
        result = self._body.execute(closure, context)
        if isinstance(result, Returning):
            return result.value
        return ObjectHolder.none()


class ClassDefinition(Statement):
    def __init__(self, cls: ObjectHolder):
        if cls.try_as(Class) is None:
            raise TypeError("ClassDefinition needs a holder of a Class")
        self._cls = cls

    def execute(self, closure: Closure, context: Context) -> ObjectHolder:
        closure[self._cls.try_as(Class).name] = self._cls
        return ObjectHolder.none()


class IfElse(Statement):
    def __init__(self, condition: Statement, if_body: Statement, else_body: Optional[Statement] = None):
        self._condition = condition
        self._if_body = if_body
        self._else_body = else_body

    def execute(self, closure: Closure, context: Context) -> Result:
        if is_true(self._condition.execute(closure, context)):
            return self._if_body.execute(closure, context)
        if self._else_body is not None:
            return self._else_body.execute(closure, context)
        return ObjectHolder.none()
