from __future__ import annotations

from typing import Optional, Sequence, Tuple, Union

from .common import (
    DivisionByZeroError,
    DivisorUndefinedError,
    NotAnObjectError,
    NotExecutableError,
    UnknownVariableError,
)
from .runtime import (
    ADD_METHOD,
    INIT_METHOD,
    Bool,
    Class,
    ClassInstance,
    Closure,
    Comparator,
    Context,
    Executable,
    Number,
    Object,
    ObjectHolder,
    String,
    is_true,
    render,
)


class Statement(Executable):
    """Base of every AST node."""


class UnaryOperation(Statement):
    def __init__(self, argument: Statement):
        self._argument = argument


class BinaryOperation(Statement):
    def __init__(self, lhs: Statement, rhs: Statement):
        self._lhs = lhs
        self._rhs = rhs

    def _operands(self, closure: Closure, context: Context) -> Tuple[ObjectHolder, ObjectHolder]:
        lhs = self._lhs.execute(closure, context)
        rhs = self._rhs.execute(closure, context)
        return lhs, rhs


def _numbers(lhs: ObjectHolder, rhs: ObjectHolder) -> Optional[Tuple[int, int]]:
    left = lhs.try_as(Number)
    right = rhs.try_as(Number)
    if left is None or right is None:
        return None
    return left.value, right.value


def _truncating_div(dividend: int, divisor: int) -> int:
    quotient = abs(dividend) // abs(divisor)
    return quotient if (dividend >= 0) == (divisor > 0) else -quotient


# ----------------------------
# Literals and names
# ----------------------------


class Constant(Statement):
    """A literal; every evaluation hands out an alias of the same object."""

    def __init__(self, value: Object):
        self._value = value

    def execute(self, closure: Closure, context: Context) -> ObjectHolder:
        return ObjectHolder.share(self._value)


class NumericConst(Constant):
    def __init__(self, value: int):
        super().__init__(Number(value))


class StringConst(Constant):
    def __init__(self, value: str):
        super().__init__(String(value))


class BoolConst(Constant):
    def __init__(self, value: bool):
        super().__init__(Bool(value))


class NoneConst(Statement):
    def execute(self, closure: Closure, context: Context) -> ObjectHolder:
        return ObjectHolder.none()


class VariableValue(Statement):
    """A name, or a dotted chain of field accesses such as `circle.center.x`."""

    def __init__(self, dotted_ids: Union[str, Sequence[str]]):
        if isinstance(dotted_ids, str):
            dotted_ids = [dotted_ids]
        if not dotted_ids:
            raise ValueError("VariableValue needs at least one identifier")
        self._dotted_ids = list(dotted_ids)

    @property
    def dotted_ids(self) -> list[str]:
        return list(self._dotted_ids)

    def execute(self, closure: Closure, context: Context) -> ObjectHolder:
        first, *fields = self._dotted_ids
        if first not in closure:
            raise UnknownVariableError(f"unknown variable '{first}'")

        obj = closure[first]
        for name in fields:
            instance = obj.try_as(ClassInstance)
            if instance is None:
                raise NotAnObjectError(f"cannot read field '{name}': value is not an object")
            # reading an unset field binds it to None
            obj = instance.fields.setdefault(name, ObjectHolder.none())
        return obj


# ----------------------------
# Calls
# ----------------------------


class MethodCall(Statement):
    def __init__(self, obj: Statement, method: str, args: Sequence[Statement] = ()):
        self._object = obj
        self._method = method
        self._args = list(args)

    def execute(self, closure: Closure, context: Context) -> ObjectHolder:
        instance = self._object.execute(closure, context).try_as(ClassInstance)
        if instance is None or not instance.has_method(self._method, len(self._args)):
            return ObjectHolder.none()
        actual_args = [arg.execute(closure, context) for arg in self._args]
        return instance.call(self._method, actual_args, context)


class NewInstance(Statement):
    """
    Creates an instance of `cls`.

    `__init__` runs only when the class (or an ancestor) defines it with a
    matching number of parameters; otherwise fields stay unset.
    """

    def __init__(self, cls: Class, args: Sequence[Statement] = ()):
        self._class = cls
        self._args = list(args)

    def execute(self, closure: Closure, context: Context) -> ObjectHolder:
        instance = ClassInstance(self._class)
        holder = ObjectHolder.own(instance)
        if instance.has_method(INIT_METHOD, len(self._args)):
            actual_args = [arg.execute(closure, context) for arg in self._args]
            instance.call(INIT_METHOD, actual_args, context)
        return holder


class Stringify(UnaryOperation):
    def execute(self, closure: Closure, context: Context) -> ObjectHolder:
        obj = self._argument.execute(closure, context)
        return ObjectHolder.own(String(render(obj, context)))


# ----------------------------
# Arithmetic
# ----------------------------


class Add(BinaryOperation):
    def execute(self, closure: Closure, context: Context) -> ObjectHolder:
        lhs, rhs = self._operands(closure, context)

        numbers = _numbers(lhs, rhs)
        if numbers is not None:
            return ObjectHolder.own(Number(numbers[0] + numbers[1]))

        left_str = lhs.try_as(String)
        right_str = rhs.try_as(String)
        if left_str is not None and right_str is not None:
            return ObjectHolder.own(String(left_str.value + right_str.value))

        instance = lhs.try_as(ClassInstance)
        if instance is not None and instance.has_method(ADD_METHOD, 1):
            return instance.call(ADD_METHOD, [rhs], context)

        raise NotExecutableError("unsupported operands for +")


class Sub(BinaryOperation):
    def execute(self, closure: Closure, context: Context) -> ObjectHolder:
        numbers = _numbers(*self._operands(closure, context))
        if numbers is None:
            raise NotExecutableError("unsupported operands for -")
        return ObjectHolder.own(Number(numbers[0] - numbers[1]))


class Mult(BinaryOperation):
    def execute(self, closure: Closure, context: Context) -> ObjectHolder:
        numbers = _numbers(*self._operands(closure, context))
        if numbers is None:
            raise NotExecutableError("unsupported operands for *")
        return ObjectHolder.own(Number(numbers[0] * numbers[1]))


class Div(BinaryOperation):
    """Integer division, rounding toward zero."""

    def execute(self, closure: Closure, context: Context) -> ObjectHolder:
        lhs, rhs = self._operands(closure, context)

        divisor = rhs.try_as(Number)
        if divisor is None:
            raise DivisorUndefinedError("divisor is not a number")
        if divisor.value == 0:
            raise DivisionByZeroError("division by zero")

        dividend = lhs.try_as(Number)
        if dividend is None:
            raise NotExecutableError("dividend is not a number")
        return ObjectHolder.own(Number(_truncating_div(dividend.value, divisor.value)))


# ----------------------------
# Logic and comparison
# ----------------------------


class Or(BinaryOperation):
    def execute(self, closure: Closure, context: Context) -> ObjectHolder:
        if is_true(self._lhs.execute(closure, context)):
            return ObjectHolder.own(Bool(True))
        return ObjectHolder.own(Bool(is_true(self._rhs.execute(closure, context))))


class And(BinaryOperation):
    def execute(self, closure: Closure, context: Context) -> ObjectHolder:
        if not is_true(self._lhs.execute(closure, context)):
            return ObjectHolder.own(Bool(False))
        return ObjectHolder.own(Bool(is_true(self._rhs.execute(closure, context))))


class Not(UnaryOperation):
    def execute(self, closure: Closure, context: Context) -> ObjectHolder:
        return ObjectHolder.own(Bool(not is_true(self._argument.execute(closure, context))))


class Comparison(BinaryOperation):
    def __init__(self, comparator: Comparator, lhs: Statement, rhs: Statement):
        super().__init__(lhs, rhs)
        self._comparator = comparator

    def execute(self, closure: Closure, context: Context) -> ObjectHolder:
        lhs, rhs = self._operands(closure, context)
        return ObjectHolder.own(Bool(self._comparator(lhs, rhs, context)))
