from __future__ import annotations

import io
import operator
from typing import Any, Callable, Dict, List, Optional, Sequence, TextIO, Type, TypeVar

from .common import MethodNotImplementedError, NotComparableError

T = TypeVar("T", bound="Object")

INIT_METHOD = "__init__"
STR_METHOD = "__str__"
EQ_METHOD = "__eq__"
LT_METHOD = "__lt__"
ADD_METHOD = "__add__"


# ----------------------------
# Execution context
# ----------------------------


class Context:
    """Capability handed to every node: where program output is written."""

    @property
    def output(self) -> TextIO:
        raise NotImplementedError


class SimpleContext(Context):
    def __init__(self, output: TextIO):
        self._output = output

    @property
    def output(self) -> TextIO:
        return self._output


class DummyContext(Context):
    """Collects output in memory."""

    def __init__(self):
        self._output = io.StringIO()

    @property
    def output(self) -> TextIO:
        return self._output

    def getvalue(self) -> str:
        return self._output.getvalue()


# ----------------------------
# Values
# ----------------------------


class Object:
    def print(self, stream: TextIO, context: Context) -> None:
        raise NotImplementedError


class ObjectHolder:
    """
    A handle to a runtime value; an empty holder is Mython's None.

    Copies of a holder alias the same object, so mutating an instance through
    one holder is visible through every other. `share` marks the handle as a
    non-owning alias (used for `self` and for literals embedded in the tree);
    Python's collector decides the actual lifetime either way.
    """

    __slots__ = ("_data", "_owning")

    def __init__(self, data: Optional[Object] = None, owning: bool = True):
        self._data = data
        self._owning = owning and data is not None

    @classmethod
    def own(cls, obj: Object) -> "ObjectHolder":
        return cls(obj, owning=True)

    @classmethod
    def share(cls, obj: Object) -> "ObjectHolder":
        return cls(obj, owning=False)

    @classmethod
    def none(cls) -> "ObjectHolder":
        return cls()

    @property
    def is_owning(self) -> bool:
        return self._owning

    def get(self) -> Optional[Object]:
        return self._data

    def try_as(self, kind: Type[T]) -> Optional[T]:
        data = self._data
        return data if isinstance(data, kind) else None

    def __bool__(self) -> bool:
        return self._data is not None

    def __repr__(self) -> str:
        mode = "own" if self._owning else "share"
        return f"<ObjectHolder {mode} {self._data!r}>"


Closure = Dict[str, ObjectHolder]


class ValueObject(Object):
    __slots__ = ("_value",)

    def __init__(self, value: Any):
        self._value = value

    @property
    def value(self) -> Any:
        return self._value

    def get_value(self) -> Any:
        return self._value

    def print(self, stream: TextIO, context: Context) -> None:
        stream.write(str(self._value))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"


class Number(ValueObject):
    __slots__ = ()


class String(ValueObject):
    __slots__ = ()


class Bool(ValueObject):
    __slots__ = ()

    def print(self, stream: TextIO, context: Context) -> None:
        stream.write("True" if self._value else "False")


class Executable:
    """Anything that can run against a scope: AST nodes and method bodies."""

    def execute(self, closure: Closure, context: Context) -> Any:
        raise NotImplementedError


class Method:
    __slots__ = ("name", "formal_params", "body")

    def __init__(self, name: str, formal_params: Sequence[str], body: Executable):
        self.name = name
        self.formal_params = list(formal_params)
        self.body = body

    def __repr__(self) -> str:
        return f"<Method {self.name}({', '.join(self.formal_params)})>"


class Class(Object):
    def __init__(self, name: str, methods: Sequence[Method], parent: Optional["Class"] = None):
        self._name = name
        self._methods = list(methods)
        self._parent = parent

    @property
    def name(self) -> str:
        return self._name

    @property
    def parent(self) -> Optional["Class"]:
        return self._parent

    @property
    def methods(self) -> List[Method]:
        return list(self._methods)

    def define_method(self, method: Method) -> None:
        self._methods.append(method)

    def get_method(self, name: str) -> Optional[Method]:
        """Own methods first, then the parent chain; arity is not considered."""
        cls: Optional[Class] = self
        while cls is not None:
            for method in cls._methods:
                if method.name == name:
                    return method
            cls = cls._parent
        return None

    def print(self, stream: TextIO, context: Context) -> None:
        stream.write(f"Class {self._name}")

    def __repr__(self) -> str:
        return f"<Class {self._name}>"


class ClassInstance(Object):
    def __init__(self, cls: Class):
        self._cls = cls
        self._fields: Closure = {"self": ObjectHolder.share(self)}

    @property
    def cls(self) -> Class:
        return self._cls

    @property
    def fields(self) -> Closure:
        return self._fields

    def has_method(self, method: str, argument_count: int) -> bool:
        found = self._cls.get_method(method)
        return found is not None and len(found.formal_params) == argument_count

    def call(self, method: str, actual_args: Sequence[ObjectHolder], context: Context) -> ObjectHolder:
        if not self.has_method(method, len(actual_args)):
            raise MethodNotImplementedError(
                f"{self._cls.name}.{method} with {len(actual_args)} argument(s) is not implemented"
            )
        found = self._cls.get_method(method)
        frame: Closure = {"self": ObjectHolder.share(self)}
        for name, value in zip(found.formal_params, actual_args):
            frame[name] = value
        return found.body.execute(frame, context)

    def print(self, stream: TextIO, context: Context) -> None:
        if self.has_method(STR_METHOD, 0):
            result = self.call(STR_METHOD, [], context)
            if result:
                result.get().print(stream, context)
            else:
                stream.write("None")
            return
        stream.write(f"<{self._cls.name} object at {id(self):#x}>")

    def __repr__(self) -> str:
        return f"<ClassInstance of {self._cls.name}>"


# ----------------------------
# Truthiness and comparison
# ----------------------------


def is_true(obj: ObjectHolder) -> bool:
    data = obj.get()
    if data is None or isinstance(data, (Class, ClassInstance)):
        return False
    if isinstance(data, (Bool, Number, String)):
        return bool(data.value)
    return True


def render(obj: ObjectHolder, context: Context) -> str:
    """Textual form of a value, as `print` and `str` produce it."""
    if not obj:
        return "None"
    buffer = io.StringIO()
    obj.get().print(buffer, context)
    return buffer.getvalue()


_PRIMITIVE_KINDS = (Bool, Number, String)


def _compare_primitives(
    lhs: ObjectHolder, rhs: ObjectHolder, comparator: Callable[[Any, Any], bool]
) -> Optional[bool]:
    for kind in _PRIMITIVE_KINDS:
        left = lhs.try_as(kind)
        right = rhs.try_as(kind)
        if left is not None and right is not None:
            return comparator(left.value, right.value)
    return None


def equal(lhs: ObjectHolder, rhs: ObjectHolder, context: Context) -> bool:
    instance = lhs.try_as(ClassInstance)
    if instance is not None:
        return is_true(instance.call(EQ_METHOD, [rhs], context))

    result = _compare_primitives(lhs, rhs, operator.eq)
    if result is not None:
        return result

    if not lhs and not rhs:
        return True

    raise NotComparableError(f"cannot compare {lhs.get()!r} and {rhs.get()!r} for equality")


def less(lhs: ObjectHolder, rhs: ObjectHolder, context: Context) -> bool:
    instance = lhs.try_as(ClassInstance)
    if instance is not None:
        return is_true(instance.call(LT_METHOD, [rhs], context))

    result = _compare_primitives(lhs, rhs, operator.lt)
    if result is not None:
        return result

    raise NotComparableError(f"cannot compare {lhs.get()!r} and {rhs.get()!r} for less")


def not_equal(lhs: ObjectHolder, rhs: ObjectHolder, context: Context) -> bool:
    return not equal(lhs, rhs, context)


def less_or_equal(lhs: ObjectHolder, rhs: ObjectHolder, context: Context) -> bool:
    return less(lhs, rhs, context) or equal(lhs, rhs, context)


def greater(lhs: ObjectHolder, rhs: ObjectHolder, context: Context) -> bool:
    return not less_or_equal(lhs, rhs, context)


def greater_or_equal(lhs: ObjectHolder, rhs: ObjectHolder, context: Context) -> bool:
    return not less(lhs, rhs, context)


Comparator = Callable[[ObjectHolder, ObjectHolder, Context], bool]
