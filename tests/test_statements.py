from __future__ import annotations

import pytest

from mython.common import (
    DivisionByZeroError,
    DivisorUndefinedError,
    NotAnObjectError,
    NotExecutableError,
    Returning,
    UnknownVariableError,
)
from mython.expressions import (
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
    StringConst,
    Stringify,
    Sub,
    VariableValue,
)
from mython.runtime import Bool, Class, ClassInstance, Method, Number, ObjectHolder, String, equal, less
from mython.statements import (
    Assignment,
    ClassDefinition,
    Compound,
    FieldAssignment,
    IfElse,
    MethodBody,
    Print,
    Return,
)

UNDEFINED = VariableValue("undefined_name")


def value_of(holder):
    return holder.get().value


def make_method(name, params, *statements):
    return Method(name, params, MethodBody(Compound(list(statements))))


def test_literals_keep_identity_across_executions(context):
    node = NumericConst(5)
    first = node.execute({}, context)
    second = node.execute({}, context)
    assert first.get() is second.get()
    assert value_of(first) == 5
    assert value_of(StringConst("hi").execute({}, context)) == "hi"
    assert value_of(BoolConst(False).execute({}, context)) is False
    assert not NoneConst().execute({}, context)


def test_variable_lookup(context):
    closure = {"x": ObjectHolder.own(Number(1))}
    assert value_of(VariableValue("x").execute(closure, context)) == 1
    with pytest.raises(UnknownVariableError):
        VariableValue("y").execute(closure, context)


def test_dotted_lookup_descends_into_fields(context):
    inner = ClassInstance(Class("Point", []))
    inner.fields["x"] = ObjectHolder.own(Number(3))
    outer = ClassInstance(Class("Circle", []))
    outer.fields["center"] = ObjectHolder.own(inner)
    closure = {"circle": ObjectHolder.own(outer)}

    assert value_of(VariableValue(["circle", "center", "x"]).execute(closure, context)) == 3

    with pytest.raises(NotAnObjectError):
        VariableValue(["circle", "center", "x", "y"]).execute(closure, context)


def test_reading_unset_field_yields_none_and_binds_it(context):
    instance = ClassInstance(Class("Empty", []))
    closure = {"obj": ObjectHolder.own(instance)}
    assert not VariableValue(["obj", "missing"]).execute(closure, context)
    assert "missing" in instance.fields


def test_assignment_binds_and_returns_value(context):
    closure = {}
    result = Assignment("x", NumericConst(4)).execute(closure, context)
    assert value_of(closure["x"]) == 4
    assert result.get() is closure["x"].get()

    Assignment("x", StringConst("over")).execute(closure, context)
    assert value_of(closure["x"]) == "over"


def test_field_assignment(context):
    instance = ClassInstance(Class("Box", []))
    closure = {"box": ObjectHolder.own(instance)}
    result = FieldAssignment(VariableValue("box"), "size", NumericConst(9)).execute(closure, context)
    assert value_of(instance.fields["size"]) == 9
    assert value_of(result) == 9

    closure["n"] = ObjectHolder.own(Number(1))
    with pytest.raises(NotAnObjectError):
        FieldAssignment(VariableValue("n"), "size", NumericConst(9)).execute(closure, context)


def test_print_joins_arguments_with_spaces(context):
    closure = {"x": ObjectHolder.own(Number(7))}
    Print([StringConst("x is"), VariableValue("x"), NoneConst(), BoolConst(True)]).execute(closure, context)
    Print().execute(closure, context)
    Print.variable("x").execute(closure, context)
    assert context.getvalue() == "x is 7 None True\n\n7\n"


def test_method_call(context):
    cls = Class("Calc", [make_method("double", ["n"], Return(Mult(VariableValue("n"), NumericConst(2))))])
    closure = {"calc": ObjectHolder.own(ClassInstance(cls))}
    result = MethodCall(VariableValue("calc"), "double", [NumericConst(21)]).execute(closure, context)
    assert value_of(result) == 42


def test_method_call_to_missing_method_is_silently_none(context):
    cls = Class("Calc", [make_method("double", ["n"], Return(VariableValue("n")))])
    closure = {"calc": ObjectHolder.own(ClassInstance(cls)), "n": ObjectHolder.own(Number(1))}

    assert not MethodCall(VariableValue("calc"), "triple", [NumericConst(1)]).execute(closure, context)
    # arity mismatch: arguments are not evaluated either
    assert not MethodCall(VariableValue("calc"), "double", [UNDEFINED, UNDEFINED]).execute(closure, context)
    assert not MethodCall(VariableValue("n"), "double", [NumericConst(1)]).execute(closure, context)


def test_new_instance_runs_matching_init(context):
    cls = Class(
        "Point",
        [
            make_method(
                "__init__",
                ["x"],
                FieldAssignment(VariableValue("self"), "x", VariableValue("x")),
                Return(StringConst("ignored")),
            )
        ],
    )
    holder = NewInstance(cls, [NumericConst(5)]).execute({}, context)
    instance = holder.try_as(ClassInstance)
    assert instance is not None
    assert instance.cls is cls
    assert value_of(instance.fields["x"]) == 5


def test_new_instance_without_matching_init_leaves_fields_unset(context):
    cls = Class("Point", [make_method("__init__", ["x"], FieldAssignment(VariableValue("self"), "x", VariableValue("x")))])
    instance = NewInstance(cls, [UNDEFINED, UNDEFINED]).execute({}, context).try_as(ClassInstance)
    assert set(instance.fields) == {"self"}

    bare = NewInstance(Class("Bare", [])).execute({}, context).try_as(ClassInstance)
    assert set(bare.fields) == {"self"}


def test_new_instance_uses_inherited_init(context):
    base = Class("Base", [make_method("__init__", [], FieldAssignment(VariableValue("self"), "ready", BoolConst(True)))])
    child = Class("Child", [], base)
    instance = NewInstance(child).execute({}, context).try_as(ClassInstance)
    assert value_of(instance.fields["ready"]) is True


def test_stringify(context):
    assert value_of(Stringify(NumericConst(5)).execute({}, context)) == "5"
    assert value_of(Stringify(NoneConst()).execute({}, context)) == "None"
    assert value_of(Stringify(BoolConst(False)).execute({}, context)) == "False"

    cls = Class("Named", [make_method("__str__", [], Return(StringConst("named")))])
    closure = {"obj": ObjectHolder.own(ClassInstance(cls))}
    result = Stringify(VariableValue("obj")).execute(closure, context)
    assert result.try_as(String) is not None
    assert value_of(result) == "named"


def test_add(context):
    assert value_of(Add(NumericConst(2), NumericConst(3)).execute({}, context)) == 5
    assert value_of(Add(StringConst("ab"), StringConst("cd")).execute({}, context)) == "abcd"
    with pytest.raises(NotExecutableError):
        Add(NumericConst(2), StringConst("3")).execute({}, context)
    with pytest.raises(NotExecutableError):
        Add(NoneConst(), NoneConst()).execute({}, context)


def test_add_delegates_to_dunder_add(context):
    cls = Class("Acc", [make_method("__add__", ["other"], Return(Add(NumericConst(100), VariableValue("other"))))])
    closure = {"acc": ObjectHolder.own(ClassInstance(cls))}
    assert value_of(Add(VariableValue("acc"), NumericConst(1)).execute(closure, context)) == 101
    with pytest.raises(NotExecutableError):
        Add(NumericConst(1), VariableValue("acc")).execute(closure, context)


def test_sub_and_mult_need_numbers(context):
    assert value_of(Sub(NumericConst(2), NumericConst(5)).execute({}, context)) == -3
    assert value_of(Mult(NumericConst(4), NumericConst(5)).execute({}, context)) == 20
    with pytest.raises(NotExecutableError):
        Sub(StringConst("a"), StringConst("b")).execute({}, context)
    with pytest.raises(NotExecutableError):
        Mult(StringConst("a"), NumericConst(3)).execute({}, context)


@pytest.mark.parametrize(
    ("dividend", "divisor", "quotient"),
    [(7, 2, 3), (6, 3, 2), (0, 5, 0)],
)
def test_div(dividend, divisor, quotient, context):
    assert value_of(Div(NumericConst(dividend), NumericConst(divisor)).execute({}, context)) == quotient


def test_div_truncates_toward_zero(context):
    minus_seven = Sub(NumericConst(0), NumericConst(7))
    minus_two = Sub(NumericConst(0), NumericConst(2))
    assert value_of(Div(minus_seven, NumericConst(2)).execute({}, context)) == -3
    assert value_of(Div(NumericConst(7), minus_two).execute({}, context)) == -3
    assert value_of(Div(minus_seven, minus_two).execute({}, context)) == 3


def test_div_failures(context):
    with pytest.raises(DivisionByZeroError):
        Div(NumericConst(1), NumericConst(0)).execute({}, context)
    with pytest.raises(DivisorUndefinedError):
        Div(NumericConst(1), StringConst("2")).execute({}, context)
    with pytest.raises(NotExecutableError):
        Div(StringConst("1"), NumericConst(2)).execute({}, context)


def test_logical_operators_short_circuit(context):
    assert value_of(Or(NumericConst(1), UNDEFINED).execute({}, context)) is True
    assert value_of(Or(NumericConst(0), StringConst("")).execute({}, context)) is False
    assert value_of(Or(NoneConst(), StringConst("x")).execute({}, context)) is True

    assert value_of(And(StringConst(""), UNDEFINED).execute({}, context)) is False
    assert value_of(And(NumericConst(1), BoolConst(True)).execute({}, context)) is True
    assert value_of(And(NumericConst(1), NumericConst(0)).execute({}, context)) is False

    assert value_of(Not(NumericConst(0)).execute({}, context)) is True
    assert value_of(Not(StringConst("x")).execute({}, context)) is False


def test_comparison_node_wraps_result(context):
    result = Comparison(less, NumericConst(1), NumericConst(2)).execute({}, context)
    assert result.try_as(Bool) is not None
    assert value_of(result) is True
    assert value_of(Comparison(equal, StringConst("a"), StringConst("b")).execute({}, context)) is False


def test_compound_result_is_none(context):
    closure = {}
    result = Compound([Assignment("a", NumericConst(1)), Assignment("b", NumericConst(2))]).execute(closure, context)
    assert not result
    assert set(closure) == {"a", "b"}


def test_return_is_a_tagged_result_not_an_exception(context):
    result = Compound([Return(NumericConst(1)), Print([StringConst("unreachable")])]).execute({}, context)
    assert isinstance(result, Returning)
    assert value_of(result.value) == 1
    assert context.getvalue() == ""


def test_method_body_captures_return_from_nested_blocks(context):
    body = MethodBody(
        Compound(
            [
                IfElse(
                    BoolConst(True),
                    Compound(
                        [
                            IfElse(
                                NumericConst(1),
                                Compound([Return(StringConst("inner")), Print([StringConst("after return")])]),
                            ),
                            Print([StringConst("after inner if")]),
                        ]
                    ),
                ),
                Print([StringConst("after outer if")]),
            ]
        )
    )
    result = body.execute({}, context)
    assert value_of(result) == "inner"
    assert context.getvalue() == ""


def test_method_body_without_return_is_none(context):
    closure = {}
    result = MethodBody(Compound([Assignment("x", NumericConst(1))])).execute(closure, context)
    assert not result
    assert not isinstance(result, Returning)


def test_class_definition_binds_name(context):
    cls = Class("Thing", [])
    closure = {}
    ClassDefinition(ObjectHolder.own(cls)).execute(closure, context)
    assert closure["Thing"].get() is cls


def test_if_else(context):
    closure = {}
    IfElse(NumericConst(0), Assignment("x", NumericConst(1)), Assignment("x", NumericConst(2))).execute(closure, context)
    assert value_of(closure["x"]) == 2
    IfElse(StringConst("yes"), Assignment("y", NumericConst(1))).execute(closure, context)
    assert value_of(closure["y"]) == 1
    assert not IfElse(BoolConst(False), Assignment("z", NumericConst(1))).execute(closure, context)
    assert "z" not in closure
