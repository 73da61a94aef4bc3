"""Parser tests: statement shapes, expression precedence and error reporting."""

import pytest

from tracelang.errors import TraceLangSyntaxError
from tracelang.evaluator import (
    Assignment, Declaration, ForLoop, FunctionDef, IfCondition, OverwriteMode, Return,
    Tracing, VoidFunctionCall, WhileLoop
)
from tracelang.parser import parse_expression_node, parse_program
from tracelang.tracelang_ast import InfixExpression, PrefixExpression


def _single(source):
    program = parse_program(source)
    assert len(program.statements) == 1
    return program.statements[0]


def test_typed_declaration():
    stmt = _single("declare int x = 5")
    assert isinstance(stmt, Declaration)
    assert (stmt.var_type, stmt.var_name, stmt.var_expr.expr) == ("int", "x", "5")
    assert stmt.overwrite is OverwriteMode.NEW
    assert stmt.assignment is True


@pytest.mark.parametrize("source, mode", [
    ("safe x = 1", OverwriteMode.SAFE),
    ("overwrite float y = 2.0", OverwriteMode.FORCE),
])
def test_declaration_modes(source, mode):
    assert _single(source).overwrite is mode


def test_declaration_without_value_is_unassigned():
    stmt = _single("declare list xs")
    assert stmt.assignment is False
    assert stmt.var_expr.expr == "<default list>"


def test_untyped_declaration_needs_a_value():
    with pytest.raises(TraceLangSyntaxError):
        parse_program("declare x")


def test_expression_text_is_kept():
    stmt = _single("declare s = f(a, b + 1)  # trailing comment")
    assert stmt.var_expr.expr == "f(a, b + 1)"


def test_if_else_if_chain():
    stmt = _single(
        "if a < 1 {\n"
        "    x = 1\n"
        "} else if a < 2 {\n"
        "    x = 2\n"
        "} else {\n"
        "    x = 3\n"
        "}\n"
    )
    assert isinstance(stmt, IfCondition)
    assert isinstance(stmt.instructions[0], Assignment)
    nested = stmt.else_instructions[0]
    assert isinstance(nested, IfCondition)
    assert nested.condition.expr == "a < 2"
    assert isinstance(nested.else_instructions[0], Assignment)


def test_for_loop_parts():
    stmt = _single("for (declare i = 0; i < 3; i = i + 1) {\n    print(i)\n}")
    assert isinstance(stmt, ForLoop)
    assert isinstance(stmt.start, Declaration)
    assert isinstance(stmt.step, Assignment)
    assert stmt.loop.condition.expr == "i < 3"
    assert isinstance(stmt.instructions[0], VoidFunctionCall)


def test_while_loop_on_one_line():
    stmt = _single("while x > 0 { x = x - 1 }")
    assert isinstance(stmt, WhileLoop)
    assert stmt.instructions[0].var_name == "x"


def test_function_definition():
    stmt = _single("func merge(lo, hi) {\n    return lo + hi\n}")
    assert isinstance(stmt, FunctionDef)
    assert stmt.func.parameters == ["lo", "hi"]
    ret = stmt.func.instructions[0]
    assert isinstance(ret, Return)
    assert ret.value.expr == "lo + hi"


def test_bare_return():
    stmt = _single("func f() { return }")
    assert stmt.func.instructions[0].value is None


def test_trace_and_call_statements():
    program = parse_program("trace arr, arr[0]\nswap(arr, 0, 1)")
    tracing, call = program.statements
    assert isinstance(tracing, Tracing)
    assert [expr.expr for expr in tracing.traced_vars] == ["arr", "arr[0]"]
    assert call.function_name == "swap"
    assert [arg.expr for arg in call.get_args()] == ["arr", "0", "1"]


def test_arithmetic_precedence():
    node = parse_expression_node("1 + 2 * 3")
    assert isinstance(node, InfixExpression)
    assert node.operator == "+"
    assert node.right.operator == "*"


def test_not_binds_looser_than_comparison():
    node = parse_expression_node("not a == b")
    assert isinstance(node, PrefixExpression)
    assert node.right.operator == "=="


def test_and_binds_looser_than_comparison():
    node = parse_expression_node("a < b and c or d")
    assert node.operator == "or"
    assert node.left.operator == "and"
    assert node.left.left.operator == "<"


@pytest.mark.parametrize("source", [
    "1 + 2",
    "f() = 1",
    "while true {\n    x = 1\n",
    "func f(a, a) { return a }",
    "declare int int = 1",
    "declare x = (1 + 2",
])
def test_syntax_errors(source):
    with pytest.raises(TraceLangSyntaxError):
        parse_program(source)


def test_errors_are_collected_across_statements():
    with pytest.raises(TraceLangSyntaxError) as info:
        parse_program("declare 5\ndeclare x = )\ndeclare y = 1\n")
    assert len(info.value.errors) >= 2
    assert info.value.errors[0].startswith("Line 1:")


def test_trailing_tokens_in_expression():
    with pytest.raises(TraceLangSyntaxError):
        parse_expression_node("a b")
