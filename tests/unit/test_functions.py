"""User functions, built-ins and the call-depth limit."""

import io
import sys

import pytest

from tracelang.config import TraceLangConfig
from tracelang.errors import (
    ArgumentCountError, ControlFlowError, DuplicateFunctionError, EvaluationError,
    ResourceExhaustedError, TypeMismatchError, UnknownFunctionError
)
from tracelang.evaluator import Interpreter


def test_recursion(run):
    interp = run(
        "func fact(n) {\n"
        "    if n <= 1 {\n"
        "        return 1\n"
        "    }\n"
        "    return n * fact(n - 1)\n"
        "}\n"
        "declare r = fact(10)\n"
    )
    assert interp.lookup("r") == 3628800
    assert interp.stats["max_call_depth"] == 10
    assert interp.call_depth == 0


def test_arguments_are_copies(run):
    interp = run(
        "declare arr = [1, 2]\n"
        "func mutate(a) {\n"
        "    append(a, 3)\n"
        "    a[0] = 9\n"
        "}\n"
        "mutate(arr)\n"
    )
    assert interp.lookup("arr") == [1, 2]


def test_builtins_work_on_the_argument_itself(run):
    assert run("declare arr = [1, 2]\nappend(arr, 3)\n").lookup("arr") == [1, 2, 3]


def test_globals_are_reachable_from_functions(run):
    interp = run(
        "declare arr = [1, 2]\n"
        "func mutate() {\n"
        "    arr[0] = 9\n"
        "}\n"
        "mutate()\n"
    )
    assert interp.lookup("arr") == [9, 2]


def test_call_depth_limit():
    interp = Interpreter(TraceLangConfig(max_call_depth=5), stdout=io.StringIO())
    with pytest.raises(ResourceExhaustedError) as info:
        interp.execute_source("func down(n) {\n    down(n + 1)\n}\ndown(0)\n")
    assert info.value.limit == 5
    assert interp.stats["max_call_depth"] == 5
    assert interp.call_depth == 0
    assert len(interp.context) == 0
    assert interp.scopes.depth == 1


DEPTH_SOURCE = (
    "func depth(n) {\n"
    "    if n > 0 {\n"
    "        return 1 + depth(n - 1)\n"
    "    }\n"
    "    return 0\n"
    "}\n"
    "func down(n) {\n"
    "    if n > 0 {\n"
    "        down(n - 1)\n"
    "    }\n"
    "}\n"
)


def test_default_call_depth_is_reachable(run):
    limit = sys.getrecursionlimit()
    interp = run(DEPTH_SOURCE)
    deepest = interp.config.max_call_depth - 1
    interp.execute_source(f"declare r = depth({deepest})\ndown({deepest})\n")
    assert interp.lookup("r") == deepest
    assert interp.stats["max_call_depth"] == interp.config.max_call_depth
    assert interp.call("depth", deepest).get_raw_value() == deepest
    assert interp.call_depth == 0
    assert sys.getrecursionlimit() == limit


def test_default_call_depth_is_enforced(run):
    interp = run(DEPTH_SOURCE)
    with pytest.raises(ResourceExhaustedError) as info:
        interp.call("depth", interp.config.max_call_depth)
    assert info.value.limit == interp.config.max_call_depth
    assert interp.call_depth == 0
    assert len(interp.context) == 0


def test_host_recursion_limit_is_a_script_fault():
    interp = Interpreter(TraceLangConfig(max_call_depth=10_000_000), stdout=io.StringIO())
    with pytest.raises(ResourceExhaustedError) as info:
        interp.execute_source("func down(n) {\n    down(n + 1)\n}\ndown(0)\n")
    assert "host recursion limit" in str(info.value.limit)
    assert interp.call_depth == 0
    assert len(interp.context) == 0


@pytest.mark.parametrize("source, error", [
    ("func f(a) { return a }\nf()", ArgumentCountError),
    ("declare n = length()", ArgumentCountError),
    ("nothing(1)", UnknownFunctionError),
    ("func f() { return 1 }\nfunc f() { return 2 }", DuplicateFunctionError),
    ("func f() { break }\nf()", ControlFlowError),
    ("declare n = length(1)", TypeMismatchError),
    ("declare r = range(0, 5, 0)", EvaluationError),
    ("declare xs = []\ndeclare v = pop(xs)", EvaluationError),
    ("declare n = int(\"abc\")", EvaluationError),
    ("declare n = sqrt(-1)", EvaluationError),
])
def test_call_faults(run, source, error):
    with pytest.raises(error):
        run(source)


def test_redefining_in_a_loop_is_allowed(run):
    interp = run(
        "for (declare i = 0; i < 2; i = i + 1) {\n"
        "    func g() { return 1 }\n"
        "}\n"
        "declare v = g()\n"
    )
    assert interp.lookup("v") == 1


def test_user_function_shadows_builtin(run):
    interp = run("func length(x) { return 42 }\ndeclare n = length([1])\n")
    assert interp.lookup("n") == 42


def test_return_without_value(run):
    interp = run("func f() { return }\ndeclare v = f()\n")
    assert interp.lookup("v") is None
    assert interp.scopes.variable_from_name("v").type() == "none"


def test_return_from_inside_loops(run):
    interp = run(
        "func first_even(xs) {\n"
        "    for (declare i = 0; i < length(xs); i = i + 1) {\n"
        "        if xs[i] % 2 == 0 {\n"
        "            return xs[i]\n"
        "        }\n"
        "    }\n"
        "    return -1\n"
        "}\n"
        "declare a = first_even([3, 5, 8, 10])\n"
        "declare b = first_even([1])\n"
    )
    assert (interp.lookup("a"), interp.lookup("b")) == (8, -1)
    assert interp.scopes.depth == 1


def test_host_call(run):
    interp = run("func add(a, b) {\n    return a + b\n}\n")
    assert interp.call("add", 2, 3).get_raw_value() == 5
    assert interp.stats["function_calls"] == 1


@pytest.mark.parametrize("expr, expected", [
    ("length([1, 2, 3])", 3),
    ("length(\"abc\")", 3),
    ("range(3)", [0, 1, 2]),
    ("range(1, 7, 2)", [1, 3, 5]),
    ("str(12)", "12"),
    ("str(true)", "true"),
    ("str([1, \"a\"])", "[1, a]"),
    ("int(\"42\")", 42),
    ("int(3.9)", 3),
    ("float(2)", 2.0),
    ("abs(-4)", 4),
    ("sqrt(16)", 4.0),
    ("type(1.5)", "float"),
    ("fill(0, 3)", [0, 0, 0]),
])
def test_builtin_results(run, expr, expected):
    assert run(f"declare v = {expr}").lookup("v") == expected


def test_list_builtins(run):
    interp = run(
        "declare xs = [1, 2, 3]\n"
        "declare last = pop(xs)\n"
        "insert(xs, 0, 7)\n"
        "swap(xs, 0, 2)\n"
        "declare first = pop(xs, 0)\n"
    )
    assert interp.lookup("last") == 3
    assert interp.lookup("first") == 2
    assert interp.lookup("xs") == [1, 7]


def test_print(run):
    interp = run("print(\"a\", 1, true, [1.5])")
    assert interp.stdout.getvalue() == "a 1 true [1.5]\n"


def test_builtin_registration(interp):
    interp.functions.add_builtin("double", lambda interp, v: v.value * 2, 1, 1)
    interp.execute_source("declare d = double(21)")
    assert interp.lookup("d") == 42
    assert interp.functions.exists("double")
    assert "double" in interp.functions.names()
    with pytest.raises(DuplicateFunctionError):
        interp.functions.add_builtin("double", lambda interp, v: v, 1, 1)
