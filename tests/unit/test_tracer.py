"""Variable tracing tests."""

import pytest

from tracelang.errors import AlreadyTracedError, TracedOverwriteError
from tracelang.object import IntegerVar
from tracelang.tracer import Tracer


def test_baseline_is_not_an_entry():
    tracer = Tracer()
    var = IntegerVar(1, name="x")
    tracer.start(var)
    assert var.is_traced()
    assert tracer.update_tracers() == 0
    assert tracer.history(var) == []


def test_only_changes_are_recorded():
    tracer = Tracer()
    var = IntegerVar(1, name="x")
    tracer.start(var)
    var.set_value(IntegerVar(2))
    assert tracer.update_tracers(line=4, status="assignment") == 1
    assert tracer.update_tracers(line=5, status="assignment") == 0
    event = tracer.trace_of(var).events[0]
    assert (event.value, event.type_name, event.line, event.status) == (2, "int", 4, "assignment")


def test_untraced_variable_has_no_history():
    assert Tracer().history(IntegerVar(0)) == []


def test_scalar_history(run):
    interp = run(
        "declare int x = 1\n"
        "trace x\n"
        "x = 2\n"
        "x = 2\n"
        "x = 3\n"
    )
    assert interp.tracer.histories() == {"x": [2, 3]}
    assert interp.stats["tracer_entries"] == 2
    events = interp.tracer.traces[0].events
    assert [e.line for e in events] == [3, 5]
    assert events[0].status == "assignment"


def test_list_history_through_builtins(run):
    interp = run(
        "declare arr = [3, 1, 2]\n"
        "trace arr\n"
        "swap(arr, 0, 1)\n"
        "append(arr, 9)\n"
        "declare last = pop(arr)\n"
    )
    assert interp.tracer.histories()["arr"] == [[1, 3, 2], [1, 3, 2, 9], [1, 3, 2]]


def test_recorded_values_are_snapshots(run):
    interp = run(
        "declare arr = [1]\n"
        "trace arr\n"
        "arr[0] = 2\n"
        "arr[0] = 3\n"
    )
    assert interp.tracer.histories()["arr"] == [[2], [3]]


def test_element_trace_is_named_by_expression(run):
    interp = run(
        "declare arr = [1, 2]\n"
        "trace arr[0]\n"
        "arr[0] = 7\n"
        "arr[1] = 8\n"
    )
    assert interp.tracer.histories() == {"arr[0]": [7]}


def test_changes_inside_functions_are_recorded(run):
    interp = run(
        "declare int total = 0\n"
        "trace total\n"
        "func bump(n) {\n"
        "    total = total + n\n"
        "}\n"
        "bump(2)\n"
        "bump(3)\n"
    )
    assert interp.tracer.histories()["total"] == [2, 5]


def test_trace_once(run):
    with pytest.raises(AlreadyTracedError):
        run("declare x = 1\ntrace x\ntrace x\n")


def test_traced_variable_cannot_be_redeclared(run):
    with pytest.raises(TracedOverwriteError):
        run("declare x = 1\ntrace x\nsafe x = 5\n")


def test_shadowing_a_traced_variable_is_allowed(run):
    interp = run(
        "declare x = 1\n"
        "trace x\n"
        "if true {\n"
        "    declare x = 10\n"
        "    x = 11\n"
        "}\n"
    )
    assert interp.tracer.histories() == {"x": []}
    assert interp.lookup("x") == 1


def test_duplicate_names_get_an_index(run):
    interp = run(
        "func watch() {\n"
        "    declare v = 1\n"
        "    trace v\n"
        "    v = 2\n"
        "}\n"
        "watch()\n"
        "watch()\n"
    )
    assert interp.tracer.histories() == {"v": [2], "v#1": [2]}


def test_first_assignment_of_a_default_is_recorded(run):
    interp = run(
        "declare int x\n"
        "trace x\n"
        "x = 0\n"
        "x = 0\n"
    )
    assert interp.tracer.histories() == {"x": [0]}
