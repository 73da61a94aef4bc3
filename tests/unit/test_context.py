"""Context stack tests."""

import pytest

from tracelang.context import ContextStack, Frame, Status
from tracelang.errors import EvaluationError, InternalConsistencyError


def test_frame_is_released():
    ctx = ContextStack()
    with ctx.frame(Status.IF, "info", 3) as frame:
        assert len(ctx) == 1
        assert ctx.get_status() is Status.IF
        assert ctx.get_info() == "info"
        assert frame.describe() == "at if (line 3)"
    assert len(ctx) == 0
    assert ctx.current() is None


def test_nesting_queries():
    ctx = ContextStack()
    with ctx.frame(Status.WHILE_LOOP):
        with ctx.frame(Status.FOR_LOOP):
            with ctx.frame(Status.ASSIGNMENT):
                assert ctx.count(Status.WHILE_LOOP, Status.FOR_LOOP) == 2
                assert ctx.is_inside(Status.FOR_LOOP)
                assert not ctx.is_inside(Status.IF)
                assert len(ctx) == 3
    assert ctx.max_depth == 3


def test_leftover_frame_is_an_internal_fault():
    ctx = ContextStack()
    with pytest.raises(InternalConsistencyError):
        with ctx.frame(Status.ASSIGNMENT):
            ctx._frames.append(Frame(Status.DECLARATION, None))
    assert len(ctx) == 0


def test_faults_collect_frames_innermost_first():
    ctx = ContextStack()
    with pytest.raises(EvaluationError) as info:
        with ctx.frame(Status.WHILE_LOOP, line=3):
            with ctx.frame(Status.ASSIGNMENT, line=4):
                raise EvaluationError("boom")
    assert info.value.frames == ["at assignment (line 4)", "at while-loop (line 3)"]
    assert len(ctx) == 0
