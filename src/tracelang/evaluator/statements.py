# src/tracelang/evaluator/statements.py
"""Executable instructions.

Every instruction follows the same template: ``execute`` opens its context
frame through ``set_context``, runs ``_run`` and lets the frame guard verify
that the context stack is back at the depth it had right after the push.
Nested blocks run through ``execute_block``.

``execute`` returns ``None`` on plain completion. ``break``, ``continue`` and
``return`` travel outwards as ``Flow`` values until the nearest loop or
function invocation consumes them.
"""

import logging
from enum import Enum, IntEnum

from ..context import Status, LOOP_STATUSES
from ..environment import Environment, is_valid_name
from ..errors import (
    AlreadyTracedError, DeclaredExistingVarError, InvalidNamingError,
    OverwriteNonExistingVarError, TracedOverwriteError, TypeMismatchError
)
from ..object import BooleanVar, FloatVar, IntegerVar
from .expressions import Expression

logger = logging.getLogger(__name__)


class FlowKind(Enum):
    BREAK = "break"
    CONTINUE = "continue"
    RETURN = "return"


class Flow:
    def __init__(self, kind, value=None):
        self.kind = kind
        self.value = value

    def __repr__(self):
        return f"Flow({self.kind.value})"


BREAK = Flow(FlowKind.BREAK)
CONTINUE = Flow(FlowKind.CONTINUE)


class OverwriteMode(IntEnum):
    NEW = 0     # must not exist
    FORCE = 1   # must exist
    SAFE = 2    # may exist


def execute_block(instructions, interp):
    for instr in instructions:
        flow = instr.execute(interp)
        if flow is not None:
            return flow
    return None


def check_condition(condition, interp):
    cond = condition.evaluate(interp)
    if not isinstance(cond, BooleanVar):
        raise TypeMismatchError(f"condition '{condition.expr}' is {cond.type()}, expected bool")
    cond.assert_assignment()
    return cond.value


class Instruction:
    status = None

    def __init__(self, line_index=None):
        self.line_index = line_index

    def set_context(self, interp):
        interp.current_line_index = self.line_index
        return interp.context.frame(self.status, self, self.line_index)

    def execute(self, interp):
        with self.set_context(interp):
            interp.stats["executed_instructions"] += 1
            return self._run(interp)

    def _run(self, interp):
        raise NotImplementedError("Subclasses must implement this method")

    def __repr__(self):
        return f"{self.__class__.__name__}(line={self.line_index})"


# === CONTROL FLOW ===

class LoopBody:
    """Condition and body shared by both loop forms."""

    def __init__(self, condition, instructions):
        self.condition = Expression.coerce(condition)
        self.instructions = list(instructions)
        self.active = 0

    def test(self, interp):
        return check_condition(self.condition, interp)

    def run_iteration(self, interp):
        # fresh scope per iteration: a body declaration never sees the previous one
        with interp.scopes.local_scope():
            return execute_block(self.instructions, interp)


class WhileLoop(Instruction):
    status = Status.WHILE_LOOP

    def __init__(self, line_index, condition, instructions):
        super().__init__(line_index)
        self.loop = LoopBody(condition, instructions)
        self.depth = 0

    @property
    def instructions(self):
        return self.loop.instructions

    def is_in_loop(self):
        return self.loop.active > 0

    def _run(self, interp):
        self.depth = interp.context.count(*LOOP_STATUSES)
        with interp.scopes.local_scope():
            while self.loop.test(interp):
                self.loop.active += 1
                try:
                    flow = self.loop.run_iteration(interp)
                finally:
                    self.loop.active -= 1
                if flow is BREAK:
                    break
                if flow is not None and flow.kind is FlowKind.RETURN:
                    return flow
        return None


class ForLoop(Instruction):
    status = Status.FOR_LOOP

    def __init__(self, line_index, start, condition, step, instructions):
        super().__init__(line_index)
        self.start = start
        self.step = step
        self.loop = LoopBody(condition, instructions)
        self.depth = 0

    @property
    def instructions(self):
        return self.loop.instructions

    def is_in_loop(self):
        return self.loop.active > 0

    def _run(self, interp):
        self.depth = interp.context.count(*LOOP_STATUSES)
        # the initializer's bindings live in the loop scope, outside the iterations
        with interp.scopes.local_scope():
            self.start.execute(interp)
            while self.loop.test(interp):
                self.loop.active += 1
                try:
                    flow = self.loop.run_iteration(interp)
                finally:
                    self.loop.active -= 1
                if flow is BREAK:
                    break
                if flow is not None and flow.kind is FlowKind.RETURN:
                    return flow
                # runs after continue as well
                self.step.execute(interp)
        return None


class IfCondition(Instruction):
    status = Status.IF

    def __init__(self, line_index, condition, instructions, else_instructions=None):
        super().__init__(line_index)
        self.condition = Expression.coerce(condition)
        self.instructions = list(instructions)
        self.else_instructions = list(else_instructions or [])
        self.depth = 0

    def _run(self, interp):
        self.depth = interp.context.count(Status.IF)
        branch = self.instructions if check_condition(self.condition, interp) else self.else_instructions
        # one scope for the whole branch, unlike loops
        with interp.scopes.local_scope():
            return execute_block(branch, interp)


class Break(Instruction):
    status = Status.BREAK

    def _run(self, interp):
        return BREAK


class Continue(Instruction):
    status = Status.CONTINUE

    def _run(self, interp):
        return CONTINUE


class Return(Instruction):
    status = Status.RETURN

    def __init__(self, line_index, value=None):
        super().__init__(line_index)
        self.value = Expression.coerce(value) if value is not None else None

    def _run(self, interp):
        if self.value is None:
            return Flow(FlowKind.RETURN)
        result = self.value.evaluate(interp)
        result.assert_assignment()
        return Flow(FlowKind.RETURN, result.copy())


# === STATE MUTATION ===

class Declaration(Instruction):
    status = Status.DECLARATION

    def __init__(self, line_index, var_name, var_expr, var_type="auto", assignment=True,
                 overwrite=OverwriteMode.NEW):
        super().__init__(line_index)
        if not is_valid_name(var_name):
            raise InvalidNamingError(f"invalid variable name '{var_name}'", line_index)
        if var_type != "auto" and var_type not in Environment.known_types():
            raise TypeMismatchError(f"unknown type '{var_type}'", line_index)
        self.var_name = var_name
        self.var_expr = Expression.coerce(var_expr)
        self.var_type = var_type
        self.assignment = assignment
        self.overwrite = OverwriteMode(overwrite)

    def _check_existence(self, scopes):
        exists = scopes.variable_exists_in_current_scope(self.var_name)
        if self.overwrite is OverwriteMode.NEW and exists:
            raise DeclaredExistingVarError(f"variable '{self.var_name}' is already declared")
        if self.overwrite is OverwriteMode.FORCE and not exists:
            raise OverwriteNonExistingVarError(f"variable '{self.var_name}' does not exist")
        if exists and scopes.get_current_dict()[self.var_name].is_traced():
            raise TracedOverwriteError(f"cannot redeclare traced variable '{self.var_name}'")

    def _run(self, interp):
        scopes = interp.scopes
        self._check_existence(scopes)

        variable = self.var_expr.evaluate(interp)
        variable.assert_assignment()

        if self.var_type != "auto":
            default_value = scopes.default_value(self.var_type)
            if not variable.has_same_parent(default_value):
                raise TypeMismatchError(
                    f"cannot declare {self.var_type} '{self.var_name}' from {variable.type()} value"
                )
            if self.var_type == "int" and isinstance(variable, FloatVar):
                raise TypeMismatchError(f"cannot declare int '{self.var_name}' from float value")

        declared = variable.copy()
        if self.var_type == "float" and isinstance(declared, IntegerVar):
            declared = FloatVar(float(declared.value))
        declared.assigned = self.assignment
        scopes.declare(self.var_name, declared)
        logger.debug("declared %s = %s (assigned: %s)", self.var_name, declared.inspect(), declared.assigned)

        interp.update_tracers(self)
        return None


class Assignment(Instruction):
    status = Status.ASSIGNMENT

    def __init__(self, line_index, var_name, var_value):
        super().__init__(line_index)
        if isinstance(var_name, str) and not var_name.strip():
            raise InvalidNamingError("assignment target is empty", line_index)
        self.target = Expression.coerce(var_name)
        self.var_value = Expression.coerce(var_value)

    @property
    def var_name(self):
        return self.target.expr

    def _run(self, interp):
        value = self.var_value.evaluate(interp)
        value.assert_assignment()
        self.target.parse_location(interp).set_value(value)
        logger.debug("assigned %s = %s", self.var_name, value.inspect())

        interp.update_tracers(self)
        return None


class VoidFunctionCall(Instruction):
    status = Status.PREDEFINED_CALL

    def __init__(self, line_index, function_name, *args):
        super().__init__(line_index)
        self.function_name = function_name
        self.args = [Expression.coerce(arg) for arg in args]
        self._called = False

    def get_args(self):
        return list(self.args)

    def has_been_called(self):
        return self._called

    def _run(self, interp):
        self._called = True
        values = [arg.evaluate(interp) for arg in self.args]
        for value in values:
            value.assert_assignment()
        interp.functions.call_function_by_name(interp, self.function_name, values)

        # arguments or the callee may have changed shared state
        interp.update_tracers(self)
        return None


class FunctionDef(Instruction):
    status = Status.USER_FUNCTION

    def __init__(self, line_index, func):
        super().__init__(line_index)
        self.func = func

    def _run(self, interp):
        interp.functions.add_user_function(self.func)
        return None


class Tracing(Instruction):
    # no tracer update: starting observation changes no value
    status = Status.TRACE_START

    def __init__(self, line_index, traced_vars):
        super().__init__(line_index)
        self.traced_vars = [Expression.coerce(expr) for expr in traced_vars]

    def _run(self, interp):
        for traced_expr in self.traced_vars:
            traced_var = traced_expr.evaluate(interp)
            if traced_var.is_traced():
                raise AlreadyTracedError(f"'{traced_expr.expr}' is already traced")
            interp.tracer.start(traced_var, traced_expr.expr)
        return None
