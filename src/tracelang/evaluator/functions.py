# src/tracelang/evaluator/functions.py
import logging
import math
import sys

from ..context import Status
from ..environment import is_valid_name
from ..errors import (
    ArgumentCountError, ControlFlowError, DeclaredExistingVarError, DuplicateFunctionError,
    EvaluationError, InvalidNamingError, ResourceExhaustedError, TypeMismatchError,
    UnknownFunctionError
)
from ..object import (
    FloatVar, IntegerVar, ListVar, NUMERIC, StringVar, Variable, from_raw_value
)
from .statements import FlowKind, execute_block

logger = logging.getLogger(__name__)


class UserFunction:
    """A function written in the language: parameters plus an instruction block."""

    def __init__(self, name, parameters, instructions):
        if not is_valid_name(name):
            raise InvalidNamingError(f"invalid function name '{name}'")
        seen = set()
        for param in parameters:
            if not is_valid_name(param):
                raise InvalidNamingError(f"invalid parameter name '{param}' in {name}()")
            if param in seen:
                raise DeclaredExistingVarError(f"parameter '{param}' repeated in {name}()")
            seen.add(param)
        self.name = name
        self.parameters = list(parameters)
        self.instructions = list(instructions)

    def invoke(self, interp, args):
        if len(args) != len(self.parameters):
            raise ArgumentCountError(self.name, len(self.parameters), len(args))

        interp.enter_call(self.name)
        try:
            with interp.context.frame(Status.FUNCTION_BODY, self), interp.scopes.local_scope():
                # arguments become fresh locals of the callee
                for param, arg in zip(self.parameters, args):
                    arg.assert_assignment()
                    interp.scopes.declare(param, arg.copy())
                flow = execute_block(self.instructions, interp)
        except RecursionError as exc:
            raise ResourceExhaustedError(
                interp.call_depth, f"host recursion limit ({sys.getrecursionlimit()} frames)"
            ) from exc
        finally:
            interp.call_depth -= 1

        if flow is None:
            return None
        if flow.kind is FlowKind.RETURN:
            return flow.value
        raise ControlFlowError(f"'{flow.kind.value}' outside of a loop in {self.name}()")

    def __repr__(self):
        return f"UserFunction({self.name}({', '.join(self.parameters)}))"


class Builtin:
    def __init__(self, fn, name="", min_args=0, max_args=None):
        self.fn = fn  # native Python callable: fn(interp, *args)
        self.name = name
        self.min_args = min_args
        self.max_args = max_args

    def invoke(self, interp, args):
        if len(args) < self.min_args or (self.max_args is not None and len(args) > self.max_args):
            expected = self.min_args if self.min_args == self.max_args else (
                f"{self.min_args}+" if self.max_args is None else f"{self.min_args}-{self.max_args}"
            )
            raise ArgumentCountError(self.name, expected, len(args))
        result = self.fn(interp, *args)
        if result is None or isinstance(result, Variable):
            return result
        return from_raw_value(result)

    def __repr__(self):
        return f"<built-in function: {self.name}>"


class FunctionRegistry:
    """Built-in handlers and user-defined functions, looked up by name."""

    def __init__(self):
        self.builtins = {}
        self.user_functions = {}
        self._register_core_builtins()

    def add_builtin(self, name, fn, min_args=0, max_args=None):
        if name in self.builtins:
            raise DuplicateFunctionError(f"built-in '{name}' is already registered")
        self.builtins[name] = Builtin(fn, name, min_args, max_args)

    def add_user_function(self, func):
        existing = self.user_functions.get(func.name)
        if existing is not None and existing is not func:
            raise DuplicateFunctionError(f"function '{func.name}' is already defined")
        self.user_functions[func.name] = func
        logger.debug("registered user function %s", func)

    def exists(self, name):
        return name in self.user_functions or name in self.builtins

    def get(self, name):
        # user functions shadow built-ins of the same name
        func = self.user_functions.get(name) or self.builtins.get(name)
        if func is None:
            raise UnknownFunctionError(f"function '{name}' is not defined")
        return func

    def call_function_by_name(self, interp, name, args):
        func = self.get(name)
        interp.stats["function_calls"] += 1
        return func.invoke(interp, list(args))

    def names(self):
        return sorted(set(self.user_functions) | set(self.builtins))

    # --- BUILTIN IMPLEMENTATIONS ---

    def _register_core_builtins(self):
        def _print(interp, *a):
            interp.write(" ".join(arg.inspect() for arg in a))

        def _length(interp, *a):
            arg = a[0]
            if isinstance(arg, ListVar):
                return IntegerVar(len(arg.elements))
            if isinstance(arg, StringVar):
                return IntegerVar(len(arg.value))
            raise TypeMismatchError(f"length() not supported for {arg.type()}")

        def _append(interp, *a):
            target = _expect_list(a[0], "append")
            target.elements.append(a[1].copy())

        def _insert(interp, *a):
            target = _expect_list(a[0], "insert")
            index = _expect_int(a[1], "insert")
            if not 0 <= index <= len(target.elements):
                raise EvaluationError(f"insert() index {index} out of range")
            target.elements.insert(index, a[2].copy())

        def _pop(interp, *a):
            target = _expect_list(a[0], "pop")
            if not target.elements:
                raise EvaluationError("pop() from empty list")
            index = _expect_int(a[1], "pop") if len(a) > 1 else len(target.elements) - 1
            if not 0 <= index < len(target.elements):
                raise EvaluationError(f"pop() index {index} out of range")
            removed = target.elements.pop(index)
            removed.set_name(None)
            return removed

        def _swap(interp, *a):
            target = _expect_list(a[0], "swap")
            i, j = _expect_int(a[1], "swap"), _expect_int(a[2], "swap")
            size = len(target.elements)
            if not (0 <= i < size and 0 <= j < size):
                raise EvaluationError(f"swap() indices {i}, {j} out of range")
            target.elements[i], target.elements[j] = target.elements[j], target.elements[i]

        def _fill(interp, *a):
            count = _expect_int(a[1], "fill")
            if count < 0:
                raise EvaluationError("fill() count must not be negative")
            return ListVar([a[0].copy() for _ in range(count)])

        def _range(interp, *a):
            bounds = [_expect_int(arg, "range") for arg in a]
            if len(bounds) == 3 and bounds[2] == 0:
                raise EvaluationError("range() step must not be zero")
            return ListVar([IntegerVar(i) for i in range(*bounds)])

        def _str(interp, *a):
            return StringVar(a[0].inspect())

        def _int(interp, *a):
            arg = a[0]
            try:
                if isinstance(arg, StringVar):
                    return IntegerVar(int(arg.value.strip()))
                if arg.family == NUMERIC:
                    return IntegerVar(int(arg.value))
            except ValueError:
                raise EvaluationError(f"int() cannot convert '{arg.inspect()}'")
            raise TypeMismatchError(f"int() not supported for {arg.type()}")

        def _float(interp, *a):
            arg = a[0]
            try:
                if isinstance(arg, StringVar):
                    return FloatVar(float(arg.value.strip()))
                if arg.family == NUMERIC:
                    return FloatVar(float(arg.value))
            except ValueError:
                raise EvaluationError(f"float() cannot convert '{arg.inspect()}'")
            raise TypeMismatchError(f"float() not supported for {arg.type()}")

        def _abs(interp, *a):
            if a[0].family != NUMERIC:
                raise TypeMismatchError(f"abs() not supported for {a[0].type()}")
            return from_raw_value(abs(a[0].value))

        def _sqrt(interp, *a):
            if a[0].family != NUMERIC or a[0].value < 0:
                raise EvaluationError("sqrt() takes a non-negative number")
            return FloatVar(math.sqrt(a[0].value))

        def _type(interp, *a):
            return StringVar(a[0].type())

        self.add_builtin("print", _print)
        self.add_builtin("length", _length, 1, 1)
        self.add_builtin("append", _append, 2, 2)
        self.add_builtin("insert", _insert, 3, 3)
        self.add_builtin("pop", _pop, 1, 2)
        self.add_builtin("swap", _swap, 3, 3)
        self.add_builtin("fill", _fill, 2, 2)
        self.add_builtin("range", _range, 1, 3)
        self.add_builtin("str", _str, 1, 1)
        self.add_builtin("int", _int, 1, 1)
        self.add_builtin("float", _float, 1, 1)
        self.add_builtin("abs", _abs, 1, 1)
        self.add_builtin("sqrt", _sqrt, 1, 1)
        self.add_builtin("type", _type, 1, 1)


def _expect_list(arg, fn_name):
    if not isinstance(arg, ListVar):
        raise TypeMismatchError(f"{fn_name}() expects a list, got {arg.type()}")
    return arg


def _expect_int(arg, fn_name):
    if not isinstance(arg, IntegerVar):
        raise TypeMismatchError(f"{fn_name}() expects an int, got {arg.type()}")
    return arg.value
