# src/tracelang/errors.py
"""
Fault taxonomy for the tracelang engine.

Every fault carries an ``ErrorKind``. Script faults (``ScriptError``) are
language-level errors in the running program; ``InternalConsistencyError``
marks a defect in the engine itself and deliberately shares no base with them
beyond ``TraceLangError``.
"""

from enum import Enum


class ErrorKind(Enum):
    INVALID_NAMING = "invalid-naming"
    DECLARED_EXISTING_VARIABLE = "declared-existing-variable"
    OVERWRITE_NONEXISTENT_VARIABLE = "overwrite-nonexistent-variable"
    UNASSIGNED_VALUE_USE = "unassigned-value-use"
    TYPE_MISMATCH = "type-mismatch"
    ALREADY_TRACED = "already-traced"
    TRACED_OVERWRITE_FORBIDDEN = "traced-overwrite-forbidden"
    UNKNOWN_FUNCTION = "unknown-function"
    DUPLICATE_FUNCTION = "duplicate-function"
    ARGUMENT_COUNT = "argument-count"
    UNDEFINED_VARIABLE = "undefined-variable"
    EVALUATION = "evaluation"
    CONTROL_FLOW = "control-flow"
    RESOURCE_EXHAUSTED = "resource-exhausted"
    SYNTAX = "syntax"
    INTERNAL_CONSISTENCY = "internal-consistency"


class TraceLangError(Exception):
    """Base class for every fault raised by the interpreter."""

    kind = None

    def __init__(self, message, line=None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.frames = []

    def add_frame(self, description):
        """Record a context frame the fault unwound through (innermost first)."""
        self.frames.append(description)

    def __str__(self):
        if self.line is not None:
            return f"[{self.kind.value}] line {self.line}: {self.message}"
        return f"[{self.kind.value}] {self.message}"


class ScriptError(TraceLangError):
    """A fault caused by the running script."""

    kind = ErrorKind.EVALUATION


class InvalidNamingError(ScriptError):
    kind = ErrorKind.INVALID_NAMING


class DeclaredExistingVarError(ScriptError):
    kind = ErrorKind.DECLARED_EXISTING_VARIABLE


class OverwriteNonExistingVarError(ScriptError):
    kind = ErrorKind.OVERWRITE_NONEXISTENT_VARIABLE


class UnassignedValueError(ScriptError):
    kind = ErrorKind.UNASSIGNED_VALUE_USE


class TypeMismatchError(ScriptError):
    kind = ErrorKind.TYPE_MISMATCH


class AlreadyTracedError(ScriptError):
    kind = ErrorKind.ALREADY_TRACED


class TracedOverwriteError(ScriptError):
    kind = ErrorKind.TRACED_OVERWRITE_FORBIDDEN


class UnknownFunctionError(ScriptError):
    kind = ErrorKind.UNKNOWN_FUNCTION


class DuplicateFunctionError(ScriptError):
    kind = ErrorKind.DUPLICATE_FUNCTION


class ArgumentCountError(ScriptError):
    """Raised when a function receives the wrong number of arguments."""

    kind = ErrorKind.ARGUMENT_COUNT

    def __init__(self, function_name, expected, given, line=None):
        self.function_name = function_name
        self.expected = expected
        self.given = given
        super().__init__(
            f"{function_name}() takes {expected} argument(s) ({given} given)", line
        )


class UndefinedVariableError(ScriptError):
    kind = ErrorKind.UNDEFINED_VARIABLE


class EvaluationError(ScriptError):
    """Runtime expression fault: division by zero, bad index, bad target."""

    kind = ErrorKind.EVALUATION


class ControlFlowError(ScriptError):
    """break/continue outside a loop, or return outside a function."""

    kind = ErrorKind.CONTROL_FLOW


class ResourceExhaustedError(ScriptError):
    """Raised when call depth exceeds the configured or host limit."""

    kind = ErrorKind.RESOURCE_EXHAUSTED

    def __init__(self, depth, limit, line=None):
        self.depth = depth
        self.limit = limit
        super().__init__(f"Call depth {depth} exceeds limit {limit}", line)


class TraceLangSyntaxError(ScriptError):
    kind = ErrorKind.SYNTAX

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "syntax error")


class InternalConsistencyError(TraceLangError):
    """Context or scope stack imbalance: always an engine defect."""

    kind = ErrorKind.INTERNAL_CONSISTENCY
