# src/tracelang/object.py
"""Runtime value containers.

A ``Variable`` couples a raw payload with the bookkeeping the engine needs:
whether it has ever been given a value (``assigned``), whether it is under
observation (``traced``) and the name it is bound under, if any.
"""

from .errors import TypeMismatchError, UnassignedValueError

NUMERIC = "numeric"


class Variable:
    type_name = None
    family = None

    def __init__(self, value, assigned=True, name=None):
        self.value = value
        self.assigned = assigned
        self.traced = False
        self.name = name

    def inspect(self):
        return str(self.value)

    def type(self):
        return self.type_name

    def get_raw_value(self):
        return self.value

    def snapshot(self):
        """Comparable copy of the current state, used by the tracer."""
        return (self.type_name, self.get_raw_value(), self.assigned)

    def has_same_parent(self, other):
        return self.family == other.family

    def assert_assignment(self):
        if not self.assigned:
            label = self.name or self.inspect()
            raise UnassignedValueError(f"'{label}' is declared but has no value")

    def set_name(self, name):
        self.name = name

    def is_traced(self):
        return self.traced

    def start_tracing(self):
        self.traced = True

    def copy(self):
        return from_raw_value(self.get_raw_value())

    def set_value(self, other):
        """Overwrite this variable in place with another variable's payload."""
        if not self.has_same_parent(other):
            raise TypeMismatchError(
                f"cannot store {other.type()} value in {self.type()} variable"
                + (f" '{self.name}'" if self.name else "")
            )
        self._store(other)
        self.assigned = True

    def _store(self, other):
        self.value = other.get_raw_value()

    def __repr__(self):
        return f"{self.__class__.__name__}({self.inspect()!r}, name={self.name!r})"


class IntegerVar(Variable):
    type_name = "int"
    family = NUMERIC

    def _store(self, other):
        if isinstance(other, FloatVar):
            raise TypeMismatchError(
                f"cannot store float value in int variable" + (f" '{self.name}'" if self.name else "")
            )
        self.value = other.get_raw_value()


class FloatVar(Variable):
    type_name = "float"
    family = NUMERIC

    def _store(self, other):
        self.value = float(other.get_raw_value())


class StringVar(Variable):
    type_name = "string"
    family = "string"

    def inspect(self):
        return self.value


class BooleanVar(Variable):
    type_name = "bool"
    family = "bool"

    def inspect(self):
        return "true" if self.value else "false"


class NoneVar(Variable):
    type_name = "none"
    family = "none"

    def __init__(self, value=None, assigned=True, name=None):
        super().__init__(None, assigned, name)

    def inspect(self):
        return "none"


class ListVar(Variable):
    """List of element variables; element access yields the element itself."""

    type_name = "list"
    family = "list"

    def __init__(self, elements, assigned=True, name=None):
        super().__init__(list(elements), assigned, name)

    @property
    def elements(self):
        return self.value

    def inspect(self):
        return "[" + ", ".join(el.inspect() for el in self.value) + "]"

    def get_raw_value(self):
        return [el.get_raw_value() for el in self.value]

    def _store(self, other):
        self.value = [from_raw_value(raw) for raw in other.get_raw_value()]


def from_raw_value(raw, assigned=True, name=None):
    """Build a fresh variable from a plain Python value."""
    if isinstance(raw, Variable):
        raw = raw.get_raw_value()
    # bool before int: bool is an int subclass
    if isinstance(raw, bool):
        return BooleanVar(raw, assigned, name)
    if isinstance(raw, int):
        return IntegerVar(raw, assigned, name)
    if isinstance(raw, float):
        return FloatVar(raw, assigned, name)
    if isinstance(raw, str):
        return StringVar(raw, assigned, name)
    if isinstance(raw, (list, tuple)):
        return ListVar([from_raw_value(el) for el in raw], assigned, name)
    if raw is None:
        return NoneVar(assigned=assigned, name=name)
    raise TypeMismatchError(f"unsupported raw value of type {type(raw).__name__}")
