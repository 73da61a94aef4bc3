# src/tracelang/environment.py
"""Scope store: a stack of name -> Variable dictionaries, innermost last."""

import logging
import re
from contextlib import contextmanager

from .errors import InternalConsistencyError, TypeMismatchError, UndefinedVariableError
from .object import BooleanVar, FloatVar, IntegerVar, ListVar, StringVar
from .tracelang_token import KEYWORDS

logger = logging.getLogger(__name__)

_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Fresh default per call so no two bindings ever share a payload.
DEFAULT_VALUES_BY_VAR_TYPE = {
    "int": lambda: IntegerVar(0),
    "float": lambda: FloatVar(0.0),
    "string": lambda: StringVar(""),
    "bool": lambda: BooleanVar(False),
    "list": lambda: ListVar([]),
}


def is_valid_name(name):
    """Naming predicate shared by declarations, parameters and functions."""
    if not isinstance(name, str) or not _NAME_PATTERN.match(name):
        return False
    return name not in KEYWORDS and name not in DEFAULT_VALUES_BY_VAR_TYPE


class Environment:
    def __init__(self):
        self.scopes = [{}]

    # ---- Scope lifecycle ----------------------------------------------------

    @contextmanager
    def local_scope(self):
        """Open a scope for the duration of the block; always closed on exit."""
        self.scopes.append({})
        depth = len(self.scopes)
        logger.debug("scope opened (depth %d)", depth)
        try:
            yield self.scopes[-1]
        finally:
            found = len(self.scopes)
            del self.scopes[depth - 1:]
        if found != depth:
            raise InternalConsistencyError(
                f"scope stack depth {found} does not match expected {depth}"
            )
        logger.debug("scope closed (depth %d)", depth - 1)

    @property
    def depth(self):
        return len(self.scopes)

    # ---- Bindings -----------------------------------------------------------

    def get_current_dict(self):
        return self.scopes[-1]

    def variable_exists_in_current_scope(self, name):
        return name in self.scopes[-1]

    def variable_exists(self, name):
        return any(name in scope for scope in self.scopes)

    def get(self, name, default=None):
        for scope in reversed(self.scopes):
            if name in scope:
                return scope[name]
        return default

    def variable_from_name(self, name):
        variable = self.get(name)
        if variable is None:
            raise UndefinedVariableError(f"variable '{name}' is not declared")
        return variable

    def declare(self, name, variable):
        """Bind ``variable`` under ``name`` in the innermost scope."""
        self.scopes[-1][name] = variable
        variable.set_name(name)
        return variable

    def visible_names(self):
        names = {}
        for scope in self.scopes:
            names.update(scope)
        return names

    # ---- Types --------------------------------------------------------------

    @staticmethod
    def known_types():
        return sorted(DEFAULT_VALUES_BY_VAR_TYPE)

    @staticmethod
    def default_value(var_type):
        factory = DEFAULT_VALUES_BY_VAR_TYPE.get(var_type)
        if factory is None:
            raise TypeMismatchError(f"unknown type '{var_type}'")
        return factory()
