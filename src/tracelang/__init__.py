# src/tracelang/__init__.py
"""tracelang: an explicitly typed teaching language that records the value
history of the variables it is asked to trace."""

__version__ = "0.1.0"

from .config import TraceLangConfig, config
from .errors import (
    ErrorKind, InternalConsistencyError, ScriptError, TraceLangError, TraceLangSyntaxError
)
from .evaluator import Interpreter
from .lexer import Lexer
from .parser import Parser, parse_program

__all__ = [
    '__version__', 'TraceLangConfig', 'config', 'ErrorKind', 'InternalConsistencyError',
    'ScriptError', 'TraceLangError', 'TraceLangSyntaxError', 'Interpreter', 'Lexer',
    'Parser', 'parse_program',
]
