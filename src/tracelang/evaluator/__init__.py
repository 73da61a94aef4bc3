# src/tracelang/evaluator/__init__.py
from .core import Interpreter
from .expressions import Expression, ExpressionEvaluator
from .functions import Builtin, FunctionRegistry, UserFunction
from .statements import (
    Assignment, Break, Continue, Declaration, ForLoop, FunctionDef, IfCondition,
    Instruction, OverwriteMode, Return, Tracing, VoidFunctionCall, WhileLoop
)

__all__ = [
    'Interpreter', 'Expression', 'ExpressionEvaluator', 'Builtin', 'FunctionRegistry',
    'UserFunction', 'Assignment', 'Break', 'Continue', 'Declaration', 'ForLoop',
    'FunctionDef', 'IfCondition', 'Instruction', 'OverwriteMode', 'Return', 'Tracing',
    'VoidFunctionCall', 'WhileLoop',
]
