# src/tracelang/evaluator/core.py
import logging
import sys
from contextlib import contextmanager

from ..config import config as default_config
from ..context import ContextStack
from ..environment import Environment
from ..errors import ControlFlowError, ResourceExhaustedError, TraceLangError
from ..object import Variable, from_raw_value
from ..tracer import Tracer
from .expressions import ExpressionEvaluator
from .functions import FunctionRegistry

logger = logging.getLogger(__name__)

# Python frames one script-level call can take (nested blocks, expressions).
FRAMES_PER_CALL = 50
# never raise the host limit past this, whatever max_call_depth says
MAX_HOST_FRAMES = 15000


class Interpreter:
    """All mutable engine state, threaded through every ``execute`` call.

    Holds the scope stack, the context stack, the function registry and the
    tracer. Instances are fully independent of each other.
    """

    def __init__(self, config=None, stdout=None):
        self.config = config or default_config
        self.scopes = Environment()
        self.context = ContextStack()
        self.functions = FunctionRegistry()
        self.tracer = Tracer()
        self.evaluator = ExpressionEvaluator(self)
        self.stdout = stdout if stdout is not None else sys.stdout
        self.current_line_index = None
        self.call_depth = 0
        self.stats = {
            "executed_instructions": 0,
            "function_calls": 0,
            "tracer_entries": 0,
            "max_call_depth": 0,
        }

    # ---- Hooks used by instructions -----------------------------------------

    def write(self, text):
        self.stdout.write(text + "\n")

    def update_tracers(self, instruction=None):
        status = instruction.status.value if instruction is not None and instruction.status else None
        self.stats["tracer_entries"] += self.tracer.update_tracers(self.current_line_index, status)

    def enter_call(self, name):
        if self.call_depth >= self.config.max_call_depth:
            raise ResourceExhaustedError(self.call_depth + 1, self.config.max_call_depth)
        logger.debug("enter %s (call depth %d)", name, self.call_depth + 1)
        self.call_depth += 1
        self.stats["max_call_depth"] = max(self.stats["max_call_depth"], self.call_depth)

    @contextmanager
    def host_stack(self):
        """Raise the host recursion limit so max_call_depth nested calls fit."""
        previous = sys.getrecursionlimit()
        wanted = min(previous + self.config.max_call_depth * FRAMES_PER_CALL, MAX_HOST_FRAMES)
        if wanted > previous:
            sys.setrecursionlimit(wanted)
            logger.debug("host recursion limit %d -> %d", previous, wanted)
        try:
            yield
        finally:
            sys.setrecursionlimit(previous)

    # ---- Driver -------------------------------------------------------------

    def run(self, program):
        """Execute a top-level instruction sequence (a Program or a list)."""
        instructions = getattr(program, "statements", program)
        try:
            with self.host_stack():
                for instr in instructions:
                    flow = instr.execute(self)
                    if flow is not None:
                        raise ControlFlowError(f"'{flow.kind.value}' outside of its construct")
        except RecursionError as exc:
            raise ResourceExhaustedError(
                self.call_depth, f"host recursion limit ({sys.getrecursionlimit()} frames)",
                self.current_line_index
            ) from exc
        except TraceLangError as exc:
            if exc.line is None:
                exc.line = self.current_line_index
            logger.debug("execution stopped: %s", exc)
            raise
        return self

    def execute_source(self, source, filename="<string>"):
        from ..parser.parser import parse_program
        return self.run(parse_program(source, filename))

    def call(self, name, *values):
        """Invoke a registered function from the host, e.g. a script's entry point."""
        args = [value if isinstance(value, Variable) else from_raw_value(value) for value in values]
        try:
            with self.host_stack():
                return self.functions.call_function_by_name(self, name, args)
        except RecursionError as exc:
            raise ResourceExhaustedError(
                self.call_depth, f"host recursion limit ({sys.getrecursionlimit()} frames)"
            ) from exc
        except TraceLangError as exc:
            if exc.line is None:
                exc.line = self.current_line_index
            raise

    def lookup(self, name):
        """Raw value of the variable visible under ``name``."""
        return self.scopes.variable_from_name(name).get_raw_value()
