# src/tracelang/tracer.py
"""Value tracer: ordered value history of every variable under observation."""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TraceEvent:
    """One recorded value of a traced variable."""

    value: Any
    type_name: str
    line: Optional[int] = None
    status: Optional[str] = None


@dataclass
class VariableTrace:
    """History of a single traced variable, keyed by identity in the Tracer."""

    variable: Any
    name: Optional[str]
    last_snapshot: Any = None
    events: List[TraceEvent] = field(default_factory=list)

    @property
    def values(self):
        return [event.value for event in self.events]

    def update(self, line=None, status=None) -> bool:
        snapshot = self.variable.snapshot()
        if snapshot == self.last_snapshot:
            return False
        self.last_snapshot = copy.deepcopy(snapshot)
        type_name, raw, _ = self.last_snapshot
        self.events.append(TraceEvent(raw, type_name, line, status))
        return True


class Tracer:
    def __init__(self):
        self._traces: Dict[int, VariableTrace] = {}

    def start(self, variable, name=None) -> VariableTrace:
        """Begin observing ``variable``; its current value is the baseline, not an entry."""
        variable.start_tracing()
        trace = VariableTrace(variable, name or variable.name, copy.deepcopy(variable.snapshot()))
        self._traces[id(variable)] = trace
        logger.debug("tracing started on %s", variable.name or variable.inspect())
        return trace

    def update_tracers(self, line=None, status=None) -> int:
        """Record a new entry for every traced variable whose value changed."""
        recorded = 0
        for trace in self._traces.values():
            if trace.update(line, status):
                recorded += 1
                logger.debug("trace %s <- %r", trace.name, trace.events[-1].value)
        return recorded

    def trace_of(self, variable) -> Optional[VariableTrace]:
        return self._traces.get(id(variable))

    def history(self, variable) -> List[Any]:
        trace = self.trace_of(variable)
        return trace.values if trace else []

    @property
    def traces(self) -> List[VariableTrace]:
        return list(self._traces.values())

    def histories(self) -> Dict[str, List[Any]]:
        """name -> recorded values, in tracing order; unnamed variables get an index."""
        result = {}
        for index, trace in enumerate(self._traces.values()):
            key = trace.name or f"<anonymous {index}>"
            if key in result:
                key = f"{key}#{index}"
            result[key] = trace.values
        return result

    def __len__(self):
        return len(self._traces)
