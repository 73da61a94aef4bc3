# src/tracelang/context.py
"""Execution context stack.

Each running instruction owns exactly one frame for the duration of its
``execute`` call. The stack is used for diagnostics (fault frame traces), for
nesting queries (``count``/``is_inside``) and for the depth-balance check that
every instruction performs before releasing its frame.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

from .errors import InternalConsistencyError, TraceLangError

logger = logging.getLogger(__name__)


class Status(Enum):
    WHILE_LOOP = "while-loop"
    FOR_LOOP = "for-loop"
    IF = "if"
    DECLARATION = "declaration"
    ASSIGNMENT = "assignment"
    PREDEFINED_CALL = "predefined-call"
    USER_FUNCTION = "user-function"
    TRACE_START = "trace-start"
    FUNCTION_BODY = "function-body"
    RETURN = "return"
    BREAK = "break"
    CONTINUE = "continue"


LOOP_STATUSES = (Status.WHILE_LOOP, Status.FOR_LOOP)


@dataclass
class Frame:
    status: Status
    info: Any
    line: Optional[int] = None

    def describe(self) -> str:
        where = f" (line {self.line})" if self.line is not None else ""
        return f"at {self.status.value}{where}"


class ContextStack:
    def __init__(self):
        self._frames: List[Frame] = []
        self.max_depth = 0

    def __len__(self):
        return len(self._frames)

    @property
    def frames(self):
        return tuple(self._frames)

    def current(self) -> Optional[Frame]:
        return self._frames[-1] if self._frames else None

    def get_status(self) -> Optional[Status]:
        frame = self.current()
        return frame.status if frame else None

    def get_info(self):
        frame = self.current()
        return frame.info if frame else None

    def count(self, *statuses: Status) -> int:
        return sum(1 for frame in self._frames if frame.status in statuses)

    def is_inside(self, *statuses: Status) -> bool:
        return any(frame.status in statuses for frame in self._frames)

    def describe(self) -> List[str]:
        return [frame.describe() for frame in reversed(self._frames)]

    @contextmanager
    def frame(self, status: Status, info: Any = None, line: Optional[int] = None):
        """Hold one frame for the body of the ``with`` block.

        On normal exit the stack must be exactly as deep as it was right after
        the push; anything else is an engine defect.
        """
        frame = Frame(status, info, line)
        logger.debug("enter %s", frame.describe())
        self._frames.append(frame)
        self.max_depth = max(self.max_depth, len(self._frames))
        integrity_check = len(self._frames)
        try:
            yield frame
        except TraceLangError as exc:
            exc.add_frame(frame.describe())
            raise
        finally:
            found = len(self._frames)
            del self._frames[integrity_check - 1:]
        if found != integrity_check:
            raise InternalConsistencyError(
                f"context stack depth {found} after {frame.describe()}, expected {integrity_check}"
            )
        logger.debug("leave %s", frame.describe())
