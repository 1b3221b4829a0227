# reflection/execution.py

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _new_execution_id() -> int:
    # 48 bits leaves room to add reflection numbers without overflowing JSON ints
    return uuid.uuid4().int >> 80


@dataclass(eq=False)
class Execution:
    """
    One real call to a monitored method.

    Executions made while another one is running form a chain:
    `parent` is the execution that was running when this one started,
    `base` is the first execution of the chain (None for the root itself).
    """
    klass: str
    method: str
    caller_object: Any
    unique_id: int = field(default_factory=_new_execution_id)

    parent: Optional["Execution"] = None
    child: Optional["Execution"] = None
    base: Optional["Execution"] = None

    reflections: List[Dict[str, Any]] = field(default_factory=list)
    is_reflecting: bool = False

    @property
    def is_root(self) -> bool:
        return self.base is None


class ShadowStack:
    """
    Chain of executions currently running on one thread.
    """

    def __init__(self):
        self._top: Optional[Execution] = None
        self._bottom: Optional[Execution] = None
        self._depth = 0

    def __len__(self):
        return self._depth

    def peek(self) -> Optional[Execution]:
        return self._top

    def base(self) -> Optional[Execution]:
        return self._bottom

    def push(self, execution: Execution) -> Execution:
        if self._top is None:
            self._bottom = execution
        else:
            execution.parent = self._top
            execution.base = self._bottom
            self._top.child = execution

        self._top = execution
        self._depth += 1
        return execution

    def pop(self) -> Optional[Execution]:
        execution = self._top
        if execution is None:
            return None

        self._top = execution.parent
        if self._top is None:
            self._bottom = None
        else:
            self._top.child = None

        self._depth -= 1
        return execution
