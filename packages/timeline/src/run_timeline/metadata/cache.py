from __future__ import annotations

from typing import Sequence

from run_timeline.events import RunEvent
from run_timeline.plan import ExecutionPlanGraph

from .reducer import derive_run_metadata
from .types import MissingTerminalPolicy, RunMetadataSnapshot


class RunMetadataCache:
    """
    Memoizes derive_run_metadata on (plan, log length, last event).

    The log is append-only, so an unchanged length and tail means an unchanged
    log. Any growth recomputes from the full log.
    """

    def __init__(
        self, *, missing_terminal: MissingTerminalPolicy = MissingTerminalPolicy.UNKNOWN
    ) -> None:
        self.missing_terminal = missing_terminal
        self._plan: ExecutionPlanGraph | None = None
        self._length = -1
        self._tail: RunEvent | None = None
        self._value: RunMetadataSnapshot | None = None
        self.hits = 0
        self.misses = 0

    def derive(
        self, plan: ExecutionPlanGraph | None, events: Sequence[RunEvent]
    ) -> RunMetadataSnapshot:
        tail = events[-1] if events else None
        if (
            self._value is not None
            and plan is self._plan
            and len(events) == self._length
            and (tail is self._tail or tail == self._tail)
        ):
            self.hits += 1
            return self._value

        self.misses += 1
        value = derive_run_metadata(
            plan, events, missing_terminal=self.missing_terminal
        )
        self._plan = plan
        self._length = len(events)
        self._tail = tail
        self._value = value
        return value

    def clear(self) -> None:
        self._plan = None
        self._length = -1
        self._tail = None
        self._value = None
