from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import StrEnum
from typing import Any, Optional

from run_timeline.core import ErrorInfo
from run_timeline.events import EventKind


class StepState(StrEnum):
    PREPARING = "preparing"
    RUNNING = "running"
    RETRY = "retry"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"
    UNKNOWN = "unknown"

    @property
    def is_terminal(self) -> bool:
        return self in (StepState.SUCCEEDED, StepState.FAILED, StepState.SKIPPED)


class RunStatus(StrEnum):
    SUCCESS = "success"
    FAILURE = "failure"
    CANCELED = "canceled"


class MissingTerminalPolicy(StrEnum):
    """What a started step becomes when the run ends without its terminal event."""

    UNKNOWN = "unknown"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class StepTransition:
    state: StepState
    timestamp: Optional[float]


@dataclass(frozen=True, slots=True)
class StepMarker:
    kind: EventKind
    timestamp: Optional[float]
    message: str = ""
    label: Optional[str] = None
    description: Optional[str] = None
    asset_key: Optional[str] = None
    success: Optional[bool] = None
    marker_start: Optional[str] = None
    marker_end: Optional[str] = None


@dataclass(frozen=True, slots=True)
class StepRuntimeState:
    key: str
    state: StepState = StepState.PREPARING
    start: Optional[float] = None
    end: Optional[float] = None
    transitions: tuple[StepTransition, ...] = ()
    attempts: int = 0
    markers: tuple[StepMarker, ...] = ()
    error: Optional[ErrorInfo] = None

    @property
    def duration_ms(self) -> Optional[float]:
        if self.start is None or self.end is None:
            return None
        return max(0.0, self.end - self.start)


@dataclass(frozen=True, slots=True)
class RunMetadataSnapshot:
    steps: dict[str, StepRuntimeState] = field(default_factory=dict)
    started_at: Optional[float] = None
    exited_at: Optional[float] = None
    status: Optional[RunStatus] = None
    run_error: Optional[ErrorInfo] = None
    global_markers: tuple[StepMarker, ...] = ()
    unrecognized: int = 0
    event_count: int = 0

    def step(self, key: str) -> StepRuntimeState:
        """State of `key`, or a fresh PREPARING state for keys never seen."""
        found = self.steps.get(key)
        return found if found is not None else StepRuntimeState(key=key)

    def state_of(self, key: str) -> StepState:
        return self.step(key).state

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["steps"] = [asdict(s) for s in self.steps.values()]
        return d
