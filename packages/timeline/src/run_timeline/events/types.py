from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Mapping, Optional


class EventKind(StrEnum):
    RUN_START = "run.start"
    RUN_SUCCESS = "run.success"
    RUN_FAILURE = "run.failure"
    RUN_CANCELED = "run.canceled"

    STEP_START = "step.start"
    STEP_RESTART = "step.restart"
    STEP_SUCCESS = "step.success"
    STEP_FAILURE = "step.failure"
    STEP_SKIPPED = "step.skipped"
    STEP_UP_FOR_RETRY = "step.retry"

    STEP_MATERIALIZATION = "step.materialization"
    STEP_EXPECTATION_RESULT = "step.expectation"
    ENGINE = "engine"

    LOG_MESSAGE = "log"
    UNRECOGNIZED = "unrecognized"

    @property
    def category(self) -> str:
        return _CATEGORY[self]

    @property
    def is_step_start(self) -> bool:
        return self in (EventKind.STEP_START, EventKind.STEP_RESTART)

    @property
    def is_step_terminal(self) -> bool:
        return self in _STEP_TERMINAL

    @property
    def is_step_lifecycle(self) -> bool:
        return (
            self.is_step_start
            or self.is_step_terminal
            or self is EventKind.STEP_UP_FOR_RETRY
        )

    @property
    def is_run_terminal(self) -> bool:
        return self in (
            EventKind.RUN_SUCCESS,
            EventKind.RUN_FAILURE,
            EventKind.RUN_CANCELED,
        )

    @property
    def is_marker(self) -> bool:
        return self in (
            EventKind.STEP_MATERIALIZATION,
            EventKind.STEP_EXPECTATION_RESULT,
            EventKind.ENGINE,
        )


_STEP_TERMINAL = frozenset(
    {EventKind.STEP_SUCCESS, EventKind.STEP_FAILURE, EventKind.STEP_SKIPPED}
)

# Categories are what the `type:` log filter token matches against
_CATEGORY: dict[EventKind, str] = {
    EventKind.RUN_START: "run",
    EventKind.RUN_SUCCESS: "run",
    EventKind.RUN_FAILURE: "failure",
    EventKind.RUN_CANCELED: "run",
    EventKind.STEP_START: "start",
    EventKind.STEP_RESTART: "start",
    EventKind.STEP_SUCCESS: "success",
    EventKind.STEP_FAILURE: "failure",
    EventKind.STEP_SKIPPED: "skipped",
    EventKind.STEP_UP_FOR_RETRY: "retry",
    EventKind.STEP_MATERIALIZATION: "materialization",
    EventKind.STEP_EXPECTATION_RESULT: "expectation",
    EventKind.ENGINE: "engine",
    EventKind.LOG_MESSAGE: "log",
    EventKind.UNRECOGNIZED: "unknown",
}


class LogLevel(StrEnum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @classmethod
    def parse(cls, value: object) -> "LogLevel":
        s = str(value or "").strip().upper()
        if s == "WARN":
            return cls.WARNING
        try:
            return cls(s)
        except ValueError:
            return cls.INFO


@dataclass(frozen=True, slots=True)
class RunEvent:
    """
    One entry of a run's event log.

    `error` keeps the failure payload as delivered; the reducer normalizes it.
    `raw` keeps the source record of opaque lines and is ignored by equality.
    """

    kind: EventKind
    message: str = ""
    timestamp: Optional[float] = None
    level: LogLevel = LogLevel.INFO
    step_key: Optional[str] = None

    error: Any = None

    # marker payload: materializations, expectation results, engine markers
    label: Optional[str] = None
    description: Optional[str] = None
    asset_key: Optional[str] = None
    success: Optional[bool] = None
    marker_start: Optional[str] = None
    marker_end: Optional[str] = None

    raw: Optional[Mapping[str, Any]] = field(default=None, compare=False)

    @property
    def category(self) -> str:
        return self.kind.category

    @property
    def is_opaque(self) -> bool:
        return self.kind is EventKind.UNRECOGNIZED
