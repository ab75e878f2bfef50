from __future__ import annotations

from typing import Any, Callable

import pytest
from run_timeline.events import EventKind, LogLevel, RunEvent
from run_timeline.plan import ExecutionPlanGraph, plan_from_dict

EventFactory = Callable[..., RunEvent]


@pytest.fixture
def linear_plan() -> ExecutionPlanGraph:
    """A -> B -> C: B depends on A, C depends on B."""
    return plan_from_dict(
        {
            "steps": [
                {"key": "A", "inputs": []},
                {"key": "B", "inputs": [{"dependsOn": [{"key": "A"}]}]},
                {"key": "C", "inputs": [{"dependsOn": [{"key": "B"}]}]},
            ]
        }
    )


@pytest.fixture
def etl_plan() -> ExecutionPlanGraph:
    return plan_from_dict(
        {
            "artifactsPersisted": True,
            "steps": [
                {"key": "ingest"},
                {"key": "transform", "depends_on": ["ingest"]},
                {"key": "load", "depends_on": ["transform"]},
            ],
        }
    )


@pytest.fixture
def diamond_plan() -> ExecutionPlanGraph:
    """root fans out to left/right, which join at sink; report hangs off left."""
    return plan_from_dict(
        {
            "steps": [
                {"key": "root"},
                {"key": "left", "depends_on": ["root"]},
                {"key": "right", "depends_on": ["root"]},
                {"key": "sink", "depends_on": ["left", "right"]},
                {"key": "report_daily", "depends_on": ["left"]},
            ]
        }
    )


@pytest.fixture
def ev() -> EventFactory:
    def _make(
        kind: EventKind,
        step: str | None = None,
        ts: float | None = 1000.0,
        message: str = "",
        level: LogLevel = LogLevel.INFO,
        **kw: Any,
    ) -> RunEvent:
        return RunEvent(
            kind=kind,
            message=message or f"{kind.value} {step or ''}".strip(),
            timestamp=ts,
            level=level,
            step_key=step,
            **kw,
        )

    return _make
