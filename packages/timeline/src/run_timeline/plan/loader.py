from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from run_timeline.core import PlanError, get_logger, read_json
from run_timeline_contracts import PlanValidationError, validate_plan_dict

from .graph import ExecutionPlanGraph

log = get_logger("run_timeline.plan")


def plan_from_dict(obj: Any) -> ExecutionPlanGraph:
    """
    Validate a plan description against the contracts schema and build the graph.
    """
    if not isinstance(obj, dict):
        raise PlanError(f"Plan must be a JSON object, got {type(obj).__name__}")

    # GraphQL responses nest the plan under run.executionPlan
    if "steps" not in obj and isinstance(obj.get("executionPlan"), dict):
        obj = obj["executionPlan"]

    try:
        validate_plan_dict(obj)
    except PlanValidationError as e:
        raise PlanError(str(e)) from e

    return ExecutionPlanGraph.from_dict(obj)


def load_plan(path: Path) -> ExecutionPlanGraph:
    path = Path(path)
    try:
        obj = read_json(path)
    except OSError as e:
        raise PlanError(f"Cannot read plan file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise PlanError(f"Plan file {path} is not valid JSON: {e}") from e

    graph = plan_from_dict(obj)
    log.debug("Plan loaded", path=str(path), steps=len(graph))
    return graph
