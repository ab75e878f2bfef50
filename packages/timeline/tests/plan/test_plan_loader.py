from __future__ import annotations

import json
from pathlib import Path

import pytest
from run_timeline.core import PlanError
from run_timeline.plan import load_plan, plan_from_dict


def test_load_plan_from_file(tmp_path: Path) -> None:
    path = tmp_path / "plan.json"
    path.write_text(
        json.dumps({"steps": [{"key": "a"}, {"key": "b", "depends_on": ["a"]}]}),
        encoding="utf-8",
    )
    graph = load_plan(path)
    assert graph.keys == ("a", "b")
    assert graph.dependents("a") == ("b",)


def test_nested_execution_plan_is_unwrapped() -> None:
    graph = plan_from_dict({"executionPlan": {"steps": [{"key": "only"}]}})
    assert graph.keys == ("only",)


def test_schema_violation_is_plan_error() -> None:
    with pytest.raises(PlanError) as exc:
        plan_from_dict({"steps": [{"inputs": []}]})
    assert "key" in str(exc.value)


def test_unreadable_and_invalid_files(tmp_path: Path) -> None:
    with pytest.raises(PlanError):
        load_plan(tmp_path / "missing.json")

    bad = tmp_path / "bad.json"
    bad.write_text("{nope", encoding="utf-8")
    with pytest.raises(PlanError):
        load_plan(bad)

    with pytest.raises(PlanError):
        plan_from_dict(["not", "a", "plan"])  # type: ignore[arg-type]
