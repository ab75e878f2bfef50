from __future__ import annotations

import pytest
from run_timeline.core import PlanError
from run_timeline.plan import ExecutionPlanGraph, ExecutionStep, StepInput, plan_from_dict


def test_adjacency_indexes(diamond_plan: ExecutionPlanGraph) -> None:
    assert diamond_plan.keys == ("root", "left", "right", "sink", "report_daily")
    assert diamond_plan.dependencies("sink") == ("left", "right")
    assert diamond_plan.dependents("root") == ("left", "right")
    assert diamond_plan.dependents("sink") == ()
    assert set(diamond_plan.ancestors("sink")) == {"root", "left", "right"}
    assert set(diamond_plan.descendants("left")) == {"sink", "report_daily"}
    assert diamond_plan.ancestors("missing") == []


def test_topological_order_is_stable_and_upstream_first() -> None:
    graph = plan_from_dict(
        {
            "steps": [
                {"key": "load", "depends_on": ["transform"]},
                {"key": "transform", "depends_on": ["ingest"]},
                {"key": "ingest"},
            ]
        }
    )
    assert graph.keys == ("load", "transform", "ingest")
    assert graph.topological_order == ("ingest", "transform", "load")
    assert graph.depths() == {"ingest": 0, "transform": 1, "load": 2}


def test_graphql_and_snake_case_inputs_merge() -> None:
    graph = plan_from_dict(
        {
            "artifactsPersisted": True,
            "steps": [
                {"key": "a"},
                {"key": "b"},
                {
                    "key": "c",
                    "artifactsPersisted": False,
                    "inputs": [{"name": "x", "dependsOn": [{"key": "a"}]}],
                    "depends_on": ["b", "a"],
                },
            ],
        }
    )
    step = graph.step("c")
    assert step.depends_on == ("a", "b")
    assert step.inputs[0] == StepInput(name="x", depends_on=("a",))
    assert step.outputs_persisted is False
    assert graph.step("a").outputs_persisted is True
    assert graph.artifacts_persisted is True


def test_unknown_dependencies_are_dropped_from_edges() -> None:
    graph = ExecutionPlanGraph(
        [
            ExecutionStep(key="a", inputs=(StepInput(name=None, depends_on=("ghost", "a")),)),
            ExecutionStep(key="b", inputs=(StepInput(name=None, depends_on=("a",)),)),
        ]
    )
    assert graph.dependencies("a") == ()
    assert graph.dependencies("b") == ("a",)


def test_cycle_does_not_hang() -> None:
    graph = ExecutionPlanGraph(
        [
            ExecutionStep(key="x", inputs=(StepInput(name=None, depends_on=("y",)),)),
            ExecutionStep(key="y", inputs=(StepInput(name=None, depends_on=("x",)),)),
            ExecutionStep(key="z"),
        ]
    )
    assert graph.topological_order == ("z", "x", "y")
    assert set(graph.ancestors("x")) == {"y"}
    assert set(graph.descendants("x")) == {"y"}


def test_duplicate_keys_rejected() -> None:
    with pytest.raises(PlanError):
        ExecutionPlanGraph([ExecutionStep(key="a"), ExecutionStep(key="a")])
