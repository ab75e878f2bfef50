from __future__ import annotations

import heapq
from collections import deque
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Mapping

from pydantic import ValidationError

from run_timeline.core import PlanError

from .models import PlanDescription


@dataclass(frozen=True, slots=True)
class StepInput:
    name: str | None
    depends_on: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ExecutionStep:
    key: str
    inputs: tuple[StepInput, ...] = ()
    outputs_persisted: bool = False

    @property
    def depends_on(self) -> tuple[str, ...]:
        """Upstream keys across all inputs, first occurrence wins."""
        seen: dict[str, None] = {}
        for inp in self.inputs:
            for key in inp.depends_on:
                seen.setdefault(key, None)
        return tuple(seen)


class ExecutionPlanGraph:
    """
    Read-only dependency graph of a run's execution plan.

    Adjacency indexes and the topological order are built once here so that
    traversals stay linear in the size of the plan.
    """

    def __init__(
        self, steps: Iterable[ExecutionStep], *, artifacts_persisted: bool = False
    ) -> None:
        ordered = list(steps)
        keys = [s.key for s in ordered]
        if len(keys) != len(set(keys)):
            dupes = sorted({k for k in keys if keys.count(k) > 1})
            raise PlanError(f"Duplicate step key(s) in plan: {dupes}")

        self.artifacts_persisted = artifacts_persisted
        self._steps: dict[str, ExecutionStep] = {s.key: s for s in ordered}
        self._index: dict[str, int] = {k: i for i, k in enumerate(keys)}

        upstream: dict[str, list[str]] = {k: [] for k in keys}
        downstream: dict[str, list[str]] = {k: [] for k in keys}
        for step in ordered:
            for dep in step.depends_on:
                # edges to unknown or self keys are dropped
                if dep == step.key or dep not in self._steps:
                    continue
                upstream[step.key].append(dep)
                downstream[dep].append(step.key)

        self._upstream = {k: tuple(v) for k, v in upstream.items()}
        self._downstream = {k: tuple(v) for k, v in downstream.items()}
        self._order = self._toposort(keys)
        self._rank = {k: i for i, k in enumerate(self._order)}

    @classmethod
    def from_description(cls, desc: PlanDescription) -> "ExecutionPlanGraph":
        steps: list[ExecutionStep] = []
        for s in desc.steps:
            inputs = [
                StepInput(name=i.name, depends_on=tuple(d.key for d in i.depends_on))
                for i in s.inputs
            ]
            if s.depends_on:
                inputs.append(
                    StepInput(name=None, depends_on=tuple(d.key for d in s.depends_on))
                )
            persisted = (
                desc.artifacts_persisted
                if s.outputs_persisted is None
                else s.outputs_persisted
            )
            steps.append(
                ExecutionStep(
                    key=s.key, inputs=tuple(inputs), outputs_persisted=persisted
                )
            )
        return cls(steps, artifacts_persisted=desc.artifacts_persisted)

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "ExecutionPlanGraph":
        try:
            desc = PlanDescription.model_validate(obj)
        except ValidationError as e:
            raise PlanError(f"Invalid plan description: {e}") from e
        return cls.from_description(desc)

    def _toposort(self, keys: list[str]) -> tuple[str, ...]:
        # Kahn's algorithm; plan order breaks ties so the result is stable
        remaining = {k: len(self._upstream[k]) for k in keys}
        heap = [(self._index[k], k) for k in keys if remaining[k] == 0]
        heapq.heapify(heap)
        out: list[str] = []
        while heap:
            _, key = heapq.heappop(heap)
            out.append(key)
            for child in self._downstream[key]:
                remaining[child] -= 1
                if remaining[child] == 0:
                    heapq.heappush(heap, (self._index[child], child))

        if len(out) < len(keys):
            # malformed plan with a cycle: keep the leftovers in plan order
            placed = set(out)
            out.extend(k for k in keys if k not in placed)
        return tuple(out)

    def __contains__(self, key: object) -> bool:
        return key in self._steps

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[ExecutionStep]:
        return iter(self._steps.values())

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(self._steps)

    @property
    def topological_order(self) -> tuple[str, ...]:
        return self._order

    def step(self, key: str) -> ExecutionStep:
        return self._steps[key]

    def rank(self, key: str) -> int:
        return self._rank[key]

    def dependencies(self, key: str) -> tuple[str, ...]:
        return self._upstream.get(key, ())

    def dependents(self, key: str) -> tuple[str, ...]:
        return self._downstream.get(key, ())

    def ancestors(self, key: str) -> list[str]:
        return self._walk(key, self._upstream)

    def descendants(self, key: str) -> list[str]:
        return self._walk(key, self._downstream)

    @staticmethod
    def _walk(start: str, edges: Mapping[str, tuple[str, ...]]) -> list[str]:
        """Breadth-first reachable keys from `start`, excluding `start`."""
        if start not in edges:
            return []
        visited = {start}
        out: list[str] = []
        queue = deque([start])
        while queue:
            for nxt in edges[queue.popleft()]:
                if nxt in visited:
                    continue
                visited.add(nxt)
                out.append(nxt)
                queue.append(nxt)
        return out

    def depths(self) -> dict[str, int]:
        """Longest dependency chain from a root, per step."""
        depth: dict[str, int] = {}
        for key in self._order:
            parents = [depth[p] for p in self._upstream[key] if p in depth]
            depth[key] = max(parents) + 1 if parents else 0
        return depth
