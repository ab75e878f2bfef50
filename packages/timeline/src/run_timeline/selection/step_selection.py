from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from run_timeline.plan import ExecutionPlanGraph

from .query import ALL, resolve_literal_selection, resolve_selection


@dataclass(frozen=True, slots=True)
class StepSelection:
    """A selection query and the step keys it resolved to."""

    query: str = ALL
    keys: tuple[str, ...] = ()

    @property
    def is_all(self) -> bool:
        return self.query.strip() == ALL


def select(
    graph: ExecutionPlanGraph | None, query: str, known_keys: Iterable[str] = ()
) -> StepSelection:
    """
    Build a StepSelection, falling back to literal names when the plan is missing.
    """
    if graph is None:
        keys = resolve_literal_selection(query, known_keys)
    else:
        keys = resolve_selection(graph, query)
    return StepSelection(query=query, keys=tuple(keys))


def toggle_step(selection: StepSelection, step_key: str, *, multi: bool) -> StepSelection:
    """
    Click-to-select on a timeline row.

    A plain click selects only `step_key`, or clears the selection when it is
    already the sole selected step. A multi-select click toggles membership.
    """
    keys = list(selection.keys)
    if multi:
        if step_key in keys:
            keys.remove(step_key)
        else:
            keys.append(step_key)
    elif keys == [step_key]:
        keys = []
    else:
        keys = [step_key]

    return StepSelection(query=", ".join(keys) or ALL, keys=tuple(keys))
