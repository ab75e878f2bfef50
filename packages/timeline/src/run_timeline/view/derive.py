from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from run_timeline.core import InternalError
from run_timeline.events import EventKind, RunEvent
from run_timeline.logs import (
    FilterResult,
    LogNode,
    apply_filter,
    filter_key,
    resolve_query_tokens,
    visible_nodes,
)
from run_timeline.metadata import (
    MissingTerminalPolicy,
    RunMetadataCache,
    RunMetadataSnapshot,
    StepState,
    derive_run_metadata,
)
from run_timeline.plan import ExecutionPlanGraph
from run_timeline.selection import StepSelection

from .state import RunViewState


@dataclass(frozen=True, slots=True)
class RunView:
    metadata: RunMetadataSnapshot
    logs: FilterResult
    visible: tuple[LogNode, ...]
    selection: StepSelection
    selection_states: tuple[StepState, ...]
    selected_for_filter: tuple[str, ...]
    filter_key: str


def selection_states(
    selection: StepSelection, metadata: RunMetadataSnapshot
) -> tuple[StepState, ...]:
    return tuple(metadata.state_of(key) for key in selection.keys)


def find_step_failure(step_key: str, events: Iterable[RunEvent]) -> RunEvent | None:
    """First failure event of `step_key`, for the step details view."""
    for event in events:
        if event.kind is EventKind.STEP_FAILURE and event.step_key == step_key:
            return event
    return None


def derive_view(
    state: RunViewState,
    graph: ExecutionPlanGraph | None,
    events: Sequence[RunEvent],
    *,
    cache: RunMetadataCache | None = None,
    missing_terminal: MissingTerminalPolicy | None = None,
) -> RunView:
    """
    Derive everything the run page renders from `state` and the event log.

    With a `cache` the missing-terminal policy is the cache's own; asking
    for a different one raises InternalError.
    """
    if cache is not None:
        if missing_terminal is not None and missing_terminal != cache.missing_terminal:
            raise InternalError(
                f"derive_view asked for missing_terminal={missing_terminal.value} "
                f"but the cache derives with {cache.missing_terminal.value}"
            )
        metadata = cache.derive(graph, events)
    else:
        metadata = derive_run_metadata(
            graph,
            events,
            missing_terminal=missing_terminal or MissingTerminalPolicy.UNKNOWN,
        )

    selected = resolve_query_tokens(graph, state.filter, metadata.steps.keys())
    logs = apply_filter(state.filter, events, selected)

    return RunView(
        metadata=metadata,
        logs=logs,
        visible=visible_nodes(logs, hide_non_matches=state.hide_non_matches),
        selection=state.selection,
        selection_states=selection_states(state.selection, metadata),
        selected_for_filter=tuple(selected),
        filter_key=filter_key(state.filter, hide_non_matches=state.hide_non_matches),
    )
