from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Union

from run_timeline.core import InternalError
from run_timeline.logs import FilterState, FilterToken, TokenKind
from run_timeline.plan import ExecutionPlanGraph
from run_timeline.selection import StepSelection, select, toggle_step


@dataclass(frozen=True, slots=True)
class RunViewState:
    """
    Everything the user controls on a run page. Replaced wholesale by
    `reduce_view`, never mutated.
    """

    filter: FilterState = field(default_factory=FilterState)
    selection: StepSelection = field(default_factory=StepSelection)
    hide_non_matches: bool = True


@dataclass(frozen=True, slots=True)
class SetLogFilter:
    filter: FilterState


@dataclass(frozen=True, slots=True)
class SetSelection:
    selection: StepSelection


@dataclass(frozen=True, slots=True)
class SelectQuery:
    query: str


@dataclass(frozen=True, slots=True)
class ClickStep:
    step_key: str
    multi: bool = False


@dataclass(frozen=True, slots=True)
class SetHideNonMatches:
    hide: bool


ViewCommand = Union[SetLogFilter, SetSelection, SelectQuery, ClickStep, SetHideNonMatches]


def initial_view_state(
    filter_state: FilterState,
    graph: ExecutionPlanGraph | None,
    *,
    hide_non_matches: bool = True,
) -> RunViewState:
    """
    Seed the selection from the persisted filter's step query. Without a
    query or a plan the selection is `*` with no keys.
    """
    if filter_state.step_query and graph is not None:
        selection = select(graph, filter_state.step_query)
    else:
        selection = StepSelection()
    return RunViewState(
        filter=filter_state, selection=selection, hide_non_matches=hide_non_matches
    )


def _with_selection(state: RunViewState, selection: StepSelection) -> RunViewState:
    # a new selection replaces the log filter tokens with a single query token
    tokens = (
        ()
        if selection.is_all
        else (FilterToken(token=TokenKind.QUERY.value, value=selection.query),)
    )
    return replace(
        state, selection=selection, filter=state.filter.with_tokens(tokens)
    )


def reduce_view(
    state: RunViewState,
    command: ViewCommand,
    graph: ExecutionPlanGraph | None = None,
    known_keys: Iterable[str] = (),
) -> RunViewState:
    if isinstance(command, SetLogFilter):
        return replace(state, filter=command.filter)
    if isinstance(command, SetSelection):
        return _with_selection(state, command.selection)
    if isinstance(command, SelectQuery):
        return _with_selection(state, select(graph, command.query, known_keys))
    if isinstance(command, ClickStep):
        return _with_selection(
            state, toggle_step(state.selection, command.step_key, multi=command.multi)
        )
    if isinstance(command, SetHideNonMatches):
        return replace(state, hide_non_matches=command.hide)
    raise InternalError(f"Unhandled view command: {type(command).__name__}")
