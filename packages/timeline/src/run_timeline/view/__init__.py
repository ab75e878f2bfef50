from .derive import RunView, derive_view, find_step_failure, selection_states
from .state import (
    ClickStep,
    RunViewState,
    SelectQuery,
    SetHideNonMatches,
    SetLogFilter,
    SetSelection,
    ViewCommand,
    initial_view_state,
    reduce_view,
)

__all__ = [
    "RunView",
    "derive_view",
    "find_step_failure",
    "selection_states",
    "ClickStep",
    "RunViewState",
    "SelectQuery",
    "SetHideNonMatches",
    "SetLogFilter",
    "SetSelection",
    "ViewCommand",
    "initial_view_state",
    "reduce_view",
]
