from run_timeline.events import EventKind, LogLevel, RunEvent, event_from_dict, load_events
from run_timeline.logs import (
    FilterResult,
    FilterState,
    apply_filter,
    filters_from_search,
    filters_to_search,
    parse_filter,
)
from run_timeline.metadata import (
    MissingTerminalPolicy,
    RunMetadataCache,
    RunMetadataSnapshot,
    StepRuntimeState,
    StepState,
    derive_run_metadata,
)
from run_timeline.plan import ExecutionPlanGraph, ExecutionStep, load_plan, plan_from_dict
from run_timeline.selection import StepSelection, resolve_selection
from run_timeline.timeline import build_timeline_rows, timeline_frame
from run_timeline.view import derive_view, reduce_view

__all__ = [
    "EventKind",
    "LogLevel",
    "RunEvent",
    "event_from_dict",
    "load_events",
    "FilterResult",
    "FilterState",
    "apply_filter",
    "filters_from_search",
    "filters_to_search",
    "parse_filter",
    "MissingTerminalPolicy",
    "RunMetadataCache",
    "RunMetadataSnapshot",
    "StepRuntimeState",
    "StepState",
    "derive_run_metadata",
    "ExecutionPlanGraph",
    "ExecutionStep",
    "load_plan",
    "plan_from_dict",
    "StepSelection",
    "resolve_selection",
    "build_timeline_rows",
    "timeline_frame",
    "derive_view",
    "reduce_view",
]
