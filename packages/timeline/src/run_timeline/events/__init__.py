from .loader import load_events
from .parse import KIND_ALIASES, event_from_dict, events_from_records, resolve_kind
from .types import EventKind, LogLevel, RunEvent

__all__ = [
    "load_events",
    "KIND_ALIASES",
    "event_from_dict",
    "events_from_records",
    "resolve_kind",
    "EventKind",
    "LogLevel",
    "RunEvent",
]
