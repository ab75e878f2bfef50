from __future__ import annotations

import json
from pathlib import Path

from run_timeline.core import EventLogError, get_logger, iter_json_lines, read_json

from .parse import event_from_dict, events_from_records, opaque_event
from .types import RunEvent

log = get_logger("run_timeline.events")


def load_events(path: Path) -> list[RunEvent]:
    """
    Read an event log from a JSONL file (one record per line) or a JSON array.

    Lines that are not valid JSON become opaque events carrying the raw text,
    so the log keeps its length and order.
    """
    path = Path(path)
    try:
        if path.suffix == ".json":
            records = read_json(path)
            if not isinstance(records, list):
                raise EventLogError(
                    f"Event log {path} must hold a JSON array, got {type(records).__name__}"
                )
            events = events_from_records(records)
        else:
            events = [
                event_from_dict(decoded) if decoded is not None else opaque_event(raw)
                for _, raw, decoded in iter_json_lines(path)
            ]
    except OSError as e:
        raise EventLogError(f"Cannot read event log {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise EventLogError(f"Event log {path} is not valid JSON: {e}") from e

    opaque = sum(1 for e in events if e.is_opaque)
    log.debug("Event log loaded", path=str(path), events=len(events), opaque=opaque)
    return events
