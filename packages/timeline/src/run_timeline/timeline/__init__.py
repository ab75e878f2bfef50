from .rows import (
    TIMELINE_SCHEMA,
    TimelineRow,
    build_timeline_rows,
    timeline_frame,
    write_timeline,
)

__all__ = [
    "TIMELINE_SCHEMA",
    "TimelineRow",
    "build_timeline_rows",
    "timeline_frame",
    "write_timeline",
]
