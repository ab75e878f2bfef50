from .config import Settings, load_settings
from .errors import (
    UNKNOWN_ERROR,
    ErrorInfo,
    EventLogError,
    InternalError,
    PlanError,
    SelectionError,
    TimelineError,
    error_info_from_payload,
)
from .fs import atomic_target, atomic_write_text, ensure_parent, safe_unlink
from .json import atomic_write_json, iter_json_lines, read_json, stable_json_dumps
from .logging import bind, clear_bindings, configure_logging, get_logger
from .parquet import read_parquet_df, write_parquet_atomic
from .time import format_duration_ms, ms_to_iso, parse_timestamp_ms

__all__ = [
    "Settings",
    "load_settings",
    "UNKNOWN_ERROR",
    "ErrorInfo",
    "EventLogError",
    "InternalError",
    "PlanError",
    "SelectionError",
    "TimelineError",
    "error_info_from_payload",
    "atomic_target",
    "atomic_write_text",
    "ensure_parent",
    "safe_unlink",
    "atomic_write_json",
    "iter_json_lines",
    "read_json",
    "stable_json_dumps",
    "bind",
    "clear_bindings",
    "configure_logging",
    "get_logger",
    "read_parquet_df",
    "write_parquet_atomic",
    "format_duration_ms",
    "ms_to_iso",
    "parse_timestamp_ms",
]
