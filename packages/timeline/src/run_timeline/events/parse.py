from __future__ import annotations

from typing import Any, Final, Iterable, Mapping

from run_timeline.core import parse_timestamp_ms

from .types import EventKind, LogLevel, RunEvent

# GraphQL typenames from the run page and stage events from the ETL runner
KIND_ALIASES: Final[dict[str, EventKind]] = {
    "PipelineStartEvent": EventKind.RUN_START,
    "PipelineSuccessEvent": EventKind.RUN_SUCCESS,
    "PipelineFailureEvent": EventKind.RUN_FAILURE,
    "PipelineCanceledEvent": EventKind.RUN_CANCELED,
    "ExecutionStepStartEvent": EventKind.STEP_START,
    "ExecutionStepRestartEvent": EventKind.STEP_RESTART,
    "ExecutionStepSuccessEvent": EventKind.STEP_SUCCESS,
    "ExecutionStepFailureEvent": EventKind.STEP_FAILURE,
    "ExecutionStepSkippedEvent": EventKind.STEP_SKIPPED,
    "ExecutionStepUpForRetryEvent": EventKind.STEP_UP_FOR_RETRY,
    "StepMaterializationEvent": EventKind.STEP_MATERIALIZATION,
    "StepExpectationResultEvent": EventKind.STEP_EXPECTATION_RESULT,
    "EngineEvent": EventKind.ENGINE,
    "LogMessageEvent": EventKind.LOG_MESSAGE,
    "stage.start": EventKind.STEP_START,
    "stage.success": EventKind.STEP_SUCCESS,
    "stage.failed": EventKind.STEP_FAILURE,
}

_KIND_KEYS: Final[tuple[str, ...]] = ("type", "__typename", "event_type")
_TIMESTAMP_KEYS: Final[tuple[str, ...]] = ("timestamp", "ts", "ts_utc")
_STEP_KEYS: Final[tuple[str, ...]] = ("stepKey", "step_key", "stage")
# nested payload objects whose fields are lifted to the top level
_NESTED_KEYS: Final[tuple[str, ...]] = ("data", "materialization", "expectationResult")


def _first(obj: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for k in keys:
        if obj.get(k) is not None:
            return obj[k]
    return None


def _opt_str(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _asset_key(value: Any) -> str | None:
    # {"path": ["warehouse", "orders"]} or a plain string
    if isinstance(value, Mapping):
        value = value.get("path")
    if isinstance(value, (list, tuple)):
        parts = [str(p) for p in value if p is not None]
        return "/".join(parts) or None
    return _opt_str(value)


def resolve_kind(value: Any) -> EventKind:
    if not isinstance(value, str):
        return EventKind.UNRECOGNIZED
    try:
        return EventKind(value)
    except ValueError:
        return KIND_ALIASES.get(value, EventKind.UNRECOGNIZED)


def _flatten(obj: Mapping[str, Any]) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    for key in _NESTED_KEYS:
        nested = obj.get(key)
        if isinstance(nested, Mapping):
            fields.update(nested)
    fields.update({k: v for k, v in obj.items() if k not in _NESTED_KEYS})
    return fields


def opaque_event(message: str, raw: Mapping[str, Any] | None = None) -> RunEvent:
    timestamp = None
    step_key = None
    level = LogLevel.INFO
    if raw is not None:
        timestamp = parse_timestamp_ms(_first(raw, _TIMESTAMP_KEYS))
        step_key = _opt_str(_first(raw, _STEP_KEYS))
        level = LogLevel.parse(raw.get("level"))
    return RunEvent(
        kind=EventKind.UNRECOGNIZED,
        message=message,
        timestamp=timestamp,
        level=level,
        step_key=step_key,
        raw=raw,
    )


def event_from_dict(obj: Any) -> RunEvent:
    """
    Build a RunEvent from a raw record.

    Never raises: records with an unknown kind, no usable timestamp, or a step
    lifecycle kind without a step key come back as opaque UNRECOGNIZED events.
    """
    if not isinstance(obj, Mapping):
        return opaque_event(str(obj))

    fields = _flatten(obj)
    kind = resolve_kind(_first(fields, _KIND_KEYS))
    message = str(fields.get("message") or "")
    timestamp = parse_timestamp_ms(_first(fields, _TIMESTAMP_KEYS))
    step_key = _opt_str(_first(fields, _STEP_KEYS))

    if kind is EventKind.UNRECOGNIZED or timestamp is None:
        return opaque_event(message, dict(obj))
    if kind.is_step_lifecycle and step_key is None:
        return opaque_event(message, dict(obj))

    error = fields.get("error")
    if error is None and kind in (EventKind.STEP_FAILURE, EventKind.RUN_FAILURE):
        exc_type = fields.get("exc_type")
        if exc_type:
            error = {"message": message, "className": str(exc_type)}

    success = fields.get("success")
    return RunEvent(
        kind=kind,
        message=message,
        timestamp=timestamp,
        level=LogLevel.parse(fields.get("level")),
        step_key=step_key,
        error=error,
        label=_opt_str(fields.get("label")),
        description=_opt_str(fields.get("description")),
        asset_key=_asset_key(_first(fields, ("assetKey", "asset_key"))),
        success=success if isinstance(success, bool) else None,
        marker_start=_opt_str(_first(fields, ("markerStart", "marker_start"))),
        marker_end=_opt_str(_first(fields, ("markerEnd", "marker_end"))),
    )


def events_from_records(records: Iterable[Any]) -> list[RunEvent]:
    return [event_from_dict(r) for r in records]
