from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from run_timeline.core import UNKNOWN_ERROR, ErrorInfo, error_info_from_payload, get_logger
from run_timeline.events import EventKind, RunEvent
from run_timeline.plan import ExecutionPlanGraph

from .types import (
    MissingTerminalPolicy,
    RunMetadataSnapshot,
    RunStatus,
    StepMarker,
    StepRuntimeState,
    StepState,
    StepTransition,
)

log = get_logger("run_timeline.metadata")

_TERMINAL_STATE: dict[EventKind, StepState] = {
    EventKind.STEP_SUCCESS: StepState.SUCCEEDED,
    EventKind.STEP_FAILURE: StepState.FAILED,
    EventKind.STEP_SKIPPED: StepState.SKIPPED,
}

_RUN_STATUS: dict[EventKind, RunStatus] = {
    EventKind.RUN_SUCCESS: RunStatus.SUCCESS,
    EventKind.RUN_FAILURE: RunStatus.FAILURE,
    EventKind.RUN_CANCELED: RunStatus.CANCELED,
}

OrderKey = tuple[int, float, int]


def _order_key(index: int, event: RunEvent) -> OrderKey:
    # timestamp first, log order on ties; untimed events sort last
    if event.timestamp is None:
        return (1, 0.0, index)
    return (0, event.timestamp, index)


@dataclass(slots=True)
class _StepBuilder:
    key: str
    state: StepState = StepState.PREPARING
    start: Optional[float] = None
    end: Optional[float] = None
    transitions: list[StepTransition] = field(default_factory=list)
    attempts: int = 0
    markers: list[StepMarker] = field(default_factory=list)
    error: Optional[ErrorInfo] = None

    def move(self, state: StepState, ts: Optional[float]) -> None:
        self.state = state
        self.transitions.append(StepTransition(state=state, timestamp=ts))

    def apply(self, event: RunEvent) -> None:
        kind = event.kind
        if kind.is_step_start:
            # stale starts never reopen a finished step
            if self.state in (StepState.PREPARING, StepState.RETRY):
                self.move(StepState.RUNNING, event.timestamp)
                self.attempts += 1
                if self.start is None:
                    self.start = event.timestamp
        elif kind.is_step_terminal:
            if not self.state.is_terminal:
                self.move(_TERMINAL_STATE[kind], event.timestamp)
                self.end = event.timestamp
                if kind is EventKind.STEP_FAILURE:
                    self.error = error_for_event(event)
        elif kind is EventKind.STEP_UP_FOR_RETRY:
            if self.state is StepState.RUNNING or self.state.is_terminal:
                self.move(StepState.RETRY, event.timestamp)
                self.end = None

    def freeze(self) -> StepRuntimeState:
        return StepRuntimeState(
            key=self.key,
            state=self.state,
            start=self.start,
            end=self.end,
            transitions=tuple(self.transitions),
            attempts=self.attempts,
            markers=tuple(self.markers),
            error=self.error,
        )


def error_for_event(event: RunEvent) -> ErrorInfo:
    """
    Normalize the failure payload of `event`.

    A payload that is present but unusable is replaced by UNKNOWN_ERROR; an
    absent payload falls back to the event message.
    """
    if event.error is None:
        if event.message.strip():
            return ErrorInfo(message=event.message.strip())
        return UNKNOWN_ERROR

    info = error_info_from_payload(event.error)
    if info is None:
        log.warning(
            "Malformed error payload replaced",
            kind=event.kind.value,
            step_key=event.step_key,
            payload_type=type(event.error).__name__,
        )
        return UNKNOWN_ERROR
    return info


def marker_from_event(event: RunEvent) -> StepMarker:
    return StepMarker(
        kind=event.kind,
        timestamp=event.timestamp,
        message=event.message,
        label=event.label,
        description=event.description,
        asset_key=event.asset_key,
        success=event.success,
        marker_start=event.marker_start,
        marker_end=event.marker_end,
    )


def _is_marker(event: RunEvent) -> bool:
    if event.kind is EventKind.ENGINE:
        return event.marker_start is not None or event.marker_end is not None
    return event.kind.is_marker


def derive_run_metadata(
    plan: ExecutionPlanGraph | None,
    events: Iterable[RunEvent],
    *,
    missing_terminal: MissingTerminalPolicy = MissingTerminalPolicy.UNKNOWN,
) -> RunMetadataSnapshot:
    """
    Fold the full ordered event log into a RunMetadataSnapshot.

    Pure: the result depends only on the arguments, so re-running it on the
    accumulated log after every batch is always correct. Lifecycle events are
    de-duplicated per step and applied in timestamp order with log order as
    the tie-break; markers keep log order and are never de-duplicated.
    Data-quality problems never raise.
    """
    builders: dict[str, _StepBuilder] = {}
    if plan is not None:
        for key in plan.keys:
            builders[key] = _StepBuilder(key=key)

    lifecycle: dict[str, dict[tuple[str, Optional[float], str], tuple[OrderKey, RunEvent]]] = {}
    global_markers: list[StepMarker] = []
    run_starts: list[float] = []
    run_terminals: list[tuple[OrderKey, RunEvent]] = []
    unrecognized = 0
    count = 0

    for index, event in enumerate(events):
        count += 1
        kind = event.kind
        if kind is EventKind.UNRECOGNIZED:
            unrecognized += 1
            continue

        key = event.step_key
        if key is not None and key not in builders:
            builders[key] = _StepBuilder(key=key)

        if kind.is_step_lifecycle and key is not None:
            seen = lifecycle.setdefault(key, {})
            fingerprint = (kind.value, event.timestamp, event.message)
            # duplicates from at-least-once delivery keep the first position
            seen.setdefault(fingerprint, (_order_key(index, event), event))
        elif _is_marker(event):
            marker = marker_from_event(event)
            if key is not None:
                builders[key].markers.append(marker)
            else:
                global_markers.append(marker)
        elif kind is EventKind.RUN_START:
            if event.timestamp is not None:
                run_starts.append(event.timestamp)
        elif kind.is_run_terminal:
            run_terminals.append((_order_key(index, event), event))

    for key, seen in lifecycle.items():
        builder = builders[key]
        for _, event in sorted(seen.values(), key=lambda item: item[0]):
            builder.apply(event)

    status: RunStatus | None = None
    run_error: ErrorInfo | None = None
    run_exit: float | None = None
    if run_terminals:
        run_terminals.sort(key=lambda item: item[0])
        first = run_terminals[0][1]
        status = _RUN_STATUS[first.kind]
        run_exit = first.timestamp
        failure = next(
            (e for _, e in run_terminals if e.kind is EventKind.RUN_FAILURE), None
        )
        if failure is not None:
            run_error = error_for_event(failure)

    if status is not None:
        resolved = (
            StepState.FAILED
            if missing_terminal is MissingTerminalPolicy.FAILED
            else StepState.UNKNOWN
        )
        for builder in builders.values():
            if builder.state in (StepState.RUNNING, StepState.RETRY):
                builder.move(resolved, run_exit)
                builder.end = run_exit

    steps = {key: b.freeze() for key, b in builders.items()}

    starts = run_starts + [s.start for s in steps.values() if s.start is not None]
    ends = [s.end for s in steps.values() if s.end is not None]
    ends += [e.timestamp for _, e in run_terminals if e.timestamp is not None]

    if unrecognized:
        log.debug("Opaque log lines ignored by the state machine", count=unrecognized)

    return RunMetadataSnapshot(
        steps=steps,
        started_at=min(starts) if starts else None,
        exited_at=max(ends) if ends else None,
        status=status,
        run_error=run_error,
        global_markers=tuple(global_markers),
        unrecognized=unrecognized,
        event_count=count,
    )
