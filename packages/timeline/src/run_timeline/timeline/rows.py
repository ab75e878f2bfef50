from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Final, Optional, Sequence

import polars as pl

from run_timeline.core import atomic_write_json, get_logger, write_parquet_atomic
from run_timeline.metadata import RunMetadataSnapshot, StepState
from run_timeline.plan import ExecutionPlanGraph

log = get_logger("run_timeline.timeline")


@dataclass(frozen=True, slots=True)
class TimelineRow:
    """One Gantt row: a step's lifecycle span and its waterfall depth."""

    key: str
    state: StepState
    start_ms: Optional[float]
    end_ms: Optional[float]
    duration_ms: Optional[float]
    depth: int
    attempts: int
    markers: int


TIMELINE_SCHEMA: Final[dict[str, Any]] = {
    "key": pl.Utf8,
    "state": pl.Utf8,
    "start_ms": pl.Float64,
    "end_ms": pl.Float64,
    "duration_ms": pl.Float64,
    "depth": pl.Int64,
    "attempts": pl.Int64,
    "markers": pl.Int64,
}


def build_timeline_rows(
    plan: ExecutionPlanGraph | None, metadata: RunMetadataSnapshot
) -> list[TimelineRow]:
    """
    Rows in topological order, followed by steps seen in the log but absent
    from the plan (depth 0).
    """
    if plan is not None:
        order = list(plan.topological_order)
        depths = plan.depths()
    else:
        order, depths = [], {}
    placed = set(order)
    order.extend(k for k in metadata.steps if k not in placed)

    rows: list[TimelineRow] = []
    for key in order:
        step = metadata.step(key)
        rows.append(
            TimelineRow(
                key=key,
                state=step.state,
                start_ms=step.start,
                end_ms=step.end,
                duration_ms=step.duration_ms,
                depth=depths.get(key, 0),
                attempts=step.attempts,
                markers=len(step.markers),
            )
        )
    return rows


def timeline_frame(rows: Sequence[TimelineRow]) -> pl.DataFrame:
    columns: dict[str, list[Any]] = {name: [] for name in TIMELINE_SCHEMA}
    for row in rows:
        for name, value in asdict(row).items():
            columns[name].append(value.value if isinstance(value, StepState) else value)
    return pl.DataFrame(columns, schema=TIMELINE_SCHEMA)


def write_timeline(
    rows: Sequence[TimelineRow], out_path: Path, *, compression: str = "zstd"
) -> Path:
    """
    Write rows to `out_path`: JSON when the suffix is `.json`, Parquet otherwise.
    """
    out_path = Path(out_path)
    if out_path.suffix == ".json":
        atomic_write_json(out_path, [asdict(r) for r in rows])
    else:
        write_parquet_atomic(timeline_frame(rows), out_path, compression=compression)
    log.debug("Timeline written", path=str(out_path), rows=len(rows))
    return out_path
