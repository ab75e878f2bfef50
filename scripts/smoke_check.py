from __future__ import annotations

import argparse
import tempfile
from pathlib import Path

import polars as pl

from run_timeline.core import read_parquet_df
from run_timeline.events import load_events
from run_timeline.metadata import derive_run_metadata
from run_timeline.plan import load_plan
from run_timeline.timeline import build_timeline_rows, write_timeline


def _lifecycle(meta) -> dict:
    return {k: (s.state, s.start, s.end, s.attempts) for k, s in meta.steps.items()}


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Derive a run's timeline twice and check it against its own export."
    )
    parser.add_argument("--plan", type=Path, default=None)
    parser.add_argument("--events", type=Path, required=True)
    args = parser.parse_args()

    plan = load_plan(args.plan) if args.plan is not None else None
    events = load_events(args.events)

    meta = derive_run_metadata(plan, events)
    if derive_run_metadata(plan, events) != meta:
        raise SystemExit("Derivation is not deterministic")
    if _lifecycle(derive_run_metadata(plan, events + events)) != _lifecycle(meta):
        raise SystemExit("Re-delivered events changed step lifecycles")

    rows = build_timeline_rows(plan, meta)
    with tempfile.TemporaryDirectory() as tmp:
        df = read_parquet_df(write_timeline(rows, Path(tmp) / "timeline.parquet"))

    backwards = df.filter(pl.col("end_ms") < pl.col("start_ms"))
    if backwards.height:
        raise SystemExit(f"Steps ending before they start: {backwards['key'].to_list()}")

    print(f"events: {len(events)} ({meta.unrecognized} unrecognized)")
    print(f"status: {meta.status.value if meta.status else 'in progress'}")
    with pl.Config(tbl_rows=500, tbl_cols=100, tbl_width_chars=2000):
        print(df)
        print(df.group_by("state").len().sort("state"))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
