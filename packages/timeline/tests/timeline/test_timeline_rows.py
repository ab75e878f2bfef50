from __future__ import annotations

import json
from pathlib import Path

import polars as pl
from run_timeline.core import read_parquet_df
from run_timeline.events import EventKind as K
from run_timeline.metadata import StepState, derive_run_metadata
from run_timeline.timeline import TIMELINE_SCHEMA, build_timeline_rows, timeline_frame, write_timeline


def _rows(plan, ev):
    events = [
        ev(K.STEP_START, "root", ts=0),
        ev(K.STEP_SUCCESS, "root", ts=100),
        ev(K.STEP_START, "left", ts=100),
        ev(K.STEP_MATERIALIZATION, "left", ts=150, label="left_table"),
        ev(K.STEP_SUCCESS, "left", ts=400),
        ev(K.STEP_START, "adhoc", ts=500),
    ]
    return build_timeline_rows(plan, derive_run_metadata(plan, events))


def test_rows_follow_plan_then_extras(diamond_plan, ev) -> None:
    rows = _rows(diamond_plan, ev)
    assert [r.key for r in rows] == ["root", "left", "right", "sink", "report_daily", "adhoc"]
    by_key = {r.key: r for r in rows}
    assert by_key["sink"].depth == 2
    assert by_key["report_daily"].depth == 2
    assert by_key["adhoc"].depth == 0
    assert by_key["left"].duration_ms == 300
    assert by_key["left"].markers == 1
    assert by_key["right"].state is StepState.PREPARING
    assert by_key["right"].start_ms is None


def test_rows_without_plan(ev) -> None:
    meta = derive_run_metadata(None, [ev(K.STEP_START, "x", ts=1)])
    rows = build_timeline_rows(None, meta)
    assert [(r.key, r.state, r.depth) for r in rows] == [("x", StepState.RUNNING, 0)]


def test_frame_schema(diamond_plan, ev) -> None:
    frame = timeline_frame(_rows(diamond_plan, ev))
    assert frame.schema == pl.Schema(TIMELINE_SCHEMA)
    assert frame.height == 6
    assert frame.filter(pl.col("key") == "left")["state"].to_list() == ["succeeded"]


def test_write_parquet_and_json(tmp_path: Path, diamond_plan, ev) -> None:
    rows = _rows(diamond_plan, ev)

    pq_path = write_timeline(rows, tmp_path / "out" / "timeline.parquet", compression="none")
    df = read_parquet_df(pq_path)
    assert df["key"].to_list()[:2] == ["root", "left"]
    assert df.filter(pl.col("key") == "right")["start_ms"].to_list() == [None]

    json_path = write_timeline(rows, tmp_path / "timeline.json")
    data = json.loads(json_path.read_text(encoding="utf-8"))
    assert data[1]["key"] == "left"
    assert data[1]["state"] == "succeeded"
    assert data[0]["duration_ms"] == 100
    assert not list(tmp_path.glob("**/*.tmp"))
