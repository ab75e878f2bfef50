from __future__ import annotations

import argparse
from pathlib import Path
from typing import Callable

from rich.console import Console
from rich.table import Table
from rich.text import Text

from run_timeline.core import (
    TimelineError,
    bind,
    clear_bindings,
    configure_logging,
    format_duration_ms,
    get_logger,
    load_settings,
    ms_to_iso,
)
from run_timeline.events import load_events
from run_timeline.logs import parse_filter
from run_timeline.metadata import MissingTerminalPolicy, StepState, derive_run_metadata
from run_timeline.plan import ExecutionPlanGraph, load_plan
from run_timeline.selection import resolve_selection
from run_timeline.timeline import build_timeline_rows, write_timeline
from run_timeline.view import derive_view, initial_view_state

console = Console()

_STATE_STYLE: dict[StepState, str] = {
    StepState.PREPARING: "dim",
    StepState.RUNNING: "cyan",
    StepState.RETRY: "yellow",
    StepState.SUCCEEDED: "green",
    StepState.FAILED: "red",
    StepState.SKIPPED: "magenta",
    StepState.UNKNOWN: "yellow",
}


def _add_plan_arg(p: argparse.ArgumentParser, *, required: bool) -> None:
    p.add_argument(
        "--plan",
        type=Path,
        required=required,
        help="Execution plan description (JSON).",
    )


def _add_events_arg(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--events",
        type=Path,
        required=True,
        help="Run event log (JSONL, or a JSON array when the suffix is .json).",
    )


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="run-timeline")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("steps", help="Show per-step lifecycle state and timing")
    _add_plan_arg(sp, required=False)
    _add_events_arg(sp)

    sp = sub.add_parser("select", help="Resolve a step selection query")
    _add_plan_arg(sp, required=True)
    sp.add_argument("query", help="Selection query, e.g. '+load' or 'ingest+, report*'")

    sp = sub.add_parser("logs", help="Filter the event log")
    _add_plan_arg(sp, required=False)
    _add_events_arg(sp)
    sp.add_argument("--filter", default="", help="Filter string, e.g. 'step:load type:failure'")
    sp.add_argument(
        "--show-all",
        action="store_true",
        help="Keep rows that do not match the free-text part of the filter.",
    )

    sp = sub.add_parser("export", help="Write timeline rows to Parquet or JSON")
    _add_plan_arg(sp, required=False)
    _add_events_arg(sp)
    sp.add_argument("--out", type=Path, required=True, help="Output path (.parquet or .json)")

    return p


def _maybe_plan(path: Path | None) -> ExecutionPlanGraph | None:
    return load_plan(path) if path is not None else None


def _policy() -> MissingTerminalPolicy:
    return MissingTerminalPolicy(load_settings().missing_terminal)


def _cmd_steps(args: argparse.Namespace) -> int:
    plan = _maybe_plan(args.plan)
    metadata = derive_run_metadata(plan, load_events(args.events), missing_terminal=_policy())

    tbl = Table(title="Steps", show_header=True)
    for col in ("step", "state", "start", "end", "duration", "attempts", "markers"):
        tbl.add_column(col)
    for row in build_timeline_rows(plan, metadata):
        tbl.add_row(
            Text("  " * row.depth + row.key),
            Text(row.state.value, style=_STATE_STYLE[row.state]),
            ms_to_iso(row.start_ms) or "-",
            ms_to_iso(row.end_ms) or "-",
            format_duration_ms(row.duration_ms),
            str(row.attempts),
            str(row.markers),
        )
    console.print(tbl)

    status = metadata.status.value if metadata.status else "in progress"
    console.print(f"run status: [bold]{status}[/bold]")
    if metadata.run_error is not None:
        console.print(Text.assemble(("run error: ", "red"), metadata.run_error.message))
    return 0


def _cmd_select(args: argparse.Namespace) -> int:
    keys = resolve_selection(load_plan(args.plan), args.query)
    for key in keys:
        console.print(Text(key))
    return 0


def _cmd_logs(args: argparse.Namespace) -> int:
    plan = _maybe_plan(args.plan)
    events = load_events(args.events)

    settings = load_settings()
    hide = settings.hide_non_matches and not args.show_all
    state = initial_view_state(parse_filter(args.filter), plan, hide_non_matches=hide)
    view = derive_view(state, plan, events, missing_terminal=_policy())

    tbl = Table(show_header=True, box=None)
    for col in ("time", "level", "step", "type", "message"):
        tbl.add_column(col)
    for node in view.visible:
        e = node.event
        tbl.add_row(
            ms_to_iso(e.timestamp) or "-",
            e.level.value,
            e.step_key or "",
            e.category,
            Text(e.message),
        )
    console.print(tbl)
    console.print(
        f"{len(view.visible)} shown / {len(view.logs.filtered_nodes)} filtered / "
        f"{len(view.logs.all_nodes)} total"
    )
    return 0


def _cmd_export(args: argparse.Namespace) -> int:
    plan = _maybe_plan(args.plan)
    metadata = derive_run_metadata(plan, load_events(args.events), missing_terminal=_policy())
    rows = build_timeline_rows(plan, metadata)
    out = write_timeline(rows, args.out, compression=load_settings().export_compression)
    console.print(f"wrote {len(rows)} rows to {out}")
    return 0


_COMMANDS: dict[str, Callable[[argparse.Namespace], int]] = {
    "steps": _cmd_steps,
    "select": _cmd_select,
    "logs": _cmd_logs,
    "export": _cmd_export,
}


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    s = load_settings()
    configure_logging(level=s.log_level, fmt=s.log_format)
    log = get_logger("run_timeline")
    bind(command=args.cmd)

    try:
        return _COMMANDS[args.cmd](args)
    except TimelineError as e:
        log.error("Command failed", error=str(e))
        console.print(Text.assemble(("error: ", "red"), str(e)))
        return 1
    finally:
        clear_bindings()


if __name__ == "__main__":
    raise SystemExit(main())
