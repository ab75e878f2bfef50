from __future__ import annotations

import pytest
from run_timeline.core import SelectionError
from run_timeline.plan import plan_from_dict
from run_timeline.selection import (
    SelectionClause,
    parse_clause,
    parse_selection,
    resolve_literal_selection,
    resolve_selection,
)


@pytest.mark.parametrize(
    "query,expected",
    [
        ("B", ["B"]),
        ("+B", ["A", "B"]),
        ("B+", ["B", "C"]),
        ("+B+", ["A", "B", "C"]),
        ("+C", ["A", "B", "C"]),
        ("A+", ["A", "B", "C"]),
        ("C, A", ["C", "A"]),
        ("B+, +B", ["B", "C", "A"]),
        ("*", ["A", "B", "C"]),
        ("", []),
        ("   ", []),
        ("missing", []),
        ("missing+, C", ["C"]),
    ],
)
def test_resolve_on_linear_plan(linear_plan, query: str, expected: list[str]) -> None:
    assert resolve_selection(linear_plan, query) == expected


def test_globs_follow_topological_order(diamond_plan) -> None:
    assert resolve_selection(diamond_plan, "r*") == ["root", "right", "report_daily"]
    assert resolve_selection(diamond_plan, "*_daily") == ["report_daily"]
    assert resolve_selection(diamond_plan, "+report_*") == ["root", "left", "report_daily"]
    assert resolve_selection(diamond_plan, "nothing*") == []


def test_diamond_traversal_visits_each_step_once(diamond_plan) -> None:
    assert resolve_selection(diamond_plan, "root+") == [
        "root",
        "left",
        "right",
        "sink",
        "report_daily",
    ]
    assert resolve_selection(diamond_plan, "+sink") == ["root", "left", "right", "sink"]


def test_unparseable_clauses_are_skipped(linear_plan) -> None:
    assert resolve_selection(linear_plan, "++A, B, a b, ,") == ["B"]
    assert parse_clause("++A") is None
    assert parse_clause("has space") is None


def test_parse_selection() -> None:
    assert parse_selection(" +a, b+ ,c*") == [
        SelectionClause(pattern="a", upstream=True),
        SelectionClause(pattern="b", downstream=True),
        SelectionClause(pattern="c*"),
    ]
    assert parse_selection("c*")[0].is_glob
    assert not parse_selection("c")[0].is_glob


def test_missing_graph_is_an_error() -> None:
    with pytest.raises(SelectionError):
        resolve_selection(None, "A")  # type: ignore[arg-type]


def test_literal_fallback() -> None:
    assert resolve_literal_selection("+A, B+, A") == ["A", "B"]
    assert resolve_literal_selection("x*, y", ["x1", "z", "x2"]) == ["x1", "x2", "y"]
    assert resolve_literal_selection("x*") == []
    assert resolve_literal_selection("") == []


def test_keys_with_glob_characters_match_exactly() -> None:
    plan = plan_from_dict(
        {
            "steps": [
                {"key": "split"},
                {"key": "fanout[a]", "depends_on": ["split"]},
                {"key": "fanouta", "depends_on": ["split"]},
            ]
        }
    )
    assert resolve_selection(plan, "fanout[a]") == ["fanout[a]"]
    assert resolve_selection(plan, "+fanout[a]") == ["split", "fanout[a]"]
    assert resolve_selection(plan, "split+") == ["split", "fanout[a]", "fanouta"]
    # not a key, so still read as a character class
    assert resolve_selection(plan, "fanout[ab]") == ["fanouta"]


def test_literal_fallback_prefers_known_keys() -> None:
    known = ["fanout[a]", "fanouta"]
    assert resolve_literal_selection("fanout[a]", known) == ["fanout[a]"]
    assert resolve_literal_selection("fanout[ab]", known) == ["fanouta"]
