from __future__ import annotations

import pytest
from run_timeline.events import EventKind as K
from run_timeline.events import LogLevel
from run_timeline.logs import (
    FilterState,
    FilterToken,
    apply_filter,
    filter_key,
    format_filter,
    parse_filter,
    resolve_query_tokens,
    tokenize,
    visible_nodes,
)


@pytest.fixture
def run_log(ev):
    return [
        ev(K.RUN_START, ts=0, message="Started run"),
        ev(K.STEP_START, "A", ts=10),
        ev(K.LOG_MESSAGE, "A", ts=11, message="Reading Orders table", level=LogLevel.DEBUG),
        ev(K.STEP_FAILURE, "A", ts=20, message="A exploded", level=LogLevel.ERROR),
        ev(K.STEP_START, "B", ts=21),
        ev(K.STEP_FAILURE, "B", ts=30, message="B exploded", level=LogLevel.ERROR),
        ev(K.LOG_MESSAGE, "C", ts=31, message="orders written", level=LogLevel.WARNING),
        ev(K.UNRECOGNIZED, None, ts=None, message="{garbage"),
    ]


def _keys(nodes) -> list[str]:
    return [n.clientside_key for n in nodes]


def test_tokenize() -> None:
    tokens, text = tokenize('step:A  Type:failure   some  text level:"warn"')
    assert tokens == [
        FilterToken("step", "A"),
        FilterToken("type", "failure"),
        FilterToken("level", "warn"),
    ]
    assert text == "some text"

    # a colon inside a word is text, not a token
    tokens, text = tokenize("ratio=a:b")
    assert tokens == []
    assert text == "ratio=a:b"


def test_format_filter_quotes_spaces() -> None:
    state = FilterState(tokens=(FilterToken("query", "+A, B"),), text="boom")
    assert format_filter(state) == 'query:"+A, B" boom'
    assert parse_filter(format_filter(state)) == state


def test_format_filter_quotes_in_values() -> None:
    inner = parse_filter('step:a"b boom')
    assert inner.tokens == (FilterToken("step", 'a"b'),)
    assert parse_filter(format_filter(inner)) == inner

    # a dangling opening quote is free text, not a token
    assert parse_filter('step:"open') == FilterState(text='step:"open')

    for value in ('say "hi"', '"x', '"'):
        with pytest.raises(ValueError):
            format_filter(FilterState(tokens=(FilterToken("query", value),)))


def test_tokens_of_different_kinds_intersect(run_log) -> None:
    result = apply_filter(parse_filter("step:A type:failure"), run_log, [])
    assert [n.event.message for n in result.filtered_nodes] == ["A exploded"]
    assert result.filtered_nodes[0].clientside_key == "csk3"


def test_tokens_of_one_kind_union(run_log) -> None:
    result = apply_filter(parse_filter("step:A step:C"), run_log, [])
    assert {n.event.step_key for n in result.filtered_nodes} == {"A", "C"}
    assert len(result.filtered_nodes) == 4


def test_level_and_kind_value_tokens(run_log) -> None:
    warn = apply_filter(parse_filter("level:WARN"), run_log, [])
    assert [n.event.step_key for n in warn.filtered_nodes] == ["C"]

    by_value = apply_filter(parse_filter("type:step.start"), run_log, [])
    assert _keys(by_value.filtered_nodes) == ["csk1", "csk4"]


def test_unknown_tokens_are_ignored(run_log) -> None:
    result = apply_filter(parse_filter("color:red"), run_log, [])
    assert result.filtered_nodes == result.all_nodes
    assert not result.has_text_filter


def test_text_match_is_case_insensitive_subset(run_log) -> None:
    state = parse_filter("ORDERS", focused_time=31.0)
    result = apply_filter(state, run_log, [])
    assert result.has_text_filter
    assert _keys(result.text_match_nodes) == ["csk2", "csk6"]
    assert result.focused_time == 31.0
    assert set(result.text_match_nodes) <= set(result.filtered_nodes)
    assert set(result.filtered_nodes) <= set(result.all_nodes)

    assert visible_nodes(result, hide_non_matches=True) == result.text_match_nodes
    assert visible_nodes(result, hide_non_matches=False) == result.filtered_nodes


def test_empty_text_has_no_matches(run_log) -> None:
    result = apply_filter(FilterState(text="   "), run_log, [])
    assert result.text_match_nodes == ()
    assert visible_nodes(result, hide_non_matches=True) == result.filtered_nodes


def test_since_time_keeps_untimed_lines(run_log) -> None:
    result = apply_filter(FilterState(since_time=30.0), run_log, [])
    assert _keys(result.filtered_nodes) == ["csk5", "csk6", "csk7"]


def test_query_tokens_go_through_selection(linear_plan, run_log) -> None:
    state = parse_filter("query:+B query:C")
    selected = resolve_query_tokens(linear_plan, state)
    assert selected == ["A", "B", "C"]

    result = apply_filter(state.with_tokens([FilterToken("query", "B+")]), run_log, ["B", "C"])
    assert {n.event.step_key for n in result.filtered_nodes} == {"B", "C"}

    # without a plan the names are taken literally
    assert resolve_query_tokens(None, parse_filter("query:+B")) == ["B"]


def test_filter_key_changes_with_what_is_shown() -> None:
    a = parse_filter("step:A boom")
    assert filter_key(a, hide_non_matches=True) == filter_key(parse_filter("step:A   boom"), hide_non_matches=True)
    assert filter_key(a, hide_non_matches=True) != filter_key(a, hide_non_matches=False)
    assert filter_key(a, hide_non_matches=True) != filter_key(parse_filter("step:B boom"), hide_non_matches=True)
