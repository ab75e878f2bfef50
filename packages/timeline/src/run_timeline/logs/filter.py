from __future__ import annotations

import re
from dataclasses import asdict, dataclass, replace
from enum import StrEnum
from typing import Callable, Final, Iterable, Optional, Sequence

from run_timeline.core import stable_json_dumps
from run_timeline.events import LogLevel, RunEvent
from run_timeline.plan import ExecutionPlanGraph
from run_timeline.selection import resolve_literal_selection, resolve_selection


class TokenKind(StrEnum):
    STEP = "step"
    QUERY = "query"
    TYPE = "type"
    LEVEL = "level"


@dataclass(frozen=True, slots=True)
class FilterToken:
    token: str
    value: str


@dataclass(frozen=True, slots=True)
class FilterState:
    tokens: tuple[FilterToken, ...] = ()
    text: str = ""
    focused_time: Optional[float] = None
    since_time: Optional[float] = None
    step_query: Optional[str] = None

    def values(self, kind: TokenKind | str) -> list[str]:
        name = str(kind)
        return [t.value for t in self.tokens if t.token == name]

    def with_tokens(self, tokens: Iterable[FilterToken]) -> "FilterState":
        return replace(self, tokens=tuple(tokens))


_TOKEN_RE: Final[re.Pattern[str]] = re.compile(
    r'(?P<token>[A-Za-z_][\w-]*):(?:"(?P<quoted>[^"]*)"|(?P<value>[^\s"]\S*))'
)


def tokenize(raw: str) -> tuple[list[FilterToken], str]:
    """
    Split a filter string into `token:value` pairs and the free-text remainder.

    Values containing spaces are written `token:"a value"`; a bare value may
    not start with a quote. Unknown token names are kept; matching ignores
    them.
    """
    raw = raw or ""
    tokens: list[FilterToken] = []
    text: list[str] = []
    pos = 0
    for m in _TOKEN_RE.finditer(raw):
        start = m.start()
        if start > 0 and not raw[start - 1].isspace():
            continue
        text.append(raw[pos:start])
        value = m.group("quoted") if m.group("quoted") is not None else m.group("value")
        tokens.append(FilterToken(token=m.group("token").lower(), value=value))
        pos = m.end()
    text.append(raw[pos:])
    return tokens, " ".join(" ".join(text).split())


def parse_filter(raw: str, **fields: object) -> FilterState:
    tokens, text = tokenize(raw)
    return FilterState(tokens=tuple(tokens), text=text, **fields)  # type: ignore[arg-type]


def format_filter(state: FilterState) -> str:
    """
    Inverse of `parse_filter` for the tokens and free text.

    Raises ValueError for a value that has no spelling: one that needs
    quotes but contains a double quote, or one that starts with a quote.
    """
    parts: list[str] = []
    for t in state.tokens:
        needs_quotes = not t.value or any(c.isspace() for c in t.value)
        if '"' in t.value and (needs_quotes or t.value.startswith('"')):
            raise ValueError(f"Filter value for {t.token!r} cannot be written: {t.value!r}")
        value = f'"{t.value}"' if needs_quotes else t.value
        parts.append(f"{t.token}:{value}")
    if state.text:
        parts.append(state.text)
    return " ".join(parts)


@dataclass(frozen=True, slots=True)
class LogNode:
    event: RunEvent
    clientside_key: str


@dataclass(frozen=True, slots=True)
class FilterResult:
    all_nodes: tuple[LogNode, ...]
    filtered_nodes: tuple[LogNode, ...]
    text_match_nodes: tuple[LogNode, ...]
    has_text_filter: bool
    focused_time: Optional[float] = None


EventPredicate = Callable[[RunEvent], bool]


def _level_name(value: str) -> str:
    s = value.strip().upper()
    return LogLevel.WARNING.value if s == "WARN" else s


def _predicates(
    state: FilterState, resolved_selection: Iterable[str]
) -> list[EventPredicate]:
    # repeated tokens of one kind are OR'd inside a predicate; predicates are AND'd
    preds: list[EventPredicate] = []

    steps = set(state.values(TokenKind.STEP))
    if steps:
        preds.append(lambda e: e.step_key in steps)

    if state.values(TokenKind.QUERY):
        selected = set(resolved_selection)
        preds.append(lambda e: e.step_key in selected)

    types = {v.strip().lower() for v in state.values(TokenKind.TYPE)}
    if types:
        preds.append(lambda e: e.category in types or e.kind.value in types)

    levels = {_level_name(v) for v in state.values(TokenKind.LEVEL)}
    if levels:
        preds.append(lambda e: e.level.value in levels)

    since = state.since_time
    if since is not None:
        preds.append(lambda e: e.timestamp is None or e.timestamp >= since)

    return preds


def apply_filter(
    state: FilterState,
    events: Sequence[RunEvent],
    resolved_selection: Iterable[str],
) -> FilterResult:
    """
    Partition the log into all, filtered and text-matched nodes.

    `resolved_selection` is the union of the `query` tokens as resolved by the
    selection engine; it only applies when the filter has a `query` token.
    """
    nodes = tuple(LogNode(event=e, clientside_key=f"csk{i}") for i, e in enumerate(events))
    preds = _predicates(state, resolved_selection)
    filtered = tuple(n for n in nodes if all(p(n.event) for p in preds))

    needle = state.text.strip().lower()
    text_matches: tuple[LogNode, ...] = ()
    if needle:
        text_matches = tuple(n for n in filtered if needle in n.event.message.lower())

    return FilterResult(
        all_nodes=nodes,
        filtered_nodes=filtered,
        text_match_nodes=text_matches,
        has_text_filter=bool(needle),
        focused_time=state.focused_time,
    )


def resolve_query_tokens(
    graph: ExecutionPlanGraph | None,
    state: FilterState,
    known_keys: Iterable[str] = (),
) -> list[str]:
    """
    Union of every `query` token resolved through the selection engine.

    Without a plan the queries resolve to literal names only.
    """
    known = list(known_keys)
    out: dict[str, None] = {}
    for query in state.values(TokenKind.QUERY):
        if graph is None:
            keys = resolve_literal_selection(query, known)
        else:
            keys = resolve_selection(graph, query)
        for key in keys:
            out.setdefault(key, None)
    return list(out)


def visible_nodes(result: FilterResult, *, hide_non_matches: bool) -> tuple[LogNode, ...]:
    if result.has_text_filter and hide_non_matches:
        return result.text_match_nodes
    return result.filtered_nodes


def filter_key(state: FilterState, *, hide_non_matches: bool) -> str:
    """Stable identity of what the log view shows, for list-rendering resets."""
    return stable_json_dumps(
        {"filter": asdict(state), "hide_non_matches": hide_non_matches}, indent=None
    )
