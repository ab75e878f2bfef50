from __future__ import annotations

import re
from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import Final, Iterable

from run_timeline.core import SelectionError
from run_timeline.plan import ExecutionPlanGraph

ALL: Final[str] = "*"

_CLAUSE_RE: Final[re.Pattern[str]] = re.compile(r"^(\+?)([^\s+,]+)(\+?)$")
_GLOB_CHARS: Final[frozenset[str]] = frozenset("*?[")


@dataclass(frozen=True, slots=True)
class SelectionClause:
    """
    One comma-separated clause: a key or glob with optional direction operators.

      +name   name and everything it depends on
      name+   name and everything that depends on it
    """

    pattern: str
    upstream: bool = False
    downstream: bool = False

    @property
    def is_glob(self) -> bool:
        return any(c in _GLOB_CHARS for c in self.pattern)


def parse_clause(text: str) -> SelectionClause | None:
    m = _CLAUSE_RE.match(text.strip())
    if m is None:
        return None
    up, pattern, down = m.groups()
    return SelectionClause(pattern=pattern, upstream=bool(up), downstream=bool(down))


def parse_selection(query: str) -> list[SelectionClause]:
    """
    Split a selection query into clauses, dropping empty and unparseable ones.
    """
    clauses: list[SelectionClause] = []
    for part in (query or "").split(","):
        if not part.strip():
            continue
        clause = parse_clause(part)
        if clause is not None:
            clauses.append(clause)
    return clauses


def _match(pattern: str, keys: Iterable[str]) -> list[str]:
    if pattern == ALL:
        return list(keys)
    return [k for k in keys if fnmatchcase(k, pattern)]


def resolve_selection(graph: ExecutionPlanGraph, query: str) -> list[str]:
    """
    Resolve `query` against the plan graph.

    Returns step keys in first-occurrence order across clauses; inside a
    clause keys follow the graph's topological order, so upstream steps come
    first. A key that exists in the plan is taken as written even when it
    contains glob characters. An empty query selects nothing while `*`
    selects every step.
    """
    if not isinstance(graph, ExecutionPlanGraph):
        raise SelectionError(
            f"resolve_selection needs an ExecutionPlanGraph, got {type(graph).__name__}"
        )

    out: dict[str, None] = {}
    for clause in parse_selection(query):
        if clause.pattern in graph:
            matched = [clause.pattern]
        elif clause.is_glob:
            matched = _match(clause.pattern, graph.topological_order)
        else:
            matched = []
        if not matched:
            continue

        found = set(matched)
        for key in matched:
            if clause.upstream:
                found.update(graph.ancestors(key))
            if clause.downstream:
                found.update(graph.descendants(key))

        for key in sorted(found, key=graph.rank):
            out.setdefault(key, None)
    return list(out)


def resolve_literal_selection(query: str, known_keys: Iterable[str] = ()) -> list[str]:
    """
    Degraded resolution for runs without a plan.

    Direction operators are ignored since there is no graph to walk. Plain
    names and known keys are returned as written; other globs match
    only `known_keys`.
    """
    known = list(dict.fromkeys(known_keys))
    out: dict[str, None] = {}
    for clause in parse_selection(query):
        if clause.is_glob and clause.pattern not in known:
            for key in _match(clause.pattern, known):
                out.setdefault(key, None)
        else:
            out.setdefault(clause.pattern, None)
    return list(out)
