from .filter import (
    FilterResult,
    FilterState,
    FilterToken,
    LogNode,
    TokenKind,
    apply_filter,
    filter_key,
    format_filter,
    parse_filter,
    resolve_query_tokens,
    tokenize,
    visible_nodes,
)
from .url import filters_from_search, filters_to_search

__all__ = [
    "FilterResult",
    "FilterState",
    "FilterToken",
    "LogNode",
    "TokenKind",
    "apply_filter",
    "filter_key",
    "format_filter",
    "parse_filter",
    "resolve_query_tokens",
    "tokenize",
    "visible_nodes",
    "filters_from_search",
    "filters_to_search",
]
