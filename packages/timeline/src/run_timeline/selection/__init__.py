from .query import (
    ALL,
    SelectionClause,
    parse_clause,
    parse_selection,
    resolve_literal_selection,
    resolve_selection,
)
from .step_selection import StepSelection, select, toggle_step

__all__ = [
    "ALL",
    "SelectionClause",
    "parse_clause",
    "parse_selection",
    "resolve_literal_selection",
    "resolve_selection",
    "StepSelection",
    "select",
    "toggle_step",
]
