from __future__ import annotations

from typing import Final
from urllib.parse import parse_qs, urlencode

from run_timeline.core import parse_timestamp_ms

from .filter import FilterState, format_filter, tokenize

LOGS_PARAM: Final[str] = "logs"
STEPS_PARAM: Final[str] = "steps"
FOCUSED_TIME_PARAM: Final[str] = "focusedTime"
SINCE_TIME_PARAM: Final[str] = "sinceTime"


def _last(params: dict[str, list[str]], name: str) -> str | None:
    values = params.get(name)
    return values[-1] if values else None


def filters_from_search(search: str) -> FilterState:
    """
    Restore the run page filter from a URL query string like
    `?logs=step:load%20error&steps=%2Bload&focusedTime=1700000000000`.
    """
    params = parse_qs((search or "").lstrip("?"), keep_blank_values=False)

    tokens, text = tokenize(_last(params, LOGS_PARAM) or "")
    step_query = _last(params, STEPS_PARAM)
    return FilterState(
        tokens=tuple(tokens),
        text=text,
        focused_time=parse_timestamp_ms(_last(params, FOCUSED_TIME_PARAM)),
        since_time=parse_timestamp_ms(_last(params, SINCE_TIME_PARAM)),
        step_query=step_query.strip() if step_query and step_query.strip() else None,
    )


def _fmt_ms(ms: float) -> str:
    return str(int(ms)) if float(ms).is_integer() else repr(ms)


def filters_to_search(state: FilterState) -> str:
    params: list[tuple[str, str]] = []
    logs = format_filter(state)
    if logs:
        params.append((LOGS_PARAM, logs))
    if state.step_query:
        params.append((STEPS_PARAM, state.step_query))
    if state.focused_time is not None:
        params.append((FOCUSED_TIME_PARAM, _fmt_ms(state.focused_time)))
    if state.since_time is not None:
        params.append((SINCE_TIME_PARAM, _fmt_ms(state.since_time)))
    return "?" + urlencode(params) if params else ""
