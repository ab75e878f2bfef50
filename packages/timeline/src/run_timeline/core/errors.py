from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


class TimelineError(RuntimeError):
    """Base error"""


class PlanError(TimelineError):
    """
    The plan description could not be read or does not describe a usable plan
    (schema mismatch, duplicate step keys, unreadable file)
    """


class EventLogError(TimelineError):
    """The event log file could not be read"""


class SelectionError(TimelineError):
    """
    Selection resolution was called without a plan graph.

    A missing plan is a data condition handled by `resolve_literal_selection`;
    this error signals a caller bug.
    """


class InternalError(TimelineError):
    """Bugs or invariant violation in our code"""


UNKNOWN_ERROR_MESSAGE = "Unknown error"


@dataclass(frozen=True, slots=True)
class ErrorInfo:
    """
    A normalized error record attached to step and run failures.
    """

    message: str
    class_name: str | None = None
    stack: tuple[str, ...] = ()
    cause: "ErrorInfo | None" = None

    @property
    def is_unknown(self) -> bool:
        return self.message == UNKNOWN_ERROR_MESSAGE and self.class_name is None


UNKNOWN_ERROR = ErrorInfo(message=UNKNOWN_ERROR_MESSAGE)


def error_info_from_payload(payload: Any, *, _depth: int = 0) -> ErrorInfo | None:
    """
    Build an ErrorInfo from a structured error payload.

    Accepts the PythonError shape (`message`, `className`, `stack`, `cause`)
    and its snake_case spelling. Returns None when the payload is not usable;
    callers decide whether to substitute UNKNOWN_ERROR.
    """
    if isinstance(payload, ErrorInfo):
        return payload
    if not isinstance(payload, Mapping):
        return None

    message = payload.get("message")
    if not isinstance(message, str) or not message.strip():
        return None

    class_name = payload.get("className", payload.get("class_name"))
    if class_name is not None and not isinstance(class_name, str):
        class_name = str(class_name)

    raw_stack = payload.get("stack") or ()
    if isinstance(raw_stack, str):
        stack = tuple(raw_stack.splitlines())
    elif isinstance(raw_stack, (list, tuple)):
        stack = tuple(str(x) for x in raw_stack)
    else:
        stack = ()

    cause = None
    if _depth < 8:
        cause = error_info_from_payload(payload.get("cause"), _depth=_depth + 1)

    return ErrorInfo(
        message=message.strip(), class_name=class_name, stack=stack, cause=cause
    )
