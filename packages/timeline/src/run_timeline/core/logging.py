from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from rich.console import Console
from rich.logging import RichHandler
from structlog.contextvars import bind_contextvars, clear_contextvars, merge_contextvars

_CONFIGURED = False


def normalize_level(level: str) -> str:
    s = (level or "INFO").strip().upper()
    return "WARNING" if s == "WARN" else s


def _handler(fmt: str) -> logging.Handler:
    # stderr, so CLI tables on stdout stay clean
    if fmt == "console":
        return RichHandler(
            rich_tracebacks=True,
            markup=False,
            show_time=False,
            show_path=False,
            console=Console(stderr=True),
        )
    return logging.StreamHandler(stream=sys.stderr)


def _renderer(fmt: str) -> Any:
    if fmt == "console":
        return structlog.processors.KeyValueRenderer(
            sort_keys=True, key_order=["event", "level"]
        )
    return structlog.processors.JSONRenderer()


def configure_logging(
    *, level: str = "INFO", fmt: str = "console", force: bool = False
) -> None:
    """
    Route structlog through the stdlib root logger.

    Only the first call takes effect unless `force` is set.
    """
    global _CONFIGURED
    if _CONFIGURED and not force:
        return

    level = normalize_level(level)
    handler = _handler(fmt)
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(level)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    root.addHandler(handler)

    structlog.configure(
        processors=[
            merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(fmt),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _CONFIGURED = True


def get_logger(name: str = "run_timeline") -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind(**values: Any) -> None:
    """Attach values (e.g. run id, command) to every log line of this context."""
    bind_contextvars(**values)


def clear_bindings() -> None:
    clear_contextvars()
