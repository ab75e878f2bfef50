from __future__ import annotations

import json
from functools import lru_cache
from importlib.resources import files
from typing import Any, Final

from .errors import ContractsResourceError

PKG: Final[str] = "run_timeline_contracts"

PLAN_SCHEMA_REL: Final[str] = "schema/jsonschema/plan.schema.json"
SCHEMA_VERSION_REL: Final[str] = "schema/VERSION"


def read_text(rel_path: str) -> str:
    try:
        return files(PKG).joinpath(rel_path).read_text(encoding="utf-8")
    except OSError as e:
        raise ContractsResourceError(
            f"Cannot read contracts resource {rel_path}: {e}"
        ) from e


@lru_cache(maxsize=None)
def plan_schema() -> dict[str, Any]:
    """JSON Schema for plan descriptions, parsed once per process."""
    try:
        schema = json.loads(read_text(PLAN_SCHEMA_REL))
    except json.JSONDecodeError as e:
        raise ContractsResourceError(f"Invalid JSON in {PLAN_SCHEMA_REL}: {e}") from e
    if not isinstance(schema, dict):
        raise ContractsResourceError(f"{PLAN_SCHEMA_REL} must hold a JSON object")
    return schema


def schema_version() -> int:
    """
    Integer compatibility gate for plan descriptions; bumped on breaking
    schema changes.
    """
    raw = read_text(SCHEMA_VERSION_REL).strip()
    if not raw.isdigit() or int(raw) < 1:
        raise ContractsResourceError(
            f"{SCHEMA_VERSION_REL} must be a positive integer, got {raw!r}"
        )
    return int(raw)
