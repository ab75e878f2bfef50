from __future__ import annotations

import json
from functools import lru_cache
from typing import Any

from jsonschema import Draft202012Validator

from .errors import PlanValidationError
from .resources import plan_schema, schema_version


@lru_cache(maxsize=1)
def validator() -> Draft202012Validator:
    return Draft202012Validator(plan_schema())


def _problems(obj: Any) -> list[str]:
    errs = sorted(validator().iter_errors(obj), key=lambda e: [str(p) for p in e.path])
    return [f"{'.'.join(str(p) for p in e.path) or '<root>'}: {e.message}" for e in errs]


def validate_plan_dict(obj: dict[str, Any]) -> None:
    """
    Validate a plan description against the shipped JSON schema.

    A plan declaring a `schemaVersion` newer than the shipped schema is
    rejected even if it happens to validate.
    """
    problems = _problems(obj)
    declared = obj.get("schemaVersion") if isinstance(obj, dict) else None
    if not problems and isinstance(declared, int) and declared > schema_version():
        problems.append(
            f"schemaVersion: {declared} is newer than supported version {schema_version()}"
        )
    if problems:
        raise PlanValidationError(
            "Plan validation failed:\n" + "\n".join(f"- {p}" for p in problems),
            problems,
        )


def validate_plan_json(raw: str | bytes) -> dict[str, Any]:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")

    try:
        obj = json.loads(raw)
    except json.JSONDecodeError as e:
        raise PlanValidationError(f"Plan is not valid JSON: {e}") from e

    if not isinstance(obj, dict):
        raise PlanValidationError(
            f"Plan must be a JSON object, got {type(obj).__name__}"
        )

    validate_plan_dict(obj)
    return obj
