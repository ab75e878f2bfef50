from __future__ import annotations

from .errors import ContractsError, ContractsResourceError, PlanValidationError
from .plan import validate_plan_dict, validate_plan_json
from .resources import PLAN_SCHEMA_REL, plan_schema, read_text, schema_version

__all__ = [
    "ContractsError",
    "ContractsResourceError",
    "PlanValidationError",
    "validate_plan_dict",
    "validate_plan_json",
    "PLAN_SCHEMA_REL",
    "plan_schema",
    "read_text",
    "schema_version",
]
