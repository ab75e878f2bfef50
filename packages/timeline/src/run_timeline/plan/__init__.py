from .graph import ExecutionPlanGraph, ExecutionStep, StepInput
from .loader import load_plan, plan_from_dict
from .models import PlanDescription, StepDescription

__all__ = [
    "ExecutionPlanGraph",
    "ExecutionStep",
    "StepInput",
    "load_plan",
    "plan_from_dict",
    "PlanDescription",
    "StepDescription",
]
