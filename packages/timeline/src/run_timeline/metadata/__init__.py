from .cache import RunMetadataCache
from .reducer import derive_run_metadata, error_for_event
from .types import (
    MissingTerminalPolicy,
    RunMetadataSnapshot,
    RunStatus,
    StepMarker,
    StepRuntimeState,
    StepState,
    StepTransition,
)

__all__ = [
    "RunMetadataCache",
    "derive_run_metadata",
    "error_for_event",
    "MissingTerminalPolicy",
    "RunMetadataSnapshot",
    "RunStatus",
    "StepMarker",
    "StepRuntimeState",
    "StepState",
    "StepTransition",
]
