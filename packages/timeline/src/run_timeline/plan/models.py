from __future__ import annotations

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _coerce_dependencies(value: Any) -> Any:
    # Dependencies arrive either as bare keys or as {"key": ...} objects
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [{"key": v} if isinstance(v, str) else v for v in value]
    return value


class StepDependency(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    key: str = Field(..., min_length=1)


class StepInputDescription(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    name: Optional[str] = None
    depends_on: list[StepDependency] = Field(
        default_factory=list,
        validation_alias=AliasChoices("dependsOn", "depends_on"),
    )

    @field_validator("depends_on", mode="before")
    @classmethod
    def _coerce(cls, v: Any) -> Any:
        return _coerce_dependencies(v)


class StepDescription(BaseModel):
    """
    One step of a plan description.

    `depends_on` is a shorthand for a single unnamed input; it is merged after
    the declared inputs.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    key: str = Field(..., min_length=1)
    inputs: list[StepInputDescription] = Field(default_factory=list)
    depends_on: list[StepDependency] = Field(default_factory=list)
    outputs_persisted: Optional[bool] = Field(
        default=None,
        validation_alias=AliasChoices("artifactsPersisted", "outputs_persisted"),
    )

    @field_validator("depends_on", mode="before")
    @classmethod
    def _coerce(cls, v: Any) -> Any:
        return _coerce_dependencies(v)

    @field_validator("inputs", mode="before")
    @classmethod
    def _none_inputs(cls, v: Any) -> Any:
        return [] if v is None else v


class PlanDescription(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    steps: list[StepDescription] = Field(default_factory=list)
    artifacts_persisted: bool = Field(
        default=False,
        validation_alias=AliasChoices("artifactsPersisted", "artifacts_persisted"),
    )
