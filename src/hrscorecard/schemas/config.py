"""Pydantic configuration schema for YAML input."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class AggregatorSettings(BaseModel):
    low_confidence_threshold: int | None = Field(default=None, ge=1)
    top_criteria_limit: int | None = Field(default=None, ge=0)
    average_precision: int | None = Field(default=None, ge=0)

    model_config = ConfigDict(extra="forbid")


class RankerSettings(BaseModel):
    label_template: str | None = None
    synthetic_id_template: str | None = None

    model_config = ConfigDict(extra="forbid")


class GraderSettings(BaseModel):
    max_contribution: float | None = Field(default=None, gt=0)
    default_expiration_days: int | None = Field(default=None, gt=0)
    token_length: int | None = Field(default=None, ge=16)

    model_config = ConfigDict(extra="forbid")


class StoreSettings(BaseModel):
    path: str | None = None

    model_config = ConfigDict(extra="forbid")


class AppConfig(BaseModel):
    aggregator: AggregatorSettings = Field(default_factory=AggregatorSettings)
    ranker: RankerSettings = Field(default_factory=RankerSettings)
    grader: GraderSettings = Field(default_factory=GraderSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)

    model_config = ConfigDict(extra="forbid")

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        for section in ("aggregator", "ranker", "grader", "store"):
            values = getattr(self, section).model_dump(exclude_none=True)
            if values:
                settings[section] = values
        return settings


def load_config(raw: Any) -> AppConfig:
    if raw is None:
        return AppConfig()
    if not isinstance(raw, dict):
        raise ValidationError.from_exception_data(
            "AppConfig",
            [{"type": "dict_type", "loc": ("config",), "input": raw}],
        )
    return AppConfig.model_validate(raw)
