"""Scorecard and evaluation records as stored in the record store."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

import pendulum
from pydantic import BaseModel, ConfigDict, field_validator


def as_utc(value: datetime | None) -> datetime | None:
    """Return a timezone-aware timestamp, reading naive values as UTC."""
    if value is None:
        return None
    return pendulum.instance(value, tz="UTC")


class ScorecardSource(str, Enum):
    """Origin of a scorecard."""

    INTERNAL = "interno"
    EXTERNAL = "externo"


class Scorecard(BaseModel):
    """One evaluator's assessment of one candidate for one job."""

    id: str
    candidate_id: str
    job_id: str | None = None
    template_id: str | None = None
    evaluator_id: str | None = None
    source: ScorecardSource = ScorecardSource.INTERNAL
    external_token: str | None = None
    recommendation: str | None = None
    comments: str | None = None
    total_score: float | None = None
    match_percentage: float | None = None
    created_at: datetime
    expires_at: datetime | None = None
    submitted_at: datetime | None = None
    created_by: str | None = None

    model_config = ConfigDict(extra="allow")

    @field_validator("created_at", "expires_at", "submitted_at", mode="after")
    @classmethod
    def _aware(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)

    @property
    def is_completed(self) -> bool:
        return self.match_percentage is not None or self.total_score is not None

    @property
    def is_external(self) -> bool:
        return self.source is ScorecardSource.EXTERNAL

    @property
    def final_score(self) -> float | None:
        """Authoritative per-scorecard score used for aggregation."""
        if self.match_percentage is not None:
            return self.match_percentage
        return self.total_score


class Evaluation(BaseModel):
    """One scored answer to one criterion within one scorecard."""

    scorecard_id: str
    criteria_id: str
    score: float | None = None
    notes: str | None = None
    text_answer: str | None = None
    selected_option_index: int | None = None
    is_correct: bool | None = None

    model_config = ConfigDict(extra="allow", frozen=True)


__all__ = [
    "Evaluation",
    "Scorecard",
    "ScorecardSource",
    "as_utc",
]
