"""Request payloads accepted by the engine operations."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AggregateRequest(BaseModel):
    job_id: str = Field(min_length=1)

    model_config = ConfigDict(extra="ignore")


class CompareRequest(BaseModel):
    job_id: str = Field(min_length=1)
    anonymize: bool = False

    model_config = ConfigDict(extra="ignore")


class SubmittedAnswer(BaseModel):
    """One answer of a technical test submission."""

    criteria_id: str = Field(min_length=1)
    score: float | None = Field(default=None, ge=0, le=5)
    text_answer: str | None = None
    selected_option_index: int | None = None
    notes: str | None = None

    model_config = ConfigDict(extra="forbid")


class SubmissionRequest(BaseModel):
    token: str = Field(min_length=1)
    answers: list[SubmittedAnswer]

    model_config = ConfigDict(extra="ignore")

    @field_validator("answers")
    @classmethod
    def _unique_criteria(cls, answers: list[SubmittedAnswer]) -> list[SubmittedAnswer]:
        seen: set[str] = set()
        for answer in answers:
            if answer.criteria_id in seen:
                raise ValueError(f"duplicate answer for criteria_id {answer.criteria_id!r}")
            seen.add(answer.criteria_id)
        return answers


class TechnicalTestRequest(BaseModel):
    token: str = Field(min_length=1)

    model_config = ConfigDict(extra="ignore")


class TechnicalTestLinkRequest(BaseModel):
    candidate_id: str = Field(min_length=1)
    template_id: str = Field(min_length=1)
    job_id: str | None = None
    expiration_days: int | None = Field(default=None, gt=0)
    created_by: str | None = None

    model_config = ConfigDict(extra="ignore")
