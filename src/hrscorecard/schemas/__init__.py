"""Pydantic schema definitions for records and requests."""

from __future__ import annotations

from .candidate import Candidate, Evaluator
from .criterion import (
    Category,
    Criterion,
    CriterionOption,
    QuestionType,
    ScaleType,
)
from .job import Job, Template
from .requests import (
    AggregateRequest,
    CompareRequest,
    SubmissionRequest,
    SubmittedAnswer,
    TechnicalTestLinkRequest,
    TechnicalTestRequest,
)
from .scorecard import Evaluation, Scorecard, ScorecardSource
from .snapshot import StoreSnapshot

__all__ = [
    "AggregateRequest",
    "Candidate",
    "Category",
    "CompareRequest",
    "Criterion",
    "CriterionOption",
    "Evaluation",
    "Evaluator",
    "Job",
    "QuestionType",
    "ScaleType",
    "Scorecard",
    "ScorecardSource",
    "StoreSnapshot",
    "SubmissionRequest",
    "SubmittedAnswer",
    "Template",
    "TechnicalTestLinkRequest",
    "TechnicalTestRequest",
]
