"""Shape of the record store snapshot document."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .candidate import Candidate, Evaluator
from .criterion import Criterion
from .job import Job, Template
from .scorecard import Evaluation, Scorecard


class StoreSnapshot(BaseModel):
    """All tables the engine reads from or writes to."""

    candidates: list[Candidate] = Field(default_factory=list)
    evaluators: list[Evaluator] = Field(default_factory=list)
    jobs: list[Job] = Field(default_factory=list)
    templates: list[Template] = Field(default_factory=list)
    criteria: list[Criterion] = Field(default_factory=list)
    scorecards: list[Scorecard] = Field(default_factory=list)
    evaluations: list[Evaluation] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")
