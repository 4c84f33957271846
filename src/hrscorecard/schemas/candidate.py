from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Candidate(BaseModel):
    """Candidate linked to a job requisition."""

    id: str
    name: str | None = None
    email: str | None = None
    job_id: str | None = None

    model_config = ConfigDict(extra="allow")

    @property
    def display_name(self) -> str:
        return self.name or "Candidato"


class Evaluator(BaseModel):
    """Person filling internal scorecards."""

    id: str
    name: str | None = None

    model_config = ConfigDict(extra="allow")
