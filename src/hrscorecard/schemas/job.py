from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Job(BaseModel):
    """Job requisition reference."""

    id: str
    title: str | None = None
    company: str | None = None

    model_config = ConfigDict(extra="allow")


class Template(BaseModel):
    """Assessment template grouping criteria."""

    id: str
    name: str | None = None
    description: str | None = None

    model_config = ConfigDict(extra="allow")
