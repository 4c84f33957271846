"""Assessment criterion schema."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Category(str, Enum):
    """Fixed set of criterion categories."""

    HARD_SKILLS = "hard_skills"
    SOFT_SKILLS = "soft_skills"
    EXPERIENCIA = "experiencia"
    FIT_CULTURAL = "fit_cultural"
    OUTROS = "outros"


class ScaleType(str, Enum):
    """Raw-score convention used before normalization."""

    RATING_1_5 = "rating_1_5"
    RATING_1_10 = "rating_1_10"
    ALREADY_NORMALIZED = "already_normalized"


class QuestionType(str, Enum):
    """How a criterion is answered in a self-service technical test."""

    RATING = "rating"
    OPEN_TEXT = "open_text"
    MULTIPLE_CHOICE = "multiple_choice"


DEFAULT_WEIGHT = 10.0


class CriterionOption(BaseModel):
    """Multiple-choice option."""

    text: str = ""
    is_correct: bool = False

    model_config = ConfigDict(extra="ignore")


class Criterion(BaseModel):
    """One named, weighted, categorized question within a template."""

    id: str
    template_id: str | None = None
    name: str = "Unknown"
    description: str | None = None
    category: Category = Category.OUTROS
    weight: float = Field(default=DEFAULT_WEIGHT, ge=0)
    scale_type: ScaleType = ScaleType.RATING_1_5
    question_type: QuestionType = QuestionType.RATING
    options: list[CriterionOption] = Field(default_factory=list)
    display_order: int = 0

    model_config = ConfigDict(extra="allow")

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, value: Any) -> Any:
        if value is None:
            return Category.OUTROS
        if isinstance(value, Category):
            return value
        try:
            return Category(str(value))
        except ValueError:
            return Category.OUTROS

    @field_validator("weight", mode="before")
    @classmethod
    def _default_weight(cls, value: Any) -> Any:
        return DEFAULT_WEIGHT if value is None else value

    @field_validator("scale_type", mode="before")
    @classmethod
    def _coerce_scale(cls, value: Any) -> Any:
        # Missing scale means 1-5; any unrecognized scale is already on 0-100.
        if value is None or value == "":
            return ScaleType.RATING_1_5
        if isinstance(value, ScaleType):
            return value
        try:
            return ScaleType(str(value))
        except ValueError:
            return ScaleType.ALREADY_NORMALIZED

    @field_validator("question_type", mode="before")
    @classmethod
    def _default_question_type(cls, value: Any) -> Any:
        return QuestionType.RATING if value is None else value

    @field_validator("options", mode="before")
    @classmethod
    def _default_options(cls, value: Any) -> Any:
        return [] if value is None else value

    def sanitized(self) -> dict[str, Any]:
        """Public view of the criterion with correctness markers removed."""
        payload = self.model_dump(
            mode="json",
            include={
                "id",
                "name",
                "description",
                "category",
                "weight",
                "question_type",
                "display_order",
            },
        )
        if self.question_type is QuestionType.MULTIPLE_CHOICE:
            payload["options"] = [{"text": option.text} for option in self.options]
        else:
            payload["options"] = None
        return payload
