"""Real-time grading of a single technical test submission."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Mapping, Sequence

import pendulum

from ..errors import AlreadySubmittedError, ExpiredLinkError, NotFoundError
from ..schemas import Criterion, Evaluation, Scorecard, SubmittedAnswer
from .resolver import AnswerResolution, AnswerResolver, ScoredAnswer
from .rounding import round_to_int


@dataclass
class GraderConfig:
    """Configuration for technical test grading."""

    max_contribution: float = 5.0
    default_expiration_days: int = 7
    token_length: int = 32


@dataclass(slots=True)
class GradeResult:
    """Computed totals plus the evaluation rows to persist."""

    scorecard_id: str
    weighted_sum: float
    weight_sum: float
    match_percentage: int
    evaluations: list[Evaluation]
    excluded: dict[str, str] = field(default_factory=dict)
    unknown_criteria: list[str] = field(default_factory=list)

    @property
    def total_score(self) -> float:
        return self.weighted_sum


class SubmissionGrader:
    """Validate eligibility of a submission and grade its deterministic answers.

    A scorecard moves from pending (no ``submitted_at``) to graded exactly once.
    This class only computes; persisting the transition belongs to the store,
    which must refuse the write when ``submitted_at`` is already set.
    """

    def __init__(
        self,
        *,
        resolver: AnswerResolver | None = None,
        config: GraderConfig | None = None,
        now_provider: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config or GraderConfig()
        self._resolver = resolver or AnswerResolver(
            max_contribution=self._config.max_contribution
        )
        self._now_provider = now_provider or (lambda: pendulum.now("UTC"))

    @property
    def config(self) -> GraderConfig:
        return self._config

    def now(self) -> datetime:
        return self._now_provider()

    def ensure_submittable(
        self,
        scorecard: Scorecard | None,
        *,
        now: datetime | None = None,
    ) -> Scorecard:
        """Raise the first failing precondition, in the documented order."""
        if scorecard is None or not scorecard.is_external:
            raise NotFoundError("Test not found")
        if scorecard.submitted_at is not None:
            raise AlreadySubmittedError()
        current = now or self.now()
        if scorecard.expires_at is not None and scorecard.expires_at < current:
            raise ExpiredLinkError()
        return scorecard

    def grade(
        self,
        scorecard: Scorecard,
        criteria: Mapping[str, Criterion],
        answers: Sequence[SubmittedAnswer],
    ) -> GradeResult:
        weighted_sum = 0.0
        weight_sum = 0.0
        rows: list[Evaluation] = []
        excluded: dict[str, str] = {}
        unknown: list[str] = []

        for answer in answers:
            criterion = criteria.get(answer.criteria_id)
            if criterion is None:
                unknown.append(answer.criteria_id)
                continue

            resolution = self._resolver.resolve(criterion, answer)
            if isinstance(resolution, ScoredAnswer):
                weighted_sum += (
                    resolution.contribution / self._resolver.max_contribution
                ) * criterion.weight
                weight_sum += criterion.weight
            else:
                excluded[criterion.id] = resolution.reason

            rows.append(self._evaluation_row(scorecard.id, answer, resolution))

        match_percentage = (
            round_to_int(weighted_sum / weight_sum * 100) if weight_sum > 0 else 0
        )
        return GradeResult(
            scorecard_id=scorecard.id,
            weighted_sum=weighted_sum,
            weight_sum=weight_sum,
            match_percentage=match_percentage,
            evaluations=rows,
            excluded=excluded,
            unknown_criteria=unknown,
        )

    @staticmethod
    def _evaluation_row(
        scorecard_id: str,
        answer: SubmittedAnswer,
        resolution: AnswerResolution,
    ) -> Evaluation:
        score: float | None = None
        # Zero contributions are stored empty.
        if isinstance(resolution, ScoredAnswer) and resolution.contribution > 0:
            score = resolution.contribution
        payload: dict[str, Any] = {
            "scorecard_id": scorecard_id,
            "criteria_id": answer.criteria_id,
            "score": score,
            "notes": answer.notes or None,
            "text_answer": answer.text_answer or None,
            "selected_option_index": answer.selected_option_index,
            "is_correct": resolution.is_correct,
        }
        return Evaluation(**payload)


__all__ = [
    "GradeResult",
    "GraderConfig",
    "SubmissionGrader",
]
