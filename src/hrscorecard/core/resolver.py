"""Per-answer resolution for technical test grading."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union

from ..schemas import Criterion, QuestionType, SubmittedAnswer

MAX_CONTRIBUTION = 5.0


@dataclass(slots=True, frozen=True)
class ScoredAnswer:
    """Answer that takes part in the weighted total."""

    criterion: Criterion
    contribution: float
    is_correct: bool | None = None


@dataclass(slots=True, frozen=True)
class ExcludedAnswer:
    """Answer left out of the weighted total, with the reason why."""

    criterion: Criterion
    reason: str
    is_correct: bool | None = None


AnswerResolution = Union[ScoredAnswer, ExcludedAnswer]


class AnswerResolver:
    """Resolve one submitted answer against its criterion definition."""

    def __init__(self, *, max_contribution: float = MAX_CONTRIBUTION) -> None:
        self._max_contribution = max_contribution
        self._handlers: dict[
            QuestionType, Callable[[Criterion, SubmittedAnswer], AnswerResolution]
        ] = {
            QuestionType.RATING: self._resolve_rating,
            QuestionType.MULTIPLE_CHOICE: self._resolve_multiple_choice,
            QuestionType.OPEN_TEXT: self._resolve_open_text,
        }
        missing = set(QuestionType) - set(self._handlers)
        if missing:
            raise RuntimeError(f"No resolver for question types: {sorted(missing)}")

    @property
    def max_contribution(self) -> float:
        return self._max_contribution

    def resolve(self, criterion: Criterion, answer: SubmittedAnswer) -> AnswerResolution:
        return self._handlers[criterion.question_type](criterion, answer)

    def _resolve_rating(self, criterion: Criterion, answer: SubmittedAnswer) -> AnswerResolution:
        if answer.score is None:
            return ExcludedAnswer(criterion=criterion, reason="missing_score")
        contribution = max(0.0, min(self._max_contribution, float(answer.score)))
        return ScoredAnswer(criterion=criterion, contribution=contribution)

    def _resolve_multiple_choice(
        self,
        criterion: Criterion,
        answer: SubmittedAnswer,
    ) -> AnswerResolution:
        index = answer.selected_option_index
        if index is None:
            return ExcludedAnswer(criterion=criterion, reason="missing_option")
        if index < 0 or index >= len(criterion.options):
            return ExcludedAnswer(criterion=criterion, reason="option_out_of_range")
        is_correct = criterion.options[index].is_correct is True
        return ScoredAnswer(
            criterion=criterion,
            contribution=self._max_contribution if is_correct else 0.0,
            is_correct=is_correct,
        )

    @staticmethod
    def _resolve_open_text(criterion: Criterion, answer: SubmittedAnswer) -> AnswerResolution:
        return ExcludedAnswer(criterion=criterion, reason="manual_grading")
