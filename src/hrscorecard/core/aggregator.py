"""Per-candidate aggregation of completed scorecards."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Mapping, Sequence

import structlog

from ..schemas import Candidate, Category, Criterion, Evaluation, Scorecard
from .normalizer import ScaleNormalizer
from .rounding import round_half_up


@dataclass
class AggregatorConfig:
    """Configuration for per-candidate aggregation."""

    low_confidence_threshold: int = 2
    top_criteria_limit: int = 3
    average_precision: int = 1


@dataclass(slots=True)
class CriterionBreakdown:
    """Averaged normalized score of one criterion across evaluators."""

    criterion: str
    category: Category
    average: float
    weight: float


@dataclass(slots=True)
class CandidateComment:
    text: str
    evaluator_id: str | None
    date: datetime


@dataclass(slots=True)
class ScorecardSummary:
    id: str
    template_id: str | None
    evaluator_id: str | None
    score: float | None
    recommendation: str | None
    comments: str | None
    date: datetime


@dataclass(slots=True)
class AggregatedCandidate:
    """Normalized, comparable view of every completed scorecard of a candidate."""

    candidate_id: str
    candidate_name: str
    total_score_avg: float
    evaluators_count: int
    breakdown: list[CriterionBreakdown]
    top_criteria: list[CriterionBreakdown]
    comments: list[CandidateComment]
    last_evaluation_date: datetime
    low_confidence: bool
    evaluator_ids: list[str] = field(default_factory=list)
    scorecards: list[ScorecardSummary] = field(default_factory=list)
    excluded_evaluations: int = 0


@dataclass(slots=True)
class _CriterionScores:
    category: Category
    weight: float
    scores: list[float] = field(default_factory=list)


class CandidateAggregator:
    """Turn raw evaluation rows into one aggregated candidate."""

    def __init__(
        self,
        *,
        normalizer: ScaleNormalizer | None = None,
        config: AggregatorConfig | None = None,
    ) -> None:
        self._normalizer = normalizer or ScaleNormalizer()
        self._config = config or AggregatorConfig()
        self._logger = structlog.get_logger(__name__)

    def aggregate(
        self,
        *,
        candidate: Candidate,
        scorecards: Sequence[Scorecard],
        evaluations: Mapping[str, Sequence[Evaluation]],
        criteria: Mapping[str, Criterion],
    ) -> AggregatedCandidate | None:
        """Aggregate one candidate; ``None`` when nothing is completed.

        ``evaluations`` maps scorecard id to its evaluation rows and
        ``criteria`` maps criterion id to its definition.
        """
        completed = [scorecard for scorecard in scorecards if scorecard.is_completed]
        if not completed:
            return None
        completed.sort(key=lambda scorecard: scorecard.created_at, reverse=True)

        grouped: dict[str, _CriterionScores] = {}
        excluded = 0
        for scorecard in completed:
            for evaluation in evaluations.get(scorecard.id, ()):
                normalized = self._normalize_evaluation(evaluation, criteria)
                if normalized is None:
                    excluded += 1
                    continue
                criterion, value = normalized
                bucket = grouped.setdefault(
                    criterion.name,
                    _CriterionScores(category=criterion.category, weight=criterion.weight),
                )
                bucket.scores.append(value)

        breakdown = [
            CriterionBreakdown(
                criterion=name,
                category=bucket.category,
                average=round_half_up(
                    sum(bucket.scores) / len(bucket.scores),
                    self._config.average_precision,
                ),
                weight=bucket.weight,
            )
            for name, bucket in grouped.items()
        ]
        breakdown.sort(key=lambda item: item.average, reverse=True)

        final_scores = [scorecard.final_score for scorecard in completed]
        total_score_avg = round_half_up(
            sum(final_scores) / len(final_scores),
            self._config.average_precision,
        )
        evaluators_count = len(completed)

        return AggregatedCandidate(
            candidate_id=candidate.id,
            candidate_name=candidate.display_name,
            total_score_avg=total_score_avg,
            evaluators_count=evaluators_count,
            breakdown=breakdown,
            top_criteria=breakdown[: self._config.top_criteria_limit],
            comments=[
                CandidateComment(
                    text=scorecard.comments,
                    evaluator_id=scorecard.evaluator_id,
                    date=scorecard.created_at,
                )
                for scorecard in completed
                if scorecard.comments
            ],
            last_evaluation_date=completed[0].created_at,
            low_confidence=evaluators_count < self._config.low_confidence_threshold,
            evaluator_ids=_unique(
                scorecard.evaluator_id for scorecard in completed if scorecard.evaluator_id
            ),
            scorecards=[
                ScorecardSummary(
                    id=scorecard.id,
                    template_id=scorecard.template_id,
                    evaluator_id=scorecard.evaluator_id,
                    score=scorecard.final_score,
                    recommendation=scorecard.recommendation,
                    comments=scorecard.comments,
                    date=scorecard.created_at,
                )
                for scorecard in completed
            ],
            excluded_evaluations=excluded,
        )

    def aggregate_many(
        self,
        *,
        candidates: Iterable[Candidate],
        scorecards: Iterable[Scorecard],
        evaluations: Mapping[str, Sequence[Evaluation]],
        criteria: Mapping[str, Criterion],
    ) -> list[AggregatedCandidate]:
        """Aggregate every candidate that has at least one completed scorecard.

        Output keeps the order of ``candidates``.
        """
        by_candidate: dict[str, list[Scorecard]] = {}
        for scorecard in scorecards:
            by_candidate.setdefault(scorecard.candidate_id, []).append(scorecard)

        results: list[AggregatedCandidate] = []
        for candidate in candidates:
            aggregated = self.aggregate(
                candidate=candidate,
                scorecards=by_candidate.get(candidate.id, []),
                evaluations=evaluations,
                criteria=criteria,
            )
            if aggregated is not None:
                results.append(aggregated)
        return results

    def _normalize_evaluation(
        self,
        evaluation: Evaluation,
        criteria: Mapping[str, Criterion],
    ) -> tuple[Criterion, float] | None:
        criterion = criteria.get(evaluation.criteria_id)
        if criterion is None:
            self._logger.warning(
                "evaluation.excluded",
                reason="unknown_criterion",
                scorecard_id=evaluation.scorecard_id,
                criteria_id=evaluation.criteria_id,
            )
            return None
        if evaluation.score is None:
            self._logger.debug(
                "evaluation.excluded",
                reason="missing_score",
                scorecard_id=evaluation.scorecard_id,
                criteria_id=evaluation.criteria_id,
            )
            return None
        return criterion, self._normalizer.normalize(evaluation.score, criterion.scale_type)


def _unique(values: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for value in values:
        seen.setdefault(value, None)
    return list(seen)
