"""Ranking and comparison of aggregated candidates within one requisition."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

from .aggregator import AggregatedCandidate, CriterionBreakdown, ScorecardSummary
from .rounding import round_to_int


@dataclass
class RankerConfig:
    """Configuration for ranking output."""

    label_template: str = "Candidato {rank}"
    synthetic_id_template: str = "candidato-{rank}"


@dataclass(slots=True)
class RankedCandidate:
    rank: int
    candidate_id: str
    name: str
    total_score: int
    total_score_avg: float
    evaluators_count: int
    low_confidence: bool
    criteria_averages: list[CriterionBreakdown]
    top_criteria: list[CriterionBreakdown]
    last_evaluation_date: datetime
    recommendations: list[str | None] = field(default_factory=list)
    evaluator_ids: list[str] = field(default_factory=list)
    scorecards: list[ScorecardSummary] = field(default_factory=list)
    anonymized: bool = False


@dataclass(slots=True)
class RankingStats:
    total_candidates: int
    average_score: int
    top_score: int
    low_score: int

    def to_payload(self) -> dict[str, int]:
        return {
            "totalCandidates": self.total_candidates,
            "averageScore": self.average_score,
            "topScore": self.top_score,
            "lowScore": self.low_score,
        }


@dataclass(slots=True)
class ComparisonResult:
    candidates: list[RankedCandidate]
    stats: RankingStats | None


class CandidateRanker:
    """Order aggregated candidates and compute requisition-level statistics.

    Ordering is descending by ``total_score_avg`` using :func:`sorted`, which
    is stable: candidates with equal averages keep their input order.
    """

    def __init__(self, *, config: RankerConfig | None = None) -> None:
        self._config = config or RankerConfig()

    def label_of(self, rank: int) -> str:
        return self._config.label_template.format(rank=rank)

    def synthetic_id_of(self, rank: int) -> str:
        return self._config.synthetic_id_template.format(rank=rank)

    def rank(
        self,
        candidates: Sequence[AggregatedCandidate],
        *,
        anonymize: bool = False,
    ) -> ComparisonResult:
        if not candidates:
            return ComparisonResult(candidates=[], stats=None)

        ordered = sorted(candidates, key=lambda item: item.total_score_avg, reverse=True)
        ranked = [
            self._to_ranked(position, candidate, anonymize=anonymize)
            for position, candidate in enumerate(ordered, start=1)
        ]
        return ComparisonResult(candidates=ranked, stats=self._stats(ranked))

    def _to_ranked(
        self,
        rank: int,
        candidate: AggregatedCandidate,
        *,
        anonymize: bool,
    ) -> RankedCandidate:
        return RankedCandidate(
            rank=rank,
            candidate_id=self.synthetic_id_of(rank) if anonymize else candidate.candidate_id,
            name=self.label_of(rank) if anonymize else candidate.candidate_name,
            total_score=round_to_int(candidate.total_score_avg),
            total_score_avg=candidate.total_score_avg,
            evaluators_count=candidate.evaluators_count,
            low_confidence=candidate.low_confidence,
            criteria_averages=list(candidate.breakdown),
            top_criteria=list(candidate.top_criteria),
            last_evaluation_date=candidate.last_evaluation_date,
            recommendations=[summary.recommendation for summary in candidate.scorecards],
            evaluator_ids=list(candidate.evaluator_ids),
            scorecards=list(candidate.scorecards),
            anonymized=anonymize,
        )

    @staticmethod
    def _stats(ranked: Sequence[RankedCandidate]) -> RankingStats:
        scores = [candidate.total_score for candidate in ranked]
        return RankingStats(
            total_candidates=len(ranked),
            average_score=round_to_int(sum(scores) / len(scores)),
            top_score=ranked[0].total_score,
            low_score=ranked[-1].total_score,
        )
