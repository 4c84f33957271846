"""Core scoring engine components."""

from __future__ import annotations

# NOTE: keep imports explicit for export clarity.
from .aggregator import (
    AggregatedCandidate,
    AggregatorConfig,
    CandidateAggregator,
    CandidateComment,
    CriterionBreakdown,
    ScorecardSummary,
)
from .grader import GradeResult, GraderConfig, SubmissionGrader
from .normalizer import ScaleNormalizer
from .ranker import (
    CandidateRanker,
    ComparisonResult,
    RankedCandidate,
    RankerConfig,
    RankingStats,
)
from .resolver import AnswerResolution, AnswerResolver, ExcludedAnswer, ScoredAnswer
from .rounding import round_half_up, round_to_int

__all__ = [
    "AggregatedCandidate",
    "AggregatorConfig",
    "AnswerResolution",
    "AnswerResolver",
    "CandidateAggregator",
    "CandidateComment",
    "CandidateRanker",
    "ComparisonResult",
    "CriterionBreakdown",
    "ExcludedAnswer",
    "GradeResult",
    "GraderConfig",
    "RankedCandidate",
    "RankerConfig",
    "RankingStats",
    "ScaleNormalizer",
    "ScorecardSummary",
    "ScoredAnswer",
    "SubmissionGrader",
    "round_half_up",
    "round_to_int",
]
