"""Scorecard engine operations wired over the record store."""

from __future__ import annotations

import json
import secrets
import string
import uuid
from pathlib import Path
from typing import Any, Sequence

import pendulum
import structlog

from .core import (
    AggregatedCandidate,
    CandidateAggregator,
    CandidateRanker,
    ComparisonResult,
    GradeResult,
    SubmissionGrader,
)
from .errors import AlreadySubmittedError, NotFoundError
from .schemas import (
    Candidate,
    Criterion,
    Scorecard,
    ScorecardSource,
    SubmittedAnswer,
    TechnicalTestLinkRequest,
)
from .store import ScorecardStore
from . import __version__

_TOKEN_ALPHABET = string.ascii_letters + string.digits


class AuditLogger:
    """Append-only audit logger writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, record: dict) -> None:
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, ensure_ascii=False, default=json_default))
            handle.write("\n")


class ScorecardService:
    """Fetch inputs, run the engine, write results back."""

    def __init__(
        self,
        *,
        store: ScorecardStore,
        aggregator: CandidateAggregator,
        ranker: CandidateRanker,
        grader: SubmissionGrader,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._store = store
        self._aggregator = aggregator
        self._ranker = ranker
        self._grader = grader
        self._audit_logger = audit_logger
        self._logger = structlog.get_logger(__name__)

    @property
    def store(self) -> ScorecardStore:
        return self._store

    def aggregate(self, job_id: str) -> list[AggregatedCandidate]:
        """Aggregate every candidate with completed scorecards for the job.

        Raises :class:`NotFoundError` when the job has none.
        """
        scorecards = self._store.list_scorecards(job_id, completed_only=True)
        if not scorecards:
            raise NotFoundError("No completed scorecards found for this job")

        candidate_ids = list(dict.fromkeys(scorecard.candidate_id for scorecard in scorecards))
        candidates = [
            self._store.get_candidate(candidate_id) or Candidate(id=candidate_id)
            for candidate_id in candidate_ids
        ]
        aggregated = self._aggregate(candidates, scorecards)
        aggregated.sort(key=lambda item: item.total_score_avg, reverse=True)

        self._logger.info(
            "aggregate.completed",
            job_id=job_id,
            candidates=len(aggregated),
            scorecards=len(scorecards),
        )
        return aggregated

    def compare(self, job_id: str, *, anonymize: bool = False) -> ComparisonResult:
        candidates = self._store.list_candidates(job_id)
        scorecards = self._store.list_scorecards(job_id, completed_only=True)
        aggregated = self._aggregate(candidates, scorecards)
        result = self._ranker.rank(aggregated, anonymize=anonymize)

        self._logger.info(
            "compare.completed",
            job_id=job_id,
            anonymize=anonymize,
            candidates=len(result.candidates),
        )
        return result

    def evaluator_names(self, evaluator_ids: Sequence[str]) -> list[str]:
        names: list[str] = []
        for evaluator_id in evaluator_ids:
            evaluator = self._store.get_evaluator(evaluator_id)
            names.append(evaluator.name if evaluator and evaluator.name else "Desconhecido")
        return names

    def job_title(self, job_id: str) -> str:
        job = self._store.get_job(job_id)
        return job.title if job and job.title else job_id

    def grade_submission(self, token: str, answers: Sequence[SubmittedAnswer]) -> GradeResult:
        """Grade a technical test and transition its scorecard to graded."""
        now = self._grader.now()
        scorecard = self._grader.ensure_submittable(self._store.find_by_token(token), now=now)
        criteria = self._template_criteria(scorecard)

        result = self._grader.grade(scorecard, criteria, answers)
        if result.unknown_criteria:
            self._logger.warning(
                "grade.unknown_criteria",
                scorecard_id=scorecard.id,
                criteria_ids=result.unknown_criteria,
            )

        written = self._store.complete_submission(
            scorecard.id,
            evaluations=result.evaluations,
            total_score=result.total_score,
            match_percentage=result.match_percentage,
            submitted_at=now,
        )
        if not written:
            raise AlreadySubmittedError()

        self._logger.info(
            "grade.completed",
            scorecard_id=scorecard.id,
            candidate_id=scorecard.candidate_id,
            match_percentage=result.match_percentage,
            total_score=result.total_score,
        )
        if self._audit_logger:
            self._append_audit(
                {
                    "scorecard_id": scorecard.id,
                    "candidate_id": scorecard.candidate_id,
                    "job_id": scorecard.job_id,
                    "match_percentage": result.match_percentage,
                    "total_score": result.total_score,
                    "weight_sum": result.weight_sum,
                    "excluded": result.excluded,
                    "unknown_criteria": result.unknown_criteria,
                    "submitted_at": now,
                    "app_version": __version__,
                }
            )
        return result

    def _append_audit(self, record: dict[str, Any]) -> None:
        # Runs after the grade is committed.
        try:
            self._audit_logger.append(record)
        except OSError as exc:
            self._logger.error(
                "grade.audit_failed",
                scorecard_id=record.get("scorecard_id"),
                error=str(exc),
            )

    def get_technical_test(self, token: str) -> dict[str, Any]:
        """Return the public view of a pending test, without correct answers."""
        scorecard = self._grader.ensure_submittable(self._store.find_by_token(token))
        candidate = self._store.get_candidate(scorecard.candidate_id)
        template = self._store.get_template(scorecard.template_id) if scorecard.template_id else None
        job = self._store.get_job(scorecard.job_id) if scorecard.job_id else None
        criteria = self._template_criteria(scorecard)

        return {
            "scorecard": {"id": scorecard.id, "expiresAt": scorecard.expires_at},
            "candidate": {
                "name": candidate.display_name if candidate else "Candidato",
                "email": candidate.email if candidate else None,
            },
            "template": {
                "id": template.id if template else scorecard.template_id,
                "name": template.name if template else None,
                "description": template.description if template else None,
            },
            "job": {"title": job.title, "company": job.company} if job else None,
            "criteria": [criterion.sanitized() for criterion in criteria.values()],
        }

    def issue_test_link(self, link: TechnicalTestLinkRequest) -> Scorecard:
        """Create an empty external scorecard reachable through a random token."""
        if self._store.get_candidate(link.candidate_id) is None:
            raise NotFoundError("Candidate not found")
        if self._store.get_template(link.template_id) is None:
            raise NotFoundError("Template not found")

        config = self._grader.config
        now = pendulum.instance(self._grader.now())
        days = link.expiration_days or config.default_expiration_days
        scorecard = Scorecard(
            id=str(uuid.uuid4()),
            candidate_id=link.candidate_id,
            template_id=link.template_id,
            job_id=link.job_id,
            source=ScorecardSource.EXTERNAL,
            external_token=_generate_token(config.token_length),
            created_at=now,
            expires_at=now.add(days=days),
            created_by=link.created_by,
        )
        self._store.create_scorecard(scorecard)
        self._logger.info(
            "test_link.issued",
            scorecard_id=scorecard.id,
            candidate_id=scorecard.candidate_id,
            expires_at=scorecard.expires_at.isoformat(),
        )
        return scorecard

    def _template_criteria(self, scorecard: Scorecard) -> dict[str, Criterion]:
        if not scorecard.template_id:
            return {}
        return self._store.get_criteria(template_id=scorecard.template_id)

    def _aggregate(
        self,
        candidates: Sequence[Candidate],
        scorecards: Sequence[Scorecard],
    ) -> list[AggregatedCandidate]:
        evaluations = self._store.list_evaluations(scorecard.id for scorecard in scorecards)
        criteria_ids = {
            evaluation.criteria_id for rows in evaluations.values() for evaluation in rows
        }
        criteria = self._store.get_criteria(criteria_ids=criteria_ids)
        return self._aggregator.aggregate_many(
            candidates=candidates,
            scorecards=scorecards,
            evaluations=evaluations,
            criteria=criteria,
        )


def _generate_token(length: int) -> str:
    return "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(length))


def json_default(value: Any) -> Any:
    if isinstance(value, pendulum.DateTime):
        return value.to_iso8601_string()
    if hasattr(value, "isoformat"):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
