"""Thin read/write boundary over the record store."""

from __future__ import annotations

import json
import threading
from datetime import datetime
from pathlib import Path
from typing import Iterable, Protocol, Sequence, runtime_checkable

import structlog
from pydantic import ValidationError

from .errors import StoreError
from .schemas import (
    Candidate,
    Criterion,
    Evaluation,
    Evaluator,
    Job,
    Scorecard,
    StoreSnapshot,
    Template,
)


@runtime_checkable
class ScorecardStore(Protocol):
    """Queries the engine needs from the record store."""

    def list_candidates(self, job_id: str) -> list[Candidate]:
        """Return candidates linked to the job, in store order."""

    def get_candidate(self, candidate_id: str) -> Candidate | None:
        """Return one candidate by id."""

    def list_scorecards(self, job_id: str, *, completed_only: bool = False) -> list[Scorecard]:
        """Return scorecards of the job, most recent first."""

    def list_evaluations(self, scorecard_ids: Iterable[str]) -> dict[str, list[Evaluation]]:
        """Return evaluation rows grouped by scorecard id."""

    def get_criteria(
        self,
        *,
        criteria_ids: Iterable[str] | None = None,
        template_id: str | None = None,
    ) -> dict[str, Criterion]:
        """Return criteria keyed by id, filtered by ids and/or template."""

    def find_by_token(self, token: str) -> Scorecard | None:
        """Return the scorecard carrying the given external token."""

    def get_template(self, template_id: str) -> Template | None:
        """Return one template by id."""

    def get_job(self, job_id: str) -> Job | None:
        """Return one job by id."""

    def get_evaluator(self, evaluator_id: str) -> Evaluator | None:
        """Return one evaluator by id."""

    def complete_submission(
        self,
        scorecard_id: str,
        *,
        evaluations: Sequence[Evaluation],
        total_score: float,
        match_percentage: float,
        submitted_at: datetime,
    ) -> bool:
        """Atomically grade a pending scorecard.

        Returns ``False`` without writing anything when ``submitted_at`` is
        already set.
        """

    def create_scorecard(self, scorecard: Scorecard) -> Scorecard:
        """Insert a new scorecard."""


class JsonScorecardStore:
    """Record store backed by a JSON snapshot document.

    Writes are serialized by a lock and persisted to ``path`` (when set)
    before the in-memory state is replaced, so a failed write leaves both
    unchanged.
    """

    def __init__(self, snapshot: StoreSnapshot | None = None, *, path: Path | None = None):
        self._snapshot = snapshot or StoreSnapshot()
        self._path = path
        self._lock = threading.Lock()
        self._logger = structlog.get_logger(__name__)

    @classmethod
    def from_path(cls, path: Path) -> "JsonScorecardStore":
        try:
            with path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreError(f"Unable to read store snapshot {path}: {exc}") from exc
        try:
            snapshot = StoreSnapshot.model_validate(data)
        except ValidationError as exc:
            raise StoreError(f"Invalid store snapshot {path}: {exc}") from exc
        return cls(snapshot, path=path)

    @property
    def snapshot(self) -> StoreSnapshot:
        return self._snapshot

    def list_candidates(self, job_id: str) -> list[Candidate]:
        return [candidate for candidate in self._snapshot.candidates if candidate.job_id == job_id]

    def get_candidate(self, candidate_id: str) -> Candidate | None:
        return _first(c for c in self._snapshot.candidates if c.id == candidate_id)

    def list_scorecards(self, job_id: str, *, completed_only: bool = False) -> list[Scorecard]:
        scorecards = [
            scorecard
            for scorecard in self._snapshot.scorecards
            if scorecard.job_id == job_id and (scorecard.is_completed or not completed_only)
        ]
        scorecards.sort(key=lambda scorecard: scorecard.created_at, reverse=True)
        return scorecards

    def list_evaluations(self, scorecard_ids: Iterable[str]) -> dict[str, list[Evaluation]]:
        wanted = set(scorecard_ids)
        grouped: dict[str, list[Evaluation]] = {}
        for evaluation in self._snapshot.evaluations:
            if evaluation.scorecard_id in wanted:
                grouped.setdefault(evaluation.scorecard_id, []).append(evaluation)
        return grouped

    def get_criteria(
        self,
        *,
        criteria_ids: Iterable[str] | None = None,
        template_id: str | None = None,
    ) -> dict[str, Criterion]:
        wanted = set(criteria_ids) if criteria_ids is not None else None
        selected = [
            criterion
            for criterion in self._snapshot.criteria
            if (wanted is None or criterion.id in wanted)
            and (template_id is None or criterion.template_id == template_id)
        ]
        selected.sort(key=lambda criterion: criterion.display_order)
        return {criterion.id: criterion for criterion in selected}

    def find_by_token(self, token: str) -> Scorecard | None:
        return _first(s for s in self._snapshot.scorecards if s.external_token == token)

    def get_template(self, template_id: str) -> Template | None:
        return _first(t for t in self._snapshot.templates if t.id == template_id)

    def get_job(self, job_id: str) -> Job | None:
        return _first(j for j in self._snapshot.jobs if j.id == job_id)

    def get_evaluator(self, evaluator_id: str) -> Evaluator | None:
        return _first(e for e in self._snapshot.evaluators if e.id == evaluator_id)

    def complete_submission(
        self,
        scorecard_id: str,
        *,
        evaluations: Sequence[Evaluation],
        total_score: float,
        match_percentage: float,
        submitted_at: datetime,
    ) -> bool:
        with self._lock:
            scorecards = list(self._snapshot.scorecards)
            for index, scorecard in enumerate(scorecards):
                if scorecard.id == scorecard_id:
                    break
            else:
                return False
            if scorecard.submitted_at is not None:
                return False

            scorecards[index] = scorecard.model_copy(
                update={
                    "submitted_at": submitted_at,
                    "total_score": total_score,
                    "match_percentage": match_percentage,
                }
            )
            updated = self._snapshot.model_copy(
                update={
                    "scorecards": scorecards,
                    "evaluations": [*self._snapshot.evaluations, *evaluations],
                }
            )
            self._commit(updated)
            return True

    def create_scorecard(self, scorecard: Scorecard) -> Scorecard:
        with self._lock:
            if any(existing.id == scorecard.id for existing in self._snapshot.scorecards):
                raise StoreError(f"Scorecard {scorecard.id} already exists")
            updated = self._snapshot.model_copy(
                update={"scorecards": [*self._snapshot.scorecards, scorecard]}
            )
            self._commit(updated)
            return scorecard

    def _commit(self, updated: StoreSnapshot) -> None:
        path = self._path
        if path is not None:
            try:
                self._persist(updated, path)
            except OSError as exc:
                self._logger.error("store.write_failed", path=str(path), error=str(exc))
                raise StoreError(f"Unable to write store snapshot {path}: {exc}") from exc
        self._snapshot = updated

    def _persist(self, snapshot: StoreSnapshot, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        staging = path.with_name(path.name + ".tmp")
        staging.write_text(
            json.dumps(snapshot.model_dump(mode="json"), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        staging.replace(path)


def _first(items: Iterable):
    return next(iter(items), None)


__all__ = ["JsonScorecardStore", "ScorecardStore"]
