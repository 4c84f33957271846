from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from hrscorecard.container import create_container
from hrscorecard.schemas import StoreSnapshot
from hrscorecard.store import JsonScorecardStore


def build_snapshot_data() -> dict[str, Any]:
    return {
        "jobs": [
            {"id": "job-1", "title": "Backend Engineer", "company": "Acme"},
            {"id": "job-2", "title": "Data Analyst", "company": "Acme"},
        ],
        "templates": [
            {"id": "tpl-int", "name": "Entrevista técnica"},
            {"id": "tpl-test", "name": "Teste técnico", "description": "Backend básico"},
            {"id": "tpl-open", "name": "Teste dissertativo"},
        ],
        "criteria": [
            {
                "id": "crit-python",
                "template_id": "tpl-int",
                "name": "Python",
                "category": "hard_skills",
                "weight": 30,
                "scale_type": "rating_1_5",
            },
            {
                "id": "crit-comm",
                "template_id": "tpl-int",
                "name": "Comunicação",
                "category": "soft_skills",
                "weight": 20,
                "scale_type": "rating_1_10",
            },
            {
                "id": "crit-fit",
                "template_id": "tpl-int",
                "name": "Fit cultural",
                "category": "fit_cultural",
                "weight": 10,
                "scale_type": "percent",
            },
            {
                "id": "q-mc",
                "template_id": "tpl-test",
                "name": "Complexidade",
                "category": "hard_skills",
                "weight": 10,
                "question_type": "multiple_choice",
                "options": [
                    {"text": "O(n)", "is_correct": False},
                    {"text": "O(log n)", "is_correct": True},
                ],
                "display_order": 1,
            },
            {
                "id": "q-rating",
                "template_id": "tpl-test",
                "name": "SQL",
                "category": "hard_skills",
                "weight": 5,
                "question_type": "rating",
                "display_order": 2,
            },
            {
                "id": "q-open",
                "template_id": "tpl-test",
                "name": "Arquitetura",
                "category": "experiencia",
                "weight": 10,
                "question_type": "open_text",
                "display_order": 3,
            },
            {
                "id": "q-essay",
                "template_id": "tpl-open",
                "name": "Redação",
                "question_type": "open_text",
            },
        ],
        "candidates": [
            {"id": "cand-ana", "name": "Ana Souza", "email": "ana@example.com", "job_id": "job-1"},
            {"id": "cand-bruno", "name": "Bruno Lima", "job_id": "job-1"},
            {"id": "cand-carla", "name": "Carla Dias", "job_id": "job-1"},
            {"id": "cand-diego", "name": "Diego Melo", "job_id": "job-1"},
        ],
        "evaluators": [
            {"id": "ev-1", "name": "Marina"},
            {"id": "ev-2", "name": "Rafael"},
        ],
        "scorecards": [
            {
                "id": "sc-1",
                "candidate_id": "cand-ana",
                "job_id": "job-1",
                "template_id": "tpl-int",
                "evaluator_id": "ev-1",
                "recommendation": "aprovar",
                "comments": "Boa base técnica",
                "match_percentage": 80,
                "created_at": "2025-01-10T10:00:00Z",
            },
            {
                "id": "sc-2",
                "candidate_id": "cand-ana",
                "job_id": "job-1",
                "template_id": "tpl-int",
                "evaluator_id": "ev-2",
                "recommendation": "aprovar_com_ressalvas",
                "match_percentage": 90,
                "created_at": "2025-01-12T10:00:00Z",
            },
            {
                "id": "sc-3",
                "candidate_id": "cand-bruno",
                "job_id": "job-1",
                "template_id": "tpl-int",
                "evaluator_id": "ev-1",
                "recommendation": "reprovar",
                "total_score": 60,
                "created_at": "2025-01-11T10:00:00Z",
            },
            {
                "id": "sc-4",
                "candidate_id": "cand-carla",
                "job_id": "job-1",
                "template_id": "tpl-int",
                "evaluator_id": "ev-2",
                "recommendation": "aprovar",
                "match_percentage": 95,
                "created_at": "2025-01-13T10:00:00Z",
            },
            {
                "id": "sc-5",
                "candidate_id": "cand-carla",
                "job_id": "job-1",
                "template_id": "tpl-int",
                "evaluator_id": "ev-1",
                "created_at": "2025-01-14T10:00:00Z",
            },
            {
                "id": "ext-valid",
                "candidate_id": "cand-ana",
                "job_id": "job-2",
                "template_id": "tpl-test",
                "source": "externo",
                "external_token": "tok-valid",
                "created_at": "2025-02-01T10:00:00Z",
                "expires_at": "2099-01-01T00:00:00Z",
            },
            {
                "id": "ext-expired",
                "candidate_id": "cand-bruno",
                "job_id": "job-2",
                "template_id": "tpl-test",
                "source": "externo",
                "external_token": "tok-expired",
                "created_at": "2020-01-01T10:00:00Z",
                "expires_at": "2020-01-08T10:00:00Z",
            },
            {
                "id": "ext-done",
                "candidate_id": "cand-carla",
                "job_id": None,
                "template_id": "tpl-test",
                "source": "externo",
                "external_token": "tok-done",
                "match_percentage": 70,
                "total_score": 10.5,
                "created_at": "2025-02-01T10:00:00Z",
                "submitted_at": "2025-02-02T10:00:00Z",
            },
            {
                "id": "ext-open",
                "candidate_id": "cand-diego",
                "job_id": "job-2",
                "template_id": "tpl-open",
                "source": "externo",
                "external_token": "tok-open",
                "created_at": "2025-02-01T10:00:00Z",
            },
        ],
        "evaluations": [
            {"scorecard_id": "sc-1", "criteria_id": "crit-python", "score": 4},
            {"scorecard_id": "sc-1", "criteria_id": "crit-comm", "score": 8},
            {"scorecard_id": "sc-1", "criteria_id": "crit-fit", "score": 70},
            {"scorecard_id": "sc-2", "criteria_id": "crit-python", "score": 5},
            {"scorecard_id": "sc-2", "criteria_id": "crit-comm", "score": 9},
            {"scorecard_id": "sc-2", "criteria_id": "crit-ghost", "score": 3},
            {"scorecard_id": "sc-3", "criteria_id": "crit-python", "score": 2},
            {"scorecard_id": "sc-4", "criteria_id": "crit-python", "score": 5},
            {"scorecard_id": "sc-4", "criteria_id": "crit-comm", "score": None},
        ],
    }


@pytest.fixture
def snapshot_path(tmp_path: Path) -> Path:
    path = tmp_path / "store.json"
    path.write_text(json.dumps(build_snapshot_data(), ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def store() -> JsonScorecardStore:
    return JsonScorecardStore(StoreSnapshot.model_validate(build_snapshot_data()))


@pytest.fixture
def container(store: JsonScorecardStore):
    return create_container(store=store)
