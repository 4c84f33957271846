from __future__ import annotations

from pathlib import Path

import pendulum
import pytest

from dependency_injector import providers

from hrscorecard.api import ScorecardApi
from hrscorecard.container import create_container
from hrscorecard.schemas import StoreSnapshot
from hrscorecard.service import AuditLogger
from hrscorecard.store import JsonScorecardStore

from conftest import build_snapshot_data


@pytest.fixture
def api(container) -> ScorecardApi:
    return container.api()


VALID_ANSWERS = [
    {"criteria_id": "q-mc", "selected_option_index": 1},
    {"criteria_id": "q-rating", "score": 4},
    {"criteria_id": "q-open", "text_answer": "Separaria leitura e escrita."},
]


def test_aggregate_orders_candidates_by_average(api: ScorecardApi):
    response = api.aggregate({"job_id": "job-1"})

    assert response.status == 200
    body = response.body
    assert body["success"] is True
    assert body["total_candidates"] == 3
    assert [c["candidate_name"] for c in body["candidates"]] == ["Carla Dias", "Ana Souza", "Bruno Lima"]
    assert [c["total_score_avg"] for c in body["candidates"]] == [95.0, 85.0, 60.0]


def test_aggregate_candidate_breakdown(api: ScorecardApi):
    ana = next(
        c for c in api.aggregate({"job_id": "job-1"}).body["candidates"] if c["candidate_id"] == "cand-ana"
    )

    assert ana["evaluators_count"] == 2
    assert ana["low_confidence"] is False
    assert [(b["criterion"], b["average"]) for b in ana["breakdown"]] == [
        ("Python", 87.5),
        ("Comunicação", 83.3),
        ("Fit cultural", 70.0),
    ]
    assert ana["breakdown"][0]["category"] == "hard_skills"
    assert ana["excluded_evaluations"] == 1
    assert ana["evaluator_ids"] == ["ev-2", "ev-1"]
    assert ana["comments"][0]["text"] == "Boa base técnica"
    assert ana["last_evaluation_date"].startswith("2025-01-12T10:00:00")


def test_aggregate_unknown_job_is_not_found(api: ScorecardApi):
    response = api.aggregate({"job_id": "job-404"})

    assert response.status == 404
    assert response.body == {"error": "No completed scorecards found for this job", "code": "NOT_FOUND"}


def test_aggregate_requires_job_id(api: ScorecardApi):
    response = api.aggregate({})

    assert response.status == 400
    assert response.body["error"] == "job_id is required"


def test_compare_ranks_and_reports_stats(api: ScorecardApi):
    response = api.compare({"job_id": "job-1"})

    assert response.status == 200
    candidates = response.body["candidates"]
    assert [(c["rank"], c["name"], c["total_score"]) for c in candidates] == [
        (1, "Carla Dias", 95),
        (2, "Ana Souza", 85),
        (3, "Bruno Lima", 60),
    ]
    assert candidates[1]["evaluators"] == ["Rafael", "Marina"]
    assert candidates[1]["recommendations"] == ["aprovar_com_ressalvas", "aprovar"]
    assert candidates[0]["low_confidence"] is True
    assert response.body["stats"] == {
        "totalCandidates": 3,
        "averageScore": 80,
        "topScore": 95,
        "lowScore": 60,
    }
    assert "summary" not in response.body


def test_compare_anonymized_hides_identity(api: ScorecardApi):
    response = api.compare({"job_id": "job-1", "anonymize": True})

    candidates = response.body["candidates"]
    assert [c["name"] for c in candidates] == ["Candidato 1", "Candidato 2", "Candidato 3"]
    assert [c["candidate_id"] for c in candidates] == ["candidato-1", "candidato-2", "candidato-3"]
    assert all(c["anonymized"] for c in candidates)
    rendered = str(response.body)
    for real_name in ("Ana Souza", "Bruno Lima", "Carla Dias", "cand-ana"):
        assert real_name not in rendered


def test_compare_without_completed_scorecards_is_empty(api: ScorecardApi):
    response = api.compare({"job_id": "job-2"})

    assert response.status == 200
    assert response.body == {"candidates": [], "stats": None}


def test_grade_submission_scores_and_persists(api: ScorecardApi, store: JsonScorecardStore):
    response = api.grade_submission({"token": "tok-valid", "answers": VALID_ANSWERS})

    assert response.status == 200
    assert response.body == {
        "success": True,
        "matchPercentage": 93,
        "totalScore": 14.0,
        "message": "Test submitted successfully",
    }
    graded = store.find_by_token("tok-valid")
    assert graded.submitted_at is not None
    assert graded.match_percentage == 93
    rows = {row.criteria_id: row for row in store.list_evaluations(["ext-valid"])["ext-valid"]}
    assert rows["q-mc"].is_correct is True
    assert rows["q-mc"].score == 5.0
    assert rows["q-rating"].score == 4.0
    assert rows["q-open"].score is None
    assert rows["q-open"].text_answer == "Separaria leitura e escrita."


def test_second_submission_is_rejected(api: ScorecardApi, store: JsonScorecardStore):
    api.grade_submission({"token": "tok-valid", "answers": VALID_ANSWERS})

    response = api.grade_submission(
        {"token": "tok-valid", "answers": [{"criteria_id": "q-mc", "selected_option_index": 0}]}
    )

    assert response.status == 409
    assert response.body == {"error": "Test already submitted", "code": "ALREADY_SUBMITTED"}
    assert store.find_by_token("tok-valid").match_percentage == 93
    assert len(store.list_evaluations(["ext-valid"])["ext-valid"]) == 3


def test_submitted_test_without_job_is_rejected(api: ScorecardApi):
    response = api.grade_submission({"token": "tok-done", "answers": VALID_ANSWERS})

    assert response.status == 409


def test_expired_link_is_rejected(api: ScorecardApi, store: JsonScorecardStore):
    response = api.grade_submission({"token": "tok-expired", "answers": VALID_ANSWERS})

    assert response.status == 410
    assert response.body["code"] == "EXPIRED"
    assert store.find_by_token("tok-expired").submitted_at is None


@pytest.mark.parametrize(
    ("body", "status", "error"),
    [
        ({"answers": []}, 400, "token is required"),
        ({"token": "tok-valid"}, 400, "answers is required"),
        ({"token": "tok-unknown", "answers": []}, 404, "Test not found"),
    ],
)
def test_grade_submission_rejections(api: ScorecardApi, body, status, error):
    response = api.grade_submission(body)

    assert response.status == status
    assert response.body["error"] == error


def test_duplicate_answers_are_a_validation_error(api: ScorecardApi, store: JsonScorecardStore):
    response = api.grade_submission(
        {
            "token": "tok-valid",
            "answers": [
                {"criteria_id": "q-rating", "score": 1},
                {"criteria_id": "q-rating", "score": 5},
            ],
        }
    )

    assert response.status == 400
    assert response.body["code"] == "VALIDATION_ERROR"
    assert store.find_by_token("tok-valid").submitted_at is None


def test_open_text_only_submission_scores_zero(api: ScorecardApi):
    response = api.grade_submission(
        {"token": "tok-open", "answers": [{"criteria_id": "q-essay", "text_answer": "Texto livre."}]}
    )

    assert response.status == 200
    assert response.body["matchPercentage"] == 0
    assert response.body["totalScore"] == 0.0


def test_store_failure_is_reported_generically(tmp_path: Path):
    class FailingStore(JsonScorecardStore):
        def _persist(self, snapshot: StoreSnapshot, path: Path) -> None:
            raise OSError("read-only file system")

    store = FailingStore(
        StoreSnapshot.model_validate(build_snapshot_data()),
        path=tmp_path / "store.json",
    )
    api = create_container(store=store).api()

    response = api.grade_submission({"token": "tok-valid", "answers": VALID_ANSWERS})

    assert response.status == 500
    assert response.body == {"error": "Internal error", "code": "STORE_ERROR"}
    assert store.find_by_token("tok-valid").submitted_at is None


def test_technical_test_view_hides_answers(api: ScorecardApi):
    response = api.technical_test({"token": "tok-valid"})

    assert response.status == 200
    body = response.body
    assert body["success"] is True
    assert body["scorecard"]["id"] == "ext-valid"
    assert body["candidate"] == {"name": "Ana Souza", "email": "ana@example.com"}
    assert body["template"]["name"] == "Teste técnico"
    assert body["job"] == {"title": "Data Analyst", "company": "Acme"}
    assert [c["id"] for c in body["criteria"]] == ["q-mc", "q-rating", "q-open"]
    assert body["criteria"][0]["options"] == [{"text": "O(n)"}, {"text": "O(log n)"}]
    assert "is_correct" not in str(body)


@pytest.mark.parametrize(("token", "status"), [("tok-expired", 410), ("tok-done", 409), ("nope", 404)])
def test_technical_test_view_rejections(api: ScorecardApi, token: str, status: int):
    assert api.technical_test({"token": token}).status == status


def test_issue_test_link_creates_pending_scorecard(api: ScorecardApi, store: JsonScorecardStore):
    before = pendulum.now("UTC")

    response = api.issue_test_link(
        {"candidate_id": "cand-diego", "template_id": "tpl-test", "job_id": "job-2", "expiration_days": 3}
    )

    assert response.status == 201
    token = response.body["token"]
    assert len(token) == 32
    scorecard = store.find_by_token(token)
    assert scorecard.id == response.body["scorecardId"]
    assert scorecard.is_external
    assert not scorecard.is_completed
    assert scorecard.expires_at >= before.add(days=3)
    assert api.technical_test({"token": token}).status == 200


@pytest.mark.parametrize(
    ("body", "error"),
    [
        ({"candidate_id": "cand-zzz", "template_id": "tpl-test"}, "Candidate not found"),
        ({"candidate_id": "cand-ana", "template_id": "tpl-zzz"}, "Template not found"),
    ],
)
def test_issue_test_link_requires_known_records(api: ScorecardApi, body, error):
    response = api.issue_test_link(body)

    assert response.status == 404
    assert response.body["error"] == error


def test_audit_failure_keeps_graded_result(tmp_path: Path, container, store: JsonScorecardStore):
    unwritable = tmp_path / "audit"
    unwritable.mkdir()
    container.audit_logger.override(providers.Object(AuditLogger(unwritable)))
    api = container.api()

    response = api.grade_submission({"token": "tok-valid", "answers": VALID_ANSWERS})

    assert response.status == 200
    assert response.body["matchPercentage"] == 93
    assert store.find_by_token("tok-valid").submitted_at is not None


def test_wrong_answers_do_not_aggregate_below_zero(api: ScorecardApi):
    api.grade_submission(
        {
            "token": "tok-valid",
            "answers": [
                {"criteria_id": "q-mc", "selected_option_index": 0},
                {"criteria_id": "q-rating", "score": 0},
            ],
        }
    )

    response = api.aggregate({"job_id": "job-2"})

    assert response.status == 200
    ana = response.body["candidates"][0]
    assert ana["total_score_avg"] == 0.0
    assert ana["breakdown"] == []
    assert ana["excluded_evaluations"] == 2
