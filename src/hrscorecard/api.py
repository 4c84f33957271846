"""JSON-in/JSON-out operation handlers.

Each handler validates its request body, calls :class:`ScorecardService` and
maps engine errors onto illustrative HTTP status codes. Transport (HTTP
server, edge function, CLI) stays outside this module.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any, Callable

import pendulum
import structlog
from pydantic import ValidationError

from .errors import (
    GENERIC_FAILURE_MESSAGE,
    ScorecardEngineError,
    StoreError,
    SubmissionValidationError,
)
from .schemas import (
    AggregateRequest,
    CompareRequest,
    SubmissionRequest,
    TechnicalTestLinkRequest,
    TechnicalTestRequest,
)
from .service import ScorecardService, json_default
from .summary import HTTPSummaryClient, build_summary_payload


@dataclass(slots=True)
class ApiResponse:
    status: int
    body: dict[str, Any]

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class ScorecardApi:
    """Operation handlers for aggregate, compare and technical test flows."""

    def __init__(
        self,
        service: ScorecardService,
        *,
        summary_client: HTTPSummaryClient | None = None,
    ) -> None:
        self._service = service
        self._summary_client = summary_client
        self._logger = structlog.get_logger(__name__)

    def aggregate(self, body: Any) -> ApiResponse:
        def action() -> ApiResponse:
            request = AggregateRequest.model_validate(body)
            candidates = self._service.aggregate(request.job_id)
            return ApiResponse(
                200,
                {
                    "success": True,
                    "job_id": request.job_id,
                    "candidates": [to_jsonable(asdict(item)) for item in candidates],
                    "total_candidates": len(candidates),
                    "timestamp": pendulum.now("UTC").to_iso8601_string(),
                },
            )

        return self._dispatch("aggregate", action)

    def compare(self, body: Any) -> ApiResponse:
        def action() -> ApiResponse:
            request = CompareRequest.model_validate(body)
            result = self._service.compare(request.job_id, anonymize=request.anonymize)
            if result.stats is None:
                return ApiResponse(200, {"candidates": [], "stats": None})

            candidates = []
            for ranked in result.candidates:
                payload = to_jsonable(asdict(ranked))
                payload["evaluators"] = self._service.evaluator_names(ranked.evaluator_ids)
                candidates.append(payload)
            response: dict[str, Any] = {
                "candidates": candidates,
                "stats": result.stats.to_payload(),
            }
            if self._summary_client is not None:
                summary_payload = build_summary_payload(
                    job_title=self._service.job_title(request.job_id),
                    comparison=result,
                    anonymize=request.anonymize,
                )
                response["summary"] = self._summary_client.summarize(summary_payload)
            return ApiResponse(200, response)

        return self._dispatch("compare", action)

    def grade_submission(self, body: Any) -> ApiResponse:
        def action() -> ApiResponse:
            request = SubmissionRequest.model_validate(body)
            result = self._service.grade_submission(request.token, request.answers)
            return ApiResponse(
                200,
                {
                    "success": True,
                    "matchPercentage": result.match_percentage,
                    "totalScore": result.total_score,
                    "message": "Test submitted successfully",
                },
            )

        return self._dispatch("grade", action)

    def technical_test(self, body: Any) -> ApiResponse:
        def action() -> ApiResponse:
            request = TechnicalTestRequest.model_validate(body)
            view = self._service.get_technical_test(request.token)
            return ApiResponse(200, {"success": True, **to_jsonable(view)})

        return self._dispatch("technical_test", action)

    def issue_test_link(self, body: Any) -> ApiResponse:
        def action() -> ApiResponse:
            request = TechnicalTestLinkRequest.model_validate(body)
            scorecard = self._service.issue_test_link(request)
            return ApiResponse(
                201,
                {
                    "success": True,
                    "scorecardId": scorecard.id,
                    "token": scorecard.external_token,
                    "expiresAt": to_jsonable(scorecard.expires_at),
                },
            )

        return self._dispatch("test_link", action)

    def _dispatch(self, operation: str, action: Callable[[], ApiResponse]) -> ApiResponse:
        try:
            return action()
        except ValidationError as exc:
            error = validation_error(exc)
            self._logger.warning(f"{operation}.rejected", code=error.code, reason=error.message)
            return ApiResponse(error.status, error.to_payload())
        except StoreError as exc:
            self._logger.error(f"{operation}.failed", code=exc.code, detail=exc.message, exc_info=True)
            return ApiResponse(exc.status, exc.to_payload())
        except ScorecardEngineError as exc:
            self._logger.warning(f"{operation}.rejected", code=exc.code, reason=exc.message)
            return ApiResponse(exc.status, exc.to_payload())
        except Exception:  # noqa: BLE001
            self._logger.exception(f"{operation}.failed")
            return ApiResponse(500, {"error": GENERIC_FAILURE_MESSAGE, "code": "INTERNAL"})


def validation_error(exc: ValidationError) -> SubmissionValidationError:
    """Collapse a pydantic error into one message naming the offending field."""
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "body"
    if first.get("type") == "missing":
        return SubmissionValidationError(f"{location} is required")
    return SubmissionValidationError(f"{location}: {first.get('msg', 'invalid value')}")


def to_jsonable(value: Any) -> Any:
    return json.loads(json.dumps(value, default=json_default, ensure_ascii=False))
