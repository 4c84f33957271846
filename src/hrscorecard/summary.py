"""Helpers for constructing comparison summary payloads and clients."""

from __future__ import annotations

import json
from typing import Any
from urllib import error, request

import structlog

from .core import ComparisonResult

SUMMARY_CANDIDATE_LIMIT = 5
SUMMARY_CRITERIA_LIMIT = 3


def build_summary_payload(
    *,
    job_title: str,
    comparison: ComparisonResult,
    anonymize: bool = False,
) -> dict[str, Any]:
    """Construct the payload expected by the external summary service.

    Only the best ranked candidates are sent to keep the request small.
    """
    candidates = [
        {
            "name": candidate.name,
            "totalScore": candidate.total_score,
            "evaluationsCount": candidate.evaluators_count,
            "lowConfidence": candidate.low_confidence,
            "topCriteria": [
                {"name": item.criterion, "average": item.average}
                for item in candidate.criteria_averages[:SUMMARY_CRITERIA_LIMIT]
            ],
            "recommendations": candidate.recommendations,
        }
        for candidate in comparison.candidates[:SUMMARY_CANDIDATE_LIMIT]
    ]
    return {
        "vagaTitle": job_title,
        "anonymize": anonymize,
        "candidates": candidates,
        "stats": comparison.stats.to_payload() if comparison.stats else None,
    }


class HTTPSummaryClient:
    """Simple HTTP client for the comparison summary API."""

    def __init__(self, endpoint: str | None, api_key: str | None = None, *, timeout: float = 30.0):
        self._endpoint = endpoint
        self._api_key = api_key
        self._timeout = timeout
        self._logger = structlog.get_logger(__name__)

    def summarize(self, payload: dict[str, Any]) -> dict[str, Any] | None:
        if not self._endpoint:
            return None
        data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        req = request.Request(self._endpoint, data=data, headers=headers, method="POST")
        try:
            with request.urlopen(req, timeout=self._timeout) as resp:
                body = resp.read().decode("utf-8")
                return json.loads(body) if body else {}
        except (error.URLError, TimeoutError, json.JSONDecodeError) as exc:
            self._logger.warning("summary.request_failed", error=str(exc))
            return None
