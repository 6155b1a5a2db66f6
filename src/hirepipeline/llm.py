"""HTTP client for the hosted resume-scoring model."""

from __future__ import annotations

import json
import re
from typing import Any
from urllib import error, request

import structlog

from .core.errors import EvaluationFailure
from .core.evaluation import parse_evaluation
from .schemas import CandidateEvaluation

DEFAULT_TIMEOUT_SECONDS = 30.0
_CODE_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences models like to wrap JSON in."""
    if not text:
        return "{}"
    return _CODE_FENCE.sub("", text).strip()


def build_evaluation_payload(resume_text: str, job_description: str) -> dict[str, Any]:
    return {"resumeText": resume_text, "jobDescription": job_description}


class HTTPEvaluationClient:
    """Evaluation collaborator backed by a JSON-over-HTTP scoring endpoint."""

    def __init__(
        self,
        endpoint: str | None,
        api_key: str | None = None,
        *,
        timeout: float | None = None,
    ):
        self._endpoint = endpoint
        self._api_key = api_key
        self._timeout = timeout if timeout is not None else DEFAULT_TIMEOUT_SECONDS
        self._logger = structlog.get_logger(__name__)

    def evaluate(self, resume_text: str, job_description: str) -> CandidateEvaluation:
        if not self._endpoint:
            raise EvaluationFailure("no evaluation endpoint configured")
        data = json.dumps(
            build_evaluation_payload(resume_text, job_description),
            ensure_ascii=False,
        ).encode("utf-8")
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        req = request.Request(self._endpoint, data=data, headers=headers, method="POST")
        try:
            with request.urlopen(req, timeout=self._timeout) as resp:
                body = resp.read().decode("utf-8")
        except (error.URLError, TimeoutError) as exc:
            self._logger.warning("llm.request_failed", endpoint=self._endpoint, error=str(exc))
            raise EvaluationFailure(f"evaluation request failed: {exc}") from exc

        try:
            payload = json.loads(strip_code_fences(body))
        except json.JSONDecodeError as exc:
            raise EvaluationFailure(f"evaluation response is not JSON: {exc}") from exc
        return parse_evaluation(payload)


__all__ = ["HTTPEvaluationClient", "build_evaluation_payload", "strip_code_fences"]
