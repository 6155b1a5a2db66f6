"""Automatic scoring of newly applied candidates."""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import structlog
from pydantic import ValidationError

from ..schemas import Candidate, CandidateEvaluation, CandidateStatus, Job
from .capabilities import Capability
from .errors import EvaluationFailure, InvalidStateError
from .store import CandidateStore

SHORTLIST_THRESHOLD = 85
DEFAULT_JOB_DESCRIPTION = "Standard job requirements."


@runtime_checkable
class EvaluationCollaborator(Protocol):
    """Scores a resume against a job description."""

    def evaluate(self, resume_text: str, job_description: str) -> CandidateEvaluation | dict[str, Any]:
        """Return ``{score, reasoning, fit, keySkills}`` for the resume."""


@dataclass(slots=True)
class EvaluationRequest:
    candidate_id: str
    job_id: str | None
    resume_text: str
    job_description: str


@dataclass
class EvaluationTriggerConfig:
    """Bounds applied to collaborator calls.

    ``notify_on_add`` subscribes the trigger to ``CandidateStore.add`` so
    every new application is queued without an explicit ``notify``.
    """

    timeout_seconds: float | None = 30.0
    max_pending_calls: int = 4
    notify_on_add: bool = False


def build_evaluation_request(candidate: Candidate, job: Job | None) -> EvaluationRequest:
    resume_text = (
        f"Experience: {candidate.experience}. "
        f"Education: {candidate.education}. "
        f"Resume: {candidate.resume_summary}"
    )
    return EvaluationRequest(
        candidate_id=candidate.id,
        job_id=job.id if job else None,
        resume_text=resume_text,
        job_description=job.description if job else DEFAULT_JOB_DESCRIPTION,
    )


def status_for_score(score: int) -> CandidateStatus:
    if score >= SHORTLIST_THRESHOLD:
        return CandidateStatus.SHORTLISTED
    return CandidateStatus.EVALUATED


def parse_evaluation(raw: Any, *, candidate_id: str | None = None) -> CandidateEvaluation:
    if isinstance(raw, CandidateEvaluation):
        return raw
    if not isinstance(raw, dict):
        raise EvaluationFailure(
            f"evaluation payload must be a mapping, got {type(raw).__name__}",
            candidate_id=candidate_id,
        )
    try:
        return CandidateEvaluation.model_validate(raw)
    except ValidationError as exc:
        raise EvaluationFailure(
            f"malformed evaluation payload: {exc.error_count()} error(s)",
            candidate_id=candidate_id,
        ) from exc


class AutoEvaluationTrigger:
    """Scores every candidate that enters ``applied`` exactly once.

    ``notify`` is the "candidate entered applied" event. Work is queued on a
    single worker thread, so evaluations run one at a time. The ids waiting
    on a collaborator response live in an explicit in-flight set and a
    second request for the same id is refused while one is outstanding.

    A failed, timed-out or malformed evaluation leaves the candidate at
    ``applied`` without an evaluation; the failure is logged and the next
    ``scan`` picks the candidate up again. A timed-out call cannot be
    interrupted, so its id stays in flight until the abandoned call returns.
    """

    def __init__(
        self,
        store: CandidateStore,
        evaluator: EvaluationCollaborator,
        *,
        config: EvaluationTriggerConfig | None = None,
    ) -> None:
        self._store = store
        self._evaluator = evaluator
        self._config = config or EvaluationTriggerConfig()
        self._worker = ThreadPoolExecutor(max_workers=1, thread_name_prefix="auto-eval")
        self._calls = ThreadPoolExecutor(
            max_workers=self._config.max_pending_calls,
            thread_name_prefix="auto-eval-call",
        )
        self._in_flight: set[str] = set()
        self._abandoned: set[str] = set()
        self._lock = threading.Lock()
        self._logger = structlog.get_logger(__name__)
        if self._config.notify_on_add:
            store.add_listener(self._on_added)

    @property
    def in_flight(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._in_flight)

    def notify(self, candidate_id: str) -> Future | None:
        """Queue an evaluation for ``candidate_id`` if it qualifies.

        Returns ``None`` when the candidate is not ``applied`` or already has
        an evaluation outstanding.
        """
        candidate = self._store.get(candidate_id)
        if candidate.status != CandidateStatus.APPLIED:
            return None
        if not self._claim(candidate_id):
            return None
        try:
            future = self._worker.submit(self._evaluate_claimed, candidate_id)
        except RuntimeError:
            self._release(candidate_id)
            raise
        future.add_done_callback(
            lambda done: self._release(candidate_id) if done.cancelled() else None
        )
        return future

    def scan(self, tenant_id: str | None = None) -> list[Future]:
        """Re-observe the store and queue every ``applied`` candidate."""
        if tenant_id is None:
            candidates = self._store.list_all({Capability.GLOBAL_READ})
        else:
            candidates = self._store.list_by_tenant(tenant_id)
        futures: list[Future] = []
        for candidate in candidates:
            if candidate.status != CandidateStatus.APPLIED:
                continue
            future = self.notify(candidate.id)
            if future is not None:
                futures.append(future)
        self._logger.info("evaluation.scan", tenant_id=tenant_id, queued=len(futures))
        return futures

    def evaluate_candidate(self, candidate_id: str) -> Candidate | None:
        """Evaluate synchronously on the caller's thread.

        Returns the updated record, or ``None`` when nothing was written.
        """
        if not self._claim(candidate_id):
            return None
        return self._evaluate_claimed(candidate_id)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work.

        ``wait=True`` lets every queued evaluation finish first;
        ``wait=False`` drops evaluations that have not started yet.
        """
        self._worker.shutdown(wait=wait, cancel_futures=not wait)
        self._calls.shutdown(wait=wait, cancel_futures=True)

    def __enter__(self) -> "AutoEvaluationTrigger":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def _claim(self, candidate_id: str) -> bool:
        with self._lock:
            if candidate_id in self._in_flight:
                self._logger.debug("evaluation.already_in_flight", candidate_id=candidate_id)
                return False
            self._in_flight.add(candidate_id)
            return True

    def _release(self, candidate_id: str) -> None:
        with self._lock:
            if candidate_id in self._abandoned:
                return
            self._in_flight.discard(candidate_id)

    def _abandon(self, candidate_id: str, future: Future) -> None:
        """Keep ``candidate_id`` in flight until ``future`` finishes."""
        with self._lock:
            self._abandoned.add(candidate_id)

        def _finished(_: Future) -> None:
            with self._lock:
                self._abandoned.discard(candidate_id)
                self._in_flight.discard(candidate_id)
            self._logger.info("evaluation.abandoned_call_finished", candidate_id=candidate_id)

        future.add_done_callback(_finished)

    def _on_added(self, candidate: Candidate) -> None:
        self.notify(candidate.id)

    def _evaluate_claimed(self, candidate_id: str) -> Candidate | None:
        try:
            return self._evaluate(candidate_id)
        except EvaluationFailure as exc:
            self._logger.warning(
                "evaluation.failed",
                candidate_id=candidate_id,
                error=exc.message,
            )
            return None
        finally:
            self._release(candidate_id)

    def _evaluate(self, candidate_id: str) -> Candidate | None:
        candidate = self._store.get(candidate_id)
        if candidate.status != CandidateStatus.APPLIED:
            return None

        job = self._store.find_job(
            job_id=candidate.job_id,
            title=candidate.role,
            tenant_id=candidate.tenant_id,
        )
        if job is None:
            self._logger.info(
                "evaluation.job_missing",
                candidate_id=candidate_id,
                job_id=candidate.job_id,
                role=candidate.role,
            )
        request = build_evaluation_request(candidate, job)
        evaluation = self._call(request)

        # The record may have moved on while the collaborator was working.
        current = self._store.get(candidate_id)
        if current.status != CandidateStatus.APPLIED:
            self._logger.info(
                "evaluation.discarded",
                candidate_id=candidate_id,
                status=current.status.value,
                score=evaluation.score,
            )
            return None

        new_status = status_for_score(evaluation.score)
        updated = current.model_copy(update={"status": new_status, "evaluation": evaluation})
        try:
            self._store.update_if(updated, expected=CandidateStatus.APPLIED, action="record evaluation")
        except InvalidStateError as exc:
            self._logger.info(
                "evaluation.discarded",
                candidate_id=candidate_id,
                status=exc.current,
                score=evaluation.score,
            )
            return None
        self._logger.info(
            "evaluation.completed",
            candidate_id=candidate_id,
            job_id=request.job_id,
            score=evaluation.score,
            fit=evaluation.fit.value,
            status=new_status.value,
        )
        return updated

    def _call(self, request: EvaluationRequest) -> CandidateEvaluation:
        future = self._calls.submit(
            self._evaluator.evaluate,
            request.resume_text,
            request.job_description,
        )
        timeout = self._config.timeout_seconds
        try:
            raw = future.result(timeout=timeout)
        except FuturesTimeoutError as exc:
            if future.cancel():
                # Every call slot was busy; the collaborator never saw it.
                raise EvaluationFailure(
                    f"no free call slot within {timeout}s",
                    candidate_id=request.candidate_id,
                ) from exc
            self._abandon(request.candidate_id, future)
            raise EvaluationFailure(
                f"evaluation timed out after {timeout}s",
                candidate_id=request.candidate_id,
            ) from exc
        except EvaluationFailure:
            raise
        except Exception as exc:  # noqa: BLE001
            raise EvaluationFailure(
                f"evaluation collaborator failed: {exc}",
                candidate_id=request.candidate_id,
            ) from exc
        return parse_evaluation(raw, candidate_id=request.candidate_id)


__all__ = [
    "SHORTLIST_THRESHOLD",
    "DEFAULT_JOB_DESCRIPTION",
    "AutoEvaluationTrigger",
    "EvaluationCollaborator",
    "EvaluationRequest",
    "EvaluationTriggerConfig",
    "build_evaluation_request",
    "parse_evaluation",
    "status_for_score",
]
