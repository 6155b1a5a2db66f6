"""Snapshot loading, evaluation passes and persistence."""

from __future__ import annotations

import json
from concurrent.futures import wait
from pathlib import Path
from typing import Any, Iterable

import pendulum
import structlog
from pydantic import ValidationError

from . import __version__
from .core import AutoEvaluationTrigger, Capability, CandidateStore
from .core.errors import PipelineError
from .schemas import Candidate, Job

_SYSTEM_READ = frozenset({Capability.GLOBAL_READ})


class CandidateLoadError(ValueError):
    """Raised when candidate loading encounters invalid records."""

    def __init__(self, errors: list[str], partial: list[Candidate]):
        super().__init__("Candidate loading failed")
        self.errors = errors
        self.partial = partial

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Candidate loading failed: {self.errors}"


class CandidateLoader:
    """Load new applications from a JSON-lines file."""

    def load(self, path: Path) -> list[Candidate]:
        candidates: list[Candidate] = []
        errors: list[str] = []
        with path.open("r", encoding="utf-8") as handle:
            for idx, line in enumerate(handle, start=1):
                raw = line.strip()
                if not raw:
                    continue
                try:
                    record = json.loads(raw)
                except json.JSONDecodeError as exc:
                    errors.append(f"line {idx}: invalid JSON ({exc})")
                    continue
                if not isinstance(record, dict):
                    errors.append(f"line {idx}: expected an object")
                    continue
                try:
                    candidates.append(Candidate.model_validate(record))
                except ValidationError as exc:
                    errors.append(f"line {idx}: {exc.error_count()} validation error(s)")
        if errors:
            raise CandidateLoadError(errors, candidates)
        return candidates


class SnapshotLoader:
    """Read a ``{"jobs": [...], "candidates": [...]}`` snapshot document."""

    def load(self, path: Path) -> tuple[list[Job], list[Candidate]]:
        with path.open("r", encoding="utf-8") as handle:
            try:
                data = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid snapshot JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ValueError("Snapshot must be a JSON object")
        jobs = [Job.model_validate(item) for item in data.get("jobs", [])]
        candidates = [Candidate.model_validate(item) for item in data.get("candidates", [])]
        return jobs, candidates


class SnapshotWriter:
    """Persist the store as a camelCase snapshot document."""

    def write(self, path: Path, store: CandidateStore) -> dict[str, Any]:
        jobs = store.list_all_jobs(_SYSTEM_READ)
        candidates = store.list_all(_SYSTEM_READ)
        payload = {
            "metadata": {
                "job_count": len(jobs),
                "candidate_count": len(candidates),
                "timestamp": pendulum.now().to_iso8601_string(),
                "app_version": __version__,
            },
            "jobs": [job.model_dump(mode="json", by_alias=True) for job in jobs],
            "candidates": [
                candidate.model_dump(mode="json", by_alias=True, exclude_none=True)
                for candidate in candidates
            ],
        }
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        return payload


class PipelineRunner:
    """Drives the store and the evaluation trigger over snapshot files."""

    def __init__(
        self,
        *,
        store: CandidateStore,
        trigger: AutoEvaluationTrigger,
        snapshot_loader: SnapshotLoader | None = None,
        candidate_loader: CandidateLoader | None = None,
        writer: SnapshotWriter | None = None,
    ) -> None:
        self._store = store
        self._trigger = trigger
        self._snapshots = snapshot_loader or SnapshotLoader()
        self._candidates = candidate_loader or CandidateLoader()
        self._writer = writer or SnapshotWriter()
        self._logger = structlog.get_logger(__name__)

    @property
    def store(self) -> CandidateStore:
        return self._store

    def open(self, snapshot_path: Path) -> None:
        jobs, candidates = self._snapshots.load(snapshot_path)
        self._store.restore(jobs=jobs, candidates=candidates)
        self._logger.info(
            "snapshot.loaded",
            path=str(snapshot_path),
            jobs=len(jobs),
            candidates=len(candidates),
        )

    def import_candidates(self, path: Path) -> tuple[list[Candidate], list[str]]:
        """Add new applications; returns the added records and per-line errors."""
        errors: list[str] = []
        try:
            loaded = self._candidates.load(path)
        except CandidateLoadError as exc:
            loaded = exc.partial
            errors.extend(exc.errors)
            self._logger.warning("candidates.partial_load", errors=exc.errors)

        added: list[Candidate] = []
        for candidate in loaded:
            try:
                added.append(self._store.add(candidate))
            except PipelineError as exc:
                errors.append(f"candidate {candidate.id}: {exc.message}")
        return added, errors

    def evaluate(self, *, tenant_id: str | None = None, timeout: float | None = None) -> list[Candidate]:
        """Run one trigger pass and wait for the queued evaluations.

        Evaluations still running when ``timeout`` expires are left to the
        trigger; their ids are reported by ``pending_evaluations``.
        """
        futures = self._trigger.scan(tenant_id)
        done, not_done = wait(futures, timeout=timeout)
        if not_done:
            self._logger.warning(
                "evaluation.pass_incomplete",
                pending=len(not_done),
                candidate_ids=self.pending_evaluations(),
            )
        results = [future.result() for future in done]
        return [candidate for candidate in results if candidate is not None]

    def pending_evaluations(self) -> list[str]:
        return sorted(self._trigger.in_flight)

    def drain(self) -> None:
        """Block until every queued evaluation has been written or dropped."""
        self._trigger.shutdown(wait=True)

    def save(self, output_path: Path) -> dict[str, Any]:
        return self._writer.write(output_path, self._store)


def evaluated_summary(candidates: Iterable[Candidate]) -> list[dict[str, Any]]:
    return [
        {
            "id": candidate.id,
            "status": candidate.status.value,
            "score": candidate.evaluation.score if candidate.evaluation else None,
        }
        for candidate in candidates
    ]
