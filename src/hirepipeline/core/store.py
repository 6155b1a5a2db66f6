"""In-memory ledger of candidates and job requisitions."""

from __future__ import annotations

import threading
from typing import Callable, Iterable

import structlog

from ..schemas import Candidate, CandidateStatus, Job
from .capabilities import Capability, require_capability
from .errors import DuplicateIdError, InvalidStateError, NotFoundError, TenantMismatchError

CandidateListener = Callable[[Candidate], None]


class CandidateStore:
    """Canonical collection of candidates and jobs, keyed by id.

    The store is a passive ledger: it never decides status transitions.
    Records are replaced wholesale on ``update``. Each individual call is
    atomic; ``update_if`` additionally refuses the write when the stored
    status is no longer one the caller validated against.
    """

    def __init__(self) -> None:
        self._candidates: dict[str, Candidate] = {}
        self._jobs: dict[str, Job] = {}
        self._candidates_by_tenant: dict[str, list[str]] = {}
        self._jobs_by_tenant: dict[str, list[str]] = {}
        self._listeners: list[CandidateListener] = []
        self._lock = threading.RLock()
        self._logger = structlog.get_logger(__name__)

    # jobs

    def add_job(self, job: Job) -> Job:
        with self._lock:
            if job.id in self._jobs:
                raise DuplicateIdError("job", job.id)
            self._jobs[job.id] = job
            self._jobs_by_tenant.setdefault(job.tenant_id, []).append(job.id)
        self._logger.info("job.added", job_id=job.id, tenant_id=job.tenant_id)
        return job

    def get_job(self, job_id: str) -> Job:
        with self._lock:
            try:
                return self._jobs[job_id]
            except KeyError as exc:
                raise NotFoundError("job", job_id) from exc

    def find_job(
        self,
        *,
        job_id: str | None = None,
        title: str | None = None,
        tenant_id: str | None = None,
    ) -> Job | None:
        """Look a job up by id, falling back to an exact title match."""
        with self._lock:
            if job_id is not None and job_id in self._jobs:
                return self._jobs[job_id]
            if title is None:
                return None
            pool = (
                (self._jobs[jid] for jid in self._jobs_by_tenant.get(tenant_id, []))
                if tenant_id is not None
                else iter(self._jobs.values())
            )
            for job in pool:
                if job.title == title:
                    return job
        return None

    def list_jobs(self, tenant_id: str) -> list[Job]:
        with self._lock:
            return [self._jobs[jid] for jid in self._jobs_by_tenant.get(tenant_id, [])]

    def list_all_jobs(self, capabilities: Iterable[Capability | str]) -> list[Job]:
        require_capability(capabilities, Capability.GLOBAL_READ, action="list all jobs")
        with self._lock:
            return list(self._jobs.values())

    # candidates

    def add(self, candidate: Candidate) -> Candidate:
        """Insert a new application and bump the job's applicant count."""
        record = candidate.model_copy(update={"status": CandidateStatus.APPLIED})
        with self._lock:
            if record.id in self._candidates:
                raise DuplicateIdError("candidate", record.id)
            job = self._jobs.get(record.job_id)
            if job is None:
                raise NotFoundError("job", record.job_id)
            self._candidates[record.id] = record
            self._candidates_by_tenant.setdefault(record.tenant_id, []).append(record.id)
            self._jobs[job.id] = job.model_copy(update={"applicants": job.applicants + 1})
        self._logger.info(
            "candidate.added",
            candidate_id=record.id,
            job_id=record.job_id,
            tenant_id=record.tenant_id,
        )
        for listener in list(self._listeners):
            listener(record)
        return record

    def add_listener(self, listener: CandidateListener) -> None:
        """Call ``listener`` with every record ``add`` inserts.

        Listeners run on the adding thread after the record is stored.
        """
        with self._lock:
            self._listeners.append(listener)

    def update(self, candidate: Candidate) -> Candidate:
        """Replace the stored record with the same id."""
        with self._lock:
            stored = self._candidates.get(candidate.id)
            if stored is None:
                raise NotFoundError("candidate", candidate.id)
            if stored.tenant_id != candidate.tenant_id:
                raise TenantMismatchError(candidate.id, stored.tenant_id, candidate.tenant_id)
            self._candidates[candidate.id] = candidate
        self._logger.debug(
            "candidate.updated",
            candidate_id=candidate.id,
            status=candidate.status.value,
        )
        return candidate

    def update_if(
        self,
        candidate: Candidate,
        *,
        expected: CandidateStatus | Iterable[CandidateStatus],
        action: str | None = None,
    ) -> Candidate:
        """Replace the stored record only while its status is in ``expected``.

        Guards status-changing writes built from a copy read earlier: if the
        record moved on in between (for example it was rejected), the write
        is refused with ``InvalidStateError`` and the stored record is kept.
        """
        allowed = (
            frozenset({expected})
            if isinstance(expected, CandidateStatus)
            else frozenset(expected)
        )
        with self._lock:
            stored = self._candidates.get(candidate.id)
            if stored is not None and stored.status not in allowed:
                raise InvalidStateError(
                    stored.status,
                    sorted(status.value for status in allowed),
                    action=action,
                    reason="record changed since it was read",
                )
            return self.update(candidate)

    def get(self, candidate_id: str, *, tenant_id: str | None = None) -> Candidate:
        with self._lock:
            candidate = self._candidates.get(candidate_id)
        if candidate is None or (tenant_id is not None and candidate.tenant_id != tenant_id):
            raise NotFoundError("candidate", candidate_id)
        return candidate

    def list_by_tenant(self, tenant_id: str) -> list[Candidate]:
        with self._lock:
            return [
                self._candidates[cid]
                for cid in self._candidates_by_tenant.get(tenant_id, [])
            ]

    def list_all(self, capabilities: Iterable[Capability | str]) -> list[Candidate]:
        require_capability(capabilities, Capability.GLOBAL_READ, action="list all candidates")
        with self._lock:
            return list(self._candidates.values())

    def restore(self, *, jobs: Iterable[Job] = (), candidates: Iterable[Candidate] = ()) -> None:
        """Load snapshot records verbatim, keeping statuses and counters.

        Ids are checked before anything is inserted, so a duplicate leaves
        the store untouched.
        """
        jobs = list(jobs)
        candidates = list(candidates)
        with self._lock:
            _check_new_ids("job", (job.id for job in jobs), self._jobs)
            _check_new_ids("candidate", (c.id for c in candidates), self._candidates)
            for job in jobs:
                self.add_job(job)
            for candidate in candidates:
                self._candidates[candidate.id] = candidate
                self._candidates_by_tenant.setdefault(candidate.tenant_id, []).append(candidate.id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._candidates)

    def __contains__(self, candidate_id: object) -> bool:
        with self._lock:
            return candidate_id in self._candidates


def _check_new_ids(kind: str, ids: Iterable[str], existing: dict) -> None:
    seen: set[str] = set()
    for identifier in ids:
        if identifier in existing or identifier in seen:
            raise DuplicateIdError(kind, identifier)
        seen.add(identifier)


__all__ = ["CandidateListener", "CandidateStore"]
