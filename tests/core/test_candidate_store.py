from __future__ import annotations

from typing import Any

import pytest

from hirepipeline.core import Actor, Capability, CandidateStore
from hirepipeline.core.errors import (
    DuplicateIdError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    TenantMismatchError,
)
from hirepipeline.schemas import Candidate, CandidateStatus, Job


def build_job(**kwargs: Any) -> Job:
    defaults: dict[str, Any] = {
        "id": "j1",
        "tenant_id": "tenant-A",
        "title": "Senior React Developer",
        "department": "Engineering",
        "description": "5+ years React, TypeScript and Node.js.",
    }
    defaults.update(kwargs)
    return Job(**defaults)


def build_candidate(**kwargs: Any) -> Candidate:
    defaults: dict[str, Any] = {
        "id": "c1",
        "tenant_id": "tenant-A",
        "job_id": "j1",
        "name": "Priya Sharma",
        "role": "Senior React Developer",
    }
    defaults.update(kwargs)
    return Candidate(**defaults)


@pytest.fixture
def store() -> CandidateStore:
    store = CandidateStore()
    store.add_job(build_job())
    store.add_job(build_job(id="j2", tenant_id="tenant-B", title="Product Marketing Manager"))
    return store


def test_add_forces_applied_status(store):
    added = store.add(build_candidate(status=CandidateStatus.HR_ROUND))

    assert added.status is CandidateStatus.APPLIED
    assert store.get("c1").status is CandidateStatus.APPLIED


def test_add_duplicate_id_fails(store):
    store.add(build_candidate())

    with pytest.raises(DuplicateIdError):
        store.add(build_candidate(name="Someone Else"))
    assert store.get_job("j1").applicants == 1


def test_add_unknown_job_fails(store):
    with pytest.raises(NotFoundError):
        store.add(build_candidate(job_id="missing"))
    assert "c1" not in store


def test_applicant_count_tracks_additions_only(store):
    for idx in range(5):
        store.add(build_candidate(id=f"c{idx}"))

    candidate = store.get("c0")
    store.update(candidate.model_copy(update={"status": CandidateStatus.REJECTED}))

    assert store.get_job("j1").applicants == 5
    assert store.get_job("j2").applicants == 0


def test_duplicate_application_creates_new_record(store):
    store.add(build_candidate(id="c1", email="priya@example.com"))
    store.add(build_candidate(id="c2", email="priya@example.com"))

    assert [c.id for c in store.list_by_tenant("tenant-A")] == ["c1", "c2"]


def test_update_replaces_whole_record(store):
    store.add(build_candidate(experience="6 years"))
    replacement = build_candidate(status=CandidateStatus.EVALUATED)

    store.update(replacement)

    stored = store.get("c1")
    assert stored.status is CandidateStatus.EVALUATED
    assert stored.experience == ""


def test_update_missing_candidate_fails(store):
    with pytest.raises(NotFoundError):
        store.update(build_candidate(id="ghost"))


def test_update_cannot_move_tenant(store):
    store.add(build_candidate())

    with pytest.raises(TenantMismatchError):
        store.update(build_candidate(tenant_id="tenant-B"))
    assert store.get("c1").tenant_id == "tenant-A"


def test_list_by_tenant_filters_and_keeps_order(store):
    store.add(build_candidate(id="a1"))
    store.add(build_candidate(id="b1", tenant_id="tenant-B", job_id="j2"))
    store.add(build_candidate(id="a2"))

    assert [c.id for c in store.list_by_tenant("tenant-A")] == ["a1", "a2"]
    assert [c.id for c in store.list_by_tenant("tenant-B")] == ["b1"]
    assert store.list_by_tenant("tenant-C") == []


def test_get_scoped_to_tenant(store):
    store.add(build_candidate())

    assert store.get("c1", tenant_id="tenant-A").id == "c1"
    with pytest.raises(NotFoundError):
        store.get("c1", tenant_id="tenant-B")


def test_list_all_requires_global_read(store):
    store.add(build_candidate(id="a1"))
    store.add(build_candidate(id="b1", tenant_id="tenant-B", job_id="j2"))

    with pytest.raises(PermissionDeniedError):
        store.list_all({Capability.TENANT_ADMIN})
    assert [c.id for c in store.list_all({Capability.GLOBAL_READ})] == ["a1", "b1"]


def test_find_job_falls_back_to_title_within_tenant(store):
    assert store.find_job(job_id="j1").id == "j1"
    assert store.find_job(job_id="unknown", title="Senior React Developer").id == "j1"
    assert (
        store.find_job(job_id="unknown", title="Senior React Developer", tenant_id="tenant-B")
        is None
    )
    assert store.find_job(job_id="unknown") is None


def test_restore_keeps_status_and_counters():
    store = CandidateStore()
    store.restore(
        jobs=[build_job(applicants=12)],
        candidates=[build_candidate(status=CandidateStatus.OFFER_PENDING)],
    )

    assert store.get("c1").status is CandidateStatus.OFFER_PENDING
    assert store.get_job("j1").applicants == 12
    assert "c1" in store
    assert len(store) == 1


def test_list_jobs_by_tenant(store):
    assert [job.id for job in store.list_jobs("tenant-B")] == ["j2"]
    assert store.list_jobs("tenant-Z") == []
    with pytest.raises(PermissionDeniedError):
        store.list_all_jobs([])


def test_actor_capabilities_drive_global_listing(store):
    store.add(build_candidate(id="a1"))
    auditor = Actor(id="svc-report", capabilities={Capability.GLOBAL_READ})
    recruiter = Actor(id="u-rec-1", tenant_id="tenant-A", capabilities={"RECRUITER"})

    assert auditor.has(Capability.GLOBAL_READ)
    assert not recruiter.has(Capability.GLOBAL_READ, Capability.SUPERUSER)
    assert [c.id for c in store.list_all(auditor.capabilities)] == ["a1"]
    with pytest.raises(PermissionDeniedError):
        store.list_all(recruiter.capabilities)


def test_restore_with_duplicate_leaves_store_untouched(store):
    store.add(build_candidate(id="a1"))

    with pytest.raises(DuplicateIdError):
        store.restore(
            jobs=[build_job(id="j3", title="Data Engineer")],
            candidates=[build_candidate(id="n1"), build_candidate(id="a1")],
        )
    with pytest.raises(DuplicateIdError):
        store.restore(candidates=[build_candidate(id="n2"), build_candidate(id="n2")])

    assert store.find_job(job_id="j3") is None
    assert "n1" not in store
    assert "n2" not in store
    assert len(store) == 1


def test_update_if_refuses_stale_status(store):
    applied = store.add(build_candidate())
    store.update(applied.model_copy(update={"status": CandidateStatus.REJECTED}))

    with pytest.raises(InvalidStateError) as excinfo:
        store.update_if(
            applied.model_copy(update={"status": CandidateStatus.EVALUATED}),
            expected=CandidateStatus.APPLIED,
        )

    assert excinfo.value.current == "rejected"
    assert store.get("c1").status is CandidateStatus.REJECTED


def test_update_if_writes_when_status_matches(store):
    applied = store.add(build_candidate())

    store.update_if(
        applied.model_copy(update={"status": CandidateStatus.EVALUATED}),
        expected=[CandidateStatus.APPLIED, CandidateStatus.EVALUATED],
    )

    assert store.get("c1").status is CandidateStatus.EVALUATED


def test_listeners_see_every_added_candidate(store):
    seen: list[str] = []
    store.add_listener(lambda candidate: seen.append(f"{candidate.id}:{candidate.status.value}"))

    store.add(build_candidate(id="a1", status=CandidateStatus.HR_ROUND))
    store.restore(candidates=[build_candidate(id="r1")])
    with pytest.raises(DuplicateIdError):
        store.add(build_candidate(id="a1"))

    assert seen == ["a1:applied"]
