from __future__ import annotations

import pytest
from pydantic import ValidationError

from hirepipeline.schemas import (
    Candidate,
    CandidateEvaluation,
    CandidateProfile,
    CandidateStatus,
    FitLevel,
    Job,
    OfferDetails,
)


def test_candidate_defaults_to_applied():
    candidate = Candidate(
        id="c1",
        tenant_id="tenant-A",
        job_id="j1",
        name="Priya Sharma",
        role="Senior React Developer",
    )

    assert candidate.status is CandidateStatus.APPLIED
    assert candidate.evaluation is None
    assert candidate.offer_details is None
    assert candidate.onboarding_progress is None
    assert candidate.bgv_status is None


def test_candidate_accepts_camel_case_payload():
    candidate = Candidate.model_validate(
        {
            "id": "c2",
            "tenantId": "tenant-A",
            "jobId": "j1",
            "name": "Ananya Gupta",
            "role": "Senior React Developer",
            "resumeSummary": "MERN stack lead",
            "status": "offer_pending",
            "offerDetails": {
                "salary": "15,00,000",
                "joiningDate": "2024-05-01",
                "variablePay": "10%",
                "notes": "",
                "draftedBy": "hr-recruiting",
            },
            "evaluation": {
                "score": 92,
                "reasoning": "Perfect match",
                "fit": "High",
                "keySkills": ["React", "Node.js"],
            },
        }
    )

    assert candidate.tenant_id == "tenant-A"
    assert candidate.status is CandidateStatus.OFFER_PENDING
    assert isinstance(candidate.offer_details, OfferDetails)
    assert candidate.offer_details.drafted_by == "hr-recruiting"
    assert candidate.offer_details.approved_by is None
    assert candidate.evaluation.key_skills == ["React", "Node.js"]

    dumped = candidate.model_dump(mode="json", by_alias=True, exclude_none=True)
    assert dumped["tenantId"] == "tenant-A"
    assert dumped["offerDetails"]["draftedBy"] == "hr-recruiting"
    assert "approvedBy" not in dumped["offerDetails"]


@pytest.mark.parametrize("score", [-1, 101])
def test_evaluation_score_bounds(score):
    with pytest.raises(ValidationError):
        CandidateEvaluation(score=score, reasoning="", fit="Low")


def test_evaluation_normalizes_fit_case():
    evaluation = CandidateEvaluation.model_validate({"score": 70, "fit": "medium"})

    assert evaluation.fit is FitLevel.MEDIUM
    assert evaluation.key_skills == []


def test_unknown_status_rejected():
    with pytest.raises(ValidationError):
        Candidate(
            id="c3",
            tenant_id="tenant-A",
            job_id="j1",
            name="X",
            role="Y",
            status="interviewing",
        )


def test_job_defaults():
    job = Job(id="j1", tenant_id="tenant-A", title="Senior React Developer")

    assert job.applicants == 0
    assert job.location == "Remote"
    assert len(job.posted_date) == 10
    with pytest.raises(ValidationError):
        Job(id="j2", tenant_id="tenant-A", title="QA", applicants=-1)


def test_linked_profile_ignores_unknown_fields():
    candidate = Candidate.model_validate(
        {
            "id": "c4",
            "tenantId": "tenant-A",
            "jobId": "j1",
            "name": "Kavya Iyer",
            "role": "Senior React Developer",
            "profile": {
                "id": "p4",
                "name": "Kavya Iyer",
                "presentRole": "Frontend Engineer",
                "portfolioUrl": "https://example.com",
            },
        }
    )

    assert isinstance(candidate.profile, CandidateProfile)
    assert candidate.profile.present_role == "Frontend Engineer"
    assert candidate.profile.email == ""
