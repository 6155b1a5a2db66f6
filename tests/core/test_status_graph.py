from __future__ import annotations

import pytest

from hirepipeline.core.errors import InvalidStateError
from hirepipeline.core.status import (
    TERMINAL_STATUSES,
    allowed_targets,
    can_transition,
    ensure_transition,
    is_terminal,
    rank_candidates,
)
from hirepipeline.schemas import Candidate, CandidateEvaluation, CandidateStatus

S = CandidateStatus


def build_candidate(candidate_id: str, status: CandidateStatus, score: int | None = None) -> Candidate:
    evaluation = (
        CandidateEvaluation(score=score, reasoning="", fit="Medium") if score is not None else None
    )
    return Candidate(
        id=candidate_id,
        tenant_id="tenant-A",
        job_id="j1",
        name=candidate_id,
        role="Senior React Developer",
        status=status,
        evaluation=evaluation,
    )


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (S.APPLIED, S.EVALUATED),
        (S.APPLIED, S.SHORTLISTED),
        (S.EVALUATED, S.SHORTLISTED),
        (S.SHORTLISTED, S.TEAM_INTERVIEW),
        (S.TEAM_INTERVIEW, S.HR_ROUND),
        (S.HR_ROUND, S.OFFER_PENDING),
        (S.OFFER_PENDING, S.OFFER_SENT),
        (S.OFFER_SENT, S.OFFER_ACCEPTED),
        (S.OFFER_ACCEPTED, S.ONBOARDING_PROGRESS),
        (S.ONBOARDING_PROGRESS, S.ONBOARDING_COMPLETED),
        (S.ONBOARDING_COMPLETED, S.HIRED),
    ],
)
def test_forward_edges_allowed(current, target):
    assert can_transition(current, target)


def test_rejection_reachable_from_every_non_terminal_status():
    for status in CandidateStatus:
        expected = status not in TERMINAL_STATUSES
        assert can_transition(status, S.REJECTED) is expected


def test_terminal_statuses_have_no_exits():
    assert allowed_targets(S.REJECTED) == frozenset()
    assert allowed_targets(S.HIRED) == frozenset()
    assert not can_transition(S.REJECTED, S.APPLIED)


def test_skipping_stages_not_allowed():
    assert not can_transition(S.APPLIED, S.HR_ROUND)
    assert not can_transition(S.EVALUATED, S.OFFER_PENDING)
    assert not can_transition(S.OFFER_SENT, S.OFFER_PENDING)


def test_ensure_transition_names_statuses():
    with pytest.raises(InvalidStateError) as exc:
        ensure_transition(S.APPLIED, S.OFFER_SENT)

    error = exc.value
    assert error.current == "applied"
    assert error.required == ("offer_pending",)
    assert "offer_pending" in str(error)


def test_rank_candidates_orders_by_stage_then_score():
    ranked = rank_candidates(
        [
            build_candidate("rejected", S.REJECTED),
            build_candidate("evaluated-low", S.EVALUATED, 60),
            build_candidate("pending", S.OFFER_PENDING, 92),
            build_candidate("evaluated-high", S.EVALUATED, 80),
            build_candidate("applied", S.APPLIED),
        ]
    )

    assert [candidate.id for candidate in ranked] == [
        "pending",
        "evaluated-high",
        "evaluated-low",
        "applied",
        "rejected",
    ]


def test_is_terminal_accepts_strings():
    assert is_terminal("hired")
    assert is_terminal(S.REJECTED)
    assert not is_terminal("offer_sent")
