"""Candidate status graph and board ordering.

Canonical transitions:
    applied -> evaluated | shortlisted          (auto-evaluation)
    evaluated -> shortlisted                    (human decision)
    shortlisted -> team_interview               (human decision)
    team_interview -> hr_round                  (human decision)
    hr_round -> offer_pending                   (recruiter drafts offer)
    offer_pending -> offer_sent                 (admin approves)
    offer_sent -> offer_accepted                (candidate accepts)
    offer_accepted -> onboarding_progress -> onboarding_completed -> hired
    any non-terminal -> rejected
"""

from __future__ import annotations

from typing import Iterable

from ..schemas import Candidate, CandidateStatus
from .errors import InvalidStateError

S = CandidateStatus

TERMINAL_STATUSES: frozenset[CandidateStatus] = frozenset({S.REJECTED, S.HIRED})

TRANSITIONS: dict[CandidateStatus, frozenset[CandidateStatus]] = {
    S.APPLIED: frozenset({S.EVALUATED, S.SHORTLISTED}),
    S.EVALUATED: frozenset({S.SHORTLISTED}),
    S.SHORTLISTED: frozenset({S.TEAM_INTERVIEW}),
    S.TEAM_INTERVIEW: frozenset({S.HR_ROUND}),
    S.HR_ROUND: frozenset({S.OFFER_PENDING}),
    S.OFFER_PENDING: frozenset({S.OFFER_SENT}),
    S.OFFER_SENT: frozenset({S.OFFER_ACCEPTED}),
    S.OFFER_ACCEPTED: frozenset({S.ONBOARDING_PROGRESS}),
    S.ONBOARDING_PROGRESS: frozenset({S.ONBOARDING_COMPLETED}),
    S.ONBOARDING_COMPLETED: frozenset({S.HIRED}),
    S.HIRED: frozenset(),
    S.REJECTED: frozenset(),
}

PREBOARDING_STATUSES: frozenset[CandidateStatus] = frozenset(
    {S.OFFER_ACCEPTED, S.ONBOARDING_PROGRESS, S.ONBOARDING_COMPLETED}
)

PIPELINE_PRIORITY: dict[CandidateStatus, int] = {
    S.OFFER_PENDING: 10,
    S.HR_ROUND: 9,
    S.TEAM_INTERVIEW: 8,
    S.SHORTLISTED: 7,
    S.EVALUATED: 6,
    S.APPLIED: 5,
    S.OFFER_SENT: 4,
    S.OFFER_ACCEPTED: 3,
    S.HIRED: 1,
    S.REJECTED: 0,
}


def is_terminal(status: CandidateStatus | str) -> bool:
    return CandidateStatus(status) in TERMINAL_STATUSES


def allowed_targets(status: CandidateStatus | str) -> frozenset[CandidateStatus]:
    """Statuses reachable in one step, including ``rejected`` where permitted."""
    current = CandidateStatus(status)
    if current in TERMINAL_STATUSES:
        return frozenset()
    return TRANSITIONS[current] | {S.REJECTED}


def can_transition(current: CandidateStatus | str, target: CandidateStatus | str) -> bool:
    return CandidateStatus(target) in allowed_targets(current)


def ensure_transition(
    current: CandidateStatus | str,
    target: CandidateStatus | str,
    *,
    action: str | None = None,
) -> None:
    """Raise ``InvalidStateError`` unless ``current -> target`` is an edge."""
    target = CandidateStatus(target)
    if can_transition(current, target):
        return
    sources = [
        source
        for source in CandidateStatus
        if can_transition(source, target)
    ]
    raise InvalidStateError(
        CandidateStatus(current),
        sources,
        action=action or f"move to {target.value}",
    )


def rank_candidates(candidates: Iterable[Candidate]) -> list[Candidate]:
    """Order candidates the way the recruiting board lists them.

    Stages that need a recruiter's attention come first; within a stage the
    higher evaluation score wins. The sort is stable.
    """

    def _key(candidate: Candidate) -> tuple[int, int]:
        score = candidate.evaluation.score if candidate.evaluation else 0
        return (-PIPELINE_PRIORITY.get(candidate.status, 0), -score)

    return sorted(candidates, key=_key)


__all__ = [
    "TERMINAL_STATUSES",
    "TRANSITIONS",
    "PREBOARDING_STATUSES",
    "PIPELINE_PRIORITY",
    "is_terminal",
    "allowed_targets",
    "can_transition",
    "ensure_transition",
    "rank_candidates",
]
