"""Human screening decisions between evaluation and the offer stage."""

from __future__ import annotations

import structlog

from ..schemas import Candidate, CandidateStatus
from .audit import AuditLogger
from .errors import InvalidStateError
from .status import ensure_transition
from .store import CandidateStore

S = CandidateStatus

# Edges a reviewer may take directly. The others belong to the
# auto-evaluation trigger, the offer workflow or the onboarding tracker.
HUMAN_DECISIONS: dict[CandidateStatus, CandidateStatus] = {
    S.EVALUATED: S.SHORTLISTED,
    S.SHORTLISTED: S.TEAM_INTERVIEW,
    S.TEAM_INTERVIEW: S.HR_ROUND,
}

_OWNERS: dict[CandidateStatus, str] = {
    S.EVALUATED: "auto-evaluation",
    S.OFFER_PENDING: "draft_offer",
    S.OFFER_SENT: "approve_offer",
    S.OFFER_ACCEPTED: "record_acceptance",
    S.ONBOARDING_PROGRESS: "onboarding",
    S.ONBOARDING_COMPLETED: "onboarding",
    S.HIRED: "onboarding",
}


class StageController:
    def __init__(self, store: CandidateStore, *, audit_logger: AuditLogger | None = None) -> None:
        self._store = store
        self._audit = audit_logger
        self._logger = structlog.get_logger(__name__)

    def advance(
        self,
        candidate: Candidate,
        target: CandidateStatus | str,
        *,
        actor_id: str | None = None,
    ) -> Candidate:
        """Move ``candidate`` one interview stage forward."""
        target = CandidateStatus(target)
        if target == S.REJECTED:
            return self.reject(candidate, actor_id=actor_id)
        if HUMAN_DECISIONS.get(candidate.status) != target:
            owner = _OWNERS.get(target)
            sources = [src for src, dst in HUMAN_DECISIONS.items() if dst == target]
            raise InvalidStateError(
                candidate.status,
                sources,
                action=f"advance to {target.value}",
                reason=f"use {owner}" if owner else None,
            )
        return self._apply(candidate, target, actor_id, "STAGE_ADVANCED")

    def reject(self, candidate: Candidate, *, actor_id: str | None = None) -> Candidate:
        ensure_transition(candidate.status, S.REJECTED, action="reject")
        return self._apply(candidate, S.REJECTED, actor_id, "CANDIDATE_REJECTED")

    def _apply(
        self,
        candidate: Candidate,
        target: CandidateStatus,
        actor_id: str | None,
        action: str,
    ) -> Candidate:
        updated = candidate.model_copy(update={"status": target})
        self._store.update_if(updated, expected=candidate.status, action=f"move to {target.value}")
        self._logger.info(
            "stage.changed",
            candidate_id=candidate.id,
            previous=candidate.status.value,
            status=target.value,
            actor_id=actor_id,
        )
        if self._audit is not None:
            self._audit.record(
                action,
                candidate_id=candidate.id,
                tenant_id=candidate.tenant_id,
                performed_by=actor_id,
                details=f"{candidate.status.value} -> {target.value}",
            )
        return updated


__all__ = ["HUMAN_DECISIONS", "StageController"]
