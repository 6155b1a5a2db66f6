"""Pre-boarding tracking from offer acceptance through hire conversion.

HR and IT own these mutations; the tracker keeps them on the same
status graph and audit trail as the rest of the pipeline.
"""

from __future__ import annotations

import structlog

from ..schemas import (
    BackgroundCheckStatus,
    Candidate,
    CandidateStatus,
    NewHire,
    ProvisioningStatus,
)
from .audit import AuditLogger
from .errors import InvalidStateError, NotFoundError
from .status import PREBOARDING_STATUSES, ensure_transition
from .store import CandidateStore

HIRE_EMAIL_DOMAIN = "agenra.com"


def fallback_email(name: str) -> str:
    first = name.split(" ")[0].lower() if name.strip() else "employee"
    return f"employee.{first}@{HIRE_EMAIL_DOMAIN}"


class OnboardingTracker:
    """Checklist, background-check and IT-provisioning bookkeeping."""

    def __init__(self, store: CandidateStore, *, audit_logger: AuditLogger | None = None) -> None:
        self._store = store
        self._audit = audit_logger
        self._logger = structlog.get_logger(__name__)

    def toggle_item(self, candidate: Candidate, item_id: str) -> Candidate:
        self._require_preboarding(candidate, "update checklist")
        items = candidate.onboarding_progress or []
        if not any(item.id == item_id for item in items):
            raise NotFoundError("checklist item", item_id)
        progress = [
            item.model_copy(update={"completed": not item.completed}) if item.id == item_id else item
            for item in items
        ]
        return self._save(candidate, {"onboarding_progress": progress})

    def initiate_background_check(self, candidate: Candidate) -> Candidate:
        self._require_preboarding(candidate, "initiate background check")
        return self._save(candidate, {"bgv_status": BackgroundCheckStatus.INITIATED})

    def record_background_check(self, candidate: Candidate, *, verified: bool) -> Candidate:
        self._require_preboarding(candidate, "record background check")
        if candidate.bgv_status != BackgroundCheckStatus.INITIATED:
            raise InvalidStateError(
                candidate.bgv_status.value if candidate.bgv_status else "none",
                BackgroundCheckStatus.INITIATED.value,
                action="record background check",
            )
        result = BackgroundCheckStatus.VERIFIED if verified else BackgroundCheckStatus.FAILED
        return self._save(candidate, {"bgv_status": result})

    def request_it_provisioning(self, candidate: Candidate) -> Candidate:
        self._require_preboarding(candidate, "request IT provisioning")
        return self._save(candidate, {"itam_status": ProvisioningStatus.REQUESTED})

    def mark_it_provisioned(self, candidate: Candidate) -> Candidate:
        self._require_preboarding(candidate, "mark IT provisioned")
        if candidate.itam_status != ProvisioningStatus.REQUESTED:
            raise InvalidStateError(
                candidate.itam_status.value if candidate.itam_status else "none",
                ProvisioningStatus.REQUESTED.value,
                action="mark IT provisioned",
            )
        return self._save(candidate, {"itam_status": ProvisioningStatus.PROVISIONED})

    def start(self, candidate: Candidate, *, actor_id: str | None = None) -> Candidate:
        ensure_transition(candidate.status, CandidateStatus.ONBOARDING_PROGRESS, action="start onboarding")
        updated = self._save(candidate, {"status": CandidateStatus.ONBOARDING_PROGRESS})
        self._audit_action("ONBOARDING_STARTED", updated, actor_id, "")
        return updated

    def complete(self, candidate: Candidate, *, actor_id: str | None = None) -> Candidate:
        ensure_transition(
            candidate.status,
            CandidateStatus.ONBOARDING_COMPLETED,
            action="complete onboarding",
        )
        pending = [item.label for item in candidate.onboarding_progress or [] if not item.completed]
        if pending:
            raise InvalidStateError(
                candidate.status,
                CandidateStatus.ONBOARDING_PROGRESS,
                action="complete onboarding",
                reason=f"checklist incomplete: {', '.join(pending)}",
            )
        updated = self._save(candidate, {"status": CandidateStatus.ONBOARDING_COMPLETED})
        self._audit_action("ONBOARDING_COMPLETED", updated, actor_id, "")
        return updated

    def hire(self, candidate: Candidate, *, actor_id: str | None = None) -> tuple[Candidate, NewHire]:
        """Convert a fully onboarded candidate into an employee record."""
        ensure_transition(candidate.status, CandidateStatus.HIRED, action="hire")
        new_hire = NewHire(
            candidate_id=candidate.id,
            tenant_id=candidate.tenant_id,
            name=candidate.name,
            email=candidate.email or fallback_email(candidate.name),
            job_title=candidate.role,
        )
        updated = self._save(candidate, {"status": CandidateStatus.HIRED})
        self._audit_action("CREATE_USER", updated, actor_id, f"Hired from recruiting. Role: {candidate.role}")
        return updated, new_hire

    def _require_preboarding(self, candidate: Candidate, action: str) -> None:
        if candidate.status not in PREBOARDING_STATUSES:
            raise InvalidStateError(
                candidate.status,
                sorted(status.value for status in PREBOARDING_STATUSES),
                action=action,
            )

    def _save(self, current: Candidate, changes: dict) -> Candidate:
        candidate = current.model_copy(update=changes)
        self._store.update_if(candidate, expected=current.status)
        self._logger.info(
            "onboarding.updated",
            candidate_id=candidate.id,
            status=candidate.status.value,
            bgv_status=candidate.bgv_status.value if candidate.bgv_status else None,
            itam_status=candidate.itam_status.value if candidate.itam_status else None,
        )
        return candidate

    def _audit_action(self, action: str, candidate: Candidate, actor_id: str | None, details: str) -> None:
        if self._audit is None:
            return
        self._audit.record(
            action,
            candidate_id=candidate.id,
            tenant_id=candidate.tenant_id,
            performed_by=actor_id,
            details=details,
        )


__all__ = ["OnboardingTracker", "fallback_email"]
