"""Two-role approval gate for compensation offers."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

import structlog

from ..schemas import Candidate, CandidateStatus, ChecklistItem, OfferDetails, OfferTerms
from .audit import AuditLogger
from .capabilities import Capability, require_capability
from .errors import InvalidStateError
from .store import CandidateStore

ONBOARDING_CHECKLIST: tuple[tuple[str, str, bool], ...] = (
    ("1", "Offer Letter Signed", True),
    ("2", "Background Check", False),
    ("3", "ID Proof Verified", False),
    ("4", "IT Assets Assigned", False),
)


def initial_checklist() -> list[ChecklistItem]:
    return [
        ChecklistItem(id=item_id, label=label, completed=completed)
        for item_id, label, completed in ONBOARDING_CHECKLIST
    ]


class OfferWorkflowController:
    """Draft, approve and accept offers.

    Drafting needs ``RECRUITER`` (or ``SUPERUSER``); approval needs
    ``TENANT_ADMIN`` (or ``SUPERUSER``). Every operation validates the
    supplied record first and writes nothing when a precondition fails.
    """

    def __init__(self, store: CandidateStore, *, audit_logger: AuditLogger | None = None) -> None:
        self._store = store
        self._audit = audit_logger
        self._logger = structlog.get_logger(__name__)

    def draft_offer(
        self,
        candidate: Candidate,
        terms: OfferTerms | Mapping[str, Any],
        actor_id: str,
        capabilities: Iterable[Capability | str],
    ) -> Candidate:
        require_capability(
            capabilities,
            Capability.RECRUITER,
            Capability.SUPERUSER,
            action="draft offer",
        )
        if candidate.status != CandidateStatus.HR_ROUND:
            raise InvalidStateError(
                candidate.status,
                CandidateStatus.HR_ROUND,
                action="draft offer",
            )
        offer_terms = terms if isinstance(terms, OfferTerms) else OfferTerms.model_validate(terms)
        details = OfferDetails(
            **offer_terms.model_dump(include=set(OfferTerms.model_fields)),
            drafted_by=actor_id,
        )
        updated = candidate.model_copy(
            update={"status": CandidateStatus.OFFER_PENDING, "offer_details": details}
        )
        self._store.update_if(updated, expected=CandidateStatus.HR_ROUND, action="draft offer")

        self._logger.info("offer.drafted", candidate_id=candidate.id, drafted_by=actor_id)
        self._audit_action(
            "OFFER_DRAFTED",
            updated,
            actor_id,
            f"salary={details.salary} joining={details.joining_date}",
        )
        return updated

    def approve_offer(
        self,
        candidate: Candidate,
        actor_id: str,
        capabilities: Iterable[Capability | str],
    ) -> Candidate:
        require_capability(
            capabilities,
            Capability.TENANT_ADMIN,
            Capability.SUPERUSER,
            action="approve offer",
        )
        if candidate.status != CandidateStatus.OFFER_PENDING:
            raise InvalidStateError(
                candidate.status,
                CandidateStatus.OFFER_PENDING,
                action="approve offer",
            )
        if candidate.offer_details is None:
            raise InvalidStateError(
                candidate.status,
                CandidateStatus.OFFER_PENDING,
                action="approve offer",
                reason="no drafted offer on record",
            )

        if candidate.offer_details.drafted_by == actor_id:
            self._logger.warning(
                "offer.self_approved",
                candidate_id=candidate.id,
                actor_id=actor_id,
            )
        details = candidate.offer_details.model_copy(update={"approved_by": actor_id})
        updated = candidate.model_copy(
            update={"status": CandidateStatus.OFFER_SENT, "offer_details": details}
        )
        self._store.update_if(updated, expected=CandidateStatus.OFFER_PENDING, action="approve offer")

        self._logger.info("offer.approved", candidate_id=candidate.id, approved_by=actor_id)
        self._audit_action("OFFER_APPROVED", updated, actor_id, "offer sent to candidate")
        return updated

    def record_acceptance(self, candidate: Candidate) -> Candidate:
        """Record the candidate's real-world acceptance and open pre-boarding."""
        if candidate.status != CandidateStatus.OFFER_SENT:
            raise InvalidStateError(
                candidate.status,
                CandidateStatus.OFFER_SENT,
                action="record acceptance",
            )
        updated = candidate.model_copy(
            update={
                "status": CandidateStatus.OFFER_ACCEPTED,
                "onboarding_progress": initial_checklist(),
            }
        )
        self._store.update_if(updated, expected=CandidateStatus.OFFER_SENT, action="record acceptance")

        self._logger.info("offer.accepted", candidate_id=candidate.id)
        self._audit_action("OFFER_ACCEPTED", updated, None, "moved to pre-boarding")
        return updated

    def _audit_action(
        self,
        action: str,
        candidate: Candidate,
        actor_id: str | None,
        details: str,
    ) -> None:
        if self._audit is None:
            return
        self._audit.record(
            action,
            candidate_id=candidate.id,
            tenant_id=candidate.tenant_id,
            performed_by=actor_id,
            details=details,
        )


__all__ = ["OfferWorkflowController", "ONBOARDING_CHECKLIST", "initial_checklist"]
