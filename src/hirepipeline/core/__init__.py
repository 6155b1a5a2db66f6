"""Hiring-pipeline core components."""

from __future__ import annotations

# NOTE: keep imports explicit for export clarity.
from .audit import AuditLogger, MemoryAuditLogger
from .capabilities import Actor, Capability, require_capability
from .errors import (
    DuplicateIdError,
    EvaluationFailure,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    PipelineError,
    TenantMismatchError,
)
from .evaluation import (
    SHORTLIST_THRESHOLD,
    AutoEvaluationTrigger,
    EvaluationCollaborator,
    EvaluationTriggerConfig,
)
from .offers import OfferWorkflowController
from .onboarding import OnboardingTracker
from .stages import StageController
from .status import can_transition, rank_candidates
from .store import CandidateStore

__all__ = [
    "Actor",
    "AuditLogger",
    "AutoEvaluationTrigger",
    "Capability",
    "CandidateStore",
    "DuplicateIdError",
    "EvaluationCollaborator",
    "EvaluationFailure",
    "EvaluationTriggerConfig",
    "InvalidStateError",
    "MemoryAuditLogger",
    "NotFoundError",
    "OfferWorkflowController",
    "OnboardingTracker",
    "PermissionDeniedError",
    "PipelineError",
    "SHORTLIST_THRESHOLD",
    "StageController",
    "TenantMismatchError",
    "can_transition",
    "rank_candidates",
    "require_capability",
]
