"""Pydantic schema definitions for pipeline records."""

from __future__ import annotations

from .candidate import (
    BackgroundCheckStatus,
    Candidate,
    CandidateEvaluation,
    CandidateProfile,
    CandidateStatus,
    ChecklistItem,
    FitLevel,
    NewHire,
    OfferDetails,
    OfferTerms,
    ProvisioningStatus,
)
from .job import Job

__all__ = [
    "BackgroundCheckStatus",
    "Candidate",
    "CandidateEvaluation",
    "CandidateProfile",
    "CandidateStatus",
    "ChecklistItem",
    "FitLevel",
    "Job",
    "NewHire",
    "OfferDetails",
    "OfferTerms",
    "ProvisioningStatus",
]
