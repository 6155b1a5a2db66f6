"""Candidate records and the value objects attached to them."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CandidateStatus(str, Enum):
    """Pipeline stages a candidate moves through.

    ``rejected`` and ``hired`` are terminal; see ``hirepipeline.core.status``
    for the transition graph.
    """

    APPLIED = "applied"
    EVALUATED = "evaluated"
    SHORTLISTED = "shortlisted"
    TEAM_INTERVIEW = "team_interview"
    HR_ROUND = "hr_round"
    OFFER_PENDING = "offer_pending"
    OFFER_SENT = "offer_sent"
    OFFER_ACCEPTED = "offer_accepted"
    ONBOARDING_PROGRESS = "onboarding_progress"
    ONBOARDING_COMPLETED = "onboarding_completed"
    HIRED = "hired"
    REJECTED = "rejected"


class FitLevel(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class BackgroundCheckStatus(str, Enum):
    PENDING = "pending"
    INITIATED = "initiated"
    VERIFIED = "verified"
    FAILED = "failed"


class ProvisioningStatus(str, Enum):
    PENDING = "pending"
    REQUESTED = "requested"
    PROVISIONED = "provisioned"


class _Record(BaseModel):
    """Base model serializing with the camelCase keys of the web client."""

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class CandidateEvaluation(_Record):
    """Automated score of a resume against a job description."""

    score: int = Field(ge=0, le=100)
    reasoning: str = ""
    fit: FitLevel = FitLevel.LOW
    key_skills: list[str] = Field(default_factory=list)

    @field_validator("fit", mode="before")
    @classmethod
    def _normalize_fit(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().capitalize()
        return value


class OfferTerms(_Record):
    """Compensation terms entered by the recruiter drafting an offer."""

    salary: str
    joining_date: str
    variable_pay: str = ""
    notes: str = ""


class OfferDetails(OfferTerms):
    """Offer terms plus the approval trail."""

    drafted_by: str
    approved_by: str | None = None


class ChecklistItem(_Record):
    id: str
    label: str
    completed: bool = False


class CandidateProfile(_Record):
    """Public job-board profile linked to an application."""

    id: str
    name: str
    email: str = ""
    phone: str = ""
    resume_text: str = ""
    experience: str = ""
    education: str = ""
    resume_summary: str = ""
    tagline: str | None = None
    bio: str | None = None
    looking_for_role: str | None = None
    present_role: str | None = None
    present_org: str | None = None

    model_config = ConfigDict(extra="ignore")


class Candidate(_Record):
    """One application tied to a single job requisition and tenant."""

    id: str
    tenant_id: str
    job_id: str
    name: str
    role: str
    experience: str = ""
    education: str = ""
    resume_summary: str = ""
    email: str | None = None
    phone: str | None = None
    profile: CandidateProfile | None = None
    status: CandidateStatus = CandidateStatus.APPLIED
    evaluation: CandidateEvaluation | None = None
    offer_details: OfferDetails | None = None
    onboarding_progress: list[ChecklistItem] | None = None
    bgv_status: BackgroundCheckStatus | None = None
    itam_status: ProvisioningStatus | None = None


class NewHire(_Record):
    """Employee record handed to user management when a candidate is hired."""

    candidate_id: str
    tenant_id: str
    name: str
    email: str
    job_title: str
