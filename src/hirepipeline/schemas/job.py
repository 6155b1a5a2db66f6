from __future__ import annotations

import pendulum
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _today() -> str:
    return pendulum.today().to_date_string()


class Job(BaseModel):
    """Job requisition owned by a single tenant."""

    id: str
    tenant_id: str
    title: str
    department: str = ""
    location: str = "Remote"
    description: str = ""
    posted_date: str = Field(default_factory=_today)
    applicants: int = Field(default=0, ge=0)

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )
