"""Explicit capability checks for pipeline operations."""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field

from .errors import PermissionDeniedError


class Capability(str, Enum):
    RECRUITER = "RECRUITER"
    TENANT_ADMIN = "TENANT_ADMIN"
    SUPERUSER = "SUPERUSER"
    GLOBAL_READ = "GLOBAL_READ"


class Actor(BaseModel):
    """The user performing an operation and what they may do."""

    id: str
    tenant_id: str | None = None
    capabilities: frozenset[Capability] = Field(default_factory=frozenset)

    model_config = ConfigDict(frozen=True)

    def has(self, *accepted: Capability) -> bool:
        return any(capability in self.capabilities for capability in accepted)


def require_capability(
    capabilities: Iterable[Capability | str],
    *accepted: Capability,
    action: str,
) -> None:
    """Raise ``PermissionDeniedError`` unless one of ``accepted`` is held."""
    held = {Capability(item) for item in capabilities}
    if held.intersection(accepted):
        return
    raise PermissionDeniedError(action, accepted)


__all__ = ["Actor", "Capability", "require_capability"]
