"""Typed failures raised by the pipeline components.

Structural errors (missing or duplicate ids, invalid status, missing
capability, tenant mismatch) always propagate to the caller.
``EvaluationFailure`` is the only error the auto-evaluation trigger absorbs.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable


class ErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE_ID = "DUPLICATE_ID"
    INVALID_STATE = "INVALID_STATE"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    TENANT_MISMATCH = "TENANT_MISMATCH"
    EVALUATION_FAILED = "EVALUATION_FAILED"


class PipelineError(Exception):
    """Base exception carrying a structured error code."""

    code: ErrorCode

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": {"code": self.code.value, "message": self.message}}


class NotFoundError(PipelineError, LookupError):
    code = ErrorCode.NOT_FOUND

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} {identifier!r} not found")


class DuplicateIdError(PipelineError):
    code = ErrorCode.DUPLICATE_ID

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} {identifier!r} already exists")


class InvalidStateError(PipelineError):
    """Raised when an operation is invoked from a status that forbids it."""

    code = ErrorCode.INVALID_STATE

    def __init__(
        self,
        current: str,
        required: str | Iterable[str],
        *,
        action: str | None = None,
        reason: str | None = None,
    ):
        self.current = _status_value(current)
        if isinstance(required, str):
            self.required: tuple[str, ...] = (_status_value(required),)
        else:
            self.required = tuple(_status_value(item) for item in required)
        self.action = action
        prefix = f"cannot {action}: " if action else ""
        expected = " or ".join(self.required) if self.required else "<none>"
        message = f"{prefix}status is {self.current!r}, requires {expected!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["error"]["current"] = self.current
        payload["error"]["required"] = list(self.required)
        return payload


class PermissionDeniedError(PipelineError):
    code = ErrorCode.PERMISSION_DENIED

    def __init__(self, action: str, accepted: Iterable[str]):
        self.action = action
        self.accepted = tuple(_status_value(item) for item in accepted)
        super().__init__(
            f"{action} requires one of: {', '.join(self.accepted)}"
        )


class TenantMismatchError(PipelineError):
    code = ErrorCode.TENANT_MISMATCH

    def __init__(self, candidate_id: str, stored: str, supplied: str):
        self.candidate_id = candidate_id
        super().__init__(
            f"candidate {candidate_id!r} belongs to tenant {stored!r}, not {supplied!r}"
        )


class EvaluationFailure(PipelineError):
    """The evaluation collaborator did not return a usable result."""

    code = ErrorCode.EVALUATION_FAILED

    def __init__(self, message: str, *, candidate_id: str | None = None):
        self.candidate_id = candidate_id
        super().__init__(message)


def _status_value(value: Any) -> str:
    return str(getattr(value, "value", value))


__all__ = [
    "ErrorCode",
    "PipelineError",
    "NotFoundError",
    "DuplicateIdError",
    "InvalidStateError",
    "PermissionDeniedError",
    "TenantMismatchError",
    "EvaluationFailure",
]
