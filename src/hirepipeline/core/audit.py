"""Append-only audit trail for human pipeline actions."""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any

import pendulum


class AuditLogger:
    """Append-only audit logger writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def append(self, record: dict[str, Any]) -> None:
        line = json.dumps(record, ensure_ascii=False)
        with self._lock, self._path.open("a", encoding="utf-8") as handle:
            handle.write(line)
            handle.write("\n")

    def record(
        self,
        action: str,
        *,
        candidate_id: str,
        tenant_id: str,
        performed_by: str | None,
        details: str = "",
    ) -> None:
        self.append(
            {
                "action": action,
                "candidate_id": candidate_id,
                "tenant_id": tenant_id,
                "performed_by": performed_by,
                "details": details,
                "timestamp": pendulum.now("UTC").to_iso8601_string(),
            }
        )


class MemoryAuditLogger(AuditLogger):
    """Audit logger keeping entries in memory, for embedding and tests."""

    def __init__(self) -> None:
        self.entries: list[dict[str, Any]] = []
        self._lock = threading.Lock()

    def append(self, record: dict[str, Any]) -> None:
        with self._lock:
            self.entries.append(dict(record))


__all__ = ["AuditLogger", "MemoryAuditLogger"]
