"""Typed results of session operations."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional

# Operation status types
OperationStatus = Literal["pending", "running", "success", "failed", "declined"]


@dataclass
class OperationRecord:
    """Outcome of one connect, disconnect or send request."""

    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    action: str = ""
    command: Optional[str] = None
    status: OperationStatus = "pending"
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None
    created_at: float = field(default_factory=time.time)
    started_at: Optional[float] = None
    completed_at: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return the record as plain JSON types."""
        return {
            "id": self.id,
            "action": self.action,
            "command": self.command,
            "status": self.status,
            "result": self.result,
            "error": self.error,
            "error_kind": self.error_kind,
            "created_at": self.created_at,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
        }

    @property
    def ok(self) -> bool:
        return self.status == "success"

    def mark_started(self) -> None:
        """Mark operation as started."""
        self.status = "running"
        self.started_at = time.time()

    def mark_success(self, result: Optional[Dict[str, Any]] = None) -> None:
        """Mark operation as successful."""
        self.status = "success"
        self.result = result
        self.completed_at = time.time()

    def mark_failed(self, error: BaseException | str) -> None:
        """Mark operation as failed, keeping the failure class name."""
        self.status = "failed"
        self._record_error(error)

    def mark_declined(self, error: BaseException | str) -> None:
        """Mark operation as refused before anything was changed."""
        self.status = "declined"
        self._record_error(error)

    def _record_error(self, error: BaseException | str) -> None:
        if isinstance(error, BaseException):
            self.error = str(error) or type(error).__name__
            self.error_kind = type(error).__name__
        else:
            self.error = error
        self.completed_at = time.time()

    def is_complete(self) -> bool:
        """Check if the operation has finished."""
        return self.status in {"success", "failed", "declined"}
