"""Outcomes returned by entry operations."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from medicine_entry.domain.entries import BatchResult, Entry

OutcomeStatus = Literal[
    "ignored",
    "saved",
    "updated",
    "deleted",
    "cleared",
    "cancelled",
    "failed",
]
NotificationKind = Literal["success", "error"]


@dataclass(frozen=True)
class OperationOutcome:
    """Status of a whole operation plus its per-item results."""

    status: OutcomeStatus
    entry: Entry | None = None
    uploads: BatchResult[str] = field(default_factory=BatchResult)
    removals: BatchResult[str] = field(default_factory=BatchResult)

    @property
    def succeeded(self) -> bool:
        return self.status not in {"failed", "ignored", "cancelled"}


@dataclass(frozen=True)
class Notification:
    """A transient message shown to the user."""

    kind: NotificationKind
    message: str
    created_at: datetime
    expires_at: datetime
