"""Domain models for saved entries."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar
from uuid import UUID

T = TypeVar("T")


@dataclass(frozen=True)
class Entry:
    """A saved label with its ordered image references."""

    id: UUID
    user_id: UUID
    label: str
    image_refs: tuple[str, ...]
    created_at: datetime


@dataclass(frozen=True)
class SelectedFile:
    """An in-memory file picked for upload."""

    filename: str
    content: bytes
    content_type: str | None = None


@dataclass(frozen=True)
class ItemFailure:
    """One failed item in a best-effort batch."""

    item: str
    reason: str


@dataclass
class BatchResult(Generic[T]):
    """Outcome of a loop that continues past per-item failures."""

    succeeded: list[T] = field(default_factory=list)
    failed: list[ItemFailure] = field(default_factory=list)

    def fail(self, item: str, exc: BaseException) -> None:
        reason = f"{type(exc).__name__}: {exc}"
        self.failed.append(ItemFailure(item=item, reason=reason))


@dataclass
class EntryDraft:
    """Mutable copy of an entry while it is being edited."""

    entry_id: UUID
    label: str
    image_refs: list[str]
    pending_files: list[SelectedFile] = field(default_factory=list)

    @classmethod
    def from_entry(cls, entry: Entry) -> "EntryDraft":
        return cls(
            entry_id=entry.id,
            label=entry.label,
            image_refs=list(entry.image_refs),
        )


@dataclass(frozen=True)
class EntryPreview:
    """Thumbnail locations shown for a collapsed entry card."""

    image_urls: list[str]
    more_count: int
