"""Entry submission, listing and deletion."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from medicine_entry.domain.auth import Identity
from medicine_entry.domain.entries import (
    BatchResult,
    Entry,
    EntryPreview,
    SelectedFile,
)
from medicine_entry.domain.outcomes import OperationOutcome
from medicine_entry.services.notifications import NotificationCenter
from medicine_entry.services.storage_keys import blob_path

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]

DELETE_ENTRY_PROMPT = "Are you sure you want to delete this entry?"
CLEAR_ALL_PROMPT = "Are you sure you want to delete all entries?"
PREVIEW_LIMIT = 3


class EntryRepository(Protocol):
    """Persistence interface for entries."""

    def list_entries(self, user_id: UUID) -> list[Entry]:
        """Return a user's entries, newest first."""

    def get_entry(self, entry_id: UUID) -> Entry | None:
        """Return an entry by id, if present."""

    def create_entry(
        self, user_id: UUID, label: str, image_refs: Sequence[str]
    ) -> Entry:
        """Create an entry and return it."""

    def update_entry(
        self, entry_id: UUID, label: str, image_refs: Sequence[str]
    ) -> None:
        """Replace the label and image list of an entry."""

    def delete_entry(self, entry_id: UUID) -> None:
        """Delete one entry."""

    def delete_entries_for_user(self, user_id: UUID) -> None:
        """Delete every entry owned by a user."""


class BlobStore(Protocol):
    """Interface for image blob storage."""

    def upload(self, path: str, content: bytes, content_type: str | None) -> None:
        """Store bytes under a path."""

    def remove(self, refs: Sequence[str]) -> None:
        """Delete the blobs behind the given references."""

    def resolve(self, ref: str) -> str:
        """Return a fetchable URL for a stored reference."""


def upload_files(
    blob_store: BlobStore, identity: Identity, files: Sequence[SelectedFile]
) -> BatchResult[str]:
    """Upload files one at a time, skipping the ones that fail."""
    result: BatchResult[str] = BatchResult()
    for selected in files:
        path = blob_path(identity.namespace, selected.filename)
        try:
            blob_store.upload(path, selected.content, selected.content_type)
        except Exception as exc:
            logger.exception(
                "Image upload failed",
                extra={"upload_name": selected.filename, "blob_path": path},
            )
            result.fail(selected.filename, exc)
            continue
        result.succeeded.append(path)
    return result


def remove_blobs(blob_store: BlobStore, refs: Sequence[str]) -> BatchResult[str]:
    """Remove blobs in one call; a failure marks every ref as not removed."""
    result: BatchResult[str] = BatchResult()
    if not refs:
        return result
    try:
        blob_store.remove(list(refs))
    except Exception as exc:
        logger.exception("Image removal failed", extra={"count": len(refs)})
        for ref in refs:
            result.fail(ref, exc)
        return result
    result.succeeded.extend(refs)
    return result


def filter_entries(entries: Sequence[Entry], term: str) -> list[Entry]:
    """Return entries whose label contains the term, ignoring case."""
    if not term:
        return list(entries)
    needle = term.lower()
    return [entry for entry in entries if needle in entry.label.lower()]


def failure_message(fallback: str, exc: Exception, debug: bool) -> str:
    """Return a user-facing failure message with optional debug detail."""
    if debug:
        detail = f"{type(exc).__name__}: {exc}".strip()
        if detail:
            return f"{fallback} (debug: {detail})"
    return fallback


@dataclass
class EntryListState:
    """In-memory list of the current user's entries and its view state."""

    repository: EntryRepository
    blob_store: BlobStore
    entries: list[Entry] = field(default_factory=list)
    search_term: str = ""
    expanded: bool = False
    owner_id: UUID | None = None

    def refresh(self, identity: Identity | None) -> list[Entry]:
        """Reload entries for the identity, keeping the old list on failure."""
        if identity is None:
            self.clear()
            return self.entries
        if identity.user_id != self.owner_id:
            self.clear()
            self.owner_id = identity.user_id
        try:
            self.entries = self.repository.list_entries(identity.user_id)
        except Exception:
            logger.exception(
                "Failed to fetch entries", extra={"user_id": str(identity.user_id)}
            )
        return self.entries

    def on_identity_change(self, identity: Identity | None) -> None:
        """Reload for a new identity; a different user never sees the old list."""
        self.refresh(identity)

    def visible(self) -> list[Entry]:
        return filter_entries(self.entries, self.search_term)

    @property
    def no_matches(self) -> bool:
        return bool(self.search_term) and not self.visible()

    def toggle_expanded(self) -> bool:
        self.expanded = not self.expanded
        return self.expanded

    def preview(self, entry: Entry) -> EntryPreview:
        """Return the first few image URLs and how many are hidden."""
        shown = entry.image_refs[:PREVIEW_LIMIT]
        return EntryPreview(
            image_urls=[self.blob_store.resolve(ref) for ref in shown],
            more_count=max(len(entry.image_refs) - PREVIEW_LIMIT, 0),
        )

    def clear(self) -> None:
        """Drop loaded entries and view state; the list no longer has an owner."""
        self.entries = []
        self.search_term = ""
        self.expanded = False
        self.owner_id = None


@dataclass
class EntryService:
    """Creates and deletes entries against the record and blob stores."""

    repository: EntryRepository
    blob_store: BlobStore
    list_state: EntryListState
    notifications: NotificationCenter
    debug_errors: bool = False

    def submit(
        self,
        label: str,
        files: Sequence[SelectedFile],
        identity: Identity | None,
    ) -> OperationOutcome:
        """Upload the files and save them with the label as a new entry."""
        if not label.strip() or not files or identity is None:
            return OperationOutcome(status="ignored")

        uploads = upload_files(self.blob_store, identity, files)
        try:
            entry = self.repository.create_entry(
                identity.user_id, label, uploads.succeeded
            )
        except Exception as exc:
            logger.exception(
                "Failed to save entry", extra={"user_id": str(identity.user_id)}
            )
            self.notifications.error(
                failure_message("Failed to save entry.", exc, self.debug_errors)
            )
            return OperationOutcome(status="failed", uploads=uploads)

        self.notifications.success("Entry saved successfully!")
        self.list_state.refresh(identity)
        return OperationOutcome(status="saved", entry=entry, uploads=uploads)

    def delete_entry(
        self, entry_id: UUID, identity: Identity, confirm: Confirm
    ) -> OperationOutcome:
        """Remove an entry's images, then the entry itself."""
        if not confirm(DELETE_ENTRY_PROMPT):
            return OperationOutcome(status="cancelled")

        removals: BatchResult[str] = BatchResult()
        try:
            entry = self.repository.get_entry(entry_id)
        except Exception as exc:
            logger.exception(
                "Failed to look up entry images", extra={"entry_id": str(entry_id)}
            )
            removals.fail(str(entry_id), exc)
            entry = None
        if entry is not None:
            removals = remove_blobs(self.blob_store, entry.image_refs)

        try:
            self.repository.delete_entry(entry_id)
        except Exception as exc:
            logger.exception(
                "Failed to delete entry", extra={"entry_id": str(entry_id)}
            )
            self.notifications.error(
                failure_message("Failed to delete entry.", exc, self.debug_errors)
            )
            return OperationOutcome(status="failed", removals=removals)

        self.notifications.success("Entry deleted.")
        self.list_state.refresh(identity)
        return OperationOutcome(status="deleted", removals=removals)

    def clear_all(self, identity: Identity, confirm: Confirm) -> OperationOutcome:
        """Remove every loaded entry's images, then all of the user's entries."""
        if not confirm(CLEAR_ALL_PROMPT):
            return OperationOutcome(status="cancelled")

        loaded = list(self.list_state.entries)
        if not loaded:
            self.notifications.success("All entries cleared.")
            return OperationOutcome(status="cleared")

        refs = [ref for entry in loaded for ref in entry.image_refs]
        removals = remove_blobs(self.blob_store, refs)
        try:
            self.repository.delete_entries_for_user(identity.user_id)
        except Exception as exc:
            logger.exception(
                "Failed to clear entries", extra={"user_id": str(identity.user_id)}
            )
            self.notifications.error(
                failure_message("Failed to clear entries.", exc, self.debug_errors)
            )
            return OperationOutcome(status="failed", removals=removals)

        self.list_state.clear()
        self.notifications.success("All entries cleared.")
        return OperationOutcome(status="cleared", removals=removals)
