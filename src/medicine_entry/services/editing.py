"""Edit flow for a single entry.

The flow is either viewing (no draft) or editing one draft. Removing an image
from the draft only detaches its reference; the stored blob is left in place.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from medicine_entry.domain.auth import Identity
from medicine_entry.domain.entries import Entry, EntryDraft, SelectedFile
from medicine_entry.domain.outcomes import OperationOutcome
from medicine_entry.services.entries import (
    BlobStore,
    EntryListState,
    EntryRepository,
    failure_message,
    upload_files,
)
from medicine_entry.services.notifications import NotificationCenter

logger = logging.getLogger(__name__)


class NotEditingError(RuntimeError):
    """Raised when a draft operation is attempted outside of editing."""


@dataclass
class EditFlow:
    """State machine moving between viewing and editing an entry."""

    repository: EntryRepository
    blob_store: BlobStore
    list_state: EntryListState
    notifications: NotificationCenter
    debug_errors: bool = False
    draft: EntryDraft | None = None

    @property
    def is_editing(self) -> bool:
        return self.draft is not None

    def begin(self, entry: Entry) -> EntryDraft:
        """Start editing a copy of the entry, dropping any open draft."""
        self.draft = EntryDraft.from_entry(entry)
        return self.draft

    def set_label(self, label: str) -> EntryDraft:
        draft = self._require_draft()
        draft.label = label
        return draft

    def remove_image(self, index: int) -> str:
        """Detach the image reference at index from the draft."""
        draft = self._require_draft()
        if not 0 <= index < len(draft.image_refs):
            raise IndexError(f"No image at position {index}")
        return draft.image_refs.pop(index)

    def add_files(self, files: Sequence[SelectedFile]) -> EntryDraft:
        draft = self._require_draft()
        draft.pending_files.extend(files)
        return draft

    def save(self, identity: Identity) -> OperationOutcome:
        """Upload pending files and write the draft back to the entry."""
        draft = self._require_draft()
        uploads = upload_files(self.blob_store, identity, draft.pending_files)
        image_refs = [*draft.image_refs, *uploads.succeeded]
        try:
            self.repository.update_entry(draft.entry_id, draft.label, image_refs)
        except Exception as exc:
            logger.exception(
                "Failed to update entry", extra={"entry_id": str(draft.entry_id)}
            )
            self.notifications.error(
                failure_message("Failed to update entry.", exc, self.debug_errors)
            )
            return OperationOutcome(status="failed", uploads=uploads)

        self.draft = None
        self.notifications.success("Entry updated successfully!")
        self.list_state.refresh(identity)
        return OperationOutcome(status="updated", uploads=uploads)

    def cancel(self) -> None:
        self.draft = None

    def _require_draft(self) -> EntryDraft:
        if self.draft is None:
            raise NotEditingError("No entry is being edited")
        return self.draft
