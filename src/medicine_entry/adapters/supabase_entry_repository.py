"""Supabase-backed entry repository."""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from medicine_entry.domain.entries import Entry
from medicine_entry.services.entries import EntryRepository

_COLUMNS = "id, user_id, medicine_name, image_urls, created_at"


@dataclass
class SupabaseEntryRepository(EntryRepository):
    """Supabase implementation for entry rows."""

    client: Client
    table_name: str = "entries"

    def list_entries(self, user_id: UUID) -> list[Entry]:
        """Return a user's entries, newest first."""
        response = (
            self.client.table(self.table_name)
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_entry(row) for row in response.data or []]

    def get_entry(self, entry_id: UUID) -> Entry | None:
        """Return an entry by id, if present."""
        response = (
            self.client.table(self.table_name)
            .select(_COLUMNS)
            .eq("id", str(entry_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_entry(response.data[0])

    def create_entry(
        self, user_id: UUID, label: str, image_refs: Sequence[str]
    ) -> Entry:
        """Insert an entry row and return it."""
        response = (
            self.client.table(self.table_name)
            .insert(
                {
                    "user_id": str(user_id),
                    "medicine_name": label,
                    "image_urls": list(image_refs),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create entry")
        return _parse_entry(response.data[0])

    def update_entry(
        self, entry_id: UUID, label: str, image_refs: Sequence[str]
    ) -> None:
        """Replace the label and image list of an entry."""
        self.client.table(self.table_name).update(
            {"medicine_name": label, "image_urls": list(image_refs)}
        ).eq("id", str(entry_id)).execute()

    def delete_entry(self, entry_id: UUID) -> None:
        self.client.table(self.table_name).delete().eq("id", str(entry_id)).execute()

    def delete_entries_for_user(self, user_id: UUID) -> None:
        self.client.table(self.table_name).delete().eq(
            "user_id", str(user_id)
        ).execute()


def _parse_entry(row: dict[str, object]) -> Entry:
    raw_refs = row.get("image_urls") or []
    return Entry(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        label=str(row.get("medicine_name") or ""),
        image_refs=tuple(str(ref) for ref in raw_refs),
        created_at=datetime.fromisoformat(str(row["created_at"])),
    )
