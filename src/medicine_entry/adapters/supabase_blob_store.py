"""Supabase Storage-backed image store."""

import mimetypes
from collections.abc import Sequence
from dataclasses import dataclass
from urllib.parse import unquote

from supabase import Client

from medicine_entry.services.entries import BlobStore


@dataclass
class SupabaseBlobStore(BlobStore):
    """Stores images in a public Supabase Storage bucket."""

    client: Client
    bucket: str = "images"

    def upload(self, path: str, content: bytes, content_type: str | None) -> None:
        """Upload bytes to the bucket under path."""
        resolved_type = (
            content_type
            or mimetypes.guess_type(path)[0]
            or "application/octet-stream"
        )
        self.client.storage.from_(self.bucket).upload(
            path=path,
            file=content,
            file_options={"content-type": resolved_type},
        )

    def remove(self, refs: Sequence[str]) -> None:
        """Delete the objects behind the given references in one call."""
        self.client.storage.from_(self.bucket).remove(
            [self.to_path(ref) for ref in refs]
        )

    def resolve(self, ref: str) -> str:
        """Return the public URL for a path; URLs are returned unchanged."""
        if _is_url(ref):
            return ref
        return self.client.storage.from_(self.bucket).get_public_url(ref)

    def to_path(self, ref: str) -> str:
        """Convert a public object URL back into a bucket path."""
        if not _is_url(ref):
            return ref
        marker = f"/object/public/{self.bucket}/"
        _, found, tail = ref.partition(marker)
        if not found:
            return ref
        return unquote(tail.split("?", maxsplit=1)[0])


def _is_url(ref: str) -> bool:
    return ref.startswith(("http://", "https://"))
