"""Spreadsheet and archive exports of the loaded entries."""

import io
import logging
import re
import zipfile
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal, Protocol
from urllib.parse import urlsplit

import pandas as pd

from medicine_entry.domain.entries import BatchResult, Entry, ItemFailure
from medicine_entry.services.entries import BlobStore
from medicine_entry.services.storage_keys import file_extension

logger = logging.getLogger(__name__)

TableFormat = Literal["csv", "xlsx"]

SHEET_NAME = "Entries"
LABEL_COLUMN = "Medicine Name"
IMAGE_COUNT_COLUMN = "Image Count"
LABEL_FILENAME = "medicine_name.txt"
DEFAULT_IMAGE_EXTENSION = "jpg"

_MEDIA_TYPES = {
    "csv": "text/csv",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "zip": "application/zip",
}
_UNSAFE_FOLDER_CHARS = re.compile(r"[^a-zA-Z0-9]")


class UnsupportedFormatError(ValueError):
    """Raised for an export format that is not offered."""


class ImageFetcher(Protocol):
    """Interface for downloading stored images."""

    async def fetch(self, url: str) -> bytes:
        """Return the bytes behind a URL."""


@dataclass(frozen=True)
class ExportFile:
    """A generated download."""

    filename: str
    media_type: str
    content: bytes
    skipped: list[ItemFailure] = field(default_factory=list)


def folder_name(label: str) -> str:
    """Replace every non-alphanumeric character of a label with `_`."""
    return _UNSAFE_FOLDER_CHARS.sub("_", label)


def archive_extension(url: str) -> str:
    """Extension of the last path segment of a URL, `jpg` when absent."""
    segment = urlsplit(url).path.rsplit("/", maxsplit=1)[-1]
    return file_extension(segment) or DEFAULT_IMAGE_EXTENSION


def entries_frame(entries: Sequence[Entry]) -> pd.DataFrame:
    """Project entries to the two exported columns."""
    rows = [
        {LABEL_COLUMN: entry.label, IMAGE_COUNT_COLUMN: len(entry.image_refs)}
        for entry in entries
    ]
    return pd.DataFrame(rows, columns=[LABEL_COLUMN, IMAGE_COUNT_COLUMN])


@dataclass
class ExportService:
    """Builds CSV, XLSX and ZIP exports from in-memory entries."""

    blob_store: BlobStore
    image_fetcher: ImageFetcher

    def export_table(self, entries: Sequence[Entry], fmt: str) -> ExportFile:
        """Serialize entries as a single-sheet table."""
        frame = entries_frame(entries)
        if fmt == "csv":
            text = frame.to_csv(index=False, lineterminator="\n")
            content = text.encode("utf-8")
        elif fmt == "xlsx":
            buffer = io.BytesIO()
            with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
                frame.to_excel(writer, index=False, sheet_name=SHEET_NAME)
            content = buffer.getvalue()
        else:
            raise UnsupportedFormatError(f"Unsupported export format: {fmt}")
        logger.info("Exported %d entries as %s", len(entries), fmt)
        return ExportFile(
            filename=f"entries.{fmt}",
            media_type=_MEDIA_TYPES[fmt],
            content=content,
        )

    async def export_archive(self, entries: Sequence[Entry]) -> ExportFile:
        """Bundle each entry's label and images into a zip, one folder each.

        Entries whose labels sanitize to the same folder share it: members
        with the same name are overwritten by the later entry.
        """
        members: dict[str, bytes] = {}
        fetched: BatchResult[str] = BatchResult()
        for entry in entries:
            folder = folder_name(entry.label)
            members[f"{folder}/{LABEL_FILENAME}"] = entry.label.encode("utf-8")
            for index, ref in enumerate(entry.image_refs, start=1):
                try:
                    url = self.blob_store.resolve(ref)
                    content = await self.image_fetcher.fetch(url)
                except Exception as exc:
                    logger.exception(
                        "Error downloading image", extra={"image_ref": ref}
                    )
                    fetched.fail(ref, exc)
                    continue
                members[f"{folder}/image_{index}.{archive_extension(url)}"] = content
                fetched.succeeded.append(ref)

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for name, content in members.items():
                archive.writestr(name, content)
        logger.info(
            "Exported %d entries with %d images (%d skipped)",
            len(entries),
            len(fetched.succeeded),
            len(fetched.failed),
        )
        return ExportFile(
            filename="entries.zip",
            media_type=_MEDIA_TYPES["zip"],
            content=buffer.getvalue(),
            skipped=fetched.failed,
        )
