"""Unique storage keys for uploaded images."""

import random
import time
from collections.abc import Callable
from uuid import UUID, uuid4


def new_storage_key(uuid_factory: Callable[[], UUID] = uuid4) -> str:
    """Return a globally unique key for a blob.

    Uses a random UUID when the OS can supply randomness, otherwise falls back
    to a millisecond timestamp with a random suffix.
    """
    try:
        return uuid_factory().hex
    except NotImplementedError:
        return f"{int(time.time() * 1000)}-{random.randrange(10**12):012d}"


def file_extension(filename: str) -> str | None:
    """Return the text after the last dot of a filename, if any."""
    _, dot, ext = filename.rpartition(".")
    if not dot or not ext:
        return None
    return ext


def blob_path(namespace: str, filename: str, key: str | None = None) -> str:
    """Build `{namespace}/{key}.{ext}` for an uploaded file."""
    resolved_key = key or new_storage_key()
    ext = file_extension(filename)
    name = f"{resolved_key}.{ext}" if ext else resolved_key
    return f"{namespace}/{name}"
