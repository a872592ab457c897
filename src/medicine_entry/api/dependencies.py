"""Shared FastAPI dependencies."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request, UploadFile

from medicine_entry.domain.auth import Identity  # noqa: TC001
from medicine_entry.domain.entries import SelectedFile

if TYPE_CHECKING:
    from medicine_entry.containers import AppContainer


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


async def require_identity(request: Request) -> Identity:
    """Return the signed-in identity; raises NotAuthenticatedError otherwise."""
    return get_container(request).session_manager.require()


async def read_uploads(files: list[UploadFile] | None) -> list[SelectedFile]:
    """Read uploaded form files into memory, keeping their order."""
    selected: list[SelectedFile] = []
    for upload in files or []:
        selected.append(
            SelectedFile(
                filename=upload.filename or "",
                content=await upload.read(),
                content_type=upload.content_type,
            )
        )
    return selected
