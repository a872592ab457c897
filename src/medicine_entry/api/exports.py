"""Download endpoints for table and archive exports."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import Response

from medicine_entry.api.dependencies import require_identity
from medicine_entry.services.exports import ExportFile, UnsupportedFormatError

if TYPE_CHECKING:
    from medicine_entry.containers import AppContainer

router = APIRouter(
    prefix="/exports", tags=["exports"], dependencies=[Depends(require_identity)]
)


@router.get("/entries.zip")
async def export_archive(request: Request) -> Response:
    """Download every loaded entry's label and images as a zip."""
    container: AppContainer = request.app.state.container
    export = await container.export_service.export_archive(
        container.entry_list.entries
    )
    return _download(export)


@router.get("/entries.{fmt}")
async def export_table(fmt: str, request: Request) -> Response:
    """Download the loaded entries as CSV or XLSX."""
    container: AppContainer = request.app.state.container
    try:
        export = container.export_service.export_table(
            container.entry_list.entries, fmt
        )
    except UnsupportedFormatError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return _download(export)


def _download(export: ExportFile) -> Response:
    headers = {
        "Content-Disposition": f'attachment; filename="{export.filename}"',
        "X-Skipped-Images": str(len(export.skipped)),
    }
    return Response(
        content=export.content, media_type=export.media_type, headers=headers
    )
