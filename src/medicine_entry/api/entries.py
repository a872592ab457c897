"""Entry list, form, delete and edit endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    Request,
    UploadFile,
    status,
)

from medicine_entry.api.dependencies import read_uploads, require_identity
from medicine_entry.api.models import (
    DraftResponse,
    EntryListResponse,
    EntryResponse,
    LabelUpdate,
    OutcomeResponse,
)
from medicine_entry.domain.auth import Identity  # noqa: TC001

if TYPE_CHECKING:
    from medicine_entry.containers import AppContainer
    from medicine_entry.domain.entries import Entry
    from medicine_entry.services.entries import EntryListState

router = APIRouter(tags=["entries"])


@router.get("/entries")
async def list_entries(
    request: Request,
    search: str = "",
    refresh: bool = False,
    identity: Identity = Depends(require_identity),
) -> EntryListResponse:
    """Return the loaded entries filtered by the search term."""
    container: AppContainer = request.app.state.container
    entry_list = container.entry_list
    if refresh:
        entry_list.refresh(identity)
    entry_list.search_term = search
    return _list_response(entry_list)


@router.post("/entries/toggle", dependencies=[Depends(require_identity)])
async def toggle_entries(request: Request) -> EntryListResponse:
    """Expand or collapse the entry list."""
    container: AppContainer = request.app.state.container
    container.entry_list.toggle_expanded()
    return _list_response(container.entry_list)


@router.post("/entries")
async def create_entry(
    request: Request,
    label: str = Form(default=""),
    files: list[UploadFile] | None = File(default=None),
    identity: Identity = Depends(require_identity),
) -> OutcomeResponse:
    """Upload the selected images and save them with the label."""
    container: AppContainer = request.app.state.container
    selected = await read_uploads(files)
    outcome = container.entry_service.submit(label, selected, identity)
    return OutcomeResponse.from_outcome(outcome)


@router.delete("/entries/{entry_id}")
async def delete_entry(
    entry_id: UUID,
    request: Request,
    confirm: bool = False,
    identity: Identity = Depends(require_identity),
) -> OutcomeResponse:
    """Delete one entry and its images once confirmed."""
    container: AppContainer = request.app.state.container
    outcome = container.entry_service.delete_entry(
        entry_id, identity, confirm=lambda _prompt: confirm
    )
    return OutcomeResponse.from_outcome(outcome)


@router.delete("/entries")
async def clear_entries(
    request: Request,
    confirm: bool = False,
    identity: Identity = Depends(require_identity),
) -> OutcomeResponse:
    """Delete every entry of the signed-in user once confirmed."""
    container: AppContainer = request.app.state.container
    outcome = container.entry_service.clear_all(
        identity, confirm=lambda _prompt: confirm
    )
    return OutcomeResponse.from_outcome(outcome)


@router.post("/entries/{entry_id}/edit", dependencies=[Depends(require_identity)])
async def begin_edit(entry_id: UUID, request: Request) -> DraftResponse:
    """Open an edit draft for a loaded entry."""
    container: AppContainer = request.app.state.container
    entry = _find_loaded(container.entry_list, entry_id)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return DraftResponse.from_draft(container.edit_flow.begin(entry))


@router.get("/edit", dependencies=[Depends(require_identity)])
async def get_draft(request: Request) -> DraftResponse | None:
    container: AppContainer = request.app.state.container
    draft = container.edit_flow.draft
    return DraftResponse.from_draft(draft) if draft else None


@router.patch("/edit", dependencies=[Depends(require_identity)])
async def update_draft(payload: LabelUpdate, request: Request) -> DraftResponse:
    container: AppContainer = request.app.state.container
    return DraftResponse.from_draft(container.edit_flow.set_label(payload.label))


@router.delete("/edit/images/{index}", dependencies=[Depends(require_identity)])
async def detach_image(index: int, request: Request) -> DraftResponse:
    """Detach an image from the draft without deleting the stored file."""
    container: AppContainer = request.app.state.container
    try:
        container.edit_flow.remove_image(index)
    except IndexError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
    return DraftResponse.from_draft(container.edit_flow.draft)


@router.post("/edit/files", dependencies=[Depends(require_identity)])
async def add_draft_files(
    request: Request,
    files: list[UploadFile] | None = File(default=None),
) -> DraftResponse:
    container: AppContainer = request.app.state.container
    selected = await read_uploads(files)
    return DraftResponse.from_draft(container.edit_flow.add_files(selected))


@router.post("/edit/save")
async def save_draft(
    request: Request, identity: Identity = Depends(require_identity)
) -> OutcomeResponse:
    """Upload new images and write the draft back to its entry."""
    container: AppContainer = request.app.state.container
    outcome = container.edit_flow.save(identity)
    return OutcomeResponse.from_outcome(outcome)


@router.post("/edit/cancel", dependencies=[Depends(require_identity)])
async def cancel_draft(request: Request) -> dict[str, str]:
    container: AppContainer = request.app.state.container
    container.edit_flow.cancel()
    return {"status": "cancelled"}


def _find_loaded(entry_list: EntryListState, entry_id: UUID) -> Entry | None:
    for entry in entry_list.entries:
        if entry.id == entry_id:
            return entry
    return None


def _list_response(entry_list: EntryListState) -> EntryListResponse:
    visible = entry_list.visible()
    cards = []
    for entry in visible:
        preview = entry_list.preview(entry)
        cards.append(
            EntryResponse(
                id=entry.id,
                label=entry.label,
                image_count=len(entry.image_refs),
                preview_urls=preview.image_urls,
                more_count=preview.more_count,
                created_at=entry.created_at,
            )
        )
    return EntryListResponse(
        entries=cards,
        total=len(entry_list.entries),
        search=entry_list.search_term,
        expanded=entry_list.expanded,
        no_matches=entry_list.no_matches,
    )
