"""Pydantic models for the HTTP API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from medicine_entry.domain.auth import AuthResult, Identity
from medicine_entry.domain.entries import EntryDraft, ItemFailure
from medicine_entry.domain.outcomes import Notification, OperationOutcome


class CredentialsRequest(BaseModel):
    """Email and password sign-in payload."""

    email: str
    password: str = Field(min_length=1)


class LabelUpdate(BaseModel):
    """New label for the entry being edited."""

    label: str


class IdentityResponse(BaseModel):
    user_id: UUID
    email: str | None = None

    @classmethod
    def from_identity(cls, identity: Identity) -> "IdentityResponse":
        return cls(user_id=identity.user_id, email=identity.email)


class SessionResponse(BaseModel):
    user: IdentityResponse | None = None


class AuthResponse(BaseModel):
    ok: bool
    message: str | None = None
    user: IdentityResponse | None = None

    @classmethod
    def from_result(
        cls, result: AuthResult, identity: Identity | None
    ) -> "AuthResponse":
        return cls(
            ok=result.ok,
            message=result.message,
            user=IdentityResponse.from_identity(identity) if identity else None,
        )


class EntryResponse(BaseModel):
    """An entry card with up to three preview images."""

    id: UUID
    label: str
    image_count: int
    preview_urls: list[str]
    more_count: int
    created_at: datetime


class EntryListResponse(BaseModel):
    entries: list[EntryResponse]
    total: int
    search: str
    expanded: bool
    no_matches: bool


class FailureResponse(BaseModel):
    item: str
    reason: str

    @classmethod
    def from_failure(cls, failure: ItemFailure) -> "FailureResponse":
        return cls(item=failure.item, reason=failure.reason)


class OutcomeResponse(BaseModel):
    """Result of a create, update or delete action."""

    status: str
    ok: bool
    entry_id: UUID | None = None
    uploaded: list[str] = Field(default_factory=list)
    failed_uploads: list[FailureResponse] = Field(default_factory=list)
    failed_removals: list[FailureResponse] = Field(default_factory=list)

    @classmethod
    def from_outcome(cls, outcome: OperationOutcome) -> "OutcomeResponse":
        return cls(
            status=outcome.status,
            ok=outcome.succeeded,
            entry_id=outcome.entry.id if outcome.entry else None,
            uploaded=list(outcome.uploads.succeeded),
            failed_uploads=[
                FailureResponse.from_failure(f) for f in outcome.uploads.failed
            ],
            failed_removals=[
                FailureResponse.from_failure(f) for f in outcome.removals.failed
            ],
        )


class DraftResponse(BaseModel):
    """The entry currently being edited."""

    entry_id: UUID
    label: str
    image_refs: list[str]
    pending_files: list[str]

    @classmethod
    def from_draft(cls, draft: EntryDraft) -> "DraftResponse":
        return cls(
            entry_id=draft.entry_id,
            label=draft.label,
            image_refs=list(draft.image_refs),
            pending_files=[selected.filename for selected in draft.pending_files],
        )


class NotificationResponse(BaseModel):
    kind: str
    message: str
    expires_at: datetime

    @classmethod
    def from_notification(cls, item: Notification) -> "NotificationResponse":
        return cls(kind=item.kind, message=item.message, expires_at=item.expires_at)
