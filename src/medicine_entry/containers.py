"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from medicine_entry.adapters.image_fetcher import HttpxImageFetcher
from medicine_entry.adapters.supabase_auth_client import SupabaseAuthClient
from medicine_entry.adapters.supabase_blob_store import SupabaseBlobStore
from medicine_entry.adapters.supabase_entry_repository import (
    SupabaseEntryRepository,
)
from medicine_entry.config import Settings
from medicine_entry.services.auth import SessionManager
from medicine_entry.services.editing import EditFlow
from medicine_entry.services.entries import (
    BlobStore,
    EntryListState,
    EntryRepository,
    EntryService,
)
from medicine_entry.services.exports import ExportService, ImageFetcher
from medicine_entry.services.notifications import NotificationCenter


@dataclass
class AppContainer:
    """Holds application-wide dependencies and the single session context."""

    settings: Settings
    notifications: NotificationCenter
    session_manager: SessionManager
    entry_list: EntryListState
    entry_service: EntryService
    edit_flow: EditFlow
    export_service: ExportService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_anon_key
    )
    repository = SupabaseEntryRepository(
        supabase_client, table_name=resolved_settings.entries_table
    )
    blob_store = SupabaseBlobStore(
        supabase_client, bucket=resolved_settings.storage_bucket
    )
    image_fetcher = HttpxImageFetcher.create(
        timeout=resolved_settings.image_fetch_timeout_seconds
    )
    notifications = NotificationCenter(
        ttl_seconds=resolved_settings.notification_ttl_seconds
    )
    session_manager = SessionManager(SupabaseAuthClient(supabase_client), notifications)

    async def close_resources() -> None:
        session_manager.close()
        await image_fetcher.close()

    return wire_container(
        settings=resolved_settings,
        notifications=notifications,
        session_manager=session_manager,
        repository=repository,
        blob_store=blob_store,
        image_fetcher=image_fetcher,
        close_resources=close_resources,
    )


def wire_container(  # noqa: PLR0913
    *,
    settings: Settings,
    notifications: NotificationCenter,
    session_manager: SessionManager,
    repository: EntryRepository,
    blob_store: BlobStore,
    image_fetcher: ImageFetcher,
    close_resources: Callable[[], Awaitable[None]],
) -> AppContainer:
    """Build the services around the given collaborators."""
    debug_errors = settings.is_local
    entry_list = EntryListState(repository=repository, blob_store=blob_store)
    session_manager.subscribe(entry_list.on_identity_change)
    entry_service = EntryService(
        repository=repository,
        blob_store=blob_store,
        list_state=entry_list,
        notifications=notifications,
        debug_errors=debug_errors,
    )
    edit_flow = EditFlow(
        repository=repository,
        blob_store=blob_store,
        list_state=entry_list,
        notifications=notifications,
        debug_errors=debug_errors,
    )
    session_manager.subscribe(lambda _identity: edit_flow.cancel())
    export_service = ExportService(blob_store=blob_store, image_fetcher=image_fetcher)
    return AppContainer(
        settings=settings,
        notifications=notifications,
        session_manager=session_manager,
        entry_list=entry_list,
        entry_service=entry_service,
        edit_flow=edit_flow,
        export_service=export_service,
        close_resources=close_resources,
    )
