"""Tests for Supabase adapter implementations."""

from dataclasses import dataclass, field
from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest

from medicine_entry.adapters.supabase_auth_client import SupabaseAuthClient
from medicine_entry.adapters.supabase_blob_store import SupabaseBlobStore
from medicine_entry.adapters.supabase_entry_repository import (
    SupabaseEntryRepository,
)

PUBLIC_PREFIX = "https://example.supabase.co/storage/v1/object/public"


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "insert": [], "update": [], "delete": []}
    )
    last_payload: object | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    last_order: tuple[str, bool] | None = None
    actions: list[str] = field(default_factory=list)

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.last_payload = payload
        return self

    def update(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "update"
        self.last_payload = payload
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, column: str, desc: bool = False) -> "FakeTable":
        self.last_order = (column, desc)
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        self.actions.append(action)
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeBucket:
    name: str
    uploads: list[tuple[str, bytes, dict[str, str]]] = field(default_factory=list)
    removed: list[list[str]] = field(default_factory=list)

    def upload(self, path: str, file: bytes, file_options: dict[str, str]) -> None:
        self.uploads.append((path, file, file_options))

    def remove(self, paths: list[str]) -> None:
        self.removed.append(paths)

    def get_public_url(self, path: str) -> str:
        return f"{PUBLIC_PREFIX}/{self.name}/{path}"


@dataclass
class FakeStorage:
    buckets: dict[str, FakeBucket] = field(default_factory=dict)

    def from_(self, name: str) -> FakeBucket:
        if name not in self.buckets:
            self.buckets[name] = FakeBucket(name=name)
        return self.buckets[name]


@dataclass
class FakeAuth:
    session: object | None = None
    callbacks: list[object] = field(default_factory=list)
    credentials: list[dict[str, str]] = field(default_factory=list)
    signed_out: bool = False

    def get_session(self) -> object | None:
        return self.session

    def on_auth_state_change(self, callback):  # type: ignore[no-untyped-def]
        self.callbacks.append(callback)
        return SimpleNamespace(unsubscribe=lambda: self.callbacks.remove(callback))

    def sign_up(self, credentials: dict[str, str]) -> object:
        self.credentials.append(credentials)
        return SimpleNamespace(session=None, user=None)

    def sign_in_with_password(self, credentials: dict[str, str]) -> object:
        self.credentials.append(credentials)
        if credentials["password"] != "secret":
            raise RuntimeError("Invalid login credentials")
        return SimpleNamespace(session=self.session)

    def sign_out(self) -> None:
        self.signed_out = True


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)
    storage: FakeStorage = field(default_factory=FakeStorage)
    auth: FakeAuth = field(default_factory=FakeAuth)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def _row(label: str, refs: list[str] | None, created_at: str) -> dict[str, object]:
    return {
        "id": str(uuid4()),
        "user_id": str(uuid4()),
        "medicine_name": label,
        "image_urls": refs,
        "created_at": created_at,
    }


def test_entry_repository_lists_newest_first_for_user() -> None:
    client = FakeSupabaseClient()
    table = client.table("entries")
    table.queue(
        "select",
        [
            _row("Ibuprofen", ["u1/a.png", "u1/b.png"], "2024-03-02T10:00:00+00:00"),
            _row("Legacy", None, "2024-03-01T10:00:00.123456+00:00"),
        ],
    )
    user_id = uuid4()

    entries = SupabaseEntryRepository(client).list_entries(user_id)

    assert [e.label for e in entries] == ["Ibuprofen", "Legacy"]
    assert entries[0].image_refs == ("u1/a.png", "u1/b.png")
    assert entries[1].image_refs == ()
    assert table.last_filters == [("user_id", str(user_id))]
    assert table.last_order == ("created_at", True)


def test_entry_repository_create_and_get() -> None:
    client = FakeSupabaseClient()
    table = client.table("entries")
    row = _row("Aspirin", ["u/a.png"], "2024-03-02T10:00:00+00:00")
    table.queue("insert", [row])
    table.queue("select", [row])
    repository = SupabaseEntryRepository(client)

    user_id = UUID(str(row["user_id"]))
    created = repository.create_entry(user_id, "Aspirin", ["u/a.png"])
    fetched = repository.get_entry(created.id)

    assert table.last_payload == {
        "user_id": row["user_id"],
        "medicine_name": "Aspirin",
        "image_urls": ["u/a.png"],
    }
    assert fetched == created


def test_entry_repository_create_without_row_raises() -> None:
    repository = SupabaseEntryRepository(FakeSupabaseClient())

    with pytest.raises(RuntimeError):
        repository.create_entry(uuid4(), "Aspirin", [])


def test_entry_repository_get_missing_returns_none() -> None:
    assert SupabaseEntryRepository(FakeSupabaseClient()).get_entry(uuid4()) is None


def test_entry_repository_update_and_deletes() -> None:
    client = FakeSupabaseClient()
    table = client.table("medicines")
    repository = SupabaseEntryRepository(client, table_name="medicines")
    entry_id = uuid4()
    user_id = uuid4()

    repository.update_entry(entry_id, "Zinc", ("u/a.png",))
    assert table.last_payload == {"medicine_name": "Zinc", "image_urls": ["u/a.png"]}

    repository.delete_entry(entry_id)
    repository.delete_entries_for_user(user_id)

    assert table.actions == ["update", "delete", "delete"]
    assert table.last_filters == [
        ("id", str(entry_id)),
        ("id", str(entry_id)),
        ("user_id", str(user_id)),
    ]


def test_blob_store_upload_sets_content_type() -> None:
    client = FakeSupabaseClient()
    store = SupabaseBlobStore(client)

    store.upload("u/a.png", b"a", None)
    store.upload("u/b", b"b", "image/heic")

    uploads = client.storage.from_("images").uploads
    assert uploads[0] == ("u/a.png", b"a", {"content-type": "image/png"})
    assert uploads[1][2] == {"content-type": "image/heic"}


def test_blob_store_resolves_paths_and_passes_urls_through() -> None:
    store = SupabaseBlobStore(FakeSupabaseClient())
    legacy = f"{PUBLIC_PREFIX}/images/u/old.jpg"

    assert store.resolve("u/a.png") == f"{PUBLIC_PREFIX}/images/u/a.png"
    assert store.resolve(legacy) == legacy


def test_blob_store_removes_legacy_urls_by_path() -> None:
    client = FakeSupabaseClient()
    store = SupabaseBlobStore(client, bucket="images")

    store.remove(["u/a.png", f"{PUBLIC_PREFIX}/images/u/old%20one.jpg?t=1"])

    assert client.storage.from_("images").removed == [["u/a.png", "u/old one.jpg"]]


def test_auth_client_maps_sessions_to_identities() -> None:
    client = FakeSupabaseClient()
    user_id = uuid4()
    client.auth.session = SimpleNamespace(
        user=SimpleNamespace(id=str(user_id), email="a@example.com")
    )
    auth = SupabaseAuthClient(client)

    identity = auth.get_session()
    signed_in = auth.sign_in("a@example.com", "secret")

    assert identity is not None
    assert identity.user_id == user_id
    assert signed_in == identity
    assert auth.sign_up("b@example.com", "pw") is None


def test_auth_client_forwards_state_changes() -> None:
    client = FakeSupabaseClient()
    auth = SupabaseAuthClient(client)
    seen = []

    unsubscribe = auth.on_session_change(seen.append)
    callback = client.auth.callbacks[0]
    callback("SIGNED_OUT", None)
    unsubscribe()

    assert seen == [None]
    assert client.auth.callbacks == []


def test_auth_client_propagates_provider_errors() -> None:
    auth = SupabaseAuthClient(FakeSupabaseClient())

    with pytest.raises(RuntimeError):
        auth.sign_in("a@example.com", "wrong")
    auth.sign_out()
