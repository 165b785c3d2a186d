"""
Unit Test Fixtures.

Fixtures for unit tests. The remote note store is replaced by an in-memory
fake; the local cache writes to a pytest tmp_path. Nothing touches the
network.
"""

import asyncio
from collections.abc import Callable
from datetime import datetime
from typing import Any

import pytest

from ainotes.core.exceptions import RemoteUnreachableError
from ainotes.core.utils import utc_now
from ainotes.repositories.local import LocalNoteCache
from ainotes.repositories.remote import NoteFilter, RemoteNoteStore, SortOrder
from ainotes.schemas.note import Note, NoteCreate, NoteId, PersistedId, TemporaryId
from ainotes.services.sync import NoteSyncService, SyncConfig


# =============================================================================
# Remote Store Fake
# =============================================================================


class FakeRemoteStore(RemoteNoteStore):
    """
    In-memory RemoteNoteStore.

    Attributes:
        rows: Stored notes keyed by remote id
        calls: (operation, *args) tuples in call order
        reachable: When False every call raises RemoteUnreachableError
        insert_gate: When set, insert_note stores the row, then waits on it
            before answering
    """

    def __init__(self) -> None:
        self.rows: dict[str, Note] = {}
        self.calls: list[tuple[Any, ...]] = []
        self.reachable = True
        self.offline_mode = False
        self.insert_gate: asyncio.Event | None = None
        self.closed = False
        self._next_id = 100

    def seed(self, note: Note) -> None:
        self.rows[note.id.value] = note

    def calls_for(self, operation: str) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == operation]

    def _record(self, *call: Any) -> None:
        self.calls.append(call)
        if not self.reachable:
            raise RemoteUnreachableError()

    async def query_notes(
        self,
        user_id: str,
        note_filter: NoteFilter,
        sort: list[SortOrder],
    ) -> list[Note]:
        self._record("query", user_id, note_filter.is_archived)
        notes = [
            n for n in self.rows.values()
            if n.user_id == user_id and n.is_archived == note_filter.is_archived
        ]
        for term in reversed(sort):
            notes.sort(key=lambda n: getattr(n, term.field), reverse=not term.ascending)
        return [n.model_copy(update={"is_synced": False}) for n in notes]

    async def insert_note(self, user_id: str, data: NoteCreate) -> Note:
        self._record("insert", user_id, data.title)
        self._next_id += 1
        now = utc_now()
        note = Note(
            id=PersistedId(value=str(self._next_id)),
            user_id=user_id,
            title=data.title,
            content=data.content,
            is_pinned=data.is_pinned,
            is_archived=False,
            created_at=now,
            updated_at=now,
            color=data.color,
        )
        self.rows[note.id.value] = note
        if self.insert_gate is not None:
            await self.insert_gate.wait()
        return note

    async def update_note(self, remote_id: str, fields: dict[str, Any]) -> None:
        self._record("update", remote_id, dict(fields))
        if remote_id in self.rows:
            self.rows[remote_id] = self.rows[remote_id].model_copy(update=fields)

    async def delete_note(self, remote_id: str) -> None:
        self._record("delete", remote_id)
        self.rows.pop(remote_id, None)

    def is_offline_mode(self) -> bool:
        return self.offline_mode

    async def close(self) -> None:
        self.closed = True


# =============================================================================
# Note Fixtures
# =============================================================================


@pytest.fixture
def make_note() -> Callable[..., Note]:
    """
    Factory for notes with sensible defaults.

    Usage:
        def test_something(make_note):
            note = make_note(remote_id="1", title="A")
            draft = make_note(title="B", is_synced=False)
    """

    def factory(
        remote_id: str | None = None,
        user_id: str = "u1",
        title: str = "Title",
        content: str = "Content",
        is_pinned: bool = False,
        is_archived: bool = False,
        updated_at: datetime = datetime(2024, 1, 1, 12, 0),
        is_synced: bool | None = None,
        note_id: NoteId | None = None,
    ) -> Note:
        if note_id is None:
            note_id = PersistedId(value=remote_id) if remote_id else TemporaryId()
        if is_synced is None:
            is_synced = not note_id.is_temporary
        return Note(
            id=note_id,
            user_id=user_id,
            title=title,
            content=content,
            is_pinned=is_pinned,
            is_archived=is_archived,
            created_at=datetime(2024, 1, 1, 0, 0),
            updated_at=updated_at,
            is_synced=is_synced,
        )

    return factory


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def cache(tmp_path) -> LocalNoteCache:
    """Empty local cache in a temporary directory."""
    return LocalNoteCache(tmp_path / "notes_cache.json")


@pytest.fixture
def store() -> FakeRemoteStore:
    """Reachable in-memory remote store."""
    return FakeRemoteStore()


@pytest.fixture
def service(cache: LocalNoteCache, store: FakeRemoteStore) -> NoteSyncService:
    """Online sync engine over the temporary cache and fake store."""
    return NoteSyncService(cache, SyncConfig(remote_store=store))
