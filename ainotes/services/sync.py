"""
Note Sync Service.

Reconciliation engine between the local note cache and the remote note
store. Every mutation is written to the local cache first; the remote call
follows, and its outcome is reconciled back into the cache (temporary ids
promoted, sync flags set). Remote failures never reach the caller: the
local cache stays the source of truth and the note stays unsynced.

Cache read-modify-write sequences run under one asyncio lock so concurrent
operations never lose each other's writes. Remote calls run outside it.

There is no background retry. A note whose remote write failed stays
unsynced until the next operation on it.

Usage:
    service = NoteSyncService(cache, SyncConfig(remote_store=store))
    note = await service.create("u1", NoteCreate(title="A", content="B"))
    await service.update(note.id, NoteUpdate(content="B2"))
    notes = await service.fetch_active("u1")
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from ainotes.core.logging import log_with_source
from ainotes.core.utils import touch_timestamp, utc_now
from ainotes.repositories.local import (
    LocalNoteCache,
    find_index,
    replace_user_slice,
    user_slice,
)
from ainotes.repositories.remote import (
    ACTIVE_ORDER,
    ARCHIVED_ORDER,
    NoteFilter,
    RemoteNoteStore,
)
from ainotes.schemas.note import (
    Note,
    NoteCreate,
    NoteId,
    NoteUpdate,
    PersistedId,
    TemporaryId,
)
from ainotes.services.base import BaseService

_MUTABLE_FIELDS = ("title", "content", "is_pinned", "is_archived", "color")


class SyncMode(str, Enum):
    """Whether the engine may call the remote store."""

    ONLINE = "online"
    OFFLINE = "offline"


@dataclass(frozen=True)
class SyncConfig:
    """Explicit engine configuration, built once at startup."""

    remote_store: RemoteNoteStore | None
    mode: SyncMode = SyncMode.ONLINE

    @property
    def offline(self) -> bool:
        """True when every operation must stay on the local cache."""
        return (
            self.mode is SyncMode.OFFLINE
            or self.remote_store is None
            or self.remote_store.is_offline_mode()
        )


def _mutable_state(note: Note) -> dict[str, Any]:
    return {name: getattr(note, name) for name in _MUTABLE_FIELDS}


class NoteSyncService(BaseService):
    """
    Service for offline-first note persistence.

    Operations:
    - fetch_active / fetch_archived: listings, merged with the remote when reachable
    - create / update / delete: optimistic local write, then remote confirmation
    - set_archived / toggle_pin: update shortcuts used by the presentation layer

    After each listing, `listing_from_device` tells whether the result came
    from the local cache (offline, or the remote did not answer) rather
    than the remote.
    """

    def __init__(self, cache: LocalNoteCache, config: SyncConfig) -> None:
        super().__init__()
        self.cache = cache
        self.config = config
        self._cache_lock = asyncio.Lock()
        self.listing_from_device = False

    @property
    def offline(self) -> bool:
        return self.config.offline

    async def close(self) -> None:
        """Release the remote store's network resources."""
        if self.config.remote_store is not None:
            await self.config.remote_store.close()

    # -------------------------------------------------------------------------
    # Listings
    # -------------------------------------------------------------------------

    async def fetch_active(self, user_id: str) -> list[Note]:
        """
        List a user's unarchived notes.

        Offline or with the remote unreachable, the cached notes are returned
        as-is. Otherwise the remote listing wins, preceded by local notes that
        have never reached the remote, and the user's active slice of the
        cache is rewritten to match.

        Args:
            user_id: Owner identity

        Returns:
            Pending local notes first, then remote notes pinned-first and
            most recently updated first
        """
        async with self._cache_lock:
            local_active = user_slice(self.cache.read_all(), user_id, archived=False)

        if self.offline:
            self.listing_from_device = True
            return local_active

        store = self.config.remote_store
        outcome = await self._run_remote(
            "query_active_notes",
            lambda: store.query_notes(user_id, NoteFilter(is_archived=False), ACTIVE_ORDER),
        )
        if not outcome.ok:
            log_with_source(
                self._logger, "sync", "warning",
                "Could not reach cloud, showing device copy", user_id=user_id,
            )
            self.listing_from_device = True
            return local_active

        self.listing_from_device = False
        return await self._reconcile_active(user_id, outcome.value or [])

    async def _reconcile_active(self, user_id: str, remote_notes: list[Note]) -> list[Note]:
        cloud_active = [n.model_copy(update={"is_synced": True}) for n in remote_notes]
        cloud_ids = {n.id for n in cloud_active}

        async with self._cache_lock:
            notes = self.cache.read_all()
            pending = [
                n for n in user_slice(notes, user_id, archived=False)
                if n.id.is_temporary and n.id not in cloud_ids
            ]
            merged = [*pending, *cloud_active]
            self.cache.write_all(replace_user_slice(notes, user_id, False, merged))

        self._log_debug(
            "Active notes merged",
            user_id=user_id, pending=len(pending), remote=len(cloud_active),
        )
        return merged

    async def fetch_archived(self, user_id: str) -> list[Note]:
        """
        List a user's archived notes.

        Archived notes are not merged with pending local work; on any remote
        failure the cached archived notes are returned.
        """
        if not self.offline:
            store = self.config.remote_store
            outcome = await self._run_remote(
                "query_archived_notes",
                lambda: store.query_notes(user_id, NoteFilter(is_archived=True), ARCHIVED_ORDER),
            )
            if outcome.ok:
                self.listing_from_device = False
                return [n.model_copy(update={"is_synced": True}) for n in outcome.value or []]

        self.listing_from_device = True
        async with self._cache_lock:
            return user_slice(self.cache.read_all(), user_id, archived=True)

    async def pending(self, user_id: str) -> list[Note]:
        """A user's cached notes that are not confirmed by the remote."""
        async with self._cache_lock:
            notes = self.cache.read_all()
        return [n for n in notes if n.user_id == user_id and not n.is_synced]

    async def get_cached(self, note_id: NoteId) -> Note | None:
        """Look a note up in the local cache."""
        async with self._cache_lock:
            notes = self.cache.read_all()
        index = find_index(notes, note_id)
        return None if index is None else notes[index]

    async def resolve(self, user_id: str, display_id: str) -> Note | None:
        """Find one of a user's cached notes by the string form of its id."""
        async with self._cache_lock:
            notes = self.cache.read_all()
        for note in notes:
            if note.user_id == user_id and str(note.id) == display_id:
                return note
        return None

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    async def create(self, user_id: str, data: NoteCreate) -> Note | None:
        """
        Create a note.

        The note is cached with a temporary id before the remote insert is
        attempted. If the insert succeeds the cached entry is replaced by the
        remote note; otherwise the temporary note remains the durable record.

        Args:
            user_id: Owner identity
            data: Title, content, pin and color

        Returns:
            The remote note on success, the temporary note on failure or
            offline, None if the note was blank
        """
        if data.is_blank:
            self._log_debug("Blank note discarded", user_id=user_id)
            return None

        now = utc_now()
        note = Note(
            id=TemporaryId(),
            user_id=user_id,
            title=data.title,
            content=data.content,
            is_pinned=data.is_pinned,
            is_archived=False,
            created_at=now,
            updated_at=now,
            color=data.color,
            is_synced=False,
        )

        async with self._cache_lock:
            self.cache.write_all([note, *self.cache.read_all()])

        self._log_operation("Note created locally", note_id=str(note.id), user_id=user_id)

        if self.offline:
            return note

        store = self.config.remote_store
        outcome = await self._run_remote(
            "insert_note", lambda: store.insert_note(user_id, data),
        )
        if not outcome.ok:
            log_with_source(
                self._logger, "sync", "error",
                "Cloud save failed. Note is on this device only.",
                note_id=str(note.id),
            )
            return note

        return await self._reconcile_insert(note, outcome.value)

    async def _reconcile_insert(self, temp_note: Note, remote_note: Note) -> Note | None:
        """
        Promote a temporary note to its remote identity.

        Three cases, decided on the current cache entry:
        - unchanged since creation: replaced by the synced remote note
        - edited while the insert was in flight: keeps the local fields under
          the new id and pushes them to the remote
        - deleted while the insert was in flight: the new remote row is
          deleted as well

        A listing fetched while the insert was in flight may already have
        cached the remote row under its new id; that copy is dropped so the
        id stays unique.
        """
        cloud_note = remote_note.model_copy(update={"is_synced": True})

        promoted: Note | None = None
        async with self._cache_lock:
            notes = self.cache.read_all()
            index = find_index(notes, temp_note.id)
            if index is not None:
                current = notes[index]
                if _mutable_state(current) == _mutable_state(temp_note):
                    promoted = cloud_note
                else:
                    promoted = current.model_copy(update={
                        "id": cloud_note.id,
                        "created_at": cloud_note.created_at,
                        "is_synced": False,
                    })
                notes[index] = promoted
            remaining = [
                n for i, n in enumerate(notes)
                if i == index or n.id != cloud_note.id
            ]
            if promoted is not None or len(remaining) != len(notes):
                self.cache.write_all(remaining)

        if promoted is None:
            self._log_operation(
                "Note deleted before its insert completed",
                note_id=str(cloud_note.id),
            )
            await self._delete_remote(cloud_note.id)
            return None

        self._log_operation(
            "Note promoted", temp_id=str(temp_note.id), note_id=str(cloud_note.id),
        )
        if promoted.is_synced:
            return promoted

        await self._push_update(promoted.id, _mutable_state(promoted), promoted.updated_at)
        return await self.get_cached(promoted.id) or promoted

    # -------------------------------------------------------------------------
    # Update
    # -------------------------------------------------------------------------

    async def update(self, note_id: NoteId, data: NoteUpdate) -> None:
        """
        Update a note.

        The cached entry gets the changed fields, a fresh updated_at and
        is_synced=False before anything else. Notes with a temporary id are
        not sent to the remote; the others are, and are marked synced once the
        remote confirms the state that was sent.

        Args:
            note_id: Identity of the note
            data: Fields to change; an empty set still refreshes updated_at
        """
        changes = data.changes()

        async with self._cache_lock:
            notes = self.cache.read_all()
            index = find_index(notes, note_id)
            if index is None:
                updated_at = utc_now()
            else:
                current = notes[index]
                updated_at = touch_timestamp(current.updated_at)
                notes[index] = current.model_copy(
                    update={**changes, "updated_at": updated_at, "is_synced": False},
                )
                self.cache.write_all(notes)

        self._log_operation(
            "Note updated locally", note_id=str(note_id), fields=list(changes.keys()),
        )

        if note_id.is_temporary or self.offline:
            return

        await self._push_update(note_id, changes, updated_at)

    async def _push_update(
        self,
        note_id: PersistedId,
        changes: dict[str, Any],
        updated_at: datetime,
    ) -> None:
        store = self.config.remote_store
        outcome = await self._run_remote(
            "update_note",
            lambda: store.update_note(note_id.value, {**changes, "updated_at": updated_at}),
        )
        if not outcome.ok:
            log_with_source(
                self._logger, "sync", "warning", "Cloud update failed", note_id=str(note_id),
            )
            return
        await self._reconcile_update(note_id, updated_at)

    async def _reconcile_update(self, note_id: NoteId, confirmed_at: datetime) -> None:
        """Mark the cached note synced if it still holds the state that was sent."""
        async with self._cache_lock:
            notes = self.cache.read_all()
            index = find_index(notes, note_id)
            if index is None or notes[index].updated_at != confirmed_at:
                return
            notes[index] = notes[index].model_copy(update={"is_synced": True})
            self.cache.write_all(notes)

    async def set_archived(self, note_id: NoteId, archived: bool) -> None:
        """Move a note into or out of the archive."""
        await self.update(note_id, NoteUpdate(is_archived=archived))

    async def toggle_pin(self, note_id: NoteId) -> bool | None:
        """
        Flip a note's pin.

        Returns:
            The new pin state, or None if the note is not cached
        """
        note = await self.get_cached(note_id)
        if note is None:
            return None
        pinned = not note.is_pinned
        await self.update(note_id, NoteUpdate(is_pinned=pinned))
        return pinned

    # -------------------------------------------------------------------------
    # Delete
    # -------------------------------------------------------------------------

    async def delete(self, note_id: NoteId) -> None:
        """
        Delete a note.

        The cached entry is removed unconditionally. A remote delete follows
        for persisted notes; its failure is logged and otherwise ignored.
        """
        async with self._cache_lock:
            notes = self.cache.read_all()
            self.cache.write_all([n for n in notes if n.id != note_id])

        self._log_operation("Note deleted locally", note_id=str(note_id))

        if note_id.is_temporary or self.offline:
            return

        await self._delete_remote(note_id)

    async def _delete_remote(self, note_id: PersistedId) -> None:
        store = self.config.remote_store
        outcome = await self._run_remote(
            "delete_note", lambda: store.delete_note(note_id.value),
        )
        if not outcome.ok:
            log_with_source(
                self._logger, "sync", "error", "Delete failed on cloud", note_id=str(note_id),
            )
