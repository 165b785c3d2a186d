"""
Remote Note Store.

The capability the sync engine needs from a hosted note table: query a
user's notes with a filter and sort order, insert, update and delete by
remote id. Implementations raise RemoteUnreachableError for every failure
(transport errors, error responses, malformed payloads) and nothing else.

Usage:
    from ainotes.repositories.remote import ACTIVE_ORDER, NoteFilter

    notes = await store.query_notes("u1", NoteFilter(is_archived=False), ACTIVE_ORDER)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from ainotes.schemas.note import Note, NoteCreate


@dataclass(frozen=True)
class NoteFilter:
    """Row filter applied on top of the user scope."""

    is_archived: bool


@dataclass(frozen=True)
class SortOrder:
    """One ordering term."""

    field: str
    ascending: bool = False


ACTIVE_ORDER: list[SortOrder] = [
    SortOrder("is_pinned", ascending=False),
    SortOrder("updated_at", ascending=False),
]

ARCHIVED_ORDER: list[SortOrder] = [
    SortOrder("updated_at", ascending=False),
]


class RemoteNoteStore(ABC):
    """
    Base class for remote note stores.

    Subclasses implement the four note operations; is_offline_mode and
    close have usable defaults.
    """

    @abstractmethod
    async def query_notes(
        self,
        user_id: str,
        note_filter: NoteFilter,
        sort: list[SortOrder],
    ) -> list[Note]:
        """
        Fetch a user's notes.

        Returns:
            Notes with PersistedId identities, in the requested order

        Raises:
            RemoteUnreachableError: On any failure
        """

    @abstractmethod
    async def insert_note(self, user_id: str, data: NoteCreate) -> Note:
        """
        Insert a new, unarchived note.

        Returns:
            The stored note carrying its remote-assigned id

        Raises:
            RemoteUnreachableError: On any failure
        """

    @abstractmethod
    async def update_note(self, remote_id: str, fields: dict[str, Any]) -> None:
        """
        Apply a partial update to one note.

        Raises:
            RemoteUnreachableError: On any failure
        """

    @abstractmethod
    async def delete_note(self, remote_id: str) -> None:
        """
        Delete one note.

        Raises:
            RemoteUnreachableError: On any failure
        """

    def is_offline_mode(self) -> bool:
        """True when the store is not configured well enough to be called."""
        return False

    async def close(self) -> None:
        """Release network resources."""
