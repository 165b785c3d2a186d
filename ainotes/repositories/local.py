"""
Local Note Cache.

Durable on-device storage of every user's notes as a single JSON array.
The whole collection is read and replaced at once; partitioning by user
happens in memory with the slice helpers below.

Reads never fail: a missing, unreadable, or corrupt file is an empty cache.
Writes are atomic: the new collection is written to a temporary file in the
same directory and moved over the old one.
"""

import contextlib
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ainotes.core.logging import get_logger, log_with_source
from ainotes.schemas.note import Note, NoteId

logger = get_logger(__name__)

_NOTES_ADAPTER = TypeAdapter(list[Note])


class LocalNoteCache:
    """
    File-backed note cache.

    Usage:
        cache = LocalNoteCache(Path("data/notes_cache.json"))
        notes = cache.read_all()
        cache.write_all([new_note, *notes])
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def read_all(self) -> list[Note]:
        """Every cached note across all users, or [] if nothing usable is stored."""
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return []
        except OSError as e:
            log_with_source(
                logger, "cache", "warning", "Note cache unreadable, treating as empty",
                path=str(self.path), error=str(e),
            )
            return []

        if not raw.strip():
            return []

        try:
            return _NOTES_ADAPTER.validate_json(raw)
        except PydanticValidationError as e:
            log_with_source(
                logger, "cache", "warning", "Note cache corrupt, treating as empty",
                path=str(self.path), error_count=e.error_count(),
            )
            return []

    def write_all(self, notes: Iterable[Note]) -> None:
        """Replace the entire cached collection."""
        payload = _NOTES_ADAPTER.dump_json(list(notes), indent=2)
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_name)
            raise


def user_slice(notes: Iterable[Note], user_id: str, archived: bool) -> list[Note]:
    """Notes of one user with the given archive state, in cache order."""
    return [n for n in notes if n.user_id == user_id and n.is_archived == archived]


def replace_user_slice(
    notes: Iterable[Note],
    user_id: str,
    archived: bool,
    replacement: list[Note],
) -> list[Note]:
    """
    Swap one user's active or archived slice for `replacement`.

    The replacement comes first; every other note (other users, and this
    user's notes in the other archive state) follows unchanged and in order.
    A note of this user whose id appears in the replacement is dropped from
    the other slice so each id stays unique.
    """
    replaced_ids = {n.id for n in replacement}
    kept = [
        n for n in notes
        if n.user_id != user_id
        or (n.is_archived != archived and n.id not in replaced_ids)
    ]
    return [*replacement, *kept]


def find_index(notes: list[Note], note_id: NoteId) -> int | None:
    """Position of the note with `note_id`, or None."""
    for index, note in enumerate(notes):
        if note.id == note_id:
            return index
    return None
