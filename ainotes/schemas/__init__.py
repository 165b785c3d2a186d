# Pydantic schemas package
from ainotes.schemas.note import (
    Note,
    NoteCreate,
    NoteId,
    NoteUpdate,
    PersistedId,
    TemporaryId,
)

__all__ = [
    "Note",
    "NoteCreate",
    "NoteId",
    "NoteUpdate",
    "PersistedId",
    "TemporaryId",
]
