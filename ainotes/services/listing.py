"""
Listing helpers.

Pure functions the presentation layer applies to a fetched listing:
substring search, recency sort, and the pinned/others split.
"""

from collections.abc import Iterable

from ainotes.schemas.note import Note


def search_notes(notes: Iterable[Note], query: str) -> list[Note]:
    """Notes whose title or content contains `query`, case-insensitively."""
    needle = query.strip().lower()
    if not needle:
        return list(notes)
    return [
        n for n in notes
        if needle in n.title.lower() or needle in n.content.lower()
    ]


def sort_by_recent(notes: Iterable[Note]) -> list[Note]:
    """Most recently updated first; ties keep their order."""
    return sorted(notes, key=lambda n: n.updated_at, reverse=True)


def partition_pinned(notes: Iterable[Note]) -> tuple[list[Note], list[Note]]:
    """Split into (pinned, others), preserving order within each group."""
    pinned: list[Note] = []
    others: list[Note] = []
    for note in notes:
        (pinned if note.is_pinned else others).append(note)
    return pinned, others
