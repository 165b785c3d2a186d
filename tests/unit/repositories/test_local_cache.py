"""Unit tests for ainotes.repositories.local."""

import os
from unittest.mock import patch

import pytest

from ainotes.repositories.local import (
    LocalNoteCache,
    find_index,
    replace_user_slice,
    user_slice,
)
from ainotes.schemas.note import PersistedId


class TestLocalNoteCache:
    """Tests for reading and writing the cache file."""

    def test_missing_file_reads_as_empty(self, tmp_path):
        cache = LocalNoteCache(tmp_path / "absent.json")
        assert cache.read_all() == []

    def test_empty_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "notes.json"
        path.write_text("  \n")
        assert LocalNoteCache(path).read_all() == []

    def test_corrupt_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "notes.json"
        path.write_text("{not json")
        assert LocalNoteCache(path).read_all() == []

    def test_wrong_shape_reads_as_empty(self, tmp_path):
        path = tmp_path / "notes.json"
        path.write_text('[{"title": "no id"}]')
        assert LocalNoteCache(path).read_all() == []

    def test_write_then_read_preserves_order_and_identity_kind(self, cache, make_note):
        draft = make_note(title="Draft")
        synced = make_note(remote_id="temp-looking-id")

        cache.write_all([draft, synced])
        result = cache.read_all()

        assert result == [draft, synced]
        assert result[0].id.is_temporary is True
        assert result[1].id.is_temporary is False

    def test_write_creates_parent_directory(self, tmp_path, make_note):
        cache = LocalNoteCache(tmp_path / "nested" / "dir" / "notes.json")
        cache.write_all([make_note(remote_id="1")])
        assert cache.path.exists()

    def test_write_leaves_no_temporary_files(self, cache, make_note):
        cache.write_all([make_note(remote_id="1")])
        cache.write_all([make_note(remote_id="2")])

        assert sorted(p.name for p in cache.path.parent.iterdir()) == [cache.path.name]

    def test_failed_write_keeps_previous_contents(self, cache, make_note):
        """A write interrupted before the rename leaves the old file intact."""
        cache.write_all([make_note(remote_id="1")])
        before = cache.path.read_bytes()

        with patch("ainotes.repositories.local.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                cache.write_all([make_note(remote_id="2")])

        assert cache.path.read_bytes() == before
        assert sorted(os.listdir(cache.path.parent)) == [cache.path.name]


class TestSliceHelpers:
    """Tests for per-user partitioning of the cached collection."""

    def test_user_slice_filters_user_and_archive_state(self, make_note):
        active = make_note(remote_id="1")
        archived = make_note(remote_id="2", is_archived=True)
        other = make_note(remote_id="3", user_id="u2")

        assert user_slice([active, archived, other], "u1", archived=False) == [active]
        assert user_slice([active, archived, other], "u1", archived=True) == [archived]

    def test_replace_user_slice_puts_replacement_first(self, make_note):
        other = make_note(remote_id="3", user_id="u2")
        archived = make_note(remote_id="2", is_archived=True)
        old = make_note(remote_id="1", title="Old")
        new = make_note(remote_id="1", title="New")

        result = replace_user_slice([other, old, archived], "u1", False, [new])

        assert result == [new, other, archived]

    def test_replace_user_slice_keeps_ids_unique(self, make_note):
        """A note that moved from archived to active is not kept twice."""
        archived = make_note(remote_id="1", is_archived=True)
        restored = make_note(remote_id="1")

        result = replace_user_slice([archived], "u1", False, [restored])

        assert result == [restored]

    def test_find_index(self, make_note):
        notes = [make_note(remote_id="1"), make_note(remote_id="2")]

        assert find_index(notes, PersistedId(value="2")) == 1
        assert find_index(notes, PersistedId(value="9")) is None
