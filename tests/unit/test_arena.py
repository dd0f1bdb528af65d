"""
Unit tests for arena storage.

Tests cover:
- Insert/get/remove
- Copy-on-read
- Slot recycling without id reuse
- Insertion order
"""

import pytest

from blogdb.store.arena import RecordArena
from blogdb.store.records import Post


def make_post(post_id, title="Title"):
    return Post(
        id=post_id, account_id=1, title=title, body="Body", created_at=0, updated_at=0
    )


class TestRecordArena:
    """Tests for RecordArena."""

    @pytest.fixture
    def arena(self):
        return RecordArena("post")

    def test_insert_and_get(self, arena):
        """Inserted record is retrievable by id."""
        arena.insert(make_post(1))

        assert 1 in arena
        assert arena.get(1).title == "Title"
        assert len(arena) == 1

    def test_get_missing_returns_none(self, arena):
        """Missing id yields None, not an error."""
        assert arena.get(42) is None

    def test_get_returns_copy(self, arena):
        """Mutating a returned record leaves the stored one intact."""
        arena.insert(make_post(1))

        fetched = arena.get(1)
        fetched.title = "Changed"

        assert arena.get(1).title == "Title"

    def test_duplicate_insert_raises(self, arena):
        """The same id cannot be stored twice."""
        arena.insert(make_post(1))

        with pytest.raises(KeyError):
            arena.insert(make_post(1))

    def test_remove_recycles_slot(self, arena):
        """A freed slot is reused by the next insert."""
        arena.insert(make_post(1))
        arena.insert(make_post(2))
        arena.remove(1)

        arena.insert(make_post(3))

        assert len(arena._slots) == 2
        assert arena.get(1) is None
        assert arena.get(3).id == 3

    def test_remove_returns_record(self, arena):
        """remove() hands back the record it dropped."""
        arena.insert(make_post(1, title="Gone"))

        removed = arena.remove(1)

        assert removed.title == "Gone"
        assert 1 not in arena

    def test_remove_missing_raises(self, arena):
        """remove() of an absent id raises and leaves the free list alone."""
        arena.insert(make_post(1))
        arena.remove(1)

        with pytest.raises(KeyError):
            arena.remove(1)

        assert arena._free == [0]

    def test_values_in_insertion_order(self, arena):
        """values() follows insertion order even after slot reuse."""
        for post_id in (1, 2, 3):
            arena.insert(make_post(post_id))
        arena.remove(1)
        arena.insert(make_post(4))

        assert [p.id for p in arena.values()] == [2, 3, 4]

    def test_replace_overwrites(self, arena):
        """replace() swaps the stored record."""
        arena.insert(make_post(1))

        arena.replace(make_post(1, title="New"))

        assert arena.get(1).title == "New"

    def test_replace_missing_raises(self, arena):
        """replace() needs an existing record."""
        with pytest.raises(KeyError):
            arena.replace(make_post(9))

    def test_clear(self, arena):
        """clear() empties the arena."""
        arena.insert(make_post(1))

        arena.clear()

        assert len(arena) == 0
        assert list(arena.values()) == []
