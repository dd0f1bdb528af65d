"""
Secondary indexes for BlogDB.

Three relations are mirrored from the arenas:
- ACCOUNT_POSTS: account id -> ids of posts it owns
- POST_COMMENTS: post id -> ids of comments on it
- ACCOUNT_COMMENTS: account id -> ids of comments it authored

The indexes are caches of relationships implied by the records. Every
register() is paired with an arena insert, every unregister() with an
arena removal, and every drop_parent() with the removal of the parent
record itself.

Invariants:
    - Child sets keep insertion order
    - lookup() returns an immutable snapshot, safe to iterate while mutating
    - A childless parent has an empty entry, not a missing one
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple

from .records import EntityKind


class Relation(Enum):
    """Parent-child relations tracked by the index manager."""

    ACCOUNT_POSTS = ("account_posts", EntityKind.ACCOUNT, EntityKind.POST, "account_id")
    POST_COMMENTS = ("post_comments", EntityKind.POST, EntityKind.COMMENT, "post_id")
    ACCOUNT_COMMENTS = ("account_comments", EntityKind.ACCOUNT, EntityKind.COMMENT, "author_id")

    def __init__(
        self, label: str, parent: EntityKind, child: EntityKind, child_field: str
    ) -> None:
        self.label = label
        self.parent = parent
        self.child = child
        self.child_field = child_field

    @classmethod
    def for_parent(cls, kind: EntityKind) -> Tuple[Relation, ...]:
        return tuple(r for r in cls if r.parent is kind)

    @classmethod
    def for_child(cls, kind: EntityKind) -> Tuple[Relation, ...]:
        return tuple(r for r in cls if r.child is kind)


class SecondaryIndexManager:
    """Maintains parent -> child id sets for every Relation.

    Child sets are dicts used as ordered sets.
    """

    def __init__(self) -> None:
        self._index: Dict[Relation, Dict[int, Dict[int, None]]] = {r: {} for r in Relation}

    def add_parent(self, relation: Relation, parent_id: int) -> None:
        """Create an empty child set for a new parent."""
        self._index[relation].setdefault(parent_id, {})

    def register(self, relation: Relation, parent_id: int, child_id: int) -> None:
        """Add child_id to the parent's set, creating the set if absent."""
        self._index[relation].setdefault(parent_id, {})[child_id] = None

    def unregister(self, relation: Relation, parent_id: int, child_id: int) -> None:
        """Remove child_id from the parent's set; the set itself stays."""
        children = self._index[relation].get(parent_id)
        if children is not None:
            children.pop(child_id, None)

    def lookup(self, relation: Relation, parent_id: int) -> Tuple[int, ...]:
        """Return a snapshot of the parent's child ids (empty if none)."""
        return tuple(self._index[relation].get(parent_id, ()))

    def count(self, relation: Relation, parent_id: int) -> int:
        return len(self._index[relation].get(parent_id, ()))

    def drop_parent(self, relation: Relation, parent_id: int) -> None:
        """Remove the parent's entry once the parent record is gone."""
        self._index[relation].pop(parent_id, None)

    def parents(self, relation: Relation) -> Tuple[int, ...]:
        return tuple(self._index[relation])

    def clear(self) -> None:
        for entries in self._index.values():
            entries.clear()
