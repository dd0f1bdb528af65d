"""
Store module for BlogDB - records, indexes, cascades and queries.

This module handles:
- Arena storage per entity kind with owned id allocation
- Secondary indexes mirroring the three parent/child relations
- Cascading deletes with snapshot-before-mutate
- Query filters and nested relationship views

Invariants:
    - Index entries and arena contents never diverge
    - All writes validate before the first mutation
    - Readers only ever receive copies
"""

from .allocator import IdentityAllocator
from .arena import RecordArena
from .blog_store import BlogStore, StoreStats
from .cascade import CascadeDeleteEngine, DeleteSummary
from .indexes import Relation, SecondaryIndexManager
from .query import Contains, Equals, Range, compile_criteria, evaluate
from .records import Account, Comment, EntityKind, KindSpec, Post
from .resolver import (
    AccountProfile,
    CommentWithAuthor,
    CommentWithPost,
    PostSummary,
    PostThread,
    RelationshipResolver,
)

__all__ = [
    "BlogStore",
    "StoreStats",
    "IdentityAllocator",
    "RecordArena",
    "SecondaryIndexManager",
    "Relation",
    "CascadeDeleteEngine",
    "DeleteSummary",
    "RelationshipResolver",
    "PostThread",
    "CommentWithAuthor",
    "AccountProfile",
    "PostSummary",
    "CommentWithPost",
    "Equals",
    "Contains",
    "Range",
    "compile_criteria",
    "evaluate",
    "EntityKind",
    "KindSpec",
    "Account",
    "Post",
    "Comment",
]
