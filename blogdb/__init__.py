"""
BlogDB - In-memory blog data store with secondary indexes and cascades.

This package implements a single-process store for three related kinds:
- Accounts, Posts (owned by an account) and Comments (on a post, by an account)
- Secondary indexes for account->posts, post->comments, account->comments
- Cascading deletes that remove every transitive dependent
- Field-equality, substring and range queries

Example:
    >>> from blogdb import BlogStore
    >>>
    >>> store = BlogStore()
    >>> john = store.create_account({"handle": "john", "email": "john@example.com"})
    >>> post = store.create_post({"account_id": john.id, "title": "Hi", "body": "First"})
    >>> comment = store.create_comment({"author_id": john.id, "post_id": post.id, "body": "Nice"})
    >>> store.delete_post(post.id).deleted_comments
    1

Invariants:
    - Every stored reference points at a live record
    - Indexes always agree with the stored records
    - Ids are never reused until clear()
    - Records returned to callers are copies

Version: see _version.py.
"""

from ._version import __version__
from .config import Settings
from .errors import (
    BlogDbError,
    ConflictError,
    NotFoundError,
    ReferenceError,
    UnknownFieldError,
    ValidationError,
)
from .store import (
    Account,
    AccountProfile,
    BlogStore,
    Comment,
    Contains,
    DeleteSummary,
    EntityKind,
    Equals,
    Post,
    PostThread,
    Range,
    StoreStats,
)

__all__ = [
    # Version
    "__version__",
    # Store
    "BlogStore",
    "StoreStats",
    "DeleteSummary",
    "Settings",
    # Records and views
    "EntityKind",
    "Account",
    "Post",
    "Comment",
    "PostThread",
    "AccountProfile",
    # Query filters
    "Equals",
    "Contains",
    "Range",
    # Errors
    "BlogDbError",
    "ValidationError",
    "UnknownFieldError",
    "ConflictError",
    "ReferenceError",
    "NotFoundError",
]
