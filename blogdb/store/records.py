"""
Entity records for BlogDB.

Three kinds are stored: accounts, posts and comments. Records are plain
dataclasses; the store hands out copies so callers never hold a reference
to stored state.

Invariants:
    - id, reference fields and created_at never change after creation
    - Timestamps are Unix milliseconds
    - KindSpec describes every field the store accepts for a kind
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any, FrozenSet, Tuple, TypeVar, Union


class EntityKind(Enum):
    """Entity kinds held by the store."""

    ACCOUNT = "account"
    POST = "post"
    COMMENT = "comment"


@dataclass
class Account:
    """A blog account.

    Attributes:
        id: Store-assigned identifier
        handle: Unique handle
        email: Unique contact address
        name: Display name (defaults to handle)
        created_at: Creation timestamp (Unix ms)
    """

    id: int
    handle: str
    email: str
    name: str
    created_at: int


@dataclass
class Post:
    """A post owned by an account.

    Attributes:
        id: Store-assigned identifier
        account_id: Owning account
        title: Post title
        body: Post body
        created_at: Creation timestamp (Unix ms)
        updated_at: Last modification timestamp (Unix ms)
    """

    id: int
    account_id: int
    title: str
    body: str
    created_at: int
    updated_at: int


@dataclass
class Comment:
    """A comment on a post, written by an account.

    Attributes:
        id: Store-assigned identifier
        author_id: Authoring account
        post_id: Target post
        body: Comment body
        created_at: Creation timestamp (Unix ms)
        updated_at: Last modification timestamp (Unix ms)
    """

    id: int
    author_id: int
    post_id: int
    body: str
    created_at: int
    updated_at: int


Record = Union[Account, Post, Comment]
R = TypeVar("R", Account, Post, Comment)


@dataclass(frozen=True)
class KindSpec:
    """Field rules for one entity kind.

    Attributes:
        kind: The entity kind
        record_type: Dataclass used to store records of this kind
        input_fields: Fields a caller may supply on create
        required: Fields that must be present and non-empty on create
        references: Reference fields mapped to the kind they point at
        text_fields: Free-text fields matched by substring in queries
        mutable: Fields an update may change
    """

    kind: EntityKind
    record_type: type
    input_fields: Tuple[str, ...]
    required: Tuple[str, ...]
    references: Tuple[Tuple[str, EntityKind], ...]
    text_fields: FrozenSet[str]
    mutable: FrozenSet[str]

    @property
    def name(self) -> str:
        return self.kind.value

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in dataclasses.fields(self.record_type))

    @property
    def timestamp_fields(self) -> Tuple[str, ...]:
        return tuple(n for n in self.field_names if n.endswith("_at"))


ACCOUNT_SPEC = KindSpec(
    kind=EntityKind.ACCOUNT,
    record_type=Account,
    input_fields=("handle", "email", "name"),
    required=("handle", "email"),
    references=(),
    text_fields=frozenset({"handle", "email", "name"}),
    mutable=frozenset(),
)

POST_SPEC = KindSpec(
    kind=EntityKind.POST,
    record_type=Post,
    input_fields=("account_id", "title", "body"),
    required=("account_id", "title", "body"),
    references=(("account_id", EntityKind.ACCOUNT),),
    text_fields=frozenset({"title", "body"}),
    mutable=frozenset({"title", "body"}),
)

COMMENT_SPEC = KindSpec(
    kind=EntityKind.COMMENT,
    record_type=Comment,
    input_fields=("author_id", "post_id", "body"),
    required=("author_id", "post_id", "body"),
    references=(("author_id", EntityKind.ACCOUNT), ("post_id", EntityKind.POST)),
    text_fields=frozenset({"body"}),
    mutable=frozenset({"body"}),
)


def copy_record(record: R) -> R:
    """Return a detached copy of a record."""
    return dataclasses.replace(record)


def record_to_dict(record: Record) -> dict[str, Any]:
    """Convert a record to a plain dict."""
    return dataclasses.asdict(record)
