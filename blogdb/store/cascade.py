"""
Cascade deletes for BlogDB.

Deleting a parent removes every record that depends on it:
- comment: terminal, nothing depends on it
- post: its comments, then the post
- account: its posts (and their comments, whoever wrote them), then the
  comments it wrote on other accounts' posts, then the account

Every cascade snapshots the dependent ids before mutating anything, so the
set of records removed is exactly the set that existed when the operation
started.

Invariants:
    - The root is checked before any mutation; a missing root raises
      NotFoundError and leaves the store untouched
    - Each child is unregistered from every index before its record goes
    - A parent's own index entries are dropped together with the record
    - A snapshotted id that has vanished counts as already deleted

How to change safely:
    - Add new child kinds to Relation first, then extend the cascade here
    - Never iterate a live index set while deleting from it
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from ..errors import NotFoundError
from .arena import RecordArena
from .indexes import Relation, SecondaryIndexManager
from .records import Account, Comment, EntityKind, Post

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeleteSummary:
    """Outcome of a delete.

    Attributes:
        kind: Kind of the root record
        id: Id of the root record
        deleted_posts: Posts removed by the cascade
        deleted_comments: Comments removed by the cascade (the root included
            when it is a comment)
    """

    kind: EntityKind
    id: int
    deleted_posts: int = 0
    deleted_comments: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "deleted": True,
            "kind": self.kind.value,
            "id": self.id,
            "deleted_posts": self.deleted_posts,
            "deleted_comments": self.deleted_comments,
        }


class CascadeDeleteEngine:
    """Removes records together with their transitive dependents.

    The engine owns no state; it works on the arenas and index manager of
    the store that created it. The caller holds the store's write lock for
    the whole operation.

    Attributes:
        accounts: Account arena
        posts: Post arena
        comments: Comment arena
        indexes: Secondary index manager
    """

    def __init__(
        self,
        accounts: RecordArena[Account],
        posts: RecordArena[Post],
        comments: RecordArena[Comment],
        indexes: SecondaryIndexManager,
        on_account_removed: Optional[Callable[[Account], None]] = None,
    ) -> None:
        """Initialize the engine.

        Args:
            accounts: Account arena
            posts: Post arena
            comments: Comment arena
            indexes: Secondary index manager
            on_account_removed: Called with the removed account so the
                store can release its uniqueness keys
        """
        self.accounts = accounts
        self.posts = posts
        self.comments = comments
        self.indexes = indexes
        self._on_account_removed = on_account_removed

    def delete_comment(self, comment_id: int) -> DeleteSummary:
        """Delete a single comment.

        Raises:
            NotFoundError: If the comment does not exist
        """
        if comment_id not in self.comments:
            raise NotFoundError(
                f"Comment not found: {comment_id}", resource_type="comment", resource_id=comment_id
            )

        self._remove_comment(comment_id)
        logger.debug("Deleted comment", extra={"comment_id": comment_id})
        return DeleteSummary(EntityKind.COMMENT, comment_id, deleted_comments=1)

    def delete_post(self, post_id: int) -> DeleteSummary:
        """Delete a post and every comment on it.

        Raises:
            NotFoundError: If the post does not exist
        """
        if post_id not in self.posts:
            raise NotFoundError(
                f"Post not found: {post_id}", resource_type="post", resource_id=post_id
            )

        removed_comments = self._remove_post(post_id)
        logger.info(
            "Deleted post",
            extra={"post_id": post_id, "deleted_comments": removed_comments},
        )
        return DeleteSummary(EntityKind.POST, post_id, deleted_comments=removed_comments)

    def delete_account(self, account_id: int) -> DeleteSummary:
        """Delete an account, its posts, and every dependent comment.

        Raises:
            NotFoundError: If the account does not exist
        """
        if account_id not in self.accounts:
            raise NotFoundError(
                f"Account not found: {account_id}", resource_type="account", resource_id=account_id
            )

        removed_posts = 0
        removed_comments = 0

        post_ids = self.indexes.lookup(Relation.ACCOUNT_POSTS, account_id)
        for post_id in post_ids:
            if post_id not in self.posts:
                self._skip_vanished("post", post_id)
                continue
            removed_comments += self._remove_post(post_id)
            removed_posts += 1

        # Comments left are the ones written on other accounts' posts.
        comment_ids = self.indexes.lookup(Relation.ACCOUNT_COMMENTS, account_id)
        for comment_id in comment_ids:
            if self._remove_comment(comment_id):
                removed_comments += 1

        for relation in Relation.for_parent(EntityKind.ACCOUNT):
            self.indexes.drop_parent(relation, account_id)
        account = self.accounts.remove(account_id)
        if self._on_account_removed is not None:
            self._on_account_removed(account)

        logger.info(
            "Deleted account",
            extra={
                "account_id": account_id,
                "deleted_posts": removed_posts,
                "deleted_comments": removed_comments,
            },
        )
        return DeleteSummary(
            EntityKind.ACCOUNT,
            account_id,
            deleted_posts=removed_posts,
            deleted_comments=removed_comments,
        )

    def _remove_post(self, post_id: int) -> int:
        """Remove a known post and its comments; return comments removed."""
        removed = 0
        for comment_id in self.indexes.lookup(Relation.POST_COMMENTS, post_id):
            if self._remove_comment(comment_id):
                removed += 1

        post = self.posts.remove(post_id)
        self.indexes.unregister(Relation.ACCOUNT_POSTS, post.account_id, post_id)
        for relation in Relation.for_parent(EntityKind.POST):
            self.indexes.drop_parent(relation, post_id)
        return removed

    def _remove_comment(self, comment_id: int) -> bool:
        """Remove a comment if present; return whether it was removed."""
        comment = self.comments.peek(comment_id)
        if comment is None:
            self._skip_vanished("comment", comment_id)
            return False

        self.indexes.unregister(Relation.POST_COMMENTS, comment.post_id, comment_id)
        self.indexes.unregister(Relation.ACCOUNT_COMMENTS, comment.author_id, comment_id)
        self.comments.remove(comment_id)
        return True

    def _skip_vanished(self, kind: str, record_id: int) -> None:
        logger.warning(
            "Snapshotted record already gone, treating as deleted",
            extra={"kind": kind, "record_id": record_id},
        )
