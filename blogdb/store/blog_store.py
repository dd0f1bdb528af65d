"""
In-memory blog store: accounts, posts and comments.

BlogStore is the only entry point callers use. It owns:
- One RecordArena per entity kind (source of truth)
- The IdentityAllocator
- The SecondaryIndexManager (account->posts, post->comments,
  account->comments)
- Uniqueness keys for account handle and email
- The CascadeDeleteEngine and RelationshipResolver built over them

Invariants:
    - Every post's owner and every comment's author and post are live
    - Index entries and arena contents always agree
    - Ids are never reused until clear()
    - Every record returned is a copy
    - A failing operation raises before mutating anything

Thread safety:
    Each public operation holds one re-entrant lock for its whole duration,
    cascades included. Reads take the same lock.

How to change safely:
    - Validate everything before the first mutation in a write path
    - Pair every arena insert/remove with the matching index update
    - Extend check_integrity() when adding relations
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from difflib import get_close_matches
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..config import Settings
from ..errors import ConflictError, NotFoundError, ReferenceError, UnknownFieldError, ValidationError
from .allocator import IdentityAllocator
from .arena import RecordArena
from .cascade import CascadeDeleteEngine, DeleteSummary
from .indexes import Relation, SecondaryIndexManager
from .query import Criteria, evaluate
from .records import (
    ACCOUNT_SPEC,
    COMMENT_SPEC,
    POST_SPEC,
    Account,
    Comment,
    EntityKind,
    KindSpec,
    Post,
)
from .resolver import AccountProfile, PostThread, RelationshipResolver

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@dataclass(frozen=True)
class StoreStats:
    """Record counts and derived averages.

    Attributes:
        total_accounts: Live accounts
        total_posts: Live posts
        total_comments: Live comments
        avg_posts_per_account: Posts divided by accounts (0.0 if no accounts)
        avg_comments_per_post: Comments divided by posts (0.0 if no posts)
    """

    total_accounts: int
    total_posts: int
    total_comments: int
    avg_posts_per_account: float
    avg_comments_per_post: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_accounts": self.total_accounts,
            "total_posts": self.total_posts,
            "total_comments": self.total_comments,
            "avg_posts_per_account": self.avg_posts_per_account,
            "avg_comments_per_post": self.avg_comments_per_post,
        }


class BlogStore:
    """In-memory store for accounts, posts and comments.

    Example:
        >>> store = BlogStore()
        >>> alice = store.create_account({"handle": "alice", "email": "a@example.com"})
        >>> post = store.create_post({"account_id": alice.id, "title": "Hi", "body": "..."})
        >>> store.delete_account(alice.id).deleted_posts
        1
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        """Initialize an empty store.

        Args:
            settings: Store settings (defaults used if not provided)
            clock: Returns the current time in Unix ms
        """
        self.settings = settings or Settings()
        self._clock = clock or _now_ms
        self._lock = threading.RLock()

        self._ids = IdentityAllocator(self.settings.initial_id)
        self._accounts: RecordArena[Account] = RecordArena("account")
        self._posts: RecordArena[Post] = RecordArena("post")
        self._comments: RecordArena[Comment] = RecordArena("comment")
        self._indexes = SecondaryIndexManager()
        self._handles: Dict[str, int] = {}
        self._emails: Dict[str, int] = {}

        self._cascade = CascadeDeleteEngine(
            self._accounts,
            self._posts,
            self._comments,
            self._indexes,
            on_account_removed=self._release_account_keys,
        )
        self._resolver = RelationshipResolver(
            self._accounts, self._posts, self._comments, self._indexes
        )

    # ==================== VALIDATION ====================

    def _arena(self, kind: EntityKind) -> RecordArena[Any]:
        return {
            EntityKind.ACCOUNT: self._accounts,
            EntityKind.POST: self._posts,
            EntityKind.COMMENT: self._comments,
        }[kind]

    def _reject_unknown(self, spec: KindSpec, fields: Mapping[str, Any], known: List[str]) -> None:
        unknown = [name for name in fields if name not in known]
        if unknown:
            field_name = str(unknown[0])
            suggestions = get_close_matches(field_name, known, n=3)
            raise UnknownFieldError(field_name, spec.name, suggestions)

    def _validate_create(self, spec: KindSpec, fields: Mapping[str, Any]) -> None:
        """Check shape and references of a create payload.

        Raises:
            UnknownFieldError: If a field is not accepted for the kind
            ValidationError: If a required field is missing or malformed
            ReferenceError: If a referenced parent does not exist
        """
        self._reject_unknown(spec, fields, list(spec.input_fields))

        missing = [name for name in spec.required if _is_empty(fields.get(name))]
        if missing:
            errors = [f"Field '{name}' is required" for name in missing]
            raise ValidationError(
                f"Validation failed for {spec.name}: {'; '.join(errors)}",
                field_name=missing[0],
                errors=errors,
            )

        for name in spec.text_fields:
            value = fields.get(name)
            if value is not None and not isinstance(value, str):
                raise ValidationError(
                    f"Field '{name}' must be a string, got {type(value).__name__}",
                    field_name=name,
                )

        for name, _ in spec.references:
            value = fields[name]
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValidationError(
                    f"Field '{name}' must be an integer id, got {type(value).__name__}",
                    field_name=name,
                )

        for name, parent_kind in spec.references:
            parent_id = fields[name]
            if parent_id not in self._arena(parent_kind):
                raise ReferenceError(
                    f"Referenced {parent_kind.value} not found: {parent_id}",
                    resource_type=parent_kind.value,
                    resource_id=parent_id,
                )

    def _validate_update(self, spec: KindSpec, fields: Mapping[str, Any]) -> None:
        """Check an update payload touches only content fields.

        Raises:
            UnknownFieldError: If a field does not exist on the kind
            ValidationError: If an immutable field is supplied or a value is empty
        """
        self._reject_unknown(spec, fields, list(spec.field_names))

        for name, value in fields.items():
            if name not in spec.mutable:
                raise ValidationError(
                    f"Field '{name}' of {spec.name} cannot be updated",
                    field_name=name,
                )
            if _is_empty(value):
                raise ValidationError(f"Field '{name}' must not be empty", field_name=name)
            if not isinstance(value, str):
                raise ValidationError(
                    f"Field '{name}' must be a string, got {type(value).__name__}",
                    field_name=name,
                )

    def _release_account_keys(self, account: Account) -> None:
        self._handles.pop(account.handle, None)
        self._emails.pop(account.email, None)

    # ==================== ACCOUNT OPERATIONS ====================

    def create_account(self, fields: Mapping[str, Any]) -> Account:
        """Create a new account.

        Args:
            fields: handle, email and optional name

        Returns:
            Copy of the created account

        Raises:
            ValidationError: If handle or email is missing
            ConflictError: If handle or email belongs to a live account
        """
        with self._lock:
            self._validate_create(ACCOUNT_SPEC, fields)
            handle = fields["handle"]
            email = fields["email"]

            if handle in self._handles:
                raise ConflictError(f"Handle already exists: {handle}", "handle", handle)
            if email in self._emails:
                raise ConflictError(f"Email already exists: {email}", "email", email)

            account = Account(
                id=self._ids.next(EntityKind.ACCOUNT),
                handle=handle,
                email=email,
                name=fields.get("name") or handle,
                created_at=self._clock(),
            )
            self._accounts.insert(account)
            self._handles[handle] = account.id
            self._emails[email] = account.id
            for relation in Relation.for_parent(EntityKind.ACCOUNT):
                self._indexes.add_parent(relation, account.id)

            logger.debug("Created account", extra={"account_id": account.id, "handle": handle})
            return self._accounts.get(account.id)

    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by id, or None."""
        with self._lock:
            return self._accounts.get(account_id)

    def get_all_accounts(self) -> List[Account]:
        with self._lock:
            return list(self._accounts.values())

    def query_accounts(self, criteria: Criteria = None) -> List[Account]:
        """Query accounts by handle, email or name substring, or exact id."""
        with self._lock:
            return evaluate(ACCOUNT_SPEC, self._accounts.values(), criteria)

    # ==================== POST OPERATIONS ====================

    def create_post(self, fields: Mapping[str, Any]) -> Post:
        """Create a new post.

        Args:
            fields: account_id, title and body

        Returns:
            Copy of the created post

        Raises:
            ValidationError: If a field is missing or malformed
            ReferenceError: If the owning account does not exist
        """
        with self._lock:
            self._validate_create(POST_SPEC, fields)
            now = self._clock()

            post = Post(
                id=self._ids.next(EntityKind.POST),
                account_id=fields["account_id"],
                title=fields["title"],
                body=fields["body"],
                created_at=now,
                updated_at=now,
            )
            self._posts.insert(post)
            self._indexes.register(Relation.ACCOUNT_POSTS, post.account_id, post.id)
            for relation in Relation.for_parent(EntityKind.POST):
                self._indexes.add_parent(relation, post.id)

            logger.debug(
                "Created post", extra={"post_id": post.id, "account_id": post.account_id}
            )
            return self._posts.get(post.id)

    def get_post(self, post_id: int) -> Optional[Post]:
        """Get post by id, or None."""
        with self._lock:
            return self._posts.get(post_id)

    def get_all_posts(self) -> List[Post]:
        with self._lock:
            return list(self._posts.values())

    def get_posts_by_account(self, account_id: int) -> List[Post]:
        """Posts owned by an account (empty if none or unknown account)."""
        with self._lock:
            return self._resolver.children(Relation.ACCOUNT_POSTS, account_id)

    def update_post(self, post_id: int, fields: Mapping[str, Any]) -> Post:
        """Update a post's title and/or body.

        Raises:
            NotFoundError: If the post does not exist
            ValidationError: If a non-content field is supplied or a value is empty
        """
        with self._lock:
            return self._update(POST_SPEC, self._posts, post_id, fields)

    def query_posts(self, criteria: Criteria = None) -> List[Post]:
        """Query posts by title/body substring, owner, or timestamp range."""
        with self._lock:
            return evaluate(POST_SPEC, self._posts.values(), criteria)

    # ==================== COMMENT OPERATIONS ====================

    def create_comment(self, fields: Mapping[str, Any]) -> Comment:
        """Create a new comment.

        Args:
            fields: author_id, post_id and body

        Returns:
            Copy of the created comment

        Raises:
            ValidationError: If a field is missing or malformed
            ReferenceError: If the author or the post does not exist
        """
        with self._lock:
            self._validate_create(COMMENT_SPEC, fields)
            now = self._clock()

            comment = Comment(
                id=self._ids.next(EntityKind.COMMENT),
                author_id=fields["author_id"],
                post_id=fields["post_id"],
                body=fields["body"],
                created_at=now,
                updated_at=now,
            )
            self._comments.insert(comment)
            self._indexes.register(Relation.POST_COMMENTS, comment.post_id, comment.id)
            self._indexes.register(Relation.ACCOUNT_COMMENTS, comment.author_id, comment.id)

            logger.debug(
                "Created comment",
                extra={
                    "comment_id": comment.id,
                    "post_id": comment.post_id,
                    "author_id": comment.author_id,
                },
            )
            return self._comments.get(comment.id)

    def get_comment(self, comment_id: int) -> Optional[Comment]:
        """Get comment by id, or None."""
        with self._lock:
            return self._comments.get(comment_id)

    def get_all_comments(self) -> List[Comment]:
        with self._lock:
            return list(self._comments.values())

    def get_comments_by_post(self, post_id: int) -> List[Comment]:
        with self._lock:
            return self._resolver.children(Relation.POST_COMMENTS, post_id)

    def get_comments_by_account(self, account_id: int) -> List[Comment]:
        with self._lock:
            return self._resolver.children(Relation.ACCOUNT_COMMENTS, account_id)

    def update_comment(self, comment_id: int, fields: Mapping[str, Any]) -> Comment:
        """Update a comment's body.

        Raises:
            NotFoundError: If the comment does not exist
            ValidationError: If a non-content field is supplied or the body is empty
        """
        with self._lock:
            return self._update(COMMENT_SPEC, self._comments, comment_id, fields)

    def query_comments(self, criteria: Criteria = None) -> List[Comment]:
        """Query comments by body substring, author, post, or timestamp range."""
        with self._lock:
            return evaluate(COMMENT_SPEC, self._comments.values(), criteria)

    def _update(
        self,
        spec: KindSpec,
        arena: RecordArena[Any],
        record_id: int,
        fields: Mapping[str, Any],
    ) -> Any:
        current = arena.get(record_id)
        if current is None:
            raise NotFoundError(
                f"{spec.name.capitalize()} not found: {record_id}",
                resource_type=spec.name,
                resource_id=record_id,
            )
        self._validate_update(spec, fields)

        for name, value in fields.items():
            setattr(current, name, value)
        current.updated_at = max(self._clock(), current.updated_at)
        arena.replace(current)

        logger.debug(
            "Updated record",
            extra={"kind": spec.name, "record_id": record_id, "fields": sorted(fields)},
        )
        return arena.get(record_id)

    # ==================== RELATIONSHIP QUERIES ====================

    def post_with_comments(self, post_id: int) -> Optional[PostThread]:
        """Post with its comments, each with its author; None if absent."""
        with self._lock:
            return self._resolver.post_with_comments(post_id)

    def account_with_relations(self, account_id: int) -> Optional[AccountProfile]:
        """Account with its posts (and comment counts) and authored comments."""
        with self._lock:
            return self._resolver.account_with_relations(account_id)

    # ==================== CASCADING DELETES ====================

    def delete_account(self, account_id: int) -> DeleteSummary:
        """Delete an account with its posts and all dependent comments.

        Raises:
            NotFoundError: If the account does not exist
        """
        with self._lock:
            return self._cascade.delete_account(account_id)

    def delete_post(self, post_id: int) -> DeleteSummary:
        """Delete a post and its comments.

        Raises:
            NotFoundError: If the post does not exist
        """
        with self._lock:
            return self._cascade.delete_post(post_id)

    def delete_comment(self, comment_id: int) -> DeleteSummary:
        """Delete a comment.

        Raises:
            NotFoundError: If the comment does not exist
        """
        with self._lock:
            return self._cascade.delete_comment(comment_id)

    # ==================== MAINTENANCE ====================

    def stats(self) -> StoreStats:
        """Get store statistics."""
        with self._lock:
            accounts = len(self._accounts)
            posts = len(self._posts)
            comments = len(self._comments)
            precision = self.settings.stats_precision

            return StoreStats(
                total_accounts=accounts,
                total_posts=posts,
                total_comments=comments,
                avg_posts_per_account=round(posts / accounts, precision) if accounts else 0.0,
                avg_comments_per_post=round(comments / posts, precision) if posts else 0.0,
            )

    def clear(self) -> None:
        """Remove every record and reset id counters."""
        with self._lock:
            self._accounts.clear()
            self._posts.clear()
            self._comments.clear()
            self._indexes.clear()
            self._handles.clear()
            self._emails.clear()
            self._ids.reset()
            logger.info("Store cleared")

    def check_integrity(self) -> List[str]:
        """Report every violated store invariant.

        Returns:
            Human-readable problems; empty when the store is coherent
        """
        with self._lock:
            problems: List[str] = []

            for post in self._posts.values():
                if post.account_id not in self._accounts:
                    problems.append(f"post {post.id} owned by missing account {post.account_id}")
            for comment in self._comments.values():
                if comment.author_id not in self._accounts:
                    problems.append(
                        f"comment {comment.id} written by missing account {comment.author_id}"
                    )
                if comment.post_id not in self._posts:
                    problems.append(f"comment {comment.id} on missing post {comment.post_id}")

            for relation in Relation:
                parents = self._arena(relation.parent)
                children = self._arena(relation.child)

                indexed = set(self._indexes.parents(relation))
                for parent_id in indexed - set(parents.ids()):
                    problems.append(f"{relation.label} has entry for missing parent {parent_id}")
                for parent_id in set(parents.ids()) - indexed:
                    problems.append(f"{relation.label} has no entry for parent {parent_id}")

                for parent_id in indexed:
                    for child_id in self._indexes.lookup(relation, parent_id):
                        child = children.peek(child_id)
                        if child is None:
                            problems.append(
                                f"{relation.label}[{parent_id}] lists missing child {child_id}"
                            )
                        elif getattr(child, relation.child_field) != parent_id:
                            problems.append(
                                f"{relation.label}[{parent_id}] lists foreign child {child_id}"
                            )

                for child in children.values():
                    parent_id = getattr(child, relation.child_field)
                    if child.id not in self._indexes.lookup(relation, parent_id):
                        problems.append(
                            f"{relation.label}[{parent_id}] is missing child {child.id}"
                        )

            for handle, account_id in self._handles.items():
                account = self._accounts.peek(account_id)
                if account is None or account.handle != handle:
                    problems.append(f"handle key '{handle}' points at stale account {account_id}")
            for email, account_id in self._emails.items():
                account = self._accounts.peek(account_id)
                if account is None or account.email != email:
                    problems.append(f"email key '{email}' points at stale account {account_id}")

            return problems
