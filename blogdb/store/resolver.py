"""
Relationship reads for BlogDB.

Read-only joins that combine arena lookups with index lookups to build
nested views. Every record placed in a view is a copy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .arena import RecordArena
from .indexes import Relation, SecondaryIndexManager
from .records import Account, Comment, Post, record_to_dict


@dataclass
class CommentWithAuthor:
    """A comment together with its author's current record."""

    comment: Comment
    author: Optional[Account]

    def to_dict(self) -> Dict[str, Any]:
        data = record_to_dict(self.comment)
        data["author"] = record_to_dict(self.author) if self.author else None
        return data


@dataclass
class PostThread:
    """A post with its comments in insertion order."""

    post: Post
    comments: List[CommentWithAuthor] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = record_to_dict(self.post)
        data["comments"] = [c.to_dict() for c in self.comments]
        return data


@dataclass
class PostSummary:
    """A post with its live comment count."""

    post: Post
    comment_count: int

    def to_dict(self) -> Dict[str, Any]:
        data = record_to_dict(self.post)
        data["comment_count"] = self.comment_count
        return data


@dataclass
class CommentWithPost:
    """A comment together with the post it belongs to."""

    comment: Comment
    post: Optional[Post]

    def to_dict(self) -> Dict[str, Any]:
        data = record_to_dict(self.comment)
        data["post"] = record_to_dict(self.post) if self.post else None
        return data


@dataclass
class AccountProfile:
    """An account with the posts it owns and the comments it wrote."""

    account: Account
    posts: List[PostSummary] = field(default_factory=list)
    comments: List[CommentWithPost] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = record_to_dict(self.account)
        data["posts"] = [p.to_dict() for p in self.posts]
        data["comments"] = [c.to_dict() for c in self.comments]
        return data


class RelationshipResolver:
    """Builds nested views over the store's arenas and indexes."""

    def __init__(
        self,
        accounts: RecordArena[Account],
        posts: RecordArena[Post],
        comments: RecordArena[Comment],
        indexes: SecondaryIndexManager,
    ) -> None:
        self.accounts = accounts
        self.posts = posts
        self.comments = comments
        self.indexes = indexes

    def children(self, relation: Relation, parent_id: int) -> List[Any]:
        """Return copies of the live children of a parent."""
        arena = self._arena_for(relation)
        found = []
        for child_id in self.indexes.lookup(relation, parent_id):
            record = arena.get(child_id)
            if record is not None:
                found.append(record)
        return found

    def post_with_comments(self, post_id: int) -> Optional[PostThread]:
        """Return the post and its comments, each with its author."""
        post = self.posts.get(post_id)
        if post is None:
            return None

        return PostThread(
            post=post,
            comments=[
                CommentWithAuthor(comment=c, author=self.accounts.get(c.author_id))
                for c in self.children(Relation.POST_COMMENTS, post_id)
            ],
        )

    def account_with_relations(self, account_id: int) -> Optional[AccountProfile]:
        """Return the account with its posts and authored comments."""
        account = self.accounts.get(account_id)
        if account is None:
            return None

        return AccountProfile(
            account=account,
            posts=[
                PostSummary(post=p, comment_count=self.indexes.count(Relation.POST_COMMENTS, p.id))
                for p in self.children(Relation.ACCOUNT_POSTS, account_id)
            ],
            comments=[
                CommentWithPost(comment=c, post=self.posts.get(c.post_id))
                for c in self.children(Relation.ACCOUNT_COMMENTS, account_id)
            ],
        )

    def _arena_for(self, relation: Relation) -> RecordArena[Any]:
        if relation is Relation.ACCOUNT_POSTS:
            return self.posts
        return self.comments
