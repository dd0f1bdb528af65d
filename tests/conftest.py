"""
Shared fixtures for BlogDB tests.
"""

import pytest

from blogdb import BlogStore, Settings


class FakeClock:
    """Deterministic millisecond clock that advances on every call."""

    def __init__(self, start: int = 1_700_000_000_000, step: int = 1000) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> int:
        current = self.now
        self.now += self.step
        return current


@pytest.fixture
def clock():
    """Fresh deterministic clock."""
    return FakeClock()


@pytest.fixture
def store(clock):
    """Empty store with default settings and a deterministic clock."""
    return BlogStore(Settings(), clock=clock)


@pytest.fixture
def seeded(store):
    """Store with two accounts, two posts and three comments.

    Layout:
        alice owns post_a; bob owns post_b
        bob comments on post_a, alice comments on post_a and post_b
    """
    alice = store.create_account({"handle": "alice", "email": "alice@example.com"})
    bob = store.create_account({"handle": "bob", "email": "bob@example.com", "name": "Bob B"})
    post_a = store.create_post({"account_id": alice.id, "title": "Alpha", "body": "First post"})
    post_b = store.create_post({"account_id": bob.id, "title": "Beta", "body": "Second post"})
    c1 = store.create_comment({"author_id": bob.id, "post_id": post_a.id, "body": "Nice alpha"})
    c2 = store.create_comment({"author_id": alice.id, "post_id": post_a.id, "body": "Thanks"})
    c3 = store.create_comment({"author_id": alice.id, "post_id": post_b.id, "body": "Nice beta"})
    return {
        "store": store,
        "alice": alice,
        "bob": bob,
        "post_a": post_a,
        "post_b": post_b,
        "c1": c1,
        "c2": c2,
        "c3": c3,
    }
