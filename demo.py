#!/usr/bin/env python3
"""
BlogDB Demo - Shows creates, relationship reads and cascading deletes.

Run: python demo.py [--log-format json]
"""

import argparse
import json

from blogdb import BlogStore, BlogDbError, Settings
from blogdb.logging_setup import setup_logging


def show(label, value):
    print(f"  - {label}: {json.dumps(value, indent=2, default=str)}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="BlogDB demo")
    parser.add_argument("--log-format", choices=("text", "json"), default=None)
    parser.add_argument("--log-level", default=None)
    args = parser.parse_args(argv)

    overrides = {}
    if args.log_format:
        overrides["log_format"] = args.log_format
    if args.log_level:
        overrides["log_level"] = args.log_level
    settings = Settings(**overrides)
    setup_logging(settings)
    settings.log_config()

    print("=" * 60)
    print("BlogDB Demo - Accounts, Posts, Comments")
    print("=" * 60)

    store = BlogStore(settings)

    print("\n[Step 1] Creating accounts...")
    john = store.create_account({"handle": "john_doe", "email": "john@example.com", "name": "John Doe"})
    jane = store.create_account({"handle": "jane_smith", "email": "jane@example.com", "name": "Jane Smith"})
    bob = store.create_account({"handle": "bob_wilson", "email": "bob@example.com"})
    for account in (john, jane, bob):
        print(f"  - #{account.id} {account.handle} ({account.name})")

    print("\n[Step 2] Creating posts...")
    intro = store.create_post(
        {"account_id": john.id, "title": "Introduction to Python", "body": "Python is a language..."}
    )
    generators = store.create_post(
        {"account_id": john.id, "title": "Generators Explained", "body": "Generators let you..."}
    )
    practices = store.create_post(
        {"account_id": jane.id, "title": "Packaging Best Practices", "body": "Here are some tips..."}
    )
    for post in (intro, generators, practices):
        print(f"  - #{post.id} '{post.title}' by account {post.account_id}")

    print("\n[Step 3] Creating comments...")
    store.create_comment({"author_id": jane.id, "post_id": intro.id, "body": "Great article!"})
    store.create_comment({"author_id": bob.id, "post_id": intro.id, "body": "Thanks for sharing."})
    store.create_comment({"author_id": bob.id, "post_id": generators.id, "body": "This helped a lot."})
    store.create_comment({"author_id": john.id, "post_id": practices.id, "body": "Useful tips."})
    print(f"  - {len(store.get_all_comments())} comments created")

    print("\n[Step 4] Queries...")
    show("posts mentioning 'python'", [p.title for p in store.query_posts({"title": "python"})])
    show("comments by bob", [c.body for c in store.get_comments_by_account(bob.id)])
    show("posts by john", [p.title for p in store.get_posts_by_account(john.id)])

    print("\n[Step 5] Relationship reads...")
    show("post with comments", store.post_with_comments(intro.id).to_dict())
    show("account with relations", store.account_with_relations(john.id).to_dict())

    print("\n[Step 6] Updating a post...")
    updated = store.update_post(intro.id, {"title": "Introduction to Python (Updated)"})
    print(f"  - title is now '{updated.title}'")

    print("\n[Step 7] Error handling...")
    for label, attempt in (
        ("duplicate handle", lambda: store.create_account({"handle": "john_doe", "email": "x@example.com"})),
        ("missing owner", lambda: store.create_post({"account_id": 999, "title": "t", "body": "b"})),
        ("owner change", lambda: store.update_post(intro.id, {"account_id": jane.id})),
    ):
        try:
            attempt()
        except BlogDbError as e:
            print(f"  - {label}: {e.code} - {e.message}")

    print("\n[Step 8] Cascading deletes...")
    show("stats before", store.stats().to_dict())
    show("delete post", store.delete_post(generators.id).to_dict())
    show("delete account", store.delete_account(john.id).to_dict())
    show("stats after", store.stats().to_dict())

    problems = store.check_integrity()
    print(f"\n[Done] Integrity check: {'OK' if not problems else problems}")


if __name__ == "__main__":
    main()
