"""
Unit tests for BlogDB error types.

Tests cover:
- Codes and details
- Hierarchy
- Suggestions in unknown-field messages
"""

from blogdb.errors import (
    BlogDbError,
    ConflictError,
    NotFoundError,
    ReferenceError,
    UnknownFieldError,
    ValidationError,
)


class TestErrors:
    """Tests for the error hierarchy."""

    def test_all_inherit_from_base(self):
        for cls in (ValidationError, UnknownFieldError, ConflictError, ReferenceError, NotFoundError):
            assert issubclass(cls, BlogDbError)

    def test_unknown_field_is_validation_error(self):
        assert issubclass(UnknownFieldError, ValidationError)

    def test_codes(self):
        assert ValidationError("bad").code == "VALIDATION_ERROR"
        assert UnknownFieldError("x", "post").code == "UNKNOWN_FIELD"
        assert ConflictError("dup", "handle", "john").code == "CONFLICT"
        assert ReferenceError("gone", "account", 1).code == "REFERENCE_ERROR"
        assert NotFoundError("gone", "post", 2).code == "NOT_FOUND"

    def test_unknown_field_suggestions(self):
        err = UnknownFieldError("titel", "post", ["title"])

        assert "Did you mean: title?" in str(err)
        assert err.details["suggestions"] == ["title"]
        assert err.details["kind"] == "post"
        assert err.field_name == "titel"

    def test_not_found_details(self):
        err = NotFoundError("Post not found: 3", "post", 3)

        assert err.details == {"resource_type": "post", "resource_id": 3}
        assert err.message == "Post not found: 3"

    def test_conflict_details(self):
        err = ConflictError("Handle already exists: john", "handle", "john")

        assert err.details == {"field": "handle", "value": "john"}
