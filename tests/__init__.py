"""
BlogDB Test Suite.

This package contains:
- unit/: Unit tests, one module per store component
- integration/: Whole-store scenarios and invariant checks
"""
