"""
Identity allocation for BlogDB.

Each store owns one IdentityAllocator. Ids are integers, issued per entity
kind, strictly increasing, and never reissued until reset() is called by a
full store clear.
"""

from __future__ import annotations

import logging
from typing import Dict

from .records import EntityKind

logger = logging.getLogger(__name__)


class IdentityAllocator:
    """Per-kind monotonically increasing id counters.

    Example:
        >>> ids = IdentityAllocator()
        >>> ids.next(EntityKind.POST)
        1
        >>> ids.next(EntityKind.POST)
        2
    """

    def __init__(self, initial_id: int = 1) -> None:
        """Initialize counters.

        Args:
            initial_id: First id issued for each kind
        """
        if initial_id < 0:
            raise ValueError(f"initial_id must be >= 0, got {initial_id}")
        self.initial_id = initial_id
        self._next: Dict[EntityKind, int] = {kind: initial_id for kind in EntityKind}

    def next(self, kind: EntityKind) -> int:
        """Issue the next id for a kind."""
        issued = self._next[kind]
        self._next[kind] = issued + 1
        return issued

    def peek(self, kind: EntityKind) -> int:
        """Return the id the next call to next() would issue."""
        return self._next[kind]

    def reset(self) -> None:
        """Restore every counter to its initial value."""
        for kind in EntityKind:
            self._next[kind] = self.initial_id
        logger.debug("Identity counters reset", extra={"initial_id": self.initial_id})
