"""
Arena storage for one entity kind.

Records live in a dense list of slots. An id-to-slot map gives O(1)
lookup; freed slots are recycled through a free list while ids are not.
The arena is the single source of truth for its kind.

Invariants:
    - Every id in the slot map points at an occupied slot holding that id
    - Reads return copies, never the stored instance
    - values() yields records in insertion order
"""

from __future__ import annotations

from typing import Dict, Generic, Iterator, List, Optional

from .records import R, copy_record


class RecordArena(Generic[R]):
    """Slot-map storage for records of a single kind.

    Example:
        >>> arena = RecordArena("post")
        >>> arena.insert(post)
        >>> arena.get(post.id).title
        'Hello'
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._slots: List[Optional[R]] = []
        self._slot_by_id: Dict[int, int] = {}
        self._free: List[int] = []

    def __len__(self) -> int:
        return len(self._slot_by_id)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._slot_by_id

    def insert(self, record: R) -> None:
        """Store a new record.

        Raises:
            KeyError: If a record with the same id is already stored
        """
        if record.id in self._slot_by_id:
            raise KeyError(f"{self.name} {record.id} already stored")

        if self._free:
            slot = self._free.pop()
            self._slots[slot] = record
        else:
            slot = len(self._slots)
            self._slots.append(record)
        self._slot_by_id[record.id] = slot

    def peek(self, record_id: int) -> Optional[R]:
        """Return the stored instance without copying.

        Internal callers only; never hand the result to a caller.
        """
        slot = self._slot_by_id.get(record_id)
        if slot is None:
            return None
        return self._slots[slot]

    def get(self, record_id: int) -> Optional[R]:
        """Return a copy of the record, or None if absent."""
        record = self.peek(record_id)
        return copy_record(record) if record is not None else None

    def values(self) -> Iterator[R]:
        """Yield copies of every record in insertion order."""
        for slot in list(self._slot_by_id.values()):
            record = self._slots[slot]
            if record is not None:
                yield copy_record(record)

    def ids(self) -> List[int]:
        return list(self._slot_by_id)

    def replace(self, record: R) -> None:
        """Overwrite the stored record with the same id.

        Raises:
            KeyError: If no record with that id is stored
        """
        slot = self._slot_by_id[record.id]
        self._slots[slot] = record

    def remove(self, record_id: int) -> R:
        """Remove and return a record.

        Raises:
            KeyError: If no record with that id is stored
        """
        record = self.peek(record_id)
        if record is None:
            raise KeyError(f"{self.name} {record_id} not stored")

        slot = self._slot_by_id.pop(record_id)
        self._slots[slot] = None
        self._free.append(slot)
        return record

    def clear(self) -> None:
        self._slots.clear()
        self._slot_by_id.clear()
        self._free.clear()
