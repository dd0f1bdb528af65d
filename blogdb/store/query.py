"""
Query evaluation for BlogDB.

Filters are small tagged variants, each a frozen dataclass with a
matches() method:
- Equals: exact match, used for ids and other non-text fields
- Contains: case-insensitive substring match, used for free-text fields
- Range: inclusive bounds, used for timestamps

compile_criteria() turns a plain criteria mapping into filters using the
kind's field rules. Unknown keys and None values are skipped so ad hoc
queries stay permissive. Range bounds are normalized to Unix ms: ints pass
through, datetimes and ISO-8601 strings are converted (naive values are
read as UTC), anything else raises ValidationError.

Invariants:
    - A record matches only if every filter matches (logical AND)
    - evaluate() returns copies, never stored instances
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from ..errors import ValidationError
from .records import KindSpec, R, copy_record

logger = logging.getLogger(__name__)

# Range key suffix -> bound it sets on the matching "<prefix>_at" field
_RANGE_SUFFIXES = {"_after": "low", "_before": "high"}


@dataclass(frozen=True)
class Equals:
    """Field equals value exactly."""

    field: str
    value: Any

    def matches(self, record: Any) -> bool:
        return getattr(record, self.field, None) == self.value


@dataclass(frozen=True)
class Contains:
    """Field contains text, ignoring case."""

    field: str
    text: str

    def matches(self, record: Any) -> bool:
        value = getattr(record, self.field, None)
        if not isinstance(value, str):
            return False
        return self.text.casefold() in value.casefold()


@dataclass(frozen=True)
class Range:
    """Field lies within inclusive bounds; a missing bound is open."""

    field: str
    low: Optional[Any] = None
    high: Optional[Any] = None

    def matches(self, record: Any) -> bool:
        value = getattr(record, self.field, None)
        if value is None:
            return False
        if self.low is not None and value < self.low:
            return False
        if self.high is not None and value > self.high:
            return False
        return True


Filter = Union[Equals, Contains, Range]
Criteria = Union[Mapping[str, Any], Sequence[Filter], None]


def _range_target(spec: KindSpec, key: str) -> Optional[tuple[str, str]]:
    """Map e.g. 'created_after' to ('created_at', 'low') for the kind."""
    if not isinstance(key, str):
        return None
    for suffix, bound in _RANGE_SUFFIXES.items():
        if key.endswith(suffix):
            target = key[: -len(suffix)] + "_at"
            if target in spec.timestamp_fields:
                return target, bound
    return None


def _to_ms(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


def _range_bound(key: str, value: Any) -> int:
    """Normalize a range bound to Unix ms.

    Raises:
        ValidationError: If the bound is not an int, datetime or ISO-8601 string
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, datetime):
        return _to_ms(value)
    if isinstance(value, str):
        text = value.strip()
        # fromisoformat() only accepts a trailing "Z" from Python 3.11 on
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return _to_ms(datetime.fromisoformat(text))
        except ValueError:
            raise ValidationError(
                f"Query key '{key}' is not an ISO-8601 timestamp: {value!r}",
                field_name=key,
            ) from None

    raise ValidationError(
        f"Query key '{key}' must be Unix ms, a datetime or an ISO-8601 string, "
        f"got {type(value).__name__}",
        field_name=key,
    )


def compile_criteria(spec: KindSpec, criteria: Mapping[str, Any]) -> List[Filter]:
    """Build filters from a criteria mapping.

    Args:
        spec: Field rules of the kind being queried
        criteria: Field name (or range key) to wanted value

    Returns:
        Filters in the order the keys were given

    Raises:
        ValidationError: If a range bound cannot be read as a timestamp
    """
    filters: List[Filter] = []
    bounds: dict[str, dict[str, Any]] = {}

    for key, value in criteria.items():
        if value is None:
            continue

        if key in spec.text_fields:
            filters.append(Contains(key, str(value)))
        elif key in spec.field_names:
            filters.append(Equals(key, value))
        else:
            target = _range_target(spec, key)
            if target is None:
                logger.debug(
                    "Ignoring unknown query key",
                    extra={"kind": spec.name, "key": key},
                )
                continue
            field_name, bound = target
            bounds.setdefault(field_name, {})[bound] = _range_bound(key, value)

    for field_name, limits in bounds.items():
        filters.append(Range(field_name, low=limits.get("low"), high=limits.get("high")))

    return filters


def evaluate(spec: KindSpec, records: Iterable[R], criteria: Criteria = None) -> List[R]:
    """Return copies of the records matching every criterion.

    Args:
        spec: Field rules of the kind being queried
        records: Records to filter
        criteria: A criteria mapping, a sequence of filters, or None for all

    Returns:
        Matching records, copied, in input order
    """
    if criteria is None:
        filters: Sequence[Filter] = ()
    elif isinstance(criteria, Mapping):
        filters = compile_criteria(spec, criteria)
    else:
        filters = tuple(criteria)

    return [copy_record(r) for r in records if all(f.matches(r) for f in filters)]
