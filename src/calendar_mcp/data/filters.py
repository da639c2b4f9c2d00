from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Union

from ..core.timeutil import parse_datetime


@dataclass(frozen=True, slots=True)
class Eq:
    field: str
    value: Any


@dataclass(frozen=True, slots=True)
class Contains:
    """Case-insensitive substring match on a text field."""

    field: str
    text: str


@dataclass(frozen=True, slots=True)
class In:
    """Set membership; array fields match when any element overlaps."""

    field: str
    values: tuple[Any, ...]


@dataclass(frozen=True, slots=True)
class Between:
    """Inclusive bounds on a timestamp field. Either bound may be open."""

    field: str
    lower: Optional[datetime] = None
    upper: Optional[datetime] = None


Filter = Union[Eq, Contains, In, Between]


def _matches(record: Dict[str, Any], predicate: Filter) -> bool:
    value = record.get(predicate.field)
    if isinstance(predicate, Eq):
        return value == predicate.value
    if isinstance(predicate, Contains):
        return value is not None and predicate.text.lower() in str(value).lower()
    if isinstance(predicate, In):
        if isinstance(value, list):
            return any(element in predicate.values for element in value)
        return value in predicate.values
    if isinstance(predicate, Between):
        if value is None:
            return False
        moment = parse_datetime(value)
        if predicate.lower is not None and moment < parse_datetime(predicate.lower):
            return False
        if predicate.upper is not None and moment > parse_datetime(predicate.upper):
            return False
        return True
    raise TypeError(f"Unsupported filter: {predicate!r}")


def matches_all(record: Dict[str, Any], filters: Iterable[Filter]) -> bool:
    return all(_matches(record, predicate) for predicate in filters)
