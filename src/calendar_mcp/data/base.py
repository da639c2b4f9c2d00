from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence, TypeVar

from ..domain import Event, Item, TaskList
from .filters import Filter

RecordT = TypeVar("RecordT")


class Collection(Protocol[RecordT]):
    """CRUD surface for a single entity kind, keyed by identifier."""

    def create(self, fields: Dict[str, Any]) -> RecordT: ...

    def find_by_id(self, record_id: str) -> Optional[RecordT]: ...

    def find(
        self,
        filters: Sequence[Filter] = (),
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[RecordT]: ...

    def update_by_id(self, record_id: str, fields: Dict[str, Any]) -> Optional[RecordT]: ...

    def delete_by_id(self, record_id: str) -> Optional[RecordT]: ...

    def delete_many(self, filters: Sequence[Filter]) -> int: ...


@dataclass
class DataStore:
    """The three entity collections the tool handlers operate on."""

    events: Collection[Event]
    lists: Collection[TaskList]
    items: Collection[Item]
