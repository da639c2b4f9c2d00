from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from supabase import Client, create_client

from ..config.settings import StorageSettings, SupabaseSettings
from ..core.timeutil import isoformat, utc_now
from ..domain import Event, Item, TaskList, new_record_id
from .base import DataStore
from .filters import Between, Contains, Eq, Filter, In

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", Event, TaskList, Item)


class SupabaseNotInitializedError(RuntimeError):
    """Raised when the Supabase store is selected without URL or key."""


@dataclass
class SupabaseGateway:
    """Lazily created Supabase client shared by every table."""

    settings: SupabaseSettings
    _client: Optional[Client] = None

    def ensure_client(self) -> Client:
        if self._client is not None:
            return self._client
        if not self.settings.is_configured:
            missing = ", ".join(self.settings.missing_env_vars)
            raise SupabaseNotInitializedError(f"Supabase settings are incomplete; missing {missing}.")
        self._client = create_client(self.settings.url, self.settings.key)
        return self._client


def _apply_filters(query: Any, filters: Sequence[Filter], array_fields: Sequence[str]) -> Any:
    for predicate in filters:
        if isinstance(predicate, Eq):
            query = query.eq(predicate.field, predicate.value)
        elif isinstance(predicate, Contains):
            query = query.ilike(predicate.field, f"%{predicate.text}%")
        elif isinstance(predicate, In):
            if predicate.field in array_fields:
                query = query.overlaps(predicate.field, list(predicate.values))
            else:
                query = query.in_(predicate.field, list(predicate.values))
        elif isinstance(predicate, Between):
            if predicate.lower is not None:
                query = query.gte(predicate.field, isoformat(predicate.lower))
            if predicate.upper is not None:
                query = query.lte(predicate.field, isoformat(predicate.upper))
        else:
            raise TypeError(f"Unsupported filter: {predicate!r}")
    return query


@dataclass
class SupabaseCollection(Generic[ModelT]):
    gateway: SupabaseGateway
    table_name: str
    model: Type[ModelT]

    def _table(self) -> Any:
        return self.gateway.ensure_client().table(self.table_name)

    def _first(self, response: Any) -> Optional[ModelT]:
        records = response.data or []
        return self.model.from_record(records[0]) if records else None

    def create(self, fields: Dict[str, Any]) -> ModelT:
        now = isoformat(utc_now())
        draft = {**fields, "id": new_record_id(), "created_at": now}
        if "updated_at" in self.model.datetime_fields:
            draft["updated_at"] = now
        payload = self.model.from_record(draft).to_record()
        created = self._first(self._table().insert(payload).execute())
        return created or self.model.from_record(payload)

    def find_by_id(self, record_id: str) -> Optional[ModelT]:
        return self._first(self._table().select("*").eq("id", record_id).limit(1).execute())

    def find(
        self,
        filters: Sequence[Filter] = (),
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[ModelT]:
        query = _apply_filters(self._table().select("*"), filters, self.model.array_fields)
        if order_by:
            query = query.order(order_by, desc=descending)
        response = query.execute()
        return [self.model.from_record(record) for record in response.data or []]

    def update_by_id(self, record_id: str, fields: Dict[str, Any]) -> Optional[ModelT]:
        payload = dict(fields)
        if "updated_at" in self.model.datetime_fields:
            payload["updated_at"] = isoformat(utc_now())
        return self._first(self._table().update(payload).eq("id", record_id).execute())

    def delete_by_id(self, record_id: str) -> Optional[ModelT]:
        return self._first(self._table().delete().eq("id", record_id).execute())

    def delete_many(self, filters: Sequence[Filter]) -> int:
        query = _apply_filters(self._table().delete(), filters, self.model.array_fields)
        response = query.execute()
        removed = len(response.data or [])
        logger.debug("Deleted %d row(s) from %s", removed, self.table_name)
        return removed


def build_supabase_store(settings: SupabaseSettings, storage: StorageSettings) -> DataStore:
    gateway = SupabaseGateway(settings)
    return DataStore(
        events=SupabaseCollection(gateway, storage.events_table, Event),
        lists=SupabaseCollection(gateway, storage.lists_table, TaskList),
        items=SupabaseCollection(gateway, storage.items_table, Item),
    )
