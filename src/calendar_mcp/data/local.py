from __future__ import annotations

import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, Type, TypeVar

import orjson

from ..core.timeutil import isoformat, parse_datetime, utc_now
from ..domain import Event, Item, TaskList, new_record_id
from .base import DataStore
from .filters import Filter, matches_all

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", Event, TaskList, Item)

DEFAULT_STATE: Dict[str, Any] = {
    "events": [],
    "lists": [],
    "items": [],
    "metadata": {"schema_version": 1},
}


class JsonDocument:
    """Single JSON document holding every collection, rewritten on each mutation."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path
        self._state: Optional[Dict[str, Any]] = None

    def _ensure_materialized(self) -> None:
        if self._state is not None:
            return
        if self._path is None or not self._path.exists():
            self._state = deepcopy(DEFAULT_STATE)
            return
        raw = self._path.read_bytes()
        if not raw:
            self._state = deepcopy(DEFAULT_STATE)
            return
        self._state = orjson.loads(raw)
        # Backfill missing keys when upgrading.
        for key, value in DEFAULT_STATE.items():
            if key not in self._state:
                self._state[key] = deepcopy(value)

    @property
    def data(self) -> Dict[str, Any]:
        self._ensure_materialized()
        assert self._state is not None
        return self._state

    def persist(self) -> None:
        if self._state is None or self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = orjson.dumps(self._state, option=orjson.OPT_INDENT_2)
        self._path.write_bytes(payload + b"\n")

    def mutate(self, callback: Callable[[Dict[str, Any]], Any]) -> Any:
        self._ensure_materialized()
        assert self._state is not None
        result = callback(self._state)
        self.persist()
        return result


def _sort_key(field_name: str, datetime_fields: Sequence[str]) -> Callable[[Dict[str, Any]], Any]:
    def _key(record: Dict[str, Any]) -> Any:
        value = record.get(field_name)
        if value is None:
            return (1, "")
        if field_name in datetime_fields:
            return (0, parse_datetime(value))
        return (0, value)

    return _key


class LocalCollection(Generic[ModelT]):
    def __init__(self, document: JsonDocument, key: str, model: Type[ModelT]) -> None:
        self._document = document
        self._key = key
        self._model = model

    def _records(self, state: Dict[str, Any]) -> List[Dict[str, Any]]:
        return state.setdefault(self._key, [])

    def _normalize(self, record: Dict[str, Any]) -> Dict[str, Any]:
        return self._model.from_record(record).to_record()

    def create(self, fields: Dict[str, Any]) -> ModelT:
        now = isoformat(utc_now())

        def _create(state: Dict[str, Any]) -> Dict[str, Any]:
            draft = {**fields, "id": new_record_id(), "created_at": now}
            if "updated_at" in self._model.datetime_fields:
                draft["updated_at"] = now
            record = self._normalize(draft)
            self._records(state).append(record)
            return record

        record = self._document.mutate(_create)
        logger.debug("Created %s record %s", self._key, record["id"])
        return self._model.from_record(record)

    def find_by_id(self, record_id: str) -> Optional[ModelT]:
        for record in self._records(self._document.data):
            if record["id"] == record_id:
                return self._model.from_record(record)
        return None

    def find(
        self,
        filters: Sequence[Filter] = (),
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[ModelT]:
        records = [record for record in self._records(self._document.data) if matches_all(record, filters)]
        if order_by:
            records.sort(key=_sort_key(order_by, self._model.datetime_fields), reverse=descending)
        return [self._model.from_record(record) for record in records]

    def update_by_id(self, record_id: str, fields: Dict[str, Any]) -> Optional[ModelT]:
        def _update(state: Dict[str, Any]) -> Optional[Dict[str, Any]]:
            records = self._records(state)
            for index, record in enumerate(records):
                if record["id"] != record_id:
                    continue
                draft = {**record, **fields, "id": record_id}
                if "updated_at" in self._model.datetime_fields:
                    draft["updated_at"] = isoformat(utc_now())
                records[index] = self._normalize(draft)
                return records[index]
            return None

        record = self._document.mutate(_update)
        return self._model.from_record(record) if record else None

    def delete_by_id(self, record_id: str) -> Optional[ModelT]:
        def _delete(state: Dict[str, Any]) -> Optional[Dict[str, Any]]:
            records = self._records(state)
            for index, record in enumerate(records):
                if record["id"] == record_id:
                    return records.pop(index)
            return None

        record = self._document.mutate(_delete)
        return self._model.from_record(record) if record else None

    def delete_many(self, filters: Sequence[Filter]) -> int:
        def _delete(state: Dict[str, Any]) -> int:
            records = self._records(state)
            kept = [record for record in records if not matches_all(record, filters)]
            removed = len(records) - len(kept)
            state[self._key] = kept
            return removed

        removed = self._document.mutate(_delete)
        logger.debug("Deleted %d %s record(s)", removed, self._key)
        return removed


def build_local_store(path: Optional[Path] = None) -> DataStore:
    """Build a store backed by one JSON document; ``path=None`` keeps it in memory."""

    document = JsonDocument(path)
    return DataStore(
        events=LocalCollection(document, "events", Event),
        lists=LocalCollection(document, "lists", TaskList),
        items=LocalCollection(document, "items", Item),
    )
