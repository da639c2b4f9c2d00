from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar, Dict, List, Optional
from uuid import uuid4

from ..core.timeutil import isoformat, parse_datetime
from .enums import EventStatus


def new_record_id() -> str:
    """Return a 24 character hexadecimal identifier."""

    return uuid4().hex[:24]


def _optional_datetime(value: Any) -> Optional[datetime]:
    return parse_datetime(value) if value else None


@dataclass(slots=True)
class Event:
    id: str
    calendar_id: Optional[str]
    owner_id: str
    title: str
    start_date: datetime
    end_date: datetime
    description: str = ""
    location: str = ""
    is_all_day: bool = False
    recurrence_rule: str = ""
    recurrence_exceptions: List[datetime] = field(default_factory=list)
    status: EventStatus = EventStatus.CONFIRMED
    tags: List[str] = field(default_factory=list)
    attendees: List[str] = field(default_factory=list)
    list_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    array_fields: ClassVar[tuple[str, ...]] = ("recurrence_exceptions", "tags", "attendees")
    datetime_fields: ClassVar[tuple[str, ...]] = ("start_date", "end_date", "created_at", "updated_at")

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Event":
        return cls(
            id=str(record["id"]),
            calendar_id=record.get("calendar_id"),
            owner_id=str(record["owner_id"]),
            title=str(record["title"]),
            start_date=parse_datetime(record["start_date"]),
            end_date=parse_datetime(record["end_date"]),
            description=record.get("description") or "",
            location=record.get("location") or "",
            is_all_day=bool(record.get("is_all_day", False)),
            recurrence_rule=record.get("recurrence_rule") or "",
            recurrence_exceptions=[parse_datetime(value) for value in record.get("recurrence_exceptions") or []],
            status=EventStatus(record.get("status") or EventStatus.CONFIRMED),
            tags=list(record.get("tags") or []),
            attendees=list(record.get("attendees") or []),
            list_id=record.get("list_id"),
            created_at=_optional_datetime(record.get("created_at")),
            updated_at=_optional_datetime(record.get("updated_at")),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "calendar_id": self.calendar_id,
            "owner_id": self.owner_id,
            "title": self.title,
            "start_date": isoformat(self.start_date),
            "end_date": isoformat(self.end_date),
            "description": self.description,
            "location": self.location,
            "is_all_day": self.is_all_day,
            "recurrence_rule": self.recurrence_rule,
            "recurrence_exceptions": [isoformat(value) for value in self.recurrence_exceptions],
            "status": self.status.value,
            "tags": list(self.tags),
            "attendees": list(self.attendees),
            "list_id": self.list_id,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }


@dataclass(slots=True)
class TaskList:
    id: str
    name: str
    user_id: str
    description: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    array_fields: ClassVar[tuple[str, ...]] = ()
    datetime_fields: ClassVar[tuple[str, ...]] = ("created_at", "updated_at")

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "TaskList":
        return cls(
            id=str(record["id"]),
            name=str(record["name"]),
            user_id=str(record["user_id"]),
            description=record.get("description") or "",
            created_at=_optional_datetime(record.get("created_at")),
            updated_at=_optional_datetime(record.get("updated_at")),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "user_id": self.user_id,
            "description": self.description,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }


@dataclass(slots=True)
class Item:
    id: str
    content: str
    list_id: str
    created_at: Optional[datetime] = None

    array_fields: ClassVar[tuple[str, ...]] = ()
    datetime_fields: ClassVar[tuple[str, ...]] = ("created_at",)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Item":
        return cls(
            id=str(record["id"]),
            content=str(record["content"]),
            list_id=str(record["list_id"]),
            created_at=_optional_datetime(record.get("created_at")),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "list_id": self.list_id,
            "created_at": isoformat(self.created_at),
        }
