from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..core.timeutil import isoformat, parse_datetime, utc_now


@dataclass(slots=True)
class Interaction:
    timestamp: datetime
    operation: str
    params: Dict[str, Any]
    result: Any
    context: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Interaction":
        return cls(
            timestamp=parse_datetime(record["timestamp"]),
            operation=str(record["operation"]),
            params=dict(record.get("params") or {}),
            result=record.get("result"),
            context=dict(record.get("context") or {}),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "timestamp": isoformat(self.timestamp),
            "operation": self.operation,
            "params": self.params,
            "result": self.result,
            "context": self.context,
        }


@dataclass(slots=True)
class SessionContext:
    """Derived view of what a session has been working on.

    Recency entries are plain mappings stored newest first.
    """

    recent_events: List[Dict[str, Any]] = field(default_factory=list)
    recent_lists: List[Dict[str, Any]] = field(default_factory=list)
    recent_items: List[Dict[str, Any]] = field(default_factory=list)
    user_preferences: Dict[str, Any] = field(default_factory=dict)
    current_focus: Optional[Dict[str, Any]] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "SessionContext":
        return cls(
            recent_events=list(record.get("recentEvents") or []),
            recent_lists=list(record.get("recentLists") or []),
            recent_items=list(record.get("recentItems") or []),
            user_preferences=dict(record.get("userPreferences") or {}),
            current_focus=record.get("currentFocus"),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "recentEvents": self.recent_events,
            "recentLists": self.recent_lists,
            "recentItems": self.recent_items,
            "userPreferences": self.user_preferences,
            "currentFocus": self.current_focus,
        }


@dataclass(slots=True)
class Session:
    session_id: str
    interactions: List[Interaction] = field(default_factory=list)
    context: SessionContext = field(default_factory=SessionContext)
    created: datetime = field(default_factory=utc_now)
    last_accessed: datetime = field(default_factory=utc_now)

    @classmethod
    def from_record(cls, session_id: str, record: Dict[str, Any]) -> "Session":
        metadata = record.get("metadata") or {}
        created = parse_datetime(metadata["created"]) if metadata.get("created") else utc_now()
        last_accessed = parse_datetime(metadata["lastAccessed"]) if metadata.get("lastAccessed") else created
        return cls(
            session_id=session_id,
            interactions=[Interaction.from_record(entry) for entry in record.get("interactions") or []],
            context=SessionContext.from_record(record.get("context") or {}),
            created=created,
            last_accessed=last_accessed,
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "interactions": [interaction.to_record() for interaction in self.interactions],
            "context": self.context.to_record(),
            "metadata": {
                "created": isoformat(self.created),
                "lastAccessed": isoformat(self.last_accessed),
            },
        }
