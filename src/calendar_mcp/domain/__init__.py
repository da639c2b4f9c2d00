"""Domain records for calendars, lists, items, and conversational memory."""

from __future__ import annotations

from .enums import EventStatus, EventTag
from .models import Event, Item, TaskList, new_record_id
from .pending import PendingOperation
from .session import Interaction, Session, SessionContext

__all__ = [
    "Event",
    "EventStatus",
    "EventTag",
    "Interaction",
    "Item",
    "PendingOperation",
    "Session",
    "SessionContext",
    "TaskList",
    "new_record_id",
]
