from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain import EventStatus, EventTag


class ToolArguments(BaseModel):
    model_config = ConfigDict(extra="forbid", use_enum_values=True)


class CreateEventArgs(ToolArguments):
    calendar_id: str = Field(description="Calendar ID")
    owner_id: str = Field(description="Owner ID")
    title: str = Field(description="Event title")
    start_date: datetime = Field(description="Start date")
    end_date: datetime = Field(description="End date")
    description: Optional[str] = Field(default=None, description="Event description")
    location: Optional[str] = Field(default=None, description="Event location")
    is_all_day: Optional[bool] = Field(default=None, description="Is all day event")
    recurrence_rule: Optional[str] = Field(default=None, description="Recurrence rule")
    recurrence_exceptions: Optional[List[datetime]] = Field(default=None, description="Recurrence exceptions")
    status: Optional[EventStatus] = Field(default=None, description="Event status")
    tags: Optional[List[EventTag]] = Field(default=None, description="Event tags")
    attendees: Optional[List[str]] = Field(default=None, description="Attendee emails or IDs")
    list_id: Optional[str] = Field(default=None, description="Optional: assign event to a list")


class GetEventsArgs(ToolArguments):
    calendar_id: Optional[str] = Field(default=None, description="Filter by calendar ID")
    owner_id: Optional[str] = Field(default=None, description="Filter by owner ID")
    start_date: Optional[datetime] = Field(default=None, description="Filter events starting from this date")
    end_date: Optional[datetime] = Field(default=None, description="Filter events ending until this date")
    status: Optional[EventStatus] = Field(default=None, description="Filter by status")
    tags: Optional[List[EventTag]] = Field(default=None, description="Filter by tags")
    list_id: Optional[str] = Field(default=None, description="Filter events assigned to a specific list")


class UpdateEventArgs(ToolArguments):
    event_id: str = Field(description="Event ID to update")
    calendar_id: Optional[str] = None
    owner_id: Optional[str] = None
    title: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    description: Optional[str] = None
    location: Optional[str] = None
    is_all_day: Optional[bool] = None
    recurrence_rule: Optional[str] = None
    recurrence_exceptions: Optional[List[datetime]] = None
    status: Optional[EventStatus] = None
    tags: Optional[List[EventTag]] = None
    attendees: Optional[List[str]] = None
    list_id: Optional[str] = Field(default=None, description="Assign event to a list")


class EventIdArgs(ToolArguments):
    event_id: str = Field(description="Event ID")


class CreateListArgs(ToolArguments):
    name: str = Field(description="List name")
    user_id: str = Field(description="User ID who owns the list")
    description: Optional[str] = Field(default=None, description="List description")


class GetListsArgs(ToolArguments):
    user_id: Optional[str] = Field(default=None, description="Filter by user ID")
    name: Optional[str] = Field(default=None, description="Filter by list name")


class UpdateListArgs(ToolArguments):
    list_id: str = Field(description="List ID to update")
    name: Optional[str] = None
    description: Optional[str] = None


class DeleteListArgs(ToolArguments):
    list_id: str = Field(description="List ID to delete")
    delete_items: bool = Field(default=False, description="Whether to delete associated items")


class CreateItemArgs(ToolArguments):
    content: str = Field(description="Item content")
    list_id: str = Field(description="List ID to add the item to")


class GetItemsArgs(ToolArguments):
    list_id: Optional[str] = Field(default=None, description="Filter by list ID")
    content: Optional[str] = Field(default=None, description="Search by content")


class UpdateItemArgs(ToolArguments):
    item_id: str = Field(description="Item ID to update")
    content: Optional[str] = None


class ItemIdArgs(ToolArguments):
    item_id: str = Field(description="Item ID to delete")


class AssignListArgs(ToolArguments):
    event_id: str = Field(description="Event ID")
    list_id: str = Field(description="List ID to assign")


class ConfirmOperationArgs(ToolArguments):
    operation_id: Optional[str] = Field(
        default=None, description="Operation ID to confirm (optional if using natural language)"
    )
    confirm: Optional[bool] = Field(default=None, description="Whether to proceed with the operation")
    response: Optional[str] = Field(
        default=None, description='Natural language response like "yes", "no", "confirm", "cancel"'
    )


class GetContextArgs(ToolArguments):
    operation: Optional[str] = Field(default=None, description="Operation you are about to perform")
    params: Optional[Dict[str, Any]] = Field(default=None, description="Parameters for that operation")
