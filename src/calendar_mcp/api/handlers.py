from __future__ import annotations

from typing import Any, Dict, List

from ..core.timeutil import isoformat
from ..data import Between, Contains, DataStore, Eq, Filter, In
from ..domain import Event, Item, TaskList
from .errors import ToolCallError
from .models import (
    AssignListArgs,
    ConfirmOperationArgs,
    CreateEventArgs,
    CreateItemArgs,
    CreateListArgs,
    DeleteListArgs,
    EventIdArgs,
    GetContextArgs,
    GetEventsArgs,
    GetItemsArgs,
    GetListsArgs,
    ItemIdArgs,
    UpdateEventArgs,
    UpdateItemArgs,
    UpdateListArgs,
)
from .registry import register_control, register_operation

IRREVERSIBLE = "WARNING: This action cannot be undone!"


def _not_found(kind: str, record_id: str) -> ToolCallError:
    return ToolCallError.invalid_request(f"{kind} with ID {record_id} not found")


def _event_details(event: Event) -> List[str]:
    lines = [
        f"ID: {event.id}",
        f"Title: {event.title}",
        f"Start: {isoformat(event.start_date)}",
        f"End: {isoformat(event.end_date)}",
    ]
    if event.location:
        lines.append(f"Location: {event.location}")
    if event.description:
        lines.append(f"Description: {event.description}")
    return lines


def _event_listing(event: Event, indent: str = "   ") -> str:
    lines = [
        f"**{event.title}**",
        f"{indent}ID: {event.id}",
        f"{indent}Start: {isoformat(event.start_date)}",
        f"{indent}End: {isoformat(event.end_date)}",
        f"{indent}Status: {event.status.value}",
        f"{indent}Calendar: {event.calendar_id}",
        f"{indent}Owner: {event.owner_id}",
    ]
    if event.location:
        lines.append(f"{indent}Location: {event.location}")
    if event.description:
        lines.append(f"{indent}Description: {event.description}")
    if event.tags:
        lines.append(f"{indent}Tags: {', '.join(event.tags)}")
    if event.list_id:
        lines.append(f"{indent}List: {event.list_id}")
    return "\n".join(lines)


def _list_details(task_list: TaskList) -> List[str]:
    lines = [f"ID: {task_list.id}", f"Name: {task_list.name}"]
    if task_list.description:
        lines.append(f"Description: {task_list.description}")
    return lines


def _item_details(item: Item) -> List[str]:
    return [f"ID: {item.id}", f"Content: {item.content}"]


def _changes(args: Any, *exclude: str) -> Dict[str, Any]:
    return args.model_dump(mode="json", exclude_unset=True, exclude=set(exclude))


# Confirmation summaries --------------------------------------------------


def _summarize_create_event(args: Dict[str, Any]) -> str:
    location = f" at {args['location']}" if args.get("location") else ""
    return f'Create new event: "{args.get("title")}" from {args.get("start_date")} to {args.get("end_date")}{location}'


def _summarize_update_event(args: Dict[str, Any]) -> str:
    lines = [f"Update event with ID: {args.get('event_id')}"]
    if args.get("title"):
        lines.append(f'New title: "{args["title"]}"')
    if args.get("start_date"):
        lines.append(f"New start: {args['start_date']}")
    if args.get("end_date"):
        lines.append(f"New end: {args['end_date']}")
    return "\n".join(lines)


def _summarize_delete_event(args: Dict[str, Any]) -> str:
    return f"DELETE event with ID: {args.get('event_id')}\n{IRREVERSIBLE}"


def _summarize_create_list(args: Dict[str, Any]) -> str:
    description = f" - {args['description']}" if args.get("description") else ""
    return f'Create new list: "{args.get("name")}"{description}'


def _summarize_update_list(args: Dict[str, Any]) -> str:
    lines = [f"Update list with ID: {args.get('list_id')}"]
    if args.get("name"):
        lines.append(f'New name: "{args["name"]}"')
    if args.get("description"):
        lines.append(f'New description: "{args["description"]}"')
    return "\n".join(lines)


def _summarize_delete_list(args: Dict[str, Any]) -> str:
    lines = [f"DELETE list with ID: {args.get('list_id')}"]
    if args.get("delete_items"):
        lines.append("WARNING: This will also DELETE all items in the list!")
    lines.append(IRREVERSIBLE)
    return "\n".join(lines)


def _summarize_create_item(args: Dict[str, Any]) -> str:
    return f'Create new item: "{args.get("content")}" in list {args.get("list_id")}'


def _summarize_update_item(args: Dict[str, Any]) -> str:
    lines = [f"Update item with ID: {args.get('item_id')}"]
    if args.get("content"):
        lines.append(f'New content: "{args["content"]}"')
    return "\n".join(lines)


def _summarize_delete_item(args: Dict[str, Any]) -> str:
    return f"DELETE item with ID: {args.get('item_id')}\n{IRREVERSIBLE}"


def _summarize_assign(args: Dict[str, Any]) -> str:
    return f"Assign list {args.get('list_id')} to event {args.get('event_id')}"


def _summarize_unassign(args: Dict[str, Any]) -> str:
    return f"Remove list assignment from event {args.get('event_id')}"


# Control tools -----------------------------------------------------------

register_control(
    "get_context",
    description="Get current conversation context and suggestions.",
    arguments=GetContextArgs,
)
register_control(
    "confirm_operation",
    description="Confirm or cancel a pending write operation by ID, boolean, or a natural language reply.",
    arguments=ConfirmOperationArgs,
)


# Events ------------------------------------------------------------------


@register_operation(
    "create_event",
    description="Create a new event.",
    arguments=CreateEventArgs,
    read_only=False,
    category="events",
    summary=_summarize_create_event,
    tags=("write",),
)
def create_event(store: DataStore, args: CreateEventArgs) -> str:
    event = store.events.create(_changes(args))
    return "Event created successfully!\n\n" + "\n".join(_event_details(event))


@register_operation(
    "get_events",
    description="Get events with optional filters.",
    arguments=GetEventsArgs,
    read_only=True,
    category="events",
    tags=("read",),
)
def get_events(store: DataStore, args: GetEventsArgs) -> str:
    filters: List[Filter] = []
    if args.calendar_id:
        filters.append(Eq("calendar_id", args.calendar_id))
    if args.owner_id:
        filters.append(Eq("owner_id", args.owner_id))
    if args.status:
        filters.append(Eq("status", args.status))
    if args.tags:
        filters.append(In("tags", tuple(args.tags)))
    if args.list_id:
        filters.append(Eq("list_id", args.list_id))
    if args.start_date:
        filters.append(Between("start_date", lower=args.start_date))
    if args.end_date:
        filters.append(Between("end_date", upper=args.end_date))

    events = store.events.find(filters, order_by="start_date")
    if not events:
        return "No events found matching the criteria."
    listing = "\n\n".join(_event_listing(event) for event in events)
    return f"Found {len(events)} event(s):\n\n{listing}"


@register_operation(
    "update_event",
    description="Update an existing event.",
    arguments=UpdateEventArgs,
    read_only=False,
    category="events",
    summary=_summarize_update_event,
    tags=("write",),
)
def update_event(store: DataStore, args: UpdateEventArgs) -> str:
    event = store.events.update_by_id(args.event_id, _changes(args, "event_id"))
    if event is None:
        raise _not_found("Event", args.event_id)
    return "Event updated successfully!\n\n" + "\n".join(_event_details(event))


@register_operation(
    "delete_event",
    description="Delete an event.",
    arguments=EventIdArgs,
    read_only=False,
    category="events",
    summary=_summarize_delete_event,
    tags=("write",),
)
def delete_event(store: DataStore, args: EventIdArgs) -> str:
    event = store.events.delete_by_id(args.event_id)
    if event is None:
        raise _not_found("Event", args.event_id)
    return f'Event "{event.title}" deleted successfully!'


# Lists -------------------------------------------------------------------


@register_operation(
    "create_list",
    description="Create a new list.",
    arguments=CreateListArgs,
    read_only=False,
    category="lists",
    summary=_summarize_create_list,
    tags=("write",),
)
def create_list(store: DataStore, args: CreateListArgs) -> str:
    task_list = store.lists.create(_changes(args))
    lines = _list_details(task_list) + [f"User: {task_list.user_id}"]
    return "List created successfully!\n\n" + "\n".join(lines)


@register_operation(
    "get_lists",
    description="Get lists with optional filters.",
    arguments=GetListsArgs,
    read_only=True,
    category="lists",
    tags=("read",),
)
def get_lists(store: DataStore, args: GetListsArgs) -> str:
    filters: List[Filter] = []
    if args.user_id:
        filters.append(Eq("user_id", args.user_id))
    if args.name:
        filters.append(Contains("name", args.name))

    lists = store.lists.find(filters, order_by="name")
    if not lists:
        return "No lists found matching the criteria."
    blocks = []
    for task_list in lists:
        block = f"**{task_list.name}**\n   ID: {task_list.id}\n   User: {task_list.user_id}"
        if task_list.description:
            block += f"\n   Description: {task_list.description}"
        blocks.append(block)
    return f"Found {len(lists)} list(s):\n\n" + "\n\n".join(blocks)


@register_operation(
    "update_list",
    description="Update an existing list.",
    arguments=UpdateListArgs,
    read_only=False,
    category="lists",
    summary=_summarize_update_list,
    tags=("write",),
)
def update_list(store: DataStore, args: UpdateListArgs) -> str:
    task_list = store.lists.update_by_id(args.list_id, _changes(args, "list_id"))
    if task_list is None:
        raise _not_found("List", args.list_id)
    return "List updated successfully!\n\n" + "\n".join(_list_details(task_list))


@register_operation(
    "delete_list",
    description="Delete a list and optionally its items.",
    arguments=DeleteListArgs,
    read_only=False,
    category="lists",
    summary=_summarize_delete_list,
    tags=("write",),
)
def delete_list(store: DataStore, args: DeleteListArgs) -> str:
    task_list = store.lists.delete_by_id(args.list_id)
    if task_list is None:
        raise _not_found("List", args.list_id)
    if args.delete_items:
        removed = store.items.delete_many([Eq("list_id", args.list_id)])
        return f'List "{task_list.name}" and {removed} associated items deleted successfully!'
    return f'List "{task_list.name}" deleted successfully!'


# Items -------------------------------------------------------------------


@register_operation(
    "create_item",
    description="Create a new item in a list.",
    arguments=CreateItemArgs,
    read_only=False,
    category="items",
    summary=_summarize_create_item,
    tags=("write",),
)
def create_item(store: DataStore, args: CreateItemArgs) -> str:
    if store.lists.find_by_id(args.list_id) is None:
        raise _not_found("List", args.list_id)
    item = store.items.create(_changes(args))
    lines = _item_details(item) + [f"List: {item.list_id}"]
    return "Item created successfully!\n\n" + "\n".join(lines)


@register_operation(
    "get_items",
    description="Get items with optional filters.",
    arguments=GetItemsArgs,
    read_only=True,
    category="items",
    tags=("read",),
)
def get_items(store: DataStore, args: GetItemsArgs) -> str:
    filters: List[Filter] = []
    if args.list_id:
        filters.append(Eq("list_id", args.list_id))
    if args.content:
        filters.append(Contains("content", args.content))

    items = store.items.find(filters, order_by="created_at", descending=True)
    if not items:
        return "No items found matching the criteria."
    blocks = [f"- **{item.content}**\n  ID: {item.id}\n  List: {item.list_id}" for item in items]
    return f"Found {len(items)} item(s):\n\n" + "\n\n".join(blocks)


@register_operation(
    "update_item",
    description="Update an existing item.",
    arguments=UpdateItemArgs,
    read_only=False,
    category="items",
    summary=_summarize_update_item,
    tags=("write",),
)
def update_item(store: DataStore, args: UpdateItemArgs) -> str:
    item = store.items.update_by_id(args.item_id, _changes(args, "item_id"))
    if item is None:
        raise _not_found("Item", args.item_id)
    return "Item updated successfully!\n\n" + "\n".join(_item_details(item))


@register_operation(
    "delete_item",
    description="Delete an item.",
    arguments=ItemIdArgs,
    read_only=False,
    category="items",
    summary=_summarize_delete_item,
    tags=("write",),
)
def delete_item(store: DataStore, args: ItemIdArgs) -> str:
    item = store.items.delete_by_id(args.item_id)
    if item is None:
        raise _not_found("Item", args.item_id)
    return f'Item "{item.content}" deleted successfully!'


# Event/list relationship -------------------------------------------------


@register_operation(
    "assign_list_to_event",
    description="Assign a list to an event.",
    arguments=AssignListArgs,
    read_only=False,
    category="relationships",
    summary=_summarize_assign,
    tags=("write",),
)
def assign_list_to_event(store: DataStore, args: AssignListArgs) -> str:
    task_list = store.lists.find_by_id(args.list_id)
    if task_list is None:
        raise _not_found("List", args.list_id)
    event = store.events.update_by_id(args.event_id, {"list_id": args.list_id})
    if event is None:
        raise _not_found("Event", args.event_id)
    return f'List "{task_list.name}" assigned to event "{event.title}" successfully!'


@register_operation(
    "unassign_list_from_event",
    description="Remove the list assignment from an event.",
    arguments=EventIdArgs,
    read_only=False,
    category="relationships",
    summary=_summarize_unassign,
    tags=("write",),
)
def unassign_list_from_event(store: DataStore, args: EventIdArgs) -> str:
    event = store.events.update_by_id(args.event_id, {"list_id": None})
    if event is None:
        raise _not_found("Event", args.event_id)
    return f'List assignment removed from event "{event.title}" successfully!'


@register_operation(
    "get_event_with_list_and_items",
    description="Get an event with its assigned list and all items in that list.",
    arguments=EventIdArgs,
    read_only=True,
    category="relationships",
    tags=("read",),
)
def get_event_with_list_and_items(store: DataStore, args: EventIdArgs) -> str:
    event = store.events.find_by_id(args.event_id)
    if event is None:
        raise _not_found("Event", args.event_id)

    text = "Event: " + _event_listing(event, indent="")
    if not event.list_id:
        return text + "\n\nNo list assigned to this event."

    task_list = store.lists.find_by_id(event.list_id)
    if task_list is None:
        return text + f"\n\nAssigned list {event.list_id} no longer exists."
    text += f"\n\n**Assigned List: {task_list.name}**\n"
    if task_list.description:
        text += f"Description: {task_list.description}\n"
    items = store.items.find([Eq("list_id", event.list_id)], order_by="created_at", descending=True)
    if items:
        text += f"\n**Items ({len(items)}):**\n" + "\n".join(f"- {item.content}" for item in items)
    else:
        text += "\nNo items in this list yet."
    return text
