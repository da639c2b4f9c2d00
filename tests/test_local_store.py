import re
from datetime import datetime, timezone

from calendar_mcp.data import Between, Contains, Eq, In, build_local_store


def _event(title, start, end, **extra):
    return {
        "calendar_id": "cal-1",
        "owner_id": "owner-1",
        "title": title,
        "start_date": start,
        "end_date": end,
        **extra,
    }


def test_create_assigns_hex_identifier_and_timestamps(store):
    task_list = store.lists.create({"name": "Groceries", "user_id": "u1"})

    assert re.fullmatch(r"[0-9a-f]{24}", task_list.id)
    assert task_list.created_at is not None
    assert store.lists.find_by_id(task_list.id) == task_list
    assert store.lists.find_by_id("0" * 24) is None


def test_filters(store):
    store.events.create(_event("Standup", "2024-03-04T09:00:00Z", "2024-03-04T09:30:00Z", tags=["work"]))
    store.events.create(_event("Dinner", "2024-03-04T19:00:00Z", "2024-03-04T21:00:00Z", tags=["personal"]))
    store.events.create(_event("Review", "2024-03-05T10:00:00Z", "2024-03-05T11:00:00Z", status="tentative"))

    morning = datetime(2024, 3, 4, 12, 0, tzinfo=timezone.utc)
    assert [e.title for e in store.events.find([Between("start_date", upper=morning)])] == ["Standup"]
    assert [e.title for e in store.events.find([In("tags", ("personal",))])] == ["Dinner"]
    assert [e.title for e in store.events.find([Eq("status", "tentative")])] == ["Review"]
    assert [e.title for e in store.events.find([Contains("title", "STAND")])] == ["Standup"]
    ordered = store.events.find(order_by="start_date", descending=True)
    assert [e.title for e in ordered] == ["Review", "Dinner", "Standup"]


def test_update_and_delete(store):
    item = store.items.create({"content": "Milk", "list_id": "l1"})
    updated = store.items.update_by_id(item.id, {"content": "Oat milk"})

    assert updated.content == "Oat milk"
    assert store.items.update_by_id("missing", {"content": "x"}) is None
    assert store.items.delete_by_id(item.id).content == "Oat milk"
    assert store.items.delete_by_id(item.id) is None


def test_delete_many(store):
    for content in ("Milk", "Eggs"):
        store.items.create({"content": content, "list_id": "l1"})
    store.items.create({"content": "Nails", "list_id": "l2"})

    assert store.items.delete_many([Eq("list_id", "l1")]) == 2
    assert [item.content for item in store.items.find()] == ["Nails"]


def test_state_is_persisted_to_one_document(settings):
    first = build_local_store(settings.storage.data_file)
    created = first.lists.create({"name": "Groceries", "user_id": "u1"})

    reopened = build_local_store(settings.storage.data_file)
    assert reopened.lists.find_by_id(created.id).name == "Groceries"
