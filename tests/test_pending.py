from datetime import timedelta

from calendar_mcp.services.pending import PendingOperationStore


def test_create_assigns_unique_ids_and_moves_alias(clock):
    pending = PendingOperationStore(clock=clock)

    first = pending.create("create_list", {"name": "A", "user_id": "u1"})
    second = pending.create("create_list", {"name": "B", "user_id": "u1"})

    assert first.id != second.id
    assert first.id.startswith("op_1_")
    assert second.id.startswith("op_2_")
    assert pending.resolve(first.id) == first
    assert pending.peek_alias() == second
    assert len(pending) == 2


def test_consume_alias_clears_alias_but_not_entry(clock):
    pending = PendingOperationStore(clock=clock)
    created = pending.create("delete_item", {"item_id": "x"})

    assert pending.consume_alias() == created
    assert pending.peek_alias() is None
    assert pending.consume_alias() is None
    assert created.id in pending


def test_alias_to_removed_entry_resolves_to_nothing(clock):
    pending = PendingOperationStore(clock=clock)
    created = pending.create("delete_item", {"item_id": "x"})

    pending.remove(created.id)
    pending.remove(created.id)

    assert pending.resolve(created.id) is None
    assert pending.peek_alias() is None


def test_stored_arguments_are_copied(clock):
    pending = PendingOperationStore(clock=clock)
    arguments = {"name": "A"}
    created = pending.create("create_list", arguments)
    arguments["name"] = "changed"

    assert created.arguments == {"name": "A"}


def test_sweep_removes_only_expired_entries(clock):
    pending = PendingOperationStore(ttl=timedelta(minutes=5), clock=clock)
    old = pending.create("delete_event", {"event_id": "e1"})
    clock.advance(minutes=4)
    fresh = pending.create("delete_event", {"event_id": "e2"})
    clock.advance(minutes=2)

    assert pending.sweep_expired() == 1
    assert pending.resolve(old.id) is None
    assert pending.resolve(fresh.id) == fresh

    clock.advance(minutes=10)
    assert pending.cleanup() == 1
    assert len(pending) == 0
