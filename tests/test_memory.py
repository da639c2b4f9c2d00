import logging

import orjson
import pytest

from calendar_mcp.api.results import text_result
from calendar_mcp.services import ContextualMemory
from calendar_mcp.services.memory import extract_id, sanitize_result, summarize_interaction

EVENT_ID = "a" * 24
LIST_ID = "b" * 24
ITEM_ID = "c" * 24


@pytest.fixture
def memory(memory_path, clock):
    return ContextualMemory(memory_path, clock=clock)


def _created(kind, record_id):
    return text_result(f"{kind} created successfully!\n\nID: {record_id}")


def test_extract_id_reads_result_text():
    assert extract_id(_created("List", LIST_ID)) == LIST_ID
    assert extract_id(text_result("No id here")) is None
    assert extract_id({"error": "boom"}) is None
    assert extract_id(None) is None


def test_content_results_are_not_stored_verbatim():
    assert sanitize_result(_created("Item", ITEM_ID)) == {"type": "content", "hasContent": True}
    assert sanitize_result({"error": "boom"}) == {"error": "boom"}


def test_log_is_newest_first_and_bounded(memory_path, clock):
    memory = ContextualMemory(memory_path, max_entries=100, clock=clock)
    for index in range(101):
        memory.record_interaction("s1", "get_items", {"content": f"n{index}"}, text_result("none"))

    interactions = memory.get_session("s1").interactions
    assert len(interactions) == 100
    assert interactions[0].params == {"content": "n100"}
    assert interactions[-1].params == {"content": "n1"}


def test_creates_move_focus_and_fill_recency(memory):
    memory.record_interaction("s1", "create_event", {"title": "Standup"}, _created("Event", EVENT_ID))
    memory.record_interaction("s1", "create_list", {"name": "Groceries"}, _created("List", LIST_ID))
    memory.record_interaction(
        "s1", "create_item", {"content": "Milk", "list_id": LIST_ID}, _created("Item", ITEM_ID)
    )

    context = memory.get_session("s1").context
    assert context.current_focus == {"type": "list", "id": LIST_ID, "name": "Groceries"}
    assert context.recent_events[0]["id"] == EVENT_ID
    assert context.recent_lists[0]["name"] == "Groceries"
    assert context.recent_items[0] == {
        "id": ITEM_ID,
        "content": "Milk",
        "listId": LIST_ID,
        "operation": "created",
        "timestamp": "2024-03-04T08:00:00Z",
    }


def test_failed_create_leaves_context_alone(memory):
    memory.record_interaction("s1", "create_list", {"name": "Groceries"}, {"error": "boom"})

    context = memory.get_session("s1").context
    assert context.recent_lists == []
    assert context.current_focus is None


def test_reads_only_update_preferences(memory):
    memory.record_interaction("s1", "create_event", {"title": "Standup"}, _created("Event", EVENT_ID))
    memory.record_interaction(
        "s1", "get_events", {"calendar_id": "cal-9", "owner_id": "u7"}, text_result("Found 1 event(s)")
    )

    context = memory.get_session("s1").context
    assert context.current_focus["type"] == "event"
    assert context.user_preferences == {"preferredCalendar": "cal-9", "userId": "u7"}


def test_assign_moves_focus_even_on_error(memory):
    memory.record_interaction(
        "s1", "assign_list_to_event", {"event_id": EVENT_ID, "list_id": LIST_ID}, {"error": "List not found"}
    )

    assert memory.get_session("s1").context.current_focus == {
        "type": "event_list_relationship",
        "eventId": EVENT_ID,
        "listId": LIST_ID,
    }


def test_recency_lists_are_capped(memory):
    for index in range(12):
        memory.record_interaction("s1", "create_list", {"name": f"L{index}"}, _created("List", f"{index:024x}"))
    for index in range(22):
        memory.record_interaction(
            "s1", "create_item", {"content": f"I{index}", "list_id": LIST_ID}, _created("Item", f"{index:024x}")
        )

    context = memory.get_session("s1").context
    assert len(context.recent_lists) == 10
    assert context.recent_lists[0]["name"] == "L11"
    assert len(context.recent_items) == 20


def test_sessions_are_independent(memory):
    memory.record_interaction("s1", "create_list", {"name": "Groceries"}, _created("List", LIST_ID))

    assert memory.get_session("s2").context.recent_lists == []
    assert memory.get_contextual_suggestions("s2", "create_item", {}) == []


def test_suggestions(memory):
    memory.record_interaction("s1", "create_event", {"title": "Standup"}, _created("Event", EVENT_ID))
    memory.record_interaction("s1", "create_list", {"name": "Groceries"}, _created("List", LIST_ID))
    memory.record_interaction("s1", "get_events", {"calendar_id": "cal-9"}, text_result("ok"))

    assert memory.get_contextual_suggestions("s1", "create_item", {"content": "Milk"}) == [
        f'You recently created a list "Groceries" ({LIST_ID}). Would you like to add this item there?'
    ]
    assert memory.get_contextual_suggestions("s1", "create_item", {"content": "Milk", "list_id": LIST_ID}) == []
    assign = memory.get_contextual_suggestions("s1", "assign_list_to_event", {"list_id": LIST_ID})
    assert "Standup" in assign[0] and EVENT_ID in assign[0]
    assert memory.get_contextual_suggestions("s1", "create_event", {}) == [
        "Based on your activity, you might want to use calendar: cal-9"
    ]


def test_conversation_context(memory):
    memory.record_interaction("s1", "create_item", {"content": "x" * 60, "list_id": LIST_ID}, _created("Item", ITEM_ID))
    for _ in range(6):
        memory.record_interaction("s1", "delete_item", {"item_id": ITEM_ID}, text_result("deleted"))

    context = memory.get_conversation_context("s1")
    assert len(context["recentActivity"]) == 5
    assert context["recentActivity"][0]["summary"] == f"Deleted item {ITEM_ID}"
    assert context["suggestions"]["items"][0]["content"] == "x" * 50 + "..."


def test_summaries():
    memory = ContextualMemory()
    memory.record_interaction("s", "create_item", {"content": "short"}, text_result("ok"))
    memory.record_interaction("s", "update_list", {"list_id": LIST_ID}, text_result("ok"))
    memory.record_interaction("s", "create_list", {"name": "Trip"}, {"error": "boom"})

    summaries = [summarize_interaction(entry) for entry in memory.get_session("s").interactions]
    assert summaries == ["create_list failed: boom", "Performed update_list", 'Added item "short"']


def test_render_context_without_history(memory):
    text = memory.render_context("fresh")

    assert "**Current Focus:** None" in text
    assert "No recent activity" in text
    assert "None set" in text


def test_persistence_round_trip(memory_path, clock):
    memory = ContextualMemory(memory_path, clock=clock)
    memory.record_interaction("s1", "create_list", {"name": "Groceries"}, _created("List", LIST_ID))

    document = orjson.loads(memory_path.read_bytes())
    assert "savedAt" in document
    assert document["sessions"]["s1"]["context"]["recentLists"][0]["id"] == LIST_ID

    reloaded = ContextualMemory(memory_path, clock=clock)
    session = reloaded.get_session("s1")
    assert session.context.current_focus["name"] == "Groceries"
    assert session.interactions[0].operation == "create_list"


def test_missing_file_starts_empty(memory_path, caplog):
    with caplog.at_level(logging.INFO, logger="calendar_mcp.services.memory"):
        memory = ContextualMemory(memory_path)
    assert memory.sessions == {}
    assert "starting fresh" in caplog.text


def test_corrupt_file_starts_empty(memory_path, caplog):
    memory_path.write_text("{not json")
    with caplog.at_level(logging.WARNING, logger="calendar_mcp.services.memory"):
        memory = ContextualMemory(memory_path)
    assert memory.sessions == {}
    assert "Could not load memory" in caplog.text


def test_cleanup_evicts_idle_sessions(memory, clock):
    memory.get_session("old")
    clock.advance(days=8)
    memory.get_session("recent")

    assert memory.cleanup() == 1
    assert set(memory.sessions) == {"recent"}


def test_unencodable_values_are_stored_as_text(memory_path, clock):
    memory = ContextualMemory(memory_path, clock=clock)
    huge = 2**70

    memory.record_interaction("s1", "create_list", {"name": "a", "junk": huge}, {"error": "bad"})
    memory.record_interaction("s1", "get_events", {"calendar_id": huge}, {"error": "bad"})

    document = orjson.loads(memory_path.read_bytes())
    session = document["sessions"]["s1"]
    assert session["interactions"][1]["params"] == {"name": "a", "junk": str(huge)}
    assert session["context"]["userPreferences"] == {"preferredCalendar": str(huge)}


def test_failed_save_is_logged_not_raised(tmp_path, clock, caplog):
    memory = ContextualMemory(tmp_path, clock=clock)

    with caplog.at_level(logging.ERROR, logger="calendar_mcp.services.memory"):
        interaction = memory.record_interaction("s1", "get_lists", {}, text_result("none"))

    assert interaction.operation == "get_lists"
    assert memory.get_session("s1").interactions == [interaction]
    assert memory.save() is False
    assert "Failed to save memory" in caplog.text
