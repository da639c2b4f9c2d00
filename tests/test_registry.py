import pytest

from calendar_mcp.api import ErrorCode, ToolCallError, describe_write, get_operation, get_operations, is_read_only

READ_OPERATIONS = {"get_events", "get_lists", "get_items", "get_event_with_list_and_items", "get_context"}
WRITE_OPERATIONS = {
    "create_event",
    "update_event",
    "delete_event",
    "create_list",
    "update_list",
    "delete_list",
    "create_item",
    "update_item",
    "delete_item",
    "assign_list_to_event",
    "unassign_list_from_event",
}


def test_catalog_covers_the_tool_surface():
    names = {spec.name for spec in get_operations()}
    assert names == READ_OPERATIONS | WRITE_OPERATIONS | {"confirm_operation"}


@pytest.mark.parametrize("name", sorted(READ_OPERATIONS))
def test_read_operations_are_read_only(name):
    assert is_read_only(name)


@pytest.mark.parametrize("name", sorted(WRITE_OPERATIONS))
def test_write_operations_need_confirmation(name):
    assert not is_read_only(name)


def test_unknown_operation_is_method_not_found():
    with pytest.raises(ToolCallError) as excinfo:
        get_operation("frobnicate")
    assert excinfo.value.code is ErrorCode.METHOD_NOT_FOUND


def test_write_summaries():
    assert describe_write(
        "create_event",
        {"title": "Standup", "start_date": "2024-03-04T09:00:00Z", "end_date": "2024-03-04T09:30:00Z", "location": "Room 1"},
    ) == 'Create new event: "Standup" from 2024-03-04T09:00:00Z to 2024-03-04T09:30:00Z at Room 1'
    assert describe_write("assign_list_to_event", {"event_id": "E1", "list_id": "L1"}) == "Assign list L1 to event E1"

    delete_list = describe_write("delete_list", {"list_id": "L1", "delete_items": True})
    assert delete_list.startswith("DELETE list with ID: L1")
    assert "also DELETE all items" in delete_list
    assert "cannot be undone" in delete_list

    assert "also DELETE" not in describe_write("delete_list", {"list_id": "L1"})
    assert describe_write("update_item", {"item_id": "I1", "content": "Oat milk"}).endswith('New content: "Oat milk"')


def test_unknown_write_falls_back_to_json_rendering():
    text = describe_write("mystery", {"a": 1})
    assert text.startswith("Execute operation: mystery with parameters: ")
    assert '"a": 1' in text


def test_tool_schema_lists_required_arguments():
    tool = get_operation("create_item").as_tool()
    parameters = tool["function"]["parameters"]
    assert tool["function"]["name"] == "create_item"
    assert set(parameters["required"]) == {"content", "list_id"}
    assert "content" in parameters["properties"]
