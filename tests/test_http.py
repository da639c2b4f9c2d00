import pytest
from fastapi.testclient import TestClient

from calendar_mcp.services.http import create_app


@pytest.fixture
def client(gateway):
    return TestClient(create_app(gateway))


def test_lists_tools(client):
    response = client.get("/api/tools")

    assert response.status_code == 200
    tools = {tool["name"]: tool for tool in response.json()["tools"]}
    assert tools["get_events"]["read_only"] is True
    assert tools["delete_list"]["read_only"] is False
    assert "list_id" in tools["delete_list"]["parameters"]["properties"]


def test_write_then_confirm(client, store):
    response = client.post("/api/tools/create_list", json={"arguments": {"name": "Groceries", "user_id": "u1"}})
    assert response.status_code == 200
    assert "CONFIRMATION REQUIRED" in response.json()["text"]

    response = client.post("/api/tools/confirm_operation", json={"arguments": {"response": "yes"}})
    assert response.status_code == 200
    assert response.json()["text"].startswith("Operation confirmed and executed:")
    assert [task_list.name for task_list in store.lists.find()] == ["Groceries"]


def test_session_id_is_passed_through(client, gateway):
    client.post(
        "/api/tools/get_lists",
        json={"arguments": {"user_id": "u1"}, "session_id": "browser-tab"},
    )

    assert gateway.context.memory.sessions["browser-tab"].interactions[0].operation == "get_lists"


def test_unknown_tool_is_404(client):
    response = client.post("/api/tools/frobnicate", json={})

    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "MethodNotFound"


def test_invalid_request_is_400(client):
    response = client.post("/api/tools/confirm_operation", json={"arguments": {"response": "yes"}})

    assert response.status_code == 400
    assert response.json()["detail"] == {
        "code": "InvalidRequest",
        "message": "No pending operation found. Please make a request first.",
    }
