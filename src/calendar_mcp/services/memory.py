from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import orjson

from ..api.results import has_content, is_error, result_text
from ..core.timeutil import isoformat, utc_now
from ..domain import Interaction, Session, SessionContext

logger = logging.getLogger(__name__)

ID_PATTERN = re.compile(r"ID:\s*([a-f0-9]{24})", re.IGNORECASE)

RECENT_EVENTS_LIMIT = 10
RECENT_LISTS_LIMIT = 10
RECENT_ITEMS_LIMIT = 20
ITEM_PREVIEW_LENGTH = 50
SUMMARY_PREVIEW_LENGTH = 30

# orjson rejects integers outside this range.
INT_MIN = -(2**63)
INT_MAX = 2**64 - 1


def extract_id(result: Any) -> Optional[str]:
    """Pull the 24 character hex id out of a tool result's text, if present."""

    text = result_text(result)
    if not text:
        return None
    match = ID_PATTERN.search(text)
    return match.group(1) if match else None


def _json_safe(value: Any) -> Any:
    """Copy ``value`` into plain JSON types orjson can always encode.

    Anything else, including integers outside the 64-bit range, is stored
    as its string form.
    """

    if isinstance(value, Enum):
        return _json_safe(value.value)
    if value is None or isinstance(value, (bool, str, float)):
        return value
    if isinstance(value, int):
        return value if INT_MIN <= value <= INT_MAX else str(value)
    if isinstance(value, datetime):
        return isoformat(value)
    if isinstance(value, dict):
        return {str(key): _json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_json_safe(item) for item in value]
    return str(value)


def sanitize_params(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return _json_safe(dict(params or {}))


def sanitize_result(result: Any) -> Any:
    if has_content(result):
        return {"type": "content", "hasContent": True}
    return _json_safe(result)


def _truncate(text: Optional[str], length: int) -> str:
    if not text:
        return ""
    return text if len(text) <= length else text[:length] + "..."


def summarize_interaction(interaction: Interaction) -> str:
    params = interaction.params
    operation = interaction.operation
    if is_error(interaction.result):
        return f"{operation} failed: {interaction.result.get('error', 'unknown error')}"
    if operation == "create_event":
        return f'Created event "{params.get("title")}"'
    if operation == "create_list":
        return f'Created list "{params.get("name")}"'
    if operation == "create_item":
        return f'Added item "{_truncate(params.get("content"), SUMMARY_PREVIEW_LENGTH)}"'
    if operation == "assign_list_to_event":
        return f"Assigned list {params.get('list_id')} to event {params.get('event_id')}"
    if operation.startswith("delete_"):
        target = operation.removeprefix("delete_")
        return f"Deleted {target} {params.get(f'{target}_id')}"
    return f"Performed {operation}"


class ContextualMemory:
    """Per-session interaction history with derived context.

    The whole session map is rewritten to one JSON document on every
    recording mutation and read back once at construction.
    """

    def __init__(
        self,
        persist_path: Optional[Path] = None,
        *,
        max_entries: int = 100,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.persist_path = persist_path
        self.max_entries = max_entries
        self._clock = clock
        self.sessions: Dict[str, Session] = {}
        self.load()

    # Sessions ------------------------------------------------------------
    def get_session(self, session_id: str = "default") -> Session:
        session = self.sessions.get(session_id)
        now = self._clock()
        if session is None:
            session = Session(session_id=session_id, created=now, last_accessed=now)
            self.sessions[session_id] = session
            logger.debug("Created memory session %s", session_id)
        session.last_accessed = now
        return session

    def record_interaction(
        self,
        session_id: str,
        operation: str,
        params: Optional[Dict[str, Any]],
        result: Any,
        context: Optional[Dict[str, Any]] = None,
    ) -> Interaction:
        session = self.get_session(session_id)
        safe_params = sanitize_params(params)
        interaction = Interaction(
            timestamp=self._clock(),
            operation=operation,
            params=safe_params,
            result=sanitize_result(result),
            context=_json_safe(dict(context or {})),
        )
        session.interactions.insert(0, interaction)
        del session.interactions[self.max_entries :]

        self._update_context(session, operation, safe_params, result)
        self.save()
        return interaction

    def _update_context(
        self,
        session: Session,
        operation: str,
        params: Dict[str, Any],
        result: Any,
    ) -> None:
        context = session.context
        timestamp = isoformat(self._clock())
        succeeded = not is_error(result)

        if operation == "create_event" and succeeded:
            event_id = extract_id(result)
            context.recent_events.insert(
                0,
                {
                    "id": event_id,
                    "title": params.get("title"),
                    "startDate": params.get("start_date"),
                    "endDate": params.get("end_date"),
                    "operation": "created",
                    "timestamp": timestamp,
                },
            )
            context.current_focus = {"type": "event", "id": event_id, "title": params.get("title")}
        elif operation == "create_list" and succeeded:
            list_id = extract_id(result)
            context.recent_lists.insert(
                0,
                {"id": list_id, "name": params.get("name"), "operation": "created", "timestamp": timestamp},
            )
            context.current_focus = {"type": "list", "id": list_id, "name": params.get("name")}
        elif operation == "create_item" and succeeded:
            context.recent_items.insert(
                0,
                {
                    "id": extract_id(result),
                    "content": params.get("content"),
                    "listId": params.get("list_id"),
                    "operation": "created",
                    "timestamp": timestamp,
                },
            )
        elif operation == "get_events":
            if params.get("calendar_id"):
                context.user_preferences["preferredCalendar"] = params["calendar_id"]
            if params.get("owner_id"):
                context.user_preferences["userId"] = params["owner_id"]
        elif operation == "assign_list_to_event":
            context.current_focus = {
                "type": "event_list_relationship",
                "eventId": params.get("event_id"),
                "listId": params.get("list_id"),
            }

        del context.recent_events[RECENT_EVENTS_LIMIT:]
        del context.recent_lists[RECENT_LISTS_LIMIT:]
        del context.recent_items[RECENT_ITEMS_LIMIT:]

    # Suggestions ---------------------------------------------------------
    def get_contextual_suggestions(
        self,
        session_id: str,
        operation: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> List[str]:
        context = self.get_session(session_id).context
        params = params or {}
        suggestions: List[str] = []

        if operation == "create_item" and not params.get("list_id") and context.recent_lists:
            recent = context.recent_lists[0]
            suggestions.append(
                f'You recently created a list "{recent.get("name")}" ({recent.get("id")}). '
                "Would you like to add this item there?"
            )

        if operation == "assign_list_to_event" and not params.get("event_id") and context.recent_events:
            recent = context.recent_events[0]
            suggestions.append(
                f'You recently created event "{recent.get("title")}" ({recent.get("id")}). '
                "Is this the event you want to assign the list to?"
            )

        preferred = context.user_preferences.get("preferredCalendar")
        if operation == "create_event" and preferred:
            suggestions.append(f"Based on your activity, you might want to use calendar: {preferred}")

        return suggestions

    @staticmethod
    def recent_entity_suggestions(context: SessionContext) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "events": [
                {"id": entry.get("id"), "title": entry.get("title"), "when": entry.get("startDate")}
                for entry in context.recent_events
            ],
            "lists": [{"id": entry.get("id"), "name": entry.get("name")} for entry in context.recent_lists],
            "items": [
                {"id": entry.get("id"), "content": _truncate(entry.get("content"), ITEM_PREVIEW_LENGTH)}
                for entry in context.recent_items
            ],
        }

    def get_conversation_context(self, session_id: str, limit: int = 5) -> Dict[str, Any]:
        session = self.get_session(session_id)
        recent = session.interactions[:limit]
        return {
            "currentFocus": session.context.current_focus,
            "recentActivity": [
                {
                    "operation": interaction.operation,
                    "timestamp": isoformat(interaction.timestamp),
                    "summary": summarize_interaction(interaction),
                }
                for interaction in recent
            ],
            "userPreferences": dict(session.context.user_preferences),
            "suggestions": self.recent_entity_suggestions(session.context),
        }

    def render_context(
        self,
        session_id: str,
        operation: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Format the conversation context as the text answer of ``get_context``."""

        context = self.get_conversation_context(session_id)
        suggestions: List[str] = []
        if operation and params is not None:
            suggestions = self.get_contextual_suggestions(session_id, operation, params)

        focus = context["currentFocus"]
        if focus:
            label = focus.get("title") or focus.get("name") or focus.get("id")
            if focus.get("type") == "event_list_relationship":
                label = f"event {focus.get('eventId')} / list {focus.get('listId')}"
            focus_text = f"{focus.get('type')} - {label}"
        else:
            focus_text = "None"

        activity = "\n".join(
            f"- {entry['summary']} ({entry['timestamp']})" for entry in context["recentActivity"]
        )
        entities = context["suggestions"]
        events = ", ".join(f'"{entry["title"]}" ({entry["id"]})' for entry in entities["events"])
        lists = ", ".join(f'"{entry["name"]}" ({entry["id"]})' for entry in entities["lists"])
        preferences = "\n".join(f"- {key}: {value}" for key, value in context["userPreferences"].items())

        sections = [
            "**Current Context**",
            f"**Current Focus:** {focus_text}",
            f"**Recent Activity:**\n{activity or 'No recent activity'}",
            "**Available for Quick Reference:**\n"
            f"- Recent Events: {events or 'None'}\n"
            f"- Recent Lists: {lists or 'None'}\n"
            f"- Recent Items: {len(entities['items'])} items available",
        ]
        if suggestions:
            sections.append("**Suggestions:**\n" + "\n".join(f"- {text}" for text in suggestions))
        sections.append(f"**User Preferences:**\n{preferences or 'None set'}")
        return "\n\n".join(sections)

    # Persistence ---------------------------------------------------------
    def save(self) -> bool:
        """Write every session to disk. Failures are logged, never raised."""

        if self.persist_path is None:
            return False
        document = {
            "sessions": {key: session.to_record() for key, session in self.sessions.items()},
            "savedAt": isoformat(self._clock()),
        }
        try:
            self.persist_path.parent.mkdir(parents=True, exist_ok=True)
            self.persist_path.write_bytes(orjson.dumps(document, option=orjson.OPT_INDENT_2) + b"\n")
        except (OSError, TypeError) as exc:
            logger.error("Failed to save memory to %s: %s", self.persist_path, exc)
            return False
        return True

    def load(self) -> None:
        self.sessions = {}
        if self.persist_path is None:
            return
        try:
            document = orjson.loads(self.persist_path.read_bytes())
            sessions = document.get("sessions") or {}
            self.sessions = {key: Session.from_record(key, record) for key, record in sessions.items()}
        except FileNotFoundError:
            logger.info("No memory file at %s, starting fresh", self.persist_path)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            self.sessions = {}
            logger.warning("Could not load memory from %s, starting fresh: %s", self.persist_path, exc)
        else:
            logger.debug("Loaded %d memory session(s) from %s", len(self.sessions), self.persist_path)

    def cleanup(self, max_age: timedelta = timedelta(days=7)) -> int:
        cutoff = self._clock() - max_age
        stale = [key for key, session in self.sessions.items() if session.last_accessed < cutoff]
        for key in stale:
            del self.sessions[key]
        if stale:
            logger.info("Evicted %d stale memory session(s)", len(stale))
        self.save()
        return len(stale)
