from __future__ import annotations

import logging
import threading
from functools import lru_cache
from typing import Any, Dict, List, Optional

from ..api.errors import ErrorCode, ToolCallError
from ..api.models import ConfirmOperationArgs, GetContextArgs
from ..api.registry import get_operation
from ..api.results import result_text, text_result
from .confirmation import confirmation_prompt
from .context import ServiceContext
from .executor import validate_arguments
from .sweeper import PeriodicTask

logger = logging.getLogger(__name__)


def _with_suggestions(text: str, suggestions: List[str]) -> str:
    if not suggestions:
        return text
    return text + "\n\nContextual Suggestions:\n" + "\n".join(f"- {entry}" for entry in suggestions)


class ToolGateway:
    """Single entry point for tool calls.

    Every call runs under one re-entrant lock, shared with the background
    sweeps, so the pending map and the session map see one mutation at a time.
    """

    def __init__(self, context: ServiceContext) -> None:
        self.context = context
        self._lock = threading.RLock()
        self._tasks: List[PeriodicTask] = []

    @property
    def default_session_id(self) -> str:
        return self.context.settings.memory.default_session_id

    def call(
        self,
        name: str,
        arguments: Optional[Dict[str, Any]] = None,
        *,
        session_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        session = session_id or self.default_session_id
        arguments = dict(arguments or {})
        spec = get_operation(name)
        with self._lock:
            try:
                if name == "get_context":
                    return self._get_context(session, arguments)
                if name == "confirm_operation":
                    return self._confirm(session, arguments)
                if spec.read_only:
                    return self._read(session, name, arguments)
                return self._request_write(session, name, arguments)
            except ToolCallError as exc:
                self.context.memory.record_interaction(session, name, arguments, {"error": exc.message})
                raise
            except Exception as exc:  # noqa: BLE001
                logger.exception("Tool %s failed", name)
                self.context.memory.record_interaction(session, name, arguments, {"error": str(exc)})
                raise ToolCallError.internal_error(f"Error executing {name}: {exc}") from exc

    def _get_context(self, session: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
        args = validate_arguments(get_operation("get_context"), arguments)
        assert isinstance(args, GetContextArgs)
        return text_result(self.context.memory.render_context(session, args.operation, args.params))

    def _confirm(self, session: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
        args = validate_arguments(get_operation("confirm_operation"), arguments)
        assert isinstance(args, ConfirmOperationArgs)
        result = self.context.confirmation.confirm(
            session,
            operation_id=args.operation_id,
            confirm=args.confirm,
            response=args.response,
        )
        self.context.memory.record_interaction(session, "confirm_operation", arguments, result)
        return result

    def _read(self, session: str, name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
        result = self.context.executor.execute(name, arguments)
        self.context.memory.record_interaction(session, name, arguments, result)
        suggestions = self.context.memory.get_contextual_suggestions(session, name, arguments)
        if not suggestions:
            return result
        return text_result(_with_suggestions(result_text(result) or "", suggestions))

    def _request_write(self, session: str, name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
        suggestions = self.context.memory.get_contextual_suggestions(session, name, arguments)
        try:
            pending = self.context.confirmation.request(name, arguments)
        except ToolCallError as exc:
            if exc.code is ErrorCode.INVALID_REQUEST and suggestions:
                raise ToolCallError.invalid_request(_with_suggestions(exc.message, suggestions)) from exc
            raise
        return text_result(_with_suggestions(confirmation_prompt(pending), suggestions))

    # Maintenance ---------------------------------------------------------
    def sweep_pending(self) -> int:
        with self._lock:
            return self.context.pending.sweep_expired()

    def cleanup_sessions(self) -> int:
        with self._lock:
            return self.context.memory.cleanup(self.context.settings.memory.max_age)

    def start_background_sweeps(self) -> None:
        if self._tasks:
            return
        settings = self.context.settings
        self._tasks = [
            PeriodicTask("pending-expiry", settings.confirmation.sweep_interval, self.sweep_pending),
            PeriodicTask("session-cleanup", settings.memory.cleanup_interval, self.cleanup_sessions),
        ]
        for task in self._tasks:
            task.start()

    def shutdown(self) -> None:
        for task in self._tasks:
            task.stop()
        self._tasks = []
        with self._lock:
            self.context.pending.cleanup()
            self.context.memory.cleanup(self.context.settings.memory.max_age)
        logger.info("Tool gateway shut down")


@lru_cache(maxsize=1)
def get_gateway() -> ToolGateway:
    return ToolGateway(ServiceContext())
