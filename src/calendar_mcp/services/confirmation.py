from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..api.errors import ToolCallError
from ..api.registry import describe_write, get_operation
from ..api.results import result_text, text_result
from ..domain import PendingOperation
from .executor import OperationExecutor, normalize_arguments
from .intent import Intent, classify_response
from .memory import ContextualMemory
from .pending import PendingOperationStore

logger = logging.getLogger(__name__)

NO_PENDING_MESSAGE = "No pending operation found. Please make a request first."
UNRECOGNIZED_MESSAGE = 'Please respond with "yes"/"confirm" to proceed or "no"/"cancel" to abort.'
MISSING_SIGNAL_MESSAGE = "Please provide either operation_id + confirm, or a natural language response."


def confirmation_prompt(pending: PendingOperation) -> str:
    summary = describe_write(pending.operation_name, pending.arguments)
    return (
        "CONFIRMATION REQUIRED\n\n"
        f"{summary}\n\n"
        f"Operation ID: {pending.id}\n\n"
        "To proceed, you can either:\n"
        f'1. Use the confirm_operation tool with operation_id: "{pending.id}" and confirm: true/false\n'
        '2. Simply reply with "yes", "confirm", "proceed" to confirm OR "no", "cancel", "abort" to cancel'
    )


def _decide(response: str) -> bool:
    intent = classify_response(response)
    if intent is Intent.UNRECOGNIZED:
        raise ToolCallError.invalid_request(UNRECOGNIZED_MESSAGE)
    return intent is Intent.AFFIRM


class ConfirmationService:
    """Holds writes until they are confirmed, then runs them exactly once."""

    def __init__(
        self,
        pending: PendingOperationStore,
        executor: OperationExecutor,
        memory: ContextualMemory,
    ) -> None:
        self.pending = pending
        self.executor = executor
        self.memory = memory

    def request(self, operation_name: str, arguments: Optional[Dict[str, Any]]) -> PendingOperation:
        spec = get_operation(operation_name)
        normalized = normalize_arguments(spec, arguments)
        pending = self.pending.create(operation_name, normalized)
        logger.info("Awaiting confirmation for %s (%s)", operation_name, pending.id)
        return pending

    def confirm(
        self,
        session_id: str,
        *,
        operation_id: Optional[str] = None,
        confirm: Optional[bool] = None,
        response: Optional[str] = None,
    ) -> Dict[str, Any]:
        if response and not operation_id:
            pending = self.pending.peek_alias()
            if pending is None:
                raise ToolCallError.invalid_request(NO_PENDING_MESSAGE)
            decision = _decide(response)
            self.pending.consume_alias()
            return self._finalize(session_id, pending, decision)

        if operation_id:
            pending = self.pending.resolve(operation_id)
            if pending is None:
                raise ToolCallError.invalid_request(
                    f"No pending operation found with ID: {operation_id}. It may have expired or already been resolved."
                )
            if isinstance(confirm, bool):
                decision = confirm
            elif response:
                decision = _decide(response)
            else:
                raise ToolCallError.invalid_request(
                    f"Specify confirm: true/false or a response to resolve operation {operation_id}."
                )
            return self._finalize(session_id, pending, decision)

        if isinstance(confirm, bool):
            pending = self.pending.peek_alias()
            if pending is None:
                raise ToolCallError.invalid_request(NO_PENDING_MESSAGE)
            return self._finalize(session_id, pending, confirm)

        raise ToolCallError.invalid_request(MISSING_SIGNAL_MESSAGE)

    def _finalize(self, session_id: str, pending: PendingOperation, confirmed: bool) -> Dict[str, Any]:
        # Removed before execution so a repeated confirmation can never run twice.
        self.pending.remove(pending.id)

        if not confirmed:
            logger.info("Cancelled %s (%s)", pending.operation_name, pending.id)
            return text_result(f"Operation cancelled: {pending.operation_name}")

        try:
            result = self.executor.execute(pending.operation_name, pending.arguments)
        except ToolCallError as exc:
            self.memory.record_interaction(session_id, pending.operation_name, pending.arguments, {"error": exc.message})
            raise
        self.memory.record_interaction(session_id, pending.operation_name, pending.arguments, result)
        logger.info("Executed %s (%s)", pending.operation_name, pending.id)
        return text_result(f"Operation confirmed and executed:\n\n{result_text(result) or ''}")
