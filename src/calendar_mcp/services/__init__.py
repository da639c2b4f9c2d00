"""Application services: confirmation workflow, contextual memory, and transports."""

from __future__ import annotations

from .confirmation import ConfirmationService
from .context import ServiceContext, build_store
from .executor import OperationExecutor
from .gateway import ToolGateway, get_gateway
from .intent import Intent, classify_response
from .memory import ContextualMemory
from .pending import PendingOperationStore

__all__ = [
    "ConfirmationService",
    "ContextualMemory",
    "Intent",
    "OperationExecutor",
    "PendingOperationStore",
    "ServiceContext",
    "ToolGateway",
    "build_store",
    "classify_response",
    "get_gateway",
]
