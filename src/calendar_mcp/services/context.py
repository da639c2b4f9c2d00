from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from ..config import AppSettings, get_settings
from ..core.timeutil import utc_now
from ..data import DataStore, build_local_store
from .confirmation import ConfirmationService
from .executor import OperationExecutor
from .memory import ContextualMemory
from .pending import PendingOperationStore

logger = logging.getLogger(__name__)


def build_store(settings: AppSettings) -> DataStore:
    backend = settings.storage.backend
    if backend == "supabase":
        from ..data.supabase import build_supabase_store

        return build_supabase_store(settings.supabase, settings.storage)
    if backend != "local":
        raise ValueError(f"Unknown store backend: {backend!r}")
    return build_local_store(settings.storage.data_file)


@dataclass(slots=True)
class ServiceContext:
    """Aggregate root wiring the store, pending writes, memory, and executor."""

    settings: AppSettings = field(default_factory=get_settings)
    store: Optional[DataStore] = None
    clock: Callable[[], datetime] = utc_now
    pending: PendingOperationStore = field(init=False)
    memory: ContextualMemory = field(init=False)
    executor: OperationExecutor = field(init=False)
    confirmation: ConfirmationService = field(init=False)

    def __post_init__(self) -> None:
        if self.store is None:
            self.store = build_store(self.settings)
            logger.info("Using %s data store", self.settings.storage.backend)
        self.pending = PendingOperationStore(ttl=self.settings.confirmation.ttl, clock=self.clock)
        self.memory = ContextualMemory(
            self.settings.memory.path,
            max_entries=self.settings.memory.max_entries,
            clock=self.clock,
        )
        self.executor = OperationExecutor(self.store)
        self.confirmation = ConfirmationService(self.pending, self.executor, self.memory)
