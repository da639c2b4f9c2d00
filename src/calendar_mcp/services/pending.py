from __future__ import annotations

import itertools
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

from ..core.timeutil import utc_now
from ..domain import PendingOperation

logger = logging.getLogger(__name__)


class PendingOperationStore:
    """Write requests awaiting confirmation.

    ``_entries`` owns every pending operation. ``_alias`` holds only the id of
    the most recently created one and is never a copy of the payload.
    """

    def __init__(
        self,
        *,
        ttl: timedelta = timedelta(minutes=5),
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, PendingOperation] = {}
        self._alias: Optional[str] = None
        self._counter = itertools.count(1)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, operation_id: object) -> bool:
        return operation_id in self._entries

    def _next_id(self, now: datetime) -> str:
        return f"op_{next(self._counter)}_{int(now.timestamp() * 1000)}"

    def create(self, operation_name: str, arguments: Dict[str, Any]) -> PendingOperation:
        now = self._clock()
        pending = PendingOperation(
            id=self._next_id(now),
            operation_name=operation_name,
            arguments=dict(arguments),
            created_at=now,
        )
        self._entries[pending.id] = pending
        self._alias = pending.id
        logger.debug("Stored pending %s as %s", operation_name, pending.id)
        return pending

    def resolve(self, operation_id: str) -> Optional[PendingOperation]:
        return self._entries.get(operation_id)

    def peek_alias(self) -> Optional[PendingOperation]:
        """Return the most recent pending write without clearing the alias."""

        if self._alias is None:
            return None
        return self._entries.get(self._alias)

    def consume_alias(self) -> Optional[PendingOperation]:
        """Clear the alias and return the entry it pointed at, if still pending.

        The caller removes the entry itself by its real id.
        """

        operation_id, self._alias = self._alias, None
        if operation_id is None:
            return None
        return self._entries.get(operation_id)

    def remove(self, operation_id: str) -> None:
        self._entries.pop(operation_id, None)

    def sweep_expired(self, ttl: Optional[timedelta] = None) -> int:
        limit = ttl if ttl is not None else self.ttl
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now, limit)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.info("Expired %d pending operation(s)", len(expired))
        return len(expired)

    def cleanup(self) -> int:
        return self.sweep_expired()
