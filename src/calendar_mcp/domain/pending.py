from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict

from ..core.timeutil import utc_now


@dataclass(frozen=True, slots=True)
class PendingOperation:
    """A write request captured but not yet applied."""

    id: str
    operation_name: str
    arguments: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utc_now)

    def is_expired(self, now: datetime, ttl: timedelta) -> bool:
        return now - self.created_at > ttl
