from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from ..core.config import DATA_STORE_FILE, LOG_FILE, MEMORY_FILE

load_dotenv()


@dataclass(frozen=True)
class SupabaseSettings:
    url: Optional[str]
    key: Optional[str]

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.key)

    @property
    def missing_env_vars(self) -> list[str]:
        missing = []
        if not self.url:
            missing.append("SUPABASE_URL")
        if not self.key:
            missing.append("SUPABASE_KEY")
        return missing


@dataclass(frozen=True)
class StorageSettings:
    backend: str
    data_file: Path
    events_table: str
    lists_table: str
    items_table: str


@dataclass(frozen=True)
class MemorySettings:
    path: Path
    max_entries: int
    max_age: timedelta
    cleanup_interval: timedelta
    default_session_id: str


@dataclass(frozen=True)
class ConfirmationSettings:
    ttl: timedelta
    sweep_interval: timedelta


@dataclass(frozen=True)
class LoggingSettings:
    level: str
    file: Path
    max_bytes: int
    backup_count: int


@dataclass(frozen=True)
class AppSettings:
    supabase: SupabaseSettings
    storage: StorageSettings
    memory: MemorySettings
    confirmation: ConfirmationSettings
    logging: LoggingSettings


def _float_from_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    supabase = SupabaseSettings(
        url=os.getenv("SUPABASE_URL"),
        key=os.getenv("SUPABASE_KEY") or os.getenv("SUPABASE_ANON_KEY"),
    )

    storage = StorageSettings(
        backend=os.getenv("CALENDAR_MCP_STORE", "local").lower(),
        data_file=Path(os.getenv("CALENDAR_MCP_DATA_FILE", str(DATA_STORE_FILE))),
        events_table=os.getenv("SUPABASE_EVENTS_TABLE", "events"),
        lists_table=os.getenv("SUPABASE_LISTS_TABLE", "lists"),
        items_table=os.getenv("SUPABASE_ITEMS_TABLE", "items"),
    )

    memory = MemorySettings(
        path=Path(os.getenv("CALENDAR_MCP_MEMORY_FILE", str(MEMORY_FILE))),
        max_entries=int(os.getenv("CALENDAR_MCP_MEMORY_MAX_ENTRIES", "100")),
        max_age=timedelta(days=_float_from_env("CALENDAR_MCP_SESSION_MAX_AGE_DAYS", 7)),
        cleanup_interval=timedelta(hours=_float_from_env("CALENDAR_MCP_SESSION_CLEANUP_HOURS", 6)),
        default_session_id=os.getenv("CALENDAR_MCP_SESSION_ID", "default"),
    )

    confirmation = ConfirmationSettings(
        ttl=timedelta(seconds=_float_from_env("CALENDAR_MCP_PENDING_TTL_SECONDS", 300)),
        sweep_interval=timedelta(seconds=_float_from_env("CALENDAR_MCP_PENDING_SWEEP_SECONDS", 300)),
    )

    logging_settings = LoggingSettings(
        level=os.getenv("CALENDAR_MCP_LOG_LEVEL", "INFO").upper(),
        file=Path(os.getenv("CALENDAR_MCP_LOG_FILE", str(LOG_FILE))),
        max_bytes=int(os.getenv("CALENDAR_MCP_LOG_MAX_BYTES", "1000000")),
        backup_count=int(os.getenv("CALENDAR_MCP_LOG_BACKUPS", "5")),
    )

    return AppSettings(
        supabase=supabase,
        storage=storage,
        memory=memory,
        confirmation=confirmation,
        logging=logging_settings,
    )
