from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict

import pytest

from calendar_mcp.api.results import result_text
from calendar_mcp.config import (
    AppSettings,
    ConfirmationSettings,
    LoggingSettings,
    MemorySettings,
    StorageSettings,
    SupabaseSettings,
)
from calendar_mcp.data import DataStore, build_local_store
from calendar_mcp.services import ServiceContext, ToolGateway

OPERATION_ID = re.compile(r"Operation ID: (\S+)")


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 4, 8, 0, tzinfo=timezone.utc))


@pytest.fixture
def memory_path(tmp_path: Path) -> Path:
    return tmp_path / "memory.json"


@pytest.fixture
def settings(tmp_path: Path, memory_path: Path) -> AppSettings:
    return AppSettings(
        supabase=SupabaseSettings(url=None, key=None),
        storage=StorageSettings(
            backend="local",
            data_file=tmp_path / "calendar_data.json",
            events_table="events",
            lists_table="lists",
            items_table="items",
        ),
        memory=MemorySettings(
            path=memory_path,
            max_entries=100,
            max_age=timedelta(days=7),
            cleanup_interval=timedelta(hours=6),
            default_session_id="default",
        ),
        confirmation=ConfirmationSettings(ttl=timedelta(minutes=5), sweep_interval=timedelta(minutes=5)),
        logging=LoggingSettings(
            level="DEBUG",
            file=tmp_path / "logs" / "calendar_mcp.log",
            max_bytes=10_000,
            backup_count=1,
        ),
    )


@pytest.fixture
def store(settings: AppSettings) -> DataStore:
    return build_local_store(settings.storage.data_file)


@pytest.fixture
def context(settings: AppSettings, store: DataStore, clock: FakeClock) -> ServiceContext:
    return ServiceContext(settings=settings, store=store, clock=clock)


@pytest.fixture
def gateway(context: ServiceContext) -> ToolGateway:
    return ToolGateway(context)


def operation_id(result: Dict[str, Any]) -> str:
    match = OPERATION_ID.search(result_text(result) or "")
    assert match, result
    return match.group(1)


@pytest.fixture
def confirmed(gateway: ToolGateway) -> Callable[..., str]:
    """Request a write and confirm it by id; returns the confirmation text."""

    def _run(name: str, /, **arguments: Any) -> str:
        prompt = gateway.call(name, arguments)
        result = gateway.call("confirm_operation", {"operation_id": operation_id(prompt), "confirm": True})
        return result_text(result) or ""

    return _run
