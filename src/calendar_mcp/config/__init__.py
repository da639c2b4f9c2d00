"""Configuration models and helpers."""

from __future__ import annotations

from .settings import (
    AppSettings,
    ConfirmationSettings,
    LoggingSettings,
    MemorySettings,
    StorageSettings,
    SupabaseSettings,
    get_settings,
)

__all__ = [
    "AppSettings",
    "ConfirmationSettings",
    "LoggingSettings",
    "MemorySettings",
    "StorageSettings",
    "SupabaseSettings",
    "get_settings",
]
