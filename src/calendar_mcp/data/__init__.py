"""Data access layer."""

from __future__ import annotations

from .base import Collection, DataStore
from .filters import Between, Contains, Eq, Filter, In
from .local import JsonDocument, LocalCollection, build_local_store

__all__ = [
    "Between",
    "Collection",
    "Contains",
    "DataStore",
    "Eq",
    "Filter",
    "In",
    "JsonDocument",
    "LocalCollection",
    "build_local_store",
]
