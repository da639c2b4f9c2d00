import pytest

from calendar_mcp.config import SupabaseSettings
from calendar_mcp.data import Between, Contains, Eq, In
from calendar_mcp.data.supabase import SupabaseGateway, SupabaseNotInitializedError, _apply_filters
from calendar_mcp.domain import Event


class RecordingQuery:
    def __init__(self):
        self.calls = []

    def __getattr__(self, name):
        def _record(*args, **kwargs):
            self.calls.append((name, args))
            return self

        return _record


def test_unconfigured_gateway_names_missing_variables():
    gateway = SupabaseGateway(SupabaseSettings(url="https://example.supabase.co", key=None))

    with pytest.raises(SupabaseNotInitializedError, match="SUPABASE_KEY"):
        gateway.ensure_client()


def test_filters_translate_to_query_builder_calls():
    query = RecordingQuery()
    filters = [
        Eq("calendar_id", "cal-1"),
        Contains("title", "stand"),
        In("tags", ("work",)),
        In("status", ("confirmed", "tentative")),
        Between("start_date", lower="2024-03-04T00:00:00Z"),
    ]

    _apply_filters(query, filters, Event.array_fields)

    assert query.calls == [
        ("eq", ("calendar_id", "cal-1")),
        ("ilike", ("title", "%stand%")),
        ("overlaps", ("tags", ["work"])),
        ("in_", ("status", ["confirmed", "tentative"])),
        ("gte", ("start_date", "2024-03-04T00:00:00Z")),
    ]
