import httpx
import pytest

from studytracker import supabase_rest
from studytracker.errors import PersistenceFailure
from studytracker.supabase_rest import RestStore, range_filter


class TestRangeFilter:
    def test_both_bounds_are_encoded(self):
        fragment = range_filter("start_time", gte="2024-03-03T00:00:00+00:00", lte="2024-03-09T23:59:59+00:00")
        assert fragment == (
            "start_time=gte.2024-03-03T00%3A00%3A00%2B00%3A00"
            "&start_time=lte.2024-03-09T23%3A59%3A59%2B00%3A00"
        )

    def test_no_bounds(self):
        assert range_filter("start_time") == ""


class TestRestStore:
    def test_http_error_becomes_persistence_failure(self, monkeypatch):
        request = httpx.Request("POST", "https://example.supabase.co/rest/v1/study_sessions")
        response = httpx.Response(409, request=request, text="duplicate key")

        def failing_insert(table, data):
            raise httpx.HTTPStatusError("conflict", request=request, response=response)

        monkeypatch.setattr(supabase_rest, "sb_insert", failing_insert)
        with pytest.raises(PersistenceFailure) as exc:
            RestStore().insert("study_sessions", {"duration_seconds": 1})
        assert exc.value.status_code == 409
        assert exc.value.retryable is True

    def test_network_error_becomes_persistence_failure(self, monkeypatch):
        def unreachable(*args, **kwargs):
            raise httpx.ConnectError("connection refused")

        monkeypatch.setattr(supabase_rest, "sb_select", unreachable)
        with pytest.raises(PersistenceFailure) as exc:
            RestStore().select("study_sessions")
        assert exc.value.status_code is None
