from studytracker.services.cache_service import DASHBOARD_CHARTS, DASHBOARD_STATS, QueryCache
from studytracker.services.event_bus import SessionEvents, SessionFinished


class FakeTime:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestQueryCache:
    def test_get_or_load_calls_loader_once(self):
        cache = QueryCache()
        calls = []

        def loader():
            calls.append(1)
            return {"total": 5}

        assert cache.get_or_load(DASHBOARD_STATS, "u1", ("2024-03-06",), loader) == {"total": 5}
        assert cache.get_or_load(DASHBOARD_STATS, "u1", ("2024-03-06",), loader) == {"total": 5}
        assert len(calls) == 1
        assert cache.get_stats()["hits"] == 1

    def test_entries_expire(self):
        clock = FakeTime()
        cache = QueryCache(ttl_seconds=60, clock=clock)
        cache.set(DASHBOARD_CHARTS, "u1", ("week",), "value")
        clock.now += 61
        assert cache.get(DASHBOARD_CHARTS, "u1", ("week",)) is None

    def test_zero_ttl_is_not_cached(self):
        cache = QueryCache()
        cache.set(DASHBOARD_STATS, "u1", (), "value", ttl_seconds=0)
        assert cache.get(DASHBOARD_STATS, "u1", ()) is None

    def test_invalidate_only_touches_one_user(self):
        cache = QueryCache()
        cache.set(DASHBOARD_STATS, "u1", (), "a")
        cache.set(DASHBOARD_CHARTS, "u1", ("week",), "b")
        cache.set(DASHBOARD_STATS, "u2", (), "c")
        assert cache.invalidate(user_id="u1") == 2
        assert cache.get(DASHBOARD_STATS, "u2", ()) == "c"

    def test_clear_expired(self):
        clock = FakeTime()
        cache = QueryCache(ttl_seconds=10, clock=clock)
        cache.set(DASHBOARD_STATS, "u1", (), "old")
        clock.now += 5
        cache.set(DASHBOARD_STATS, "u2", (), "new")
        clock.now += 6
        cache.clear_expired()
        assert cache.get_stats()["total_entries"] == 1


class TestSessionFinishedInvalidation:
    def test_finished_session_clears_dashboard_for_that_user(self):
        events = SessionEvents()
        cache = QueryCache()
        cache.attach(events)
        cache.set(DASHBOARD_STATS, "u1", (), "stale")
        cache.set(DASHBOARD_CHARTS, "u1", ("week", "2024-03-06", "study_type"), "stale")
        cache.set(DASHBOARD_STATS, "u2", (), "fresh")

        events.publish(SessionFinished(user_id="u1", session_id="s1", duration_seconds=60))

        assert cache.get(DASHBOARD_STATS, "u1", ()) is None
        assert cache.get(DASHBOARD_CHARTS, "u1", ("week", "2024-03-06", "study_type")) is None
        assert cache.get(DASHBOARD_STATS, "u2", ()) == "fresh"


class TestSessionEvents:
    def test_multiple_subscribers_all_notified(self):
        events = SessionEvents()
        first, second = [], []
        events.subscribe(first.append)
        events.subscribe(second.append)
        events.publish(SessionFinished(user_id="u1", duration_seconds=5))
        assert len(first) == 1 and len(second) == 1

    def test_unsubscribe(self):
        events = SessionEvents()
        received = []
        unsubscribe = events.subscribe(received.append)
        unsubscribe()
        events.publish(SessionFinished(user_id="u1", duration_seconds=5))
        assert received == []
        assert events.subscriber_count == 0

    def test_failing_subscriber_does_not_block_others(self):
        events = SessionEvents()
        received = []

        def broken(event):
            raise RuntimeError("boom")

        events.subscribe(broken)
        events.subscribe(received.append)
        events.publish(SessionFinished(user_id="u1", duration_seconds=5))
        assert len(received) == 1
