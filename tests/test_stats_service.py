from datetime import datetime, timezone

from studytracker.services.profile_service import ProfileService
from studytracker.services.stats_service import StatsService, compute_streak, goal_progress

NOW = datetime(2024, 3, 6, 15, 0, tzinfo=timezone.utc)


class TestStreak:
    def test_counts_until_first_miss(self):
        days = [{"total_minutes": 130}, {"total_minutes": 120}, {"total_minutes": 30}, {"total_minutes": 500}]
        assert compute_streak(days, 120) == 2

    def test_missing_minutes_break_streak(self):
        assert compute_streak([{"total_minutes": None}, {"total_minutes": 200}], 60) == 0

    def test_empty(self):
        assert compute_streak([], 120) == 0


class TestGoalProgress:
    def test_capped_at_hundred(self):
        assert goal_progress(3 * 3600, 120) == 100.0

    def test_partial(self):
        assert goal_progress(30 * 60, 120) == 25.0

    def test_zero_goal(self):
        assert goal_progress(600, 0) == 0.0


class TestProfile:
    def test_missing_row_uses_default_goal(self, store, user):
        profile = ProfileService.get_profile(store, user)
        assert profile.id == "user-1"
        assert profile.daily_goal_minutes == 120

    def test_zero_goal_falls_back_to_default(self, store, user):
        store.tables["profiles"] = [{"id": "user-1", "display_name": None, "daily_goal_minutes": 0}]
        profile = ProfileService.get_profile(store, user)
        assert profile.daily_goal_minutes == 120
        assert profile.display_name == ""

    def test_update_ignores_unknown_fields(self, store, user):
        store.tables["profiles"] = [{"id": "user-1", "daily_goal_minutes": 90}]
        profile = ProfileService.update_profile(store, user, {"daily_goal_minutes": 45, "role": "admin"})
        assert profile.daily_goal_minutes == 45
        assert store.writes()[0][3] == {"daily_goal_minutes": 45}

    def test_no_user(self, store):
        assert ProfileService.get_profile(store, None) is None


class TestDashboardStats:
    def test_summary(self, store, user):
        store.tables = {
            "profiles": [{"id": "user-1", "daily_goal_minutes": 60}],
            "study_sessions": [
                {"id": "s1", "user_id": "user-1", "duration_seconds": 1200},
                {"id": "s2", "user_id": "user-1", "duration_seconds": "600"},
                {"id": "s3", "user_id": "other", "duration_seconds": 9999},
            ],
            "daily_stats": [
                {"user_id": "user-1", "date": "2024-03-05", "total_minutes": 75},
                {"user_id": "user-1", "date": "2024-03-04", "total_minutes": 61},
                {"user_id": "user-1", "date": "2024-03-03", "total_minutes": 10},
            ],
            "courses": [
                {"id": "c1", "user_id": "user-1", "status": "active"},
                {"id": "c2", "user_id": "user-1", "status": "completed"},
                {"id": "c3", "user_id": "user-1", "status": "active"},
            ],
        }
        stats = StatsService.get_dashboard_stats(store, user, now=NOW, tz=timezone.utc)

        assert stats.today_seconds == 1800
        assert stats.daily_goal_minutes == 60
        assert stats.streak == 2
        assert stats.active_courses == 2
        assert stats.progress_percentage == 50.0

    def test_today_starts_at_local_midnight(self, store, user):
        StatsService.get_dashboard_stats(store, user, now=NOW, tz=timezone.utc)
        session_queries = [c for c in store.calls if c[0] == "select" and c[1] == "study_sessions"]
        assert "2024-03-06T00%3A00%3A00" in session_queries[0][3]
        assert "2024-02-28T00%3A00%3A00" in session_queries[1][3]

    def test_no_user_gets_defaults(self, store):
        stats = StatsService.get_dashboard_stats(store, None)
        assert stats.today_seconds == 0
        assert stats.daily_goal_minutes == 120
        assert store.calls == []
