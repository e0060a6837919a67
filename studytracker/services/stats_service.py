"""
stats_service.py — Summary cards of the dashboard.
Today's study time, the last seven days, the streak of days that met the
daily goal, active courses and progress towards today's goal.
"""

import logging
from datetime import datetime, time, timedelta

from pydantic import BaseModel

from studytracker.auth import UserIdentity
from studytracker.clock import local_zone
from studytracker.config import DEFAULT_DAILY_GOAL_MINUTES, STREAK_LOOKBACK_DAYS
from studytracker.models.study_session import coerce_seconds
from studytracker.services.profile_service import ProfileService
from studytracker.supabase_rest import range_filter

logger = logging.getLogger(__name__)


class DashboardStats(BaseModel):
    today_seconds: int = 0
    week_seconds: int = 0
    daily_goal_minutes: int = DEFAULT_DAILY_GOAL_MINUTES
    streak: int = 0
    active_courses: int = 0
    progress_percentage: float = 0.0


def compute_streak(daily_stats: list, goal_minutes: int) -> int:
    """Number of most-recent days (newest first) that met the goal, stopping at the first miss."""
    streak = 0
    for day in daily_stats:
        if (day.get("total_minutes") or 0) >= goal_minutes:
            streak += 1
        else:
            break
    return streak


def goal_progress(today_seconds: int, goal_minutes: int) -> float:
    if goal_minutes <= 0:
        return 0.0
    return round(min(today_seconds / 60 / goal_minutes * 100, 100.0), 1)


class StatsService:
    @staticmethod
    def _seconds_since(store, user_id: str, since: datetime) -> int:
        rows = store.select(
            "study_sessions",
            filters={"user_id": user_id},
            columns="duration_seconds",
            query_string=range_filter("start_time", gte=since.isoformat()),
        )
        return sum(coerce_seconds(r.get("duration_seconds")) for r in rows)

    @staticmethod
    def get_dashboard_stats(store, user: UserIdentity | None, now: datetime | None = None, tz=None) -> DashboardStats:
        if user is None:
            logger.info("Dashboard stats requested without an authenticated user")
            return DashboardStats()

        tz = tz or local_zone()
        now = (now or datetime.now(tz)).astimezone(tz)
        today_start = datetime.combine(now.date(), time.min, tzinfo=tz)
        week_start = today_start - timedelta(days=7)

        profile = ProfileService.get_profile(store, user)
        goal = profile.daily_goal_minutes

        today_seconds = StatsService._seconds_since(store, user.id, today_start)
        week_seconds = StatsService._seconds_since(store, user.id, week_start)

        daily = store.select(
            "daily_stats",
            filters={"user_id": user.id},
            order="date.desc",
            limit=STREAK_LOOKBACK_DAYS,
        )
        streak = compute_streak(daily, goal)

        active = store.count("courses", filters={"user_id": user.id, "status": "active"})

        return DashboardStats(
            today_seconds=today_seconds,
            week_seconds=week_seconds,
            daily_goal_minutes=goal,
            streak=streak,
            active_courses=active,
            progress_percentage=goal_progress(today_seconds, goal),
        )
