"""
profile_service.py — Display name and daily study goal.
Missing profile rows or fields fall back to documented defaults instead of failing.
"""

import logging

from studytracker.auth import UserIdentity
from studytracker.models.profile import Profile

logger = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"


class ProfileService:
    @staticmethod
    def get_profile(store, user: UserIdentity | None) -> Profile | None:
        if user is None:
            return None
        rows = store.select(PROFILES_TABLE, filters={"id": user.id}, limit=1)
        if not rows:
            logger.info(f"No profile row for user {user.id}; using defaults")
            return Profile(id=user.id)
        return Profile.model_validate(rows[0])

    @staticmethod
    def update_profile(store, user: UserIdentity, data: dict) -> Profile:
        allowed = {k: v for k, v in data.items() if k in ("display_name", "daily_goal_minutes")}
        result = store.update(PROFILES_TABLE, user.id, allowed)
        return Profile.model_validate(result or {"id": user.id, **allowed})
