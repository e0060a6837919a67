"""
session_service.py — Study session history: filtered listing, deletion and
the lookup behind "resume this session".
"""

import logging
from typing import Optional

from pydantic import BaseModel

from studytracker.auth import UserIdentity
from studytracker.models.study_session import StudySession, parse_session, parse_sessions
from studytracker.services.timer_engine import SessionDraft
from studytracker.supabase_rest import range_filter

logger = logging.getLogger(__name__)

SESSIONS_TABLE = "study_sessions"


class SessionFilters(BaseModel):
    course_id: Optional[str] = None
    study_type: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class SessionService:
    @staticmethod
    def list_sessions(store, user: UserIdentity | None, filters: SessionFilters | None = None) -> list[StudySession]:
        if user is None:
            return []
        filters = filters or SessionFilters()
        eq = {"user_id": user.id}
        if filters.course_id:
            eq["course_id"] = filters.course_id
        if filters.study_type:
            eq["study_type"] = filters.study_type

        rows = store.select(
            SESSIONS_TABLE,
            filters=eq,
            columns="*,courses(title,platform)",
            query_string=range_filter("start_time", gte=filters.start_date, lte=filters.end_date) or None,
            order="start_time.desc",
        )
        return parse_sessions(rows)

    @staticmethod
    def get_session(store, user: UserIdentity | None, session_id: str) -> StudySession | None:
        if user is None:
            return None
        rows = store.select(SESSIONS_TABLE, filters={"id": session_id, "user_id": user.id},
                            columns="*,courses(title,platform)")
        return parse_session(rows[0]) if rows else None

    @staticmethod
    def delete_session(store, user: UserIdentity | None, session_id: str) -> bool:
        """Delete one of the user's sessions. False when it does not exist or is not theirs."""
        if user is None:
            return False
        rows = store.select(SESSIONS_TABLE, filters={"id": session_id, "user_id": user.id}, columns="id")
        if not rows:
            return False
        store.delete(SESSIONS_TABLE, session_id, filters={"user_id": user.id})
        logger.info(f"Deleted session {session_id} for user {user.id}")
        return True

    @staticmethod
    def resume_draft(session: StudySession, notes: str | None = None) -> SessionDraft:
        """A timer draft that continues `session`, keeping its course, type and start time."""
        return SessionDraft(
            course_id=session.course_id,
            study_type=session.study_type,
            notes=notes if notes is not None else session.notes,
            module_id=session.module_id,
            resume_from_session_id=session.id,
            resume_from_duration_seconds=session.duration_seconds,
            resume_from_start_time=session.start_time,
        )
