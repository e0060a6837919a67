"""
session_writer.py — Maps a finished timer session to exactly one write
against the study_sessions collection.

A resumed session is a correction of an existing record: only end_time and
duration_seconds change, start_time is left alone. Anything else is a new
record. A resumed record that no longer exists raises PersistenceFailure
(404). There is no retry here; a failed write raises PersistenceFailure and
the caller decides what to do.
"""

import logging
from typing import Optional

from pydantic import BaseModel

from studytracker.clock import ms_to_iso
from studytracker.errors import PersistenceFailure

logger = logging.getLogger(__name__)

SESSIONS_TABLE = "study_sessions"


class FinishedSession(BaseModel):
    user_id: str
    course_id: str
    study_type: str
    notes: Optional[str] = None
    module_id: Optional[str] = None
    original_start_ms: int
    end_ms: int
    total_seconds: int
    resume_from_session_id: Optional[str] = None


class SessionWriter:
    def __init__(self, store):
        self.store = store

    def write(self, finished: FinishedSession) -> dict:
        """Insert or update; returns the record as the store reports it."""
        end_time = ms_to_iso(finished.end_ms)

        if finished.resume_from_session_id:
            logger.info(
                f"Updating resumed session {finished.resume_from_session_id} "
                f"for user {finished.user_id}: {finished.total_seconds}s"
            )
            record = self.store.update(
                SESSIONS_TABLE,
                finished.resume_from_session_id,
                {
                    "end_time": end_time,
                    "duration_seconds": finished.total_seconds,
                },
                filters={"user_id": finished.user_id},
            )
            if not record:
                # PATCH matched nothing: the record was deleted or belongs to someone else
                raise PersistenceFailure(
                    f"Resumed session {finished.resume_from_session_id} no longer exists",
                    status_code=404,
                )
            return record

        logger.info(f"Inserting new session for user {finished.user_id}: {finished.total_seconds}s")
        return self.store.insert(SESSIONS_TABLE, {
            "user_id": finished.user_id,
            "course_id": finished.course_id,
            "module_id": finished.module_id,
            "start_time": ms_to_iso(finished.original_start_ms),
            "end_time": end_time,
            "duration_seconds": finished.total_seconds,
            "study_type": finished.study_type,
            "notes": finished.notes or None,
        })
