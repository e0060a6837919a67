"""
course_service.py — Courses and the notes kept for each course.
"""

import logging
from datetime import datetime, timezone

from studytracker.auth import UserIdentity
from studytracker.models.course import Course, CourseNote

logger = logging.getLogger(__name__)

COURSES_TABLE = "courses"
NOTES_TABLE = "course_notes"

COURSE_FIELDS = ("title", "platform", "url", "status")
NOTE_FIELDS = ("title", "description")


def _pick(data: dict, fields) -> dict:
    return {k: v for k, v in data.items() if k in fields}


class CourseService:
    @staticmethod
    def list_courses(store, user: UserIdentity | None) -> list[Course]:
        if user is None:
            return []
        rows = store.select(
            COURSES_TABLE,
            filters={"user_id": user.id},
            columns="*,course_notes(*)",
            order="created_at.desc",
        )
        courses = []
        for row in rows:
            row = dict(row)
            row["notes"] = row.pop("course_notes", None) or []
            courses.append(Course.model_validate(row))
        return courses

    @staticmethod
    def get_course(store, user: UserIdentity, course_id: str) -> Course | None:
        rows = store.select(COURSES_TABLE, filters={"id": course_id, "user_id": user.id})
        return Course.model_validate(rows[0]) if rows else None

    @staticmethod
    def create_course(store, user: UserIdentity, data: dict) -> Course:
        record = _pick(data, COURSE_FIELDS)
        record["user_id"] = user.id
        result = store.insert(COURSES_TABLE, record)
        logger.info(f"Created course '{record.get('title')}' for user {user.id}")
        return Course.model_validate(result)

    @staticmethod
    def update_course(store, user: UserIdentity, course_id: str, data: dict) -> Course | None:
        if CourseService.get_course(store, user, course_id) is None:
            return None
        result = store.update(COURSES_TABLE, course_id, _pick(data, COURSE_FIELDS), filters={"user_id": user.id})
        return Course.model_validate(result) if result else CourseService.get_course(store, user, course_id)

    @staticmethod
    def delete_course(store, user: UserIdentity, course_id: str) -> bool:
        if CourseService.get_course(store, user, course_id) is None:
            return False
        store.delete(COURSES_TABLE, course_id, filters={"user_id": user.id})
        return True

    # ----------- Notes ----------- #

    @staticmethod
    def list_notes(store, user: UserIdentity, course_id: str) -> list[CourseNote]:
        rows = store.select(
            NOTES_TABLE,
            filters={"course_id": course_id, "user_id": user.id},
            order="created_at.desc",
        )
        return [CourseNote.model_validate(r) for r in rows]

    @staticmethod
    def add_note(store, user: UserIdentity, course_id: str, data: dict) -> CourseNote | None:
        if CourseService.get_course(store, user, course_id) is None:
            return None
        record = _pick(data, NOTE_FIELDS)
        record.update({"user_id": user.id, "course_id": course_id})
        return CourseNote.model_validate(store.insert(NOTES_TABLE, record))

    @staticmethod
    def update_note(store, user: UserIdentity, note_id: str, data: dict) -> CourseNote | None:
        rows = store.select(NOTES_TABLE, filters={"id": note_id, "user_id": user.id})
        if not rows:
            return None
        changes = _pick(data, NOTE_FIELDS)
        changes["updated_at"] = datetime.now(timezone.utc).isoformat()
        result = store.update(NOTES_TABLE, note_id, changes, filters={"user_id": user.id})
        return CourseNote.model_validate(result or {**rows[0], **changes})

    @staticmethod
    def delete_note(store, user: UserIdentity, note_id: str) -> bool:
        rows = store.select(NOTES_TABLE, filters={"id": note_id, "user_id": user.id}, columns="id")
        if not rows:
            return False
        store.delete(NOTES_TABLE, note_id, filters={"user_id": user.id})
        return True
