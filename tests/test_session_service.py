from datetime import datetime, timezone

from studytracker.models.study_session import parse_session
from studytracker.services.course_service import CourseService
from studytracker.services.session_service import SessionFilters, SessionService


def seed_sessions(store):
    store.tables["study_sessions"] = [
        {"id": 1, "user_id": "user-1", "course_id": 7, "study_type": "reading",
         "start_time": "2024-03-04T09:00:00Z", "duration_seconds": 900, "notes": "ch. 1",
         "courses": {"title": "Databases", "platform": "Coursera"}},
        {"id": 2, "user_id": "user-1", "course_id": 8, "study_type": "video",
         "start_time": "2024-03-05T09:00:00+00:00", "duration_seconds": 300},
        {"id": 3, "user_id": "user-2", "course_id": 7, "study_type": "video",
         "start_time": "2024-03-05T09:00:00+00:00", "duration_seconds": 300},
    ]


class TestParseSession:
    def test_coerces_loose_rows(self):
        session = parse_session({
            "id": 5, "course_id": "", "study_type": "lecture",
            "start_time": "2024-03-04T09:00:00", "duration_seconds": -20,
        })
        assert session.id == "5"
        assert session.course_id == "unknown"
        assert session.study_type == "other"
        assert session.start_time.tzinfo is not None
        assert session.duration_seconds == 0

    def test_course_title(self):
        session = parse_session({"id": 1, "start_time": "2024-03-04T09:00:00Z",
                                 "courses": {"title": "Databases"}})
        assert session.course_title == "Databases"


class TestSessionService:
    def test_list_filters_by_user(self, store, user):
        seed_sessions(store)
        sessions = SessionService.list_sessions(store, user)
        assert [s.id for s in sessions] == ["1", "2"]

    def test_list_with_filters(self, store, user):
        seed_sessions(store)
        sessions = SessionService.list_sessions(store, user, SessionFilters(course_id="7", start_date="2024-03-01"))
        assert [s.id for s in sessions] == ["1"]
        query_string = store.calls[0][3]
        assert query_string == "start_time=gte.2024-03-01"

    def test_delete_requires_ownership(self, store, user):
        seed_sessions(store)
        assert SessionService.delete_session(store, user, "3") is False
        assert SessionService.delete_session(store, user, "1") is True
        assert [r["id"] for r in store.tables["study_sessions"]] == [2, 3]

    def test_resume_draft_keeps_original_start(self, store, user):
        seed_sessions(store)
        session = SessionService.get_session(store, user, "1")
        draft = SessionService.resume_draft(session)
        assert draft.resume_from_session_id == "1"
        assert draft.resume_from_duration_seconds == 900
        assert draft.resume_from_start_time == datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)
        assert draft.course_id == "7"
        assert draft.study_type == "reading"
        assert draft.notes == "ch. 1"

    def test_other_users_session_not_found(self, store, user):
        seed_sessions(store)
        assert SessionService.get_session(store, user, "3") is None

    def test_no_user(self, store):
        assert SessionService.list_sessions(store, None) == []
        assert store.calls == []


class TestCourseService:
    def test_create_and_list_with_notes(self, store, user):
        course = CourseService.create_course(store, user, {"title": "Algorithms", "platform": "MIT OCW",
                                                           "user_id": "someone-else"})
        assert course.user_id == "user-1"
        note = CourseService.add_note(store, user, course.id, {"title": "Week 1", "description": "Sorting"})
        assert note.course_id == course.id

        store.tables["courses"][0]["course_notes"] = [dict(store.tables["course_notes"][0])]
        courses = CourseService.list_courses(store, user)
        assert courses[0].title == "Algorithms"
        assert courses[0].notes[0].title == "Week 1"

    def test_note_on_missing_course(self, store, user):
        assert CourseService.add_note(store, user, "nope", {"title": "x"}) is None

    def test_update_and_delete_note(self, store, user):
        course = CourseService.create_course(store, user, {"title": "Algorithms"})
        note = CourseService.add_note(store, user, course.id, {"title": "Week 1"})
        updated = CourseService.update_note(store, user, note.id, {"title": "Week one"})
        assert updated.title == "Week one"
        assert updated.updated_at is not None
        assert CourseService.delete_note(store, user, note.id) is True
        assert CourseService.delete_note(store, user, note.id) is False

    def test_update_course_of_other_user(self, store, user):
        store.tables["courses"] = [{"id": "c1", "user_id": "other", "title": "Theirs"}]
        assert CourseService.update_course(store, user, "c1", {"title": "Mine"}) is None
        assert CourseService.delete_course(store, user, "c1") is False
