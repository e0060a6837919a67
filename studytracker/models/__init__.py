from studytracker.models.local_state import LocalState
from studytracker.models.study_session import StudySession, StudyType, STUDY_TYPES, UNKNOWN_COURSE
from studytracker.models.course import Course, CourseNote, CourseStatus
from studytracker.models.profile import Profile

__all__ = [
    "LocalState",
    "StudySession",
    "StudyType",
    "STUDY_TYPES",
    "UNKNOWN_COURSE",
    "Course",
    "CourseNote",
    "CourseStatus",
    "Profile",
]
