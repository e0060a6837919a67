import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_validator

from studytracker.clock import parse_iso

logger = logging.getLogger(__name__)

UNKNOWN_COURSE = "unknown"


class StudyType(str, Enum):
    VIDEO = "video"
    READING = "reading"
    CODING = "coding"
    REVIEW = "review"
    OTHER = "other"


# Declaration order is also the display order of study-type charts
STUDY_TYPES = [t.value for t in StudyType]


def normalize_study_type(value) -> str:
    """Unknown or missing study types count as 'other'; they are never dropped."""
    if isinstance(value, StudyType):
        return value.value
    if isinstance(value, str) and value in STUDY_TYPES:
        return value
    return StudyType.OTHER.value


def coerce_seconds(value) -> int:
    """Whole non-negative seconds; anything unusable becomes 0."""
    try:
        seconds = int(round(float(value)))
    except (TypeError, ValueError):
        return 0
    return max(0, seconds)


class CourseRef(BaseModel):
    title: Optional[str] = None
    platform: Optional[str] = None


class StudySession(BaseModel):
    """A study_sessions row, validated and coerced at the store boundary."""
    id: str
    user_id: Optional[str] = None
    course_id: str = UNKNOWN_COURSE
    module_id: Optional[str] = None
    study_type: str = StudyType.OTHER.value
    start_time: datetime
    end_time: Optional[datetime] = None
    duration_seconds: int = 0
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    courses: Optional[CourseRef] = None

    @field_validator("id", "user_id", "module_id", mode="before")
    @classmethod
    def _as_str(cls, v):
        return None if v is None else str(v)

    @field_validator("course_id", mode="before")
    @classmethod
    def _course(cls, v):
        if v is None or v == "":
            return UNKNOWN_COURSE
        return str(v)

    @field_validator("study_type", mode="before")
    @classmethod
    def _study_type(cls, v):
        return normalize_study_type(v)

    @field_validator("start_time", "end_time", "created_at", mode="before")
    @classmethod
    def _timestamp(cls, v):
        if isinstance(v, str):
            return parse_iso(v)
        if isinstance(v, datetime) and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @field_validator("duration_seconds", mode="before")
    @classmethod
    def _duration(cls, v):
        return coerce_seconds(v)

    @property
    def course_title(self) -> str | None:
        return self.courses.title if self.courses else None


def parse_session(row: dict) -> StudySession:
    """Turn a raw store row into a StudySession, logging every coercion applied."""
    raw_type = row.get("study_type")
    if raw_type not in STUDY_TYPES:
        logger.warning(f"Session {row.get('id')}: study_type {raw_type!r} counted as 'other'")
    if not row.get("course_id"):
        logger.warning(f"Session {row.get('id')}: missing course_id, bucketed under '{UNKNOWN_COURSE}'")
    raw_duration = row.get("duration_seconds")
    if coerce_seconds(raw_duration) == 0 and raw_duration not in (0, "0"):
        logger.warning(f"Session {row.get('id')}: invalid duration_seconds {raw_duration!r} counted as 0")
    return StudySession.model_validate(row)


def parse_sessions(rows: list) -> list[StudySession]:
    return [parse_session(r) for r in rows]
