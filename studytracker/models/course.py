from datetime import datetime
from enum import Enum
from typing import Optional, List

from pydantic import BaseModel, ConfigDict


class CourseStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class CourseNote(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    course_id: str
    user_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Course(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    user_id: Optional[str] = None
    title: str
    platform: Optional[str] = None
    url: Optional[str] = None
    status: CourseStatus = CourseStatus.ACTIVE
    created_at: Optional[datetime] = None
    notes: List[CourseNote] = []
