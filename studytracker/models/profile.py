from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from studytracker.config import DEFAULT_DAILY_GOAL_MINUTES


class Profile(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    display_name: str = ""
    daily_goal_minutes: int = DEFAULT_DAILY_GOAL_MINUTES

    @field_validator("display_name", mode="before")
    @classmethod
    def _display_name(cls, v):
        return v or ""

    @field_validator("daily_goal_minutes", mode="before")
    @classmethod
    def _goal(cls, v):
        # Missing or zero goals fall back to the documented default
        return v or DEFAULT_DAILY_GOAL_MINUTES
