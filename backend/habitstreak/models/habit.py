"""
Pydantic models for habits
"""
from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from habitstreak.core.constants import MIN_DIFFICULTY_LEVEL, MAX_DIFFICULTY_LEVEL
from habitstreak.utils.timezone import get_today_date


class CreateHabitRequest(BaseModel):
    """Request model for creating a new habit"""
    user_id: str = Field(..., min_length=1, description="Owner of the habit")
    title: str = Field(..., min_length=1, max_length=200, description="Habit title")
    description: Optional[str] = Field(None, max_length=1000)
    category: Literal["health", "education", "fitness", "mindfulness", "productivity", "other"] = "other"
    target_frequency: Literal["daily", "weekly"] = "daily"
    difficulty_level: int = Field(
        1, ge=MIN_DIFFICULTY_LEVEL, le=MAX_DIFFICULTY_LEVEL, description="Difficulty from 1 (easy) to 5 (hard)"
    )
    color: str = Field("#4F46E5", description="Display color theme")
    icon: str = Field("star", description="Icon name")
    estimated_time: int = Field(15, ge=0, description="Estimated minutes per completion")
    target_days_per_week: int = Field(7, ge=1, le=7)
    reminder_time: Optional[str] = Field(None, description="Reminder time in HH:MM format (24-hour)")
    reminder_enabled: bool = False

    @field_validator('reminder_time')
    @classmethod
    def validate_time_format(cls, v: Optional[str]) -> Optional[str]:
        """Validate time format is HH:MM if provided"""
        if v is None:
            return v
        try:
            datetime.strptime(v, "%H:%M")
            return v
        except ValueError:
            raise ValueError(f"Invalid time format '{v}'. Use HH:MM (24-hour format)")


class CompleteHabitRequest(BaseModel):
    """Request model for completing a habit, today unless completion_date is given"""
    user_id: str = Field(..., min_length=1, description="Owner of the habit")
    notes: Optional[str] = Field(None, max_length=1000)
    mood_rating: Optional[int] = Field(None, ge=1, le=5, description="Optional mood from 1 to 5")
    completion_date: Optional[date] = Field(None, description="Day to record (YYYY-MM-DD); defaults to today")

    @field_validator('completion_date')
    @classmethod
    def validate_not_future(cls, v: Optional[date]) -> Optional[date]:
        """Completions cannot be recorded for days that have not happened yet"""
        if v is not None and v > get_today_date():
            raise ValueError(f"completion_date {v} is in the future")
        return v
