"""
Pydantic models for streak state and completion results
"""
from datetime import date
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from habitstreak.core.exceptions import InvalidHabitDataError


class HabitStreakState(BaseModel):
    """Streak state of a single habit as stored on the habits table"""
    model_config = ConfigDict(frozen=True)

    current_streak: int = Field(0, ge=0, description="Consecutive days up to the last completion")
    longest_streak: int = Field(0, ge=0, description="Highest current_streak ever reached")
    last_completed_date: Optional[date] = Field(None, description="Day of the most recent completion")

    @model_validator(mode="after")
    def check_streak_bounds(self) -> "HabitStreakState":
        if self.current_streak > self.longest_streak:
            raise ValueError(
                f"current_streak {self.current_streak} exceeds longest_streak {self.longest_streak}"
            )
        return self

    @classmethod
    def from_record(cls, habit: Dict[str, Any]) -> "HabitStreakState":
        """
        Build a state from a habits table row

        Args:
            habit: Habit row as returned by Supabase

        Returns:
            HabitStreakState with missing columns defaulted

        Raises:
            InvalidHabitDataError: If the stored streak columns are inconsistent
        """
        try:
            return cls(
                current_streak=habit.get("current_streak") or 0,
                longest_streak=habit.get("longest_streak") or 0,
                last_completed_date=habit.get("last_completed_date"),
            )
        except ValidationError as e:
            raise InvalidHabitDataError(f"Corrupt streak state for habit {habit.get('id')}: {e}") from e

    def to_record(self) -> Dict[str, Any]:
        """Column values for persisting this state"""
        return {
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
            "last_completed_date": str(self.last_completed_date) if self.last_completed_date else None,
        }


class CompletionResult(BaseModel):
    """Outcome of a successful completion computed by the streak engine"""
    model_config = ConfigDict(frozen=True)

    new_state: HabitStreakState
    points_earned: int = Field(..., ge=0)
