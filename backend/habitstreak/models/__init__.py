"""
Pydantic models for the application
"""
from habitstreak.models.habit import (
    CreateHabitRequest,
    CompleteHabitRequest
)
from habitstreak.models.streak import HabitStreakState, CompletionResult

__all__ = [
    "CreateHabitRequest",
    "CompleteHabitRequest",
    "HabitStreakState",
    "CompletionResult"
]
