"""
Habits Service - Business logic for habit management
Handles creating, listing, completing, and deleting habits
"""
from datetime import date
from typing import Optional, Dict, Any
import logging

from habitstreak.core.constants import (
    COMPLETION_METHOD_MANUAL,
    DEFAULT_COMPLETION_HISTORY_LIMIT,
    HABIT_CATEGORIES,
    TARGET_FREQUENCIES,
    MIN_DIFFICULTY_LEVEL,
    MAX_DIFFICULTY_LEVEL
)
from habitstreak.core.exceptions import (
    HabitNotFoundError,
    InvalidHabitDataError,
    DuplicateCompletionError,
    HabitStreakException
)
from habitstreak.models.streak import HabitStreakState
from habitstreak.utils.locks import KeyedLock
from habitstreak.utils.timezone import get_today_date
from . import repository
from . import streaks
from . import points

logger = logging.getLogger(__name__)

# At most one in-flight completion per habit within this process.
# Cross-process races are caught by the conditional update in the repository.
_habit_locks = KeyedLock()


def _get_owned_habit(user_id: str, habit_id: str) -> Dict[str, Any]:
    habit = repository.get_habit_by_id(habit_id, user_id)
    if not habit:
        raise HabitNotFoundError(f"Habit {habit_id} not found")
    return habit


def create_habit(user_id: str, habit_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create a new habit with an empty streak

    Args:
        user_id: The owning user ID
        habit_data: Habit attributes (title, category, difficulty_level, color, ...)

    Returns:
        Dict with status, message, and created habit data

    Raises:
        InvalidHabitDataError: If the habit attributes are invalid
        DatabaseError: If database operation fails
    """
    title = (habit_data.get("title") or "").strip()
    if not title:
        raise InvalidHabitDataError("Habit title is required")

    difficulty_level = habit_data.get("difficulty_level", MIN_DIFFICULTY_LEVEL)
    if not MIN_DIFFICULTY_LEVEL <= difficulty_level <= MAX_DIFFICULTY_LEVEL:
        raise InvalidHabitDataError(
            f"Invalid difficulty_level: {difficulty_level}. "
            f"Must be between {MIN_DIFFICULTY_LEVEL} and {MAX_DIFFICULTY_LEVEL}"
        )

    category = habit_data.get("category", "other")
    if category not in HABIT_CATEGORIES:
        raise InvalidHabitDataError(f"Invalid category: {category}")

    target_frequency = habit_data.get("target_frequency", "daily")
    if target_frequency not in TARGET_FREQUENCIES:
        raise InvalidHabitDataError(f"Invalid target_frequency: {target_frequency}")

    # API field 'color' is stored as 'color_theme'
    columns = {k: v for k, v in habit_data.items() if k != "color"}
    if "color" in habit_data:
        columns["color_theme"] = habit_data["color"]
    columns.update({
        "title": title,
        "difficulty_level": difficulty_level,
        "category": category,
        "target_frequency": target_frequency
    })

    habit = repository.create_habit(user_id, columns)
    logger.info(f"Created habit '{title}' for user {user_id}")

    return {
        "status": "success",
        "message": f"Habit '{title}' created successfully",
        "data": habit
    }


def get_user_habits(user_id: str) -> Dict[str, Any]:
    """
    Get all active habits for a user

    Returns:
        Dict with status, date, and list of habits
    """
    habits = repository.get_user_habits(user_id)

    return {
        "status": "success",
        "date": str(get_today_date()),
        "habits": habits
    }


def complete_habit(user_id: str, habit_id: str, notes: Optional[str] = None,
                   mood_rating: Optional[int] = None,
                   completion_date: Optional[date] = None) -> Dict[str, Any]:
    """
    Mark a habit as complete, updating its streak and the user's points

    Streak update, completion record, and points award are applied in that
    order; if a later step fails for any reason the earlier ones are undone.

    Args:
        user_id: The owning user ID
        habit_id: The habit ID
        notes: Optional notes for the completion record
        mood_rating: Optional mood rating 1-5
        completion_date: Day to record (defaults to today in the app timezone)

    Returns:
        Dict with status, message, updated habit, completion record, and points earned

    Raises:
        HabitNotFoundError: If the habit does not exist for this user
        DuplicateCompletionError: If already completed on completion_date
        BackdatedCompletionError: If completion_date is before the last completion
        StreakConflictError: If another request updated the streak concurrently
        DatabaseError: If database operation fails
    """
    completion_date = completion_date or get_today_date()

    with _habit_locks.hold(habit_id):
        habit = _get_owned_habit(user_id, habit_id)

        if repository.get_completion_for_habit_and_date(habit_id, completion_date):
            raise DuplicateCompletionError(f"Habit '{habit['title']}' already completed on {completion_date}")

        prior = HabitStreakState.from_record(habit)
        result = streaks.compute_completion(
            prior, completion_date, habit.get("difficulty_level") or MIN_DIFFICULTY_LEVEL
        )
        new_state = result.new_state

        updated_habit = repository.update_habit_streak(habit_id, prior, new_state)

        completion = None
        try:
            completion = repository.create_completion(
                habit_id=habit_id,
                user_id=user_id,
                completion_date=completion_date,
                points_earned=result.points_earned,
                streak_length=new_state.current_streak,
                completion_method=COMPLETION_METHOD_MANUAL,
                notes=notes,
                mood_rating=mood_rating
            )
            points.add_user_points(user_id, result.points_earned)
        except Exception:
            _undo_completion(habit_id, prior, new_state, completion)
            raise

    logger.info(
        f"Habit {habit_id} completed on {completion_date}: "
        f"streak {new_state.current_streak}, +{result.points_earned} points"
    )

    return {
        "status": "success",
        "message": f"Habit '{habit['title']}' completed. Streak: {new_state.current_streak} day(s)",
        "habit": updated_habit,
        "completion": completion,
        "points_earned": result.points_earned,
        "current_streak": new_state.current_streak,
        "longest_streak": new_state.longest_streak
    }


def _undo_completion(habit_id: str, prior: HabitStreakState, new_state: HabitStreakState,
                     completion: Optional[Dict[str, Any]]) -> None:
    """
    Revert a partially persisted completion

    Failures here are logged; the caller re-raises the original error.
    """
    logger.warning(f"Rolling back completion for habit {habit_id}")

    if completion and completion.get("id"):
        try:
            repository.delete_completion(completion["id"])
        except HabitStreakException as e:
            logger.error(f"Failed to delete completion {completion['id']} during rollback: {e}", exc_info=True)

    try:
        repository.update_habit_streak(habit_id, new_state, prior)
    except HabitStreakException as e:
        logger.error(f"Failed to restore streak for habit {habit_id} during rollback: {e}", exc_info=True)


def delete_habit(user_id: str, habit_id: str) -> Dict[str, Any]:
    """
    Soft-delete a habit (mark inactive); its completion history is kept

    Returns:
        Dict with status, message, and habit id

    Raises:
        HabitNotFoundError: If the habit does not exist for this user
        DatabaseError: If database operation fails
    """
    habit = _get_owned_habit(user_id, habit_id)
    repository.deactivate_habit(habit_id, user_id)

    logger.info(f"Deactivated habit {habit_id} for user {user_id}")

    return {
        "status": "success",
        "message": f"Habit '{habit['title']}' removed successfully",
        "habit_id": habit_id
    }


def get_completion_history(user_id: str, habit_id: str,
                           limit: int = DEFAULT_COMPLETION_HISTORY_LIMIT) -> Dict[str, Any]:
    """
    Get the completion history for a habit, most recent first

    Returns:
        Dict with status, habit summary, and list of completions

    Raises:
        HabitNotFoundError: If the habit does not exist for this user
        DatabaseError: If database operation fails
    """
    habit = _get_owned_habit(user_id, habit_id)
    completions = repository.get_completions_for_habit(habit_id, limit)

    return {
        "status": "success",
        "habit_id": habit_id,
        "habit_title": habit["title"],
        "current_streak": habit.get("current_streak", 0),
        "longest_streak": habit.get("longest_streak", 0),
        "completions": completions
    }
