"""
Habits Repository - Centralized database access layer
All Supabase queries for habits, completions, and user points
"""
from datetime import date
from typing import List, Dict, Any, Optional
import logging

from habitstreak.core.dependencies import get_supabase_client
from habitstreak.core.exceptions import DatabaseError, StreakConflictError
from habitstreak.models.streak import HabitStreakState
from habitstreak.utils.timezone import get_app_now

logger = logging.getLogger(__name__)


# ============================================================================
# HABITS TABLE
# ============================================================================

def get_user_habits(user_id: str) -> List[Dict[str, Any]]:
    """
    Get all active habits for a user, newest first

    Args:
        user_id: The owning user ID

    Returns:
        List of habit dictionaries

    Raises:
        DatabaseError: If query fails
    """
    supabase = get_supabase_client()
    try:
        result = supabase.table("habits")\
            .select("*")\
            .eq("user_id", user_id)\
            .eq("is_active", True)\
            .order("created_at", desc=True)\
            .execute()
        return result.data
    except Exception as e:
        logger.error(f"Database error fetching habits for user {user_id}: {e}")
        raise DatabaseError(f"Failed to fetch habits: {e}")


def get_habit_by_id(habit_id: str, user_id: str) -> Optional[Dict[str, Any]]:
    """
    Get a single active habit owned by a user

    Args:
        habit_id: The habit ID
        user_id: The owning user ID

    Returns:
        Habit dictionary or None if not found

    Raises:
        DatabaseError: If query fails
    """
    supabase = get_supabase_client()
    try:
        result = supabase.table("habits")\
            .select("*")\
            .eq("id", habit_id)\
            .eq("user_id", user_id)\
            .eq("is_active", True)\
            .execute()
        return result.data[0] if result.data else None
    except Exception as e:
        logger.error(f"Database error fetching habit {habit_id}: {e}")
        raise DatabaseError(f"Failed to fetch habit: {e}")


def create_habit(user_id: str, habit_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create a new habit with an empty streak

    Args:
        user_id: The owning user ID
        habit_data: Column values for the habit (title, category, difficulty_level, ...)

    Returns:
        Created habit data

    Raises:
        DatabaseError: If insert fails
    """
    supabase = get_supabase_client()
    try:
        row = {
            **habit_data,
            "user_id": user_id,
            "current_streak": 0,
            "longest_streak": 0,
            "last_completed_date": None,
            "is_active": True
        }
        result = supabase.table("habits").insert(row).execute()
        return result.data[0] if result.data else {}
    except Exception as e:
        logger.error(f"Database error creating habit: {e}")
        raise DatabaseError(f"Failed to create habit: {e}")


def update_habit_streak(habit_id: str, prior: HabitStreakState,
                        new: HabitStreakState) -> Dict[str, Any]:
    """
    Persist a new streak state, conditional on the stored state still being `prior`

    Args:
        habit_id: The habit ID
        prior: State that was read before computing `new`
        new: State to store

    Returns:
        Updated habit data

    Raises:
        StreakConflictError: If the stored state no longer matches `prior`
        DatabaseError: If update fails
    """
    supabase = get_supabase_client()
    try:
        query = supabase.table("habits")\
            .update({**new.to_record(), "updated_at": get_app_now().isoformat()})\
            .eq("id", habit_id)\
            .eq("current_streak", prior.current_streak)
        if prior.last_completed_date is None:
            query = query.is_("last_completed_date", "null")
        else:
            query = query.eq("last_completed_date", str(prior.last_completed_date))
        result = query.execute()
    except Exception as e:
        logger.error(f"Database error updating streak for habit {habit_id}: {e}")
        raise DatabaseError(f"Failed to update habit streak: {e}")

    if not result.data:
        logger.warning(f"Streak for habit {habit_id} changed concurrently, update rejected")
        raise StreakConflictError(f"Habit {habit_id} was updated by another request, try again")

    return result.data[0]


def deactivate_habit(habit_id: str, user_id: str) -> Dict[str, Any]:
    """
    Soft-delete a habit (mark inactive)

    Args:
        habit_id: The habit ID
        user_id: The owning user ID

    Returns:
        Deactivated habit data, empty if no habit matched

    Raises:
        DatabaseError: If update fails
    """
    supabase = get_supabase_client()
    try:
        result = supabase.table("habits")\
            .update({"is_active": False, "updated_at": get_app_now().isoformat()})\
            .eq("id", habit_id)\
            .eq("user_id", user_id)\
            .execute()
        return result.data[0] if result.data else {}
    except Exception as e:
        logger.error(f"Database error deactivating habit {habit_id}: {e}")
        raise DatabaseError(f"Failed to delete habit: {e}")


def get_habits_with_stale_streaks(cutoff: date) -> List[Dict[str, Any]]:
    """
    Get active habits with a running streak whose last completion is before cutoff

    Args:
        cutoff: Earliest last_completed_date that still keeps a streak alive

    Returns:
        List of habit dictionaries

    Raises:
        DatabaseError: If query fails
    """
    supabase = get_supabase_client()
    try:
        result = supabase.table("habits")\
            .select("*")\
            .eq("is_active", True)\
            .gt("current_streak", 0)\
            .lt("last_completed_date", str(cutoff))\
            .execute()
        return result.data
    except Exception as e:
        logger.error(f"Database error fetching stale streaks before {cutoff}: {e}")
        raise DatabaseError(f"Failed to fetch stale streaks: {e}")


def reset_current_streak(habit_id: str, last_completed_date: Optional[str]) -> Dict[str, Any]:
    """
    Zero a habit's current streak if its last completion has not moved

    Args:
        habit_id: The habit ID
        last_completed_date: The stale last_completed_date that was read

    Returns:
        Updated habit data, empty if the habit was completed in the meantime

    Raises:
        DatabaseError: If update fails
    """
    supabase = get_supabase_client()
    try:
        result = supabase.table("habits")\
            .update({"current_streak": 0, "updated_at": get_app_now().isoformat()})\
            .eq("id", habit_id)\
            .eq("last_completed_date", last_completed_date)\
            .execute()
        return result.data[0] if result.data else {}
    except Exception as e:
        logger.error(f"Database error resetting streak for habit {habit_id}: {e}")
        raise DatabaseError(f"Failed to reset streak: {e}")


# ============================================================================
# HABIT_COMPLETIONS TABLE
# ============================================================================

def get_completion_for_habit_and_date(habit_id: str, target_date: date) -> Optional[Dict[str, Any]]:
    """
    Get completion for a specific habit and date

    Args:
        habit_id: The habit ID
        target_date: The date

    Returns:
        Completion dictionary or None if not found

    Raises:
        DatabaseError: If query fails
    """
    supabase = get_supabase_client()
    try:
        result = supabase.table("habit_completions")\
            .select("*")\
            .eq("habit_id", habit_id)\
            .eq("completion_date", str(target_date))\
            .execute()
        return result.data[0] if result.data else None
    except Exception as e:
        logger.error(f"Database error fetching completion for habit {habit_id} on {target_date}: {e}")
        raise DatabaseError(f"Failed to fetch completion: {e}")


def create_completion(habit_id: str, user_id: str, completion_date: date, points_earned: int,
                      streak_length: int, completion_method: str,
                      notes: Optional[str] = None, mood_rating: Optional[int] = None) -> Dict[str, Any]:
    """
    Append an immutable completion record

    Args:
        habit_id: The habit ID
        user_id: The owning user ID
        completion_date: Day the habit was completed
        points_earned: Points awarded for this completion
        streak_length: Streak value as of this completion
        completion_method: How the completion was recorded (e.g. 'manual')
        notes: Optional free-text notes
        mood_rating: Optional mood rating 1-5

    Returns:
        Created completion data

    Raises:
        DatabaseError: If insert fails
    """
    supabase = get_supabase_client()
    try:
        completion_data = {
            "habit_id": habit_id,
            "user_id": user_id,
            "completion_date": str(completion_date),
            "completion_time": get_app_now().isoformat(),
            "points_earned": points_earned,
            "completion_method": completion_method,
            "streak_length_at_completion": streak_length
        }
        if notes:
            completion_data["notes"] = notes
        if mood_rating is not None:
            completion_data["mood_rating"] = mood_rating

        result = supabase.table("habit_completions").insert(completion_data).execute()
        return result.data[0] if result.data else {}
    except Exception as e:
        logger.error(f"Database error creating completion: {e}")
        raise DatabaseError(f"Failed to create completion: {e}")


def delete_completion(completion_id: str) -> None:
    """
    Delete a completion record (only used to undo a failed completion)

    Raises:
        DatabaseError: If delete fails
    """
    supabase = get_supabase_client()
    try:
        supabase.table("habit_completions").delete().eq("id", completion_id).execute()
    except Exception as e:
        logger.error(f"Database error deleting completion {completion_id}: {e}")
        raise DatabaseError(f"Failed to delete completion: {e}")


def get_completions_for_habit(habit_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """
    Get completion history for a habit, most recent first

    Args:
        habit_id: The habit ID
        limit: Optional limit on number of results

    Returns:
        List of completion dictionaries

    Raises:
        DatabaseError: If query fails
    """
    supabase = get_supabase_client()
    try:
        query = supabase.table("habit_completions")\
            .select("*")\
            .eq("habit_id", habit_id)\
            .order("completion_date", desc=True)
        if limit:
            query = query.limit(limit)
        result = query.execute()
        return result.data
    except Exception as e:
        logger.error(f"Database error fetching completions for habit {habit_id}: {e}")
        raise DatabaseError(f"Failed to fetch completions: {e}")


# ============================================================================
# USER_POINTS TABLE
# ============================================================================

def get_user_points(user_id: str) -> Optional[Dict[str, Any]]:
    """
    Get the points aggregate for a user

    Args:
        user_id: The user ID

    Returns:
        Points dictionary or None if the user has no points yet

    Raises:
        DatabaseError: If query fails
    """
    supabase = get_supabase_client()
    try:
        result = supabase.table("user_points")\
            .select("*")\
            .eq("user_id", user_id)\
            .execute()
        return result.data[0] if result.data else None
    except Exception as e:
        logger.error(f"Database error fetching points for user {user_id}: {e}")
        raise DatabaseError(f"Failed to fetch user points: {e}")


def create_user_points(user_id: str, points_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create the points aggregate for a user

    Raises:
        DatabaseError: If insert fails
    """
    supabase = get_supabase_client()
    try:
        result = supabase.table("user_points")\
            .insert({**points_data, "user_id": user_id})\
            .execute()
        return result.data[0] if result.data else {}
    except Exception as e:
        logger.error(f"Database error creating points for user {user_id}: {e}")
        raise DatabaseError(f"Failed to create user points: {e}")


def update_user_points(user_id: str, update_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Update the points aggregate for a user

    Raises:
        DatabaseError: If update fails
    """
    supabase = get_supabase_client()
    try:
        result = supabase.table("user_points")\
            .update({**update_data, "updated_at": get_app_now().isoformat()})\
            .eq("user_id", user_id)\
            .execute()
        return result.data[0] if result.data else {}
    except Exception as e:
        logger.error(f"Database error updating points for user {user_id}: {e}")
        raise DatabaseError(f"Failed to update user points: {e}")


def reset_points_column(column: str) -> int:
    """
    Zero a periodic points column for every user

    Args:
        column: 'points_this_week' or 'points_this_month'

    Returns:
        Number of rows reset

    Raises:
        DatabaseError: If update fails
    """
    supabase = get_supabase_client()
    try:
        result = supabase.table("user_points")\
            .update({column: 0, "updated_at": get_app_now().isoformat()})\
            .gt(column, 0)\
            .execute()
        return len(result.data or [])
    except Exception as e:
        logger.error(f"Database error resetting {column}: {e}")
        raise DatabaseError(f"Failed to reset {column}: {e}")
