"""
User points aggregation
Running totals of points per user, plus level derived from the total
"""
from typing import Dict, Any
import logging

from habitstreak.core.constants import POINTS_PER_LEVEL
from habitstreak.utils.locks import KeyedLock
from . import repository

logger = logging.getLogger(__name__)

# Serializes read-modify-write of a user's points row within this process
_user_locks = KeyedLock()


def calculate_level(total_points: int) -> int:
    """Level 1 starts at 0 points; one level per POINTS_PER_LEVEL points"""
    return total_points // POINTS_PER_LEVEL + 1


def add_user_points(user_id: str, points: int) -> Dict[str, Any]:
    """
    Add points earned by a completion to the user's running totals

    Creates the user's points row on the first award.

    Args:
        user_id: The user ID
        points: Points to add

    Returns:
        Updated points data

    Raises:
        DatabaseError: If database operation fails
    """
    with _user_locks.hold(user_id):
        current = repository.get_user_points(user_id)

        if current is None:
            logger.info(f"Creating points record for user {user_id}")
            return repository.create_user_points(user_id, {
                "total_points": points,
                "points_this_week": points,
                "points_this_month": points,
                "experience_points": points,
                "level": calculate_level(points)
            })

        new_total = (current.get("total_points") or 0) + points
        new_level = calculate_level(new_total)

        if new_level > (current.get("level") or 1):
            logger.info(f"User {user_id} reached level {new_level}")

        return repository.update_user_points(user_id, {
            "total_points": new_total,
            "points_this_week": (current.get("points_this_week") or 0) + points,
            "points_this_month": (current.get("points_this_month") or 0) + points,
            "experience_points": new_total,
            "level": new_level
        })


def get_user_points(user_id: str) -> Dict[str, Any]:
    """
    Get a user's points summary

    Args:
        user_id: The user ID

    Returns:
        Dict with status, user_id, totals and level (zeros if the user has no points yet)
    """
    current = repository.get_user_points(user_id) or {}
    total_points = current.get("total_points") or 0

    return {
        "status": "success",
        "user_id": user_id,
        "total_points": total_points,
        "points_this_week": current.get("points_this_week") or 0,
        "points_this_month": current.get("points_this_month") or 0,
        "level": current.get("level") or calculate_level(total_points),
        "points_to_next_level": POINTS_PER_LEVEL - total_points % POINTS_PER_LEVEL
    }


def reset_weekly_points() -> int:
    """Zero points_this_week for all users; returns rows reset"""
    return repository.reset_points_column("points_this_week")


def reset_monthly_points() -> int:
    """Zero points_this_month for all users; returns rows reset"""
    return repository.reset_points_column("points_this_month")
