"""
Habits module - Core habit, streak, and points functionality
"""
from . import repository
from . import streaks
from . import points
from . import service

# Export commonly used functions for convenience
from .service import (
    create_habit,
    get_user_habits,
    complete_habit,
    delete_habit,
    get_completion_history
)

from .streaks import (
    compute_completion,
    calculate_points,
    expire_streak,
    is_streak_broken
)

from .points import (
    add_user_points,
    get_user_points,
    calculate_level
)

__all__ = [
    # Modules
    'repository',
    'streaks',
    'points',
    'service',

    # Service functions
    'create_habit',
    'get_user_habits',
    'complete_habit',
    'delete_habit',
    'get_completion_history',

    # Streak engine
    'compute_completion',
    'calculate_points',
    'expire_streak',
    'is_streak_broken',

    # Points functions
    'add_user_points',
    'get_user_points',
    'calculate_level'
]
