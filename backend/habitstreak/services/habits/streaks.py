"""
Streak engine - pure streak and points computation
No I/O and no clock reads: callers supply the completion date.
"""
from datetime import date, timedelta
import logging

from habitstreak.core.constants import (
    BASE_POINTS_PER_DIFFICULTY,
    STREAK_BONUS_INTERVAL_DAYS,
    STREAK_BONUS_POINTS,
    MIN_DIFFICULTY_LEVEL,
    MAX_DIFFICULTY_LEVEL
)
from habitstreak.core.exceptions import (
    DuplicateCompletionError,
    BackdatedCompletionError,
    InvalidHabitDataError
)
from habitstreak.models.streak import HabitStreakState, CompletionResult

logger = logging.getLogger(__name__)


def calculate_points(difficulty_level: int, streak_length: int) -> int:
    """
    Points awarded for a single completion

    Base points scale with difficulty; a flat bonus is added for every
    full week of streak (7 -> +5, 14 -> +10, ...).

    Args:
        difficulty_level: Habit difficulty, 1 to 5
        streak_length: Streak value including this completion

    Returns:
        Points earned

    Raises:
        InvalidHabitDataError: If difficulty_level is outside 1..5
    """
    if not MIN_DIFFICULTY_LEVEL <= difficulty_level <= MAX_DIFFICULTY_LEVEL:
        raise InvalidHabitDataError(
            f"Invalid difficulty_level {difficulty_level}. "
            f"Must be between {MIN_DIFFICULTY_LEVEL} and {MAX_DIFFICULTY_LEVEL}"
        )

    base_points = difficulty_level * BASE_POINTS_PER_DIFFICULTY
    streak_bonus = (streak_length // STREAK_BONUS_INTERVAL_DAYS) * STREAK_BONUS_POINTS
    return base_points + streak_bonus


def compute_completion(state: HabitStreakState, completion_date: date,
                       difficulty_level: int) -> CompletionResult:
    """
    Compute the next streak state and points for a completion

    Args:
        state: Streak state before this completion
        completion_date: Calendar day being recorded
        difficulty_level: Habit difficulty, used only for points

    Returns:
        CompletionResult with the new state and points earned

    Raises:
        DuplicateCompletionError: If the habit was already completed on completion_date
        BackdatedCompletionError: If completion_date is before the last completion
        InvalidHabitDataError: If difficulty_level is outside 1..5
    """
    last_date = state.last_completed_date

    if last_date is None:
        new_streak = 1
    else:
        gap_days = (completion_date - last_date).days
        if gap_days == 0:
            raise DuplicateCompletionError(f"Habit already completed on {completion_date}")
        if gap_days < 0:
            raise BackdatedCompletionError(
                f"Cannot record completion for {completion_date}: last completion was {last_date}"
            )
        new_streak = state.current_streak + 1 if gap_days == 1 else 1

    points_earned = calculate_points(difficulty_level, new_streak)

    new_state = HabitStreakState(
        current_streak=new_streak,
        longest_streak=max(new_streak, state.longest_streak),
        last_completed_date=completion_date,
    )

    logger.debug(
        f"Streak computed: {state.current_streak} -> {new_streak} "
        f"(longest {new_state.longest_streak}, points {points_earned})"
    )

    return CompletionResult(new_state=new_state, points_earned=points_earned)


def is_streak_broken(state: HabitStreakState, today: date) -> bool:
    """
    Whether the streak can no longer be continued as of today

    A streak survives until the end of the day after the last completion.
    """
    if state.current_streak == 0 or state.last_completed_date is None:
        return False
    return state.last_completed_date < today - timedelta(days=1)


def expire_streak(state: HabitStreakState, today: date) -> HabitStreakState:
    """
    Zero the current streak if it is broken as of today

    Args:
        state: Stored streak state
        today: Current calendar day

    Returns:
        The same state if still alive, otherwise a copy with current_streak=0
    """
    if not is_streak_broken(state, today):
        return state
    return state.model_copy(update={"current_streak": 0})
