"""
Scheduler Job Definitions
Contains all scheduled maintenance jobs for streaks and points
"""
from datetime import timedelta
import logging

from habitstreak.models.streak import HabitStreakState
from habitstreak.services.habits import repository
from habitstreak.services.habits import points as points_service
from habitstreak.services.habits.streaks import expire_streak
from habitstreak.utils.timezone import get_today_date

logger = logging.getLogger(__name__)


def expire_broken_streaks() -> int:
    """
    Zero the current streak of habits not completed yesterday or today
    Called once daily shortly after midnight, but also catches up on missed
    runs if the server was down

    Returns:
        Number of habits whose streak was reset
    """
    try:
        logger.info("[SCHEDULER] Expiring broken streaks...")

        today = get_today_date()
        stale_habits = repository.get_habits_with_stale_streaks(today - timedelta(days=1))

        if not stale_habits:
            logger.info("[SCHEDULER] No broken streaks to expire")
            return 0

        expired = 0
        for habit in stale_habits:
            habit_id = habit["id"]
            try:
                state = HabitStreakState.from_record(habit)
                if expire_streak(state, today) == state:
                    continue

                if repository.reset_current_streak(habit_id, habit.get("last_completed_date")):
                    expired += 1
                    logger.info(f"[SCHEDULER] Reset streak for habit_id={habit_id} (was {state.current_streak})")
                else:
                    logger.info(f"[SCHEDULER] Habit {habit_id} was completed meanwhile, streak kept")
            except Exception as e:
                logger.error(f"[SCHEDULER] Failed to reset streak for habit {habit_id}: {e}")

        logger.info(f"[SCHEDULER] Expired {expired} broken streak(s)")
        return expired

    except Exception as e:
        logger.error(f"[SCHEDULER] Error in expire_broken_streaks: {e}", exc_info=True)
        return 0


def reset_weekly_points():
    """
    Reset every user's weekly points
    Called every Monday at midnight
    """
    try:
        count = points_service.reset_weekly_points()
        logger.info(f"[SCHEDULER] Reset weekly points for {count} user(s)")
    except Exception as e:
        logger.error(f"[SCHEDULER] Error in reset_weekly_points: {e}", exc_info=True)


def reset_monthly_points():
    """
    Reset every user's monthly points
    Called on the first day of each month at midnight
    """
    try:
        count = points_service.reset_monthly_points()
        logger.info(f"[SCHEDULER] Reset monthly points for {count} user(s)")
    except Exception as e:
        logger.error(f"[SCHEDULER] Error in reset_monthly_points: {e}", exc_info=True)
