"""
Domain constants for streaks, points and habits
"""

# Points
BASE_POINTS_PER_DIFFICULTY = 10
STREAK_BONUS_INTERVAL_DAYS = 7
STREAK_BONUS_POINTS = 5
POINTS_PER_LEVEL = 1000

# Difficulty
MIN_DIFFICULTY_LEVEL = 1
MAX_DIFFICULTY_LEVEL = 5

# Completions
COMPLETION_METHOD_MANUAL = "manual"
DEFAULT_COMPLETION_HISTORY_LIMIT = 30

# Habit attributes
HABIT_CATEGORIES = ("health", "education", "fitness", "mindfulness", "productivity", "other")
TARGET_FREQUENCIES = ("daily", "weekly")

# Scheduler (hour, minute) in application timezone
STREAK_EXPIRY_TIME = (0, 5)
POINTS_RESET_TIME = (0, 0)
