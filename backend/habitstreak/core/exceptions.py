"""
Custom Exceptions - Application-specific error types
"""


class HabitStreakException(Exception):
    """Base exception for all habit streak errors"""
    pass


class HabitNotFoundError(HabitStreakException):
    """Raised when a habit cannot be found for the requesting user"""
    pass


class InvalidHabitDataError(HabitStreakException):
    """Raised when habit data validation fails"""
    pass


class CompletionRejectedError(HabitStreakException):
    """Raised when a completion attempt cannot be recorded for the given date"""
    pass


class DuplicateCompletionError(CompletionRejectedError):
    """Raised when a habit has already been completed on the given date"""
    pass


class BackdatedCompletionError(CompletionRejectedError):
    """Raised when a completion is dated before the last recorded completion"""
    pass


class StreakConflictError(HabitStreakException):
    """Raised when the stored streak changed between read and write"""
    pass


class DatabaseError(HabitStreakException):
    """Raised when database operations fail"""
    pass
