"""
Habit Routes - Endpoints for habit management and completion
Handlers are sync so FastAPI runs them in its threadpool alongside the blocking Supabase client.
"""
from fastapi import APIRouter, HTTPException, Query
from habitstreak.core.constants import DEFAULT_COMPLETION_HISTORY_LIMIT
from habitstreak.models.habit import CreateHabitRequest, CompleteHabitRequest
from habitstreak.services import habits as habit_service
from habitstreak.core.exceptions import (
    HabitNotFoundError,
    InvalidHabitDataError,
    CompletionRejectedError,
    StreakConflictError,
    DatabaseError
)

router = APIRouter(prefix="/habits", tags=["habits"])


@router.post("")
def create_habit(request: CreateHabitRequest):
    """Create a new habit for a user"""
    try:
        return habit_service.create_habit(request.user_id, request.model_dump(exclude={"user_id"}))
    except InvalidHabitDataError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except DatabaseError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Unexpected error: {str(e)}")


@router.get("")
def get_user_habits(user_id: str = Query(..., min_length=1)):
    """Get all active habits for a user"""
    try:
        return habit_service.get_user_habits(user_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/{habit_id}/complete")
def complete_habit(habit_id: str, request: CompleteHabitRequest):
    """Mark a habit as complete for today or the given day"""
    try:
        return habit_service.complete_habit(
            request.user_id,
            habit_id,
            notes=request.notes,
            mood_rating=request.mood_rating,
            completion_date=request.completion_date
        )
    except HabitNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (CompletionRejectedError, StreakConflictError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except InvalidHabitDataError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except DatabaseError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Unexpected error: {str(e)}")


@router.delete("/{habit_id}")
def delete_habit(habit_id: str, user_id: str = Query(..., min_length=1)):
    """Soft-delete a habit"""
    try:
        return habit_service.delete_habit(user_id, habit_id)
    except HabitNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DatabaseError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Unexpected error: {str(e)}")


@router.get("/{habit_id}/completions")
def get_completion_history(
    habit_id: str,
    user_id: str = Query(..., min_length=1),
    limit: int = Query(DEFAULT_COMPLETION_HISTORY_LIMIT, ge=1, le=365)
):
    """Get completion history for a habit"""
    try:
        return habit_service.get_completion_history(user_id, habit_id, limit)
    except HabitNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DatabaseError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Unexpected error: {str(e)}")
