"""
Points Routes - Per-user points totals and level
"""
from fastapi import APIRouter, HTTPException
from habitstreak.services.habits import points as points_service

router = APIRouter(prefix="/users", tags=["points"])


@router.get("/{user_id}/points")
def get_user_points(user_id: str):
    """Get a user's points totals and level"""
    try:
        return points_service.get_user_points(user_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
