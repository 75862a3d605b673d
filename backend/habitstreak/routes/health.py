"""
Health Routes - Liveness and configuration checks
"""
from fastapi import APIRouter
from habitstreak.core.config import settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Report liveness and whether the database and scheduler are configured"""
    return {
        "status": "ok",
        "database_configured": bool(settings.SUPABASE_URL and settings.SUPABASE_KEY),
        "scheduler_enabled": settings.SCHEDULER_ENABLED,
        "timezone": settings.APP_TIMEZONE
    }
