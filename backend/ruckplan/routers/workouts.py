"""Upcoming workouts API router."""

from typing import List

from fastapi import APIRouter, Depends, Query

from ruckplan.routers.dependencies import get_engine
from ruckplan.schemas.session import UpcomingWorkout
from ruckplan.services.engine_context import EngineContext

router = APIRouter()


@router.get("/upcoming", response_model=List[UpcomingWorkout])
async def get_upcoming_workouts(
    limit: int = Query(20, ge=1, le=100, description="Maximum number of workouts to return"),
    engine: EngineContext = Depends(get_engine),
) -> List[UpcomingWorkout]:
    """
    Upcoming workouts across all active sessions.

    Returns:
        List of upcoming workouts ordered by scheduled date
    """
    return engine.sessions.upcoming_workouts[:limit]


@router.get("/today", response_model=List[UpcomingWorkout])
async def get_todays_workouts(engine: EngineContext = Depends(get_engine)) -> List[UpcomingWorkout]:
    """Upcoming workouts scheduled for today's date."""
    return engine.sessions.get_todays_workouts()
