"""Program sessions API router: enrollment, lifecycle, workouts and analytics."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ruckplan.routers.dependencies import get_engine, http_error
from ruckplan.schemas.analytics import ProgramAnalytics
from ruckplan.schemas.session import (
    ActiveProgramSession,
    CompletedProgramSession,
    CompletedWorkout,
    EnrollRequest,
    PauseRequest,
    UpcomingWorkout,
)
from ruckplan.services.engine_context import EngineContext
from ruckplan.services.errors import StoreError, TrainingEngineError

logger = logging.getLogger(__name__)

router = APIRouter()


# ============== Session Listing ==============

@router.get("", response_model=List[ActiveProgramSession])
async def list_active_sessions(engine: EngineContext = Depends(get_engine)) -> List[ActiveProgramSession]:
    """List the user's active program sessions in enrollment order."""
    return engine.sessions.active_sessions


@router.get("/history", response_model=List[CompletedProgramSession])
async def list_completed_sessions(engine: EngineContext = Depends(get_engine)) -> List[CompletedProgramSession]:
    """Programs completed since the engine started, oldest first."""
    return engine.sessions.history


@router.get("/{session_id}", response_model=ActiveProgramSession)
async def get_session(session_id: str, engine: EngineContext = Depends(get_engine)) -> ActiveProgramSession:
    try:
        return engine.sessions.get_session(session_id)
    except TrainingEngineError as exc:
        raise http_error(exc)


# ============== Lifecycle Endpoints ==============

@router.post("/refresh", response_model=List[ActiveProgramSession])
async def refresh_sessions(engine: EngineContext = Depends(get_engine)) -> List[ActiveProgramSession]:
    """Rebuild sessions, windows and recommendations from the stores."""
    try:
        engine.sessions.refresh()
    except StoreError as exc:
        raise http_error(exc)

    return engine.sessions.active_sessions


@router.post("", response_model=ActiveProgramSession, status_code=status.HTTP_201_CREATED)
async def enroll(
    request: EnrollRequest,
    engine: EngineContext = Depends(get_engine),
) -> ActiveProgramSession:
    """
    Enroll in a catalog program.

    Fails with 422 for a starting weight outside the allowed range, 409 when
    already enrolled in the program or at the active-program limit.
    """
    try:
        program = engine.catalog.get_program(request.program_id)
        if program is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Program not found",
            )

        return engine.sessions.enroll(
            program,
            request.starting_weight,
            customization=request.customization,
            start_date=request.start_date,
        )
    except (TrainingEngineError, StoreError) as exc:
        raise http_error(exc)


@router.post("/{session_id}/pause", response_model=ActiveProgramSession)
async def pause_session(
    session_id: str,
    request: Optional[PauseRequest] = None,
    engine: EngineContext = Depends(get_engine),
) -> ActiveProgramSession:
    """Pause a session; its upcoming workouts are cleared until resumed."""
    reason = request.reason if request else PauseRequest().reason
    try:
        return engine.sessions.pause(session_id, reason)
    except (TrainingEngineError, StoreError) as exc:
        raise http_error(exc)


@router.post("/{session_id}/resume", response_model=ActiveProgramSession)
async def resume_session(session_id: str, engine: EngineContext = Depends(get_engine)) -> ActiveProgramSession:
    try:
        return engine.sessions.resume(session_id)
    except (TrainingEngineError, StoreError) as exc:
        raise http_error(exc)


@router.post("/{session_id}/complete", response_model=CompletedProgramSession)
async def complete_session(
    session_id: str,
    engine: EngineContext = Depends(get_engine),
) -> CompletedProgramSession:
    """Complete the program and return the session snapshot with achievements."""
    try:
        return engine.sessions.complete_program(session_id)
    except (TrainingEngineError, StoreError) as exc:
        raise http_error(exc)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_session(session_id: str, engine: EngineContext = Depends(get_engine)) -> Response:
    """Abandon a program. The enrollment is deleted; progress records are kept."""
    try:
        engine.sessions.cancel_program(session_id)
    except (TrainingEngineError, StoreError) as exc:
        raise http_error(exc)

    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============== Workout Endpoints ==============

@router.post("/{session_id}/workouts", response_model=ActiveProgramSession)
async def record_workout(
    session_id: str,
    workout: CompletedWorkout,
    engine: EngineContext = Depends(get_engine),
) -> ActiveProgramSession:
    """
    Record a completed workout.

    The returned session carries updated metrics, completion percentage and
    any new advisory adaptations.
    """
    try:
        session = engine.sessions.record_workout(workout, session_id)
    except (TrainingEngineError, StoreError) as exc:
        raise http_error(exc)

    logger.debug(f"Session {session_id} now at week {session.enrollment.current_week}")
    return session


@router.get("/{session_id}/next", response_model=Optional[UpcomingWorkout])
async def get_next_workout(
    session_id: str,
    engine: EngineContext = Depends(get_engine),
) -> Optional[UpcomingWorkout]:
    """Earliest upcoming workout of the session, or null when paused or finished."""
    try:
        return engine.sessions.get_next_workout(session_id)
    except TrainingEngineError as exc:
        raise http_error(exc)


@router.get("/{session_id}/analytics", response_model=ProgramAnalytics)
async def get_session_analytics(
    session_id: str,
    engine: EngineContext = Depends(get_engine),
) -> ProgramAnalytics:
    try:
        return engine.sessions.get_progress_analytics(session_id)
    except (TrainingEngineError, StoreError) as exc:
        raise http_error(exc)
