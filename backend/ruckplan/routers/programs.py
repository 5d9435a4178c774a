"""Program catalog and recommendations API router."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ruckplan.routers.dependencies import get_engine, http_error
from ruckplan.schemas.program import ProgramSchema
from ruckplan.services.engine_context import EngineContext
from ruckplan.services.errors import StoreError

router = APIRouter()


@router.get("", response_model=List[ProgramSchema])
async def list_programs(engine: EngineContext = Depends(get_engine)) -> List[ProgramSchema]:
    """List every catalog program in catalog order."""
    try:
        return engine.catalog.list_programs()
    except StoreError as exc:
        raise http_error(exc)


@router.get("/recommendations", response_model=List[ProgramSchema])
async def get_recommendations(engine: EngineContext = Depends(get_engine)) -> List[ProgramSchema]:
    """
    Recompute program recommendations for the user.

    Without a fitness profile this falls back to featured programs.
    """
    try:
        return engine.sessions.generate_recommendations()
    except StoreError as exc:
        raise http_error(exc)


@router.get("/{program_id}", response_model=ProgramSchema)
async def get_program(program_id: str, engine: EngineContext = Depends(get_engine)) -> ProgramSchema:
    try:
        program = engine.catalog.get_program(program_id)
    except StoreError as exc:
        raise http_error(exc)

    if program is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Program not found",
        )
    return program
