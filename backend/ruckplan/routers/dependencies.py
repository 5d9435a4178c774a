"""Shared router dependencies and error mapping."""

import logging
from typing import Union

from fastapi import HTTPException, Request, status

from ruckplan.services.engine_context import EngineContext
from ruckplan.services.errors import EngineErrorKind, StoreError, TrainingEngineError

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    EngineErrorKind.SESSION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    EngineErrorKind.PROFILE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    EngineErrorKind.ALREADY_ENROLLED: status.HTTP_409_CONFLICT,
    EngineErrorKind.TOO_MANY_ACTIVE_PROGRAMS: status.HTTP_409_CONFLICT,
    EngineErrorKind.INVALID_WEIGHT: 422,
    EngineErrorKind.ADAPTATION_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_engine(request: Request) -> EngineContext:
    """Dependency to get the engine context built at startup."""
    return request.app.state.engine


def http_error(exc: Union[TrainingEngineError, StoreError]) -> HTTPException:
    """Translate an engine or store failure into an HTTP error."""
    if isinstance(exc, TrainingEngineError):
        return HTTPException(
            status_code=ERROR_STATUS_CODES[exc.kind],
            detail={"kind": exc.kind.value, "message": exc.message},
        )

    logger.error(f"Store unavailable: {exc}")
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Storage temporarily unavailable",
    )
