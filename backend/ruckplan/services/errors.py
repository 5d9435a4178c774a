"""Error types raised by the training engine."""

from enum import Enum
from typing import Any, Dict, Optional


class EngineErrorKind(str, Enum):
    """Every way a valid-looking engine request can be refused."""
    SESSION_NOT_FOUND = "session_not_found"
    ALREADY_ENROLLED = "already_enrolled"
    TOO_MANY_ACTIVE_PROGRAMS = "too_many_active_programs"
    INVALID_WEIGHT = "invalid_weight"
    PROFILE_NOT_FOUND = "profile_not_found"
    # Adaptations are advisory; nothing raises this yet
    ADAPTATION_FAILED = "adaptation_failed"


def describe_error(kind: EngineErrorKind, context: Optional[Dict[str, Any]] = None) -> str:
    """Human-readable message for an error kind."""
    context = context or {}
    if kind == EngineErrorKind.SESSION_NOT_FOUND:
        session_id = context.get("session_id")
        if session_id is None:
            return "Program session not found"
        return f"Program session {session_id} not found"
    if kind == EngineErrorKind.ALREADY_ENROLLED:
        return "Already enrolled in this program"
    if kind == EngineErrorKind.TOO_MANY_ACTIVE_PROGRAMS:
        return f"Too many active programs (maximum {context.get('limit', 2)})"
    if kind == EngineErrorKind.INVALID_WEIGHT:
        weight = context.get("weight")
        if weight is None:
            return "Invalid weight value"
        return f"Invalid weight value: {weight} lbs"
    if kind == EngineErrorKind.PROFILE_NOT_FOUND:
        return "User fitness profile not found"
    return "Failed to apply program adaptation"


class TrainingEngineError(Exception):
    """Domain error tagged with its kind; the caller's request was invalid."""

    def __init__(self, kind: EngineErrorKind, **context: Any):
        self.kind = kind
        self.context = context
        super().__init__(self.message)

    @property
    def message(self) -> str:
        return describe_error(self.kind, self.context)


class StoreError(Exception):
    """A collaborator store could not complete a valid request."""
    pass
