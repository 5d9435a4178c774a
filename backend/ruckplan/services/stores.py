"""Contracts the engine requires from its catalog, progress and profile collaborators."""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Protocol

from ruckplan.schemas.profile import UserFitnessProfile
from ruckplan.schemas.program import (
    EnrollmentSchema,
    ProgramSchema,
    ProgressRecordSchema,
)

logger = logging.getLogger(__name__)

# Collections a sync layer can announce changes for
PROGRAMS = "programs"
ENROLLMENTS = "enrollments"
PROGRESS = "progress"

ChangeCallback = Callable[[str], None]


class ChangeFeed:
    """Explicit subscription point for change notifications on a collection."""

    def __init__(self):
        self._subscribers: Dict[int, ChangeCallback] = {}
        self._next_token = 0

    def subscribe(self, callback: ChangeCallback) -> Callable[[], None]:
        """Register a callback; returns a function that unregisters it."""
        token = self._next_token
        self._next_token += 1
        self._subscribers[token] = callback

        def unsubscribe() -> None:
            self._subscribers.pop(token, None)

        return unsubscribe

    def publish(self, collection: str) -> None:
        """Deliver one change notification to every subscriber."""
        logger.debug(f"Change notification for '{collection}' to {len(self._subscribers)} subscribers")
        for callback in list(self._subscribers.values()):
            callback(collection)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)


class ProgramCatalog(Protocol):
    """Read-only source of program definitions."""

    changes: ChangeFeed

    def list_programs(self) -> List[ProgramSchema]:
        ...


class ProgressStore(Protocol):
    """Persistence for enrollments and progress records.

    Every write is atomic from the engine's point of view: it either returns
    with the row durably visible, or raises StoreError and leaves no row.
    """

    changes: ChangeFeed

    def list_user_enrollments(self, user_id: str) -> List[EnrollmentSchema]:
        ...

    def list_progress_records(self, user_id: str) -> List[ProgressRecordSchema]:
        ...

    def create_enrollment(
        self,
        user_id: str,
        program: ProgramSchema,
        starting_weight: float,
        start_date: datetime,
        next_workout_date: Optional[datetime],
    ) -> EnrollmentSchema:
        ...

    def update_enrollment(self, enrollment: EnrollmentSchema) -> EnrollmentSchema:
        ...

    def append_progress_record(self, record: ProgressRecordSchema) -> ProgressRecordSchema:
        ...

    def record_progress(self, record: ProgressRecordSchema, enrollment: EnrollmentSchema) -> EnrollmentSchema:
        """Append the record and apply the enrollment update atomically."""
        ...

    def mark_enrollment_complete(self, enrollment_id: str, completed_at: datetime) -> EnrollmentSchema:
        ...

    def delete_enrollment(self, enrollment_id: str) -> None:
        ...


class ProfileStore(Protocol):
    """Last-write-wins key-value persistence for the fitness profile."""

    def load_profile(self, user_id: str) -> Optional[UserFitnessProfile]:
        ...

    def save_profile(self, user_id: str, profile: UserFitnessProfile) -> None:
        ...
