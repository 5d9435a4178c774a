"""SQLAlchemy implementations of the catalog, progress and profile stores."""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ruckplan.models.enrollment import Enrollment
from ruckplan.models.fitness_profile import FitnessProfileRecord
from ruckplan.models.program import Category, Difficulty, Program
from ruckplan.models.progress_record import ProgressRecord
from ruckplan.schemas.profile import UserFitnessProfile
from ruckplan.schemas.program import (
    EnrollmentSchema,
    ProgramSchema,
    ProgressRecordSchema,
)
from ruckplan.services.errors import StoreError
from ruckplan.services.stores import PROGRAMS, ChangeFeed

logger = logging.getLogger(__name__)


# Built-in catalog used when the programs table is empty
DEFAULT_PROGRAMS = [
    {
        "title": "Military Foundation",
        "description": "Build the base for load carriage with steady weekly progression",
        "difficulty": Difficulty.BEGINNER,
        "category": Category.MILITARY,
        "duration_weeks": 8,
        "is_featured": True,
    },
    {
        "title": "Ranger Challenge",
        "description": "Heavier loads and longer distances for experienced ruckers",
        "difficulty": Difficulty.ADVANCED,
        "category": Category.MILITARY,
        "duration_weeks": 12,
        "is_featured": True,
    },
    {
        "title": "Selection Prep",
        "description": "Peak preparation for assessment and selection courses",
        "difficulty": Difficulty.ELITE,
        "category": Category.MILITARY,
        "duration_weeks": 16,
        "is_featured": False,
    },
    {
        "title": "Ruck Fit Maintenance",
        "description": "Hold your fitness with moderate weekly rucks",
        "difficulty": Difficulty.INTERMEDIATE,
        "category": Category.FITNESS,
        "duration_weeks": 6,
        "is_featured": True,
    },
    {
        "title": "Trail Explorer",
        "description": "Weekend-friendly rucks that build towards a long hike",
        "difficulty": Difficulty.BEGINNER,
        "category": Category.ADVENTURE,
        "duration_weeks": 4,
        "is_featured": False,
    },
    {
        "title": "Bataan Memorial March",
        "description": "Train for a historical marathon-distance memorial march",
        "difficulty": Difficulty.ADVANCED,
        "category": Category.HISTORICAL,
        "duration_weeks": 10,
        "is_featured": False,
    },
]


@contextmanager
def session_scope(session_factory: sessionmaker) -> Iterator[Session]:
    """Transaction scope: commit on success, roll back and raise StoreError on failure."""
    db = session_factory()
    try:
        yield db
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Store operation failed")
        raise StoreError(f"Store operation failed: {exc}") from exc
    finally:
        db.close()


class SqlProgramCatalog:
    """Program catalog backed by the programs table."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory
        self.changes = ChangeFeed()

    def list_programs(self) -> List[ProgramSchema]:
        with session_scope(self.session_factory) as db:
            programs = db.query(Program).order_by(Program.sort_order, Program.created_at).all()
            return [ProgramSchema.model_validate(p) for p in programs]

    def get_program(self, program_id: str) -> Optional[ProgramSchema]:
        with session_scope(self.session_factory) as db:
            program = db.query(Program).filter(Program.id == program_id).first()
            return ProgramSchema.model_validate(program) if program else None

    def seed_defaults(self, programs: Optional[List[dict]] = None) -> int:
        """Insert the built-in programs when the catalog is empty."""
        programs = DEFAULT_PROGRAMS if programs is None else programs
        with session_scope(self.session_factory) as db:
            if db.query(Program).count() > 0:
                return 0
            for index, data in enumerate(programs):
                db.add(Program(sort_order=index, **data))

        logger.info(f"Seeded catalog with {len(programs)} programs")
        self.changes.publish(PROGRAMS)
        return len(programs)


class SqlProgressStore:
    """Enrollment and progress-record persistence backed by SQL tables."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory
        self.changes = ChangeFeed()

    def list_user_enrollments(self, user_id: str) -> List[EnrollmentSchema]:
        with session_scope(self.session_factory) as db:
            rows = db.query(Enrollment).filter(
                Enrollment.user_id == user_id
            ).order_by(Enrollment.start_date, Enrollment.created_at).all()
            return [EnrollmentSchema.model_validate(r) for r in rows]

    def list_progress_records(self, user_id: str) -> List[ProgressRecordSchema]:
        with session_scope(self.session_factory) as db:
            rows = db.query(ProgressRecord).filter(
                ProgressRecord.user_id == user_id
            ).order_by(ProgressRecord.workout_date, ProgressRecord.created_at).all()
            return [ProgressRecordSchema.model_validate(r) for r in rows]

    def create_enrollment(
        self,
        user_id: str,
        program: ProgramSchema,
        starting_weight: float,
        start_date: datetime,
        next_workout_date: Optional[datetime],
    ) -> EnrollmentSchema:
        with session_scope(self.session_factory) as db:
            enrollment = Enrollment(
                user_id=user_id,
                program_id=program.id,
                start_date=start_date,
                current_week=1,
                starting_weight=starting_weight,
                current_weight=starting_weight,
                target_weight=starting_weight + program.difficulty.weight_increment * program.duration_weeks,
                completion_percentage=0.0,
                next_workout_date=next_workout_date,
                is_active=True,
            )
            db.add(enrollment)
            db.flush()
            result = EnrollmentSchema.model_validate(enrollment)

        logger.info(f"Created enrollment {result.id} in program {program.id} for user {user_id}")
        return result

    def update_enrollment(self, enrollment: EnrollmentSchema) -> EnrollmentSchema:
        with session_scope(self.session_factory) as db:
            row = self._apply_enrollment(db, enrollment)
            db.flush()
            return EnrollmentSchema.model_validate(row)

    def append_progress_record(self, record: ProgressRecordSchema) -> ProgressRecordSchema:
        with session_scope(self.session_factory) as db:
            row = self._progress_row(record)
            db.add(row)
            db.flush()
            return ProgressRecordSchema.model_validate(row)

    def record_progress(self, record: ProgressRecordSchema, enrollment: EnrollmentSchema) -> EnrollmentSchema:
        """Append a progress record and update its enrollment in one transaction."""
        with session_scope(self.session_factory) as db:
            row = self._apply_enrollment(db, enrollment)
            db.add(self._progress_row(record))
            db.flush()
            return EnrollmentSchema.model_validate(row)

    def mark_enrollment_complete(self, enrollment_id: str, completed_at: datetime) -> EnrollmentSchema:
        with session_scope(self.session_factory) as db:
            row = self._get_enrollment(db, enrollment_id)
            row.completed_at = completed_at
            row.completion_percentage = 100.0
            row.is_active = False
            row.next_workout_date = None
            db.flush()
            result = EnrollmentSchema.model_validate(row)

        logger.info(f"Marked enrollment {enrollment_id} complete")
        return result

    def delete_enrollment(self, enrollment_id: str) -> None:
        with session_scope(self.session_factory) as db:
            row = self._get_enrollment(db, enrollment_id)
            db.delete(row)

        logger.info(f"Deleted enrollment {enrollment_id}")

    def _get_enrollment(self, db: Session, enrollment_id: str) -> Enrollment:
        row = db.query(Enrollment).filter(Enrollment.id == enrollment_id).first()
        if not row:
            raise StoreError(f"Enrollment {enrollment_id} not found")
        return row

    def _apply_enrollment(self, db: Session, enrollment: EnrollmentSchema) -> Enrollment:
        row = self._get_enrollment(db, enrollment.id)
        row.current_week = enrollment.current_week
        row.current_weight = enrollment.current_weight
        row.completion_percentage = enrollment.completion_percentage
        row.next_workout_date = enrollment.next_workout_date
        row.is_active = enrollment.is_active
        row.paused_reason = enrollment.paused_reason
        row.paused_at = enrollment.paused_at
        return row

    @staticmethod
    def _progress_row(record: ProgressRecordSchema) -> ProgressRecord:
        return ProgressRecord(
            user_id=record.user_id,
            program_id=record.program_id,
            workout_date=record.workout_date,
            week_number=record.week_number,
            workout_number=record.workout_number,
            weight=record.weight,
            distance=record.distance,
            duration_seconds=record.duration_seconds,
            completed=record.completed,
            notes=record.notes,
            heart_rate_data=record.heart_rate_data.model_dump() if record.heart_rate_data else None,
            pace_data=record.pace_data.model_dump() if record.pace_data else None,
        )


class SqlProfileStore:
    """Fitness profile persistence as a JSON payload per user."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def load_profile(self, user_id: str) -> Optional[UserFitnessProfile]:
        with session_scope(self.session_factory) as db:
            row = db.query(FitnessProfileRecord).filter(
                FitnessProfileRecord.user_id == user_id
            ).first()
            payload = dict(row.payload) if row else None

        if payload is None:
            return None
        try:
            return UserFitnessProfile.model_validate(payload)
        except ValidationError as exc:
            raise StoreError(f"Stored profile for {user_id} is unreadable: {exc}") from exc

    def save_profile(self, user_id: str, profile: UserFitnessProfile) -> None:
        payload = profile.model_dump(mode="json")
        with session_scope(self.session_factory) as db:
            row = db.query(FitnessProfileRecord).filter(
                FitnessProfileRecord.user_id == user_id
            ).first()
            if row:
                row.payload = payload
            else:
                db.add(FitnessProfileRecord(user_id=user_id, payload=payload))
