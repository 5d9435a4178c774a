"""Active program sessions: enrollment, pause/resume, workouts and completion.

All mutations run under one reentrant lock, so the session set, the
upcoming-workout window and the fitness profile have a single writer. Store
writes happen first; in-memory state is only swapped in after every write of
an operation succeeded.
"""

import logging
import threading
import uuid
from datetime import datetime
from typing import Callable, Dict, List, Optional, Set, Tuple

from ruckplan.models.base import to_naive_utc, utcnow
from ruckplan.models.enrollment import PauseReason
from ruckplan.schemas.analytics import ProgramAnalytics
from ruckplan.schemas.program import (
    EnrollmentSchema,
    ProgramSchema,
    ProgressRecordSchema,
)
from ruckplan.schemas.session import (
    AchievementType,
    ActiveProgramSession,
    CompletedProgramSession,
    CompletedWorkout,
    Customization,
    ProgramAchievement,
    ProgressMetrics,
    UpcomingWorkout,
)
from ruckplan.services.adaptation_analyzer import AdaptationAnalyzer
from ruckplan.services.errors import EngineErrorKind, StoreError, TrainingEngineError
from ruckplan.services.fitness_profile_store import FitnessProfileStore
from ruckplan.services.progress_analytics import ProgressAnalyticsService
from ruckplan.services.recommendation_engine import RecommendationEngine
from ruckplan.services.schedule_generator import ScheduleGenerator
from ruckplan.services.stores import ProgramCatalog, ProgressStore

logger = logging.getLogger(__name__)

Slot = Tuple[int, int]  # (week_number, workout_number)


class SessionManager:
    """Owns the set of active program sessions for one user."""

    CONSISTENCY_ACHIEVEMENT_THRESHOLD = 0.9
    ENDURANCE_MILESTONE_MILES = 50.0

    def __init__(
        self,
        catalog: ProgramCatalog,
        progress_store: ProgressStore,
        profile_store: FitnessProfileStore,
        user_id: str,
        schedule_generator: Optional[ScheduleGenerator] = None,
        adaptation_analyzer: Optional[AdaptationAnalyzer] = None,
        recommendation_engine: Optional[RecommendationEngine] = None,
        analytics: Optional[ProgressAnalyticsService] = None,
        max_active_programs: int = 2,
        min_starting_weight: float = 10.0,
        max_starting_weight: float = 200.0,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.catalog = catalog
        self.progress_store = progress_store
        self.profile_store = profile_store
        self.user_id = user_id
        self.schedule_generator = schedule_generator or ScheduleGenerator()
        self.adaptation_analyzer = adaptation_analyzer or AdaptationAnalyzer()
        self.recommendation_engine = recommendation_engine or RecommendationEngine()
        self.analytics = analytics or ProgressAnalyticsService()
        self.max_active_programs = max_active_programs
        self.min_starting_weight = min_starting_weight
        self.max_starting_weight = max_starting_weight
        self.clock = clock

        self._lock = threading.RLock()
        self._sessions: List[ActiveProgramSession] = []
        self._upcoming: Dict[str, List[UpcomingWorkout]] = {}
        self._completed_slots: Dict[str, Set[Slot]] = {}
        self._history: List[CompletedProgramSession] = []
        self._recommendations: List[ProgramSchema] = []
        self._unsubscribers: List[Callable[[], None]] = []

    # ============== Lifecycle ==============

    def start(self) -> None:
        """Load the profile, subscribe to store changes and build initial state."""
        with self._lock:
            self.profile_store.load()
            if not self._unsubscribers:
                self._unsubscribers = [
                    self.catalog.changes.subscribe(self.refresh),
                    self.progress_store.changes.subscribe(self.refresh),
                ]
            self.refresh()

    def stop(self) -> None:
        with self._lock:
            for unsubscribe in self._unsubscribers:
                unsubscribe()
            self._unsubscribers = []

    # ============== Read Access ==============

    @property
    def active_sessions(self) -> List[ActiveProgramSession]:
        with self._lock:
            return list(self._sessions)

    @property
    def history(self) -> List[CompletedProgramSession]:
        with self._lock:
            return list(self._history)

    @property
    def recommendations(self) -> List[ProgramSchema]:
        with self._lock:
            return list(self._recommendations)

    @property
    def upcoming_workouts(self) -> List[UpcomingWorkout]:
        """Every session's window, ordered by scheduled date."""
        with self._lock:
            workouts = [w for window in self._upcoming.values() for w in window]
            return sorted(workouts, key=lambda w: (w.scheduled_date, w.session_id, w.workout_number))

    def get_session(self, session_id: str) -> ActiveProgramSession:
        with self._lock:
            return self._sessions[self._index_of(session_id)]

    # ============== Session State Machine ==============

    def enroll(
        self,
        program: ProgramSchema,
        starting_weight: float,
        customization: Optional[Customization] = None,
        start_date: Optional[datetime] = None
    ) -> ActiveProgramSession:
        """
        Enroll the user in a program.

        Checks run in order: weight bounds, duplicate program, active-program cap.

        Raises:
            TrainingEngineError: INVALID_WEIGHT, ALREADY_ENROLLED or TOO_MANY_ACTIVE_PROGRAMS
            StoreError: if the enrollment or profile could not be persisted
        """
        with self._lock:
            now = self.clock()
            start = to_naive_utc(start_date) if start_date else now
            self._validate_enrollment(program, starting_weight)

            customization = customization or self.schedule_generator.default_customization(program)
            schedule = self.schedule_generator.weekly_schedule(customization)
            next_date = self.schedule_generator.next_workout_day(schedule, start, inclusive=True)

            enrollment = self.progress_store.create_enrollment(
                self.user_id, program, starting_weight, start, next_date
            )
            session = self._build_session(
                session_id=str(uuid.uuid4()),
                enrollment=enrollment,
                program=program,
                customization=customization,
            )

            try:
                self.profile_store.save(self.profile_store.after_enrollment(program))
                recommendations = self._compute_recommendations(now)
            except StoreError:
                logger.warning(f"Rolling back enrollment {enrollment.id} after a failed write")
                self.progress_store.delete_enrollment(enrollment.id)
                raise

            self._sessions.append(session)
            self._completed_slots[session.id] = set()
            self._upcoming[session.id] = self._generate_window(session, now)
            self._recommendations = recommendations

            logger.info(
                f"Enrolled user {self.user_id} in program {program.title} "
                f"(session {session.id}, {schedule.workouts_per_week} workouts/week)"
            )
            return session

    def pause(self, session_id: str, reason: PauseReason = PauseReason.OTHER) -> ActiveProgramSession:
        """Pause a session and drop its upcoming workouts until it is resumed."""
        with self._lock:
            index = self._index_of(session_id)
            session = self._sessions[index]
            now = self.clock()

            enrollment = self.progress_store.update_enrollment(
                session.enrollment.model_copy(update={"paused_reason": reason, "paused_at": now})
            )
            updated = session.model_copy(update={
                "enrollment": enrollment,
                "is_paused": True,
                "paused_reason": reason,
                "paused_date": now,
            })

            self._sessions[index] = updated
            self._upcoming[session_id] = []

            logger.info(f"Paused session {session_id} ({reason.value})")
            return updated

    def resume(self, session_id: str) -> ActiveProgramSession:
        """Resume a paused session from today's schedule."""
        with self._lock:
            index = self._index_of(session_id)
            session = self._sessions[index]
            now = self.clock()

            next_date = self.schedule_generator.next_workout_day(
                session.weekly_schedule, now, inclusive=True
            )
            enrollment = self.progress_store.update_enrollment(
                session.enrollment.model_copy(update={
                    "paused_reason": None,
                    "paused_at": None,
                    "next_workout_date": next_date,
                })
            )
            updated = session.model_copy(update={
                "enrollment": enrollment,
                "next_workout_date": next_date,
                "is_paused": False,
                "paused_reason": None,
                "paused_date": None,
            })

            self._sessions[index] = updated
            self._upcoming[session_id] = self._generate_window(updated, now)

            logger.info(f"Resumed session {session_id}, next workout {next_date}")
            return updated

    def complete_program(self, session_id: str) -> CompletedProgramSession:
        """
        Complete a session's program and move it into history.

        Raises:
            TrainingEngineError: SESSION_NOT_FOUND
            StoreError: if the completion or profile could not be persisted
        """
        with self._lock:
            index = self._index_of(session_id)
            session = self._sessions[index]
            now = self.clock()

            enrollment = self.progress_store.mark_enrollment_complete(session.enrollment.id, now)
            final_session = session.model_copy(update={"enrollment": enrollment})
            completed = CompletedProgramSession(
                id=str(uuid.uuid4()),
                original_session=final_session,
                completed_date=now,
                final_metrics=session.progress_metrics,
                achievements=self.calculate_achievements(session, now),
            )

            profile = self.profile_store.after_completion(session.program)
            self.profile_store.save(profile)
            recommendations = self._compute_recommendations(now)

            self._drop_session(index)
            self._history.append(completed)
            self._recommendations = recommendations

            logger.info(f"Completed program {session.program.title} (session {session_id})")
            return completed

    def cancel_program(self, session_id: str) -> None:
        """Abandon a session; its enrollment row is deleted."""
        with self._lock:
            index = self._index_of(session_id)
            session = self._sessions[index]
            now = self.clock()

            self.progress_store.delete_enrollment(session.enrollment.id)
            recommendations = self._compute_recommendations(now)

            self._drop_session(index)
            self._recommendations = recommendations

            logger.info(f"Cancelled program {session.program.title} (session {session_id})")

    # ============== Workout Management ==============

    def record_workout(self, workout: CompletedWorkout, session_id: str) -> ActiveProgramSession:
        """
        Record a completed workout against a session.

        Appends a progress record, updates running metrics and completion,
        attaches advisory adaptations, advances the next workout date and
        regenerates the upcoming window.

        Raises:
            TrainingEngineError: SESSION_NOT_FOUND
            StoreError: if the record or enrollment could not be persisted
        """
        with self._lock:
            index = self._index_of(session_id)
            session = self._sessions[index]
            now = self.clock()
            schedule = session.weekly_schedule

            record = ProgressRecordSchema(
                user_id=self.user_id,
                program_id=session.program_id,
                workout_date=workout.completed_date,
                week_number=workout.week_number,
                workout_number=workout.workout_number,
                weight=workout.weight_used,
                distance=workout.distance_completed,
                duration_seconds=workout.duration_seconds,
                completed=True,
                notes=workout.notes,
                heart_rate_data=workout.heart_rate_data,
                pace_data=workout.pace_data,
            )

            metrics = self.analytics.apply_workout(
                session.progress_metrics, workout, schedule, session.start_date
            )
            completion = max(
                session.enrollment.completion_percentage,
                self.analytics.completion_percentage(
                    metrics.total_workouts, session.program.duration_weeks, schedule.workouts_per_week
                ),
            )
            adaptations = self.adaptation_analyzer.analyze(
                workout, self._target_duration(session, workout), now
            )
            next_date = self.schedule_generator.next_workout_day(
                schedule, workout.completed_date, inclusive=False
            )
            slot = (workout.week_number, workout.workout_number)
            completed_slots = self._completed_slots.get(session_id, set()) | {slot}
            current_week = self._advance_week(session, completed_slots)

            enrollment = self.progress_store.record_progress(
                record,
                session.enrollment.model_copy(update={
                    "current_week": current_week,
                    "current_weight": workout.weight_used,
                    "completion_percentage": completion,
                    "next_workout_date": next_date,
                }),
            )
            updated = session.model_copy(update={
                "enrollment": enrollment,
                "progress_metrics": metrics,
                "adaptations": session.adaptations + adaptations,
                "next_workout_date": next_date,
                "current_phase": self.schedule_generator.determine_phase(
                    current_week, session.program.duration_weeks
                ),
            })

            self._sessions[index] = updated
            self._completed_slots[session_id] = completed_slots
            self._upcoming[session_id] = [] if updated.is_paused else self._generate_window(updated, now)

            logger.info(
                f"Recorded workout for week {workout.week_number}, workout {workout.workout_number} "
                f"(session {session_id}, {completion:.1f}% complete, {len(adaptations)} adaptations)"
            )
            return updated

    def get_next_workout(self, session_id: str) -> Optional[UpcomingWorkout]:
        with self._lock:
            self._index_of(session_id)
            window = self._upcoming.get(session_id, [])
            if not window:
                return None
            return min(window, key=lambda w: (w.scheduled_date, w.workout_number))

    def get_todays_workouts(self) -> List[UpcomingWorkout]:
        today = self.clock().date()
        return [w for w in self.upcoming_workouts if w.scheduled_date == today]

    def get_progress_analytics(self, session_id: str) -> ProgramAnalytics:
        with self._lock:
            session = self._sessions[self._index_of(session_id)]
            records = self._records_for(
                self.progress_store.list_progress_records(self.user_id), session.enrollment
            )
            return self.analytics.build_analytics(session, records, self.clock())

    # ============== Recommendations ==============

    def generate_recommendations(self) -> List[ProgramSchema]:
        with self._lock:
            self._recommendations = self._compute_recommendations(self.clock())
            return list(self._recommendations)

    # ============== Refresh ==============

    def refresh(self, collection: Optional[str] = None) -> None:
        """
        Rebuild sessions, windows and recommendations from the stores.

        Registered as the change-notification callback. Sessions keep their id,
        customization and adaptations across refreshes; everything else is
        recomputed from the enrollment rows and progress records.
        """
        with self._lock:
            now = self.clock()
            programs = {p.id: p for p in self.catalog.list_programs()}
            enrollments = self.progress_store.list_user_enrollments(self.user_id)
            records = self.progress_store.list_progress_records(self.user_id)
            existing = {s.enrollment.id: s for s in self._sessions}

            sessions = []
            for enrollment in enrollments:
                if not enrollment.is_live:
                    continue
                program = programs.get(enrollment.program_id)
                if program is None:
                    logger.warning(
                        f"Enrollment {enrollment.id} references unknown program {enrollment.program_id}"
                    )
                    continue
                if any(s.program_id == program.id for s in sessions):
                    logger.warning(f"Skipping duplicate enrollment {enrollment.id} in program {program.id}")
                    continue
                if len(sessions) >= self.max_active_programs:
                    logger.warning(f"Skipping enrollment {enrollment.id}: active-program limit reached")
                    continue

                previous = existing.get(enrollment.id)
                customization = (
                    previous.customization if previous
                    else self.schedule_generator.default_customization(program)
                )
                session = self._build_session(
                    session_id=previous.id if previous else str(uuid.uuid4()),
                    enrollment=enrollment,
                    program=program,
                    customization=customization,
                    adaptations=previous.adaptations if previous else None,
                )
                session_records = self._records_for(records, enrollment)
                session.progress_metrics = self.analytics.metrics_from_records(
                    session_records, session.weekly_schedule, session.start_date
                )
                sessions.append((session, {(r.week_number, r.workout_number) for r in session_records}))

            recommendations = self.recommendation_engine.generate_recommendations(
                list(programs.values()), enrollments, self.profile_store.profile, now
            )

            self._sessions = [s for s, _ in sessions]
            self._completed_slots = {s.id: slots for s, slots in sessions}
            self._upcoming = {
                s.id: [] if s.is_paused else self._generate_window(s, now)
                for s in self._sessions
            }
            self._recommendations = recommendations

            logger.info(
                f"Refreshed engine state ({collection or 'full'}): "
                f"{len(self._sessions)} active sessions, {len(recommendations)} recommendations"
            )

    # ============== Achievements ==============

    def calculate_achievements(self, session: ActiveProgramSession, now: datetime) -> List[ProgramAchievement]:
        metrics = session.progress_metrics
        achievements = [
            ProgramAchievement(
                type=AchievementType.PROGRAM_COMPLETION,
                title="Program Graduate",
                description=f"Completed {session.program.title}",
                earned_date=now,
                metadata={"program_id": session.program_id},
            )
        ]

        if metrics.consistency_score >= self.CONSISTENCY_ACHIEVEMENT_THRESHOLD:
            achievements.append(ProgramAchievement(
                type=AchievementType.CONSISTENCY,
                title="Consistency Champion",
                description="Maintained 90%+ workout consistency",
                earned_date=now,
                metadata={"consistency": f"{metrics.consistency_score:.2f}"},
            ))

        if metrics.total_distance >= self.ENDURANCE_MILESTONE_MILES:
            achievements.append(ProgramAchievement(
                type=AchievementType.ENDURANCE_MILESTONE,
                title="Endurance Milestone",
                description=f"Rucked {metrics.total_distance:.1f} miles in one program",
                earned_date=now,
                metadata={"total_distance": f"{metrics.total_distance:.1f}"},
            ))

        return achievements

    # ============== Private Helpers ==============

    def _validate_enrollment(self, program: ProgramSchema, starting_weight: float) -> None:
        if not (self.min_starting_weight <= starting_weight <= self.max_starting_weight):
            raise TrainingEngineError(EngineErrorKind.INVALID_WEIGHT, weight=starting_weight)

        if any(s.program_id == program.id for s in self._sessions):
            raise TrainingEngineError(EngineErrorKind.ALREADY_ENROLLED, program_id=program.id)

        if len(self._sessions) >= self.max_active_programs:
            raise TrainingEngineError(
                EngineErrorKind.TOO_MANY_ACTIVE_PROGRAMS, limit=self.max_active_programs
            )

    def _index_of(self, session_id: str) -> int:
        for index, session in enumerate(self._sessions):
            if session.id == session_id:
                return index
        raise TrainingEngineError(EngineErrorKind.SESSION_NOT_FOUND, session_id=session_id)

    def _drop_session(self, index: int) -> None:
        session = self._sessions.pop(index)
        self._upcoming.pop(session.id, None)
        self._completed_slots.pop(session.id, None)

    def _build_session(
        self,
        session_id: str,
        enrollment: EnrollmentSchema,
        program: ProgramSchema,
        customization: Customization,
        adaptations=None
    ) -> ActiveProgramSession:
        return ActiveProgramSession(
            id=session_id,
            enrollment=enrollment,
            program=program,
            customization=customization,
            weekly_schedule=self.schedule_generator.weekly_schedule(customization),
            start_date=enrollment.start_date,
            current_phase=self.schedule_generator.determine_phase(
                enrollment.current_week, program.duration_weeks
            ),
            next_workout_date=enrollment.next_workout_date,
            progress_metrics=ProgressMetrics(),
            adaptations=list(adaptations or []),
            is_paused=enrollment.paused_at is not None,
            paused_reason=enrollment.paused_reason,
            paused_date=enrollment.paused_at,
        )

    def _generate_window(self, session: ActiveProgramSession, now: datetime) -> List[UpcomingWorkout]:
        return self.schedule_generator.generate(
            session.id,
            session.enrollment,
            session.program,
            session.customization,
            now,
            completed=self._completed_slots.get(session.id, set()),
        )

    def _target_duration(self, session: ActiveProgramSession, workout: CompletedWorkout) -> Optional[float]:
        """Target reported with the workout, else the matching window entry's target."""
        if workout.target_duration_seconds is not None:
            return workout.target_duration_seconds
        for upcoming in self._upcoming.get(session.id, []):
            if (upcoming.week_number, upcoming.workout_number) == (workout.week_number, workout.workout_number):
                return upcoming.target_duration_seconds
        return None

    def _advance_week(self, session: ActiveProgramSession, completed_slots: Set[Slot]) -> int:
        """First program week with a workout slot still open, capped at the final week."""
        week = session.enrollment.current_week
        slots_per_week = range(1, session.weekly_schedule.workouts_per_week + 1)
        while week < session.program.duration_weeks and all(
            (week, number) in completed_slots for number in slots_per_week
        ):
            week += 1
        return week

    def _records_for(
        self,
        records: List[ProgressRecordSchema],
        enrollment: EnrollmentSchema
    ) -> List[ProgressRecordSchema]:
        """Records of this enrollment: same program, on or after its start day."""
        start_day = enrollment.start_date.date()
        return [
            r for r in records
            if r.program_id == enrollment.program_id and r.workout_date.date() >= start_day
        ]

    def _compute_recommendations(self, now: datetime) -> List[ProgramSchema]:
        return self.recommendation_engine.generate_recommendations(
            self.catalog.list_programs(),
            self.progress_store.list_user_enrollments(self.user_id),
            self.profile_store.profile,
            now,
        )
