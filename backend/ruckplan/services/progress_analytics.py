"""Per-session progress metrics and analytics.

This service derives everything from the append-only progress records:
- Running totals (workouts, distance, time, average weight)
- Consistency score against the weekly schedule
- Weight and pace progression series
- Projected completion date
"""

from datetime import datetime, timedelta
from typing import List, Optional

from ruckplan.schemas.analytics import (
    PaceProgressPoint,
    ProgramAnalytics,
    WeightProgressPoint,
)
from ruckplan.schemas.program import ProgressRecordSchema
from ruckplan.schemas.session import (
    ActiveProgramSession,
    CompletedWorkout,
    ProgressMetrics,
    WeekDay,
    WeeklySchedule,
)


class ProgressAnalyticsService:
    """Calculate session progress metrics from completed workouts."""

    def expected_workouts(self, schedule: WeeklySchedule, start: datetime, until: datetime) -> int:
        """Scheduled workout-day slots from start through until, both days inclusive."""
        day = start.date()
        last = until.date()
        expected = 0
        while day <= last:
            if WeekDay.from_date(day) in schedule.workout_days:
                expected += 1
            day += timedelta(days=1)
        return expected

    def consistency(
        self,
        completed: int,
        schedule: WeeklySchedule,
        start: datetime,
        last_workout: Optional[datetime]
    ) -> float:
        """
        Completed workouts over scheduled slots elapsed up to the latest workout.

        Never decreases when another workout is completed on a day already
        covered, and is 1.0 for a user who has not missed a slot.
        """
        if completed <= 0 or last_workout is None:
            return 0.0

        expected = self.expected_workouts(schedule, start, last_workout)
        return round(completed / max(completed, expected), 3)

    def apply_workout(
        self,
        metrics: ProgressMetrics,
        workout: CompletedWorkout,
        schedule: WeeklySchedule,
        start: datetime
    ) -> ProgressMetrics:
        """Return metrics updated with one more completed workout."""
        total = metrics.total_workouts + 1
        last_date = workout.completed_date
        if metrics.last_workout_date and metrics.last_workout_date > last_date:
            last_date = metrics.last_workout_date

        return ProgressMetrics(
            total_workouts=total,
            total_distance=metrics.total_distance + workout.distance_completed,
            total_time=metrics.total_time + workout.duration_seconds,
            average_weight=(metrics.average_weight * (total - 1) + workout.weight_used) / total,
            last_workout_date=last_date,
            consistency_score=self.consistency(total, schedule, start, last_date),
        )

    def metrics_from_records(
        self,
        records: List[ProgressRecordSchema],
        schedule: WeeklySchedule,
        start: datetime
    ) -> ProgressMetrics:
        """Rebuild running totals from scratch."""
        completed = [r for r in records if r.completed]
        if not completed:
            return ProgressMetrics()

        last_date = max(r.workout_date for r in completed)
        return ProgressMetrics(
            total_workouts=len(completed),
            total_distance=sum(r.distance for r in completed),
            total_time=sum(r.duration_seconds for r in completed),
            average_weight=sum(r.weight for r in completed) / len(completed),
            last_workout_date=last_date,
            consistency_score=self.consistency(len(completed), schedule, start, last_date),
        )

    def completion_percentage(self, completed: int, duration_weeks: int, workouts_per_week: int) -> float:
        total = duration_weeks * workouts_per_week
        if total <= 0:
            return 0.0
        return min(100.0, completed / total * 100)

    def weight_progression(self, records: List[ProgressRecordSchema]) -> List[WeightProgressPoint]:
        return [
            WeightProgressPoint(date=r.workout_date, weight=r.weight)
            for r in sorted(records, key=lambda r: r.workout_date)
        ]

    def pace_improvement(self, records: List[ProgressRecordSchema]) -> List[PaceProgressPoint]:
        points = [
            PaceProgressPoint(date=r.workout_date, average_pace=r.pace_data.average_minutes_per_mile)
            for r in records
            if r.pace_data is not None
        ]
        return sorted(points, key=lambda p: p.date)

    def projected_completion(
        self,
        session: ActiveProgramSession,
        consistency: float,
        now: datetime
    ) -> Optional[datetime]:
        """Remaining weeks stretched by the consistency rate."""
        if consistency <= 0:
            return None

        remaining_weeks = session.program.duration_weeks - session.enrollment.current_week
        return now + timedelta(weeks=remaining_weeks / consistency)

    def build_analytics(
        self,
        session: ActiveProgramSession,
        records: List[ProgressRecordSchema],
        now: datetime
    ) -> ProgramAnalytics:
        """Assemble analytics for a session from its progress records."""
        metrics = self.metrics_from_records(records, session.weekly_schedule, session.start_date)
        consistency = metrics.consistency_score

        return ProgramAnalytics(
            session=session,
            progress_entries=records,
            workout_consistency=consistency,
            weight_progression=self.weight_progression(records),
            pace_improvement=self.pace_improvement(records),
            projected_completion=self.projected_completion(session, consistency, now),
        )
