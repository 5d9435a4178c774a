from datetime import date, datetime, timedelta
from typing import List, Optional, Set, Tuple

from ruckplan.models.program import Difficulty
from ruckplan.schemas.program import EnrollmentSchema, ProgramSchema
from ruckplan.schemas.session import (
    Customization,
    ProgramPhase,
    UpcomingWorkout,
    WeekDay,
    WeeklySchedule,
    WorkoutType,
)


class ScheduleGenerator:
    """Generate the rolling window of upcoming workouts for a session"""

    WINDOW_WEEKS = 2
    BASE_DISTANCE_MILES = 2.0
    WEEKLY_DISTANCE_GROWTH = 0.1  # +10% per program week
    EXPECTED_PACE_MIN_PER_MILE = 15.0

    # Phase boundaries as fraction of program completed
    PHASE_THRESHOLDS = [
        (0.3, ProgramPhase.FOUNDATION),
        (0.7, ProgramPhase.BUILDING),
        (0.9, ProgramPhase.PEAK),
    ]

    def __init__(self, window_weeks: int = WINDOW_WEEKS):
        self.window_weeks = window_weeks

    def default_customization(self, program: ProgramSchema) -> Customization:
        """Program defaults: 4 days/week from advanced upward, else 3; Sunday off"""
        return Customization(
            workouts_per_week=4 if program.difficulty >= Difficulty.ADVANCED else 3,
            rest_day_preferences=[WeekDay.SUNDAY],
        )

    def weekly_schedule(self, customization: Customization) -> WeeklySchedule:
        """
        Derive workout days: the first N weekdays, Monday first, not in the rest set.

        N is capped by the number of non-rest days, so workouts_per_week on the
        resulting schedule can be lower than requested.
        """
        rest_days = list(dict.fromkeys(customization.rest_day_preferences))
        available = [day for day in WeekDay if day not in rest_days]
        workout_days = available[:customization.workouts_per_week]

        return WeeklySchedule(
            workout_days=workout_days,
            rest_days=rest_days,
            workouts_per_week=len(workout_days),
        )

    def determine_phase(self, current_week: int, duration_weeks: int) -> ProgramPhase:
        progress = current_week / duration_weeks
        for upper_bound, phase in self.PHASE_THRESHOLDS:
            if progress < upper_bound:
                return phase
        return ProgramPhase.TAPER

    def next_workout_day(
        self,
        schedule: WeeklySchedule,
        after: datetime,
        inclusive: bool = False
    ) -> Optional[datetime]:
        """
        First scheduled workout day on (inclusive) or strictly after a moment.

        Returns midnight of that day, or None if the schedule has no workout days.
        """
        if not schedule.workout_days:
            return None

        day = after.date() if inclusive else after.date() + timedelta(days=1)
        while WeekDay.from_date(day) not in schedule.workout_days:
            day += timedelta(days=1)

        return datetime.combine(day, datetime.min.time())

    def generate(
        self,
        session_id: str,
        enrollment: EnrollmentSchema,
        program: ProgramSchema,
        customization: Customization,
        now: datetime,
        completed: Optional[Set[Tuple[int, int]]] = None
    ) -> List[UpcomingWorkout]:
        """
        Generate upcoming workouts for the window.

        The window covers program weeks current_week through
        current_week + window_weeks - 1, every workout slot of each week.
        Slots are laid onto consecutive workout days starting at the anchor,
        which is the enrollment's next workout date, or now when none is set.
        On a Monday anchor this is Monday + 7k + weekday index for week offset
        k; a mid-week anchor shifts the remaining slots forward rather than
        dropping them.

        Args:
            session_id: Owning session
            enrollment: Enrollment row (current week, starting weight, next date)
            program: Catalog program
            customization: Workout days and rest days
            now: Reference time used when no next workout date is set
            completed: (week, workout number) slots already done; left out

        Returns:
            List of UpcomingWorkout ordered by scheduled date
        """
        schedule = self.weekly_schedule(customization)
        if not schedule.workout_days:
            return []

        completed = completed or set()
        last_week = min(enrollment.current_week + self.window_weeks - 1, program.duration_weeks)
        slots = [
            (week, workout_number)
            for week in range(enrollment.current_week, last_week + 1)
            for workout_number in range(1, schedule.workouts_per_week + 1)
            if (week, workout_number) not in completed
        ]

        day = (enrollment.next_workout_date or now).date()
        workouts = []
        for week, workout_number in slots:
            while WeekDay.from_date(day) not in schedule.workout_days:
                day += timedelta(days=1)

            workouts.append(self._create_workout(
                session_id=session_id,
                enrollment=enrollment,
                program=program,
                week=week,
                workout_number=workout_number,
                scheduled_date=day,
            ))
            day += timedelta(days=1)

        return workouts

    def determine_workout_type(self, week: int, workout_number: int, duration_weeks: int) -> WorkoutType:
        if week <= 2:
            return WorkoutType.FOUNDATION
        if week >= duration_weeks - 1:
            return WorkoutType.TEST
        return WorkoutType.ENDURANCE if workout_number % 2 == 0 else WorkoutType.STRENGTH

    def target_weight(self, enrollment: EnrollmentSchema, program: ProgramSchema, week: int) -> float:
        return enrollment.starting_weight + program.difficulty.weight_increment * (week - 1)

    def target_distance(self, week: int) -> float:
        return self.BASE_DISTANCE_MILES * (1 + self.WEEKLY_DISTANCE_GROWTH * (week - 1))

    def target_duration_seconds(self, distance: float) -> float:
        return round(distance * self.EXPECTED_PACE_MIN_PER_MILE * 60, 1)

    def _create_workout(
        self,
        session_id: str,
        enrollment: EnrollmentSchema,
        program: ProgramSchema,
        week: int,
        workout_number: int,
        scheduled_date: date
    ) -> UpcomingWorkout:
        """Create an UpcomingWorkout with targets and instructions"""
        weight = self.target_weight(enrollment, program, week)
        distance = self.target_distance(week)
        workout_type = self.determine_workout_type(week, workout_number, program.duration_weeks)

        instructions = "\n".join([
            f"Week {week}, Workout {workout_number}: {workout_type.value.title()}",
            "",
            f"• Ruck Weight: {int(weight)} lbs",
            f"• Target Distance: {distance:.1f} miles",
            "• Maintain steady pace throughout",
            "• Focus on form and breathing",
            "",
            "Remember to warm up before and cool down after!",
        ])

        return UpcomingWorkout(
            id=f"{session_id}:w{week}:{workout_number}",
            session_id=session_id,
            week_number=week,
            workout_number=workout_number,
            scheduled_date=scheduled_date,
            workout_type=workout_type,
            target_weight=weight,
            target_distance=distance,
            target_duration_seconds=self.target_duration_seconds(distance),
            instructions=instructions,
        )
