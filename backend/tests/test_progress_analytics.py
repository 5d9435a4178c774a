"""Progress analytics tests."""
from datetime import datetime, timedelta

import pytest

from ruckplan.schemas.program import PaceData, ProgressRecordSchema
from ruckplan.schemas.session import CompletedWorkout, Customization, ProgressMetrics
from ruckplan.services.progress_analytics import ProgressAnalyticsService
from ruckplan.services.schedule_generator import ScheduleGenerator
from tests.conftest import START


@pytest.fixture
def analytics():
    return ProgressAnalyticsService()


@pytest.fixture
def schedule():
    # Monday, Tuesday, Wednesday
    return ScheduleGenerator().weekly_schedule(Customization(workouts_per_week=3))


def make_record(days, weight=40.0, pace=None):
    return ProgressRecordSchema(
        user_id="test-user",
        program_id="p",
        workout_date=START + timedelta(days=days, hours=1),
        week_number=1,
        workout_number=1,
        weight=weight,
        distance=2.0,
        duration_seconds=1800,
        pace_data=PaceData(average_minutes_per_mile=pace) if pace else None,
    )


class TestConsistency:
    def test_no_workouts_is_zero(self, analytics, schedule):
        assert analytics.consistency(0, schedule, START, None) == 0.0

    def test_expected_counts_only_workout_days(self, analytics, schedule):
        # Monday through the following Monday
        assert analytics.expected_workouts(schedule, START, START + timedelta(days=7)) == 4

    def test_consistency_grows_with_completed_workouts(self, analytics, schedule):
        last = START + timedelta(days=7)
        scores = [analytics.consistency(n, schedule, START, last) for n in range(1, 6)]

        assert scores == sorted(scores)
        assert scores[-1] == 1.0

    def test_apply_workout_keeps_running_average(self, analytics, schedule):
        workout = CompletedWorkout(
            completed_date=START + timedelta(hours=1),
            week_number=1,
            workout_number=1,
            weight_used=50,
            distance_completed=2.5,
            duration_seconds=2000,
        )
        metrics = ProgressMetrics(total_workouts=1, total_distance=2.0, total_time=1800, average_weight=40)

        updated = analytics.apply_workout(metrics, workout, schedule, START)

        assert updated.total_workouts == 2
        assert updated.total_distance == 4.5
        assert updated.total_time == 3800
        assert updated.average_weight == 45


class TestSeries:
    def test_metrics_from_records(self, analytics, schedule):
        metrics = analytics.metrics_from_records(
            [make_record(0, 40), make_record(1, 45)], schedule, START
        )

        assert metrics.total_workouts == 2
        assert metrics.average_weight == 42.5
        assert metrics.consistency_score == 1.0

    def test_pace_only_from_records_with_pace(self, analytics):
        points = analytics.pace_improvement([make_record(2, pace=14.5), make_record(0), make_record(1, pace=15.5)])

        assert [p.average_pace for p in points] == [15.5, 14.5]

    def test_completion_percentage_is_capped(self, analytics):
        assert analytics.completion_percentage(40, 8, 4) == 100.0
        assert analytics.completion_percentage(16, 8, 4) == 50.0
