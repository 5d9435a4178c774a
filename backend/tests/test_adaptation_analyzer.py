"""Adaptation Analyzer Tests"""
from datetime import datetime

import pytest

from ruckplan.schemas.session import AdaptationType, CompletedWorkout
from ruckplan.services.adaptation_analyzer import AdaptationAnalyzer


@pytest.fixture
def analyzer():
    return AdaptationAnalyzer()


def make_workout(duration_seconds, target_duration_seconds=None):
    return CompletedWorkout(
        completed_date=datetime(2024, 3, 4, 9, 0),
        week_number=1,
        workout_number=1,
        weight_used=40,
        distance_completed=2.0,
        duration_seconds=duration_seconds,
        target_duration_seconds=target_duration_seconds,
    )


class TestAnalyze:
    def test_fast_workout_suggests_more_intensity(self, analyzer):
        adaptations = analyzer.analyze(make_workout(2800), target_duration_seconds=3600)

        assert len(adaptations) == 1
        assert adaptations[0].type == AdaptationType.INCREASE_INTENSITY
        assert adaptations[0].confidence == 0.8
        assert "2.5 lbs" in adaptations[0].suggested_change

    def test_slow_workout_suggests_less_intensity(self, analyzer):
        adaptations = analyzer.analyze(make_workout(4800), target_duration_seconds=3600)

        assert len(adaptations) == 1
        assert adaptations[0].type == AdaptationType.DECREASE_INTENSITY
        assert adaptations[0].confidence == 0.7

    @pytest.mark.parametrize("duration", [2880, 3600, 4680])
    def test_within_band_gives_nothing(self, analyzer, duration):
        # Exactly 80% and 130% of target are not outside the band
        assert analyzer.analyze(make_workout(duration), target_duration_seconds=3600) == []

    def test_missing_target_gives_nothing(self, analyzer):
        assert analyzer.analyze(make_workout(100)) == []

    def test_non_positive_target_gives_nothing(self, analyzer):
        assert analyzer.analyze(make_workout(100), target_duration_seconds=0) == []

    def test_target_reported_with_workout_is_used(self, analyzer):
        adaptations = analyzer.analyze(make_workout(2000, target_duration_seconds=3600))

        assert [a.type for a in adaptations] == [AdaptationType.INCREASE_INTENSITY]

    def test_created_at_defaults_to_completion_time(self, analyzer):
        workout = make_workout(2000, target_duration_seconds=3600)

        assert analyzer.analyze(workout)[0].created_at == workout.completed_date
