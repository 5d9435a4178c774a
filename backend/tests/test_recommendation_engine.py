"""
Recommendation Engine Tests

Scoring components, exclusion rules, ordering and the featured fallback.
"""
from datetime import datetime, timedelta

import pytest

from ruckplan.models.program import Category, Difficulty
from ruckplan.schemas.profile import FitnessGoal, ProgramPreferences, UserFitnessProfile
from ruckplan.schemas.program import EnrollmentSchema, ProgramSchema
from ruckplan.services.recommendation_engine import RecommendationEngine

NOW = datetime(2024, 3, 4, 8, 0)


@pytest.fixture
def engine():
    return RecommendationEngine()


def make_program(program_id, category=Category.FITNESS, difficulty=Difficulty.BEGINNER,
                 duration_weeks=8, is_featured=False):
    return ProgramSchema(
        id=program_id,
        title=program_id.title(),
        difficulty=difficulty,
        category=category,
        duration_weeks=duration_weeks,
        is_featured=is_featured,
    )


def make_enrollment(program_id, is_active=True, completed_at=None):
    return EnrollmentSchema(
        id=f"enr-{program_id}",
        user_id="test-user",
        program_id=program_id,
        start_date=NOW - timedelta(days=60),
        starting_weight=30,
        current_weight=30,
        target_weight=50,
        is_active=is_active,
        completed_at=completed_at,
    )


class TestScore:
    def test_military_goal_adds_fifteen(self, engine):
        profile = UserFitnessProfile(goals=[FitnessGoal.MILITARY_PREPARATION])
        military = make_program("military", category=Category.MILITARY)
        fitness = make_program("fitness", category=Category.FITNESS)

        assert engine.score_breakdown(military, profile)["goal_alignment"] == 15
        assert engine.score_breakdown(fitness, profile)["goal_alignment"] == 0
        assert engine.score(military, profile) - engine.score(fitness, profile) == 15

        ranked = engine.generate_recommendations([fitness, military], [], profile, NOW)
        assert [p.id for p in ranked] == ["military", "fitness"]

    def test_goal_contributions_are_additive(self, engine):
        profile = UserFitnessProfile(goals=[
            FitnessGoal.MILITARY_PREPARATION,
            FitnessGoal.STRENGTH_BUILDING,
            FitnessGoal.GENERAL_FITNESS,
        ])
        program = make_program("m", category=Category.MILITARY)

        assert engine.goal_alignment(program, profile.goals) == 15 + 10 + 5

    def test_difficulty_fit_drops_with_level_gap(self, engine):
        profile = UserFitnessProfile(current_level=Difficulty.BEGINNER)

        same = engine.score_breakdown(make_program("a", difficulty=Difficulty.BEGINNER), profile)
        far = engine.score_breakdown(make_program("b", difficulty=Difficulty.ELITE), profile)

        assert same["difficulty_fit"] == 10
        assert far["difficulty_fit"] == 4

    def test_duration_fit_uses_closest_preference(self, engine):
        profile = UserFitnessProfile(preferences=ProgramPreferences(preferred_duration_weeks=[4, 12]))

        breakdown = engine.score_breakdown(make_program("a", duration_weeks=10), profile)

        assert breakdown["duration_fit"] == 8

    def test_category_preference_and_novelty(self, engine):
        profile = UserFitnessProfile(
            preferences=ProgramPreferences(preferred_categories=[Category.ADVENTURE]),
            completed_categories=[Category.FITNESS],
        )

        adventure = engine.score_breakdown(make_program("a", category=Category.ADVENTURE), profile)
        fitness = engine.score_breakdown(make_program("f", category=Category.FITNESS), profile)

        assert adventure["category_preference"] == 15
        assert adventure["novelty"] == 5
        assert fitness["category_preference"] == 0
        assert fitness["novelty"] == 0

    def test_activity_pattern(self, engine):
        frequent = UserFitnessProfile(average_workouts_per_week=5)
        occasional = UserFitnessProfile(average_workouts_per_week=2)
        advanced = make_program("adv", difficulty=Difficulty.ADVANCED)
        beginner = make_program("beg", difficulty=Difficulty.BEGINNER)

        assert engine.activity_pattern_alignment(advanced, frequent) == 5
        assert engine.activity_pattern_alignment(beginner, frequent) == 0
        assert engine.activity_pattern_alignment(beginner, occasional) == 5
        assert engine.activity_pattern_alignment(advanced, occasional) == 0


class TestGenerateRecommendations:
    def test_without_profile_returns_featured(self, engine):
        catalog = [make_program(f"p{i}", is_featured=(i % 2 == 0)) for i in range(10)]

        result = engine.generate_recommendations(catalog, [], None, NOW)

        assert [p.id for p in result] == ["p0", "p2", "p4"]

    def test_active_enrollments_are_excluded(self, engine):
        catalog = [make_program("a"), make_program("b")]

        result = engine.generate_recommendations(
            catalog, [make_enrollment("a")], UserFitnessProfile(), NOW
        )

        assert [p.id for p in result] == ["b"]

    def test_recent_completion_is_excluded_until_cooldown_ends(self, engine):
        profile = UserFitnessProfile(goals=[FitnessGoal.MILITARY_PREPARATION])
        catalog = [make_program("fit"), make_program("mil", category=Category.MILITARY)]
        finished = make_enrollment("mil", is_active=False, completed_at=NOW - timedelta(days=10))

        soon = engine.generate_recommendations(catalog, [finished], profile, NOW)
        later = engine.generate_recommendations(catalog, [finished], profile, NOW + timedelta(days=21))

        assert [p.id for p in soon] == ["fit"]
        assert [p.id for p in later] == ["mil", "fit"]

    def test_top_five_with_stable_ties(self, engine):
        catalog = [make_program(f"p{i}") for i in range(8)]

        result = engine.generate_recommendations(catalog, [], UserFitnessProfile(), NOW)

        assert [p.id for p in result] == ["p0", "p1", "p2", "p3", "p4"]
