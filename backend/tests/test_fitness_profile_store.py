"""Fitness profile cache tests."""
import pytest

from ruckplan.models.program import Category, Difficulty
from ruckplan.schemas.profile import UserFitnessProfile
from ruckplan.schemas.program import ProgramSchema
from ruckplan.services.errors import StoreError
from ruckplan.services.fitness_profile_store import FitnessProfileStore
from tests.conftest import USER_ID


def make_program(difficulty, category=Category.MILITARY):
    return ProgramSchema(
        id=f"{difficulty.value}-{category.value}",
        title="Program",
        difficulty=difficulty,
        category=category,
        duration_weeks=8,
    )


class FailingBackend:
    def load_profile(self, user_id):
        return None

    def save_profile(self, user_id, profile):
        raise StoreError("unavailable")


class TestFitnessProfileStore:
    def test_require_falls_back_to_default(self, profile_store):
        assert profile_store.load() is None
        assert profile_store.require() == UserFitnessProfile.default_profile()

    def test_after_enrollment_raises_aspiration(self, profile_store):
        profile = profile_store.after_enrollment(make_program(Difficulty.ELITE))

        assert profile.aspirational_level == Difficulty.ELITE
        assert profile.enrollment_history == ["elite-military"]
        # Nothing is cached until saved
        assert profile_store.profile is None

    def test_easier_program_keeps_aspiration(self, profile_store):
        profile_store.save(UserFitnessProfile(current_level=Difficulty.ADVANCED))

        profile = profile_store.after_enrollment(make_program(Difficulty.BEGINNER))

        assert profile.aspirational_level is None

    def test_after_completion_levels_up(self, profile_store, profile_backend):
        profile = profile_store.after_completion(make_program(Difficulty.INTERMEDIATE, Category.ADVENTURE))
        profile_store.save(profile)

        stored = profile_backend.load_profile(USER_ID)
        assert stored.current_level == Difficulty.INTERMEDIATE
        assert stored.completed_categories == [Category.ADVENTURE]
        assert stored.completed_programs == ["intermediate-adventure"]

    def test_completion_below_level_keeps_level(self, profile_store):
        profile_store.save(UserFitnessProfile(current_level=Difficulty.ADVANCED))

        profile = profile_store.after_completion(make_program(Difficulty.BEGINNER))

        assert profile.current_level == Difficulty.ADVANCED

    def test_category_counted_once(self, profile_store):
        profile_store.save(profile_store.after_completion(make_program(Difficulty.BEGINNER)))
        profile = profile_store.after_completion(make_program(Difficulty.INTERMEDIATE))

        assert profile.completed_categories == [Category.MILITARY]

    def test_failed_save_keeps_cached_profile(self):
        store = FitnessProfileStore(FailingBackend(), USER_ID)

        with pytest.raises(StoreError):
            store.save(UserFitnessProfile(current_level=Difficulty.ELITE))

        assert store.profile is None
