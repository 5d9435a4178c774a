"""Program recommendation scoring.

Scores catalog programs against the user's fitness profile:
- Difficulty fit against the user's current level
- Category and duration preferences
- Goal alignment (additive across goals)
- Activity-pattern fit from workouts per week
- Novelty bonus for categories the user has not completed
"""

from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from ruckplan.models.program import Category, Difficulty
from ruckplan.schemas.profile import FitnessGoal, UserFitnessProfile
from ruckplan.schemas.program import EnrollmentSchema, ProgramSchema


class RecommendationEngine:
    """Rank catalog programs for a user."""

    CATEGORY_PREFERENCE_BONUS = 15.0
    NOVELTY_BONUS = 5.0
    ACTIVITY_PATTERN_BONUS = 5.0

    def __init__(
        self,
        cooldown_days: int = 30,
        limit: int = 5,
        featured_limit: int = 3
    ):
        self.cooldown = timedelta(days=cooldown_days)
        self.limit = limit
        self.featured_limit = featured_limit

    def score(self, program: ProgramSchema, profile: UserFitnessProfile) -> float:
        """
        Score a program for a profile. Higher is better.

        Args:
            program: Catalog program
            profile: User fitness profile

        Returns:
            Sum of the difficulty, category, duration, goal, activity and novelty components
        """
        return sum(self.score_breakdown(program, profile).values())

    def score_breakdown(self, program: ProgramSchema, profile: UserFitnessProfile) -> Dict[str, float]:
        """Individual score components, keyed by name."""
        preferences = profile.preferences

        gap = abs(program.difficulty.level_index - profile.current_level.level_index)
        difficulty_fit = max(0.0, 10.0 - 2.0 * gap)

        category_preference = (
            self.CATEGORY_PREFERENCE_BONUS
            if program.category in preferences.preferred_categories else 0.0
        )

        duration_fit = max(
            (max(0.0, 10.0 - abs(program.duration_weeks - preferred))
             for preferred in preferences.preferred_duration_weeks),
            default=0.0,
        )

        novelty = self.NOVELTY_BONUS if program.category not in profile.completed_categories else 0.0

        return {
            "difficulty_fit": difficulty_fit,
            "category_preference": category_preference,
            "duration_fit": duration_fit,
            "goal_alignment": self.goal_alignment(program, profile.goals),
            "activity_pattern": self.activity_pattern_alignment(program, profile),
            "novelty": novelty,
        }

    def goal_alignment(self, program: ProgramSchema, goals: List[FitnessGoal]) -> float:
        """Additive contribution of every goal the user holds."""
        alignment = 0.0

        for goal in goals:
            if goal == FitnessGoal.WEIGHT_LOSS:
                if program.category == Category.FITNESS or program.difficulty >= Difficulty.INTERMEDIATE:
                    alignment += 8
            elif goal == FitnessGoal.STRENGTH_BUILDING:
                if program.category == Category.MILITARY or program.difficulty >= Difficulty.ADVANCED:
                    alignment += 10
            elif goal == FitnessGoal.ENDURANCE_IMPROVEMENT:
                if program.duration_weeks >= 8:
                    alignment += 7
            elif goal == FitnessGoal.MILITARY_PREPARATION:
                if program.category == Category.MILITARY:
                    alignment += 15
            elif goal == FitnessGoal.GENERAL_FITNESS:
                # All programs help with general fitness
                alignment += 5

        return alignment

    def activity_pattern_alignment(self, program: ProgramSchema, profile: UserFitnessProfile) -> float:
        alignment = 0.0

        if profile.average_workouts_per_week >= 4 and program.difficulty >= Difficulty.INTERMEDIATE:
            alignment += self.ACTIVITY_PATTERN_BONUS

        if profile.average_workouts_per_week <= 3 and program.difficulty <= Difficulty.INTERMEDIATE:
            alignment += self.ACTIVITY_PATTERN_BONUS

        return alignment

    def generate_recommendations(
        self,
        catalog: List[ProgramSchema],
        enrollments: List[EnrollmentSchema],
        profile: Optional[UserFitnessProfile],
        now: datetime
    ) -> List[ProgramSchema]:
        """
        Rank catalog programs for the user.

        Without a profile, returns up to featured_limit featured programs
        unscored, in catalog order. Otherwise excludes programs with a live
        enrollment and programs completed within the cooldown, then returns the
        top `limit` by score. Ties keep catalog order.
        """
        if profile is None:
            return [p for p in catalog if p.is_featured][:self.featured_limit]

        return [program for program, _ in self.rank(catalog, enrollments, profile, now)[:self.limit]]

    def rank(
        self,
        catalog: List[ProgramSchema],
        enrollments: List[EnrollmentSchema],
        profile: UserFitnessProfile,
        now: datetime
    ) -> List[Tuple[ProgramSchema, float]]:
        """Score every eligible program, best first."""
        active_ids = {e.program_id for e in enrollments if e.is_live}
        cooling_down = {
            e.program_id for e in enrollments
            if e.completed_at is not None and now - e.completed_at < self.cooldown
        }

        scored = [
            (program, self.score(program, profile))
            for program in catalog
            if program.id not in active_ids and program.id not in cooling_down
        ]

        # sorted() is stable, so equal scores keep catalog order
        return sorted(scored, key=lambda item: item[1], reverse=True)
