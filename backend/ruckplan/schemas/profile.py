"""Pydantic schemas for the user's fitness profile."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from ruckplan.models.program import Category, Difficulty
from ruckplan.schemas.session import Equipment


class FitnessGoal(str, Enum):
    WEIGHT_LOSS = "weight_loss"
    STRENGTH_BUILDING = "strength_building"
    ENDURANCE_IMPROVEMENT = "endurance_improvement"
    MILITARY_PREPARATION = "military_preparation"
    GENERAL_FITNESS = "general_fitness"


class TimeOfDay(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"


class InjuryType(str, Enum):
    ACUTE = "acute"
    OVERUSE = "overuse"
    CHRONIC = "chronic"


class InjurySeverity(str, Enum):
    MINOR = "minor"
    MODERATE = "moderate"
    SEVERE = "severe"


class BodyArea(str, Enum):
    BACK = "back"
    SHOULDERS = "shoulders"
    KNEES = "knees"
    ANKLES = "ankles"
    FEET = "feet"
    HIPS = "hips"


class InjuryRecord(BaseModel):
    type: InjuryType
    date: datetime
    severity: InjurySeverity
    affected_areas: List[BodyArea] = Field(default_factory=list)
    recovery_time_seconds: Optional[float] = None


class ProgramPreferences(BaseModel):
    """Catalog preferences used by recommendation scoring."""

    preferred_categories: List[Category] = Field(default_factory=list)
    preferred_duration_weeks: List[int] = Field(default_factory=lambda: [8, 12, 16])


class UserFitnessProfile(BaseModel):
    """Durable summary of the user's level, goals and program history."""

    current_level: Difficulty = Difficulty.BEGINNER
    aspirational_level: Optional[Difficulty] = None
    goals: List[FitnessGoal] = Field(default_factory=lambda: [FitnessGoal.GENERAL_FITNESS])
    average_workouts_per_week: int = Field(3, ge=0)
    completed_programs: List[str] = Field(default_factory=list)
    completed_categories: List[Category] = Field(default_factory=list)
    enrollment_history: List[str] = Field(default_factory=list)
    preferred_workout_times: List[TimeOfDay] = Field(default_factory=lambda: [TimeOfDay.MORNING])
    injury_history: List[InjuryRecord] = Field(default_factory=list)
    equipment_access: List[Equipment] = Field(default_factory=lambda: [Equipment.RUCK])
    preferences: ProgramPreferences = Field(default_factory=ProgramPreferences)

    @classmethod
    def default_profile(cls) -> "UserFitnessProfile":
        return cls()
