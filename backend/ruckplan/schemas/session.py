"""Pydantic schemas for active program sessions and their derived state."""

from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ruckplan.models.base import to_naive_utc
from ruckplan.models.enrollment import PauseReason
from ruckplan.schemas.program import (
    EnrollmentSchema,
    HeartRateData,
    PaceData,
    ProgramSchema,
)


class WeekDay(str, Enum):
    """Days of the week, Monday first."""
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def index(self) -> int:
        """Offset from Monday, matching date.weekday()."""
        return list(WeekDay).index(self)

    @classmethod
    def from_date(cls, day: date) -> "WeekDay":
        return list(cls)[day.weekday()]


class ProgramPhase(str, Enum):
    """Training phase derived from program progress."""
    FOUNDATION = "foundation"
    BUILDING = "building"
    PEAK = "peak"
    TAPER = "taper"


class WorkoutType(str, Enum):
    """Upcoming workout categories."""
    REST = "rest"
    FOUNDATION = "foundation"
    ENDURANCE = "endurance"
    STRENGTH = "strength"
    SPEED = "speed"
    RECOVERY = "recovery"
    TEST = "test"


class FocusArea(str, Enum):
    GENERAL_ENDURANCE = "general_endurance"
    STRENGTH_BUILDING = "strength_building"
    SPEED_DEVELOPMENT = "speed_development"
    POWER_ENDURANCE = "power_endurance"
    MILITARY_SPECIFIC = "military_specific"


class Equipment(str, Enum):
    RUCK = "ruck"
    WEIGHTS = "weights"
    PULLUP_BAR = "pullup_bar"
    RESISTANCE = "resistance_bands"
    CARDIO = "cardio_equipment"


class AdaptationType(str, Enum):
    """Kinds of advisory program adjustments."""
    INCREASE_INTENSITY = "increase_intensity"
    DECREASE_INTENSITY = "decrease_intensity"
    ADJUST_VOLUME = "adjust_volume"
    MODIFY_SCHEDULE = "modify_schedule"
    REST_RECOMMENDED = "rest_recommended"


class AchievementType(str, Enum):
    PROGRAM_COMPLETION = "program_completion"
    CONSISTENCY = "consistency"
    STRENGTH_MILESTONE = "strength_milestone"
    ENDURANCE_MILESTONE = "endurance_milestone"
    STREAK = "streak"


# ============== Session Building Blocks ==============

class Customization(BaseModel):
    """User adjustments applied on top of a program's defaults."""

    workouts_per_week: int = Field(3, ge=1, le=7, description="Workout days per week")
    rest_day_preferences: List[WeekDay] = Field(
        default_factory=lambda: [WeekDay.SUNDAY], description="Days never scheduled"
    )
    intensity_modifier: float = Field(1.0, gt=0, le=2.0, description="Relative intensity")
    focus_areas: List[FocusArea] = Field(
        default_factory=lambda: [FocusArea.GENERAL_ENDURANCE]
    )
    equipment_available: List[Equipment] = Field(
        default_factory=lambda: [Equipment.RUCK, Equipment.WEIGHTS]
    )

    class Config:
        frozen = True


class WeeklySchedule(BaseModel):
    """Workout and rest days derived from a customization."""

    workout_days: List[WeekDay]
    rest_days: List[WeekDay]
    workouts_per_week: int

    class Config:
        frozen = True


class ProgressMetrics(BaseModel):
    """Running totals for a session."""

    total_workouts: int = 0
    total_distance: float = 0.0  # miles
    total_time: float = 0.0  # seconds
    average_weight: float = 0.0  # lbs
    last_workout_date: Optional[datetime] = None
    consistency_score: float = 0.0


class ProgramAdaptation(BaseModel):
    """Advisory suggestion surfaced to the user; never applied automatically."""

    type: AdaptationType
    reason: str
    suggested_change: str
    confidence: float = Field(..., ge=0, le=1)
    created_at: Optional[datetime] = None

    class Config:
        frozen = True


class UpcomingWorkout(BaseModel):
    """Derived schedule entry; always recomputable."""

    id: str
    session_id: str
    week_number: int
    workout_number: int
    scheduled_date: date
    workout_type: WorkoutType
    target_weight: float
    target_distance: float
    target_duration_seconds: float
    instructions: str

    class Config:
        frozen = True


class CompletedWorkout(BaseModel):
    """Workout reported by the user or the tracker."""

    completed_date: datetime = Field(..., description="When the workout finished")
    week_number: int = Field(..., ge=1)
    workout_number: int = Field(..., ge=1)
    weight_used: float = Field(..., ge=0, description="Weight carried (lbs)")
    distance_completed: float = Field(..., ge=0, description="Distance (miles)")
    duration_seconds: float = Field(..., ge=0, description="Actual duration")
    notes: Optional[str] = None
    heart_rate_data: Optional[HeartRateData] = None
    pace_data: Optional[PaceData] = None
    target_duration_seconds: Optional[float] = Field(
        None, description="Target duration of the scheduled workout"
    )

    @field_validator('completed_date')
    @classmethod
    def normalize_completed_date(cls, v):
        return to_naive_utc(v)

    class Config:
        json_schema_extra = {
            "example": {
                "completed_date": "2024-03-04T07:15:00",
                "week_number": 1,
                "workout_number": 1,
                "weight_used": 40,
                "distance_completed": 2.0,
                "duration_seconds": 1750,
                "notes": "Felt strong",
                "target_duration_seconds": 1800
            }
        }


# ============== Sessions ==============

class ActiveProgramSession(BaseModel):
    """In-memory working state for one live enrollment."""

    id: str
    enrollment: EnrollmentSchema
    program: ProgramSchema
    customization: Customization
    weekly_schedule: WeeklySchedule
    start_date: datetime
    current_phase: ProgramPhase
    next_workout_date: Optional[datetime] = None
    progress_metrics: ProgressMetrics = Field(default_factory=ProgressMetrics)
    adaptations: List[ProgramAdaptation] = Field(default_factory=list)
    is_paused: bool = False
    paused_reason: Optional[PauseReason] = None
    paused_date: Optional[datetime] = None

    @property
    def program_id(self) -> str:
        return self.program.id


class ProgramAchievement(BaseModel):
    type: AchievementType
    title: str
    description: str
    earned_date: datetime
    metadata: Dict[str, str] = Field(default_factory=dict)


class CompletedProgramSession(BaseModel):
    """Snapshot of a session at completion."""

    id: str
    original_session: ActiveProgramSession
    completed_date: datetime
    final_metrics: ProgressMetrics
    achievements: List[ProgramAchievement] = Field(default_factory=list)


# ============== Requests ==============

class EnrollRequest(BaseModel):
    """Schema for enrolling in a catalog program."""

    program_id: str = Field(..., description="Catalog program ID")
    starting_weight: float = Field(..., description="Starting ruck weight (lbs)")
    customization: Optional[Customization] = None
    start_date: Optional[datetime] = Field(None, description="Defaults to now")

    @field_validator('start_date')
    @classmethod
    def normalize_start_date(cls, v):
        return to_naive_utc(v) if v else v


class PauseRequest(BaseModel):
    """Schema for pausing a session."""

    reason: PauseReason = Field(PauseReason.OTHER, description="Why the program is paused")
