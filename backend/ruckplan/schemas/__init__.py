"""Pydantic schemas package for engine data and API request/response models."""

from ruckplan.schemas.program import (
    EnrollmentSchema,
    HeartRateData,
    PaceData,
    ProgramSchema,
    ProgressRecordSchema,
)
from ruckplan.schemas.session import (
    AchievementType,
    ActiveProgramSession,
    AdaptationType,
    CompletedProgramSession,
    CompletedWorkout,
    Customization,
    EnrollRequest,
    Equipment,
    FocusArea,
    PauseRequest,
    ProgramAchievement,
    ProgramAdaptation,
    ProgramPhase,
    ProgressMetrics,
    UpcomingWorkout,
    WeekDay,
    WeeklySchedule,
    WorkoutType,
)
from ruckplan.schemas.profile import (
    FitnessGoal,
    InjuryRecord,
    ProgramPreferences,
    TimeOfDay,
    UserFitnessProfile,
)
from ruckplan.schemas.analytics import (
    PaceProgressPoint,
    ProgramAnalytics,
    WeightProgressPoint,
)

__all__ = [
    # Catalog and store schemas
    "EnrollmentSchema",
    "HeartRateData",
    "PaceData",
    "ProgramSchema",
    "ProgressRecordSchema",
    # Session schemas
    "AchievementType",
    "ActiveProgramSession",
    "AdaptationType",
    "CompletedProgramSession",
    "CompletedWorkout",
    "Customization",
    "EnrollRequest",
    "Equipment",
    "FocusArea",
    "PauseRequest",
    "ProgramAchievement",
    "ProgramAdaptation",
    "ProgramPhase",
    "ProgressMetrics",
    "UpcomingWorkout",
    "WeekDay",
    "WeeklySchedule",
    "WorkoutType",
    # Profile schemas
    "FitnessGoal",
    "InjuryRecord",
    "ProgramPreferences",
    "TimeOfDay",
    "UserFitnessProfile",
    # Analytics schemas
    "PaceProgressPoint",
    "ProgramAnalytics",
    "WeightProgressPoint",
]
