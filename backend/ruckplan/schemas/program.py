"""Pydantic schemas for catalog programs, enrollments and progress records."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ruckplan.models.enrollment import PauseReason
from ruckplan.models.program import Category, Difficulty


# ============== Program Schemas ==============

class ProgramSchema(BaseModel):
    """Catalog program as seen by the engine. Never mutated."""

    id: str = Field(..., description="Program ID")
    title: str = Field(..., max_length=255, description="Program title")
    description: Optional[str] = Field(None, description="Program description")
    difficulty: Difficulty = Field(..., description="Program difficulty")
    category: Category = Field(..., description="Program category")
    duration_weeks: int = Field(..., ge=1, description="Program length in weeks")
    is_featured: bool = Field(False, description="Featured in the catalog")

    class Config:
        from_attributes = True
        frozen = True
        json_schema_extra = {
            "example": {
                "id": "6f1c2b1e-4f4a-4d51-9a63-2f1f0c3c9a10",
                "title": "Ranger Challenge",
                "description": "Twelve weeks of progressive load carriage",
                "difficulty": "advanced",
                "category": "military",
                "duration_weeks": 12,
                "is_featured": True
            }
        }


# ============== Enrollment Schemas ==============

class EnrollmentSchema(BaseModel):
    """Durable link between a user and a program."""

    id: str = Field(..., description="Enrollment ID")
    user_id: str = Field(..., description="User ID")
    program_id: str = Field(..., description="Program ID")
    start_date: datetime = Field(..., description="Enrollment start")
    current_week: int = Field(1, ge=1, description="Current program week")
    starting_weight: float = Field(..., description="Starting ruck weight (lbs)")
    current_weight: float = Field(..., description="Current ruck weight (lbs)")
    target_weight: float = Field(..., description="Weight targeted by the final week (lbs)")
    completion_percentage: float = Field(0.0, ge=0, le=100, description="Percent of workouts done")
    next_workout_date: Optional[datetime] = Field(None, description="Next scheduled workout")
    is_active: bool = Field(True, description="Whether the enrollment is live")
    completed_at: Optional[datetime] = Field(None, description="Completion timestamp")
    paused_reason: Optional[PauseReason] = Field(None, description="Pause reason, if paused")
    paused_at: Optional[datetime] = Field(None, description="Pause timestamp, if paused")

    class Config:
        from_attributes = True

    @property
    def is_live(self) -> bool:
        return self.is_active and self.completed_at is None


# ============== Progress Record Schemas ==============

class HeartRateData(BaseModel):
    """Heart-rate summary of a workout."""

    average_heart_rate: float = Field(..., ge=0)
    max_heart_rate: float = Field(..., ge=0)


class PaceData(BaseModel):
    """Pace summary of a workout, in minutes per mile."""

    average_minutes_per_mile: float = Field(..., gt=0)
    fastest_mile: Optional[float] = Field(None, gt=0)
    slowest_mile: Optional[float] = Field(None, gt=0)
    pace_variability: Optional[float] = Field(None, ge=0)


class ProgressRecordSchema(BaseModel):
    """One completed workout. Immutable once written."""

    id: Optional[str] = Field(None, description="Record ID, assigned by the store")
    user_id: str = Field(..., description="User ID")
    program_id: str = Field(..., description="Program ID")
    workout_date: datetime = Field(..., description="When the workout was done")
    week_number: int = Field(..., ge=1)
    workout_number: int = Field(..., ge=1)
    weight: float = Field(..., ge=0, description="Weight carried (lbs)")
    distance: float = Field(..., ge=0, description="Distance (miles)")
    duration_seconds: float = Field(..., ge=0, description="Duration (seconds)")
    completed: bool = Field(True)
    notes: Optional[str] = None
    heart_rate_data: Optional[HeartRateData] = None
    pace_data: Optional[PaceData] = None

    class Config:
        from_attributes = True
        frozen = True
