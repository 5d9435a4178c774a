"""Pydantic schemas for per-session progress analytics."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ruckplan.schemas.program import ProgressRecordSchema
from ruckplan.schemas.session import ActiveProgramSession


class WeightProgressPoint(BaseModel):
    date: datetime
    weight: float


class PaceProgressPoint(BaseModel):
    date: datetime
    average_pace: float  # minutes per mile


class ProgramAnalytics(BaseModel):
    """Progress summary for one active session."""

    session: ActiveProgramSession
    progress_entries: List[ProgressRecordSchema] = Field(default_factory=list)
    workout_consistency: float = Field(..., ge=0, le=1)
    weight_progression: List[WeightProgressPoint] = Field(default_factory=list)
    pace_improvement: List[PaceProgressPoint] = Field(default_factory=list)
    projected_completion: Optional[datetime] = None
