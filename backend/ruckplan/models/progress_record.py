"""Progress record model: one append-only row per completed workout."""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import Integer, String, DateTime, Boolean, Float, ForeignKey, Text
from sqlalchemy.types import JSON
from sqlalchemy.orm import Mapped, mapped_column

from ruckplan.models.base import Base, new_id, utcnow


class ProgressRecord(Base):
    """Completed workout fact. Rows are never updated once written."""

    __tablename__ = "progress_records"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    program_id: Mapped[str] = mapped_column(String(36), ForeignKey("programs.id"), index=True)

    workout_date: Mapped[datetime] = mapped_column(DateTime, index=True)
    week_number: Mapped[int] = mapped_column(Integer)
    workout_number: Mapped[int] = mapped_column(Integer)

    weight: Mapped[float] = mapped_column(Float)  # lbs
    distance: Mapped[float] = mapped_column(Float)  # miles
    duration_seconds: Mapped[float] = mapped_column(Float)
    completed: Mapped[bool] = mapped_column(Boolean, default=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Example: {"average_heart_rate": 142, "max_heart_rate": 171}
    heart_rate_data: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    # Example: {"average_minutes_per_mile": 15.2, "fastest_mile": 14.1, ...}
    pace_data: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    def __repr__(self) -> str:
        return (
            f"<ProgressRecord(id={self.id}, program_id={self.program_id}, "
            f"week={self.week_number}, workout={self.workout_number})>"
        )
