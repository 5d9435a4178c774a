"""Enrollment model linking a user to a program they follow."""

from datetime import datetime
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import Integer, String, DateTime, Boolean, Float, ForeignKey, Enum
from sqlalchemy.orm import Mapped, mapped_column

from ruckplan.models.base import Base, new_id, utcnow


class PauseReason(str, PyEnum):
    """Why a user paused a program."""
    INJURY = "injury"
    ILLNESS = "illness"
    TRAVEL = "travel"
    SCHEDULE = "schedule"
    MOTIVATION = "motivation"
    OTHER = "other"


class Enrollment(Base):
    """One row per program a user is following or has followed."""

    __tablename__ = "enrollments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    program_id: Mapped[str] = mapped_column(String(36), ForeignKey("programs.id"), index=True)

    start_date: Mapped[datetime] = mapped_column(DateTime)
    current_week: Mapped[int] = mapped_column(Integer, default=1)

    # Ruck weight in lbs
    starting_weight: Mapped[float] = mapped_column(Float)
    current_weight: Mapped[float] = mapped_column(Float)
    target_weight: Mapped[float] = mapped_column(Float)

    completion_percentage: Mapped[float] = mapped_column(Float, default=0.0)
    next_workout_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Status
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    paused_reason: Mapped[Optional[PauseReason]] = mapped_column(Enum(PauseReason), nullable=True)
    paused_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<Enrollment(id={self.id}, program_id={self.program_id}, week={self.current_week})>"
