"""Key-value row holding a user's serialized fitness profile."""

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import String, DateTime
from sqlalchemy.types import JSON
from sqlalchemy.orm import Mapped, mapped_column

from ruckplan.models.base import Base, utcnow


class FitnessProfileRecord(Base):
    """Last-write-wins profile storage keyed by user."""

    __tablename__ = "fitness_profiles"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    payload: Mapped[Dict[str, Any]] = mapped_column(JSON)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<FitnessProfileRecord(user_id={self.user_id})>"
