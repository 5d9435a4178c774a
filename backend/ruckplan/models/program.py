"""Program model for catalog training plans."""

from datetime import datetime
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import Integer, String, DateTime, Boolean, Enum, Text
from sqlalchemy.orm import Mapped, mapped_column

from ruckplan.models.base import Base, new_id, utcnow


class Difficulty(str, PyEnum):
    """Program difficulty, ordered beginner < intermediate < advanced < elite."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    ELITE = "elite"

    @property
    def level_index(self) -> int:
        return _DIFFICULTY_ORDER.index(self)

    @property
    def weight_increment(self) -> float:
        """Ruck weight added per program week, in lbs."""
        return _WEIGHT_INCREMENTS[self]

    # str ordering would compare alphabetically
    def __lt__(self, other):
        if not isinstance(other, Difficulty):
            return NotImplemented
        return self.level_index < other.level_index

    def __le__(self, other):
        if not isinstance(other, Difficulty):
            return NotImplemented
        return self.level_index <= other.level_index

    def __gt__(self, other):
        if not isinstance(other, Difficulty):
            return NotImplemented
        return self.level_index > other.level_index

    def __ge__(self, other):
        if not isinstance(other, Difficulty):
            return NotImplemented
        return self.level_index >= other.level_index


_DIFFICULTY_ORDER = [
    Difficulty.BEGINNER,
    Difficulty.INTERMEDIATE,
    Difficulty.ADVANCED,
    Difficulty.ELITE,
]

_WEIGHT_INCREMENTS = {
    Difficulty.BEGINNER: 2.5,
    Difficulty.INTERMEDIATE: 3.0,
    Difficulty.ADVANCED: 3.5,
    Difficulty.ELITE: 4.0,
}


class Category(str, PyEnum):
    """Program category options."""
    MILITARY = "military"
    ADVENTURE = "adventure"
    FITNESS = "fitness"
    HISTORICAL = "historical"


class Program(Base):
    """Immutable catalog definition of a multi-week training plan."""

    __tablename__ = "programs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    difficulty: Mapped[Difficulty] = mapped_column(
        Enum(Difficulty),
        default=Difficulty.BEGINNER
    )
    category: Mapped[Category] = mapped_column(
        Enum(Category),
        default=Category.FITNESS
    )
    duration_weeks: Mapped[int] = mapped_column(Integer)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False)

    # Catalog order, used to break recommendation ties
    sort_order: Mapped[int] = mapped_column(Integer, default=0, index=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<Program(id={self.id}, title='{self.title}', difficulty={self.difficulty})>"
