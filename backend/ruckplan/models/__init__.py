"""Database models for the training-program engine."""

from ruckplan.models.base import Base
from ruckplan.models.program import Program, Difficulty, Category
from ruckplan.models.enrollment import Enrollment, PauseReason
from ruckplan.models.progress_record import ProgressRecord
from ruckplan.models.fitness_profile import FitnessProfileRecord

__all__ = [
    "Base",
    "Program",
    "Difficulty",
    "Category",
    "Enrollment",
    "PauseReason",
    "ProgressRecord",
    "FitnessProfileRecord",
]
