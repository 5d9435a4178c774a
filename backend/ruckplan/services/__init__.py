"""Services package for engine business logic."""

from ruckplan.services.adaptation_analyzer import AdaptationAnalyzer
from ruckplan.services.engine_context import EngineContext, build_engine_context
from ruckplan.services.errors import EngineErrorKind, StoreError, TrainingEngineError, describe_error
from ruckplan.services.fitness_profile_store import FitnessProfileStore
from ruckplan.services.progress_analytics import ProgressAnalyticsService
from ruckplan.services.recommendation_engine import RecommendationEngine
from ruckplan.services.schedule_generator import ScheduleGenerator
from ruckplan.services.session_manager import SessionManager

__all__ = [
    "AdaptationAnalyzer",
    "EngineContext",
    "build_engine_context",
    "EngineErrorKind",
    "StoreError",
    "TrainingEngineError",
    "describe_error",
    "FitnessProfileStore",
    "ProgressAnalyticsService",
    "RecommendationEngine",
    "ScheduleGenerator",
    "SessionManager",
]
