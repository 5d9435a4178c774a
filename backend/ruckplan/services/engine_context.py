"""Wiring of stores and services into one explicit engine context."""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.orm import sessionmaker

from ruckplan.config import Settings, get_settings
from ruckplan.models.base import utcnow
from ruckplan.services.adaptation_analyzer import AdaptationAnalyzer
from ruckplan.services.fitness_profile_store import FitnessProfileStore
from ruckplan.services.progress_analytics import ProgressAnalyticsService
from ruckplan.services.recommendation_engine import RecommendationEngine
from ruckplan.services.schedule_generator import ScheduleGenerator
from ruckplan.services.session_manager import SessionManager
from ruckplan.services.sql_store import SqlProfileStore, SqlProgramCatalog, SqlProgressStore


@dataclass
class EngineContext:
    """Everything a caller needs to drive the training engine."""

    settings: Settings
    catalog: SqlProgramCatalog
    progress_store: SqlProgressStore
    profile_store: FitnessProfileStore
    sessions: SessionManager

    def close(self) -> None:
        self.sessions.stop()


def build_engine_context(
    settings: Optional[Settings] = None,
    session_factory: Optional[sessionmaker] = None,
    clock: Callable[[], datetime] = utcnow,
) -> EngineContext:
    """
    Build stores and services, seed the catalog if configured, and start the
    session manager so it holds state projected from the stores.

    Raises:
        StoreError: if the initial load from the stores fails
    """
    settings = settings or get_settings()
    if session_factory is None:
        from ruckplan.database import SessionLocal
        session_factory = SessionLocal

    catalog = SqlProgramCatalog(session_factory)
    progress_store = SqlProgressStore(session_factory)
    profile_store = FitnessProfileStore(SqlProfileStore(session_factory), settings.USER_ID)

    if settings.SEED_CATALOG:
        catalog.seed_defaults()

    sessions = SessionManager(
        catalog=catalog,
        progress_store=progress_store,
        profile_store=profile_store,
        user_id=settings.USER_ID,
        schedule_generator=ScheduleGenerator(window_weeks=settings.SCHEDULE_WINDOW_WEEKS),
        adaptation_analyzer=AdaptationAnalyzer(),
        recommendation_engine=RecommendationEngine(
            cooldown_days=settings.RECOMMENDATION_COOLDOWN_DAYS,
            limit=settings.RECOMMENDATION_LIMIT,
            featured_limit=settings.FEATURED_FALLBACK_LIMIT,
        ),
        analytics=ProgressAnalyticsService(),
        max_active_programs=settings.MAX_ACTIVE_PROGRAMS,
        min_starting_weight=settings.MIN_STARTING_WEIGHT,
        max_starting_weight=settings.MAX_STARTING_WEIGHT,
        clock=clock,
    )
    sessions.start()

    return EngineContext(
        settings=settings,
        catalog=catalog,
        progress_store=progress_store,
        profile_store=profile_store,
        sessions=sessions,
    )
