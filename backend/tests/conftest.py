"""
Pytest configuration and fixtures

Every test gets its own in-memory SQLite database, a catalog seeded with the
test programs, and a fixed clock starting on Monday 2024-03-04 08:00.
"""
from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ruckplan.database import create_tables
from ruckplan.models.program import Category, Difficulty
from ruckplan.services.fitness_profile_store import FitnessProfileStore
from ruckplan.services.session_manager import SessionManager
from ruckplan.services.sql_store import SqlProfileStore, SqlProgramCatalog, SqlProgressStore

USER_ID = "test-user"
START = datetime(2024, 3, 4, 8, 0)  # a Monday

TEST_PROGRAMS = [
    {
        "title": "Ranger Ready",
        "description": "Eight weeks of heavy load carriage",
        "difficulty": Difficulty.ADVANCED,
        "category": Category.MILITARY,
        "duration_weeks": 8,
        "is_featured": True,
    },
    {
        "title": "Base Builder",
        "description": "Entry-level conditioning",
        "difficulty": Difficulty.BEGINNER,
        "category": Category.FITNESS,
        "duration_weeks": 8,
        "is_featured": True,
    },
    {
        "title": "Trail Explorer",
        "description": "Short weekend rucks",
        "difficulty": Difficulty.BEGINNER,
        "category": Category.ADVENTURE,
        "duration_weeks": 4,
        "is_featured": False,
    },
    {
        "title": "Bataan Memorial March",
        "description": "Memorial march preparation",
        "difficulty": Difficulty.INTERMEDIATE,
        "category": Category.HISTORICAL,
        "duration_weeks": 10,
        "is_featured": True,
    },
]


class FixedClock:
    """Callable clock the tests can move forward."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FixedClock(START)


@pytest.fixture
def session_factory():
    """Isolated in-memory database with all tables created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def catalog(session_factory):
    catalog = SqlProgramCatalog(session_factory)
    catalog.seed_defaults(TEST_PROGRAMS)
    return catalog


@pytest.fixture
def programs(catalog):
    """Seeded programs keyed by title."""
    return {p.title: p for p in catalog.list_programs()}


@pytest.fixture
def progress_store(session_factory):
    return SqlProgressStore(session_factory)


@pytest.fixture
def profile_backend(session_factory):
    return SqlProfileStore(session_factory)


@pytest.fixture
def profile_store(profile_backend):
    return FitnessProfileStore(profile_backend, USER_ID)


@pytest.fixture
def manager(catalog, progress_store, profile_store, clock):
    """Started session manager over the test stores."""
    manager = SessionManager(
        catalog=catalog,
        progress_store=progress_store,
        profile_store=profile_store,
        user_id=USER_ID,
        clock=clock,
    )
    manager.start()
    yield manager
    manager.stop()
