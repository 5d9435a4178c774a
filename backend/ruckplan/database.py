"""Database configuration and session management."""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from ruckplan.config import get_settings
from ruckplan.models.base import Base

settings = get_settings()

# For SQLite, we need check_same_thread=False for FastAPI
connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

engine = create_engine(
    settings.DATABASE_URL,
    connect_args=connect_args,
    echo=False,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_tables(bind=None):
    """Create all database tables."""
    # Import all models to ensure they are registered with Base
    from ruckplan.models import (  # noqa: F401
        Program,
        Enrollment,
        ProgressRecord,
        FitnessProfileRecord,
    )
    Base.metadata.create_all(bind=bind or engine)
