"""FastAPI application entry point for the RuckPlan training-program API."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ruckplan.config import get_settings
from ruckplan.database import create_tables
from ruckplan.routers import programs, sessions, workouts
from ruckplan.services.engine_context import build_engine_context

settings = get_settings()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Startup: create tables, then build the engine from the stores
    create_tables()
    app.state.engine = build_engine_context(settings)
    logger.info(f"Engine ready for user {settings.USER_ID}")
    yield
    # Shutdown: drop store subscriptions
    app.state.engine.close()


app = FastAPI(
    title="RuckPlan API",
    description="Backend API for structured rucking programs - enrollment, schedules, progress and recommendations",
    version="1.0.0",
    lifespan=lifespan,
)

cors_origins = [
    settings.FRONTEND_URL,
    "http://localhost:5173",
    "http://localhost:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(programs.router, prefix="/api/programs", tags=["Programs"])
app.include_router(sessions.router, prefix="/api/sessions", tags=["Sessions"])
app.include_router(workouts.router, prefix="/api/workouts", tags=["Workouts"])


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - API information."""
    return {
        "name": "RuckPlan API",
        "version": "1.0.0",
        "status": "running",
    }


@app.get("/health", tags=["Health"])
@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
