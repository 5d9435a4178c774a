"""API routers package."""

from ruckplan.routers import programs, sessions, workouts

__all__ = ["programs", "sessions", "workouts"]
