"""FastAPI application with lifespan and router mounting."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from shaho import __version__
from shaho.api.routes import admin, health
from shaho.core.config import AppSettings
from shaho.core.logging import configure_logging
from shaho.persistence import Persistence, create_persistence
from shaho.reminders.orchestrator import ReminderOrchestrator
from shaho.scheduler import start_scheduler, stop_scheduler


def build_orchestrator(persistence: Persistence, settings: AppSettings) -> ReminderOrchestrator:
    return ReminderOrchestrator(
        applications=persistence.applications,
        employees=persistence.employees,
        organizations=persistence.organizations,
        notifications=persistence.notifications,
        directory=persistence.directory,
        settings=settings,
        lock=persistence.lock,
    )


def create_app(settings: AppSettings | None = None,
               persistence: Persistence | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    ``persistence`` defaults to the DynamoDB/Redis backends; tests pass the
    in-memory ones.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Initialize and tear down application resources."""
        app_settings = settings or AppSettings()
        configure_logging(app_settings)
        backends = persistence or create_persistence(app_settings)
        orchestrator = build_orchestrator(backends, app_settings)
        app.state.settings = app_settings
        app.state.orchestrator = orchestrator
        app.state.scheduler = start_scheduler(orchestrator, app_settings)
        try:
            yield
        finally:
            if app.state.scheduler is not None:
                stop_scheduler()

    app = FastAPI(
        title="Shaho Deadline & Reminder Engine",
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(health.router)
    app.include_router(admin.router, prefix="/admin")
    return app
