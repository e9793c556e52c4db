"""
app.py: FastAPI application factory and engine lifecycle.

This is the ASGI application object imported by uvicorn.
It wires the reservation engine and its collaborators, registers routers,
loads persisted state on startup and flushes it on shutdown.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --workers 1

Keep one worker and no autoreload: the engine lock is process-local.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from travel_reservations.controllers.auth_controller import router as auth_router
from travel_reservations.controllers.inventory_controller import router as inventory_router
from travel_reservations.controllers.reservation_controller import router as reservation_router
from travel_reservations.repository.data_repository import DataRepository
from travel_reservations.repository.gateway import PersistenceGateway
from travel_reservations.services.auth_service import AuthService
from travel_reservations.services.engine import ReservationEngine, create_repository
from travel_reservations.services.report_service import ReportService
from travel_reservations.utils.config import Settings, get_settings
from travel_reservations.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[PersistenceGateway] = None,
) -> FastAPI:
    """
    Build and wire the FastAPI application.

    The engine, auth service and report service live on app.state;
    nothing is held in module globals besides the default ``app`` below.
    """
    settings = settings or get_settings()
    repository = repository or create_repository(settings)

    engine = ReservationEngine(repository=repository, settings=settings)
    auth_service = AuthService(repository=repository, settings=settings)
    report_service = ReportService(engine=engine, settings=settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Load engine state before accepting requests; flush it on exit."""
        _startup(app, settings)
        try:
            yield
        finally:
            _shutdown(app)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.include_router(auth_router)
    app.include_router(inventory_router)
    app.include_router(reservation_router)

    app.state.repository = repository
    app.state.engine = engine
    app.state.auth_service = auth_service
    app.state.report_service = report_service

    return app


def _startup(app: FastAPI, settings: Settings) -> None:
    """
    Idempotent startup sequence. Safe to re-run on server restarts.

    Order matters:
      1. Demo inventory is seeded (SQLite only, skipped when catalogs exist).
      2. The engine loads catalogs and ledger and primes the id allocator.
      3. The bootstrap admin account is created if configured.
    """
    repository = app.state.repository
    engine: ReservationEngine = app.state.engine
    auth_service: AuthService = app.state.auth_service

    if settings.seed_demo_inventory and isinstance(repository, DataRepository):
        logger.info("Startup: seeding demo inventory (skipped if catalogs are not empty)")
        repository.seed_demo_inventory_if_empty()

    logger.info("Startup: loading reservation engine state")
    engine.load()

    auth_service.ensure_bootstrap_admin()
    logger.info("Startup complete, system ready")


def _shutdown(app: FastAPI) -> None:
    engine: ReservationEngine = app.state.engine
    logger.info("Shutdown: flushing reservation engine state")
    engine.shutdown()


# Module-level app object for uvicorn
app = create_app()
