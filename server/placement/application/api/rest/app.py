import logging
from contextlib import asynccontextmanager

import logfire
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine

from placement.application.api.v1.errors import map_placement_error
from placement.application.api.v1.routes import archive, companies, health, reconcile
from placement.application.di import create_container
from placement.config import Config, configure_logging
from placement.domain.shared.error import PlacementError
from placement.infrastructure.event.worker import WorkerPool
from placement.infrastructure.persistence.migrate import migrate
from placement.util.di.fastapi import setup_dishka

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = app.state.dishka_container
    config = await container.get(Config)

    if config.database.auto_migrate:
        await migrate(await container.get(AsyncEngine))

    if not config.worker.enabled:
        logger.warning("Background workers disabled; mirror sync will not run")
        yield
        await container.close()
        return

    # Outbox workers (reconcile, mirror sync) plus the daily reconciliation schedule
    worker_pool = await container.get(WorkerPool)
    async with worker_pool:
        yield

    await container.close()


def create_app(config: Config | None = None) -> FastAPI:
    """Create FastAPI application."""
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    configure_logging(config.logging)
    logger.info("Starting placement server: %s v%s", config.server.name, config.server.version)

    app_instance = FastAPI(
        title=config.server.name,
        description=config.server.description,
        version=config.server.version,
        lifespan=lifespan,
    )

    logfire.instrument_httpx()
    logfire.instrument_fastapi(app_instance)

    container = create_container(config)
    setup_dishka(container, app_instance)

    app_instance.include_router(health.router, prefix="/api/v1")
    app_instance.include_router(companies.router, prefix="/api/v1")
    app_instance.include_router(archive.router, prefix="/api/v1")
    app_instance.include_router(reconcile.router, prefix="/api/v1")

    @app_instance.exception_handler(PlacementError)
    async def placement_error_handler(request: Request, exc: PlacementError):
        http_exc = map_placement_error(exc)
        if http_exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=http_exc.status_code, content=http_exc.detail)

    @app_instance.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    return app_instance
