from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from library_api.catalog.fixtures import seed_catalog
from library_api.catalog.routes import build_graphql_router
from library_api.config.factory import (
    build_catalog_service,
    build_event_bus,
    build_gateway,
    build_startup_retry,
    get_settings,
)
from library_api.config.logger import get_logger
from library_api.config.settings import Settings
from library_api.shared.health import HealthChecker, build_health_router


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Wire the gateway, event bus and catalog service into a FastAPI app.
    Each app owns its own bus, so separate apps never share subscribers.
    """
    settings = settings or get_settings()
    logger = get_logger(settings.app.app_name)

    gateway = build_gateway(settings)
    event_bus = build_event_bus(settings)
    service = build_catalog_service(settings, gateway, event_bus)
    health_checker = HealthChecker(gateway, event_bus, logger=get_logger("HealthChecker"))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Connecting to the database...", extra={"backend": settings.database.backend})
        await build_startup_retry(settings).execute(gateway.start)
        logger.info("Connected to the database")

        if settings.app.seed_data:
            await seed_catalog(gateway, logger=logger)

        logger.info("Server ready", extra={"host": settings.app.host, "port": settings.app.port})
        try:
            yield
        finally:
            event_bus.close()
            await gateway.stop()
            logger.info("Server stopped")

    app = FastAPI(title=settings.app.app_name, debug=settings.app.debug, lifespan=lifespan)
    app.state.settings = settings
    app.state.gateway = gateway
    app.state.event_bus = event_bus
    app.state.catalog = service

    app.include_router(build_graphql_router(service), prefix="/graphql")
    app.include_router(build_health_router(health_checker))
    return app


def run(host: Optional[str] = None, port: Optional[int] = None):
    """Console entry point: serve the API with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=host or settings.app.host,
        port=port or settings.app.port,
        log_level=settings.app.log_level.lower(),
    )


if __name__ == "__main__":
    run()
