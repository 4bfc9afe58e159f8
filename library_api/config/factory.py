from functools import lru_cache

from library_api.catalog.services import UNIQUE_FIELDS, CatalogService
from library_api.catalog.tables import TABLES
from library_api.config.db_session import get_engine
from library_api.config.logger import get_logger
from library_api.config.settings import Settings
from library_api.shared.auth import TokenService
from library_api.shared.database import InMemoryGateway, PersistenceGateway, SqlAlchemyGateway
from library_api.shared.event_bus import InProcessEventBus
from library_api.shared.metrics import MetricsCollector
from library_api.shared.retry import ExponentialBackoffRetry


@lru_cache
def get_settings() -> Settings:
    return Settings()


# ----------------------------
# Event bus factory
# ----------------------------
def build_event_bus(settings: Settings) -> InProcessEventBus:
    logger = get_logger("InProcessEventBus")
    return InProcessEventBus(
        max_queue_size=settings.event_bus.max_queue_size,
        max_subscriptions=settings.event_bus.max_subscriptions,
        logger=logger,
        metrics=MetricsCollector(logger=logger),
    )


# ----------------------------
# Persistence gateway factory
# ----------------------------
def build_gateway(settings: Settings) -> PersistenceGateway:
    backend = settings.database.backend.lower()
    if backend == "memory":
        return InMemoryGateway(unique_fields=UNIQUE_FIELDS, logger=get_logger("InMemoryGateway"))
    if backend == "sql":
        return SqlAlchemyGateway(
            engine=get_engine(settings.database, echo=settings.app.debug),
            models=TABLES,
            logger=get_logger("SqlAlchemyGateway"),
        )
    raise ValueError(f"Invalid database backend '{backend}'. Must be one of memory, sql")


# ----------------------------
# Token service factory
# ----------------------------
def build_token_service(settings: Settings) -> TokenService:
    return TokenService(
        secret=settings.auth.jwt_secret,
        algorithm=settings.auth.jwt_algorithm,
        ttl_seconds=settings.auth.token_ttl_seconds,
        logger=get_logger("TokenService"),
    )


def build_startup_retry(settings: Settings) -> ExponentialBackoffRetry:
    return ExponentialBackoffRetry(
        max_retries=settings.database.max_retries,
        base_delay=settings.database.retry_backoff,
        logger=get_logger("StartupRetry"),
    )


# ----------------------------
# Catalog service factory
# ----------------------------
def build_catalog_service(settings: Settings, gateway: PersistenceGateway, event_bus: InProcessEventBus) -> CatalogService:
    return CatalogService(
        gateway=gateway,
        event_bus=event_bus,
        tokens=build_token_service(settings),
        auth=settings.auth,
        logger=get_logger("CatalogService"),
    )
