from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from library_api.config.logger import get_logger
from library_api.config.settings import DatabaseSettings

logger = get_logger("DB_Session_Init")

# ----------------------------
# Base declarative class
# ----------------------------
Base = declarative_base()


# ----------------------------
# Engine factory
# ----------------------------
def get_engine(database: DatabaseSettings, echo: bool = False) -> AsyncEngine:
    """
    Build the SQLAlchemy async engine for ``database``.
    Pool sizing only applies to server databases; SQLite manages its own pool.
    """
    url = database.get_database_url()
    options = {"echo": echo}
    if not url.startswith("sqlite"):
        options.update(
            pool_size=database.pool_size,
            max_overflow=database.max_overflow,
            pool_timeout=database.pool_timeout,
            pool_recycle=database.pool_recycle,
        )
    engine = create_async_engine(url, **options)
    logger.info("Async engine created", extra={"dialect": engine.dialect.name})
    return engine


# ----------------------------
# Async session factory
# ----------------------------
def get_sessionmaker(engine: AsyncEngine) -> sessionmaker:
    return sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


# ----------------------------
# Database initialization
# ----------------------------
async def init_db(engine: AsyncEngine) -> None:
    """Create every table registered on Base."""
    logger.info("Starting database initialization...")
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created or already exist")
    except Exception as e:
        logger.exception("Failed to initialize database", extra={"error": str(e)})
        raise


async def drop_db(engine: AsyncEngine) -> None:
    """Drop all tables (tests and reset scripts)."""
    logger.warning("Dropping all database tables...")
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.info("All tables dropped")
    except Exception as e:
        logger.exception("Failed to drop tables", extra={"error": str(e)})
        raise
