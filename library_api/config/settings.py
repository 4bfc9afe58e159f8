from typing import Optional

from pydantic_settings import BaseSettings

# ----------------------------
# General / App settings
# ----------------------------
class AppSettings(BaseSettings):
    app_name: str = "LibraryApi"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 4000

    # Logger
    log_file: str = "app.log"
    log_level: str = "INFO"

    # Load the starter authors and books into an empty store
    seed_data: bool = False

    class Config:
        env_prefix = "APP_"


# ----------------------------
# Database settings
# ----------------------------
class DatabaseSettings(BaseSettings):
    backend: str = "sql"  # "sql" or "memory"
    url: Optional[str] = None

    host: str = "127.0.0.1"
    port: int = 5432
    user: str = "library"
    password: str = "library"
    db_name: str = "library"

    pool_size: int = 10
    max_overflow: int = 20
    pool_timeout: int = 30
    pool_recycle: int = 1800

    max_retries: int = 5
    retry_backoff: float = 0.5

    class Config:
        env_prefix = "DB_"

    def get_database_url(self) -> str:
        if self.url:
            return self.url
        return f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.db_name}"


# ----------------------------
# Auth settings
# ----------------------------
class AuthSettings(BaseSettings):
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    token_ttl_seconds: int = 60 * 60

    # Every user logs in with the same password
    shared_password: str = "secret"

    class Config:
        env_prefix = "AUTH_"


# ----------------------------
# Event bus settings
# ----------------------------
class EventBusSettings(BaseSettings):
    max_queue_size: int = 1000  # 0 means unbounded
    max_subscriptions: int = 10_000

    class Config:
        env_prefix = "EVENT_BUS_"


# ----------------------------
# Top-level settings
# ----------------------------
class Settings(BaseSettings):
    app: AppSettings = AppSettings()
    database: DatabaseSettings = DatabaseSettings()
    auth: AuthSettings = AuthSettings()
    event_bus: EventBusSettings = EventBusSettings()

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
