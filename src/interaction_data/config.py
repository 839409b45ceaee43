import logging
from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Core
    environment: str = Field("development", alias="ENVIRONMENT")
    app_env: str = Field("dev", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    api_host: str = Field("0.0.0.0", alias="API_HOST")
    api_port: int = Field(8000, alias="API_PORT")

    # Network collaborator (session context + upload)
    network_base_url: str = Field("http://127.0.0.1:8000", alias="NETWORK_BASE_URL")
    session_context_path: str = Field("/wsapi/session_context", alias="SESSION_CONTEXT_PATH")
    interaction_data_path: str = Field("/wsapi/interaction_data", alias="INTERACTION_DATA_PATH")
    network_timeout_seconds: float = Field(5.0, alias="NETWORK_TIMEOUT_SECONDS")

    # Durable store
    store_backend: str = Field("memory", alias="STORE_BACKEND")  # memory|sql|redis
    database_url: str = Field("sqlite:///./interaction_data.db", alias="DATABASE_URL")
    redis_url: str = Field("redis://localhost:6379/0", alias="REDIS_URL")
    redis_store_key: str = Field("interaction_data:current", alias="REDIS_STORE_KEY")

    # Collection service: probability handed out in session_context
    data_sample_rate: float = Field(0.1, ge=0.0, le=1.0, alias="DATA_SAMPLE_RATE")

    # Log unknown event names (runtime behaviour unchanged)
    strict_event_names: bool = Field(False, alias="STRICT_EVENT_NAMES")

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "allow"


@lru_cache
def get_settings() -> Settings:
    return Settings()


def reset_settings():
    """Clear cached settings (useful in tests when env vars change)."""
    get_settings.cache_clear()


def configure_logging(settings: Settings | None = None) -> None:
    s = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, s.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
