from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

_PACKAGE_DIR = Path(__file__).resolve().parent
_PROJECT_DIR = _PACKAGE_DIR.parent
_ENV_FILES = (
    _PROJECT_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "POS Back-Office Mock API"
    app_version: str = "0.1.0"
    app_env: str = "development"
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:3002"]

    # Record repository (REST/JSON backend)
    api_base_url: str = "http://localhost:3001/api"
    request_timeout_seconds: float = 30.0

    # Entity schemas and mock seed data
    entity_schemas_file: str = str(_PACKAGE_DIR / "data" / "entity_schemas.yaml")
    seed_records_file: str = str(_PACKAGE_DIR / "data" / "seed_records.yaml")

    # Form behaviour
    reference_cache_ttl_seconds: float = 300.0
    notice_dismiss_seconds: float = 1.8

    # Development mock backend
    mock_backend_host: str = "127.0.0.1"
    mock_backend_port: int = 3001

    # Logging: per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_http: str = "WARNING"          # httpx / httpcore outbound HTTP
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_forms: str = "INFO"            # Form controller + reference data
    log_level_backend: str = "INFO"          # Mock backend routes + store

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance; reads .env once."""
    return Settings()
