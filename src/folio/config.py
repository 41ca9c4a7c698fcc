# ABOUTME: Runtime configuration loaded from environment variables and an optional .env file.
# ABOUTME: One Settings instance is built per process and passed to the service factory.

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

DEFAULT_DB_PATH = Path.home() / ".folio" / "catalog.db"
DEFAULT_PROVIDERS = ("openlibrary", "googlebooks")


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return value.strip() if value and value.strip() else default


def _env_int(name: str, default: int, minimum: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if minimum is not None and value < minimum:
        raise ValueError(f"{name} must be at least {minimum}, got {value}")
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


@dataclass
class Settings:
    """Application settings.

    Defaults suit local development; every field can be overridden through
    a FOLIO_* environment variable (see ``from_env``).
    """

    environment: str = "development"
    db_path: Path = DEFAULT_DB_PATH
    providers: tuple[str, ...] = DEFAULT_PROVIDERS
    google_books_api_key: str | None = None

    http_timeout: float = 10.0
    min_request_interval: float = 0.1

    max_retries: int = 2
    retry_base_delay: float = 0.2
    retry_max_delay: float = 2.0

    failure_threshold: int = 5
    failure_window: float = 60.0
    reset_timeout: float = 30.0

    cache_ttl: float = 24 * 60 * 60
    negative_cache_ttl: float = 10 * 60
    cache_max_entries: int = 1000

    batch_concurrency: int = 5
    batch_max_size: int = 50

    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """Build settings from the process environment.

        Args:
            dotenv: Load a .env file from the working directory first.

        Raises:
            ValueError: If a numeric variable cannot be parsed.
        """
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True))

        providers_raw = os.getenv("FOLIO_PROVIDERS")
        providers = (
            tuple(p.strip().lower() for p in providers_raw.split(",") if p.strip())
            if providers_raw
            else DEFAULT_PROVIDERS
        )
        db_raw = os.getenv("FOLIO_DB_PATH")

        return cls(
            environment=_env_str("FOLIO_ENV", "development"),
            db_path=Path(db_raw).expanduser() if db_raw else DEFAULT_DB_PATH,
            providers=providers,
            google_books_api_key=os.getenv("GOOGLE_BOOKS_API_KEY") or None,
            http_timeout=_env_float("FOLIO_HTTP_TIMEOUT", 10.0),
            min_request_interval=_env_float("FOLIO_MIN_REQUEST_INTERVAL", 0.1),
            max_retries=_env_int("FOLIO_MAX_RETRIES", 2),
            retry_base_delay=_env_float("FOLIO_RETRY_BASE_DELAY", 0.2),
            retry_max_delay=_env_float("FOLIO_RETRY_MAX_DELAY", 2.0),
            failure_threshold=_env_int("FOLIO_FAILURE_THRESHOLD", 5, minimum=1),
            failure_window=_env_float("FOLIO_FAILURE_WINDOW", 60.0),
            reset_timeout=_env_float("FOLIO_RESET_TIMEOUT", 30.0),
            cache_ttl=_env_float("FOLIO_CACHE_TTL", 24 * 60 * 60),
            negative_cache_ttl=_env_float("FOLIO_NEGATIVE_CACHE_TTL", 10 * 60),
            cache_max_entries=_env_int("FOLIO_CACHE_MAX_ENTRIES", 1000, minimum=1),
            batch_concurrency=_env_int("FOLIO_BATCH_CONCURRENCY", 5),
            batch_max_size=_env_int("FOLIO_BATCH_MAX_SIZE", 50),
            log_level=_env_str("FOLIO_LOG_LEVEL", "INFO").upper(),
            host=_env_str("FOLIO_HOST", "127.0.0.1"),
            port=_env_int("FOLIO_PORT", 8000),
        )
