"""
Configuration helpers for the AYNI backend.

Settings are read from the environment exactly once (see `get_settings`) and
the resulting frozen object is handed to `create_app`, which passes the
relevant values to each service. Business logic never reads os.environ.
"""

from dataclasses import dataclass
from functools import lru_cache
import os

DEFAULT_CORS_ORIGINS = (
    "http://localhost:5173",
    "http://localhost:5174",
    "https://studio-ayni.vercel.app",
    "https://studio-ayni-frontend.vercel.app",
    "https://fernandocalderon2023.github.io",
    "https://*.vercel.app",
)
_DEV_SECRET_KEY = "dev-only-secret-change-me"


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    secret_key: str
    session_ttl_seconds: int
    storage_backend: str
    database_url: str
    data_dir: str
    media_dir: str
    media_base_url: str
    media_folder: str
    media_max_dimension: int
    cors_origins: tuple[str, ...]
    default_payment_method: str
    admin_email: str
    admin_password: str
    log_level: str


def _int(value: str | None, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _csv(value: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
    if value is None:
        return default
    items = tuple(item.strip().rstrip("/") for item in value.split(","))
    return tuple(item for item in items if item)


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    app_env = (os.getenv("APP_ENV") or "dev").lower()
    secret_key = os.getenv("SECRET_KEY", "")
    if not secret_key:
        if app_env == "prod":
            raise RuntimeError("SECRET_KEY must be configured when APP_ENV=prod.")
        secret_key = _DEV_SECRET_KEY
    database_url = (os.getenv("DATABASE_URL") or "").strip()
    backend = (os.getenv("STORAGE_BACKEND") or ("sql" if database_url else "json")).strip().lower()

    return Settings(
        app_env=app_env,
        secret_key=secret_key,
        session_ttl_seconds=_int(os.getenv("SESSION_TTL_SECONDS", "86400"), 86400),
        storage_backend=backend,
        database_url=database_url,
        data_dir=os.getenv("DATA_DIR", "data"),
        media_dir=os.getenv("MEDIA_DIR", "media"),
        media_base_url=os.getenv("MEDIA_BASE_URL", "/media").rstrip("/"),
        media_folder=os.getenv("MEDIA_FOLDER", "studio-ayni").strip("/"),
        media_max_dimension=_int(os.getenv("MEDIA_MAX_DIMENSION", "1000"), 1000),
        cors_origins=_csv(os.getenv("CORS_ORIGINS"), DEFAULT_CORS_ORIGINS),
        default_payment_method=os.getenv("DEFAULT_PAYMENT_METHOD", "whatsapp"),
        admin_email=os.getenv("ADMIN_EMAIL", "admin@ayni.com"),
        admin_password=os.getenv("ADMIN_PASSWORD", "admin123"),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
