"""Environment-driven application settings.

Values are read from the process environment, after loading a `.env` file
when one is present.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

DEFAULT_CORS_ORIGINS = (
    "https://yukoval-dakia.github.io",
    "http://localhost:3000",
    "https://worship.yukovalstudios.com",
)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name}={raw!r} is not a number") from exc


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name}={raw!r} is not an integer") from exc


def _env_prefix(name: str, default: str) -> str:
    """Read a path prefix; an empty value means "mount at the root"."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().rstrip("/")


def _split_origins(raw: Optional[str]) -> List[str]:
    if raw is None or not raw.strip():
        return list(DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass
class Settings:
    """Runtime configuration for the API.

    Attributes:
        port: TCP port uvicorn binds to.
        database_path: SQLite file holding scientist records.
        wp_url: Base URL of the WordPress site whose REST API is proxied.
        cors_origins: Origins allowed to make cross-origin requests.
        media_dir: Directory where uploaded images are stored.
        asset_base_url: Public base URL that derived image URLs start with.
        api_prefix: Path prefix all API routers are mounted under.
        db_retry_delay: Seconds between database (re)connect attempts.
        db_heartbeat_interval: Seconds between liveness pings once connected.
        wp_timeout: Timeout in seconds for WordPress requests.
        log_level: Root logging level name.
    """

    port: int = 5000
    database_path: Path = Path("database") / "scientists.db"
    wp_url: str = "http://wordpress:80"
    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    media_dir: Path = Path("database") / "media"
    asset_base_url: str = "http://localhost:5000/media"
    api_prefix: str = "/api"
    db_retry_delay: float = 5.0
    db_heartbeat_interval: float = 2.0
    wp_timeout: float = 5.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables (and `.env`)."""
        load_dotenv()

        port = _env_int("PORT", 5000)
        asset_base_url = os.getenv("ASSET_BASE_URL") or f"http://localhost:{port}/media"

        return cls(
            port=port,
            database_path=Path(os.getenv("DATABASE_PATH") or cls.database_path).expanduser(),
            wp_url=(os.getenv("WP_URL") or cls.wp_url).rstrip("/"),
            cors_origins=_split_origins(os.getenv("CORS_ORIGINS")),
            media_dir=Path(os.getenv("MEDIA_DIR") or cls.media_dir).expanduser(),
            asset_base_url=asset_base_url.rstrip("/"),
            api_prefix=_env_prefix("API_PREFIX", cls.api_prefix),
            db_retry_delay=_env_float("DB_RETRY_DELAY", 5.0),
            db_heartbeat_interval=_env_float("DB_HEARTBEAT_INTERVAL", 2.0),
            wp_timeout=_env_float("WP_TIMEOUT", 5.0),
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        )
