import asyncio
import io
from pathlib import Path

import pytest
from fastapi import UploadFile

from utils.config import DEFAULT_CORS_ORIGINS, Settings
from utils.errors import ValidationError
from utils.media_validation import read_image_bytes, validate_image_filename

ENV_VARS = (
    "PORT", "DATABASE_PATH", "WP_URL", "CORS_ORIGINS", "MEDIA_DIR", "ASSET_BASE_URL",
    "API_PREFIX", "DB_RETRY_DELAY", "DB_HEARTBEAT_INTERVAL", "WP_TIMEOUT", "LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    settings = Settings.from_env()
    assert settings.port == 5000
    assert settings.wp_url == "http://wordpress:80"
    assert settings.cors_origins == list(DEFAULT_CORS_ORIGINS)
    assert settings.asset_base_url == "http://localhost:5000/media"
    assert settings.api_prefix == "/api"
    assert settings.db_retry_delay == 5.0
    assert settings.database_path == Path("database") / "scientists.db"


def test_overrides(clean_env):
    clean_env.setenv("PORT", "8080")
    clean_env.setenv("WP_URL", "https://cms.example.org/")
    clean_env.setenv("CORS_ORIGINS", "https://a.example, https://b.example,")
    clean_env.setenv("DB_RETRY_DELAY", "1.5")
    settings = Settings.from_env()
    assert settings.port == 8080
    assert settings.wp_url == "https://cms.example.org"
    assert settings.cors_origins == ["https://a.example", "https://b.example"]
    assert settings.asset_base_url == "http://localhost:8080/media"
    assert settings.db_retry_delay == 1.5


def test_empty_api_prefix_mounts_at_root(clean_env):
    clean_env.setenv("API_PREFIX", "")
    assert Settings.from_env().api_prefix == ""


def test_api_prefix_trailing_slash_dropped(clean_env):
    clean_env.setenv("API_PREFIX", "/v2/")
    assert Settings.from_env().api_prefix == "/v2"


def test_invalid_number(clean_env):
    clean_env.setenv("PORT", "eighty")
    with pytest.raises(RuntimeError):
        Settings.from_env()


@pytest.mark.parametrize("filename", ["a.jpg", "b.JPEG", "c.png", "d.gif"])
def test_allowed_extensions(filename):
    validate_image_filename(filename)


@pytest.mark.parametrize("filename", ["a.bmp", "b.webp", "noext", "", None, "evil.png.exe"])
def test_rejected_extensions(filename):
    with pytest.raises(ValidationError):
        validate_image_filename(filename)


def _upload(data, filename="x.png"):
    return UploadFile(file=io.BytesIO(data), filename=filename)


def test_read_image_bytes_limits():
    assert asyncio.run(read_image_bytes(_upload(b"12345"), max_bytes=5)) == b"12345"
    with pytest.raises(ValidationError):
        asyncio.run(read_image_bytes(_upload(b"123456"), max_bytes=5))
    with pytest.raises(ValidationError):
        asyncio.run(read_image_bytes(_upload(b"")))
