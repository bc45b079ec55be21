from __future__ import annotations

import random
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from main import create_app
from services.color_picker import ColorPicker
from tests.helpers import make_image_bytes
from utils.config import Settings


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing every file at an isolated temp directory."""
    return Settings(
        database_path=tmp_path / "db" / "scientists.db",
        media_dir=tmp_path / "media",
        asset_base_url="http://testserver/media",
        wp_url="http://wordpress.test",
        cors_origins=["http://localhost:3000"],
        db_retry_delay=0.01,
        db_heartbeat_interval=60.0,
    )


@pytest.fixture
def client(settings: Settings):
    """TestClient with a seeded color picker; runs the app lifespan."""
    app = create_app(settings, color_picker=ColorPicker(random.Random(7)))
    with TestClient(app) as test_client:
        yield test_client
