"""
Pytest configuration and fixtures for legoworld tests.
"""

import io
from collections.abc import Callable

import pytest
from PIL import Image

import legoworld.services.auth as auth_module
import legoworld.services.local_cache as local_cache_module
import legoworld.services.media_host as media_host_module
import legoworld.services.relational_store as relational_store_module
import legoworld.services.sync as sync_module
from legoworld.config import get_config
from legoworld.models.creation import Creation, MediaItem, MediaType
from legoworld.models.database import MemoryCacheStore
from legoworld.services.local_cache import LocalCache

CREDENTIAL_VARS = [
    "CLOUDINARY_CLOUD_NAME",
    "CLOUDINARY_API_KEY",
    "CLOUDINARY_API_SECRET",
    "CLOUDINARY_UPLOAD_PRESET",
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "ADMIN_EMAIL",
    "DEV_ADMIN_EMAIL",
    "MAX_FILES",
    "MAX_IMAGE_SIZE",
    "MAX_VIDEO_SIZE",
]


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Start every test unconfigured, with a private cache file and fresh singletons."""
    for name in CREDENTIAL_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("LOCAL_CACHE_PATH", str(tmp_path / "cache.duckdb"))

    get_config().clear_cache()
    monkeypatch.setattr(media_host_module, "_media_host_client", None)
    monkeypatch.setattr(relational_store_module, "_relational_store", None)
    monkeypatch.setattr(local_cache_module, "_local_cache", None)
    monkeypatch.setattr(sync_module, "_sync_service", None)
    monkeypatch.setattr(auth_module, "_auth_service", None)

    yield

    get_config().clear_cache()


@pytest.fixture
def sample_jpeg_bytes() -> Callable[..., bytes]:
    """Factory for real JPEG data of a given size."""

    def _make(width: int = 64, height: int = 48, color: str = "red") -> bytes:
        buffer = io.BytesIO()
        Image.new("RGB", (width, height), color).save(buffer, format="JPEG")
        return buffer.getvalue()

    return _make


@pytest.fixture
def make_creation() -> Callable[..., Creation]:
    """Factory for creations with a given number of hosted photos."""

    def _make(
        creation_id: str = "1700000000000",
        name: str = "Castle",
        date_added: str = "2024-01-01T10:00:00+00:00",
        photo_count: int = 2,
    ) -> Creation:
        photos = [
            MediaItem(
                url=f"https://res.cloudinary.com/demo/image/upload/v1/lego-creations/{creation_id}-photo-{i}.jpg",
                name=f"photo-{i}.jpg",
                public_id=f"lego-creations/{creation_id}-photo-{i}",
                width=800,
                height=600,
                media_type=MediaType.IMAGE,
            )
            for i in range(photo_count)
        ]
        return Creation(id=creation_id, name=name, date_added=date_added, photos=photos)

    return _make


@pytest.fixture
def memory_cache() -> LocalCache:
    return LocalCache(MemoryCacheStore())
