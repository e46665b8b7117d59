# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - In-memory stand-ins for the record store and the media store
# - A TestClient wired to a SuperheroService built on those stand-ins
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.dependencies import get_superhero_service
from app.main import app
from core.models.superhero import ImageUpload, SuperheroFields, SuperheroSubmission
from core.services.superhero_service import SuperheroService

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


# =============================================================================
# In-memory stores
# =============================================================================

class InMemoryRecordStore:
    """RecordStore keeping rows in a dict, newest created_at last inserted."""

    def __init__(self):
        self.rows: dict[str, dict[str, Any]] = {}
        self._clock = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)
        self.fail_operations: set[str] = set()

    def _check(self, operation: str) -> None:
        if operation in self.fail_operations:
            raise RuntimeError(f"database unavailable during {operation}")

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    def insert(self, values):
        self._check("insert")
        now = self._tick()
        row = {
            **values,
            "id": str(uuid4()),
            "images": list(values.get("images", [])),
            "superpowers": list(values.get("superpowers", [])),
            "created_at": now,
            "updated_at": now,
        }
        self.rows[row["id"]] = row
        return dict(row)

    def fetch(self, record_id):
        self._check("fetch")
        row = self.rows.get(record_id)
        return dict(row) if row else None

    def update(self, record_id, values, new_images):
        self._check("update")
        row = self.rows.get(record_id)
        if row is None:
            return None
        row.update(values)
        row["superpowers"] = list(values.get("superpowers", []))
        row["images"] = row["images"] + list(new_images)
        row["updated_at"] = self._tick()
        return dict(row)

    def remove_image(self, record_id, url):
        self._check("remove_image")
        row = self.rows.get(record_id)
        if row is None:
            return None
        row["images"] = [image for image in row["images"] if image != url]
        return dict(row)

    def delete(self, record_id):
        self._check("delete")
        return self.rows.pop(record_id, None)

    def count(self):
        self._check("count")
        return len(self.rows)

    def list_page(self, skip, limit):
        self._check("list")
        ordered = sorted(self.rows.values(), key=lambda r: r["created_at"], reverse=True)
        return [dict(row) for row in ordered[skip:skip + limit]]

    def ping(self):
        self._check("ping")


class FakeMediaStore:
    """MediaStore recording every call; can fail the Nth upload or any delete."""

    def __init__(self):
        self.uploaded: list[str] = []
        self.deleted: list[str] = []
        self.attempts = 0
        self.fail_upload_at: int | None = None
        self.fail_deletes = False

    @property
    def objects(self) -> list[str]:
        return [url for url in self.uploaded if url not in self.deleted]

    def upload(self, image: ImageUpload) -> str:
        self.attempts += 1
        if self.fail_upload_at is not None and self.attempts == self.fail_upload_at:
            raise RuntimeError("storage unavailable")
        url = f"https://cdn.test/superheroes/{self.attempts}-{image.filename}"
        self.uploaded.append(url)
        return url

    def delete(self, url: str) -> None:
        if self.fail_deletes:
            raise RuntimeError("storage unavailable")
        self.deleted.append(url)

    def ping(self) -> None:
        pass


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def settings():
    """Settings with the defaults used in production."""
    return Settings(
        SUPABASE_URL="https://test-project.supabase.co",
        SUPABASE_SERVICE_KEY="test-service-key",
    )


@pytest.fixture
def record_store():
    return InMemoryRecordStore()


@pytest.fixture
def media_store():
    return FakeMediaStore()


@pytest.fixture
def service(record_store, media_store, settings):
    return SuperheroService(record_store=record_store, media_store=media_store, settings=settings)


@pytest.fixture
def client(service):
    """TestClient whose SuperheroService uses the in-memory stores."""
    app.dependency_overrides[get_superhero_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def hero_fields():
    """Sample superhero fields for testing."""
    return SuperheroFields(
        nickname="Nightcrawler",
        real_name="Kurt Wagner",
        origin_description="Born in Bavaria to the shapeshifter Mystique.",
        superpowers=["teleportation", "wall-crawling", "night vision"],
        catch_phrase="Bamf!",
    )


def make_image(name: str, content_type: str = "image/png", data: bytes = PNG_BYTES) -> ImageUpload:
    return ImageUpload(filename=name, content_type=content_type, data=data)


def make_submission(fields: SuperheroFields, *names: str) -> SuperheroSubmission:
    return SuperheroSubmission(hero=fields, images=[make_image(name) for name in names])


@pytest.fixture
def form_data():
    """Multipart form fields as a browser sends them."""
    return {
        "nickname": "Nightcrawler",
        "real_name": "Kurt Wagner",
        "origin_description": "Born in Bavaria to the shapeshifter Mystique.",
        "catch_phrase": "Bamf!",
        "superpowers": ["teleportation", "wall-crawling"],
    }
