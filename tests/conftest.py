"""
Pytest configuration and fixtures for PetSpot tests
"""

import io
import os
import tempfile

import pytest
from fastapi.testclient import TestClient
from PIL import Image

# Ensure test-friendly environment prior to importing the app
os.environ.setdefault("DB_URL", "sqlite://")
os.environ.setdefault("PUBLIC_DIR", tempfile.mkdtemp(prefix="petspot-public-"))
os.environ.setdefault("LOG_LEVEL", "WARNING")

from config.settings import Settings  # noqa: E402
from database.database import build_engine, build_session_factory  # noqa: E402
from main import create_app  # noqa: E402


@pytest.fixture
def engine():
    """A fresh in-memory database per test."""
    engine = build_engine("sqlite://")
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    from database.database import Base
    from repository import announcement_model, user_model  # noqa: F401

    Base.metadata.create_all(bind=engine)
    return build_session_factory(engine)


@pytest.fixture
def test_settings(tmp_path):
    settings = Settings()
    settings.PUBLIC_DIR = str(tmp_path / "public")
    settings.JWT_SECRET = "test-secret"
    settings.LOG_LEVEL = "WARNING"
    return settings


@pytest.fixture
def app(test_settings, engine):
    return create_app(settings=test_settings, engine=engine)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


def _image_bytes(image_format: str) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), color=(200, 120, 40)).save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture
def jpeg_bytes():
    return _image_bytes("JPEG")


@pytest.fixture
def png_bytes():
    return _image_bytes("PNG")


@pytest.fixture
def announcement_payload():
    return {
        "petName": "Burek",
        "species": "dog",
        "breed": "mixed",
        "sex": "male",
        "age": 4,
        "description": "Brown collar, very friendly",
        "microchipNumber": "123456789012345",
        "locationLatitude": 52.2297,
        "locationLongitude": 21.0122,
        "email": "owner@example.com",
        "phone": "+48 123 456 789",
        "lastSeenDate": "2024-05-01",
        "status": "MISSING",
        "reward": "100 PLN",
    }
