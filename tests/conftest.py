"""
Shared pytest fixtures.

Every test starts from a scrubbed environment: no DATABASE_URL, no site
URL, an empty settings cache and no process-wide connection factory.
"""

import pytest
from fastapi.testclient import TestClient

from estate.config import get_settings
from estate.infrastructure.database import reset_connection_factory


MANAGED_ENV_VARS = (
    "DATABASE_URL",
    "DB_CONNECT_TIMEOUT_SECONDS",
    "DB_CREATE_TABLES",
    "DB_POOL_SIZE",
    "DB_MAX_OVERFLOW",
    "PUBLIC_SITE_URL",
    "SITE_NAME",
    "CORS_ORIGINS",
    "ENVIRONMENT",
    "LOG_LEVEL",
    "DEBUG",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Isolate each test from the host environment and any .env file."""
    for name in MANAGED_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.chdir(tmp_path)

    get_settings.cache_clear()
    reset_connection_factory()
    yield
    get_settings.cache_clear()
    reset_connection_factory()


@pytest.fixture
def sqlite_url(tmp_path) -> str:
    """File-backed SQLite database for real round trips."""
    return f"sqlite+aiosqlite:///{tmp_path / 'estate.db'}"


@pytest.fixture
def configured_env(monkeypatch, sqlite_url):
    """Environment as it looks at request time on a real deployment."""
    monkeypatch.setenv("DATABASE_URL", sqlite_url)
    monkeypatch.setenv("DB_CREATE_TABLES", "true")
    get_settings.cache_clear()
    return sqlite_url


@pytest.fixture
def client(configured_env):
    """Test client with a reachable datastore."""
    from estate.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def unconfigured_client():
    """Test client as the app runs when DATABASE_URL was never set."""
    from estate.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def listing_payload() -> dict:
    return {
        "title": "Sunny two-bedroom flat in Alfama",
        "description": "Renovated flat with river views, close to the tram line.",
        "price": 485000,
        "currency": "eur",
        "property_type": "apartment",
        "address": "Rua de Sao Miguel 12",
        "city": "Lisbon",
        "bedrooms": 2,
        "bathrooms": 1,
        "area_sqm": 78,
        "amenities": ["balcony", "elevator"],
        "images": ["/images/alfama-1.jpg"]
    }
