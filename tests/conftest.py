"""
Pytest fixtures for the advocate directory tests.

Provides small deterministic advocate datasets, seeded temporary SQLite
stores, record sources over both, and FastAPI TestClients wired to each
source variant.
"""

import sys
from pathlib import Path

import pytest

_PROJECT_ROOT = str(Path(__file__).resolve().parent.parent)
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from api.database import ConnectionPool  # noqa: E402
from api.sources import (  # noqa: E402
    FixtureAdvocateSource,
    SqliteAdvocateSource,
    build_fixture_records,
)
from build_advocates_db import seed_database  # noqa: E402
from utils.config import AppConfig  # noqa: E402


# ── Datasets ──────────────────────────────────────────────────────────────────

def make_advocate(first_name: str, **overrides) -> dict:
    """Return a valid seed record; keyword args replace individual fields."""
    record = {
        "first_name": first_name,
        "last_name": "Tester",
        "city": "Springfield",
        "degree": "MSW",
        "specialties": [],
        "years_of_experience": 3,
        "phone_number": 5550000000,
    }
    record.update(overrides)
    return record


SMALL_DATA = [
    make_advocate("Jane", last_name="Okoye", city="Boston", degree="MD",
                  specialties=["Oncology", "Chronic pain"], years_of_experience=12,
                  phone_number=5551112222),
    make_advocate("Bob", last_name="Reyes", city="Denver", degree="PhD",
                  specialties=["Cardiology"], years_of_experience=7,
                  phone_number=15553334444),
    make_advocate("Carla", last_name="Nguyen", city="Austin", degree="MSW",
                  specialties=["Trauma & PTSD", "100% remote"], years_of_experience=21,
                  phone_number=5555556666),
]


def numbered_data(n: int) -> list[dict]:
    """*n* advocates named Person0..Person{n-1}, none matching the others' cities."""
    return [
        make_advocate(f"Person{i}", city="Metropolis", years_of_experience=i % 5)
        for i in range(n)
    ]


# ── Stores and sources ────────────────────────────────────────────────────────

@pytest.fixture()
def small_db(tmp_path) -> Path:
    """SQLite store seeded with SMALL_DATA (Carla is newest)."""
    db_path = tmp_path / "small.sqlite"
    seed_database(db_path, SMALL_DATA)
    return db_path


@pytest.fixture()
def large_db(tmp_path) -> Path:
    """SQLite store seeded with 45 numbered advocates."""
    db_path = tmp_path / "large.sqlite"
    seed_database(db_path, numbered_data(45))
    return db_path


@pytest.fixture()
def small_store(small_db):
    source = SqliteAdvocateSource(ConnectionPool(small_db, max_size=2))
    yield source
    source.close()


@pytest.fixture()
def large_store(large_db):
    source = SqliteAdvocateSource(ConnectionPool(large_db, max_size=2))
    yield source
    source.close()


@pytest.fixture()
def small_fixture_source():
    return FixtureAdvocateSource(build_fixture_records(SMALL_DATA))


@pytest.fixture()
def large_fixture_source():
    return FixtureAdvocateSource(build_fixture_records(numbered_data(45)))


# ── Config and clients ────────────────────────────────────────────────────────

@pytest.fixture()
def make_config(monkeypatch):
    """Factory for AppConfig with environment overrides applied."""
    def _make(**env: str) -> AppConfig:
        for key in ("APP_DB_PATH", "APP_STORE_FALLBACK", "APP_LOG_FORMAT",
                    "APP_DB_POOL_SIZE"):
            monkeypatch.delenv(key, raising=False)
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        return AppConfig.from_env()
    return _make


@pytest.fixture()
def client_for():
    """Factory: TestClient for an app built around a given record source."""
    from fastapi.testclient import TestClient

    from api.app import create_app

    clients = []

    def _client(source, config=None):
        app = create_app(config=config, source=source)
        c = TestClient(app, raise_server_exceptions=False)
        c.__enter__()
        clients.append(c)
        return c

    yield _client
    for c in clients:
        c.__exit__(None, None, None)
