from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from ridefx.core.config import Settings
from ridefx.db.dal import Database
from ridefx.db.migrate import apply_migrations
from ridefx.db.seed import seed_currencies
from ridefx.services.cache import TTLCache
from ridefx.services.currency.rates import RateStore


class FakeClock:
    """Manually advanced UTC clock for cache and staleness tests."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def settings(tmp_path):
    s = Settings(data_dir=tmp_path, _env_file=None)
    s.init_post_load()
    return s


@pytest.fixture
def empty_db(settings):
    """Migrated database with no currency rows."""
    apply_migrations(settings.db_path)
    return Database(settings.db_path)


@pytest.fixture
def db(empty_db, settings):
    """Migrated and seeded database (AED default; AED/USD/EUR/GBP enabled)."""
    seed_currencies(settings.db_path)
    return empty_db


@pytest.fixture
def rate_store(db, settings, clock):
    return RateStore(db, TTLCache(clock=clock), settings)


@pytest.fixture
def app(settings, db):
    from ridefx.main import create_app

    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
