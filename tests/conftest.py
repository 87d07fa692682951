"""Shared fixtures for ShareWatch tests."""

from datetime import datetime, timedelta

import pytest

from sharewatch.common.config.rules import FraudRules
from sharewatch.data.schemas.request import FingerprintRequest, GeoLocation
from sharewatch.storage.database import Database


class FakeClock:
    """Controllable naive-UTC clock."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    """Clock fixed at 2026-01-25 12:00 UTC."""
    return FakeClock(datetime(2026, 1, 25, 12, 0, 0))


@pytest.fixture
def database(tmp_path):
    """Fresh SQLite database with all tables."""
    db = Database(f"sqlite:///{tmp_path / 'sharewatch.db'}")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def rules():
    return FraudRules()


@pytest.fixture
def chrome_request():
    return FingerprintRequest(
        user_agent="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
                   "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        accept_language="en-US,en;q=0.9",
        accept_encoding="gzip, deflate, br",
        ip_address="203.0.113.7",
        screen_resolution="1920x1080",
        platform="Win32",
    )


@pytest.fixture
def new_york():
    return GeoLocation(city="New York", country="US", latitude=40.7128, longitude=-74.0060)


@pytest.fixture
def london():
    return GeoLocation(city="London", country="GB", latitude=51.5074, longitude=-0.1278)
