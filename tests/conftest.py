from datetime import datetime, timedelta, timezone

import pytest

from mneme.application.scheduling.scheduler import Scheduler
from mneme.domain.scheduling.models import Settings

FIXED_NOW = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def scheduler(clock, settings):
    return Scheduler(default_settings=settings, clock=clock)


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config
    monkeypatch.setenv("HOME", str(home))
    return home
