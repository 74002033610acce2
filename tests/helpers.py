"""Shared builders for tests."""

from datetime import datetime

import pytz

from family_health_log.infrastructure.storage.key_value_store import InMemoryKeyValueStore
from family_health_log.services.notifications import RecordingNotifier
from family_health_log.services.repository import LogRepository
from family_health_log.utils.parameters import ProcessingConfig

TIMEZONE = "Asia/Shanghai"
USERS = ["Me", "Wife", "Family"]


def ms(year: int, month: int, day: int, hour: int = 12, minute: int = 0, second: int = 0) -> int:
    """Return a local Asia/Shanghai wall-clock time as epoch milliseconds."""
    local = pytz.timezone(TIMEZONE).localize(datetime(year, month, day, hour, minute, second))
    return int(local.timestamp()) * 1000


class FakeClock:
    """Settable millisecond clock."""

    def __init__(self, now: int) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


def make_repository(
    now: int | None = None, quota_bytes: int | None = None
) -> tuple[LogRepository, FakeClock, RecordingNotifier]:
    """Build a repository over an in-memory store with a fake clock."""
    clock = FakeClock(now if now is not None else ms(2024, 1, 15))
    notifier = RecordingNotifier()
    repository = LogRepository(
        InMemoryKeyValueStore(quota_bytes=quota_bytes), notifier=notifier, clock=clock
    )
    return repository, clock, notifier


def processing_config() -> ProcessingConfig:
    return ProcessingConfig(timezone=TIMEZONE, water_goal_ml=2000, default_height_m=1.75)
