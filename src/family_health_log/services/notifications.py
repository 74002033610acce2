"""
User-facing notifications.

Services report outcomes the user should see (recorded, deleted, failed to
load) through a ``Notifier``; the surface decides how to show them.
"""

import logging
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    """Severity of a notification."""

    SUCCESS = "success"
    ERROR = "error"


class Notifier(Protocol):
    """Sink for user-facing notifications."""

    def notify(self, message: str, level: NotificationLevel = NotificationLevel.SUCCESS) -> None:
        """Show a message to the user."""


class LoggingNotifier:
    """Notifier that only writes to the log."""

    def notify(self, message: str, level: NotificationLevel = NotificationLevel.SUCCESS) -> None:
        if level == NotificationLevel.ERROR:
            logger.error(message)
        else:
            logger.info(message)


class RecordingNotifier:
    """Notifier that keeps every message, for tests and batch callers."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, NotificationLevel]] = []

    def notify(self, message: str, level: NotificationLevel = NotificationLevel.SUCCESS) -> None:
        self.messages.append((message, level))

    @property
    def errors(self) -> list[str]:
        return [m for m, level in self.messages if level == NotificationLevel.ERROR]
