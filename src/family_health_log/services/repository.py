"""
Log repository for per-user log partitions.

Loads and saves each user's full log list as one JSON array through a
key-value store. There is no locking: a single writer per user partition is
assumed, and the last save wins.
"""

import json
import logging
from collections.abc import Callable, Sequence
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from family_health_log.domain.log_record import (
    LOG_LIST_ADAPTER,
    LogRecord,
    LogType,
    MergedLogRecord,
    build_log_record,
    log_to_dict,
)
from family_health_log.infrastructure.storage.key_value_store import KeyValueStore
from family_health_log.services.notifications import LoggingNotifier, NotificationLevel, Notifier
from family_health_log.utils.exceptions import (
    StorageReadError,
    StorageWriteError,
    ValidationError,
)
from family_health_log.utils.identifiers import generate_log_id
from family_health_log.utils.parameters import StorageConfig
from family_health_log.utils.timezone_utils import now_ms

logger = logging.getLogger(__name__)


class LogRepository:
    """
    Repository for reading and writing users' log lists.

    Each user owns exactly one partition, stored under ``{key_prefix}{user}``.
    """

    def __init__(
        self,
        store: KeyValueStore,
        config: StorageConfig | None = None,
        notifier: Notifier | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        """
        Initialize log repository.

        Args:
            store: Key-value store holding the partitions.
            config: Storage configuration (for the key prefix).
            notifier: Sink for user-facing load/save failures.
            clock: Returns "now" in milliseconds; used for new records.
        """
        self.store = store
        self.config = config or StorageConfig()
        self.notifier = notifier or LoggingNotifier()
        self.clock = clock

    def storage_key(self, user: str) -> str:
        """Return the store key of a user's partition."""
        return f"{self.config.key_prefix}{user}"

    def read(self, user: str) -> list[LogRecord]:
        """
        Load a user's logs, failing on corrupt data.

        Args:
            user: User identifier.

        Returns:
            The user's log records in stored order; empty if nothing is stored.

        Raises:
            StorageReadError: If the stored value cannot be read or parsed.
        """
        key = self.storage_key(user)

        try:
            raw = self.store.get(key)
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadError(user, f"Failed to read logs of {user}: {e}") from e

        if raw is None:
            return []

        try:
            return LOG_LIST_ADAPTER.validate_json(raw)
        except PydanticValidationError as e:
            raise StorageReadError(
                user, f"Stored logs of {user} are corrupt ({e.error_count()} errors)"
            ) from e

    def load(self, user: str) -> list[LogRecord]:
        """
        Load a user's logs, substituting an empty list for corrupt data.

        The failure is logged and reported through the notifier; stored data is
        left untouched.

        Args:
            user: User identifier.

        Returns:
            The user's log records, or an empty list if they cannot be read.
        """
        try:
            return self.read(user)
        except StorageReadError as e:
            logger.error(f"{e}; using an empty list")
            self.notifier.notify(f"加载 {user} 数据失败", NotificationLevel.ERROR)
            return []

    def save(self, user: str, logs: Sequence[LogRecord]) -> None:
        """
        Overwrite a user's entire log list.

        The list is serialized before the store is touched, and written with a
        single ``set``; on failure the previously stored list is kept.

        Args:
            user: User identifier.
            logs: Complete list of the user's records.

        Raises:
            StorageWriteError: If serialization or the write fails.
        """
        try:
            payload = json.dumps([log_to_dict(log) for log in logs], ensure_ascii=False)
        except (TypeError, ValueError) as e:
            self.notifier.notify(f"保存 {user} 数据失败", NotificationLevel.ERROR)
            raise StorageWriteError(user, f"Failed to serialize logs of {user}: {e}") from e

        try:
            self.store.set(self.storage_key(user), payload)
        except OSError as e:
            self.notifier.notify(f"保存 {user} 数据失败", NotificationLevel.ERROR)
            raise StorageWriteError(user, f"Failed to write logs of {user}: {e}") from e

        logger.debug(f"Saved {len(logs)} logs for {user}")

    def append(self, user: str, log_type: LogType | str, value: Any) -> list[LogRecord]:
        """
        Append a new record to a user's logs.

        Not atomic across the read and the save.

        Args:
            user: User identifier.
            log_type: Record type.
            value: Type-dependent payload.

        Returns:
            The updated log list.

        Raises:
            ValidationError: If the payload does not match the record type.
            StorageReadError: If the existing logs are corrupt; nothing is written.
            StorageWriteError: If the updated list cannot be saved.
        """
        timestamp = self.clock()
        try:
            record = build_log_record(generate_log_id(timestamp), timestamp, log_type, value)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid {log_type} payload: {e}") from e

        logs = self.read(user)
        logs.append(record)

        self.save(user, logs)
        logger.info(f"Recorded {record.type} for {user}")
        return logs

    def load_all(self, users: Sequence[str]) -> list[MergedLogRecord]:
        """
        Load every stored record of every user, tagged with its owner.

        Args:
            users: User roster, in display order.

        Returns:
            Tagged records in roster order, then stored order.
        """
        return [
            MergedLogRecord(record=log, original_user=user)
            for user in users
            for log in self.load(user)
        ]
