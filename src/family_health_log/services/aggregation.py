"""
Daily aggregation service for merging users' log partitions.

Builds the cross-user view of one local calendar day. Accumulative record
types contribute every same-day entry; for daily-unique types only the
latest same-day entry per user is kept.
"""

import logging
from collections.abc import Sequence
from datetime import date

from family_health_log.domain.log_record import DAILY_UNIQUE_TYPES, LogRecord, MergedLogRecord
from family_health_log.services.repository import LogRepository
from family_health_log.utils.parameters import ProcessingConfig
from family_health_log.utils.timezone_utils import local_date

logger = logging.getLogger(__name__)

_UNIQUE_TYPE_VALUES = frozenset(t.value for t in DAILY_UNIQUE_TYPES)


class DailyAggregator:
    """
    Service for aggregating all users' logs for a given day.

    Every call re-reads every partition; nothing is cached between calls.
    """

    def __init__(self, repository: LogRepository, config: ProcessingConfig | None = None) -> None:
        """
        Initialize daily aggregator.

        Args:
            repository: Log repository to read partitions from.
            config: Processing configuration (for the day-boundary timezone).
        """
        self.repository = repository
        self.config = config or ProcessingConfig()

    def _logs_on_date(self, logs: Sequence[LogRecord], target: date) -> list[LogRecord]:
        return [log for log in logs if local_date(log.timestamp, self.config.timezone) == target]

    def dedupe_day(self, day_logs: Sequence[LogRecord]) -> list[LogRecord]:
        """
        Apply the daily-unique rule to one user's records of one day.

        Accumulative records keep their stored order. They are followed by,
        for each unique type in turn, the record with the greatest timestamp;
        equal timestamps are broken by the greater id.

        Args:
            day_logs: One user's records for a single day.

        Returns:
            Visible records for that user and day.
        """
        visible = [log for log in day_logs if log.type not in _UNIQUE_TYPE_VALUES]

        for unique_type in DAILY_UNIQUE_TYPES:
            candidates = [log for log in day_logs if log.type == unique_type.value]
            if candidates:
                visible.append(max(candidates, key=lambda log: (log.timestamp, log.id)))

        return visible

    def aggregate_for_date(self, target: date, users: Sequence[str]) -> list[MergedLogRecord]:
        """
        Merge all users' visible records for a calendar day.

        Args:
            target: Local calendar day.
            users: User roster; output follows this order.

        Returns:
            Tagged records, grouped by user in roster order. Not sorted.
        """
        merged: list[MergedLogRecord] = []

        for user in users:
            day_logs = self._logs_on_date(self.repository.load(user), target)
            visible = self.dedupe_day(day_logs)

            if len(visible) < len(day_logs):
                logger.debug(
                    f"Hid {len(day_logs) - len(visible)} superseded records for {user} on {target}"
                )

            merged.extend(MergedLogRecord(record=log, original_user=user) for log in visible)

        logger.info(f"Aggregated {len(merged)} records for {len(users)} users on {target}")
        return merged
