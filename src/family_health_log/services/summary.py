"""
Summary calculation over merged day logs.

Reduces one day's merged records into per-user numeric totals.
"""

import logging
from collections.abc import Iterable, Sequence

from family_health_log.domain.log_record import DaySummary, LogType, MergedLogRecord

logger = logging.getLogger(__name__)


class SummaryCalculator:
    """
    Service folding merged day logs into ``DaySummary`` values.

    Pure: results depend only on the records owned by the target user, not on
    their order.
    """

    def summarize(self, merged_day_logs: Iterable[MergedLogRecord], user: str) -> DaySummary:
        """
        Summarize one user's records of a day.

        Water adds millilitres; food and fitness add calories (missing counts
        as 0); pee and poop are counted. Weight and sleep contribute nothing.

        Args:
            merged_day_logs: Merged records of a single day, any users.
            user: User to summarize.

        Returns:
            Day summary; all zeros if the user has no records.
        """
        summary = DaySummary()

        for log in merged_day_logs:
            if log.original_user != user:
                continue

            if log.type == LogType.WATER:
                summary.water_sum += log.val
            elif log.type in (LogType.FOOD, LogType.FITNESS):
                summary.calorie_sum += log.val.calories or 0
            elif log.type == LogType.PEE:
                summary.pee_count += 1
            elif log.type == LogType.POOP:
                summary.poop_count += 1
            # TODO: decide whether fitness records should increment fitness_count

        return summary

    def summarize_users(
        self, merged_day_logs: Sequence[MergedLogRecord], users: Sequence[str]
    ) -> dict[str, DaySummary]:
        """
        Summarize every user of a roster.

        Args:
            merged_day_logs: Merged records of a single day.
            users: User roster.

        Returns:
            Mapping of user to day summary, in roster order.
        """
        return {user: self.summarize(merged_day_logs, user) for user in users}
