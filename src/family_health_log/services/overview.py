"""
Daily overview service.

Combines the merged day feed with per-user summaries for the day and the day
before, plus the current user's water progress and recorded meals. Sorting
the feed is a presentation concern and happens here, not in aggregation.
"""

import logging
from collections.abc import Sequence
from datetime import date, timedelta
from enum import Enum
from typing import Protocol

from pydantic import BaseModel, Field

from family_health_log.domain.log_record import (
    DEFAULT_SORT_RANK,
    LOG_SORT_ORDER,
    DaySummary,
    FoodLog,
    MealType,
    MergedLogRecord,
    category_key,
)
from family_health_log.services.aggregation import DailyAggregator
from family_health_log.services.summary import SummaryCalculator
from family_health_log.utils.parameters import ProcessingConfig

logger = logging.getLogger(__name__)


class FeedSortMode(str, Enum):
    """Orderings available for the day feed."""

    TIME = "time"
    CATEGORY = "category"
    USER_CATEGORY = "user_category"


def _category_rank(log: MergedLogRecord) -> int:
    return LOG_SORT_ORDER.get(category_key(log.record), DEFAULT_SORT_RANK)


def sort_feed(
    logs: Sequence[MergedLogRecord], mode: FeedSortMode | str, current_user: str
) -> list[MergedLogRecord]:
    """
    Sort a merged day feed for display.

    Args:
        logs: Merged records.
        mode: ``time`` (newest first), ``category``, or ``user_category``
            (current user's records first, then by category).
        current_user: User whose records lead in ``user_category`` mode.

    Returns:
        New sorted list; ties keep their input order.
    """
    mode = FeedSortMode(mode)

    if mode == FeedSortMode.TIME:
        return sorted(logs, key=lambda log: log.timestamp, reverse=True)
    if mode == FeedSortMode.CATEGORY:
        return sorted(logs, key=_category_rank)
    return sorted(
        logs,
        key=lambda log: (0 if log.original_user == current_user else 1, _category_rank(log)),
    )


class WaterProgress(BaseModel):
    """Water intake against the daily goal."""

    total_ml: float
    goal_ml: int
    percentage: float = Field(description="Share of the goal reached, capped at 100")


class DailyOverview(BaseModel):
    """Everything a surface needs to show one day."""

    day: date
    current_user: str
    sort_mode: FeedSortMode
    feed: list[MergedLogRecord]
    summaries: dict[str, DaySummary]
    previous_summaries: dict[str, DaySummary]
    water: WaterProgress
    recorded_meals: dict[str, FoodLog]


class Presenter(Protocol):
    """Surface that displays a daily overview."""

    def render(self, overview: DailyOverview) -> None:
        """Display the overview."""


class DailyOverviewService:
    """Service building ``DailyOverview`` values."""

    def __init__(
        self,
        aggregator: DailyAggregator,
        calculator: SummaryCalculator,
        config: ProcessingConfig | None = None,
    ) -> None:
        """
        Initialize overview service.

        Args:
            aggregator: Daily aggregator for the merged feed.
            calculator: Summary calculator.
            config: Processing configuration (water goal).
        """
        self.aggregator = aggregator
        self.calculator = calculator
        self.config = config or ProcessingConfig()

    def water_progress(self, summary: DaySummary) -> WaterProgress:
        goal = self.config.water_goal_ml
        percentage = min(summary.water_sum / goal * 100, 100.0)
        return WaterProgress(total_ml=summary.water_sum, goal_ml=goal, percentage=percentage)

    def build(
        self,
        day: date,
        users: Sequence[str],
        current_user: str,
        sort_mode: FeedSortMode | str = FeedSortMode.TIME,
    ) -> DailyOverview:
        """
        Build the overview of a day.

        Args:
            day: Local calendar day to show.
            users: User roster.
            current_user: User whose water and meals are detailed.
            sort_mode: Feed ordering.

        Returns:
            Daily overview.
        """
        day_logs = self.aggregator.aggregate_for_date(day, users)
        previous_logs = self.aggregator.aggregate_for_date(day - timedelta(days=1), users)

        summaries = self.calculator.summarize_users(day_logs, users)
        previous = self.calculator.summarize_users(previous_logs, users)

        current_summary = summaries.get(current_user) or self.calculator.summarize(
            day_logs, current_user
        )

        meals: dict[str, FoodLog] = {}
        for log in day_logs:
            if log.original_user == current_user and isinstance(log.record, FoodLog):
                meals.setdefault(log.record.val.meal_type, log.record)

        logger.debug(f"Built overview of {day} for {current_user}: {len(day_logs)} records")

        return DailyOverview(
            day=day,
            current_user=current_user,
            sort_mode=FeedSortMode(sort_mode),
            feed=sort_feed(day_logs, sort_mode, current_user),
            summaries=summaries,
            previous_summaries=previous,
            water=self.water_progress(current_summary),
            recorded_meals={m.value: meals[m.value] for m in MealType if m.value in meals},
        )
