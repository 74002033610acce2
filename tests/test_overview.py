"""Unit tests for the daily overview and feed sorting."""

from datetime import date

from family_health_log.domain.log_record import LogType, MergedLogRecord, build_log_record
from family_health_log.services.aggregation import DailyAggregator
from family_health_log.services.overview import DailyOverviewService, FeedSortMode, sort_feed
from family_health_log.services.summary import SummaryCalculator
from helpers import USERS, make_repository, ms, processing_config


def _merged(user: str, log_id: str, log_type: LogType, value: object, hour: int) -> MergedLogRecord:
    record = build_log_record(log_id, ms(2024, 1, 15, hour), log_type, value)
    return MergedLogRecord(record=record, original_user=user)


FEED = [
    _merged("Wife", "water", LogType.WATER, 200, 9),
    _merged("Me", "dinner", LogType.FOOD, {"mealType": "dinner", "description": "饭"}, 19),
    _merged("Me", "breakfast", LogType.FOOD, {"mealType": "breakfast", "description": "粥"}, 7),
    _merged("Wife", "weight", LogType.WEIGHT, {"weight": 55.0}, 8),
    _merged("Me", "sleep", LogType.SLEEP, "23:00-07:00", 10),
]


def test_sort_feed_by_time_newest_first() -> None:
    """Test time ordering."""
    ids = [log.id for log in sort_feed(FEED, FeedSortMode.TIME, "Me")]

    if ids != ["dinner", "sleep", "water", "weight", "breakfast"]:
        raise AssertionError(f"Unexpected order {ids}")


def test_sort_feed_by_category_orders_meals_by_slot() -> None:
    """Test category ordering, with meals ranked by slot."""
    ids = [log.id for log in sort_feed(FEED, "category", "Me")]

    if ids != ["weight", "breakfast", "dinner", "water", "sleep"]:
        raise AssertionError(f"Unexpected order {ids}")


def test_sort_feed_current_user_first() -> None:
    """Test user_category ordering."""
    ids = [log.id for log in sort_feed(FEED, FeedSortMode.USER_CATEGORY, "Wife")]

    if ids != ["weight", "water", "breakfast", "dinner", "sleep"]:
        raise AssertionError(f"Unexpected order {ids}")


def test_overview_includes_previous_day_and_water_progress() -> None:
    """Test the overview of a day with a one-day lookback."""
    repository, _, _ = make_repository(now=ms(2024, 1, 15, 21))
    config = processing_config()
    service = DailyOverviewService(
        DailyAggregator(repository, config), SummaryCalculator(), config
    )

    repository.save(
        "Me",
        [
            build_log_record("y", ms(2024, 1, 14, 9), LogType.WATER, 800),
            build_log_record("t1", ms(2024, 1, 15, 9), LogType.WATER, 1500),
            build_log_record("t2", ms(2024, 1, 15, 15), LogType.WATER, 1000),
            build_log_record(
                "lu", ms(2024, 1, 15, 12), LogType.FOOD, {"mealType": "lunch", "description": "面"}
            ),
        ],
    )

    overview = service.build(date(2024, 1, 15), USERS, "Me", FeedSortMode.TIME)

    if [log.id for log in overview.feed] != ["t2", "lu", "t1"]:
        raise AssertionError(f"Unexpected feed {[log.id for log in overview.feed]}")
    if overview.summaries["Me"].water_sum != 2500:
        raise AssertionError(f"Unexpected today water {overview.summaries['Me'].water_sum}")
    if overview.previous_summaries["Me"].water_sum != 800:
        raise AssertionError("Expected yesterday's 800ml")
    if overview.water.percentage != 100:
        raise AssertionError(f"Expected capped 100%, got {overview.water.percentage}")
    if list(overview.recorded_meals) != ["lunch"]:
        raise AssertionError(f"Unexpected recorded meals {list(overview.recorded_meals)}")
