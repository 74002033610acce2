"""
Text rendering for the command-line interface.

Implements the ``Presenter`` and ``Notifier`` protocols on top of typer output.
"""

import typer

from family_health_log.domain.log_record import (
    TYPE_NAMES,
    FitnessLog,
    FoodLog,
    LogRecord,
    MealType,
    PeeLog,
    PoopLog,
    SleepLog,
    WaterLog,
    WeightLog,
)
from family_health_log.services.notifications import NotificationLevel
from family_health_log.services.overview import DailyOverview
from family_health_log.utils.parameters import ProcessingConfig, UsersConfig
from family_health_log.utils.timezone_utils import to_local_datetime


def format_number(value: float | int | None) -> str:
    """Format a number without a trailing ``.0``."""
    if value is None:
        return "-"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def describe(record: LogRecord) -> str:
    """Return the one-line description of a record."""
    if isinstance(record, WaterLog):
        return f"喝水 {format_number(record.val)}ml"
    if isinstance(record, FoodLog):
        meal_name = TYPE_NAMES.get(record.val.meal_type, record.val.meal_type)
        return f"{meal_name}: {record.val.description} ({format_number(record.val.calories)} Kcal)"
    if isinstance(record, FitnessLog):
        return (
            f"{record.val.activity} {format_number(record.val.duration)}分钟 "
            f"({format_number(record.val.calories)} Kcal)"
        )
    if isinstance(record, WeightLog):
        return f"体重: {format_number(record.val.weight)}kg, 体脂: {format_number(record.val.body_fat)}%"
    if isinstance(record, SleepLog):
        return f"睡眠: {record.val}"
    if isinstance(record, PeeLog):
        return "记录小便"
    if isinstance(record, PoopLog):
        return "记录大便"
    return record.type


class TyperNotifier:
    """Notifier echoing to the terminal; errors go to stderr."""

    def notify(self, message: str, level: NotificationLevel = NotificationLevel.SUCCESS) -> None:
        typer.echo(message, err=level == NotificationLevel.ERROR)


class TextPresenter:
    """Presenter writing a daily overview as plain text."""

    def __init__(self, users_config: UsersConfig, processing_config: ProcessingConfig) -> None:
        self.users_config = users_config
        self.processing_config = processing_config

    def render(self, overview: DailyOverview) -> None:
        label = self.users_config.label_for(overview.current_user)
        typer.echo(f"=== {overview.day.isoformat()} ({label}) ===")

        water = overview.water
        typer.echo(
            f"喝水: {format_number(water.total_ml)} / {water.goal_ml} ml ({round(water.percentage)}%)"
        )

        for meal in MealType:
            record = overview.recorded_meals.get(meal.value)
            if record:
                status = f"{record.val.description} ({format_number(record.val.calories)} Kcal)"
            else:
                status = "未记录"
            typer.echo(f"  {TYPE_NAMES[meal.value]}: {status}")

        typer.echo(f"\n--- 记录 ({overview.sort_mode.value}) ---")
        if not overview.feed:
            typer.echo("  (无记录)")
        for log in overview.feed:
            time_str = to_local_datetime(log.timestamp, self.processing_config.timezone).strftime("%H:%M")
            user_label = self.users_config.label_for(log.original_user)
            typer.echo(f"  {time_str} [{user_label}] {describe(log.record)}  #{log.timestamp}")

        typer.echo("\n--- 汇总 (今天 / 昨天) ---")
        for user, today in overview.summaries.items():
            yesterday = overview.previous_summaries.get(user)
            typer.echo(f"{self.users_config.label_for(user)}:")
            typer.echo(
                f"  喝水: {format_number(today.water_sum)} ml"
                f" / {format_number(yesterday.water_sum if yesterday else None)} ml"
            )
            typer.echo(
                f"  热量: {format_number(today.calorie_sum)}"
                f" / {format_number(yesterday.calorie_sum if yesterday else None)}"
            )
            typer.echo(f"  小便/大便: {today.pee_count} / {today.poop_count}")
