"""
Command-line interface for Family Health Log.

Provides commands for recording health events, reviewing the day, editing
records and exporting data.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer

from family_health_log.cli.rendering import TextPresenter, TyperNotifier
from family_health_log.domain.log_record import MealType
from family_health_log.infrastructure.storage.key_value_store import create_store
from family_health_log.services.aggregation import DailyAggregator
from family_health_log.services.editing import LogEditor, parse_time_of_day
from family_health_log.services.export import ExportService
from family_health_log.services.overview import DailyOverviewService, FeedSortMode
from family_health_log.services.recording import RecordingService
from family_health_log.services.repository import LogRepository
from family_health_log.services.summary import SummaryCalculator
from family_health_log.utils.exceptions import HealthLogError, NotFoundError, ValidationError
from family_health_log.utils.logging_config import get_logger, setup_logging
from family_health_log.utils.parameters import ParameterLoader
from family_health_log.utils.timezone_utils import parse_date, today

app = typer.Typer(help="Family Health Log - Daily health records for the whole family")

logger = get_logger(__name__)

CONFIG_OPTION = typer.Option("config/config.yaml", help="Path to configuration file")
USER_OPTION = typer.Option(None, help="User to act as (defaults to the configured user)")


class Services:
    """Services wired from one configuration."""

    def __init__(self, param_loader: ParameterLoader) -> None:
        self.users_config = param_loader.get_users_config()
        self.processing_config = param_loader.get_processing_config()

        self.repository = LogRepository(
            create_store(param_loader.get_storage_config()),
            param_loader.get_storage_config(),
            notifier=TyperNotifier(),
        )
        self.aggregator = DailyAggregator(self.repository, self.processing_config)
        self.calculator = SummaryCalculator()
        self.editor = LogEditor(self.repository, self.processing_config)
        self.recorder = RecordingService(self.repository, self.processing_config)
        self.overview = DailyOverviewService(
            self.aggregator, self.calculator, self.processing_config
        )
        self.exporter = ExportService(
            self.repository,
            param_loader.get_export_config(),
            self.users_config,
            self.processing_config,
        )
        self.presenter = TextPresenter(self.users_config, self.processing_config)

    def resolve_user(self, user: str | None) -> str:
        """Return the acting user, checking it against the roster."""
        user = user or self.users_config.default_user
        if user not in self.users_config.roster:
            raise ValidationError(
                f"Unknown user {user!r}; expected one of {', '.join(self.users_config.roster)}"
            )
        return user


def init_config(config_path: str = "config/config.yaml") -> ParameterLoader:
    """
    Initialize configuration and logging.

    Args:
        config_path: Path to configuration file.

    Returns:
        Parameter loader instance.
    """
    param_loader = ParameterLoader(config_path)
    setup_logging(param_loader.get_logging_config(), "family_health_log")
    return param_loader


@contextmanager
def command_errors(action: str) -> Iterator[None]:
    """Report library errors and exit with code 1; missing edit targets are benign."""
    try:
        yield
    except NotFoundError as e:
        logger.info(f"{action}: {e}")
        typer.echo(f"Nothing to do: {e}")
    except HealthLogError as e:
        logger.error(f"{action} failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def water(
    amount: int = typer.Argument(..., help="Amount drunk in ml"),
    user: str | None = USER_OPTION,
    config_path: str = CONFIG_OPTION,
) -> None:
    """Record water intake."""
    with command_errors("Recording water"):
        services = Services(init_config(config_path))
        services.recorder.add_water(services.resolve_user(user), amount)


@app.command()
def meal(
    meal_type: MealType = typer.Argument(..., help="breakfast, lunch or dinner"),
    description: str = typer.Argument(..., help="What was eaten"),
    calories: int | None = typer.Option(None, help="Energy in kcal"),
    user: str | None = USER_OPTION,
    config_path: str = CONFIG_OPTION,
) -> None:
    """Record a meal (once per meal per day)."""
    with command_errors("Recording meal"):
        services = Services(init_config(config_path))
        services.recorder.add_meal(services.resolve_user(user), meal_type, description, calories)


@app.command("edit-meal")
def edit_meal(
    meal_type: MealType = typer.Argument(..., help="breakfast, lunch or dinner"),
    user: str | None = USER_OPTION,
    config_path: str = CONFIG_OPTION,
) -> None:
    """Remove today's record of a meal so it can be entered again."""
    with command_errors("Editing meal"):
        services = Services(init_config(config_path))
        if services.editor.edit_meal(services.resolve_user(user), meal_type):
            typer.echo(f"{meal_type.value} cleared; record it again with 'meal'")
        else:
            typer.echo(f"No {meal_type.value} recorded today")


@app.command()
def weight(
    kilograms: float = typer.Argument(..., help="Weight in kg"),
    body_fat: float | None = typer.Option(None, help="Body fat percentage"),
    user: str | None = USER_OPTION,
    config_path: str = CONFIG_OPTION,
) -> None:
    """Record a weigh-in; only the latest one per day is shown."""
    with command_errors("Recording weight"):
        services = Services(init_config(config_path))
        logs = services.recorder.add_weight(services.resolve_user(user), kilograms, body_fat)
        typer.echo(f"BMI: {logs[-1].val.bmi}")


@app.command()
def sleep(
    sleep_time: str = typer.Argument(..., help="Sleep time range, e.g. '23:00-07:00'"),
    user: str | None = USER_OPTION,
    config_path: str = CONFIG_OPTION,
) -> None:
    """Record sleep; only the latest entry per day is shown."""
    with command_errors("Recording sleep"):
        services = Services(init_config(config_path))
        services.recorder.add_sleep(services.resolve_user(user), sleep_time)


@app.command()
def fitness(
    activity: str = typer.Argument(..., help="Activity, e.g. running"),
    duration: int = typer.Argument(..., help="Duration in minutes"),
    calories: int | None = typer.Option(None, help="Burned kcal"),
    user: str | None = USER_OPTION,
    config_path: str = CONFIG_OPTION,
) -> None:
    """Record a workout."""
    with command_errors("Recording fitness"):
        services = Services(init_config(config_path))
        services.recorder.add_fitness(services.resolve_user(user), activity, duration, calories)


@app.command()
def pee(user: str | None = USER_OPTION, config_path: str = CONFIG_OPTION) -> None:
    """Record a pee."""
    with command_errors("Recording pee"):
        services = Services(init_config(config_path))
        services.recorder.add_pee(services.resolve_user(user))


@app.command()
def poop(user: str | None = USER_OPTION, config_path: str = CONFIG_OPTION) -> None:
    """Record a poop."""
    with command_errors("Recording poop"):
        services = Services(init_config(config_path))
        services.recorder.add_poop(services.resolve_user(user))


@app.command("today")
def show_day(
    date: str | None = typer.Option(None, help="Day to show (defaults to today)"),
    sort: FeedSortMode = typer.Option(FeedSortMode.TIME, help="Feed order"),
    user: str | None = USER_OPTION,
    config_path: str = CONFIG_OPTION,
) -> None:
    """
    Show the merged feed of all users and the daily summaries.

    Weight and sleep show only each user's latest entry of the day.
    """
    with command_errors("Showing day"):
        services = Services(init_config(config_path))
        current_user = services.resolve_user(user)

        try:
            day = parse_date(date) if date else today(services.processing_config.timezone)
        except (ValueError, OverflowError) as e:
            raise ValidationError(f"Invalid date {date!r}") from e

        overview = services.overview.build(day, services.users_config.roster, current_user, sort)
        services.presenter.render(overview)


@app.command()
def delete(
    timestamp: int = typer.Argument(..., help="Timestamp of the record, as shown after '#'"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    user: str | None = USER_OPTION,
    config_path: str = CONFIG_OPTION,
) -> None:
    """Delete a record."""
    with command_errors("Deleting record"):
        services = Services(init_config(config_path))
        acting_user = services.resolve_user(user)

        if not yes and not typer.confirm("确定要删除这条记录吗?"):
            raise typer.Abort()

        if services.editor.delete_log(acting_user, timestamp):
            typer.echo("记录已删除")
        else:
            typer.echo("No matching record; nothing deleted")


@app.command()
def retime(
    timestamp: int = typer.Argument(..., help="Timestamp of the record, as shown after '#'"),
    new_time: str = typer.Argument(..., help="New time of day, HH:MM"),
    user: str | None = USER_OPTION,
    config_path: str = CONFIG_OPTION,
) -> None:
    """Change the time of day of a record, keeping its date."""
    with command_errors("Changing record time"):
        services = Services(init_config(config_path))
        hours, minutes = parse_time_of_day(new_time)
        record = services.editor.modify_log_time(
            services.resolve_user(user), timestamp, hours, minutes
        )
        typer.echo(f"时间已更新 (#{record.timestamp})")


@app.command()
def clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    user: str | None = USER_OPTION,
    config_path: str = CONFIG_OPTION,
) -> None:
    """Delete all records of a user. Cannot be undone."""
    with command_errors("Clearing data"):
        services = Services(init_config(config_path))
        acting_user = services.resolve_user(user)

        if not yes and not typer.confirm(f"确定要清空 {acting_user} 的所有数据吗? 此操作不可撤销。"):
            raise typer.Abort()

        services.editor.clear_user(acting_user)
        typer.echo("数据已清空")


@app.command()
def export(
    output: str | None = typer.Option(None, help="Output CSV path (defaults to the export dir)"),
    config_path: str = CONFIG_OPTION,
) -> None:
    """Export every user's records to CSV."""
    with command_errors("Export"):
        services = Services(init_config(config_path))
        path = services.exporter.export_csv(path=Path(output) if output else None)
        if path:
            typer.echo(f"Exported to {path}")


if __name__ == "__main__":
    app()
