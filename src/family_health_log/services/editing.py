"""
Edit operations on a user's stored logs.

Records are addressed by their exact timestamp, as shown in the day feed.
Every successful edit rewrites the user's whole partition.
"""

import logging
import re
from datetime import date

from family_health_log.domain.log_record import FoodLog, LogRecord, MealType
from family_health_log.services.repository import LogRepository
from family_health_log.utils.exceptions import NotFoundError, ValidationError
from family_health_log.utils.parameters import ProcessingConfig
from family_health_log.utils.timezone_utils import local_date, replace_time_of_day, today

logger = logging.getLogger(__name__)

_TIME_OF_DAY_PATTERN = re.compile(r"^\s*(\d{1,2})\s*:\s*(\d{1,2})\s*$")


def parse_time_of_day(text: str) -> tuple[int, int]:
    """
    Parse an "HH:MM" string.

    Args:
        text: Time of day as typed by the user.

    Returns:
        Tuple of (hours, minutes); ranges are checked by ``validate_time_of_day``.

    Raises:
        ValidationError: If the text is not of the form HH:MM.
    """
    match = _TIME_OF_DAY_PATTERN.match(text or "")
    if not match:
        raise ValidationError(f"Invalid time format {text!r}, expected HH:MM")
    return int(match.group(1)), int(match.group(2))


def validate_time_of_day(hours: int, minutes: int) -> None:
    """
    Check hour and minute ranges.

    Raises:
        ValidationError: If hours is outside [0, 23] or minutes outside [0, 59].
    """
    if not 0 <= hours <= 23:
        raise ValidationError(f"Hours must be between 0 and 23, got {hours}")
    if not 0 <= minutes <= 59:
        raise ValidationError(f"Minutes must be between 0 and 59, got {minutes}")


class LogEditor:
    """Service for deleting, retiming and clearing stored logs."""

    def __init__(self, repository: LogRepository, config: ProcessingConfig | None = None) -> None:
        """
        Initialize log editor.

        Args:
            repository: Log repository owning the partitions.
            config: Processing configuration (for the local timezone).
        """
        self.repository = repository
        self.config = config or ProcessingConfig()

    def delete_log(self, user: str, timestamp: int) -> bool:
        """
        Delete the first record with the given timestamp.

        Deleting a missing record is a no-op, so repeated calls are safe.

        Args:
            user: Owner of the record.
            timestamp: Exact timestamp of the record in milliseconds.

        Returns:
            True if a record was removed.
        """
        logs = self.repository.read(user)

        for index, log in enumerate(logs):
            if log.timestamp == timestamp:
                removed = logs.pop(index)
                self.repository.save(user, logs)
                logger.info(f"Deleted {removed.type} record {removed.id} of {user}")
                return True

        logger.debug(f"No record of {user} at {timestamp}; nothing deleted")
        return False

    def modify_log_time(self, user: str, timestamp: int, hours: int, minutes: int) -> LogRecord:
        """
        Move a record to a new time of day on its original date.

        Args:
            user: Owner of the record.
            timestamp: Exact timestamp of the record in milliseconds.
            hours: New local hour.
            minutes: New local minute.

        Returns:
            The updated record.

        Raises:
            ValidationError: If the time is out of range; nothing is changed.
            NotFoundError: If no record has the given timestamp.
        """
        validate_time_of_day(hours, minutes)

        logs = self.repository.read(user)
        target = next((log for log in logs if log.timestamp == timestamp), None)
        if target is None:
            raise NotFoundError(f"No record of {user} at timestamp {timestamp}")

        target.timestamp = replace_time_of_day(timestamp, hours, minutes, self.config.timezone)
        logs.sort(key=lambda log: log.timestamp)

        self.repository.save(user, logs)
        logger.info(f"Moved {target.type} record {target.id} of {user} to {hours:02d}:{minutes:02d}")
        return target

    def find_meal(self, logs: list[LogRecord], meal_type: MealType | str, day: date) -> int | None:
        """Return the index of the first food record for a meal slot on a day."""
        try:
            slot = MealType(meal_type).value
        except ValueError as e:
            raise ValidationError(f"Unknown meal type {meal_type!r}") from e

        for index, log in enumerate(logs):
            if (
                isinstance(log, FoodLog)
                and log.val.meal_type == slot
                and local_date(log.timestamp, self.config.timezone) == day
            ):
                return index
        return None

    def edit_meal(self, user: str, meal_type: MealType | str, day: date | None = None) -> bool:
        """
        Remove a meal record so the meal can be entered again.

        Args:
            user: Owner of the record.
            meal_type: Meal slot.
            day: Local day, defaults to today.

        Returns:
            True if a record was removed.
        """
        day = day or today(self.config.timezone, self.repository.clock())
        logs = self.repository.read(user)

        index = self.find_meal(logs, meal_type, day)
        if index is None:
            logger.debug(f"No {meal_type} recorded by {user} on {day}")
            return False

        removed = logs.pop(index)
        self.repository.save(user, logs)
        logger.info(f"Removed meal record {removed.id} of {user} for re-entry")
        return True

    def clear_user(self, user: str) -> None:
        """
        Delete every record of a user.

        Args:
            user: User whose partition is emptied.
        """
        self.repository.save(user, [])
        logger.warning(f"Cleared all logs of {user}")
