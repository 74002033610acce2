"""
Recording service for new log entries.

Builds typed payloads from user input, applying presence checks only, and
appends them to the user's partition.
"""

import logging

from family_health_log.domain.log_record import (
    FitnessValue,
    FoodValue,
    LogRecord,
    LogType,
    MealType,
    TYPE_NAMES,
    WeightValue,
    calculate_bmi,
)
from family_health_log.services.editing import LogEditor
from family_health_log.services.repository import LogRepository
from family_health_log.utils.exceptions import ValidationError
from family_health_log.utils.parameters import ProcessingConfig
from family_health_log.utils.timezone_utils import today

logger = logging.getLogger(__name__)


class RecordingService:
    """
    Service for recording health events.

    Input errors raise ``ValidationError`` before anything is written.
    """

    def __init__(self, repository: LogRepository, config: ProcessingConfig | None = None) -> None:
        """
        Initialize recording service.

        Args:
            repository: Log repository to append to.
            config: Processing configuration (timezone, default height).
        """
        self.repository = repository
        self.config = config or ProcessingConfig()
        self._editor = LogEditor(repository, self.config)

    def _record(self, user: str, log_type: LogType, value: object) -> list[LogRecord]:
        logs = self.repository.append(user, log_type, value)
        self.repository.notifier.notify(f"已记录 {TYPE_NAMES.get(log_type.value, log_type.value)}")
        return logs

    def add_water(self, user: str, amount_ml: float) -> list[LogRecord]:
        """Record a drink of water in millilitres."""
        if not amount_ml or amount_ml <= 0:
            raise ValidationError("Water amount must be a positive number of ml")
        return self._record(user, LogType.WATER, amount_ml)

    def add_meal(
        self,
        user: str,
        meal_type: MealType | str,
        description: str,
        calories: int | None = None,
    ) -> list[LogRecord]:
        """
        Record a meal.

        Each meal slot can be recorded once per day; use ``LogEditor.edit_meal``
        to clear it first.

        Args:
            user: User eating the meal.
            meal_type: Breakfast, lunch or dinner.
            description: What was eaten.
            calories: Energy in kcal, 0 if unknown.

        Returns:
            The updated log list.

        Raises:
            ValidationError: If the description is blank or the meal is already recorded today.
        """
        description = (description or "").strip()
        if not description:
            raise ValidationError("请输入食物内容")

        day = today(self.config.timezone, self.repository.clock())
        if self._editor.find_meal(self.repository.read(user), meal_type, day) is not None:
            raise ValidationError(f"{MealType(meal_type).value} already recorded today; edit it first")

        value = FoodValue(meal_type=meal_type, description=description, calories=calories or 0)
        return self._record(user, LogType.FOOD, value)

    def add_weight(self, user: str, weight: float | None, body_fat: float | None = None) -> list[LogRecord]:
        """
        Record a weigh-in, computing BMI from the configured height.

        Raises:
            ValidationError: If the weight is missing or not positive.
        """
        if not weight or weight <= 0:
            raise ValidationError("请输入体重")

        bmi = calculate_bmi(weight, self.config.default_height_m)
        value = WeightValue(weight=weight, body_fat=body_fat, bmi=bmi)
        logger.debug(f"BMI for {user}: {bmi}")
        return self._record(user, LogType.WEIGHT, value)

    def add_sleep(self, user: str, sleep_time: str) -> list[LogRecord]:
        """Record last night's sleep as a free-text time range."""
        sleep_time = (sleep_time or "").strip()
        if not sleep_time:
            raise ValidationError("请输入睡眠时间")
        return self._record(user, LogType.SLEEP, sleep_time)

    def add_fitness(
        self,
        user: str,
        activity: str,
        duration: float | None,
        calories: float | None = None,
    ) -> list[LogRecord]:
        """
        Record a workout.

        Raises:
            ValidationError: If the activity is blank or the duration is missing.
        """
        activity = (activity or "").strip()
        if not activity:
            raise ValidationError("Fitness activity is required")
        if not duration or duration <= 0:
            raise ValidationError("Fitness duration must be a positive number of minutes")

        value = FitnessValue(activity=activity, duration=duration, calories=calories)
        return self._record(user, LogType.FITNESS, value)

    def add_pee(self, user: str) -> list[LogRecord]:
        return self._record(user, LogType.PEE, None)

    def add_poop(self, user: str) -> list[LogRecord]:
        return self._record(user, LogType.POOP, None)
