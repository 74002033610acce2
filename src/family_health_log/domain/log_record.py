"""
Log record domain models and canonical schema.

A log record is a tagged union over its ``type``: each variant carries its own
strongly-typed payload under ``val``. Records are persisted as
``{id, timestamp, type, val}`` with camelCase payload keys.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class LogType(str, Enum):
    """Enumeration of log record types."""

    WATER = "water"
    FOOD = "food"
    FITNESS = "fitness"
    WEIGHT = "weight"
    SLEEP = "sleep"
    PEE = "pee"
    POOP = "poop"


class MealType(str, Enum):
    """Enumeration of meal slots."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"


# Only the latest same-day entry of these types is visible in day views.
DAILY_UNIQUE_TYPES: tuple[LogType, ...] = (LogType.WEIGHT, LogType.SLEEP)

TYPE_NAMES: dict[str, str] = {
    "weight": "体重记录",
    "breakfast": "早餐",
    "lunch": "午餐",
    "dinner": "晚餐",
    "fitness": "运动记录",
    "water": "喝水记录",
    "pee": "小便",
    "poop": "大便",
    "sleep": "睡眠记录",
    "food": "饮食记录",
    "food_breakfast": "早餐",
    "food_lunch": "午餐",
    "food_dinner": "晚餐",
}

LOG_SORT_ORDER: dict[str, int] = {
    "weight": 10,
    "food_breakfast": 20,
    "food_lunch": 30,
    "food_dinner": 40,
    "fitness": 50,
    "water": 60,
    "pee": 70,
    "poop": 71,
    "sleep": 80,
}

DEFAULT_SORT_RANK = 99


class FoodValue(BaseModel):
    """Payload of a meal record."""

    meal_type: MealType = Field(alias="mealType")
    description: str
    calories: int | float = 0

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)


class FitnessValue(BaseModel):
    """Payload of a workout record."""

    activity: str = Field(alias="type", description="Activity name, e.g. running")
    duration: int | float = Field(description="Duration in minutes")
    calories: int | float | None = Field(None, description="Burned kcal, if known")

    model_config = ConfigDict(populate_by_name=True)


class WeightValue(BaseModel):
    """Payload of a weigh-in record."""

    weight: float = Field(description="Weight in kilograms")
    body_fat: float | None = Field(None, alias="bodyFat", description="Body fat percentage")
    bmi: str = Field("N/A", description="BMI with one decimal, or N/A")

    model_config = ConfigDict(populate_by_name=True)


class _BaseLogRecord(BaseModel):
    id: str = Field(description="Unique record identifier")
    timestamp: int = Field(description="Event time in milliseconds since the epoch")

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)


class WaterLog(_BaseLogRecord):
    type: Literal["water"] = "water"
    val: int | float = Field(description="Water intake in millilitres")


class FoodLog(_BaseLogRecord):
    type: Literal["food"] = "food"
    val: FoodValue


class FitnessLog(_BaseLogRecord):
    type: Literal["fitness"] = "fitness"
    val: FitnessValue


class WeightLog(_BaseLogRecord):
    type: Literal["weight"] = "weight"
    val: WeightValue


class SleepLog(_BaseLogRecord):
    type: Literal["sleep"] = "sleep"
    val: str = Field(description="Free-text sleep time range")


class PeeLog(_BaseLogRecord):
    type: Literal["pee"] = "pee"
    val: Any = None  # presence is the event


class PoopLog(_BaseLogRecord):
    type: Literal["poop"] = "poop"
    val: Any = None  # presence is the event


LogRecord = Annotated[
    Union[WaterLog, FoodLog, FitnessLog, WeightLog, SleepLog, PeeLog, PoopLog],
    Field(discriminator="type"),
]

LOG_RECORD_ADAPTER = TypeAdapter(LogRecord)
LOG_LIST_ADAPTER = TypeAdapter(list[LogRecord])


def build_log_record(log_id: str, timestamp: int, log_type: LogType | str, value: Any) -> LogRecord:
    """
    Build a validated log record of the given type.

    Args:
        log_id: Unique record identifier.
        timestamp: Event time in milliseconds.
        log_type: Record type.
        value: Type-dependent payload (model instance or plain data).

    Returns:
        Log record variant matching ``log_type``.
    """
    type_value = log_type.value if isinstance(log_type, LogType) else log_type
    return LOG_RECORD_ADAPTER.validate_python(
        {"id": log_id, "timestamp": timestamp, "type": type_value, "val": value}
    )


def log_to_dict(record: LogRecord) -> dict[str, Any]:
    """Convert a log record to its persisted JSON-compatible form."""
    return record.model_dump(mode="json", by_alias=True)


def category_key(record: LogRecord) -> str:
    """Return the category sort key of a record; meals sort by slot."""
    if isinstance(record, FoodLog):
        return f"food_{record.val.meal_type}"
    return record.type


def display_name(record: LogRecord) -> str:
    """Return the display name of a record's type."""
    return TYPE_NAMES.get(category_key(record), TYPE_NAMES.get(record.type, record.type))


def calculate_bmi(weight: float | None, height: float | None = 1.75) -> str:
    """
    Calculate body mass index.

    Args:
        weight: Weight in kilograms.
        height: Height in metres.

    Returns:
        BMI with one decimal, or "N/A" if either input is missing or not positive.
    """
    if not weight or weight <= 0 or not height or height <= 0:
        return "N/A"
    return f"{weight / (height * height):.1f}"


class MergedLogRecord(BaseModel):
    """
    A log record tagged with the user whose partition it came from.

    Produced only by aggregation, never persisted.
    """

    record: LogRecord
    original_user: str

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def timestamp(self) -> int:
        return self.record.timestamp

    @property
    def type(self) -> str:
        return self.record.type

    @property
    def val(self) -> Any:
        return self.record.val


class DaySummary(BaseModel):
    """Per-user numeric summary of one day, recomputed on demand."""

    water_sum: float = 0
    calorie_sum: float = 0
    pee_count: int = 0
    poop_count: int = 0
    # Never incremented by the daily fold; kept for schema compatibility.
    fitness_count: int = 0
