"""Unit tests for the log repository."""

import json

import pytest

from family_health_log.domain.log_record import (
    FoodValue,
    LogType,
    WaterLog,
    WeightValue,
    build_log_record,
)
from family_health_log.utils.exceptions import StorageReadError, StorageWriteError, ValidationError
from helpers import make_repository, ms


def test_load_missing_partition_is_empty() -> None:
    """Test that a user with nothing stored has no logs."""
    repository, _, notifier = make_repository()

    logs = repository.load("Me")

    if logs != []:
        raise AssertionError(f"Expected empty list, got {logs}")
    if notifier.errors:
        raise AssertionError(f"Expected no errors, got {notifier.errors}")


def test_save_load_round_trip() -> None:
    """Test that saved logs load back unchanged."""
    repository, _, _ = make_repository()

    logs = [
        build_log_record("a", ms(2024, 1, 15, 8), LogType.WATER, 500),
        build_log_record(
            "b",
            ms(2024, 1, 15, 9),
            LogType.FOOD,
            {"mealType": "breakfast", "description": "粥", "calories": 300},
        ),
        build_log_record(
            "c", ms(2024, 1, 15, 10), LogType.WEIGHT, {"weight": 70.0, "bodyFat": None, "bmi": "22.9"}
        ),
        build_log_record("d", ms(2024, 1, 15, 11), LogType.SLEEP, "23:00-07:00"),
        build_log_record(
            "e", ms(2024, 1, 15, 18), LogType.FITNESS, {"type": "跑步", "duration": 30, "calories": None}
        ),
        build_log_record("f", ms(2024, 1, 15, 19), LogType.PEE, None),
        build_log_record("g", ms(2024, 1, 15, 20), LogType.POOP, None),
    ]

    repository.save("Me", logs)
    loaded = repository.load("Me")

    if loaded != logs:
        raise AssertionError(f"Round trip changed logs: {loaded}")


def test_persisted_layout_uses_original_keys() -> None:
    """Test the stored JSON layout: prefixed key, val field, camelCase payload."""
    repository, _, _ = make_repository()
    value = FoodValue(meal_type="lunch", description="面", calories=600)

    repository.save("Wife", [build_log_record("x", ms(2024, 1, 15), LogType.FOOD, value)])

    raw = repository.store.get("healthLogs_Wife")
    if raw is None:
        raise AssertionError("Expected logs stored under healthLogs_Wife")

    stored = json.loads(raw)
    expected = {
        "id": "x",
        "timestamp": ms(2024, 1, 15),
        "type": "food",
        "val": {"mealType": "lunch", "description": "面", "calories": 600},
    }
    if stored != [expected]:
        raise AssertionError(f"Unexpected stored layout: {stored}")


def test_load_corrupt_partition_substitutes_empty_list() -> None:
    """Test that corrupt data yields an empty list and a user notification."""
    repository, _, notifier = make_repository()
    repository.store.set("healthLogs_Me", "{not json")

    logs = repository.load("Me")

    if logs != []:
        raise AssertionError(f"Expected empty list, got {logs}")
    if len(notifier.errors) != 1:
        raise AssertionError(f"Expected one error notification, got {notifier.errors}")
    if repository.store.get("healthLogs_Me") != "{not json":
        raise AssertionError("Corrupt data should be left in place")


def test_read_corrupt_partition_raises() -> None:
    """Test that strict reads surface StorageReadError."""
    repository, _, _ = make_repository()
    repository.store.set("healthLogs_Me", json.dumps([{"id": "a", "type": "water"}]))

    with pytest.raises(StorageReadError) as exc_info:
        repository.read("Me")

    if exc_info.value.user != "Me":
        raise AssertionError(f"Expected error for Me, got {exc_info.value.user}")


def test_append_assigns_id_and_clock_timestamp() -> None:
    """Test that append stamps new records with a fresh id and the current time."""
    repository, clock, _ = make_repository(now=ms(2024, 1, 15, 8))

    repository.append("Me", LogType.WATER, 500)
    clock.now = ms(2024, 1, 15, 9)
    logs = repository.append("Me", LogType.WATER, 700)

    if len(logs) != 2:
        raise AssertionError(f"Expected 2 logs, got {len(logs)}")
    if logs[1].timestamp != ms(2024, 1, 15, 9):
        raise AssertionError(f"Unexpected timestamp {logs[1].timestamp}")
    if logs[0].id == logs[1].id:
        raise AssertionError("Expected distinct ids")
    if not isinstance(logs[0], WaterLog):
        raise AssertionError(f"Expected WaterLog, got {type(logs[0])}")
    if repository.load("Me") != logs:
        raise AssertionError("Appended logs were not persisted")


def test_append_rejects_mismatched_payload() -> None:
    """Test that a payload not matching its type is rejected before writing."""
    repository, _, _ = make_repository()

    with pytest.raises(ValidationError):
        repository.append("Me", LogType.WEIGHT, "heavy")

    if repository.store.get("healthLogs_Me") is not None:
        raise AssertionError("Nothing should be written for an invalid payload")


def test_append_does_not_overwrite_corrupt_partition() -> None:
    """Test that appending to a corrupt partition fails without touching it."""
    repository, _, _ = make_repository()
    repository.store.set("healthLogs_Me", "garbage")

    with pytest.raises(StorageReadError):
        repository.append("Me", LogType.PEE, None)

    if repository.store.get("healthLogs_Me") != "garbage":
        raise AssertionError("Corrupt partition should be preserved")


def test_save_failure_keeps_previous_state() -> None:
    """Test that a failed write raises and leaves the stored list intact."""
    repository, _, notifier = make_repository(quota_bytes=400)
    first = [build_log_record("a", ms(2024, 1, 15), LogType.WATER, 500)]
    repository.save("Me", first)

    too_big = first + [
        build_log_record(
            f"w{i}", ms(2024, 1, 15, 13), LogType.WEIGHT, WeightValue(weight=70.0, bmi="22.9")
        )
        for i in range(10)
    ]

    with pytest.raises(StorageWriteError):
        repository.save("Me", too_big)

    if repository.load("Me") != first:
        raise AssertionError("Previous logs should survive a failed write")
    if len(notifier.errors) != 1:
        raise AssertionError(f"Expected one error notification, got {notifier.errors}")


def test_load_all_tags_owner_in_roster_order() -> None:
    """Test that load_all tags every record with its user."""
    repository, _, _ = make_repository()
    repository.save("Wife", [build_log_record("w", ms(2024, 1, 14), LogType.PEE, None)])
    repository.save("Me", [build_log_record("m", ms(2024, 1, 15), LogType.POOP, None)])

    tagged = repository.load_all(["Me", "Wife", "Family"])

    owners = [(log.original_user, log.id) for log in tagged]
    if owners != [("Me", "m"), ("Wife", "w")]:
        raise AssertionError(f"Unexpected tagging {owners}")
