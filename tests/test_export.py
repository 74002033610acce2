"""Unit tests for the CSV export service."""

import json
from pathlib import Path

import pandas as pd

from family_health_log.domain.log_record import LogType, build_log_record
from family_health_log.services.export import EXPORT_COLUMNS, ExportService
from family_health_log.utils.parameters import ExportConfig, UsersConfig
from helpers import USERS, make_repository, ms, processing_config


def test_export_writes_one_row_per_record(tmp_path: Path) -> None:
    """Test the flattened CSV layout across users."""
    repository, _, _ = make_repository(now=ms(2024, 1, 16))
    repository.save(
        "Me",
        [
            build_log_record("a", ms(2024, 1, 15, 8, 30), LogType.WATER, 500),
            build_log_record(
                "b",
                ms(2024, 1, 15, 12),
                LogType.FOOD,
                {"mealType": "lunch", "description": "面, 汤", "calories": 600},
            ),
        ],
    )
    repository.save("Wife", [build_log_record("c", ms(2024, 1, 14, 7), LogType.PEE, None)])

    service = ExportService(
        repository, ExportConfig(dir=str(tmp_path)), UsersConfig(), processing_config()
    )
    path = service.export_csv(USERS)

    if path is None or not path.exists():
        raise AssertionError(f"Expected an export file, got {path}")

    df = pd.read_csv(path, dtype=str, keep_default_na=False)

    if list(df.columns) != EXPORT_COLUMNS:
        raise AssertionError(f"Unexpected columns {list(df.columns)}")
    if list(df["用户"]) != ["我", "我", "老婆"]:
        raise AssertionError(f"Unexpected users {list(df['用户'])}")

    first = df.iloc[0]
    if (first["日期"], first["时间"], first["类型"], first["数值"]) != (
        "2024-01-15",
        "08:30:00",
        "喝水记录",
        "500",
    ):
        raise AssertionError(f"Unexpected first row {first.to_dict()}")

    meal_value = json.loads(df.iloc[1]["数值"])
    if meal_value != {"mealType": "lunch", "description": "面, 汤", "calories": 600}:
        raise AssertionError(f"Unexpected meal value {meal_value}")


def test_export_without_logs_writes_nothing(tmp_path: Path) -> None:
    """Test that an empty store is reported instead of exported."""
    repository, _, notifier = make_repository()
    service = ExportService(repository, ExportConfig(dir=str(tmp_path)))

    if service.export_csv(USERS) is not None:
        raise AssertionError("Expected no export")
    if list(tmp_path.iterdir()):
        raise AssertionError("No file should be written")
    if len(notifier.errors) != 1:
        raise AssertionError(f"Expected an error notification, got {notifier.errors}")


def test_default_path_uses_clock(tmp_path: Path) -> None:
    """Test the default export file name."""
    repository, _, _ = make_repository(now=1705300000000)
    service = ExportService(repository, ExportConfig(dir=str(tmp_path)))

    if service.default_path() != tmp_path / "health_logs_1705300000000.csv":
        raise AssertionError(f"Unexpected path {service.default_path()}")
