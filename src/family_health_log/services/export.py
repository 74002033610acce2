"""
Export service for writing all users' logs to CSV.

Produces one flattened row per stored record, across the whole roster, with
the payload serialized as JSON.
"""

import json
import logging
from collections.abc import Sequence
from pathlib import Path

import pandas as pd

from family_health_log.domain.log_record import MergedLogRecord, display_name
from family_health_log.services.notifications import NotificationLevel
from family_health_log.services.repository import LogRepository
from family_health_log.utils.parameters import ExportConfig, ProcessingConfig, UsersConfig
from family_health_log.utils.timezone_utils import to_local_datetime

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ["用户", "日期", "时间", "类型", "数值"]


class ExportService:
    """Service for exporting stored logs to a CSV file."""

    def __init__(
        self,
        repository: LogRepository,
        export_config: ExportConfig | None = None,
        users_config: UsersConfig | None = None,
        processing_config: ProcessingConfig | None = None,
    ) -> None:
        """
        Initialize export service.

        Args:
            repository: Log repository to read from.
            export_config: Output location and encoding.
            users_config: Roster and display labels.
            processing_config: Processing configuration (for the local timezone).
        """
        self.repository = repository
        self.export_config = export_config or ExportConfig()
        self.users_config = users_config or UsersConfig()
        self.processing_config = processing_config or ProcessingConfig()

    def to_rows(self, logs: Sequence[MergedLogRecord]) -> pd.DataFrame:
        """
        Flatten tagged records into export rows.

        Args:
            logs: Tagged records.

        Returns:
            DataFrame with the export columns.
        """
        rows = []
        for log in logs:
            local = to_local_datetime(log.timestamp, self.processing_config.timezone)
            value = log.record.model_dump(mode="json", by_alias=True)["val"]
            rows.append(
                {
                    "用户": self.users_config.label_for(log.original_user),
                    "日期": local.strftime("%Y-%m-%d"),
                    "时间": local.strftime("%H:%M:%S"),
                    "类型": display_name(log.record),
                    "数值": json.dumps(value, ensure_ascii=False),
                }
            )

        return pd.DataFrame(rows, columns=EXPORT_COLUMNS)

    def default_path(self) -> Path:
        """Return a fresh export path named after the current time."""
        file_name = self.export_config.file_name.format(timestamp=self.repository.clock())
        return Path(self.export_config.dir) / file_name

    def export_csv(self, users: Sequence[str] | None = None, path: Path | None = None) -> Path | None:
        """
        Write every stored record of the roster to a CSV file.

        Args:
            users: Users to export, defaults to the configured roster.
            path: Output file, defaults to ``default_path()``.

        Returns:
            Path written, or None if there was nothing to export.
        """
        users = list(users) if users is not None else self.users_config.roster
        logs = self.repository.load_all(users)

        if not logs:
            logger.warning("No logs to export")
            self.repository.notifier.notify("没有数据可导出", NotificationLevel.ERROR)
            return None

        output_path = path or self.default_path()
        output_path.parent.mkdir(parents=True, exist_ok=True)

        df = self.to_rows(logs)
        df.to_csv(output_path, index=False, encoding=self.export_config.encoding)

        logger.info(f"Exported {len(df)} logs to {output_path}")
        return output_path
