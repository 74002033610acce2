"""
Key-value stores for per-user log partitions.

Values are opaque strings. ``set`` raises ``OSError`` on failure and never
leaves a partially written value behind.
"""

import errno
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable
from urllib.parse import quote

from family_health_log.utils.parameters import StorageConfig

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """Durable string store addressed by key."""

    def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""

    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""


class InMemoryKeyValueStore:
    """
    Dictionary-backed store.

    An optional quota on the total stored size emulates the storage limits of
    a browser; exceeding it raises ``OSError`` and keeps the previous value.
    """

    def __init__(self, quota_bytes: int | None = None) -> None:
        self.quota_bytes = quota_bytes
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            used = sum(
                len(k.encode("utf-8")) + len(v.encode("utf-8"))
                for k, v in self._data.items()
                if k != key
            )
            needed = len(key.encode("utf-8")) + len(value.encode("utf-8"))
            if used + needed > self.quota_bytes:
                raise OSError(errno.ENOSPC, f"Storage quota of {self.quota_bytes} bytes exceeded")
        self._data[key] = value


class JsonFileKeyValueStore:
    """
    Store keeping one file per key in a data directory.

    Writes go to a temporary file in the same directory which is then renamed
    over the target, so readers see either the old or the new value.
    """

    def __init__(self, data_dir: str | Path, suffix: str = ".json") -> None:
        """
        Initialize file store.

        Args:
            data_dir: Directory holding one file per key.
            suffix: File name suffix.
        """
        self.data_dir = Path(data_dir)
        self.suffix = suffix

    def _path_for(self, key: str) -> Path:
        return self.data_dir / f"{quote(key, safe='')}{self.suffix}"

    def get(self, key: str) -> str | None:
        path = self._path_for(key)
        if not path.exists():
            return None

        with open(path, encoding="utf-8") as f:
            return f.read()

    def set(self, key: str, value: str) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self._path_for(key)

        fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=".tmp-", suffix=self.suffix)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug(f"Wrote {len(value)} characters to {path}")


def create_store(config: StorageConfig) -> KeyValueStore:
    """
    Create the key-value store selected by configuration.

    Args:
        config: Storage configuration.

    Returns:
        Key-value store instance.
    """
    if config.backend == "memory":
        logger.warning("Using in-memory storage; logs will not survive this process")
        return InMemoryKeyValueStore()

    return JsonFileKeyValueStore(config.data_dir)
