"""Key-value byte stores backing the product collection."""

import os
import tempfile
from pathlib import Path
from typing import Dict, Optional

from ..utils.exceptions import QuotaExceededError, WriteFailedError
from ..utils.logger import get_storage_logger

DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024


class KeyValueStore:
    """Base key-value store with a total size quota.

    Subclasses implement ``_read``, ``_write``, ``_delete`` and ``_sizes``;
    quota enforcement lives here so every backend fails the same way.
    """

    def __init__(self, quota_bytes: int = DEFAULT_QUOTA_BYTES):
        self.quota_bytes = quota_bytes
        self.logger = get_storage_logger()

    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""
        return self._read(key)

    def set(self, key: str, value: str):
        """
        Store a value under a key.

        Raises:
            QuotaExceededError: If the store would grow beyond its quota
            WriteFailedError: If the backend cannot write
        """
        encoded = value.encode("utf-8")
        others = sum(size for k, size in self._sizes().items() if k != key)
        required = others + len(encoded)

        if required > self.quota_bytes:
            raise QuotaExceededError(
                "Storage quota exceeded",
                details={"key": key, "required": required, "quota": self.quota_bytes}
            )

        self._write(key, encoded)
        self.logger.debug(f"Stored {len(encoded)} bytes under '{key}'")

    def remove(self, key: str):
        """Delete a key. Missing keys are ignored."""
        self._delete(key)

    def usage_bytes(self) -> int:
        """Total bytes currently stored."""
        return sum(self._sizes().values())

    def _read(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def _write(self, key: str, data: bytes):
        raise NotImplementedError

    def _delete(self, key: str):
        raise NotImplementedError

    def _sizes(self) -> Dict[str, int]:
        raise NotImplementedError


class MemoryKeyValueStore(KeyValueStore):
    """Process-local store."""

    def __init__(self, quota_bytes: int = DEFAULT_QUOTA_BYTES):
        super().__init__(quota_bytes)
        self._data: Dict[str, bytes] = {}

    def _read(self, key: str) -> Optional[str]:
        data = self._data.get(key)
        return data.decode("utf-8") if data is not None else None

    def _write(self, key: str, data: bytes):
        self._data[key] = data

    def _delete(self, key: str):
        self._data.pop(key, None)

    def _sizes(self) -> Dict[str, int]:
        return {key: len(data) for key, data in self._data.items()}


class FileKeyValueStore(KeyValueStore):
    """Store that keeps one file per key inside a directory.

    Writes go to a temporary file in the same directory and are moved into
    place with ``os.replace``, so a reader sees either the old or the new
    value, never a partial one.
    """

    SUFFIX = ".json"

    def __init__(self, directory: str, quota_bytes: int = DEFAULT_QUOTA_BYTES):
        super().__init__(quota_bytes)
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}{self.SUFFIX}"

    def _read(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def _write(self, key: str, data: bytes):
        tmp_name = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                dir=self.directory,
                prefix=f".{key}.",
                suffix=".tmp",
                delete=False
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self._path(key))
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise WriteFailedError(
                f"Failed to write '{key}': {str(e)}",
                details={"key": key, "directory": str(self.directory)}
            )

    def _delete(self, key: str):
        path = self._path(key)
        if path.exists():
            path.unlink()

    def _sizes(self) -> Dict[str, int]:
        if not self.directory.is_dir():
            return {}
        return {
            path.name[:-len(self.SUFFIX)]: path.stat().st_size
            for path in self.directory.glob(f"*{self.SUFFIX}")
            if not path.name.startswith(".")
        }
