"""Device-local key/value storage.

Mirrors what a browser's localStorage offers a storefront: string values
under string keys, a byte quota shared by all keys, and synchronous
failures. When a directory is configured the contents are written to one
JSON file per device, replaced atomically on every change.
"""

import json
import os
import tempfile
import threading
from pathlib import Path

import structlog

from ordering.errors import PersistenceError, StorageQuotaExceeded
from ordering.settings import DEFAULT_QUOTA_BYTES

logger = structlog.get_logger(__name__)


class DeviceStorage:
    def __init__(self, device_id: str, directory: str | Path | None = None, quota_bytes: int = DEFAULT_QUOTA_BYTES):
        self.device_id = str(device_id)
        self.quota_bytes = quota_bytes
        self._lock = threading.RLock()
        self._path = Path(directory) / f"{self.device_id}.json" if directory else None
        self._items: dict[str, str] | None = None

    # -------------------------------------------------------------------
    # Key/value API
    # -------------------------------------------------------------------
    def get_item(self, key: str) -> str | None:
        with self._lock:
            return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise PersistenceError(f"Device storage only holds strings, got {type(value).__name__} for {key!r}")
        with self._lock:
            items = dict(self._load())
            items[key] = value
            required = self._size_of(items)
            if required > self.quota_bytes:
                logger.warning(
                    "Device storage quota exceeded",
                    device_id=self.device_id,
                    key=key,
                    required=required,
                    quota=self.quota_bytes,
                )
                raise StorageQuotaExceeded(key, required, self.quota_bytes)
            self._flush(items)
            self._items = items

    def remove_item(self, key: str) -> None:
        with self._lock:
            items = dict(self._load())
            if items.pop(key, None) is not None:
                self._flush(items)
                self._items = items

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._load())

    def clear(self) -> None:
        with self._lock:
            self._flush({})
            self._items = {}

    @property
    def usage_bytes(self) -> int:
        with self._lock:
            return self._size_of(self._load())

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------
    @staticmethod
    def _size_of(items: dict[str, str]) -> int:
        # localStorage counts UTF-16 code units; two bytes each
        return sum(len(k) + len(v) for k, v in items.items()) * 2

    def _load(self) -> dict[str, str]:
        if self._items is not None:
            return self._items
        if self._path is None or not self._path.exists():
            self._items = {}
            return self._items
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise PersistenceError(f"Device storage at {self._path} is unreadable", cause=exc) from exc
        if not isinstance(data, dict) or not all(isinstance(v, str) for v in data.values()):
            raise PersistenceError(f"Device storage at {self._path} is not a string map")
        self._items = data
        return self._items

    def _flush(self, items: dict[str, str]) -> None:
        if self._path is None:
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self.device_id}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(items, fh)
                os.replace(tmp, self._path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except OSError as exc:
            logger.error("Device storage write failed", device_id=self.device_id, path=str(self._path), error=str(exc))
            raise PersistenceError(f"Could not write device storage at {self._path}", cause=exc) from exc
