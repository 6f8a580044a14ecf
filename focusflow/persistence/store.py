"""Key-value persistence layer: one JSON document per key."""

import copy
import json
import os
import re
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

import structlog

from ..errors import StorageFailure

_KEY_PATTERN = re.compile(r"[^a-zA-Z0-9_-]")


class KeyValueStore(ABC):
    """Durable key-value storage.

    ``get`` returns ``default`` for missing or unreadable keys; ``set`` and
    ``delete`` report success as a bool. Failures are logged, never raised.
    """

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> bool:
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        pass

    @abstractmethod
    def get_all(self) -> dict[str, Any]:
        pass


class JsonFileStore(KeyValueStore):
    """Stores each key as ``<data_dir>/<key>.json`` with atomic replacement."""

    def __init__(self, data_dir: str):
        self.data_dir = Path(data_dir).expanduser()
        self.logger = structlog.get_logger("focusflow.store")
        self._lock = threading.Lock()
        self._ensure_directory()

    def _ensure_directory(self) -> None:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self.logger.error("Could not create data directory", data_dir=str(self.data_dir), error=str(e))

    def _get_file_path(self, key: str) -> Optional[Path]:
        """Map a key to its file, stripping anything that could escape the directory."""
        sanitized = _KEY_PATTERN.sub("", key)
        if not sanitized:
            return None
        return self.data_dir / f"{sanitized}.json"

    def get(self, key: str, default: Any = None) -> Any:
        try:
            return self._read(key, default)
        except StorageFailure as e:
            self.logger.error("Store read error", key=key, error=str(e))
            return default

    def set(self, key: str, value: Any) -> bool:
        try:
            self._write(key, value)
            return True
        except StorageFailure as e:
            self.logger.error("Store write error", key=key, error=str(e))
            return False

    def delete(self, key: str) -> bool:
        try:
            self._remove(key)
            return True
        except StorageFailure as e:
            self.logger.error("Store delete error", key=key, error=str(e))
            return False

    def get_all(self) -> dict[str, Any]:
        try:
            paths = sorted(self.data_dir.glob("*.json"))
        except OSError as e:
            self.logger.error("Store list error", error=str(e))
            return {}
        return {path.stem: self.get(path.stem) for path in paths}

    def _read(self, key: str, default: Any) -> Any:
        file_path = self._get_file_path(key)
        if file_path is None:
            raise StorageFailure(f"Invalid key: {key!r}", operation="read", key=key)

        if not file_path.exists():
            return default

        try:
            with open(file_path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise StorageFailure(str(e), operation="read", key=key) from e

    def _write(self, key: str, value: Any) -> None:
        file_path = self._get_file_path(key)
        if file_path is None:
            raise StorageFailure(f"Invalid key: {key!r}", operation="write", key=key)

        tmp_path = file_path.with_name(file_path.name + ".tmp")
        try:
            data = json.dumps(value, indent=2)
            with self._lock:
                with open(tmp_path, "w", encoding="utf-8") as f:
                    f.write(data)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, file_path)
        except (OSError, TypeError, ValueError) as e:
            tmp_path.unlink(missing_ok=True)
            raise StorageFailure(str(e), operation="write", key=key) from e

    def _remove(self, key: str) -> None:
        file_path = self._get_file_path(key)
        if file_path is None:
            raise StorageFailure(f"Invalid key: {key!r}", operation="delete", key=key)

        try:
            file_path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageFailure(str(e), operation="delete", key=key) from e


class MemoryStore(KeyValueStore):
    """In-process store, used by tests and ephemeral sessions."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            if key not in self._data:
                return default
            return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> bool:
        with self._lock:
            self._data[key] = copy.deepcopy(value)
        return True

    def delete(self, key: str) -> bool:
        with self._lock:
            self._data.pop(key, None)
        return True

    def get_all(self) -> dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._data)
