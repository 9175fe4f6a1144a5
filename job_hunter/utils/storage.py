"""
Key-value persistence for profile, preferences, listings and applications.

Values are anything JSON can serialize. Write operations report failure
by returning False instead of raising; reads return None for a missing
or unreadable key.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional
from urllib.parse import quote, unquote
import json
import logging
import os
import tempfile


class KeyValueStore(ABC):
    """Abstract string-keyed store of JSON values."""

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or None if the key is absent."""

    @abstractmethod
    def set(self, key: str, value: Any) -> bool:
        """Store a value. Returns False when it could not be written."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove a key. Returns False when it could not be removed."""

    @abstractmethod
    def list(self, prefix: str = "") -> list[str]:
        """List stored keys starting with prefix."""


class MemoryStore(KeyValueStore):
    """In-process store. Values are copied through JSON on the way in and out."""

    def __init__(self, initial: Optional[dict] = None):
        super().__init__()
        self._data: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    def set(self, key: str, value: Any) -> bool:
        try:
            self._data[key] = json.dumps(value)
        except (TypeError, ValueError) as e:
            self.logger.error(f"Storage error for {key}: {e}")
            return False
        return True

    def delete(self, key: str) -> bool:
        self._data.pop(key, None)
        return True

    def list(self, prefix: str = "") -> list[str]:
        return sorted(k for k in self._data if k.startswith(prefix))


class JsonFileStore(KeyValueStore):
    """Stores each key as a JSON file inside a data directory."""

    SUFFIX = ".json"

    def __init__(self, storage_path: str = "./job_hunter_data"):
        super().__init__()
        self.storage_path = Path(storage_path)
        self.storage_path.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        return self.storage_path / f"{quote(key, safe='')}{self.SUFFIX}"

    def get(self, key: str) -> Optional[Any]:
        filepath = self._path_for(key)
        if not filepath.exists():
            return None

        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.error(f"Error loading {filepath}: {e}")
            return None

    def set(self, key: str, value: Any) -> bool:
        filepath = self._path_for(key)
        try:
            payload = json.dumps(value, indent=2)
        except (TypeError, ValueError) as e:
            self.logger.error(f"Storage error for {key}: {e}")
            return False

        # Write then rename so readers never see a half-written file
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.storage_path, suffix=".tmp")
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(payload)
            os.replace(tmp_name, filepath)
        except OSError as e:
            self.logger.error(f"Storage error for {key}: {e}")
            return False
        return True

    def delete(self, key: str) -> bool:
        filepath = self._path_for(key)
        try:
            filepath.unlink()
        except FileNotFoundError:
            return True
        except OSError as e:
            self.logger.error(f"Delete error for {key}: {e}")
            return False
        return True

    def list(self, prefix: str = "") -> list[str]:
        keys = [unquote(p.name[:-len(self.SUFFIX)]) for p in self.storage_path.glob(f"*{self.SUFFIX}")]
        return sorted(k for k in keys if k.startswith(prefix))
