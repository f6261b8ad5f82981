"""Local key-value stores holding serialized state blobs."""

import logging
import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Type

from .exceptions import StorageError, StorageReadError, StorageWriteError

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")


class KeyValueStore(ABC):
    """Synchronous string key-value storage.

    Implementations raise StorageReadError / StorageWriteError on failure.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key is missing."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove ``key`` if present."""


class MemoryStore(KeyValueStore):
    """In-process store, used for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileStore(KeyValueStore):
    """Store keeping one file per key inside a data directory."""

    def __init__(self, data_dir: Path):
        """Initialize file store.

        Args:
            data_dir: Directory holding the stored values (created lazily on write)
        """
        self.data_dir = Path(data_dir)

    def _path_for(self, key: str, error: Type[StorageError]) -> Path:
        if not isinstance(key, str) or not _KEY_PATTERN.match(key):
            raise error(f"Invalid storage key: {key!r}")
        return self.data_dir / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path_for(key, StorageReadError)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadError(f"Failed to read {path}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        path = self._path_for(key, StorageWriteError)
        tmp_name = None
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            # Write to a sibling file and swap it in so readers never see a partial blob
            fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{key}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as e:
            raise StorageWriteError(f"Failed to write {path}: {e}") from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
        logger.debug(f"Wrote {len(value)} bytes to {path}")

    def remove_item(self, key: str) -> None:
        path = self._path_for(key, StorageWriteError)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageWriteError(f"Failed to remove {path}: {e}") from e
