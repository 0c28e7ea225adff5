"""
Persistence media for the match history.

Each medium is a small key-value byte store. The history store only ever
reads and writes one whole value under one key.
"""

import logging
import os
import sqlite3
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from shared.errors import PersistenceError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Whole-value byte storage addressed by key."""

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Return the stored bytes, or None if the key is absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the key. Deleting a missing key is not an error."""
        pass

    def close(self) -> None:
        pass


class MemoryKeyValueStore(KeyValueStore):
    """In-process store, mainly for tests."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self._data: Dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileKeyValueStore(KeyValueStore):
    """One file per key inside a directory, replaced atomically on write."""

    def __init__(self, directory: Path):
        self._dir = Path(directory).expanduser()

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise PersistenceError(f"Invalid storage key: {key!r}")
        return self._dir / f"{key}.json"

    def get(self, key: str) -> Optional[bytes]:
        path = self._path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise PersistenceError(f"Could not read {path}: {e}") from e

    def set(self, key: str, value: bytes) -> None:
        path = self._path(key)
        tmp_name = None
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._dir, prefix=f".{key}.", suffix=".tmp")
            with os.fdopen(fd, "wb") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as e:
            raise PersistenceError(f"Could not write {path}: {e}") from e
        finally:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise PersistenceError(f"Could not delete {path}: {e}") from e


class SqliteKeyValueStore(KeyValueStore):
    """Values kept in a single `kv` table of a SQLite file."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path).expanduser()
        self._lock = threading.Lock()
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA synchronous=FULL")
            with self._conn:
                self._conn.execute(
                    "CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value BLOB NOT NULL)"
                )
        except (OSError, sqlite3.Error) as e:
            raise PersistenceError(f"Could not open {self.db_path}: {e}") from e

    def get(self, key: str) -> Optional[bytes]:
        try:
            with self._lock:
                row = self._conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not read {key!r}: {e}") from e
        return bytes(row[0]) if row else None

    def set(self, key: str, value: bytes) -> None:
        try:
            with self._lock, self._conn:
                self._conn.execute(
                    "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)", (key, sqlite3.Binary(value))
                )
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not write {key!r}: {e}") from e

    def delete(self, key: str) -> None:
        try:
            with self._lock, self._conn:
                self._conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not delete {key!r}: {e}") from e

    def close(self) -> None:
        with self._lock:
            self._conn.close()
