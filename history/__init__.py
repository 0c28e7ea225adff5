"""Bounded, persisted match history."""

from shared.config import AppConfig
from shared.constants import HISTORY_DB_FILENAME

from .manager import HistoryStore
from .storage import (
    KeyValueStore,
    MemoryKeyValueStore,
    JsonFileKeyValueStore,
    SqliteKeyValueStore,
)


def create_medium(config: AppConfig) -> KeyValueStore:
    """Pick the persistence medium named by HISTORY_BACKEND."""
    if config.history_backend == "json":
        return JsonFileKeyValueStore(config.data_dir)
    elif config.history_backend == "sqlite":
        return SqliteKeyValueStore(config.data_dir / HISTORY_DB_FILENAME)
    elif config.history_backend == "memory":
        return MemoryKeyValueStore()
    else:
        raise ValueError(f"Unknown history backend: {config.history_backend}")


def open_history(config: AppConfig) -> HistoryStore:
    return HistoryStore(create_medium(config)).open()


__all__ = [
    "HistoryStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "SqliteKeyValueStore",
    "create_medium",
    "open_history",
]
