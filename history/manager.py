"""
Match history with pluggable persistence.
Keeps the newest matches first, capped at a fixed length.
"""

from typing import List, Optional
import json
import logging
import threading

from shared.constants import HISTORY_KEY, HISTORY_MAX_ENTRIES, HISTORY_FORMAT_VERSION
from shared.errors import PersistenceError
from shared.models import MatchResult
from .storage import KeyValueStore

logger = logging.getLogger(__name__)


def encode_history(results: List[MatchResult]) -> bytes:
    data = {
        "version": HISTORY_FORMAT_VERSION,
        "history": [r.to_dict() for r in results],
    }
    return json.dumps(data, ensure_ascii=False).encode("utf-8")


def decode_history(raw: bytes) -> List[MatchResult]:
    """
    Decode a stored payload.

    Accepts the versioned object form and the unversioned bare list, whose
    entries may use either these field names or the mobile app's
    artworkURL/appleMusicURL/animeInfo.

    Raises:
        ValueError: If the payload is not a readable history
    """
    data = json.loads(raw.decode("utf-8"))
    if isinstance(data, list):
        entries = data
    elif isinstance(data, dict):
        version = data.get("version")
        if version != HISTORY_FORMAT_VERSION:
            raise ValueError(f"Unsupported history version: {version!r}")
        entries = data.get("history")
        if not isinstance(entries, list):
            raise ValueError("History payload has no entry list")
    else:
        raise ValueError("History payload is neither an object nor a list")

    results = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValueError("History entry is not an object")
        if isinstance(data, list):
            entry = _rename_legacy_keys(entry)
        results.append(MatchResult.from_dict(entry))
    return results


# Field names used by the mobile app's bare-list format
LEGACY_KEYS = {
    "artworkURL": "artwork_url",
    "appleMusicURL": "purchase_url",
    "animeInfo": "provenance",
}


def _rename_legacy_keys(entry: dict) -> dict:
    renamed = dict(entry)
    for old, new in LEGACY_KEYS.items():
        if old in renamed:
            value = renamed.pop(old)
            renamed.setdefault(new, value)
    return renamed


class HistoryStore:
    """
    Newest-first list of MatchResults persisted under a single key.

    save() and clear() are serialised by a lock so concurrent writers never
    interleave their read-modify-write. load() reads one whole value and
    never raises: a missing or corrupt value is an empty history.
    """

    def __init__(
        self,
        medium: KeyValueStore,
        key: str = HISTORY_KEY,
        max_entries: int = HISTORY_MAX_ENTRIES,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._medium = medium
        self._key = key
        self._max_entries = max_entries
        self._lock = threading.Lock()
        self._opened = False
        self._closed = False

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def open(self) -> "HistoryStore":
        """Mark the store ready. Logs how much history was found."""
        if self._closed:
            raise PersistenceError("History store is closed")
        if not self._opened:
            self._opened = True
            logger.debug(f"Opened history with {len(self.load())} entries")
        return self

    def close(self) -> None:
        """Wait for any in-flight write, then release the medium."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._medium.close()

    def __enter__(self) -> "HistoryStore":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def load(self) -> List[MatchResult]:
        """Return persisted history, newest first. Empty on missing or corrupt data."""
        try:
            raw = self._medium.get(self._key)
        except PersistenceError as e:
            logger.warning(f"Could not read history, starting fresh: {e}")
            return []
        return self._decode_or_empty(raw)

    def _decode_or_empty(self, raw: Optional[bytes]) -> List[MatchResult]:
        if raw is None:
            return []
        try:
            return decode_history(raw)
        except (ValueError, TypeError, RecursionError) as e:
            logger.warning(f"Discarding unreadable history: {e}")
            return []

    def save(self, result: MatchResult) -> None:
        """
        Prepend a result and persist, dropping the oldest beyond the cap.

        Raises:
            PersistenceError: If the current history could not be read or
                the write did not reach the medium
        """
        with self._lock:
            self._ensure_open()
            # An unreadable medium must not be mistaken for an empty history
            history = [result] + self._decode_or_empty(self._medium.get(self._key))
            history = history[:self._max_entries]
            self._medium.set(self._key, encode_history(history))
            logger.debug(f"Saved '{result.title}' to history ({len(history)} entries)")

    def clear(self) -> None:
        """
        Remove all persisted history.

        Raises:
            PersistenceError: If the medium could not be cleared
        """
        with self._lock:
            self._ensure_open()
            self._medium.delete(self._key)
            logger.info("Cleared match history")

    def _ensure_open(self) -> None:
        if self._closed:
            raise PersistenceError("History store is closed")
