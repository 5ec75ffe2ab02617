"""Persistent page cache keyed by URL, with a fixed time-to-live.

The store is a single JSON file ``<cache_dir>/<name>.json`` mapping each URL to
``{"timestamp": <expiry, epoch ms>, "page": <document text>}``. It is loaded
once on first use and flushed after every change. There is no file locking;
one writer at a time is assumed.
"""

from __future__ import annotations

import json
import logging
import os
import time
from json import JSONDecodeError
from pathlib import Path
from typing import Any, Callable

from json_sink import atomic_write_text

_DEFAULT_PAGE_CACHE_DIR = "cache"
CACHE_TTL_SECONDS = 24 * 60 * 60

LOGGER = logging.getLogger(__name__)


class CacheError(RuntimeError):
    """The cache backing file could not be read or written."""


class CacheStore:
    def __init__(
        self,
        cache_dir: str | Path | None = None,
        name: str = "pages",
        ttl_seconds: int = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        cache_dir = cache_dir or os.environ.get("PAGE_CACHE_DIR", _DEFAULT_PAGE_CACHE_DIR)
        self.path = Path(cache_dir) / f"{name}.json"
        self._ttl_ms = int(ttl_seconds * 1000)
        self._clock = clock
        self._entries: dict[str, dict[str, Any]] | None = None

    def get(self, key: str) -> str | None:
        """Return the cached page for ``key``, or None if absent or expired.

        Expired entries are removed and the removal is persisted before returning.
        """
        entries = self._load()
        entry = entries.get(key)
        if entry is None:
            return None

        if entry["timestamp"] > self._now_ms():
            LOGGER.debug("Cache hit: %s", key)
            return entry["page"]

        LOGGER.debug("Cache entry expired, evicting: %s", key)
        del entries[key]
        self._save()
        return None

    def set(self, key: str, page: str) -> None:
        entries = self._load()
        entries[key] = {"timestamp": self._now_ms() + self._ttl_ms, "page": page}
        self._save()
        LOGGER.debug("Cached %s (%s chars)", key, len(page))

    def remove(self, key: str) -> bool:
        entries = self._load()
        if key not in entries:
            return False
        del entries[key]
        self._save()
        return True

    def clear(self) -> None:
        self._entries = {}
        self._save()

    def __contains__(self, key: object) -> bool:
        return key in self._load()

    def __len__(self) -> int:
        return len(self._load())

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _load(self) -> dict[str, dict[str, Any]]:
        if self._entries is not None:
            return self._entries

        if not self.path.exists():
            self._entries = {}
            return self._entries

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, JSONDecodeError) as exc:
            raise CacheError(f"Cannot read page cache {self.path}: {exc}") from exc

        if not isinstance(raw, dict):
            raise CacheError(f"Unexpected page cache shape in {self.path}: expected an object")

        self._entries = {key: value for key, value in raw.items() if _is_valid_entry(value)}
        dropped = len(raw) - len(self._entries)
        if dropped:
            LOGGER.warning("Ignoring %s malformed cache entries in %s", dropped, self.path)
        LOGGER.debug("Loaded %s cache entries from %s", len(self._entries), self.path)
        return self._entries

    def _save(self) -> None:
        try:
            atomic_write_text(self.path, json.dumps(self._entries or {}))
        except OSError as exc:
            raise CacheError(f"Cannot write page cache {self.path}: {exc}") from exc


def _is_valid_entry(value: Any) -> bool:
    if not isinstance(value, dict):
        return False
    timestamp = value.get("timestamp")
    return (
        isinstance(timestamp, (int, float))
        and not isinstance(timestamp, bool)
        and isinstance(value.get("page"), str)
    )
