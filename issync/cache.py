# issync Cache Store
# TTL- and size-bounded file cache for upstream responses

import json
import logging
import re
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from issync.utils.hashing import content_hash, stable_json
from issync.utils.paths import atomic_write, ensure_dir

logger = logging.getLogger(__name__)

DEFAULT_TTL_MS = 5 * 60 * 1000
DEFAULT_MAX_ENTRIES = 100
CACHE_SUFFIX = ".json"

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def _wall_clock_ms() -> float:
    return time.time() * 1000


@dataclass
class CacheStats:
    """Summary of cache usage."""

    entries: int
    total_size_kb: int
    max_entries: int


class CacheStore:
    """
    File-backed cache, one JSON document per entry.

    Each entry is stored as ``{data, timestamp, ttl, expires}`` with times in
    milliseconds. Reads never raise: missing, expired or corrupt entries are
    misses. Writes never raise: failures are logged and ignored.
    """

    def __init__(
        self,
        cache_dir: Path,
        *,
        default_ttl: int = DEFAULT_TTL_MS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize cache store and sweep expired entries.

        Args:
            cache_dir: Directory holding the cache files.
            default_ttl: TTL in milliseconds used when ``set`` gets none.
            max_entries: Maximum number of entries kept after each write.
            clock: Returns the current time in milliseconds (wall clock by default).
        """
        self.cache_dir = cache_dir
        self.default_ttl = default_ttl
        self.max_entries = max_entries
        self._clock = clock or _wall_clock_ms

        try:
            ensure_dir(self.cache_dir)
        except OSError as e:
            logger.warning("Cannot create cache directory %s: %s", self.cache_dir, e)

        self.sweep_expired()

    @staticmethod
    def generate_key(prefix: str, params: dict[str, Any]) -> str:
        """
        Derive a cache key from request parameters.

        Parameters are serialized with sorted keys, so two dicts with the same
        content give the same key regardless of construction order.
        """
        return f"{prefix}_{content_hash(stable_json(params), algorithm='md5')}"

    def path_for(self, key: str) -> Path:
        """File path for a cache key."""
        return self.cache_dir / f"{_UNSAFE_KEY_CHARS.sub('_', key)}{CACHE_SUFFIX}"

    def get(self, key: str) -> Optional[Any]:
        """
        Get a cached value.

        Returns:
            The cached data, or None on a miss. Expired and corrupt entries
            are removed.
        """
        path = self.path_for(key)
        if not path.exists():
            return None

        entry = self._read_entry(path)
        if entry is None:
            self._unlink(path)
            return None

        if self._clock() >= entry["expires"]:
            self._unlink(path)
            return None

        return entry["data"]

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """
        Store a value, overwriting any existing entry, then enforce the size cap.

        Args:
            key: Cache key.
            value: JSON-serializable data.
            ttl: Time to live in milliseconds (default_ttl if None).
        """
        if ttl is None:
            ttl = self.default_ttl

        now = self._clock()
        entry = {"data": value, "timestamp": now, "ttl": ttl, "expires": now + ttl}

        try:
            atomic_write(self.path_for(key), json.dumps(entry, indent=2))
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Failed to write cache entry %s: %s", key, e)
            return

        self.enforce_size_cap()

    def delete(self, key: str) -> None:
        """Remove an entry if present."""
        self._unlink(self.path_for(key))

    def clear(self) -> int:
        """
        Remove every entry.

        Returns:
            Number of entries removed.
        """
        removed = 0
        for path in self._entry_files():
            if self._unlink(path):
                removed += 1
        return removed

    def sweep_expired(self) -> int:
        """
        Remove expired and corrupt entries.

        Returns:
            Number of entries removed.
        """
        now = self._clock()
        removed = 0
        for path in self._entry_files():
            entry = self._read_entry(path)
            if entry is None or now >= entry["expires"]:
                if self._unlink(path):
                    removed += 1
        if removed:
            logger.debug("Swept %d stale cache entries from %s", removed, self.cache_dir)
        return removed

    def enforce_size_cap(self, max_entries: Optional[int] = None) -> int:
        """
        Keep only the most recently written entries.

        Args:
            max_entries: Cap to enforce (the configured maximum if None).

        Returns:
            Number of entries evicted.
        """
        if max_entries is None:
            max_entries = self.max_entries

        ranked: list[tuple[float, int, Path]] = []
        for path in self._entry_files():
            entry = self._read_entry(path)
            if entry is None:
                self._unlink(path)
                continue
            try:
                mtime = path.stat().st_mtime_ns
            except OSError:
                continue
            ranked.append((entry["timestamp"], mtime, path))

        if len(ranked) <= max_entries:
            return 0

        ranked.sort(key=lambda r: (r[0], r[1]), reverse=True)
        evicted = 0
        for _, _, path in ranked[max_entries:]:
            if self._unlink(path):
                evicted += 1
        return evicted

    def stats(self) -> CacheStats:
        """Get entry count and total size."""
        total = 0
        files = self._entry_files()
        for path in files:
            try:
                total += path.stat().st_size
            except OSError:
                continue
        return CacheStats(entries=len(files), total_size_kb=round(total / 1024), max_entries=self.max_entries)

    def _entry_files(self) -> list[Path]:
        try:
            return [p for p in self.cache_dir.iterdir() if p.is_file() and p.suffix == CACHE_SUFFIX]
        except OSError as e:
            logger.warning("Cannot list cache directory %s: %s", self.cache_dir, e)
            return []

    def _read_entry(self, path: Path) -> Optional[dict[str, Any]]:
        """Read and validate an entry; None if unreadable or malformed."""
        try:
            entry = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Dropping unreadable cache entry %s: %s", path.name, e)
            return None

        if (
            not isinstance(entry, dict)
            or "data" not in entry
            or not isinstance(entry.get("expires"), (int, float))
            or not isinstance(entry.get("timestamp"), (int, float))
        ):
            logger.warning("Dropping malformed cache entry %s", path.name)
            return None

        return entry

    def _unlink(self, path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning("Failed to delete cache entry %s: %s", path.name, e)
            return False
        return True
