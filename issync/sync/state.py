# issync Ledger
# Per-collection record of every item processed, with JSON persistence

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from issync.sync.category import Category, classify
from issync.sync.fingerprint import fingerprint
from issync.sync.item import Item
from issync.utils.paths import atomic_write

logger = logging.getLogger(__name__)

LEDGER_VERSION = "1.0"
SUPPORTED_VERSIONS = frozenset({LEDGER_VERSION})


class LedgerStorageError(OSError):
    """The ledger's storage location cannot be read or written."""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class LedgerEntry:
    """Last known state of a single item."""

    hash: str
    file_path: str
    category: Category
    last_processed: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted mapping."""
        return {
            "hash": self.hash,
            "filePath": self.file_path,
            "lastProcessed": self.last_processed,
            "state": self.category.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LedgerEntry":
        """
        Create from the persisted mapping.

        Raises:
            KeyError, TypeError, ValueError: If the mapping is malformed.
        """
        if not isinstance(data, dict):
            raise TypeError("Ledger entry must be a mapping")

        return cls(
            hash=str(data["hash"]),
            file_path=str(data["filePath"]),
            category=Category(data["state"]),
            last_processed=str(data.get("lastProcessed") or ""),
        )


@dataclass
class LedgerStats:
    """Summary of a ledger for display."""

    total: int
    by_category: dict[str, int]
    last_sync: Optional[str]


@dataclass
class Ledger:
    """
    Sync ledger for one collection.

    Maps item numbers to the fingerprint, artifact path and category recorded
    when the item was last processed.
    """

    version: str = LEDGER_VERSION
    last_sync: Optional[str] = None
    entries: dict[int, LedgerEntry] = field(default_factory=dict)

    def get_entry(self, number: int) -> Optional[LedgerEntry]:
        """Get the entry for an item number."""
        return self.entries.get(number)

    def get_hash(self, number: int) -> Optional[str]:
        """Get last known fingerprint for an item."""
        entry = self.entries.get(number)
        return entry.hash if entry else None

    @property
    def numbers(self) -> set[int]:
        """All item numbers with an entry."""
        return set(self.entries)

    def mark_processed(self, item: Item, file_path: str | Path) -> LedgerEntry:
        """
        Record that an item's artifact was written (or moved) successfully.

        Call only after the artifact write has succeeded.
        """
        entry = LedgerEntry(
            hash=fingerprint(item),
            file_path=str(file_path),
            category=classify(item),
            last_processed=_now(),
        )
        self.entries[item.number] = entry
        return entry

    def remove_entry(self, number: int) -> bool:
        """Remove an item's entry. Returns True if there was one."""
        return self.entries.pop(number, None) is not None

    def touch(self) -> None:
        """Stamp the end of a full sync pass."""
        self.last_sync = _now()

    def stats(self) -> LedgerStats:
        """Count entries per category."""
        by_category = {category.value: 0 for category in Category}
        for entry in self.entries.values():
            by_category[entry.category.value] += 1
        return LedgerStats(total=len(self.entries), by_category=by_category, last_sync=self.last_sync)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "lastSync": self.last_sync,
            "version": self.version,
            "issues": {str(number): entry.to_dict() for number, entry in sorted(self.entries.items())},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Ledger":
        """
        Create from dictionary.

        Raises:
            KeyError, TypeError, ValueError: If the document is malformed or
            carries an unsupported version tag.
        """
        if not isinstance(data, dict):
            raise TypeError("Ledger document must be a mapping")

        version = data.get("version")
        if version not in SUPPORTED_VERSIONS:
            raise ValueError(f"Unsupported ledger version: {version!r}")

        issues = data.get("issues") or {}
        if not isinstance(issues, dict):
            raise TypeError("Ledger 'issues' must be a mapping")

        entries = {int(number): LedgerEntry.from_dict(entry) for number, entry in issues.items()}

        return cls(version=version, last_sync=data.get("lastSync"), entries=entries)


class LedgerManager:
    """
    Manages ledger persistence.

    Reads and writes are all-or-nothing: a document that cannot be parsed
    loads as an empty ledger, and saving replaces the file atomically.
    """

    def __init__(self, ledger_path: Path):
        """
        Initialize ledger manager.

        Args:
            ledger_path: Path to the collection's ledger document.
        """
        self.ledger_path = ledger_path
        self._ledger: Optional[Ledger] = None

    @property
    def ledger(self) -> Ledger:
        """Get current ledger, loading if necessary."""
        if self._ledger is None:
            self._ledger = self.load()
        return self._ledger

    def load(self) -> Ledger:
        """
        Load the ledger from disk.

        Raises:
            LedgerStorageError: If the file exists but cannot be read.
        """
        if not self.ledger_path.exists():
            return Ledger()

        try:
            raw = self.ledger_path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            logger.warning("Ledger %s is not valid UTF-8, starting a full resync", self.ledger_path)
            return Ledger()
        except OSError as e:
            raise LedgerStorageError(f"Cannot read ledger {self.ledger_path}: {e}") from e

        try:
            return Ledger.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Discarding unreadable ledger %s (%s), starting a full resync", self.ledger_path, e)
            return Ledger()

    def save(self) -> None:
        """
        Write the ledger to disk.

        Raises:
            LedgerStorageError: If the document cannot be written.
        """
        try:
            atomic_write(self.ledger_path, json.dumps(self.ledger.to_dict(), indent=2))
        except OSError as e:
            raise LedgerStorageError(f"Cannot write ledger {self.ledger_path}: {e}") from e
        logger.debug("Saved ledger %s (%d entries)", self.ledger_path, len(self.ledger.entries))

    def reload(self) -> Ledger:
        """Drop in-memory changes and reload from disk."""
        self._ledger = self.load()
        return self._ledger

    def reset(self) -> None:
        """Reset ledger to empty and persist it."""
        self._ledger = Ledger()
        self.save()
