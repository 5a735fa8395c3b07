# issync Change Set
# Partition of a fetched item set against the ledger

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional

from issync.sync.category import Category
from issync.sync.fingerprint import fingerprint
from issync.sync.item import Item
from issync.sync.state import Ledger


@dataclass(frozen=True)
class DeletedEntry:
    """A ledger entry whose item is no longer in the fetched set."""

    number: int
    file_path: str
    last_category: Optional[Category] = None


@dataclass
class ChangeSet:
    """
    Result of diffing fetched items against a ledger.

    Every fetched item lands in exactly one of new, updated, unchanged;
    every ledger number missing from the fetch lands in deleted.
    """

    new: list[Item] = field(default_factory=list)
    updated: list[Item] = field(default_factory=list)
    unchanged: list[Item] = field(default_factory=list)
    deleted: list[DeletedEntry] = field(default_factory=list)

    @property
    def to_write(self) -> list[Item]:
        """Items whose artifact must be (re)written."""
        return [*self.new, *self.updated]

    @property
    def fetched(self) -> list[Item]:
        """All fetched items."""
        return [*self.new, *self.updated, *self.unchanged]

    @property
    def total(self) -> int:
        """Number of fetched items."""
        return len(self.new) + len(self.updated) + len(self.unchanged)

    @property
    def has_changes(self) -> bool:
        """Check if anything needs writing or deleting."""
        return bool(self.new or self.updated or self.deleted)


def compute_changes(items: Iterable[Item], ledger: Ledger) -> ChangeSet:
    """
    Partition fetched items into new, updated, unchanged and deleted.

    Neither the ledger nor the filesystem is modified.

    Args:
        items: Freshly fetched items.
        ledger: Ledger for the same collection.

    Returns:
        ChangeSet.
    """
    changes = ChangeSet()
    seen: set[int] = set()

    for item in items:
        if item.number in seen:
            # Duplicate in the upstream page; first occurrence wins
            continue
        seen.add(item.number)

        last_hash = ledger.get_hash(item.number)
        if last_hash is None:
            changes.new.append(item)
        elif last_hash != fingerprint(item):
            changes.updated.append(item)
        else:
            changes.unchanged.append(item)

    for number, entry in ledger.entries.items():
        if number not in seen:
            changes.deleted.append(
                DeletedEntry(number=number, file_path=entry.file_path, last_category=entry.category)
            )

    return changes
