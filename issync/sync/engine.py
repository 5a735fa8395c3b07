# issync Sync Engine
# Runs an incremental synchronization pass for one collection

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from issync.cache import CacheStore
from issync.config.schema import CacheConfig, CollectionConfig, IssyncConfig, OutputConfig
from issync.sync.category import category_from_path
from issync.sync.changes import ChangeSet, DeletedEntry, compute_changes
from issync.sync.fingerprint import fingerprint
from issync.sync.item import Item
from issync.sync.placer import ArtifactPlacer, MoveResult, ReorganizeResult
from issync.sync.state import Ledger, LedgerManager, LedgerStats
from issync.utils.paths import atomic_write, remove_if_empty

logger = logging.getLogger(__name__)

Renderer = Callable[[Item], str | bytes]


@dataclass
class ItemError:
    """A per-item failure that was isolated from the rest of the pass."""

    number: int
    error: str


@dataclass
class SyncResult:
    """Result of one synchronization pass."""

    collection: str
    dry_run: bool = False
    changes: ChangeSet = field(default_factory=ChangeSet)
    written: list[Path] = field(default_factory=list)
    removed: list[Path] = field(default_factory=list)
    moved: list[MoveResult] = field(default_factory=list)
    errors: list[ItemError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True if every item was handled without error."""
        return not self.errors

    @property
    def has_changes(self) -> bool:
        """Check if the pass wrote, moved or removed anything."""
        return bool(self.written or self.removed or self.moved)


class SyncEngine:
    """
    Incremental synchronization engine for a single collection.

    Owns the collection's ledger and response cache. Fetching and rendering
    are done by the caller: ``sync`` takes already-fetched items and a
    ``render`` callback producing artifact content.
    """

    def __init__(
        self,
        collection: CollectionConfig,
        *,
        ledger_path: Path,
        cache_dir: Optional[Path] = None,
        output: Optional[OutputConfig] = None,
        cache_config: Optional[CacheConfig] = None,
    ):
        """
        Initialize sync engine.

        Args:
            collection: Collection being mirrored.
            ledger_path: Ledger document for this collection.
            cache_dir: Response cache directory for this collection (no cache if None).
            output: Output settings (defaults if None).
            cache_config: Cache TTL and size settings (defaults if None).
        """
        self.collection = collection
        self.output = output or OutputConfig()
        self.output_dir = Path(collection.output_dir)
        self.ledger_manager = LedgerManager(ledger_path)
        self.placer = ArtifactPlacer(suffix=self.output.artifact_suffix)

        self.cache: Optional[CacheStore] = None
        if cache_dir is not None:
            cache_config = cache_config or CacheConfig()
            self.cache = CacheStore(
                cache_dir,
                default_ttl=cache_config.default_ttl,
                max_entries=cache_config.max_entries,
            )

    @classmethod
    def from_config(cls, config: IssyncConfig, collection_name: str) -> "SyncEngine":
        """
        Build an engine for a configured collection.

        Raises:
            KeyError: If the collection doesn't exist.
        """
        collection = config.get_collection(collection_name)
        if collection is None:
            raise KeyError(f"Collection '{collection_name}' not found")

        cache_dir = Path(config.cache.directory) / collection.name if config.cache.enabled else None

        return cls(
            collection,
            ledger_path=config.state.ledger_path(collection.name),
            cache_dir=cache_dir,
            output=config.output,
            cache_config=config.cache,
        )

    @property
    def ledger(self) -> Ledger:
        """The collection's ledger, loaded on first access."""
        return self.ledger_manager.ledger

    def diff(self, items: Iterable[Item]) -> ChangeSet:
        """Compute the change set for fetched items without side effects."""
        return compute_changes(items, self.ledger)

    def sync(
        self,
        items: Iterable[Item],
        render: Renderer,
        *,
        dry_run: bool = False,
        full: bool = False,
    ) -> SyncResult:
        """
        Run one synchronization pass.

        Args:
            items: Freshly fetched items (with nested content already attached).
            render: Produces artifact content for an item.
            dry_run: Report what would happen without touching disk or ledger.
            full: Rewrite every fetched item, not only new and updated ones.

        Returns:
            SyncResult.

        Raises:
            LedgerStorageError: If the ledger cannot be read or saved.
        """
        changes = self.diff(items)
        result = SyncResult(collection=self.collection.name, dry_run=dry_run, changes=changes)

        logger.info(
            "%s: %d new, %d updated, %d unchanged, %d deleted",
            self.collection.name,
            len(changes.new),
            len(changes.updated),
            len(changes.unchanged),
            len(changes.deleted),
        )

        if self.output.prune_deleted:
            for deleted in changes.deleted:
                self._remove_deleted(deleted, result, dry_run=dry_run)

        to_write = changes.fetched if full else changes.to_write
        write_numbers = {item.number for item in to_write}

        # Where each artifact currently lives, after any relocation
        current_paths: dict[int, Path] = {
            number: Path(entry.file_path) for number, entry in self.ledger.entries.items()
        }

        if self.output.group_by_state and self.output.auto_reorganize:
            for item in changes.fetched:
                move = self.placer.relocate_if_needed(
                    item, self.ledger.get_entry(item.number), self.output_dir, dry_run=dry_run
                )
                if move is None:
                    continue
                if not move.success:
                    result.errors.append(ItemError(item.number, move.error or "move failed"))
                    continue
                result.moved.append(move)
                current_paths[item.number] = move.target
                if not dry_run and item.number not in write_numbers:
                    self.ledger.mark_processed(item, move.target)

        for item in to_write:
            self._write(item, render, result, previous_path=current_paths.get(item.number), dry_run=dry_run)

        if not dry_run:
            self.ledger.touch()
            self.ledger_manager.save()

        return result

    def reorganize(self, items: Iterable[Item], *, dry_run: bool = False) -> ReorganizeResult:
        """
        Repair the directory layout by scanning category directories.

        Moved artifacts whose item is unchanged since it was last processed
        get their ledger path updated.

        Raises:
            LedgerStorageError: If the ledger cannot be read or saved.
        """
        items = list(items)

        if not self.output.group_by_state:
            logger.warning("Reorganization skipped: group_by_state is disabled")
            return ReorganizeResult(dry_run=dry_run)

        result = self.placer.reorganize(items, self.output_dir, dry_run=dry_run)

        if not dry_run and result.moved:
            by_number: dict[int, Item] = {}
            for item in items:
                by_number.setdefault(item.number, item)
            for move in result.moved:
                item = by_number[move.number]
                if self.ledger.get_hash(item.number) == fingerprint(item):
                    self.ledger.mark_processed(item, move.target)
            self.ledger_manager.save()

        return result

    def status(self) -> LedgerStats:
        """Ledger statistics for this collection."""
        return self.ledger.stats()

    def directory_stats(self) -> dict[str, int]:
        """Artifact counts per category directory."""
        return self.placer.directory_stats(self.output_dir)

    def reset(self) -> None:
        """Forget every processed item; the next sync rewrites everything."""
        self.ledger_manager.reset()

    def _remove_deleted(self, deleted: DeletedEntry, result: SyncResult, *, dry_run: bool) -> None:
        path = Path(deleted.file_path)

        if dry_run:
            result.removed.append(path)
            return

        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not delete file %s: %s", path, e)
            result.errors.append(ItemError(deleted.number, str(e)))
            return

        self.ledger.remove_entry(deleted.number)
        result.removed.append(path)
        if category_from_path(path) is not None:
            remove_if_empty(path.parent)

    def _write(
        self,
        item: Item,
        render: Renderer,
        result: SyncResult,
        *,
        previous_path: Optional[Path],
        dry_run: bool,
    ) -> None:
        target = self.placer.target_path(item, self.output_dir, group_by_state=self.output.group_by_state)

        if dry_run:
            result.written.append(target)
            return

        try:
            content = render(item)
        except Exception as e:
            logger.warning("Failed to render issue #%d: %s", item.number, e)
            result.errors.append(ItemError(item.number, f"render failed: {e}"))
            return

        try:
            atomic_write(target, content)
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Failed to write issue #%d to %s: %s", item.number, target, e)
            result.errors.append(ItemError(item.number, str(e)))
            return

        # Title changes rename the artifact; drop the stale file
        if previous_path is not None and previous_path != target and previous_path.exists():
            try:
                previous_path.unlink()
            except OSError as e:
                logger.warning("Could not remove stale file %s: %s", previous_path, e)
            else:
                if category_from_path(previous_path) is not None:
                    remove_if_empty(previous_path.parent)

        self.ledger.mark_processed(item, target)
        result.written.append(target)
