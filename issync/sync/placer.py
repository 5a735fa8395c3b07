# issync Artifact Placer
# Keeps each artifact under the directory named after its current category

import logging
import shutil
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from issync.sync.category import Category, category_from_path, classify
from issync.sync.item import Item
from issync.sync.state import LedgerEntry
from issync.utils.paths import artifact_filename, ensure_dir, parse_artifact_number, remove_if_empty

logger = logging.getLogger(__name__)


@dataclass
class MoveResult:
    """Description of an artifact move (performed, planned, or failed)."""

    number: int
    source: Path
    target: Path
    from_category: Category
    to_category: Category
    success: bool = True
    dry_run: bool = False
    error: Optional[str] = None

    def describe(self) -> str:
        """Human-readable one-liner."""
        verb = "Would move" if self.dry_run else "Moved"
        text = f"{verb} #{self.number} from {self.from_category.value} to {self.to_category.value}"
        if self.error:
            text += f" (failed: {self.error})"
        return text


@dataclass
class ReorganizeResult:
    """Result of a bulk reorganize scan."""

    dry_run: bool = False
    moved: list[MoveResult] = field(default_factory=list)
    failed: list[MoveResult] = field(default_factory=list)
    orphaned: list[Path] = field(default_factory=list)
    scanned: int = 0

    @property
    def moved_count(self) -> int:
        """Number of artifacts moved (or that would be moved in a dry run)."""
        return len(self.moved)

    @property
    def unresolved_count(self) -> int:
        """Artifacts that could not be placed: failed moves plus orphans."""
        return len(self.failed) + len(self.orphaned)


class ArtifactPlacer:
    """
    Decides where artifacts live and moves them between category directories.

    Layout: ``<base_dir>/<category>/<number>-<slug><suffix>``.
    """

    def __init__(self, *, suffix: str = ".md"):
        """
        Initialize placer.

        Args:
            suffix: Artifact file suffix, including the dot.
        """
        self.suffix = suffix

    def filename_for(self, item: Item) -> str:
        """Artifact filename for an item."""
        return artifact_filename(item.number, item.title, suffix=self.suffix)

    def target_path(self, item: Item, base_dir: Path, *, group_by_state: bool = True) -> Path:
        """Where an item's artifact belongs right now."""
        if group_by_state:
            return base_dir / classify(item).value / self.filename_for(item)
        return base_dir / self.filename_for(item)

    def relocate_if_needed(
        self,
        item: Item,
        entry: Optional[LedgerEntry],
        base_dir: Path,
        *,
        dry_run: bool = False,
    ) -> Optional[MoveResult]:
        """
        Move an item's recorded artifact if its category changed.

        The previous category is read from the recorded path's parent
        directory, not from stale item data.

        Args:
            item: Current item.
            entry: Ledger entry for the item, or None if never processed.
            base_dir: Collection output directory.
            dry_run: Report the move without performing it.

        Returns:
            MoveResult if a move was performed, planned or attempted and
            failed; None if nothing needed doing or the recorded file is gone.
        """
        if entry is None:
            return None

        previous_path = Path(entry.file_path)
        previous = category_from_path(previous_path)
        current = classify(item)

        if previous is None:
            logger.debug("Issue #%d: %s is not under a category directory", item.number, previous_path)
            return None

        if previous == current:
            return None

        if not previous_path.exists():
            logger.warning("File not found for issue #%d: %s", item.number, previous_path)
            return None

        target = base_dir / current.value / previous_path.name
        return self._move(item.number, previous_path, target, previous, current, dry_run=dry_run)

    def reorganize(self, items: Iterable[Item], base_dir: Path, *, dry_run: bool = False) -> ReorganizeResult:
        """
        Scan category directories and move every artifact to its expected category.

        The filesystem, not the ledger, is the source of truth here, so this
        repairs drift left by interrupted runs or manual edits. Artifacts whose
        item is not in ``items`` are left in place and reported as orphaned.

        Args:
            items: Freshly fetched items.
            base_dir: Collection output directory.
            dry_run: Report moves without performing them.

        Returns:
            ReorganizeResult.
        """
        result = ReorganizeResult(dry_run=dry_run)
        by_number: dict[int, Item] = {}
        for item in items:
            by_number.setdefault(item.number, item)
        # Files moved during this scan, not counted again in later directories
        moved_targets: set[Path] = set()

        for category in Category:
            category_dir = base_dir / category.value
            if not category_dir.is_dir():
                continue

            try:
                files = sorted(p for p in category_dir.iterdir() if p.is_file() and p.name.endswith(self.suffix))
            except OSError as e:
                logger.warning("Cannot scan %s: %s", category_dir, e)
                continue

            for path in files:
                number = parse_artifact_number(path.name)
                if number is None or path in moved_targets:
                    continue
                result.scanned += 1

                item = by_number.get(number)
                if item is None:
                    logger.info("Issue #%d no longer exists, keeping it in %s", number, category.value)
                    result.orphaned.append(path)
                    continue

                expected = classify(item)
                if expected == category:
                    continue

                move = self._move(number, path, base_dir / expected.value / path.name, category, expected, dry_run=dry_run)
                if move.success:
                    result.moved.append(move)
                    if not dry_run:
                        moved_targets.add(move.target)
                else:
                    result.failed.append(move)

            if not dry_run:
                self._prune(category_dir)

        if result.moved_count:
            logger.info("%s %d artifacts by state", "Would reorganize" if dry_run else "Reorganized", result.moved_count)

        return result

    def directory_stats(self, base_dir: Path) -> dict[str, int]:
        """Count artifacts per category directory."""
        stats: dict[str, int] = {}
        for category in Category:
            category_dir = base_dir / category.value
            if category_dir.is_dir():
                stats[category.value] = sum(
                    1 for p in category_dir.iterdir() if p.is_file() and p.name.endswith(self.suffix)
                )
            else:
                stats[category.value] = 0
        return stats

    def _move(
        self,
        number: int,
        source: Path,
        target: Path,
        from_category: Category,
        to_category: Category,
        *,
        dry_run: bool,
    ) -> MoveResult:
        result = MoveResult(
            number=number,
            source=source,
            target=target,
            from_category=from_category,
            to_category=to_category,
            dry_run=dry_run,
        )

        if dry_run:
            logger.info(result.describe())
            return result

        try:
            ensure_dir(target.parent)
            shutil.move(str(source), str(target))
        except OSError as e:
            logger.warning("Failed to move issue #%d: %s", number, e)
            result.success = False
            result.error = str(e)
            return result

        logger.info(result.describe())
        self._prune(source.parent)
        return result

    def _prune(self, directory: Path) -> None:
        if remove_if_empty(directory):
            logger.debug("Removed empty directory: %s", directory)
