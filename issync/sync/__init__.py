# issync Sync Module
# Core incremental synchronization engine and components

from issync.sync.category import Category, category_from_path, classify
from issync.sync.changes import ChangeSet, DeletedEntry, compute_changes
from issync.sync.engine import ItemError, SyncEngine, SyncResult
from issync.sync.fingerprint import canonical_projection, fingerprint
from issync.sync.item import Attachment, Comment, Item, Label, load_items
from issync.sync.placer import ArtifactPlacer, MoveResult, ReorganizeResult
from issync.sync.state import Ledger, LedgerEntry, LedgerManager, LedgerStats, LedgerStorageError

__all__ = [
    # Item
    "Item",
    "Label",
    "Comment",
    "Attachment",
    "load_items",
    # Fingerprint
    "fingerprint",
    "canonical_projection",
    # Category
    "Category",
    "classify",
    "category_from_path",
    # Ledger
    "Ledger",
    "LedgerEntry",
    "LedgerManager",
    "LedgerStats",
    "LedgerStorageError",
    # Changes
    "ChangeSet",
    "DeletedEntry",
    "compute_changes",
    # Placement
    "ArtifactPlacer",
    "MoveResult",
    "ReorganizeResult",
    # Engine
    "SyncEngine",
    "SyncResult",
    "ItemError",
]
