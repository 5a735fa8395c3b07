"""issync - incremental mirror of remote issue collections.

Keeps a local directory tree of per-issue artifacts consistent with a
remote collection: only new and changed issues are rewritten, artifacts
follow their issue between category directories, and upstream responses
can be served from a short-lived cache.
"""

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "CacheStore",
    "Category",
    "ChangeSet",
    "Item",
    "Ledger",
    "LedgerManager",
    "SyncEngine",
    "SyncResult",
    "classify",
    "compute_changes",
    "fingerprint",
]


def __getattr__(name: str):
    """Lazy import to avoid loading dependencies during setup."""
    if name == "CacheStore":
        from issync.cache import CacheStore

        return CacheStore
    if name in ("Category", "classify"):
        from issync.sync import category

        return getattr(category, name)
    if name in ("ChangeSet", "compute_changes"):
        from issync.sync import changes

        return getattr(changes, name)
    if name == "fingerprint":
        from issync.sync.fingerprint import fingerprint

        return fingerprint
    if name == "Item":
        from issync.sync.item import Item

        return Item
    if name in ("Ledger", "LedgerManager"):
        from issync.sync import state

        return getattr(state, name)
    if name in ("SyncEngine", "SyncResult"):
        from issync.sync import engine

        return getattr(engine, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
