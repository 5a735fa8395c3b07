# issync Utilities Module
# Helper functions for path handling and content hashing

from issync.utils.hashing import (
    content_hash,
    json_hash,
    stable_json,
)
from issync.utils.paths import (
    artifact_filename,
    atomic_write,
    create_slug,
    ensure_dir,
    parse_artifact_number,
    remove_if_empty,
)

__all__ = [
    # Paths
    "ensure_dir",
    "atomic_write",
    "remove_if_empty",
    "create_slug",
    "artifact_filename",
    "parse_artifact_number",
    # Hashing
    "content_hash",
    "stable_json",
    "json_hash",
]
