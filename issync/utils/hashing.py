# issync Hashing Utilities
# Content hashing for change detection and cache keys

import hashlib
import json
from typing import Any


def content_hash(content: str | bytes, *, algorithm: str = "sha256") -> str:
    """
    Calculate hash of content.

    Args:
        content: String or bytes content.
        algorithm: Hash algorithm (default sha256).

    Returns:
        Hex digest of hash.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")

    hasher = hashlib.new(algorithm)
    hasher.update(content)
    return hasher.hexdigest()


def stable_json(data: Any) -> str:
    """
    Serialize data to JSON with sorted keys and no insignificant whitespace.

    Two structures that are equal as Python values always produce the same
    string, whatever order their dict keys were inserted in.
    """
    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def json_hash(data: Any, *, algorithm: str = "sha256") -> str:
    """Hash the stable JSON serialization of data."""
    return content_hash(stable_json(data), algorithm=algorithm)
