# issync Fingerprinter
# Stable content hash over the canonical projection of an item

from typing import Any

from issync.sync.item import Item
from issync.utils.hashing import json_hash


def canonical_projection(item: Item) -> dict[str, Any]:
    """
    Project an item onto the fields that define its logical content.

    Label and assignee names are sorted so upstream reordering does not
    change the projection. Absent optional fields map to None.
    """
    comments = None
    if item.comments is not None:
        comments = {
            "count": len(item.comments),
            "entries": [
                {
                    "id": c.id,
                    "body": c.body,
                    "created_at": c.created_at,
                    "updated_at": c.updated_at,
                    "author": c.author,
                }
                for c in item.comments
            ],
        }

    attachments = None
    if item.attachments is not None:
        attachments = {
            "count": len(item.attachments),
            "urls": [a.url for a in item.attachments],
            "analyzed": sum(1 for a in item.attachments if a.analyzed),
        }

    return {
        "number": item.number,
        "title": item.title,
        "body": item.body,
        "state": item.state,
        "updated_at": item.updated_at,
        "labels": sorted(item.label_names),
        "assignees": sorted(item.assignees),
        "milestone": item.milestone,
        "comments": comments,
        "attachments": attachments,
    }


def fingerprint(item: Item) -> str:
    """
    Calculate the content fingerprint of an item.

    Args:
        item: The item to fingerprint.

    Returns:
        SHA-256 hex digest (64 characters).
    """
    return json_hash(canonical_projection(item))
