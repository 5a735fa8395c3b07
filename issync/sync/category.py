# issync Classifier
# Maps an item's current fields to the category directory it belongs in

from enum import Enum
from pathlib import Path
from typing import Optional

from issync.sync.item import Item


class Category(str, Enum):
    """Category of an item, named after its artifact directory."""

    ACTIVE = "active"
    TODO = "todo"
    DONE = "done"
    BLOCKED = "blocked"


BLOCKED_MARKERS = ("blocked",)
ACTIVE_MARKERS = ("in progress", "active")


def classify(item: Item) -> Category:
    """
    Classify an item. The first matching rule wins:

    1. closed -> done
    2. any label containing "blocked" -> blocked
    3. any label containing "in progress" or "active" -> active
    4. otherwise -> todo

    Label matching is case-insensitive.
    """
    if item.is_closed:
        return Category.DONE

    names = [name.lower() for name in item.label_names]

    if any(marker in name for name in names for marker in BLOCKED_MARKERS):
        return Category.BLOCKED

    if any(marker in name for name in names for marker in ACTIVE_MARKERS):
        return Category.ACTIVE

    return Category.TODO


def category_from_path(path: str | Path) -> Optional[Category]:
    """
    Recover the category an artifact was filed under from its parent directory.

    Returns:
        Category, or None if the parent directory is not a category directory.
    """
    try:
        return Category(Path(path).parent.name)
    except ValueError:
        return None
