# issync Path Utilities
# Atomic writes, directory pruning and artifact file naming

import os
import re
import tempfile
from pathlib import Path

ARTIFACT_NAME_PATTERN = re.compile(r"^(\d+)-")


def ensure_dir(path: Path) -> Path:
    """
    Ensure directory exists, creating if necessary.

    Args:
        path: Directory path.

    Returns:
        The path that was ensured.
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def atomic_write(path: Path, content: str | bytes, *, encoding: str = "utf-8") -> None:
    """
    Atomically write content to file.

    Uses a temporary file and atomic rename.

    Args:
        path: Target file path.
        content: Content to write (str or bytes).
        encoding: Encoding for string content (default utf-8).
    """
    ensure_dir(path.parent)

    # Temp file in same directory for atomic rename
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        if isinstance(content, str):
            with os.fdopen(fd, "w", encoding=encoding) as f:
                f.write(content)
        else:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
        os.replace(temp_path, path)
    except Exception:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


def remove_if_empty(path: Path) -> bool:
    """
    Remove a directory if it exists and is empty.

    Missing or non-empty directories are left alone.

    Returns:
        True if the directory was removed.
    """
    try:
        path.rmdir()
    except OSError:
        return False
    return True


def create_slug(title: str | None) -> str:
    """
    Turn a title into a filesystem-friendly slug.

    Falls back to "issue" when nothing usable remains (e.g. non-ASCII titles).
    """
    if not title or not isinstance(title, str):
        return "issue"

    slug = title.lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    slug = slug.strip("-")
    return slug or "issue"


def artifact_filename(number: int, title: str | None, *, suffix: str = ".md") -> str:
    """Build the artifact filename for an item: <number>-<slug><suffix>."""
    return f"{number}-{create_slug(title or 'untitled')}{suffix}"


def parse_artifact_number(filename: str) -> int | None:
    """Extract the item number encoded at the start of an artifact filename."""
    match = ARTIFACT_NAME_PATTERN.match(filename)
    if match is None:
        return None
    return int(match.group(1))
