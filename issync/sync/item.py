# issync Sync Item
# Read-only representation of a fetched issue and its nested content

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class Label:
    """A label attached to an item."""

    name: str


@dataclass(frozen=True)
class Comment:
    """A comment on an item."""

    id: int | str
    body: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    author: str = "Unknown"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Comment":
        """Create from a GitHub comment payload."""
        user = data.get("user") or {}
        return cls(
            id=data.get("id", ""),
            body=data.get("body") or "",
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            author=user.get("login") or data.get("author") or "Unknown",
        )


@dataclass(frozen=True)
class Attachment:
    """An attachment (e.g. an embedded image) referenced by an item."""

    url: str
    analyzed: bool = False


@dataclass
class Item:
    """
    A mutable upstream record, as fetched.

    The sync core only reads items. ``comments`` and ``attachments`` are None
    when the fetch step did not load nested content at all, and an empty list
    when it did and found nothing.
    """

    number: int
    title: str = ""
    body: str = ""
    state: str = "open"
    labels: list[Label] = field(default_factory=list)
    assignees: list[str] = field(default_factory=list)
    milestone: Optional[str] = None
    updated_at: Optional[str] = None
    comments: Optional[list[Comment]] = None
    attachments: Optional[list[Attachment]] = None

    @property
    def is_closed(self) -> bool:
        """Check if the item is in its closed lifecycle state."""
        return self.state.lower() == "closed"

    @property
    def label_names(self) -> list[str]:
        """Get label names in upstream order."""
        return [label.name for label in self.labels]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Item":
        """
        Create from a GitHub-shaped issue payload.

        Args:
            data: Issue dict. Labels may be objects with ``name`` or plain
                  strings; assignees objects with ``login`` or plain strings.

        Returns:
            Item instance.

        Raises:
            ValueError: If the payload has no usable ``number``.
        """
        if data.get("number") is None:
            raise ValueError("Issue payload has no 'number'")

        labels = [Label(name=_label_name(label)) for label in data.get("labels") or []]
        assignees = [_login(a) for a in data.get("assignees") or []]

        milestone = data.get("milestone")
        if isinstance(milestone, dict):
            milestone = milestone.get("title")

        comments = data.get("comments")
        if isinstance(comments, list):
            comments = [Comment.from_dict(c) for c in comments]
        else:
            # GitHub reports a bare comment count when comments were not fetched
            comments = None

        return cls(
            number=int(data["number"]),
            title=data.get("title") or "",
            body=data.get("body") or "",
            state=data.get("state") or "open",
            labels=labels,
            assignees=assignees,
            milestone=milestone,
            updated_at=data.get("updated_at"),
            comments=comments,
            attachments=_parse_attachments(data),
        )


def _label_name(label: Any) -> str:
    if isinstance(label, dict):
        return str(label.get("name", ""))
    return str(label)


def _login(user: Any) -> str:
    if isinstance(user, dict):
        return str(user.get("login", ""))
    return str(user)


def _parse_attachments(data: dict[str, Any]) -> Optional[list[Attachment]]:
    """Read attachments from either an ``attachments`` list or an image processing summary."""
    if isinstance(data.get("attachments"), list):
        attachments = []
        for entry in data["attachments"]:
            if isinstance(entry, dict):
                attachments.append(Attachment(url=entry.get("url", ""), analyzed=bool(entry.get("analyzed"))))
            else:
                attachments.append(Attachment(url=str(entry)))
        return attachments

    result = data.get("imageProcessingResult")
    if isinstance(result, dict):
        analyzed = {a.get("imageUrl") for a in result.get("analyses") or [] if isinstance(a, dict)}
        return [
            Attachment(url=img.get("originalUrl", ""), analyzed=img.get("originalUrl") in analyzed)
            for img in result.get("images") or []
            if isinstance(img, dict)
        ]

    return None


def load_items(payloads: list[dict[str, Any]]) -> list[Item]:
    """Build items from a list of issue payloads."""
    return [Item.from_dict(payload) for payload in payloads]
