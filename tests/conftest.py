# issync Test Fixtures
# Pytest fixtures for issync tests

import tempfile
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
import yaml

from issync.config.schema import CollectionConfig
from issync.sync.item import Comment, Item, Label


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_home(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a temporary home directory."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("ISSYNC_CONFIG", raising=False)
    return home


@pytest.fixture
def make_item() -> Callable[..., Item]:
    """Factory for items with sensible defaults."""

    def _make(
        number: int,
        title: str | None = None,
        *,
        state: str = "open",
        labels: list[str] | None = None,
        assignees: list[str] | None = None,
        **kwargs: Any,
    ) -> Item:
        return Item(
            number=number,
            title=title if title is not None else f"Issue {number}",
            body=kwargs.pop("body", f"Body of issue {number}"),
            state=state,
            labels=[Label(name) for name in labels or []],
            assignees=list(assignees or []),
            updated_at=kwargs.pop("updated_at", "2024-05-01T10:00:00Z"),
            **kwargs,
        )

    return _make


@pytest.fixture
def sample_items(make_item: Callable[..., Item]) -> list[Item]:
    """One item per category."""
    return [
        make_item(1, "Fix login", labels=["bug", "In Progress"]),
        make_item(2, "Add dark mode", labels=["enhancement"]),
        make_item(3, "Initial setup", state="closed", labels=["chore"]),
        make_item(4, "Upgrade database", labels=["Blocked by infra"]),
    ]


@pytest.fixture
def commented_item(make_item: Callable[..., Item]) -> Item:
    """Item with nested comments loaded."""
    return make_item(
        10,
        "Discuss roadmap",
        comments=[
            Comment(id=100, body="First", created_at="2024-05-01T11:00:00Z", updated_at="2024-05-01T11:00:00Z", author="ann"),
            Comment(id=101, body="Second", created_at="2024-05-02T11:00:00Z", updated_at="2024-05-02T11:00:00Z", author="bob"),
        ],
    )


@pytest.fixture
def collection(temp_dir: Path) -> CollectionConfig:
    """Collection writing into the temp directory."""
    return CollectionConfig(owner="acme", repo="widgets", output_dir=str(temp_dir / "out"))


@pytest.fixture
def ledger_path(temp_dir: Path) -> Path:
    """Ledger document path (not created)."""
    return temp_dir / "state" / "acme-widgets.json"


def render_markdown(item: Item) -> str:
    """Minimal renderer standing in for the template step."""
    labels = ", ".join(item.label_names) or "none"
    return f"# {item.title}\n\nState: {item.state}\nLabels: {labels}\n\n{item.body}\n"


@pytest.fixture
def render() -> Callable[[Item], str]:
    return render_markdown


@pytest.fixture
def sample_config(temp_dir: Path) -> dict:
    """Create sample configuration dict."""
    return {
        "collections": [
            {
                "owner": "acme",
                "repo": "widgets",
                "output_dir": str(temp_dir / "out"),
                "display_name": "Widgets",
            },
            {
                "owner": "acme",
                "repo": "legacy",
                "output_dir": str(temp_dir / "legacy"),
                "enabled": False,
            },
        ],
        "output": {"group_by_state": True, "colored": False},
        "cache": {"directory": str(temp_dir / "cache"), "max_entries": 20},
        "state": {"directory": str(temp_dir / "state")},
    }


@pytest.fixture
def config_file(temp_dir: Path, sample_config: dict) -> Path:
    """Create a configuration file."""
    config_path = temp_dir / "config.yaml"
    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(sample_config, f, default_flow_style=False)
    return config_path


class FakeClock:
    """Controllable millisecond clock."""

    def __init__(self, now: float = 0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
