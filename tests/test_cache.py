# Tests for issync.cache
# TTL expiry, size cap and corrupt-entry handling

import json
from pathlib import Path

import pytest

from issync.cache import CacheStore


@pytest.fixture
def cache_dir(temp_dir: Path) -> Path:
    return temp_dir / "cache"


@pytest.fixture
def store(cache_dir: Path, clock) -> CacheStore:
    return CacheStore(cache_dir, default_ttl=1000, max_entries=10, clock=clock)


class TestGenerateKey:
    """Tests for cache key derivation."""

    def test_order_independent(self):
        a = CacheStore.generate_key("issues", {"owner": "acme", "repo": "widgets", "page": 1})
        b = CacheStore.generate_key("issues", {"page": 1, "repo": "widgets", "owner": "acme"})
        assert a == b

    def test_prefix_and_params_matter(self):
        params = {"owner": "acme"}
        assert CacheStore.generate_key("issues", params).startswith("issues_")
        assert CacheStore.generate_key("issues", params) != CacheStore.generate_key("comments", params)
        assert CacheStore.generate_key("issues", params) != CacheStore.generate_key("issues", {"owner": "other"})


class TestGetSet:
    """Tests for reads, writes and TTL expiry."""

    def test_miss(self, store: CacheStore):
        assert store.get("absent") is None

    def test_hit_before_expiry(self, store: CacheStore, clock):
        store.set("k", {"value": 1})
        clock.now = 999
        assert store.get("k") == {"value": 1}

    def test_miss_at_and_after_expiry(self, store: CacheStore, clock):
        store.set("k", [1, 2, 3])
        clock.now = 1000
        assert store.get("k") is None
        assert not store.path_for("k").exists()

    def test_expired_never_returned(self, store: CacheStore, clock):
        store.set("k", "v")
        clock.now = 1001
        assert store.get("k") is None

    def test_custom_ttl(self, store: CacheStore, clock):
        store.set("k", "v", ttl=5000)
        clock.now = 4999
        assert store.get("k") == "v"

    def test_entry_format(self, store: CacheStore, clock):
        clock.now = 250
        store.set("k", {"a": 1})

        entry = json.loads(store.path_for("k").read_text(encoding="utf-8"))

        assert entry == {"data": {"a": 1}, "timestamp": 250, "ttl": 1000, "expires": 1250}

    def test_overwrite(self, store: CacheStore):
        store.set("k", "old")
        store.set("k", "new")
        assert store.get("k") == "new"

    def test_unsafe_key_stays_in_dir(self, store: CacheStore, cache_dir: Path):
        path = store.path_for("../../etc/passwd")
        assert path.parent == cache_dir

    def test_unserializable_value_is_ignored(self, store: CacheStore):
        store.set("k", {1, 2, 3})
        assert store.get("k") is None

    def test_delete(self, store: CacheStore):
        store.set("k", "v")
        store.delete("k")
        store.delete("k")
        assert store.get("k") is None


class TestCorruptEntries:
    """Corrupt entries are misses and get removed."""

    @pytest.mark.parametrize(
        "content",
        [
            "{not json",
            json.dumps(["a", "list"]),
            json.dumps({"data": 1}),
            json.dumps({"data": 1, "timestamp": 0, "expires": "later"}),
        ],
    )
    def test_corrupt_is_miss(self, store: CacheStore, content: str):
        store.path_for("bad").write_text(content, encoding="utf-8")

        assert store.get("bad") is None
        assert not store.path_for("bad").exists()


class TestSizeCap:
    """Tests for the entry cap."""

    def test_keeps_newest(self, store: CacheStore, clock):
        for i in range(store.max_entries + 5):
            clock.now = i
            store.set(f"k{i}", i)

        assert store.stats().entries == store.max_entries
        for i in range(5):
            assert store.get(f"k{i}") is None
        for i in range(5, store.max_entries + 5):
            assert store.get(f"k{i}") == i

    def test_enforce_explicit_cap(self, store: CacheStore, clock):
        for i in range(4):
            clock.now = i
            store.set(f"k{i}", i)

        assert store.enforce_size_cap(2) == 2
        assert store.get("k3") == 3
        assert store.get("k0") is None


class TestMaintenance:
    """Tests for sweep, clear and stats."""

    def test_sweep_on_construction(self, cache_dir: Path, clock):
        CacheStore(cache_dir, default_ttl=1000, clock=clock).set("k", "v")
        clock.now = 5000

        reopened = CacheStore(cache_dir, clock=clock)

        assert reopened.stats().entries == 0

    def test_sweep_keeps_live(self, store: CacheStore, clock):
        store.set("short", 1, ttl=10)
        store.set("long", 2, ttl=10_000)
        clock.now = 100

        assert store.sweep_expired() == 1
        assert store.get("long") == 2

    def test_clear(self, store: CacheStore):
        store.set("a", 1)
        store.set("b", 2)

        assert store.clear() == 2
        assert store.stats().entries == 0

    def test_stats(self, store: CacheStore):
        store.set("a", "x" * 4096)

        stats = store.stats()

        assert stats.entries == 1
        assert stats.total_size_kb >= 4
        assert stats.max_entries == 10

    def test_unwritable_directory_does_not_raise(self, temp_dir: Path, clock):
        blocker = temp_dir / "file"
        blocker.write_text("x", encoding="utf-8")

        store = CacheStore(blocker / "cache", clock=clock)
        store.set("k", "v")

        assert store.get("k") is None
