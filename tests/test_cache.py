"""Tests for the disk cache."""

import json
import time
from pathlib import Path
from unittest.mock import patch

import pytest

from model_discovery_registry.cache import DiskCache
from model_discovery_registry.errors import CacheError


@pytest.fixture
def cache(tmp_path: Path) -> DiskCache:
    return DiskCache(tmp_path / "cache")


class TestDiskCache:
    """Tests for DiskCache reads and writes."""

    def test_set_then_get(self, cache: DiskCache) -> None:
        before = time.time()
        cache.set("providers_all", [{"id": "openai"}])
        entry = cache.get("providers_all")

        assert entry is not None
        assert entry.data == [{"id": "openai"}]
        assert entry.timestamp >= before
        assert (cache.cache_dir / "providers_all.json").exists()

    def test_missing_entry_is_none(self, cache: DiskCache) -> None:
        assert cache.get("nothing") is None

    def test_corrupt_entry_is_a_miss(self, cache: DiskCache) -> None:
        cache.cache_dir.mkdir(parents=True)
        (cache.cache_dir / "broken.json").write_text("{not json")
        (cache.cache_dir / "wrong_shape.json").write_text(json.dumps({"data": 1}))

        assert cache.get("broken") is None
        assert cache.get("wrong_shape") is None

    def test_unsafe_key_characters_are_replaced(self, cache: DiskCache) -> None:
        cache.set("provider_../etc", {"x": 1})
        assert (cache.cache_dir / "provider____etc.json").exists()
        assert cache.get("provider_../etc").data == {"x": 1}

    def test_no_partial_files_left(self, cache: DiskCache) -> None:
        cache.set("a", {"value": 1})
        assert [p.name for p in cache.cache_dir.iterdir()] == ["a.json"]

    def test_write_failure_raises_cache_error(self, cache: DiskCache) -> None:
        with patch("model_discovery_registry.cache.ensure_dir_exists", side_effect=PermissionError("read-only")):
            with pytest.raises(CacheError) as exc_info:
                cache.set("providers_all", [])
        assert exc_info.value.key == "providers_all"

    def test_unserializable_payload_raises_cache_error(self, cache: DiskCache) -> None:
        with pytest.raises(CacheError):
            cache.set("bad", {"value": object()})
        assert cache.get("bad") is None

    def test_invalidate(self, cache: DiskCache) -> None:
        cache.set("provider_openai", {})
        cache.invalidate("provider_openai")
        cache.invalidate("provider_openai")
        assert cache.get("provider_openai") is None

    def test_clear_returns_removed_files(self, cache: DiskCache) -> None:
        cache.set("provider_openai", {})
        cache.set("providers_all", [])

        removed = cache.clear()

        assert removed == ["provider_openai.json", "providers_all.json"]
        assert cache.get("providers_all") is None

    def test_clear_missing_directory(self, tmp_path: Path) -> None:
        assert DiskCache(tmp_path / "never-created").clear() == []


class TestExpiry:
    """Tests for TTL checks."""

    def test_fresh_and_expired(self) -> None:
        assert not DiskCache.is_expired(timestamp=1000.0, ttl=60.0, now=1059.0)
        assert not DiskCache.is_expired(timestamp=1000.0, ttl=60.0, now=1060.0)
        assert DiskCache.is_expired(timestamp=1000.0, ttl=60.0, now=1061.0)

    def test_zero_ttl_expires_anything_in_the_past(self) -> None:
        assert DiskCache.is_expired(timestamp=1000.0, ttl=0.0, now=1000.5)


def test_info_lists_entries(cache: DiskCache) -> None:
    cache.set("provider_openai", {"id": "openai"})

    info = cache.info()

    assert info["exists"] is True
    assert info["directory"] == str(cache.cache_dir)
    assert [f["name"] for f in info["files"]] == ["provider_openai.json"]
    assert info["files"][0]["written_at"] is not None
    assert info["total_size"] == info["files"][0]["size"]


def test_default_directory_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MDR_CACHE_DIR", str(tmp_path / "from-env"))
    assert DiskCache().cache_dir == tmp_path / "from-env"
