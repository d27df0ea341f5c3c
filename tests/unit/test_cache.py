"""Tests for cache module."""

import json
from dataclasses import dataclass
from enum import Enum

import pytest

from modelfusion.cache import (
    Cache,
    FileCache,
    MemoryCache,
    canonical_key,
    create_call_cache_key,
    hash_key,
)


class Role(str, Enum):
    USER = "user"


@dataclass
class Message:
    role: Role
    content: str


def _key(prompt: str = "Hello") -> dict:
    return create_call_cache_key(
        "generate-text",
        function_id=None,
        model={"provider": "test", "model_name": "echo"},
        settings={"max_generation_tokens": 10},
        prompt=prompt,
    )


class TestCacheKey:
    """Tests for cache key generation."""

    def test_call_key_shape(self) -> None:
        """Test the structure of a call cache key."""
        key = _key()
        assert key["function_type"] == "generate-text"
        assert key["function_id"] is None
        assert key["input"]["prompt"] == "Hello"
        assert key["input"]["model"] == {"provider": "test", "model_name": "echo"}

    def test_canonical_ignores_order(self) -> None:
        """Test that mapping order does not matter."""
        assert canonical_key({"a": 1, "b": 2}) == canonical_key({"b": 2, "a": 1})
        assert hash_key({"a": 1, "b": 2}) == hash_key({"b": 2, "a": 1})

    def test_different_inputs_differ(self) -> None:
        """Test that different prompts produce different keys."""
        assert hash_key(_key("Hello")) != hash_key(_key("Goodbye"))

    def test_dataclasses_and_enums(self) -> None:
        """Test serialization of structured prompts."""
        key = canonical_key({"prompt": [Message(role=Role.USER, content="Hi")]})
        assert json.loads(key) == {"prompt": [{"role": "user", "content": "Hi"}]}


class TestMemoryCache:
    """Tests for MemoryCache."""

    @pytest.mark.asyncio
    async def test_store_and_lookup(self) -> None:
        """Test basic storage."""
        cache = MemoryCache()
        assert await cache.lookup_value(_key()) is None
        await cache.store_value(_key(), {"text": "Hi"})
        assert await cache.lookup_value(_key()) == {"text": "Hi"}
        assert cache.size == 1

    @pytest.mark.asyncio
    async def test_ttl_expiry(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that expired entries are not returned."""
        now = [1000.0]
        monkeypatch.setattr("modelfusion.cache.backends.time.time", lambda: now[0])

        cache = MemoryCache(default_ttl=10)
        await cache.store_value(_key(), "value")
        now[0] += 5
        assert await cache.lookup_value(_key()) == "value"
        now[0] += 10
        assert await cache.lookup_value(_key()) is None
        assert cache.size == 0

    @pytest.mark.asyncio
    async def test_eviction_least_used(self) -> None:
        """Test that the least used entry is evicted when full."""
        cache = MemoryCache(max_size=2)
        await cache.store_value("a", 1)
        await cache.store_value("b", 2)
        await cache.lookup_value("a")
        await cache.store_value("c", 3)

        assert cache.size == 2
        assert await cache.lookup_value("a") == 1
        assert await cache.lookup_value("b") is None
        assert await cache.lookup_value("c") == 3

    @pytest.mark.asyncio
    async def test_clear(self) -> None:
        """Test clearing."""
        cache = MemoryCache()
        await cache.store_value("a", 1)
        await cache.clear()
        assert cache.size == 0

    def test_is_cache(self) -> None:
        """Test protocol conformance."""
        assert isinstance(MemoryCache(), Cache)


class TestFileCache:
    """Tests for FileCache."""

    @pytest.mark.asyncio
    async def test_store_and_lookup(self, tmp_path) -> None:
        """Test entries persist across instances."""
        cache = FileCache(cache_dir=tmp_path / "cache")
        await cache.store_value(_key(), {"choices": [{"text": "Hi"}]})

        reopened = FileCache(cache_dir=tmp_path / "cache")
        assert await reopened.lookup_value(_key()) == {"choices": [{"text": "Hi"}]}
        assert await reopened.lookup_value(_key("other")) is None

    @pytest.mark.asyncio
    async def test_file_layout(self, tmp_path) -> None:
        """Test one JSON file per entry named by the key hash."""
        cache = FileCache(cache_dir=tmp_path)
        await cache.store_value(_key(), "value")

        path = tmp_path / f"{hash_key(_key())}.json"
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["key"] == _key()
        assert data["value"] == "value"

    @pytest.mark.asyncio
    async def test_ttl_expiry(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that expired files are removed."""
        now = [1000.0]
        monkeypatch.setattr("modelfusion.cache.backends.time.time", lambda: now[0])

        cache = FileCache(cache_dir=tmp_path, default_ttl=10)
        await cache.store_value(_key(), "value")
        now[0] += 20
        assert await cache.lookup_value(_key()) is None
        assert list(tmp_path.glob("*.json")) == []

    @pytest.mark.asyncio
    async def test_corrupt_file_ignored(self, tmp_path) -> None:
        """Test that unreadable files behave like misses."""
        cache = FileCache(cache_dir=tmp_path)
        (tmp_path / f"{hash_key(_key())}.json").write_text("{broken", encoding="utf-8")
        assert await cache.lookup_value(_key()) is None

    @pytest.mark.asyncio
    async def test_clear(self, tmp_path) -> None:
        """Test clearing removes files."""
        cache = FileCache(cache_dir=tmp_path)
        await cache.store_value("a", 1)
        await cache.clear()
        assert list(tmp_path.glob("*.json")) == []
