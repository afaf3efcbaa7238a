"""Tests for the response cache."""

from collections.abc import Iterator
from pathlib import Path

import pytest

from stock_signals.data.cache import ResponseCache, compose_cache_key, normalize_cache_params


@pytest.fixture
def cache(tmp_path: Path) -> Iterator[ResponseCache]:
    response_cache = ResponseCache(cache_dir=str(tmp_path / "cache"), ttl=60)
    yield response_cache
    response_cache.close()


class TestCacheKey:
    """Tests for cache key composition."""

    def test_format(self) -> None:
        key = compose_cache_key("getPrices", {"ticker": "AAPL"})

        prefix, method, digest = key.split(":")
        assert prefix == "financial-datasets"
        assert method == "getPrices"
        assert len(digest) == 64

    def test_key_order_irrelevant(self) -> None:
        assert compose_cache_key("m", {"a": 1, "b": 2}) == compose_cache_key("m", {"b": 2, "a": 1})

    def test_list_order_irrelevant(self) -> None:
        first = compose_cache_key("m", {"line_items": ["revenue", "ebit"]})
        second = compose_cache_key("m", {"line_items": ["ebit", "revenue"]})

        assert first == second

    def test_method_distinguishes(self) -> None:
        assert compose_cache_key("a", {}) != compose_cache_key("b", {})

    def test_normalize_nested(self) -> None:
        assert normalize_cache_params({"b": [3, 1], "a": {"d": 1, "c": 2}}) == {
            "a": {"c": 2, "d": 1},
            "b": [1, 3],
        }


class TestResponseCache:
    """Tests for ResponseCache storage."""

    def test_store_and_get(self, cache: ResponseCache) -> None:
        cache.store("k", {"prices": [{"close": 1.0}]})

        assert cache.get("k") == {"prices": [{"close": 1.0}]}

    def test_missing(self, cache: ResponseCache) -> None:
        assert cache.get("absent") is None

    def test_clear(self, cache: ResponseCache) -> None:
        cache.store("k", {"x": 1})
        cache.clear()

        assert cache.get("k") is None
