"""
Tests for the persistent search cache.
"""

import json

import pytest

from torrentshare.cache import SearchCache
from torrentshare.errors import CacheLoadError
from torrentshare.models import ResultEntry
from torrentshare.vfs.navigation import safe_name

from conftest import make_result


class TestLoad:
    """Reading the store at startup."""

    def test_missing_store_is_fatal(self, tmp_path):
        with pytest.raises(CacheLoadError, match="not found"):
            SearchCache.load(tmp_path / "missing.json")

    def test_invalid_json_is_fatal(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text("{not json")
        with pytest.raises(CacheLoadError):
            SearchCache.load(path)

    def test_non_mapping_is_fatal(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text("[]")
        with pytest.raises(CacheLoadError, match="not a mapping"):
            SearchCache.load(path)

    def test_entry_without_name_is_fatal(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text(json.dumps({"Q": [{"seeders": "1"}]}))
        with pytest.raises(CacheLoadError, match="malformed"):
            SearchCache.load(path)

    def test_empty_store(self, cache_path):
        cache = SearchCache.load(cache_path)
        assert len(cache) == 0
        assert cache.get("ANY") is None

    def test_legacy_keys(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text(json.dumps({
            "DEBIAN": [{
                "name": "Debian 12",
                "seed": "40",
                "leech": "2",
                "size": "600 MB",
                "sourceName": "Index",
                "sourceURL": "https://index.example/debian",
                "torrentURL": "magnet:?xt=urn:btih:debian",
                "age": "1 day",
                "category": "Software",
            }]
        }))

        cache = SearchCache.load(path)
        result = cache.get("DEBIAN")[0]
        assert result.seeders == "40"
        assert result.leechers == "2"
        assert result.source_name == "Index"
        assert result.source_url == "https://index.example/debian"
        assert result.content_ref == "magnet:?xt=urn:btih:debian"


class TestCreate:
    """Creating an empty store."""

    def test_create_writes_empty_mapping(self, tmp_path):
        path = tmp_path / "nested" / "cache.json"
        SearchCache.create(path)
        assert json.loads(path.read_text()) == {}

    def test_create_refuses_existing(self, cache_path):
        with pytest.raises(FileExistsError):
            SearchCache.create(cache_path)

    def test_create_overwrite(self, cache_path, results):
        cache = SearchCache.load(cache_path)
        cache.put("Q", results)

        SearchCache.create(cache_path, overwrite=True)
        assert len(SearchCache.load(cache_path)) == 0


class TestPutGet:
    """Storing and reading back searches."""

    def test_put_persists(self, cache_path, results):
        cache = SearchCache.load(cache_path)
        cache.put("BUNNY", results)

        reloaded = SearchCache.load(cache_path)
        assert reloaded.get("BUNNY") == results
        assert "BUNNY" in reloaded
        assert reloaded.queries() == ["BUNNY"]

    def test_put_keeps_order(self, cache_path):
        cache = SearchCache.load(cache_path)
        ordered = [make_result(f"Result {i}") for i in range(5)]
        cache.put("Q", ordered)
        assert [r.name for r in SearchCache.load(cache_path).get("Q")] == [r.name for r in ordered]

    def test_empty_result_list_is_cached(self, cache_path):
        cache = SearchCache.load(cache_path)
        cache.put("NOTHING", [])
        assert SearchCache.load(cache_path).get("NOTHING") == []

    def test_put_none_rejected(self, cache_path):
        cache = SearchCache.load(cache_path)
        with pytest.raises(ValueError):
            cache.put("Q", None)
        assert "Q" not in cache

    def test_get_returns_copy(self, cache_path, results):
        cache = SearchCache.load(cache_path)
        cache.put("Q", results)
        cache.get("Q").clear()
        assert len(cache.get("Q")) == 2

    def test_no_temp_file_left(self, cache_path, results):
        cache = SearchCache.load(cache_path)
        cache.put("Q", results)
        assert [p.name for p in cache_path.parent.iterdir()] == ["cache.json"]

    def test_failed_write_keeps_memory_and_cleans_up(self, tmp_path, results):
        store = tmp_path / "store"
        store.mkdir()
        cache = SearchCache(store)

        with pytest.raises(OSError):
            cache.put("Q", results)

        assert cache.get("Q") == results
        assert not (tmp_path / "store.tmp").exists()

    def test_unicode_names_round_trip(self, cache_path):
        cache = SearchCache.load(cache_path)
        cache.put("AMELIE", [make_result("Le Fabuleux Destin d'Amélie Poulain")])
        assert "Amélie" in cache_path.read_text(encoding="utf-8")
        assert SearchCache.load(cache_path).get("AMELIE")[0].name.endswith("Amélie Poulain")


class TestFind:
    """Looking up a result by folder name."""

    def test_find_by_name(self, cache_path, results):
        cache = SearchCache.load(cache_path)
        cache.put("Q", results)
        assert cache.find("Q", "Sintel 4K") == results[1]

    def test_find_unknown(self, cache_path, results):
        cache = SearchCache.load(cache_path)
        cache.put("Q", results)
        assert cache.find("Q", "Nope") is None
        assert cache.find("OTHER", "Sintel 4K") is None

    def test_find_with_key(self, cache_path):
        cache = SearchCache.load(cache_path)
        entry = ResultEntry(name="AC/DC Live", content_ref="magnet:?xt=urn:btih:acdc")
        cache.put("ACDC", [entry])

        assert cache.find("ACDC", "AC|DC Live") is None
        assert cache.find("ACDC", "AC|DC Live", key=safe_name) == entry
