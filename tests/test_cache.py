"""Unit tests for the session caches."""

from __future__ import annotations

from autologin.core.cache import FileCache, MemoryCache


class TestMemoryCache:
    def test_put_get_remove(self, clock) -> None:
        cache = MemoryCache(clock=clock)
        assert cache.get("k") is None

        cache.put("k", "v", 60)
        assert cache.get("k") == "v"

        cache.remove("k")
        assert cache.get("k") is None
        cache.remove("k")

    def test_entries_expire(self, clock) -> None:
        cache = MemoryCache(clock=clock)
        cache.put("k", "v", 60)

        clock.now += 59
        assert cache.get("k") == "v"
        clock.now += 1
        assert cache.get("k") is None


class TestFileCache:
    def test_put_get_remove(self, tmp_path, clock) -> None:
        cache = FileCache(str(tmp_path / "sessions"), clock=clock)
        assert (tmp_path / "sessions").is_dir()

        cache.put("SessionClient.https://host/login", '{"x": 1}', 600)
        assert cache.get("SessionClient.https://host/login") == '{"x": 1}'
        assert len(list((tmp_path / "sessions").glob("*.json"))) == 1

        cache.remove("SessionClient.https://host/login")
        assert cache.get("SessionClient.https://host/login") is None
        cache.remove("SessionClient.https://host/login")

    def test_survives_new_instance(self, tmp_path, clock) -> None:
        FileCache(str(tmp_path), clock=clock).put("k", "v", 600)
        assert FileCache(str(tmp_path), clock=clock).get("k") == "v"

    def test_entries_expire(self, tmp_path, clock) -> None:
        cache = FileCache(str(tmp_path), clock=clock)
        cache.put("k", "v", 60)
        clock.now += 61
        assert cache.get("k") is None

    def test_keys_are_isolated(self, tmp_path, clock) -> None:
        cache = FileCache(str(tmp_path), clock=clock)
        cache.put("a", "1", 60)
        cache.put("b", "2", 60)
        assert cache.get("a") == "1"
        assert cache.get("b") == "2"

    def test_corrupt_entry_is_a_miss(self, tmp_path, clock) -> None:
        cache = FileCache(str(tmp_path), clock=clock)
        cache.put("k", "v", 60)
        next(tmp_path.glob("*.json")).write_text("{not json", encoding="utf-8")

        assert cache.get("k") is None
