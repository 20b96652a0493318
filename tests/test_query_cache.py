"""Tests for the search query cache."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from driftcheck.errors import CacheError
from driftcheck.tools.query_cache import QueryCache, cache_key


DIFF = "diff --git a/x.py b/x.py\n@@ -1 +1 @@\n-a\n+b\n"


class TestCacheKey:
    """Tests for cache_key."""

    def test_key_is_16_hex_chars(self):
        key = cache_key(DIFF)
        assert len(key) == 16
        int(key, 16)

    def test_same_diff_same_key(self):
        assert cache_key(DIFF) == cache_key(DIFF)
        assert cache_key(DIFF) != cache_key(DIFF + " ")

    def test_known_value(self):
        """Given empty input, should be the SHA-256 prefix of the empty string."""
        assert cache_key("") == "e3b0c44298fc1c14"


class TestQueryCache:
    """Tests for QueryCache get/put/expiry."""

    def test_put_then_get(self, tmp_path):
        """Given stored queries, get should return them unchanged."""
        # Given
        cache = QueryCache(tmp_path / "cache", ttl=3600)

        # When
        cache.put(DIFF, ["timeout", "retry_count"])

        # Then
        assert cache.get(DIFF) == ["timeout", "retry_count"]

    def test_entry_file_format(self, tmp_path):
        """Given a stored entry, the file should hold queries and created_at."""
        # Given
        cache = QueryCache(tmp_path, ttl=3600)
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)

        # When
        cache.put(DIFF, ["a"], now=now)

        # Then
        entry = json.loads((tmp_path / f"{cache_key(DIFF)}.json").read_text())
        assert entry["queries"] == ["a"]
        assert datetime.fromisoformat(entry["created_at"]) == now

    def test_missing_entry_is_miss(self, tmp_path):
        assert QueryCache(tmp_path / "nope").get(DIFF) is None

    def test_expired_entry_is_miss_and_removed(self, tmp_path):
        """Given an entry older than the TTL, should miss and delete the file."""
        # Given
        cache = QueryCache(tmp_path, ttl=60)
        created = datetime(2024, 1, 1, tzinfo=timezone.utc)
        cache.put(DIFF, ["a"], now=created)

        # When
        result = cache.get(DIFF, now=created + timedelta(seconds=61))

        # Then
        assert result is None
        assert not cache.path_for(DIFF).exists()

    def test_fresh_entry_within_ttl(self, tmp_path):
        cache = QueryCache(tmp_path, ttl=60)
        created = datetime(2024, 1, 1, tzinfo=timezone.utc)
        cache.put(DIFF, ["a"], now=created)

        assert cache.get(DIFF, now=created + timedelta(seconds=59)) == ["a"]

    @pytest.mark.parametrize("content", [
        "not json",
        '{"queries": ["a"]}',
        '{"queries": "a", "created_at": "2024-01-01T00:00:00+00:00"}',
        '{"queries": [1], "created_at": "2024-01-01T00:00:00+00:00"}',
        '{"queries": [], "created_at": "yesterday"}',
    ])
    def test_corrupt_entry_is_miss(self, tmp_path, content):
        """Given an unreadable entry, should miss instead of raising."""
        # Given
        cache = QueryCache(tmp_path, ttl=3600)
        cache.path_for(DIFF).write_text(content)

        # Then
        assert cache.get(DIFF) is None

    def test_put_leaves_no_temp_files(self, tmp_path):
        cache = QueryCache(tmp_path, ttl=3600)
        cache.put(DIFF, ["a"])
        cache.put(DIFF, ["b"])

        assert [p.name for p in tmp_path.iterdir()] == [f"{cache_key(DIFF)}.json"]
        assert cache.get(DIFF) == ["b"]

    def test_unwritable_directory_raises_cache_error(self, tmp_path):
        """Given a cache dir that is a file, put should raise CacheError."""
        # Given
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        cache = QueryCache(blocker / "cache")

        # Then
        with pytest.raises(CacheError):
            cache.put(DIFF, ["a"])


class TestCacheMaintenance:
    """Tests for clear and stats."""

    def test_stats_counts_entries(self, tmp_path):
        # Given
        cache = QueryCache(tmp_path / "cache")
        cache.put("one", ["a"])
        cache.put("two", ["b"])

        # When
        stats = cache.stats()

        # Then
        assert stats.entries == 2
        assert stats.size_bytes > 0
        assert stats.path == tmp_path / "cache"

    def test_stats_of_missing_directory(self, tmp_path):
        stats = QueryCache(tmp_path / "cache").stats()
        assert (stats.entries, stats.size_bytes) == (0, 0)

    def test_clear_removes_everything(self, tmp_path):
        # Given
        cache = QueryCache(tmp_path / "cache")
        cache.put(DIFF, ["a"])

        # When
        cache.clear()

        # Then
        assert not (tmp_path / "cache").exists()
        assert cache.get(DIFF) is None
        cache.clear()
