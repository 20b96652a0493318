"""Content-addressed cache of generated search queries."""

import hashlib
import json
import os
import shutil
import tempfile
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional, Union

from ..errors import CacheError
from ..utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CacheStats:
    """Summary of the on-disk cache."""
    entries: int
    size_bytes: int
    path: Path


def cache_key(diff: str) -> str:
    """First 8 bytes of the diff's SHA-256, hex encoded."""
    return hashlib.sha256(diff.encode("utf-8")).digest()[:8].hex()


class QueryCache:
    """
    Maps a diff to the search queries previously generated for it.

    One JSON file per diff:
        {"queries": [...], "created_at": "<ISO-8601>"}

    The cache is advisory. Concurrent writers race on os.replace and the
    last one wins; readers treat anything unreadable as a miss.
    """

    def __init__(self, directory: Union[str, Path], ttl: int = 3600):
        """
        Args:
            directory: Cache directory (created on first write)
            ttl: Entry lifetime in seconds
        """
        self.directory = Path(directory)
        self.ttl = ttl

    def path_for(self, diff: str) -> Path:
        return self.directory / f"{cache_key(diff)}.json"

    def get(self, diff: str, now: Optional[datetime] = None) -> Optional[List[str]]:
        """
        Look up cached queries for a diff.

        Expired entries are deleted as a side effect.

        Returns:
            The cached queries, or None on a miss
        """
        cache_file = self.path_for(diff)
        if not cache_file.is_file():
            return None

        try:
            entry = json.loads(cache_file.read_text(encoding="utf-8"))
            queries = entry["queries"]
            created_at = datetime.fromisoformat(entry["created_at"])
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.debug(f"Ignoring unreadable cache entry {cache_file}: {e}")
            return None

        if not isinstance(queries, list) or not all(isinstance(q, str) for q in queries):
            logger.debug(f"Ignoring malformed cache entry {cache_file}")
            return None

        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)

        now = now or datetime.now(timezone.utc)
        if now - created_at > timedelta(seconds=self.ttl):
            logger.debug("Cache entry expired")
            try:
                cache_file.unlink()
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.debug(f"Failed to remove expired cache entry: {e}")
            return None

        return list(queries)

    def put(self, diff: str, queries: List[str], now: Optional[datetime] = None):
        """
        Store queries for a diff.

        Raises:
            CacheError: If the directory or entry cannot be written
        """
        created_at = now or datetime.now(timezone.utc)
        content = json.dumps(
            {"queries": list(queries), "created_at": created_at.isoformat()},
            indent=2,
        )

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.directory, prefix=".tmp-", suffix=".json"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(content)
                os.replace(tmp_name, self.path_for(diff))
            except BaseException:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
                raise
        except OSError as e:
            raise CacheError(str(e)) from e

        logger.debug(f"Cached queries to {self.path_for(diff)}")

    def clear(self):
        """Remove the cache directory and everything in it."""
        if not self.directory.exists():
            return
        try:
            shutil.rmtree(self.directory)
        except OSError as e:
            raise CacheError(str(e)) from e

    def stats(self) -> CacheStats:
        """Count entries and bytes on disk."""
        if not self.directory.exists():
            return CacheStats(entries=0, size_bytes=0, path=self.directory)

        entries = 0
        size_bytes = 0
        try:
            for entry in self.directory.iterdir():
                if entry.is_file():
                    entries += 1
                    size_bytes += entry.stat().st_size
        except OSError as e:
            raise CacheError(str(e)) from e

        return CacheStats(entries=entries, size_bytes=size_bytes, path=self.directory)
