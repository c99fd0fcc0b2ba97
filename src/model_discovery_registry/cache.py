"""Disk-backed cache for provider snapshots.

Each entry is a JSON file ``{key}.json`` holding ``{"data": ..., "timestamp": ...}``
under the cache directory. Reads never raise; a missing, unreadable or
malformed entry is a cache miss.
"""

import json
import os
import re
import tempfile
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .config_paths import ensure_dir_exists, get_cache_dir
from .errors import CacheError
from .logging import get_logger

logger = get_logger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9\-_]")


@dataclass(frozen=True)
class CacheEntry:
    """A cached payload and the time it was written (epoch seconds)."""

    data: Any
    timestamp: float


class DiskCache:
    """TTL-aware key/value store backed by JSON files."""

    def __init__(self, cache_dir: Optional[Union[str, Path]] = None) -> None:
        """Initialize the cache.

        Args:
            cache_dir: Directory for cache files, defaults to the user cache dir
        """
        self.cache_dir = Path(cache_dir).expanduser() if cache_dir else get_cache_dir()

    def _path_for(self, key: str) -> Path:
        return self.cache_dir / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def get(self, key: str) -> Optional[CacheEntry]:
        """Read an entry.

        Args:
            key: Cache key

        Returns:
            The entry, or None when it is missing or unreadable
        """
        path = self._path_for(key)
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.debug(f"Ignoring unreadable cache entry {path}: {e}")
            return None

        if not isinstance(raw, dict) or "data" not in raw or "timestamp" not in raw:
            return None
        try:
            timestamp = float(raw["timestamp"])
        except (TypeError, ValueError):
            return None
        return CacheEntry(data=raw["data"], timestamp=timestamp)

    def set(self, key: str, data: Any) -> None:
        """Write an entry stamped with the current time.

        The file is written to a temporary sibling and moved into place, so
        readers never see a partial entry.

        Args:
            key: Cache key
            data: JSON-serializable payload

        Raises:
            CacheError: If the entry cannot be written
        """
        path = self._path_for(key)
        payload = {"data": data, "timestamp": time.time()}
        try:
            ensure_dir_exists(self.cache_dir)
            fd, tmp_name = tempfile.mkstemp(dir=str(self.cache_dir), prefix=".tmp-", suffix=".partial")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(payload, f)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise CacheError(f"Failed to write cache entry {path}: {e}", key) from e

    def invalidate(self, key: str) -> None:
        """Delete one entry; a missing entry is not an error."""
        try:
            self._path_for(key).unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Failed to invalidate cache entry {key}: {e}")

    def clear(self) -> List[str]:
        """Delete every entry.

        Returns:
            Names of the removed files
        """
        removed: List[str] = []
        if not self.cache_dir.is_dir():
            return removed
        for path in sorted(self.cache_dir.glob("*.json")):
            try:
                path.unlink()
                removed.append(path.name)
            except OSError as e:
                logger.warning(f"Failed to clear cache file {path}: {e}")
        return removed

    @staticmethod
    def is_expired(timestamp: float, ttl: float, now: Optional[float] = None) -> bool:
        """Check whether an entry written at ``timestamp`` is older than ``ttl`` seconds."""
        current = time.time() if now is None else now
        return current - timestamp > ttl

    def info(self) -> Dict[str, Any]:
        """Describe the cache directory and its entries.

        Returns:
            Dictionary with the directory, whether it exists, and one record per file
        """
        files: List[Dict[str, Any]] = []
        if self.cache_dir.is_dir():
            for path in sorted(self.cache_dir.glob("*.json")):
                try:
                    stat = path.stat()
                except OSError:
                    continue
                entry = self.get(path.stem)
                files.append(
                    {
                        "name": path.name,
                        "path": str(path),
                        "size": stat.st_size,
                        "modified": datetime.fromtimestamp(stat.st_mtime).strftime("%Y-%m-%d %H:%M:%S"),
                        "written_at": (
                            datetime.fromtimestamp(entry.timestamp).strftime("%Y-%m-%d %H:%M:%S") if entry else None
                        ),
                    }
                )
        return {
            "directory": str(self.cache_dir),
            "exists": self.cache_dir.is_dir(),
            "files": files,
            "total_size": sum(int(f["size"]) for f in files),
        }
