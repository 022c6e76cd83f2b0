"""Result cache keyed by file identity.

This module provides the ResultCache class, which maps a FileIdentity
(path + modified time + size) to the findings computed for it. A file whose
mtime or size changed simply produces a different key: the old entry is
never looked up again and stays in memory until ``clear()``.

Example:
    >>> cache = ResultCache()
    >>> cache.get(identity) is None
    True
    >>> cache.put(identity, findings)
    >>> cache.get(identity) == findings
    True
    >>> cache.stats()
    (1, 1)
"""

import logging
import threading
from typing import Dict, List, Optional, Tuple

from fslint.models import CacheStats, FileIdentity, Finding

logger = logging.getLogger(__name__)


class ResultCache:
    """Thread-safe in-memory map of FileIdentity to findings.

    Entries are never evicted or expired. Hit and miss counters are
    monotonic for the life of the instance and reset only by ``clear()``.
    A miss race between workers is resolved by the last ``put`` winning.

    Attributes:
        _entries: Dictionary mapping identities to finding lists.
        _hits: Counter for cache hits.
        _misses: Counter for cache misses.
        _lock: Lock guarding entries and counters.
    """

    def __init__(self) -> None:
        """Initialize an empty cache with zeroed counters."""
        self._entries: Dict[FileIdentity, List[Finding]] = {}
        self._hits: int = 0
        self._misses: int = 0
        self._lock = threading.Lock()

    def get(self, identity: FileIdentity) -> Optional[List[Finding]]:
        """Look up the findings stored for an identity.

        Args:
            identity: Path, mtime and size of the file.

        Returns:
            Copies of the cached findings on a hit, None on a miss. Callers
            may change them without affecting the cache.
        """
        with self._lock:
            findings = self._entries.get(identity)
            if findings is None:
                self._misses += 1
                return None
            self._hits += 1
        logger.debug("Cache hit: %s", identity.path)
        return [finding.copy() for finding in findings]

    def put(self, identity: FileIdentity, findings: List[Finding]) -> None:
        """Store findings under an identity, replacing any previous entry."""
        with self._lock:
            self._entries[identity] = [finding.copy() for finding in findings]

    def clear(self) -> None:
        """Drop every entry and reset the hit/miss counters."""
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> Tuple[int, int]:
        """Return (hits, misses)."""
        with self._lock:
            return self._hits, self._misses

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def hit_rate(self) -> float:
        """hits / (hits + misses), 0.0 before any lookup."""
        return self.snapshot().hit_rate

    def snapshot(self) -> CacheStats:
        """Return the counters and entry count as a CacheStats."""
        with self._lock:
            return CacheStats(hits=self._hits, misses=self._misses, size=len(self._entries))

    def get_cache_stats(self) -> Dict[str, int]:
        """Get cache statistics for debugging and monitoring.

        Returns:
            Dictionary with keys:
            - 'size': Number of entries in the cache
            - 'hits': Number of cache hits
            - 'misses': Number of cache misses
        """
        with self._lock:
            return {
                "size": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
            }
