"""Duplicate finder capability using SHA256 content hashes.

The capability keeps a private table of content hash -> paths seen so far.
The first file with a given hash is reported as Inactive; every later file
with the same content is reported as a Warning that lists the earlier
copies. The table is created on first use, guarded by a lock so checks can
run from several worker threads, and dropped on ``cleanup()``.
"""

import hashlib
import threading
from pathlib import Path
from typing import Dict, List, Optional

from fslint.capabilities.base import Capability, CapabilityExecutionError
from fslint.models import CapabilityDescriptor, Finding, FindingStatus, ScanContext

# Buffer size for chunked file reading (8KB)
CHUNK_SIZE = 8192

DEFAULT_MIN_SIZE = 1024


class DuplicateFinderCapability(Capability):
    """Reports files whose content was already seen during the scan.

    Attributes:
        min_size: Files smaller than this many bytes are skipped.
    """

    def __init__(self, min_size: int = DEFAULT_MIN_SIZE) -> None:
        self.min_size = min_size
        self._hashes: Optional[Dict[str, List[str]]] = None
        self._lock = threading.Lock()

    @classmethod
    def describe(cls) -> CapabilityDescriptor:
        return CapabilityDescriptor(
            name="duplicate-finder",
            version="0.1.0",
            description="Finds duplicate files using SHA-256 hash comparison",
            enabled_by_default=False,
            author="fslint contributors",
        )

    def calculate_hash(self, file_path: Path) -> str:
        """Compute SHA256 hash by reading the file in chunks.

        Raises:
            CapabilityExecutionError: If the file cannot be read.
        """
        sha256_hash = hashlib.sha256()
        try:
            with open(file_path, "rb") as f:
                while True:
                    chunk = f.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    sha256_hash.update(chunk)
        except OSError as e:
            raise CapabilityExecutionError(f"Failed to hash file: {e}", self.name) from e
        return sha256_hash.hexdigest()

    def record(self, path: str, digest: str) -> List[str]:
        """Register ``path`` under ``digest`` and return earlier paths with it."""
        with self._lock:
            if self._hashes is None:
                self._hashes = {}
            paths = self._hashes.setdefault(digest, [])
            earlier = [p for p in paths if p != path]
            if path not in paths:
                paths.append(path)
            return earlier

    def check(self, context: ScanContext) -> Finding:
        if context.size < self.min_size:
            return Finding.skipped(self.name)

        digest = self.calculate_hash(context.path)
        earlier = self.record(str(context.path), digest)

        if not earlier:
            return Finding.inactive(self.name).with_metadata("hash", digest)

        copies = len(earlier) + 1
        return (
            Finding(
                self.name,
                FindingStatus.WARNING,
                message=f"Duplicate ({copies} copies)",
                color="red",
            )
            .with_tags(["duplicate"])
            .with_metadata("hash", digest)
            .with_metadata("duplicate_count", copies)
            .with_metadata("duplicates", ";".join(earlier))
        )

    def initialize(self, config: Dict[str, str]) -> None:
        self.min_size = self._parse_int_option(config, "min_size", self.min_size)

    def cleanup(self) -> None:
        with self._lock:
            self._hashes = None

    def get_table_size(self) -> int:
        """Number of distinct content hashes currently tracked."""
        with self._lock:
            return 0 if self._hashes is None else len(self._hashes)
