"""
Core data models for the fslint file-intelligence scanner.

This module contains the following dataclasses:
- FileIdentity: Path + modified time + size, the cache key of a file
- ScanContext: The unit of work handed to every capability for one file
- Finding: One capability's verdict about one file
- CapabilityDescriptor: Registration metadata of a capability
- ScanRecord: A file plus its ordered findings
- ScanPolicy: Traversal policy (depth, hidden files, symlinks, ignore rules, cap)
- CacheStats: Result cache counters
- ScanResult: Output of a full scan
"""

import os
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .finding_status import FindingStatus


@dataclass(frozen=True)
class FileIdentity:
    """Identity of a file for one traversal step.

    Two identities are cache-equivalent iff path, modified time in
    nanoseconds and size are all equal. The float ``modified`` is kept for
    display and ordering only; when ``modified_ns`` is not given it is
    derived from it.
    """
    path: Path                        # Absolute path to the file
    modified: Optional[float] = field(compare=False)  # POSIX mtime in seconds (None if unknown)
    size: int                         # Length in bytes
    modified_ns: Optional[int] = None  # POSIX mtime in nanoseconds, the cache key part

    def __post_init__(self):
        if self.modified_ns is None and self.modified is not None:
            object.__setattr__(self, "modified_ns", int(round(self.modified * 1_000_000_000)))

    @classmethod
    def from_stat(cls, path: Path, stat_result: os.stat_result) -> "FileIdentity":
        """Build an identity from a path and its stat result."""
        modified: Optional[float] = getattr(stat_result, "st_mtime", None)
        modified_ns: Optional[int] = getattr(stat_result, "st_mtime_ns", None)
        return cls(path=path, modified=modified, size=stat_result.st_size, modified_ns=modified_ns)


@dataclass
class ScanContext:
    """Everything a capability may look at while checking one file."""
    identity: FileIdentity            # What is being checked
    stat: os.stat_result              # Raw filesystem metadata
    working_dir: Path                 # Scan root, for relative paths
    shared: Dict[str, str] = field(default_factory=dict)  # Per-file side channel

    @property
    def path(self) -> Path:
        return self.identity.path

    @property
    def size(self) -> int:
        return self.identity.size

    @property
    def modified(self) -> Optional[float]:
        return self.identity.modified

    @property
    def relative_path(self) -> Optional[Path]:
        """Path relative to the working directory, or None if outside it."""
        try:
            return self.identity.path.relative_to(self.working_dir)
        except ValueError:
            return None


@dataclass
class Finding:
    """One capability's verdict about one file.

    The builders mirror the statuses a capability can report. ``with_*``
    helpers mutate and return the same instance so results can be built
    in a single expression.
    """
    capability_name: str              # Name of the capability that produced it
    status: FindingStatus             # Verdict
    message: Optional[str] = None     # Human readable detail
    color: Optional[str] = None       # Display color hint
    tags: List[str] = field(default_factory=list)         # Categorization tags
    metadata: Dict[str, str] = field(default_factory=dict)  # Extra key/value data

    @classmethod
    def active(cls, capability_name: str, message: str) -> "Finding":
        return cls(capability_name, FindingStatus.ACTIVE, message=message)

    @classmethod
    def inactive(cls, capability_name: str) -> "Finding":
        return cls(capability_name, FindingStatus.INACTIVE)

    @classmethod
    def alert(cls, capability_name: str, message: str) -> "Finding":
        return cls(capability_name, FindingStatus.ALERT, message=message, color="yellow")

    @classmethod
    def warning(cls, capability_name: str, message: str) -> "Finding":
        return cls(capability_name, FindingStatus.WARNING, message=message, color="red")

    @classmethod
    def error(cls, capability_name: str, message: str) -> "Finding":
        return cls(capability_name, FindingStatus.ERROR, message=message, color="red")

    @classmethod
    def skipped(cls, capability_name: str) -> "Finding":
        return cls(capability_name, FindingStatus.SKIPPED)

    def with_color(self, color: str) -> "Finding":
        self.color = color
        return self

    def with_tags(self, tags: Iterable[str]) -> "Finding":
        # Tags behave as a set; first occurrence keeps its position
        self.tags = list(dict.fromkeys(tags))
        return self

    def with_metadata(self, key: str, value: Any) -> "Finding":
        self.metadata[key] = str(value)
        return self

    def copy(self) -> "Finding":
        """Return an independent copy, with its own tags list and metadata dict."""
        return replace(self, tags=list(self.tags), metadata=dict(self.metadata))

    def to_dict(self) -> Dict[str, Any]:
        """Serializable representation used by the JSON report."""
        return {
            "capability": self.capability_name,
            "status": self.status.value,
            "message": self.message,
            "color": self.color,
            "tags": list(self.tags),
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class CapabilityDescriptor:
    """Registration metadata of a capability."""
    name: str                         # Unique key
    version: str                      # Semantic version
    description: str                  # One-line description
    enabled_by_default: bool = False  # Enabled when first registered
    author: Optional[str] = None      # Optional author


@dataclass
class ScanRecord:
    """One scanned file and its findings in capability registration order."""
    identity: FileIdentity
    findings: List[Finding] = field(default_factory=list)

    @property
    def path(self) -> Path:
        return self.identity.path

    @property
    def name(self) -> str:
        return self.identity.path.name

    @property
    def extension(self) -> str:
        """Extension without the dot, case preserved ('' if none)."""
        suffix = self.identity.path.suffix
        return suffix[1:] if suffix else ""

    @property
    def size(self) -> int:
        return self.identity.size

    @property
    def modified(self) -> Optional[float]:
        return self.identity.modified

    @property
    def modified_datetime(self) -> Optional[datetime]:
        if self.identity.modified is None:
            return None
        return datetime.fromtimestamp(self.identity.modified)

    @property
    def tags(self) -> List[str]:
        """Union of the tags of every finding."""
        union: Dict[str, None] = {}
        for finding in self.findings:
            for tag in finding.tags:
                union.setdefault(tag, None)
        return list(union)

    def finding_for(self, capability_name: str) -> Optional[Finding]:
        """Return the finding produced by the named capability, if any."""
        for finding in self.findings:
            if finding.capability_name == capability_name:
                return finding
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": str(self.identity.path),
            "size": self.identity.size,
            "modified": self.identity.modified,
            "findings": [finding.to_dict() for finding in self.findings],
        }


@dataclass
class ScanPolicy:
    """Traversal policy for a scan."""
    max_depth: Optional[int] = 10     # Bound on directory nesting (None = unbounded)
    include_hidden: bool = False      # Include dot entries
    follow_symlinks: bool = False     # Follow symbolic links
    respect_ignore_rules: bool = True  # Apply .gitignore / .ignore files
    max_files: Optional[int] = None   # Cap on scanned files (None = unbounded)

    def __post_init__(self) -> None:
        if self.max_depth is not None and self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.max_files is not None and self.max_files < 0:
            raise ValueError(f"max_files must be >= 0, got {self.max_files}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_depth": self.max_depth,
            "include_hidden": self.include_hidden,
            "follow_symlinks": self.follow_symlinks,
            "respect_ignore_rules": self.respect_ignore_rules,
            "max_files": self.max_files,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScanPolicy":
        defaults = cls()
        return cls(
            max_depth=data.get("max_depth", defaults.max_depth),
            include_hidden=bool(data.get("include_hidden", defaults.include_hidden)),
            follow_symlinks=bool(data.get("follow_symlinks", defaults.follow_symlinks)),
            respect_ignore_rules=bool(
                data.get("respect_ignore_rules", defaults.respect_ignore_rules)
            ),
            max_files=data.get("max_files", defaults.max_files),
        )


@dataclass
class CacheStats:
    """Result cache counters."""
    hits: int = 0
    misses: int = 0
    size: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total


@dataclass
class ScanResult:
    """Output of ScanOrchestrator.scan()."""
    root: Path                        # Resolved scan root
    records: List[ScanRecord] = field(default_factory=list)
    cache_stats: CacheStats = field(default_factory=CacheStats)
    warnings: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0
    capped: bool = False              # Whether max_files stopped the scan
