"""
Models package for the fslint file-intelligence scanner.

This package provides convenient imports for all data models:
- FindingStatus: Enum of capability verdicts
- FileIdentity: Path + mtime + size cache key
- ScanContext: Per-file unit of work for capabilities
- Finding: One capability's verdict
- CapabilityDescriptor: Capability registration metadata
- ScanRecord: A file and its findings
- ScanPolicy: Traversal policy
- CacheStats: Result cache counters
- ScanResult: Output of a full scan
"""

from .finding_status import FindingStatus
from .data_models import (
    CacheStats,
    CapabilityDescriptor,
    FileIdentity,
    Finding,
    ScanContext,
    ScanPolicy,
    ScanRecord,
    ScanResult,
)

__all__ = [
    "FindingStatus",
    "CacheStats",
    "CapabilityDescriptor",
    "FileIdentity",
    "Finding",
    "ScanContext",
    "ScanPolicy",
    "ScanRecord",
    "ScanResult",
]
