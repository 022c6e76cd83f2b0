"""Orchestration package for fslint.

- ScanOrchestrator: Composes traversal, cache and registry into full scans.
- ScanLogger: Writes a sectioned scan log file.
"""

from fslint.orchestration.scan_logger import ScanLogger
from fslint.orchestration.scan_orchestrator import ScanOrchestrator

__all__ = ["ScanLogger", "ScanOrchestrator"]
