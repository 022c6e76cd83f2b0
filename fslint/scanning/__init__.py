"""File scanning package for fslint.

This package provides the pieces a scan is built from:

- TraversalEngine: Walks a directory tree under a ScanPolicy and yields
  TraversalEntry objects for regular files.
- ResultCache: Maps file identities to previously computed findings.
- SafetyChecker: Hidden-ratio warning and system-directory refusal.

Example:
    >>> from fslint.scanning import ResultCache, TraversalEngine
    >>> engine = TraversalEngine()
    >>> cache = ResultCache()
    >>> for entry in engine.walk(Path("/data")):
    ...     findings = cache.get(entry.identity)
"""

from .result_cache import ResultCache
from .safety import (
    SafetyChecker,
    SystemDirectoryError,
    check_system_directory,
    is_git_repo,
    is_hidden_file,
    sanitize_path_for_display,
)
from .traversal import IgnoreRules, TraversalEngine, TraversalEntry

__all__ = [
    "IgnoreRules",
    "ResultCache",
    "SafetyChecker",
    "SystemDirectoryError",
    "TraversalEngine",
    "TraversalEntry",
    "check_system_directory",
    "is_git_repo",
    "is_hidden_file",
    "sanitize_path_for_display",
]
