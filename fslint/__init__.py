"""fslint - File intelligence scanner.

Walks a directory tree, runs pluggable inspection capabilities against every
file, caches their findings by file identity, and filters the results with a
small query language.
"""

import logging

__version__ = "0.1.0"

from .models import (
    CacheStats,
    CapabilityDescriptor,
    FileIdentity,
    Finding,
    FindingStatus,
    ScanContext,
    ScanPolicy,
    ScanRecord,
    ScanResult,
)

# Library code logs; applications decide where records go
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "CacheStats",
    "CapabilityDescriptor",
    "FileIdentity",
    "Finding",
    "FindingStatus",
    "ScanContext",
    "ScanPolicy",
    "ScanRecord",
    "ScanResult",
]


def main() -> None:
    """Entry point for the fslint CLI application.

    This function is called when the `fslint` command is invoked after
    package installation via pip. It imports and runs the Typer app
    from the fslint.cli module.
    """
    from fslint.cli import app
    app()
