"""Version detection capability: spots file_v1 / file_final / file (2) names."""

import re
from typing import List, Optional, Pattern, Tuple

from fslint.capabilities.base import Capability
from fslint.models import CapabilityDescriptor, Finding, FindingStatus, ScanContext

VERSION_PATTERNS: List[Pattern[str]] = [
    re.compile(r"_v(\d+)(\.\w+)?$"),
    re.compile(r"_version_?(\d+)(\.\w+)?$"),
    re.compile(r"_(final|last|newest|latest)(\.\w+)?$"),
    re.compile(r"_(old|backup|bak|copy|original)(\.\w+)?$"),
    re.compile(r"\((\d+)\)(\.\w+)?$"),  # file (1), file (2)
]

LATEST_KEYWORDS = {"final", "last", "newest", "latest"}
STALE_KEYWORDS = {"old", "backup", "bak", "copy", "original"}

LATEST_PRIORITY = 1000
STALE_PRIORITY = -1000


class VersionDetectionCapability(Capability):
    """Classifies versioned file names as latest, recent, old or plain versioned."""

    @classmethod
    def describe(cls) -> CapabilityDescriptor:
        return CapabilityDescriptor(
            name="version-detection",
            version="0.1.0",
            description="Detects versioned files (file_v1, file_v2, file_final)",
            enabled_by_default=False,
            author="fslint contributors",
        )

    def detect_version(self, name: str) -> Optional[Tuple[str, int]]:
        """Return (version token, priority) for a file name, or None.

        Example:
            >>> VersionDetectionCapability().detect_version("report_final.pdf")
            ('final', 1000)
        """
        for pattern in VERSION_PATTERNS:
            match = pattern.search(name)
            if match is None:
                continue
            version = match.group(1)
            if version in LATEST_KEYWORDS:
                priority = LATEST_PRIORITY
            elif version in STALE_KEYWORDS:
                priority = STALE_PRIORITY
            else:
                try:
                    priority = int(version)
                except ValueError:
                    priority = 0
            return version, priority
        return None

    def categorize_version(self, priority: int) -> Tuple[str, str, FindingStatus]:
        if priority >= LATEST_PRIORITY:
            return "Latest Version", "green", FindingStatus.ACTIVE
        if priority < 0:
            return "Old Version", "red", FindingStatus.WARNING
        if priority > 5:
            return "Recent Version", "yellow", FindingStatus.ACTIVE
        return "Versioned File", "gray", FindingStatus.INACTIVE

    def check(self, context: ScanContext) -> Finding:
        detected = self.detect_version(context.path.name)
        if detected is None:
            return Finding.inactive(self.name)

        version, priority = detected
        category, color, status = self.categorize_version(priority)
        return (
            Finding(self.name, status, message=f"{category} ({version})", color=color)
            .with_tags(["version"])
            .with_metadata("version", version)
            .with_metadata("priority", priority)
            .with_metadata("category", category)
        )
