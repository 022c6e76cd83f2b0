"""File age capability: highlights recently modified files."""

import time
from typing import Dict, Tuple

from fslint.capabilities import helpers
from fslint.capabilities.base import Capability, CapabilityExecutionError
from fslint.models import CapabilityDescriptor, Finding, FindingStatus, ScanContext


class FileAgeCapability(Capability):
    """Categorizes files by how long ago they were modified.

    Attributes:
        threshold_days: Age in days below which a file counts as recent.
    """

    def __init__(self, threshold_days: int = 7) -> None:
        self.threshold_days = threshold_days

    @classmethod
    def describe(cls) -> CapabilityDescriptor:
        return CapabilityDescriptor(
            name="file-age",
            version="0.1.0",
            description="Highlights recently modified files (< 7 days by default)",
            enabled_by_default=True,
            author="fslint contributors",
        )

    def categorize_age(self, days: int) -> Tuple[str, str, FindingStatus]:
        """Map an age in days to (category, color, status)."""
        if days <= 1:
            return "Today", "bright_green", FindingStatus.ALERT
        if days <= 3:
            return "Recent (1-3 days)", "green", FindingStatus.ACTIVE
        if days <= self.threshold_days:
            return "This week", "yellow", FindingStatus.ACTIVE
        if days <= 30:
            return "This month", "gray", FindingStatus.INACTIVE
        if days <= 90:
            return "Last 3 months", "gray", FindingStatus.INACTIVE
        if days <= 365:
            return "This year", "gray", FindingStatus.INACTIVE
        return "Old", "gray", FindingStatus.INACTIVE

    def check(self, context: ScanContext) -> Finding:
        if context.modified is None:
            raise CapabilityExecutionError("Failed to get modified time", self.name)

        # Clock skew can put mtimes in the future; treat those as today
        age_days = max(0, helpers.age_in_days(context.modified, time.time()))
        category, color, status = self.categorize_age(age_days)

        if age_days == 0:
            message = "Modified today"
        elif age_days == 1:
            message = "Modified yesterday"
        else:
            message = f"Modified {age_days} days ago"

        return (
            Finding(self.name, status, message=message, color=color)
            .with_tags(["age"])
            .with_metadata("age_days", age_days)
            .with_metadata("category", category)
        )

    def initialize(self, config: Dict[str, str]) -> None:
        self.threshold_days = self._parse_int_option(config, "threshold_days", self.threshold_days)
