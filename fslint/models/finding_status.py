"""
FindingStatus enum for capability verdicts.

Every capability reports exactly one status per file:
1. Active - The check passed or found something worth showing
2. Inactive - Nothing to report for this file
3. Alert - Something noteworthy was found
4. Warning - Something questionable was found
5. Error - Something wrong was found (e.g. a leaked secret)
6. Skipped - The capability does not apply to this file
"""

from enum import Enum


class FindingStatus(Enum):
    """Closed set of statuses a Finding can carry."""
    ACTIVE = "active"          # Check passed / active
    INACTIVE = "inactive"      # Not applicable result, nothing to report
    ALERT = "alert"            # Noteworthy
    WARNING = "warning"        # Warning
    ERROR = "error"            # Error found in the file
    SKIPPED = "skipped"        # Wrong file type or below thresholds
