"""Console rendering for fslint."""

from fslint.ui.report import OutputFormat, ScanReport

__all__ = ["OutputFormat", "ScanReport"]
