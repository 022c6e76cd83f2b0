"""ScanLogger for writing a scan report to a structured log file.

This module provides the ScanLogger class that writes a sectioned log file
(header, scan phase, query phase, summary) separated by 65-character rule
lines.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, TextIO

from fslint.models import FindingStatus, ScanPolicy, ScanRecord, ScanResult
from fslint.scanning.safety import sanitize_path_for_display

logger = logging.getLogger(__name__)


class ScanLogger:
    """Logger for scans with structured output format.

    Usage:
        with ScanLogger(Path("scan.log")) as scan_log:
            scan_log.log_header(root)
            scan_log.log_scan_phase(root, policy, enabled_capabilities, result)
            scan_log.log_query_phase("ext:py", matched_records)
            scan_log.log_summary(result)

    Attributes:
        SEPARATOR: The 65-character separator line used between sections.
    """

    SEPARATOR = "=" * 65

    def __init__(self, log_file_path: Optional[Path] = None) -> None:
        """Initialize the ScanLogger.

        Args:
            log_file_path: Optional path for the log file. If not provided,
                generates a timestamped filename in the current directory.

        Raises:
            OSError: If the log file path is not writable.
        """
        self._start_timestamp = datetime.now()
        self._file_handle: Optional[TextIO] = None

        if log_file_path is None:
            timestamp_str = self._start_timestamp.strftime("%Y-%m-%d_%H-%M-%S")
            self._log_file_path = Path.cwd() / f"fslint_scan_{timestamp_str}.log"
        else:
            self._log_file_path = Path(log_file_path)

        self._validate_path()

    def _validate_path(self) -> None:
        """Validate that the log file path is writable.

        Raises:
            OSError: If the parent directory doesn't exist or is not a directory.
        """
        parent = self._log_file_path.parent
        if not parent.exists():
            raise OSError(f"Parent directory does not exist: {parent}")
        if not parent.is_dir():
            raise OSError(f"Parent path is not a directory: {parent}")

    def __enter__(self) -> "ScanLogger":
        """Open the log file.

        Raises:
            OSError: If the file cannot be opened for writing.
        """
        try:
            self._file_handle = open(self._log_file_path, "w", encoding="utf-8")
        except OSError as e:
            raise OSError(f"Cannot open log file for writing: {e}") from e
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._file_handle is not None:
            try:
                self._file_handle.close()
            except OSError as e:
                logger.warning("Error closing log file: %s", e)
            finally:
                self._file_handle = None

    def get_log_path(self) -> Path:
        return self._log_file_path

    def log_header(self, root: Path) -> None:
        """Write the title, timestamp and scan root."""
        self._write_separator()
        self._write_line("fslint - Scan Log")
        self._write_separator()
        self._write_line(f"Timestamp: {self._format_timestamp(self._start_timestamp)}")
        self._write_line(f"Root: {root}")
        self._write_line("")

    def log_scan_phase(
        self,
        root: Path,
        policy: ScanPolicy,
        capabilities: List[str],
        result: ScanResult,
    ) -> None:
        """Write the scan phase section: policy, capabilities and flagged files.

        Args:
            root: The scanned directory.
            policy: Traversal policy of the scan.
            capabilities: Names of the enabled capabilities, in order.
            result: The completed scan.
        """
        self._write_separator()
        self._write_line("SCAN PHASE")
        self._write_separator()
        self._write_line(f"Root: {root}")
        max_depth = "unbounded" if policy.max_depth is None else str(policy.max_depth)
        max_files = "unbounded" if policy.max_files is None else str(policy.max_files)
        self._write_line(f"Max depth: {max_depth}")
        self._write_line(f"Max files: {max_files}")
        self._write_line(f"Include hidden: {self._yes_no(policy.include_hidden)}")
        self._write_line(f"Follow symlinks: {self._yes_no(policy.follow_symlinks)}")
        self._write_line(f"Respect ignore rules: {self._yes_no(policy.respect_ignore_rules)}")
        self._write_line(f"Capabilities: {', '.join(capabilities) if capabilities else 'none'}")
        self._write_line(f"Files scanned: {len(result.records)}")
        self._write_line("")

        flagged = [record for record in result.records if self._notable_lines(record)]
        if flagged:
            self._write_line("Flagged files:")
        for record in flagged:
            self._write_line(f"- {self._display_path(record, result.root)}", indent=2)
            for line in self._notable_lines(record):
                self._write_line(line, indent=4)
        if flagged:
            self._write_line("")

    def log_query_phase(self, query_text: str, matched: List[ScanRecord], root: Optional[Path] = None) -> None:
        """Write the query and the records it selected."""
        self._write_separator()
        self._write_line("QUERY PHASE")
        self._write_separator()
        self._write_line(f"Query: {query_text}")
        self._write_line(f"Matched files: {len(matched)}")
        for record in matched:
            self._write_line(f"- {self._display_path(record, root)}", indent=2)
        self._write_line("")

    def log_summary(self, result: ScanResult) -> None:
        """Write the summary section with cache statistics and warnings."""
        stats = result.cache_stats
        self._write_separator()
        self._write_line("SUMMARY")
        self._write_separator()
        self._write_line(f"Files scanned: {len(result.records):,}")
        self._write_line(
            f"Cache: {stats.hits} hits, {stats.misses} misses "
            f"({stats.hit_rate * 100:.1f}% hit rate)"
        )
        if result.capped:
            self._write_line("Stopped at max files limit")

        if result.warnings:
            self._write_line(f"Total warnings: {len(result.warnings)}")
            self._write_line("Warnings:")
            for warning in result.warnings:
                self._write_line(f"  - {warning}")

        self._write_line(f"Duration: {self._format_duration(result.duration_seconds)}")
        self._write_line("")
        self._write_line(f"Log file: {self._log_file_path}")
        self._write_separator()

    def _notable_lines(self, record: ScanRecord) -> List[str]:
        lines = []
        for finding in record.findings:
            if finding.status in (FindingStatus.ALERT, FindingStatus.WARNING, FindingStatus.ERROR):
                lines.append(f"[{finding.capability_name}] {finding.message or finding.status.value}")
        return lines

    def _display_path(self, record: ScanRecord, root: Optional[Path]) -> str:
        if root is not None:
            try:
                return sanitize_path_for_display(record.path.relative_to(root))
            except ValueError:
                pass
        return sanitize_path_for_display(record.path)

    def _yes_no(self, value: bool) -> str:
        return "yes" if value else "no"

    def _format_duration(self, seconds: float) -> str:
        """Format duration in human-readable format.

        Args:
            seconds: Duration in seconds.

        Returns:
            Formatted string like "5m 23s", "1h 5m 30s", or "45s".
        """
        total_seconds = int(seconds)

        if total_seconds < 60:
            return f"{total_seconds}s"

        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        secs = total_seconds % 60

        if hours > 0:
            return f"{hours}h {minutes}m {secs}s"
        return f"{minutes}m {secs}s"

    def _format_timestamp(self, dt: datetime) -> str:
        return dt.strftime("%Y-%m-%d %H:%M:%S")

    def _write_separator(self) -> None:
        self._write_line(self.SEPARATOR)

    def _write_line(self, text: str, indent: int = 0) -> None:
        """Write a line to the log file with optional indentation."""
        if self._file_handle is None:
            logger.warning("Attempted to write to closed log file: %s", text)
            return

        try:
            self._file_handle.write(" " * indent + text + "\n")
        except OSError as e:
            logger.warning("Error writing to log file: %s", e)
