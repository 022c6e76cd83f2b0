"""Rich-based rendering of scan results.

This module provides the ScanReport class, which prints scan records as a
table, as JSON or as one plain line per file, along with cache statistics,
warnings and the capability list.

Example:
    from fslint.ui import OutputFormat, ScanReport

    report = ScanReport()
    report.render(result.records, OutputFormat.TABLE, result.root)
    report.display_cache_stats(result.cache_stats)
"""

import json
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from fslint.capabilities.helpers import format_size
from fslint.models import CacheStats, CapabilityDescriptor, Finding, FindingStatus, ScanRecord
from fslint.scanning.safety import sanitize_path_for_display

# Capabilities with a dedicated table column
COLUMN_CAPABILITIES = ("git-status", "file-age", "grouping")

# Finding color hints mapped to Rich styles
COLOR_STYLES = {
    "red": "red",
    "green": "green",
    "bright_green": "bright_green",
    "yellow": "yellow",
    "blue": "blue",
    "magenta": "magenta",
    "cyan": "cyan",
    "gray": "dim",
}

QUIET_STATUSES = (FindingStatus.INACTIVE, FindingStatus.SKIPPED)


class OutputFormat(Enum):
    TABLE = "table"
    JSON = "json"
    SIMPLE = "simple"

    @classmethod
    def from_str(cls, value: str) -> "OutputFormat":
        """Parse a format name case-insensitively.

        Raises:
            ValueError: If the name is not a known format.
        """
        for fmt in cls:
            if fmt.value == value.lower():
                return fmt
        raise ValueError(f"Unknown output format: {value}")


def _relative(path: Path, working_dir: Optional[Path]) -> str:
    if working_dir is not None:
        try:
            return sanitize_path_for_display(path.relative_to(working_dir))
        except ValueError:
            pass
    return sanitize_path_for_display(path)


def _notable(findings: Sequence[Finding]) -> List[Finding]:
    return [f for f in findings if f.status not in QUIET_STATUSES]


class ScanReport:
    """Renders scan output to a Rich console.

    Args:
        console: Optional Rich Console instance for output. Pass a Console
            writing to a StringIO to capture output in tests.

    Attributes:
        console: The Rich Console instance used for all output.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def render(
        self,
        records: Sequence[ScanRecord],
        output_format: OutputFormat,
        working_dir: Optional[Path] = None,
    ) -> None:
        if output_format is OutputFormat.JSON:
            self.render_json(records)
        elif output_format is OutputFormat.SIMPLE:
            self.render_simple(records, working_dir)
        else:
            self.render_table(records, working_dir)

    def render_table(self, records: Sequence[ScanRecord], working_dir: Optional[Path] = None) -> None:
        """Print one row per file: size, git, age and group columns plus the rest.

        Cells take the color hint of their finding; capabilities that did
        not run or reported nothing show a dimmed dash.
        """
        if not records:
            self.console.print("[dim]No files found.[/dim]")
            return

        table = Table(show_header=True, header_style="bold")
        table.add_column("File", style="bold", overflow="fold")
        table.add_column("Size", justify="right")
        table.add_column("Git")
        table.add_column("Age")
        table.add_column("Group")
        table.add_column("Other")

        for record in records:
            cells = [Text(_relative(record.path, working_dir)), Text(format_size(record.size), style="dim")]
            for name in COLUMN_CAPABILITIES:
                cells.append(self._finding_cell(record.finding_for(name)))
            cells.append(self._other_cell(record))
            table.add_row(*cells)

        self.console.print(table)
        self.console.print(f"\n{len(records)} files scanned")

    def render_json(self, records: Sequence[ScanRecord]) -> None:
        """Print records as a pretty-printed JSON array."""
        payload = [record.to_dict() for record in records]
        self.console.out(json.dumps(payload, indent=2), highlight=False)

    def render_simple(self, records: Sequence[ScanRecord], working_dir: Optional[Path] = None) -> None:
        """Print ``path [message, message]`` per file, one line each."""
        for record in records:
            line = _relative(record.path, working_dir)
            messages = [f.message for f in _notable(record.findings) if f.message]
            if messages:
                line += f" [{', '.join(messages)}]"
            self.console.out(line, highlight=False)

    def display_cache_stats(self, stats: CacheStats) -> None:
        self.console.print(
            f"[dim]Cache: {stats.hits} hits, {stats.misses} misses "
            f"({stats.hit_rate * 100:.1f}% hit rate)[/dim]"
        )

    def display_warnings(self, warnings: Sequence[str], limit: Optional[int] = None) -> None:
        """Print traversal and capability warnings, at most ``limit`` of them."""
        if not warnings:
            return
        shown = list(warnings) if limit is None else list(warnings)[:limit]
        self.console.print(f"[yellow]Warnings ({len(warnings)}):[/yellow]")
        for warning in shown:
            self.console.print(Text(f"  - {warning}", style="dim"))
        if len(shown) < len(warnings):
            self.console.print(f"[dim]  ... and {len(warnings) - len(shown)} more[/dim]")

    def display_plugins(self, descriptors: Sequence[CapabilityDescriptor], enabled: Sequence[str]) -> None:
        """Print the registered capabilities and whether each is enabled."""
        table = Table(title="Available Plugins", show_header=True, header_style="bold")
        table.add_column("Status")
        table.add_column("Name", style="cyan")
        table.add_column("Version")
        table.add_column("Description")

        for descriptor in descriptors:
            if descriptor.name in enabled:
                status = Text("enabled", style="green")
            else:
                status = Text("disabled", style="dim")
            table.add_row(status, descriptor.name, descriptor.version, descriptor.description)

        self.console.print(table)

    def display_config(self, config_path: Path, config_json: str) -> None:
        self.console.print(Panel(Text(config_json), title=str(config_path), border_style="blue"))

    def _finding_cell(self, finding: Optional[Finding]) -> Text:
        if finding is None or not finding.message:
            return Text("-", style="dim")
        return Text(finding.message, style=COLOR_STYLES.get(finding.color or "", ""))

    def _other_cell(self, record: ScanRecord) -> Text:
        others = [
            f.message
            for f in _notable(record.findings)
            if f.capability_name not in COLUMN_CAPABILITIES and f.message
        ]
        if not others:
            return Text("-", style="dim")
        return Text(", ".join(others))
