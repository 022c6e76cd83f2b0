"""
fslint - File intelligence scanner CLI.

Walks a directory tree, runs the enabled inspection plugins against every
file, and prints what they found. Results can be narrowed with a small
query language.

Usage Examples:
    # Scan the current directory
    fslint scan .

    # Scan with JSON output, four worker threads and a file cap
    fslint scan ~/projects --format json --workers 4 --max-files 500

    # Newest modified Python file
    fslint query "ext:py git-status:Modified newest:true" ~/projects

    # Manage plugins
    fslint plugins
    fslint enable duplicate-finder
    fslint disable file-age
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from fslint.capabilities import CapabilityRegistry
from fslint.capabilities.builtin import create_default_registry
from fslint.config import FslintConfig, default_config_path, load_config, save_config
from fslint.models import ScanPolicy, ScanRecord
from fslint.orchestration import ScanLogger, ScanOrchestrator
from fslint.query import BUILTIN_KEYS, Query, QueryParseError, suggest_key
from fslint.ui import OutputFormat, ScanReport

__version__ = "0.1.0"

# Initialize Typer app
app = typer.Typer(
    name="fslint",
    help="File intelligence scanner - find recent, duplicate, versioned and risky files.",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for consistent output formatting
console = Console()
err_console = Console(stderr=True)

MAX_WARNINGS_SHOWN = 10


def version_callback(value: bool) -> None:
    """Display version information and exit."""
    if value:
        console.print(f"fslint v{__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Send library log records to stderr through Rich when verbose."""
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def parse_output_format(value: str) -> OutputFormat:
    try:
        return OutputFormat.from_str(value)
    except ValueError as e:
        raise typer.BadParameter(str(e))


def load_user_config() -> FslintConfig:
    """Load the configuration file or exit with an error message."""
    try:
        return load_config()
    except (ValueError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def build_registry(config: FslintConfig) -> CapabilityRegistry:
    """Register the built-ins, apply the enabled set and plugin options."""
    registry = create_default_registry()
    registry.set_enabled(config.enabled_plugins)
    for error in registry.get_errors():
        console.print(f"[yellow]Warning:[/yellow] {error}")
    registry.clear_errors()

    failures = registry.initialize_all(config.plugin_config)
    for name, message in failures.items():
        console.print(f"[yellow]Warning:[/yellow] plugin '{name}' uses defaults: {message}")
    registry.clear_errors()
    return registry


def build_policy(
    config: FslintConfig,
    max_depth: Optional[int],
    max_files: Optional[int],
    include_hidden: bool,
    no_ignore: bool,
    follow_symlinks: bool,
) -> ScanPolicy:
    """Command-line flags override the configured scanner settings."""
    base = config.scanner
    return ScanPolicy(
        max_depth=max_depth if max_depth is not None else base.max_depth,
        include_hidden=include_hidden or base.include_hidden,
        follow_symlinks=follow_symlinks or base.follow_symlinks,
        respect_ignore_rules=base.respect_ignore_rules and not no_ignore,
        max_files=max_files if max_files is not None else base.max_files,
    )


def warn_unknown_query_keys(query: Query, registry: CapabilityRegistry) -> None:
    """Point out capability filters that can never match."""
    known = registry.list_registered()
    for key in query.unknown_keys(known):
        suggestion = suggest_key(key, list(BUILTIN_KEYS) + known)
        hint = f" Did you mean '{suggestion}'?" if suggestion else ""
        console.print(
            f"[yellow]Warning:[/yellow] '{key}' is not a query key or plugin name "
            f"and will match nothing.{hint}"
        )


def run_scan(
    path: Path,
    output_format: OutputFormat,
    query_text: Optional[str],
    workers: int,
    max_files: Optional[int],
    max_depth: Optional[int],
    include_hidden: bool,
    no_ignore: bool,
    follow_symlinks: bool,
    allow_system: bool,
    log_file: Optional[Path],
    verbose: bool,
) -> List[ScanRecord]:
    """Shared body of the scan and query commands."""
    configure_logging(verbose)
    config = load_user_config()

    # Reject a malformed query before any scanning happens
    query: Optional[Query] = None
    if query_text is not None:
        try:
            query = Query.parse(query_text)
        except QueryParseError as e:
            console.print(f"[red]Error:[/red] Invalid query: {e}")
            raise typer.Exit(1)

    try:
        policy = build_policy(config, max_depth, max_files, include_hidden, no_ignore, follow_symlinks)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    registry = build_registry(config)
    if query is not None:
        warn_unknown_query_keys(query, registry)

    report = ScanReport(console)
    try:
        with ScanOrchestrator(
            registry,
            policy=policy,
            workers=workers,
            allow_system=allow_system,
        ) as orchestrator:
            result = orchestrator.scan(path)
    except KeyboardInterrupt:
        console.print("\n[yellow]Scan interrupted by user.[/yellow]")
        raise typer.Exit(130)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except OSError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    records = result.records if query is None else query.apply(result.records)
    report.render(records, output_format, result.root)

    if output_format is not OutputFormat.JSON:
        report.display_cache_stats(result.cache_stats)
        report.display_warnings(result.warnings, limit=None if verbose else MAX_WARNINGS_SHOWN)

    if log_file is not None:
        try:
            with ScanLogger(log_file) as scan_log:
                scan_log.log_header(result.root)
                scan_log.log_scan_phase(result.root, policy, registry.list_enabled(), result)
                if query is not None:
                    scan_log.log_query_phase(query_text or "", records, result.root)
                scan_log.log_summary(result)
            if verbose:
                console.print(f"[dim]Log written to: {scan_log.get_log_path()}[/dim]")
        except OSError as e:
            console.print(
                f"[yellow]Warning:[/yellow] Failed to write log file: {e}. "
                "Continuing without logging."
            )

    return records


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """fslint - File intelligence scanner."""
    pass


@app.command()
def scan(
    path: Path = typer.Argument(
        Path("."),
        help="Directory to scan.",
        exists=False,  # We do our own validation
    ),
    output_format: str = typer.Option(
        "table",
        "--format",
        "-f",
        help="Output format: table, json or simple.",
    ),
    query: Optional[str] = typer.Option(
        None,
        "--query",
        "-q",
        help="Filter results, e.g. 'ext:py newest:true'.",
    ),
    workers: int = typer.Option(
        1,
        "--workers",
        "-w",
        min=1,
        help="Number of worker threads running plugins.",
    ),
    max_files: Optional[int] = typer.Option(
        None,
        "--max-files",
        min=0,
        help="Stop after this many files.",
    ),
    max_depth: Optional[int] = typer.Option(
        None,
        "--max-depth",
        min=0,
        help="Maximum directory depth.",
    ),
    include_hidden: bool = typer.Option(
        False,
        "--include-hidden",
        help="Include files and directories whose name starts with a dot.",
    ),
    no_ignore: bool = typer.Option(
        False,
        "--no-ignore",
        help="Do not apply .gitignore / .ignore rules.",
    ),
    follow_symlinks: bool = typer.Option(
        False,
        "--follow-symlinks",
        help="Follow symbolic links.",
    ),
    allow_system: bool = typer.Option(
        False,
        "--allow-system",
        help="Allow scanning operating-system directories.",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        "-l",
        help="Path for log file output.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable verbose output.",
    ),
) -> None:
    """
    Scan a directory and show what the enabled plugins found.
    """
    run_scan(
        path=path,
        output_format=parse_output_format(output_format),
        query_text=query,
        workers=workers,
        max_files=max_files,
        max_depth=max_depth,
        include_hidden=include_hidden,
        no_ignore=no_ignore,
        follow_symlinks=follow_symlinks,
        allow_system=allow_system,
        log_file=log_file,
        verbose=verbose,
    )


@app.command("query")
def query_command(
    query_text: str = typer.Argument(..., help="Query, e.g. 'tag:image size_gt:1048576'."),
    path: Path = typer.Argument(Path("."), help="Directory to scan.", exists=False),
    output_format: str = typer.Option(
        "simple",
        "--format",
        "-f",
        help="Output format: table, json or simple.",
    ),
    workers: int = typer.Option(1, "--workers", "-w", min=1, help="Number of worker threads."),
    include_hidden: bool = typer.Option(False, "--include-hidden", help="Include dot files."),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose output."),
) -> None:
    """
    Scan a directory and print only the files matching QUERY.

    Keys: name, ext, tag, size_lt, size_gt, newest, or any plugin name
    (matched against that plugin's message).
    """
    run_scan(
        path=path,
        output_format=parse_output_format(output_format),
        query_text=query_text,
        workers=workers,
        max_files=None,
        max_depth=None,
        include_hidden=include_hidden,
        no_ignore=False,
        follow_symlinks=False,
        allow_system=False,
        log_file=None,
        verbose=verbose,
    )


@app.command()
def plugins() -> None:
    """List available plugins and whether they are enabled."""
    config = load_user_config()
    registry = create_default_registry()
    ScanReport(console).display_plugins(registry.descriptors(), config.enabled_plugins)


def _require_known_plugin(name: str) -> None:
    registry = create_default_registry()
    if registry.is_registered(name):
        return
    suggestion = suggest_key(name, registry.list_registered())
    hint = f" Did you mean '{suggestion}'?" if suggestion else ""
    console.print(f"[red]Error:[/red] Unknown plugin: {name}.{hint}")
    raise typer.Exit(1)


@app.command()
def enable(name: str = typer.Argument(..., help="Plugin name.")) -> None:
    """Enable a plugin."""
    _require_known_plugin(name)
    config = load_user_config()
    config.enable_plugin(name)
    try:
        save_config(config)
    except OSError as e:
        console.print(f"[red]Error:[/red] Failed to save configuration: {e}")
        raise typer.Exit(1)
    console.print(f"[green]Enabled plugin:[/green] {name}")


@app.command()
def disable(name: str = typer.Argument(..., help="Plugin name.")) -> None:
    """Disable a plugin."""
    _require_known_plugin(name)
    config = load_user_config()
    config.disable_plugin(name)
    try:
        save_config(config)
    except OSError as e:
        console.print(f"[red]Error:[/red] Failed to save configuration: {e}")
        raise typer.Exit(1)
    console.print(f"[yellow]Disabled plugin:[/yellow] {name}")


@app.command("config")
def show_config() -> None:
    """Show the configuration file location and its current contents."""
    config = load_user_config()
    path = default_config_path()
    ScanReport(console).display_config(path, json.dumps(config.to_dict(), indent=2))
    if not path.exists():
        console.print("[dim]No configuration file yet; showing defaults.[/dim]")


if __name__ == "__main__":
    app()
