"""CLI interface for diskprobe."""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from diskprobe import __version__
from diskprobe.commands import CommandRegistry, run_analyze_filesystem
from diskprobe.config import config_file_path, load_defaults
from diskprobe.display import console, show_analysis, show_cleanup_preview, show_failure, show_scanning_progress
from diskprobe.errors import PayloadError
from diskprobe.models import CommandResult, ScanResult
from diskprobe.report import build_cleanup_preview, load_saved_report

# Create Typer app
app = typer.Typer(
    name="diskprobe",
    help="Bounded filesystem analysis - find what is using space, safely",
    add_completion=False,
)


def setup_logging(verbosity: int) -> None:
    """Route log records to stderr through rich."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"diskprobe version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Increase log output (-vv for debug)."),
) -> None:
    """diskprobe - bounded filesystem analysis."""
    setup_logging(verbose)


def build_payload(
    path: str,
    max_depth: Optional[int],
    top_files: Optional[int],
    top_dirs: Optional[int],
    max_entries: Optional[int],
    timeout: Optional[int],
    follow_symlinks: bool,
) -> dict[str, Any]:
    """Translate CLI options into a request payload, omitting unset ones.

    A leading ~ is expanded here, for shells that pass it through; the request
    layer treats paths literally.
    """
    payload: dict[str, Any] = {"path": os.path.expanduser(path)}
    optional = {
        "maxDepth": max_depth,
        "topFiles": top_files,
        "topDirs": top_dirs,
        "maxEntries": max_entries,
        "timeoutSeconds": timeout,
    }
    payload.update({key: value for key, value in optional.items() if value is not None})
    if follow_symlinks:
        payload["followSymlinks"] = True
    return payload


def echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2))


def run_scan(payload: dict[str, Any], quiet: bool) -> CommandResult:
    if quiet:
        return run_analyze_filesystem(payload)
    with show_scanning_progress() as progress:
        progress.add_task(f"Scanning {escape(payload['path'])}...", total=None)
        return run_analyze_filesystem(payload)


@app.command()
def analyze(
    path: str = typer.Argument(..., help="Directory to analyze"),
    max_depth: Optional[int] = typer.Option(None, "--max-depth", help="Deepest level to expand (1-12)"),
    top_files: Optional[int] = typer.Option(None, "--top-files", help="Largest files to list (1-500)"),
    top_dirs: Optional[int] = typer.Option(None, "--top-dirs", help="Largest directories to list (1-200)"),
    max_entries: Optional[int] = typer.Option(
        None, "--max-entries", help="Entries to visit before stopping (1000-1000000)"
    ),
    timeout: Optional[int] = typer.Option(None, "--timeout", help="Time budget in seconds (5-120)"),
    follow_symlinks: bool = typer.Option(False, "--follow-symlinks", help="Follow symbolic links"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw result as JSON"),
) -> None:
    """Analyze disk usage below a directory."""
    payload = build_payload(path, max_depth, top_files, top_dirs, max_entries, timeout, follow_symlinks)
    result = run_scan(payload, quiet=as_json)

    if as_json:
        echo_json(result.to_payload())
    elif result.ok:
        show_analysis(result.result)
    else:
        show_failure(result)

    if not result.ok:
        raise typer.Exit(1)


def load_analysis(
    path: Optional[str],
    saved: Optional[Path],
    max_depth: Optional[int],
    timeout: Optional[int],
    quiet: bool,
) -> ScanResult:
    """Get the report to preview: read a saved one, or scan path now."""
    if saved is not None:
        try:
            return load_saved_report(json.loads(saved.read_text()))
        except (OSError, json.JSONDecodeError, PayloadError) as e:
            console.print(f"[red]Error: cannot read {escape(str(saved))}: {escape(str(e))}[/red]")
            raise typer.Exit(1)

    if path is None:
        console.print("[red]Error: give a PATH to scan or --from a saved report[/red]")
        raise typer.Exit(1)

    result = run_scan(build_payload(path, max_depth, None, None, None, timeout, False), quiet=quiet)
    if not result.ok:
        show_failure(result)
        raise typer.Exit(1)
    return result.result


@app.command()
def preview(
    path: Optional[str] = typer.Argument(None, help="Directory to analyze"),
    saved: Optional[Path] = typer.Option(
        None, "--from", help="Preview a report saved with 'analyze --json' instead of scanning"
    ),
    category: Optional[list[str]] = typer.Option(
        None, "--category", "-c", help="Only include this cleanup category (repeatable)"
    ),
    max_depth: Optional[int] = typer.Option(None, "--max-depth", help="Deepest level to expand (1-12)"),
    timeout: Optional[int] = typer.Option(None, "--timeout", help="Time budget in seconds (5-120)"),
    as_json: bool = typer.Option(False, "--json", help="Print the preview as JSON"),
) -> None:
    """Show how much space a safe cleanup would reclaim (nothing is deleted)."""
    analysis = load_analysis(path, saved, max_depth, timeout, quiet=as_json)

    try:
        cleanup = build_cleanup_preview(analysis, category)
    except PayloadError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if as_json:
        echo_json(cleanup.to_payload())
        return

    if analysis.partial:
        console.print(f"[yellow]Partial scan ({escape(analysis.reason)}); totals may be understated.[/yellow]\n")
    show_cleanup_preview(cleanup)


@app.command()
def run(
    payload_file: Optional[Path] = typer.Argument(None, help="JSON payload file (default: stdin)"),
    command: str = typer.Option("analyze_filesystem", "--command", help="Command to execute"),
) -> None:
    """Execute a JSON request payload and print the JSON result."""
    try:
        raw = payload_file.read_text() if payload_file else sys.stdin.read()
        payload = json.loads(raw)
    except (OSError, json.JSONDecodeError) as e:
        result = CommandResult(status="failed", error=f"invalid payload: {e}")
    else:
        result = CommandRegistry().execute(command, payload)

    echo_json(result.to_payload())
    if not result.ok:
        raise typer.Exit(1)


@app.command()
def config() -> None:
    """Show the effective scan defaults."""
    path = config_file_path()
    state = "" if path.exists() else " [dim](not present)[/dim]"
    console.print(f"[bold]Config file:[/bold] {escape(str(path))}{state}\n")

    for key, value in load_defaults(path).items():
        console.print(f"  • [bold]{key}[/bold] = {value}")


if __name__ == "__main__":
    app()
