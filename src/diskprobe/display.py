"""Rich terminal display for diskprobe."""

from datetime import datetime

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from diskprobe.models import CleanupCategory, CleanupPreview, CommandResult, ScanResult, format_size

console = Console()

# Rows shown per table; the JSON output always carries full lists
MAX_ROWS = 20


def category_label(category: CleanupCategory) -> str:
    """Get styled label for a cleanup category."""
    labels = {
        CleanupCategory.TEMP_FILES: "[green]Temp files[/green]",
        CleanupCategory.BROWSER_CACHE: "[cyan]Browser cache[/cyan]",
        CleanupCategory.PACKAGE_CACHE: "[blue]Package cache[/blue]",
        CleanupCategory.TRASH: "[yellow]Trash[/yellow]",
    }
    return labels.get(category, str(category))


def format_time(value: datetime | None) -> str:
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d %H:%M")


def show_summary(analysis: ScanResult) -> None:
    """Display scan counters."""
    summary = analysis.summary

    table = Table(title=f"Scan of {escape(analysis.path)}", show_header=True, header_style="bold")
    table.add_column("Files", justify="right")
    table.add_column("Directories", justify="right")
    table.add_column("Scanned", justify="right")
    table.add_column("Max depth", justify="right")
    table.add_column("Denied", justify="right")
    table.add_column("Duration", justify="right")

    denied = summary.permission_denied_count
    table.add_row(
        str(summary.files_scanned),
        str(summary.dirs_scanned),
        f"[bold]{summary.bytes_human}[/bold]",
        str(summary.max_depth_reached),
        f"[red]{denied}[/red]" if denied else "0",
        f"{analysis.duration_ms / 1000:.1f}s",
    )

    console.print(table)

    if analysis.partial:
        console.print(
            Panel(
                f"[bold]Partial result:[/bold] {escape(analysis.reason)}\n"
                "Totals below only cover the part of the tree that was reached.",
                border_style="yellow",
            )
        )
    console.print()


def show_largest_files(analysis: ScanResult) -> None:
    if not analysis.top_largest_files:
        return
    table = Table(title="Largest Files", show_header=True, header_style="bold")
    table.add_column("Size", justify="right")
    table.add_column("Modified")
    table.add_column("Owner")
    table.add_column("Path")

    for item in analysis.top_largest_files[:MAX_ROWS]:
        table.add_row(
            item.size_human,
            format_time(item.modified_at),
            escape(item.owner) or "-",
            escape(item.path),
        )

    console.print(table)
    console.print()


def show_largest_directories(analysis: ScanResult) -> None:
    if not analysis.top_largest_directories:
        return
    table = Table(title="Largest Directories", show_header=True, header_style="bold")
    table.add_column("Size", justify="right")
    table.add_column("Files", justify="right")
    table.add_column("Path")

    for item in analysis.top_largest_directories[:MAX_ROWS]:
        table.add_row(item.size_human, str(item.file_count), escape(item.path))

    console.print(table)
    console.print()


def show_temp_accumulation(analysis: ScanResult) -> None:
    if not analysis.temp_accumulation:
        return
    table = Table(title="Temporary & Cache Files", show_header=True, header_style="bold green")
    table.add_column("Category")
    table.add_column("Size", justify="right")

    for item in analysis.temp_accumulation:
        table.add_row(category_label(item.category), item.size_human)

    console.print(table)
    console.print()


def show_old_downloads(analysis: ScanResult) -> None:
    if not analysis.old_downloads:
        return
    table = Table(title="Old Downloads", show_header=True, header_style="bold yellow")
    table.add_column("Size", justify="right")
    table.add_column("Modified")
    table.add_column("Path")

    for item in analysis.old_downloads[:MAX_ROWS]:
        table.add_row(item.size_human, format_time(item.modified_at), escape(item.path))

    console.print(table)
    console.print()


def show_unrotated_logs(analysis: ScanResult) -> None:
    if not analysis.unrotated_logs:
        return
    table = Table(title="Unrotated Logs", show_header=True, header_style="bold yellow")
    table.add_column("Size", justify="right")
    table.add_column("Modified")
    table.add_column("Path")

    for item in analysis.unrotated_logs[:MAX_ROWS]:
        table.add_row(item.size_human, format_time(item.modified_at), escape(item.path))

    console.print(table)
    console.print()


def show_trash_usage(analysis: ScanResult) -> None:
    if not analysis.trash_usage:
        return
    console.print("[bold yellow]Trash[/bold yellow]")
    for item in analysis.trash_usage:
        console.print(f"  • {escape(item.path)}: {item.size_human}")
    console.print()


def show_duplicates(analysis: ScanResult) -> None:
    if not analysis.duplicate_candidates:
        return
    table = Table(title="Possible Duplicates (same name and size)", show_header=True, header_style="bold")
    table.add_column("Size", justify="right")
    table.add_column("Copies", justify="right")
    table.add_column("Paths")

    for group in analysis.duplicate_candidates[:MAX_ROWS]:
        paths = "\n".join(escape(p) for p in group.paths[:5])
        if group.count > 5:
            paths += f"\n[dim]+{group.count - 5} more[/dim]"
        table.add_row(group.size_human, str(group.count), paths)

    console.print(table)
    console.print()


def show_cleanup_candidates(analysis: ScanResult) -> None:
    if not analysis.cleanup_candidates:
        return
    table = Table(title="Cleanup Candidates", show_header=True, header_style="bold green")
    table.add_column("Category")
    table.add_column("Size", justify="right")
    table.add_column("Path")

    for item in analysis.cleanup_candidates[:MAX_ROWS]:
        table.add_row(category_label(item.category), item.size_human, escape(item.path))

    console.print(table)
    console.print(f"[green]Total reclaimable: {format_size(analysis.total_cleanup_bytes)}[/green]")
    console.print()


def show_errors(analysis: ScanResult) -> None:
    if not analysis.errors:
        return
    console.print(f"[bold red]{len(analysis.errors)} entries could not be read[/bold red]")
    for error in analysis.errors[:10]:
        console.print(f"  [red]✗[/red] {escape(error.path)}: [dim]{escape(error.error)}[/dim]")
    if len(analysis.errors) > 10:
        console.print(f"  [dim]... and {len(analysis.errors) - 10} more[/dim]")
    console.print()


def show_analysis(analysis: ScanResult) -> None:
    """Display a full filesystem report."""
    show_summary(analysis)
    show_largest_files(analysis)
    show_largest_directories(analysis)
    show_temp_accumulation(analysis)
    show_old_downloads(analysis)
    show_unrotated_logs(analysis)
    show_trash_usage(analysis)
    show_duplicates(analysis)
    show_cleanup_candidates(analysis)
    show_errors(analysis)


def show_failure(result: CommandResult) -> None:
    console.print(f"[red]Error: {escape(result.error or 'unknown error')}[/red]")


def show_cleanup_preview(preview: CleanupPreview) -> None:
    """Display what a safe cleanup would reclaim."""
    if not preview.candidates:
        console.print("[yellow]Nothing safe to clean.[/yellow]")
        return

    table = Table(title="Cleanup Preview", show_header=True, header_style="bold")
    table.add_column("Category")
    table.add_column("Items", justify="right")
    table.add_column("Size", justify="right")

    for entry in preview.categories:
        table.add_row(category_label(entry.category), str(entry.count), entry.size_human)

    console.print(table)
    console.print(
        Panel(
            f"[bold]Potential space to reclaim:[/bold] {preview.estimated_human}\n"
            f"  Items: {preview.candidate_count}",
            title="Summary",
            border_style="blue",
        )
    )


def show_scanning_progress() -> Progress:
    """Create spinner for a running scan."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
