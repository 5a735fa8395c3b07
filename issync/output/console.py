# issync Console Output
# Rich-based console output for user-friendly display

from typing import Optional

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from issync.cache import CacheStats
from issync.sync.category import Category
from issync.sync.changes import ChangeSet
from issync.sync.engine import SyncResult
from issync.sync.placer import ReorganizeResult
from issync.sync.state import LedgerStats

CATEGORY_STYLES = {
    Category.ACTIVE: "cyan",
    Category.TODO: "yellow",
    Category.DONE: "green",
    Category.BLOCKED: "red",
}


class Console:
    """
    Console output manager using Rich.

    Provides formatted output for sync operations.
    """

    def __init__(self, *, verbose: bool = False, colored: bool = True, console: Optional[RichConsole] = None):
        """
        Initialize console.

        Args:
            verbose: Enable verbose output.
            colored: Enable colored output.
            console: Rich console to wrap (created if None).
        """
        self.verbose = verbose
        self._console = console or RichConsole(no_color=not colored)

    def apply_settings(self, *, verbose: bool, colored: bool) -> None:
        """Apply output settings read from the configuration file."""
        self.verbose = verbose
        self._console.no_color = not colored

    def print(self, *args, **kwargs) -> None:
        """Print to console."""
        self._console.print(*args, **kwargs)

    def print_error(self, message: str) -> None:
        """Print error message."""
        self._console.print(f"[red]Error:[/red] {escape(message)}")

    def print_warning(self, message: str) -> None:
        """Print warning message."""
        self._console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def print_success(self, message: str) -> None:
        """Print success message."""
        self._console.print(f"[green]{message}[/green]")

    def print_info(self, message: str) -> None:
        """Print info message."""
        self._console.print(f"[blue]{message}[/blue]")

    def print_changes(self, name: str, changes: ChangeSet) -> None:
        """Print change set counts, and the affected numbers when verbose."""
        self._console.print(
            f"[bold]{name}[/bold]: "
            f"[green]{len(changes.new)} new[/green], "
            f"[yellow]{len(changes.updated)} updated[/yellow], "
            f"[dim]{len(changes.unchanged)} unchanged[/dim], "
            f"[red]{len(changes.deleted)} deleted[/red]"
        )

        if not self.verbose:
            return

        for label, numbers in (
            ("new", [i.number for i in changes.new]),
            ("updated", [i.number for i in changes.updated]),
            ("deleted", [d.number for d in changes.deleted]),
        ):
            if numbers:
                self._console.print(f"    {label}: " + ", ".join(f"#{n}" for n in sorted(numbers)))

    def print_sync_result(self, result: SyncResult) -> None:
        """Print sync result summary."""
        changes = result.changes
        write_verb = "would write" if result.dry_run else "written"
        move_verb = "would move" if result.dry_run else "moved"
        remove_verb = "would remove" if result.dry_run else "removed"

        self.print_changes(result.collection, changes)

        if self.verbose:
            for move in result.moved:
                self._console.print(f"    [blue]→[/blue] {move.describe()}")

        for error in result.errors:
            self._console.print(f"    [red]✗[/red] #{error.number}: {error.error}")

        status_text = "Dry run completed" if result.dry_run else "Sync completed"
        color = "green" if result.success else "red"
        suffix = "" if result.success else " with errors"

        self._console.print(
            Panel(
                f"[{color}]{status_text}{suffix}[/{color}]\n"
                f"Files: {len(result.written)} {write_verb}, {len(result.moved)} {move_verb}, "
                f"{len(result.removed)} {remove_verb}, {len(result.errors)} errors",
                title="Summary",
                border_style=color,
            )
        )

    def print_reorganize_result(self, name: str, result: ReorganizeResult) -> None:
        """Print reorganize results, including unresolvable artifacts."""
        verb = "would be moved" if result.dry_run else "moved"

        for move in result.moved:
            self._console.print(f"  [blue]📁[/blue] {move.describe()}")
        for move in result.failed:
            self._console.print(f"  [red]✗[/red] {move.describe()}")
        if self.verbose:
            for path in result.orphaned:
                self._console.print(f"  [dim]○ {path.name} (issue no longer exists, kept)[/dim]")

        border = "green" if not result.failed else "yellow"
        self._console.print(
            Panel(
                f"Scanned: {result.scanned}\n"
                f"Files {verb}: {result.moved_count}\n"
                f"Unresolvable: {result.unresolved_count} "
                f"({len(result.orphaned)} orphaned, {len(result.failed)} failed)",
                title=f"Reorganize {name}",
                border_style=border,
            )
        )

    def print_ledger_status(
        self,
        statuses: dict[str, LedgerStats],
        directories: Optional[dict[str, dict[str, int]]] = None,
    ) -> None:
        """Print ledger statistics per collection."""
        if not statuses:
            self._console.print("[dim]No collections to display[/dim]")
            return

        table = Table(show_header=True, header_style="bold")
        table.add_column("Collection")
        table.add_column("Tracked", justify="right")
        for category in Category:
            table.add_column(category.value, justify="right", style=CATEGORY_STYLES[category])
        table.add_column("Last Sync", style="dim")

        for name, stats in statuses.items():
            counts = []
            for category in Category:
                tracked = stats.by_category.get(category.value, 0)
                cell = str(tracked)
                if directories and name in directories:
                    on_disk = directories[name].get(category.value, 0)
                    if on_disk != tracked:
                        cell += f" ({on_disk} on disk)"
                counts.append(cell)
            last_sync = stats.last_sync[:19].replace("T", " ") if stats.last_sync else "Never"
            table.add_row(name, str(stats.total), *counts, last_sync)

        self._console.print(table)

    def print_cache_stats(self, stats: dict[str, CacheStats]) -> None:
        """Print cache usage per collection."""
        table = Table(show_header=True, header_style="bold")
        table.add_column("Collection")
        table.add_column("Entries", justify="right")
        table.add_column("Size (KB)", justify="right")
        table.add_column("Max", justify="right", style="dim")

        for name, s in stats.items():
            table.add_row(name, str(s.entries), str(s.total_size_kb), str(s.max_entries))

        self._console.print(table)


def create_console(*, verbose: bool = False, colored: bool = True) -> Console:
    """
    Create a console instance.

    Args:
        verbose: Enable verbose output.
        colored: Enable colored output.

    Returns:
        Console instance.
    """
    return Console(verbose=verbose, colored=colored)
