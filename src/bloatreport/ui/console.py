"""Rich-powered console output for bloatreport."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.table import Table

from bloatreport.github.comments import UpsertResult
from bloatreport.github.renderer import human_size, should_include_in_diff
from bloatreport.models import SnapshotDifference


class Console:
    """Terminal output for bloatreport using Rich.

    Writes to stderr so rendered comments on stdout stay pipeable.
    """

    def __init__(self) -> None:
        self.console = RichConsole(stderr=True)

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {escape(message)}")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]![/yellow] {escape(message)}")

    def show_snapshots(self, snapshots: Sequence[SnapshotDifference]) -> None:
        """Display a size summary per snapshot."""
        table = Table(title="Snapshot sizes", border_style="cyan")
        table.add_column("Package", style="bold")
        table.add_column("Size", justify="right", style="cyan")
        table.add_column("Change", justify="right")
        table.add_column("Text size", justify="right", style="cyan")
        table.add_column("Dependencies", justify="right")

        for snapshot in snapshots:
            change = ""
            if should_include_in_diff(snapshot.current_size, snapshot.old_size):
                delta = snapshot.size_difference
                color = "red" if delta > 0 else "green"
                sign = "+" if delta > 0 else ""
                change = f"[{color}]{sign}{human_size(delta)}[/{color}]"
            table.add_row(
                snapshot.package_name,
                human_size(snapshot.current_size),
                change,
                human_size(snapshot.current_text_size),
                str(snapshot.new_dependencies_count),
            )

        self.console.print(table)

    def show_upsert(self, result: UpsertResult) -> None:
        self.success(f"Comment {result.action} (id {result.comment_id})")
        if result.duplicates:
            self.warning(
                f"{result.duplicates} later duplicate comment(s) for this toolchain left untouched"
            )
