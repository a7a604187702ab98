"""
This module provides Rich-based progress bars and console output utilities
for fftsweep CLI commands.
"""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.table import Table

from fftsweep.services.base import BatchProgress

# Global console instance
console = Console()


class ProgressBar:
    """
    Rich-based progress bar for sweeps.

    Example:
        >>> with ProgressBar(description="Sweeping") as pb:
        ...     service.set_progress_callback(pb.callback)
        ...     service.run(path)
    """

    def __init__(
        self,
        total: Optional[int] = None,
        description: str = "Processing",
        show_time: bool = True,
        transient: bool = False,
        disable: bool = False,
    ) -> None:
        """
        Initialize the progress bar.

        Args:
            total: Total number of items (None until known)
            description: Description text shown before the bar
            show_time: Show elapsed and remaining time
            transient: Remove progress bar when complete
            disable: Disable progress bar entirely
        """
        self.total = total
        self.description = description
        self.show_time = show_time
        self.transient = transient
        self.disable = disable
        self._progress: Optional[Progress] = None
        self._task_id: Optional[TaskID] = None

    def _create_progress(self) -> Progress:
        """Create the Rich Progress instance with appropriate columns."""
        columns = [
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=40),
            TaskProgressColumn(),
            MofNCompleteColumn(),
        ]

        if self.show_time:
            columns.extend([TimeElapsedColumn(), TimeRemainingColumn()])

        return Progress(
            *columns,
            console=console,
            transient=self.transient,
            disable=self.disable,
        )

    def __enter__(self) -> "ProgressBar":
        """Enter the progress bar context."""
        self._progress = self._create_progress()
        self._progress.start()
        self._task_id = self._progress.add_task(self.description, total=self.total)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the progress bar context."""
        if self._progress:
            self._progress.stop()

    def callback(self, progress: BatchProgress) -> None:
        """Progress callback for services."""
        if self._progress is None or self._task_id is None:
            return
        if self.total != progress.total:
            self.total = progress.total
            self._progress.update(self._task_id, total=progress.total)
        self._progress.update(self._task_id, completed=progress.completed)


def print_success(message: str) -> None:
    """Print a success message in green."""
    console.print(f"[green]✓[/green] {message}")


def print_warning(message: str) -> None:
    """Print a warning message in yellow."""
    console.print(f"[yellow]![/yellow] {message}")


def print_table(
    title: str,
    columns: list,
    rows: list,
    show_header: bool = True,
) -> None:
    """
    Print a formatted table.

    Args:
        title: Table title
        columns: List of column names
        rows: List of row data (each row is a list of values)
        show_header: Whether to show column headers
    """
    table = Table(title=title, show_header=show_header)

    for col in columns:
        table.add_column(col)

    for row in rows:
        table.add_row(*[str(v) for v in row])

    console.print(table)


def print_summary(
    title: str,
    stats: dict,
    style: str = "blue",
) -> None:
    """
    Print a summary panel with statistics.

    Args:
        title: Summary title
        stats: Dictionary of stat names to values
        style: Border style color
    """
    lines = []
    for key, value in stats.items():
        if isinstance(value, float):
            lines.append(f"[bold]{key}:[/bold] {value:.2f}")
        else:
            lines.append(f"[bold]{key}:[/bold] {value}")

    console.print(Panel("\n".join(lines), title=title, border_style=style))
