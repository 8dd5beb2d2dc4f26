"""
Rich-based progress bars and console output utilities for the wasteml CLI.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

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
)
from rich.table import Table

console = Console()


class ProgressBar:
    """
    Rich progress bar for per-image operations.

    Example:
        >>> with ProgressBar(total=len(images), description="Predicting") as pb:
        ...     for image in images:
        ...         predict(image)
        ...         pb.update(completed=pb.completed + 1)
    """

    def __init__(
        self,
        total: Optional[int] = None,
        description: str = "Processing",
        transient: bool = False,
        disable: bool = False,
    ) -> None:
        self.total = total
        self.description = description
        self.transient = transient
        self.disable = disable
        self._progress: Optional[Progress] = None
        self._task_id: Optional[TaskID] = None
        self._completed = 0

    def __enter__(self) -> "ProgressBar":
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=40),
            TaskProgressColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=console,
            transient=self.transient,
            disable=self.disable,
        )
        self._progress.start()
        self._task_id = self._progress.add_task(self.description, total=self.total)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._progress:
            self._progress.stop()

    def update(self, completed: Optional[int] = None, total: Optional[int] = None) -> None:
        """Update the completed count and/or the total."""
        if self._progress is None or self._task_id is None:
            return
        kwargs = {}
        if completed is not None:
            kwargs["completed"] = completed
            self._completed = completed
        if total is not None:
            kwargs["total"] = total
            self.total = total
        if kwargs:
            self._progress.update(self._task_id, **kwargs)

    @property
    def completed(self) -> int:
        return self._completed


@contextmanager
def status(message: str) -> Iterator[None]:
    """
    Show a status spinner while performing an operation.

    Example:
        >>> with status("Loading model..."):
        ...     classifier.load_model(path)
    """
    with console.status(f"[bold blue]{message}"):
        yield


def print_success(message: str) -> None:
    """Print a success message in green."""
    console.print(f"[green]✓[/green] {message}")


def print_table(title: str, columns: list, rows: list, show_header: bool = True) -> None:
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


def print_summary(title: str, stats: dict, style: str = "blue") -> None:
    """
    Print a summary panel with statistics; floats get two decimals.
    """
    lines = []
    for key, value in stats.items():
        if isinstance(value, float):
            lines.append(f"[bold]{key}:[/bold] {value:.2f}")
        else:
            lines.append(f"[bold]{key}:[/bold] {value}")

    console.print(Panel("\n".join(lines), title=title, border_style=style))
