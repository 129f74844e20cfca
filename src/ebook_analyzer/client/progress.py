"""Progress display with Rich console output."""

from typing import Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from ebook_analyzer.models.report import Report


class ProgressTracker:
    """Renders poller progress and finished reports using Rich."""

    def __init__(
        self,
        console: Optional[Console] = None,
        show_progress: bool = True,
    ):
        """Initialize the progress tracker.

        Args:
            console: Rich console for output (created if not provided).
            show_progress: Whether to show the progress bar.
        """
        self._console = console or Console()
        self._show_progress = show_progress
        self._progress: Optional[Progress] = None
        self._task_id: Optional[TaskID] = None
        self._percent = 0

    @property
    def percent(self) -> int:
        return self._percent

    def start(self, description: str = "Analyzing document") -> None:
        """Create and start the progress bar."""
        if not self._show_progress or self._progress is not None:
            return

        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.percentage:>3.0f}%"),
            TextColumn("•"),
            TimeElapsedColumn(),
            console=self._console,
            transient=False,
        )
        self._progress.start()
        self._task_id = self._progress.add_task(description, total=100)

    def update(self, percent: int, stage_label: str = "") -> None:
        """Progress callback for the poller.

        Args:
            percent: Estimated completion, 0 to 100.
            stage_label: Human-readable activity label.
        """
        self._percent = percent
        if self._progress and self._task_id is not None:
            self._progress.update(
                self._task_id,
                completed=percent,
                description=stage_label or "Analyzing document",
            )

    def finish(self) -> None:
        """Stop the progress bar."""
        if self._progress:
            self._progress.stop()
            self._progress = None
            self._task_id = None

    def display_report(self, report: Report) -> None:
        """Display per-parameter averages and the free-text sections.

        Args:
            report: Finalized report.
        """
        if report.is_empty:
            self._console.print("[yellow]No analysis items to display[/]")
            return

        table = Table(title="Analysis Summary")
        table.add_column("Parameter", style="cyan")
        table.add_column("Average", justify="right")

        for parameter, score in report.average_scores().items():
            if score < 4:
                score_str = f"[red]{score:.1f}[/]"
            elif score < 7:
                score_str = f"[yellow]{score:.1f}[/]"
            else:
                score_str = f"[green]{score:.1f}[/]"
            table.add_row(parameter.value, score_str)

        self._console.print(table)
        self._console.print(
            f"Segments analyzed: {report.segments_analyzed}"
            f"  (failed: {report.segments_failed})"
        )

        for title, text in (
            ("Summary", report.summary),
            ("Prologue", report.prologue),
            ("Critique", report.critique),
        ):
            if text:
                self._console.print()
                self._console.print(f"[bold]{title}[/bold]")
                self._console.print(text)

    def print_error(self, message: str) -> None:
        self._console.print(f"[bold red]Error:[/] {message}")

    def print_warning(self, message: str) -> None:
        self._console.print(f"[bold yellow]Warning:[/] {message}")

    def print_success(self, message: str) -> None:
        self._console.print(f"[bold green]✓[/] {message}")
