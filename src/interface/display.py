"""Rich console display components for the rip log inspector."""

import time
from typing import Optional

from rich.align import Align
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.text import Text

from ..core.config import AppInfo, ProgressConfig
from ..processing.models import CompletionCounter


def progress_percent(done: int, total: int) -> int:
    """Whole percentage of ``done`` out of ``total``; an empty batch is 100%."""
    if total <= 0:
        return 100
    return done * 100 // total


class MessageDisplay:
    """Handles status output around the dashboard."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize with optional console instance."""
        self.console = console or Console(stderr=True)

    def show_app_header(self) -> None:
        """Display application header with branding."""
        header_text = Text()
        header_text.append(AppInfo.NAME.upper(), style="bold blue")
        header_text.append(f" v{AppInfo.VERSION}", style="dim")
        header_text.append(f"\n{AppInfo.DESCRIPTION}", style="italic")

        panel = Panel(Align.center(header_text), border_style="blue", padding=(0, 2))
        self.console.print(panel)

    def show_scan_summary(self, root, count: int) -> None:
        """Display how many logs were found."""
        noun = "log" if count == 1 else "logs"
        location = escape(str(root))
        self.console.print(f"[blue]Found {count} {noun} in {location}[/blue]")

    def show_error_message(self, message: str) -> None:
        """Display an error message."""
        self.console.print(f"[red]✗ {escape(message)}[/red]")

    def show_info_message(self, message: str) -> None:
        """Display an informational message."""
        self.console.print(f"[blue]ℹ {escape(message)}[/blue]")


class AnalysisProgress:
    """Live progress line for a running analysis batch."""

    def __init__(
        self,
        console: Optional[Console] = None,
        interval: float = ProgressConfig.PROGRESS_UPDATE_INTERVAL_MS / 1000,
    ):
        """Initialize with optional console instance and sampling interval."""
        self.console = console or Console(stderr=True)
        self.interval = interval

    def _build(self) -> Progress:
        return Progress(
            SpinnerColumn(ProgressConfig.SPINNER_STYLE),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(bar_width=ProgressConfig.PROGRESS_BAR_WIDTH),
            MofNCompleteColumn(),
            TextColumn("({task.fields[percent]}%)"),
            TimeElapsedColumn(),
            console=self.console,
            auto_refresh=False,
        )

    def watch(self, counter: CompletionCounter, total: int) -> None:
        """Sample ``counter`` until it reaches ``total``.

        Intermediate values may be skipped; the final sample is always
        rendered before returning.
        """
        with self._build() as progress:
            task = progress.add_task("Analyzing logs...", total=total, percent=0)

            while True:
                done = counter.value
                progress.update(
                    task, completed=done, percent=progress_percent(done, total)
                )
                if done >= total:
                    progress.update(task, description="✓ Analysis complete!")
                    progress.refresh()
                    break
                progress.refresh()
                time.sleep(self.interval)
