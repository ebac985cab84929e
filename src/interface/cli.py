"""CLI entry point for the rip log inspector."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from .dashboard import Dashboard, DashboardState
from .display import AnalysisProgress, MessageDisplay
from ..core.config import AppInfo, LoggingConfig
from ..core.exceptions import (
    DashboardError,
    InputError,
    RiplogError,
    WorkerPoolError,
)
from ..core.logging_utils import configure_logging
from ..evaluation.services import CambiaEvaluator
from ..processing.services import LogAnalyzer, filter_results
from ..storage.services import LogArchive, collect_log_paths

# Dashboard draws on stdout; status, progress and logs go to stderr
console = Console()
err_console = Console(stderr=True)
app = typer.Typer(
    name=AppInfo.NAME,
    help=AppInfo.DESCRIPTION,
    rich_markup_mode="rich",
    no_args_is_help=True,
    add_completion=False,
)

display = MessageDisplay(err_console)
progress = AnalysisProgress(err_console)


def handle_error(error: Exception) -> None:
    """Centralized error handling."""
    if isinstance(error, RiplogError):
        display.show_error_message(error.message)
        if error.details:
            err_console.print(f"[dim]Details: {escape(error.details)}[/dim]")
    else:
        display.show_error_message(f"Unexpected error: {str(error)}")

    raise typer.Exit(1)


@app.command()
def main(
    path: Path = typer.Argument(help="Rip log file or directory to scan"),
    save_logs: Optional[Path] = typer.Option(
        None, "--save-logs", help="Save parsed log bytes to this directory"
    ),
    show_full_score: bool = typer.Option(
        False,
        "--show-100",
        "--show-full-score",
        help="Show logs and deductions with a full OPS score of 100",
    ),
    log_level: str = typer.Option(
        LoggingConfig.DEFAULT_LEVEL,
        "--log-level",
        "--tracing",
        help="Log level (trace, debug, info, warning, error)",
    ),
    evaluator_url: Optional[str] = typer.Option(
        None, "--evaluator-url", help="Evaluation server URL (default: $CAMBIA_URL)"
    ),
    jobs: Optional[int] = typer.Option(
        None, "--jobs", "-j", min=1, help="Number of parallel workers"
    ),
):
    """Check CD rip logs and browse their scores."""
    configure_logging(log_level, err_console)
    display.show_app_header()

    try:
        log_paths = collect_log_paths(path)
    except InputError as e:
        handle_error(e)

    display.show_scan_summary(path, len(log_paths))

    archive = LogArchive(save_logs) if save_logs else None
    try:
        with CambiaEvaluator(evaluator_url) as evaluator:
            analyzer = LogAnalyzer(evaluator, archive=archive, max_workers=jobs)
            results = analyzer.analyze(log_paths, progress=progress)
    except WorkerPoolError as e:
        handle_error(e)

    entries = filter_results(results, show_full_score)
    hidden = len(results) - len(entries)
    if hidden:
        display.show_info_message(
            f"Hiding {hidden} log(s) with a full OPS score (use --show-100 to list them)"
        )

    try:
        Dashboard(console).run(DashboardState.initial(entries, show_full_score))
    except DashboardError as e:
        handle_error(e)
