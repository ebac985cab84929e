"""Interactive terminal dashboard for browsing analysis results.

The dashboard is split into pure pieces and one effectful loop:

- ``split_keys`` breaks one terminal read into single key presses
- ``key_to_command`` maps raw key strings to ``Command`` values
- ``reduce`` computes the next ``DashboardState`` for a command
- ``render`` builds the rich layout for a state and screen size
- ``Dashboard.run`` owns the terminal, reads keys and opens folders
"""

import logging
import os
import re
import signal
import sys
import threading
from contextlib import contextmanager, nullcontext
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

import click
from click.termui import raw_terminal
from rich.console import Console, Group
from rich.layout import Layout
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .folders import FolderRevealer, get_folder_revealer
from ..core.config import DashboardConfig
from ..core.exceptions import DashboardError, FolderRevealError
from ..evaluation.models import EvaluationReport
from ..processing.models import AnalysisResult

logger = logging.getLogger(__name__)

BROWSING_HELP = (
    "↑/↓ or j/k: switch file | PgUp/PgDn: scroll details | "
    "o: open folder | q / Esc / Enter: quit"
)
EMPTY_HELP = "Press q / Esc / Enter to quit"


class Command(Enum):
    """Dashboard input events."""

    NAVIGATE_DOWN = "navigate_down"
    NAVIGATE_UP = "navigate_up"
    SCROLL_DOWN = "scroll_down"
    SCROLL_UP = "scroll_up"
    OPEN_FOLDER = "open_folder"
    QUIT = "quit"
    RESIZE = "resize"
    NONE = "none"


class Mode(Enum):
    """Dashboard states."""

    EMPTY = "empty"
    BROWSING = "browsing"
    EXITED = "exited"


# Arrow and paging keys as read from POSIX terminals (CSI and SS3 forms) and
# Windows consoles (0xe0 / 0x00 prefixes). Raw mode delivers Ctrl+C and
# Ctrl+D as plain characters.
KEY_BINDINGS = {
    "q": Command.QUIT,
    "\x1b": Command.QUIT,
    "\r": Command.QUIT,
    "\n": Command.QUIT,
    "\x03": Command.QUIT,
    "\x04": Command.QUIT,
    "j": Command.NAVIGATE_DOWN,
    "\x1b[B": Command.NAVIGATE_DOWN,
    "\x1bOB": Command.NAVIGATE_DOWN,
    "\xe0P": Command.NAVIGATE_DOWN,
    "\x00P": Command.NAVIGATE_DOWN,
    "k": Command.NAVIGATE_UP,
    "\x1b[A": Command.NAVIGATE_UP,
    "\x1bOA": Command.NAVIGATE_UP,
    "\xe0H": Command.NAVIGATE_UP,
    "\x00H": Command.NAVIGATE_UP,
    "\x1b[6~": Command.SCROLL_DOWN,
    "\xe0Q": Command.SCROLL_DOWN,
    "\x00Q": Command.SCROLL_DOWN,
    "\x1b[5~": Command.SCROLL_UP,
    "\xe0I": Command.SCROLL_UP,
    "\x00I": Command.SCROLL_UP,
    "o": Command.OPEN_FOLDER,
}


def key_to_command(key: str) -> Command:
    """Translate a key press into a dashboard command."""
    return KEY_BINDINGS.get(key, Command.NONE)


_ESCAPE_SEQUENCE = re.compile(r"\x1b(?:\[[0-9;?]*[~A-Za-z]|O[A-Za-z])")
_WINDOWS_PREFIXES = ("\xe0", "\x00")


def split_keys(chunk: str) -> List[str]:
    """Split one terminal read into individual key presses.

    A read can carry several keys at once (a held arrow key, fast typing).
    Escape sequences and Windows two-character keys are kept whole; anything
    else is one key per character.
    """
    keys = []
    index = 0
    while index < len(chunk):
        match = _ESCAPE_SEQUENCE.match(chunk, index)
        if match:
            key = match.group()
        elif chunk[index] in _WINDOWS_PREFIXES and index + 1 < len(chunk):
            key = chunk[index : index + 2]
        else:
            key = chunk[index]
        keys.append(key)
        index += len(key)
    return keys


@dataclass(frozen=True)
class DashboardState:
    """Everything the dashboard renders."""

    entries: Tuple[AnalysisResult, ...] = ()
    selected: Optional[int] = None
    show_full_score: bool = False
    detail_offset: int = 0
    exited: bool = False

    @classmethod
    def initial(
        cls, entries: Iterable[AnalysisResult], show_full_score: bool = False
    ) -> "DashboardState":
        """Start at the first entry, or empty when there is none."""
        entries = tuple(entries)
        return cls(
            entries=entries,
            selected=0 if entries else None,
            show_full_score=show_full_score,
        )

    @property
    def mode(self) -> Mode:
        if self.exited:
            return Mode.EXITED
        if not self.entries:
            return Mode.EMPTY
        return Mode.BROWSING

    @property
    def selected_entry(self) -> Optional[AnalysisResult]:
        if self.selected is None or not self.entries:
            return None
        return self.entries[min(self.selected, len(self.entries) - 1)]


def reduce(state: DashboardState, command: Command) -> DashboardState:
    """Next state after ``command``. Side effects are left to the caller."""
    if state.exited:
        return state
    if command is Command.QUIT:
        return replace(state, exited=True)
    if not state.entries:
        return state

    last = len(state.entries) - 1
    current = min(state.selected or 0, last)

    if command in (Command.NAVIGATE_DOWN, Command.NAVIGATE_UP):
        if command is Command.NAVIGATE_DOWN:
            selected = min(current + 1, last)
        else:
            selected = max(current - 1, 0)
        if selected == current:
            return replace(state, selected=selected)
        return replace(state, selected=selected, detail_offset=0)

    if command is Command.SCROLL_DOWN:
        entry = state.entries[current]
        line_count = len(build_detail_lines(entry.report, state.show_full_score))
        offset = min(
            state.detail_offset + DashboardConfig.SCROLL_STEP, max(line_count - 1, 0)
        )
        return replace(state, detail_offset=offset)

    if command is Command.SCROLL_UP:
        offset = max(state.detail_offset - DashboardConfig.SCROLL_STEP, 0)
        return replace(state, detail_offset=offset)

    # OPEN_FOLDER, RESIZE and NONE leave the state alone
    return state


def build_detail_lines(report: EvaluationReport, show_full_score: bool) -> List[Text]:
    """Deduction listing for one report."""
    lines: List[Text] = []

    for outcome in report.outcomes:
        lines.append(
            Text(
                f"{outcome.evaluator} (score: {outcome.combined_score})",
                style="bold yellow",
            )
        )
        hide_full = (
            not show_full_score
            and outcome.evaluator == DashboardConfig.FULL_SCORE_EVALUATOR
        )

        for index, evaluation in enumerate(outcome.evaluations, 1):
            lines.append(
                Text(f"  Log #{index:<3} Score: {evaluation.score}", style="cyan")
            )
            for unit in evaluation.units:
                if hide_full and unit.unit_score == DashboardConfig.FULL_SCORE:
                    continue
                lines.append(
                    Text(
                        f"    - [{unit.scope.label}][{unit.field} {unit.unit_class}] "
                        f"{unit.message} ({unit.unit_score})"
                    )
                )

        lines.append(Text(""))

    if not lines:
        lines.append(Text("No evaluation results to display"))

    return lines


def visible_window(count: int, selected: int, rows: int) -> Tuple[int, int]:
    """Slice of a list of ``count`` rows that keeps ``selected`` on screen."""
    if count <= 0 or rows <= 0:
        return 0, 0
    if count <= rows:
        return 0, count
    start = max(0, min(selected, count - 1) - rows + 1)
    return start, start + rows


def _help_panel(message: str) -> Panel:
    return Panel(Text(message, style="grey50"), title="Help")


def _summary_panel(entry: AnalysisResult) -> Panel:
    report = entry.report
    lines = Group(
        Text(f"File: {entry.path}", no_wrap=True, overflow="ellipsis"),
        Text(f"Log ID: {report.id_hex}", no_wrap=True, overflow="ellipsis"),
        Text(f"Evaluators: {len(report.outcomes)}"),
    )
    return Panel(lines, title="Overview")


def _file_list_panel(state: DashboardState, rows: int) -> Panel:
    selected = state.selected or 0
    start, stop = visible_window(len(state.entries), selected, rows)
    padding = " " * len(DashboardConfig.HIGHLIGHT_SYMBOL)

    items = []
    for index in range(start, stop):
        name = state.entries[index].display_name
        if index == selected:
            prefix, style = DashboardConfig.HIGHLIGHT_SYMBOL, "bold cyan"
        else:
            prefix, style = padding, ""
        items.append(
            Text(f"{prefix}{name}", style=style, no_wrap=True, overflow="ellipsis")
        )

    return Panel(Group(*items), title="Log Files")


def _detail_panel(entry: AnalysisResult, state: DashboardState) -> Panel:
    lines = build_detail_lines(entry.report, state.show_full_score)
    offset = min(state.detail_offset, len(lines) - 1)
    return Panel(Group(*lines[offset:]), title="Deductions")


def _score_table_panel(report: EvaluationReport) -> Panel:
    table = Table(expand=True, box=None, pad_edge=False)
    table.add_column("Evaluator", ratio=4, style="bold", no_wrap=True)
    table.add_column("Score", ratio=3, no_wrap=True)
    table.add_column("Logs", ratio=3, no_wrap=True)

    for outcome in report.outcomes:
        table.add_row(
            outcome.evaluator, outcome.combined_score, str(len(outcome.evaluations))
        )
    if not report.outcomes:
        table.add_row("N/A", "-", "-")

    return Panel(table, title="Evaluation Summary")


def render(state: DashboardState, height: int) -> Layout:
    """Build the dashboard layout for a terminal ``height`` rows tall."""
    layout = Layout(name="root")
    entry = state.selected_entry

    if entry is None:
        layout.split_column(
            Layout(
                Panel(
                    Text("No logs to display", style="grey50"), title="Overview"
                ),
                name="summary",
                size=DashboardConfig.SUMMARY_HEIGHT,
            ),
            Layout(Text(""), name="body", ratio=1),
            Layout(
                _help_panel(EMPTY_HELP),
                name="help",
                size=DashboardConfig.HELP_HEIGHT,
            ),
        )
        return layout

    body_height = height - (
        DashboardConfig.SUMMARY_HEIGHT
        + DashboardConfig.TABLE_HEIGHT
        + DashboardConfig.HELP_HEIGHT
    )
    list_rows = max(body_height - 2, 0)

    body = Layout(name="body", ratio=1)
    body.split_row(
        Layout(
            _file_list_panel(state, list_rows),
            name="files",
            ratio=DashboardConfig.FILE_LIST_RATIO,
        ),
        Layout(
            _detail_panel(entry, state),
            name="details",
            ratio=DashboardConfig.DETAIL_RATIO,
        ),
    )

    layout.split_column(
        Layout(
            _summary_panel(entry), name="summary", size=DashboardConfig.SUMMARY_HEIGHT
        ),
        body,
        Layout(
            _score_table_panel(entry.report),
            name="table",
            size=DashboardConfig.TABLE_HEIGHT,
        ),
        Layout(
            _help_panel(BROWSING_HELP), name="help", size=DashboardConfig.HELP_HEIGHT
        ),
    )
    return layout


class _Resized(Exception):
    """Raised from the SIGWINCH handler to interrupt a blocking key read."""


@contextmanager
def terminal_keys() -> Iterator[Callable[[], str]]:
    """Hold the terminal in raw mode and yield a reader for pending input.

    Raw mode is kept for the whole session, so input typed during a redraw
    is neither echoed nor flushed. Each read returns everything that arrived
    since the previous one, possibly several keys.
    """
    if sys.platform.startswith("win"):
        yield lambda: click.getchar(echo=False)
        return

    with raw_terminal() as fd:
        encoding = getattr(sys.stdin, "encoding", None) or "utf-8"
        yield lambda: os.read(fd, 32).decode(encoding, "replace")


class Dashboard:
    """Runs the dashboard loop on a real terminal."""

    def __init__(
        self,
        console: Optional[Console] = None,
        revealer: Optional[FolderRevealer] = None,
        read_key: Optional[Callable[[], str]] = None,
    ):
        """Initialize with optional console, folder revealer and key reader.

        Without ``read_key`` the controlling terminal is read in raw mode.
        """
        self.console = console or Console()
        self.revealer = revealer or get_folder_revealer()
        self.read_key = read_key
        self._reading = False

    def next_commands(self, read_key: Callable[[], str]) -> List[Command]:
        """Block for the next input and translate every key it carries."""
        self._reading = True
        try:
            chunk = read_key()
        except _Resized:
            return [Command.RESIZE]
        except (KeyboardInterrupt, EOFError):
            return [Command.QUIT]
        finally:
            self._reading = False

        if not chunk:
            # stdin closed
            return [Command.QUIT]
        return [key_to_command(key) for key in split_keys(chunk)]

    def open_folder(self, state: DashboardState) -> None:
        """Reveal the selected log; failures are logged only."""
        entry = state.selected_entry
        if entry is None:
            return
        try:
            self.revealer.reveal(entry.path)
        except FolderRevealError as e:
            logger.error("Failed to open folder for %s: %s", entry.path, e)

    def run(self, state: DashboardState) -> DashboardState:
        """Render and handle input until the user quits.

        The terminal is restored before any error propagates.
        """
        previous_handler = self._install_resize_handler()
        try:
            screen_context = self.console.screen(hide_cursor=True)
            with screen_context as screen, self._keys() as read_key:
                # raw mode turns off newline translation on output
                screen.screen.application_mode = True
                while not state.exited:
                    screen.update(render(state, self.console.size.height))

                    for command in self.next_commands(read_key):
                        if command is Command.OPEN_FOLDER:
                            self.open_folder(state)
                        state = reduce(state, command)
                        if state.exited:
                            break
        except Exception as e:
            raise DashboardError("Dashboard failed", details=str(e)) from e
        finally:
            self._restore_resize_handler(previous_handler)

        return state

    def _keys(self):
        if self.read_key is not None:
            return nullcontext(self.read_key)
        return terminal_keys()

    def _on_resize(self, signum, frame) -> None:
        if self._reading:
            raise _Resized()

    def _install_resize_handler(self) -> Optional[tuple]:
        if not hasattr(signal, "SIGWINCH"):
            return None
        if threading.current_thread() is not threading.main_thread():
            return None
        return (signal.signal(signal.SIGWINCH, self._on_resize),)

    def _restore_resize_handler(self, installed: Optional[tuple]) -> None:
        if installed is None:
            return
        previous = installed[0]
        signal.signal(
            signal.SIGWINCH, previous if previous is not None else signal.SIG_DFL
        )
