"""Interactive browser: Rich Live display driven by readchar keystrokes."""

from __future__ import annotations

import logging
import logging.handlers
import time
from collections import deque
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import readchar
from rich.console import Console
from rich.live import Live

from ..errors import ScanError
from ..menu import MessageDurations
from ..scanner import scan_files
from ..types import FileRecord, ScanOptions
from .session import BrowserSession
from .theme import Theme, detect_theme
from .view import render_scan_error, render_session

logger = logging.getLogger(__name__)

REFRESH_PER_SECOND = 4  # enough to expire status messages on time
_BUFFER_CAPACITY = 1000


class _RecentRecords(logging.handlers.MemoryHandler):
    """Target-less MemoryHandler that keeps only the newest records."""

    def __init__(self, capacity: int):
        super().__init__(capacity, flushLevel=logging.CRITICAL + 1, flushOnClose=False)
        self.buffer = deque(maxlen=capacity)


@contextmanager
def buffered_logging(
    logger_name: str = "ccexp", capacity: int = _BUFFER_CAPACITY
) -> Iterator[None]:
    """Hold log records while the Live view owns the terminal.

    Handlers of the named logger are replaced by one bounded buffer for the
    duration; the newest `capacity` records are replayed to them afterwards.
    """
    target_logger = logging.getLogger(logger_name)
    original = list(target_logger.handlers)
    if not original:
        yield
        return

    memory = _RecentRecords(capacity)
    for handler in original:
        target_logger.removeHandler(handler)
    target_logger.addHandler(memory)
    try:
        yield
    finally:
        target_logger.removeHandler(memory)
        for handler in original:
            target_logger.addHandler(handler)
        for record in memory.buffer:
            target_logger.handle(record)
        memory.buffer.clear()
        memory.close()


def run_session(
    session: BrowserSession,
    console: Console,
    theme: Theme,
    root: Path | None = None,
) -> None:
    """Run the key loop until the session asks to exit or Ctrl+C."""

    def frame():
        return render_session(session, theme, time.monotonic(), console.height, root)

    with Live(
        get_renderable=frame,
        console=console,
        refresh_per_second=REFRESH_PER_SECOND,
        transient=True,
    ) as live:
        session.on_change = live.refresh
        while not session.should_exit:
            try:
                key = readchar.readkey()
            except KeyboardInterrupt:
                break
            session.handle_key(key)
            live.refresh()
        session.on_change = None


def run_browser(
    options: ScanOptions,
    *,
    durations: MessageDurations = MessageDurations(),
    theme_preference: str = "auto",
    console: Console | None = None,
) -> int:
    """Scan, then browse interactively.

    Returns:
        Process exit status: 0 normally, 1 if the scan failed.
    """
    console = console or Console()
    theme = detect_theme(console, theme_preference)
    root = Path(options.path).expanduser().resolve()

    with buffered_logging():
        try:
            with console.status(f"Scanning {root}..."):
                records: list[FileRecord] = scan_files(options)
        except ScanError as e:
            console.print(render_scan_error(e, theme))
            return 1

        logger.debug("Loaded %d files from %s", len(records), root)
        session = BrowserSession(records, durations=durations)
        run_session(session, console, theme, root)

    if session.selected_file is not None:
        logger.debug("Last selection: %s", session.selected_file.path)
    return 0
