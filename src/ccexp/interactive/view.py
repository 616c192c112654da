"""Rendering of a BrowserSession as Rich panels.

Read-only functions of the session, the theme and the current time; the
Live refresh thread calls them without ever mutating state. File contents
for the preview pane are read once per scanned file and cached.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from pathlib import Path

from rich.console import Group as RenderGroup
from rich.console import RenderableType
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from ..classify import is_under
from ..errors import ActionError, ScanError
from ..navigation import visible_files
from ..scanner import SETTINGS_KINDS
from ..system import read_preview
from ..types import FileRecord, Group
from .session import BrowserSession
from .theme import Theme

TITLE = "Claude Config Explorer"
PANEL_PADDING = 10  # header, search line, details, footer, borders
MIN_VISIBLE_ROWS = 5
LIST_RATIO, PREVIEW_RATIO = 2, 3  # file list : preview width


@dataclass(frozen=True)
class Row:
    """One line of the tree: a group header (file_index None) or a file."""

    group_index: int
    file_index: int | None = None


def build_rows(groups: list[Group]) -> list[Row]:
    rows = []
    for gi, group in enumerate(groups):
        rows.append(Row(gi))
        rows.extend(Row(gi, fi) for fi in range(len(visible_files(group))))
    return rows


def cursor_row(session: BrowserSession, rows: list[Row]) -> int:
    nav = session.nav
    target = Row(nav.group_index, None if nav.is_group_cursor else nav.file_index)
    try:
        return rows.index(target)
    except ValueError:
        return 0


def window(cursor: int, total: int, max_visible: int) -> tuple[int, int]:
    """Return (start, end) of the row slice that keeps cursor visible."""
    if total <= max_visible:
        return 0, total
    start = min(max(cursor - max_visible // 2, 0), total - max_visible)
    return start, start + max_visible


def _relative_dir(record: FileRecord, root: Path | None) -> str:
    directory = record.path.parent
    if root is not None and is_under(directory, root):
        rel = directory.relative_to(root)
        return "." if rel == Path(".") else f"./{rel}"
    home = Path.home()
    if is_under(directory, home):
        return f"~/{directory.relative_to(home)}"
    return str(directory)


def render_group_row(group: Group, is_current: bool, theme: Theme) -> str:
    icon = theme.expanded_icon if group.expanded else theme.collapsed_icon
    style = theme.kind_style(group.kind)
    label = f"[bold {style}]{group.kind.label}[/bold {style}]"
    count = f"[{theme.muted}]({len(group.records)})[/{theme.muted}]"
    prefix = f"[{theme.accent}]{theme.cursor_icon}[/{theme.accent}]" if is_current else " "
    return f"{prefix} {icon} {label} {count}"


def render_file_row(
    record: FileRecord, is_current: bool, theme: Theme, root: Path | None
) -> str:
    prefix = f"[{theme.accent}]{theme.cursor_icon}[/{theme.accent}]" if is_current else " "
    if record.command is not None:
        name = escape(record.command.slash_name)
        detail = escape(record.command.description or "")
    else:
        name = escape(record.name)
        detail = escape(_relative_dir(record, root))
    name = f"[bold]{name}[/bold]" if is_current else name
    line = f"{prefix}     {name}"
    if detail:
        line += f"  [{theme.muted}]{detail}[/{theme.muted}]"
    return line


def render_details(record: FileRecord | None, theme: Theme) -> str:
    if record is None:
        return f"[{theme.muted}]No file selected[/{theme.muted}]"
    modified = record.last_modified.strftime("%Y-%m-%d %H:%M")
    parts = [escape(str(record.path)), f"{record.size:,} bytes", modified]
    if record.command is not None:
        parts.append(f"{record.command.scope} scope")
        if record.command.has_arguments:
            parts.append("takes arguments")
    if record.tags:
        parts.append(" ".join(f"#{escape(tag)}" for tag in record.tags))
    return f"[{theme.muted}]{theme.hint_separator.join(parts)}[/{theme.muted}]"


@lru_cache(maxsize=32)
def _load_preview(path: Path, modified: datetime, size: int) -> tuple[str, bool]:
    # modified/size key the cache so a rescanned file is read again
    return read_preview(path)


def render_preview(record: FileRecord | None, theme: Theme, max_lines: int) -> Panel:
    """Content pane for the selected file, cut to max_lines."""
    if record is None:
        return Panel(
            f"[{theme.muted}]Select a file to preview[/{theme.muted}]",
            title="Preview",
            border_style=theme.border,
        )

    try:
        text, truncated = _load_preview(record.path, record.last_modified, record.size)
    except ActionError as e:
        body: RenderableType = f"[{theme.error}]Error: {escape(str(e))}[/{theme.error}]"
    else:
        lines = text.splitlines()
        shown = "\n".join(lines[:max_lines])
        parts: list[RenderableType] = [
            Syntax(shown, "json") if record.kind in SETTINGS_KINDS else Markdown(shown)
        ]
        hidden = len(lines) - max_lines
        if hidden > 0:
            parts.append(f"[{theme.muted}]... {hidden} more line(s)[/{theme.muted}]")
        if truncated:
            parts.append(
                f"[{theme.warning}]... (file truncated due to size limit) ...[/{theme.warning}]"
            )
        body = RenderGroup(*parts)

    return Panel(body, title=f"[bold]{escape(record.name)}[/bold]", border_style=theme.border)


def render_search(query: str, theme: Theme) -> str:
    if not query:
        return f"[{theme.muted}]{theme.search_icon} type to filter[/{theme.muted}]"
    return f"[{theme.accent}]{theme.search_icon}[/{theme.accent}] {escape(query)}"


def render_status(session: BrowserSession, theme: Theme, now: float) -> str:
    message = session.menu.visible_message(now)
    if message:
        style = theme.error if session.menu.message_is_error else theme.success
        return f"[{style}]{escape(message)}[/{style}]"

    hints = [theme.nav_hint, "enter/space select", "esc clear/quit"]
    return f"[{theme.muted}]{theme.hint_separator.join(hints)}[/{theme.muted}]"


def render_menu(session: BrowserSession, theme: Theme, now: float) -> Panel:
    menu = session.menu
    lines = []
    for index, action in enumerate(menu.actions):
        is_current = index == menu.selected_index
        prefix = f"[{theme.accent}]{theme.cursor_icon}[/{theme.accent}]" if is_current else " "
        label = f"[bold]{action.label}[/bold]" if is_current else action.label
        lines.append(f"{prefix} [{theme.accent}]{action.key}[/{theme.accent}]  {label}")

    lines.append("")
    if menu.is_executing:
        lines.append(f"[{theme.info}]Running...[/{theme.info}]")
    elif menu.pending_confirmation is not None:
        prompt = escape(menu.pending_confirmation.prompt)
        lines.append(f"[bold {theme.warning}]{prompt}[/bold {theme.warning}]")
    elif menu.visible_message(now):
        lines.append(render_status(session, theme, now))
    else:
        hints = [theme.nav_hint, "enter run", "key shortcut", "esc back"]
        lines.append(f"[{theme.muted}]{theme.hint_separator.join(hints)}[/{theme.muted}]")

    title = escape(menu.record.name) if menu.record is not None else "Actions"
    return Panel(
        "\n".join(lines),
        title=f"[bold]{title}[/bold]",
        border_style=theme.accent,
    )


def render_session(
    session: BrowserSession,
    theme: Theme,
    now: float,
    height: int = 40,
    root: Path | None = None,
) -> RenderableType:
    """Render the whole browser for one frame.

    Args:
        session: Session to draw.
        theme: Visual theme.
        now: Monotonic time, for message expiry.
        height: Terminal height in lines.
        root: Scanned project root, for relative directory hints.
    """
    groups = session.visible_groups
    rows = build_rows(groups)
    max_visible = max(MIN_VISIBLE_ROWS, height - PANEL_PADDING)
    if session.menu.is_open:
        max_visible = max(MIN_VISIBLE_ROWS, max_visible - len(session.menu.actions) - 4)

    lines = [render_search(session.nav.query, theme), ""]

    if not session.groups:
        lines.append(f"[{theme.muted}]No Claude configuration files found[/{theme.muted}]")
    elif not rows:
        lines.append(f"[{theme.muted}]No files match the filter[/{theme.muted}]")
    else:
        current = cursor_row(session, rows)
        start, end = window(current, len(rows), max_visible)
        if start > 0:
            lines.append(
                f"[{theme.muted}]  {theme.scroll_up_icon} {start} more above[/{theme.muted}]"
            )
        for index in range(start, end):
            row = rows[index]
            group = groups[row.group_index]
            if row.file_index is None:
                lines.append(render_group_row(group, index == current, theme))
            else:
                record = visible_files(group)[row.file_index]
                lines.append(render_file_row(record, index == current, theme, root))
        below = len(rows) - end
        if below > 0:
            lines.append(
                f"[{theme.muted}]  {theme.scroll_down_icon} {below} more below[/{theme.muted}]"
            )

    lines.append("")
    lines.append(render_details(session.selected_file, theme))
    lines.append(theme.separator * 40)
    lines.append(render_status(session, theme, now))

    subtitle = f"{len(session.records)} files"
    browser = Panel(
        "\n".join(lines),
        title=f"[bold]{TITLE}[/bold]",
        subtitle=f"[{theme.muted}]{subtitle}[/{theme.muted}]",
        border_style=theme.border,
    )
    preview_lines = max(MIN_VISIBLE_ROWS, height - PANEL_PADDING)
    panes = Table.grid(expand=True)
    panes.add_column(ratio=LIST_RATIO)
    panes.add_column(ratio=PREVIEW_RATIO)
    panes.add_row(browser, render_preview(session.selected_file, theme, preview_lines))
    if session.menu.is_open:
        return RenderGroup(panes, render_menu(session, theme, now))
    return panes


def render_scan_error(error: ScanError, theme: Theme) -> Panel:
    return Panel(
        f"[{theme.error}]{escape(str(error))}[/{theme.error}]\n\n"
        f"[{theme.muted}]No files were loaded for this directory.[/{theme.muted}]",
        title=f"[bold {theme.error}]Scan failed[/bold {theme.error}]",
        border_style=theme.error,
    )
