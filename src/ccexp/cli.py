"""CLI interface for ccexp."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections import Counter
from pathlib import Path

import questionary
from questionary import Style
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from . import __version__, config, system
from .classify import SETTINGS_FILENAMES, classify
from .errors import ActionError, ScanError
from .scanner import find_command_by_name, scan_files
from .types import FileKind, FileRecord

console = Console()

logger = logging.getLogger(__name__)

# Custom style for questionary
custom_style = Style(
    [
        ("qmark", "fg:cyan bold"),
        ("question", "fg:white bold"),
        ("answer", "fg:cyan"),
        ("pointer", "fg:cyan bold"),
        ("highlighted", "fg:cyan bold"),
        ("instruction", "fg:gray"),
    ]
)

DEFAULT_PREVIEW_LINES = 50


def setup_logging(verbose: bool = False) -> None:
    """Send ccexp log records to stderr through a RichHandler."""
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
    )
    root = logging.getLogger("ccexp")
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.propagate = False


def _error(msg: str) -> None:
    console.print(f"[red]Error:[/red] {escape(msg)}")


def _scan_options(args, cfg: dict, **extra):
    path = Path(args.path).expanduser() if args.path else None
    return config.scan_options(
        cfg,
        path,
        recursive=args.recursive,
        include_hidden=args.include_hidden or None,
        **extra,
    )


def _format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


# ── browser ───────────────────────────────────────────────────────────────


def cmd_browse(args, cfg: dict) -> int:
    """Run the interactive browser (default when no subcommand is given)."""
    from .interactive import run_browser

    return run_browser(
        _scan_options(args, cfg),
        durations=config.message_durations(cfg),
        theme_preference=cfg.get("theme", "auto"),
        console=console,
    )


# ── scan ──────────────────────────────────────────────────────────────────


def _files_table(records: list[FileRecord]) -> Table:
    table = Table(title="Configuration files", title_justify="left")
    table.add_column("Kind", style="cyan", no_wrap=True)
    table.add_column("Path")
    table.add_column("Size", justify="right")
    table.add_column("Modified", style="dim")
    table.add_column("Tags", style="dim")
    for record in records:
        table.add_row(
            record.kind.label,
            escape(str(record.path)),
            _format_size(record.size),
            record.last_modified.strftime("%Y-%m-%d %H:%M"),
            " ".join(f"#{escape(tag)}" for tag in record.tags),
        )
    return table


def _commands_table(records: list[FileRecord]) -> Table:
    table = Table(title="Slash commands", title_justify="left")
    table.add_column("Command", style="bold cyan", no_wrap=True)
    table.add_column("Scope")
    table.add_column("Description")
    table.add_column("Args", justify="center")
    table.add_column("Path", style="dim")
    for record in records:
        meta = record.command
        table.add_row(
            escape(meta.slash_name),
            meta.scope,
            escape(meta.description or ""),
            "yes" if meta.has_arguments else "",
            escape(str(record.path)),
        )
    return table


def scan_summary(records: list[FileRecord]) -> dict:
    counts = Counter(record.kind.value for record in records)
    return {"total": len(records), "by_kind": dict(sorted(counts.items()))}


def cmd_scan(args, cfg: dict) -> int:
    """List discovered files as tables or JSON."""
    kind = FileKind(args.type) if args.type else None
    options = _scan_options(args, cfg, kind=kind)
    logger.debug("Scanning %s (kind=%s)", options.path, kind)
    try:
        records = scan_files(options)
    except ScanError as e:
        _error(str(e))
        return 1

    if args.output == "json":
        data = {
            "root": str(Path(options.path).resolve()),
            "files": [record.to_dict() for record in records],
            "summary": scan_summary(records),
        }
        print(json.dumps(data, indent=2))
        return 0

    if not records:
        console.print("[dim]No Claude configuration files found.[/dim]")
        return 0

    commands = [r for r in records if r.command is not None]
    files = [r for r in records if r.command is None]
    if files:
        console.print(_files_table(files))
    if commands:
        console.print(_commands_table(commands))
    console.print(f"\n[bold]{len(records)}[/bold] file(s) found")
    return 0


# ── preview ───────────────────────────────────────────────────────────────


def _resolve_source(source: str, args, cfg: dict) -> Path | None:
    """A file path, or a slash-command name looked up by scanning."""
    path = Path(source).expanduser()
    if path.is_file():
        return path.resolve()
    record = find_command_by_name(source, _scan_options(args, cfg))
    return record.path if record is not None else None


def cmd_preview(args, cfg: dict) -> int:
    """Show file information and the first lines of its content."""
    if args.command_name:
        record = find_command_by_name(args.command_name, _scan_options(args, cfg))
        if record is None:
            _error(f"Slash command not found: {args.command_name}")
            return 1
        path = record.path
    elif args.file:
        path = Path(args.file).expanduser()
        if not path.is_file():
            _error(f"File not found: {path}")
            return 1
        path = path.resolve()
    else:
        _error("Give a FILE or --command NAME")
        return 1

    try:
        content = system.read_file_content(path)
    except ActionError as e:
        _error(str(e))
        return 1

    stats = path.stat()
    kind = classify(path)
    info = (
        f"[bold]Path:[/bold] {escape(str(path))}\n"
        f"[bold]Kind:[/bold] {kind.label}\n"
        f"[bold]Size:[/bold] {_format_size(stats.st_size)}"
    )
    console.print(Panel(info, title=f"[bold]{escape(path.name)}[/bold]", border_style="cyan"))

    lines = content.splitlines()
    shown = "\n".join(lines[: args.lines])
    if path.name in SETTINGS_FILENAMES:
        console.print(Syntax(shown, "json"))
    else:
        console.print(Markdown(shown))
    if len(lines) > args.lines:
        console.print(f"[dim]... {len(lines) - args.lines} more line(s)[/dim]")
    return 0


# ── copy ──────────────────────────────────────────────────────────────────


def cmd_copy(args, cfg: dict) -> int:
    """Copy a file (or one markdown section of it) to a path or the clipboard."""
    if not args.to and not args.clipboard:
        _error("Give --to DEST or --clipboard")
        return 1

    source = _resolve_source(args.source, args, cfg)
    if source is None:
        _error(f"No such file or slash command: {args.source}")
        return 1

    try:
        content = None
        if args.section:
            text = system.read_file_content(source)
            content = system.extract_section(text, args.section)
            if content is None:
                _error(f"Section not found: {args.section}")
                sections = system.list_sections(text)
                if sections:
                    console.print("[dim]Available sections:[/dim]")
                    for title in sections:
                        console.print(f"  [dim]-[/dim] {escape(title)}")
                return 1

        if args.clipboard:
            if content is None:
                content = system.read_file_content(source)
            system.write_to_clipboard(content)
            console.print(f"[green]✓[/green] Copied {escape(source.name)} to clipboard")
            return 0

        dest = Path(args.to).expanduser()
        target = dest / source.name if dest.is_dir() else dest
        if target.exists() and not args.force:
            overwrite = questionary.confirm(
                f"{target} already exists. Overwrite?",
                default=False,
                style=custom_style,
            ).ask()
            if not overwrite:
                console.print("[dim]Cancelled.[/dim]")
                return 0

        if content is not None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        else:
            target = system.copy_file(source, target)
    except (ActionError, OSError) as e:
        _error(str(e))
        return 1

    console.print(f"[green]✓[/green] Copied to {escape(str(target))}")
    return 0


# ── parser ────────────────────────────────────────────────────────────────


def _add_scan_flags(parser: argparse.ArgumentParser, default=None) -> None:
    """Add --path/--include-hidden/--no-recursive.

    Subcommands pass default=argparse.SUPPRESS so values given before the
    subcommand name are kept.
    """
    parser.add_argument("--path", default=default, help="Project root to scan (default: cwd)")
    parser.add_argument("--include-hidden", action="store_true",
                        default=False if default is None else default,
                        help="Also walk hidden directories")
    parser.add_argument("--no-recursive", dest="recursive", action="store_const",
                        const=False, default=default, help="Only look near the root")


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="ccexp",
        description="ccexp: browse Claude Code configuration files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"ccexp {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    _add_scan_flags(parser)
    parser.set_defaults(func=cmd_browse)

    subparsers = parser.add_subparsers(dest="subcommand")

    # scan
    scan_p = subparsers.add_parser("scan", help="List configuration files")
    _add_scan_flags(scan_p, default=argparse.SUPPRESS)
    scan_p.add_argument("--type", choices=[k.value for k in FileKind if k != FileKind.UNKNOWN],
                        help="Only files of this kind")
    scan_p.add_argument("--output", choices=["table", "json"], default="table",
                        help="Output format (default: table)")
    scan_p.set_defaults(func=cmd_scan)

    # preview
    preview_p = subparsers.add_parser("preview", help="Preview a file or slash command")
    _add_scan_flags(preview_p, default=argparse.SUPPRESS)
    preview_p.add_argument("file", nargs="?", help="File to preview")
    preview_p.add_argument("--command", dest="command_name", help="Slash command name")
    preview_p.add_argument("--lines", type=int, default=DEFAULT_PREVIEW_LINES,
                           help=f"Lines to show (default: {DEFAULT_PREVIEW_LINES})")
    preview_p.set_defaults(func=cmd_preview)

    # copy
    copy_p = subparsers.add_parser("copy", help="Copy a file or slash command")
    _add_scan_flags(copy_p, default=argparse.SUPPRESS)
    copy_p.add_argument("source", help="File path or slash command name")
    copy_p.add_argument("--to", help="Destination file or directory")
    copy_p.add_argument("--clipboard", action="store_true", help="Copy to the clipboard")
    copy_p.add_argument("--section", help="Only the markdown section with this heading")
    copy_p.add_argument("--force", action="store_true", help="Overwrite without asking")
    copy_p.set_defaults(func=cmd_copy)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    cfg = config.load_config()
    if cfg.get("debug") and not args.verbose:
        setup_logging(verbose=True)

    try:
        code = args.func(args, cfg)
    except KeyboardInterrupt:
        print()
        sys.exit(130)
    sys.exit(code)
