"""Filesystem scanner for Claude configuration files.

Walks a project root (and the user's ~/.claude directory) looking for:
- CLAUDE.md / CLAUDE.local.md instruction files
- *.md slash-command definitions under a commands/ directory
- settings.json / settings.local.json under .claude/

Directories on the exclusion denylist are never entered. Hidden directories
are skipped unless include_hidden is set, except .claude which is always
walked.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable

from .classify import (
    COMMANDS_DIR_NAME,
    CONFIG_DIR_NAME,
    INSTRUCTION_FILENAMES,
    PRIMARY_FILENAME,
    classify,
)
from .errors import ScanError
from .exclusions import DEFAULT_EXCLUSIONS, build_exclusions, is_excluded
from .extractors import (
    MAX_COMMAND_SIZE,
    MAX_INSTRUCTION_SIZE,
    MAX_SETTINGS_SIZE,
    ContentParser,
    parse_command_file,
    parse_instruction_file,
    parse_settings_file,
    process_file,
)
from .types import FileKind, FileRecord, ScanOptions

logger = logging.getLogger(__name__)

# Depth limits for non-recursive scans (directory levels below the root).
# Commands get one extra level: <root>/.claude/commands/<namespace>/cmd.md
NON_RECURSIVE_DEPTH = 1
COMMAND_NON_RECURSIVE_DEPTH = 3

INSTRUCTION_KINDS = frozenset({
    FileKind.PROJECT_CONFIG, FileKind.LOCAL_OVERRIDE, FileKind.GLOBAL_CONFIG,
})
SETTINGS_KINDS = frozenset({FileKind.SETTINGS, FileKind.SETTINGS_LOCAL})

_SCAN_WORKERS = 4


def walk(
    root: Path,
    match: Callable[[Path], bool],
    *,
    max_depth: int,
    include_hidden: bool = False,
    exclusions: frozenset[str] = DEFAULT_EXCLUSIONS,
) -> list[Path]:
    """Collect files under root for which match(path) is true.

    Args:
        root: Directory to walk. A missing root yields an empty list.
        match: Predicate applied to every regular file.
        max_depth: Directory levels below root to descend (0 = root only).
        include_hidden: Also walk dot-directories.
        exclusions: Directory basenames never entered.

    Returns:
        Matching absolute paths, in sorted traversal order.

    Raises:
        ScanError: If root exists but cannot be listed as a directory.
    """
    if not root.exists():
        return []
    if not root.is_dir():
        raise ScanError(f"Not a directory: {root}")

    try:
        top_entries = sorted(root.iterdir())
    except OSError as e:
        raise ScanError(f"Cannot read {root}: {e}") from e

    found: list[Path] = []

    def _should_enter(entry: Path) -> bool:
        name = entry.name
        if is_excluded(name, exclusions):
            return False
        if name.startswith(".") and not include_hidden and name != CONFIG_DIR_NAME:
            return False
        return not entry.is_symlink()

    def _visit(entries: list[Path], depth: int) -> None:
        for entry in entries:
            try:
                is_dir = entry.is_dir()
                enter = is_dir and depth < max_depth and _should_enter(entry)
                is_file = not is_dir and entry.is_file()
            except OSError as e:
                logger.warning("Skipping unreadable entry %s: %s", entry, e)
                continue
            if is_dir:
                if not enter:
                    continue
                try:
                    children = sorted(entry.iterdir())
                except OSError as e:
                    logger.warning("Skipping unreadable directory %s: %s", entry, e)
                    continue
                _visit(children, depth + 1)
            elif is_file and match(entry):
                found.append(entry)

    _visit(top_entries, 0)
    return found


def find_instruction_files(
    root: Path,
    *,
    recursive: bool = True,
    include_hidden: bool = False,
    max_depth: int = 20,
    exclusions: frozenset[str] = DEFAULT_EXCLUSIONS,
) -> list[Path]:
    """Find CLAUDE.md and CLAUDE.local.md files."""
    return walk(
        root,
        lambda p: p.name in INSTRUCTION_FILENAMES,
        max_depth=max_depth if recursive else NON_RECURSIVE_DEPTH,
        include_hidden=include_hidden,
        exclusions=exclusions,
    )


def find_command_files(
    root: Path,
    *,
    recursive: bool = True,
    include_hidden: bool = False,
    max_depth: int = 20,
    exclusions: frozenset[str] = DEFAULT_EXCLUSIONS,
    home: Path | None = None,
) -> list[Path]:
    """Find slash-command markdown files under any commands/ directory."""
    return walk(
        root,
        lambda p: classify(p, home) == FileKind.COMMAND_DEFINITION,
        max_depth=max_depth if recursive else COMMAND_NON_RECURSIVE_DEPTH,
        include_hidden=include_hidden,
        exclusions=exclusions,
    )


def find_settings_files(
    root: Path,
    *,
    recursive: bool = True,
    include_hidden: bool = False,
    max_depth: int = 20,
    exclusions: frozenset[str] = DEFAULT_EXCLUSIONS,
) -> list[Path]:
    """Find settings.json and settings.local.json inside .claude/ directories."""
    return walk(
        root,
        lambda p: classify(p) in SETTINGS_KINDS,
        max_depth=max_depth if recursive else NON_RECURSIVE_DEPTH,
        include_hidden=include_hidden,
        exclusions=exclusions,
    )


def _process_all(
    paths: list[Path], parser: ContentParser, max_size: int, label: str, home: Path
) -> list[FileRecord]:
    records = []
    for path in paths:
        record = process_file(path, parser, max_size=max_size, label=label, home=home)
        if record is not None:
            records.append(record)
    return records


def scan_files(options: ScanOptions | None = None) -> list[FileRecord]:
    """Scan a project root plus the user-level ~/.claude locations.

    All walks run concurrently; their results are merged, de-duplicated by
    path and returned as one batch.

    Args:
        options: Scan options (defaults: cwd, recursive, no hidden dirs).

    Returns:
        FileRecords sorted by path.

    Raises:
        ScanError: If the project root cannot be read.
    """
    options = options or ScanOptions()
    home = options.home or Path.home()
    root = Path(options.path).expanduser().resolve()
    user_dir = home / CONFIG_DIR_NAME
    exclusions = build_exclusions(options.extra_exclusions)
    walk_kwargs = {
        "recursive": options.recursive,
        "include_hidden": options.include_hidden,
        "max_depth": options.max_depth,
        "exclusions": exclusions,
    }

    def wants(kinds: frozenset[FileKind]) -> bool:
        return options.kind is None or options.kind in kinds

    # (label, job, required) - a required job failing fails the scan
    jobs: list[tuple[str, Callable[[], list[FileRecord]], bool]] = []

    if wants(INSTRUCTION_KINDS):
        jobs.append((
            "instruction files",
            lambda: _process_all(
                find_instruction_files(root, **walk_kwargs),
                parse_instruction_file, MAX_INSTRUCTION_SIZE, "Instruction", home,
            ),
            True,
        ))
    if wants(frozenset({FileKind.COMMAND_DEFINITION})):
        jobs.append((
            "slash commands",
            lambda: _process_all(
                find_command_files(root, home=home, **walk_kwargs),
                parse_command_file, MAX_COMMAND_SIZE, "Slash command", home,
            ),
            True,
        ))
    if wants(SETTINGS_KINDS):
        jobs.append((
            "settings files",
            lambda: _process_all(
                find_settings_files(root, **walk_kwargs),
                parse_settings_file, MAX_SETTINGS_SIZE, "Settings", home,
            ),
            True,
        ))

    if options.include_user_files:
        if wants(frozenset({FileKind.GLOBAL_CONFIG})):
            global_md = user_dir / PRIMARY_FILENAME
            jobs.append((
                "global instructions",
                lambda: _process_all(
                    [global_md] if global_md.is_file() else [],
                    parse_instruction_file, MAX_INSTRUCTION_SIZE, "Instruction", home,
                ),
                False,
            ))
        if wants(frozenset({FileKind.COMMAND_DEFINITION})):
            jobs.append((
                "user slash commands",
                lambda: _process_all(
                    find_command_files(
                        user_dir / COMMANDS_DIR_NAME,
                        recursive=True,
                        include_hidden=options.include_hidden,
                        max_depth=options.max_depth,
                        exclusions=exclusions,
                        home=home,
                    ),
                    parse_command_file, MAX_COMMAND_SIZE, "Slash command", home,
                ),
                False,
            ))
        if wants(SETTINGS_KINDS):
            jobs.append((
                "user settings",
                lambda: _process_all(
                    walk(user_dir, lambda p: classify(p) in SETTINGS_KINDS, max_depth=0),
                    parse_settings_file, MAX_SETTINGS_SIZE, "Settings", home,
                ),
                False,
            ))

    merged: dict[Path, FileRecord] = {}
    with ThreadPoolExecutor(max_workers=_SCAN_WORKERS) as pool:
        futures = [(label, pool.submit(job), required) for label, job, required in jobs]
        for label, future, required in futures:
            try:
                records = future.result()
            except ScanError as e:
                if required:
                    raise
                logger.warning("Skipping %s: %s", label, e)
                continue
            for record in records:
                merged.setdefault(record.path, record)

    results = merged.values()
    if options.kind is not None:
        results = [r for r in results if r.kind == options.kind]
    return sorted(results, key=lambda r: str(r.path))


def find_command_by_name(name: str, options: ScanOptions | None = None) -> FileRecord | None:
    """Look up a slash command by name (`git:commit` or `/git:commit`)."""
    options = options or ScanOptions()
    wanted = name.lstrip("/")
    scoped = ScanOptions(
        path=options.path,
        recursive=options.recursive,
        include_hidden=options.include_hidden,
        kind=FileKind.COMMAND_DEFINITION,
        max_depth=options.max_depth,
        extra_exclusions=options.extra_exclusions,
        home=options.home,
        include_user_files=options.include_user_files,
    )
    for record in scan_files(scoped):
        if record.command is not None and record.command.name == wanted:
            return record
    return None
