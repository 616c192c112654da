"""Content parsers for discovered files.

Each file kind has one parser with the signature

    parser(path, content, stats, home) -> FileRecord | None

and every parser runs through the same process_file() wrapper, which owns the
size ceiling, decoding and error logging. A parser returns None to reject a
file; rejected files are simply absent from the browser.
"""

from __future__ import annotations

import json
import logging
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

import yaml

from .classify import COMMANDS_DIR_NAME, classify, is_under
from .types import CommandMetadata, FileKind, FileRecord

logger = logging.getLogger(__name__)

ContentParser = Callable[[Path, str, os.stat_result, Path], FileRecord | None]

# File size ceilings (bytes)
MAX_INSTRUCTION_SIZE = 1024 * 1024
MAX_COMMAND_SIZE = 512 * 1024
MAX_SETTINGS_SIZE = 1024 * 1024

MAX_DESCRIPTION_LENGTH = 100

FRONTMATTER_RE = re.compile(r"^---\s*\n(.*?)\n?---\s*\n?", re.DOTALL)
HASHTAG_RE = re.compile(r"#(\w+)")
HEADING_RE = re.compile(r"^\s*#{1,6} ", re.MULTILINE)

# Any single match marks a command as taking arguments.
ARGUMENT_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("angle placeholder", re.compile(r"<[^>]+>")),
    ("square placeholder", re.compile(r"\[[^\]]+\]")),
    ("variable", re.compile(r"\$\{[^}]+\}")),
    ("template", re.compile(r"\{\{[^}]+\}\}")),
    ("long option", re.compile(r"--\w+")),
    ("short option", re.compile(r"-\w")),
    ("$ARGUMENTS", re.compile(r"\$ARGUMENTS\b")),
)


def process_file(
    path: Path,
    parser: ContentParser,
    *,
    max_size: int,
    label: str,
    home: Path | None = None,
) -> FileRecord | None:
    """Stat, size-check, read and parse one file.

    Never raises for per-file problems: unreadable, oversized or undecodable
    files are logged and skipped.

    Args:
        path: File to process.
        parser: Kind-specific content parser.
        max_size: Size ceiling in bytes, checked before reading.
        label: Human name of the file kind, for log messages.
        home: Home directory (defaults to Path.home()).

    Returns:
        The parsed FileRecord, or None if the file was rejected.
    """
    try:
        stats = path.stat()
    except OSError as e:
        logger.warning("Cannot stat %s file %s: %s", label, path, e)
        return None

    if stats.st_size > max_size:
        logger.warning(
            "%s file too large (%d bytes, limit %d), skipping: %s",
            label,
            stats.st_size,
            max_size,
            path,
        )
        return None

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read %s file %s: %s", label, path, e)
        return None

    return parser(path, content, stats, home if home is not None else Path.home())


def _modified(stats: os.stat_result) -> datetime:
    return datetime.fromtimestamp(stats.st_mtime)


# ── front matter ──────────────────────────────────────────────────────────


def split_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Split YAML front matter from markdown content.

    Returns:
        Tuple of (front matter dict, body). Missing or invalid front matter
        yields an empty dict; the fence is still stripped when present.
    """
    match = FRONTMATTER_RE.match(content)
    if not match:
        return {}, content

    body = content[match.end() :]
    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        logger.debug("Ignoring invalid front matter: %s", e)
        return {}, body

    if not isinstance(data, dict):
        return {}, body
    return data, body


# ── description rules ─────────────────────────────────────────────────────


def _truncate(text: str, limit: int = MAX_DESCRIPTION_LENGTH) -> str:
    return text if len(text) <= limit else f"{text[: limit - 3]}..."


def _first_heading(frontmatter: dict[str, Any], body: str) -> str | None:
    for line in body.splitlines():
        stripped = line.strip()
        if stripped.startswith("# "):
            title = stripped[2:].strip()
            if title:
                return title
    return None


def _frontmatter_description(frontmatter: dict[str, Any], body: str) -> str | None:
    value = frontmatter.get("description")
    if isinstance(value, str) and value.strip():
        return " ".join(value.split())
    return None


def _first_content_line(frontmatter: dict[str, Any], body: str) -> str | None:
    for line in body.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("<!--"):
            return stripped
    return None


# Evaluated in order; the first rule that yields text wins.
DESCRIPTION_RULES: tuple[tuple[str, Callable[[dict[str, Any], str], str | None]], ...] = (
    ("level-1 heading", _first_heading),
    ("front matter description", _frontmatter_description),
    ("first content line", _first_content_line),
)


def extract_description(content: str) -> str | None:
    """Derive a one-line description for a command file."""
    frontmatter, body = split_frontmatter(content)
    for _, rule in DESCRIPTION_RULES:
        text = rule(frontmatter, body)
        if text:
            return _truncate(text)
    return None


def has_command_arguments(content: str) -> bool:
    """Check whether command content mentions any argument syntax."""
    frontmatter, _ = split_frontmatter(content)
    if frontmatter.get("argument-hint"):
        return True
    return any(pattern.search(content) for _, pattern in ARGUMENT_PATTERNS)


# ── command naming ────────────────────────────────────────────────────────


def command_segments(path: Path) -> list[str]:
    """Path segments after the last `commands` directory, `.md` stripped."""
    parts = list(path.parts)
    indexes = [i for i, part in enumerate(parts[:-1]) if part == COMMANDS_DIR_NAME]
    segments = parts[indexes[-1] + 1 :] if indexes else [parts[-1]]
    segments[-1] = segments[-1].removesuffix(".md")
    return segments


def command_name(path: Path) -> str:
    """`.claude/commands/git/commit.md` -> `git:commit`."""
    return ":".join(command_segments(path))


def command_namespace(path: Path) -> str | None:
    """First directory under `commands`, or None for top-level commands."""
    segments = command_segments(path)
    return segments[0] if len(segments) > 1 else None


def command_scope(path: Path, home: Path) -> str:
    return "user" if is_under(path, home) else "project"


# ── parsers ───────────────────────────────────────────────────────────────


def parse_command_file(
    path: Path, content: str, stats: os.stat_result, home: Path
) -> FileRecord | None:
    """Parse a slash-command definition. Blank files are rejected."""
    if not content.strip():
        logger.debug("Skipping empty command file: %s", path)
        return None

    namespace = command_namespace(path)
    metadata = CommandMetadata(
        name=command_name(path),
        scope=command_scope(path, home),
        namespace=namespace,
        description=extract_description(content),
        has_arguments=has_command_arguments(content),
    )
    return FileRecord(
        path=path,
        kind=FileKind.COMMAND_DEFINITION,
        size=stats.st_size,
        last_modified=_modified(stats),
        command=metadata,
        tags=(namespace,) if namespace else (),
    )


def extract_tags(content: str) -> tuple[str, ...]:
    """Distinct `#word` hashtags in order of first appearance."""
    return tuple(dict.fromkeys(HASHTAG_RE.findall(content)))


def parse_instruction_file(
    path: Path, content: str, stats: os.stat_result, home: Path
) -> FileRecord | None:
    """Parse a CLAUDE.md-style file. Files without any heading are rejected."""
    if not HEADING_RE.search(content):
        logger.debug("Skipping instruction file without a heading: %s", path)
        return None

    return FileRecord(
        path=path,
        kind=classify(path, home),
        size=stats.st_size,
        last_modified=_modified(stats),
        tags=extract_tags(content),
    )


def parse_settings_file(
    path: Path, content: str, stats: os.stat_result, home: Path
) -> FileRecord | None:
    """Parse a settings JSON file. Invalid JSON is rejected."""
    try:
        json.loads(content)
    except json.JSONDecodeError as e:
        logger.warning("Invalid JSON in settings file %s: %s", path, e)
        return None

    return FileRecord(
        path=path,
        kind=classify(path, home),
        size=stats.st_size,
        last_modified=_modified(stats),
    )
