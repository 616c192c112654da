"""System collaborators: file reads, clipboard, default-app open, file copy.

Each function either succeeds or raises an ActionError subclass; callers in
the action menu turn those into transient messages.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
import sys
from pathlib import Path

from .errors import ActionError, ClipboardError, OpenError

logger = logging.getLogger(__name__)

# Tried in order; the first one found on PATH is used.
CLIPBOARD_COMMANDS: tuple[list[str], ...] = (
    ["pbcopy"],
    ["wl-copy"],
    ["xclip", "-selection", "clipboard"],
    ["xsel", "--clipboard", "--input"],
    ["clip"],
)

_TIMEOUT_SECONDS = 5

PREVIEW_MAX_BYTES = 1024 * 1024
_BINARY_SNIFF_BYTES = 8192


def read_file_content(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ActionError(f"Cannot read {path.name}: {e}") from e


def find_clipboard_command() -> list[str] | None:
    for cmd in CLIPBOARD_COMMANDS:
        if shutil.which(cmd[0]):
            return cmd
    return None


def write_to_clipboard(text: str) -> None:
    """Copy text to the system clipboard.

    Raises:
        ClipboardError: If no clipboard tool is available or it fails.
    """
    cmd = find_clipboard_command()
    if cmd is None:
        raise ClipboardError(
            "No clipboard tool found (install pbcopy, wl-copy, xclip or xsel)"
        )

    logger.debug("Copying %d characters with %s", len(text), cmd[0])
    try:
        subprocess.run(
            cmd,
            input=text,
            text=True,
            check=True,
            capture_output=True,
            timeout=_TIMEOUT_SECONDS,
        )
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        raise ClipboardError(f"{cmd[0]} failed: {stderr or e}") from e
    except (OSError, subprocess.TimeoutExpired) as e:
        raise ClipboardError(f"{cmd[0]} failed: {e}") from e


def open_with_default_handler(path: Path) -> None:
    """Open a file with the platform's default application.

    Raises:
        OpenError: If the opener is missing or exits with an error.
    """
    if sys.platform == "win32":
        try:
            os.startfile(str(path))  # type: ignore[attr-defined]
        except OSError as e:
            raise OpenError(f"Cannot open {path.name}: {e}") from e
        return

    opener = "open" if sys.platform == "darwin" else "xdg-open"
    if not shutil.which(opener):
        raise OpenError(f"{opener} not found")
    try:
        subprocess.run([opener, str(path)], check=True, capture_output=True,
                       timeout=_TIMEOUT_SECONDS)
    except subprocess.CalledProcessError as e:
        raise OpenError(f"{opener} exited with status {e.returncode}") from e
    except (OSError, subprocess.TimeoutExpired) as e:
        raise OpenError(f"Cannot open {path.name}: {e}") from e


def copy_file(source: Path, destination: Path) -> Path:
    """Copy source to destination (a file path or an existing directory).

    Returns:
        The path written.
    """
    target = destination / source.name if destination.is_dir() else destination
    if target.resolve() == source.resolve():
        raise ActionError(f"{source.name} is already at {target}")
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, target)
    except OSError as e:
        raise ActionError(f"Cannot copy {source.name}: {e}") from e
    logger.debug("Copied %s -> %s", source, target)
    return target


_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*?)\s*#*\s*$")


def list_sections(content: str) -> list[str]:
    """Heading titles of a markdown document, in order."""
    titles = []
    for line in content.splitlines():
        match = _HEADING_RE.match(line.strip())
        if match:
            titles.append(match.group(2))
    return titles


def extract_section(content: str, title: str) -> str | None:
    """Return one markdown section (heading line included) by title.

    The first heading whose text contains title (case-insensitive) starts
    the section; it runs until the next heading of the same or a higher
    level.
    """
    wanted = title.strip().lstrip("#").strip().casefold()
    lines = content.splitlines()
    start = None
    level = 0

    for i, line in enumerate(lines):
        match = _HEADING_RE.match(line.strip())
        if not match:
            continue
        depth = len(match.group(1))
        if start is None:
            if wanted in match.group(2).casefold():
                start, level = i, depth
        elif depth <= level:
            return "\n".join(lines[start:i]).rstrip() + "\n"

    if start is None:
        return None
    return "\n".join(lines[start:]).rstrip() + "\n"


def read_preview(path: Path, max_bytes: int = PREVIEW_MAX_BYTES) -> tuple[str, bool]:
    """Read the head of a text file for display.

    Returns:
        (text, truncated) where truncated is true if the file is larger
        than max_bytes.

    Raises:
        ActionError: If the file cannot be read or looks binary.
    """
    try:
        with path.open("rb") as f:
            data = f.read(max_bytes + 1)
    except OSError as e:
        raise ActionError(f"Cannot read {path.name}: {e}") from e
    if b"\0" in data[:_BINARY_SNIFF_BYTES]:
        raise ActionError("Binary file cannot be previewed")
    return data[:max_bytes].decode("utf-8", errors="replace"), len(data) > max_bytes
