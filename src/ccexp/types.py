"""Type definitions for ccexp.

Shared enums and dataclasses used by the scanner, the grouping engine and the
interactive browser. Records are immutable: a rescan builds new ones.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any


class FileKind(str, Enum):
    """Closed set of file classifications the scanner recognizes."""

    PROJECT_CONFIG = "project-config"
    LOCAL_OVERRIDE = "local-override"
    GLOBAL_CONFIG = "global-config"
    COMMAND_DEFINITION = "command-definition"
    SETTINGS = "settings"
    SETTINGS_LOCAL = "settings-local"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        """Group header label shown in the browser."""
        return _KIND_LABELS[self]


_KIND_LABELS = {
    FileKind.PROJECT_CONFIG: "PROJECT",
    FileKind.LOCAL_OVERRIDE: "LOCAL",
    FileKind.GLOBAL_CONFIG: "GLOBAL",
    FileKind.COMMAND_DEFINITION: "COMMAND",
    FileKind.SETTINGS: "SETTINGS",
    FileKind.SETTINGS_LOCAL: "LOCAL SETTINGS",
    FileKind.UNKNOWN: "OTHER",
}


@dataclass(frozen=True)
class CommandMetadata:
    """Metadata derived from a slash-command definition file."""

    name: str  # "git:commit"
    scope: str  # "project" or "user"
    namespace: str | None = None
    description: str | None = None
    has_arguments: bool = False

    @property
    def slash_name(self) -> str:
        return f"/{self.name}"


@dataclass(frozen=True)
class FileRecord:
    """One discovered file.

    Attributes:
        path: Absolute path to the file.
        kind: Classification of the file.
        size: Size in bytes at scan time.
        last_modified: Modification time at scan time.
        command: Extracted metadata, only for command definitions.
        tags: Free-form tags (hashtags, command namespace).
    """

    path: Path
    kind: FileKind
    size: int
    last_modified: datetime
    command: CommandMetadata | None = None
    tags: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.path.name

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly representation used by `ccexp scan --output json`."""
        data: dict[str, Any] = {
            "path": str(self.path),
            "kind": self.kind.value,
            "size": self.size,
            "last_modified": self.last_modified.isoformat(),
            "tags": list(self.tags),
        }
        if self.command is not None:
            data["command"] = {
                "name": self.command.name,
                "scope": self.command.scope,
                "namespace": self.command.namespace,
                "description": self.command.description,
                "has_arguments": self.command.has_arguments,
            }
        return data


@dataclass(frozen=True)
class Group:
    """Records sharing one classification, with their expand/collapse flag."""

    kind: FileKind
    records: tuple[FileRecord, ...] = ()
    expanded: bool = True


@dataclass(frozen=True)
class ScanOptions:
    """Options for one scan of a project root."""

    path: Path = field(default_factory=Path.cwd)
    recursive: bool = True
    include_hidden: bool = False
    kind: FileKind | None = None  # restrict the scan to one classification
    max_depth: int = 20
    extra_exclusions: tuple[str, ...] = ()
    home: Path | None = None  # defaults to Path.home()
    include_user_files: bool = True


class EventType(str, Enum):
    """Keystroke categories produced by the input multiplexer."""

    UP = "up"
    DOWN = "down"
    SELECT = "select"
    ESCAPE = "escape"
    BACKSPACE = "backspace"
    CLEAR = "clear"
    QUIT = "quit"
    CHAR = "char"
    IGNORED = "ignored"


@dataclass(frozen=True)
class InputEvent:
    """One classified keystroke. `char` is set only for CHAR events."""

    type: EventType
    char: str = ""
