"""Path classification for Claude configuration files.

classify() looks only at the basename and the containing directory string
(plus the home directory it is given); it never touches the filesystem, so
the same path always yields the same FileKind.
"""

from __future__ import annotations

from pathlib import Path, PurePath

from .types import FileKind

PRIMARY_FILENAME = "CLAUDE.md"
LOCAL_OVERRIDE_FILENAME = "CLAUDE.local.md"
CONFIG_DIR_NAME = ".claude"
COMMANDS_DIR_NAME = "commands"
SETTINGS_FILENAME = "settings.json"
SETTINGS_LOCAL_FILENAME = "settings.local.json"

INSTRUCTION_FILENAMES = frozenset({PRIMARY_FILENAME, LOCAL_OVERRIDE_FILENAME})
SETTINGS_FILENAMES = frozenset({SETTINGS_FILENAME, SETTINGS_LOCAL_FILENAME})


def _home(home: str | PurePath | None) -> PurePath:
    return PurePath(home) if home is not None else Path.home()


def is_under(path: str | PurePath, directory: str | PurePath) -> bool:
    """Return True if path lies inside directory (lexically, no resolving)."""
    try:
        PurePath(path).relative_to(directory)
    except ValueError:
        return False
    return True


def classify(path: str | PurePath, home: str | PurePath | None = None) -> FileKind:
    """Classify a path into one of the FileKind values.

    Rules, first match wins:
        CLAUDE.md inside <home>/.claude      -> global-config
        CLAUDE.md                            -> project-config
        CLAUDE.local.md                      -> local-override
        settings.json under .claude          -> settings
        settings.local.json under .claude    -> settings-local
        *.md under a commands directory      -> command-definition
        anything else                        -> unknown

    Args:
        path: File path (absolute or relative).
        home: Home directory used for the global rule. Defaults to Path.home().
    """
    p = PurePath(path)
    name = p.name
    parent = p.parent
    dirs = parent.parts

    if name == PRIMARY_FILENAME and parent == _home(home) / CONFIG_DIR_NAME:
        return FileKind.GLOBAL_CONFIG
    if name == PRIMARY_FILENAME:
        return FileKind.PROJECT_CONFIG
    if name == LOCAL_OVERRIDE_FILENAME:
        return FileKind.LOCAL_OVERRIDE
    if CONFIG_DIR_NAME in dirs:
        if name == SETTINGS_FILENAME:
            return FileKind.SETTINGS
        if name == SETTINGS_LOCAL_FILENAME:
            return FileKind.SETTINGS_LOCAL
    if name.endswith(".md") and COMMANDS_DIR_NAME in dirs:
        return FileKind.COMMAND_DEFINITION
    return FileKind.UNKNOWN
