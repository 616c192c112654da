"""Exception types shared across ccexp."""

from __future__ import annotations


class CcexpError(RuntimeError):
    """Base error for ccexp failures."""


class ScanError(CcexpError):
    """A scan root could not be read as a whole."""


class ActionError(CcexpError):
    """A menu action failed (clipboard, open, file copy)."""


class ClipboardError(ActionError):
    """No clipboard backend accepted the text."""


class OpenError(ActionError):
    """The platform opener could not be launched."""
