"""Keyboard input helpers for the browser.

Small predicates over raw readchar keys, so the input multiplexer reads as a
list of rules instead of a wall of string comparisons. Letters are never
navigation keys here: every printable character belongs to the search query.
"""

from __future__ import annotations

import readchar

CTRL_H = "\x08"
CTRL_U = "\x15"
CTRL_C = "\x03"


def is_enter(key: str) -> bool:
    """Check if key is Enter/Return."""
    return key in (readchar.key.ENTER, "\r", "\n")


def is_escape(key: str) -> bool:
    """Check if key is Escape (handles terminal variations)."""
    return key in (readchar.key.ESC, "\x1b", "\x1b\x1b")


def is_up(key: str) -> bool:
    return key == readchar.key.UP


def is_down(key: str) -> bool:
    return key == readchar.key.DOWN


def is_space(key: str) -> bool:
    return key == " "


def is_select(key: str) -> bool:
    """Check if key is a selection key (Enter or Space)."""
    return is_enter(key) or is_space(key)


def is_backspace(key: str) -> bool:
    """Backspace, forward Delete or Ctrl+H: all remove the last query character."""
    return key in (readchar.key.BACKSPACE, readchar.key.DELETE, "\x7f", "\b", CTRL_H)


def is_clear(key: str) -> bool:
    return key == CTRL_U


def is_interrupt(key: str) -> bool:
    return key == CTRL_C


def is_printable(key: str) -> bool:
    """A single visible character (space excluded, it selects)."""
    return len(key) == 1 and key.isprintable() and not key.isspace()
