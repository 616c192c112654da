"""Input multiplexer: raw keystroke -> InputEvent.

Classification is by key identity alone. There is no search mode: arrows,
Enter, Space, Escape and the editing shortcuts are commands, every other
printable character is query text.
"""

from __future__ import annotations

from ..types import EventType, InputEvent
from . import keys

# Evaluated in order; first matching predicate wins.
KEY_RULES = (
    (keys.is_interrupt, EventType.QUIT),
    (keys.is_up, EventType.UP),
    (keys.is_down, EventType.DOWN),
    (keys.is_select, EventType.SELECT),
    (keys.is_backspace, EventType.BACKSPACE),
    (keys.is_clear, EventType.CLEAR),
    (keys.is_escape, EventType.ESCAPE),
)


def classify_key(key: str) -> InputEvent:
    for predicate, event_type in KEY_RULES:
        if predicate(key):
            return InputEvent(event_type)
    if keys.is_printable(key):
        return InputEvent(EventType.CHAR, key)
    return InputEvent(EventType.IGNORED)
