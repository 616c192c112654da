"""Cursor state machine over the (filtered) group/record hierarchy.

Everything here is a pure function of a NavigationState and a list of groups.
`transition()` is the single entry point used by the browser session; the
smaller moves are exposed for testing and reuse.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from .grouping import filter_groups
from .types import EventType, FileRecord, Group, InputEvent


@dataclass(frozen=True)
class NavigationState:
    """Cursor position plus the live search query.

    When is_group_cursor is True the cursor sits on the header of
    groups[group_index] and file_index is ignored.
    """

    group_index: int = 0
    file_index: int = 0
    is_group_cursor: bool = False
    query: str = ""


class NavEffect(str, Enum):
    """Side effect the session must apply after a transition."""

    NONE = "none"
    TOGGLE_GROUP = "toggle-group"
    OPEN_MENU = "open-menu"
    EXIT = "exit"
    QUERY_CHANGED = "query-changed"


@dataclass(frozen=True)
class NavTransition:
    state: NavigationState
    effect: NavEffect = NavEffect.NONE


def visible_files(group: Group) -> tuple[FileRecord, ...]:
    """Records shown under a group header (none when collapsed)."""
    return group.records if group.expanded else ()


def clamp(state: NavigationState, groups: list[Group]) -> NavigationState:
    """Pull the cursor back into range of groups.

    A file cursor on a collapsed or empty group becomes a group cursor.
    With no groups the cursor is parked at the origin.
    """
    if not groups:
        return replace(state, group_index=0, file_index=0, is_group_cursor=False)

    group_index = min(max(state.group_index, 0), len(groups) - 1)
    files = visible_files(groups[group_index])
    if state.is_group_cursor or not files:
        return replace(state, group_index=group_index, file_index=0, is_group_cursor=True)

    file_index = min(max(state.file_index, 0), len(files) - 1)
    return replace(
        state, group_index=group_index, file_index=file_index, is_group_cursor=False
    )


def move_down(state: NavigationState, groups: list[Group]) -> NavigationState:
    if not groups:
        return state

    gi = state.group_index
    files = visible_files(groups[gi])
    has_next_group = gi + 1 < len(groups)

    if state.is_group_cursor:
        if files:
            return replace(state, file_index=0, is_group_cursor=False)
    elif state.file_index + 1 < len(files):
        return replace(state, file_index=state.file_index + 1)

    if has_next_group:
        return replace(state, group_index=gi + 1, file_index=0, is_group_cursor=True)
    return state


def move_up(state: NavigationState, groups: list[Group]) -> NavigationState:
    if not groups:
        return state

    gi = state.group_index
    if not state.is_group_cursor:
        if state.file_index > 0:
            return replace(state, file_index=state.file_index - 1)
        return replace(state, file_index=0, is_group_cursor=True)

    if gi == 0:
        return state

    previous = visible_files(groups[gi - 1])
    if previous:
        return replace(
            state, group_index=gi - 1, file_index=len(previous) - 1, is_group_cursor=False
        )
    return replace(state, group_index=gi - 1, file_index=0, is_group_cursor=True)


def set_query(state: NavigationState, query: str, groups: list[Group]) -> NavigationState:
    """Change the query and reset the cursor to the first file.

    Args:
        state: Current state.
        query: New query text.
        groups: Unfiltered groups; the reset is clamped against their
            filtered view for the new query.
    """
    reset = NavigationState(group_index=0, file_index=0, is_group_cursor=False, query=query)
    return clamp(reset, filter_groups(groups, query))


def selected_record(state: NavigationState, groups: list[Group]) -> FileRecord | None:
    """Record under a file cursor, or None for group cursors and empty views."""
    if state.is_group_cursor or not 0 <= state.group_index < len(groups):
        return None
    files = visible_files(groups[state.group_index])
    if not 0 <= state.file_index < len(files):
        return None
    return files[state.file_index]


def transition(
    state: NavigationState, event: InputEvent, groups: list[Group]
) -> NavTransition:
    """Apply one input event.

    Args:
        state: Current navigation state.
        event: Classified keystroke.
        groups: Unfiltered groups with their expansion flags.

    Returns:
        The next state and the effect the caller must apply. TOGGLE_GROUP
        refers to the group under the (unchanged) cursor; OPEN_MENU to the
        record under it.
    """
    visible = filter_groups(groups, state.query)
    state = clamp(state, visible)
    kind = event.type

    if kind == EventType.UP:
        return NavTransition(move_up(state, visible))
    if kind == EventType.DOWN:
        return NavTransition(move_down(state, visible))

    if kind == EventType.SELECT:
        if not visible:
            return NavTransition(state)
        if state.is_group_cursor:
            return NavTransition(state, NavEffect.TOGGLE_GROUP)
        return NavTransition(state, NavEffect.OPEN_MENU)

    if kind == EventType.ESCAPE:
        if state.query:
            return NavTransition(set_query(state, "", groups), NavEffect.QUERY_CHANGED)
        return NavTransition(state, NavEffect.EXIT)

    if kind == EventType.QUIT:
        return NavTransition(state, NavEffect.EXIT)

    if kind in (EventType.BACKSPACE, EventType.CLEAR):
        if not state.query:
            return NavTransition(state)
        query = state.query[:-1] if kind == EventType.BACKSPACE else ""
        return NavTransition(set_query(state, query, groups), NavEffect.QUERY_CHANGED)

    if kind == EventType.CHAR and event.char:
        return NavTransition(
            set_query(state, state.query + event.char, groups), NavEffect.QUERY_CHANGED
        )

    return NavTransition(state)
