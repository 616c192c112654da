"""Browser session: the shared state every keystroke mutates.

One BrowserSession owns the record set, the groups (with expansion flags),
the NavigationState and the MenuState. Events are processed one at a time
and run to completion; while the menu is open every event goes to it.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterable

from ..grouping import build_groups, expansion_state, filter_groups, toggle_group
from ..menu import (
    MenuState,
    MessageDurations,
    begin_execution,
    handle_menu_event,
    open_menu,
    run_job,
    settle,
)
from ..navigation import (
    NavEffect,
    NavigationState,
    clamp,
    selected_record,
    transition,
)
from ..types import EventType, FileRecord, Group, InputEvent
from .input import classify_key

logger = logging.getLogger(__name__)


class BrowserSession:
    """State of one interactive browsing session.

    Args:
        records: Records from the initial scan.
        durations: How long action messages stay visible.
        clock: Monotonic clock used for message expiry.
        on_change: Called when the session wants a redraw mid-event
            (right before an action starts executing).
    """

    def __init__(
        self,
        records: Iterable[FileRecord],
        *,
        durations: MessageDurations = MessageDurations(),
        clock: Callable[[], float] = time.monotonic,
        on_change: Callable[[], None] | None = None,
    ):
        self.records: tuple[FileRecord, ...] = tuple(records)
        self.groups: list[Group] = build_groups(self.records)
        self.nav = NavigationState()
        self.menu = MenuState()
        self.durations = durations
        self.clock = clock
        self.on_change = on_change
        self.should_exit = False
        self.selected_file: FileRecord | None = None
        self.nav = clamp(self.nav, self.visible_groups)
        self._publish()

    @property
    def visible_groups(self) -> list[Group]:
        """Groups filtered by the current query."""
        return filter_groups(self.groups, self.nav.query)

    def replace_records(self, records: Iterable[FileRecord]) -> None:
        """Swap in a new scan, keeping expansion flags and clamping the cursor."""
        self.records = tuple(records)
        self.groups = build_groups(self.records, expansion_state(self.groups))
        self.nav = clamp(self.nav, self.visible_groups)
        self._publish()

    def handle_key(self, key: str) -> None:
        self.handle_event(classify_key(key))

    def handle_event(self, event: InputEvent) -> None:
        if event.type == EventType.QUIT:
            self.should_exit = True
            return

        if self.menu.is_open:
            self._handle_menu_event(event)
            return

        result = transition(self.nav, event, self.groups)
        self.nav = result.state

        if result.effect == NavEffect.TOGGLE_GROUP:
            kind = self.visible_groups[self.nav.group_index].kind
            self.groups = toggle_group(self.groups, kind)
            self.nav = clamp(self.nav, self.visible_groups)
        elif result.effect == NavEffect.OPEN_MENU:
            record = selected_record(self.nav, self.visible_groups)
            if record is not None:
                self.menu = open_menu(self.menu, record)
        elif result.effect == NavEffect.EXIT:
            self.should_exit = True

        self._publish()

    def _handle_menu_event(self, event: InputEvent) -> None:
        result = handle_menu_event(self.menu, event)
        self.menu = result.state
        if result.job is None:
            return

        self.menu = begin_execution(self.menu)
        if self.on_change is not None:
            self.on_change()
        outcome = run_job(result.job)
        if outcome.is_error:
            logger.debug("Action error: %s", outcome.message)
        self.menu = settle(self.menu, outcome, self.clock(), self.durations)

    def _publish(self) -> None:
        self.selected_file = selected_record(self.nav, self.visible_groups)
