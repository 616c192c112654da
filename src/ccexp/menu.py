"""Action menu: the static action table and the menu state machine.

States:
    closed -> open (idle) -> executing -> open (idle, with message)
                                       -> open (confirming) -> executing ...

The state machine never runs an action itself. handle_menu_event() hands the
caller a zero-argument job; the caller marks the menu as executing, runs the
job through run_job() and feeds the outcome back through settle(). Actions run
to completion; there is no cancellation.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from functools import partial
from pathlib import Path
from typing import Callable, Union

from . import system
from .errors import ActionError
from .types import EventType, FileKind, FileRecord, InputEvent

logger = logging.getLogger(__name__)

DEFAULT_SUCCESS_SECONDS = 2.0
DEFAULT_ERROR_SECONDS = 3.0


@dataclass(frozen=True)
class PendingConfirmation:
    """A yes/no question an action asks before doing something destructive."""

    prompt: str
    on_yes: Callable[[], str]
    on_no: str = "Cancelled"


ActionResult = Union[str, PendingConfirmation]
Job = Callable[[], ActionResult]


@dataclass(frozen=True)
class MenuAction:
    key: str
    label: str
    handler: Callable[[FileRecord], ActionResult]
    kinds: frozenset[FileKind] | None = None  # None: offered for every kind

    def applies_to(self, record: FileRecord) -> bool:
        return self.kinds is None or record.kind in self.kinds


@dataclass(frozen=True)
class ActionOutcome:
    message: str
    is_error: bool = False
    confirmation: PendingConfirmation | None = None


@dataclass(frozen=True)
class MessageDurations:
    success: float = DEFAULT_SUCCESS_SECONDS
    error: float = DEFAULT_ERROR_SECONDS


@dataclass(frozen=True)
class MenuState:
    is_open: bool = False
    record: FileRecord | None = None
    actions: tuple[MenuAction, ...] = ()
    selected_index: int = 0
    is_executing: bool = False
    message: str | None = None
    message_is_error: bool = False
    message_expires_at: float = 0.0
    pending_confirmation: PendingConfirmation | None = None

    def visible_message(self, now: float) -> str | None:
        """The status message, or None once it has expired."""
        if self.message and now < self.message_expires_at:
            return self.message
        return None


@dataclass(frozen=True)
class MenuTransition:
    state: MenuState
    job: Job | None = None


# ── action handlers ───────────────────────────────────────────────────────


def copy_content(record: FileRecord) -> str:
    system.write_to_clipboard(system.read_file_content(record.path))
    return f"Copied content of {record.name}"


def copy_absolute_path(record: FileRecord) -> str:
    system.write_to_clipboard(str(record.path))
    return f"Copied path: {record.path}"


def copy_relative_path(record: FileRecord) -> str:
    relative = os.path.relpath(record.path, Path.cwd())
    system.write_to_clipboard(relative)
    return f"Copied path: {relative}"


def copy_directory_path(record: FileRecord) -> str:
    directory = str(record.path.parent)
    system.write_to_clipboard(directory)
    return f"Copied directory: {directory}"


def copy_to_current_directory(record: FileRecord) -> ActionResult:
    destination = Path.cwd() / record.name
    if destination.resolve() == record.path.resolve():
        raise ActionError(f"{record.name} is already in the current directory")

    def do_copy() -> str:
        system.copy_file(record.path, destination)
        return f"Copied {record.name} to {destination.parent}"

    if destination.exists():
        return PendingConfirmation(
            prompt=f"{destination.name} exists in the current directory. Overwrite? (y/n)",
            on_yes=do_copy,
            on_no="Copy cancelled",
        )
    return do_copy()


def open_file(record: FileRecord) -> str:
    system.open_with_default_handler(record.path)
    return f"Opened {record.name}"


def copy_slash_command(record: FileRecord) -> str:
    if record.command is None:
        raise ActionError(f"{record.name} is not a slash command")
    system.write_to_clipboard(record.command.slash_name)
    return f"Copied {record.command.slash_name}"


ACTIONS: tuple[MenuAction, ...] = (
    MenuAction("c", "Copy Content", copy_content),
    MenuAction("p", "Copy Path (Absolute)", copy_absolute_path),
    MenuAction("r", "Copy Path (Relative)", copy_relative_path),
    MenuAction("d", "Copy Directory Path", copy_directory_path),
    MenuAction("f", "Copy File to Current Directory", copy_to_current_directory),
    MenuAction("o", "Open File", open_file),
    MenuAction(
        "n",
        "Copy Slash Command",
        copy_slash_command,
        kinds=frozenset({FileKind.COMMAND_DEFINITION}),
    ),
)


def actions_for(record: FileRecord) -> tuple[MenuAction, ...]:
    return tuple(action for action in ACTIONS if action.applies_to(record))


# ── state machine ─────────────────────────────────────────────────────────


def open_menu(state: MenuState, record: FileRecord) -> MenuState:
    """Open the menu for a record. Any previous message is dropped."""
    return MenuState(is_open=True, record=record, actions=actions_for(record))


def close_menu(state: MenuState) -> MenuState:
    """Close the menu, keeping the last message so it can finish expiring."""
    return MenuState(
        message=state.message,
        message_is_error=state.message_is_error,
        message_expires_at=state.message_expires_at,
    )


def handle_menu_event(state: MenuState, event: InputEvent) -> MenuTransition:
    """Apply one input event to an open menu.

    Returns:
        The next state and, when an action was triggered, the job to run.
    """
    if not state.is_open or state.is_executing:
        return MenuTransition(state)

    kind = event.type
    pending = state.pending_confirmation
    if pending is not None:
        answer = event.char.lower() if kind == EventType.CHAR else ""
        if kind == EventType.SELECT or answer == "y":
            return MenuTransition(replace(state, pending_confirmation=None), pending.on_yes)
        if kind == EventType.ESCAPE or answer == "n":
            on_no = pending.on_no
            return MenuTransition(replace(state, pending_confirmation=None), lambda: on_no)
        return MenuTransition(state)

    if kind == EventType.ESCAPE:
        return MenuTransition(close_menu(state))
    if kind == EventType.UP:
        return MenuTransition(replace(state, selected_index=max(state.selected_index - 1, 0)))
    if kind == EventType.DOWN:
        last = max(len(state.actions) - 1, 0)
        return MenuTransition(replace(state, selected_index=min(state.selected_index + 1, last)))

    if kind == EventType.SELECT and state.actions:
        action = state.actions[state.selected_index]
        return MenuTransition(state, partial(action.handler, state.record))

    if kind == EventType.CHAR:
        for index, action in enumerate(state.actions):
            if action.key == event.char.lower():
                return MenuTransition(
                    replace(state, selected_index=index),
                    partial(action.handler, state.record),
                )

    return MenuTransition(state)


def begin_execution(state: MenuState) -> MenuState:
    return replace(state, is_executing=True, message=None, message_is_error=False)


def run_job(job: Job) -> ActionOutcome:
    """Run an action job, turning failures into an error outcome."""
    try:
        result = job()
    except (ActionError, OSError) as e:
        logger.debug("Action failed: %s", e)
        return ActionOutcome(str(e), is_error=True)

    if isinstance(result, PendingConfirmation):
        return ActionOutcome(result.prompt, confirmation=result)
    return ActionOutcome(result)


def settle(
    state: MenuState,
    outcome: ActionOutcome,
    now: float,
    durations: MessageDurations = MessageDurations(),
) -> MenuState:
    """Leave the executing state with an action's outcome."""
    if outcome.confirmation is not None:
        return replace(
            state,
            is_executing=False,
            pending_confirmation=outcome.confirmation,
            message=None,
            message_is_error=False,
        )

    ttl = durations.error if outcome.is_error else durations.success
    return replace(
        state,
        is_executing=False,
        pending_confirmation=None,
        message=outcome.message,
        message_is_error=outcome.is_error,
        message_expires_at=now + ttl,
    )
