"""Key-map settings panel.

Lists every action with its chords. Accept waits for the next chord and
binds it to the selected action, Delete clears the action's chords, Cancel
closes the panel.
"""

from __future__ import annotations

from ..actions import Action
from ..input.action_registry import ActionHandlerBinding, ActionRegistry
from ..input.bindings import ActionBinding, KeyChord
from ..worklist.viewport import Viewport
from .state import AppState, Mode

ACTION_COLUMN_WIDTH = 24


def settings_rows(bindings: ActionBinding) -> list[str]:
    rows: list[str] = []
    for action, chords in bindings.items():
        labels = ", ".join(chord.label() for chord in chords) or "<none>"
        rows.append(f"{action.value:<{ACTION_COLUMN_WIDTH}} {labels}")
    return rows


def open_settings(state: AppState) -> None:
    state.settings.viewport = Viewport(lines=[action.value for action in Action])
    state.settings.waiting_for_chord = False
    state.mode = Mode.SELECTING_KEY_FOR_REBINDING


def selected_action(state: AppState) -> Action:
    return list(Action)[state.settings.viewport.cursor_row]


def capture_chord(chord: KeyChord, state: AppState) -> None:
    """Finish the "press a key" sub-state; Cancel aborts without binding."""
    state.settings.waiting_for_chord = False
    if state.bindings.resolve(chord, (Action.CANCEL,)) is Action.CANCEL:
        state.set_status("Rebinding cancelled")
        return
    action = selected_action(state)
    state.bindings.bind(chord, action)
    state.set_status(f"Bound {chord.label()} to {action.value}")


def settings_registry(state: AppState) -> ActionRegistry:
    viewport = state.settings.viewport

    def close() -> None:
        state.settings.waiting_for_chord = False
        state.mode = Mode.NAVIGATING

    def start_waiting() -> None:
        state.settings.waiting_for_chord = True

    def clear_chords() -> None:
        action = selected_action(state)
        state.bindings.replace_chords(action, ())
        state.set_status(f"Cleared key bindings of {action.value}")

    return ActionRegistry().register_bindings(
        ActionHandlerBinding((Action.UP,), viewport.cursor_up),
        ActionHandlerBinding((Action.DOWN,), viewport.cursor_down),
        ActionHandlerBinding((Action.JUMP_TO_START,), viewport.jump_to_start),
        ActionHandlerBinding((Action.JUMP_TO_END,), viewport.jump_to_end),
        ActionHandlerBinding((Action.PAGE_UP,), lambda: viewport.page_up(state.visible_rows)),
        ActionHandlerBinding((Action.PAGE_DOWN,), lambda: viewport.page_down(state.visible_rows)),
        ActionHandlerBinding((Action.ACCEPT,), start_waiting),
        ActionHandlerBinding((Action.DELETE,), clear_chords),
        ActionHandlerBinding((Action.CANCEL,), close),
    )
