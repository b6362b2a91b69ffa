"""Route one key chord to the action it stands for in the current mode.

Global actions are resolved before any mode-specific handling. While a raw
text edit is in progress (bottom field, list item, rebinding capture) only
the Accept/Cancel chords interrupt typing; printable characters and editing
keys go to the edit field and anything left may still trigger a global
action.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from ..actions import EDIT_ACTIONS, GLOBAL_ACTIONS, Action
from ..capture import RegexError, compile_regex, render_cmdline
from ..input.action_registry import ActionHandlerBinding, ActionRegistry
from ..input.bindings import KeyChord
from ..input.edit_field import EditField
from ..input.keycodes import EDITING_KEYS, is_printable_code
from ..worklist.viewport import Viewport
from .settings import capture_chord, open_settings, settings_registry
from .state import AppState, BottomPurpose, Mode


@dataclass(frozen=True)
class DispatchOps:
    """Session operations the dispatcher triggers; the event loop implements them."""

    run_foreground: Callable[[str], None]
    run_into_itself: Callable[[str], None]
    start_root: Callable[[str], None]
    rerun: Callable[[], None]
    back: Callable[[], None]


@dataclass(frozen=True)
class Preview:
    """Command line derived from the selected output line, or why there is none."""

    cmdline: str | None = None
    error: str | None = None


def compute_preview(state: AppState) -> Preview:
    """Render the current template against the selected line of the top frame."""
    pattern = state.profile.current_pattern()
    template = state.profile.current_template()
    line = state.frames.viewport.current_line()
    if pattern is None:
        return Preview()
    try:
        regex = compile_regex(pattern)
    except RegexError as exc:
        return Preview(error=str(exc))
    if template is None or line is None:
        return Preview()
    return Preview(cmdline=render_cmdline(line, template, regex))


def _cursor_bindings(viewport: Viewport, state: AppState) -> tuple[ActionHandlerBinding, ...]:
    return (
        ActionHandlerBinding((Action.UP,), viewport.cursor_up),
        ActionHandlerBinding((Action.DOWN,), viewport.cursor_down),
        ActionHandlerBinding((Action.LEFT,), viewport.cursor_left),
        ActionHandlerBinding((Action.RIGHT,), viewport.cursor_right),
        ActionHandlerBinding((Action.HOME,), viewport.cursor_home),
        ActionHandlerBinding((Action.JUMP_TO_START,), viewport.jump_to_start),
        ActionHandlerBinding((Action.JUMP_TO_END,), viewport.jump_to_end),
        ActionHandlerBinding((Action.PAGE_UP,), lambda: viewport.page_up(state.visible_rows)),
        ActionHandlerBinding((Action.PAGE_DOWN,), lambda: viewport.page_down(state.visible_rows)),
    )


def open_bottom_field(state: AppState, purpose: BottomPurpose, value: str) -> None:
    state.bottom_field.reset(value)
    state.bottom_purpose = purpose
    state.mode = Mode.EDITING_BOTTOM_FIELD


def close_bottom_field(state: AppState) -> None:
    state.bottom_purpose = None
    state.mode = Mode.NAVIGATING


def global_registry(state: AppState) -> ActionRegistry:
    def toggle_profile_pane() -> None:
        state.profile_pane = not state.profile_pane

    def quit_app() -> None:
        state.quit = True

    def focus_forward() -> None:
        state.focus = state.focus.next()

    def focus_backward() -> None:
        state.focus = state.focus.prev()

    def open_key_map_settings() -> None:
        if state.mode is Mode.EDITING_BOTTOM_FIELD:
            close_bottom_field(state)
        open_settings(state)

    return ActionRegistry().register_bindings(
        ActionHandlerBinding((Action.TOGGLE_PROFILE_PANEL,), toggle_profile_pane),
        ActionHandlerBinding((Action.QUIT,), quit_app),
        ActionHandlerBinding((Action.FOCUS_FORWARD,), focus_forward),
        ActionHandlerBinding((Action.FOCUS_BACKWARD,), focus_backward),
        ActionHandlerBinding((Action.OPEN_KEY_MAP_SETTINGS,), open_key_map_settings),
    )


def _dispatch_global(chord: KeyChord, state: AppState) -> bool:
    return global_registry(state).dispatch(state.bindings.resolve(chord, GLOBAL_ACTIONS))


def _handle_raw_edit(
    chord: KeyChord,
    state: AppState,
    field: EditField,
    accept: Callable[[], None],
    cancel: Callable[[], None],
) -> None:
    action = state.bindings.resolve(chord, EDIT_ACTIONS)
    if action is Action.ACCEPT:
        accept()
        return
    if action is Action.CANCEL:
        cancel()
        return
    if not chord.alt and (is_printable_code(chord.code) or chord.code in EDITING_KEYS):
        field.handle_chord(chord)
        return
    _dispatch_global(chord, state)


def _render_selected(state: AppState) -> str | None:
    """Build the command line for the selected line, reporting why when impossible."""
    preview = compute_preview(state)
    if preview.error is not None:
        state.set_status(preview.error, error=True)
        return None
    if preview.cmdline is None:
        state.set_status("No match")
        return None
    return preview.cmdline


def _current_regex_for_jump(state: AppState):
    try:
        regex = state.profile.current_regex()
    except RegexError as exc:
        state.set_status(str(exc), error=True)
        return None
    if regex is None:
        state.set_status("No regex selected")
    return regex


def output_registry(state: AppState, ops: DispatchOps) -> ActionRegistry:
    viewport = state.frames.viewport

    def run() -> None:
        cmdline = _render_selected(state)
        if cmdline is not None:
            ops.run_foreground(cmdline)

    def run_into_itself() -> None:
        cmdline = _render_selected(state)
        if cmdline is not None:
            ops.run_into_itself(cmdline)

    def next_match() -> None:
        regex = _current_regex_for_jump(state)
        if regex is not None:
            viewport.jump_to_next_match(regex)

    def prev_match() -> None:
        regex = _current_regex_for_jump(state)
        if regex is not None:
            viewport.jump_to_prev_match(regex)

    def next_search_match() -> None:
        if state.search_regex is not None:
            viewport.jump_to_next_match(state.search_regex)

    def prev_search_match() -> None:
        if state.search_regex is not None:
            viewport.jump_to_prev_match(state.search_regex)

    return ActionRegistry().register_bindings(
        *_cursor_bindings(viewport, state),
        ActionHandlerBinding((Action.RUN,), run),
        ActionHandlerBinding((Action.RUN_INTO_ITSELF,), run_into_itself),
        ActionHandlerBinding((Action.RERUN,), ops.rerun),
        ActionHandlerBinding((Action.BACK,), ops.back),
        ActionHandlerBinding((Action.NEXT_MATCH,), next_match),
        ActionHandlerBinding((Action.PREV_MATCH,), prev_match),
        ActionHandlerBinding(
            (Action.EDIT_CMDLINE,),
            lambda: open_bottom_field(state, BottomPurpose.CMDLINE, state.root_cmdline or ""),
        ),
        ActionHandlerBinding(
            (Action.START_SEARCH,),
            lambda: open_bottom_field(state, BottomPurpose.SEARCH, state.search_pattern),
        ),
        ActionHandlerBinding((Action.NEXT_SEARCH_MATCH,), next_search_match),
        ActionHandlerBinding((Action.PREV_SEARCH_MATCH,), prev_search_match),
    )


def list_registry(state: AppState) -> ActionRegistry:
    string_list = state.focused_list()
    assert string_list is not None
    return ActionRegistry().register_bindings(
        *_cursor_bindings(string_list.viewport, state),
        ActionHandlerBinding((Action.INSERT_AFTER_ITEM,), string_list.insert_after),
        ActionHandlerBinding((Action.INSERT_BEFORE_ITEM,), string_list.insert_before),
        ActionHandlerBinding((Action.DELETE,), string_list.delete_current),
        ActionHandlerBinding((Action.EDIT_ITEM,), string_list.start_editing),
        ActionHandlerBinding((Action.DUP_AFTER_ITEM,), string_list.duplicate_after),
        ActionHandlerBinding((Action.DUP_BEFORE_ITEM,), string_list.duplicate_before),
        ActionHandlerBinding(
            (Action.EDIT_CMDLINE,),
            lambda: open_bottom_field(state, BottomPurpose.CMDLINE, state.root_cmdline or ""),
        ),
    )


def _accept_bottom_field(state: AppState, ops: DispatchOps) -> None:
    purpose = state.bottom_purpose
    value = state.bottom_field.buffer
    close_bottom_field(state)
    if purpose is BottomPurpose.CMDLINE:
        cmdline = value.strip()
        if cmdline:
            ops.start_root(cmdline)
        return
    if purpose is BottomPurpose.SEARCH:
        state.search_pattern = value
        if not value:
            state.search_regex = None
            return
        try:
            state.search_regex = compile_regex(value)
        except RegexError as exc:
            state.search_regex = None
            state.set_status(str(exc), error=True)
            return
        viewport = state.frames.viewport
        if not viewport.current_line_matches(state.search_regex):
            viewport.jump_to_next_match(state.search_regex)


def _handle_navigating(chord: KeyChord, state: AppState, ops: DispatchOps) -> None:
    editing = state.editing_list()
    if editing is not None:
        _handle_raw_edit(chord, state, editing.edit_field, editing.accept_editing, editing.cancel_editing)
        return
    if _dispatch_global(chord, state):
        return
    registry = output_registry(state, ops) if state.focused_list() is None else list_registry(state)
    registry.dispatch(state.bindings.resolve(chord, registry.actions))


def _handle_settings(chord: KeyChord, state: AppState) -> None:
    if state.settings.waiting_for_chord:
        capture_chord(chord, state)
        return
    if _dispatch_global(chord, state):
        return
    registry = settings_registry(state)
    registry.dispatch(state.bindings.resolve(chord, registry.actions))


def dispatch_chord(chord: KeyChord, state: AppState, ops: DispatchOps) -> None:
    """Apply one chord to ``state`` according to the active mode."""
    state.clear_status()
    if state.mode is Mode.EDITING_BOTTOM_FIELD:
        _handle_raw_edit(
            chord,
            state,
            state.bottom_field,
            lambda: _accept_bottom_field(state, ops),
            lambda: close_bottom_field(state),
        )
    elif state.mode is Mode.SELECTING_KEY_FOR_REBINDING:
        _handle_settings(chord, state)
    else:
        _handle_navigating(chord, state, ops)
    state.dirty = True
