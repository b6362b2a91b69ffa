"""Logical actions understood by the dispatcher.

Values are the names written to the profile, so members are only ever
appended. Definition order doubles as the resolution order when one chord
is bound to several actions.
"""

from __future__ import annotations

import enum


class Action(enum.Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    HOME = "home"
    INSERT_AFTER_ITEM = "insert_after_item"
    INSERT_BEFORE_ITEM = "insert_before_item"
    DELETE = "delete"
    BACK_DELETE = "back_delete"
    EDIT_ITEM = "edit_item"
    DUP_AFTER_ITEM = "dup_after_item"
    DUP_BEFORE_ITEM = "dup_before_item"
    TOGGLE_PROFILE_PANEL = "toggle_profile_panel"
    QUIT = "quit"
    FOCUS_FORWARD = "focus_forward"
    FOCUS_BACKWARD = "focus_backward"
    ACCEPT = "accept"
    CANCEL = "cancel"
    RUN = "run"
    RUN_INTO_ITSELF = "run_into_itself"
    RERUN = "rerun"
    BACK = "back"
    NEXT_MATCH = "next_match"
    PREV_MATCH = "prev_match"
    EDIT_CMDLINE = "edit_cmdline"
    OPEN_KEY_MAP_SETTINGS = "open_key_map_settings"
    START_SEARCH = "start_search"
    JUMP_TO_START = "jump_to_start"
    JUMP_TO_END = "jump_to_end"
    NEXT_SEARCH_MATCH = "next_search_match"
    PREV_SEARCH_MATCH = "prev_search_match"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"

    @classmethod
    def from_name(cls, name: str) -> Action:
        """Return the action persisted as ``name``."""
        try:
            return cls(name.strip())
        except ValueError:
            raise ValueError(f"Unknown action `{name}`") from None


ACTION_ORDER: dict[Action, int] = {action: index for index, action in enumerate(Action)}

GLOBAL_ACTIONS: tuple[Action, ...] = (
    Action.TOGGLE_PROFILE_PANEL,
    Action.QUIT,
    Action.FOCUS_FORWARD,
    Action.FOCUS_BACKWARD,
    Action.OPEN_KEY_MAP_SETTINGS,
)

EDIT_ACTIONS: tuple[Action, ...] = (Action.ACCEPT, Action.CANCEL)
