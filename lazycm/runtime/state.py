"""Mutable UI state shared by dispatch and rendering.

Only the dispatch step writes to it; renderers read it.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field

from ..input.bindings import ActionBinding
from ..input.edit_field import EditField
from ..worklist.frames import FrameStack
from ..worklist.profile import Profile
from ..worklist.string_list import StringList
from ..worklist.viewport import Viewport


class Mode(enum.Enum):
    NAVIGATING = "navigating"
    EDITING_BOTTOM_FIELD = "editing_bottom_field"
    SELECTING_KEY_FOR_REBINDING = "selecting_key_for_rebinding"


class BottomPurpose(enum.Enum):
    CMDLINE = "cmdline"
    SEARCH = "search"


class Focus(enum.Enum):
    OUTPUT = 0
    REGEXES = 1
    CMDS = 2

    def next(self) -> Focus:
        members = list(Focus)
        return members[(members.index(self) + 1) % len(members)]

    def prev(self) -> Focus:
        members = list(Focus)
        return members[(members.index(self) - 1) % len(members)]


@dataclass
class KeyMapSettingsState:
    """Cursor over the action list plus the "press a key" sub-state."""

    viewport: Viewport = field(default_factory=Viewport)
    waiting_for_chord: bool = False


@dataclass
class AppState:
    profile: Profile
    bindings: ActionBinding
    frames: FrameStack
    mode: Mode = Mode.NAVIGATING
    bottom_purpose: BottomPurpose | None = None
    bottom_field: EditField = field(default_factory=EditField)
    focus: Focus = Focus.OUTPUT
    profile_pane: bool = False
    settings: KeyMapSettingsState = field(default_factory=KeyMapSettingsState)
    search_pattern: str = ""
    search_regex: re.Pattern[str] | None = None
    root_cmdline: str | None = None
    status_message: str = ""
    status_is_error: bool = False
    quit: bool = False
    dirty: bool = True
    visible_rows: int = 1

    def set_status(self, message: str, *, error: bool = False) -> None:
        self.status_message = message
        self.status_is_error = error
        self.dirty = True

    def clear_status(self) -> None:
        self.status_message = ""
        self.status_is_error = False

    def focused_list(self) -> StringList | None:
        """Return the profile list holding focus, or ``None`` for the output pane."""
        if not self.profile_pane:
            return None
        if self.focus is Focus.REGEXES:
            return self.profile.regex_list
        if self.focus is Focus.CMDS:
            return self.profile.cmd_list
        return None

    def editing_list(self) -> StringList | None:
        for string_list in (self.profile.regex_list, self.profile.cmd_list):
            if string_list.editing:
                return string_list
        return None
