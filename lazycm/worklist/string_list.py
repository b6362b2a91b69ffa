"""Editable list of strings backing the regex and command panes."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..input.edit_field import EditField
from .viewport import Viewport


@dataclass
class StringList:
    viewport: Viewport = field(default_factory=Viewport)
    edit_field: EditField = field(default_factory=EditField)
    editing: bool = False
    _editing_new: bool = False
    _prev_cursor_row: int = 0

    @classmethod
    def of(cls, items: list[str], current: int = 0) -> StringList:
        result = cls(viewport=Viewport(lines=list(items), cursor_row=current))
        result.viewport.clamp_cursor()
        return result

    @property
    def items(self) -> list[str]:
        return self.viewport.lines

    @property
    def current_index(self) -> int:
        return self.viewport.cursor_row

    def current_item(self) -> str | None:
        """Return the live value: the edit buffer while editing, else the selected item."""
        if self.editing:
            return self.edit_field.buffer
        return self.viewport.current_line()

    def duplicate_after(self) -> None:
        if not self.editing:
            self.viewport.duplicate_after()

    def duplicate_before(self) -> None:
        if not self.editing:
            self.viewport.duplicate_before()

    def delete_current(self) -> None:
        if not self.editing:
            self.viewport.delete_current()

    def _begin_new_item(self, after: bool) -> None:
        self._prev_cursor_row = self.viewport.cursor_row
        if after:
            self.viewport.insert_after("")
        else:
            self.viewport.insert_before("")
        self.edit_field.reset("")
        self._editing_new = True
        self.editing = True

    def insert_after(self) -> None:
        if not self.editing:
            self._begin_new_item(after=True)

    def insert_before(self) -> None:
        if not self.editing:
            self._begin_new_item(after=False)

    def start_editing(self) -> None:
        if self.editing:
            return
        item = self.viewport.current_line()
        if item is None:
            return
        self._prev_cursor_row = self.viewport.cursor_row
        self.edit_field.reset(item)
        self._editing_new = False
        self.editing = True

    def accept_editing(self) -> None:
        if self.editing:
            self.viewport.replace_current(self.edit_field.buffer)
            self.editing = False

    def cancel_editing(self) -> None:
        if not self.editing:
            return
        self.editing = False
        if self._editing_new:
            self.viewport.delete_current()
            self.viewport.cursor_row = self._prev_cursor_row
            self.viewport.clamp_cursor()
