"""Scrollable line list with a cursor.

The viewport is pure state: every operation keeps ``cursor_row`` inside
``[0, len(lines) - 1]`` (or at 0 when empty) and ``sync_scroll`` moves the
visible window so it follows the cursor.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass
class Viewport:
    """Lines plus cursor and scroll offsets of one scrollable pane."""

    lines: list[str] = field(default_factory=list)
    cursor_row: int = 0
    scroll_row: int = 0
    scroll_col: int = 0

    def clamp_cursor(self) -> None:
        """Pull ``cursor_row`` back inside the line range."""
        if not self.lines:
            self.cursor_row = 0
        else:
            self.cursor_row = max(0, min(self.cursor_row, len(self.lines) - 1))

    def cursor_up(self) -> None:
        """Move the cursor one line up; no-op on the first line."""
        if self.cursor_row > 0:
            self.cursor_row -= 1

    def cursor_down(self) -> None:
        """Move the cursor one line down; no-op on the last line."""
        if self.cursor_row + 1 < len(self.lines):
            self.cursor_row += 1

    def cursor_left(self) -> None:
        """Scroll one column left, stopping at column 0."""
        if self.scroll_col > 0:
            self.scroll_col -= 1

    def cursor_right(self) -> None:
        """Scroll one column right."""
        self.scroll_col += 1

    def cursor_home(self) -> None:
        """Scroll back to the first column."""
        self.scroll_col = 0

    def jump_to_start(self) -> None:
        """Move the cursor to the first line."""
        self.cursor_row = 0

    def jump_to_end(self) -> None:
        """Move the cursor to the last line."""
        self.cursor_row = max(0, len(self.lines) - 1)

    def page_up(self, rows: int) -> None:
        """Move the cursor up by ``rows`` lines, at least one."""
        self.cursor_row -= max(1, rows)
        self.clamp_cursor()

    def page_down(self, rows: int) -> None:
        """Move the cursor down by ``rows`` lines, at least one."""
        self.cursor_row += max(1, rows)
        self.clamp_cursor()

    def current_line(self) -> str | None:
        """Return the line under the cursor, or ``None`` when empty."""
        if 0 <= self.cursor_row < len(self.lines):
            return self.lines[self.cursor_row]
        return None

    def is_at_start(self) -> bool:
        return self.cursor_row == 0

    def is_at_end(self) -> bool:
        return self.cursor_row + 1 >= len(self.lines)

    def append(self, lines: Iterable[str]) -> None:
        """Add ``lines`` at the end without moving the cursor."""
        self.lines.extend(lines)

    def delete_current(self) -> str | None:
        """Remove the line under the cursor and return it."""
        if not 0 <= self.cursor_row < len(self.lines):
            return None
        removed = self.lines.pop(self.cursor_row)
        self.clamp_cursor()
        return removed

    def insert_before(self, line: str) -> None:
        """Insert ``line`` above the cursor and select it."""
        self.clamp_cursor()
        self.lines.insert(self.cursor_row, line)

    def insert_after(self, line: str) -> None:
        """Insert ``line`` below the cursor and select it."""
        self.clamp_cursor()
        if self.lines:
            self.cursor_row += 1
        self.lines.insert(self.cursor_row, line)

    def duplicate_before(self) -> None:
        """Copy the selected line above itself."""
        line = self.current_line()
        if line is not None:
            self.insert_before(line)

    def duplicate_after(self) -> None:
        """Copy the selected line below itself."""
        line = self.current_line()
        if line is not None:
            self.insert_after(line)

    def replace_current(self, line: str) -> None:
        """Overwrite the line under the cursor."""
        if 0 <= self.cursor_row < len(self.lines):
            self.lines[self.cursor_row] = line

    def sync_scroll(self, visible_height: int) -> None:
        """Scroll-follow: keep ``scroll_row <= cursor_row < scroll_row + visible_height``."""
        height = max(1, visible_height)
        if self.cursor_row >= self.scroll_row + height:
            self.scroll_row = self.cursor_row - height + 1
        if self.cursor_row < self.scroll_row:
            self.scroll_row = self.cursor_row

    def current_line_matches(self, regex: re.Pattern[str]) -> bool:
        """Return whether ``regex`` finds a match in the selected line."""
        line = self.current_line()
        return line is not None and regex.search(line) is not None

    def jump_to_next_match(self, regex: re.Pattern[str]) -> None:
        """Step down at least once, then stop on the first matching line or the end."""
        self.cursor_down()
        while not self.current_line_matches(regex) and not self.is_at_end():
            self.cursor_down()

    def jump_to_prev_match(self, regex: re.Pattern[str]) -> None:
        """Step up at least once, then stop on the first matching line or the start."""
        self.cursor_up()
        while not self.current_line_matches(regex) and not self.is_at_start():
            self.cursor_up()
