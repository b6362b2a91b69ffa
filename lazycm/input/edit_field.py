"""Single-line text buffer used by the bottom field and list item edits."""

from __future__ import annotations

from dataclasses import dataclass

from .bindings import KeyChord
from .keycodes import (
    KEY_BACKSPACE,
    KEY_DELETE,
    KEY_END,
    KEY_HOME,
    KEY_LEFT,
    KEY_RIGHT,
    is_printable_code,
)


@dataclass
class EditField:
    """Text buffer with a character-index cursor."""

    buffer: str = ""
    cursor: int = 0

    def reset(self, value: str = "") -> None:
        """Replace the buffer and park the cursor after the last character."""
        self.buffer = value
        self.cursor = len(value)

    def insert(self, text: str) -> None:
        """Insert ``text`` at the cursor and move past it."""
        self.buffer = self.buffer[: self.cursor] + text + self.buffer[self.cursor :]
        self.cursor += len(text)

    def left(self) -> None:
        """Move the cursor one character left."""
        if self.cursor > 0:
            self.cursor -= 1

    def right(self) -> None:
        """Move the cursor one character right."""
        if self.cursor < len(self.buffer):
            self.cursor += 1

    def backspace(self) -> None:
        """Delete the character before the cursor."""
        if self.cursor > 0:
            self.buffer = self.buffer[: self.cursor - 1] + self.buffer[self.cursor :]
            self.cursor -= 1

    def delete(self) -> None:
        """Delete the character under the cursor."""
        if self.cursor < len(self.buffer):
            self.buffer = self.buffer[: self.cursor] + self.buffer[self.cursor + 1 :]

    def handle_chord(self, chord: KeyChord) -> bool:
        """Apply a raw chord; return ``False`` when the field ignores it."""
        if chord.alt:
            return False
        if is_printable_code(chord.code):
            self.insert(chr(chord.code))
            return True
        if chord.code == KEY_LEFT:
            self.left()
        elif chord.code == KEY_RIGHT:
            self.right()
        elif chord.code == KEY_HOME:
            self.cursor = 0
        elif chord.code == KEY_END:
            self.cursor = len(self.buffer)
        elif chord.code == KEY_BACKSPACE:
            self.backspace()
        elif chord.code == KEY_DELETE:
            self.delete()
        else:
            return False
        return True
