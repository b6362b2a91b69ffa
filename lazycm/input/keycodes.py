"""Integer key codes for chords and their human-readable labels.

Printable keys use their code point. Special keys start just past the
Unicode range so a decoded character can never alias one of them.
"""

from __future__ import annotations

SPECIAL_KEY_BASE = 0x110000

KEY_TAB = 0x09
KEY_RETURN = 0x0A
KEY_ESCAPE = 0x1B

KEY_UP = SPECIAL_KEY_BASE + 1
KEY_DOWN = SPECIAL_KEY_BASE + 2
KEY_LEFT = SPECIAL_KEY_BASE + 3
KEY_RIGHT = SPECIAL_KEY_BASE + 4
KEY_HOME = SPECIAL_KEY_BASE + 5
KEY_END = SPECIAL_KEY_BASE + 6
KEY_INSERT = SPECIAL_KEY_BASE + 7
KEY_DELETE = SPECIAL_KEY_BASE + 8
KEY_BACKSPACE = SPECIAL_KEY_BASE + 9
KEY_PAGE_UP = SPECIAL_KEY_BASE + 10
KEY_PAGE_DOWN = SPECIAL_KEY_BASE + 11
KEY_BACK_TAB = SPECIAL_KEY_BASE + 12
KEY_F0 = SPECIAL_KEY_BASE + 0x40


def key_f(n: int) -> int:
    """Return the code of function key ``Fn``."""
    return KEY_F0 + n


_SPECIAL_NAMES: dict[int, str] = {
    KEY_TAB: "Tab",
    KEY_RETURN: "Enter",
    KEY_ESCAPE: "Esc",
    KEY_UP: "Up",
    KEY_DOWN: "Down",
    KEY_LEFT: "Left",
    KEY_RIGHT: "Right",
    KEY_HOME: "Home",
    KEY_END: "End",
    KEY_INSERT: "Insert",
    KEY_DELETE: "Delete",
    KEY_BACKSPACE: "Backspace",
    KEY_PAGE_UP: "PageUp",
    KEY_PAGE_DOWN: "PageDown",
    KEY_BACK_TAB: "Shift+Tab",
    ord(" "): "Space",
}
_SPECIAL_NAMES.update({key_f(n): f"F{n}" for n in range(1, 13)})

EDITING_KEYS = frozenset({KEY_LEFT, KEY_RIGHT, KEY_HOME, KEY_END, KEY_DELETE, KEY_BACKSPACE})


def is_printable_code(code: int) -> bool:
    """Return whether ``code`` is a character an edit field should insert."""
    if code < 0x20 or code >= SPECIAL_KEY_BASE:
        return False
    return chr(code).isprintable()


def key_label(code: int) -> str:
    named = _SPECIAL_NAMES.get(code)
    if named is not None:
        return named
    if is_printable_code(code):
        return chr(code)
    if 0 < code < 0x20:
        return "Ctrl+" + chr(code + 0x40)
    return f"<{code}>"
