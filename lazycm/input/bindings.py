"""Key chords and the action binding table.

``ActionBinding`` maps each action to an ordered set of chords. Lookup walks
actions in definition order, so a chord bound twice resolves the same way
on every run; the dispatcher narrows the candidates to the current mode.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from ..actions import ACTION_ORDER, Action
from .keycodes import (
    KEY_BACK_TAB,
    KEY_BACKSPACE,
    KEY_DELETE,
    KEY_DOWN,
    KEY_END,
    KEY_ESCAPE,
    KEY_HOME,
    KEY_LEFT,
    KEY_PAGE_DOWN,
    KEY_PAGE_UP,
    KEY_RETURN,
    KEY_RIGHT,
    KEY_TAB,
    KEY_UP,
    key_f,
    key_label,
)


@dataclass(frozen=True, order=True)
class KeyChord:
    """One physical key press, optionally escape/alt prefixed."""

    code: int
    alt: bool = False

    @classmethod
    def char(cls, ch: str, alt: bool = False) -> KeyChord:
        return cls(ord(ch), alt)

    def to_text(self) -> str:
        """Serialize as ``key:<code>`` with an optional ``,alt`` suffix."""
        return f"key:{self.code}{',alt' if self.alt else ''}"

    @classmethod
    def from_text(cls, text: str) -> KeyChord:
        """Parse the ``to_text`` form, raising ``ValueError`` when malformed."""
        parts = [part.strip() for part in text.split(":")]
        if len(parts) != 2:
            raise ValueError(f"Could not parse key chord `{text}`")
        prefix, params = parts
        if prefix != "key":
            raise ValueError(f"Unknown key prefix `{prefix}`")
        fields = [field.strip() for field in params.split(",")]
        if len(fields) == 2:
            if fields[1] != "alt":
                raise ValueError(f"{fields[1]} is unknown key modifier")
            alt = True
        elif len(fields) == 1:
            alt = False
        else:
            raise ValueError(f"Could not parse key chord `{text}`")
        try:
            code = int(fields[0])
        except ValueError:
            raise ValueError(f"Invalid key code `{fields[0]}`") from None
        return cls(code, alt)

    def label(self) -> str:
        base = key_label(self.code)
        return f"Alt+{base}" if self.alt else base


class ActionBinding:
    """Many-to-many mapping between key chords and actions."""

    def __init__(self) -> None:
        self._chords: dict[Action, set[KeyChord]] = {action: set() for action in Action}

    def bind(self, chord: KeyChord, action: Action) -> ActionBinding:
        self._chords[action].add(chord)
        return self

    def unbind(self, chord: KeyChord, action: Action) -> None:
        self._chords[action].discard(chord)

    def is_bound(self, chord: KeyChord, action: Action) -> bool:
        return chord in self._chords[action]

    def resolve(self, chord: KeyChord, candidates: Iterable[Action] | None = None) -> Action | None:
        """Return the first action (definition order) bound to ``chord``.

        ``candidates`` restricts the search to the actions meaningful in the
        caller's mode. Unbound chords resolve to ``None``.
        """
        if candidates is None:
            pool: Iterable[Action] = Action
        else:
            pool = sorted(set(candidates), key=ACTION_ORDER.__getitem__)
        for action in pool:
            if chord in self._chords[action]:
                return action
        return None

    def chords_for(self, action: Action) -> list[KeyChord]:
        return sorted(self._chords[action])

    def replace_chords(self, action: Action, chords: Iterable[KeyChord]) -> None:
        self._chords[action] = set(chords)

    def items(self) -> Iterator[tuple[Action, list[KeyChord]]]:
        """Yield ``(action, sorted chords)`` in definition order."""
        for action in Action:
            yield action, sorted(self._chords[action])

    def copy(self) -> ActionBinding:
        clone = ActionBinding()
        for action, chords in self.items():
            clone.replace_chords(action, chords)
        return clone

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ActionBinding):
            return NotImplemented
        return self._chords == other._chords


def _c(ch: str, alt: bool = False) -> KeyChord:
    return KeyChord.char(ch, alt)


_DEFAULTS: tuple[tuple[Action, tuple[KeyChord, ...]], ...] = (
    (Action.UP, (KeyChord(KEY_UP), _c("k"))),
    (Action.DOWN, (KeyChord(KEY_DOWN), _c("j"))),
    (Action.LEFT, (KeyChord(KEY_LEFT), _c("h"))),
    (Action.RIGHT, (KeyChord(KEY_RIGHT), _c("l"))),
    (Action.HOME, (KeyChord(KEY_HOME), _c("0"))),
    (Action.DELETE, (KeyChord(KEY_DELETE), _c("d"))),
    (Action.BACK_DELETE, (KeyChord(KEY_BACKSPACE),)),
    (Action.TOGGLE_PROFILE_PANEL, (_c("e"),)),
    (Action.QUIT, (_c("q"),)),
    (Action.FOCUS_FORWARD, (KeyChord(KEY_TAB),)),
    (Action.FOCUS_BACKWARD, (KeyChord(KEY_BACK_TAB),)),
    (Action.ACCEPT, (KeyChord(KEY_RETURN),)),
    (Action.CANCEL, (KeyChord(KEY_ESCAPE),)),
    (Action.DUP_AFTER_ITEM, (_c("i", alt=True),)),
    (Action.DUP_BEFORE_ITEM, (_c("I", alt=True),)),
    (Action.INSERT_AFTER_ITEM, (_c("i"),)),
    (Action.INSERT_BEFORE_ITEM, (_c("I"),)),
    (Action.EDIT_ITEM, (KeyChord(key_f(2)), _c("c"))),
    (Action.RUN, (KeyChord(KEY_RETURN),)),
    (Action.RUN_INTO_ITSELF, (KeyChord(KEY_RETURN, alt=True),)),
    (Action.BACK, (KeyChord(KEY_BACKSPACE),)),
    (Action.RERUN, (KeyChord(key_f(5)),)),
    (Action.PREV_MATCH, (KeyChord(KEY_UP, alt=True), _c("k", alt=True))),
    (Action.NEXT_MATCH, (KeyChord(KEY_DOWN, alt=True), _c("j", alt=True))),
    (Action.EDIT_CMDLINE, (KeyChord(key_f(3)), _c("!"))),
    (Action.OPEN_KEY_MAP_SETTINGS, (_c("K"),)),
    (Action.START_SEARCH, (_c("/"),)),
    (Action.JUMP_TO_START, (_c("g"),)),
    (Action.JUMP_TO_END, (_c("G"), KeyChord(KEY_END))),
    (Action.NEXT_SEARCH_MATCH, (_c("n"),)),
    (Action.PREV_SEARCH_MATCH, (_c("N"),)),
    (Action.PAGE_UP, (KeyChord(KEY_PAGE_UP),)),
    (Action.PAGE_DOWN, (KeyChord(KEY_PAGE_DOWN),)),
)


def default_bindings() -> ActionBinding:
    """Build the key map used when the profile carries none."""
    binding = ActionBinding()
    for action, chords in _DEFAULTS:
        for chord in chords:
            binding.bind(chord, action)
    return binding
