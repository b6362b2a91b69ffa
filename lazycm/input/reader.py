"""Low-level terminal input decoding.

Reads raw bytes from stdin and turns them into ``KeyChord`` values.
An escape prefix followed quickly by another key becomes an alt chord;
CSI/SS3 sequences map to the special key codes.
"""

from __future__ import annotations

import os
import select

from .bindings import KeyChord
from .keycodes import (
    KEY_BACK_TAB,
    KEY_BACKSPACE,
    KEY_DELETE,
    KEY_DOWN,
    KEY_END,
    KEY_ESCAPE,
    KEY_HOME,
    KEY_INSERT,
    KEY_LEFT,
    KEY_PAGE_DOWN,
    KEY_PAGE_UP,
    KEY_RETURN,
    KEY_RIGHT,
    KEY_UP,
    key_f,
)

ESC_SEQUENCE_TIMEOUT_MS = 25
_MAX_SEQUENCE_BYTES = 16

_FINAL_KEYS: dict[bytes, int] = {
    b"A": KEY_UP,
    b"B": KEY_DOWN,
    b"C": KEY_RIGHT,
    b"D": KEY_LEFT,
    b"H": KEY_HOME,
    b"F": KEY_END,
    b"Z": KEY_BACK_TAB,
    b"P": key_f(1),
    b"Q": key_f(2),
    b"R": key_f(3),
    b"S": key_f(4),
}

_TILDE_KEYS: dict[int, int] = {
    1: KEY_HOME,
    2: KEY_INSERT,
    3: KEY_DELETE,
    4: KEY_END,
    5: KEY_PAGE_UP,
    6: KEY_PAGE_DOWN,
    7: KEY_HOME,
    8: KEY_END,
    11: key_f(1),
    12: key_f(2),
    13: key_f(3),
    14: key_f(4),
    15: key_f(5),
    17: key_f(6),
    18: key_f(7),
    19: key_f(8),
    20: key_f(9),
    21: key_f(10),
    23: key_f(11),
    24: key_f(12),
}

# xterm modifier parameter values that include Alt/Meta.
_ALT_MODIFIERS = {3, 4, 7, 8, 9, 10, 11, 12, 13, 14, 15, 16}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def _decode_plain(ch: bytes, fd: int) -> KeyChord:
    """Decode one non-escape byte (plus UTF-8 continuation bytes)."""
    if ch in {b"\r", b"\n"}:
        return KeyChord(KEY_RETURN)
    if ch in {b"\x7f", b"\x08"}:
        return KeyChord(KEY_BACKSPACE)
    lead = ch[0]
    if lead < 0x80:
        return KeyChord(lead)
    raw = bytearray(ch)
    for _ in range(_utf8_length(lead) - 1):
        nxt = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if nxt is None:
            break
        raw.extend(nxt)
    text = bytes(raw).decode("utf-8", errors="replace")
    return KeyChord(ord(text[0]))


def _decode_sequence(introducer: bytes, fd: int) -> KeyChord | None:
    """Decode the remainder of ``ESC [`` / ``ESC O`` sequences.

    Returns ``None`` for well-formed sequences this reader does not know.
    """
    params = bytearray()
    while True:
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            return KeyChord(KEY_ESCAPE)
        if 0x40 <= part[0] <= 0x7E:
            final = part
            break
        params.extend(part)
        if len(params) > _MAX_SEQUENCE_BYTES:
            return None

    fields = bytes(params).decode("ascii", errors="replace").split(";")
    alt = False
    if len(fields) >= 2:
        try:
            alt = int(fields[1]) in _ALT_MODIFIERS
        except ValueError:
            alt = False

    if final == b"~" and introducer == b"[":
        try:
            number = int(fields[0])
        except ValueError:
            return None
        code = _TILDE_KEYS.get(number)
        return KeyChord(code, alt) if code is not None else None

    code = _FINAL_KEYS.get(final)
    if code is None:
        return None
    return KeyChord(code, alt)


def read_chord(fd: int, timeout_ms: int = 0) -> KeyChord | None:
    """Return the next chord on ``fd`` or ``None`` when no input is ready.

    ``timeout_ms=0`` makes the call non-blocking. Escape sequences are given
    ``ESC_SEQUENCE_TIMEOUT_MS`` to arrive in full.
    """
    ch = _read_ready_byte(fd, timeout_ms)
    if ch is None:
        return None
    if ch != b"\x1b":
        return _decode_plain(ch, fd)

    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return KeyChord(KEY_ESCAPE)
    if seq in {b"[", b"O"}:
        return _decode_sequence(seq, fd)
    if seq == b"\x1b":
        inner = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if inner is None:
            return KeyChord(KEY_ESCAPE, alt=True)
        if inner in {b"[", b"O"}:
            decoded = _decode_sequence(inner, fd)
            if decoded is None:
                return None
            return KeyChord(decoded.code, alt=True)
        return KeyChord(_decode_plain(inner, fd).code, alt=True)
    return KeyChord(_decode_plain(seq, fd).code, alt=True)
