"""Regression tests for raw chord decoding.

Input bytes are fed through a pipe the same way the terminal delivers
them in raw mode.
"""

from __future__ import annotations

import os
import time
import unittest

from lazycm.input.bindings import KeyChord
from lazycm.input.keycodes import (
    KEY_BACK_TAB,
    KEY_BACKSPACE,
    KEY_DELETE,
    KEY_DOWN,
    KEY_ESCAPE,
    KEY_PAGE_UP,
    KEY_RETURN,
    KEY_UP,
    key_f,
)
from lazycm.input.reader import read_chord


class ReadChordTests(unittest.TestCase):
    def _read_all(self, payload: bytes, count: int) -> list[KeyChord | None]:
        read_fd, write_fd = os.pipe()
        try:
            os.write(write_fd, payload)
            return [read_chord(read_fd, timeout_ms=20) for _ in range(count)]
        finally:
            os.close(read_fd)
            os.close(write_fd)

    def test_no_input_returns_none_without_blocking(self) -> None:
        read_fd, write_fd = os.pipe()
        try:
            started = time.monotonic()
            chord = read_chord(read_fd, timeout_ms=0)
            elapsed = time.monotonic() - started
        finally:
            os.close(read_fd)
            os.close(write_fd)

        self.assertIsNone(chord)
        self.assertLess(elapsed, 0.1)

    def test_single_escape_is_returned_after_short_wait(self) -> None:
        started = time.monotonic()
        (chord,) = self._read_all(b"\x1b", 1)
        elapsed = time.monotonic() - started

        self.assertEqual(chord, KeyChord(KEY_ESCAPE))
        self.assertLess(elapsed, 0.2)

    def test_printable_and_control_bytes(self) -> None:
        chords = self._read_all(b"q\r\n\x7f\t", 5)

        self.assertEqual(
            chords,
            [
                KeyChord(ord("q")),
                KeyChord(KEY_RETURN),
                KeyChord(KEY_RETURN),
                KeyChord(KEY_BACKSPACE),
                KeyChord(9),
            ],
        )

    def test_escape_prefix_marks_alt(self) -> None:
        self.assertEqual(self._read_all(b"\x1bj", 1), [KeyChord(ord("j"), alt=True)])
        self.assertEqual(self._read_all(b"\x1b\r", 1), [KeyChord(KEY_RETURN, alt=True)])

    def test_csi_and_ss3_sequences(self) -> None:
        chords = self._read_all(b"\x1b[A\x1bOB\x1b[3~\x1b[5~\x1b[Z\x1bOR\x1b[15~", 7)

        self.assertEqual(
            chords,
            [
                KeyChord(KEY_UP),
                KeyChord(KEY_DOWN),
                KeyChord(KEY_DELETE),
                KeyChord(KEY_PAGE_UP),
                KeyChord(KEY_BACK_TAB),
                KeyChord(key_f(3)),
                KeyChord(key_f(5)),
            ],
        )

    def test_alt_arrow_in_both_encodings(self) -> None:
        chords = self._read_all(b"\x1b[1;3A\x1b\x1b[B", 2)

        self.assertEqual(chords, [KeyChord(KEY_UP, alt=True), KeyChord(KEY_DOWN, alt=True)])

    def test_utf8_character_is_one_chord(self) -> None:
        chords = self._read_all("é€".encode("utf-8"), 2)

        self.assertEqual(chords, [KeyChord(ord("é")), KeyChord(ord("€"))])

    def test_unknown_sequence_is_dropped(self) -> None:
        chords = self._read_all(b"\x1b[99~x", 2)

        self.assertEqual(chords, [None, KeyChord(ord("x"))])


if __name__ == "__main__":
    unittest.main()
