"""Tests for the SIGINT flag consumed by the event loop."""

from __future__ import annotations

import os
import signal
import unittest

from lazycm.runtime.interrupt import InterruptFlag


class InterruptFlagTests(unittest.TestCase):
    def test_consume_reads_and_clears(self) -> None:
        flag = InterruptFlag()
        self.assertFalse(flag.consume())

        flag.raise_flag()
        self.assertTrue(flag.consume())
        self.assertFalse(flag.consume())

    def test_installed_handler_sets_flag_and_is_restored(self) -> None:
        flag = InterruptFlag()
        previous = signal.getsignal(signal.SIGUSR1)
        try:
            with flag.installed(signal.SIGUSR1):
                os.kill(os.getpid(), signal.SIGUSR1)
                self.assertTrue(flag.consume())
            self.assertEqual(signal.getsignal(signal.SIGUSR1), previous)
        finally:
            signal.signal(signal.SIGUSR1, previous)


if __name__ == "__main__":
    unittest.main()
