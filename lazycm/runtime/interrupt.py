"""SIGINT capture for the event loop.

The handler only flips a boolean; the loop reads and clears it once per
tick and decides what to do with it.
"""

from __future__ import annotations

import contextlib
import signal
from collections.abc import Iterator


class InterruptFlag:
    def __init__(self) -> None:
        self._raised = False

    def raise_flag(self) -> None:
        self._raised = True

    def consume(self) -> bool:
        """Return whether the flag was raised since the last call, clearing it."""
        raised = self._raised
        self._raised = False
        return raised

    def _handle_signal(self, _signum: int, _frame: object) -> None:
        self._raised = True

    @contextlib.contextmanager
    def installed(self, signum: int = signal.SIGINT) -> Iterator[InterruptFlag]:
        """Route ``signum`` to this flag for the duration of the block."""
        previous = signal.signal(signum, self._handle_signal)
        try:
            yield self
        finally:
            signal.signal(signum, previous)
