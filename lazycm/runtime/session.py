"""Child process session management.

A ``ProcessSession`` owns one background child whose stdout and stderr share
a single non-blocking pipe. ``SessionSlot`` holds at most one live session
and always terminates and reaps the old child before spawning a new one.
``fork_foreground`` is the blocking variant that hands the terminal over to
the child until it exits.
"""

from __future__ import annotations

import logging
import os
import shutil
import signal
import subprocess
from collections import deque
from dataclasses import dataclass
from typing import Protocol, Union

from ..text import DEFAULT_TAB_SIZE, expand_tabs

logger = logging.getLogger(__name__)

FLUSH_LIMIT = 1024
TERMINATE_GRACE_SECONDS = 0.5
MAX_LINE_BYTES = 64 * 1024
_READ_CHUNK = 64 * 1024
# Upper bound of pipe reads per poll, so a flood of output cannot stall a tick.
_READS_PER_POLL = 4


class SpawnError(RuntimeError):
    """Raised when a command cannot be started.

    ``replaced`` carries the exit status of a session that was already
    terminated to make room for the failed one.
    """

    def __init__(self, message: str, replaced: ExitStatus | None = None) -> None:
        super().__init__(message)
        self.replaced = replaced


@dataclass(frozen=True)
class ExitStatus:
    """How a session ended: exit code, terminating signal, or pipe failure."""

    code: int | None = None
    signal: int | None = None
    error: str | None = None

    @classmethod
    def from_returncode(cls, returncode: int) -> ExitStatus:
        if returncode < 0:
            return cls(signal=-returncode)
        return cls(code=returncode)

    def describe(self) -> str:
        """Return the terminator line appended under the command output."""
        if self.error is not None:
            return f"-- Execution Failed: {self.error} --"
        if self.signal is not None:
            try:
                name = signal.Signals(self.signal).name
            except ValueError:
                name = str(self.signal)
            return f"-- Execution Terminated by signal {name} --"
        return f"-- Execution Finished with status code: {self.code} --"


@dataclass(frozen=True)
class NoChange:
    pass


@dataclass(frozen=True)
class Appended:
    lines: tuple[str, ...]


@dataclass(frozen=True)
class Finished:
    status: ExitStatus


NO_CHANGE = NoChange()
PollResult = Union[NoChange, Appended, Finished]


class LineBuffer:
    """Split a byte stream into decoded, tab-expanded lines, first in first out.

    A line longer than ``max_line_bytes`` is cut into several lines so that
    output without newlines never accumulates unbounded.
    """

    def __init__(self, tab_size: int = DEFAULT_TAB_SIZE, max_line_bytes: int = MAX_LINE_BYTES) -> None:
        self.tab_size = tab_size
        self.max_line_bytes = max(1, max_line_bytes)
        self._partial = bytearray()
        self._lines: deque[str] = deque()

    def __len__(self) -> int:
        return len(self._lines)

    def _decode(self, raw: bytes) -> str:
        text = raw.decode("utf-8", errors="replace")
        if text.endswith("\r"):
            text = text[:-1]
        return expand_tabs(text, self.tab_size)

    def feed(self, chunk: bytes) -> None:
        self._partial.extend(chunk)
        if b"\n" in chunk:
            *complete, rest = bytes(self._partial).split(b"\n")
            self._lines.extend(self._decode(raw) for raw in complete)
            self._partial = bytearray(rest)
        while len(self._partial) > self.max_line_bytes:
            cut = self._cut_point()
            self._lines.append(self._decode(bytes(self._partial[:cut])))
            del self._partial[:cut]

    def _cut_point(self) -> int:
        """Return a split offset that does not land inside a UTF-8 sequence."""
        cut = self.max_line_bytes
        while cut > 0 and self._partial[cut] & 0xC0 == 0x80:
            cut -= 1
        return cut or self.max_line_bytes

    def flush_partial(self) -> None:
        """Promote a trailing line without newline to a complete line."""
        if self._partial:
            self._lines.append(self._decode(bytes(self._partial)))
            self._partial.clear()

    def take(self, limit: int) -> list[str]:
        count = min(max(1, limit), len(self._lines))
        return [self._lines.popleft() for _ in range(count)]


class ProcessSession:
    """One spawned child plus the non-blocking reader of its merged output."""

    def __init__(self, process: subprocess.Popen, command_line: str, tab_size: int = DEFAULT_TAB_SIZE) -> None:
        if process.stdout is None:
            raise ValueError("process must be spawned with a stdout pipe")
        self.process = process
        self.command_line = command_line
        self._stdout = process.stdout
        self._fd = self._stdout.fileno()
        os.set_blocking(self._fd, False)
        self._buffer = LineBuffer(tab_size)
        self._eof = False
        self._pipe_empty = False
        self._error: str | None = None
        self._closed = False

    @classmethod
    def spawn(
        cls,
        command_line: str,
        *,
        shell: str = "/bin/sh",
        tab_size: int = DEFAULT_TAB_SIZE,
    ) -> ProcessSession:
        """Start ``shell -c command_line`` with stdout and stderr merged into one pipe.

        The child gets its own session so terminal-generated signals reach
        only this program, which forwards them explicitly.
        """
        try:
            process = subprocess.Popen(
                [shell, "-c", command_line],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                start_new_session=True,
                close_fds=True,
            )
        except OSError as exc:
            raise SpawnError(f"Could not spawn `{command_line}`: {exc}") from exc
        logger.info("spawned pid=%s command=%r", process.pid, command_line)
        return cls(process, command_line, tab_size)

    @property
    def pid(self) -> int:
        return self.process.pid

    def is_alive(self) -> bool:
        return not self._closed and self.process.poll() is None

    def _read_available(self, flush_limit: int) -> None:
        """Read until the pipe would block, hits EOF, enough lines are pending,
        or the per-poll read budget is spent.
        """
        self._pipe_empty = False
        reads = 0
        while not self._eof and len(self._buffer) < flush_limit and reads < _READS_PER_POLL:
            reads += 1
            try:
                chunk = os.read(self._fd, _READ_CHUNK)
            except BlockingIOError:
                self._pipe_empty = True
                return
            except InterruptedError:
                continue
            except OSError as exc:
                logger.warning("reading output of pid=%s failed: %s", self.pid, exc)
                self._error = str(exc)
                self._eof = True
                self._buffer.flush_partial()
                return
            if not chunk:
                self._eof = True
                self._buffer.flush_partial()
                return
            self._buffer.feed(chunk)

    def poll(self, flush_limit: int = FLUSH_LIMIT) -> PollResult:
        """Return new output lines, the exit status, or ``NO_CHANGE``.

        At most ``flush_limit`` lines are returned per call; the rest stay
        buffered for the next call. ``Finished`` is only reported once every
        line produced by the child has been handed out.
        """
        if self._closed:
            return NO_CHANGE
        flush_limit = max(1, flush_limit)
        # Sampled before reading: once the child has exited, everything it
        # wrote is already in the pipe.
        exited = self.process.poll() is not None
        self._read_available(flush_limit)
        lines = self._buffer.take(flush_limit)
        if lines:
            return Appended(tuple(lines))
        if self._error is not None:
            self.terminate()
            return Finished(ExitStatus(error=self._error))
        if not exited:
            return NO_CHANGE
        if not self._eof:
            if not self._pipe_empty:
                return NO_CHANGE
            # A descendant still holds the pipe open; hand out what is there.
            self._buffer.flush_partial()
            lines = self._buffer.take(flush_limit)
            if lines:
                return Appended(tuple(lines))
        self._close()
        return Finished(ExitStatus.from_returncode(self.process.returncode))

    def _signal_group(self, signum: int) -> None:
        try:
            os.killpg(self.process.pid, signum)
        except ProcessLookupError:
            pass
        except PermissionError as exc:
            logger.warning("cannot signal process group %s: %s", self.process.pid, exc)
            self.process.send_signal(signum)

    def interrupt(self) -> bool:
        """Forward SIGINT to the child's process group."""
        if not self.is_alive():
            return False
        self._signal_group(signal.SIGINT)
        return True

    def terminate(self) -> ExitStatus | None:
        """Stop the child and reap it.

        SIGTERM first, SIGKILL after ``TERMINATE_GRACE_SECONDS``. Wait errors
        are logged and swallowed so shutdown can always proceed.
        """
        if self._closed:
            return None
        if self.process.poll() is None:
            self._signal_group(signal.SIGTERM)
            try:
                self.process.wait(timeout=TERMINATE_GRACE_SECONDS)
            except subprocess.TimeoutExpired:
                logger.info("pid=%s ignored SIGTERM, killing", self.pid)
                self._signal_group(signal.SIGKILL)
                try:
                    self.process.wait(timeout=TERMINATE_GRACE_SECONDS)
                except (subprocess.TimeoutExpired, ChildProcessError) as exc:
                    logger.error("could not reap pid=%s: %s", self.pid, exc)
            except ChildProcessError as exc:
                logger.warning("waiting for pid=%s failed: %s", self.pid, exc)
        self._close()
        returncode = self.process.returncode
        if returncode is None:
            return None
        return ExitStatus.from_returncode(returncode)

    def _close(self) -> None:
        self._closed = True
        try:
            self._stdout.close()
        except OSError as exc:
            logger.warning("closing output pipe of pid=%s failed: %s", self.pid, exc)


def resolve_shell(shell: str) -> str:
    """Return an executable path for ``shell`` or raise ``SpawnError``."""
    if os.sep in shell:
        if os.path.isfile(shell) and os.access(shell, os.X_OK):
            return shell
        raise SpawnError(f"Shell not found: {shell}")
    found = shutil.which(shell)
    if found is None:
        raise SpawnError(f"Shell not found: {shell}")
    return found


class SessionSlot:
    """Holder of the single background session.

    ``replace`` signals and reaps the running child before anything new is
    spawned, so two children never share the slot.
    """

    def __init__(self, shell: str = "/bin/sh", tab_size: int = DEFAULT_TAB_SIZE) -> None:
        self.shell = shell
        self.tab_size = tab_size
        self._session: ProcessSession | None = None

    @property
    def session(self) -> ProcessSession | None:
        return self._session

    def is_alive(self) -> bool:
        return self._session is not None and self._session.is_alive()

    def replace(self, command_line: str) -> tuple[ProcessSession, ExitStatus | None]:
        """Terminate the current session, then spawn ``command_line``.

        Returns the new session and the exit status of the replaced one.
        A missing shell raises ``SpawnError`` before the current session is
        touched; a failed spawn after that reports the replaced status on the
        error.
        """
        shell_path = resolve_shell(self.shell)
        replaced = self.terminate()
        try:
            self._session = ProcessSession.spawn(command_line, shell=shell_path, tab_size=self.tab_size)
        except SpawnError as exc:
            exc.replaced = replaced
            raise
        return self._session, replaced

    def poll(self, flush_limit: int = FLUSH_LIMIT) -> PollResult:
        if self._session is None:
            return NO_CHANGE
        result = self._session.poll(flush_limit)
        if isinstance(result, Finished):
            logger.info("pid=%s finished: %s", self._session.pid, result.status.describe())
            self._session = None
        return result

    def interrupt(self) -> bool:
        return self._session is not None and self._session.interrupt()

    def terminate(self) -> ExitStatus | None:
        session, self._session = self._session, None
        if session is None:
            return None
        return session.terminate()


class TerminalDriver(Protocol):
    def disable_tui_mode(self) -> None: ...

    def enable_tui_mode(self) -> None: ...


def fork_foreground(command_line: str, *, shell: str, terminal: TerminalDriver) -> ExitStatus:
    """Run ``command_line`` attached to the real terminal and wait for it.

    The TUI is suspended for the duration and restored afterwards even when
    the spawn fails.
    """
    shell_path = resolve_shell(shell)
    terminal.disable_tui_mode()
    try:
        with open("/dev/tty", "rb") as tty_in:
            completed = subprocess.run([shell_path, "-c", command_line], stdin=tty_in, check=False)
    except OSError as exc:
        raise SpawnError(f"Could not run `{command_line}`: {exc}") from exc
    finally:
        terminal.enable_tui_mode()
    logger.info("foreground command %r exited with %s", command_line, completed.returncode)
    return ExitStatus.from_returncode(completed.returncode)
