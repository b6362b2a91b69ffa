"""Tick-driven event loop.

One tick forwards a pending Ctrl-C to the child, applies at most one key
chord, drains a bounded batch of child output and redraws when something
changed or the terminal was resized. Keyboard input is always applied
before output of the same tick.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from ..input.bindings import KeyChord
from ..render import Layout, compute_layout
from ..worklist.frames import Frame
from .dispatch import DispatchOps, Preview, compute_preview, dispatch_chord
from .interrupt import InterruptFlag
from .session import (
    FLUSH_LIMIT,
    Appended,
    Finished,
    ProcessSession,
    SessionSlot,
    SpawnError,
    TerminalDriver,
    fork_foreground,
)
from .state import AppState, Focus, Mode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoopTiming:
    """Timing constants controlling the loop."""

    tick_seconds: float = 0.016
    flush_limit: int = FLUSH_LIMIT


@dataclass(frozen=True)
class LoopCallbacks:
    """Injected terminal-facing operations used by ``EventLoop``."""

    read_chord: Callable[[], KeyChord | None]
    screen_size: Callable[[], tuple[int, int]]
    render: Callable[[AppState, Preview, Layout], None]


def frame_header(session: ProcessSession) -> str:
    return f"PID: {session.pid}, Command: {session.command_line}"


class EventLoop:
    """Owns the frame stack, the session slot and the per-tick scheduling."""

    def __init__(
        self,
        state: AppState,
        slot: SessionSlot,
        terminal: TerminalDriver,
        interrupt: InterruptFlag,
        callbacks: LoopCallbacks,
        timing: LoopTiming = LoopTiming(),
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.state = state
        self.slot = slot
        self.terminal = terminal
        self.interrupt = interrupt
        self.callbacks = callbacks
        self.timing = timing
        self.clock = clock
        self.sleep = sleep
        # Frame fed by the live session; ``None`` once it was popped.
        self._session_frame: Frame | None = None
        # Size the last frame was drawn for.
        self._screen_size: tuple[int, int] | None = None
        self.ops = DispatchOps(
            run_foreground=self.run_foreground,
            run_into_itself=self.run_into_itself,
            start_root=self.start_root,
            rerun=self.rerun,
            back=self.back,
        )

    # Session operations triggered by dispatch.

    def _spawn(self, command_line: str) -> Frame | None:
        """Replace the live session; ``None`` after reporting a spawn failure."""
        previous_frame = self._session_frame
        try:
            session, replaced = self.slot.replace(command_line)
        except SpawnError as exc:
            logger.warning("%s", exc)
            if exc.replaced is not None and previous_frame is not None:
                previous_frame.viewport.append([exc.replaced.describe()])
            if self.slot.session is None:
                self._session_frame = None
            self.state.set_status(str(exc), error=True)
            return None
        if replaced is not None and previous_frame is not None:
            previous_frame.viewport.append([replaced.describe()])
        frame = Frame.for_command(command_line, frame_header(session))
        self._session_frame = frame
        return frame

    def _frame_is_stacked(self, frame: Frame | None) -> bool:
        return frame is not None and any(candidate is frame for candidate in self.state.frames)

    def start_root(self, command_line: str) -> None:
        frame = self._spawn(command_line)
        if frame is None:
            return
        self.state.frames.reset(frame)
        self.state.root_cmdline = command_line
        self.state.focus = Focus.OUTPUT

    def run_into_itself(self, command_line: str) -> None:
        frame = self._spawn(command_line)
        if frame is not None:
            self.state.frames.push(frame)

    def rerun(self) -> None:
        command_line = self.state.frames.top.command
        if command_line is None:
            self.state.set_status("Nothing to rerun")
            return
        frame = self._spawn(command_line)
        if frame is not None:
            self.state.frames.replace_top(frame)

    def back(self) -> None:
        frames = self.state.frames
        if len(frames) <= 1:
            return
        top = frames.top
        if top is self._session_frame:
            self.slot.terminate()
            self._session_frame = None
        frames.pop()

    def run_foreground(self, command_line: str) -> None:
        logger.info("running %r in the foreground", command_line)
        try:
            status = fork_foreground(command_line, shell=self.slot.shell, terminal=self.terminal)
        except SpawnError as exc:
            logger.warning("%s", exc)
            self.state.set_status(str(exc), error=True)
        else:
            if status.code != 0:
                self.state.set_status(status.describe(), error=True)
        finally:
            # Ctrl-C pressed while the command owned the terminal was meant for it.
            self.interrupt.consume()
            self.state.dirty = True

    # Tick phases.

    def _forward_interrupt(self) -> None:
        if self.interrupt.consume():
            if self.slot.interrupt():
                logger.debug("forwarded SIGINT to the running command")
            self.state.dirty = True

    def _apply_input(self) -> None:
        chord = self.callbacks.read_chord()
        if chord is None:
            return
        dispatch_chord(chord, self.state, self.ops)
        self.state.dirty = True

    def _drain_output(self) -> None:
        result = self.slot.poll(self.timing.flush_limit)
        if isinstance(result, Appended):
            if self._frame_is_stacked(self._session_frame):
                self._session_frame.viewport.append(result.lines)
                self.state.dirty = True
        elif isinstance(result, Finished):
            if self._frame_is_stacked(self._session_frame):
                self._session_frame.viewport.append([result.status.describe()])
            self._session_frame = None
            self.state.dirty = True

    def _sync_scroll(self, layout: Layout) -> None:
        state = self.state
        state.frames.viewport.sync_scroll(layout.output_rows)
        if layout.list_rows:
            state.profile.regex_list.viewport.sync_scroll(layout.list_rows)
            state.profile.cmd_list.viewport.sync_scroll(layout.list_rows)
        if state.mode is Mode.SELECTING_KEY_FOR_REBINDING:
            state.settings.viewport.sync_scroll(layout.settings_rows)
            state.visible_rows = layout.settings_rows
        elif state.focused_list() is not None:
            state.visible_rows = layout.list_rows
        else:
            state.visible_rows = layout.output_rows

    def _check_resize(self) -> None:
        size = self.callbacks.screen_size()
        if size != self._screen_size:
            self._screen_size = size
            self.state.dirty = True

    def _redraw(self) -> None:
        columns, lines = self._screen_size or self.callbacks.screen_size()
        layout = compute_layout(self.state, columns, lines)
        self._sync_scroll(layout)
        self.callbacks.render(self.state, compute_preview(self.state), layout)
        self.state.dirty = False

    def tick(self) -> None:
        self._forward_interrupt()
        self._apply_input()
        self._drain_output()
        self._check_resize()
        if self.state.dirty:
            self._redraw()

    def run(self) -> None:
        """Tick until a quit action, sleeping out the rest of every tick."""
        next_tick = self.clock()
        while not self.state.quit:
            self.tick()
            next_tick += self.timing.tick_seconds
            now = self.clock()
            if next_tick > now:
                self.sleep(next_tick - now)
            else:
                next_tick = now

    def shutdown(self) -> None:
        """Terminate and reap the live child."""
        status = self.slot.terminate()
        self._session_frame = None
        if status is not None:
            logger.info("shutdown: child ended with %s", status.describe())
