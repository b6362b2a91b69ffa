"""Runtime composition layer for lazycm.

Builds the initial state from the stored profile, wires the terminal, the
session slot and the renderer into an ``EventLoop`` and runs it. Teardown
always terminates the child, restores the terminal and saves the profile.
"""

from __future__ import annotations

import logging
import os
import sys
import termios
from functools import partial
from pathlib import Path

from ..actions import Action
from ..config import StoredProfile, load_profile, save_profile
from ..input import read_chord
from ..render import render_screen
from ..worklist.frames import Frame, FrameStack
from ..worklist.viewport import Viewport
from .interrupt import InterruptFlag
from .loop import EventLoop, LoopCallbacks, LoopTiming
from .session import SessionSlot
from .state import AppState
from .terminal import TerminalController

logger = logging.getLogger(__name__)


def welcome_lines(stored: StoredProfile) -> list[str]:
    """Lines of the frame shown when no command was given."""

    def keys(action: Action) -> str:
        labels = [chord.label() for chord in stored.bindings.chords_for(action)]
        return "/".join(labels) or "<unbound>"

    return [
        "lazycm: run a command, pick an output line, run a command built from it.",
        "",
        f"  {keys(Action.EDIT_CMDLINE):<16} enter a command line",
        f"  {keys(Action.RUN):<16} run the command shown at the bottom",
        f"  {keys(Action.RUN_INTO_ITSELF):<16} run it and show its output here",
        f"  {keys(Action.BACK):<16} go back to the previous output",
        f"  {keys(Action.TOGGLE_PROFILE_PANEL):<16} show the regex and command lists",
        f"  {keys(Action.OPEN_KEY_MAP_SETTINGS):<16} edit key bindings",
        f"  {keys(Action.QUIT):<16} quit",
    ]


def build_state(stored: StoredProfile) -> AppState:
    frames = FrameStack([Frame(viewport=Viewport(lines=welcome_lines(stored)))])
    return AppState(profile=stored.profile, bindings=stored.bindings, frames=frames)


def _finish_list_edits(state: AppState) -> None:
    for string_list in (state.profile.regex_list, state.profile.cmd_list):
        string_list.cancel_editing()


def run_app(
    command: str | None = None,
    *,
    shell: str | None = None,
    tab_size: int | None = None,
    config_path: Path | None = None,
) -> None:
    """Run the interactive worklist until the user quits."""
    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    if not os.isatty(stdin_fd):
        raise SystemExit("lazycm needs an interactive terminal on stdin.")
    try:
        terminal = TerminalController(stdin_fd, stdout_fd)
    except termios.error as exc:
        raise SystemExit(f"Cannot read terminal attributes: {exc}") from exc

    stored = load_profile(config_path)
    # Command-line overrides apply to this run only and are not saved.
    shell = shell or stored.shell
    tab_size = stored.tab_size if tab_size is None else tab_size
    logger.info("starting: shell=%s tab_size=%s command=%r", shell, tab_size, command)

    state = build_state(stored)
    slot = SessionSlot(shell=shell, tab_size=tab_size)
    interrupt = InterruptFlag()
    callbacks = LoopCallbacks(
        read_chord=partial(read_chord, stdin_fd, 0),
        screen_size=terminal.size,
        render=partial(render_screen, terminal.write),
    )
    loop = EventLoop(state, slot, terminal, interrupt, callbacks, LoopTiming())

    try:
        with interrupt.installed():
            try:
                with terminal.raw_mode():
                    if command:
                        loop.start_root(command)
                    loop.run()
            finally:
                # Reaping can take a while; Ctrl-C meanwhile only raises the flag.
                loop.shutdown()
    finally:
        _finish_list_edits(state)
        if not save_profile(stored, config_path):
            logger.error("profile was not saved")
