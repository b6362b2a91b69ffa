"""Tests for tick ordering and frame bookkeeping in ``EventLoop``."""

from __future__ import annotations

import unittest
from unittest import mock

from lazycm.input.bindings import KeyChord, default_bindings
from lazycm.input.keycodes import KEY_BACKSPACE
from lazycm.runtime.interrupt import InterruptFlag
from lazycm.runtime.loop import EventLoop, LoopCallbacks, LoopTiming
from lazycm.runtime.session import (
    NO_CHANGE,
    Appended,
    ExitStatus,
    Finished,
    SessionSlot,
    SpawnError,
)
from lazycm.runtime.state import AppState, Focus
from lazycm.worklist.frames import Frame, FrameStack
from lazycm.worklist.profile import Profile
from lazycm.worklist.viewport import Viewport


class _FakeSession:
    def __init__(self, pid: int, command_line: str) -> None:
        self.pid = pid
        self.command_line = command_line


class _FakeTerminal:
    def __init__(self) -> None:
        self.calls: list[str] = []

    def disable_tui_mode(self) -> None:
        self.calls.append("disable")

    def enable_tui_mode(self) -> None:
        self.calls.append("enable")


class _Harness:
    def __init__(self) -> None:
        self.events: list[str] = []
        self.chords: list[KeyChord | None] = []
        self.renders: list[tuple] = []
        self.size = (80, 24)
        self.state = AppState(
            profile=Profile.initial(),
            bindings=default_bindings(),
            frames=FrameStack([Frame(viewport=Viewport(lines=["welcome"]))]),
        )
        self.slot = mock.Mock(spec=SessionSlot)
        self.slot.shell = "/bin/sh"
        self.slot.session = None
        self.slot.poll.side_effect = self._poll
        self.slot.terminate.return_value = None
        self.slot.interrupt.return_value = True
        self.poll_results: list = []
        self.next_pid = 100
        self.slot.replace.side_effect = self._replace
        self.interrupt = InterruptFlag()
        self.terminal = _FakeTerminal()
        callbacks = LoopCallbacks(
            read_chord=self._read_chord,
            screen_size=lambda: self.size,
            render=lambda state, preview, layout: self.renders.append((preview, layout)),
        )
        self.loop = EventLoop(
            self.state,
            self.slot,
            self.terminal,
            self.interrupt,
            callbacks,
            LoopTiming(tick_seconds=0.016, flush_limit=4),
            clock=lambda: 0.0,
            sleep=lambda _seconds: None,
        )

    def _read_chord(self) -> KeyChord | None:
        self.events.append("input")
        return self.chords.pop(0) if self.chords else None

    def _poll(self, limit: int):
        self.events.append(f"poll:{limit}")
        return self.poll_results.pop(0) if self.poll_results else NO_CHANGE

    def _replace(self, command_line: str):
        self.next_pid += 1
        return _FakeSession(self.next_pid, command_line), None


class TickOrderingTests(unittest.TestCase):
    def test_input_is_applied_before_output_in_the_same_tick(self) -> None:
        harness = _Harness()
        harness.chords.append(KeyChord.char("q"))

        harness.loop.tick()

        self.assertEqual(harness.events, ["input", "poll:4"])
        self.assertTrue(harness.state.quit)

    def test_back_in_the_same_tick_drops_output_of_the_popped_frame(self) -> None:
        harness = _Harness()
        harness.loop.start_root("seq 100")
        harness.loop.run_into_itself("seq 5")
        child_frame = harness.state.frames.top
        harness.chords.append(KeyChord(KEY_BACKSPACE))
        harness.poll_results.append(Appended(("1", "2")))

        harness.loop.tick()

        self.assertEqual(len(harness.state.frames), 1)
        harness.slot.terminate.assert_called_once()
        self.assertEqual(child_frame.viewport.lines, ["PID: 102, Command: seq 5"])

    def test_redraw_only_when_dirty(self) -> None:
        harness = _Harness()
        harness.loop.tick()
        self.assertEqual(len(harness.renders), 1)

        harness.loop.tick()
        self.assertEqual(len(harness.renders), 1)

    def test_redraw_syncs_visible_rows_with_layout(self) -> None:
        harness = _Harness()
        harness.loop.tick()

        _preview, layout = harness.renders[-1]
        self.assertEqual(layout.output_rows, 23)
        self.assertEqual(harness.state.visible_rows, 23)

    def test_resize_alone_triggers_a_redraw(self) -> None:
        harness = _Harness()
        harness.loop.tick()
        harness.size = (120, 40)

        harness.loop.tick()
        harness.loop.tick()

        sizes = [(layout.columns, layout.lines) for _preview, layout in harness.renders]
        self.assertEqual(sizes, [(80, 24), (120, 40)])
        self.assertEqual(harness.state.visible_rows, 39)

    def test_run_stops_on_quit_and_sleeps_to_the_tick_boundary(self) -> None:
        harness = _Harness()
        sleeps: list[float] = []
        harness.loop.sleep = sleeps.append
        harness.chords.extend([None, KeyChord.char("q")])

        harness.loop.run()

        self.assertTrue(harness.state.quit)
        self.assertEqual(len(sleeps), 2)
        self.assertAlmostEqual(sleeps[0], 0.016)


class OutputDrainTests(unittest.TestCase):
    def test_appended_lines_land_in_session_frame(self) -> None:
        harness = _Harness()
        harness.loop.start_root("seq 3")
        harness.poll_results.append(Appended(("1", "2", "3")))

        harness.loop.tick()

        self.assertEqual(harness.state.frames.viewport.lines, ["PID: 101, Command: seq 3", "1", "2", "3"])

    def test_finished_appends_terminator_once(self) -> None:
        harness = _Harness()
        harness.loop.start_root("false")
        harness.poll_results.extend([Finished(ExitStatus(code=1)), NO_CHANGE])

        harness.loop.tick()
        harness.loop.tick()

        self.assertEqual(
            harness.state.frames.viewport.lines,
            ["PID: 101, Command: false", "-- Execution Finished with status code: 1 --"],
        )

    def test_output_after_frame_was_popped_is_discarded(self) -> None:
        harness = _Harness()
        harness.loop.start_root("seq 3")
        root = harness.state.frames.top
        harness.loop.run_into_itself("yes")
        child = harness.state.frames.top
        harness.state.frames.pop()
        harness.poll_results.append(Appended(("y",)))

        harness.loop.tick()

        self.assertEqual(child.viewport.lines, ["PID: 102, Command: yes"])
        self.assertEqual(root.viewport.lines, ["PID: 101, Command: seq 3"])


class InterruptTests(unittest.TestCase):
    def test_pending_interrupt_is_forwarded_once(self) -> None:
        harness = _Harness()
        harness.interrupt.raise_flag()

        harness.loop.tick()
        harness.loop.tick()

        harness.slot.interrupt.assert_called_once_with()

    def test_foreground_run_consumes_interrupt_meant_for_child(self) -> None:
        harness = _Harness()
        harness.interrupt.raise_flag()
        with mock.patch("lazycm.runtime.loop.fork_foreground", return_value=ExitStatus(code=0)) as fork:
            harness.loop.run_foreground("vim file")

        fork.assert_called_once_with("vim file", shell="/bin/sh", terminal=harness.terminal)
        self.assertFalse(harness.interrupt.consume())
        self.assertEqual(harness.state.status_message, "")

    def test_foreground_failure_is_reported_as_status(self) -> None:
        harness = _Harness()
        with mock.patch("lazycm.runtime.loop.fork_foreground", return_value=ExitStatus(code=2)):
            harness.loop.run_foreground("false")

        self.assertTrue(harness.state.status_is_error)
        self.assertIn("status code: 2", harness.state.status_message)

    def test_foreground_spawn_error_is_reported_as_status(self) -> None:
        harness = _Harness()
        with mock.patch("lazycm.runtime.loop.fork_foreground", side_effect=SpawnError("Shell not found: nope")):
            harness.loop.run_foreground("ls")

        self.assertEqual(harness.state.status_message, "Shell not found: nope")
        self.assertTrue(harness.state.dirty)


class FrameOperationTests(unittest.TestCase):
    def test_start_root_resets_stack_and_focuses_output(self) -> None:
        harness = _Harness()
        harness.state.focus = Focus.CMDS
        harness.loop.start_root("ls")
        harness.loop.run_into_itself("ls -l")

        harness.loop.start_root("seq 2")

        self.assertEqual(len(harness.state.frames), 1)
        self.assertEqual(harness.state.frames.top.command, "seq 2")
        self.assertEqual(harness.state.root_cmdline, "seq 2")
        self.assertIs(harness.state.focus, Focus.OUTPUT)

    def test_run_into_itself_pushes_a_frame(self) -> None:
        harness = _Harness()
        harness.loop.start_root("ls")
        harness.loop.run_into_itself("cat a.txt")

        self.assertEqual([frame.command for frame in harness.state.frames], ["ls", "cat a.txt"])

    def test_rerun_replaces_the_top_frame(self) -> None:
        harness = _Harness()
        harness.loop.start_root("ls")
        harness.loop.run_into_itself("cat a.txt")
        old_top = harness.state.frames.top

        harness.loop.rerun()

        self.assertEqual(len(harness.state.frames), 2)
        self.assertIsNot(harness.state.frames.top, old_top)
        self.assertEqual(harness.state.frames.top.command, "cat a.txt")

    def test_rerun_on_welcome_frame_only_sets_status(self) -> None:
        harness = _Harness()
        harness.loop.rerun()

        harness.slot.replace.assert_not_called()
        self.assertEqual(harness.state.status_message, "Nothing to rerun")

    def test_replaced_session_status_is_appended_to_its_frame(self) -> None:
        harness = _Harness()
        harness.loop.start_root("sleep 10")
        first = harness.state.frames.top
        harness.slot.replace.side_effect = lambda cmd: (_FakeSession(200, cmd), ExitStatus(signal=15))

        harness.loop.run_into_itself("ls")

        self.assertEqual(first.viewport.lines[-1], "-- Execution Terminated by signal SIGTERM --")

    def test_back_with_single_frame_is_a_no_op(self) -> None:
        harness = _Harness()
        harness.loop.back()

        self.assertEqual(len(harness.state.frames), 1)
        harness.slot.terminate.assert_not_called()

    def test_back_from_finished_frame_leaves_slot_alone(self) -> None:
        harness = _Harness()
        harness.loop.start_root("ls")
        harness.loop.run_into_itself("true")
        harness.poll_results.append(Finished(ExitStatus(code=0)))
        harness.loop.tick()

        harness.loop.back()

        self.assertEqual(len(harness.state.frames), 1)
        harness.slot.terminate.assert_not_called()

    def test_spawn_error_keeps_frames_and_sets_status(self) -> None:
        harness = _Harness()
        harness.loop.start_root("ls")
        harness.slot.replace.side_effect = SpawnError("Shell not found: /nope")

        harness.loop.run_into_itself("cat x")

        self.assertEqual([frame.command for frame in harness.state.frames], ["ls"])
        self.assertEqual(harness.state.status_message, "Shell not found: /nope")
        self.assertTrue(harness.state.status_is_error)

    def test_failed_spawn_still_closes_the_replaced_frame(self) -> None:
        harness = _Harness()
        harness.loop.start_root("sleep 10")
        first = harness.state.frames.top
        harness.slot.replace.side_effect = SpawnError("Could not spawn `ls`", replaced=ExitStatus(signal=15))

        harness.loop.run_into_itself("ls")

        self.assertEqual(len(harness.state.frames), 1)
        self.assertEqual(first.viewport.lines[-1], "-- Execution Terminated by signal SIGTERM --")
        self.assertTrue(harness.state.status_is_error)

    def test_shutdown_terminates_the_slot(self) -> None:
        harness = _Harness()
        harness.slot.terminate.return_value = ExitStatus(signal=15)
        harness.loop.start_root("sleep 100")

        harness.loop.shutdown()

        harness.slot.terminate.assert_called_once_with()


if __name__ == "__main__":
    unittest.main()
