"""Tests for the cursor-bounds and scroll-follow behavior of ``Viewport``."""

from __future__ import annotations

import re
import unittest

from lazycm.worklist.viewport import Viewport


def _lines(count: int) -> list[str]:
    return [f"line {idx}" for idx in range(count)]


class ViewportCursorTests(unittest.TestCase):
    def test_cursor_stays_in_bounds_under_any_movement(self) -> None:
        viewport = Viewport(lines=_lines(5))
        moves = [
            viewport.cursor_up,
            viewport.cursor_down,
            viewport.jump_to_end,
            viewport.jump_to_start,
            lambda: viewport.page_down(3),
            lambda: viewport.page_up(10),
            lambda: viewport.page_down(100),
        ]
        for _ in range(3):
            for move in moves:
                move()
                self.assertTrue(0 <= viewport.cursor_row < len(viewport.lines))

    def test_empty_viewport_keeps_cursor_at_zero(self) -> None:
        viewport = Viewport()
        viewport.cursor_down()
        viewport.jump_to_end()
        viewport.page_down(5)

        self.assertEqual(viewport.cursor_row, 0)
        self.assertIsNone(viewport.current_line())
        self.assertIsNone(viewport.delete_current())

    def test_page_moves_by_visible_rows(self) -> None:
        viewport = Viewport(lines=_lines(50))
        viewport.page_down(10)
        self.assertEqual(viewport.cursor_row, 10)
        viewport.page_up(4)
        self.assertEqual(viewport.cursor_row, 6)

    def test_horizontal_scroll_does_not_go_negative(self) -> None:
        viewport = Viewport(lines=["abc"])
        viewport.cursor_left()
        viewport.cursor_right()
        viewport.cursor_right()
        self.assertEqual(viewport.scroll_col, 2)
        viewport.cursor_home()
        self.assertEqual(viewport.scroll_col, 0)

    def test_appending_keeps_cursor_row(self) -> None:
        viewport = Viewport(lines=_lines(3), cursor_row=1)
        viewport.append(["more", "lines"])

        self.assertEqual(viewport.cursor_row, 1)
        self.assertEqual(len(viewport.lines), 5)


class ViewportScrollTests(unittest.TestCase):
    def test_sync_scroll_follows_cursor_down_and_up(self) -> None:
        viewport = Viewport(lines=_lines(100))
        viewport.cursor_row = 30
        viewport.sync_scroll(10)
        self.assertEqual(viewport.scroll_row, 21)

        viewport.cursor_row = 5
        viewport.sync_scroll(10)
        self.assertEqual(viewport.scroll_row, 5)

    def test_cursor_always_visible_after_sync(self) -> None:
        viewport = Viewport(lines=_lines(40))
        for row, height in ((39, 7), (0, 3), (20, 1), (21, 15)):
            viewport.cursor_row = row
            viewport.sync_scroll(height)
            self.assertLessEqual(viewport.scroll_row, viewport.cursor_row)
            self.assertLess(viewport.cursor_row, viewport.scroll_row + height)


class ViewportEditingTests(unittest.TestCase):
    def test_insert_after_moves_cursor_to_new_line(self) -> None:
        viewport = Viewport(lines=["a", "b"])
        viewport.insert_after("x")

        self.assertEqual(viewport.lines, ["a", "x", "b"])
        self.assertEqual(viewport.cursor_row, 1)

    def test_insert_before_keeps_cursor_on_new_line(self) -> None:
        viewport = Viewport(lines=["a", "b"], cursor_row=1)
        viewport.insert_before("x")

        self.assertEqual(viewport.lines, ["a", "x", "b"])
        self.assertEqual(viewport.current_line(), "x")

    def test_duplicate_and_delete(self) -> None:
        viewport = Viewport(lines=["a", "b"])
        viewport.duplicate_after()
        self.assertEqual(viewport.lines, ["a", "a", "b"])

        viewport.jump_to_end()
        self.assertEqual(viewport.delete_current(), "b")
        self.assertEqual(viewport.cursor_row, 1)


class ViewportMatchJumpTests(unittest.TestCase):
    def test_jump_to_next_and_previous_match(self) -> None:
        viewport = Viewport(lines=["x", "a.rs:1:", "y", "b.rs:2:", "z"])
        regex = re.compile(r":\d+:")

        viewport.jump_to_next_match(regex)
        self.assertEqual(viewport.cursor_row, 1)
        viewport.jump_to_next_match(regex)
        self.assertEqual(viewport.cursor_row, 3)
        viewport.jump_to_prev_match(regex)
        self.assertEqual(viewport.cursor_row, 1)

    def test_jump_without_further_match_stops_at_edge(self) -> None:
        viewport = Viewport(lines=["a.rs:1:", "x", "y"])
        regex = re.compile(r":\d+:")

        viewport.jump_to_next_match(regex)
        self.assertEqual(viewport.cursor_row, 2)


if __name__ == "__main__":
    unittest.main()
