"""Screen composition for the worklist TUI.

``compose_screen`` is a pure function of the application state: it returns
the full ANSI frame plus the position of the text cursor (``None`` keeps it
hidden). ``render_screen`` writes that frame through a caller supplied
writer.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from ..capture import capture_spans
from ..runtime.dispatch import Preview
from ..runtime.settings import selected_action, settings_rows
from ..runtime.state import AppState, BottomPurpose, Focus, Mode
from ..text import clip_ansi_line, display_width, width_slice, width_slice_span
from ..ui_theme import DEFAULT_THEME, UITheme
from ..worklist.string_list import StringList
from ..worklist.viewport import Viewport
from .highlight import highlight_cmdline

SETTINGS_TITLE = "Key map: Enter rebinds, Delete clears, Esc closes"
BOTTOM_PROMPTS = {
    BottomPurpose.CMDLINE: "Command: ",
    BottomPurpose.SEARCH: "/",
}
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f-\x9f]")


@dataclass(frozen=True)
class Layout:
    """Pane geometry for one terminal size.

    ``list_rows`` is the number of item rows of each profile list and is 0
    while the profile pane is hidden.
    """

    columns: int
    lines: int
    body_rows: int
    output_width: int
    output_rows: int
    list_width: int
    list_rows: int
    settings_rows: int


@dataclass(frozen=True)
class Screen:
    text: str
    cursor: tuple[int, int] | None = None


def compute_layout(state: AppState, columns: int, lines: int) -> Layout:
    columns = max(1, columns)
    lines = max(2, lines)
    body_rows = lines - 1
    if state.profile_pane and columns >= 3:
        output_width = max(1, columns * 2 // 3)
        list_width = max(1, columns - output_width - 1)
        list_rows = max(1, body_rows // 2 - 1)
    else:
        output_width = columns
        list_width = 0
        list_rows = 0
    return Layout(
        columns=columns,
        lines=lines,
        body_rows=body_rows,
        output_width=output_width,
        output_rows=body_rows,
        list_width=list_width,
        list_rows=list_rows,
        settings_rows=max(1, body_rows - 1),
    )


def selected_with_ansi(text: str, theme: UITheme = DEFAULT_THEME) -> str:
    """Apply selection styling without discarding existing ANSI colors."""
    if not text:
        return text
    return theme.reverse + text.replace(theme.reset, theme.reset + theme.reverse) + theme.reset


def _sanitize(text: str) -> str:
    """Replace control characters one-for-one so character offsets stay valid."""
    return _CONTROL_RE.sub("?", text)


def _is_terminator(line: str) -> bool:
    return line.startswith("-- Execution ") and line.endswith(" --")


def _output_row(
    line: str,
    width: int,
    scroll_col: int,
    regex: re.Pattern[str] | None,
    selected: bool,
    theme: UITheme,
) -> str:
    begin, end, left_pad, right_pad = width_slice_span(line, scroll_col, width)
    visible = _sanitize(line[begin:end])
    if _is_terminator(line):
        body = theme.terminator + visible + theme.reset
    elif regex is not None:
        captured = [False] * (end - begin)
        for start, stop in capture_spans(line, regex):
            for idx in range(max(start, begin), min(stop, end)):
                captured[idx - begin] = True
        out: list[str] = []
        active = False
        for ch, flag in zip(visible, captured):
            if flag != active:
                out.append(theme.capture if flag else theme.reset)
                active = flag
            out.append(ch)
        if active:
            out.append(theme.reset)
        body = "".join(out)
    else:
        body = visible
    row = " " * left_pad + body + " " * right_pad
    if selected:
        return selected_with_ansi(row, theme)
    return row


def _output_pane(state: AppState, layout: Layout, theme: UITheme) -> list[str]:
    viewport = state.frames.viewport
    regex = state.profile.current_regex_or_none()
    rows: list[str] = []
    for row in range(layout.output_rows):
        idx = viewport.scroll_row + row
        if idx >= len(viewport.lines):
            rows.append(" " * layout.output_width)
            continue
        rows.append(
            _output_row(
                viewport.lines[idx],
                layout.output_width,
                viewport.scroll_col,
                regex,
                selected=idx == viewport.cursor_row,
                theme=theme,
            )
        )
    return rows


def edit_view(buffer: str, cursor: int, width: int) -> tuple[str, int]:
    """Return the visible part of an edit buffer and the cursor column inside it."""
    width = max(1, width)
    cursor_col = display_width(buffer[:cursor])
    start_col = max(0, cursor_col - width + 1)
    visible, left_pad, right_pad = width_slice(_sanitize(buffer), start_col, width)
    return " " * left_pad + visible + " " * right_pad, cursor_col - start_col


def _pad(text: str, width: int) -> str:
    visible, _, right_pad = width_slice(_sanitize(text), 0, width)
    return visible + " " * right_pad


def _list_pane(
    title: str,
    string_list: StringList,
    focused: bool,
    width: int,
    item_rows: int,
    first_screen_row: int,
    column: int,
    theme: UITheme,
) -> tuple[list[str], tuple[int, int] | None]:
    title_style = theme.pane_title_focused if focused else theme.pane_title
    rows = [title_style + _pad(title, width) + theme.reset]
    cursor: tuple[int, int] | None = None
    viewport = string_list.viewport
    for row in range(item_rows):
        idx = viewport.scroll_row + row
        if idx >= len(viewport.lines):
            rows.append(" " * width)
            continue
        if idx == viewport.cursor_row and string_list.editing:
            text, cursor_col = edit_view(string_list.edit_field.buffer, string_list.edit_field.cursor, width)
            rows.append(text)
            cursor = (first_screen_row + len(rows) - 1, column + cursor_col)
            continue
        text = _pad(viewport.lines[idx], width)
        if idx == viewport.cursor_row:
            text = selected_with_ansi(text, theme) if focused else theme.prompt + text + theme.reset
        rows.append(text)
    return rows, cursor


def _profile_pane(state: AppState, layout: Layout, theme: UITheme) -> tuple[list[str], tuple[int, int] | None]:
    column = layout.output_width + 1
    regex_rows, regex_cursor = _list_pane(
        "Regexes",
        state.profile.regex_list,
        state.focus is Focus.REGEXES,
        layout.list_width,
        layout.list_rows,
        0,
        column,
        theme,
    )
    cmd_item_rows = max(0, layout.body_rows - len(regex_rows) - 1)
    cmd_rows, cmd_cursor = _list_pane(
        "Commands",
        state.profile.cmd_list,
        state.focus is Focus.CMDS,
        layout.list_width,
        cmd_item_rows,
        len(regex_rows),
        column,
        theme,
    )
    rows = (regex_rows + cmd_rows)[: layout.body_rows]
    rows.extend(" " * layout.list_width for _ in range(layout.body_rows - len(rows)))
    cursor = regex_cursor or cmd_cursor
    if cursor is not None and cursor[0] >= layout.body_rows:
        cursor = None
    return rows, cursor


def _settings_panel(state: AppState, layout: Layout, theme: UITheme) -> list[str]:
    viewport: Viewport = state.settings.viewport
    entries = settings_rows(state.bindings)
    rows = [theme.pane_title_focused + _pad(SETTINGS_TITLE, layout.columns) + theme.reset]
    for row in range(layout.settings_rows):
        idx = viewport.scroll_row + row
        if idx >= len(entries):
            rows.append(" " * layout.columns)
            continue
        text = _pad(entries[idx], layout.columns)
        rows.append(selected_with_ansi(text, theme) if idx == viewport.cursor_row else text)
    return rows[: layout.body_rows]


def _bottom_line(
    state: AppState,
    preview: Preview,
    layout: Layout,
    theme: UITheme,
) -> tuple[str, tuple[int, int] | None]:
    width = layout.columns
    if state.mode is Mode.EDITING_BOTTOM_FIELD and state.bottom_purpose is not None:
        prompt = BOTTOM_PROMPTS[state.bottom_purpose]
        prompt_width = min(display_width(prompt), max(0, width - 1))
        text, cursor_col = edit_view(state.bottom_field.buffer, state.bottom_field.cursor, width - prompt_width)
        line = theme.prompt + prompt[:prompt_width] + theme.reset + text
        return line, (layout.lines - 1, prompt_width + cursor_col)
    if state.mode is Mode.SELECTING_KEY_FOR_REBINDING and state.settings.waiting_for_chord:
        message = f"Press a key for {selected_action(state).value} (Esc cancels)"
        return theme.prompt + _pad(message, width) + theme.reset, None
    if state.status_message:
        style = theme.status_error if state.status_is_error else theme.status_info
        return style + _pad(state.status_message, width) + theme.reset, None
    if preview.error is not None:
        return theme.status_error + _pad(preview.error, width) + theme.reset, None
    if preview.cmdline:
        return clip_ansi_line(highlight_cmdline(_sanitize(preview.cmdline)), width) + theme.reset, None
    return " " * width, None


def compose_screen(
    state: AppState,
    preview: Preview,
    layout: Layout,
    theme: UITheme = DEFAULT_THEME,
) -> Screen:
    """Build the full frame for ``state``; never mutates it."""
    cursor: tuple[int, int] | None = None
    if state.mode is Mode.SELECTING_KEY_FOR_REBINDING:
        body = _settings_panel(state, layout, theme)
    else:
        body = _output_pane(state, layout, theme)
        if layout.list_width:
            side, cursor = _profile_pane(state, layout, theme)
            divider = theme.divider + "│" + theme.reset
            body = [left + divider + right for left, right in zip(body, side)]
    bottom, bottom_cursor = _bottom_line(state, preview, layout, theme)
    if bottom_cursor is not None:
        cursor = bottom_cursor
    out = ["\033[H\033[J"]
    out.append("\r\n".join(body))
    out.append("\r\n")
    out.append(bottom)
    return Screen(text="".join(out), cursor=cursor)


def render_screen(
    write: Callable[[str], None],
    state: AppState,
    preview: Preview,
    layout: Layout,
    theme: UITheme = DEFAULT_THEME,
) -> None:
    screen = compose_screen(state, preview, layout, theme)
    if screen.cursor is None:
        write(screen.text + "\033[?25l")
        return
    row, col = screen.cursor
    write(f"{screen.text}\033[{row + 1};{col + 1}H\033[?25h")


__all__ = [
    "Layout",
    "Screen",
    "compose_screen",
    "compute_layout",
    "edit_view",
    "render_screen",
    "selected_with_ansi",
]
