"""Display-width aware text helpers.

Column measurement, tab expansion, and clipping/slicing that keep rendered
rows aligned when lines contain wide glyphs, combining marks or ANSI styles.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
DEFAULT_TAB_SIZE = 8


def char_display_width(ch: str) -> int:
    """Return terminal column width for one non-tab character.

    Combining marks consume no columns and East Asian wide/fullwidth
    characters consume two.
    """
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def display_width(text: str) -> int:
    return sum(char_display_width(ch) for ch in text)


def expand_tabs(text: str, tab_size: int) -> str:
    """Replace tabs with spaces up to the next multiple of ``tab_size`` columns.

    A tab size of 0 drops tabs and 1 turns each tab into a single space.
    """
    if "\t" not in text:
        return text
    if tab_size <= 0:
        return text.replace("\t", "")
    if tab_size == 1:
        return text.replace("\t", " ")

    out: list[str] = []
    col = 0
    for ch in text:
        if ch == "\t":
            spaces = tab_size - (col % tab_size)
            out.append(" " * spaces)
            col += spaces
        else:
            out.append(ch)
            col += char_display_width(ch)
    return "".join(out)


def width_slice(text: str, start_col: int, width: int) -> tuple[str, int, int]:
    """Cut the display-column range ``[start_col, start_col + width)`` out of ``text``.

    Returns ``(clipped, left_padding, right_padding)``. A wide glyph that
    straddles either edge is left out entirely; the paddings are the blank
    columns the caller must emit on each side to keep columns aligned.
    """
    begin, end, left_padding, right_padding = width_slice_span(text, start_col, width)
    return text[begin:end], left_padding, right_padding


def width_slice_span(text: str, start_col: int, width: int) -> tuple[int, int, int, int]:
    """Like ``width_slice`` but returns ``(begin, end, left_padding, right_padding)`` indices."""
    width = max(0, width)
    idx = 0
    n = len(text)
    remaining = max(0, start_col)
    while remaining > 0 and idx < n:
        remaining -= char_display_width(text[idx])
        idx += 1
    left_padding = -remaining if remaining < 0 else 0

    begin = idx
    budget = max(0, width - left_padding)
    while idx < n:
        w = char_display_width(text[idx])
        if w > budget:
            break
        budget -= w
        idx += 1
    return begin, idx, min(left_padding, width), budget


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns.

    ANSI escape sequences are preserved verbatim and do not count toward width.
    """
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = 0
    i = 0
    n = len(text)
    while i < n:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                out.append(match.group(0))
                i = match.end()
                continue
        w = char_display_width(text[i])
        if col + w > max_cols:
            break
        out.append(text[i])
        col += w
        i += 1
    return "".join(out)


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)
