"""Shell syntax highlighting for the command preview."""

from __future__ import annotations

import functools

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import BashLexer


@functools.lru_cache(maxsize=1)
def _lexer() -> BashLexer:
    return BashLexer(stripnl=False, ensurenl=False)


@functools.lru_cache(maxsize=1)
def _formatter() -> TerminalFormatter:
    return TerminalFormatter()


@functools.lru_cache(maxsize=128)
def highlight_cmdline(cmdline: str) -> str:
    """Return ``cmdline`` colored as a shell command, on a single line."""
    if not cmdline:
        return ""
    rendered = highlight(cmdline, _lexer(), _formatter())
    return rendered.rstrip("\n")
