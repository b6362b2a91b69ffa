"""UI palette used by the renderers.

The command preview keeps its own pygments colors; this palette only covers
the chrome, list selection and match highlighting.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by renderers."""

    divider: str
    reverse: str
    reset: str
    capture: str
    pane_title: str
    pane_title_focused: str
    terminator: str
    status_info: str
    status_error: str
    prompt: str


DEFAULT_THEME = UITheme(
    divider="\033[2m",
    reverse="\033[7m",
    reset="\033[0m",
    capture="\033[1;38;5;214m",
    pane_title="\033[2;38;5;250m",
    pane_title_focused="\033[1;38;5;81m",
    terminator="\033[2;38;5;250m",
    status_info="\033[38;5;229m",
    status_error="\033[1;31m",
    prompt="\033[1;38;5;81m",
)
