"""Capture-template rendering.

A command template such as ``vim +\\2 \\1`` is filled from the first match
of a regex against the selected line. "No match" is an ordinary outcome
(``None``); a pattern that does not compile raises ``RegexError``.
"""

from __future__ import annotations

import functools
import re

_TOKEN_RE = re.compile(r"\\(\d+)")


class RegexError(ValueError):
    """Raised when a user supplied pattern fails to compile."""

    def __init__(self, pattern: str, message: str) -> None:
        super().__init__(message)
        self.pattern = pattern
        self.message = message

    def __str__(self) -> str:
        return f"Regex error: {self.message}"


@functools.lru_cache(maxsize=64)
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)


def compile_regex(pattern: str) -> re.Pattern[str]:
    try:
        return _compile(pattern)
    except re.error as exc:
        raise RegexError(pattern, str(exc)) from exc


def _substitute(match: re.Match[str], template: str) -> str:
    group_count = match.re.groups

    def replace_token(token: re.Match[str]) -> str:
        digits = token.group(1)
        # Longest digit prefix naming a group wins: ``\12`` with one group is
        # group 1 followed by a literal "2".
        for end in range(len(digits), 0, -1):
            index = int(digits[:end])
            if 1 <= index <= group_count:
                captured = match.group(index)
                if captured is None:
                    return token.group(0)
                return captured + digits[end:]
        return token.group(0)

    return _TOKEN_RE.sub(replace_token, template)


def render_cmdline(line: str, template: str, regex: re.Pattern[str]) -> str | None:
    """Fill ``template`` from the first match of ``regex`` in ``line``.

    Tokens of groups that did not take part in the match stay literal.
    """
    match = regex.search(line)
    if match is None:
        return None
    return _substitute(match, template)


def capture_spans(line: str, regex: re.Pattern[str]) -> list[tuple[int, int]]:
    """Return character spans of the non-empty capture groups of the first match."""
    match = regex.search(line)
    if match is None:
        return []
    spans: list[tuple[int, int]] = []
    for index in range(1, regex.groups + 1):
        start, end = match.span(index)
        if start >= 0 and end > start:
            spans.append((start, end))
    return spans
