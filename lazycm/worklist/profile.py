"""Regex and command-template lists that drive the command preview."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from ..capture import RegexError, compile_regex
from .string_list import StringList

DEFAULT_REGEXES = [r"(\/?\b.*?):(\d+):"]
DEFAULT_CMDS = ["vim +\\2 \\1", "emacs -nw +\\2 \\1"]


@dataclass
class Profile:
    regex_list: StringList = field(default_factory=StringList)
    cmd_list: StringList = field(default_factory=StringList)

    @classmethod
    def initial(cls) -> Profile:
        return cls(regex_list=StringList.of(DEFAULT_REGEXES), cmd_list=StringList.of(DEFAULT_CMDS))

    def current_pattern(self) -> str | None:
        return self.regex_list.current_item()

    def current_regex(self) -> re.Pattern[str] | None:
        """Compile the current pattern; ``None`` when the list is empty.

        Raises ``RegexError`` when the pattern does not compile.
        """
        pattern = self.current_pattern()
        if pattern is None:
            return None
        return compile_regex(pattern)

    def current_regex_or_none(self) -> re.Pattern[str] | None:
        try:
            return self.current_regex()
        except RegexError:
            return None

    def current_template(self) -> str | None:
        return self.cmd_list.current_item()
