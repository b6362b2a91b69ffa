"""Drill-down stack of result viewports."""

from __future__ import annotations

from dataclasses import dataclass, field

from .viewport import Viewport


@dataclass
class Frame:
    """One level of the drill-down stack.

    ``command`` is the command line whose output fills the viewport; the
    welcome frame has none.
    """

    viewport: Viewport = field(default_factory=Viewport)
    command: str | None = None

    @classmethod
    def for_command(cls, command: str, header: str) -> Frame:
        return cls(viewport=Viewport(lines=[header]), command=command)


class FrameStack:
    """Ordered frames; the last one is displayed.

    Once seeded the stack is never empty: ``pop`` refuses to remove the last
    frame.
    """

    def __init__(self, frames: list[Frame] | None = None) -> None:
        self._frames: list[Frame] = list(frames or [])

    def __len__(self) -> int:
        return len(self._frames)

    def __iter__(self):
        return iter(self._frames)

    @property
    def top(self) -> Frame:
        if not self._frames:
            raise IndexError("frame stack is empty")
        return self._frames[-1]

    @property
    def viewport(self) -> Viewport:
        return self.top.viewport

    def push(self, frame: Frame) -> None:
        self._frames.append(frame)

    def pop(self) -> Frame | None:
        if len(self._frames) <= 1:
            return None
        return self._frames.pop()

    def replace_top(self, frame: Frame) -> None:
        if self._frames:
            self._frames[-1] = frame
        else:
            self._frames.append(frame)

    def reset(self, frame: Frame) -> None:
        self._frames = [frame]
