"""Result lists: viewports, the drill-down frame stack, and editable profile lists."""

from .frames import Frame, FrameStack
from .profile import Profile
from .string_list import StringList
from .viewport import Viewport

__all__ = ["Frame", "FrameStack", "Profile", "StringList", "Viewport"]
