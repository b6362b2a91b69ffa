"""Public runtime orchestration entry points.

This package groups the interactive bootstrap (``run_app``) and the
lower-level event loop contracts used by tests and composition code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .loop import EventLoop, LoopCallbacks, LoopTiming


def run_app(*args, **kwargs):
    """Lazily import the app entrypoint to avoid package-import cycles."""
    from .app import run_app as _run_app

    return _run_app(*args, **kwargs)


def __getattr__(name: str):
    if name in {"EventLoop", "LoopCallbacks", "LoopTiming"}:
        from . import loop as _loop

        return getattr(_loop, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "EventLoop",
    "LoopCallbacks",
    "LoopTiming",
    "run_app",
]
