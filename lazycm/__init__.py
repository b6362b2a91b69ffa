"""lazycm: turn the output of a shell command into a navigable worklist.

Only ``main`` is exported here; the runtime lives in submodules.
"""

from __future__ import annotations


def main(argv=None):
    """Run the command-line interface, importing it on first use."""
    from .cli import main as _main

    return _main(argv)


__all__ = ["main"]
