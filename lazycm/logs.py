"""Logging setup.

The terminal belongs to the TUI, so records go to a file under the user log
directory and never to stderr.
"""

from __future__ import annotations

import logging
from pathlib import Path

from platformdirs import user_log_dir

LOG_PATH = Path(user_log_dir("lazycm", appauthor=False)) / "lazycm.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(verbose: bool = False, path: Path | None = None) -> Path | None:
    """Send ``lazycm`` log records to ``path``; returns the path actually used.

    When the log file cannot be opened logging is disabled and ``None`` is
    returned.
    """
    log_path = path or LOG_PATH
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError:
        handler = logging.NullHandler()
        log_path = None
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        handlers=[handler],
        force=True,
    )
    return log_path
