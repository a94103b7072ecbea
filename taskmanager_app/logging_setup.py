# taskmanager_app/logging_setup.py
from __future__ import annotations

import logging
import sys

# Third-party loggers that only reach the console at WARNING+.
_QUIET_LOGGERS = ("passlib", "sqlalchemy.engine", "multipart", "uvicorn.access")


def setup_logging(level: str | int = logging.INFO) -> None:
    """
    Configure the root logger with a single timestamped stderr handler.

    Safe to call more than once: existing root handlers are replaced, so
    re-running it (tests, reloads) never duplicates output.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)

    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(fmt)
    root.addHandler(ch)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logging.captureWarnings(True)
