"""Console and file logging for monobuild.

Build progress (``◐ ui: vite build``, ``✓ ui: Cached!``) is logged at INFO and
printed bare so it reads like the output of the build scripts it interleaves
with. Every other level carries a ``[monobuild] LEVEL`` prefix.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

ROOT_LOGGER = "monobuild"

PROGRESS_FORMAT = "%(message)s"
DIAGNOSTIC_FORMAT = "[monobuild] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class ProgressFormatter(logging.Formatter):
    """Bare messages for INFO records, prefixed ones for everything else."""

    def __init__(self) -> None:
        super().__init__(DIAGNOSTIC_FORMAT)
        self._progress = logging.Formatter(PROGRESS_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno == logging.INFO:
            return self._progress.format(record)
        return super().format(record)


def get_logger(component: Optional[str] = None) -> logging.Logger:
    """Logger for ``component`` under the ``monobuild`` root."""
    if not component:
        return logging.getLogger(ROOT_LOGGER)
    return logging.getLogger(f"{ROOT_LOGGER}.{component}")


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route monobuild records to stderr, plus ``log_file`` when given.

    Calling this again replaces the handlers installed by a previous call.
    """
    level = logging.DEBUG if verbose else logging.INFO
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    root.propagate = False
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setFormatter(ProgressFormatter())
    root.addHandler(console)

    if log_file is not None:
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setFormatter(logging.Formatter(FILE_FORMAT))
        root.addHandler(sink)

    return root


__all__ = ["ProgressFormatter", "configure_logging", "get_logger"]
