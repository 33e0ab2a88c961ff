"""Loggers for the ``mb`` pipeline.

Every component logs under ``monobuild.<component>`` (``monobuild.impact``,
``monobuild.builder`` and so on). At INFO the ``mb`` command reports which
targets it builds or skips; ``--verbose`` switches to DEBUG, which adds one
line per trigger decision ("file X is dependency of target Y").
"""

from __future__ import annotations

import logging
from pathlib import Path

_ROOT_LOGGER = "monobuild"
_CONSOLE_FORMAT = "[monobuild] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(component: str | None = None) -> logging.Logger:
    """Logger for one pipeline component, or the ``monobuild`` root when unnamed."""
    return logging.getLogger(f"{_ROOT_LOGGER}.{component}" if component else _ROOT_LOGGER)


def configure_logging(*, verbose: bool = False, log_file: Path | None = None) -> logging.Logger:
    """Route ``mb`` log records to stderr and, with ``--log-file``, to a file.

    Build output from the children goes to stdout/stderr directly and never
    passes through these handlers.
    """
    level = logging.DEBUG if verbose else logging.INFO
    root = logging.getLogger(_ROOT_LOGGER)
    root.setLevel(level)
    root.propagate = False
    # main() may run several times in one process (tests, embedding).
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    root.addHandler(console)

    if log_file is not None:
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(level)
        sink.setFormatter(logging.Formatter(_FILE_FORMAT))
        root.addHandler(sink)
    return root


__all__ = ["configure_logging", "get_logger"]
