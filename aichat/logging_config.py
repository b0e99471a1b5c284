"""Logging setup for the aichat CLI.

The level is decided once at the command-line boundary and applied to
the ``aichat`` logger tree; library modules only ever call
``logging.getLogger(__name__)``.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVEL_ENV = "LOG_LEVEL"

_LEVELS: dict[str, int] = {
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "TRACE": logging.DEBUG,
}


def resolve_log_level(verbose: bool, env_value: str | None = None) -> int:
    """``--verbose`` wins; otherwise LOG_LEVEL, defaulting to WARNING."""
    if verbose:
        return logging.DEBUG
    return _LEVELS.get((env_value or "").strip().upper(), logging.WARNING)


def configure_logging(level: int, console: Console | None = None) -> logging.Logger:
    """Attach a RichHandler on stderr to the ``aichat`` logger."""
    logger = logging.getLogger("aichat")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    # LiteLLM logs every request at INFO; keep it quiet unless debugging
    logging.getLogger("LiteLLM").setLevel(
        logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    )
    return logger
