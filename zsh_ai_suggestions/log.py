"""Logging setup.

Modules log through ``logging.getLogger(__name__)``; this module wires the
package logger to a rich handler on stderr once at start-up.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "zsh_ai_suggestions"

# Level names accepted in ZSH_AI_SUGGESTIONS_LOG_LEVEL. None disables output.
LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "none": None,
    "off": None,
}


def parse_level(name: Optional[str]) -> Optional[int]:
    """Map a level name to a logging level.

    Unknown or empty names fall back to INFO. Returns None for "off"/"none".
    """
    key = (name or "").strip().lower()
    if key not in LEVELS:
        return logging.INFO
    return LEVELS[key]


def setup_logging(level_name: Optional[str], console: Optional[Console] = None) -> logging.Logger:
    """Configure the package logger.

    Args:
        level_name: Level name from configuration
        console: Console to write to (defaults to stderr)

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = False

    level = parse_level(level_name)
    if level is None:
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.CRITICAL + 1)
        return logger

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger
