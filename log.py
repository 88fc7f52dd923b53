"""
Logging setup for the fpm registry.

Loggers live under the ``fpm`` hierarchy and are rendered by Rich on stderr.
The level comes from the ``FPM_LOG_LEVEL`` environment variable and defaults
to INFO.
"""

import logging
import os
from typing import Mapping, Optional

from rich.console import Console
from rich.logging import RichHandler

from constants import LOG_LEVEL_ENV_VAR

LOGGER_NAME = "fpm"
DEFAULT_LOG_LEVEL = logging.INFO

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger under the fpm hierarchy."""
    full_name = f"{LOGGER_NAME}.{name}" if name else LOGGER_NAME
    return logging.getLogger(full_name)


def get_log_level(
    env_var_name: str = LOG_LEVEL_ENV_VAR,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """
    Read the log level from the environment.

    Args:
        env_var_name: Name of the variable holding the level name.
        environ: Environment to read from. Defaults to os.environ.

    Returns:
        The logging level. DEFAULT_LOG_LEVEL if the variable is unset or invalid.
    """
    env = os.environ if environ is None else environ
    level_name = env.get(env_var_name)
    if not level_name:
        return DEFAULT_LOG_LEVEL

    level = _LEVELS.get(level_name.strip().upper())
    if level is None:
        Console(stderr=True).print(
            f"[yellow]Invalid log level value {level_name}[/yellow]", highlight=False
        )
        return DEFAULT_LOG_LEVEL
    return level


def configure_logging(level: Optional[int] = None) -> logging.Logger:
    """
    Configure the fpm logger with a Rich handler on stderr.

    Calling this again replaces the handler instead of adding a second one.

    Args:
        level: Level to use. If None, it is read from the environment.

    Returns:
        The configured ``fpm`` logger.
    """
    if level is None:
        level = get_log_level()

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        show_time=False,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger
