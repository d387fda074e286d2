"""
Logging setup for claimcheck.

One package-level logger (``claimcheck``) carries the handlers; modules log
through ``logging.getLogger(__name__)`` and inherit them.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

PACKAGE_LOGGER = 'claimcheck'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# HTTP and SDK loggers stay at WARNING unless DEBUG is requested
QUIET_LOGGERS = ('urllib3', 'httpx', 'openai')


def _resolve_level(level: str) -> int:
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Invalid log level '{level}'")
    return resolved


def _build_handlers(log_file: Optional[str], console: bool) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler(sys.stdout))
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))
    return handlers


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    console: bool = True
) -> logging.Logger:
    """
    Configure the ``claimcheck`` logger.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file that receives the same records as the console
        console: Whether to log to stdout

    Returns:
        The package logger
    """
    numeric_level = _resolve_level(level)
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(numeric_level)

    # Calling setup twice must not duplicate output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in _build_handlers(log_file, console):
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    quiet_level = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger nested under the ``claimcheck`` namespace."""
    if name == PACKAGE_LOGGER or name.startswith(f'{PACKAGE_LOGGER}.'):
        return logging.getLogger(name)
    return logging.getLogger(f'{PACKAGE_LOGGER}.{name}')
