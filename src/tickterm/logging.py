"""Logging configuration for tickterm.

Only file output is supported: anything written to stdout/stderr while a
session is active lands on the alternate screen.
"""

import logging
from pathlib import Path

from tickterm.config import Config

LOGGER_NAME = "tickterm"

_logger: logging.Logger | None = None


def setup_logging(config: Config) -> logging.Logger:
    """Set up the ``tickterm`` logger from configuration.

    Idempotent: a second call returns the logger configured by the first.

    Args:
        config: Configuration object with log settings.

    Returns:
        Configured logger instance.
    """
    global _logger

    if _logger is not None:
        return _logger

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, config.log_level.upper(), logging.WARNING))
    logger.handlers.clear()

    if config.log_file:
        log_path = Path(config.log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # 2026-01-27 10:30:45 [INFO] message
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
        formatter.datefmt = "%Y-%m-%d %H:%M:%S"

        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    else:
        logger.addHandler(logging.NullHandler())

    logger.propagate = False

    _logger = logger
    return logger


def reset_logging() -> None:
    """Reset logging state. Used for testing."""
    global _logger
    if _logger is not None:
        for handler in _logger.handlers:
            handler.close()
        _logger.handlers.clear()
        _logger.addHandler(logging.NullHandler())
        _logger.propagate = True
        _logger = None
