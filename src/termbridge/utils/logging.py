"""Logging setup utilities for termbridge.

Configures the ``termbridge`` logger hierarchy from the logging section
of the settings.
"""

from __future__ import annotations

import logging
import sys

from termbridge.config.settings import LoggingConfig

# third-party loggers that are chatty at DEBUG
_NOISY_LOGGERS = ("websockets", "uvicorn.access")


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Configure logging for the termbridge application.

    Installs a stderr handler and, if ``config.file`` is set, a file
    handler, both using the configured format. Calling this again
    replaces the handlers installed by the previous call.

    Args:
        config: Logging configuration. If None, uses defaults
                (INFO level, stderr output).
    """
    if config is None:
        config = LoggingConfig()

    level = getattr(logging, config.level.upper(), logging.INFO)
    root_logger = logging.getLogger("termbridge")
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(config.format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if config.file:
        file_handler = logging.FileHandler(config.file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))

    root_logger.info("Logging initialized at %s level", config.level)
