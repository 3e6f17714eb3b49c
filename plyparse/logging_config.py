"""
Logging Configuration
Routes the 'plyparse' logger to stderr for the command-line tool, keeping
stdout free for the header and record listings.
"""
import logging
import sys
from typing import Optional

CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: int = logging.WARNING, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configures the logger for the 'plyparse' namespace.

    Args:
        level: Logging level (logging.DEBUG shows skipped trailing tokens
            and per-element progress)
        log_file: Optional path to also write timestamped logs to

    Returns:
        The configured 'plyparse' logger
    """
    logger = logging.getLogger("plyparse")
    logger.setLevel(level)
    logger.propagate = False

    # Calling again replaces the previous handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%H:%M:%S"))
        logger.addHandler(file_handler)

    return logger
