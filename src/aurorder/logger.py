"""Functions for logging."""

import logging
import sys


class LevelFormatter(logging.Formatter):
    """Prefix each message with its level name in lower case, as in ``warning: ...``."""

    def __init__(self) -> None:
        super().__init__("%(message)s")

    def format(self, record: logging.LogRecord) -> str:
        return f"{record.levelname.lower()}: {super().format(record)}"


def setup_logger(level: str) -> None:
    """Configure the root logger so all modules log to stderr, keeping stdout for results."""
    level_name = level.upper()
    level_value = getattr(logging, level_name, logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(level_value)
    # Remove all handlers associated with the root logger (avoid duplicate logs)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(LevelFormatter())
    root_logger.addHandler(handler)
