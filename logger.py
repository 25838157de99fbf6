# logger.py
import logging
from config import LOG_FILE

_logger = logging.getLogger("devbox")

if not _logger.handlers:
    _logger.setLevel(logging.INFO)
    _logger.propagate = False
    formatter = logging.Formatter("%(asctime)s %(message)s", "%Y-%m-%d %H:%M:%S")

    stream = logging.StreamHandler()
    stream.setFormatter(formatter)
    _logger.addHandler(stream)

    if LOG_FILE:
        handler = logging.FileHandler(LOG_FILE)
        handler.setFormatter(formatter)
        _logger.addHandler(handler)


def log(message, level="info"):
    """Write a status line to the console and, if configured, the log file."""
    _logger.log(logging.getLevelName(level.upper()), message)
