"""Logging configuration for Remote Transfer.

All modules log through children of the "remote_transfer" logger.
setup_logging attaches handlers whose formatter redacts credentials,
whether they appear in a URI, a settings dump or an FTP PASS command.
"""

import logging
import re
import sys
from pathlib import Path
from typing import List, Optional, Pattern, Tuple


LOGGER_NAME = "remote_transfer"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# (pattern, replacement) pairs applied to every formatted record
PII_PATTERNS: List[Tuple[Pattern, str]] = [
    (re.compile(r'(password["\s:=]+)[^\s,}\]]+', re.IGNORECASE), r'\1[REDACTED]'),
    (re.compile(r'(passwd["\s:=]+)[^\s,}\]]+', re.IGNORECASE), r'\1[REDACTED]'),
    (re.compile(r'\b(PASS )\S+'), r'\1[REDACTED]'),
    (re.compile(r'(s?ftp://)[^:/@\s]+:[^@\s]+@', re.IGNORECASE), r'\1[REDACTED]@'),
]


def redact(message: str) -> str:
    """Replace every credential found in message with [REDACTED]."""
    for pattern, replacement in PII_PATTERNS:
        message = pattern.sub(replacement, message)
    return message


class PIIRedactingFormatter(logging.Formatter):
    """Formatter that redacts credentials after formatting."""

    def format(self, record: logging.LogRecord) -> str:
        return redact(super().format(record))


def _handler(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(PIIRedactingFormatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    console: bool = True
) -> logging.Logger:
    """
    Configure the application logger.

    Replaces any handlers installed by an earlier call.

    Args:
        level: Logging level (default INFO)
        log_file: Optional file to append log output to
        console: Log to stderr (stdout carries payloads)

    Returns:
        The "remote_transfer" logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    if console:
        logger.addHandler(_handler(logging.StreamHandler(sys.stderr), level))

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.addHandler(_handler(logging.FileHandler(log_file, encoding="utf-8"), level))

    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Get the application logger or one of its children."""
    return logging.getLogger(name)
