"""Logging configuration for ftpfacade.

Provides package logging with credential redaction so passwords given
to login calls or embedded in FTP URLs are never written to logs.
"""

import logging
import re
import sys
from pathlib import Path
from typing import Optional


LOGGER_NAME = "ftpfacade"

# Credential patterns to redact from logs
CREDENTIAL_PATTERNS = [
    # Password in various formats
    (re.compile(r'(password["\s:=]+)[^\s,}\]]+', re.IGNORECASE), r'\1[REDACTED]'),
    (re.compile(r'(passwd["\s:=]+)[^\s,}\]]+', re.IGNORECASE), r'\1[REDACTED]'),
    (re.compile(r'(PASS )\S+'), r'\1[REDACTED]'),
    # FTP URLs with credentials
    (re.compile(r'(ftps?://)[^:/@\s]+:[^@\s]+@'), r'\1[REDACTED]@'),
]


class CredentialRedactingFormatter(logging.Formatter):
    """Formatter that masks credentials in log messages."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for pattern, replacement in CREDENTIAL_PATTERNS:
            message = pattern.sub(replacement, message)
        return message


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    console: bool = True
) -> logging.Logger:
    """
    Configure the ftpfacade logger.

    Args:
        level: Logging level (default INFO)
        log_file: Optional file path for log output
        console: Whether to output to stderr (default True)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Clear any existing handlers
    logger.handlers.clear()

    formatter = CredentialRedactingFormatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
