"""Logging setup for mail-bridge.

Two kinds of log file are written to ~/Library/Logs/, both rotated:
- mail-bridge-error.log: every ERROR+ record from any mail_bridge module
- mail-bridge-{account}.log: actions taken on one account (archive, delete,
  mark read, reply checks), so a user can audit what was changed where

Usage:
    from mail_bridge.logging import setup_logging, get_account_logger, get_error_logger

    setup_logging(log_level="DEBUG")
    get_account_logger("iCloud").info("Archived 'Invoice 42'")
    get_error_logger().error("Mail.app stopped answering")
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

DEFAULT_LOG_DIR = Path.home() / "Library" / "Logs"
DEFAULT_MAX_BYTES = 5 * 1024 * 1024  # 5MB
DEFAULT_BACKUP_COUNT = 3

ROOT_LOGGER_NAME = "mail_bridge"
ACCOUNT_LOGGER_PREFIX = "mail_bridge.account"
ERROR_LOGGER_NAME = "mail_bridge.errors"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
ACCOUNT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

_log_dir: Path = DEFAULT_LOG_DIR
_max_bytes: int = DEFAULT_MAX_BYTES
_backup_count: int = DEFAULT_BACKUP_COUNT
_error_handler: RotatingFileHandler | None = None
_account_loggers: dict[str, logging.Logger] = {}
_initialized: bool = False


def _rotating_handler(path: Path, fmt: str) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=_max_bytes, backupCount=_backup_count)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def setup_logging(
    log_dir: Path | None = None,
    log_level: str = "INFO",
    max_bytes: int | None = None,
    backup_count: int | None = None,
) -> None:
    """Initialize the logging system.

    Safe to call more than once; later calls replace the error log handler.

    Args:
        log_dir: Directory for log files (default: ~/Library/Logs)
        log_level: Minimum level for the mail_bridge logger (default: INFO)
        max_bytes: Max size per log file before rotation (default: 5MB)
        backup_count: Number of backup files to keep (default: 3)
    """
    global _log_dir, _max_bytes, _backup_count, _error_handler, _initialized

    _log_dir = log_dir or DEFAULT_LOG_DIR
    _max_bytes = max_bytes or DEFAULT_MAX_BYTES
    _backup_count = backup_count if backup_count is not None else DEFAULT_BACKUP_COUNT
    _log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    if _error_handler is not None:
        root_logger.removeHandler(_error_handler)
        _error_handler.close()

    _error_handler = _rotating_handler(_log_dir / "mail-bridge-error.log", LOG_FORMAT)
    _error_handler.setLevel(logging.ERROR)
    root_logger.addHandler(_error_handler)

    _initialized = True


def get_error_logger() -> logging.Logger:
    """Get the shared error logger (ERROR+ level, all accounts).

    Returns:
        Logger whose records land in mail-bridge-error.log
    """
    if not _initialized:
        setup_logging()

    logger = logging.getLogger(ERROR_LOGGER_NAME)
    logger.setLevel(logging.ERROR)
    return logger


def get_account_logger(account: str) -> logging.Logger:
    """Get or create the action logger for one Mail.app account.

    Records still propagate to the mail_bridge logger, so errors also land
    in mail-bridge-error.log.

    Args:
        account: Name of the Mail.app account (e.g., "iCloud")

    Returns:
        Logger that writes to mail-bridge-{account}.log
    """
    if account in _account_loggers:
        return _account_loggers[account]

    if not _initialized:
        setup_logging()

    # Account names become file names
    safe_name = "".join(c if c.isalnum() else "-" for c in account)

    logger = logging.getLogger(f"{ACCOUNT_LOGGER_PREFIX}.{safe_name}")
    logger.setLevel(logging.INFO)
    if not logger.handlers:
        logger.addHandler(
            _rotating_handler(_log_dir / f"mail-bridge-{safe_name}.log", ACCOUNT_LOG_FORMAT)
        )

    _account_loggers[account] = logger
    return logger


def reset_logging() -> None:
    """Reset logging state (primarily for testing)."""
    global _account_loggers, _error_handler, _initialized

    for logger in _account_loggers.values():
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)

    if _error_handler is not None:
        logging.getLogger(ROOT_LOGGER_NAME).removeHandler(_error_handler)
        _error_handler.close()

    _account_loggers = {}
    _error_handler = None
    _initialized = False
