#!/usr/bin/env python3
"""
Admission gate logging configuration

Centralized logging setup for consistent formatting across the project.
Console output always; a file handler is added once a log directory is
configured (ADMISSION_LOG_DIR or configure_root_logging(log_dir=...)).

Usage:
    from shared.log import get_logger

    logger = get_logger(__name__)
    logger.info("Gate ready")
    logger.warning("Rejected message", extra={"msg_kind": "CHAT_MESSAGE", "reason": "EmptyField"})
"""

from __future__ import annotations
import logging
import sys
from pathlib import Path
from typing import Optional, Any, TYPE_CHECKING
import os

if TYPE_CHECKING:
    from admission.core.ValidationErrors import ValidationError


LOG_FILE_NAME = "admission.log"


# ========================================
#           LOGGING FORMATTERS
# ========================================

class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output"""

    # ANSI Color codes
    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m'       # Reset
    }

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


class GenericFormatter(logging.Formatter):
    """Prefixes the message with admission context found in ``extra``."""

    def format(self, record: logging.LogRecord) -> str:
        context = []

        if hasattr(record, 'msg_kind'):
            context.append(f"kind={record.msg_kind}")
        if hasattr(record, 'reason'):
            context.append(f"reason={record.reason}")
        if getattr(record, 'field', None):
            context.append(f"field={record.field}")
        if hasattr(record, 'clock'):
            context.append(f"clock={record.clock}")

        message = super().format(record)
        if context:
            return f"[{' '.join(context)}] {message}"
        return message


# ========================================
#           LOGGING CONFIGURATION
# ========================================

_loggers_configured = set()

def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Get a configured logger for the given module.

    Args:
        name: Usually __name__ from the calling module
        level: Override log level ("DEBUG", "INFO", "WARNING", "ERROR")

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Only configure each logger once
    if name not in _loggers_configured:
        _configure_logger(logger, level)
        _loggers_configured.add(name)

    return logger


def _configure_logger(logger: logging.Logger, level: Optional[str] = None,
                      log_dir: Optional[Path] = None) -> None:
    """Configure a logger with appropriate handlers and formatters"""

    logger.setLevel(_get_log_level(level))

    # Clear existing handlers to avoid duplicates
    logger.handlers.clear()

    _add_console_handler(logger, colored=_is_development())

    log_dir = log_dir or _env_log_dir()
    if log_dir is not None:
        _add_file_handler(logger, log_dir)

    # Prevent duplicate messages from parent loggers
    logger.propagate = False


def _get_log_level(level: Optional[str] = None) -> int:
    """Determine appropriate log level"""

    level = level or os.getenv('ADMISSION_LOG_LEVEL')
    if level:
        return getattr(logging, level.upper(), logging.INFO)

    # Default based on environment
    return logging.DEBUG if _is_development() else logging.INFO


def _is_development() -> bool:
    """Detect if we're in development mode"""
    return (
        os.getenv('PYTHON_ENV', '').lower() in ['dev', 'development'] or
        'pytest' in sys.modules
    )


def _env_log_dir() -> Optional[Path]:
    value = os.getenv('ADMISSION_LOG_DIR')
    return Path(value).expanduser() if value else None


def _add_console_handler(logger: logging.Logger, colored: bool = True) -> None:
    """Add console handler with appropriate formatter"""

    fmt = '[%(levelname)-8s][%(asctime)s][%(name)-5s]: %(message)s'
    handler = logging.StreamHandler(sys.stderr)

    if colored and _supports_color():
        formatter: logging.Formatter = ColoredFormatter(
            fmt=fmt,
            datefmt='%H:%M:%S'
        )
    else:
        formatter = GenericFormatter(
            fmt=fmt,
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)


def _add_file_handler(logger: logging.Logger, log_dir: Path) -> None:
    """Add file handler writing <log_dir>/admission.log"""

    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_dir / LOG_FILE_NAME, encoding="utf-8")

    formatter = GenericFormatter(
        fmt='%(asctime)s | %(name)-30s | %(levelname)-8s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    handler.setFormatter(formatter)
    logger.addHandler(handler)


def _supports_color() -> bool:
    """Check if terminal supports color output"""

    # stderr must be a terminal
    if not (hasattr(sys.stderr, "isatty") and sys.stderr.isatty()):
        return False

    # TERM should not be dumb
    if os.getenv("TERM", "") == "dumb":
        return False

    if sys.platform == "win32":
        # On modern Windows terminals, ANSI colors are supported
        return os.getenv("ANSICON") is not None or os.getenv("WT_SESSION") is not None or os.getenv("TERM_PROGRAM") == "vscode"

    return True

# ========================================
#           CONVENIENCE FUNCTIONS
# ========================================

def configure_root_logging(level: str = "INFO", log_dir: Optional[Path] = None) -> None:
    """
    Configure root logging for the entire application.
    Call this once at application startup.

    Args:
        level: Root log level ("DEBUG", "INFO", "WARNING", "ERROR")
        log_dir: Optional directory for admission.log
    """
    root_logger = logging.getLogger()
    _configure_logger(root_logger, level, log_dir)

    # Module loggers were configured at import time; bring them in line
    for name in _loggers_configured:
        _configure_logger(logging.getLogger(name), level, log_dir)


def log_admission(logger: logging.Logger, level: str, message: str,
                  error: Optional["ValidationError"] = None,
                  **context: Any) -> None:
    """
    Log an admission decision with structured context.

    Args:
        logger: Logger instance
        level: Log level ("debug", "info", "warning", "error")
        message: Log message
        error: Rejection verdict for automatic context extraction
        **context: Additional context fields (msg_kind, clock, ...)

    Example:
        log_admission(logger, "warning", "Rejected inbound message",
                      error=verdict, msg_kind="CHAT_MESSAGE", clock=msg.clock)
    """

    extra_context = {}

    # Extract context from the verdict
    if error is not None:
        extra_context.update({
            'reason': error.kind.value,
            'field': error.field,
        })

    # Add additional context
    extra_context.update(context)

    log_func = getattr(logger, level.lower())
    log_func(message, extra=extra_context)
