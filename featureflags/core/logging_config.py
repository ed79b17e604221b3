"""
Structured Logging Configuration.

Provides enhanced logging with:
- JSON structured output for production
- Colored console output for development
- Context managers for operation timing

Usage:
    from featureflags.core.logging_config import setup_logging, get_logger, log_operation

    # Setup at application start
    setup_logging(level="INFO", json_format=False)

    # Get a logger bound to a scope
    logger = get_logger(__name__, scope="beta")

    # Track operation timing
    with log_operation("copy_scope"):
        service.copy_to("beta")
"""

from __future__ import annotations

import json
import logging
import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add extra fields
        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if record.levelno >= logging.WARNING:
            log_data["location"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(log_data, default=str)


class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        levelname = record.levelname
        record.levelname = f"{color}{levelname}{self.RESET}"

        extra = ""
        if hasattr(record, "extra_data") and record.extra_data:
            extra_str = " | ".join(f"{k}={v}" for k, v in record.extra_data.items())
            extra = f" [{extra_str}]"

        try:
            formatted = super().format(record)
        finally:
            record.levelname = levelname
        return formatted + extra


class ExtraDataAdapter(logging.LoggerAdapter):
    """Logger adapter that supports extra data."""

    def process(self, msg, kwargs):
        extra = kwargs.get("extra", {})
        if "extra_data" not in extra:
            extra["extra_data"] = {}
        extra["extra_data"].update(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_file: Optional[str] = None,
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_format: Use JSON format for structured logging
        log_file: Optional file path for logging
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    # Diagnostics go to stderr so CLI output on stdout stays parseable
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)

    if json_format:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(
            ColoredFormatter(
                "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                datefmt="%H:%M:%S",
            )
        )

    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)


def get_logger(name: str, **extra) -> logging.Logger:
    """
    Get a logger with optional extra context.

    Args:
        name: Logger name (usually __name__)
        **extra: Extra context to include in all logs

    Returns:
        Logger or LoggerAdapter with extra context
    """
    logger = logging.getLogger(name)
    if extra:
        return ExtraDataAdapter(logger, extra)
    return logger


@dataclass
class OperationMetrics:
    """Metrics for an operation."""

    name: str
    start_time: float = 0.0
    end_time: float = 0.0
    duration_ms: float = 0.0
    success: bool = True
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.name,
            "duration_ms": self.duration_ms,
            "success": self.success,
            "error": self.error,
        }


@contextmanager
def log_operation(
    name: str,
    logger: Optional[logging.Logger] = None,
    level: int = logging.DEBUG,
):
    """
    Context manager to log operation timing.

    Args:
        name: Operation name
        logger: Logger to use (defaults to root)
        level: Log level

    Yields:
        OperationMetrics

    Example:
        with log_operation("copy_scope") as metrics:
            copied = resolver.copy_scope("global", "beta")
        print(f"Took {metrics.duration_ms}ms")
    """
    log = logger or logging.getLogger()
    metrics = OperationMetrics(name=name, start_time=time.perf_counter())

    try:
        yield metrics
        metrics.success = True
    except Exception as e:
        metrics.success = False
        metrics.error = str(e)
        raise
    finally:
        metrics.end_time = time.perf_counter()
        metrics.duration_ms = (metrics.end_time - metrics.start_time) * 1000

        if log.isEnabledFor(level):
            record = log.makeRecord(
                log.name,
                level,
                "",
                0,
                f"Operation '{name}' completed in {metrics.duration_ms:.2f}ms",
                (),
                None,
            )
            record.extra_data = metrics.to_dict()
            log.handle(record)
