"""
Exception handling utilities for feature flag evaluation.

Provides:
- Custom exception hierarchy for storage, validation and configuration
- A non-fatal warning category for undecodable stored values
- Error classification and logging
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Type

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"  # Caller mistake, nothing to recover
    MEDIUM = "medium"
    HIGH = "high"  # Backend unavailable or misconfigured
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Categories for error classification."""

    STORAGE = "storage"  # Record store unreachable or rejected a write
    VALIDATION = "validation"  # Bad name, scope, value or predicate
    DECODE = "decode"  # Stored payload could not be decoded
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


class FeatureFlagError(Exception):
    """Base exception for all feature flag errors."""

    def __init__(
        self,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.severity = severity
        self.category = category
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "severity": self.severity.value,
            "category": self.category.value,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class StorageError(FeatureFlagError):
    """The record store is unreachable or rejected an operation."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            severity=kwargs.pop("severity", ErrorSeverity.HIGH),
            category=ErrorCategory.STORAGE,
            **kwargs,
        )


class FeatureValidationError(FeatureFlagError, ValueError):
    """Invalid feature name, scope, value or computed definition."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            severity=kwargs.pop("severity", ErrorSeverity.LOW),
            category=ErrorCategory.VALIDATION,
            **kwargs,
        )


class ConfigurationError(FeatureFlagError):
    """Error in configuration."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            severity=kwargs.pop("severity", ErrorSeverity.HIGH),
            category=ErrorCategory.CONFIGURATION,
            **kwargs,
        )


class DecodeWarning(UserWarning):
    """A stored value is not valid JSON; the raw string is returned instead."""


# Exception Mapping for Classification

EXCEPTION_MAPPING: Dict[Type[Exception], tuple[ErrorCategory, ErrorSeverity]] = {
    ConnectionError: (ErrorCategory.STORAGE, ErrorSeverity.HIGH),
    TimeoutError: (ErrorCategory.STORAGE, ErrorSeverity.MEDIUM),
    # Subclasses before their bases: first match wins
    UnicodeDecodeError: (ErrorCategory.DECODE, ErrorSeverity.LOW),
    ValueError: (ErrorCategory.VALIDATION, ErrorSeverity.LOW),
    TypeError: (ErrorCategory.VALIDATION, ErrorSeverity.LOW),
    PermissionError: (ErrorCategory.CONFIGURATION, ErrorSeverity.HIGH),
    FileNotFoundError: (ErrorCategory.CONFIGURATION, ErrorSeverity.MEDIUM),
}


def classify_exception(exc: Exception) -> tuple[ErrorCategory, ErrorSeverity]:
    """Classify an exception into category and severity."""
    # Our own errors carry their classification
    if isinstance(exc, FeatureFlagError):
        return exc.category, exc.severity

    for exc_type, (category, severity) in EXCEPTION_MAPPING.items():
        if isinstance(exc, exc_type):
            return category, severity

    return ErrorCategory.UNKNOWN, ErrorSeverity.MEDIUM


def log_exception(
    exc: Exception,
    context: str = "",
    log_level: int = logging.ERROR,
    include_traceback: bool = False,
) -> Dict[str, Any]:
    """
    Log an exception with proper classification.

    Args:
        exc: The exception to log
        context: Context string describing where the error occurred
        log_level: Logging level to use
        include_traceback: Whether to include the traceback

    Returns:
        Dictionary describing the logged error
    """
    category, severity = classify_exception(exc)

    message = f"[{category.value.upper()}] {context}: {type(exc).__name__}: {exc}"
    logger.log(log_level, message, exc_info=include_traceback)

    return {
        "error_type": type(exc).__name__,
        "message": str(exc),
        "category": category.value,
        "severity": severity.value,
        "context": context,
    }
