"""
Core module for shared infrastructure: errors and logging.
"""

from .exceptions import (
    ConfigurationError,
    DecodeWarning,
    ErrorCategory,
    ErrorSeverity,
    FeatureFlagError,
    FeatureValidationError,
    StorageError,
    classify_exception,
    log_exception,
)

from .logging_config import (
    ColoredFormatter,
    ExtraDataAdapter,
    JSONFormatter,
    OperationMetrics,
    get_logger,
    log_operation,
    setup_logging,
)

__all__ = [
    # Exceptions
    "ConfigurationError",
    "DecodeWarning",
    "ErrorCategory",
    "ErrorSeverity",
    "FeatureFlagError",
    "FeatureValidationError",
    "StorageError",
    "classify_exception",
    "log_exception",
    # Logging
    "ColoredFormatter",
    "ExtraDataAdapter",
    "JSONFormatter",
    "OperationMetrics",
    "get_logger",
    "log_operation",
    "setup_logging",
]
