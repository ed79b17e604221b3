"""
Tests for the exception handling module.
"""

import logging
from datetime import datetime

from featureflags.core.exceptions import (
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


class TestErrorSeverity:
    def test_severity_values(self):
        assert ErrorSeverity.LOW.value == "low"
        assert ErrorSeverity.MEDIUM.value == "medium"
        assert ErrorSeverity.HIGH.value == "high"
        assert ErrorSeverity.CRITICAL.value == "critical"


class TestErrorCategory:
    def test_category_values(self):
        assert ErrorCategory.STORAGE.value == "storage"
        assert ErrorCategory.VALIDATION.value == "validation"
        assert ErrorCategory.DECODE.value == "decode"
        assert ErrorCategory.CONFIGURATION.value == "configuration"
        assert ErrorCategory.UNKNOWN.value == "unknown"


class TestFeatureFlagError:
    def test_basic_creation(self):
        error = FeatureFlagError("Test error")
        assert str(error) == "Test error"
        assert error.message == "Test error"
        assert error.severity == ErrorSeverity.MEDIUM
        assert error.category == ErrorCategory.UNKNOWN
        assert error.details == {}
        assert isinstance(error.timestamp, datetime)

    def test_with_details(self):
        error = FeatureFlagError("Error with details", details={"name": "dark_mode"})
        assert error.details["name"] == "dark_mode"

    def test_to_dict(self):
        error = StorageError("store down", details={"operation": "find_exact"})
        result = error.to_dict()

        assert result["error_type"] == "StorageError"
        assert result["message"] == "store down"
        assert result["severity"] == "high"
        assert result["category"] == "storage"
        assert result["details"]["operation"] == "find_exact"
        assert "timestamp" in result


class TestSpecializedExceptions:
    def test_storage_error(self):
        error = StorageError("Connection refused")
        assert error.category == ErrorCategory.STORAGE
        assert error.severity == ErrorSeverity.HIGH

    def test_validation_error(self):
        error = FeatureValidationError("Empty name")
        assert error.category == ErrorCategory.VALIDATION
        assert error.severity == ErrorSeverity.LOW
        assert isinstance(error, ValueError)
        assert isinstance(error, FeatureFlagError)

    def test_configuration_error(self):
        error = ConfigurationError("Missing config")
        assert error.category == ErrorCategory.CONFIGURATION
        assert error.severity == ErrorSeverity.HIGH

    def test_severity_override(self):
        error = StorageError("slow", severity=ErrorSeverity.MEDIUM)
        assert error.severity == ErrorSeverity.MEDIUM

    def test_decode_warning_is_user_warning(self):
        assert issubclass(DecodeWarning, UserWarning)


class TestClassifyException:
    def test_classify_connection_error(self):
        category, severity = classify_exception(ConnectionError("refused"))
        assert category == ErrorCategory.STORAGE
        assert severity == ErrorSeverity.HIGH

    def test_classify_timeout_error(self):
        category, _ = classify_exception(TimeoutError("slow"))
        assert category == ErrorCategory.STORAGE

    def test_classify_value_error(self):
        category, severity = classify_exception(ValueError("bad"))
        assert category == ErrorCategory.VALIDATION
        assert severity == ErrorSeverity.LOW

    def test_classify_unicode_error_before_value_error(self):
        exc = UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")
        category, _ = classify_exception(exc)
        assert category == ErrorCategory.DECODE

    def test_classify_own_errors(self):
        category, severity = classify_exception(StorageError("down"))
        assert category == ErrorCategory.STORAGE
        assert severity == ErrorSeverity.HIGH

    def test_own_errors_keep_their_category(self):
        category, _ = classify_exception(FeatureValidationError("bad name"))
        assert category == ErrorCategory.VALIDATION

    def test_classify_unknown_error(self):
        category, severity = classify_exception(KeyError("missing"))
        assert category == ErrorCategory.UNKNOWN
        assert severity == ErrorSeverity.MEDIUM


class TestLogException:
    def test_returns_summary(self):
        result = log_exception(StorageError("down"), context="is_enabled")

        assert result["error_type"] == "StorageError"
        assert result["category"] == "storage"
        assert result["severity"] == "high"
        assert result["context"] == "is_enabled"

    def test_logs_at_requested_level(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="featureflags.core.exceptions"):
            log_exception(ValueError("bad"), context="enable", log_level=logging.WARNING)

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert "[VALIDATION] enable" in record.getMessage()
