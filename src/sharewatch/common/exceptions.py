"""Custom exceptions for ShareWatch.

Provides a hierarchy of exceptions for different error types.
All ShareWatch exceptions inherit from ShareWatchError.
"""

from typing import Any, Dict, Optional


class ShareWatchError(Exception):
    """Base exception for all ShareWatch errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        code: str = "SHAREWATCH_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(ShareWatchError):
    """Raised when configuration or fraud rules are invalid."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFIG_ERROR", details=details)


class ValidationError(ShareWatchError):
    """Raised when input validation fails."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class StoreError(ShareWatchError):
    """Raised when the persistent store fails (connection, timeout, constraint)."""

    def __init__(
        self,
        message: str,
        operation: str,
        details: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        details["operation"] = operation
        super().__init__(message, code="STORE_ERROR", details=details)


class DeviceLimitExceededError(ShareWatchError):
    """Raised when activating a device would exceed the per-user cap."""

    def __init__(
        self,
        message: str,
        user_id: str,
        active_device_count: int,
        details: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        details["user_id"] = user_id
        details["active_device_count"] = active_device_count
        self.user_id = user_id
        self.active_device_count = active_device_count
        super().__init__(message, code="DEVICE_LIMIT", details=details)


class DetectorError(ShareWatchError):
    """Raised when a fraud detector fails to evaluate history."""

    def __init__(
        self,
        message: str,
        detector_name: str,
        details: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        details["detector_name"] = detector_name
        super().__init__(message, code="DETECTOR_ERROR", details=details)
