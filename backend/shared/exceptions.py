"""
Base exception classes for the Safar backend.

Each module should define its own exceptions that inherit from these bases.
This enables consistent error handling across the application.
"""

from typing import Optional, Any


class SafarError(Exception):
    """
    Base exception for all Safar errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}


class ValidationError(SafarError):
    """Input validation failed."""

    pass


class ExternalServiceError(SafarError):
    """Error communicating with an external service."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service


class StorageUnavailableError(SafarError):
    """The durable key-value store could not be read or written."""

    def __init__(
        self,
        message: str = "Local storage is unavailable",
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code or "STORAGE_UNAVAILABLE", details)


class QuotaExceededError(StorageUnavailableError):
    """A write would exceed the store's capacity."""

    def __init__(self, key: str, limit: int):
        super().__init__(
            f"Storage quota exceeded writing {key} (limit {limit} bytes)",
            code="QUOTA_EXCEEDED",
            details={"key": key, "limit": limit},
        )
