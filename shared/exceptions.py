"""
Base exception classes for the Scribe backend.

Each module should define its own exceptions that inherit from these bases.
Every class carries an http_status hint so the API layer can render any
ScribeError without knowing the module it came from.
"""

from typing import Optional, Any


class ScribeError(Exception):
    """
    Base exception for all Scribe errors.

    All custom exceptions should inherit from this class.
    """

    http_status: int = 500

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

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(ScribeError):
    """Input validation failed."""

    http_status = 400


class AuthenticationError(ScribeError):
    """Authentication failed (invalid or missing credentials)."""

    http_status = 401


class QuotaExceededError(ScribeError):
    """
    The user has no posting quota left.

    This is a normal outcome rather than a fault; it is not retryable
    until the monthly counter resets or the plan changes.
    """

    http_status = 429

    def __init__(
        self,
        user_id: str,
        monthly_used: int,
        monthly_limit: int,
    ):
        super().__init__(
            "Posting limit reached",
            code="QUOTA_EXCEEDED",
            details={
                "user_id": user_id,
                "monthly_used": monthly_used,
                "monthly_limit": monthly_limit,
            },
        )


class StoreError(ScribeError):
    """Reading or writing the profile store failed."""

    def __init__(self, operation: str, message: str):
        super().__init__(
            f"Profile store {operation} failed: {message}",
            code="STORE_ERROR",
            details={"operation": operation},
        )


class ExternalServiceError(ScribeError):
    """Error communicating with an external service."""

    http_status = 502

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
