"""
Posts module exceptions.

UpstreamPostError carries the social network's own message and code in
`details` and maps each failure kind to the closest local HTTP status.
"""

from enum import Enum
from typing import Optional

from shared.exceptions import (
    AuthenticationError,
    ExternalServiceError,
    ValidationError,
)


class PostValidationError(ValidationError):
    """Raised when post text is empty or too long. The user must edit it."""

    def __init__(self, reason: str, length: Optional[int] = None):
        details = {"reason": reason}
        if length is not None:
            details["length"] = length
        super().__init__(
            f"Bad Message: {reason}",
            code="INVALID_POST",
            details=details,
        )


class MissingCredentialError(AuthenticationError):
    """Raised when the session carries no social network access token."""

    def __init__(self):
        super().__init__(
            "Social account not connected. Sign in again.",
            code="MISSING_CREDENTIAL",
        )


class UpstreamErrorKind(str, Enum):
    """Ways the social network can refuse a post."""

    RATE_LIMITED = "rate_limited"
    DUPLICATE = "duplicate"
    TOO_LONG = "too_long"
    AUTH_INVALID = "auth_invalid"
    UNAVAILABLE = "unavailable"  # network failure, timeout, unreadable reply
    REJECTED = "rejected"


_STATUS_BY_KIND = {
    UpstreamErrorKind.RATE_LIMITED: 429,
    UpstreamErrorKind.DUPLICATE: 409,
    UpstreamErrorKind.TOO_LONG: 400,
    UpstreamErrorKind.AUTH_INVALID: 401,
    UpstreamErrorKind.UNAVAILABLE: 502,
}


class UpstreamPostError(ExternalServiceError):
    """Raised when the social network does not accept a post."""

    def __init__(
        self,
        kind: UpstreamErrorKind,
        message: str,
        upstream_status: Optional[int] = None,
        upstream_code: Optional[int] = None,
        upstream_type: Optional[str] = None,
    ):
        super().__init__(
            message,
            service="social",
            code=f"UPSTREAM_{kind.value.upper()}",
            details={
                "kind": kind.value,
                "upstream_status": upstream_status,
                "upstream_code": upstream_code,
                "upstream_type": upstream_type,
            },
        )
        self.kind = kind
        self.upstream_status = upstream_status

        if kind in _STATUS_BY_KIND:
            self.http_status = _STATUS_BY_KIND[kind]
        elif upstream_status is not None and 400 <= upstream_status < 500:
            self.http_status = upstream_status
        else:
            self.http_status = 502
