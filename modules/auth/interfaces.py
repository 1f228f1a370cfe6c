"""
Authentication module interface.

Other modules should depend on IAuthService, not the concrete implementation.
This enables testing with mocks.
"""

from typing import Protocol, runtime_checkable

from shared.models import AuthenticatedUser


@runtime_checkable
class IAuthService(Protocol):
    """Interface for authentication operations."""

    async def validate_token(self, token: str) -> AuthenticatedUser:
        """
        Validate a session JWT and return the authenticated user.

        Args:
            token: Session token from the Authorization header

        Returns:
            AuthenticatedUser with user ID and social access token

        Raises:
            AuthenticationError: If token is missing, invalid or expired
        """
        ...
