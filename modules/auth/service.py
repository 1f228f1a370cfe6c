"""
Authentication service implementation.

Validates HS256 session tokens issued by the sign-in boundary.
"""

from datetime import datetime, timezone
from typing import Optional
import jwt

from shared.config import get_settings
from shared.models import AuthenticatedUser

from .interfaces import IAuthService
from .models import JWTPayload
from .exceptions import (
    InvalidTokenError,
    ExpiredTokenError,
    MissingTokenError,
)


class AuthService(IAuthService):
    """Implementation of the authentication service."""

    def __init__(self, jwt_secret: Optional[str] = None, audience: Optional[str] = None):
        settings = get_settings()
        self._secret = jwt_secret if jwt_secret is not None else settings.auth_jwt_secret
        self._audience = audience or settings.auth_jwt_audience

    async def validate_token(self, token: str) -> AuthenticatedUser:
        if not token:
            raise MissingTokenError()

        if not self._secret:
            raise InvalidTokenError("Server authentication not configured")

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=["HS256"],
                audience=self._audience,
            )
        except jwt.ExpiredSignatureError:
            raise ExpiredTokenError()
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid token: {e}")

        jwt_payload = JWTPayload(**payload)

        return AuthenticatedUser(
            id=jwt_payload.sub,
            email=jwt_payload.email,
            name=jwt_payload.name,
            access_token=jwt_payload.access_token,
            last_sign_in=datetime.fromtimestamp(jwt_payload.iat, tz=timezone.utc),
        )
