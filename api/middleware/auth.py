"""
JWT Authentication middleware.

Extracts the bearer session token and resolves it to an AuthenticatedUser
through the auth service.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from shared.models import AuthenticatedUser
from modules.auth.exceptions import MissingTokenError
from modules.auth.interfaces import IAuthService
from ..dependencies import get_auth_service

# Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: IAuthService = Depends(get_auth_service),
) -> AuthenticatedUser:
    """
    Dependency that requires authentication.

    Use this for endpoints that require a logged-in user.

    Usage:
        @router.post("/posts")
        async def create_post(user: AuthenticatedUser = Depends(get_current_user)):
            return {"user_id": user.id}

    Raises:
        MissingTokenError: No Authorization header
        InvalidTokenError / ExpiredTokenError: From the auth service
    """
    if credentials is None:
        raise MissingTokenError()

    return await auth.validate_token(credentials.credentials)
