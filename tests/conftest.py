"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
"""

import pytest
from datetime import datetime, timezone, timedelta
from typing import Optional
import jwt  # PyJWT

from api.dependencies import reset_container
from modules.profiles.repository import InMemoryProfileRepository


# Test JWT secret (only for testing)
TEST_JWT_SECRET = "test-secret-key-for-testing-only"
TEST_ACCESS_TOKEN = "social-oauth-token"


def create_test_token(
    user_id: str = "test-user-123",
    email: Optional[str] = "test@example.com",
    expired: bool = False,
    access_token: Optional[str] = TEST_ACCESS_TOKEN,
    audience: str = "authenticated",
    secret: str = TEST_JWT_SECRET,
) -> str:
    """
    Create a session JWT for authentication.

    Args:
        user_id: User ID to include in the token
        email: Email to include in the token
        expired: If True, creates an expired token
        access_token: Social network credential carried by the session
        audience: Token audience
        secret: Signing secret

    Returns:
        JWT token string
    """
    now = datetime.now(timezone.utc)
    exp = now - timedelta(hours=1) if expired else now + timedelta(hours=1)

    payload = {
        "sub": user_id,
        "aud": audience,
        "exp": int(exp.timestamp()),
        "iat": int(now.timestamp()),
    }
    if email is not None:
        payload["email"] = email
    if access_token is not None:
        payload["access_token"] = access_token
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset the service container before and after each test."""
    reset_container()
    yield
    reset_container()


@pytest.fixture
def test_user_id() -> str:
    """Provide a consistent test user ID."""
    return "test-user-123"


@pytest.fixture
def auth_token(test_user_id: str) -> str:
    """Create a valid auth token for testing."""
    return create_test_token(user_id=test_user_id)


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers with a valid token."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def profile_store() -> InMemoryProfileRepository:
    """Empty in-memory profile store."""
    return InMemoryProfileRepository()


@pytest.fixture
def token_factory():
    """Expose create_test_token to tests (they cannot import conftest)."""
    return create_test_token


@pytest.fixture
def jwt_secret() -> str:
    return TEST_JWT_SECRET
