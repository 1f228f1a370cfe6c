"""
Fixtures for API tests.

Every test gets a fresh app whose auth service trusts the test signing
secret and whose profile store is in memory.
"""

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from api.dependencies import get_auth_service, get_profile_repository
from modules.auth.service import AuthService


@pytest.fixture
def app(jwt_secret, profile_store):
    """Create a fresh app for each test."""
    app = create_app()
    app.dependency_overrides[get_auth_service] = lambda: AuthService(
        jwt_secret=jwt_secret,
        audience="authenticated",
    )
    app.dependency_overrides[get_profile_repository] = lambda: profile_store
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)
