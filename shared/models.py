"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class AuthenticatedUser(BaseModel):
    """
    Represents an authenticated user in the system.

    This model is populated from the session JWT and made available
    to route handlers via dependency injection.

    The social network access credential travels with the user so the
    post relay can publish on their behalf. It is excluded from repr
    so it never ends up in logs.
    """

    id: str = Field(..., description="User ID")
    email: Optional[str] = Field(None, description="User's email address, if shared")
    name: Optional[str] = Field(None, description="Display name from the identity provider")
    access_token: Optional[str] = Field(
        None,
        description="Social network OAuth access token",
        repr=False,
    )

    last_sign_in: Optional[datetime] = Field(None, description="Token issue time")

    model_config = {
        "frozen": True,  # Make immutable for safety
        "extra": "ignore",  # Ignore extra fields from JWT
    }
