"""
Authentication module data models.
"""

from typing import Optional
from pydantic import BaseModel, Field


class JWTPayload(BaseModel):
    """
    Decoded session token payload.

    The sign-in boundary completes the OAuth exchange with the social
    network and mints this token; the provider's access token rides
    along in `access_token`.
    """

    sub: str = Field(..., description="Subject (user ID)")
    email: Optional[str] = Field(None, description="User's email")
    name: Optional[str] = Field(None, description="Display name")
    access_token: Optional[str] = Field(None, description="Social network access token")
    exp: int = Field(..., description="Expiration timestamp")
    iat: int = Field(..., description="Issued at timestamp")
    aud: str = Field(default="authenticated", description="Audience")

    model_config = {"extra": "ignore"}
