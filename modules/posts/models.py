"""
Posts module data models.
"""

from pydantic import BaseModel, Field


class CreatePostRequest(BaseModel):
    """Request to publish a post."""

    # Length is checked by the service so the error matches the
    # rest of the error taxonomy instead of a 422.
    text: str = Field(..., description="Post text")


class CreatedPost(BaseModel):
    """A post accepted by the social network."""

    id: str = Field(..., description="Post ID assigned by the social network")
    text: str = Field(..., description="Text as published")


class CreatePostResponse(BaseModel):
    """API response for a published post."""

    data: CreatedPost
    message: str = "Post published successfully"
