"""
Posts module interfaces.
"""

from typing import Protocol, Optional, runtime_checkable

from .models import CreatedPost


@runtime_checkable
class ISocialPostClient(Protocol):
    """
    Client for the social network's post endpoint.

    Implementations translate every failure into UpstreamPostError.
    """

    async def create_post(self, access_token: str, text: str) -> CreatedPost:
        """
        Publish `text` on behalf of the token's owner.

        Raises:
            UpstreamPostError: If the network refuses the post or is unreachable
        """
        ...


@runtime_checkable
class IPostService(Protocol):
    """Interface for the post relay."""

    async def create_post(
        self,
        user_id: str,
        access_token: Optional[str],
        text: str,
    ) -> CreatedPost:
        """
        Validate, check quota, publish and record usage.

        Args:
            user_id: Authenticated user ID
            access_token: Social network access token from the session
            text: Post text

        Returns:
            The published post

        Raises:
            MissingCredentialError: No access token in the session
            PostValidationError: Empty or over-length text
            QuotaExceededError: No free or monthly posts left
            UpstreamPostError: The social network refused the post
            StoreError: The profile could not be read
        """
        ...
