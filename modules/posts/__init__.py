"""
Posts module.

Relays user posts to the social network under the quota rules.

Public API:
- IPostService: Interface for the post relay
- ISocialPostClient: Interface for the social network client
- CreatedPost: A published post
- Post exceptions: PostValidationError, UpstreamPostError, etc.
"""

from .interfaces import IPostService, ISocialPostClient
from .models import CreatePostRequest, CreatePostResponse, CreatedPost
from .exceptions import (
    PostValidationError,
    MissingCredentialError,
    UpstreamPostError,
    UpstreamErrorKind,
)

__all__ = [
    # Interfaces
    "IPostService",
    "ISocialPostClient",
    # Models
    "CreatePostRequest",
    "CreatePostResponse",
    "CreatedPost",
    # Exceptions
    "PostValidationError",
    "MissingCredentialError",
    "UpstreamPostError",
    "UpstreamErrorKind",
]
