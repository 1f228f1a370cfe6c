"""
Post API endpoints.
"""

from fastapi import APIRouter, Depends

from api.middleware.auth import get_current_user
from api.dependencies import get_post_service
from shared.models import AuthenticatedUser

from .interfaces import IPostService
from .models import CreatePostRequest, CreatePostResponse

router = APIRouter()


@router.post("", response_model=CreatePostResponse, status_code=201)
async def create_post(
    request: CreatePostRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IPostService = Depends(get_post_service),
) -> CreatePostResponse:
    """
    Publish a post to the user's social account.

    Failures are rendered by the ScribeError handler:
    400 invalid text, 401 missing credential, 429 quota exhausted,
    409/429/400/401/502 mapped from the social network.
    """
    post = await service.create_post(user.id, user.access_token, request.text)
    return CreatePostResponse(data=post)
