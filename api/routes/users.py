"""
User-related endpoints.

Provides the signed-in user's profile and posting quota.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from shared.config import get_settings
from shared.models import AuthenticatedUser
from modules.profiles.interfaces import IProfileRepository
from modules.profiles.models import Profile
from modules.quota import QuotaPolicy, needs_monthly_reset, next_monthly_reset
from ..dependencies import get_profile_repository
from ..middleware.auth import get_current_user

router = APIRouter()


class UsageSummary(BaseModel):
    """Posting quota as it applies to the next post."""

    free_posts_remaining: int
    monthly_posts_used: int
    monthly_post_limit: int
    next_reset: datetime


class SubscriptionSummary(BaseModel):
    """Mirror of the user's Stripe subscription."""

    id: Optional[str] = None
    plan: Optional[str] = None
    current_period_end: Optional[datetime] = None
    cancel_at_period_end: bool = False
    active: bool = False


class UserProfileResponse(BaseModel):
    """User profile response model."""

    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    plan: str
    usage: UsageSummary
    subscription: SubscriptionSummary


def build_usage_summary(profile: Profile, policy: QuotaPolicy, now: datetime) -> UsageSummary:
    """Usage after applying any pending monthly reset."""
    monthly_used = 0 if needs_monthly_reset(profile.last_post_reset, now) else profile.monthly_posts_used
    return UsageSummary(
        free_posts_remaining=max(policy.free_post_allowance - profile.free_posts_used, 0),
        monthly_posts_used=monthly_used,
        monthly_post_limit=profile.monthly_post_limit,
        next_reset=next_monthly_reset(now),
    )


@router.get("/me", response_model=UserProfileResponse)
async def get_current_user_profile(
    user: AuthenticatedUser = Depends(get_current_user),
    profiles: IProfileRepository = Depends(get_profile_repository),
) -> UserProfileResponse:
    """
    Get the current user's profile.

    Creates the profile on first sign-in. Requires authentication.
    """
    settings = get_settings()
    profile = profiles.get_or_create(user.id, settings.default_monthly_post_limit)
    now = datetime.now(timezone.utc)

    return UserProfileResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        plan=profile.plan.value,
        usage=build_usage_summary(profile, QuotaPolicy.from_settings(settings), now),
        subscription=SubscriptionSummary(
            id=profile.subscription_id,
            plan=profile.subscription_plan,
            current_period_end=profile.subscription_current_period_end,
            cancel_at_period_end=profile.subscription_cancel_at_period_end,
            active=profile.has_active_subscription,
        ),
    )
