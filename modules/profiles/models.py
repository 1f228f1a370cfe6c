"""
Profile module data models.

A Profile is the single per-user record shared by the post relay (usage
counters) and the subscription reconciler (subscription mirror fields).
The two writers never touch each other's fields.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class PlanTier(str, Enum):
    """User plan tiers."""

    FREE = "free"
    PAID = "paid"


class UsageCounters(BaseModel):
    """
    The quota-related slice of a profile.

    Used both as the snapshot read before a post and as the new values
    written after it, so a commit can be made conditional on the snapshot.
    """

    free_posts_used: int = Field(default=0, ge=0)
    monthly_posts_used: int = Field(default=0, ge=0)
    last_post_reset: Optional[datetime] = None

    model_config = {"frozen": True}


class SubscriptionUpdate(BaseModel):
    """
    Partial update of the subscription mirror fields.

    Only fields that were explicitly set are written, so a handler that
    refreshes the period end leaves the plan untouched.
    """

    subscription_id: Optional[str] = None
    subscription_plan: Optional[str] = None
    subscription_current_period_end: Optional[datetime] = None
    subscription_cancel_at_period_end: Optional[bool] = None


class Profile(BaseModel):
    """Per-user plan, usage counters and subscription state."""

    id: str = Field(..., description="User ID")
    plan: PlanTier = Field(default=PlanTier.FREE, description="Plan tier")

    # Usage counters (owned by the post relay)
    free_posts_used: int = Field(default=0, ge=0)
    monthly_posts_used: int = Field(default=0, ge=0)
    monthly_post_limit: int = Field(default=0, ge=0)
    last_post_reset: Optional[datetime] = Field(
        None,
        description="When monthly_posts_used was last reset (UTC)",
    )

    # Subscription mirror (owned by the reconciler)
    subscription_id: Optional[str] = None
    subscription_plan: Optional[str] = None
    subscription_current_period_end: Optional[datetime] = None
    subscription_cancel_at_period_end: bool = False

    # Billing account, written once on first checkout
    payment_customer_id: Optional[str] = None

    @property
    def usage(self) -> UsageCounters:
        """Snapshot of the usage counters."""
        return UsageCounters(
            free_posts_used=self.free_posts_used,
            monthly_posts_used=self.monthly_posts_used,
            last_post_reset=self.last_post_reset,
        )

    @property
    def has_active_subscription(self) -> bool:
        """Whether the mirror shows a live paid subscription."""
        return bool(self.subscription_id) and self.subscription_plan not in (None, PlanTier.FREE.value)
