"""
Quota module data models.
"""

from pydantic import BaseModel, Field

from shared.config import Settings


class QuotaPolicy(BaseModel):
    """
    Fixed posting rules shared by every plan.

    Free posts are a lifetime bonus consumed before the monthly allotment.
    """

    free_post_allowance: int = Field(default=2, ge=0, description="Lifetime free posts")
    max_post_length: int = Field(default=280, ge=1, description="Maximum characters per post")

    model_config = {"frozen": True}

    @classmethod
    def from_settings(cls, settings: Settings) -> "QuotaPolicy":
        return cls(
            free_post_allowance=settings.free_post_allowance,
            max_post_length=settings.max_post_length,
        )


class QuotaDecision(BaseModel):
    """
    Outcome of evaluating one post attempt against a profile.

    monthly_used is the count after applying any pending monthly reset,
    i.e. the value that was compared against monthly_limit.
    """

    allowed: bool
    needs_monthly_reset: bool
    increment_free: bool = False
    increment_monthly: bool = False
    monthly_used: int = 0
    monthly_limit: int = 0

    model_config = {"frozen": True}
