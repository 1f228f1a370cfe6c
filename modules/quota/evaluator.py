"""
Posting quota evaluation.

Pure functions only: the post relay reads a profile, asks evaluate_quota()
whether the post may go out, and after the upstream call succeeds turns
the decision into new counter values with build_usage_update().
"""

from datetime import datetime, timezone
from typing import Optional

from dateutil.relativedelta import relativedelta

from modules.profiles.models import Profile, UsageCounters
from .models import QuotaDecision, QuotaPolicy


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def needs_monthly_reset(last_post_reset: Optional[datetime], now: datetime) -> bool:
    """
    Whether the monthly counter belongs to an earlier UTC month than `now`.

    Compares (year, month) as one pair, so December of last year is
    earlier than January of this year.
    """
    if last_post_reset is None:
        return True
    last = _as_utc(last_post_reset)
    current = _as_utc(now)
    return (last.year, last.month) < (current.year, current.month)


def next_monthly_reset(now: datetime) -> datetime:
    """Start of the next UTC month."""
    current = _as_utc(now)
    month_start = current.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return month_start + relativedelta(months=1)


def evaluate_quota(
    profile: Profile,
    now: datetime,
    policy: Optional[QuotaPolicy] = None,
) -> QuotaDecision:
    """
    Decide whether a post attempt is allowed.

    Order matters: free posts are spent first and also count towards the
    monthly total; once they are gone the monthly allotment applies.

    Args:
        profile: Current profile snapshot
        now: Time of the attempt
        policy: Posting rules (defaults to QuotaPolicy())

    Returns:
        QuotaDecision. A denial is a normal outcome, not an error.
    """
    policy = policy or QuotaPolicy()
    reset = needs_monthly_reset(profile.last_post_reset, now)
    monthly_used = 0 if reset else profile.monthly_posts_used

    if profile.free_posts_used < policy.free_post_allowance:
        return QuotaDecision(
            allowed=True,
            needs_monthly_reset=reset,
            increment_free=True,
            increment_monthly=True,
            monthly_used=monthly_used,
            monthly_limit=profile.monthly_post_limit,
        )

    if monthly_used < profile.monthly_post_limit:
        return QuotaDecision(
            allowed=True,
            needs_monthly_reset=reset,
            increment_free=False,
            increment_monthly=True,
            monthly_used=monthly_used,
            monthly_limit=profile.monthly_post_limit,
        )

    return QuotaDecision(
        allowed=False,
        needs_monthly_reset=reset,
        monthly_used=monthly_used,
        monthly_limit=profile.monthly_post_limit,
    )


def build_usage_update(
    snapshot: UsageCounters,
    decision: QuotaDecision,
    now: datetime,
    policy: Optional[QuotaPolicy] = None,
) -> UsageCounters:
    """
    Compute the counters to store after an allowed post succeeded.

    The reset and the free/monthly split are re-derived from `snapshot`
    rather than taken from the decision, so the same decision can be
    applied to a fresher read when another request has already reset the
    month or spent the last free post.
    """
    policy = policy or QuotaPolicy()
    spend_free = decision.increment_free and snapshot.free_posts_used < policy.free_post_allowance
    free_used = snapshot.free_posts_used + (1 if spend_free else 0)
    increment = 1 if decision.increment_monthly else 0

    if needs_monthly_reset(snapshot.last_post_reset, now):
        return UsageCounters(
            free_posts_used=free_used,
            monthly_posts_used=increment,
            last_post_reset=_as_utc(now),
        )

    return UsageCounters(
        free_posts_used=free_used,
        monthly_posts_used=snapshot.monthly_posts_used + increment,
        last_post_reset=snapshot.last_post_reset,
    )
