"""
Quota module.

Decides whether a user may post and how their counters change.

Public API:
- evaluate_quota: Decide one post attempt
- build_usage_update: Counters to store after a successful post
- needs_monthly_reset / next_monthly_reset: UTC month boundary helpers
- QuotaPolicy, QuotaDecision: Models
"""

from .models import QuotaPolicy, QuotaDecision
from .evaluator import (
    evaluate_quota,
    build_usage_update,
    needs_monthly_reset,
    next_monthly_reset,
)

__all__ = [
    "QuotaPolicy",
    "QuotaDecision",
    "evaluate_quota",
    "build_usage_update",
    "needs_monthly_reset",
    "next_monthly_reset",
]
