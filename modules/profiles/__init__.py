"""
Profiles module.

Owns the per-user `profiles` record: plan, usage counters and the
subscription mirror.

Public API:
- IProfileRepository: Interface for profile store access
- Profile: Per-user record
- UsageCounters: Counter snapshot used for conditional commits
- SubscriptionUpdate: Partial update of subscription fields
"""

from .interfaces import IProfileRepository
from .models import Profile, PlanTier, UsageCounters, SubscriptionUpdate
from .repository import SupabaseProfileRepository, InMemoryProfileRepository

__all__ = [
    # Interface
    "IProfileRepository",
    # Models
    "Profile",
    "PlanTier",
    "UsageCounters",
    "SubscriptionUpdate",
    # Implementations
    "SupabaseProfileRepository",
    "InMemoryProfileRepository",
]
