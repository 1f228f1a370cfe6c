"""
Profile repository implementations.

SupabaseProfileRepository maps the `profiles` table to Profile models.
InMemoryProfileRepository provides the same contract for tests and local
development.
"""

from datetime import datetime
from typing import Optional, Any

from shared.exceptions import StoreError
from shared.repository import BaseRepository
from .models import Profile, PlanTier, UsageCounters, SubscriptionUpdate


PROFILES_TABLE = "profiles"

# Model field -> column for the subscription mirror
SUBSCRIPTION_COLUMNS = {
    "subscription_id": "stripe_subscription_id",
    "subscription_plan": "stripe_subscription_plan",
    "subscription_current_period_end": "stripe_subscription_current_period_end",
    "subscription_cancel_at_period_end": "stripe_subscription_cancel_at_period_end",
}


def _to_db_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class SupabaseProfileRepository(BaseRepository[Profile]):
    """
    Repository for profile data access.

    All methods return Pydantic models mapped from database rows and raise
    StoreError on any Supabase failure.

    Note: This repository does NOT perform authorization checks.
    Callers pass the user ID they already authenticated.
    """

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_by_id(self, user_id: str) -> Optional[Profile]:
        query = self._db.table(PROFILES_TABLE).select("*").eq("id", user_id).limit(1)
        result = self._execute("read", query)
        if not result.data:
            return None
        return self._map_to_profile(result.data[0])

    def get_by_subscription_id(self, subscription_id: str) -> Optional[Profile]:
        query = (
            self._db.table(PROFILES_TABLE)
            .select("*")
            .eq("stripe_subscription_id", subscription_id)
            .limit(1)
        )
        result = self._execute("read", query)
        if not result.data:
            return None
        return self._map_to_profile(result.data[0])

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    def get_or_create(self, user_id: str, monthly_post_limit: int) -> Profile:
        """
        Insert a default profile unless one exists, then read it back.

        The insert ignores primary key conflicts, so concurrent first
        requests for the same user converge on one row.
        """
        existing = self.get_by_id(user_id)
        if existing is not None:
            return existing

        data = {
            "id": user_id,
            "plan": PlanTier.FREE.value,
            "free_posts_used": 0,
            "monthly_posts_used": 0,
            "monthly_post_limit": monthly_post_limit,
        }
        query = self._db.table(PROFILES_TABLE).upsert(
            data,
            on_conflict="id",
            ignore_duplicates=True,
        )
        self._execute("create", query)

        profile = self.get_by_id(user_id)
        if profile is None:
            # Insert was accepted but the row is not visible
            raise StoreError("create", f"profile {user_id} missing after insert")
        return profile

    # -------------------------------------------------------------------------
    # Usage counters
    # -------------------------------------------------------------------------

    def compare_and_set_usage(
        self,
        user_id: str,
        expected: UsageCounters,
        new: UsageCounters,
    ) -> bool:
        """
        Conditional update on all three counter columns.

        PostgREST applies the filters and the update in one statement, so
        a concurrent writer that changed any counter makes this match zero
        rows instead of being overwritten.
        """
        data = {
            "free_posts_used": new.free_posts_used,
            "monthly_posts_used": new.monthly_posts_used,
            "last_post_reset": _to_db_value(new.last_post_reset),
        }
        query = (
            self._db.table(PROFILES_TABLE)
            .update(data)
            .eq("id", user_id)
            .eq("free_posts_used", expected.free_posts_used)
            .eq("monthly_posts_used", expected.monthly_posts_used)
        )
        if expected.last_post_reset is None:
            query = query.is_("last_post_reset", "null")
        else:
            query = query.eq("last_post_reset", expected.last_post_reset.isoformat())

        result = self._execute("update", query)
        return bool(result.data)

    # -------------------------------------------------------------------------
    # Subscription mirror
    # -------------------------------------------------------------------------

    def update_subscription(self, user_id: str, update: SubscriptionUpdate) -> bool:
        data = self._subscription_columns(update)
        if not data:
            return False
        query = self._db.table(PROFILES_TABLE).update(data).eq("id", user_id)
        result = self._execute("update", query)
        return bool(result.data)

    def update_subscription_by_subscription_id(
        self,
        subscription_id: str,
        update: SubscriptionUpdate,
    ) -> int:
        data = self._subscription_columns(update)
        if not data:
            return 0
        query = (
            self._db.table(PROFILES_TABLE)
            .update(data)
            .eq("stripe_subscription_id", subscription_id)
        )
        result = self._execute("update", query)
        return len(result.data or [])

    # -------------------------------------------------------------------------
    # Billing account
    # -------------------------------------------------------------------------

    def set_payment_customer_id(self, user_id: str, customer_id: str) -> bool:
        query = (
            self._db.table(PROFILES_TABLE)
            .update({"stripe_customer_id": customer_id})
            .eq("id", user_id)
            .is_("stripe_customer_id", "null")
        )
        result = self._execute("update", query)
        return bool(result.data)

    # -------------------------------------------------------------------------
    # Private mapping methods
    # -------------------------------------------------------------------------

    def _subscription_columns(self, update: SubscriptionUpdate) -> dict[str, Any]:
        """Map the explicitly set fields of an update to column names."""
        return {
            SUBSCRIPTION_COLUMNS[field]: _to_db_value(value)
            for field, value in update.model_dump(exclude_unset=True).items()
        }

    def _map_to_profile(self, data: dict[str, Any]) -> Profile:
        """Map database row to Profile model."""
        return Profile(
            id=str(data["id"]),
            plan=PlanTier(data.get("plan") or PlanTier.FREE.value),
            free_posts_used=data.get("free_posts_used") or 0,
            monthly_posts_used=data.get("monthly_posts_used") or 0,
            monthly_post_limit=data.get("monthly_post_limit") or 0,
            last_post_reset=data.get("last_post_reset"),
            subscription_id=data.get("stripe_subscription_id"),
            subscription_plan=data.get("stripe_subscription_plan"),
            subscription_current_period_end=data.get("stripe_subscription_current_period_end"),
            subscription_cancel_at_period_end=bool(
                data.get("stripe_subscription_cancel_at_period_end") or False
            ),
            payment_customer_id=data.get("stripe_customer_id"),
        )


class InMemoryProfileRepository:
    """
    Profile store backed by a dict.

    For testing and development. Use SupabaseProfileRepository for production.
    """

    def __init__(self, profiles: Optional[list[Profile]] = None):
        self._profiles: dict[str, Profile] = {p.id: p for p in profiles or []}

    def add(self, profile: Profile) -> None:
        """Insert or replace a profile (test helper)."""
        self._profiles[profile.id] = profile

    def get_by_id(self, user_id: str) -> Optional[Profile]:
        return self._profiles.get(user_id)

    def get_by_subscription_id(self, subscription_id: str) -> Optional[Profile]:
        for profile in self._profiles.values():
            if profile.subscription_id == subscription_id:
                return profile
        return None

    def get_or_create(self, user_id: str, monthly_post_limit: int) -> Profile:
        if user_id not in self._profiles:
            self._profiles[user_id] = Profile(id=user_id, monthly_post_limit=monthly_post_limit)
        return self._profiles[user_id]

    def compare_and_set_usage(
        self,
        user_id: str,
        expected: UsageCounters,
        new: UsageCounters,
    ) -> bool:
        profile = self._profiles.get(user_id)
        if profile is None or profile.usage != expected:
            return False
        self._profiles[user_id] = profile.model_copy(update=new.model_dump())
        return True

    def update_subscription(self, user_id: str, update: SubscriptionUpdate) -> bool:
        profile = self._profiles.get(user_id)
        if profile is None:
            return False
        self._profiles[user_id] = profile.model_copy(update=update.model_dump(exclude_unset=True))
        return True

    def update_subscription_by_subscription_id(
        self,
        subscription_id: str,
        update: SubscriptionUpdate,
    ) -> int:
        matched = [
            p.id for p in self._profiles.values() if p.subscription_id == subscription_id
        ]
        for user_id in matched:
            self.update_subscription(user_id, update)
        return len(matched)

    def set_payment_customer_id(self, user_id: str, customer_id: str) -> bool:
        profile = self._profiles.get(user_id)
        if profile is None or profile.payment_customer_id is not None:
            return False
        self._profiles[user_id] = profile.model_copy(update={"payment_customer_id": customer_id})
        return True
