"""
Profile store interface.

The post relay, the subscription reconciler and the billing service all
depend on IProfileRepository, never on Supabase directly. Tests use the
in-memory implementation.
"""

from typing import Protocol, Optional, runtime_checkable

from .models import Profile, UsageCounters, SubscriptionUpdate


@runtime_checkable
class IProfileRepository(Protocol):
    """
    Keyed record store for user profiles.

    Implementations raise StoreError when the underlying store fails.
    """

    def get_by_id(self, user_id: str) -> Optional[Profile]:
        """
        Get a profile by user ID.

        Returns:
            Profile if found, None otherwise
        """
        ...

    def get_by_subscription_id(self, subscription_id: str) -> Optional[Profile]:
        """
        Get the profile linked to a Stripe subscription.

        Returns:
            Profile if found, None otherwise
        """
        ...

    def get_or_create(self, user_id: str, monthly_post_limit: int) -> Profile:
        """
        Return the user's profile, creating it with defaults if missing.

        Creation must be safe against a concurrent creator: the loser of
        the race reads the winner's row.

        Args:
            user_id: User ID
            monthly_post_limit: Limit to store on a newly created profile
        """
        ...

    def compare_and_set_usage(
        self,
        user_id: str,
        expected: UsageCounters,
        new: UsageCounters,
    ) -> bool:
        """
        Atomically replace the usage counters if they still equal `expected`.

        Returns:
            True if the row was updated, False if it changed underneath us
        """
        ...

    def update_subscription(self, user_id: str, update: SubscriptionUpdate) -> bool:
        """
        Write the set fields of `update` onto the profile keyed by user ID.

        Returns:
            True if a profile was updated
        """
        ...

    def update_subscription_by_subscription_id(
        self,
        subscription_id: str,
        update: SubscriptionUpdate,
    ) -> int:
        """
        Write the set fields of `update` onto profiles linked to a subscription.

        Returns:
            Number of profiles updated
        """
        ...

    def set_payment_customer_id(self, user_id: str, customer_id: str) -> bool:
        """
        Store the billing customer ID only if none is stored yet.

        Returns:
            True if this call stored it, False if a value was already present
        """
        ...
