"""
Billing module interfaces.

IBillingGateway is the only place that talks to Stripe. The reconciler and
the billing service receive one at construction, so tests swap in a fake.
"""

from typing import Any, Optional, Protocol, runtime_checkable

from shared.models import AuthenticatedUser
from .models import CheckoutSession, PortalSession, SubscriptionDetails


@runtime_checkable
class IBillingGateway(Protocol):
    """Interface to the payment processor."""

    def verify_event(self, payload: bytes, signature: Optional[str]) -> dict[str, Any]:
        """
        Verify a webhook signature and decode the event.

        Args:
            payload: Raw request body, exactly as received
            signature: Value of the Stripe-Signature header

        Returns:
            The decoded event payload

        Raises:
            WebhookVerificationError: If the signature is missing or wrong
            BillingEventError: If the body is not a JSON object
        """
        ...

    def retrieve_subscription(self, subscription_id: str) -> SubscriptionDetails:
        """
        Fetch the current state of a subscription.

        Raises:
            PaymentProviderError: If the Stripe call fails
        """
        ...

    def create_customer(
        self,
        user_id: str,
        email: Optional[str] = None,
        name: Optional[str] = None,
    ) -> str:
        """
        Create a Stripe customer tagged with the user ID.

        Returns:
            The new customer ID
        """
        ...

    def create_checkout_session(
        self,
        customer_id: str,
        price_id: str,
        user_id: str,
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSession:
        """Create a subscription-mode checkout session."""
        ...

    def create_portal_session(self, customer_id: str, return_url: str) -> PortalSession:
        """Create a billing portal session."""
        ...


@runtime_checkable
class IBillingService(Protocol):
    """Interface for user-facing billing operations."""

    async def create_checkout_session(self, user: AuthenticatedUser) -> CheckoutSession:
        """
        Start a subscription purchase.

        Creates the user's Stripe customer on first use.

        Raises:
            BillingConfigurationError: If no price is configured
            PaymentProviderError: If a Stripe call fails
        """
        ...

    async def create_portal_session(self, user: AuthenticatedUser) -> PortalSession:
        """
        Open the Stripe billing portal for the user.

        Raises:
            NoBillingAccountError: If the user never started a checkout
            PaymentProviderError: If the Stripe call fails
        """
        ...
