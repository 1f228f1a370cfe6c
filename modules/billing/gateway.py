"""
Stripe gateway.

Wraps a stripe.StripeClient scoped to one configuration (secret key,
webhook secret, network timeout). Every Stripe failure surfaces as
PaymentProviderError.
"""

import json
import logging
from typing import Any, Optional

import stripe

from modules.profiles.models import PlanTier

from .events import subscription_period_end, subscription_price_id
from .exceptions import (
    BillingConfigurationError,
    BillingEventError,
    PaymentProviderError,
    WebhookVerificationError,
)
from .models import CheckoutSession, PortalSession, SubscriptionDetails

logger = logging.getLogger(__name__)

# Subscriptions in these states no longer grant the paid plan
ENDED_SUBSCRIPTION_STATUSES = frozenset({"canceled", "incomplete_expired", "unpaid"})


def _as_dict(obj: Any) -> dict[str, Any]:
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return dict(obj)


class StripeBillingGateway:
    """IBillingGateway implementation backed by the Stripe API."""

    def __init__(
        self,
        secret_key: str,
        webhook_secret: str,
        timeout: float = 30.0,
        client: Optional[stripe.StripeClient] = None,
    ):
        """
        Initialize the gateway.

        Args:
            secret_key: Stripe secret API key
            webhook_secret: Signing secret of the webhook endpoint
            timeout: Ceiling in seconds for each Stripe request
            client: Pre-built client (tests pass a mock)
        """
        self._secret_key = secret_key
        self._webhook_secret = webhook_secret
        self._timeout = timeout
        self._client = client

    @property
    def client(self) -> stripe.StripeClient:
        """The Stripe client, created on first use."""
        if self._client is None:
            if not self._secret_key:
                raise BillingConfigurationError("SCRIBE_STRIPE_SECRET_KEY")
            self._client = stripe.StripeClient(
                self._secret_key,
                http_client=stripe.RequestsClient(timeout=self._timeout),
            )
        return self._client

    # -------------------------------------------------------------------------
    # Webhooks
    # -------------------------------------------------------------------------

    def verify_event(self, payload: bytes, signature: Optional[str]) -> dict[str, Any]:
        if not self._webhook_secret:
            raise BillingConfigurationError("SCRIBE_STRIPE_WEBHOOK_SECRET")
        if not signature:
            raise WebhookVerificationError("Missing Stripe signature")

        try:
            body = payload.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("Rejected webhook with a body that is not UTF-8")
            raise WebhookVerificationError("Webhook body is not valid UTF-8")

        try:
            stripe.WebhookSignature.verify_header(
                body,
                signature,
                self._webhook_secret,
                tolerance=stripe.Webhook.DEFAULT_TOLERANCE,
            )
        except stripe.SignatureVerificationError as e:
            logger.warning(f"Rejected webhook with bad signature: {e}")
            raise WebhookVerificationError()

        try:
            event = json.loads(body)
        except ValueError:
            raise BillingEventError("Webhook body is not valid JSON")
        if not isinstance(event, dict):
            raise BillingEventError("Webhook body is not an event object")
        return event

    # -------------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------------

    def retrieve_subscription(self, subscription_id: str) -> SubscriptionDetails:
        try:
            subscription = self.client.subscriptions.retrieve(subscription_id)
        except stripe.StripeError as e:
            raise PaymentProviderError(
                f"Could not retrieve subscription {subscription_id}",
                stripe_error=str(e),
            ) from e
        return self._map_subscription(_as_dict(subscription))

    def _map_subscription(self, data: dict[str, Any]) -> SubscriptionDetails:
        """Map a Stripe subscription object to SubscriptionDetails."""
        if data.get("status") in ENDED_SUBSCRIPTION_STATUSES:
            plan = PlanTier.FREE.value
        else:
            plan = subscription_price_id(data) or ""
        return SubscriptionDetails(
            id=data["id"],
            plan=plan,
            current_period_end=subscription_period_end(data),
            cancel_at_period_end=bool(data.get("cancel_at_period_end", False)),
        )

    # -------------------------------------------------------------------------
    # Customers and sessions
    # -------------------------------------------------------------------------

    def create_customer(
        self,
        user_id: str,
        email: Optional[str] = None,
        name: Optional[str] = None,
    ) -> str:
        params: dict[str, Any] = {"metadata": {"user_id": user_id}}
        if email:
            params["email"] = email
        if name:
            params["name"] = name

        try:
            customer = self.client.customers.create(params=params)
        except stripe.StripeError as e:
            raise PaymentProviderError("Could not create Stripe customer", stripe_error=str(e)) from e
        return customer.id

    def create_checkout_session(
        self,
        customer_id: str,
        price_id: str,
        user_id: str,
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSession:
        params: dict[str, Any] = {
            "customer": customer_id,
            "line_items": [{"price": price_id, "quantity": 1}],
            "mode": "subscription",
            "success_url": success_url,
            "cancel_url": cancel_url,
            # Read back by the checkout.session.completed handler
            "metadata": {"user_id": user_id},
            "subscription_data": {"metadata": {"user_id": user_id}},
        }
        try:
            session = self.client.checkout.sessions.create(params=params)
        except stripe.StripeError as e:
            raise PaymentProviderError(
                "Could not create Stripe checkout session",
                stripe_error=str(e),
            ) from e
        return CheckoutSession(session_id=session.id, url=session.url)

    def create_portal_session(self, customer_id: str, return_url: str) -> PortalSession:
        try:
            session = self.client.billing_portal.sessions.create(
                params={"customer": customer_id, "return_url": return_url}
            )
        except stripe.StripeError as e:
            raise PaymentProviderError(
                "Could not create Stripe billing portal session",
                stripe_error=str(e),
            ) from e
        return PortalSession(url=session.url)
