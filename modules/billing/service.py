"""
Billing service implementation.

Creates Stripe checkout and billing portal sessions. The Stripe customer
is created the first time a user starts a checkout and is never replaced
afterwards.
"""

import logging

from shared.models import AuthenticatedUser
from modules.profiles.interfaces import IProfileRepository

from .exceptions import BillingConfigurationError, NoBillingAccountError
from .interfaces import IBillingGateway
from .models import CheckoutSession, PortalSession

logger = logging.getLogger(__name__)


class BillingService:
    """Checkout and portal session creation."""

    def __init__(
        self,
        profiles: IProfileRepository,
        gateway: IBillingGateway,
        price_id: str,
        frontend_url: str,
        default_monthly_post_limit: int = 0,
    ):
        self._profiles = profiles
        self._gateway = gateway
        self._price_id = price_id
        self._frontend_url = frontend_url.rstrip("/")
        self._default_monthly_post_limit = default_monthly_post_limit

    async def get_or_create_customer(self, user: AuthenticatedUser) -> str:
        """
        Return the user's Stripe customer ID, creating the customer if needed.

        If two checkouts race, both may create a customer in Stripe, but only
        the first stored ID is kept and both requests use it.
        """
        profile = self._profiles.get_or_create(user.id, self._default_monthly_post_limit)
        if profile.payment_customer_id:
            return profile.payment_customer_id

        logger.info(f"No Stripe customer for user {user.id}, creating one")
        customer_id = self._gateway.create_customer(user.id, email=user.email, name=user.name)

        if self._profiles.set_payment_customer_id(user.id, customer_id):
            return customer_id

        stored = self._profiles.get_by_id(user.id)
        if stored is not None and stored.payment_customer_id:
            logger.warning(
                f"Stripe customer {customer_id} for user {user.id} lost a race; "
                f"using stored customer {stored.payment_customer_id}"
            )
            return stored.payment_customer_id
        return customer_id

    async def create_checkout_session(self, user: AuthenticatedUser) -> CheckoutSession:
        if not self._price_id:
            raise BillingConfigurationError("SCRIBE_STRIPE_PRICE_ID")

        customer_id = await self.get_or_create_customer(user)
        session = self._gateway.create_checkout_session(
            customer_id=customer_id,
            price_id=self._price_id,
            user_id=user.id,
            success_url=f"{self._frontend_url}/dashboard?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{self._frontend_url}/dashboard",
        )
        logger.info(f"Created checkout session {session.session_id} for user {user.id}")
        return session

    async def create_portal_session(self, user: AuthenticatedUser) -> PortalSession:
        profile = self._profiles.get_by_id(user.id)
        if profile is None or not profile.payment_customer_id:
            raise NoBillingAccountError(user.id)

        return self._gateway.create_portal_session(
            profile.payment_customer_id,
            return_url=f"{self._frontend_url}/dashboard",
        )
