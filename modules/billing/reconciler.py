"""
Subscription reconciler.

Applies Stripe billing lifecycle events to the subscription mirror fields
of a profile.

Stripe delivers at least once and in no particular order, so every
handler is a plain overwrite of specific fields keyed by a stable ID.
Replaying an event leaves the profile as it was. Invoice-paid events
additionally never move the period end backwards.
"""

import logging
from typing import Callable, Optional

from modules.profiles.interfaces import IProfileRepository
from modules.profiles.models import PlanTier, SubscriptionUpdate

from .events import parse_billing_event
from .exceptions import BillingEventError, EventTargetNotFoundError
from .interfaces import IBillingGateway
from .models import (
    BillingEvent,
    BillingEventKind,
    CheckoutCompletedEvent,
    InvoiceFailedEvent,
    InvoicePaidEvent,
    ReconcileResult,
    SubscriptionCanceledEvent,
)

logger = logging.getLogger(__name__)


class SubscriptionReconciler:
    """Idempotent updater of billing-derived profile fields."""

    def __init__(self, profiles: IProfileRepository, gateway: IBillingGateway):
        self._profiles = profiles
        self._gateway = gateway
        self._handlers: dict[BillingEventKind, Callable[..., ReconcileResult]] = {
            BillingEventKind.CHECKOUT_COMPLETED: self._checkout_completed,
            BillingEventKind.INVOICE_PAID: self._invoice_paid,
            BillingEventKind.INVOICE_FAILED: self._invoice_failed,
            BillingEventKind.SUBSCRIPTION_CANCELED: self._subscription_canceled,
        }

    async def handle_webhook(self, payload: bytes, signature: Optional[str]) -> ReconcileResult:
        """
        Verify, parse and apply one webhook delivery.

        Raises:
            WebhookVerificationError: Bad or missing signature
            BillingEventError: Malformed or unattributable event
            StoreError: The profile could not be written
        """
        raw = self._gateway.verify_event(payload, signature)
        logger.info(f"Stripe event verified: {raw.get('type')} ({raw.get('id')})")
        return await self.handle_event(parse_billing_event(raw))

    async def handle_event(self, event: Optional[BillingEvent]) -> ReconcileResult:
        """
        Apply one parsed billing event.

        Args:
            event: Parsed event, or None for event types we do not handle

        Returns:
            ReconcileResult; unhandled event types are a successful no-op
        """
        if event is None:
            return ReconcileResult(handled=False, detail="Event not handled")

        result = self._handlers[event.kind](event)
        logger.info(
            f"Reconciled {event.kind.value} event {event.event_id}: "
            f"{result.profiles_updated} profile(s) updated"
        )
        return result

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    def _checkout_completed(self, event: CheckoutCompletedEvent) -> ReconcileResult:
        if not event.user_id:
            raise BillingEventError("Missing user ID in session metadata", event.event_id)
        if not event.subscription_id:
            raise BillingEventError("Checkout session has no subscription", event.event_id)

        subscription = self._gateway.retrieve_subscription(event.subscription_id)
        update = SubscriptionUpdate(
            subscription_id=subscription.id,
            subscription_plan=subscription.plan,
            subscription_current_period_end=subscription.current_period_end,
            subscription_cancel_at_period_end=subscription.cancel_at_period_end,
        )
        if not self._profiles.update_subscription(event.user_id, update):
            raise EventTargetNotFoundError("user_id", event.user_id, event.event_id)

        return ReconcileResult(kind=event.kind, handled=True, profiles_updated=1)

    def _invoice_paid(self, event: InvoicePaidEvent) -> ReconcileResult:
        subscription_id = self._require_subscription_id(event.subscription_id, event.event_id)

        profile = self._profiles.get_by_subscription_id(subscription_id)
        if profile is None:
            raise EventTargetNotFoundError("subscription_id", subscription_id, event.event_id)

        subscription = self._gateway.retrieve_subscription(subscription_id)
        stored = profile.subscription_current_period_end
        new = subscription.current_period_end

        if new is None or (stored is not None and stored >= new):
            logger.info(
                f"Skipping period end for subscription {subscription_id}: "
                f"stored {stored} is not older than {new}"
            )
            return ReconcileResult(kind=event.kind, handled=True, detail="Period end already current")

        updated = self._profiles.update_subscription_by_subscription_id(
            subscription_id,
            SubscriptionUpdate(subscription_current_period_end=new),
        )
        return ReconcileResult(kind=event.kind, handled=True, profiles_updated=updated)

    def _invoice_failed(self, event: InvoiceFailedEvent) -> ReconcileResult:
        subscription_id = self._require_subscription_id(event.subscription_id, event.event_id)
        logger.warning(f"Invoice payment failed for subscription {subscription_id}")

        updated = self._profiles.update_subscription_by_subscription_id(
            subscription_id,
            SubscriptionUpdate(subscription_plan=PlanTier.FREE.value),
        )
        if not updated:
            raise EventTargetNotFoundError("subscription_id", subscription_id, event.event_id)
        return ReconcileResult(kind=event.kind, handled=True, profiles_updated=updated)

    def _subscription_canceled(self, event: SubscriptionCanceledEvent) -> ReconcileResult:
        subscription_id = self._require_subscription_id(event.subscription_id, event.event_id)
        logger.info(f"Handling subscription cancellation: {subscription_id}")

        fields = {
            "subscription_plan": PlanTier.FREE.value,
            "subscription_cancel_at_period_end": False,
        }
        if event.current_period_end is not None:
            fields["subscription_current_period_end"] = event.current_period_end

        updated = self._profiles.update_subscription_by_subscription_id(
            subscription_id,
            SubscriptionUpdate(**fields),
        )
        if not updated:
            raise EventTargetNotFoundError("subscription_id", subscription_id, event.event_id)
        return ReconcileResult(kind=event.kind, handled=True, profiles_updated=updated)

    def _require_subscription_id(self, subscription_id: Optional[str], event_id: Optional[str]) -> str:
        if not subscription_id:
            raise BillingEventError("Event does not reference a subscription", event_id)
        return subscription_id
