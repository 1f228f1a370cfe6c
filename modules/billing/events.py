"""
Stripe event parsing.

Turns raw Stripe webhook payloads into BillingEvent models. Payload shapes
differ between Stripe API versions, so the helpers here accept both the
older layout (invoice.subscription, subscription.current_period_end) and
the newer one (invoice.parent.subscription_details.subscription,
items.data[].current_period_end).
"""

from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from .models import (
    BillingEvent,
    BillingEventKind,
    CheckoutCompletedEvent,
    InvoiceFailedEvent,
    InvoicePaidEvent,
    SubscriptionCanceledEvent,
)


STRIPE_EVENT_KINDS = {
    "checkout.session.completed": BillingEventKind.CHECKOUT_COMPLETED,
    "invoice.payment_succeeded": BillingEventKind.INVOICE_PAID,
    "invoice.paid": BillingEventKind.INVOICE_PAID,
    "invoice.payment_failed": BillingEventKind.INVOICE_FAILED,
    "customer.subscription.deleted": BillingEventKind.SUBSCRIPTION_CANCELED,
}


def _id_of(value: Any) -> Optional[str]:
    """Stripe references are either an ID string or an expanded object."""
    if isinstance(value, str):
        return value or None
    if isinstance(value, Mapping):
        return value.get("id")
    return None


def _from_timestamp(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def subscription_period_end(subscription: Mapping[str, Any]) -> Optional[datetime]:
    """Current period end of a subscription object, on any API version."""
    if subscription.get("current_period_end") is not None:
        return _from_timestamp(subscription["current_period_end"])

    items = (subscription.get("items") or {}).get("data") or []
    ends = [item.get("current_period_end") for item in items if item.get("current_period_end")]
    if ends:
        return _from_timestamp(max(ends))
    return None


def subscription_price_id(subscription: Mapping[str, Any]) -> Optional[str]:
    """Price ID of the first subscription item."""
    items = (subscription.get("items") or {}).get("data") or []
    if not items:
        return None
    return _id_of((items[0] or {}).get("price"))


def invoice_subscription_id(invoice: Mapping[str, Any]) -> Optional[str]:
    """Subscription an invoice belongs to, on any API version."""
    subscription_id = _id_of(invoice.get("subscription"))
    if subscription_id:
        return subscription_id

    parent = invoice.get("parent") or {}
    details = parent.get("subscription_details") or {}
    return _id_of(details.get("subscription"))


def parse_billing_event(raw: Mapping[str, Any]) -> Optional[BillingEvent]:
    """
    Parse a Stripe event payload.

    Fields needed to act on the event may be missing from the result; the
    reconciler rejects such events. Returns None for event types the
    reconciler does not handle.
    """
    kind = STRIPE_EVENT_KINDS.get(raw.get("type", ""))
    if kind is None:
        return None

    event_id = raw.get("id")
    obj = (raw.get("data") or {}).get("object") or {}

    if kind == BillingEventKind.CHECKOUT_COMPLETED:
        metadata = obj.get("metadata") or {}
        return CheckoutCompletedEvent(
            event_id=event_id,
            user_id=metadata.get("user_id") or None,
            subscription_id=_id_of(obj.get("subscription")),
            customer_id=_id_of(obj.get("customer")),
        )

    if kind == BillingEventKind.INVOICE_PAID:
        return InvoicePaidEvent(
            event_id=event_id,
            subscription_id=invoice_subscription_id(obj),
        )

    if kind == BillingEventKind.INVOICE_FAILED:
        return InvoiceFailedEvent(
            event_id=event_id,
            subscription_id=invoice_subscription_id(obj),
        )

    return SubscriptionCanceledEvent(
        event_id=event_id,
        subscription_id=_id_of(obj.get("id")),
        current_period_end=subscription_period_end(obj),
    )
