"""
Billing module data models.

Billing lifecycle events are a tagged union on `kind`; the reconciler has
one handler per kind.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


class BillingEventKind(str, Enum):
    """Billing lifecycle events the reconciler acts on."""

    CHECKOUT_COMPLETED = "checkout_completed"
    INVOICE_PAID = "invoice_paid"
    INVOICE_FAILED = "invoice_failed"
    SUBSCRIPTION_CANCELED = "subscription_canceled"


class CheckoutCompletedEvent(BaseModel):
    """A checkout session finished and created a subscription."""

    kind: Literal[BillingEventKind.CHECKOUT_COMPLETED] = BillingEventKind.CHECKOUT_COMPLETED
    event_id: Optional[str] = None
    user_id: Optional[str] = Field(None, description="From session metadata.user_id")
    subscription_id: Optional[str] = None
    customer_id: Optional[str] = None


class InvoicePaidEvent(BaseModel):
    """A subscription invoice was paid; the period was extended."""

    kind: Literal[BillingEventKind.INVOICE_PAID] = BillingEventKind.INVOICE_PAID
    event_id: Optional[str] = None
    subscription_id: Optional[str] = None


class InvoiceFailedEvent(BaseModel):
    """A subscription invoice payment failed."""

    kind: Literal[BillingEventKind.INVOICE_FAILED] = BillingEventKind.INVOICE_FAILED
    event_id: Optional[str] = None
    subscription_id: Optional[str] = None


class SubscriptionCanceledEvent(BaseModel):
    """A subscription ended."""

    kind: Literal[BillingEventKind.SUBSCRIPTION_CANCELED] = BillingEventKind.SUBSCRIPTION_CANCELED
    event_id: Optional[str] = None
    subscription_id: Optional[str] = None
    current_period_end: Optional[datetime] = None


BillingEvent = Annotated[
    Union[
        CheckoutCompletedEvent,
        InvoicePaidEvent,
        InvoiceFailedEvent,
        SubscriptionCanceledEvent,
    ],
    Field(discriminator="kind"),
]


class SubscriptionDetails(BaseModel):
    """The subscription fields mirrored onto a profile."""

    id: str = Field(..., description="Stripe subscription ID")
    plan: str = Field(..., description="Price ID of the first subscription item")
    current_period_end: Optional[datetime] = None
    cancel_at_period_end: bool = False


class ReconcileResult(BaseModel):
    """Outcome of handling one billing event."""

    kind: Optional[BillingEventKind] = None
    handled: bool = Field(..., description="False for event types we ignore")
    profiles_updated: int = 0
    detail: Optional[str] = None


class CheckoutSession(BaseModel):
    """
    Stripe checkout session info.

    Returned when starting a subscription purchase.
    """

    session_id: str = Field(..., description="Stripe checkout session ID")
    url: Optional[str] = Field(None, description="Checkout URL to redirect user to")


class PortalSession(BaseModel):
    """Stripe billing portal session info."""

    url: str = Field(..., description="Portal URL to redirect user to")


class WebhookResponse(BaseModel):
    """API response acknowledging a webhook delivery."""

    received: bool = True
    handled: bool
    kind: Optional[BillingEventKind] = None
    detail: Optional[str] = None
