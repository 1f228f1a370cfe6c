"""
Billing module.

Handles Stripe integration: checkout and portal sessions, and reconciling
subscription state on profiles from webhook events.

Public API:
- IBillingGateway / StripeBillingGateway: Stripe access
- IBillingService / BillingService: checkout and portal sessions
- SubscriptionReconciler: applies billing lifecycle events
- parse_billing_event: Stripe payload -> BillingEvent
"""

from .interfaces import IBillingGateway, IBillingService
from .models import (
    BillingEvent,
    BillingEventKind,
    CheckoutCompletedEvent,
    InvoicePaidEvent,
    InvoiceFailedEvent,
    SubscriptionCanceledEvent,
    SubscriptionDetails,
    ReconcileResult,
    CheckoutSession,
    PortalSession,
    WebhookResponse,
)
from .events import parse_billing_event, STRIPE_EVENT_KINDS
from .exceptions import (
    BillingError,
    BillingEventError,
    EventTargetNotFoundError,
    WebhookVerificationError,
    NoBillingAccountError,
    BillingConfigurationError,
    PaymentProviderError,
)
from .gateway import StripeBillingGateway
from .reconciler import SubscriptionReconciler
from .service import BillingService

__all__ = [
    # Interfaces
    "IBillingGateway",
    "IBillingService",
    # Implementations
    "StripeBillingGateway",
    "BillingService",
    "SubscriptionReconciler",
    "parse_billing_event",
    "STRIPE_EVENT_KINDS",
    # Models
    "BillingEvent",
    "BillingEventKind",
    "CheckoutCompletedEvent",
    "InvoicePaidEvent",
    "InvoiceFailedEvent",
    "SubscriptionCanceledEvent",
    "SubscriptionDetails",
    "ReconcileResult",
    "CheckoutSession",
    "PortalSession",
    "WebhookResponse",
    # Exceptions
    "BillingError",
    "BillingEventError",
    "EventTargetNotFoundError",
    "WebhookVerificationError",
    "NoBillingAccountError",
    "BillingConfigurationError",
    "PaymentProviderError",
]
