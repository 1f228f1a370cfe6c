"""
Billing module exceptions.

BillingEventError and its subclasses are answered with a 4xx so Stripe
retries the delivery; unknown event types never raise.
"""

from typing import Optional

from shared.exceptions import ScribeError, ExternalServiceError


class BillingError(ScribeError):
    """Base exception for billing-related errors."""

    pass


class BillingEventError(BillingError):
    """Raised when a billing event is malformed or cannot be attributed."""

    http_status = 400

    def __init__(self, message: str, event_id: Optional[str] = None, code: str = "INVALID_BILLING_EVENT"):
        super().__init__(
            message,
            code=code,
            details={"event_id": event_id} if event_id else {},
        )


class EventTargetNotFoundError(BillingEventError):
    """Raised when no profile matches the user or subscription an event names."""

    def __init__(self, field: str, value: str, event_id: Optional[str] = None):
        super().__init__(
            f"No profile found for {field} {value}",
            event_id=event_id,
            code="BILLING_EVENT_UNMATCHED",
        )
        self.details[field] = value


class WebhookVerificationError(BillingError):
    """Raised when Stripe webhook signature verification fails."""

    http_status = 400

    def __init__(self, reason: str = "Webhook signature verification failed"):
        super().__init__(
            reason,
            code="WEBHOOK_VERIFICATION_FAILED",
        )


class NoBillingAccountError(BillingError):
    """Raised when a user without a Stripe customer opens the billing portal."""

    http_status = 400

    def __init__(self, user_id: str):
        super().__init__(
            "No active subscription found for this account.",
            code="NO_BILLING_ACCOUNT",
            details={"user_id": user_id},
        )


class BillingConfigurationError(BillingError):
    """Raised when a Stripe setting the operation needs is missing."""

    def __init__(self, setting: str):
        super().__init__(
            f"Billing is not configured: {setting} is not set",
            code="BILLING_NOT_CONFIGURED",
            details={"setting": setting},
        )


class PaymentProviderError(ExternalServiceError):
    """Raised when a Stripe API call fails."""

    def __init__(self, message: str, stripe_error: Optional[str] = None):
        super().__init__(
            message,
            service="stripe",
            code="PAYMENT_PROVIDER_ERROR",
            details={"stripe_error": stripe_error} if stripe_error else {},
        )
