"""
Billing API endpoints.

Checkout and portal sessions for signed-in users, plus the Stripe webhook.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Request

from api.middleware.auth import get_current_user
from api.dependencies import get_billing_service, get_reconciler
from shared.models import AuthenticatedUser

from .interfaces import IBillingService
from .models import CheckoutSession, PortalSession, WebhookResponse
from .reconciler import SubscriptionReconciler

router = APIRouter()


@router.post("/checkout", response_model=CheckoutSession)
async def create_checkout_session(
    user: AuthenticatedUser = Depends(get_current_user),
    service: IBillingService = Depends(get_billing_service),
) -> CheckoutSession:
    """
    Start a subscription checkout.

    Redirect the browser to the returned URL.
    """
    return await service.create_checkout_session(user)


@router.post("/portal", response_model=PortalSession)
async def create_portal_session(
    user: AuthenticatedUser = Depends(get_current_user),
    service: IBillingService = Depends(get_billing_service),
) -> PortalSession:
    """Open the Stripe billing portal."""
    return await service.create_portal_session(user)


@router.post("/webhook", response_model=WebhookResponse)
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(default=None, alias="Stripe-Signature"),
    reconciler: SubscriptionReconciler = Depends(get_reconciler),
) -> WebhookResponse:
    """
    Receive a Stripe webhook delivery.

    The signature is checked against the raw body, so the body must not be
    parsed before verification. Event types we do not handle are
    acknowledged with handled=false.
    """
    payload = await request.body()
    result = await reconciler.handle_webhook(payload, stripe_signature)
    return WebhookResponse(handled=result.handled, kind=result.kind, detail=result.detail)
