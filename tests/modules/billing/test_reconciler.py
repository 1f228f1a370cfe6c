"""Tests for modules/billing/reconciler.py."""

import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock

from shared.exceptions import StoreError
from modules.billing.exceptions import (
    BillingEventError,
    EventTargetNotFoundError,
    WebhookVerificationError,
)
from modules.billing.interfaces import IBillingGateway
from modules.billing.models import (
    BillingEventKind,
    CheckoutCompletedEvent,
    InvoiceFailedEvent,
    InvoicePaidEvent,
    SubscriptionCanceledEvent,
    SubscriptionDetails,
)
from modules.billing.gateway import StripeBillingGateway
from modules.billing.reconciler import SubscriptionReconciler
from modules.profiles.interfaces import IProfileRepository
from modules.profiles.models import Profile
from modules.profiles.repository import InMemoryProfileRepository


MARCH = datetime(2025, 3, 1, tzinfo=timezone.utc)
APRIL = datetime(2025, 4, 1, tzinfo=timezone.utc)
MAY = datetime(2025, 5, 1, tzinfo=timezone.utc)


@pytest.fixture
def gateway():
    gateway = MagicMock(spec=IBillingGateway)
    gateway.retrieve_subscription.return_value = SubscriptionDetails(
        id="sub_1",
        plan="price_pro",
        current_period_end=APRIL,
        cancel_at_period_end=False,
    )
    return gateway


@pytest.fixture
def subscribed_store():
    return InMemoryProfileRepository([
        Profile(
            id="user-1",
            monthly_post_limit=100,
            free_posts_used=2,
            subscription_id="sub_1",
            subscription_plan="price_pro",
            subscription_current_period_end=MARCH,
        )
    ])


class TestCheckoutCompleted:
    @pytest.mark.asyncio
    async def test_links_subscription_to_profile(self, gateway):
        profiles = InMemoryProfileRepository([Profile(id="user-1")])
        reconciler = SubscriptionReconciler(profiles, gateway)

        result = await reconciler.handle_event(
            CheckoutCompletedEvent(event_id="evt_1", user_id="user-1", subscription_id="sub_1")
        )

        assert result.handled is True
        assert result.kind == BillingEventKind.CHECKOUT_COMPLETED
        stored = profiles.get_by_id("user-1")
        assert stored.subscription_id == "sub_1"
        assert stored.subscription_plan == "price_pro"
        assert stored.subscription_current_period_end == APRIL
        assert stored.subscription_cancel_at_period_end is False
        gateway.retrieve_subscription.assert_called_once_with("sub_1")

    @pytest.mark.asyncio
    async def test_missing_user_id_writes_nothing(self, gateway):
        profiles = MagicMock(spec=IProfileRepository)
        reconciler = SubscriptionReconciler(profiles, gateway)

        with pytest.raises(BillingEventError) as exc_info:
            await reconciler.handle_event(CheckoutCompletedEvent(event_id="evt_1", subscription_id="sub_1"))

        assert exc_info.value.http_status == 400
        profiles.update_subscription.assert_not_called()
        gateway.retrieve_subscription.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_subscription(self, gateway):
        reconciler = SubscriptionReconciler(InMemoryProfileRepository([Profile(id="user-1")]), gateway)

        with pytest.raises(BillingEventError):
            await reconciler.handle_event(CheckoutCompletedEvent(user_id="user-1"))

    @pytest.mark.asyncio
    async def test_unknown_user(self, gateway):
        reconciler = SubscriptionReconciler(InMemoryProfileRepository(), gateway)

        with pytest.raises(EventTargetNotFoundError) as exc_info:
            await reconciler.handle_event(
                CheckoutCompletedEvent(event_id="evt_1", user_id="ghost", subscription_id="sub_1")
            )

        assert exc_info.value.details["user_id"] == "ghost"

    @pytest.mark.asyncio
    async def test_leaves_quota_fields_alone(self, gateway):
        profiles = InMemoryProfileRepository([
            Profile(id="user-1", free_posts_used=2, monthly_posts_used=3, monthly_post_limit=5)
        ])

        await SubscriptionReconciler(profiles, gateway).handle_event(
            CheckoutCompletedEvent(user_id="user-1", subscription_id="sub_1")
        )

        stored = profiles.get_by_id("user-1")
        assert stored.free_posts_used == 2
        assert stored.monthly_posts_used == 3
        assert stored.monthly_post_limit == 5


class TestInvoicePaid:
    @pytest.mark.asyncio
    async def test_extends_period(self, gateway, subscribed_store):
        reconciler = SubscriptionReconciler(subscribed_store, gateway)

        result = await reconciler.handle_event(InvoicePaidEvent(event_id="evt_2", subscription_id="sub_1"))

        assert result.profiles_updated == 1
        assert subscribed_store.get_by_id("user-1").subscription_current_period_end == APRIL

    @pytest.mark.asyncio
    async def test_applied_twice_equals_once(self, gateway, subscribed_store):
        reconciler = SubscriptionReconciler(subscribed_store, gateway)
        event = InvoicePaidEvent(event_id="evt_2", subscription_id="sub_1")

        await reconciler.handle_event(event)
        after_first = subscribed_store.get_by_id("user-1")
        await reconciler.handle_event(event)

        assert subscribed_store.get_by_id("user-1") == after_first

    @pytest.mark.asyncio
    async def test_stale_event_does_not_regress_period(self, gateway, subscribed_store):
        subscribed_store.add(
            subscribed_store.get_by_id("user-1").model_copy(update={"subscription_current_period_end": MAY})
        )
        reconciler = SubscriptionReconciler(subscribed_store, gateway)

        result = await reconciler.handle_event(InvoicePaidEvent(subscription_id="sub_1"))

        assert result.handled is True
        assert result.profiles_updated == 0
        assert subscribed_store.get_by_id("user-1").subscription_current_period_end == MAY

    @pytest.mark.asyncio
    async def test_unlinked_subscription(self, gateway):
        reconciler = SubscriptionReconciler(InMemoryProfileRepository(), gateway)

        with pytest.raises(EventTargetNotFoundError):
            await reconciler.handle_event(InvoicePaidEvent(subscription_id="sub_unknown"))

        gateway.retrieve_subscription.assert_not_called()

    @pytest.mark.asyncio
    async def test_requires_subscription_id(self, gateway, subscribed_store):
        with pytest.raises(BillingEventError):
            await SubscriptionReconciler(subscribed_store, gateway).handle_event(InvoicePaidEvent())


class TestInvoiceFailed:
    @pytest.mark.asyncio
    async def test_marks_plan_free(self, gateway, subscribed_store):
        result = await SubscriptionReconciler(subscribed_store, gateway).handle_event(
            InvoiceFailedEvent(subscription_id="sub_1")
        )

        assert result.profiles_updated == 1
        stored = subscribed_store.get_by_id("user-1")
        assert stored.subscription_plan == "free"
        assert stored.subscription_id == "sub_1"
        assert stored.monthly_post_limit == 100

    @pytest.mark.asyncio
    async def test_unlinked_subscription(self, gateway):
        with pytest.raises(EventTargetNotFoundError):
            await SubscriptionReconciler(InMemoryProfileRepository(), gateway).handle_event(
                InvoiceFailedEvent(subscription_id="sub_1")
            )


class TestSubscriptionCanceled:
    @pytest.mark.asyncio
    async def test_downgrades_and_refreshes_period(self, gateway, subscribed_store):
        subscribed_store.add(subscribed_store.get_by_id("user-1").model_copy(
            update={"subscription_cancel_at_period_end": True}
        ))

        await SubscriptionReconciler(subscribed_store, gateway).handle_event(
            SubscriptionCanceledEvent(subscription_id="sub_1", current_period_end=APRIL)
        )

        stored = subscribed_store.get_by_id("user-1")
        assert stored.subscription_plan == "free"
        assert stored.subscription_cancel_at_period_end is False
        assert stored.subscription_current_period_end == APRIL

    @pytest.mark.asyncio
    async def test_without_period_keeps_stored_value(self, gateway, subscribed_store):
        await SubscriptionReconciler(subscribed_store, gateway).handle_event(
            SubscriptionCanceledEvent(subscription_id="sub_1")
        )
        assert subscribed_store.get_by_id("user-1").subscription_current_period_end == MARCH

    @pytest.mark.asyncio
    async def test_is_idempotent(self, gateway, subscribed_store):
        reconciler = SubscriptionReconciler(subscribed_store, gateway)
        event = SubscriptionCanceledEvent(subscription_id="sub_1", current_period_end=APRIL)

        await reconciler.handle_event(event)
        first = subscribed_store.get_by_id("user-1")
        await reconciler.handle_event(event)

        assert subscribed_store.get_by_id("user-1") == first

    @pytest.mark.asyncio
    async def test_checkout_redelivered_after_cancel_keeps_free_plan(self, subscribed_store):
        stripe_client = MagicMock()
        stripe_client.subscriptions.retrieve.return_value = {
            "id": "sub_1",
            "status": "canceled",
            "items": {"data": [{"price": {"id": "price_pro"}, "current_period_end": 1743465600}]},
        }
        gateway = StripeBillingGateway("sk_test_123", "whsec_test", client=stripe_client)
        reconciler = SubscriptionReconciler(subscribed_store, gateway)

        await reconciler.handle_event(SubscriptionCanceledEvent(subscription_id="sub_1"))
        await reconciler.handle_event(
            CheckoutCompletedEvent(event_id="evt_old", user_id="user-1", subscription_id="sub_1")
        )

        stored = subscribed_store.get_by_id("user-1")
        assert stored.subscription_plan == "free"
        assert stored.has_active_subscription is False


class TestDispatch:
    @pytest.mark.asyncio
    async def test_unhandled_event_is_noop(self, gateway):
        profiles = MagicMock(spec=IProfileRepository)

        result = await SubscriptionReconciler(profiles, gateway).handle_event(None)

        assert result.handled is False
        assert profiles.method_calls == []

    @pytest.mark.asyncio
    async def test_store_error_propagates(self, gateway):
        profiles = MagicMock(spec=IProfileRepository)
        profiles.update_subscription_by_subscription_id.side_effect = StoreError("update", "down")

        with pytest.raises(StoreError):
            await SubscriptionReconciler(profiles, gateway).handle_event(
                InvoiceFailedEvent(subscription_id="sub_1")
            )


class TestHandleWebhook:
    @pytest.mark.asyncio
    async def test_verifies_then_applies(self, gateway, subscribed_store):
        gateway.verify_event.return_value = {
            "id": "evt_3",
            "type": "invoice.payment_failed",
            "data": {"object": {"subscription": "sub_1"}},
        }

        result = await SubscriptionReconciler(subscribed_store, gateway).handle_webhook(b"{}", "t=1,v1=abc")

        gateway.verify_event.assert_called_once_with(b"{}", "t=1,v1=abc")
        assert result.kind == BillingEventKind.INVOICE_FAILED
        assert subscribed_store.get_by_id("user-1").subscription_plan == "free"

    @pytest.mark.asyncio
    async def test_unknown_type_acknowledged(self, gateway, subscribed_store):
        gateway.verify_event.return_value = {"id": "evt_4", "type": "customer.updated", "data": {"object": {}}}

        result = await SubscriptionReconciler(subscribed_store, gateway).handle_webhook(b"{}", "sig")

        assert result.handled is False

    @pytest.mark.asyncio
    async def test_bad_signature_propagates(self, gateway, subscribed_store):
        gateway.verify_event.side_effect = WebhookVerificationError()

        with pytest.raises(WebhookVerificationError):
            await SubscriptionReconciler(subscribed_store, gateway).handle_webhook(b"{}", "bad")
