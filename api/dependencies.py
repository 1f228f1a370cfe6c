"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations with explicit
collaborators taken from settings.
"""

from typing import TYPE_CHECKING

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.auth.interfaces import IAuthService
    from modules.billing.interfaces import IBillingGateway, IBillingService
    from modules.billing.reconciler import SubscriptionReconciler
    from modules.posts.interfaces import IPostService, ISocialPostClient
    from modules.profiles.interfaces import IProfileRepository


class ServiceContainer:
    """
    Container for all service instances.

    Services are created lazily on first access and cached as singletons
    within the container. Use reset() to clear them for testing.
    """

    def __init__(self) -> None:
        self._auth_service: "IAuthService | None" = None
        self._profile_repository: "IProfileRepository | None" = None
        self._social_client: "ISocialPostClient | None" = None
        self._post_service: "IPostService | None" = None
        self._billing_gateway: "IBillingGateway | None" = None
        self._billing_service: "IBillingService | None" = None
        self._reconciler: "SubscriptionReconciler | None" = None

    @property
    def auth(self) -> "IAuthService":
        """Get the auth service instance."""
        if self._auth_service is None:
            from modules.auth.service import AuthService
            self._auth_service = AuthService()
        return self._auth_service

    @property
    def profiles(self) -> "IProfileRepository":
        """Get the profile repository instance."""
        if self._profile_repository is None:
            from modules.profiles.repository import SupabaseProfileRepository
            from shared.database import get_supabase_client
            self._profile_repository = SupabaseProfileRepository(get_supabase_client())
        return self._profile_repository

    @property
    def social_client(self) -> "ISocialPostClient":
        """Get the social network client instance."""
        if self._social_client is None:
            from modules.posts.client import TwitterPostClient
            from shared.config import get_settings
            settings = get_settings()
            self._social_client = TwitterPostClient(
                base_url=settings.social_api_base_url,
                timeout=settings.upstream_timeout_seconds,
            )
        return self._social_client

    @property
    def posts(self) -> "IPostService":
        """Get the post relay service instance."""
        if self._post_service is None:
            from modules.posts.service import PostService
            from modules.quota.models import QuotaPolicy
            from shared.config import get_settings
            settings = get_settings()
            self._post_service = PostService(
                profiles=self.profiles,
                social_client=self.social_client,
                policy=QuotaPolicy.from_settings(settings),
                default_monthly_post_limit=settings.default_monthly_post_limit,
                commit_attempts=settings.post_commit_attempts,
            )
        return self._post_service

    @property
    def billing_gateway(self) -> "IBillingGateway":
        """Get the Stripe gateway instance."""
        if self._billing_gateway is None:
            from modules.billing.gateway import StripeBillingGateway
            from shared.config import get_settings
            settings = get_settings()
            self._billing_gateway = StripeBillingGateway(
                secret_key=settings.stripe_secret_key,
                webhook_secret=settings.stripe_webhook_secret,
                timeout=settings.upstream_timeout_seconds,
            )
        return self._billing_gateway

    @property
    def billing(self) -> "IBillingService":
        """Get the billing service instance."""
        if self._billing_service is None:
            from modules.billing.service import BillingService
            from shared.config import get_settings
            settings = get_settings()
            self._billing_service = BillingService(
                profiles=self.profiles,
                gateway=self.billing_gateway,
                price_id=settings.stripe_price_id,
                frontend_url=settings.frontend_url,
                default_monthly_post_limit=settings.default_monthly_post_limit,
            )
        return self._billing_service

    @property
    def reconciler(self) -> "SubscriptionReconciler":
        """Get the subscription reconciler instance."""
        if self._reconciler is None:
            from modules.billing.reconciler import SubscriptionReconciler
            self._reconciler = SubscriptionReconciler(
                profiles=self.profiles,
                gateway=self.billing_gateway,
            )
        return self._reconciler

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._auth_service = None
        self._profile_repository = None
        self._social_client = None
        self._post_service = None
        self._billing_gateway = None
        self._billing_service = None
        self._reconciler = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    The next call to get_container() creates a fresh container.
    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_auth_service() -> "IAuthService":
    """FastAPI dependency for auth service."""
    return get_container().auth


def get_profile_repository() -> "IProfileRepository":
    """FastAPI dependency for the profile store."""
    return get_container().profiles


def get_post_service() -> "IPostService":
    """FastAPI dependency for post relay service."""
    return get_container().posts


def get_billing_service() -> "IBillingService":
    """FastAPI dependency for billing service."""
    return get_container().billing


def get_reconciler() -> "SubscriptionReconciler":
    """FastAPI dependency for the subscription reconciler."""
    return get_container().reconciler
