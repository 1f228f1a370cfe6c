"""
Post relay service.

Validates a post, checks the user's quota, publishes it through the social
client and then records the usage.

Counters only move after the social network has accepted the post. The
write is a compare-and-set against the counters read before the call; on
a conflict the same decision is re-applied to a fresh read, re-deriving
which counters it spends. If recording fails the post still stands and the
caller gets a success: a drifted counter is preferable to telling the user
a published post failed.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from shared.exceptions import QuotaExceededError, StoreError
from modules.profiles.interfaces import IProfileRepository
from modules.profiles.models import UsageCounters
from modules.quota import QuotaDecision, QuotaPolicy, build_usage_update, evaluate_quota

from .exceptions import MissingCredentialError, PostValidationError, UpstreamPostError
from .interfaces import ISocialPostClient
from .models import CreatedPost

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def post_length(text: str) -> int:
    """Length in UTF-16 code units, so characters outside the BMP count twice."""
    return len(text.encode("utf-16-le")) // 2


class PostService:
    """
    Post relay.

    Collaborators are injected so tests can pass an in-memory profile store
    and a fake social client.
    """

    def __init__(
        self,
        profiles: IProfileRepository,
        social_client: ISocialPostClient,
        policy: Optional[QuotaPolicy] = None,
        default_monthly_post_limit: int = 0,
        commit_attempts: int = 3,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the post service.

        Args:
            profiles: Profile store
            social_client: Client for the social network
            policy: Posting rules. Defaults to QuotaPolicy().
            default_monthly_post_limit: Limit for profiles created on first post
            commit_attempts: Compare-and-set tries before giving up on counters
            clock: Returns the current UTC time (injectable for tests)
        """
        self._profiles = profiles
        self._social = social_client
        self._policy = policy or QuotaPolicy()
        self._default_monthly_post_limit = default_monthly_post_limit
        self._commit_attempts = max(1, commit_attempts)
        self._clock = clock or _utcnow

    @property
    def policy(self) -> QuotaPolicy:
        return self._policy

    def validate_text(self, text: str) -> None:
        """
        Reject text the social network would refuse anyway.

        Raises:
            PostValidationError: If text is blank or too long
        """
        if not isinstance(text, str) or not text.strip():
            raise PostValidationError("Post needs to contain text")
        length = post_length(text)
        if length > self._policy.max_post_length:
            raise PostValidationError(
                f"Post exceeds {self._policy.max_post_length} characters",
                length=length,
            )

    async def create_post(
        self,
        user_id: str,
        access_token: Optional[str],
        text: str,
    ) -> CreatedPost:
        if not access_token:
            raise MissingCredentialError()

        self.validate_text(text)

        profile = self._profiles.get_or_create(user_id, self._default_monthly_post_limit)
        now = self._clock()
        decision = evaluate_quota(profile, now, self._policy)

        if not decision.allowed:
            logger.warning(
                f"User {user_id} has reached their limit "
                f"({decision.monthly_used} of {decision.monthly_limit} monthly posts)"
            )
            raise QuotaExceededError(user_id, decision.monthly_used, decision.monthly_limit)

        if decision.needs_monthly_reset:
            logger.info(f"User {user_id} needs monthly counter reset")

        try:
            post = await self._social.create_post(access_token, text)
        except UpstreamPostError as e:
            logger.warning(
                f"Social API refused post for user {user_id}: {e.kind.value} ({e.message})"
            )
            raise

        logger.info(f"Published post {post.id} for user {user_id}")
        self._record_usage(user_id, profile.usage, decision, now, post.id)
        return post

    def _record_usage(
        self,
        user_id: str,
        snapshot: UsageCounters,
        decision: QuotaDecision,
        now: datetime,
        post_id: str,
    ) -> bool:
        """
        Commit the counters for a published post.

        Returns:
            True if the counters were stored. False means they drifted; the
            failure has been logged and the post result is unaffected.
        """
        for attempt in range(1, self._commit_attempts + 1):
            update = build_usage_update(snapshot, decision, now, self._policy)
            try:
                if self._profiles.compare_and_set_usage(user_id, snapshot, update):
                    logger.debug(
                        f"Updated usage for user {user_id}: "
                        f"free={update.free_posts_used} monthly={update.monthly_posts_used}"
                    )
                    return True
                fresh = self._profiles.get_by_id(user_id)
            except StoreError as e:
                logger.error(
                    f"CRITICAL: unable to update usage for user {user_id} "
                    f"after publishing post {post_id}: {e.message}"
                )
                return False

            if fresh is None:
                logger.error(
                    f"CRITICAL: profile for user {user_id} vanished "
                    f"after publishing post {post_id}"
                )
                return False

            logger.debug(f"Usage for user {user_id} changed concurrently (attempt {attempt})")
            snapshot = fresh.usage

        logger.error(
            f"CRITICAL: gave up updating usage for user {user_id} after "
            f"{self._commit_attempts} conflicting writes (post {post_id})"
        )
        return False
