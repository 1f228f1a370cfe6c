"""
Social network client.

TwitterPostClient publishes through the X (Twitter) API v2 using the
user's OAuth 2.0 access token.

API Endpoint: POST https://api.twitter.com/2/tweets
Errors come back either as {"errors": [{"message", "code"}]} (legacy
codes) or as a problem document {"title", "detail", "type", "status"}.
"""

import logging
from typing import Any, Optional

import httpx

from .exceptions import UpstreamPostError, UpstreamErrorKind
from .models import CreatedPost

logger = logging.getLogger(__name__)


# Legacy API error codes
RATE_LIMIT_CODES = {88, 185}
TOO_LONG_CODE = 186
DUPLICATE_CODE = 187
INVALID_TOKEN_CODE = 89


class TwitterPostClient:
    """ISocialPostClient implementation for the X (Twitter) API v2."""

    POST_PATH = "/2/tweets"

    def __init__(
        self,
        base_url: str = "https://api.twitter.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: API root
            timeout: Ceiling in seconds for the whole request
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def create_post(self, access_token: str, text: str) -> CreatedPost:
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    self.POST_PATH,
                    json={"text": text},
                    headers={
                        "Authorization": f"Bearer {access_token}",
                        "Content-Type": "application/json",
                    },
                )
        except httpx.HTTPError as e:
            raise UpstreamPostError(
                UpstreamErrorKind.UNAVAILABLE,
                f"Unable to reach social API: {e}",
            ) from e

        payload = self._parse_json(response)

        if response.is_error:
            raise self._map_error(response.status_code, payload)

        data = payload.get("data") or {}
        if not data.get("id"):
            logger.error(f"Social API returned {response.status_code} without a post id")
            raise UpstreamPostError(
                UpstreamErrorKind.UNAVAILABLE,
                "Invalid response from social API",
                upstream_status=response.status_code,
            )

        return CreatedPost(id=str(data["id"]), text=data.get("text", text))

    def _parse_json(self, response: httpx.Response) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError:
            return {}
        return payload if isinstance(payload, dict) else {}

    def _map_error(self, status: int, payload: dict[str, Any]) -> UpstreamPostError:
        """Translate an error response into UpstreamPostError."""
        errors = payload.get("errors") or []
        first = errors[0] if errors and isinstance(errors[0], dict) else {}

        message = (
            first.get("message")
            or payload.get("detail")
            or payload.get("title")
            or f"Social API responded with status {status}"
        )
        code = first.get("code")
        error_type = first.get("type") or payload.get("type")
        lowered = message.lower()

        if status == 429 or code in RATE_LIMIT_CODES:
            kind = UpstreamErrorKind.RATE_LIMITED
        elif code == DUPLICATE_CODE or "duplicate" in lowered:
            kind = UpstreamErrorKind.DUPLICATE
        elif code == TOO_LONG_CODE or "too long" in lowered:
            kind = UpstreamErrorKind.TOO_LONG
        elif status == 401 or code == INVALID_TOKEN_CODE:
            kind = UpstreamErrorKind.AUTH_INVALID
        else:
            kind = UpstreamErrorKind.REJECTED

        return UpstreamPostError(
            kind,
            message,
            upstream_status=status,
            upstream_code=code if isinstance(code, int) else None,
            upstream_type=error_type,
        )
