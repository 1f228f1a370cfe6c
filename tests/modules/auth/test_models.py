import pytest
from pydantic import ValidationError

from modules.auth.models import JWTPayload


class TestJWTPayload:
    def test_minimal_payload(self):
        payload = JWTPayload(sub="user-1", exp=2000000000, iat=1700000000)
        assert payload.email is None
        assert payload.access_token is None
        assert payload.aud == "authenticated"

    def test_carries_access_token(self):
        payload = JWTPayload(sub="user-1", exp=2, iat=1, access_token="oauth-token")
        assert payload.access_token == "oauth-token"

    def test_sub_required(self):
        with pytest.raises(ValidationError):
            JWTPayload(exp=2, iat=1)

    def test_ignores_unknown_claims(self):
        payload = JWTPayload(sub="user-1", exp=2, iat=1, role="authenticated")
        assert not hasattr(payload, "role")
