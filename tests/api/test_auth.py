"""
Tests for JWT authentication on protected routes.
"""


class TestAuthentication:
    def test_missing_auth_header(self, client):
        response = client.get("/api/users/me")

        assert response.status_code == 401
        assert response.json()["message"] == "Unauthorized: Not logged in"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_invalid_token(self, client):
        response = client.get("/api/users/me", headers={"Authorization": "Bearer invalid-token"})

        assert response.status_code == 401
        assert response.json()["error"] == "INVALID_TOKEN"

    def test_expired_token(self, client, token_factory):
        token = token_factory(expired=True)
        response = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["error"] == "TOKEN_EXPIRED"

    def test_valid_token(self, client, auth_headers, test_user_id):
        response = client.get("/api/users/me", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["id"] == test_user_id
